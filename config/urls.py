from allauth.socialaccount.models import SocialApp, SocialToken
from django.contrib import admin
from django.contrib.sites.models import Site
from django.urls import include, path
from django.views.generic import TemplateView


# Google credentials and the site row come from settings; allauth's
# EmailAddress and SocialAccount admins stay for checking verified admins.
for model in (Site, SocialApp, SocialToken):
    if admin.site.is_registered(model):
        admin.site.unregister(model)


urlpatterns = [
    path("admin/", admin.site.urls),
    path("accounts/", include("accounts.urls")),
    path("social/", include("allauth.urls")),
    path("", include("reservations.urls")),
    path("", TemplateView.as_view(template_name="pages/home.html"), name="home"),
]

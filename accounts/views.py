from django.contrib import messages
from django.contrib.auth import login
from django.contrib.auth.views import LoginView, LogoutView
from django.conf import settings
from django.http import HttpResponseRedirect, JsonResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.urls import reverse_lazy
from django.views.decorators.http import require_GET, require_http_methods

from .forms import LoginForm, RegisterForm
from .services import is_room_admin, member_identity, upsert_member_profile


class AppLoginView(LoginView):
    template_name = "accounts/login.html"
    authentication_form = LoginForm
    redirect_authenticated_user = True

    def form_valid(self, form):
        response = super().form_valid(form)
        upsert_member_profile(form.get_user())
        messages.success(self.request, "Welcome back.")
        return response

    def form_invalid(self, form):
        messages.error(self.request, "Login failed. Please check your credentials.")
        return super().form_invalid(form)


class AppLogoutView(LogoutView):
    next_page = reverse_lazy("home")


@require_http_methods(["GET", "POST"])
def register_view(request):
    if request.user.is_authenticated:
        return redirect("home")

    form = RegisterForm(request.POST or None)

    if request.method == "POST":
        if form.is_valid():
            user = form.save()
            upsert_member_profile(user)
            login(request, user, backend="django.contrib.auth.backends.ModelBackend")
            messages.success(request, "Account created. You can book the practice room now.")
            return redirect("home")
        messages.error(request, "Please fix the highlighted fields and try again.")

    return render(request, "accounts/register.html", {"form": form})


def google_login_redirect(request):
    """
    Stable /accounts/google/login/ entry point; allauth itself is mounted under /social/.
    """
    if not getattr(settings, "GOOGLE_OAUTH_ENABLED", False):
        messages.info(request, "Google Sign-In is not configured yet.")
        return redirect("accounts:login")

    target = reverse("google_login")
    if request.GET:
        target = f"{target}?{request.GET.urlencode()}"
    return HttpResponseRedirect(target)


@require_GET
def me_api(request):
    """GET /accounts/me/: the identity the booking API sees for this session."""
    if not request.user.is_authenticated:
        return JsonResponse({"error": "Authentication required.", "code": "unauthenticated"}, status=401)

    identity = member_identity(request.user)
    return JsonResponse(
        {
            "user_id": request.user.pk,
            "email": identity.email,
            "display_name": identity.display_name,
            "is_admin": is_room_admin(request.user),
        }
    )

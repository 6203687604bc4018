from django.contrib import admin

from .models import MemberProfile


@admin.register(MemberProfile)
class MemberProfileAdmin(admin.ModelAdmin):
    list_display = ("display_name", "email", "role", "last_seen_at")
    list_filter = ("role",)
    search_fields = ("email", "display_name", "user__username")
    readonly_fields = ("created_at", "last_seen_at")
    list_select_related = ("user",)

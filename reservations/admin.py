from django.contrib import admin, messages
from django.core.exceptions import PermissionDenied
from django.utils import timezone
from django.utils.html import format_html

from accounts.services import is_room_admin

from .cancellations import APPROVE, REJECT, resolve_cancellation
from .errors import ReservationError
from .models import Booking, CancellationRequest
from .schedule import current_week


admin.site.site_header = "Practice Room Admin"
admin.site.site_title = "Practice Room Admin"
admin.site.index_title = "Practice Room Controls"


class CurrentWeekFilter(admin.SimpleListFilter):
    title = "week"
    parameter_name = "week"

    def lookups(self, request, model_admin):
        return (("current", "Current week"), ("other", "Other weeks"))

    def queryset(self, request, queryset):
        value = self.value()
        if not value:
            return queryset

        dates = current_week(timezone.now())
        if value == "current":
            return queryset.filter(date__in=dates)
        if value == "other":
            return queryset.exclude(date__in=dates)
        return queryset


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "band_name", "user_email", "date", "time_slot", "status_badge", "created_at")
    list_filter = ("cancelled", CurrentWeekFilter, "date")
    search_fields = ("band_name", "user_email", "user_name", "user__username")
    ordering = ("-date", "slot")
    list_select_related = ("user",)
    # Bookings change only through the reservation and cancellation services.
    readonly_fields = (
        "user",
        "user_email",
        "user_name",
        "date",
        "slot",
        "band_name",
        "created_at",
        "cancelled",
        "cancelled_at",
        "cancelled_by",
        "cancelled_by_email",
    )

    @admin.display(description="Time slot", ordering="slot")
    def time_slot(self, obj: Booking) -> str:
        return obj.slot_label

    @admin.display(description="Status", ordering="cancelled")
    def status_badge(self, obj: Booking) -> str:
        color = "#7e8571" if obj.cancelled else "#c9b26b"
        return format_html(
            '<span style="padding:3px 8px;border-radius:999px;'
            "border: 1px solid rgba(201, 178, 107, 0.25);"
            "color: {};"
            'font-weight: 600; font-size: 11px;">{}</span>',
            color,
            "CANCELLED" if obj.cancelled else "ACTIVE",
        )

    def has_add_permission(self, request):
        return False

    def get_actions(self, request):
        actions = super().get_actions(request)
        actions.pop("delete_selected", None)
        return actions


@admin.register(CancellationRequest)
class CancellationRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "band_name", "user_email", "date", "time_slot", "status", "auto_approved", "created_at")
    list_filter = ("status", "auto_approved", CurrentWeekFilter)
    search_fields = ("band_name", "user_email", "user_name", "reason")
    ordering = ("-created_at",)
    list_select_related = ("booking",)
    actions = ("approve_selected", "reject_selected")
    readonly_fields = (
        "booking",
        "user",
        "user_email",
        "user_name",
        "date",
        "slot",
        "band_name",
        "reason",
        "status",
        "auto_approved",
        "created_at",
        "admin_response",
        "admin_response_at",
        "admin",
        "admin_email",
    )

    @admin.display(description="Time slot", ordering="slot")
    def time_slot(self, obj: CancellationRequest) -> str:
        return obj.slot_label

    def has_add_permission(self, request):
        return False

    def get_actions(self, request):
        actions = super().get_actions(request)
        actions.pop("delete_selected", None)
        return actions

    def _resolve_selected(self, request, queryset, action: str) -> None:
        done = 0
        for req in queryset:
            try:
                resolve_cancellation(
                    admin=request.user,
                    is_admin=is_room_admin(request.user),
                    request_id=req.pk,
                    action=action,
                    note="Resolved from the admin site.",
                )
            except PermissionDenied:
                self.message_user(request, "Admin access required.", level=messages.ERROR)
                return
            except ReservationError as exc:
                self.message_user(request, f"Request #{req.pk}: {exc}", level=messages.WARNING)
            else:
                done += 1
        if done:
            self.message_user(request, f"{done} request(s) {action}d.", level=messages.SUCCESS)

    @admin.action(description="Approve selected requests")
    def approve_selected(self, request, queryset):
        self._resolve_selected(request, queryset, APPROVE)

    @admin.action(description="Reject selected requests")
    def reject_selected(self, request, queryset):
        self._resolve_selected(request, queryset, REJECT)

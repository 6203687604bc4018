from datetime import datetime

from django.conf import settings
from django.db import models
from django.db.models import Q

from .schedule import day_type, slot_end, slot_label, slot_start


class Booking(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    user_email = models.EmailField(blank=True)
    user_name = models.CharField(max_length=150)
    date = models.DateField()
    slot = models.PositiveSmallIntegerField()
    band_name = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)
    cancelled = models.BooleanField(default=False)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    cancelled_by_email = models.EmailField(blank=True)

    class Meta:
        constraints = [
            # The commit-time arbiter for slot occupancy: one active booking per slot.
            models.UniqueConstraint(
                fields=["date", "slot"],
                condition=Q(cancelled=False),
                name="unique_active_booking_date_slot",
            )
        ]
        indexes = [
            models.Index(fields=["user", "date"], name="idx_booking_user_date"),
            models.Index(fields=["date", "slot"], name="idx_booking_date_slot"),
        ]
        ordering = ["date", "slot", "created_at"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.band_name} · {self.date} · {self.slot_label} · {self.user_name}"

    @property
    def is_active(self) -> bool:
        return not self.cancelled

    @property
    def day_type(self) -> str:
        return day_type(self.date).value

    @property
    def slot_label(self) -> str:
        return slot_label(self.date, self.slot)

    def start_datetime(self) -> datetime:
        return slot_start(self.date, self.slot)

    def end_datetime(self) -> datetime:
        return slot_end(self.date, self.slot)


class CancellationRequest(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    # Requests outlive a week reset, which hard-deletes the bookings they point at.
    booking = models.ForeignKey(
        Booking,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cancellation_requests",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cancellation_requests",
    )
    user_email = models.EmailField(blank=True)
    user_name = models.CharField(max_length=150)
    # Snapshot of the booking at request time; never recomputed.
    date = models.DateField()
    slot = models.PositiveSmallIntegerField()
    band_name = models.CharField(max_length=100)
    reason = models.TextField()
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    auto_approved = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    admin_response = models.TextField(blank=True)
    admin_response_at = models.DateTimeField(null=True, blank=True)
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    admin_email = models.EmailField(blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["booking"],
                condition=Q(status="pending"),
                name="unique_pending_cancellation_per_booking",
            )
        ]
        indexes = [
            models.Index(fields=["date"], name="idx_cancel_req_date"),
            models.Index(fields=["status"], name="idx_cancel_req_status"),
        ]
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.band_name} · {self.date} · {self.slot_label} · {self.status}"

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING

    @property
    def slot_label(self) -> str:
        return slot_label(self.date, self.slot)

"""
Booking ledger: the authoritative store of practice room bookings.

Occupancy is decided by the database. `create` relies on the partial unique
constraint over (date, slot) for active bookings, so a losing writer gets a
SlotConflictError at commit time no matter what an earlier read returned.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date as date_type

from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from .errors import BookingNotActiveError, SlotConflictError
from .models import Booking


def active_bookings() -> QuerySet[Booking]:
    return Booking.objects.filter(cancelled=False)


def find_active_by_user(user) -> QuerySet[Booking]:
    return active_bookings().filter(user=user).order_by("date", "slot")


def find_active_by_slot(date_value: date_type, slot_value: int) -> Booking | None:
    return active_bookings().filter(date=date_value, slot=slot_value).first()


def count_active_by_user_and_date(user, date_value: date_type) -> int:
    return active_bookings().filter(user=user, date=date_value).count()


def bookings_for_dates(dates: Iterable[date_type]) -> QuerySet[Booking]:
    return Booking.objects.filter(date__in=list(dates)).order_by("date", "slot", "created_at")


def create(
    *,
    user,
    user_email: str,
    user_name: str,
    date_value: date_type,
    slot_value: int,
    band_name: str,
) -> Booking:
    try:
        with transaction.atomic():
            return Booking.objects.create(
                user=user,
                user_email=user_email,
                user_name=user_name,
                date=date_value,
                slot=slot_value,
                band_name=band_name,
            )
    except IntegrityError as exc:
        raise SlotConflictError("That slot was just booked. Please pick another.") from exc


def soft_cancel(booking_id: int, by) -> Booking:
    """
    Flag an active booking as cancelled. The record itself is kept.

    Raises Booking.DoesNotExist if there is no such booking and
    BookingNotActiveError if it was already cancelled.
    """
    now = timezone.now()
    updated = Booking.objects.filter(pk=booking_id, cancelled=False).update(
        cancelled=True,
        cancelled_at=now,
        cancelled_by=by,
        cancelled_by_email=(getattr(by, "email", "") or ""),
    )
    if updated == 0:
        # Raises DoesNotExist when the row is gone entirely.
        Booking.objects.only("id").get(pk=booking_id)
        raise BookingNotActiveError("This booking is already cancelled.")
    return Booking.objects.get(pk=booking_id)


def bulk_hard_delete_by_dates(dates: Iterable[date_type]) -> int:
    _, per_model = Booking.objects.filter(date__in=list(dates)).delete()
    return per_model.get(Booking._meta.label, 0)

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date as date_type
from datetime import datetime

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.utils import timezone

from accounts.services import member_identity, upsert_member_profile

from . import ledger
from .errors import DailyCapExceededError, InvalidSlotError, SlotConflictError
from .models import Booking, CancellationRequest
from .schedule import DayType, RoomSettings, current_week, day_type, get_room_settings, slots_for


logger = logging.getLogger(__name__)

BAND_NAME_MAX_LENGTH = 100


@dataclass(frozen=True)
class BookingInput:
    date: date_type
    slot: int
    band_name: str


@dataclass
class WeekView:
    dates: list[date_type]
    bookings: list[Booking] = field(default_factory=list)
    cancellation_requests: list[CancellationRequest] = field(default_factory=list)

    @property
    def active_by_slot(self) -> dict[date_type, dict[int, Booking]]:
        slot_map: dict[date_type, dict[int, Booking]] = {d: {} for d in self.dates}
        for booking in self.bookings:
            if booking.is_active and booking.date in slot_map:
                slot_map[booking.date][booking.slot] = booking
        return slot_map


def _clean_band_name(value: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError({"band_name": "Band name is required."})
    if len(cleaned) > BAND_NAME_MAX_LENGTH:
        raise ValidationError({"band_name": f"Band name must be at most {BAND_NAME_MAX_LENGTH} characters."})
    return cleaned


def _validate_slot(date_value: date_type, slot_value: int, now: datetime, room: RoomSettings) -> None:
    if date_value not in current_week(now, room):
        raise InvalidSlotError("Bookings are only open for dates in the current week.")
    if slot_value not in slots_for(date_value, room):
        raise InvalidSlotError("That time slot is not offered on this day.")


def daily_cap(date_value: date_type, room: RoomSettings | None = None) -> int:
    room = room or get_room_settings()
    if day_type(date_value) == DayType.WEEKEND:
        return room.weekend_max_slots_per_band
    return 1


def reserve(*, user, data: BookingInput, now: datetime | None = None) -> Booking:
    """
    Book a practice room slot for `user`.

    - Rejects dates outside the current week and slots not offered that day.
    - Locks the member's user row so the per-day cap is checked serially.
    - Relies on the active-slot unique constraint as the final guard.
    """
    now = now or timezone.now()
    room = get_room_settings()
    _validate_slot(data.date, data.slot, now, room)
    band_name = _clean_band_name(data.band_name)

    identity = member_identity(user)
    with transaction.atomic():
        get_user_model().objects.select_for_update().only("id").get(pk=user.pk)

        cap = daily_cap(data.date, room)
        if ledger.count_active_by_user_and_date(user, data.date) >= cap:
            if cap == 1:
                raise DailyCapExceededError("You already booked a slot on this date.")
            raise DailyCapExceededError(f"You can book at most {cap} slots on a weekend day.")

        if ledger.find_active_by_slot(data.date, data.slot) is not None:
            raise SlotConflictError("That time slot is already booked.")

        booking = ledger.create(
            user=user,
            user_email=identity.email,
            user_name=identity.display_name,
            date_value=data.date,
            slot_value=data.slot,
            band_name=band_name,
        )
        # Profile bookkeeping must never undo a reservation, so it runs after commit.
        transaction.on_commit(lambda: upsert_member_profile(user))

    logger.info(
        "Booking %s created: %s slot %s for %s (%s)",
        booking.pk,
        booking.date,
        booking.slot,
        booking.band_name,
        identity.email,
    )
    return booking


def week_view(*, now: datetime | None = None) -> WeekView:
    dates = current_week(now or timezone.now())
    return WeekView(
        dates=dates,
        bookings=list(ledger.bookings_for_dates(dates).select_related("user")),
        cancellation_requests=list(CancellationRequest.objects.filter(date__in=dates)),
    )


def reset_week(*, is_admin: bool, now: datetime | None = None) -> int:
    """
    Hard-delete every booking dated in the current week. Admin only.
    Cancellation requests are kept; their booking link is cleared.
    """
    if not is_admin:
        raise PermissionDenied("Only administrators can reset the week.")

    dates = current_week(now or timezone.now())
    with transaction.atomic():
        deleted = ledger.bulk_hard_delete_by_dates(dates)

    logger.warning("Week reset removed %s booking(s) dated %s..%s", deleted, dates[0], dates[-1])
    return deleted

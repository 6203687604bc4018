"""
Week window and slot catalog for the practice room.

Slot ids are hour values. Weekday slots run 17..27 (17:30 through 03:30 the
next morning), weekend slots 8..23 (08:00 through 23:00). Ids >= 24 roll into
the following calendar day but keep their raw value so that late-night slots
sort after the evening ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as date_type
from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from django.conf import settings
from django.db import models


WEEKDAY_SLOTS: tuple[int, ...] = tuple(range(17, 28))
WEEKEND_SLOTS: tuple[int, ...] = tuple(range(8, 24))
WEEKDAY_MINUTE_OFFSET = 30
WEEKEND_MINUTE_OFFSET = 0
SLOT_LENGTH = timedelta(hours=1)


class DayType(models.TextChoices):
    WEEKDAY = "weekday", "Weekday"
    WEEKEND = "weekend", "Weekend"


@dataclass(frozen=True)
class RoomSettings:
    time_zone: str = "Asia/Kolkata"
    week_starts_on: int = 1  # 0=Sunday .. 6=Saturday
    weekend_max_slots_per_band: int = 2
    auto_approve_lead_hours: int = 2
    weekday_slots: tuple[int, ...] = WEEKDAY_SLOTS
    weekend_slots: tuple[int, ...] = WEEKEND_SLOTS

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.time_zone)

    @property
    def auto_approve_lead(self) -> timedelta:
        return timedelta(hours=self.auto_approve_lead_hours)


def get_room_settings() -> RoomSettings:
    return RoomSettings(
        time_zone=getattr(settings, "PRACTICE_ROOM_TIME_ZONE", None) or settings.TIME_ZONE,
        week_starts_on=int(getattr(settings, "PRACTICE_ROOM_WEEK_STARTS_ON", 1)),
        weekend_max_slots_per_band=int(getattr(settings, "PRACTICE_ROOM_WEEKEND_MAX_SLOTS_PER_BAND", 2)),
        auto_approve_lead_hours=int(getattr(settings, "PRACTICE_ROOM_AUTO_APPROVE_LEAD_HOURS", 2)),
    )


def current_week(now: datetime, room: RoomSettings | None = None) -> list[date_type]:
    """
    The seven dates of the active booking week, in the room's timezone.

    The first date is the most recent (or current) occurrence of the
    configured week-start weekday.
    """
    room = room or get_room_settings()
    today = now.astimezone(room.zone).date()
    # date.weekday() is Monday=0; the setting is Sunday=0.
    start_weekday = (room.week_starts_on - 1) % 7
    start = today - timedelta(days=(today.weekday() - start_weekday) % 7)
    return [start + timedelta(days=i) for i in range(7)]


def day_type(value: date_type) -> DayType:
    return DayType.WEEKEND if value.weekday() >= 5 else DayType.WEEKDAY


def slots_for(value: date_type, room: RoomSettings | None = None) -> tuple[int, ...]:
    room = room or get_room_settings()
    if day_type(value) == DayType.WEEKEND:
        return room.weekend_slots
    return room.weekday_slots


def _minute_offset(value: date_type) -> int:
    return WEEKEND_MINUTE_OFFSET if day_type(value) == DayType.WEEKEND else WEEKDAY_MINUTE_OFFSET


def slot_label(value: date_type, slot: int) -> str:
    """E.g. "17:30–18:30" for a weekday slot 17, "02:30–03:30" for slot 26."""
    minute = _minute_offset(value)
    start_hour = int(slot) % 24
    end_hour = (start_hour + 1) % 24
    return f"{start_hour:02d}:{minute:02d}–{end_hour:02d}:{minute:02d}"


def slot_start(value: date_type, slot: int, room: RoomSettings | None = None) -> datetime:
    """
    Aware start instant of a slot.

    Slot ids >= 24 fall on the next calendar day. The wall-clock time is
    resolved with fold=0: an ambiguous time maps to its first occurrence and
    a non-existent one takes the offset in force before the transition.
    """
    room = room or get_room_settings()
    day = value + timedelta(days=int(slot) // 24)
    naive = datetime.combine(day, time(hour=int(slot) % 24, minute=_minute_offset(value)))
    return naive.replace(tzinfo=room.zone, fold=0)


def slot_end(value: date_type, slot: int, room: RoomSettings | None = None) -> datetime:
    return slot_start(value, slot, room) + SLOT_LENGTH


def is_auto_approval_eligible(
    value: date_type,
    slot: int,
    now: datetime,
    room: RoomSettings | None = None,
) -> bool:
    """True when the slot starts at least the configured lead time after `now`."""
    room = room or get_room_settings()
    start = slot_start(value, slot, room).astimezone(timezone.utc)
    return start - now.astimezone(timezone.utc) >= room.auto_approve_lead

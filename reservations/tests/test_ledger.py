from __future__ import annotations

from datetime import date

from django.contrib.auth import get_user_model
from django.test import TestCase

from reservations import ledger
from reservations.errors import BookingNotActiveError, SlotConflictError
from reservations.models import Booking


MONDAY = date(2024, 6, 10)


def make_user(username: str, **extra):
    return get_user_model().objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="Sturdy-Pass-2024",
        **extra,
    )


class BookingLedgerTests(TestCase):
    def setUp(self) -> None:
        self.alice = make_user("alice")
        self.bob = make_user("bob")

    def _create(self, user, date_value=MONDAY, slot_value=17, band_name="The Reverbs") -> Booking:
        return ledger.create(
            user=user,
            user_email=user.email,
            user_name=user.username,
            date_value=date_value,
            slot_value=slot_value,
            band_name=band_name,
        )

    def test_create_and_find_by_slot(self) -> None:
        booking = self._create(self.alice)

        self.assertEqual(ledger.find_active_by_slot(MONDAY, 17), booking)
        self.assertIsNone(ledger.find_active_by_slot(MONDAY, 18))
        self.assertFalse(booking.cancelled)

    def test_second_active_booking_on_a_slot_is_rejected(self) -> None:
        self._create(self.alice)

        with self.assertRaises(SlotConflictError):
            self._create(self.bob)
        self.assertEqual(Booking.objects.filter(date=MONDAY, slot=17).count(), 1)

    def test_cancelled_booking_frees_the_slot(self) -> None:
        first = self._create(self.alice)
        ledger.soft_cancel(first.id, self.alice)

        second = self._create(self.bob)

        self.assertNotEqual(first.id, second.id)
        self.assertEqual(ledger.find_active_by_slot(MONDAY, 17), second)
        # The cancelled record is kept.
        self.assertTrue(Booking.objects.get(pk=first.id).cancelled)

    def test_soft_cancel_records_who_and_when(self) -> None:
        booking = self._create(self.alice)

        cancelled = ledger.soft_cancel(booking.id, self.bob)

        self.assertTrue(cancelled.cancelled)
        self.assertIsNotNone(cancelled.cancelled_at)
        self.assertEqual(cancelled.cancelled_by, self.bob)
        self.assertEqual(cancelled.cancelled_by_email, "bob@example.com")

    def test_soft_cancel_twice_is_rejected(self) -> None:
        booking = self._create(self.alice)
        ledger.soft_cancel(booking.id, self.alice)

        with self.assertRaises(BookingNotActiveError):
            ledger.soft_cancel(booking.id, self.alice)

    def test_soft_cancel_missing_booking(self) -> None:
        with self.assertRaises(Booking.DoesNotExist):
            ledger.soft_cancel(987654, self.alice)

    def test_counts_and_user_lookups_ignore_cancelled_bookings(self) -> None:
        saturday = date(2024, 6, 15)
        first = self._create(self.alice, date_value=saturday, slot_value=8)
        self._create(self.alice, date_value=saturday, slot_value=9)
        self._create(self.bob, date_value=saturday, slot_value=10)

        self.assertEqual(ledger.count_active_by_user_and_date(self.alice, saturday), 2)

        ledger.soft_cancel(first.id, self.alice)

        self.assertEqual(ledger.count_active_by_user_and_date(self.alice, saturday), 1)
        self.assertEqual([b.slot for b in ledger.find_active_by_user(self.alice)], [9])

    def test_bulk_hard_delete_only_touches_given_dates(self) -> None:
        self._create(self.alice, date_value=MONDAY, slot_value=17)
        cancelled = self._create(self.bob, date_value=MONDAY, slot_value=18)
        ledger.soft_cancel(cancelled.id, self.bob)
        keep = self._create(self.alice, date_value=date(2024, 6, 17), slot_value=17)

        deleted = ledger.bulk_hard_delete_by_dates([MONDAY, date(2024, 6, 11)])

        self.assertEqual(deleted, 2)
        self.assertEqual(list(Booking.objects.all()), [keep])

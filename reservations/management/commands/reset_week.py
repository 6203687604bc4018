from __future__ import annotations

from django.core.management.base import BaseCommand
from django.utils import timezone

from reservations.ledger import bookings_for_dates
from reservations.schedule import current_week
from reservations.services import reset_week


class Command(BaseCommand):
    help = "Delete every booking in the current practice room week."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only report how many bookings would be deleted.",
        )

    def handle(self, *args, **options):
        dates = current_week(timezone.now())
        if options["dry_run"]:
            count = bookings_for_dates(dates).count()
            self.stdout.write(f"Dry run: {count} booking(s) dated {dates[0]}..{dates[-1]} would be deleted")
            return

        deleted = reset_week(is_admin=True)
        self.stdout.write(self.style.SUCCESS(f"Week reset: deleted={deleted} ({dates[0]}..{dates[-1]})"))

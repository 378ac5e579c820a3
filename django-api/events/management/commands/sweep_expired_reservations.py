"""Hourly expiry sweep: ./manage.py sweep_expired_reservations [--once]"""

import time

from django.conf import settings
from django.core.management.base import BaseCommand

from events import wiring


class Command(BaseCommand):
    help = "Delete ended hall reservations and free halls nothing else holds."

    def add_arguments(self, parser):
        parser.add_argument(
            "--once",
            action="store_true",
            help="Run a single sweep cycle and exit.",
        )
        parser.add_argument(
            "--interval",
            type=int,
            default=settings.HALLS_SWEEP_INTERVAL_SECONDS,
            help="Seconds between sweep cycles (default: hourly).",
        )

    def handle(self, *args, **options):
        sweeper = wiring.expiry_sweeper()
        while True:
            report = sweeper.run()
            self.stdout.write(
                f"Removed {report.removed} expired reservations, "
                f"freed {len(report.freed_halls)} halls, "
                f"{len(report.failed_halls)} failures."
            )
            if options["once"]:
                return
            time.sleep(options["interval"])

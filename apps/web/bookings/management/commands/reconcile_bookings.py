"""
Complete scheduled bookings whose meeting time has passed.

Usage:
    uv run python apps/web/manage.py reconcile_bookings
    uv run python apps/web/manage.py reconcile_bookings --once
    uv run python apps/web/manage.py reconcile_bookings --interval 600
"""

import logging
import time
from typing import Any

from django.core.management.base import BaseCommand

from apps.web.bookings.services.reconciler import sweep_past_bookings
from apps.web.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Mark past scheduled bookings as completed"

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--once",
            action="store_true",
            help="Sweep once and exit (default: sweep every 300s)",
        )
        parser.add_argument(
            "--interval",
            type=int,
            default=300,
            help="Sweep interval in seconds (default: 300)",
        )

    def handle(self, *_args: Any, **options: Any) -> None:
        once = options["once"]
        interval = options["interval"]

        self.stdout.write("Starting booking reconciler...")

        while True:
            try:
                completed = sweep_past_bookings()
            except PersistenceError as e:
                logger.exception("Booking sweep failed: %s", e)
                self.stderr.write(f"Sweep failed: {e.message}")
            else:
                if completed:
                    self.stdout.write(f"Completed {completed} bookings")

            if once:
                break

            time.sleep(interval)

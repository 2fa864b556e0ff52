"""
Report (and optionally repair) Calendly webhook subscription drift.

Usage:
    uv run python apps/web/manage.py sync_calendly_subscriptions
    uv run python apps/web/manage.py sync_calendly_subscriptions --fix
    uv run python apps/web/manage.py sync_calendly_subscriptions --client 12
"""

import logging
from typing import Any

from django.core.management.base import BaseCommand

from apps.web.core.exceptions import OutreachError
from apps.web.core.models import ClientConnection
from apps.web.integrations.models import WebhookSubscription
from apps.web.integrations.services import (
    check_subscription_drift,
    recreate_subscription,
    subscribe_client,
    unsubscribe_client,
)

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Compare local webhook subscriptions with Calendly and optionally fix them"

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--fix",
            action="store_true",
            help="Subscribe active clients without a subscription, "
            "unsubscribe inactive ones, recreate missing ones",
        )
        parser.add_argument(
            "--client",
            type=int,
            default=None,
            help="Only check this client connection id",
        )

    def handle(self, *_args: Any, **options: Any) -> None:
        fix = options["fix"]
        connections = ClientConnection.objects.all()
        if options["client"] is not None:
            connections = connections.filter(pk=options["client"])

        checked = 0
        errors = 0
        for connection in connections:
            try:
                self.sync_one(connection, fix=fix)
                checked += 1
            except OutreachError as e:
                errors += 1
                logger.exception(
                    "Subscription sync failed for client %s: %s", connection.pk, e
                )
                self.stderr.write(f"{connection.name}: error - {e.message}")

        self.stdout.write(f"Checked {checked} clients, {errors} errors")

    def sync_one(self, connection: ClientConnection, fix: bool) -> None:
        """Report drift for one client and repair it when asked."""
        has_local = WebhookSubscription.objects.filter(
            client=connection, is_active=True
        ).exists()

        if not connection.is_active:
            if has_local:
                self.stdout.write(f"{connection.name}: inactive but subscribed")
                if fix:
                    unsubscribe_client(connection)
                    self.stdout.write(f"{connection.name}: unsubscribed")
            return

        if not has_local:
            self.stdout.write(f"{connection.name}: no subscription")
            if fix:
                subscribe_client(connection)
                self.stdout.write(f"{connection.name}: subscribed")
            return

        drift = check_subscription_drift(connection)
        if not drift.has_drift:
            self.stdout.write(f"{connection.name}: ok")
            return

        if drift.missing_remote:
            self.stdout.write(
                f"{connection.name}: missing on provider: "
                f"{', '.join(drift.missing_remote)}"
            )
        if drift.unknown_remote:
            self.stdout.write(
                f"{connection.name}: unknown on provider: "
                f"{', '.join(drift.unknown_remote)}"
            )
        if fix and drift.missing_remote:
            recreate_subscription(connection)
            self.stdout.write(f"{connection.name}: recreated")

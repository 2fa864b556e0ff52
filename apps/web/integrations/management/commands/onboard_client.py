"""
Onboard a client: store its Calendly credentials and subscribe the relay.

Usage:
    uv run python apps/web/manage.py onboard_client "Acme Dental" \
        --calendly-token "$TOKEN" --slack-channel-id C0123456789
    uv run python apps/web/manage.py onboard_client "Acme Dental" \
        --calendly-token "$TOKEN" --no-subscribe
"""

import logging
from typing import Any

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from apps.web.core.exceptions import OutreachError
from apps.web.integrations.services import onboard_client

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Create a client connection and register its Calendly webhook"

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument("name", help="Client display name")
        parser.add_argument(
            "--calendly-token",
            required=True,
            help="Calendly personal access token of the client",
        )
        parser.add_argument(
            "--access-token",
            default="",
            help="Client-facing access token; generated when omitted",
        )
        parser.add_argument("--timezone", default="UTC")
        parser.add_argument("--discord-webhook-url", default="")
        parser.add_argument("--slack-channel-id", default="")
        parser.add_argument(
            "--event-type",
            action="append",
            default=[],
            dest="event_types",
            help="Event type URI to relay (repeatable); all when omitted",
        )
        parser.add_argument(
            "--no-subscribe",
            action="store_true",
            help="Store the connection without registering the webhook",
        )

    def handle(self, *_args: Any, **options: Any) -> None:
        try:
            connection, subscription = onboard_client(
                options["name"],
                options["calendly_token"],
                access_token=options["access_token"],
                timezone_name=options["timezone"],
                discord_webhook_url=options["discord_webhook_url"],
                slack_channel_id=options["slack_channel_id"],
                watched_event_types=options["event_types"],
                subscribe=not options["no_subscribe"],
            )
        except ValidationError as e:
            raise CommandError(f"Invalid client connection: {e}") from e
        except OutreachError as e:
            logger.warning("Onboarding of %s failed: %s", options["name"], e.message)
            raise CommandError(e.message) from e

        self.stdout.write(f"Onboarded {connection.name} (id {connection.pk})")
        self.stdout.write(f"Access token: {connection.access_token}")
        if subscription is not None:
            self.stdout.write(f"Subscribed: {subscription.uri}")
        else:
            self.stdout.write("Not subscribed")
        self.stdout.write(f"Dashboard: {connection.dashboard_url}")

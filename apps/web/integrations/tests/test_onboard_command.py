"""
Tests for the onboard_client management command.
"""

from io import StringIO
from unittest.mock import patch

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.core.management.base import CommandError

import httpx
import pytest
import respx

from apps.web.core.exceptions import AuthError
from apps.web.core.models import ClientConnection
from apps.web.integrations.models import WebhookSubscription

COMMAND_MODULE = "apps.web.integrations.management.commands.onboard_client"
BASE_URL = "https://api.calendly.com"
USER_URI = f"{BASE_URL}/users/USER1"
ORG_URI = f"{BASE_URL}/organizations/ORG1"
CALLBACK_URL = "https://relay.example.com/webhooks/calendly/"


def _run(*args: str) -> str:
    out = StringIO()
    call_command("onboard_client", *args, stdout=out, stderr=StringIO())
    return out.getvalue()


@pytest.fixture(autouse=True)
def calendly_settings(settings):
    settings.CALENDLY_API_URL = BASE_URL
    settings.CALENDLY_WEBHOOK_CALLBACK_URL = CALLBACK_URL
    return settings


@pytest.mark.django_db
class TestOnboardClientCommand:
    """Tests for onboarding from the command line."""

    @respx.mock
    def test_creates_connection_and_subscription(self) -> None:
        sub_uri = f"{BASE_URL}/webhook_subscriptions/SUB1"
        respx.get(f"{BASE_URL}/users/me").mock(
            return_value=httpx.Response(
                200,
                json={"resource": {"uri": USER_URI, "current_organization": ORG_URI}},
            )
        )
        respx.post(f"{BASE_URL}/webhook_subscriptions").mock(
            return_value=httpx.Response(
                201,
                json={
                    "resource": {
                        "uri": sub_uri,
                        "callback_url": CALLBACK_URL,
                        "state": "active",
                        "scope": "user",
                        "organization": ORG_URI,
                        "user": USER_URI,
                        "events": ["invitee.created", "invitee.canceled"],
                    }
                },
            )
        )

        output = _run(
            "Acme Dental",
            "--calendly-token",
            "calendly-secret",
            "--access-token",
            "acme-code",
            "--slack-channel-id",
            "C0123456789",
            "--event-type",
            f"{BASE_URL}/event_types/DEMO",
        )

        connection = ClientConnection.objects.get(access_token="acme-code")
        assert connection.name == "Acme Dental"
        assert connection.calendly_token == "calendly-secret"
        assert connection.slack_channel_id == "C0123456789"
        assert connection.watched_event_types == [f"{BASE_URL}/event_types/DEMO"]
        assert WebhookSubscription.objects.get(client=connection).uri == sub_uri
        assert "Onboarded Acme Dental" in output
        assert f"Subscribed: {sub_uri}" in output
        assert "code=acme-code" in output

    def test_no_subscribe_is_passed_through(self) -> None:
        connection = ClientConnection(pk=5, name="Acme Dental", access_token="tok")

        with patch(
            f"{COMMAND_MODULE}.onboard_client", return_value=(connection, None)
        ) as onboard:
            output = _run("Acme Dental", "--calendly-token", "t", "--no-subscribe")

        assert onboard.call_args.kwargs["subscribe"] is False
        assert onboard.call_args.kwargs["watched_event_types"] == []
        assert "Not subscribed" in output

    def test_provider_error_becomes_command_error(self) -> None:
        with patch(
            f"{COMMAND_MODULE}.onboard_client",
            side_effect=AuthError("Calendly rejected credentials: 401"),
        ):
            with pytest.raises(CommandError, match="rejected credentials"):
                _run("Acme Dental", "--calendly-token", "bad")

    def test_invalid_field_becomes_command_error(self) -> None:
        with patch(
            f"{COMMAND_MODULE}.onboard_client",
            side_effect=ValidationError(
                {"discord_webhook_url": ["Enter a valid URL."]}
            ),
        ):
            with pytest.raises(CommandError, match="Invalid client connection"):
                _run("Acme Dental", "--calendly-token", "t")

    def test_calendly_token_is_required(self) -> None:
        with pytest.raises(CommandError):
            _run("Acme Dental")

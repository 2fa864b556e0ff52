"""
Tests for core tenant models and managers.
"""

from django.core.exceptions import ValidationError
from django.forms import modelform_factory
from django.test import override_settings

import pytest

from apps.web.bookings.models import Booking
from apps.web.bookings.tests.factories import BookingFactory
from apps.web.core.exceptions import AuthError
from apps.web.core.models import ClientConnection
from apps.web.integrations.models import WebhookSubscription

from .factories import ClientConnectionFactory


@pytest.mark.django_db
class TestForAccessToken:
    """Tests for resolving a client from its access credential."""

    def test_resolves_active_connection(self) -> None:
        connection = ClientConnectionFactory(access_token="tok-123")
        assert ClientConnection.objects.for_access_token("tok-123") == connection

    def test_unknown_token_raises(self) -> None:
        ClientConnectionFactory(access_token="tok-123")
        with pytest.raises(AuthError):
            ClientConnection.objects.for_access_token("nope")

    def test_empty_token_raises(self) -> None:
        with pytest.raises(AuthError):
            ClientConnection.objects.for_access_token("")

    def test_inactive_connection_rejected_by_default(self) -> None:
        ClientConnectionFactory(access_token="tok-123", is_active=False)
        with pytest.raises(AuthError):
            ClientConnection.objects.for_access_token("tok-123")

    def test_inactive_connection_allowed_when_requested(self) -> None:
        connection = ClientConnectionFactory(access_token="tok-123", is_active=False)
        resolved = ClientConnection.objects.for_access_token(
            "tok-123", active_only=False
        )
        assert resolved == connection


@pytest.mark.django_db
class TestMatchProviderUser:
    """Tests for matching a webhook host to its client."""

    def test_matches_trailing_identifier(self) -> None:
        connection = ClientConnectionFactory(
            calendly_user_uri="https://api.calendly.com/users/ABC123"
        )
        match = ClientConnection.objects.match_provider_user(
            "https://api.calendly.com/users/ABC123"
        )
        assert match == connection

    def test_ignores_host_prefix_differences(self) -> None:
        connection = ClientConnectionFactory(
            calendly_user_uri="https://calendly.com/users/ABC123/"
        )
        match = ClientConnection.objects.match_provider_user(
            "https://api.calendly.com/users/ABC123"
        )
        assert match == connection

    def test_does_not_match_suffix_of_other_id(self) -> None:
        ClientConnectionFactory(
            calendly_user_uri="https://api.calendly.com/users/XABC123"
        )
        match = ClientConnection.objects.match_provider_user(
            "https://api.calendly.com/users/ABC123"
        )
        assert match is None

    def test_skips_inactive_connections(self) -> None:
        ClientConnectionFactory(
            calendly_user_uri="https://api.calendly.com/users/ABC123",
            is_active=False,
        )
        assert (
            ClientConnection.objects.match_provider_user(
                "https://api.calendly.com/users/ABC123"
            )
            is None
        )

    def test_empty_uri_returns_none(self) -> None:
        assert ClientConnection.objects.match_provider_user(None) is None


@pytest.mark.django_db
class TestClientConnection:
    """Tests for ClientConnection behaviour."""

    def test_watches_everything_when_unfiltered(self) -> None:
        connection = ClientConnectionFactory(watched_event_types=[])
        assert connection.watches("https://api.calendly.com/event_types/ANY")

    def test_watches_only_listed_event_types(self) -> None:
        connection = ClientConnectionFactory(
            watched_event_types=["https://api.calendly.com/event_types/DEMO"]
        )
        assert connection.watches("https://api.calendly.com/event_types/DEMO")
        assert not connection.watches("https://api.calendly.com/event_types/OTHER")
        assert not connection.watches(None)

    @override_settings(CLIENT_PORTAL_URL="https://portal.example.com/dashboard")
    def test_dashboard_url_carries_access_token(self) -> None:
        connection = ClientConnectionFactory(access_token="tok 1")
        assert (
            connection.dashboard_url
            == "https://portal.example.com/dashboard?code=tok+1"
        )

    def test_provider_identity_editable_without_subscription(self) -> None:
        connection = ClientConnectionFactory()
        connection.calendly_token = "new-token"
        connection.save()
        connection.refresh_from_db()
        assert connection.calendly_token == "new-token"

    def test_provider_identity_locked_while_subscribed(self) -> None:
        connection = ClientConnectionFactory()
        WebhookSubscription.objects.create(
            client=connection,
            uri="https://api.calendly.com/webhook_subscriptions/SUB1",
            callback_url="https://relay.example.com/webhooks/calendly/",
        )

        connection.calendly_user_uri = "https://api.calendly.com/users/OTHER"
        with pytest.raises(ValidationError):
            connection.save()

    def test_full_clean_reports_locked_identity(self) -> None:
        connection = ClientConnectionFactory()
        WebhookSubscription.objects.create(
            client=connection,
            uri="https://api.calendly.com/webhook_subscriptions/SUB1",
            callback_url="https://relay.example.com/webhooks/calendly/",
        )

        connection.calendly_org_uri = "https://api.calendly.com/organizations/NEW"
        with pytest.raises(ValidationError, match="Unsubscribe first"):
            connection.full_clean()

    def test_form_shows_locked_identity_as_error(self) -> None:
        connection = ClientConnectionFactory()
        WebhookSubscription.objects.create(
            client=connection,
            uri="https://api.calendly.com/webhook_subscriptions/SUB1",
            callback_url="https://relay.example.com/webhooks/calendly/",
        )
        form_class = modelform_factory(ClientConnection, fields=["calendly_user_uri"])

        form = form_class(
            data={"calendly_user_uri": "https://api.calendly.com/users/OTHER"},
            instance=connection,
        )

        assert not form.is_valid()
        assert "Unsubscribe first" in " ".join(form.non_field_errors())

    def test_channel_fields_editable_while_subscribed(self) -> None:
        connection = ClientConnectionFactory()
        WebhookSubscription.objects.create(
            client=connection,
            uri="https://api.calendly.com/webhook_subscriptions/SUB1",
            callback_url="https://relay.example.com/webhooks/calendly/",
        )

        connection.slack_channel_id = "C123"
        connection.save()
        connection.refresh_from_db()
        assert connection.slack_channel_id == "C123"


@pytest.mark.django_db
class TestClientScopedManager:
    """Tests for request-scoped querysets."""

    def test_filters_by_request_client(self, rf) -> None:
        connection = ClientConnectionFactory()
        own = BookingFactory(client=connection)
        BookingFactory()
        request = rf.get("/")
        request.client = connection

        assert list(Booking.objects.for_client(request)) == [own]

    def test_request_without_client_raises(self, rf) -> None:
        with pytest.raises(ValueError, match="no client attached"):
            Booking.objects.for_client(rf.get("/"))

"""Tests for DiscordWebhookAdapter - rendering and mocked webhook delivery."""

import httpx
import pytest
import respx
from outreach_schemas import ChannelKind, OccurrenceKind

from apps.web.core.exceptions import AdapterError, AdapterRateLimitError
from apps.web.notifications.adapters import DiscordWebhookAdapter, get_adapter
from apps.web.notifications.adapters.base import ChannelAdapter

WEBHOOK_URL = "https://discord.com/api/webhooks/123/abc"

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def adapter() -> DiscordWebhookAdapter:
    """Create a Discord adapter for testing."""
    return DiscordWebhookAdapter()


# =============================================================================
# Rendering Tests
# =============================================================================


class TestDiscordRendering:
    """Test embed construction per occurrence kind."""

    def test_new_booking_embed(self, adapter, occurrence):
        payload = adapter.render(occurrence)

        assert payload["content"] == "New booking for Acme Dental"
        embed = payload["embeds"][0]
        assert embed["title"] == "🎯 New Booking"
        fields = {f["name"]: f["value"] for f in embed["fields"]}
        assert fields["Contact"] == "Jane Smith"
        assert fields["Email"] == "jane@example.com"
        assert fields["Phone"] == "555-123-4567"
        assert fields["Event"] == "Discovery Call"
        assert fields["Time"] == "Mon, Jan 1, 2024 3:00 PM EST"
        assert occurrence.dashboard_url in fields["Dashboard"]
        assert embed["footer"] == {"text": "Acme Dental"}

    def test_missing_contact_details_use_placeholder(self, adapter, occurrence):
        occurrence = occurrence.model_copy(
            update={"contact_phone": "", "event_type_name": "", "event_time": None}
        )

        embed = adapter.render(occurrence)["embeds"][0]
        fields = {f["name"]: f["value"] for f in embed["fields"]}

        assert fields["Phone"] == "Not provided"
        assert fields["Event"] == "N/A"
        assert fields["Time"] == "TBD"

    def test_canceled_embed(self, adapter, occurrence):
        occurrence = occurrence.model_copy(
            update={"kind": OccurrenceKind.BOOKING_CANCELED}
        )

        payload = adapter.render(occurrence)

        assert payload["embeds"][0]["title"] == "❌ Booking Canceled"
        assert payload["content"] == "Booking canceled for Acme Dental"

    def test_artifact_embed_links_pdf(self, adapter, occurrence):
        occurrence = occurrence.model_copy(
            update={
                "kind": OccurrenceKind.ARTIFACT_ATTACHED,
                "artifact_url": "https://files.example.com/a.pdf",
            }
        )

        payload = adapter.render(occurrence)

        embed = payload["embeds"][0]
        assert embed["title"] == "📄 Conversation Available"
        assert "**Jane Smith**" in embed["description"]
        pdf_field = next(f for f in embed["fields"] if f["name"] == "🔗 View PDF")
        assert "https://files.example.com/a.pdf" in pdf_field["value"]
        assert occurrence.dashboard_url in payload["content"]


# =============================================================================
# Delivery Tests
# =============================================================================


class TestDiscordDelivery:
    """Test webhook POST handling."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_send_success(self, adapter, occurrence):
        route = respx.post(WEBHOOK_URL).mock(return_value=httpx.Response(204))

        await adapter.send(WEBHOOK_URL, adapter.render(occurrence))

        assert route.called
        body = route.calls.last.request.content
        assert b"New Booking" in body

    @pytest.mark.asyncio
    @respx.mock
    async def test_send_server_error(self, adapter, occurrence):
        respx.post(WEBHOOK_URL).mock(return_value=httpx.Response(500, text="oops"))

        with pytest.raises(AdapterError) as exc_info:
            await adapter.send(WEBHOOK_URL, adapter.render(occurrence))

        assert exc_info.value.status_code == 500
        assert exc_info.value.response_body == "oops"
        assert exc_info.value.provider == "discord"

    @pytest.mark.asyncio
    @respx.mock
    async def test_send_unknown_webhook(self, adapter, occurrence):
        respx.post(WEBHOOK_URL).mock(
            return_value=httpx.Response(404, json={"message": "Unknown Webhook"})
        )

        with pytest.raises(AdapterError) as exc_info:
            await adapter.send(WEBHOOK_URL, adapter.render(occurrence))

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    @respx.mock
    async def test_send_rate_limited(self, adapter, occurrence):
        respx.post(WEBHOOK_URL).mock(
            return_value=httpx.Response(
                429, json={"message": "You are being rate limited.", "retry_after": 1.5}
            )
        )

        with pytest.raises(AdapterRateLimitError) as exc_info:
            await adapter.send(WEBHOOK_URL, adapter.render(occurrence))

        assert exc_info.value.retry_after == 1.5

    @pytest.mark.asyncio
    @respx.mock
    async def test_send_rate_limited_header_fallback(self, adapter, occurrence):
        respx.post(WEBHOOK_URL).mock(
            return_value=httpx.Response(429, headers={"Retry-After": "3"})
        )

        with pytest.raises(AdapterRateLimitError) as exc_info:
            await adapter.send(WEBHOOK_URL, adapter.render(occurrence))

        assert exc_info.value.retry_after == 3.0

    @pytest.mark.asyncio
    @respx.mock
    async def test_send_connection_error(self, adapter, occurrence):
        respx.post(WEBHOOK_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(AdapterError, match="Discord request failed"):
            await adapter.send(WEBHOOK_URL, adapter.render(occurrence))

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        client = httpx.AsyncClient()
        adapter = DiscordWebhookAdapter(http_client=client)

        await adapter.close()

        assert not client.is_closed
        await client.aclose()


# =============================================================================
# Factory Tests
# =============================================================================


class TestGetAdapter:
    def test_get_discord_adapter(self):
        adapter = get_adapter(ChannelKind.DISCORD)

        assert isinstance(adapter, DiscordWebhookAdapter)
        assert isinstance(adapter, ChannelAdapter)
        assert adapter.channel == ChannelKind.DISCORD

    def test_unsupported_channel(self):
        with pytest.raises(ValueError, match="Unsupported channel"):
            get_adapter("teams")  # type: ignore[arg-type]

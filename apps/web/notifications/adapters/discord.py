"""Discord adapter - posts embeds to a channel webhook URL."""

import logging
from typing import Any

import httpx
from outreach_schemas import ChannelKind, NotificationOccurrence, OccurrenceKind

from apps.web.core.exceptions import AdapterError, AdapterRateLimitError
from apps.web.notifications.adapters.formatting import format_event_time, or_default

logger = logging.getLogger(__name__)

# Embed colors
COLOR_CREATED = 0x57F287  # green
COLOR_CANCELED = 0xED4245  # red
COLOR_ARTIFACT = 0x5865F2  # blurple


class DiscordWebhookAdapter:
    """
    Discord adapter implementing the ChannelAdapter protocol.

    The target is the webhook URL itself; Discord answers 204 on success.

    API Reference: https://discord.com/developers/docs/resources/webhook
    """

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        """
        Initialize the Discord adapter.

        Args:
            http_client: Optional HTTP client for dependency injection (testing).
        """
        self._client = http_client or httpx.AsyncClient(timeout=30.0)
        self._owns_client = http_client is None

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client:
            await self._client.aclose()

    @property
    def channel(self) -> ChannelKind:
        return ChannelKind.DISCORD

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self, occurrence: NotificationOccurrence) -> dict[str, Any]:
        """Build a webhook body with one embed describing the occurrence."""
        if occurrence.kind == OccurrenceKind.ARTIFACT_ATTACHED:
            return self._render_artifact(occurrence)

        when = format_event_time(occurrence.event_time, occurrence.timezone)
        if occurrence.kind == OccurrenceKind.BOOKING_CANCELED:
            title = "❌ Booking Canceled"
            color = COLOR_CANCELED
            content = f"Booking canceled for {occurrence.client_name}"
        else:
            title = "🎯 New Booking"
            color = COLOR_CREATED
            content = f"New booking for {occurrence.client_name}"

        fields = [
            _field("Contact", or_default(occurrence.contact_name)),
            _field("Email", or_default(occurrence.contact_email)),
            _field("Phone", or_default(occurrence.contact_phone)),
            _field("Event", or_default(occurrence.event_type_name, "N/A")),
            _field("Time", when),
        ]
        if occurrence.dashboard_url:
            fields.append(
                _field(
                    "Dashboard",
                    f"[Open dashboard]({occurrence.dashboard_url})",
                    inline=False,
                )
            )

        return {
            "content": content,
            "embeds": [
                {
                    "title": title,
                    "color": color,
                    "fields": fields,
                    "footer": {"text": occurrence.client_name},
                }
            ],
        }

    def _render_artifact(self, occurrence: NotificationOccurrence) -> dict[str, Any]:
        contact = occurrence.contact_name or "a booking"
        fields = [
            _field("Contact", or_default(occurrence.contact_email)),
            _field("Event", or_default(occurrence.event_type_name, "N/A")),
        ]
        if occurrence.artifact_url:
            fields.append(
                _field(
                    "🔗 View PDF",
                    f"[Click to view]({occurrence.artifact_url})",
                    inline=False,
                )
            )

        content = "✅ A conversation transcript is now available!"
        if occurrence.dashboard_url:
            content += f" [View in Dashboard]({occurrence.dashboard_url})"

        return {
            "content": content,
            "embeds": [
                {
                    "title": "📄 Conversation Available",
                    "description": (
                        f"The conversation transcript for **{contact}** "
                        "is now available to view."
                    ),
                    "color": COLOR_ARTIFACT,
                    "fields": fields,
                    "footer": {"text": occurrence.client_name},
                }
            ],
        }

    # =========================================================================
    # Delivery
    # =========================================================================

    async def send(self, target: str, payload: dict[str, Any]) -> None:
        """POST the payload to the webhook URL."""
        try:
            response = await self._client.post(target, json=payload)
        except httpx.RequestError as e:
            raise AdapterError(
                f"Discord request failed: {e}", provider="discord"
            ) from e

        if response.status_code == 429:
            retry_after = _retry_after(response)
            raise AdapterRateLimitError(
                "Discord rate limit exceeded",
                provider="discord",
                retry_after=retry_after,
                response_body=response.text,
            )

        if not response.is_success:
            raise AdapterError(
                f"Discord webhook returned {response.status_code}",
                provider="discord",
                status_code=response.status_code,
                response_body=response.text,
            )

        logger.debug("Discord webhook accepted message (%s)", response.status_code)


def _retry_after(response: httpx.Response) -> float | None:
    """Discord reports retry_after in the body, seconds in the header."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    value = body.get("retry_after") if isinstance(body, dict) else None
    if value is None:
        value = response.headers.get("Retry-After")
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _field(name: str, value: str, inline: bool = True) -> dict[str, Any]:
    return {"name": name, "value": value, "inline": inline}

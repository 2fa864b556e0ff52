"""Slack adapter - posts Block Kit messages with the agency bot token."""

import logging
from typing import Any

from django.conf import settings

import httpx
from outreach_schemas import ChannelKind, NotificationOccurrence, OccurrenceKind

from apps.web.core.exceptions import AdapterError, AdapterRateLimitError
from apps.web.notifications.adapters.formatting import format_event_time, or_default

logger = logging.getLogger(__name__)


class SlackAdapter:
    """
    Slack adapter implementing the ChannelAdapter protocol.

    The target is a channel id. Slack answers HTTP 200 for most application
    errors and signals them with ``ok: false``, which is treated as a failure.

    API Reference: https://api.slack.com/methods/chat.postMessage
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        bot_token: str | None = None,
        base_url: str | None = None,
    ) -> None:
        """
        Initialize the Slack adapter.

        Args:
            http_client: Optional HTTP client for dependency injection (testing).
            bot_token: Override of settings.SLACK_BOT_TOKEN.
            base_url: Override of settings.SLACK_API_URL.
        """
        self._client = http_client or httpx.AsyncClient(timeout=30.0)
        self._owns_client = http_client is None
        self._bot_token = (
            bot_token if bot_token is not None else settings.SLACK_BOT_TOKEN
        )
        self._base_url = (base_url or settings.SLACK_API_URL).rstrip("/")

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client:
            await self._client.aclose()

    @property
    def channel(self) -> ChannelKind:
        return ChannelKind.SLACK

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self, occurrence: NotificationOccurrence) -> dict[str, Any]:
        """Build a chat.postMessage body (without the channel)."""
        if occurrence.kind == OccurrenceKind.ARTIFACT_ATTACHED:
            return self._render_artifact(occurrence)

        when = format_event_time(occurrence.event_time, occurrence.timezone)
        client_field = _mrkdwn(f"*Client:*\n{occurrence.client_name}")
        contact_field = _mrkdwn(f"*Contact:*\n{or_default(occurrence.contact_name)}")
        email_field = _mrkdwn(f"*Email:*\n{or_default(occurrence.contact_email)}")
        event_field = _mrkdwn(
            f"*Event:*\n{or_default(occurrence.event_type_name, 'N/A')}"
        )

        if occurrence.kind == OccurrenceKind.BOOKING_CANCELED:
            text = f"❌ Booking canceled for {occurrence.client_name}"
            header = "❌ Booking Canceled"
            fields = [client_field, contact_field, email_field, event_field]
        else:
            text = f"🎯 New booking for {occurrence.client_name}"
            header = "🎯 New Booking"
            fields = [
                client_field,
                contact_field,
                email_field,
                _mrkdwn(f"*Phone:*\n{or_default(occurrence.contact_phone)}"),
                event_field,
                _mrkdwn(f"*Time:*\n{when}"),
            ]

        blocks: list[dict[str, Any]] = [
            {"type": "header", "text": _plain(header)},
            {"type": "section", "fields": fields},
        ]
        if occurrence.dashboard_url:
            blocks.append(
                {
                    "type": "actions",
                    "elements": [
                        _button("🔗 Open Dashboard", occurrence.dashboard_url)
                    ],
                }
            )

        return {"text": text, "blocks": blocks}

    def _render_artifact(self, occurrence: NotificationOccurrence) -> dict[str, Any]:
        contact = occurrence.contact_name or "a booking"
        buttons = []
        if occurrence.artifact_url:
            buttons.append(_button("📄 View PDF", occurrence.artifact_url))
        if occurrence.dashboard_url:
            buttons.append(_button("🔗 Open Dashboard", occurrence.dashboard_url))

        blocks: list[dict[str, Any]] = [
            {
                "type": "section",
                "text": _mrkdwn(
                    f"📄 *Conversation Available*\n\nThe conversation transcript "
                    f"for *{contact}* is now available to view."
                ),
            },
            {
                "type": "section",
                "fields": [
                    _mrkdwn(f"📧 *Contact*\n{or_default(occurrence.contact_email)}"),
                    _mrkdwn(
                        f"📅 *Event*\n{or_default(occurrence.event_type_name, 'N/A')}"
                    ),
                ],
            },
        ]
        if buttons:
            blocks.append({"type": "actions", "elements": buttons})
        blocks.append(
            {
                "type": "context",
                "elements": [_mrkdwn(f"🏢 {occurrence.client_name}")],
            }
        )

        return {"text": f"Conversation available: {contact}", "blocks": blocks}

    # =========================================================================
    # Delivery
    # =========================================================================

    async def send(self, target: str, payload: dict[str, Any]) -> None:
        """Post the payload to the channel id via chat.postMessage."""
        if not self._bot_token:
            raise AdapterError("Slack bot token is not configured", provider="slack")

        headers = {
            "Authorization": f"Bearer {self._bot_token}",
            "Content-Type": "application/json; charset=utf-8",
        }
        try:
            response = await self._client.post(
                f"{self._base_url}/chat.postMessage",
                headers=headers,
                json={"channel": target, **payload},
            )
        except httpx.RequestError as e:
            raise AdapterError(f"Slack request failed: {e}", provider="slack") from e

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise AdapterRateLimitError(
                "Slack rate limit exceeded",
                provider="slack",
                retry_after=float(retry_after) if retry_after else None,
                response_body=response.text,
            )

        if not response.is_success:
            raise AdapterError(
                f"Slack API returned {response.status_code}",
                provider="slack",
                status_code=response.status_code,
                response_body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise AdapterError(
                "Slack returned a non-JSON response",
                provider="slack",
                status_code=response.status_code,
                response_body=response.text,
            ) from e

        if not data.get("ok"):
            error_code = data.get("error", "unknown_error")
            raise AdapterError(
                f"Slack rejected message: {error_code}",
                provider="slack",
                status_code=response.status_code,
                response_body=response.text,
                error_code=error_code,
            )

        logger.debug("Slack accepted message in %s (ts=%s)", target, data.get("ts"))


def _mrkdwn(text: str) -> dict[str, str]:
    return {"type": "mrkdwn", "text": text}


def _plain(text: str) -> dict[str, Any]:
    return {"type": "plain_text", "text": text, "emoji": True}


def _button(label: str, url: str) -> dict[str, Any]:
    return {"type": "button", "text": _plain(label), "url": url}

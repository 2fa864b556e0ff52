"""Channel adapters - implementations for each chat destination."""

from typing import Any

from outreach_schemas import ChannelKind

from apps.web.notifications.adapters.base import ChannelAdapter
from apps.web.notifications.adapters.discord import DiscordWebhookAdapter
from apps.web.notifications.adapters.slack import SlackAdapter

__all__ = ["ChannelAdapter", "DiscordWebhookAdapter", "SlackAdapter", "get_adapter"]


def get_adapter(channel: ChannelKind, **kwargs: Any) -> ChannelAdapter:
    """
    Get a channel adapter instance for the specified channel kind.

    Args:
        channel: The destination channel kind.
        **kwargs: Additional arguments passed to the adapter constructor
            (e.g. http_client for tests, bot_token for Slack).

    Returns:
        An adapter instance implementing the ChannelAdapter protocol.

    Raises:
        ValueError: If the channel is not supported.

    Example:
        adapter = get_adapter(ChannelKind.SLACK)
        await adapter.send(channel_id, adapter.render(occurrence))
    """
    if channel == ChannelKind.DISCORD:
        return DiscordWebhookAdapter(**kwargs)
    elif channel == ChannelKind.SLACK:
        return SlackAdapter(**kwargs)
    else:
        supported = ", ".join(kind.value for kind in ChannelKind)
        raise ValueError(f"Unsupported channel: {channel}. Supported: {supported}")

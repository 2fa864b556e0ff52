"""Base channel adapter protocol - interface for all chat destinations."""

from typing import Any, Protocol, runtime_checkable

from outreach_schemas import ChannelKind, NotificationOccurrence


@runtime_checkable
class ChannelAdapter(Protocol):
    """
    Protocol defining the interface for destination chat channels.

    All adapters (Discord, Slack) must implement this interface. Sends are
    async so the dispatcher can run channels concurrently. Adapters never
    retry; a failed send raises AdapterError.
    """

    @property
    def channel(self) -> ChannelKind:
        """The channel kind this adapter delivers to."""
        ...

    def render(self, occurrence: NotificationOccurrence) -> dict[str, Any]:
        """
        Build the channel-specific message payload.

        Args:
            occurrence: What happened, with the context needed to describe it.

        Returns:
            JSON-serializable request body for the channel API.
        """
        ...

    async def send(self, target: str, payload: dict[str, Any]) -> None:
        """
        Deliver a rendered payload.

        Args:
            target: Channel address (webhook URL or channel id).
            payload: Output of render().

        Raises:
            AdapterError: Transport failure or rejection by the channel.
            AdapterRateLimitError: Channel rate limit hit.
        """
        ...

    async def close(self) -> None:
        """Release the HTTP client if the adapter owns it."""
        ...

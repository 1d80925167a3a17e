"""Display host contract for agent events."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DisplayHost(Protocol):
    """
    Receives events from the agent.

    Channels are the values of schemas.events.HostChannel: chat:stream
    carries a ChatStreamPayload dict, chat:error a message string, and
    preview:reload no payload.
    """

    def send(self, channel: str, payload: Any = None) -> None:
        ...

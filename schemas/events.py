"""Events emitted to the display host."""

from enum import Enum
from pydantic import Field

from .conversation import CamelModel


class HostChannel(str, Enum):
    """Channels the agent sends on."""
    CHAT_STREAM = "chat:stream"
    CHAT_ERROR = "chat:error"
    PREVIEW_RELOAD = "preview:reload"


class ChatStreamPayload(CamelModel):
    """Incremental assistant output for one message id."""
    message_id: str
    delta: str = ""
    is_complete: bool = Field(False, description="True on final emissions")

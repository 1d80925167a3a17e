"""Conversation and chat message schemas."""

import time
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class CamelModel(BaseModel):
    """Base model persisted with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Role(str, Enum):
    """Conversation role."""
    USER = "user"
    ASSISTANT = "assistant"


# Content blocks keep the model provider's snake_case field names.

class TextBlock(BaseModel):
    """Plain text content."""
    type: Literal["text"] = "text"
    text: str


class ImageSource(BaseModel):
    """Inline base64 image payload."""
    type: Literal["base64"] = "base64"
    media_type: str  # image/jpeg, image/png, image/gif, image/webp
    data: str


class ImageBlock(BaseModel):
    """Image attached by the user."""
    type: Literal["image"] = "image"
    source: ImageSource


class ToolUseBlock(BaseModel):
    """Model request to invoke a tool."""
    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: Dict[str, Any] = Field(default_factory=dict)


class ToolResultBlock(BaseModel):
    """Executor output for a tool_use id."""
    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: str
    is_error: bool = False


ContentBlock = Annotated[
    Union[TextBlock, ImageBlock, ToolUseBlock, ToolResultBlock],
    Field(discriminator="type"),
]


class ConversationTurn(BaseModel):
    """A single model-facing turn."""
    role: Role
    content: List[ContentBlock] = Field(default_factory=list)

    def text(self) -> str:
        """Concatenated text of all text blocks."""
        return "".join(b.text for b in self.content if isinstance(b, TextBlock))

    def tool_uses(self) -> List[ToolUseBlock]:
        return [b for b in self.content if isinstance(b, ToolUseBlock)]

    def to_api(self) -> Dict[str, Any]:
        """Serialize for a provider request."""
        return self.model_dump(mode="json", exclude_none=True)


class Attachment(CamelModel):
    """File attached to a chat message."""
    id: str
    type: Literal["image", "file"] = "image"
    name: str = ""
    url: str = ""
    mime_type: str = ""
    size: int = 0


class ToolCallStatus(str, Enum):
    """Outcome of a tool call as shown to the user."""
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class ToolCallSummary(CamelModel):
    """Tool call shown alongside an assistant message."""
    id: str
    name: str
    input: Dict[str, Any] = Field(default_factory=dict)
    status: ToolCallStatus = ToolCallStatus.PENDING
    result: Optional[str] = None


class ChatMessage(CamelModel):
    """UI-facing message derived from one or more conversation turns."""
    id: str
    role: Role
    content: str
    timestamp: int = Field(default_factory=now_ms)
    attachments: Optional[List[Attachment]] = None
    tool_calls: Optional[List[ToolCallSummary]] = None
    is_streaming: Optional[bool] = None


class ImageInput(CamelModel):
    """Base64 image supplied with a user message."""
    data: str
    mime_type: str = "image/png"

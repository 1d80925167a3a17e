"""Pydantic schemas for the prototype agent."""

from .conversation import (
    Role,
    TextBlock,
    ImageSource,
    ImageBlock,
    ToolUseBlock,
    ToolResultBlock,
    ContentBlock,
    ConversationTurn,
    Attachment,
    ToolCallStatus,
    ToolCallSummary,
    ChatMessage,
    ImageInput,
    now_ms,
)
from .events import HostChannel, ChatStreamPayload
from .tool_inputs import (
    MemoryCategory,
    WriteFileInput,
    ReadFileInput,
    SaveMemoryInput,
    RecallMemoryInput,
    ToolInput,
    parse_tool_input,
)

__all__ = [
    "Role",
    "TextBlock",
    "ImageSource",
    "ImageBlock",
    "ToolUseBlock",
    "ToolResultBlock",
    "ContentBlock",
    "ConversationTurn",
    "Attachment",
    "ToolCallStatus",
    "ToolCallSummary",
    "ChatMessage",
    "ImageInput",
    "now_ms",
    "HostChannel",
    "ChatStreamPayload",
    "MemoryCategory",
    "WriteFileInput",
    "ReadFileInput",
    "SaveMemoryInput",
    "RecallMemoryInput",
    "ToolInput",
    "parse_tool_input",
]

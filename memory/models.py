"""Memory data models."""

from typing import Optional, List
from pydantic import Field

from schemas.conversation import CamelModel, ConversationTurn, ChatMessage, now_ms
from schemas.tool_inputs import MemoryCategory


class ProjectMemory(CamelModel):
    """Persisted conversation state for one project."""
    project_id: str
    conversation_history: List[ConversationTurn] = Field(default_factory=list)
    chat_messages: List[ChatMessage] = Field(default_factory=list)
    summary: Optional[str] = None
    key_facts: List[str] = Field(default_factory=list)
    last_updated: int = Field(default_factory=now_ms)


class GlobalMemoryEntry(CamelModel):
    """A durable cross-project user preference."""
    id: str
    content: str
    category: MemoryCategory
    created_at: int = Field(default_factory=now_ms)
    source: str = ""  # project that generated this


class GlobalMemory(CamelModel):
    """Process-wide preference ledger shared by all projects."""
    entries: List[GlobalMemoryEntry] = Field(default_factory=list)
    last_updated: int = 0

"""Base LLM client interface."""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Union
from pydantic import BaseModel, Field

from schemas.conversation import ConversationTurn, TextBlock, ToolUseBlock


class LLMResponse(BaseModel):
    """Response from LLM."""
    content: List[Union[TextBlock, ToolUseBlock]] = Field(default_factory=list)
    usage: Optional[Dict[str, int]] = None
    finish_reason: Optional[str] = None

    @property
    def text(self) -> str:
        """All text blocks joined in order."""
        return "".join(b.text for b in self.content if isinstance(b, TextBlock))

    @property
    def tool_uses(self) -> List[ToolUseBlock]:
        return [b for b in self.content if isinstance(b, ToolUseBlock)]


class BaseLLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def chat(
        self,
        messages: List[ConversationTurn],
        system: Optional[str] = None,
        tools: Optional[List[Dict]] = None,
        temperature: float = 0.7,
        max_tokens: int = 4000
    ) -> LLMResponse:
        """
        Send chat completion request.

        Args:
            messages: Conversation turns in order
            system: Optional system prompt
            tools: Optional list of tool definitions (name, description, input_schema)
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum tokens in response

        Returns:
            LLMResponse with ordered text and tool_use blocks
        """
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """Get the name of the LLM provider."""
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """Get the name of the model being used."""
        pass

"""OpenAI LLM client implementation."""

import os
import json
import logging
from typing import Optional, List, Dict, Any

from schemas.conversation import (
    ConversationTurn,
    Role,
    TextBlock,
    ImageBlock,
    ToolUseBlock,
    ToolResultBlock,
)
from .base_client import BaseLLMClient, LLMResponse

logger = logging.getLogger(__name__)


class OpenAIClient(BaseLLMClient):
    """OpenAI GPT client implementation."""

    DEFAULT_MODEL = "gpt-5.2"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None
    ):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (falls back to OPENAI_API_KEY env var)
            model: Model to use (default: gpt-5.2)
        """
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self.model = model or self.DEFAULT_MODEL
        self.client = None

        if self.api_key:
            from openai import AsyncOpenAI
            self.client = AsyncOpenAI(api_key=self.api_key)
            logger.info(f"OpenAI client initialized with model: {self.model}")
        else:
            logger.warning("No OpenAI API key provided")

    @staticmethod
    def _convert_turn(turn: ConversationTurn) -> List[Dict[str, Any]]:
        """Convert one content-block turn into chat-completions messages."""
        if turn.role == Role.ASSISTANT:
            msg: Dict[str, Any] = {"role": "assistant", "content": turn.text() or None}
            tool_uses = turn.tool_uses()
            if tool_uses:
                msg["tool_calls"] = [
                    {
                        "id": tu.id,
                        "type": "function",
                        "function": {
                            "name": tu.name,
                            "arguments": json.dumps(tu.input)
                        }
                    }
                    for tu in tool_uses
                ]
            return [msg]

        converted = []
        parts = []
        for block in turn.content:
            if isinstance(block, ToolResultBlock):
                converted.append({
                    "role": "tool",
                    "tool_call_id": block.tool_use_id,
                    "content": block.content
                })
            elif isinstance(block, ImageBlock):
                parts.append({
                    "type": "image_url",
                    "image_url": {
                        "url": f"data:{block.source.media_type};base64,{block.source.data}"
                    }
                })
            elif isinstance(block, TextBlock):
                parts.append({"type": "text", "text": block.text})

        if parts:
            converted.append({"role": "user", "content": parts})
        return converted

    @staticmethod
    def _convert_tools(tools: List[Dict]) -> List[Dict]:
        """Wrap name/description/input_schema declarations as functions."""
        return [
            {
                "type": "function",
                "function": {
                    "name": tool["name"],
                    "description": tool.get("description", ""),
                    "parameters": tool.get("input_schema", {})
                }
            }
            for tool in tools
        ]

    async def chat(
        self,
        messages: List[ConversationTurn],
        system: Optional[str] = None,
        tools: Optional[List[Dict]] = None,
        temperature: float = 0.7,
        max_tokens: int = 4000
    ) -> LLMResponse:
        """Send chat completion request to OpenAI."""
        if not self.client:
            raise RuntimeError("OpenAI client not initialized. Check API key.")

        openai_messages = []
        if system:
            openai_messages.append({"role": "system", "content": system})
        for turn in messages:
            openai_messages.extend(self._convert_turn(turn))

        kwargs = {
            "model": self.model,
            "messages": openai_messages,
            "temperature": temperature,
            "max_completion_tokens": max_tokens,
        }

        if tools:
            kwargs["tools"] = self._convert_tools(tools)
            kwargs["tool_choice"] = "auto"

        try:
            response = await self.client.chat.completions.create(**kwargs)
        except Exception as e:
            logger.error(f"OpenAI API error: {e}")
            raise

        choice = response.choices[0]
        content = []
        if choice.message.content:
            content.append(TextBlock(text=choice.message.content))

        for tc in choice.message.tool_calls or []:
            content.append(ToolUseBlock(
                id=tc.id,
                name=tc.function.name,
                input=json.loads(tc.function.arguments or "{}")
            ))

        usage = None
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return LLMResponse(
            content=content,
            usage=usage,
            finish_reason=choice.finish_reason
        )

    def get_provider_name(self) -> str:
        """Get the provider name."""
        return "openai"

    def get_model_name(self) -> str:
        """Get the model name."""
        return self.model

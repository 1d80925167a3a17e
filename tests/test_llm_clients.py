"""Tests for the LLM client adapters."""

import json
import pytest
from types import SimpleNamespace
from unittest.mock import Mock, AsyncMock

from agent.tools import get_tools
from llm.anthropic_client import AnthropicClient
from llm.openai_client import OpenAIClient
from config.settings import Settings
from llm.factory import create_llm_client, create_llm_client_from_settings, LLMProvider
from schemas.conversation import (
    ConversationTurn,
    Role,
    TextBlock,
    ImageBlock,
    ImageSource,
    ToolUseBlock,
    ToolResultBlock,
)


HISTORY = [
    ConversationTurn(role=Role.USER, content=[
        ImageBlock(source=ImageSource(media_type="image/png", data="aGVsbG8=")),
        TextBlock(text="Build this"),
    ]),
    ConversationTurn(role=Role.ASSISTANT, content=[
        TextBlock(text="Reading first."),
        ToolUseBlock(id="tu_1", name="read_file", input={"path": "app.jsx"}),
    ]),
    ConversationTurn(role=Role.USER, content=[
        ToolResultBlock(tool_use_id="tu_1", content="File not found: app.jsx"),
    ]),
]


class TestAnthropicClient:
    """Test the Anthropic adapter."""

    def setup_method(self):
        """Set up test fixtures."""
        self.client = AnthropicClient(api_key="sk-test", model="claude-test")
        self.create = AsyncMock(return_value=SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text="Writing now."),
                SimpleNamespace(type="tool_use", id="tu_2", name="write_file",
                                input={"path": "app.jsx", "content": "x"}),
            ],
            usage=SimpleNamespace(input_tokens=10, output_tokens=5),
            stop_reason="tool_use",
        ))
        self.client.client = Mock()
        self.client.client.messages.create = self.create

    @pytest.mark.asyncio
    async def test_request_shape(self):
        """Test the Anthropic request carries system, tools and history."""
        await self.client.chat(HISTORY, system="You build prototypes", tools=get_tools(), max_tokens=8192)

        kwargs = self.create.await_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 8192
        assert kwargs["system"] == "You build prototypes"
        assert kwargs["tools"] == get_tools()
        assert kwargs["messages"][2] == {
            "role": "user",
            "content": [{
                "type": "tool_result", "tool_use_id": "tu_1",
                "content": "File not found: app.jsx", "is_error": False,
            }],
        }

    @pytest.mark.asyncio
    async def test_response_blocks(self):
        """Test response blocks and usage are mapped."""
        response = await self.client.chat(HISTORY)

        assert response.text == "Writing now."
        assert response.tool_uses == [
            ToolUseBlock(id="tu_2", name="write_file", input={"path": "app.jsx", "content": "x"})
        ]
        assert response.usage["total_tokens"] == 15
        assert response.finish_reason == "tool_use"

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        """Test API errors are re-raised."""
        self.create.side_effect = RuntimeError("overloaded")

        with pytest.raises(RuntimeError, match="overloaded"):
            await self.client.chat(HISTORY)

    @pytest.mark.asyncio
    async def test_requires_api_key(self, monkeypatch):
        """Test chatting without a key fails."""
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        client = AnthropicClient()

        with pytest.raises(RuntimeError):
            await client.chat(HISTORY)


class TestOpenAIClient:
    """Test the OpenAI adapter's content-block translation."""

    def setup_method(self):
        """Set up test fixtures."""
        self.client = OpenAIClient(api_key="sk-test", model="gpt-test")
        message = SimpleNamespace(
            content="Done!",
            tool_calls=[SimpleNamespace(
                id="call_1",
                function=SimpleNamespace(name="read_file", arguments=json.dumps({"path": "app.jsx"}))
            )],
        )
        self.create = AsyncMock(return_value=SimpleNamespace(
            choices=[SimpleNamespace(message=message, finish_reason="tool_calls")],
            usage=SimpleNamespace(prompt_tokens=7, completion_tokens=3, total_tokens=10),
        ))
        self.client.client = Mock()
        self.client.client.chat.completions.create = self.create

    @pytest.mark.asyncio
    async def test_message_translation(self):
        """Test content blocks are translated to chat-completions messages."""
        await self.client.chat(HISTORY, system="System", tools=get_tools())

        kwargs = self.create.await_args.kwargs
        messages = kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "System"}
        assert messages[1]["content"][0] == {
            "type": "image_url", "image_url": {"url": "data:image/png;base64,aGVsbG8="}
        }
        assert messages[2]["tool_calls"][0]["function"] == {
            "name": "read_file", "arguments": json.dumps({"path": "app.jsx"})
        }
        assert messages[3] == {
            "role": "tool", "tool_call_id": "tu_1", "content": "File not found: app.jsx"
        }
        assert kwargs["tools"][0]["function"]["name"] == "write_file"
        assert kwargs["tools"][0]["function"]["parameters"]["required"] == ["path", "content"]

    @pytest.mark.asyncio
    async def test_response_blocks(self):
        """Test response blocks and usage are mapped."""
        response = await self.client.chat(HISTORY)

        assert response.content == [
            TextBlock(text="Done!"),
            ToolUseBlock(id="call_1", name="read_file", input={"path": "app.jsx"}),
        ]
        assert response.usage["total_tokens"] == 10


class TestFactory:
    """Test client construction."""

    def test_creates_by_provider(self):
        """Test each provider maps to its client class."""
        assert isinstance(create_llm_client(LLMProvider.ANTHROPIC, api_key="k"), AnthropicClient)
        assert isinstance(create_llm_client(LLMProvider.OPENAI, api_key="k"), OpenAIClient)

    def test_accepts_provider_name(self):
        """Test a plain provider name from settings is accepted."""
        client = create_llm_client("openai", api_key="k", model="gpt-test")

        assert isinstance(client, OpenAIClient)
        assert client.get_model_name() == "gpt-test"

    def test_unsupported_provider(self):
        """Test unknown providers are rejected."""
        with pytest.raises(ValueError, match="Unsupported LLM provider: gemini"):
            create_llm_client("gemini", api_key="k")

    def test_from_settings_uses_provider_key(self, tmp_path):
        """Test settings select the provider, key and model."""
        settings = Settings(
            llm_provider="anthropic",
            llm_model="claude-test",
            anthropic_api_key="sk-ant-0123456789",
            app_data_dir=str(tmp_path)
        )

        client = create_llm_client_from_settings(settings)

        assert isinstance(client, AnthropicClient)
        assert client.get_model_name() == "claude-test"

    def test_from_settings_requires_key(self, monkeypatch, tmp_path):
        """Test a missing API key fails before any request is made."""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        settings = Settings(llm_provider="openai", app_data_dir=str(tmp_path))

        with pytest.raises(RuntimeError, match="No API key configured for openai"):
            create_llm_client_from_settings(settings)

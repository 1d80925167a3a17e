"""LLM client abstraction layer."""

from .base_client import BaseLLMClient, LLMResponse
from .factory import create_llm_client, create_llm_client_from_settings, LLMProvider

__all__ = [
    "BaseLLMClient",
    "LLMResponse",
    "create_llm_client",
    "create_llm_client_from_settings",
    "LLMProvider",
]

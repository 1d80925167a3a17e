"""Build the async chat client for the configured provider."""

import logging
from enum import Enum
from typing import Dict, Optional, Type, Union

from config.settings import Settings, mask_api_key
from .base_client import BaseLLMClient
from .anthropic_client import AnthropicClient
from .openai_client import OpenAIClient

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


_CLIENTS: Dict[LLMProvider, Type[BaseLLMClient]] = {
    LLMProvider.ANTHROPIC: AnthropicClient,
    LLMProvider.OPENAI: OpenAIClient,
}


def create_llm_client(
    provider: Union[LLMProvider, str],
    api_key: Optional[str] = None,
    model: Optional[str] = None
) -> BaseLLMClient:
    """
    Create a chat client for a provider given by enum member or name.

    Raises:
        ValueError: If provider is not supported
    """
    try:
        client_class = _CLIENTS[LLMProvider(provider)]
    except ValueError:
        raise ValueError(f"Unsupported LLM provider: {provider}") from None
    return client_class(api_key=api_key, model=model)


def create_llm_client_from_settings(settings: Settings) -> BaseLLMClient:
    """
    Create the client the agent talks to, resolving the provider's API key.

    Raises:
        RuntimeError: If no API key is configured for the provider
        ValueError: If the configured provider is not supported
    """
    api_key = settings.get_llm_api_key()
    if not api_key:
        raise RuntimeError(f"No API key configured for {settings.llm_provider}")

    client = create_llm_client(settings.llm_provider, api_key=api_key, model=settings.llm_model)
    logger.info(
        f"Using {client.get_provider_name()} model {client.get_model_name()} "
        f"with key {mask_api_key(api_key)}"
    )
    return client

"""
LLM Client Factory for managing multiple LLM service providers.
"""

from typing import Optional, Tuple
from .providers.base import BaseLLMClient
from .providers.openai_client import OpenAIClient
from .providers.anthropic_client import AnthropicClient
from server.config import config
from server.logging_config import get_logger

logger = get_logger(__name__)

SUPPORTED_PROVIDERS = ("openai", "gateway", "anthropic")

# Global client instance
_chat_client: Optional[BaseLLMClient] = None


def parse_llm_service(llm_service: str) -> Tuple[str, str]:
    """
    Parse LLM_SERVICE string into provider and model.

    Args:
        llm_service: String in format "provider/model" (e.g., "openai/gpt-4o-mini",
            or "gateway/google/gemini-3-flash-preview")

    Returns:
        Tuple of (provider, model)
    """
    if "/" not in llm_service:
        raise ValueError(f"Invalid LLM_SERVICE format: {llm_service}. Expected 'provider/model'")

    provider, model = llm_service.split("/", 1)
    return provider.lower(), model


def create_openai_client(model: Optional[str] = None) -> OpenAIClient:
    """Create OpenAI client"""
    if not config.MACHINE_LEARNING.OPENAI_API_KEY:
        raise ValueError("OPENAI_API_KEY is required for OpenAI provider")
    chat_model = model or config.MACHINE_LEARNING.OPENAI_CHAT_MODEL
    if not chat_model:
        raise ValueError("OPENAI_CHAT_MODEL is required for OpenAI provider")

    return OpenAIClient(
        api_key=config.MACHINE_LEARNING.OPENAI_API_KEY,
        chat_model=chat_model
    )


def create_gateway_client(model: str) -> OpenAIClient:
    """Create a client for an OpenAI-compatible AI gateway"""
    if not config.MACHINE_LEARNING.GATEWAY_API_KEY:
        raise ValueError("GATEWAY_API_KEY is required for gateway provider")
    if not config.MACHINE_LEARNING.GATEWAY_BASE_URL:
        raise ValueError("GATEWAY_BASE_URL is required for gateway provider")

    return OpenAIClient(
        api_key=config.MACHINE_LEARNING.GATEWAY_API_KEY,
        chat_model=model,
        base_url=config.MACHINE_LEARNING.GATEWAY_BASE_URL,
        provider_name="gateway"
    )


def create_anthropic_client(model: Optional[str] = None) -> AnthropicClient:
    """Create Anthropic client"""
    if not config.MACHINE_LEARNING.ANTHROPIC_API_KEY:
        raise ValueError("ANTHROPIC_API_KEY is required for Anthropic provider")
    chat_model = model or config.MACHINE_LEARNING.ANTHROPIC_CHAT_MODEL
    if not chat_model:
        raise ValueError("ANTHROPIC_CHAT_MODEL is required for Anthropic provider")

    return AnthropicClient(
        api_key=config.MACHINE_LEARNING.ANTHROPIC_API_KEY,
        chat_model=chat_model
    )


def create_client(provider: str, model: Optional[str] = None) -> BaseLLMClient:
    """
    Create a client for the specified provider.

    Args:
        provider: Provider name (openai, gateway, anthropic)
        model: Model name from LLM_SERVICE; overrides the per-provider model setting

    Returns:
        BaseLLMClient instance
    """
    if provider == "openai":
        return create_openai_client(model)
    elif provider == "gateway":
        return create_gateway_client(model or "")
    elif provider == "anthropic":
        return create_anthropic_client(model)
    else:
        raise ValueError(f"Unsupported provider: {provider}. Supported: {', '.join(SUPPORTED_PROVIDERS)}")


def get_chat_client() -> BaseLLMClient:
    """
    Get the chat client based on current configuration.

    Returns:
        BaseLLMClient instance for structured generation
    """
    global _chat_client

    if _chat_client is None:
        if not config.MACHINE_LEARNING.LLM_SERVICE:
            raise ValueError("LLM_SERVICE is required but not configured. Set LLM_SERVICE in .env file (e.g., LLM_SERVICE=openai/gpt-4o-mini)")

        provider, model = parse_llm_service(config.MACHINE_LEARNING.LLM_SERVICE)
        _chat_client = create_client(provider, model)
        logger.info(f"Initialized chat client: {provider}/{model}")

    return _chat_client


async def close_clients() -> None:
    """Close and forget the cached client"""
    global _chat_client
    if _chat_client is not None:
        await _chat_client.close()
    _chat_client = None


def reset_clients():
    """Reset client instances (useful for testing)"""
    global _chat_client
    _chat_client = None

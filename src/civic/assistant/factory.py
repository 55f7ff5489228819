"""
Wiring for the assistant: provider adapters and the process-wide chat service.
"""

import os
from collections.abc import Callable
from functools import lru_cache

import httpx

from civic.assistant.gateway import LLMGateway
from civic.assistant.models import LLMProvider, LLMProviderError
from civic.assistant.openai_adapter import OpenAIAdapter
from civic.assistant.service import ChatService
from civic.config import Settings, get_settings
from civic.shared.logging import get_logger

logger = get_logger(__name__)

_KEY_ENV = {LLMProvider.OPENAI: "OPENAI_API_KEY"}


def _openai(api_key: str, model: str | None, timeout_seconds: float, max_retries: int,
            base_url: str | None, http_client: httpx.Client | None) -> LLMGateway:
    return OpenAIAdapter(
        api_key=api_key,
        default_model=model or "gpt-3.5-turbo",
        timeout_seconds=timeout_seconds,
        max_retries=max_retries,
        base_url=base_url,
        http_client=http_client,
    )


_BUILDERS: dict[LLMProvider, Callable[..., LLMGateway]] = {LLMProvider.OPENAI: _openai}


def create_llm_gateway(
    provider: LLMProvider | str,
    api_key: str | None = None,
    model: str | None = None,
    *,
    timeout_seconds: float = 30.0,
    max_retries: int = 3,
    base_url: str | None = None,
    http_client: httpx.Client | None = None,
) -> LLMGateway:
    """Adapter for `provider`; the key falls back to the provider's env variable.

    Raises:
        LLMProviderError: Unknown provider or no key available.
    """
    try:
        provider = LLMProvider(str(getattr(provider, "value", provider)).strip().lower())
    except ValueError:
        raise LLMProviderError(f"Unsupported LLM provider: {provider}") from None

    env_var = _KEY_ENV[provider]
    api_key = api_key or os.environ.get(env_var)
    if not api_key:
        raise LLMProviderError(f"No API key for {provider.value}; set {env_var}")

    logger.info("LLM gateway ready", extra={"provider": provider.value, "model": model})
    return _BUILDERS[provider](api_key, model, timeout_seconds, max_retries, base_url, http_client)


def build_chat_service(settings: Settings) -> ChatService:
    """Chat service for `settings`.

    Missing credentials do not fail startup: the service answers every
    message with an unsuccessful result until a key is configured.
    """
    try:
        gateway: LLMGateway | None = create_llm_gateway(
            settings.llm_provider,
            api_key=settings.openai_api_key or None,
            model=settings.llm_model,
            timeout_seconds=settings.llm_timeout_seconds,
        )
    except LLMProviderError as e:
        logger.warning("LLM gateway unavailable", extra={"error": str(e)})
        gateway = None

    return ChatService(
        gateway=gateway,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )


@lru_cache
def get_chat_service() -> ChatService:
    return build_chat_service(get_settings())

"""
LLM gateway interface definition.
"""

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

import anyio

from civic.assistant.models import ChatRequest, ChatResponse, LLMProvider


@runtime_checkable
class LLMGateway(Protocol):
    """Protocol for LLM gateway implementations."""

    @property
    def provider(self) -> LLMProvider:
        ...

    @property
    def default_model(self) -> str:
        ...

    async def chat_completion(self, request: ChatRequest) -> ChatResponse:
        """Execute a chat completion request.

        Raises:
            LLMTimeoutError: If the request times out.
            LLMRateLimitError: If rate limited by the provider.
            LLMAuthenticationError: If authentication fails.
            LLMProviderError: For other provider errors.
        """
        ...


class BaseLLMAdapter(ABC):
    """Base class for LLM adapter implementations."""

    def __init__(
        self,
        api_key: str,
        default_model: str,
        timeout_seconds: float = 30.0,
        max_retries: int = 3,
    ) -> None:
        """Initialize the adapter.

        Args:
            api_key: API key for the provider.
            default_model: Default model to use.
            timeout_seconds: Request timeout in seconds.
            max_retries: Maximum number of retries for transient failures.
        """
        self._api_key = api_key
        self._default_model = default_model
        self._timeout_seconds = timeout_seconds
        self._max_retries = max_retries

    @property
    @abstractmethod
    def provider(self) -> LLMProvider:
        raise NotImplementedError

    @property
    def default_model(self) -> str:
        return self._default_model

    async def chat_completion(self, request: ChatRequest) -> ChatResponse:
        """Async chat completion.

        Default implementation runs the sync implementation in a worker thread.
        """
        return await anyio.to_thread.run_sync(self.chat_completion_sync, request)

    @abstractmethod
    def chat_completion_sync(self, request: ChatRequest) -> ChatResponse:
        """Execute a chat completion request synchronously."""
        raise NotImplementedError

"""
OpenAI Chat Completions adapter over httpx.
"""

import time
from typing import Any

import httpx

from civic.assistant.gateway import BaseLLMAdapter
from civic.assistant.models import (
    ChatRequest,
    ChatResponse,
    LLMAuthenticationError,
    LLMError,
    LLMProvider,
    LLMProviderError,
    LLMRateLimitError,
    LLMTimeoutError,
)
from civic.shared.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class OpenAIAdapter(BaseLLMAdapter):
    """OpenAI HTTP adapter. Text chat only.

    Rate limits, timeouts and 5xx responses are retried up to `max_retries`
    times; every other failure is raised immediately.
    """

    def __init__(
        self,
        api_key: str,
        default_model: str = "gpt-3.5-turbo",
        timeout_seconds: float = 30.0,
        max_retries: int = 3,
        base_url: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        super().__init__(api_key, default_model, timeout_seconds, max_retries)
        self._base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._chat_endpoint = f"{self._base_url}/chat/completions"
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def provider(self) -> LLMProvider:
        return LLMProvider.OPENAI

    def _get_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=httpx.Timeout(self._timeout_seconds))
        return self._http_client

    def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def _build_payload(self, request: ChatRequest) -> dict[str, Any]:
        return {
            "model": request.model or self._default_model,
            "messages": [
                {"role": m.role.value, "content": m.content}
                for m in request.messages
            ],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }

    def _post_once(self, payload: dict[str, Any], correlation_id: str) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            return self._get_client().post(self._chat_endpoint, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise LLMTimeoutError(
                "OpenAI request timed out",
                correlation_id=correlation_id,
                provider=self.provider,
                original_error=e,
            ) from e
        except httpx.HTTPError as e:
            raise LLMProviderError(
                f"OpenAI request failed: {e}",
                correlation_id=correlation_id,
                provider=self.provider,
                original_error=e,
            ) from e

    def _raise_for_status(self, r: httpx.Response, correlation_id: str) -> None:
        if r.status_code == 200:
            return
        if r.status_code == 401:
            raise LLMAuthenticationError(
                "OpenAI authentication failed",
                correlation_id=correlation_id,
                provider=self.provider,
            )
        if r.status_code == 429:
            raise LLMRateLimitError(
                "OpenAI rate limit exceeded",
                retry_after=_parse_retry_after(r.headers.get("retry-after")),
                correlation_id=correlation_id,
                provider=self.provider,
            )
        raise LLMProviderError(
            f"OpenAI error {r.status_code}",
            status_code=r.status_code,
            correlation_id=correlation_id,
            provider=self.provider,
        )

    @staticmethod
    def _is_retryable(error: LLMError) -> bool:
        if isinstance(error, (LLMTimeoutError, LLMRateLimitError)):
            return True
        return isinstance(error, LLMProviderError) and (error.status_code or 0) >= 500

    def chat_completion_sync(self, request: ChatRequest) -> ChatResponse:
        payload = self._build_payload(request)
        started = time.perf_counter()

        attempt = 0
        while True:
            attempt += 1
            try:
                r = self._post_once(payload, request.correlation_id)
                self._raise_for_status(r, request.correlation_id)
                break
            except LLMError as e:
                if attempt > self._max_retries or not self._is_retryable(e):
                    raise
                logger.warning(
                    "Retrying OpenAI request",
                    extra={
                        "attempt": attempt,
                        "error": str(e),
                        "llm_correlation_id": request.correlation_id,
                    },
                )

        try:
            data = r.json()
            content = data["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMProviderError(
                "Malformed OpenAI response",
                correlation_id=request.correlation_id,
                provider=self.provider,
                original_error=e,
            ) from e

        usage = data.get("usage") or {}
        return ChatResponse(
            content=content,
            model=payload["model"],
            provider=self.provider,
            usage={k: v for k, v in usage.items() if isinstance(v, int)},
            correlation_id=request.correlation_id,
            latency_ms=(time.perf_counter() - started) * 1000.0,
        )

"""
Chat service shared by the website chat endpoint and the WhatsApp bot.
"""

from collections.abc import Sequence
from typing import Any, Mapping, Union

from civic.assistant.gateway import LLMGateway
from civic.assistant.models import (
    ChatMessage,
    ChatRequest,
    ChatResult,
    LLMError,
    MessageRole,
)
from civic.assistant.prompts import SYSTEM_PROMPT
from civic.shared.logging import get_logger

logger = get_logger(__name__)

EMPTY_MESSAGE_ERROR = "Message is required"
FALLBACK_RESPONSE = "Sorry, I could not generate a response."

_HISTORY_ROLES = {MessageRole.USER.value, MessageRole.ASSISTANT.value}

HistoryEntry = Union[ChatMessage, Mapping[str, Any]]


def _history_messages(history: Sequence[HistoryEntry]) -> list[ChatMessage]:
    """Prior user/assistant turns; anything else (system, malformed) is dropped."""
    messages: list[ChatMessage] = []
    for entry in history or ():
        if isinstance(entry, ChatMessage):
            role, content = entry.role.value, entry.content
        elif isinstance(entry, Mapping):
            role, content = entry.get("role"), entry.get("content")
        else:
            role, content = getattr(entry, "role", None), getattr(entry, "content", None)
        role = getattr(role, "value", role)
        if role in _HISTORY_ROLES and isinstance(content, str):
            messages.append(ChatMessage(role=MessageRole(role), content=content))
    return messages


class ChatService:
    """Conversational responder: message + history in, reply text out."""

    def __init__(
        self,
        gateway: LLMGateway | None,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
        system_prompt: str = SYSTEM_PROMPT,
    ) -> None:
        self._gateway = gateway
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._system_prompt = system_prompt

    async def respond(
        self,
        message: str | None,
        history: Sequence[HistoryEntry] = (),
    ) -> ChatResult:
        """Ask the LLM for a reply.

        Never raises: provider failures come back as an unsuccessful result.
        """
        if not message or not message.strip():
            return ChatResult(success=False, error=EMPTY_MESSAGE_ERROR)

        if self._gateway is None:
            logger.error("Chat assistant is not configured (missing LLM credentials)")
            return ChatResult(success=False, error="Chat assistant is not configured")

        messages = [ChatMessage(role=MessageRole.SYSTEM, content=self._system_prompt)]
        messages.extend(_history_messages(history))
        messages.append(ChatMessage(role=MessageRole.USER, content=message.strip()))

        request = ChatRequest(
            messages=messages,
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )

        try:
            completion = await self._gateway.chat_completion(request)
        except LLMError as e:
            logger.warning(
                "Chat completion failed",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            return ChatResult(success=False, error=str(e) or "Failed to process chat message")
        except Exception as e:
            logger.exception("Unexpected chat completion error")
            return ChatResult(success=False, error=str(e) or "Failed to process chat message")

        content = (completion.content or "").strip()
        return ChatResult(success=True, response=content or FALLBACK_RESPONSE)

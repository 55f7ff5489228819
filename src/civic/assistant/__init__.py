"""
Conversational assistant: LLM gateway, OpenAI adapter and chat service.
"""

from civic.assistant.gateway import BaseLLMAdapter, LLMGateway
from civic.assistant.models import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    ChatResult,
    LLMError,
    LLMProvider,
    MessageRole,
)
from civic.assistant.openai_adapter import OpenAIAdapter
from civic.assistant.service import ChatService
from civic.assistant.factory import create_llm_gateway, get_chat_service

__all__ = [
    "BaseLLMAdapter",
    "LLMGateway",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "ChatResult",
    "LLMError",
    "LLMProvider",
    "MessageRole",
    "OpenAIAdapter",
    "ChatService",
    "create_llm_gateway",
    "get_chat_service",
]

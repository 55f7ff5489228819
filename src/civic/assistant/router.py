"""
FastAPI router for the website chat assistant.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import AliasChoices, BaseModel, Field

from civic.assistant.factory import get_chat_service
from civic.assistant.models import ChatMessage
from civic.assistant.service import EMPTY_MESSAGE_ERROR, ChatService

router = APIRouter(prefix="/api/chat", tags=["chat"])


class ChatPayload(BaseModel):
    message: str | None = None
    conversation_history: list[ChatMessage] = Field(
        default_factory=list,
        validation_alias=AliasChoices("conversation_history", "conversationHistory"),
    )


class ChatReply(BaseModel):
    response: str


@router.post("", response_model=ChatReply, status_code=status.HTTP_200_OK)
async def chat(
    payload: ChatPayload,
    service: Annotated[ChatService, Depends(get_chat_service)],
) -> ChatReply:
    result = await service.respond(payload.message, payload.conversation_history)

    if not result.success:
        code = (
            status.HTTP_400_BAD_REQUEST
            if result.error == EMPTY_MESSAGE_ERROR
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        raise HTTPException(status_code=code, detail=result.error or "Failed to process chat message")

    return ChatReply(response=result.response or "")

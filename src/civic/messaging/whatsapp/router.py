"""
FastAPI router for the WhatsApp Cloud API webhook and outbound send endpoint.

Meta retries any webhook delivery that is not acknowledged with a 200, so the
inbound POST always ACKs, whatever happened while handling it.
"""

from __future__ import annotations

import hmac
from typing import Annotated, Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import PlainTextResponse
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from civic.assistant.factory import get_chat_service
from civic.assistant.service import ChatService
from civic.config import get_settings
from civic.messaging.history import InMemorySessionStore, SessionStore
from civic.messaging.processor import CommandProcessor
from civic.messaging.whatsapp.client import WhatsAppClient, WhatsAppSendError
from civic.messaging.whatsapp.config import WhatsAppConfig, get_whatsapp_config
from civic.messaging.whatsapp.webhook import InboundMessage, parse_inbound_messages
from civic.petitions.repository import PetitionRepository
from civic.shared.database import get_db_session
from civic.shared.logging import correlation_id_var, get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/whatsapp", tags=["whatsapp"])

MEDIA_REPLY = (
    "I can only process text messages at the moment. "
    "Please type your question and I'll be happy to help!"
)

# ----------------------------
# Dependencies
# ----------------------------

_session_store: InMemorySessionStore | None = None
_whatsapp_client: WhatsAppClient | None = None


def get_session_store() -> SessionStore:
    global _session_store
    if _session_store is None:
        _session_store = InMemorySessionStore(max_entries=get_settings().max_history_entries)
    return _session_store


def get_whatsapp_client() -> WhatsAppClient:
    global _whatsapp_client
    if _whatsapp_client is None:
        _whatsapp_client = WhatsAppClient(get_whatsapp_config())
    return _whatsapp_client


def get_command_processor(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    assistant: Annotated[ChatService, Depends(get_chat_service)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> CommandProcessor:
    settings = get_settings()
    return CommandProcessor(
        petitions=PetitionRepository(session),
        assistant=assistant,
        sessions=sessions,
        max_listed_petitions=settings.max_listed_petitions,
        website_url=settings.website_url,
        max_history_entries=settings.max_history_entries,
    )


# ----------------------------
# Webhook
# ----------------------------

@router.get("/webhook", response_class=PlainTextResponse)
async def verify_webhook(
    config: Annotated[WhatsAppConfig, Depends(get_whatsapp_config)],
    mode: Annotated[str | None, Query(alias="hub.mode")] = None,
    token: Annotated[str | None, Query(alias="hub.verify_token")] = None,
    challenge: Annotated[str | None, Query(alias="hub.challenge")] = None,
) -> Response:
    verified = (
        mode == "subscribe"
        and bool(config.verify_token)
        and token is not None
        and hmac.compare_digest(token, config.verify_token)
    )
    if not verified:
        logger.warning("WhatsApp webhook verification failed", extra={"mode": mode})
        return PlainTextResponse("Forbidden", status_code=status.HTTP_403_FORBIDDEN)

    logger.info("WhatsApp webhook verified")
    return PlainTextResponse(challenge or "", status_code=status.HTTP_200_OK)


async def _handle_message(
    message: InboundMessage,
    processor: CommandProcessor,
    client: WhatsAppClient,
) -> None:
    if message.is_text:
        logger.info("WhatsApp message received", extra={"sender_id": message.sender})
        reply = await processor.handle(message.sender, message.text or "")
    elif message.is_media:
        reply = MEDIA_REPLY
    else:
        logger.debug("Ignoring WhatsApp message", extra={"message_type": message.type})
        return

    try:
        await client.send_text(message.sender, reply)
    except WhatsAppSendError as e:
        logger.error(
            "Failed to deliver WhatsApp reply",
            extra={"sender_id": message.sender, "error": e.message},
        )


@router.post("/webhook", status_code=status.HTTP_200_OK)
async def receive_webhook(
    request: Request,
    processor: Annotated[CommandProcessor, Depends(get_command_processor)],
    client: Annotated[WhatsAppClient, Depends(get_whatsapp_client)],
) -> dict[str, bool]:
    try:
        payload = await request.json()
    except Exception:
        logger.warning("Unreadable WhatsApp webhook body (ACKing 200)")
        return {"success": True}

    for message in parse_inbound_messages(payload):
        token = correlation_id_var.set(message.message_id or message.sender)
        try:
            await _handle_message(message, processor, client)
        except Exception:
            logger.exception("Failed to process WhatsApp message (ACKing 200)")
        finally:
            correlation_id_var.reset(token)

    return {"success": True}


# ----------------------------
# Outbound send
# ----------------------------

class SendMessagePayload(BaseModel):
    to: str | None = None
    message: str | None = None
    type: Literal["text", "template"] = "text"
    template_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("template_name", "templateName"),
    )
    template_params: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("template_params", "templateParams"),
    )


class SendMessageResult(BaseModel):
    success: bool = True
    message_id: str | None = None


@router.post("/send", response_model=SendMessageResult)
async def send_message(
    payload: SendMessagePayload,
    client: Annotated[WhatsAppClient, Depends(get_whatsapp_client)],
) -> Any:
    if not payload.to:
        raise HTTPException(status_code=400, detail="Phone number (to) is required")
    if payload.type == "text" and not payload.message:
        raise HTTPException(status_code=400, detail="Message is required for text type")
    if payload.type == "template" and not payload.template_name:
        raise HTTPException(status_code=400, detail="Template name is required for template type")

    try:
        if payload.type == "template":
            message_id = await client.send_template(
                payload.to, payload.template_name, payload.template_params
            )
        else:
            message_id = await client.send_text(payload.to, payload.message)
    except WhatsAppSendError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e

    return SendMessageResult(success=True, message_id=message_id)

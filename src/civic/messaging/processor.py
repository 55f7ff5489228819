"""
Conversational command processor.

One inbound text message in, exactly one reply string out. Commands are
routed through the parser chain in `civic.messaging.commands`; anything
unrecognized goes to the chat assistant with the sender's history.
"""

from __future__ import annotations

from typing import Protocol

from civic.assistant.models import ChatResult
from civic.messaging.commands import (
    INVALID_SIGN_FORMAT_REPLY,
    PETITIONS_UNAVAILABLE_REPLY,
    ListPetitionsCommand,
    SignPetitionCommand,
    format_petition_list,
    parse_command,
    sign_error_reply,
    sign_success_reply,
)
from civic.messaging.history import ConversationTurn, SessionStore, trim_history
from civic.petitions.interface import PetitionError, PetitionStore
from civic.shared.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_LISTED_PETITIONS = 8
DEFAULT_MAX_HISTORY_ENTRIES = 20
GENERIC_SIGN_FAILURE = "An unexpected error occurred. Please try again later."


class Assistant(Protocol):
    async def respond(self, message: str | None, history=()) -> ChatResult:
        ...


def assistant_failure_reply(website_url: str) -> str:
    return (
        "Sorry, I encountered an error. Please try again or visit our website "
        f"at {website_url} for assistance."
    )


class CommandProcessor:
    def __init__(
        self,
        petitions: PetitionStore,
        assistant: Assistant,
        sessions: SessionStore,
        max_listed_petitions: int = DEFAULT_MAX_LISTED_PETITIONS,
        website_url: str = "dcpzim.com",
        max_history_entries: int = DEFAULT_MAX_HISTORY_ENTRIES,
    ) -> None:
        self._petitions = petitions
        self._assistant = assistant
        self._sessions = sessions
        self._max_listed_petitions = max_listed_petitions
        self._website_url = website_url
        self._max_history_entries = max_history_entries

    async def handle(self, sender_id: str, text: str) -> str:
        """Produce the reply for one message. Never raises."""
        try:
            command = parse_command(text)
            if isinstance(command, ListPetitionsCommand):
                return await self._list_petitions()
            if isinstance(command, SignPetitionCommand):
                return await self._sign_petition(command)
            return await self._converse(sender_id, text)
        except Exception:
            logger.exception("Message handling failed", extra={"sender_id": sender_id})
            return assistant_failure_reply(self._website_url)

    async def _list_petitions(self) -> str:
        try:
            petitions = await self._petitions.list_active_petitions()
        except Exception:
            logger.exception("Failed to load active petitions")
            return PETITIONS_UNAVAILABLE_REPLY

        logger.info("Listing petitions", extra={"petition_count": len(petitions)})
        return format_petition_list(petitions, limit=self._max_listed_petitions)

    async def _sign_petition(self, command: SignPetitionCommand) -> str:
        if not command.is_valid():
            return INVALID_SIGN_FORMAT_REPLY

        try:
            await self._petitions.sign_petition(command.petition_id, command.to_signature())
        except PetitionError as e:
            logger.info(
                "Petition signature rejected",
                extra={"petition_id": command.petition_id, "reason": e.message},
            )
            return sign_error_reply(e.message)
        except Exception:
            logger.exception("Petition signing failed", extra={"petition_id": command.petition_id})
            return sign_error_reply(GENERIC_SIGN_FAILURE)

        return sign_success_reply(command.full_name)

    async def _converse(self, sender_id: str, text: str) -> str:
        history = self._sessions.get(sender_id)
        prior = list(history)
        history.append(ConversationTurn(role="user", content=text))

        try:
            result = await self._assistant.respond(text, prior)
        except Exception:
            logger.exception("Assistant call failed", extra={"sender_id": sender_id})
            return assistant_failure_reply(self._website_url)

        if not result.success or not result.response:
            logger.warning(
                "Assistant returned no reply",
                extra={"sender_id": sender_id, "error": result.error},
            )
            return assistant_failure_reply(self._website_url)

        history.append(ConversationTurn(role="assistant", content=result.response))
        self._sessions.put(sender_id, trim_history(history, self._max_history_entries))
        return result.response

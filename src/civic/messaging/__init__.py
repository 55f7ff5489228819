"""
Messaging channel: command grammar, conversation history and command processor.
"""

from civic.messaging.commands import (
    ListPetitionsCommand,
    SignPetitionCommand,
    parse_command,
)
from civic.messaging.history import ConversationTurn, InMemorySessionStore, SessionStore
from civic.messaging.processor import CommandProcessor

__all__ = [
    "ListPetitionsCommand",
    "SignPetitionCommand",
    "parse_command",
    "ConversationTurn",
    "InMemorySessionStore",
    "SessionStore",
    "CommandProcessor",
]

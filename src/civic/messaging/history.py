"""
Per-sender conversation history.

The processor talks to a `SessionStore`; the in-memory implementation keeps
histories for the lifetime of the process. Concurrent turns from the same
sender are last-write-wins (no locking).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class ConversationTurn:
    role: Role
    content: str


History = list[ConversationTurn]


def trim_history(history: History, max_entries: int) -> History:
    """Keep the newest `max_entries` turns (oldest evicted first)."""
    if max_entries <= 0:
        return []
    if len(history) <= max_entries:
        return list(history)
    return history[-max_entries:]


class SessionStore(Protocol):
    def get(self, sender_id: str) -> History:
        """History for a sender; empty when none is stored."""
        ...

    def put(self, sender_id: str, history: History) -> None:
        ...


class InMemorySessionStore:
    """Process-lifetime history map with a per-sender length cap."""

    def __init__(self, max_entries: int = 20) -> None:
        self._max_entries = max_entries
        self._histories: dict[str, History] = {}

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def get(self, sender_id: str) -> History:
        # copy: callers mutate freely before put()
        return list(self._histories.get(sender_id, ()))

    def put(self, sender_id: str, history: History) -> None:
        self._histories[sender_id] = trim_history(history, self._max_entries)

    def clear(self, sender_id: str | None = None) -> None:
        if sender_id is None:
            self._histories.clear()
        else:
            self._histories.pop(sender_id, None)

"""
Inbound webhook payload parsing for the WhatsApp Cloud API.

Meta nests messages as entry[].changes[].value.messages[]; anything that
does not match that shape is skipped rather than rejected.
"""

from dataclasses import dataclass
from typing import Any, Iterator

MEDIA_TYPES = frozenset({"image", "audio", "video"})


@dataclass(frozen=True)
class InboundMessage:
    sender: str
    message_id: str | None
    type: str
    text: str | None = None

    @property
    def is_text(self) -> bool:
        return self.type == "text"

    @property
    def is_media(self) -> bool:
        return self.type in MEDIA_TYPES


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def iter_inbound_messages(payload: Any) -> Iterator[InboundMessage]:
    if not isinstance(payload, dict):
        return

    for entry in _as_list(payload.get("entry")):
        if not isinstance(entry, dict):
            continue
        for change in _as_list(entry.get("changes")):
            value = change.get("value") if isinstance(change, dict) else None
            if not isinstance(value, dict):
                continue
            for message in _as_list(value.get("messages")):
                if not isinstance(message, dict) or not message.get("from"):
                    continue
                text = None
                body = message.get("text")
                if isinstance(body, dict) and isinstance(body.get("body"), str):
                    text = body["body"]
                yield InboundMessage(
                    sender=str(message["from"]),
                    message_id=message.get("id"),
                    type=str(message.get("type") or ""),
                    text=text,
                )


def parse_inbound_messages(payload: Any) -> list[InboundMessage]:
    return list(iter_inbound_messages(payload))

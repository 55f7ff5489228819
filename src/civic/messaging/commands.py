"""
Text command grammar for the messaging channel.

Each parser returns a typed command or None. `parse_command` tries them in
priority order (list, then sign); None means free-form conversation.

    PETITIONS | LIST PETITIONS
    SIGN|<petitionId>|<fullName>|<email>|<anonymous?>
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

from civic.petitions.interface import PetitionSummary, SignatureRequest

LIST_SYNONYMS = frozenset({"PETITIONS", "LIST PETITIONS"})
SIGN_KEYWORD = "SIGN"
ANONYMOUS_TRUTHY = frozenset({"true", "yes", "y", "1", "anon", "anonymous"})

SIGN_USAGE = "SIGN|petitionId|Your Full Name|your@email.com|anonymous(optional)"

INVALID_SIGN_FORMAT_REPLY = f"Invalid sign format.\n\nUse:\n{SIGN_USAGE}"
PETITIONS_UNAVAILABLE_REPLY = "Sorry, I could not load petitions right now. Please try again later."
NO_ACTIVE_PETITIONS_REPLY = "There are no active petitions right now. Please check back later."


@dataclass(frozen=True)
class ListPetitionsCommand:
    pass


@dataclass(frozen=True)
class SignPetitionCommand:
    petition_id: str
    full_name: str
    email: str
    anonymous: bool = False

    def is_valid(self) -> bool:
        return bool(self.petition_id and self.full_name and self.email and "@" in self.email)

    def to_signature(self) -> SignatureRequest:
        return SignatureRequest(name=self.full_name, email=self.email, anonymous=self.anonymous)


Command = Union[ListPetitionsCommand, SignPetitionCommand]
CommandParser = Callable[[str], Optional[Command]]


def parse_list_command(text: str) -> ListPetitionsCommand | None:
    if (text or "").strip().upper() in LIST_SYNONYMS:
        return ListPetitionsCommand()
    return None


def parse_anonymous_flag(value: str | None) -> bool:
    return (value or "").strip().lower() in ANONYMOUS_TRUTHY


def parse_sign_command(text: str) -> SignPetitionCommand | None:
    """Structural parse of a sign command; casing of the fields is preserved.

    Field validation is separate (`SignPetitionCommand.is_valid`) so a
    structurally recognized but invalid command can get a format-error reply.
    """
    parts = [part.strip() for part in (text or "").split("|")]
    if len(parts) < 4 or parts[0].upper() != SIGN_KEYWORD:
        return None

    return SignPetitionCommand(
        petition_id=parts[1],
        full_name=parts[2],
        email=parts[3],
        anonymous=parse_anonymous_flag(parts[4]) if len(parts) > 4 else False,
    )


# Evaluation order matters: list is an exact match, sign a prefix match.
COMMAND_PARSERS: tuple[CommandParser, ...] = (
    parse_list_command,
    parse_sign_command,
)


def parse_command(text: str, parsers: Sequence[CommandParser] = COMMAND_PARSERS) -> Command | None:
    for parser in parsers:
        command = parser(text)
        if command is not None:
            return command
    return None


# ----------------------------
# Replies
# ----------------------------

def format_petition_list(petitions: Sequence[PetitionSummary], limit: int = 8) -> str:
    if not petitions:
        return NO_ACTIVE_PETITIONS_REPLY

    items = [
        f"{i}. {p.title}\nID: {p.id}"
        for i, p in enumerate(petitions[:limit], start=1)
    ]
    return "Active petitions:\n\n" + "\n\n".join(items) + f"\n\nTo sign, send:\n{SIGN_USAGE}"


def sign_success_reply(name: str) -> str:
    return f"Thank you, {name}. Your petition signature has been recorded successfully."


def sign_error_reply(message: str) -> str:
    return f"Could not sign petition: {message}\n\nTip: send PETITIONS to get valid petition IDs."

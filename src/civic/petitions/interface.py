"""
Petition store interface consumed by the messaging command processor.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class PetitionSummary:
    id: str
    title: str


@dataclass(frozen=True)
class SignatureRequest:
    name: str
    email: str
    anonymous: bool = False


class PetitionError(Exception):
    """Base exception for petition store failures.

    The message is safe to show to the person signing.
    """

    def __init__(self, message: str, petition_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.petition_id = petition_id

    def __str__(self) -> str:
        return self.message


class PetitionNotFoundError(PetitionError):
    def __init__(self, petition_id: str | None = None) -> None:
        super().__init__("Petition not found", petition_id=petition_id)


class PetitionClosedError(PetitionError):
    def __init__(self, petition_id: str | None = None) -> None:
        super().__init__("This petition is no longer accepting signatures", petition_id=petition_id)


class DuplicateSignatureError(PetitionError):
    def __init__(self, petition_id: str | None = None) -> None:
        super().__init__("You have already signed this petition", petition_id=petition_id)


@runtime_checkable
class PetitionStore(Protocol):
    async def list_active_petitions(self) -> list[PetitionSummary]:
        """Petitions currently open for signatures."""
        ...

    async def sign_petition(self, petition_id: str, signature: SignatureRequest) -> None:
        """Record a signature.

        Raises:
            PetitionError: Unknown or closed petition, or duplicate signature.
        """
        ...

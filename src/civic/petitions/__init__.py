"""
Petitions: store interface, ORM models and repository.
"""

from civic.petitions.interface import (
    DuplicateSignatureError,
    PetitionClosedError,
    PetitionError,
    PetitionNotFoundError,
    PetitionStore,
    PetitionSummary,
    SignatureRequest,
)

__all__ = [
    "DuplicateSignatureError",
    "PetitionClosedError",
    "PetitionError",
    "PetitionNotFoundError",
    "PetitionStore",
    "PetitionSummary",
    "SignatureRequest",
]

"""
Petition repository for database operations.
"""

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from civic.petitions.interface import (
    DuplicateSignatureError,
    PetitionClosedError,
    PetitionNotFoundError,
    PetitionSummary,
    SignatureRequest,
)
from civic.petitions.models import Petition, PetitionSignature, PetitionStatus
from civic.shared.logging import get_logger

logger = get_logger(__name__)


class PetitionRepository:
    """SQLAlchemy-backed petition store."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async database session.
        """
        self._session = session

    async def list_active_petitions(self) -> list[PetitionSummary]:
        """Active, public petitions, newest first."""
        stmt = (
            select(Petition.id, Petition.title)
            .where(Petition.status == PetitionStatus.ACTIVE, Petition.is_public.is_(True))
            .order_by(Petition.created_at.desc(), Petition.id)
        )
        result = await self._session.execute(stmt)
        return [PetitionSummary(id=row.id, title=row.title) for row in result.all()]

    async def count_signatures(self, petition_id: str) -> int:
        stmt = select(func.count(PetitionSignature.id)).where(
            PetitionSignature.petition_id == petition_id
        )
        result = await self._session.execute(stmt)
        count = result.scalar()
        return count if count is not None else 0

    async def sign_petition(self, petition_id: str, signature: SignatureRequest) -> None:
        """Record one signature and bump the petition's counter.

        Raises:
            PetitionNotFoundError: Unknown petition id.
            PetitionClosedError: Petition is not active.
            DuplicateSignatureError: Email already signed this petition.
        """
        petition = await self._session.get(Petition, petition_id)
        if petition is None:
            raise PetitionNotFoundError(petition_id)
        if petition.status != PetitionStatus.ACTIVE:
            raise PetitionClosedError(petition_id)

        email = signature.email.strip().lower()
        existing = await self._session.execute(
            select(PetitionSignature.id).where(
                PetitionSignature.petition_id == petition_id,
                PetitionSignature.email == email,
            )
        )
        if existing.first() is not None:
            raise DuplicateSignatureError(petition_id)

        self._session.add(
            PetitionSignature(
                petition_id=petition_id,
                name=signature.name.strip(),
                email=email,
                anonymous=signature.anonymous,
            )
        )
        await self._session.execute(
            update(Petition)
            .where(Petition.id == petition_id)
            .values(signature_count=Petition.signature_count + 1)
        )

        try:
            await self._session.commit()
        except IntegrityError:
            # concurrent signature with the same email won the race
            await self._session.rollback()
            raise DuplicateSignatureError(petition_id)

        logger.info(
            "Petition signed",
            extra={"petition_id": petition_id, "anonymous": signature.anonymous},
        )

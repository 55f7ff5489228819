"""
SQLAlchemy models for petitions and their signatures.
"""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from civic.shared.database import Base


class PetitionStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"


class Petition(Base):
    __tablename__ = "petitions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: uuid4().hex)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[PetitionStatus] = mapped_column(
        SQLEnum(PetitionStatus, name="petition_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PetitionStatus.ACTIVE,
        index=True,
    )
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    signature_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class PetitionSignature(Base):
    __tablename__ = "petition_signatures"
    __table_args__ = (
        UniqueConstraint("petition_id", "email", name="uq_petition_signature_email"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: uuid4().hex)
    petition_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("petitions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # stored lower-cased
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    signed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

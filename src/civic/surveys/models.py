"""
SQLAlchemy models for surveys, their questions and submitted responses.
"""

from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from civic.shared.database import Base
from civic.surveys.domain import QuestionType, SurveyStatus


def _new_id() -> str:
    return uuid4().hex


class SurveyRecord(Base):
    __tablename__ = "surveys"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[SurveyStatus] = mapped_column(
        SQLEnum(SurveyStatus, name="survey_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SurveyStatus.DRAFT,
    )
    show_results: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    allow_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    questions: Mapped[list["SurveyQuestionRecord"]] = relationship(
        back_populates="survey",
        cascade="all, delete-orphan",
        order_by="SurveyQuestionRecord.order",
        lazy="selectin",
    )


class SurveyQuestionRecord(Base):
    __tablename__ = "survey_questions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    survey_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("surveys.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[QuestionType] = mapped_column(
        SQLEnum(QuestionType, name="survey_question_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    options: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    min_rating: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_rating: Mapped[int] = mapped_column(Integer, nullable=False, default=5)

    survey: Mapped[SurveyRecord] = relationship(back_populates="questions")


class SurveyResponseRecord(Base):
    __tablename__ = "survey_responses"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    survey_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("surveys.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    respondent_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    # question id -> raw value (str, list[str] or number)
    answers: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

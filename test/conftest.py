"""
Pytest configuration and shared fixtures.
"""
from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import civic.petitions.models  # noqa: F401
import civic.surveys.models  # noqa: F401
from civic.assistant.models import ChatResult
from civic.config import Settings
from civic.petitions.interface import PetitionSummary, SignatureRequest
from civic.shared.database import Base


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        app_env="dev",
        debug=True,
        database_url="sqlite+aiosqlite:///:memory:",
        admin_api_token="admin-secret",
        website_url="dcpzim.com",
        openai_api_key="",
    )


@pytest_asyncio.fixture
async def db_engine(test_settings: Settings) -> AsyncGenerator[Any, None]:
    """Create test database engine."""
    engine = create_async_engine(test_settings.database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: Any) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    session_factory = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------

class FakePetitionStore:
    def __init__(
        self,
        petitions: list[PetitionSummary] | None = None,
        list_error: Exception | None = None,
        sign_error: Exception | None = None,
    ) -> None:
        self.petitions = petitions or []
        self.list_error = list_error
        self.sign_error = sign_error
        self.list_calls = 0
        self.signed: list[tuple[str, SignatureRequest]] = []

    async def list_active_petitions(self) -> list[PetitionSummary]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return list(self.petitions)

    async def sign_petition(self, petition_id: str, signature: SignatureRequest) -> None:
        if self.sign_error is not None:
            raise self.sign_error
        self.signed.append((petition_id, signature))


class FakeAssistant:
    """Echoes the message back, or fails as configured."""

    def __init__(self, reply: str | None = None, error: str | None = None, raises: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.raises = raises
        self.calls: list[tuple[str | None, list[Any]]] = []

    async def respond(self, message, history=()) -> ChatResult:
        self.calls.append((message, list(history)))
        if self.raises is not None:
            raise self.raises
        if self.error is not None:
            return ChatResult(success=False, error=self.error)
        if not message or not message.strip():
            return ChatResult(success=False, error="Message is required")
        return ChatResult(success=True, response=self.reply or f"echo: {message}")


@pytest.fixture
def petition_store() -> FakePetitionStore:
    return FakePetitionStore(
        petitions=[
            PetitionSummary(id="p1", title="Fix the roads"),
            PetitionSummary(id="p2", title="Clean water for all"),
        ]
    )


@pytest.fixture
def assistant() -> FakeAssistant:
    return FakeAssistant()

"""Pytest configuration for all tests."""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from codeflow.core.config import Settings
from codeflow.domain.entities.identity import StaticIdentityProvider
from codeflow.infrastructure.persistence.database import DatabaseManager
from codeflow.infrastructure.persistence.document_store import DocumentStore
from codeflow.infrastructure.persistence.repositories import SnippetRepository


class SteppingClock:
    """Clock that advances by a fixed step on every call.

    Gives every store write a distinct, predictable timestamp.
    """

    def __init__(
        self,
        start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc),
        step: timedelta = timedelta(seconds=1),
    ) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + self.step
        return current


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="testing",
        database_url="sqlite+aiosqlite:///:memory:",
        autosave_debounce_seconds=0.05,
        autosave_status_reset_seconds=0.05,
    )


@pytest_asyncio.fixture
async def db(settings) -> AsyncGenerator[DatabaseManager, None]:
    """In-memory SQLite database with the documents table created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    manager = DatabaseManager(settings, engine=engine)
    await manager.create_tables()

    yield manager

    await manager.drop_tables()
    await manager.disconnect()


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def store(db, clock) -> DocumentStore:
    return DocumentStore(db, clock=clock)


@pytest.fixture
def alice() -> StaticIdentityProvider:
    return StaticIdentityProvider.for_user("alice")


@pytest.fixture
def bob() -> StaticIdentityProvider:
    return StaticIdentityProvider.for_user("bob")


@pytest.fixture
def repository(store, alice) -> SnippetRepository:
    """Snippet repository acting as alice."""
    return SnippetRepository(store, alice)


@pytest.fixture
def bob_repository(store, bob) -> SnippetRepository:
    return SnippetRepository(store, bob)

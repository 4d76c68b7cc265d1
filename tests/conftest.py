"""Shared test fixtures for all test groups."""

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

import galuxium.db.models  # noqa: F401
from galuxium.agent.completion_fake import CompletionFake
from galuxium.db.base import Base, engine_options
from galuxium.db.store import SqlArtifactStore
from galuxium.schemas.events import ProgressEvent
from galuxium.services.pipeline import PipelineOrchestrator


@pytest.fixture
async def engine() -> AsyncEngine:
    """In-memory SQLite engine with all tables created."""
    url = "sqlite+aiosqlite:///:memory:"
    engine = create_async_engine(url, **engine_options(url))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def store(session_factory) -> SqlArtifactStore:
    return SqlArtifactStore(session_factory)


@pytest.fixture
def completion_fake():
    """Fresh CompletionFake with happy_path scenario (default)."""
    return CompletionFake(scenario="happy_path")


@pytest.fixture
def orchestrator(store, completion_fake) -> PipelineOrchestrator:
    return PipelineOrchestrator(store=store, client=completion_fake, embedder=completion_fake)


class EventSink:
    """Collects emitted ProgressEvents in order."""

    def __init__(self):
        self.events: list[ProgressEvent] = []

    async def __call__(self, event: ProgressEvent) -> None:
        self.events.append(event)

    @property
    def sub_phases(self) -> list[str | None]:
        return [e.sub_phase for e in self.events]


@pytest.fixture
def sink() -> EventSink:
    return EventSink()

"""ArtifactStore: persistence interface for ideas, agent results, and the progress log.

`ArtifactStore` is the protocol the pipeline depends on. `SqlArtifactStore`
implements it over the SQLAlchemy async session factory; every SQLAlchemy
failure surfaces as StoreError so callers only deal with the app taxonomy.
"""

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Protocol, runtime_checkable

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from galuxium.core.exceptions import IdeaConflict, IdeaNotFound, StoreError
from galuxium.db.models import (
    BrandingResult,
    DnaAggregate,
    Idea,
    LaunchResult,
    OrchestrationLog,
    StartupDoc,
    TechnicalResult,
    ValidationResult,
)
from galuxium.schemas.agents import AgentKind
from galuxium.schemas.events import ProgressEvent
from galuxium.schemas.intent import IntentRecord

logger = structlog.get_logger(__name__)

RESULT_MODELS: dict[AgentKind, type] = {
    AgentKind.VALIDATION: ValidationResult,
    AgentKind.BRANDING: BrandingResult,
    AgentKind.TECHNICAL: TechnicalResult,
    AgentKind.LAUNCH: LaunchResult,
}


def clip_to_column(column, value: str) -> str | None:
    """Empty text becomes NULL; longer text is cut to the column's declared length."""
    if not value:
        return None
    length = getattr(column.type, "length", None)
    return value[:length] if length else value


def as_uuid(value: str | uuid.UUID) -> uuid.UUID:
    """Coerce an idea id to UUID. Malformed ids can never match a row."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, AttributeError) as e:
        raise IdeaNotFound(str(value)) from e


@runtime_checkable
class ArtifactStore(Protocol):
    """Row store keyed by idea id. Inserts are append-only; selects are timestamp-ordered."""

    async def find_idea_by_hash(self, owner_id: str, dna_hash: str) -> Idea | None: ...

    async def insert_idea(self, owner_id: str, idea_text: str, dna_hash: str, intent: IntentRecord) -> Idea: ...

    async def get_idea(self, idea_id: str | uuid.UUID) -> Idea: ...

    async def list_ideas(self, owner_id: str, limit: int = 50) -> list[Idea]: ...

    async def insert_agent_result(
        self, kind: AgentKind, idea_id: str | uuid.UUID, payload: dict[str, Any], raw_output: str
    ) -> uuid.UUID: ...

    async def list_agent_results(self, kind: AgentKind, idea_id: str | uuid.UUID) -> list[Any]: ...

    async def append_progress(self, idea_id: str | uuid.UUID, owner_id: str, event: ProgressEvent) -> None: ...

    async def list_progress(self, idea_id: str | uuid.UUID) -> list[OrchestrationLog]: ...

    async def insert_dna(
        self, idea_id: str | uuid.UUID, outputs: dict[str, dict | None], failed_agents: list[str]
    ) -> DnaAggregate: ...

    async def latest_dna(self, idea_id: str | uuid.UUID) -> DnaAggregate | None: ...

    async def insert_startup_doc(
        self,
        idea_id: str | uuid.UUID,
        source: str,
        title: str,
        description: str,
        summary: str,
        embedding: list[float] | None,
    ) -> None: ...


class SqlArtifactStore:
    """ArtifactStore over SQLAlchemy async sessions (Postgres in prod, SQLite in tests)."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self.session_factory() as session:
                yield session
        except (IdeaNotFound, IdeaConflict):
            raise
        except SQLAlchemyError as e:
            logger.warning("store_operation_failed", operation=operation, error=str(e), error_type=type(e).__name__)
            raise StoreError(f"{operation} failed: {e}") from e

    # ------------------------------------------------------------------
    # Ideas
    # ------------------------------------------------------------------

    async def find_idea_by_hash(self, owner_id: str, dna_hash: str) -> Idea | None:
        async with self._session("find_idea_by_hash") as session:
            result = await session.execute(
                select(Idea).where(Idea.user_id == owner_id, Idea.dna_hash == dna_hash)
            )
            return result.scalar_one_or_none()

    async def insert_idea(self, owner_id: str, idea_text: str, dna_hash: str, intent: IntentRecord) -> Idea:
        """Insert a new idea row.

        Raises:
            IdeaConflict: (owner_id, dna_hash) already exists
            StoreError: Any other write failure
        """
        columns = Idea.__table__.c
        async with self._session("insert_idea") as session:
            idea = Idea(
                user_id=owner_id,
                idea_text=idea_text,
                dna_hash=dna_hash,
                title=clip_to_column(columns.title, intent.title),
                domain=clip_to_column(columns.domain, intent.domain),
                problem_statement=clip_to_column(columns.problem_statement, intent.problem_statement),
                user_type=clip_to_column(columns.user_type, intent.user_type),
                product_type=intent.product_type.value,
                urgency=intent.urgency.value,
                intent=intent.model_dump(mode="json", exclude_none=True),
            )
            session.add(idea)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise IdeaConflict(f"Idea already exists for owner {owner_id}") from e
            await session.refresh(idea)
            return idea

    async def get_idea(self, idea_id: str | uuid.UUID) -> Idea:
        key = as_uuid(idea_id)
        async with self._session("get_idea") as session:
            idea = await session.get(Idea, key)
            if idea is None:
                raise IdeaNotFound(str(idea_id))
            return idea

    async def list_ideas(self, owner_id: str, limit: int = 50) -> list[Idea]:
        async with self._session("list_ideas") as session:
            result = await session.execute(
                select(Idea).where(Idea.user_id == owner_id).order_by(Idea.created_at.desc()).limit(limit)
            )
            return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Agent results
    # ------------------------------------------------------------------

    async def insert_agent_result(
        self, kind: AgentKind, idea_id: str | uuid.UUID, payload: dict[str, Any], raw_output: str
    ) -> uuid.UUID:
        model = RESULT_MODELS[AgentKind(kind)]
        async with self._session(f"insert_{kind}_result") as session:
            row = model(idea_id=as_uuid(idea_id), raw_report=payload, raw_output=raw_output, **payload)
            session.add(row)
            await session.commit()
            return row.id

    async def list_agent_results(self, kind: AgentKind, idea_id: str | uuid.UUID) -> list[Any]:
        model = RESULT_MODELS[AgentKind(kind)]
        async with self._session(f"list_{kind}_results") as session:
            result = await session.execute(
                select(model).where(model.idea_id == as_uuid(idea_id)).order_by(model.created_at)
            )
            return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Progress log
    # ------------------------------------------------------------------

    async def append_progress(self, idea_id: str | uuid.UUID, owner_id: str, event: ProgressEvent) -> None:
        async with self._session("append_progress") as session:
            session.add(
                OrchestrationLog(
                    idea_id=as_uuid(idea_id),
                    user_id=owner_id,
                    agent=event.phase,
                    sub_phase=event.sub_phase,
                    message=event.message or event.error or "",
                    progress=event.progress,
                    file_url=event.file_url,
                    error=event.error,
                    created_at=event.timestamp,
                )
            )
            await session.commit()

    async def list_progress(self, idea_id: str | uuid.UUID) -> list[OrchestrationLog]:
        async with self._session("list_progress") as session:
            result = await session.execute(
                select(OrchestrationLog)
                .where(OrchestrationLog.idea_id == as_uuid(idea_id))
                .order_by(OrchestrationLog.created_at, OrchestrationLog.id)
            )
            return list(result.scalars().all())

    # ------------------------------------------------------------------
    # DNA aggregate + semantic docs
    # ------------------------------------------------------------------

    async def insert_dna(
        self, idea_id: str | uuid.UUID, outputs: dict[str, dict | None], failed_agents: list[str]
    ) -> DnaAggregate:
        async with self._session("insert_dna") as session:
            dna = DnaAggregate(
                idea_id=as_uuid(idea_id),
                validation=outputs.get("validation"),
                branding=outputs.get("branding"),
                tech=outputs.get("tech"),
                launch=outputs.get("launch"),
                failed_agents=failed_agents,
            )
            session.add(dna)
            await session.commit()
            await session.refresh(dna)
            return dna

    async def latest_dna(self, idea_id: str | uuid.UUID) -> DnaAggregate | None:
        async with self._session("latest_dna") as session:
            result = await session.execute(
                select(DnaAggregate)
                .where(DnaAggregate.idea_id == as_uuid(idea_id))
                .order_by(DnaAggregate.created_at.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def insert_startup_doc(
        self,
        idea_id: str | uuid.UUID,
        source: str,
        title: str,
        description: str,
        summary: str,
        embedding: list[float] | None,
    ) -> None:
        async with self._session("insert_startup_doc") as session:
            session.add(
                StartupDoc(
                    idea_id=as_uuid(idea_id),
                    source=source,
                    title=title,
                    description=description,
                    summary=summary,
                    doc_metadata={"source": source, "idea_id": str(idea_id)},
                    embedding=embedding,
                )
            )
            await session.commit()

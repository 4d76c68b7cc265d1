"""Generation agent contract and the shared step sequence.

Every agent variant (BizMind, BrandPulse, CodeWeaver, LaunchLens) satisfies the
`GenerationAgent` protocol and owns its own prompt, payload schema, result
table, and progress labels. `run_generation_steps` drives the fixed sequence:

    fetch idea -> prep prompt -> call model -> parse JSON -> store result
    -> best-effort summary index -> complete

Each failure path emits its progress event before raising AgentError.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import structlog
from pydantic import BaseModel, ValidationError

from galuxium.agent.completion import CompletionClient, Embedder
from galuxium.agent.llm_helpers import extract_json
from galuxium.core.exceptions import AgentError, IdeaNotFound, JsonExtractionError, ProviderError, StoreError
from galuxium.db.models import Idea
from galuxium.db.store import ArtifactStore
from galuxium.schemas.agents import AgentKind
from galuxium.schemas.events import ProgressEvent

logger = structlog.get_logger(__name__)

EmitFn = Callable[[ProgressEvent], Awaitable[None]]


@dataclass(frozen=True)
class AgentDeps:
    """Collaborators shared by all agents of one pipeline run."""

    store: ArtifactStore
    client: CompletionClient
    embedder: Embedder | None = None


@dataclass(frozen=True)
class StepLabels:
    """Human-readable progress messages for one agent's sub-phases."""

    fetch: str = "Fetched idea from DB"
    prep: str = "Preparing prompt & context..."
    analysis: str = "Sending prompt to model..."
    parse: str = "Parsing model output..."
    store: str = "Storing results..."
    index: str = "Indexing summary for search..."
    complete: str = "Complete"


@runtime_checkable
class GenerationAgent(Protocol):
    """Uniform agent contract: run(idea_id, emit) -> payload dict, raises AgentError."""

    name: str
    kind: AgentKind
    payload_model: type[BaseModel]
    labels: StepLabels

    def build_prompt(self, idea: Idea) -> tuple[str, str]:
        """Return (system, user) prompts embedding the idea text and intent."""
        ...

    def summarize(self, idea: Idea, payload: dict[str, Any]) -> str | None:
        """Return a text summary to index for semantic search, or None to skip."""
        ...

    async def run(self, idea_id: str, emit: EmitFn) -> dict[str, Any]: ...


def step_event(
    agent: GenerationAgent,
    sub_phase: str,
    message: str,
    progress: int | None,
) -> ProgressEvent:
    return ProgressEvent(phase=agent.name, sub_phase=sub_phase, message=message, progress=progress)


def idea_context(idea: Idea) -> str:
    """Prompt block with the idea text and the classified intent fields."""
    return (
        f"Startup Idea:\n{idea.idea_text or 'Untitled'}\n\n"
        f"Problem:\n{idea.problem_statement or 'N/A'}\n\n"
        f"Domain:\n{idea.domain or 'Unknown'}\n\n"
        f"Target user:\n{idea.user_type or 'Unknown'}\n\n"
        f"Product type: {idea.product_type or 'Other'}\n"
        f"Urgency: {idea.urgency or 'medium'}\n"
    )


async def run_generation_steps(
    agent: GenerationAgent,
    deps: AgentDeps,
    idea_id: str,
    emit: EmitFn,
) -> dict[str, Any]:
    """Execute one agent end to end.

    Args:
        agent: Variant providing name/kind/prompt/schema/labels
        deps: Store, completion client, optional embedder
        idea_id: Idea to generate for
        emit: Progress callback (stream + durable log in the orchestrator)

    Returns:
        The validated payload as a JSON-ready dict

    Raises:
        AgentError: reason is one of "not_found", "store", "provider", "parse"
    """
    kind = agent.kind.value
    log = logger.bind(agent=agent.name, idea_id=str(idea_id))

    # 1. Fetch idea
    try:
        idea = await deps.store.get_idea(idea_id)
    except (IdeaNotFound, StoreError) as e:
        reason = "not_found" if isinstance(e, IdeaNotFound) else "store"
        await emit(step_event(agent, "error", f"Failed to fetch idea: {e}", 5))
        log.warning("agent_idea_fetch_failed", reason=reason, error=str(e))
        raise AgentError(kind, reason, f"Failed to fetch idea: {e}") from e

    # 2-4. Prompt
    await emit(step_event(agent, "fetch", agent.labels.fetch, 5))
    system, user = agent.build_prompt(idea)
    await emit(step_event(agent, "prep", agent.labels.prep, 10))
    await emit(step_event(agent, "analysis", agent.labels.analysis, 25))

    # 5. Model call
    try:
        raw = await deps.client.complete(role=agent.name, system=system, user=user)
    except ProviderError as e:
        await emit(step_event(agent, "error", f"Model error: {e}", 30))
        log.warning("agent_model_call_failed", error=str(e))
        raise AgentError(kind, "provider", f"Model error: {e}") from e

    # 6. Parse + validate
    await emit(step_event(agent, "parse", agent.labels.parse, 55))
    try:
        payload = agent.payload_model.model_validate(extract_json(raw)).model_dump(mode="json")
    except (JsonExtractionError, ValidationError) as e:
        reason = str(e) if isinstance(e, JsonExtractionError) else "Model output did not match schema"
        await emit(step_event(agent, "parse_error", f"Failed to parse {agent.name} output: {reason}", 60))
        log.warning("agent_parse_failed", error=str(e), raw_length=len(raw))
        raise AgentError(kind, "parse", f"Failed to parse {agent.name} output") from e

    # 7. Persist
    await emit(step_event(agent, "store", agent.labels.store, 70))
    try:
        await deps.store.insert_agent_result(agent.kind, idea.id, payload, raw)
    except StoreError as e:
        await emit(step_event(agent, "db_error", f"DB insert error: {e}", 75))
        log.warning("agent_store_failed", error=str(e))
        raise AgentError(kind, "store", f"Failed to insert {kind} data") from e

    # 8. Best-effort semantic index
    summary = agent.summarize(idea, payload)
    if summary:
        await emit(step_event(agent, "index", agent.labels.index, 90))
        await index_summary(deps, agent, idea, summary)

    # 9. Done
    await emit(step_event(agent, "complete", agent.labels.complete, 100))
    log.info("agent_completed")
    return payload


async def index_summary(deps: AgentDeps, agent: GenerationAgent, idea: Idea, summary: str) -> None:
    """Embed a summary and store it as a startup doc. Never raises."""
    try:
        embedding = await deps.embedder.embed(summary) if deps.embedder is not None else None
        await deps.store.insert_startup_doc(
            idea_id=idea.id,
            source=agent.name,
            title=idea.title or idea.idea_text[:255] or "Untitled",
            description=summary[:2000],
            summary=summary,
            embedding=embedding,
        )
    except Exception as e:
        logger.warning(
            "summary_index_failed",
            agent=agent.name,
            idea_id=str(idea.id),
            error=str(e),
            error_type=type(e).__name__,
        )

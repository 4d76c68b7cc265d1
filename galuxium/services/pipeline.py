"""PipelineOrchestrator: idea -> intent -> idea record -> four agents -> DNA aggregate.

State machine:

    Classifying -> IdeaResolving -> RunningAgent (x4, fixed order) -> Aggregating -> Done

Classifying and IdeaResolving failures are fatal (Aborted): one error event,
no DNA aggregate. Agent failures are local: the agent's phase carries an
error and the run continues with the next agent. A cancelled channel stops
the run at the next checkpoint (Cancelled).
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import structlog

from galuxium.agent.classifier import IntentClassifier
from galuxium.agent.completion import CompletionClient, Embedder
from galuxium.agent.generation import AgentDeps, GenerationAgent
from galuxium.agent.nodes import default_agents
from galuxium.core.exceptions import AgentError, PipelineAborted
from galuxium.core.logging import bind_run_context, clear_run_context
from galuxium.db.models import Idea
from galuxium.db.store import ArtifactStore
from galuxium.schemas.agents import AgentKind
from galuxium.schemas.events import Phase, ProgressEvent
from galuxium.schemas.intent import IntentRecord
from galuxium.services.idea_service import IdeaResolver
from galuxium.services.progress import ProgressChannel, ProgressRecorder

logger = structlog.get_logger(__name__)

# Keys of the DNA aggregate record, per agent kind
AGGREGATE_KEYS: dict[AgentKind, str] = {
    AgentKind.VALIDATION: "validation",
    AgentKind.BRANDING: "branding",
    AgentKind.TECHNICAL: "tech",
    AgentKind.LAUNCH: "launch",
}


class PipelineState(StrEnum):
    CLASSIFYING = "classifying"
    IDEA_RESOLVING = "idea_resolving"
    RUNNING_AGENT = "running_agent"
    AGGREGATING = "aggregating"
    DONE = "done"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


TRANSITIONS: dict[PipelineState, set[PipelineState]] = {
    PipelineState.CLASSIFYING: {PipelineState.IDEA_RESOLVING, PipelineState.ABORTED, PipelineState.CANCELLED},
    PipelineState.IDEA_RESOLVING: {PipelineState.RUNNING_AGENT, PipelineState.ABORTED, PipelineState.CANCELLED},
    PipelineState.RUNNING_AGENT: {PipelineState.RUNNING_AGENT, PipelineState.AGGREGATING, PipelineState.CANCELLED},
    PipelineState.AGGREGATING: {PipelineState.DONE},
    PipelineState.DONE: set(),
    PipelineState.ABORTED: set(),
    PipelineState.CANCELLED: set(),
}


@dataclass
class PipelineResult:
    """Outcome of one run, for callers that do not read the stream."""

    state: PipelineState = PipelineState.CLASSIFYING
    idea_id: str | None = None
    reused: bool = False
    outputs: dict[str, dict[str, Any] | None] = field(default_factory=dict)
    failed_agents: list[str] = field(default_factory=list)
    error: str | None = None

    def advance(self, new_state: PipelineState) -> None:
        if new_state not in TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid pipeline transition: {self.state} -> {new_state}")
        self.state = new_state


class PipelineOrchestrator:
    """Runs the full pipeline for one (owner, idea text) pair.

    Holds no per-run state: concurrent runs share only the store and client.
    """

    def __init__(
        self,
        store: ArtifactStore,
        client: CompletionClient,
        embedder: Embedder | None = None,
        agent_factory: Callable[[AgentDeps], list[GenerationAgent]] = default_agents,
    ):
        self.store = store
        self.client = client
        self.classifier = IntentClassifier(client)
        self.resolver = IdeaResolver(store)
        self.deps = AgentDeps(store=store, client=client, embedder=embedder)
        self.agent_factory = agent_factory
        self._tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def start(self, idea_text: str, owner_id: str) -> tuple[ProgressChannel, asyncio.Task]:
        """Launch a run in its own task and return the channel to consume."""
        channel = ProgressChannel()
        task = asyncio.create_task(self.run(idea_text, owner_id, channel))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return channel, task

    async def run(self, idea_text: str, owner_id: str, channel: ProgressChannel | None = None) -> PipelineResult:
        """Run every stage, streaming to `channel` when given. Closes the channel on exit."""
        recorder = ProgressRecorder(self.store, owner_id, channel)
        result = PipelineResult()
        bind_run_context(owner_id=owner_id)
        logger.info("pipeline_started", idea_length=len(idea_text))

        try:
            try:
                intent = await self.classify(idea_text, recorder)

                if recorder.cancelled:
                    return self._cancel(result, "before idea resolution")
                result.advance(PipelineState.IDEA_RESOLVING)

                idea, reused = await self.resolve(idea_text, owner_id, intent, recorder)
            except PipelineAborted as e:
                result.advance(PipelineState.ABORTED)
                result.error = e.message
                await recorder.emit(ProgressEvent(phase=e.stage, error=e.message))
                logger.error("pipeline_aborted", stage=e.stage, error=e.message)
                return result

            result.idea_id = str(idea.id)
            result.reused = reused
            return await self.run_agents(idea, recorder, result)
        finally:
            if channel is not None:
                channel.close()
            clear_run_context()

    # ------------------------------------------------------------------
    # Fatal stages
    # ------------------------------------------------------------------

    async def classify(self, idea_text: str, recorder: ProgressRecorder) -> IntentRecord:
        """Classifying stage.

        Raises:
            PipelineAborted: stage "classification"
        """
        await recorder.emit(ProgressEvent(phase=Phase.CLASSIFICATION, message="Classifying idea...", progress=50))
        try:
            intent = await self.classifier.classify(idea_text)
        except Exception as e:
            logger.error("classification_failed", error=str(e), error_type=type(e).__name__)
            raise PipelineAborted(Phase.CLASSIFICATION, f"Classification failed: {e}") from e

        if intent.is_degraded:
            # Proceeds with default intent fields; raw model text is kept on the idea
            logger.warning("classification_degraded_proceeding", error=intent.error)

        await recorder.emit(
            ProgressEvent(
                phase=Phase.CLASSIFICATION,
                message="Idea classified",
                progress=100,
                data=intent.model_dump(mode="json", exclude_none=True),
            )
        )
        return intent

    async def resolve(
        self, idea_text: str, owner_id: str, intent: IntentRecord, recorder: ProgressRecorder
    ) -> tuple[Idea, bool]:
        """IdeaResolving stage.

        Raises:
            PipelineAborted: stage "setup"
        """
        await recorder.emit(ProgressEvent(phase=Phase.SETUP, message="Setting up idea record...", progress=50))
        try:
            idea, reused = await self.resolver.resolve(owner_id, idea_text, intent)
        except Exception as e:
            logger.error("idea_resolution_failed", error=str(e), error_type=type(e).__name__)
            raise PipelineAborted(Phase.SETUP, f"Failed to save idea: {e}") from e

        recorder.idea_id = idea.id
        bind_run_context(idea_id=str(idea.id))
        message = "Reusing existing idea record" if reused else "Idea record created"
        await recorder.emit(ProgressEvent(phase=Phase.SETUP, message=message, progress=100, idea_id=str(idea.id)))
        return idea, reused

    # ------------------------------------------------------------------
    # Agents + aggregate
    # ------------------------------------------------------------------

    async def run_agents(
        self, idea: Idea, recorder: ProgressRecorder, result: PipelineResult | None = None
    ) -> PipelineResult:
        """RunningAgent x4, Aggregating, Done. Never raises for agent failures."""
        if result is None:
            result = PipelineResult(state=PipelineState.IDEA_RESOLVING, idea_id=str(idea.id))
        if recorder.idea_id is None:
            recorder.idea_id = idea.id

        for agent in self.agent_factory(self.deps):
            if recorder.cancelled:
                return self._cancel(result, f"before {agent.name}")
            result.advance(PipelineState.RUNNING_AGENT)
            await self._run_agent(agent, idea, recorder, result)

        if recorder.cancelled:
            return self._cancel(result, "before aggregation")
        result.advance(PipelineState.AGGREGATING)
        await self._aggregate(idea, recorder, result)

        result.advance(PipelineState.DONE)
        if result.failed_agents:
            message = f"Pipeline finished with failed agents: {', '.join(result.failed_agents)}"
        else:
            message = "All agents completed"
        await recorder.emit(ProgressEvent(phase=Phase.DONE, done=True, message=message, idea_id=str(idea.id)))
        logger.info("pipeline_completed", failed_agents=result.failed_agents)
        return result

    async def _run_agent(
        self, agent: GenerationAgent, idea: Idea, recorder: ProgressRecorder, result: PipelineResult
    ) -> None:
        key = AGGREGATE_KEYS[agent.kind]
        await recorder.emit(
            ProgressEvent(phase=agent.name, sub_phase="initializing", message=f"Starting {agent.name}...", progress=5)
        )
        try:
            payload = await agent.run(str(idea.id), recorder.emit)
        except AgentError as e:
            await self._agent_failed(agent, key, e.message, result, recorder, reason=e.reason)
            return
        except Exception as e:
            logger.exception("agent_unexpected_error", agent=agent.name, error_type=type(e).__name__)
            await self._agent_failed(agent, key, str(e) or type(e).__name__, result, recorder, reason="unexpected")
            return

        result.outputs[key] = payload
        await recorder.emit(ProgressEvent(phase=agent.name, message="completed", progress=100))

    async def _agent_failed(
        self,
        agent: GenerationAgent,
        key: str,
        message: str,
        result: PipelineResult,
        recorder: ProgressRecorder,
        reason: str,
    ) -> None:
        result.outputs[key] = None
        result.failed_agents.append(agent.name)
        logger.warning("agent_failed", agent=agent.name, reason=reason, error=message)
        await recorder.emit(ProgressEvent(phase=agent.name, error=message))

    async def _aggregate(self, idea: Idea, recorder: ProgressRecorder, result: PipelineResult) -> None:
        outputs = {key: result.outputs.get(key) for key in AGGREGATE_KEYS.values()}
        try:
            dna = await self.store.insert_dna(idea.id, outputs, result.failed_agents)
        except Exception as e:
            # Stream outcome is unchanged; the client is told the run finished
            logger.error("dna_aggregate_store_failed", error=str(e), error_type=type(e).__name__)
            return

        await recorder.record(
            ProgressEvent(phase=Phase.AGGREGATION, message="DNA aggregate stored", progress=100)
        )
        logger.info("dna_aggregate_stored", dna_id=str(dna.id))

    def _cancel(self, result: PipelineResult, checkpoint: str) -> PipelineResult:
        result.advance(PipelineState.CANCELLED)
        logger.info("pipeline_cancelled", checkpoint=checkpoint)
        return result

"""Idea endpoints: fire-and-forget pipeline runs and read access to their artifacts."""

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from galuxium.api.deps import get_orchestrator, get_store
from galuxium.core.exceptions import IdeaNotFound, PipelineAborted
from galuxium.db.store import ArtifactStore
from galuxium.schemas.events import Phase
from galuxium.schemas.pipeline import (
    CreateIdeaResponse,
    DnaResponse,
    IdeaResponse,
    PipelineRequest,
    TimelineEntry,
    TimelineResponse,
)
from galuxium.services.pipeline import PipelineOrchestrator
from galuxium.services.progress import ProgressRecorder

logger = structlog.get_logger(__name__)

router = APIRouter()


async def schedule_idea(
    idea_text: str,
    owner_id: str,
    background_tasks: BackgroundTasks,
    store: ArtifactStore,
    orchestrator: PipelineOrchestrator,
) -> CreateIdeaResponse:
    """Classify and store an idea, then queue the four agents as a background task.

    Agent progress goes to the durable log only; read it from /timeline.

    Raises:
        HTTPException(502): Classification failed
        HTTPException(500): Idea could not be stored
    """
    recorder = ProgressRecorder(store, owner_id)
    try:
        intent = await orchestrator.classify(idea_text, recorder)
        idea, reused = await orchestrator.resolve(idea_text, owner_id, intent, recorder)
    except PipelineAborted as e:
        status_code = 502 if e.stage == Phase.CLASSIFICATION else 500
        raise HTTPException(status_code=status_code, detail=e.message) from e

    background_tasks.add_task(orchestrator.run_agents, idea, recorder)
    logger.info("idea_orchestration_scheduled", idea_id=str(idea.id), reused=reused)

    return CreateIdeaResponse(
        message="Idea created, orchestration running automatically"
        if not reused
        else "Existing idea reused, orchestration running automatically",
        reused=reused,
        idea=IdeaResponse.model_validate(idea),
    )


@router.post("", response_model=CreateIdeaResponse, status_code=201)
async def create_idea(
    body: PipelineRequest,
    background_tasks: BackgroundTasks,
    store: ArtifactStore = Depends(get_store),
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    return await schedule_idea(body.idea_text, body.owner_id, background_tasks, store, orchestrator)


@router.get("", response_model=list[IdeaResponse])
async def list_ideas(
    owner_id: str = Query(..., min_length=1),
    limit: int = Query(50, ge=1, le=200),
    store: ArtifactStore = Depends(get_store),
):
    """List an owner's ideas, newest first."""
    ideas = await store.list_ideas(owner_id, limit=limit)
    return [IdeaResponse.model_validate(i) for i in ideas]


@router.get("/{idea_id}", response_model=IdeaResponse)
async def get_idea(idea_id: str, store: ArtifactStore = Depends(get_store)):
    try:
        idea = await store.get_idea(idea_id)
    except IdeaNotFound:
        raise HTTPException(status_code=404, detail="Idea not found")
    return IdeaResponse.model_validate(idea)


@router.get("/{idea_id}/timeline", response_model=TimelineResponse)
async def get_timeline(idea_id: str, store: ArtifactStore = Depends(get_store)):
    """Durable progress log for an idea, oldest first."""
    try:
        await store.get_idea(idea_id)
    except IdeaNotFound:
        raise HTTPException(status_code=404, detail="Idea not found")

    rows = await store.list_progress(idea_id)
    return TimelineResponse(
        idea_id=idea_id,
        events=[
            TimelineEntry(
                agent=row.agent,
                sub_phase=row.sub_phase,
                message=row.message,
                progress=row.progress,
                file_url=row.file_url,
                error=row.error,
                created_at=row.created_at,
            )
            for row in rows
        ],
    )


@router.get("/{idea_id}/dna", response_model=DnaResponse)
async def get_dna(idea_id: str, store: ArtifactStore = Depends(get_store)):
    """Latest DNA aggregate for an idea.

    Raises:
        HTTPException(404): Idea unknown or no run has reached aggregation yet
    """
    try:
        dna = await store.latest_dna(idea_id)
    except IdeaNotFound:
        dna = None
    if dna is None:
        raise HTTPException(status_code=404, detail="DNA not found")

    return DnaResponse(
        idea_id=str(dna.idea_id),
        validation=dna.validation,
        branding=dna.branding,
        tech=dna.tech,
        launch=dna.launch,
        failed_agents=dna.failed_agents or [],
        created_at=dna.created_at,
    )

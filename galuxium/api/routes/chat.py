"""Chat intake: route chat messages that describe a startup idea into the pipeline."""

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from galuxium.agent.intake import IdeaDetector
from galuxium.api.deps import get_idea_detector, get_orchestrator, get_store
from galuxium.api.routes.ideas import schedule_idea
from galuxium.core.exceptions import ProviderError
from galuxium.db.store import ArtifactStore
from galuxium.schemas.pipeline import ChatIntakeRequest, ChatIntakeResponse
from galuxium.services.pipeline import PipelineOrchestrator

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/intake", response_model=ChatIntakeResponse)
async def chat_intake(
    body: ChatIntakeRequest,
    background_tasks: BackgroundTasks,
    detector: IdeaDetector = Depends(get_idea_detector),
    store: ArtifactStore = Depends(get_store),
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    """Classify the latest chat message; start a pipeline run if it is a startup idea.

    Messages that are not ideas come back with route "chat" and nothing is stored.

    Raises:
        HTTPException(502): Detector or classifier completion failed
        HTTPException(500): Idea could not be stored
    """
    try:
        detection = await detector.detect(body.latest_message)
    except ProviderError as e:
        logger.error("intake_detection_failed", error=str(e))
        raise HTTPException(status_code=502, detail=f"Intake classification failed: {e}") from e

    if not detection.is_startup_idea:
        return ChatIntakeResponse(route="chat", reasoning=detection.reasoning)

    logger.info("intake_forwarding_idea", owner_id=body.owner_id)
    created = await schedule_idea(detection.idea, body.owner_id, background_tasks, store, orchestrator)
    return ChatIntakeResponse(route="idea", reasoning=detection.reasoning, idea=created)

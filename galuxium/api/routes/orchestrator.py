"""Live pipeline stream over Server-Sent Events.

Each progress event is one `data: {json}` frame. A heartbeat frame is sent
when no event has gone out for `stream_heartbeat_seconds`. A client
disconnect cancels the run at its next checkpoint.
"""

import json
import time

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse

from galuxium.api.deps import get_orchestrator
from galuxium.core.config import get_settings
from galuxium.schemas.events import Phase, ProgressEvent
from galuxium.schemas.pipeline import PipelineRequest
from galuxium.services.pipeline import PipelineOrchestrator

logger = structlog.get_logger(__name__)

router = APIRouter()

_POLL_INTERVAL_SECONDS = 1.0

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def _frame(event: ProgressEvent) -> str:
    return f"data: {json.dumps(event.to_wire())}\n\n"


def _stream_pipeline(
    request: Request,
    orchestrator: PipelineOrchestrator,
    idea_text: str,
    owner_id: str,
) -> StreamingResponse:
    async def event_generator():
        if not idea_text.strip():
            yield _frame(ProgressEvent(phase=Phase.REQUEST, error="Missing idea"))
            return
        if not owner_id.strip():
            yield _frame(ProgressEvent(phase=Phase.REQUEST, error="Missing user_id"))
            return

        channel, task = orchestrator.start(idea_text, owner_id)
        heartbeat_interval = get_settings().stream_heartbeat_seconds
        last_heartbeat = time.monotonic()

        try:
            while True:
                if await request.is_disconnected():
                    logger.info("stream_client_disconnected", owner_id=owner_id)
                    return

                now = time.monotonic()
                if now - last_heartbeat >= heartbeat_interval:
                    yield "event: heartbeat\ndata: {}\n\n"
                    last_heartbeat = now

                try:
                    event = await channel.receive(timeout=min(_POLL_INTERVAL_SECONDS, heartbeat_interval))
                except TimeoutError:
                    continue

                if event is None:
                    return
                yield _frame(event)
                last_heartbeat = time.monotonic()
        finally:
            # Client gone or generator closed early: stop the run at its next checkpoint
            if not task.done():
                channel.cancel()

    return StreamingResponse(event_generator(), media_type="text/event-stream", headers=SSE_HEADERS)


@router.get("")
async def stream_orchestration(
    request: Request,
    idea: str = Query(""),
    user_id: str = Query(""),
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    """Run the full pipeline for `idea` and stream progress events.

    The stream ends with `{"phase": "done", "done": true}`, or with a single
    error event if classification or idea setup fails.
    """
    return _stream_pipeline(request, orchestrator, idea, user_id)


@router.post("/stream")
async def stream_orchestration_post(
    body: PipelineRequest,
    request: Request,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    """Same stream as GET, for JSON `{idea_text, owner_id}` bodies."""
    return _stream_pipeline(request, orchestrator, body.idea_text, body.owner_id)

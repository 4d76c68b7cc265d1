"""Request-scoped dependencies built from app.state.

Override these in tests via app.dependency_overrides.
"""

from fastapi import Depends, Request

from galuxium.agent.intake import IdeaDetector
from galuxium.core.config import get_settings
from galuxium.db.store import ArtifactStore
from galuxium.services.pipeline import PipelineOrchestrator


def get_store(request: Request) -> ArtifactStore:
    return request.app.state.store


def get_orchestrator(request: Request) -> PipelineOrchestrator:
    """Dependency that provides the PipelineOrchestrator.

    One orchestrator per app, sharing the app's store and completion client.
    The client doubles as the embedder unless embeddings are disabled.
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        client = request.app.state.completion_client
        embedder = client if get_settings().embeddings_enabled else None
        orchestrator = PipelineOrchestrator(store=request.app.state.store, client=client, embedder=embedder)
        request.app.state.orchestrator = orchestrator
    return orchestrator


def get_idea_detector(orchestrator: PipelineOrchestrator = Depends(get_orchestrator)) -> IdeaDetector:
    """Chat intake detector on the same completion client as the pipeline."""
    return IdeaDetector(orchestrator.client)

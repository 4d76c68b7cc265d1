from fastapi import APIRouter

from galuxium.api.routes import chat, health, ideas, orchestrator

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(orchestrator.router, prefix="/orchestrator", tags=["orchestrator"])
api_router.include_router(ideas.router, prefix="/ideas", tags=["ideas"])
api_router.include_router(chat.router, prefix="/chat", tags=["chat"])

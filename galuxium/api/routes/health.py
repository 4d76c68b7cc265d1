import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from galuxium.db import ping

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Liveness check. Returns 503 once shutdown has begun."""
    if getattr(request.app.state, "shutting_down", False):
        return JSONResponse(
            status_code=503,
            content={"status": "shutting_down", "service": "galuxium-backend"},
        )
    return {"status": "healthy", "service": "galuxium-backend"}


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness check - verifies the database is reachable."""
    checks = {"database": False}

    try:
        await ping(request.app.state.store.session_factory)
        checks["database"] = True
    except Exception as e:
        logger.error("readiness_database_failed", error=str(e), error_type=type(e).__name__)

    all_healthy = all(checks.values())
    status_code = 200 if all_healthy else 503

    return JSONResponse(
        status_code=status_code,
        content={"status": "ready" if all_healthy else "degraded", "checks": checks},
    )

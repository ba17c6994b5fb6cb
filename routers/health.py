# routers/health.py

from fastapi import APIRouter, Depends

from core.config import settings
from core.session_store import SessionStore
from dependencies.auth import get_session_store

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/app
# Simple API health check (the login page polls this)
# No auth required
# -----------------------------------------------------
@router.get("/app", summary="App health check")
async def health_app():
    return {
        "service": settings.PROJECT_NAME,
        "status": "ok",
        "message": "API is running",
    }


# -----------------------------------------------------
# GET /health/verifier
# Which credential verifier is active and whether it is configured
# -----------------------------------------------------
@router.get("/verifier", summary="Credential verifier health check")
async def health_verifier(store: SessionStore = Depends(get_session_store)):
    verifier = store.verifier
    configured = verifier.is_configured()
    return {
        "service": "Credential Verifier",
        "verifier": verifier.name,
        "status": "ok" if configured else "not_configured",
        "session_state": store.state.value,
    }

from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Core
from core.config import settings
from core.config_validator import validate_config_on_startup
from core.credential_verifier import get_credential_verifier
from core.errors import AuthError, SessionExpiredError, auth_error_to_http
from core.logging_config import logger
from core.session_storage import FileSessionStorage
from core.session_store import SessionStore

# -------------------------------------------------
# Routers
# -------------------------------------------------
from routers.auth import router as auth_router
from routers.users import router as users_router
from routers.navigation import router as navigation_router
from routers.health import router as health_router


def build_session_store() -> SessionStore:
    """Session store wired from settings (verifier + on-disk storage)."""
    validate_config_on_startup()
    return SessionStore(
        verifier=get_credential_verifier(),
        storage=FileSessionStorage(settings.SESSION_STORAGE_PATH),
    )


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app(session_store: Optional[SessionStore] = None) -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="BikeBiz CRM — role-based access control and session service",
    )

    app.state.session_store = session_store or build_session_store()

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Startup / shutdown: session lifecycle
    # -------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info("🚀 Starting BikeBiz CRM Access Service")
        for route in app.routes:
            methods = ",".join(getattr(route, "methods", None) or [])
            logger.debug(f"➡️ {methods:10s} {getattr(route, 'path', '')}")

        session = await app.state.session_store.initialize()
        if session:
            logger.info(f"Resumed session: {session.email} ({session.role})")
        else:
            logger.info("No session to resume; waiting for sign-in")

    @app.on_event("shutdown")
    async def on_shutdown():
        await app.state.session_store.close()
        logger.info("Session store closed")

    # -------------------------------------------------
    # Error handling
    # -------------------------------------------------
    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        # An expired/invalid credential ends the session silently
        if isinstance(exc, SessionExpiredError):
            await app.state.session_store.invalidate(exc.message)

        http_exc = auth_error_to_http(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content={"detail": http_exc.detail},
            headers=http_exc.headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 500):
            logger.warning(
                f"HTTP {exc.status_code} at {request.url.path} — {exc.detail}"
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(navigation_router)
    app.include_router(health_router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {"message": "API is running..."}

    return app


# Create the global FastAPI instance (uvicorn main:app)
app = create_app()

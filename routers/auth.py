from fastapi import APIRouter, HTTPException, Depends

from core import permissions as catalog
from core.errors import CatalogError, StorageError, auth_error_to_http
from core.logging_config import logger
from core.permission_helpers import is_authorized
from core.session_store import SessionStore
from dependencies.auth import get_current_session, get_session_store, requires_role
from models.auth import LoginRequest, LoginResponse, PermissionReport
from models.enums import Permission, Role
from models.session import Session, SessionRead, SessionStatus


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# Role → landing page after sign-in
ROLE_REDIRECTS = {
    Role.global_admin: "/dashboard/admin",
    Role.store_admin: "/dashboard/storeadmin",
    Role.procurement_admin: "/dashboard/procurementadmin",
    Role.sales_executive: "/dashboard/salesexecutive",
    Role.procurement_executive: "/dashboard/procurementexecutive",
}
DEFAULT_REDIRECT = "/dashboard"

# Checks shown by the permission debugger
DEBUG_CHECKS = (
    Permission.manage_store,
    Permission.manage_store_users,
    Permission.all,
)


# ============================================================
# LOGIN
# ============================================================
@router.post("/login", response_model=LoginResponse, summary="Sign in")
async def login(payload: LoginRequest, store: SessionStore = Depends(get_session_store)):

    try:
        ok = await store.login(payload.email, payload.password)
    except StorageError as e:
        raise auth_error_to_http(e)

    if not ok:
        raise HTTPException(
            status_code=401,
            detail=store.last_error or "Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = store.current_session()
    return LoginResponse(
        session=SessionRead.from_session(session),
        redirect_url=ROLE_REDIRECTS.get(session.role, DEFAULT_REDIRECT),
    )


# ============================================================
# LOGOUT
# ============================================================
@router.post("/logout", response_model=SessionStatus, summary="Sign out")
async def logout(store: SessionStore = Depends(get_session_store)):
    try:
        await store.logout()
    except StorageError as e:
        raise auth_error_to_http(e)
    return store.status()


# ============================================================
# CURRENT SESSION
# ============================================================
@router.get("/me", response_model=SessionRead, summary="Current signed-in user")
def read_me(session: Session = Depends(get_current_session)):
    return SessionRead.from_session(session)


@router.get("/state", response_model=SessionStatus, summary="Session lifecycle state")
def read_state(store: SessionStore = Depends(get_session_store)):
    return store.status()


@router.delete("/error", response_model=SessionStatus, summary="Dismiss the last sign-in error")
def clear_error(store: SessionStore = Depends(get_session_store)):
    store.clear_error()
    return store.status()


# ============================================================
# REFRESH PERMISSIONS (recompute against the current table)
# ============================================================
@router.post(
    "/refresh-permissions",
    response_model=SessionRead,
    summary="Recompute the session's permissions against the current role table",
)
async def refresh_permissions(
    session: Session = Depends(get_current_session),
    store: SessionStore = Depends(get_session_store),
):
    try:
        refreshed = await store.refresh_permissions()
    except StorageError as e:
        raise auth_error_to_http(e)

    return SessionRead.from_session(refreshed or session)


# ============================================================
# RELOAD ROLE TABLE (global admin only)
# ============================================================
@router.post(
    "/reload-permissions",
    response_model=SessionRead,
    summary="Reload the role table from ROLE_PERMISSIONS_FILE and refresh the session",
)
async def reload_permissions(
    session: Session = Depends(requires_role(Role.global_admin)),
    store: SessionStore = Depends(get_session_store),
):
    try:
        catalog.reload_role_permissions()
    except CatalogError as e:
        # Keep serving with the table already in place
        logger.error(f"Role table reload rejected: {e.message}")
        raise auth_error_to_http(e)

    logger.info(f"Role table reloaded by {session.email}")

    try:
        refreshed = await store.refresh_permissions()
    except StorageError as e:
        raise auth_error_to_http(e)

    return SessionRead.from_session(refreshed or session)


# ============================================================
# PERMISSION DEBUGGER
# ============================================================
@router.get("/permissions", response_model=PermissionReport, summary="Own effective permissions")
def read_permissions(
    session: Session = Depends(get_current_session),
    store: SessionStore = Depends(get_session_store),
):
    return PermissionReport(
        role=session.role.value,
        grants=sorted(p.value for p in session.grants),
        permissions=sorted(p.value for p in session.permissions),
        checks={p.value: is_authorized(session, p) for p in DEBUG_CHECKS},
        error=store.last_error,
    )

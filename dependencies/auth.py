from typing import Optional
from fastapi import Depends, HTTPException, Request, status

from core.errors import UnknownPermissionError, UnknownRoleError
from core.guard import check_access, access_restricted
from core.permission_helpers import RoleSpec
from core.session_store import SessionStore
from models.enums import Permission, Role
from models.session import Session


# ============================================================
# SESSION STORE (owned by the app, injected everywhere else)
# ============================================================
def get_session_store(request: Request) -> SessionStore:
    store = getattr(request.app.state, "session_store", None)
    if store is None:
        raise HTTPException(500, "Session store not configured")
    return store


# ============================================================
# CURRENT SESSION
# ============================================================
async def get_current_session(store: SessionStore = Depends(get_session_store)) -> Session:
    session = await store.check_credential()
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


async def get_optional_session(store: SessionStore = Depends(get_session_store)) -> Optional[Session]:
    """
    Returns the session if signed in, None otherwise.
    A credential the verifier rejects raises TokenInvalidError (→ 401).
    """
    return await store.check_credential()


# ============================================================
# GUARDS
# ============================================================
def _validate_requirements(permission, roles: Optional[RoleSpec]) -> None:
    # A typo in a route's requirement is a programming error: fail at import
    if permission is not None and Permission.parse(permission) is None:
        raise UnknownPermissionError(f"Unknown permission in route guard: {permission!r}")

    if roles is None:
        return
    for role in ([roles] if isinstance(roles, (Role, str)) else roles):
        if Role.parse(role) is None:
            raise UnknownRoleError(f"Unknown role in route guard: {role!r}")


def requires_access(permission=None, roles: Optional[RoleSpec] = None):
    """
    Usage:
        @router.get("/", dependencies=[Depends(requires_access("manage_store", "global_admin"))])

    401 when nobody is signed in, 403 with the neutral notice when denied.
    """
    _validate_requirements(permission, roles)

    def checker(session: Optional[Session] = Depends(get_optional_session)) -> Optional[Session]:
        decision = check_access(session, permission, roles)
        if decision.allowed:
            return session

        if not decision.authenticated:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not signed in",
                headers={"WWW-Authenticate": "Bearer"},
            )

        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=access_restricted(decision))

    return checker


def requires_permission(permission):
    return requires_access(permission=permission)


def requires_role(allowed_roles: RoleSpec):
    return requires_access(roles=allowed_roles)

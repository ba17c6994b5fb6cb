# models/session.py

from typing import FrozenSet, List, Optional
from pydantic import BaseModel, ConfigDict

from models.enums import Permission, Role, SessionState


# Bump when the persisted snapshot layout changes; older snapshots are purged.
SESSION_SCHEMA_VERSION = 1


# ===============================================================
# SCOPE — narrows data visibility independent of permissions
# ===============================================================
class SessionScope(BaseModel):
    """
    store_id / store_name  → store_admin, sales_executive
    managed_city           → procurement_admin
    reporting_to           → procurement_executive (id of a procurement_admin)
    Global admins carry an empty scope.
    """
    model_config = ConfigDict(frozen=True)

    store_id: Optional[str] = None
    store_name: Optional[str] = None
    managed_city: Optional[str] = None
    reporting_to: Optional[str] = None

    # Informational only, never used for filtering
    city: Optional[str] = None
    department: Optional[str] = None


# ===============================================================
# SESSION — the authenticated identity for one login
# ===============================================================
class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    name: str
    role: Role

    # Explicit per-user grants reported by the verifier
    grants: FrozenSet[Permission] = frozenset()

    # Effective set: grants ∪ role defaults
    permissions: FrozenSet[Permission] = frozenset()

    scope: SessionScope = SessionScope()
    schema_version: int = SESSION_SCHEMA_VERSION


# ===============================================================
# API VIEWS
# ===============================================================
class SessionRead(BaseModel):
    """Session as returned to the UI."""
    id: str
    email: str
    name: str
    role: Role
    permissions: List[str]
    scope: SessionScope

    @classmethod
    def from_session(cls, session: Session) -> "SessionRead":
        return cls(
            id=session.id,
            email=session.email,
            name=session.name,
            role=session.role,
            permissions=sorted(p.value for p in session.permissions),
            scope=session.scope,
        )


class SessionStatus(BaseModel):
    state: SessionState
    is_authenticated: bool
    is_loading: bool
    error: Optional[str] = None

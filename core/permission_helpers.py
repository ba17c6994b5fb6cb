from typing import FrozenSet, Iterable, Optional, Union

from core import permissions as catalog
from core.errors import UnknownRoleError
from core.logging_config import logger
from models.enums import Permission, Role
from models.session import Session


RoleSpec = Union[Role, str, Iterable[Union[Role, str]]]


# -----------------------------------------------------
# Boundary validation: raw literals → typed permissions
# -----------------------------------------------------
def parse_permissions(raw) -> FrozenSet[Permission]:
    """
    Validate a raw permission list (from a verifier or a stored snapshot).
    Unknown literals are dropped and logged, never matched by accident.
    """
    if raw is None:
        return frozenset()

    if isinstance(raw, (str, bytes)) or not isinstance(raw, Iterable):
        logger.warning(f"Ignoring malformed permission list: {type(raw).__name__}")
        return frozenset()

    parsed = set()
    for literal in raw:
        perm = Permission.parse(literal)
        if perm is None:
            logger.warning(f"Ignoring unknown permission literal: {literal!r}")
            continue
        parsed.add(perm)

    return frozenset(parsed)


# -----------------------------------------------------
# Collect effective permissions:
#   • role-based permissions
#   • explicit per-user grants
# -----------------------------------------------------
def get_effective_permissions(role, grants: Iterable = ()) -> FrozenSet[Permission]:
    return catalog.permissions_for_role(role) | frozenset(grants)


# -----------------------------------------------------
# Permission evaluation
# -----------------------------------------------------
def is_authorized(session: Optional[Session], requested) -> bool:
    """
    Decide whether `session` holds `requested`. Order matters:

        1. no session                        → deny
        2. wildcard in effective set         → allow
        3. requested in effective set        → allow
        4. requested in the role's defaults  → allow
        5. role is global_admin              → allow
        6.                                   → deny

    Step 4 covers explicit lists that are stale relative to the table.
    Step 5 keeps the top role working even with a corrupted permission list.
    Literals outside the catalog are held by nobody (steps 3–4 never match).
    """
    if session is None:
        return False

    if Permission.all in session.permissions:
        return True

    perm = Permission.parse(requested)

    if perm is not None and perm in session.permissions:
        return True

    if perm is not None:
        try:
            if perm in catalog.permissions_for_role(session.role):
                return True
        except UnknownRoleError:
            logger.warning(f"Session {session.id} carries unknown role {session.role!r}")

    if session.role == Role.global_admin:
        return True

    if perm is None:
        logger.warning(f"Permission check for unknown literal {requested!r} denied")
    else:
        logger.debug(f"Denied '{perm}' for {session.email} ({session.role})")

    return False


def has_role(session: Optional[Session], roles: RoleSpec) -> bool:
    """Exact role gating: equal to `roles`, or a member of it when it is a collection."""
    if session is None:
        return False

    if isinstance(roles, (Role, str)):
        return session.role == Role.parse(roles)

    return any(session.role == Role.parse(role) for role in roles)


# ============================================================
# CONVENIENCE CHECKS
# ============================================================

def is_global_admin(session: Optional[Session]) -> bool:
    return has_role(session, Role.global_admin)


def can_manage_stores(session: Optional[Session]) -> bool:
    return is_authorized(session, Permission.manage_store)


def can_manage_users(session: Optional[Session]) -> bool:
    return is_authorized(session, Permission.manage_store_users)

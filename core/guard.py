# core/guard.py

"""
Guard: the single decision + dispatch point for anything permission-sensitive.

    guard(session, required_permission="manage_store",
          on_allow=render_store_page, hide_on_deny=True)

The guard only reads the session it is handed; it never changes it, so it
is safe to call from any number of call sites.
"""

import functools
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional

from core.logging_config import logger
from core.permission_helpers import RoleSpec, has_role, is_authorized
from models.enums import Role
from models.session import Session


ACCESS_RESTRICTED_TITLE = "Access Restricted"
ACCESS_RESTRICTED_MESSAGE = "You don't have permission to view this content"


@dataclass(frozen=True)
class GuardDecision:
    """Outcome of an access check. `missing` names only the caller's own unmet requirement."""

    allowed: bool
    authenticated: bool = True
    missing: Optional[str] = None


def _describe_roles(roles: RoleSpec) -> str:
    if isinstance(roles, (Role, str)):
        return str(roles)
    return " or ".join(str(r) for r in roles)


def check_access(
    session: Optional[Session],
    required_permission=None,
    required_role: Optional[RoleSpec] = None,
) -> GuardDecision:
    """Bare decision. No requirements means pass-through; both given means both must hold."""
    if required_permission is None and required_role is None:
        return GuardDecision(allowed=True, authenticated=session is not None)

    if session is None:
        return GuardDecision(
            allowed=False,
            authenticated=False,
            missing="sign in",
        )

    if required_role is not None and not has_role(session, required_role):
        return GuardDecision(allowed=False, missing=f"role {_describe_roles(required_role)}")

    if required_permission is not None and not is_authorized(session, required_permission):
        return GuardDecision(allowed=False, missing=f"permission {required_permission}")

    return GuardDecision(allowed=True)


def access_restricted(decision: Optional[GuardDecision] = None) -> dict:
    """Neutral notice rendered on denial."""
    notice = {
        "status": "restricted",
        "title": ACCESS_RESTRICTED_TITLE,
        "message": ACCESS_RESTRICTED_MESSAGE,
    }
    if decision is not None and decision.missing:
        notice["required"] = decision.missing
    return notice


def _resolve(outcome, *args):
    return outcome(*args) if callable(outcome) else outcome


def guard(
    session: Optional[Session],
    required_permission=None,
    required_role: Optional[RoleSpec] = None,
    on_allow: Any = None,
    on_deny: Any = None,
    hide_on_deny: bool = False,
):
    """
    Decide, then dispatch.

    allow → on_allow() / on_allow value / True when omitted
    deny  → on_deny(decision) / on_deny value when given,
            None when hide_on_deny,
            the access_restricted() notice otherwise
    """
    decision = check_access(session, required_permission, required_role)

    if decision.allowed:
        return True if on_allow is None else _resolve(on_allow)

    logger.debug(f"Guard denied: {decision.missing}")

    if on_deny is not None:
        return _resolve(on_deny, decision)
    if hide_on_deny:
        return None
    return access_restricted(decision)


# ============================================================
# DECORATOR
# ============================================================
def protected(
    session_provider: Callable[[], Optional[Session]],
    required_permission=None,
    required_role: Optional[RoleSpec] = None,
    on_deny: Any = None,
    hide_on_deny: bool = False,
):
    """
    Wrap a sync or async callable so it only runs when the session
    returned by `session_provider` passes the guard.

    Usage:
        @protected(store.current_session, required_permission="manage_leads")
        async def assign_lead(lead_id): ...
    """

    def decorator(func):
        def _deny(decision: GuardDecision):
            if on_deny is not None:
                return _resolve(on_deny, decision)
            return None if hide_on_deny else access_restricted(decision)

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                decision = check_access(session_provider(), required_permission, required_role)
                if not decision.allowed:
                    return _deny(decision)
                return await func(*args, **kwargs)
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            decision = check_access(session_provider(), required_permission, required_role)
            if not decision.allowed:
                return _deny(decision)
            return func(*args, **kwargs)
        return wrapper

    return decorator


def can_view(session: Optional[Session], required_permission=None, required_role: Optional[RoleSpec] = None) -> bool:
    return check_access(session, required_permission, required_role).allowed

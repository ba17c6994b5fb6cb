# core/scope.py

"""
Scope filtering.

Scope narrows which records a session may see even when it holds the
permission to see that kind of record. It never grants anything.
"""

from typing import Iterable, List, Optional

from core.permission_helpers import is_global_admin
from models.enums import Role
from models.session import Session
from models.user import DirectoryUser, StoreRead


STORE_SCOPED_ROLES = (Role.store_admin, Role.sales_executive)


def visible_users(session: Optional[Session], users: Iterable[DirectoryUser]) -> List[DirectoryUser]:
    """
    Filter directory users down to the ones the session may see.

    global_admin       → everyone
    store-scoped roles → users of the same store only
    procurement_admin  → executives reporting to them or working in their city
    anyone else        → themselves
    """
    if session is None:
        return []

    users = list(users)

    if is_global_admin(session):
        return users

    scope = session.scope

    if session.role in STORE_SCOPED_ROLES:
        # No store assigned means nothing is visible, not everything
        if not scope.store_id:
            return []
        return [u for u in users if u.store_id == scope.store_id]

    if session.role == Role.procurement_admin:
        return [
            u for u in users
            if u.id == session.id
            or (
                u.role == Role.procurement_executive
                and (
                    u.reporting_to == session.id
                    or (scope.managed_city and u.city == scope.managed_city)
                )
            )
        ]

    return [u for u in users if u.id == session.id]


def visible_stores(session: Optional[Session], stores: Iterable[StoreRead]) -> List[StoreRead]:
    """global_admin sees every store, store-scoped roles their own, others none."""
    if session is None:
        return []

    if is_global_admin(session):
        return list(stores)

    if session.role in STORE_SCOPED_ROLES and session.scope.store_id:
        return [s for s in stores if s.id == session.scope.store_id]

    return []

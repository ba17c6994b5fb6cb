from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException

from core.logging_config import logger
from core.scope import visible_stores, visible_users
from core.session_store import SessionStore
from dependencies.auth import get_session_store, requires_permission
from models.enums import Permission, Role
from models.session import Session
from models.user import DirectoryUser, StoreRead


router = APIRouter(
    tags=["Directory"],
)


# ============================================================
# USERS — scoped to the caller
# ============================================================
@router.get(
    "/users",
    response_model=List[DirectoryUser],
    summary="List users visible to the signed-in user",
)
def list_users(
    role: Optional[Role] = None,
    store_id: Optional[str] = None,
    session: Session = Depends(requires_permission(Permission.manage_store_users)),
    store: SessionStore = Depends(get_session_store),
):
    try:
        users = store.verifier.list_users()
    except Exception as e:
        logger.error(f"User directory lookup failed: {type(e).__name__}: {e}")
        raise HTTPException(502, "User directory unavailable")

    # Scope first, then the caller's own filters; filters never widen scope
    visible = visible_users(session, users)
    if role:
        visible = [u for u in visible if u.role == role]
    if store_id:
        visible = [u for u in visible if u.store_id == store_id]

    return visible


# ============================================================
# STORES — scoped to the caller
# ============================================================
@router.get(
    "/stores",
    response_model=List[StoreRead],
    summary="List stores visible to the signed-in user",
)
def list_stores(
    session: Session = Depends(requires_permission(Permission.manage_store)),
    store: SessionStore = Depends(get_session_store),
):
    try:
        stores = store.verifier.list_stores()
    except Exception as e:
        logger.error(f"Store lookup failed: {type(e).__name__}: {e}")
        raise HTTPException(502, "Store directory unavailable")

    return visible_stores(session, stores)

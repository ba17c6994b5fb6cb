# routers/navigation.py

from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from core.guard import guard
from dependencies.auth import get_current_session
from models.enums import Permission, Role
from models.session import Session


router = APIRouter(
    prefix="/navigation",
    tags=["Navigation"],
)


class NavItem(BaseModel):
    id: str
    label: str
    permission: Permission
    role: Optional[Role] = None
    hidden_for: List[Role] = []


NAVIGATION_ITEMS = [
    NavItem(id="dashboard", label="Dashboard", permission=Permission.view_analytics),
    NavItem(id="leads", label="Leads", permission=Permission.view_leads),
    NavItem(id="inventory", label="Inventory", permission=Permission.view_inventory),
    NavItem(id="match-engine", label="Match Engine", permission=Permission.match_engine),
    # Store admins manage their store from the dashboard instead
    NavItem(
        id="stores",
        label="Store Management",
        permission=Permission.manage_store,
        hidden_for=[Role.store_admin],
    ),
    NavItem(id="users", label="User Management", permission=Permission.manage_store_users),
    NavItem(id="analytics", label="Analytics", permission=Permission.view_analytics),
    NavItem(id="procurement", label="Procurement", permission=Permission.manage_procurement),
    NavItem(id="vehicle-verification", label="Vehicle Verification", permission=Permission.verify_vehicles),
    NavItem(id="admin", label="Admin Panel", permission=Permission.all, role=Role.global_admin),
]


# -----------------------------------------------------
# GET /navigation
# Menu entries the signed-in user may see
# -----------------------------------------------------
@router.get("", response_model=List[NavItem], summary="Visible navigation entries")
def read_navigation(session: Session = Depends(get_current_session)):
    visible = []
    for item in NAVIGATION_ITEMS:
        if session.role in item.hidden_for:
            continue

        entry = guard(
            session,
            required_permission=item.permission,
            required_role=item.role,
            on_allow=item,
            hide_on_deny=True,
        )
        if entry is not None:
            visible.append(entry)

    return visible

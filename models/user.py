# models/user.py

from typing import List, Optional
from pydantic import BaseModel

from models.enums import Role, StoreStatus


# ===============================================================
# DIRECTORY MODELS (identity + scope only)
# ===============================================================

class DirectoryUser(BaseModel):
    """
    A user as known to the credential backend.
    Only the fields authorization needs: identity, role and scope.
    """
    id: str
    email: str
    name: str
    role: Role
    permissions: List[str] = []
    store_id: Optional[str] = None
    store_name: Optional[str] = None
    city: Optional[str] = None
    department: Optional[str] = None
    managed_city: Optional[str] = None
    reporting_to: Optional[str] = None


class StoreRead(BaseModel):
    id: str
    name: str
    location: str
    city: str
    state: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    manager: Optional[str] = None
    status: StoreStatus = StoreStatus.active

from typing import Dict, List, Optional
from pydantic import BaseModel, EmailStr

from models.session import SessionRead


# -----------------------------------------------------
# LOGIN REQUEST
# -----------------------------------------------------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# -----------------------------------------------------
# LOGIN RESPONSE
# -----------------------------------------------------
class LoginResponse(BaseModel):
    session: SessionRead
    redirect_url: str          # role-based landing page


# -----------------------------------------------------
# PERMISSION DEBUGGER
# -----------------------------------------------------
class PermissionReport(BaseModel):
    role: str
    grants: List[str]
    permissions: List[str]
    checks: Dict[str, bool]
    error: Optional[str] = None

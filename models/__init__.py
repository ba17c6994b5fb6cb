# -------------------------
# Enums
# -------------------------
from .enums import (
    BaseStrEnum,
    Permission,
    Role,
    SessionState,
    StoreStatus,
)

# -------------------------
# Session Models
# -------------------------
from .session import (
    SESSION_SCHEMA_VERSION,
    Session,
    SessionRead,
    SessionScope,
    SessionStatus,
)

# -------------------------
# Auth Models
# -------------------------
from .auth import (
    LoginRequest,
    LoginResponse,
    PermissionReport,
)

# -------------------------
# Directory Models
# -------------------------
from .user import (
    DirectoryUser,
    StoreRead,
)

# core/credential_verifier.py

import secrets
from abc import ABC, abstractmethod
from threading import Lock
from typing import Dict, List, Optional

from pydantic import BaseModel

from core.config import settings
from core.demo_users import DEMO_STORES, DEMO_USERS
from core.errors import InvalidCredentialsError, extract_supabase_error
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from models.enums import Role
from models.session import SessionScope
from models.user import DirectoryUser, StoreRead


# ============================================================
# VERIFIED IDENTITY (what a successful sign-in yields)
# ============================================================
class VerifiedIdentity(BaseModel):
    id: str
    email: str
    name: str
    role: str                  # raw; validated by the session store
    grants: List[str] = []     # raw explicit permissions
    scope: SessionScope = SessionScope()
    token: str


def _scope_from_metadata(metadata: dict) -> SessionScope:
    return SessionScope(
        store_id=metadata.get("store_id"),
        store_name=metadata.get("store_name"),
        managed_city=metadata.get("managed_city"),
        reporting_to=metadata.get("reporting_to"),
        city=metadata.get("city"),
        department=metadata.get("department"),
    )


# ============================================================
# CONTRACT
# ============================================================
class CredentialVerifier(ABC):
    """External collaborator that checks credentials and tokens."""

    name = "abstract"

    @abstractmethod
    def verify(self, email: str, password: str) -> VerifiedIdentity:
        """Return the identity for valid credentials, else raise InvalidCredentialsError."""

    @abstractmethod
    def probe(self, token: str) -> bool:
        """Lightweight liveness check for a previously issued token."""

    @abstractmethod
    def list_users(self) -> List[DirectoryUser]:
        """Identity directory used for scoped user listings."""

    def list_stores(self) -> List[StoreRead]:
        return []

    def is_configured(self) -> bool:
        return True


# ============================================================
# SUPABASE AUTH
# ============================================================
class SupabaseCredentialVerifier(CredentialVerifier):
    """
    Supabase GoTrue backed verifier.
    Role, explicit permissions and scope live in user_metadata.
    """

    name = "supabase"

    def is_configured(self) -> bool:
        return bool(settings.SUPABASE_URL and settings.SUPABASE_SERVICE_ROLE_KEY)

    def verify(self, email: str, password: str) -> VerifiedIdentity:
        client = get_supabase_client()
        if not client:
            # Configuration fault, not a credential rejection
            raise ConnectionError("Supabase client not configured")

        try:
            response = client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            # Log the error for debugging but don't expose details to user
            logger.warning(
                f"Login attempt failed for {email}: {type(e).__name__} ({extract_supabase_error(e)})"
            )
            raise InvalidCredentialsError()

        if not response.session or not response.session.access_token or not response.user:
            raise InvalidCredentialsError()

        user = response.user
        metadata = user.user_metadata or {}

        grants = metadata.get("permissions", [])
        if not isinstance(grants, list):
            grants = []

        return VerifiedIdentity(
            id=user.id,
            email=user.email or email,
            name=metadata.get("full_name") or metadata.get("username") or email,
            role=metadata.get("role", ""),
            grants=grants,
            scope=_scope_from_metadata(metadata),
            token=response.session.access_token,
        )

    def probe(self, token: str) -> bool:
        client = get_supabase_client()
        if not client:
            raise ConnectionError("Supabase client not configured")

        try:
            resp = client.auth.get_user(token)
        except Exception as e:
            status = getattr(e, "status", None)
            if isinstance(status, int) and 400 <= status < 500:
                return False
            raise

        return bool(resp and resp.user)

    def list_users(self) -> List[DirectoryUser]:
        client = get_supabase_client()
        if not client:
            return []

        result = client.auth.admin.list_users()

        # Response shape differs across client versions
        if isinstance(result, list):
            users = result
        elif isinstance(result, dict):
            users = result.get("users", [])
        else:
            users = getattr(result, "users", None) or []

        directory = []
        for user in users:
            metadata = getattr(user, "user_metadata", None) or {}
            role = Role.parse(metadata.get("role"))
            if role is None:
                logger.warning(f"Skipping directory user {getattr(user, 'id', '?')} with unknown role")
                continue

            directory.append(
                DirectoryUser(
                    id=user.id,
                    email=user.email or "",
                    name=metadata.get("full_name") or metadata.get("username") or (user.email or ""),
                    role=role,
                    permissions=metadata.get("permissions") or [],
                    store_id=metadata.get("store_id"),
                    store_name=metadata.get("store_name"),
                    city=metadata.get("city"),
                    department=metadata.get("department"),
                    managed_city=metadata.get("managed_city"),
                    reporting_to=metadata.get("reporting_to"),
                )
            )
        return directory


# ============================================================
# DEMO DIRECTORY (DEV ONLY)
# ============================================================
class DemoCredentialVerifier(CredentialVerifier):
    """In-process verifier over the demo accounts; issues and revokes its own tokens."""

    name = "demo"

    def __init__(self, users: Optional[List[dict]] = None, stores: Optional[List[StoreRead]] = None):
        self._users = list(DEMO_USERS if users is None else users)
        self._stores = list(DEMO_STORES if stores is None else stores)
        self._tokens: Dict[str, str] = {}
        self._lock = Lock()

    def _find(self, email: str) -> Optional[dict]:
        email = email.strip().lower()
        return next((u for u in self._users if u["email"].lower() == email), None)

    def verify(self, email: str, password: str) -> VerifiedIdentity:
        user = self._find(email)
        if user is None or not secrets.compare_digest(user["password"], password):
            logger.warning(f"Login attempt failed for {email}: bad credentials")
            raise InvalidCredentialsError()

        token = secrets.token_urlsafe(32)
        with self._lock:
            self._tokens[token] = user["id"]

        return VerifiedIdentity(
            id=user["id"],
            email=user["email"],
            name=user["name"],
            role=user["role"],
            grants=list(user.get("permissions", [])),
            scope=_scope_from_metadata(user),
            token=token,
        )

    def probe(self, token: str) -> bool:
        with self._lock:
            return token in self._tokens

    def revoke(self, token: str) -> None:
        with self._lock:
            self._tokens.pop(token, None)

    def list_users(self) -> List[DirectoryUser]:
        return [
            DirectoryUser(**{k: v for k, v in user.items() if k != "password"})
            for user in self._users
        ]

    def list_stores(self) -> List[StoreRead]:
        return list(self._stores)


# ============================================================
# FACTORY
# ============================================================
VERIFIERS = {
    SupabaseCredentialVerifier.name: SupabaseCredentialVerifier,
    DemoCredentialVerifier.name: DemoCredentialVerifier,
}


def get_credential_verifier(kind: Optional[str] = None) -> CredentialVerifier:
    kind = (kind or settings.CREDENTIAL_VERIFIER).strip().lower()
    try:
        return VERIFIERS[kind]()
    except KeyError:
        raise ValueError(f"Unknown credential verifier: {kind!r}")

# core/session_store.py

"""
Session store: owns the one authenticated identity of this process.

Lifecycle:

    uninitialized → initializing → {authenticated, anonymous}
    authenticated ⇄ anonymous     (login / logout / invalidate)
    * → terminated                (close, at process shutdown)

Writers (initialize, login, logout, refresh_permissions, invalidate) run
one at a time under a single asyncio.Lock; a second login waits for the
first and its outcome is the one that stands. Readers never lock: the
current record is replaced with a single assignment, so a permission check
sees either the old session or the new one, never a mix.
"""

import asyncio
import json
import time
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from core.config import settings
from core.credential_verifier import CredentialVerifier
from core.errors import (
    InvalidCredentialsError,
    SessionExpiredError,
    StorageError,
    TokenInvalidError,
    UnknownRoleError,
)
from core.logging_config import logger
from core.permission_helpers import (
    RoleSpec,
    get_effective_permissions,
    has_role,
    is_authorized,
    parse_permissions,
)
from core.session_storage import CorruptStorageError, SessionStorage
from models.enums import Role, SessionState
from models.session import SESSION_SCHEMA_VERSION, Session, SessionScope, SessionStatus


TIMEOUT_MESSAGE = "Sign-in timed out. Please try again."
UNAVAILABLE_MESSAGE = "Sign-in service is unavailable. Please try again later."
NO_ROLE_MESSAGE = "Your account has no valid role assigned. Contact an administrator."


@dataclass(frozen=True)
class _Current:
    """The session and its credential token, swapped as one unit."""
    session: Session
    token: str
    version: int


# ============================================================
# SNAPSHOT CODEC
# ============================================================
def build_session(id: str, email: str, name: str, role: Role, grants, scope: SessionScope) -> Session:
    grants = parse_permissions(grants)
    return Session(
        id=id,
        email=email,
        name=name,
        role=role,
        grants=grants,
        permissions=get_effective_permissions(role, grants),
        scope=scope,
    )


def encode_snapshot(session: Session) -> str:
    return json.dumps({
        "schema_version": SESSION_SCHEMA_VERSION,
        "id": session.id,
        "email": session.email,
        "name": session.name,
        "role": session.role.value,
        "grants": sorted(p.value for p in session.grants),
        "permissions": sorted(p.value for p in session.permissions),
        "scope": session.scope.model_dump(exclude_none=True),
    })


def decode_snapshot(raw: str) -> Session:
    """
    Rebuild a Session from its stored snapshot.
    Effective permissions are recomputed against the current table.
    Raises ValueError / TypeError / UnknownRoleError for anything unusable.
    """
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("snapshot is not an object")

    version = data.get("schema_version")
    if version != SESSION_SCHEMA_VERSION:
        raise ValueError(f"unsupported snapshot schema_version {version!r}")

    role = Role.parse(data.get("role"))
    if role is None:
        raise UnknownRoleError(f"Unknown role in snapshot: {data.get('role')!r}")

    return build_session(
        id=str(data["id"]),
        email=str(data["email"]),
        name=str(data.get("name") or data["email"]),
        role=role,
        grants=parse_permissions(data.get("grants")),
        scope=SessionScope(**(data.get("scope") or {})),
    )


# ============================================================
# SESSION STORE
# ============================================================
class SessionStore:

    def __init__(
        self,
        verifier: CredentialVerifier,
        storage: SessionStorage,
        timeout: Optional[float] = None,
        probe_interval: Optional[float] = None,
    ):
        self._verifier = verifier
        self._storage = storage
        self._timeout = settings.VERIFY_TIMEOUT_SECONDS if timeout is None else timeout
        self._probe_interval = (
            settings.SESSION_PROBE_INTERVAL_SECONDS if probe_interval is None else probe_interval
        )

        self._lock = asyncio.Lock()
        self._current: Optional[_Current] = None
        self._version = 0
        self._state = SessionState.uninitialized
        self.last_error: Optional[str] = None
        self._last_probe = 0.0

    # -----------------------------------------------------
    # Reads (lock-free)
    # -----------------------------------------------------
    @property
    def verifier(self) -> CredentialVerifier:
        return self._verifier

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state == SessionState.initializing or self._lock.locked()

    @property
    def version(self) -> int:
        return self._version

    def current_session(self) -> Optional[Session]:
        current = self._current
        return current.session if current else None

    def current_token(self) -> Optional[str]:
        current = self._current
        return current.token if current else None

    def is_authenticated(self) -> bool:
        return self._current is not None

    def is_authorized(self, permission) -> bool:
        return is_authorized(self.current_session(), permission)

    def has_role(self, roles: RoleSpec) -> bool:
        return has_role(self.current_session(), roles)

    def status(self) -> SessionStatus:
        return SessionStatus(
            state=self._state,
            is_authenticated=self.is_authenticated(),
            is_loading=self.is_loading,
            error=self.last_error,
        )

    def clear_error(self) -> None:
        self.last_error = None

    # -----------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------
    def _swap(self, session: Optional[Session], token: Optional[str] = None) -> None:
        self._version += 1
        self._current = _Current(session, token, self._version) if session else None
        self._state = SessionState.authenticated if session else SessionState.anonymous
        self._last_probe = time.monotonic()

    def _ensure_open(self) -> None:
        if self._state == SessionState.terminated:
            raise RuntimeError("Session store is closed")

    async def _call_verifier(self, fn, *args):
        # Verifier SDKs block; keep them off the event loop and bounded in time
        return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=self._timeout)

    def _purge_storage(self) -> None:
        try:
            self._storage.clear()
        except StorageError as e:
            logger.error(f"Could not purge stored session: {e.message}")

    # -----------------------------------------------------
    # initialize()
    # -----------------------------------------------------
    async def initialize(self) -> Optional[Session]:
        """
        Restore a persisted session, if any, after re-validating its token.
        Never raises for storage or verifier trouble: those end in anonymous.
        """
        async with self._lock:
            self._ensure_open()

            if self._state != SessionState.uninitialized:
                logger.debug("Session store already initialized")
                return self.current_session()

            self._state = SessionState.initializing
            restored = None
            try:
                restored = await self._restore()
            finally:
                if restored:
                    self._swap(*restored)
                    logger.info(f"Restored session for {restored[0].email} ({restored[0].role})")
                else:
                    self._swap(None)

            return self.current_session()

    async def _restore(self):
        try:
            user_json, token = self._storage.read()
        except CorruptStorageError as e:
            logger.warning(f"{e.message}; purging")
            self._purge_storage()
            return None
        except StorageError as e:
            logger.error(f"Session storage unreadable, starting anonymous: {e.message}")
            return None

        if not user_json and not token:
            return None

        if not user_json or not token:
            logger.warning("Stored identity and token are mismatched; purging")
            self._purge_storage()
            return None

        try:
            session = decode_snapshot(user_json)
        except (ValueError, TypeError, KeyError, ValidationError, UnknownRoleError) as e:
            logger.warning(f"Stored session is unusable ({e}); purging")
            self._purge_storage()
            return None

        try:
            alive = await self._call_verifier(self._verifier.probe, token)
        except asyncio.TimeoutError:
            logger.warning("Session probe timed out; starting anonymous")
            return None
        except Exception as e:
            logger.warning(f"Session probe failed ({type(e).__name__}: {e}); starting anonymous")
            return None

        if not alive:
            logger.info(f"Stored credential for {session.email} was revoked; purging")
            self._purge_storage()
            return None

        return session, token

    # -----------------------------------------------------
    # login()
    # -----------------------------------------------------
    async def login(self, email: str, password: str) -> bool:
        """
        Verify credentials and, on success, persist and install the session.

        Returns False (with last_error set) for rejected credentials, a
        timeout, an unreachable verifier or an unknown role; the current
        session and storage are left untouched in those cases.
        Raises StorageError if the session cannot be persisted.
        """
        email = email.strip().lower()

        async with self._lock:
            self._ensure_open()

            try:
                identity = await self._call_verifier(self._verifier.verify, email, password)
            except InvalidCredentialsError as e:
                self.last_error = e.message
                return False
            except asyncio.TimeoutError:
                logger.warning(f"Login for {email} timed out after {self._timeout}s")
                self.last_error = TIMEOUT_MESSAGE
                return False
            except Exception as e:
                logger.error(f"Credential verifier error for {email}: {type(e).__name__}: {e}")
                self.last_error = UNAVAILABLE_MESSAGE
                return False

            role = Role.parse(identity.role)
            if role is None:
                logger.error(f"Verifier returned unknown role {identity.role!r} for {email}")
                self.last_error = NO_ROLE_MESSAGE
                return False

            session = build_session(
                id=identity.id,
                email=identity.email,
                name=identity.name,
                role=role,
                grants=parse_permissions(identity.grants),
                scope=identity.scope,
            )

            # Persist first: a failed write must not leave memory ahead of storage
            self._storage.write(encode_snapshot(session), identity.token)
            self._swap(session, identity.token)
            self.last_error = None

            logger.info(f"Login successful: {session.email} ({session.role})")
            return True

    # -----------------------------------------------------
    # check_credential()
    # -----------------------------------------------------
    async def check_credential(self) -> Optional[Session]:
        """
        Re-probe the current token at most once per probe interval.

        Raises TokenInvalidError when the verifier rejects the token; the
        app's AuthError handler then invalidates the session. An unreachable
        or slow verifier keeps the session until the next probe.
        """
        current = self._current
        if current is None:
            return None

        if time.monotonic() - self._last_probe < self._probe_interval:
            return current.session

        try:
            alive = await self._call_verifier(self._verifier.probe, current.token)
        except asyncio.TimeoutError:
            logger.warning(f"Credential probe for {current.session.email} timed out; keeping session")
            return current.session
        except Exception as e:
            logger.warning(f"Credential probe failed ({type(e).__name__}: {e}); keeping session")
            return current.session

        # A login or logout may have replaced the session while probing
        if self._current is not current:
            return self.current_session()

        if not alive:
            logger.info(f"Credential for {current.session.email} was rejected by the verifier")
            raise TokenInvalidError()

        self._last_probe = time.monotonic()
        return current.session

    # -----------------------------------------------------
    # logout()
    # -----------------------------------------------------
    async def logout(self) -> None:
        """
        Drop the session and clear both storage keys. Idempotent.
        A storage failure is raised after memory is already cleared,
        so calling logout again retries the purge.
        No-op once the store is closed: the persisted session is kept.
        """
        async with self._lock:
            if self._state == SessionState.terminated:
                return

            current = self._current
            self._swap(None)

            self._storage.clear()

            if current:
                logger.info(f"Logged out {current.session.email}")

    # -----------------------------------------------------
    # refresh_permissions()
    # -----------------------------------------------------
    async def refresh_permissions(self) -> Optional[Session]:
        """Recompute the effective set against the current table. No-op when anonymous."""
        async with self._lock:
            current = self._current
            if current is None:
                return None

            session = current.session
            permissions = get_effective_permissions(session.role, session.grants)
            if permissions == session.permissions:
                return session

            refreshed = session.model_copy(update={"permissions": permissions})
            self._storage.write(encode_snapshot(refreshed), current.token)
            self._swap(refreshed, current.token)

            logger.info(f"Permissions refreshed for {session.email}")
            return refreshed

    # -----------------------------------------------------
    # invalidate()
    # -----------------------------------------------------
    async def invalidate(self, reason: Optional[str] = None) -> None:
        """Silent logout after the credential was found expired or invalid."""
        async with self._lock:
            current = self._current
            if current is None:
                return

            self._swap(None)
            self._purge_storage()
            self.last_error = reason or SessionExpiredError.public_message
            logger.info(f"Session for {current.session.email} invalidated")

    # -----------------------------------------------------
    # close()
    # -----------------------------------------------------
    async def close(self) -> None:
        """Process shutdown. The persisted session stays for the next start."""
        async with self._lock:
            self._current = None
            self._state = SessionState.terminated

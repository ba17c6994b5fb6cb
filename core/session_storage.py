# core/session_storage.py

"""
Durable local storage for the current session.

Two logical keys are kept:
    bikebiz_user   → JSON snapshot of the Session
    bikebiz_token  → opaque credential token

Both always travel together: the file backend stores them in one JSON
document that is replaced atomically, so a crash mid-write leaves either
the old pair or the new pair, never one of each.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from contextlib import contextmanager, suppress
from threading import Lock
from typing import Dict, Optional, Tuple

from core.errors import StorageError
from core.logging_config import logger


USER_KEY = "bikebiz_user"
TOKEN_KEY = "bikebiz_token"

StoredPair = Tuple[Optional[str], Optional[str]]


class CorruptStorageError(StorageError):
    """Storage was readable but its content cannot be decoded."""

    public_message = "Stored session is corrupted"


class SessionStorage(ABC):
    """Backend contract used by the session store."""

    @abstractmethod
    def read(self) -> StoredPair:
        """Return (user_json, token); either may be None when absent."""

    @abstractmethod
    def write(self, user_json: str, token: str) -> None:
        """Persist both keys together."""

    @abstractmethod
    def clear(self) -> None:
        """Remove both keys together. No-op when already empty."""


# ============================================================
# In-memory backend (tests, ephemeral sessions)
# ============================================================
class MemorySessionStorage(SessionStorage):

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(data or {})
        self._lock = Lock()

    def read(self) -> StoredPair:
        with self._lock:
            return self._data.get(USER_KEY), self._data.get(TOKEN_KEY)

    def write(self, user_json: str, token: str) -> None:
        with self._lock:
            self._data = {USER_KEY: user_json, TOKEN_KEY: token}

    def clear(self) -> None:
        with self._lock:
            self._data = {}

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._data)


# ============================================================
# File backend
# ============================================================
class FileSessionStorage(SessionStorage):

    def __init__(self, path: str):
        self.path = os.path.abspath(path)
        self._lock = Lock()

    @contextmanager
    def _atomic_write(self):
        """
        Yield a temp file next to the target; on clean exit it is fsynced
        and renamed over the target, on error it is removed.
        """
        directory = os.path.dirname(self.path)
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".session-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                yield fh
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            with suppress(OSError):
                os.unlink(tmp_path)
            raise

    def read(self) -> StoredPair:
        with self._lock:
            if not os.path.exists(self.path):
                return None, None

            try:
                with open(self.path, "r", encoding="utf-8") as fh:
                    raw = fh.read()
            except OSError as e:
                raise StorageError(f"Cannot read session file {self.path}: {e}")

        try:
            data = json.loads(raw)
        except ValueError as e:
            raise CorruptStorageError(f"Session file {self.path} is not valid JSON: {e}")

        if not isinstance(data, dict):
            raise CorruptStorageError(f"Session file {self.path} has unexpected layout")

        user_json = data.get(USER_KEY)
        token = data.get(TOKEN_KEY)

        if user_json is not None and not isinstance(user_json, str):
            raise CorruptStorageError(f"Session file {self.path}: '{USER_KEY}' is not a string")
        if token is not None and not isinstance(token, str):
            raise CorruptStorageError(f"Session file {self.path}: '{TOKEN_KEY}' is not a string")

        return user_json or None, token or None

    def write(self, user_json: str, token: str) -> None:
        if not user_json or not token:
            raise StorageError("Refusing to persist a session without both identity and token")

        with self._lock:
            try:
                with self._atomic_write() as fh:
                    json.dump({USER_KEY: user_json, TOKEN_KEY: token}, fh)
            except OSError as e:
                raise StorageError(f"Cannot write session file {self.path}: {e}")

        logger.debug(f"Session persisted to {self.path}")

    def clear(self) -> None:
        with self._lock:
            try:
                os.remove(self.path)
            except FileNotFoundError:
                return
            except OSError as e:
                raise StorageError(f"Cannot remove session file {self.path}: {e}")

        logger.debug(f"Session file {self.path} removed")

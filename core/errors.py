# core/errors.py

from fastapi import HTTPException


# ============================================================
# AUTH ERROR TAXONOMY
# ============================================================
# Denied access is never an exception. It is a plain False from
# the resolver. These are for the genuinely exceptional paths.

class AuthError(Exception):
    """Base class for authentication / authorization failures."""

    status_code = 500
    public_message = "Authorization error"

    def __init__(self, message: str = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class InvalidCredentialsError(AuthError):
    """Email/password rejected by the credential verifier. Recoverable."""

    status_code = 401
    public_message = "Invalid email or password"


class SessionExpiredError(AuthError):
    """The stored credential is no longer accepted. Triggers a silent logout."""

    status_code = 401
    public_message = "Your session has expired. Please sign in again."


class TokenInvalidError(SessionExpiredError):
    """The credential token failed its liveness probe."""

    public_message = "Your session is no longer valid. Please sign in again."


class UnknownRoleError(AuthError):
    """A role outside the closed role set. Programming error; always deny."""

    status_code = 403
    public_message = "Unknown role"


class UnknownPermissionError(AuthError):
    """A permission literal outside the catalog. Programming error; always deny."""

    status_code = 403
    public_message = "Unknown permission"


class StorageError(AuthError):
    """Durable session storage could not be read or written."""

    status_code = 503
    public_message = "Session storage unavailable, please retry"


class CatalogError(AuthError):
    """The role → permission table is corrupted or violates its invariants."""

    status_code = 500
    public_message = "Permission catalog is invalid"


# ============================================================
# HTTP MAPPING
# ============================================================
def auth_error_to_http(error: AuthError) -> HTTPException:
    """
    Map an AuthError onto an HTTPException.
    Returns (doesn't raise) so the caller can customize or re-raise.
    """
    from core.logging_config import logger

    if error.status_code >= 500:
        logger.error(f"{type(error).__name__}: {error.message}")
    else:
        logger.warning(f"{type(error).__name__}: {error.message}")

    headers = {"WWW-Authenticate": "Bearer"} if error.status_code == 401 else None

    # Programming errors never leak their details to the caller
    if isinstance(error, (UnknownRoleError, UnknownPermissionError, CatalogError)):
        detail = error.public_message
    else:
        detail = error.message

    return HTTPException(status_code=error.status_code, detail=detail, headers=headers)


def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • GoTrue (Auth) errors
      • Errors carrying args
      • Generic Python exceptions
    """

    # Case 1 — Supabase Auth / GoTrue errors
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2 — Supabase errors with args (common)
    if error.args:
        return str(error.args[0])

    # Case 3 — Plain string fallback
    return str(error) or type(error).__name__

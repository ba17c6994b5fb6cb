# core/config_validator.py

from typing import List
from core.config import settings
from core.credential_verifier import VERIFIERS
from core.logging_config import logger


def validate_required_config() -> List[str]:
    """
    Validate that all required settings are present.
    Returns list of problems.
    """
    missing = []

    verifier = settings.CREDENTIAL_VERIFIER.strip().lower()
    if verifier not in VERIFIERS:
        missing.append(f"CREDENTIAL_VERIFIER (unknown value {verifier!r})")

    # Supabase verifier cannot sign anyone in without these
    if verifier == "supabase":
        if not settings.SUPABASE_URL:
            missing.append("SUPABASE_URL")
        if not settings.SUPABASE_SERVICE_ROLE_KEY:
            missing.append("SUPABASE_SERVICE_ROLE_KEY")

    if not settings.SESSION_STORAGE_PATH:
        missing.append("SESSION_STORAGE_PATH")

    return missing


def validate_optional_config() -> List[str]:
    """
    Validate optional but recommended configuration.
    Returns list of warnings.
    """
    warnings = []

    if settings.CREDENTIAL_VERIFIER.strip().lower() == "demo" and settings.ENV == "production":
        warnings.append("CREDENTIAL_VERIFIER=demo in production (demo accounts enabled)")

    if settings.VERIFY_TIMEOUT_SECONDS <= 0:
        warnings.append("VERIFY_TIMEOUT_SECONDS <= 0 (every sign-in will time out)")

    return warnings


def validate_config_on_startup():
    """
    Validate configuration on application startup.
    Raises RuntimeError if critical config is missing.
    Logs warnings for optional config.
    """
    missing_required = validate_required_config()
    missing_optional = validate_optional_config()

    if missing_required:
        error_msg = f"Missing or invalid configuration: {', '.join(missing_required)}"
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    for warning in missing_optional:
        logger.warning(f"Configuration warning: {warning}")

    logger.info("Configuration validation passed")

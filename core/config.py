from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "BikeBiz CRM Access Service"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # Frontend Domains
    # -------------------------------------------------
    FRONTEND_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Credential verification
    # -------------------------------------------------
    # "supabase" → Supabase Auth, "demo" → built-in demo directory
    CREDENTIAL_VERIFIER: str = "demo"
    VERIFY_TIMEOUT_SECONDS: float = Field(
        10.0,
        description="Upper bound for a login or session probe round-trip",
    )

    SESSION_PROBE_INTERVAL_SECONDS: float = Field(
        60.0,
        description="Minimum gap between re-checks of the signed-in credential",
    )

    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # -------------------------------------------------
    # Durable session storage
    # -------------------------------------------------
    SESSION_STORAGE_PATH: str = Field(
        ".bikebiz/session.json",
        description="File holding the persisted identity and credential token",
    )

    # -------------------------------------------------
    # Role → permission table override (JSON file)
    # -------------------------------------------------
    ROLE_PERMISSIONS_FILE: Optional[str] = None

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
settings.BACKEND_CORS_ORIGINS = sorted(
    {origin.rstrip("/") for origin in settings.FRONTEND_ORIGINS}
)

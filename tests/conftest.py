# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient
from typing import Generator

from main import create_app
from core import permissions as catalog
from core.credential_verifier import DemoCredentialVerifier
from core.session_storage import MemorySessionStorage
from core.session_store import SessionStore, build_session
from models.enums import Role
from models.session import SessionScope


@pytest.fixture
def verifier() -> DemoCredentialVerifier:
    """Demo directory verifier (no network)."""
    return DemoCredentialVerifier()


@pytest.fixture
def storage() -> MemorySessionStorage:
    return MemorySessionStorage()


@pytest.fixture
def session_store(verifier, storage) -> SessionStore:
    # Re-probe the credential on every request
    return SessionStore(verifier=verifier, storage=storage, timeout=2, probe_interval=0)


@pytest.fixture(scope="function")
def app(session_store):
    """Create a test FastAPI application instance."""
    return create_app(session_store)


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_session():
    """Factory for sessions built the same way login builds them."""

    def _make(role=Role.sales_executive, grants=(), scope=None, id="u-1", email="user@bikebiz.com"):
        return build_session(
            id=id,
            email=email,
            name="Test User",
            role=Role(role),
            grants=frozenset(grants),
            scope=scope or SessionScope(),
        )

    return _make


@pytest.fixture(autouse=True)
def reset_catalog():
    """Every test starts and ends with the built-in role table."""
    catalog.ROLE_PERMISSIONS = catalog.build_role_permissions(catalog.DEFAULT_ROLE_PERMISSIONS)
    yield
    catalog.ROLE_PERMISSIONS = catalog.build_role_permissions(catalog.DEFAULT_ROLE_PERMISSIONS)

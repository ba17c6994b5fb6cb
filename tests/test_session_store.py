# tests/test_session_store.py

"""
Tests for the session lifecycle: initialize, login, logout, refresh, invalidate.
Store coroutines are driven with asyncio.run inside plain test functions.
"""

import asyncio
import json
import time

import pytest
from unittest.mock import Mock

from core import permissions as catalog
from core.credential_verifier import DemoCredentialVerifier, VerifiedIdentity
from core.errors import InvalidCredentialsError, StorageError, TokenInvalidError
from core.session_storage import TOKEN_KEY, USER_KEY, MemorySessionStorage
from core.session_store import (
    NO_ROLE_MESSAGE,
    TIMEOUT_MESSAGE,
    SessionStore,
    decode_snapshot,
    encode_snapshot,
)
from models.enums import Permission, Role, SessionState


def run(coro):
    return asyncio.run(coro)


# ============================================================
# LOGIN
# ============================================================

def test_login_success_installs_and_persists_session(session_store, storage):
    assert run(session_store.login("Store@Mumbai.com ", "store123")) is True

    session = session_store.current_session()
    assert session.email == "store@mumbai.com"
    assert session.role == Role.store_admin
    assert session.scope.store_id == "1"
    assert session.scope.store_name == "Mumbai Central Store"
    assert session_store.state == SessionState.authenticated
    assert session_store.last_error is None

    # Effective = explicit grants ∪ role defaults
    assert catalog.permissions_for_role(Role.store_admin) <= session.permissions

    stored = storage.snapshot()
    assert set(stored) == {USER_KEY, TOKEN_KEY}
    assert stored[TOKEN_KEY] == session_store.current_token()
    assert json.loads(stored[USER_KEY])["email"] == "store@mumbai.com"


def test_failed_login_leaves_prior_session_and_storage_untouched(session_store, storage):
    run(session_store.login("sales1@mumbai.com", "sales123"))
    before_session = session_store.current_session()
    before_storage = storage.snapshot()

    spy = Mock(wraps=storage.write)
    storage.write = spy

    assert run(session_store.login("bad@x.com", "wrong")) is False

    assert session_store.current_session() is before_session
    assert session_store.state == SessionState.authenticated
    assert storage.snapshot() == before_storage
    spy.assert_not_called()
    assert session_store.last_error == InvalidCredentialsError.public_message


def test_failed_login_from_anonymous_writes_nothing(session_store, storage):
    run(session_store.initialize())
    assert run(session_store.login("bad@x.com", "wrong")) is False
    assert session_store.current_session() is None
    assert session_store.state == SessionState.anonymous
    assert storage.snapshot() == {}


def test_login_timeout_reports_failure(storage):
    class SlowVerifier(DemoCredentialVerifier):
        def verify(self, email, password):
            time.sleep(0.5)
            return super().verify(email, password)

    store = SessionStore(SlowVerifier(), storage, timeout=0.05)

    assert run(store.login("admin@bikebiz.com", "admin123")) is False
    assert store.last_error == TIMEOUT_MESSAGE
    assert store.current_session() is None
    assert storage.snapshot() == {}


def test_login_with_unreachable_verifier_reports_failure(storage):
    verifier = Mock()
    verifier.verify.side_effect = ConnectionError("network down")
    store = SessionStore(verifier, storage, timeout=2)

    assert run(store.login("admin@bikebiz.com", "admin123")) is False
    assert store.last_error
    assert store.current_session() is None


def test_login_with_unknown_role_is_rejected(storage):
    verifier = Mock()
    verifier.verify.return_value = VerifiedIdentity(
        id="99", email="x@bikebiz.com", name="X", role="regional_manager", token="t",
    )
    store = SessionStore(verifier, storage, timeout=2)

    assert run(store.login("x@bikebiz.com", "pw")) is False
    assert store.last_error == NO_ROLE_MESSAGE
    assert storage.snapshot() == {}


def test_login_storage_failure_is_raised_and_not_half_applied(verifier):
    storage = Mock()
    storage.write.side_effect = StorageError("disk full")
    store = SessionStore(verifier, storage, timeout=2)

    with pytest.raises(StorageError):
        run(store.login("admin@bikebiz.com", "admin123"))

    assert store.current_session() is None
    assert not store.is_authenticated()


def test_unknown_grants_from_verifier_are_dropped(storage):
    verifier = Mock()
    verifier.verify.return_value = VerifiedIdentity(
        id="5", email="s@bikebiz.com", name="S", role="sales_executive",
        grants=["export_data", "root_access"], token="t",
    )
    store = SessionStore(verifier, storage, timeout=2)

    assert run(store.login("s@bikebiz.com", "pw")) is True
    session = store.current_session()
    assert session.grants == frozenset({Permission.export_data})
    assert not store.is_authorized("root_access")


def test_second_login_wins(session_store):
    async def scenario():
        return await asyncio.gather(
            session_store.login("store@mumbai.com", "store123"),
            session_store.login("store@delhi.com", "store123"),
        )

    assert run(scenario()) == [True, True]
    assert session_store.current_session().email == "store@delhi.com"


def test_is_loading_while_login_in_flight(storage):
    class SlowVerifier(DemoCredentialVerifier):
        def verify(self, email, password):
            time.sleep(0.1)
            return super().verify(email, password)

    store = SessionStore(SlowVerifier(), storage, timeout=2)

    async def scenario():
        task = asyncio.create_task(store.login("admin@bikebiz.com", "admin123"))
        await asyncio.sleep(0.02)
        loading = store.is_loading
        await task
        return loading

    assert run(scenario()) is True
    assert store.is_loading is False


# ============================================================
# LOGOUT
# ============================================================

def test_logout_clears_memory_and_storage(session_store, storage):
    run(session_store.login("admin@bikebiz.com", "admin123"))
    run(session_store.logout())

    assert session_store.current_session() is None
    assert session_store.state == SessionState.anonymous
    assert storage.snapshot() == {}


def test_logout_twice_is_harmless(session_store, storage):
    run(session_store.login("admin@bikebiz.com", "admin123"))
    run(session_store.logout())
    run(session_store.logout())

    assert session_store.state == SessionState.anonymous
    assert session_store.current_session() is None
    assert storage.snapshot() == {}


def test_logout_storage_failure_is_raised_after_memory_cleared(verifier):
    storage = MemorySessionStorage()
    store = SessionStore(verifier, storage, timeout=2)
    run(store.login("admin@bikebiz.com", "admin123"))

    storage.clear = Mock(side_effect=StorageError("read-only filesystem"))
    with pytest.raises(StorageError):
        run(store.logout())

    assert store.current_session() is None


# ============================================================
# INITIALIZE
# ============================================================

def test_initialize_with_empty_storage_is_anonymous(session_store):
    assert run(session_store.initialize()) is None
    assert session_store.state == SessionState.anonymous


def test_login_then_restart_restores_same_permissions(verifier, storage):
    first = SessionStore(verifier, storage, timeout=2)
    run(first.login("procurement@pune.com", "proc123"))
    original = first.current_session()

    # Simulated restart: new store, same storage, token still valid
    second = SessionStore(verifier, storage, timeout=2)
    restored = run(second.initialize())

    assert second.state == SessionState.authenticated
    assert restored.permissions == original.permissions
    assert restored.scope == original.scope
    assert second.current_token() == first.current_token()


def test_initialize_purges_revoked_token(verifier, storage):
    first = SessionStore(verifier, storage, timeout=2)
    run(first.login("store@delhi.com", "store123"))
    verifier.revoke(first.current_token())

    second = SessionStore(verifier, storage, timeout=2)
    assert run(second.initialize()) is None

    assert second.state == SessionState.anonymous
    assert storage.snapshot() == {}


def test_initialize_purges_mismatched_keys(verifier):
    storage = MemorySessionStorage({USER_KEY: '{"schema_version": 1}'})
    store = SessionStore(verifier, storage, timeout=2)

    assert run(store.initialize()) is None
    assert storage.snapshot() == {}


def test_initialize_purges_token_without_identity(verifier):
    storage = MemorySessionStorage({TOKEN_KEY: "orphan-token"})
    store = SessionStore(verifier, storage, timeout=2)

    assert run(store.initialize()) is None
    assert storage.snapshot() == {}


def test_initialize_purges_undecodable_snapshot(verifier):
    storage = MemorySessionStorage({USER_KEY: "{not json", TOKEN_KEY: "t"})
    store = SessionStore(verifier, storage, timeout=2)

    assert run(store.initialize()) is None
    assert storage.snapshot() == {}


def test_initialize_purges_old_schema_version(verifier):
    snapshot = json.dumps({
        "schema_version": 0, "id": "1", "email": "admin@bikebiz.com",
        "name": "Global Admin", "role": "global_admin",
    })
    storage = MemorySessionStorage({USER_KEY: snapshot, TOKEN_KEY: "t"})
    store = SessionStore(verifier, storage, timeout=2)

    assert run(store.initialize()) is None
    assert storage.snapshot() == {}


def test_initialize_survives_storage_read_failure(verifier):
    storage = Mock()
    storage.read.side_effect = StorageError("permission denied")
    store = SessionStore(verifier, storage, timeout=2)

    assert run(store.initialize()) is None
    assert store.state == SessionState.anonymous
    storage.clear.assert_not_called()


def test_initialize_keeps_storage_when_probe_unreachable(verifier, storage):
    first = SessionStore(verifier, storage, timeout=2)
    run(first.login("admin@bikebiz.com", "admin123"))
    before = storage.snapshot()

    flaky = Mock()
    flaky.probe.side_effect = ConnectionError("offline")
    second = SessionStore(flaky, storage, timeout=2)

    assert run(second.initialize()) is None
    assert second.state == SessionState.anonymous
    assert storage.snapshot() == before


def test_initialize_runs_once(session_store, storage, verifier):
    run(session_store.initialize())
    run(session_store.login("admin@bikebiz.com", "admin123"))

    # A late second initialize must not reset the signed-in session
    run(session_store.initialize())
    assert session_store.current_session().email == "admin@bikebiz.com"


# ============================================================
# REFRESH / INVALIDATE / CLOSE
# ============================================================

def test_refresh_permissions_when_anonymous_is_noop(session_store, storage):
    assert run(session_store.refresh_permissions()) is None
    assert storage.snapshot() == {}


def test_refresh_picks_up_reloaded_table(session_store):
    run(session_store.login("sales1@delhi.com", "sales123"))
    assert not session_store.is_authorized(Permission.view_reports)
    before_version = session_store.version

    raw = dict(catalog.DEFAULT_ROLE_PERMISSIONS)
    raw[Role.sales_executive] = list(raw[Role.sales_executive]) + [Permission.view_reports]
    catalog.ROLE_PERMISSIONS = catalog.build_role_permissions(raw)

    refreshed = run(session_store.refresh_permissions())

    assert Permission.view_reports in refreshed.permissions
    assert session_store.current_session() is refreshed
    assert session_store.version == before_version + 1


def test_invalidate_logs_out_and_prompts(session_store, storage):
    run(session_store.login("admin@bikebiz.com", "admin123"))
    run(session_store.invalidate())

    assert session_store.current_session() is None
    assert storage.snapshot() == {}
    assert "sign in again" in session_store.last_error


def test_clear_error(session_store):
    run(session_store.login("bad@x.com", "wrong"))
    assert session_store.last_error
    session_store.clear_error()
    assert session_store.status().error is None


def test_close_terminates_store(session_store):
    run(session_store.login("admin@bikebiz.com", "admin123"))
    run(session_store.close())

    assert session_store.state == SessionState.terminated
    assert session_store.current_session() is None
    with pytest.raises(RuntimeError):
        run(session_store.login("admin@bikebiz.com", "admin123"))


# ============================================================
# SNAPSHOT CODEC
# ============================================================

def test_snapshot_recomputes_permissions_from_grants(make_session):
    session = make_session(role=Role.sales_executive, grants=["export_data"])
    raw = json.loads(encode_snapshot(session))
    raw["permissions"] = ["all"]  # tampered effective set is ignored

    restored = decode_snapshot(json.dumps(raw))

    assert restored.permissions == session.permissions
    assert Permission.all not in restored.permissions


# ============================================================
# CREDENTIAL RE-CHECK
# ============================================================

def test_check_credential_rejects_revoked_token(verifier, storage):
    store = SessionStore(verifier, storage, timeout=2, probe_interval=0)
    run(store.login("admin@bikebiz.com", "admin123"))
    verifier.revoke(store.current_token())

    with pytest.raises(TokenInvalidError):
        run(store.check_credential())


def test_check_credential_is_rate_limited(verifier, storage):
    store = SessionStore(verifier, storage, timeout=2, probe_interval=3600)
    run(store.login("admin@bikebiz.com", "admin123"))
    verifier.revoke(store.current_token())

    # Within the interval the token is trusted without a round-trip
    assert run(store.check_credential()) is store.current_session()


def test_check_credential_keeps_session_when_verifier_unreachable(storage):
    verifier = Mock()
    verifier.verify.return_value = VerifiedIdentity(
        id="1", email="admin@bikebiz.com", name="Global Admin", role="global_admin", token="t",
    )
    verifier.probe.side_effect = ConnectionError("offline")
    store = SessionStore(verifier, storage, timeout=2, probe_interval=0)
    run(store.login("admin@bikebiz.com", "admin123"))

    assert run(store.check_credential()).email == "admin@bikebiz.com"
    assert store.is_authenticated()


def test_check_credential_when_anonymous(session_store):
    assert run(session_store.check_credential()) is None


def test_logout_after_close_keeps_persisted_session(session_store, storage):
    run(session_store.login("admin@bikebiz.com", "admin123"))
    before = storage.snapshot()
    run(session_store.close())

    run(session_store.logout())

    assert storage.snapshot() == before
    assert session_store.state == SessionState.terminated

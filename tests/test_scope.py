# tests/test_scope.py

from core.credential_verifier import DemoCredentialVerifier
from core.scope import visible_stores, visible_users
from models.enums import Role
from models.session import SessionScope


def _directory():
    verifier = DemoCredentialVerifier()
    return verifier.list_users(), verifier.list_stores()


def test_store_admin_sees_only_own_store_users(make_session):
    """Mumbai store admin holding manage_store_users."""
    users, _ = _directory()
    session = make_session(
        role=Role.store_admin, id="2", email="store@mumbai.com",
        scope=SessionScope(store_id="1", store_name="Mumbai Central Store"),
    )

    visible = visible_users(session, users)

    assert visible
    assert {u.store_id for u in visible} == {"1"}
    assert {u.email for u in visible} == {
        "store@mumbai.com", "sales1@mumbai.com", "sales2@mumbai.com",
    }


def test_sales_executive_without_store_sees_nothing(make_session):
    users, _ = _directory()
    session = make_session(role=Role.sales_executive, scope=SessionScope())
    assert visible_users(session, users) == []


def test_global_admin_sees_everyone(make_session):
    users, stores = _directory()
    admin = make_session(role=Role.global_admin, grants=["all"], id="1")
    assert len(visible_users(admin, users)) == len(users)
    assert len(visible_stores(admin, stores)) == len(stores)


def test_procurement_admin_sees_own_team(make_session):
    users, _ = _directory()
    session = make_session(
        role=Role.procurement_admin, id="10", email="procurement@pune.com",
        scope=SessionScope(managed_city="Pune", city="Pune"),
    )

    visible = {u.id for u in visible_users(session, users)}

    assert visible == {"10", "12", "13"}


def test_procurement_executive_sees_self(make_session):
    users, stores = _directory()
    session = make_session(role=Role.procurement_executive, id="12", scope=SessionScope(city="Pune"))
    assert [u.id for u in visible_users(session, users)] == ["12"]
    assert visible_stores(session, stores) == []


def test_store_roles_see_own_store_only(make_session):
    _, stores = _directory()
    session = make_session(role=Role.store_admin, scope=SessionScope(store_id="2"))
    assert [s.id for s in visible_stores(session, stores)] == ["2"]


def test_anonymous_sees_nothing():
    users, stores = _directory()
    assert visible_users(None, users) == []
    assert visible_stores(None, stores) == []

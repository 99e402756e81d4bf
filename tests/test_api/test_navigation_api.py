"""HTTP tests for the FastAPI app (TestClient, in-memory database)."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from erp_nav.db.base import Base
from erp_nav.db.init_db import seed_demo_data
from erp_nav.db.session import get_db
from erp_nav.errors import Diagnostics
from erp_nav.main import create_app
from erp_nav.models.security import User as UserRecord
from erp_nav.navigation.composer import NavigationComposer
from erp_nav.navigation.session import NavigationSessionStore


@pytest.fixture
def api_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    with Session(engine) as db:
        seed_demo_data(db)
    return engine


@pytest.fixture
def provider():
    """Remote provider stub; tests set ``fetch_user_modules`` as needed."""
    stub = MagicMock()
    stub.fetch_user_modules.return_value = []
    return stub


@pytest.fixture
def client(api_engine, registry, provider):
    # No lifespan: state is wired by hand so no file-backed database is touched.
    app = create_app()
    diagnostics = Diagnostics()
    composer = NavigationComposer(registry, diagnostics=diagnostics)
    app.state.diagnostics = diagnostics
    app.state.session_store = NavigationSessionStore(composer, provider)

    TestSession = sessionmaker(bind=api_engine, autocommit=False, autoflush=False, class_=Session)

    def _get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    return TestClient(app)


def _user_id(engine, username: str) -> int:
    with Session(engine) as db:
        return db.scalars(select(UserRecord.id).where(UserRecord.username == username)).one()


def _auth(engine, username: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {_user_id(engine, username)}"}


def _paths(body):
    return [item["path"] for section in body["sections"] for item in section["items"]]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_me_requires_auth(client):
    assert client.get("/me").status_code == 401


def test_malformed_authorization_header(client):
    assert client.get("/me", headers={"Authorization": "Token 1"}).status_code == 400
    assert client.get("/me", headers={"Authorization": "Bearer abc"}).status_code == 400


def test_unknown_and_inactive_users(client, api_engine):
    assert client.get("/me", headers={"Authorization": "Bearer 9999"}).status_code == 401
    assert client.get("/me", headers=_auth(api_engine, "ivan_inactive")).status_code == 401


def test_me_returns_snapshot(client, api_engine):
    body = client.get("/me", headers=_auth(api_engine, "hana_hr_hod")).json()
    assert body["role_level"] == 700
    assert body["role_title"] == "Head of Department"
    assert body["department"] == "Human Resources"
    assert "HR" in body["module_access"]
    assert body["is_super"] is False


def test_navigation_falls_back_to_registry_when_remote_empty(client, api_engine, provider):
    resp = client.get("/navigation", headers=_auth(api_engine, "sara_sales"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["remote_source"] is False
    assert body["sections"][0]["name"] == "main"
    assert body["sections"][0]["items"][0]["path"] == "/dashboard"
    assert body["sections"][0]["items"][0]["icon"] == "home"
    assert "/dashboard/modules/sales" in _paths(body)
    provider.fetch_user_modules.assert_called_once_with(str(_user_id(api_engine, "sara_sales")))


def test_navigation_uses_remote_modules(client, api_engine, provider):
    provider.fetch_user_modules.return_value = [
        {"code": "SELF_SERVICE", "name": "Self-Service", "icon": "HiOutlineUser"},
        {"name": "missing code"},
    ]
    body = client.get("/navigation", headers=_auth(api_engine, "sara_sales")).json()
    assert body["remote_source"] is True
    assert _paths(body) == ["/dashboard", "/dashboard/modules/self-service"]
    # Unknown icon names fall back to the home icon.
    assert body["sections"][1]["items"][0]["icon"] == "home"


def test_refresh_refetches(client, api_engine, provider):
    headers = _auth(api_engine, "sara_sales")
    client.get("/navigation", headers=headers)
    provider.fetch_user_modules.return_value = [{"code": "HR", "name": "HR"}]

    body = client.post("/navigation/refresh", headers=headers).json()
    assert body["remote_source"] is True
    assert _paths(body) == ["/dashboard", "/dashboard/modules/hr"]
    assert provider.fetch_user_modules.call_count == 2


def test_navigate_into_module(client, api_engine):
    resp = client.post(
        "/navigation/navigate",
        json={"path": "/dashboard/modules/hr/onboarding"},
        headers=_auth(api_engine, "hana_hr_hod"),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["view"]["current_module_key"] == "hr"
    assert body["view"]["is_module_view"] is True
    assert body["module"]["key"] == "hr"

    items = [item for section in body["module"]["sections"] for item in section["items"]]
    active = [item["path"] for item in items if item["active"]]
    assert active == ["/dashboard/modules/hr/onboarding"]
    assert not any(item["active"] for section in body["sections"] for item in section["items"])


def test_navigate_outside_modules(client, api_engine):
    body = client.post(
        "/navigation/navigate",
        json={"path": "/dashboard/documents"},
        headers=_auth(api_engine, "sara_sales"),
    ).json()
    assert body["module"] is None
    assert body["view"]["current_module_key"] is None
    active = [item["path"] for section in body["sections"] for item in section["items"] if item["active"]]
    assert active == ["/dashboard/documents"]


def test_navigate_requires_path(client, api_engine):
    resp = client.post("/navigation/navigate", json={"path": ""}, headers=_auth(api_engine, "sara_sales"))
    assert resp.status_code == 422


def test_access_denied_is_403(client, api_engine):
    headers = _auth(api_engine, "sara_sales")
    resp = client.get("/navigation/access", params={"path": "/dashboard/modules/hr/onboarding"}, headers=headers)
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Access Denied"


def test_access_allowed_and_unowned(client, api_engine):
    headers = _auth(api_engine, "hana_hr_hod")
    allowed = client.get("/navigation/access", params={"path": "/dashboard/modules/hr/onboarding"}, headers=headers)
    assert allowed.json() == {"path": "/dashboard/modules/hr/onboarding", "decision": "allowed"}

    unowned = client.get("/navigation/access", params={"path": "/dashboard/profile"}, headers=headers)
    assert unowned.json()["decision"] == "unowned"


def test_module_descriptor(client, api_engine):
    headers = _auth(api_engine, "fiona_fin_hod")
    body = client.get("/navigation/modules/FINANCE", headers=headers).json()
    assert body["key"] == "finance"
    assert body["base_path"] == "/dashboard/modules/finance"
    assert [s["title"] for s in body["sections"]][0] == "Wallet Management"
    assert body["sections"][0]["collapsed"] is False


def test_unknown_module_is_404(client, api_engine):
    resp = client.get("/navigation/modules/nope", headers=_auth(api_engine, "sam_super"))
    assert resp.status_code == 404


def test_module_root_access_denied_is_403(client, api_engine):
    headers = _auth(api_engine, "sara_sales")
    resp = client.get("/navigation/access", params={"path": "/dashboard/modules/inventory"}, headers=headers)
    assert resp.status_code == 403


def test_diagnostics_visible_to_super_only(client, api_engine):
    super_headers = _auth(api_engine, "sam_super")
    client.post("/navigation/navigate", json={"path": "/dashboard/modules/nope"}, headers=super_headers)

    body = client.get("/diagnostics", params={"kind": "unknown_module"}, headers=super_headers).json()
    assert [d["kind"] for d in body] == ["unknown_module"]
    assert body[0]["context"] == {"path": "/dashboard/modules/nope"}

    assert client.get("/diagnostics", headers=_auth(api_engine, "sara_sales")).status_code == 403
    assert client.get("/diagnostics").status_code == 401


def test_logout_drops_navigation_session(client, api_engine):
    headers = _auth(api_engine, "hana_hr_hod")
    store = client.app.state.session_store
    client.get("/navigation", headers=headers)
    assert len(store) == 1

    assert client.post("/navigation/logout", headers=headers).status_code == 204
    assert len(store) == 0

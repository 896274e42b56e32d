from datetime import date, timedelta
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from shortages.core.config import config
from shortages.core.db.base import Base
from shortages.core.db.engine import get_db_util
from shortages.main import app
from shortages.modules.directory.service import DirectoryService, get_directory
from shortages.modules.reports.dependencies import get_draft_store
from shortages.modules.users.auth import AuthService

USER_ID = 11


def _auth_headers(user_id: int = USER_ID) -> dict:
    token = AuthService.create_access_token(
        {"sub": f"user{user_id}@example.com", "user_id": user_id, "name": "Khalid"}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(store, directory):
    app.dependency_overrides[get_draft_store] = lambda: store
    app.dependency_overrides[get_directory] = lambda: directory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def users_client():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    tables_ready = []

    async def override_get_db():
        # tables are created on the client's event loop
        if not tables_ready:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            tables_ready.append(True)
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_util] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _open(client: TestClient, user_id: int = USER_ID) -> dict:
    resp = client.post("/api/form/session", headers=_auth_headers(user_id))
    assert resp.status_code == 200
    return resp.json()["data"]


# ==================== users ====================

def test_register_login_and_me(users_client):
    resp = users_client.post(
        "/api/users/register",
        json={"email": "Manager@Example.com", "password": "secret1", "name": "Manager"},
    )
    assert resp.status_code == 201
    registered = resp.json()["data"]
    assert registered["user"]["email"] == "manager@example.com"

    resp = users_client.post(
        "/api/users/login", json={"email": "manager@example.com", "password": "secret1"}
    )
    assert resp.status_code == 200
    token = resp.json()["data"]["token"]["access_token"]

    resp = users_client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["data"]["id"] == registered["user"]["id"]


def test_register_duplicate_email_conflicts(users_client):
    payload = {"email": "dup@example.com", "password": "secret1", "name": "Dup"}
    assert users_client.post("/api/users/register", json=payload).status_code == 201
    assert users_client.post("/api/users/register", json=payload).status_code == 409


def test_login_with_wrong_password_is_rejected(users_client):
    users_client.post(
        "/api/users/register",
        json={"email": "a@example.com", "password": "secret1", "name": "A"},
    )
    resp = users_client.post(
        "/api/users/login", json={"email": "a@example.com", "password": "wrong-password"}
    )
    assert resp.status_code == 401


# ==================== auth and directory ====================

def test_form_requires_authentication(client):
    assert client.post("/api/form/session").status_code in (401, 403)
    resp = client.post("/api/form/session", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_directory_lists_choices_without_phone_numbers(client):
    resp = client.get("/api/directory", headers=_auth_headers())

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["branches"] == ["Makkah-Otaibiya", "Jeddah-Naseem"]
    assert data["contacts"] == ["Ali", "Omar"]
    assert "966500000001" not in resp.text


def test_health_is_not_wrapped(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# ==================== form session ====================

def test_open_session_without_draft_gives_blank_form(client):
    data = _open(client)

    assert data["draftId"] is None
    assert data["state"] == "ready"
    assert len(data["document"]["rows"]) == 30
    assert data["document"]["rows"][29]["sequence"] == 30


def test_form_without_session_is_not_found(client):
    resp = client.get("/api/form", headers=_auth_headers())

    assert resp.status_code == 404


def test_edit_save_and_reopen(client, store):
    headers = _auth_headers()
    _open(client)

    resp = client.patch(
        "/api/form/header",
        json={"branchName": "Jeddah-Naseem", "enteredBy": "Khalid"},
        headers=headers,
    )
    assert resp.status_code == 200
    resp = client.patch(
        "/api/form/rows/4",
        json={"item": "Tomato paste", "quantity": "12 boxes", "packing": "carton"},
        headers=headers,
    )
    row = resp.json()["data"]["document"]["rows"][4]
    assert row == {
        "sequence": 5, "item": "Tomato paste", "barcode": "", "quantity": "12 boxes",
        "size": "", "packing": "carton", "company": "", "altCompany": "", "notes": "",
    }

    resp = client.post("/api/form/save", headers=headers)
    assert resp.status_code == 200
    draft_id = resp.json()["data"]["draftId"]
    assert draft_id == "draft-1"

    client.post("/api/form/save", headers=headers)
    assert store.writes() == [("create", USER_ID), ("update", "draft-1")]

    reopened = _open(client)
    assert reopened["draftId"] == "draft-1"
    assert reopened["document"]["branchName"] == "Jeddah-Naseem"
    assert reopened["document"]["rows"][4]["item"] == "Tomato paste"


def test_sessions_are_scoped_per_user(client):
    _open(client, USER_ID)
    _open(client, USER_ID + 1)
    client.patch(
        "/api/form/header", json={"enteredBy": "Khalid"}, headers=_auth_headers(USER_ID)
    )

    other = client.get("/api/form", headers=_auth_headers(USER_ID + 1)).json()["data"]

    assert other["document"]["enteredBy"] == ""


def test_add_and_remove_rows(client):
    headers = _auth_headers()
    _open(client)

    resp = client.post("/api/form/rows", headers=headers)
    assert resp.status_code == 201
    assert len(resp.json()["data"]["document"]["rows"]) == 31

    resp = client.delete("/api/form/rows/0", headers=headers)
    rows = resp.json()["data"]["document"]["rows"]
    assert len(rows) == 30
    assert [row["sequence"] for row in rows] == list(range(1, 31))


def test_row_index_out_of_range_is_rejected(client):
    _open(client)

    resp = client.patch("/api/form/rows/30", json={"item": "x"}, headers=_auth_headers())

    assert resp.status_code == 422
    assert "out of range" in resp.json()["detail"]


def test_unknown_branch_is_rejected(client):
    _open(client)

    resp = client.patch(
        "/api/form/header", json={"branchName": "Riyadh"}, headers=_auth_headers()
    )

    assert resp.status_code == 422


def test_future_date_is_rejected(client):
    _open(client)
    tomorrow = (date.today() + timedelta(days=1)).isoformat()

    resp = client.patch("/api/form/header", json={"date": tomorrow}, headers=_auth_headers())

    assert resp.status_code == 422


def test_close_session(client):
    headers = _auth_headers()
    _open(client)

    resp = client.delete("/api/form/session", headers=headers)
    assert resp.json()["data"] == {"closed": True}
    assert client.get("/api/form", headers=headers).status_code == 404


# ==================== export and share ====================

def test_export_downloads_pdf_of_filled_rows(client, store):
    headers = _auth_headers()
    _open(client)
    client.patch("/api/form/header", json={"branchName": "Makkah-Otaibiya"}, headers=headers)
    client.patch("/api/form/rows/2", json={"barcode": "6281000000017"}, headers=headers)

    resp = client.get("/api/form/export", headers=headers)

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")
    assert resp.headers["x-filled-rows"] == "1"
    assert "Makkah-Otaibiya" in resp.headers["content-disposition"]
    assert store.writes() == [("create", USER_ID)]


def test_share_returns_whatsapp_link(client):
    headers = _auth_headers()
    _open(client)
    client.patch("/api/form/header", json={"branchName": "Jeddah-Naseem"}, headers=headers)

    resp = client.post("/api/form/share", json={"contact": "Ali"}, headers=headers)

    assert resp.status_code == 200
    data = resp.json()["data"]
    parsed = urlparse(data["url"])
    assert parsed.path == "/966500000001"
    assert "Jeddah-Naseem" in parse_qs(parsed.query)["text"][0]
    assert data["saved"] is True
    assert data["filledRows"] == 0


def test_share_with_unknown_contact_is_not_found(client, store):
    _open(client)

    resp = client.post("/api/form/share", json={"contact": "Nobody"}, headers=_auth_headers())

    assert resp.status_code == 404
    assert store.writes() == []


# ==================== startup ====================

def test_startup_loads_packaged_directory():
    with TestClient(app):
        assert app.state.directory == DirectoryService.load(config.directory_file)
        assert len(app.state.directory.contacts) == 4


def test_startup_rejects_directory_that_needs_missing_font(monkeypatch):
    arabic = Path(config.directory_file).with_name("directory.ar.json")
    monkeypatch.setattr(config, "directory_file", str(arabic))
    monkeypatch.setattr(config, "pdf_font_path", "")

    with pytest.raises(RuntimeError, match="Unicode font"):
        with TestClient(app):
            pass

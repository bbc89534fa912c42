"""
Route tests for the Flask API using the test client.
"""

import base64
import io
from datetime import timedelta

import pytest

from camp_portal.api import auth
from camp_portal.api.app import create_app
from camp_portal.blob_store import LocalBlobStore


@pytest.fixture(autouse=True)
def clear_sessions():
    auth.sessions.clear()
    yield
    auth.sessions.clear()


@pytest.fixture
def client(engine, directory, session_down, tmp_path):
    app = create_app(engine=engine, blob_store=LocalBlobStore(tmp_path), issue_session=session_down)
    app.config["TESTING"] = True
    return app.test_client()


def login(client, imacx_id):
    resp = client.post("/api/auth/login", json={"imacx_id": imacx_id})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


# ── Auth ─────────────────────────────────────────────────────────────

def test_login_employee_with_fallback_identity(client):
    data = login(client, "BE100")
    assert data["success"] is True
    assert data["user"]["role"] == "BE"
    assert data["user"]["id"] == "u-1"
    assert data["user"]["own_territory"] == "north"
    assert data["token"] in auth.sessions


def test_login_with_encoded_link(client):
    encoded = base64.b64encode(b"BM200").decode()
    resp = client.post("/api/auth/login", json={"data": encoded})
    assert resp.status_code == 200
    assert resp.get_json()["user"]["managed_territories"] == "north,south"


def test_login_invalid_link(client):
    resp = client.post("/api/auth/login", json={"data": "%%%"})
    assert resp.status_code == 400
    assert "Invalid or corrupted link" in resp.get_json()["error"]
    assert auth.sessions == {}


def test_login_unpadded_link(client):
    resp = client.post("/api/auth/login", json={"data": "QkUxMDA"})
    assert resp.status_code == 200
    assert resp.get_json()["user"]["external_id"] == "BE100"


@pytest.mark.parametrize("body", [{"data": 123}, {"data": ["x"]}, {"data": {"a": 1}}])
def test_login_non_string_link_is_invalid(client, body):
    resp = client.post("/api/auth/login", json=body)
    assert resp.status_code == 400
    assert "Invalid or corrupted link" in resp.get_json()["error"]


@pytest.mark.parametrize("imacx_id", [123, ["BE100"], True])
def test_login_non_string_id_is_rejected(client, imacx_id):
    resp = client.post("/api/auth/login", json={"imacx_id": imacx_id})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "imacx_id is required"
    assert auth.sessions == {}


def test_login_unknown_id(client):
    resp = client.post("/api/auth/login", json={"imacx_id": "NOPE"})
    assert resp.status_code == 401
    assert auth.sessions == {}


def test_login_requires_json_and_id(client):
    assert client.post("/api/auth/login", data="x").status_code == 400
    assert client.post("/api/auth/login", json={"imacx_id": "  "}).status_code == 400


def test_login_link_helper(client):
    resp = client.post("/api/auth/link", json={"imacx_id": "BE100"})
    assert resp.status_code == 200
    assert resp.get_json()["link"] == "/auth?data=" + base64.b64encode(b"BE100").decode()
    assert client.post("/api/auth/link", json={}).status_code == 400


def test_profile_and_logout(client):
    token = login(client, "BE100")["token"]
    resp = client.get("/api/user/profile", headers=bearer(token))
    assert resp.status_code == 200
    assert resp.get_json()["user"]["external_id"] == "BE100"

    assert client.post("/api/auth/logout", headers=bearer(token)).status_code == 200
    assert client.get("/api/user/profile", headers=bearer(token)).status_code == 401


def test_corrupted_session_slot_requires_relogin(client):
    token = login(client, "BE100")["token"]
    auth.sessions[token]["storage"]["vitaminDUser"] = "{broken"
    resp = client.get("/api/doctors", headers=bearer(token))
    assert resp.status_code == 401
    assert token not in auth.sessions


def test_protected_route_without_token(client):
    assert client.get("/api/doctors").status_code == 401


# ── Doctors ──────────────────────────────────────────────────────────

def test_doctors_for_employee(client):
    token = login(client, "BE100")["token"]
    data = client.get("/api/doctors", headers=bearer(token)).get_json()
    assert data["scope"] == "north"
    assert [d["id"] for d in data["doctors"]] == ["d-2", "d-1"]
    assert data["warning"] is None


def test_doctors_for_manager(client):
    token = login(client, "BM200")["token"]
    data = client.get("/api/doctors", headers=bearer(token)).get_json()
    assert data["role"] == "BM"
    assert data["scope"] == "north, south"
    assert data["count"] == 3


def test_doctors_warning_when_scope_empty(client, add_rows):
    add_rows("users", {"id": "u-9", "imacx_id": "BE900", "territory": None, "name": "No Territory"})
    token = login(client, "BE900")["token"]
    data = client.get("/api/doctors", headers=bearer(token)).get_json()
    assert data["doctors"] == []
    assert data["warning"]["code"] == "TerritoryUnset"


def test_add_doctor_route(client):
    token = login(client, "BE100")["token"]
    resp = client.post("/api/doctors", headers=bearer(token),
                       json={"imacx_code": "DR77", "name": "Dr New", "phone": "9811100000"})
    assert resp.status_code == 201
    assert resp.get_json()["doctor"]["name"] == "Dr New"

    resp = client.post("/api/doctors", headers=bearer(token), json={"name": "Dr New"})
    assert resp.status_code == 400


# ── Camps ────────────────────────────────────────────────────────────

def test_create_camp_multipart(client):
    token = login(client, "BE100")["token"]
    resp = client.post(
        "/api/camps",
        headers=bearer(token),
        data={
            "doctor_id": "d-1",
            "camp_date": "2999-01-01",
            "whatsapp_number": "9812345678",
            "consent_file": (io.BytesIO(b"%PDF-1.4"), "consent.pdf", "application/pdf"),
        },
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201, resp.get_json()
    data = resp.get_json()
    assert data["camp"]["status"] == "scheduled"
    assert data["camp"]["user_id"] == "u-1"
    assert data["camp"]["consent_form_url"].startswith("consents/")
    assert data["notify_url"].startswith("whatsapp://send?to=%2B919812345678")


def test_create_camp_out_of_scope(client):
    token = login(client, "BE100")["token"]
    resp = client.post("/api/camps", headers=bearer(token),
                       json={"doctor_id": "d-3", "camp_date": "2999-01-01"})
    assert resp.status_code == 403


def test_create_camp_missing_fields(client):
    token = login(client, "BE100")["token"]
    resp = client.post("/api/camps", headers=bearer(token), json={"doctor_id": "d-1"})
    assert resp.status_code == 400


# ── Health / errors ──────────────────────────────────────────────────

def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["checks"]["database"] is True


def test_unknown_route_is_json_404(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Endpoint not found"


def test_wrong_method_is_json_405(client):
    resp = client.get("/api/auth/login")
    assert resp.status_code == 405
    assert resp.get_json()["error"] == "Method not allowed"


# ── Session tokens ───────────────────────────────────────────────────

def test_token_accepted_from_query_string(client):
    token = login(client, "BE100")["token"]
    assert client.get(f"/api/user/profile?token={token}").status_code == 200


@pytest.mark.parametrize("header", ["Token abc", "Bearer", "Bearer   "])
def test_malformed_authorization_header(client, header):
    resp = client.get("/api/user/profile", headers={"Authorization": header})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Invalid authorization header format"


def test_tampered_token_is_rejected(client):
    token = login(client, "BE100")["token"]
    resp = client.get("/api/user/profile", headers=bearer(token[:-2] + "xx"))
    assert resp.status_code == 401


def test_idle_sessions_are_cleaned_up(client):
    token = login(client, "BE100")["token"]
    idle = auth.sessions[token]["last_activity"]
    assert auth.cleanup_expired_sessions(now=idle + timedelta(hours=1)) == 0
    assert auth.cleanup_expired_sessions(now=idle + timedelta(hours=25)) == 1
    assert token not in auth.sessions

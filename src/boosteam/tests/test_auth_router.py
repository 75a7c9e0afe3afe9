from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from boosteam.api.app import create_app
from boosteam.config import get_settings
from boosteam.database import get_db
from boosteam.security.auth.jwt import encode_hs256, now_ts
from boosteam.security.auth.models import User
from boosteam.tests.conftest import TEST_SECRET, auth_header, make_settings, make_user


def _register(client, username="alice", password="password123", email=None):
    return client.post(
        "/api/auth/register",
        json={
            "username": username,
            "password": password,
            "email": email or f"{username}@example.com",
        },
    )


def _login(client, username="alice", password="password123"):
    return client.post("/api/auth/login", json={"username": username, "password": password})


def test_register_login_profile(client):
    resp = _register(client)
    assert resp.status_code == 201
    assert resp.json() == {"message": "User registered successfully"}

    resp = _login(client)
    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["username"] == "alice"

    resp = client.get(
        "/api/auth/profile", headers={"Authorization": f"Bearer {body['access_token']}"}
    )
    assert resp.status_code == 200
    profile = resp.json()
    assert profile["username"] == "alice"
    assert [r["name"] for r in profile["roles"]] == ["user"]
    assert profile["last_login"] is not None


def test_login_with_email(client):
    _register(client)
    assert _login(client, username="alice@example.com").status_code == 200


def test_register_duplicate_and_short_password(client):
    assert _register(client).status_code == 201

    resp = _register(client)
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "CONFLICT"

    resp = _register(client, username="bob", password="short")
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"


def test_login_wrong_password(client):
    _register(client)
    resp = _login(client, password="wrong-password")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid username or password"


def test_profile_requires_token(client):
    resp = client.get("/api/auth/profile")
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "MISSING_CREDENTIAL"
    assert resp.headers["www-authenticate"] == "Bearer"


def test_expired_token_is_rejected(client, seeded_db):
    user = make_user(seeded_db, "alice", roles=["user"])
    token = encode_hs256({"sub": str(user.id), "exp": now_ts() - 5}, secret=TEST_SECRET)

    resp = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "INVALID_CREDENTIAL"
    assert resp.json()["detail"]["message"] == "Token expired"


def test_deleted_principal_is_not_found(client):
    resp = client.get("/api/auth/profile", headers=auth_header(9999))
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "PRINCIPAL_NOT_FOUND"


def test_uniform_auth_errors(seeded_db):
    def override_get_db():
        yield seeded_db

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: make_settings(AUTH_ERROR_DETAIL="uniform")
    client = TestClient(app)

    missing = client.get("/api/auth/profile")
    unknown = client.get("/api/auth/profile", headers=auth_header(9999))
    for resp in (missing, unknown):
        assert resp.status_code == 401
        assert resp.json()["detail"]["code"] == "UNAUTHENTICATED"
        assert resp.json()["detail"]["message"] == "Unauthorized"


def test_change_password(client, seeded_db):
    user = make_user(seeded_db, "alice", roles=["user"])
    headers = auth_header(user.id)

    resp = client.put(
        "/api/auth/change-password",
        json={"current_password": "nope-nope", "new_password": "new-password-1"},
        headers=headers,
    )
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Current password is incorrect"

    resp = client.put(
        "/api/auth/change-password",
        json={"current_password": "password123", "new_password": "new-password-1"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert _login(client, password="new-password-1").status_code == 200
    assert _login(client, password="password123").status_code == 401


def test_delete_user_requires_permission(client, seeded_db):
    user = make_user(seeded_db, "alice", roles=["user"])
    resp = client.delete(f"/api/auth/users/{user.id}", headers=auth_header(user.id))
    assert resp.status_code == 403
    assert resp.json()["detail"]["details"] == {"action": "delete", "resource": "user"}


def test_admin_deletes_other_user(client, seeded_db):
    admin = make_user(seeded_db, "root", roles=["admin"])
    victim = make_user(seeded_db, "alice", roles=["user"])
    victim_id = victim.id

    resp = client.delete(f"/api/auth/users/{victim_id}", headers=auth_header(admin.id))
    assert resp.status_code == 200
    assert seeded_db.get(User, victim_id) is None


def test_owner_check_blocks_non_admin_with_delete_permission(client, seeded_db):
    from boosteam.security.rbac.models import Permission, Role

    perm = (
        seeded_db.query(Permission)
        .filter(Permission.action == "delete", Permission.resource == "user")
        .one()
    )
    seeded_db.add(Role(name="janitor", description="Deletes accounts", permissions=[perm]))
    seeded_db.commit()
    actor = make_user(seeded_db, "janitor", roles=["janitor"])
    other = make_user(seeded_db, "alice", roles=["user"])

    resp = client.delete(f"/api/auth/users/{other.id}", headers=auth_header(actor.id))
    assert resp.status_code == 403
    assert resp.json()["detail"]["message"] == (
        "You don't have permission to access this resource"
    )

    resp = client.delete(f"/api/auth/users/{actor.id}", headers=auth_header(actor.id))
    assert resp.status_code == 200


def test_malformed_authorization_header_is_invalid(client):
    for header in ("Basic Zm9vOmJhcg==", "garbage", "Token"):
        resp = client.get("/api/auth/profile", headers={"Authorization": header})
        assert resp.status_code == 401
        assert resp.json()["detail"]["code"] == "INVALID_CREDENTIAL"
        assert resp.json()["detail"]["message"] == "Invalid token"


def test_storage_failure_maps_to_503():
    def broken_get_db():
        raise OperationalError("SELECT 1", {}, Exception("unable to open database file"))
        yield  # pragma: no cover

    app = create_app()
    app.dependency_overrides[get_db] = broken_get_db
    app.dependency_overrides[get_settings] = lambda: make_settings()
    client = TestClient(app)

    resp = client.post("/api/auth/login", json={"username": "alice", "password": "password123"})
    assert resp.status_code == 503
    assert resp.json()["detail"]["code"] == "STORAGE_UNAVAILABLE"

"""
Tests for registration, login and the bearer-token guard.
"""
from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from expense_tracker.core.security import create_access_token, decode_access_token, get_password_hash, verify_password
from expense_tracker.main import app
from expense_tracker.routers import auth as auth_routes

from tests.conftest import register_and_login


class TestRegister:

    def test_register_returns_created_user(self, client):
        response = client.post("/register", json={"username": "alice", "email": "a@x.com", "password": "secret1"})
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["user"]["username"] == "alice"
        assert body["user"]["email"] == "a@x.com"
        assert "id" in body["user"]

    def test_register_never_returns_password(self, client):
        response = client.post("/register", json={"username": "alice", "email": "a@x.com", "password": "secret1"})
        user = response.json()["user"]
        assert "password" not in user
        assert "hashedPassword" not in user
        assert "secret1" not in response.text

    def test_register_validation_errors_are_listed(self, client):
        response = client.post("/register", json={"username": "", "email": "not-an-email", "password": "123"})
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        fields = {error["field"] for error in body["errors"]}
        assert {"username", "email", "password"} <= fields

    def test_register_blank_username_rejected(self, client):
        response = client.post("/register", json={"username": "   ", "email": "a@x.com", "password": "secret1"})
        assert response.status_code == 400

    def test_duplicate_email_is_a_conflict(self, client):
        payload = {"username": "alice", "email": "a@x.com", "password": "secret1"}
        assert client.post("/register", json=payload).status_code == 201

        response = client.post("/register", json={**payload, "username": "alice2"})
        assert response.status_code == 409
        assert response.json() == {"success": False, "message": "Email is already registered"}

    def test_concurrent_duplicate_is_a_conflict(self, client, failing_commit):
        """The unique index wins a race the pre-insert check missed."""
        failing_commit(IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed: users.email")))
        response = client.post("/register", json={"username": "alice", "email": "a@x.com", "password": "secret1"})
        assert response.status_code == 409
        assert response.json() == {"success": False, "message": "Email is already registered"}

    def test_nul_byte_password_rejected(self, client):
        response = client.post("/register", json={"username": "alice", "email": "a@x.com", "password": "sec\u0000ret"})
        assert response.status_code == 400
        assert response.json()["errors"] == [
            {"field": "password", "message": "Password must not contain NUL characters"}
        ]

    def test_field_messages_are_readable(self, client):
        response = client.post("/register", json={"username": "", "email": "a@x.com", "password": "123"})
        messages = {error["field"]: error["message"] for error in response.json()["errors"]}
        assert messages == {
            "username": "Username is required",
            "password": "Password must be at least 6 characters long",
        }

    def test_missing_fields_are_named(self, client):
        response = client.post("/register", json={})
        messages = {error["field"]: error["message"] for error in response.json()["errors"]}
        assert messages["username"] == "Username is required"
        assert messages["password"] == "Password is required"

    def test_duplicate_email_ignores_case(self, client):
        client.post("/register", json={"username": "alice", "email": "a@x.com", "password": "secret1"})
        response = client.post("/register", json={"username": "alice", "email": "A@X.com", "password": "secret1"})
        assert response.status_code == 409


class TestLogin:

    def test_login_yields_verifiable_token(self, client):
        client.post("/register", json={"username": "alice", "email": "a@x.com", "password": "secret1"})
        response = client.post("/login", json={"email": "a@x.com", "password": "secret1"})
        assert response.status_code == 200
        token = response.json()["token"]
        assert isinstance(decode_access_token(token), int)

    def test_wrong_password_is_unauthorized(self, client):
        client.post("/register", json={"username": "alice", "email": "a@x.com", "password": "secret1"})
        response = client.post("/login", json={"email": "a@x.com", "password": "wrong-pass"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_unknown_email_is_unauthorized(self, client):
        response = client.post("/login", json={"email": "nobody@x.com", "password": "whatever"})
        assert response.status_code == 401
        assert "token" not in response.json()

    def test_login_validation(self, client):
        response = client.post("/login", json={"email": "bad", "password": ""})
        assert response.status_code == 400
        assert response.json()["success"] is False
        messages = {error["field"]: error["message"] for error in response.json()["errors"]}
        assert messages["password"] == "Password is required"

    def test_nul_byte_password_is_unauthorized(self, client):
        client.post("/register", json={"username": "alice", "email": "a@x.com", "password": "secret1"})
        response = client.post("/login", json={"email": "a@x.com", "password": "sec\u0000ret"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_verify_password_refuses_unhashable_input(self):
        hashed = get_password_hash("secret1")
        assert verify_password("sec\x00ret", hashed) is False
        assert verify_password("secret1", hashed) is True

    def test_unexpected_error_still_uses_envelope(self, client, monkeypatch):
        def broken(plain, hashed):
            raise RuntimeError("hash backend exploded")

        client.post("/register", json={"username": "alice", "email": "a@x.com", "password": "secret1"})
        monkeypatch.setattr(auth_routes, "verify_password", broken)

        # Starlette re-raises after the 500 handler has responded
        response = TestClient(app, raise_server_exceptions=False).post(
            "/login", json={"email": "a@x.com", "password": "secret1"}
        )
        assert response.status_code == 500
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"success": False, "message": "Internal server error"}


class TestTokenGuard:

    def test_missing_token_is_401(self, client):
        response = client.get("/expenses")
        assert response.status_code == 401
        assert response.json()["message"] == "Authentication required"

    def test_garbage_token_is_403(self, client):
        response = client.get("/expenses", headers={"Authorization": "Bearer not.a.token"})
        assert response.status_code == 403
        assert response.json()["message"] == "Invalid or expired token"

    def test_token_signed_with_other_secret_is_403(self, client):
        from jose import jwt
        forged = jwt.encode({"userId": 1}, "some-other-secret", algorithm="HS256")
        response = client.get("/expenses", headers={"Authorization": f"Bearer {forged}"})
        assert response.status_code == 403

    def test_expired_token_rejected_on_every_protected_route(self, client, alice):
        created = client.post(
            "/add-expense",
            json={"title": "Lunch", "amount": 12.5, "description": "Cafe", "date": "2024-01-15"},
            headers=alice,
        ).json()["expense"]

        user_id = decode_access_token(alice["Authorization"].split()[1])
        expired = create_access_token(user_id, expires_delta=timedelta(hours=-1, seconds=-1))
        headers = {"Authorization": f"Bearer {expired}"}
        body = {"title": "Lunch", "amount": 12.5, "description": "Cafe", "date": "2024-01-15"}

        responses = [
            client.post("/add-expense", json=body, headers=headers),
            client.get("/expenses", headers=headers),
            client.get(f"/expenses/{created['id']}", headers=headers),
            client.put(f"/expenses/{created['id']}", json=body, headers=headers),
            client.delete(f"/expenses/{created['id']}", headers=headers),
            client.get("/expenses/999", headers=headers),
            # invalid body still fails on auth first
            client.post("/add-expense", json={"amount": -1}, headers=headers),
        ]
        assert [r.status_code for r in responses] == [403] * len(responses)

    def test_each_user_gets_own_token(self, client):
        alice = register_and_login(client)
        bob = register_and_login(client, username="bob", email="b@x.com", password="secret2")
        assert alice != bob

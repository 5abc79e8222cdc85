"""
Authentication tests

Registration, password sign-in, session lookup and sign-out through the API,
plus the auth service's state listeners.
"""

from datetime import timedelta

import pytest
from fastapi import status

from pollgate.core.constants import ErrorCodes, ErrorMessages
from pollgate.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from pollgate.models.user import RevokedSession, User
from pollgate.services.auth import (
    SIGNED_IN,
    SIGNED_OUT,
    SIGNED_UP,
    AuthService,
    AuthStateListeners,
)

TEST_PASSWORD = "testpass123"


class TestRegistration:

    def test_register(self, client, db_session):
        response = client.post(
            "/api/auth/register",
            json={"email": "New.User@Example.com", "password": "newpass123", "name": "New User"}
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["email"] == "new.user@example.com"
        assert data["name"] == "New User"
        assert data["role"] == "user"
        assert data["is_active"] is True
        assert "hashed_password" not in data
        assert "password" not in data

        user = db_session.query(User).filter(User.email == "new.user@example.com").one()
        assert user.hashed_password != "newpass123"

    def test_role_cannot_be_chosen(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": "sneaky@example.com", "password": "newpass123", "role": "admin"}
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["role"] == "user"

    def test_duplicate_email(self, client, owner):
        response = client.post("/api/auth/register", json={"email": owner.email, "password": "newpass123"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        data = response.json()
        assert data["error_code"] == ErrorCodes.AUTH_FAILED
        assert data["message"] == ErrorMessages.USER_ALREADY_REGISTERED

    def test_short_password(self, client):
        response = client.post("/api/auth/register", json={"email": "short@example.com", "password": "short"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == ErrorMessages.PASSWORD_TOO_SHORT

    def test_invalid_email(self, client):
        response = client.post("/api/auth/register", json={"email": "not-an-email", "password": "newpass123"})
        assert response.status_code == 422


class TestLogin:

    def test_login(self, client, owner):
        response = client.post("/api/auth/login", json={"email": owner.email, "password": TEST_PASSWORD})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["id"] == owner.id
        assert "expires_at" in data

        claims = decode_access_token(data["access_token"])
        assert claims["sub"] == str(owner.id)
        assert claims["jti"]

    def test_login_sets_session_cookie(self, client, owner):
        response = client.post("/api/auth/login", json={"email": owner.email, "password": TEST_PASSWORD})

        cookies = [c for c in response.headers.get_list("set-cookie") if c.startswith("access_token=")]
        assert len(cookies) == 1
        assert "httponly" in cookies[0].lower()

    def test_login_is_case_insensitive_on_email(self, client, owner):
        response = client.post("/api/auth/login", json={"email": owner.email.upper(), "password": TEST_PASSWORD})
        assert response.status_code == status.HTTP_200_OK

    @pytest.mark.parametrize("email,password", [
        ("owner@example.com", "wrongpass123"),
        ("nobody@example.com", TEST_PASSWORD),
    ])
    def test_bad_credentials(self, client, owner, email, password):
        response = client.post("/api/auth/login", json={"email": email, "password": password})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == ErrorMessages.INVALID_CREDENTIALS

    def test_long_password_round_trip(self, client):
        password = "p" * 100
        registered = client.post("/api/auth/register", json={"email": "long@example.com", "password": password})
        assert registered.status_code == status.HTTP_201_CREATED

        response = client.post("/api/auth/login", json={"email": "long@example.com", "password": password})
        assert response.status_code == status.HTTP_200_OK

    def test_multibyte_password_past_bcrypt_limit(self):
        password = "é" * 50
        hashed = get_password_hash(password)

        assert verify_password(password, hashed)
        assert not verify_password("é" * 35, hashed)

    def test_inactive_user_cannot_login(self, client, make_user):
        user = make_user("gone@example.com", is_active=False)
        response = client.post("/api/auth/login", json={"email": user.email, "password": TEST_PASSWORD})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_oauth2_token_form(self, client, owner):
        response = client.post(
            "/api/auth/token",
            data={"username": owner.email, "password": TEST_PASSWORD}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["token_type"] == "bearer"
        assert decode_access_token(data["access_token"])["sub"] == str(owner.id)


class TestSession:

    def test_me_with_bearer(self, client, owner, owner_headers):
        response = client.get("/api/auth/me", headers=owner_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["email"] == owner.email

    def test_me_with_cookie(self, client, owner):
        client.post("/api/auth/login", json={"email": owner.email, "password": TEST_PASSWORD})
        response = client.get("/api/auth/me")
        assert response.status_code == status.HTTP_200_OK

    def test_me_signed_out(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error_code"] == ErrorCodes.AUTH_REQUIRED

    def test_session_signed_out(self, client):
        response = client.get("/api/auth/session")
        assert response.json() == {"session": None}

    def test_session_signed_in(self, client, owner, owner_headers):
        response = client.get("/api/auth/session", headers=owner_headers)

        session = response.json()["session"]
        assert session["user"]["id"] == owner.id
        assert session["access_token"] == owner_headers["Authorization"].split(" ", 1)[1]

    def test_expired_token(self, client, owner):
        token = create_access_token({"sub": str(owner.id)}, expires_delta=timedelta(minutes=-1))
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_tampered_token(self, client, owner_headers):
        header = owner_headers["Authorization"]
        response = client.get("/api/auth/me", headers={"Authorization": header[:-2] + "xx"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_deactivated_user_loses_session(self, client, db_session, owner, owner_headers):
        owner.is_active = False
        db_session.commit()

        response = client.get("/api/auth/me", headers=owner_headers)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestLogout:

    def test_logout_revokes_token(self, client, db_session, owner_headers):
        response = client.post("/api/auth/logout", headers=owner_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"message": "Signed out"}
        assert db_session.query(RevokedSession).count() == 1

        assert client.get("/api/auth/me", headers=owner_headers).status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_clears_cookies(self, client, owner):
        client.post("/api/auth/login", json={"email": owner.email, "password": TEST_PASSWORD})
        client.get("/api/csrf")

        response = client.post("/api/auth/logout")

        cleared = {c.split("=", 1)[0] for c in response.headers.get_list("set-cookie")}
        assert {"access_token", "csrf_token"} <= cleared
        assert client.get("/api/auth/session").json() == {"session": None}

    def test_logout_without_session(self, client, db_session):
        response = client.post("/api/auth/logout")

        assert response.status_code == status.HTTP_200_OK
        assert db_session.query(RevokedSession).count() == 0

    def test_old_csrf_token_dead_after_logout(self, client, owner, test_poll):
        client.post("/api/auth/login", json={"email": owner.email, "password": TEST_PASSWORD})
        token = client.get("/api/csrf").json()["csrfToken"]
        client.post("/api/auth/logout")

        client.post("/api/auth/login", json={"email": owner.email, "password": TEST_PASSWORD})
        response = client.delete(f"/api/polls/{test_poll.id}", headers={"X-CSRF-Token": token})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error_code"] == ErrorCodes.INVALID_CSRF_TOKEN


class TestAuthStateListeners:

    @pytest.fixture
    def events(self):
        return []

    @pytest.fixture
    def auth(self, db_session, events):
        service = AuthService(db_session, listeners=AuthStateListeners())
        service.on_auth_state_change(lambda event, identity: events.append((event, identity)))
        return service

    def test_events_in_order(self, auth, events):
        user = auth.sign_up("listener@example.com", "newpass123", {"name": "L"})
        session = auth.sign_in_with_password("listener@example.com", "newpass123")
        auth.sign_out(session.access_token)

        assert [event for event, _ in events] == [SIGNED_UP, SIGNED_IN, SIGNED_OUT]
        assert all(identity.id == user.id for _, identity in events)

    def test_unsubscribe(self, auth, events):
        calls = []
        unsubscribe = auth.on_auth_state_change(lambda event, identity: calls.append(event))
        unsubscribe()

        auth.sign_up("quiet@example.com", "newpass123")

        assert calls == []
        assert [event for event, _ in events] == [SIGNED_UP]

    def test_broken_listener_does_not_block_sign_in(self, auth, events):
        def broken(event, identity):
            raise RuntimeError("listener bug")

        auth.on_auth_state_change(broken)
        auth.sign_up("robust@example.com", "newpass123")
        session = auth.sign_in_with_password("robust@example.com", "newpass123")

        assert session.user.email == "robust@example.com"
        assert [event for event, _ in events] == [SIGNED_UP, SIGNED_IN]

    def test_get_user_after_sign_out(self, auth):
        auth.sign_up("short-lived@example.com", "newpass123")
        session = auth.sign_in_with_password("short-lived@example.com", "newpass123")

        assert auth.get_user(session.access_token) is not None
        auth.sign_out(session.access_token)
        assert auth.get_user(session.access_token) is None

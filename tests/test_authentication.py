"""
Test Case Suite: Authentication Module
Test ID Range: TC-001 to TC-015

This test suite validates user registration, login, session handling and
profile management of the Estately backend.
"""

import threading

import pytest
from httpx import AsyncClient
from sqlalchemy import select, func

from app.models import User, Session
from app.models.enums import UserRole, PropertyStatus
from app.services import auth_service

PASSWORD = "Password123!"


def registration(**overrides) -> dict:
    payload = {
        "email": "ngozi@estately.io",
        "password": PASSWORD,
        "firstName": "Ngozi",
        "lastName": "Adeyemi",
        "phone": "08031234567",
    }
    payload.update(overrides)
    return payload


class TestRegistration:
    """
    Test Case TC-001: Register with valid details
    Description: A new user registers and receives their public profile
    Expected Result: 201, CLIENT role, no password hash in the response
    """
    @pytest.mark.asyncio
    async def test_tc001_register_client(self, client: AsyncClient, db_session):
        """TC-001: Register with valid details"""
        response = await client.post("/api/users/register", json=registration(email="Ngozi@Estately.io"))

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        assert body["data"]["email"] == "ngozi@estately.io"
        assert body["data"]["role"] == "CLIENT"
        assert body["data"]["verificationStatus"] == "UNVERIFIED"
        assert "hashedPassword" not in body["data"]
        assert "password" not in body["data"]

        stored = (await db_session.execute(select(User).where(User.email == "ngozi@estately.io"))).scalar_one()
        assert stored.hashed_password != PASSWORD

    """
    Test Case TC-002: Register as landlord or agent
    Expected Result: requested poster role is kept
    """
    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["LANDLORD", "AGENT"])
    async def test_tc002_register_poster_roles(self, client: AsyncClient, role):
        """TC-002: Self-service poster roles"""
        response = await client.post("/api/users/register", json=registration(role=role, phone=None))

        assert response.status_code == 201
        assert response.json()["data"]["role"] == role

    """
    Test Case TC-003: Admin roles cannot be self-assigned
    Expected Result: account is created as CLIENT
    """
    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["ADMIN", "SUPER_ADMIN", "OWNER"])
    async def test_tc003_register_cannot_escalate(self, client: AsyncClient, role):
        """TC-003: Role escalation attempt"""
        response = await client.post("/api/users/register", json=registration(role=role, phone=None))

        assert response.status_code == 201
        assert response.json()["data"]["role"] == "CLIENT"

    """
    Test Case TC-004: Duplicate email or phone
    Expected Result: 409 conflict
    """
    @pytest.mark.asyncio
    async def test_tc004_register_duplicates(self, client: AsyncClient, make_user):
        """TC-004: Email and phone must be unique"""
        await make_user(email="taken@estately.io", phone="08030000000")

        by_email = await client.post("/api/users/register", json=registration(email="TAKEN@estately.io", phone=None))
        by_phone = await client.post("/api/users/register", json=registration(phone="08030000000"))

        assert by_email.status_code == 409
        assert "email" in by_email.json()["detail"].lower()
        assert by_phone.status_code == 409
        assert "phone" in by_phone.json()["detail"].lower()

    """
    Test Case TC-005: Weak password and malformed email
    Expected Result: 400 for short password, 422 for invalid email
    """
    @pytest.mark.asyncio
    async def test_tc005_register_validation(self, client: AsyncClient):
        """TC-005: Input validation"""
        short = await client.post("/api/users/register", json=registration(password="abc"))
        bad_email = await client.post("/api/users/register", json=registration(email="not-an-email"))

        assert short.status_code == 400
        assert bad_email.status_code == 422


class TestLogin:
    """
    Test Case TC-006: Login with valid credentials
    Expected Result: 200 with bearer token, session row, lastLogin set
    """
    @pytest.mark.asyncio
    async def test_tc006_login_valid_credentials(self, client: AsyncClient, make_user, db_session):
        """TC-006: Valid login"""
        user = await make_user(UserRole.LANDLORD, email="amaka@estately.io")

        response = await client.post("/api/users/login", json={"email": "AMAKA@estately.io", "password": PASSWORD})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["tokenType"] == "bearer"
        assert len(data["token"]) > 0
        assert data["user"]["id"] == user.id
        assert data["user"]["lastLogin"] is not None

        sessions = (await db_session.execute(select(func.count(Session.id)).where(Session.user_id == user.id))).scalar()
        assert sessions == 1

    """
    Test Case TC-007: Login with wrong password or unknown email
    Expected Result: 401 with the same message for both
    """
    @pytest.mark.asyncio
    async def test_tc007_login_invalid_credentials(self, client: AsyncClient, make_user):
        """TC-007: Invalid login"""
        await make_user(email="amaka@estately.io")

        wrong_password = await client.post("/api/users/login", json={"email": "amaka@estately.io", "password": "nope-nope"})
        unknown = await client.post("/api/users/login", json={"email": "ghost@estately.io", "password": PASSWORD})

        assert wrong_password.status_code == 401
        assert unknown.status_code == 401
        assert wrong_password.json()["detail"] == unknown.json()["detail"] == "Invalid email or password"

    """
    Test Case TC-008: Each login issues a distinct token
    """
    @pytest.mark.asyncio
    async def test_tc008_tokens_are_unique(self, client: AsyncClient, make_user, login_as):
        """TC-008: Two logins, two sessions"""
        user = await make_user()

        first = await login_as(user)
        second = await login_as(user)

        assert first != second


class TestSessions:
    """
    Test Case TC-009: Protected endpoints need a valid token
    Expected Result: 401 without token or with a forged token
    """
    @pytest.mark.asyncio
    async def test_tc009_profile_requires_token(self, client: AsyncClient):
        """TC-009: Missing and invalid tokens"""
        missing = await client.get("/api/users/profile")
        forged = await client.get("/api/users/profile", headers={"Authorization": "Bearer not.a.jwt"})

        assert missing.status_code == 401
        assert forged.status_code == 401

    """
    Test Case TC-010: Logout invalidates the token
    Expected Result: token rejected after logout
    """
    @pytest.mark.asyncio
    async def test_tc010_logout(self, authenticated_client_user):
        """TC-010: Logout"""
        client, _ = authenticated_client_user

        response = await client.post("/api/users/logout")
        after = await client.get("/api/users/profile")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert after.status_code == 401


class TestProfile:
    """
    Test Case TC-011: Read own profile
    Expected Result: profile with activity counts
    """
    @pytest.mark.asyncio
    async def test_tc011_get_profile(self, authenticated_landlord, make_property):
        """TC-011: Profile with counts"""
        client, landlord = authenticated_landlord
        await make_property(landlord)

        response = await client.get("/api/users/profile")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == landlord.id
        assert data["firstName"] == "Amaka"
        assert data["counts"]["properties_posted"] == 1
        assert data["verificationInfo"] is None

    """
    Test Case TC-012: Update own profile
    Expected Result: names and phone change; duplicate phone is 409
    """
    @pytest.mark.asyncio
    async def test_tc012_update_profile(self, authenticated_client_user, make_user):
        """TC-012: Profile update"""
        client, _ = authenticated_client_user
        await make_user(phone="08039999999")

        ok = await client.put("/api/users/profile", json={"firstName": "Chinedu", "phone": "08031112222"})
        clash = await client.put("/api/users/profile", json={"phone": "08039999999"})

        assert ok.status_code == 200
        assert ok.json()["data"]["firstName"] == "Chinedu"
        assert ok.json()["data"]["lastName"] == "Okafor"
        assert ok.json()["data"]["phone"] == "08031112222"
        assert clash.status_code == 409

    """
    Test Case TC-013: Change password
    Expected Result: wrong current password is 400; success revokes sessions
    """
    @pytest.mark.asyncio
    async def test_tc013_change_password(self, authenticated_client_user):
        """TC-013: Password change"""
        client, user = authenticated_client_user

        wrong = await client.put(
            "/api/users/change-password",
            json={"currentPassword": "incorrect", "newPassword": "NewPassword1!"},
        )
        changed = await client.put(
            "/api/users/change-password",
            json={"currentPassword": PASSWORD, "newPassword": "NewPassword1!"},
        )
        stale = await client.get("/api/users/profile")
        relogin = await client.post("/api/users/login", json={"email": user.email, "password": "NewPassword1!"})

        assert wrong.status_code == 400
        assert changed.status_code == 200
        assert stale.status_code == 401
        assert relogin.status_code == 200

    """
    Test Case TC-014: List own listings in any status
    """
    @pytest.mark.asyncio
    async def test_tc014_my_properties(self, authenticated_landlord, make_user, make_property):
        """TC-014: Own listings including unavailable ones"""
        client, landlord = authenticated_landlord
        other = await make_user(UserRole.LANDLORD)
        await make_property(landlord)
        await make_property(landlord, status=PropertyStatus.RENTED)
        await make_property(other)

        everything = await client.get("/api/users/properties")
        rented = await client.get("/api/users/properties", params={"status": "RENTED"})

        assert everything.status_code == 200
        assert everything.json()["pagination"]["total"] == 2
        assert rented.json()["pagination"]["total"] == 1
        assert rented.json()["data"][0]["status"] == "RENTED"


class TestPasswordHashing:
    """
    Test Case TC-015: bcrypt work runs off the event loop thread
    Expected Result: register, login and change-password hash in worker threads
    """
    @pytest.mark.asyncio
    async def test_tc015_hashing_in_worker_threads(self, client: AsyncClient, monkeypatch):
        """TC-015: No bcrypt call on the event loop thread"""
        loop_thread = threading.get_ident()
        calls = []
        real_hash = auth_service.get_password_hash
        real_verify = auth_service.verify_password

        def recording_hash(password):
            calls.append(("hash", threading.get_ident() != loop_thread))
            return real_hash(password)

        def recording_verify(password, hashed):
            calls.append(("verify", threading.get_ident() != loop_thread))
            return real_verify(password, hashed)

        monkeypatch.setattr(auth_service, "get_password_hash", recording_hash)
        monkeypatch.setattr(auth_service, "verify_password", recording_verify)

        await client.post("/api/users/register", json=registration(phone=None))
        login = await client.post("/api/users/login", json={"email": "ngozi@estately.io", "password": PASSWORD})
        token = login.json()["data"]["token"]
        changed = await client.put(
            "/api/users/change-password",
            json={"currentPassword": PASSWORD, "newPassword": "NewPassword1!"},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert changed.status_code == 200
        assert [name for name, _ in calls] == ["hash", "verify", "verify", "hash"]
        assert all(off_loop for _, off_loop in calls)

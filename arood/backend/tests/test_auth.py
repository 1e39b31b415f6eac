# tests/test_auth.py
"""
Authentication and authorization tests
Tests: registration, login, session cookie, bearer tokens, role checks
"""

import pytest
from fastapi import status
from httpx import AsyncClient, ASGITransport

from app.main import app
from conftest import TEST_PASSWORD, add, make_user


class TestRegistration:
    """Business accounts"""

    @pytest.mark.asyncio
    async def test_register_business(self, client, email_service):
        response = await client.post("/api/auth/register", json={
            "username": "cafe_riyadh",
            "email": "cafe@example.com",
            "password": "SecurePassword123!",
            "business_name": "Riyadh Cafe",
            "business_city": "Riyadh",
        })

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["user"]["username"] == "cafe_riyadh"
        assert data["user"]["role"] == "business"
        assert data["user"]["subscription_plan"] == "free"
        assert data["user"]["offer_limit"] == 3
        assert data["token_type"] == "bearer"
        assert "session" in response.cookies
        assert email_service.sent == [{"email": "cafe@example.com", "title": "welcome"}]

    @pytest.mark.asyncio
    async def test_duplicate_username_rejected(self, client, merchant):
        response = await client.post("/api/auth/register", json={
            "username": merchant.username,
            "email": "another@example.com",
            "password": "SecurePassword123!",
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail_en"] == "Username or email already registered"

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, client, merchant):
        response = await client.post("/api/auth/register", json={
            "username": "someone_else",
            "email": merchant.email,
            "password": "SecurePassword123!",
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_short_password_rejected(self, client):
        response = await client.post("/api/auth/register", json={
            "username": "shortpw",
            "email": "shortpw@example.com",
            "password": "weak",
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"][0]["field"] == "password"

    @pytest.mark.asyncio
    async def test_role_cannot_be_chosen(self, client):
        response = await client.post("/api/auth/register", json={
            "username": "sneaky",
            "email": "sneaky@example.com",
            "password": "SecurePassword123!",
            "role": "admin",
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_with_username(self, client, merchant):
        response = await client.post("/api/auth/login", json={
            "username": merchant.username,
            "password": TEST_PASSWORD,
        })

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["user"]["id"] == merchant.id
        assert data["access_token"]
        assert "session" in response.cookies

    @pytest.mark.asyncio
    async def test_login_with_email(self, client, merchant):
        response = await client.post("/api/auth/login", json={
            "username": merchant.email,
            "password": TEST_PASSWORD,
        })

        assert response.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, merchant):
        response = await client.post("/api/auth/login", json={
            "username": merchant.username,
            "password": "WrongPassword123!",
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_inactive_user(self, client, session_factory):
        user = make_user("dormant")
        user.is_active = False
        await add(session_factory, user)

        response = await client.post("/api/auth/login", json={
            "username": "dormant",
            "password": TEST_PASSWORD,
        })

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestSession:

    @pytest.mark.asyncio
    async def test_me_with_bearer_token(self, client, merchant, merchant_headers):
        response = await client.get("/api/auth/me", headers=merchant_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["username"] == merchant.username

    @pytest.mark.asyncio
    async def test_me_with_session_cookie(self, client, merchant):
        login = await client.post("/api/auth/login", json={
            "username": merchant.username,
            "password": TEST_PASSWORD,
        })
        token = login.cookies["session"]

        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test", cookies={"session": token}
        ) as cookie_client:
            response = await cookie_client.get("/api/auth/me")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == merchant.id

    @pytest.mark.asyncio
    async def test_me_requires_authentication(self, client):
        response = await client.get("/api/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        response = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_logout_clears_cookie(self, client):
        response = await client.post("/api/auth/logout")

        assert response.status_code == status.HTTP_200_OK
        set_cookie = response.headers["set-cookie"].lower()
        assert set_cookie.startswith("session=")
        assert "max-age=0" in set_cookie


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        response = await client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "healthy"
        assert "x-process-time" in response.headers

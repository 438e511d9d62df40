from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from techub.auth.jwt import create_session_token, decode_token
from techub.auth.models import UserSession
from techub.auth.service import resolve_session
from techub.models.base import utcnow
from techub.users.models import Role

ADMIN_PASSWORD = "senha-segura-123"


@pytest.mark.asyncio
async def test_login_with_username(client: AsyncClient, seeded_users: dict):
    response = await client.post("/api/v1/auth/login", json={"login": "admin", "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["user"]["username"] == "admin"
    assert data["user"]["role"] == "ADMIN"
    assert "alerts.manage" in data["user"]["permissions"]
    payload = decode_token(data["session_token"])
    assert payload["type"] == "session"
    assert payload["sid"]


@pytest.mark.asyncio
async def test_login_with_email_is_case_insensitive(client: AsyncClient, seeded_users: dict):
    response = await client.post(
        "/api/v1/auth/login",
        json={"login": "  Admin@TECHUB.com.br ", "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, seeded_users: dict):
    response = await client.post("/api/v1/auth/login", json={"login": "admin", "password": "errada123"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Credenciais inválidas"


@pytest.mark.asyncio
async def test_login_unknown_user(client: AsyncClient, seeded_users: dict):
    response = await client.post("/api/v1/auth/login", json={"login": "ninguem", "password": "qualquer123"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_inactive_role(client: AsyncClient, seeded_users: dict, db_session):
    role = await db_session.get(Role, seeded_users["admin_role"].id)
    role.is_active = False
    await db_session.commit()

    response = await client.post("/api/v1/auth/login", json={"login": "admin", "password": ADMIN_PASSWORD})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_me(client: AsyncClient, auth_headers: dict):
    response = await client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == "admin@techub.com.br"


@pytest.mark.asyncio
async def test_me_with_garbage_token(client: AsyncClient, seeded_users: dict):
    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Sessão não encontrada"


@pytest.mark.asyncio
async def test_validate_session(client: AsyncClient, auth_headers: dict):
    token = auth_headers["Authorization"].split(" ", 1)[1]
    response = await client.post("/api/v1/auth/validate-session", json={"session_token": token})
    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is True
    assert data["user"]["username"] == "admin"


@pytest.mark.asyncio
async def test_validate_unknown_session(client: AsyncClient, seeded_users: dict):
    token = create_session_token(
        str(seeded_users["admin"].id),
        "00000000-0000-0000-0000-000000000000",
        utcnow() + timedelta(hours=1),
    )
    response = await client.post("/api/v1/auth/validate-session", json={"session_token": token})
    assert response.status_code == 200
    assert response.json() == {"valid": False, "user": None, "expires_at": None, "error": "Sessão não encontrada"}


@pytest.mark.asyncio
async def test_logout_revokes_session(client: AsyncClient, auth_headers: dict):
    token = auth_headers["Authorization"].split(" ", 1)[1]
    response = await client.post("/api/v1/auth/logout", json={"session_token": token})
    assert response.status_code == 200

    response = await client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_expired_session_is_revoked(client: AsyncClient, auth_headers: dict, db_session):
    token = auth_headers["Authorization"].split(" ", 1)[1]

    context, error = await resolve_session(db_session, token, now=utcnow() + timedelta(hours=9))
    assert context is None
    assert error == "Sessão expirada"

    result = await db_session.execute(select(UserSession))
    assert result.scalar_one().revoked is True


@pytest.mark.asyncio
async def test_validate_session_reports_session_expiry(client: AsyncClient, seeded_users: dict):
    response = await client.post("/api/v1/auth/login", json={"login": "admin", "password": ADMIN_PASSWORD})
    login = response.json()
    response = await client.post("/api/v1/auth/validate-session", json={"session_token": login["session_token"]})
    assert response.status_code == 200
    assert response.json()["expires_at"][:19] == login["expires_at"][:19]

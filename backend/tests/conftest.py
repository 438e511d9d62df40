import os

os.environ.setdefault("SLA_REFRESH_ENABLED", "false")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from techub.auth.service import hash_password
from techub.database import get_db
from techub.main import create_app
from techub.models.base import Base
from techub.users.models import Role, RolePermission, User

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_PERMISSIONS = [
    "users.view",
    "users.manage",
    "roles.view",
    "roles.manage",
    "alerts.manage",
    "settings.alerts",
    "settings.sla",
    "settings.presentation",
]
ADMIN_PASSWORD = "senha-segura-123"
VIEWER_PASSWORD = "apenas-leitura-1"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


async def _seed_role(db: AsyncSession, name: str, permissions: list[str]) -> Role:
    role = Role(name=name, description=f"Perfil {name}", is_active=True)
    db.add(role)
    await db.flush()
    for key in permissions:
        db.add(RolePermission(role_id=role.id, permission_key=key, enabled=True))
    return role


@pytest_asyncio.fixture
async def seeded_users(db_session: AsyncSession):
    admin_role = await _seed_role(db_session, "ADMIN", ADMIN_PERMISSIONS)
    viewer_role = await _seed_role(db_session, "VISUALIZADOR", ["users.view"])
    admin = User(
        full_name="Ana Administradora",
        username="admin",
        email="admin@techub.com.br",
        password_hash=hash_password(ADMIN_PASSWORD),
        role_id=admin_role.id,
        is_active=True,
    )
    viewer = User(
        full_name="Vitor Visualizador",
        username="viewer",
        email="viewer@techub.com.br",
        password_hash=hash_password(VIEWER_PASSWORD),
        role_id=viewer_role.id,
        is_active=True,
    )
    db_session.add_all([admin, viewer])
    await db_session.commit()
    return {"admin": admin, "viewer": viewer, "admin_role": admin_role, "viewer_role": viewer_role}


async def _login(client: AsyncClient, login: str, password: str) -> dict:
    response = await client.post("/api/v1/auth/login", json={"login": login, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['session_token']}"}


@pytest_asyncio.fixture
async def auth_headers(client: AsyncClient, seeded_users: dict):
    return await _login(client, "admin", ADMIN_PASSWORD)


@pytest_asyncio.fixture
async def viewer_headers(client: AsyncClient, seeded_users: dict):
    return await _login(client, "viewer", VIEWER_PASSWORD)

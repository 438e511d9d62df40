import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

import structlog
from passlib.context import CryptContext
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from techub.auth.jwt import create_session_token, decode_token
from techub.auth.models import UserSession
from techub.config import settings
from techub.models.base import ensure_utc, utcnow
from techub.users.models import User
from techub.users.service import get_permissions, get_user_by_id, get_user_by_login

logger = structlog.get_logger()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


@dataclass(frozen=True)
class SessionContext:
    """An authenticated caller, handed explicitly to services that need one."""

    user: User
    session: UserSession
    permissions: tuple[str, ...]

    @property
    def expires_at(self) -> datetime:
        return ensure_utc(self.session.expires_at)

    def has_permission(self, key: str) -> bool:
        return key in self.permissions


async def authenticate_user(db: AsyncSession, login: str, password: str) -> User | None:
    user = await get_user_by_login(db, login)
    if not user or not verify_password(password, user.password_hash):
        logger.info("login_rejected", login=login)
        return None
    return user


async def open_session(
    db: AsyncSession,
    user: User,
    ip_address: str | None = None,
    user_agent: str | None = None,
    now: datetime | None = None,
) -> tuple[UserSession, str]:
    now = now or utcnow()
    expires_at = now + timedelta(hours=settings.SESSION_EXPIRE_HOURS)
    session = UserSession(
        id=uuid.uuid4(),
        user_id=user.id,
        ip_address=ip_address,
        user_agent=user_agent,
        expires_at=expires_at,
    )
    db.add(session)
    await db.commit()

    token = create_session_token(str(user.id), str(session.id), expires_at)
    logger.info("session_opened", user_id=str(user.id), session_id=str(session.id))
    return session, token


async def resolve_session(
    db: AsyncSession,
    token: str,
    now: datetime | None = None,
) -> tuple[SessionContext | None, str | None]:
    """Turn a bearer token into a SessionContext, or an error message explaining why not."""
    now = now or utcnow()
    payload = decode_token(token, verify_exp=False)
    if payload is None or payload.get("type") != "session" or not payload.get("sid"):
        return None, "Sessão não encontrada"

    result = await db.execute(
        select(UserSession).where(
            UserSession.id == uuid.UUID(payload["sid"]),
            UserSession.revoked == False,  # noqa: E712
        )
    )
    session = result.scalar_one_or_none()
    if session is None:
        return None, "Sessão não encontrada"

    if ensure_utc(session.expires_at) <= now:
        session.revoked = True
        await db.commit()
        logger.info("session_expired", session_id=str(session.id))
        return None, "Sessão expirada"

    user = await get_user_by_id(db, session.user_id)
    if user is None or not user.is_active:
        return None, "Usuário não encontrado"
    if user.role is None or not user.role.is_active:
        return None, "Perfil inativo"

    permissions = tuple(await get_permissions(db, user.role_id))
    return SessionContext(user=user, session=session, permissions=permissions), None


async def revoke_session(db: AsyncSession, token: str) -> bool:
    payload = decode_token(token, verify_exp=False)
    if payload is None or not payload.get("sid"):
        return False
    result = await db.execute(
        update(UserSession)
        .where(UserSession.id == uuid.UUID(payload["sid"]))
        .values(revoked=True)
    )
    await db.commit()
    return result.rowcount > 0

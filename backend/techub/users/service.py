import math
from uuid import UUID

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from techub.users.models import Role, RolePermission, User
from techub.users.schemas import UserCreate, UserResponse

logger = structlog.get_logger()


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        full_name=user.full_name,
        username=user.username,
        email=user.email,
        department=user.department,
        is_active=user.is_active,
        role=user.role.name if user.role else "USUARIO",
        role_description=user.role.description if user.role else None,
        created_at=user.created_at,
    )


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_login(db: AsyncSession, login: str) -> User | None:
    """Find an active user by e-mail or username."""
    login = login.strip().lower()
    result = await db.execute(
        select(User).where(
            or_(User.email == login, User.username == login),
            User.is_active == True,  # noqa: E712
        )
    )
    return result.scalar_one_or_none()


async def get_role_by_id(db: AsyncSession, role_id: UUID) -> Role | None:
    result = await db.execute(select(Role).where(Role.id == role_id))
    return result.scalar_one_or_none()


async def get_permissions(db: AsyncSession, role_id: UUID) -> list[str]:
    result = await db.execute(
        select(RolePermission.permission_key).where(
            RolePermission.role_id == role_id,
            RolePermission.enabled == True,  # noqa: E712
        )
    )
    return list(result.scalars().all())


async def find_conflict(db: AsyncSession, username: str, email: str) -> str | None:
    """Name of the already-taken identity field, if any."""
    existing = await db.execute(select(User.id).where(User.username == username.strip().lower()))
    if existing.first():
        return "username"
    existing = await db.execute(select(User.id).where(User.email == email.strip().lower()))
    if existing.first():
        return "email"
    return None


async def create_user(db: AsyncSession, data: UserCreate, password_hash: str) -> User:
    user = User(
        full_name=data.full_name.strip(),
        username=data.username.strip().lower(),
        email=data.email.strip().lower(),
        password_hash=password_hash,
        department=(data.department or "").strip() or None,
        role_id=data.role_id,
        is_active=data.is_active,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user, attribute_names=["role"])
    logger.info("user_created", user_id=str(user.id), username=user.username)
    return user


async def get_users(
    db: AsyncSession,
    search: str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[User], int, int]:
    query = select(User)
    count_query = select(func.count()).select_from(User)

    if search:
        pattern = f"%{search.lower()}%"
        condition = or_(
            func.lower(User.full_name).like(pattern),
            User.username.like(pattern),
            User.email.like(pattern),
        )
        query = query.where(condition)
        count_query = count_query.where(condition)

    query = query.order_by(User.full_name).offset((page - 1) * per_page).limit(per_page)

    result = await db.execute(query)
    count_result = await db.execute(count_query)
    total = count_result.scalar_one()
    total_pages = math.ceil(total / per_page) if total else 0
    return list(result.scalars().unique().all()), total, total_pages


async def get_roles_with_counts(db: AsyncSession) -> list[dict]:
    user_counts = (
        select(User.role_id, func.count().label("user_count"))
        .group_by(User.role_id)
        .subquery()
    )
    result = await db.execute(
        select(Role, func.coalesce(user_counts.c.user_count, 0))
        .outerjoin(user_counts, Role.id == user_counts.c.role_id)
        .order_by(Role.name)
    )
    return [
        {
            "id": role.id,
            "name": role.name,
            "description": role.description,
            "is_active": role.is_active,
            "user_count": count,
        }
        for role, count in result.all()
    ]


async def toggle_role(db: AsyncSession, role: Role) -> Role:
    role.is_active = not role.is_active
    await db.commit()
    await db.refresh(role)
    logger.info("role_toggled", role_id=str(role.id), is_active=role.is_active)
    return role

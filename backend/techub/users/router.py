from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from techub.auth.service import SessionContext, hash_password
from techub.database import get_db
from techub.dependencies import require_permission
from techub.users.schemas import RoleResponse, UserCreate, UserListResponse, UserResponse
from techub.users.service import (
    create_user,
    find_conflict,
    get_role_by_id,
    get_roles_with_counts,
    get_users,
    to_user_response,
    toggle_role,
)

router = APIRouter(tags=["users"])

CONFLICT_MESSAGES = {
    "username": "Este username já está em uso",
    "email": "Este email já está em uso",
}


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create(
    data: UserCreate,
    context: SessionContext = Depends(require_permission("users.manage")),
    db: AsyncSession = Depends(get_db),
):
    conflict = await find_conflict(db, data.username, data.email)
    if conflict:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=CONFLICT_MESSAGES[conflict])

    role = await get_role_by_id(db, data.role_id)
    if role is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Perfil não encontrado")

    user = await create_user(db, data, hash_password(data.password))
    return to_user_response(user)


@router.get("/users", response_model=UserListResponse)
async def list_users(
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    context: SessionContext = Depends(require_permission("users.view")),
    db: AsyncSession = Depends(get_db),
):
    users, total, total_pages = await get_users(db, search, page, per_page)
    return UserListResponse(
        items=[to_user_response(u) for u in users],
        page=page,
        per_page=per_page,
        total=total,
        total_pages=total_pages,
    )


@router.get("/roles", response_model=list[RoleResponse])
async def list_roles(
    context: SessionContext = Depends(require_permission("roles.view")),
    db: AsyncSession = Depends(get_db),
):
    return [RoleResponse(**r) for r in await get_roles_with_counts(db)]


@router.patch("/roles/{role_id}/toggle", response_model=RoleResponse)
async def toggle(
    role_id: UUID,
    context: SessionContext = Depends(require_permission("roles.manage")),
    db: AsyncSession = Depends(get_db),
):
    role = await get_role_by_id(db, role_id)
    if role is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Perfil não encontrado")
    if role.id == context.user.role_id and role.is_active:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Não é possível desativar o próprio perfil")

    role = await toggle_role(db, role)
    counts = {r["id"]: r["user_count"] for r in await get_roles_with_counts(db)}
    return RoleResponse(
        id=role.id,
        name=role.name,
        description=role.description,
        is_active=role.is_active,
        user_count=counts.get(role.id, 0),
    )

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from techub.auth.schemas import (
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    SessionTokenRequest,
    SessionUser,
    ValidateSessionResponse,
)
from techub.auth.service import SessionContext, authenticate_user, open_session, resolve_session, revoke_session
from techub.database import get_db
from techub.dependencies import get_current_session
from techub.users.service import get_permissions, to_user_response

router = APIRouter(prefix="/auth", tags=["auth"])


def _session_user(user, permissions) -> SessionUser:
    return SessionUser(**to_user_response(user).model_dump(), permissions=list(permissions))


@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, data.login, data.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenciais inválidas")
    if user.role is None or not user.role.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Esta conta está associada a um perfil inativo",
        )

    ip_address = request.headers.get("x-forwarded-for") or (request.client.host if request.client else None)
    session, token = await open_session(
        db, user, ip_address=ip_address, user_agent=request.headers.get("user-agent"),
    )
    permissions = await get_permissions(db, user.role_id)
    return LoginResponse(
        session_token=token,
        expires_at=session.expires_at,
        user=_session_user(user, permissions),
    )


@router.post("/validate-session", response_model=ValidateSessionResponse)
async def validate_session(data: SessionTokenRequest, db: AsyncSession = Depends(get_db)):
    context, error = await resolve_session(db, data.session_token)
    if context is None:
        return ValidateSessionResponse(valid=False, error=error)
    return ValidateSessionResponse(
        valid=True,
        user=_session_user(context.user, context.permissions),
        expires_at=context.expires_at,
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(data: SessionTokenRequest, db: AsyncSession = Depends(get_db)):
    revoked = await revoke_session(db, data.session_token)
    if not revoked:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sessão não encontrada")
    return LogoutResponse()


@router.get("/me", response_model=SessionUser)
async def me(context: SessionContext = Depends(get_current_session)):
    return _session_user(context.user, context.permissions)

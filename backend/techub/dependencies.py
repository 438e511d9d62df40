from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from techub.auth.service import SessionContext, resolve_session
from techub.database import get_db

security = HTTPBearer()


async def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> SessionContext:
    context, error = await resolve_session(db, credentials.credentials)
    if context is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=error or "Sessão inválida")
    return context


def require_permission(key: str):
    async def _check(context: SessionContext = Depends(get_current_session)) -> SessionContext:
        if not context.has_permission(key):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Acesso negado")
        return context

    return _check

from datetime import datetime

from pydantic import BaseModel, Field

from techub.users.schemas import UserResponse


class LoginRequest(BaseModel):
    login: str = Field(min_length=1)
    password: str = Field(min_length=1)


class SessionTokenRequest(BaseModel):
    session_token: str = Field(min_length=1)


class SessionUser(UserResponse):
    permissions: list[str] = []


class LoginResponse(BaseModel):
    success: bool = True
    session_token: str
    expires_at: datetime
    user: SessionUser


class ValidateSessionResponse(BaseModel):
    valid: bool
    user: SessionUser | None = None
    expires_at: datetime | None = None
    error: str | None = None


class LogoutResponse(BaseModel):
    success: bool = True
    message: str = "Sessão encerrada com sucesso"

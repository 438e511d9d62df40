from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    username: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    department: str | None = Field(None, max_length=100)
    role_id: UUID
    is_active: bool = True


class UserResponse(BaseModel):
    id: UUID
    full_name: str
    username: str
    email: str
    department: str | None
    is_active: bool
    role: str
    role_description: str | None = None
    created_at: datetime


class UserListResponse(BaseModel):
    items: list[UserResponse]
    page: int
    per_page: int
    total: int
    total_pages: int


class RoleResponse(BaseModel):
    id: UUID
    name: str
    description: str | None
    is_active: bool
    user_count: int

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from jobboard.roles import Role


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=120)
    password: str = Field(min_length=6, max_length=256)
    full_name: str = Field(default="", max_length=255)
    role: Role = Role.STUDENT


class LoginRequest(BaseModel):
    username: str = Field(min_length=3, max_length=120)
    password: str = Field(min_length=6, max_length=256)


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    username: str
    role: Role


class MeResponse(BaseModel):
    id: int
    username: str
    role: Role


class UserOut(BaseModel):
    id: int
    username: str
    full_name: str | None = None
    role: Role
    is_active: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=120)
    password: str = Field(min_length=6, max_length=256)
    full_name: str = Field(default="", max_length=255)
    role: Role = Role.EMPLOYER


class UserRoleUpdate(BaseModel):
    role: Role

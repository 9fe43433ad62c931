from __future__ import annotations

from pydantic import BaseModel, Field


class StudentProfileOut(BaseModel):
    id: int
    user_id: int
    full_name: str | None = None
    university: str | None = None
    course: str | None = None
    bio: str | None = None

    class Config:
        from_attributes = True


class StudentProfileUpdate(BaseModel):
    full_name: str | None = Field(default=None, max_length=255)
    university: str | None = Field(default=None, max_length=255)
    course: str | None = Field(default=None, max_length=255)
    bio: str | None = None

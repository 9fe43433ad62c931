from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class CVCreate(BaseModel):
    file_url: str | None = Field(default=None, max_length=1000)
    skills: list[str] = Field(default_factory=list)


class CVOut(BaseModel):
    id: int
    file_url: str | None = None
    skills: list[str] | None = None
    version: int
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class MatchRunOut(BaseModel):
    created: int = 0
    updated: int = 0
    failed: int = 0

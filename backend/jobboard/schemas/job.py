from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

JobStatusValue = Literal["open", "closed", "draft"]


class JobCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    company_name: str | None = Field(default=None, max_length=255)
    description: str = ""
    location: str | None = None
    job_type: str | None = None
    required_skills: list[str] = Field(default_factory=list)
    status: JobStatusValue = "open"


class JobUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    company_name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    location: str | None = None
    job_type: str | None = None
    required_skills: list[str] | None = None
    status: JobStatusValue | None = None


class JobOut(BaseModel):
    id: int
    employer_id: int
    title: str
    company_name: str | None = None
    description: str | None = None
    location: str | None = None
    job_type: str | None = None
    required_skills: list[str] | None = None
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True

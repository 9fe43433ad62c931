from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

ApplicationStatusValue = Literal["pending", "reviewed", "shortlisted", "rejected"]


class ApplicationCreate(BaseModel):
    job_id: int
    cv_id: int | None = None
    cover_letter: str | None = None


class ApplicationReview(BaseModel):
    status: ApplicationStatusValue
    employer_notes: str | None = None


class ApplicationOut(BaseModel):
    id: int
    job_id: int
    student_id: int
    cv_id: int
    cover_letter: str | None = None
    status: str
    employer_notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True

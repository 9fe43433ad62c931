from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from jobboard.models.match import MatchStatus


class MatchOut(BaseModel):
    id: int
    student_id: int
    job_id: int
    match_score: int
    status: MatchStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None
    matched_skills: list[str] = []
    missing_skills: list[str] = []

    class Config:
        from_attributes = True


class MatchListOut(BaseModel):
    total: int
    limit: int
    offset: int
    matches: list[MatchOut]


class MatchStatusUpdate(BaseModel):
    status: MatchStatus

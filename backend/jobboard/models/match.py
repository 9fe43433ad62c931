from __future__ import annotations

from enum import Enum

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, func

from jobboard.database import Base


class MatchStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"


class Match(Base):
    __tablename__ = "matches"
    __table_args__ = (
        UniqueConstraint("student_id", "job_id", name="uq_match_student_job"),
        CheckConstraint("match_score >= 0 AND match_score <= 100", name="ck_match_score_range"),
        Index("idx_matches_job_score", "job_id", "match_score"),
        Index("idx_matches_status", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    match_score = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=MatchStatus.PENDING.value)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

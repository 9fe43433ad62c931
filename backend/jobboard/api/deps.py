from __future__ import annotations

from functools import lru_cache

from fastapi import HTTPException
from sqlalchemy.orm import Session

from jobboard.auth import Identity
from jobboard.models.cv import CV
from jobboard.models.job import Job
from jobboard.models.match import Match
from jobboard.models.student_profile import StudentProfile
from jobboard.schemas.match import MatchOut
from jobboard.services.matching import MatchingService
from jobboard.services.scoring import skill_overlap


@lru_cache
def get_matching_service() -> MatchingService:
    return MatchingService.from_settings()


def get_student_profile(db: Session, identity: Identity) -> StudentProfile:
    profile = db.query(StudentProfile).filter(StudentProfile.user_id == identity.user_id).first()
    if not profile:
        raise HTTPException(status_code=404, detail="Student profile not found")
    return profile


def active_cv_for_user(db: Session, user_id: int) -> CV | None:
    return (
        db.query(CV)
        .filter(CV.user_id == user_id, CV.is_active == True)  # noqa: E712
        .order_by(CV.version.desc())
        .first()
    )


def get_owned_job(db: Session, job_id: int, identity: Identity) -> Job:
    query = db.query(Job).filter(Job.id == job_id)
    if not identity.is_admin:
        query = query.filter(Job.employer_id == identity.user_id)
    job = query.first()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


def match_to_out(match: Match, candidate_skills: list[str] | None, required_skills: list[str] | None) -> MatchOut:
    matched, missing = skill_overlap(candidate_skills, required_skills)
    out = MatchOut.model_validate(match)
    out.matched_skills = matched
    out.missing_skills = missing
    return out

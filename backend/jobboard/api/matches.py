from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from jobboard.api.deps import active_cv_for_user, get_student_profile, match_to_out
from jobboard.auth import Identity, authorize
from jobboard.database import get_db
from jobboard.models.job import Job
from jobboard.models.student_profile import StudentProfile
from jobboard.schemas.match import MatchListOut
from jobboard.services.match_store import MatchStore


router = APIRouter()


@router.get("", response_model=MatchListOut)
def list_my_matches(
    student_id: int | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> MatchListOut:
    if student_id is not None and not identity.is_admin:
        own = get_student_profile(db, identity)
        if own.id != student_id:
            raise HTTPException(status_code=403, detail="Not authorized to view these matches")

    if student_id is None:
        profile = get_student_profile(db, identity)
    else:
        profile = db.query(StudentProfile).filter(StudentProfile.id == student_id).first()
        if not profile:
            raise HTTPException(status_code=404, detail="Student profile not found")

    total, matches = MatchStore(db).list_for_student(profile.id, limit=limit, offset=offset)
    cv = active_cv_for_user(db, profile.user_id)
    candidate_skills = cv.skills if cv else []
    jobs = {job.id: job for job in db.query(Job).filter(Job.id.in_([m.job_id for m in matches])).all()}
    return MatchListOut(
        total=total,
        limit=limit,
        offset=offset,
        matches=[
            match_to_out(match, candidate_skills, jobs[match.job_id].required_skills if match.job_id in jobs else [])
            for match in matches
        ],
    )

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from sqlalchemy.orm import Session

from jobboard.api.deps import active_cv_for_user, get_matching_service, get_owned_job, match_to_out
from jobboard.auth import Identity, authorize
from jobboard.database import get_db
from jobboard.models.application import JobApplication
from jobboard.models.job import Job
from jobboard.models.student_profile import StudentProfile
from jobboard.schemas.application import ApplicationOut, ApplicationReview
from jobboard.schemas.job import JobCreate, JobOut, JobUpdate
from jobboard.schemas.match import MatchListOut, MatchOut, MatchStatusUpdate
from jobboard.services.match_store import MatchStore
from jobboard.services.matching import MatchingService
from jobboard.services.scoring import coerce_skills


router = APIRouter()

REQUIRED_JOB_FIELDS = ("title", "status")


@router.get("/jobs", response_model=list[JobOut])
def list_my_jobs(
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> list[Job]:
    query = db.query(Job)
    if not identity.is_admin:
        query = query.filter(Job.employer_id == identity.user_id)
    return query.order_by(Job.created_at.desc(), Job.id.desc()).all()


@router.post("/jobs", response_model=JobOut)
async def create_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
    matching: MatchingService = Depends(get_matching_service),
) -> Job:
    data = payload.model_dump()
    data["required_skills"] = coerce_skills(data["required_skills"])
    job = Job(employer_id=identity.user_id, **data)
    db.add(job)
    db.commit()
    db.refresh(job)

    if job.status == "open":
        await matching.match_job(db, job.id)
    return job


@router.put("/jobs/{job_id}", response_model=JobOut)
async def update_job(
    job_id: int,
    payload: JobUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
    matching: MatchingService = Depends(get_matching_service),
) -> Job:
    job = get_owned_job(db, job_id, identity)
    changes = payload.model_dump(exclude_unset=True)
    # Explicit nulls clear optional fields; required columns keep their value.
    for field in REQUIRED_JOB_FIELDS:
        if field in changes and changes[field] is None:
            del changes[field]
    if "required_skills" in changes:
        changes["required_skills"] = coerce_skills(changes["required_skills"])

    rescore = job.status != "open" and changes.get("status") == "open"
    rescore = rescore or any(field in changes for field in ("required_skills", "title", "description"))
    for field, value in changes.items():
        setattr(job, field, value)
    db.add(job)
    db.commit()
    db.refresh(job)

    if rescore and job.status == "open":
        await matching.match_job(db, job.id)
    return job


@router.delete("/jobs/{job_id}")
def delete_job(
    job_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> dict[str, str | int]:
    job = get_owned_job(db, job_id, identity)
    removed_matches = MatchStore(db).delete_for_job(job.id)
    db.query(JobApplication).filter(JobApplication.job_id == job.id).delete(synchronize_session=False)
    db.delete(job)
    db.commit()
    logger.info(f"Deleted job {job_id} and {removed_matches} matches")
    return {"status": "deleted", "job_id": job_id, "removed_matches": removed_matches}


@router.get("/jobs/{job_id}/matches", response_model=MatchListOut)
def list_job_matches(
    job_id: int,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> MatchListOut:
    job = get_owned_job(db, job_id, identity)
    total, matches = MatchStore(db).list_for_job(job.id, limit=limit, offset=offset)
    profiles = {
        profile.id: profile
        for profile in db.query(StudentProfile).filter(StudentProfile.id.in_([m.student_id for m in matches])).all()
    }

    out: list[MatchOut] = []
    for match in matches:
        profile = profiles.get(match.student_id)
        cv = active_cv_for_user(db, profile.user_id) if profile else None
        out.append(match_to_out(match, cv.skills if cv else [], job.required_skills))
    return MatchListOut(total=total, limit=limit, offset=offset, matches=out)


@router.patch("/matches/{match_id}", response_model=MatchOut)
def review_match(
    match_id: int,
    payload: MatchStatusUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> MatchOut:
    store = MatchStore(db)
    match = store.get(match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    job = get_owned_job(db, match.job_id, identity)

    match = store.set_status(match, payload.status)
    profile = db.query(StudentProfile).filter(StudentProfile.id == match.student_id).first()
    cv = active_cv_for_user(db, profile.user_id) if profile else None
    return match_to_out(match, cv.skills if cv else [], job.required_skills)


@router.delete("/matches/{match_id}")
def delete_match(
    match_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> dict[str, str | int]:
    store = MatchStore(db)
    match = store.get(match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    get_owned_job(db, match.job_id, identity)
    store.delete(match)
    return {"status": "deleted", "match_id": match_id}


@router.get("/jobs/{job_id}/applications", response_model=list[ApplicationOut])
def list_job_applications(
    job_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> list[JobApplication]:
    job = get_owned_job(db, job_id, identity)
    return (
        db.query(JobApplication)
        .filter(JobApplication.job_id == job.id)
        .order_by(JobApplication.created_at.desc(), JobApplication.id.desc())
        .all()
    )


@router.patch("/applications/{application_id}", response_model=ApplicationOut)
def review_application(
    application_id: int,
    payload: ApplicationReview,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> JobApplication:
    application = db.query(JobApplication).filter(JobApplication.id == application_id).first()
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    get_owned_job(db, application.job_id, identity)

    application.status = payload.status
    if payload.employer_notes is not None:
        application.employer_notes = payload.employer_notes
    db.add(application)
    db.commit()
    db.refresh(application)
    return application

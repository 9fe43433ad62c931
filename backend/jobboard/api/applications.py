from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from jobboard.api.deps import active_cv_for_user, get_student_profile
from jobboard.auth import Identity, authorize
from jobboard.database import get_db
from jobboard.models.application import JobApplication
from jobboard.models.cv import CV
from jobboard.models.job import Job
from jobboard.schemas.application import ApplicationCreate, ApplicationOut


router = APIRouter()


@router.get("", response_model=list[ApplicationOut])
def list_applications(
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> list[JobApplication]:
    profile = get_student_profile(db, identity)
    return (
        db.query(JobApplication)
        .filter(JobApplication.student_id == profile.id)
        .order_by(JobApplication.updated_at.desc(), JobApplication.id.desc())
        .all()
    )


@router.post("", response_model=ApplicationOut)
def create_application(
    payload: ApplicationCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> JobApplication:
    profile = get_student_profile(db, identity)

    job = db.query(Job).filter(Job.id == payload.job_id, Job.status == "open").first()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    if payload.cv_id is not None:
        cv = db.query(CV).filter(CV.id == payload.cv_id, CV.user_id == identity.user_id).first()
    else:
        cv = active_cv_for_user(db, identity.user_id)
    if not cv:
        raise HTTPException(status_code=400, detail="Upload a CV before applying")

    existing = (
        db.query(JobApplication)
        .filter(JobApplication.student_id == profile.id, JobApplication.job_id == job.id)
        .first()
    )
    if existing:
        return existing

    application = JobApplication(
        job_id=job.id,
        student_id=profile.id,
        cv_id=cv.id,
        cover_letter=payload.cover_letter,
        status="pending",
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    return application


@router.delete("/{application_id}")
def withdraw_application(
    application_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> dict[str, str | int]:
    profile = get_student_profile(db, identity)
    application = (
        db.query(JobApplication)
        .filter(JobApplication.id == application_id, JobApplication.student_id == profile.id)
        .first()
    )
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    db.delete(application)
    db.commit()
    return {"status": "deleted", "application_id": application_id}

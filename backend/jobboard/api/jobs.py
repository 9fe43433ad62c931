from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from jobboard.database import get_db
from jobboard.models.job import Job
from jobboard.schemas.job import JobOut


router = APIRouter()


@router.get("", response_model=list[JobOut])
def list_open_jobs(
    q: str | None = Query(default=None, max_length=200),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
) -> list[Job]:
    query = db.query(Job).filter(Job.status == "open")
    if q and q.strip():
        like = f"%{q.strip()}%"
        query = query.filter(Job.title.ilike(like) | Job.description.ilike(like))
    return query.order_by(Job.created_at.desc(), Job.id.desc()).offset(offset).limit(limit).all()


@router.get("/{job_id}", response_model=JobOut)
def get_open_job(job_id: int, db: Session = Depends(get_db)) -> Job:
    job = db.query(Job).filter(Job.id == job_id, Job.status == "open").first()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from sqlalchemy import func
from sqlalchemy.orm import Session

from jobboard.api.deps import get_matching_service, get_student_profile
from jobboard.auth import Identity, authorize
from jobboard.database import get_db
from jobboard.models.application import JobApplication
from jobboard.models.cv import CV
from jobboard.schemas.cv import CVCreate, CVOut, MatchRunOut
from jobboard.services.matching import MatchingService, MatchRunSummary
from jobboard.services.scoring import coerce_skills


router = APIRouter()


def _summary_out(summary: MatchRunSummary) -> MatchRunOut:
    return MatchRunOut(created=summary.created, updated=summary.updated, failed=summary.failed)


@router.post("", response_model=CVOut)
async def create_cv(
    payload: CVCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
    matching: MatchingService = Depends(get_matching_service),
) -> CV:
    get_student_profile(db, identity)

    latest_version = db.query(func.max(CV.version)).filter(CV.user_id == identity.user_id).scalar() or 0
    db.query(CV).filter(CV.user_id == identity.user_id).update({CV.is_active: False})
    cv = CV(
        user_id=identity.user_id,
        file_url=payload.file_url,
        skills=coerce_skills(payload.skills),
        version=latest_version + 1,
        is_active=True,
    )
    db.add(cv)
    db.commit()
    db.refresh(cv)

    await matching.match_cv(db, cv.id)
    db.refresh(cv)
    return cv


@router.get("", response_model=list[CVOut])
def list_cvs(
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> list[CV]:
    return db.query(CV).filter(CV.user_id == identity.user_id).order_by(CV.version.desc()).all()


@router.post("/{cv_id}/match", response_model=MatchRunOut)
async def rerun_matching(
    cv_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
    matching: MatchingService = Depends(get_matching_service),
) -> MatchRunOut:
    query = db.query(CV).filter(CV.id == cv_id)
    if not identity.is_admin:
        query = query.filter(CV.user_id == identity.user_id)
    if not query.first():
        raise HTTPException(status_code=404, detail="CV not found")

    summary = await matching.match_cv(db, cv_id)
    return _summary_out(summary)


def _owned_cv(db: Session, cv_id: int, identity: Identity) -> CV:
    cv = db.query(CV).filter(CV.id == cv_id, CV.user_id == identity.user_id).first()
    if not cv:
        raise HTTPException(status_code=404, detail="CV not found")
    return cv


def _activate(db: Session, cv: CV) -> None:
    db.query(CV).filter(CV.user_id == cv.user_id, CV.id != cv.id).update({CV.is_active: False})
    cv.is_active = True
    db.add(cv)
    db.commit()
    db.refresh(cv)


@router.put("/{cv_id}/activate", response_model=CVOut)
async def activate_cv(
    cv_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
    matching: MatchingService = Depends(get_matching_service),
) -> CV:
    cv = _owned_cv(db, cv_id, identity)
    _activate(db, cv)
    await matching.match_cv(db, cv.id)
    db.refresh(cv)
    return cv


@router.delete("/{cv_id}")
async def delete_cv(
    cv_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
    matching: MatchingService = Depends(get_matching_service),
) -> dict[str, str | int | None]:
    cv = _owned_cv(db, cv_id, identity)
    if db.query(JobApplication).filter(JobApplication.cv_id == cv.id).first():
        raise HTTPException(status_code=409, detail="CV is attached to an application")

    was_active = cv.is_active
    db.delete(cv)
    db.commit()

    # The newest remaining version takes over and is rematched.
    promoted = None
    if was_active:
        latest = (
            db.query(CV)
            .filter(CV.user_id == identity.user_id)
            .order_by(CV.version.desc())
            .first()
        )
        if latest:
            _activate(db, latest)
            await matching.match_cv(db, latest.id)
            promoted = latest.id
    logger.info(f"Deleted CV {cv_id} for user {identity.user_id}")
    return {"status": "deleted", "cv_id": cv_id, "active_cv_id": promoted}

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jobboard.api.deps import get_student_profile
from jobboard.auth import Identity, authorize
from jobboard.database import get_db
from jobboard.models.student_profile import StudentProfile
from jobboard.schemas.profile import StudentProfileOut, StudentProfileUpdate


router = APIRouter()


@router.get("", response_model=StudentProfileOut)
def get_profile(
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> StudentProfile:
    return get_student_profile(db, identity)


@router.put("", response_model=StudentProfileOut)
def update_profile(
    payload: StudentProfileUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> StudentProfile:
    profile = get_student_profile(db, identity)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile

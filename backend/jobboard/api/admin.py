from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from sqlalchemy.orm import Session

from jobboard.api.auth import create_account
from jobboard.api.deps import get_matching_service
from jobboard.auth import Identity, authorize
from jobboard.database import get_db
from jobboard.models.student_profile import StudentProfile
from jobboard.models.user import User
from jobboard.roles import Role
from jobboard.schemas.auth import UserCreate, UserOut, UserRoleUpdate
from jobboard.services.matching import MatchingService


router = APIRouter()


@router.get("/users", response_model=list[UserOut])
def list_users(
    role: str | None = Query(default=None),
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> list[User]:
    query = db.query(User)
    if role:
        query = query.filter(User.role == role.strip().lower())
    return query.order_by(User.created_at.desc(), User.id.desc()).all()


@router.post("/users", response_model=UserOut)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> User:
    user = create_account(db, payload.username, payload.password, payload.full_name, payload.role)
    logger.info(f"Admin {identity.username} created {user.role} account '{user.username}'")
    return user


@router.patch("/users/{user_id}", response_model=UserOut)
def update_user_role(
    user_id: int,
    payload: UserRoleUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.id == identity.user_id and payload.role is not Role.ADMIN:
        raise HTTPException(status_code=400, detail="Admins cannot demote themselves")

    user.role = payload.role.value
    has_profile = db.query(StudentProfile).filter(StudentProfile.user_id == user.id).first() is not None
    if payload.role is Role.STUDENT and not has_profile:
        db.add(StudentProfile(user_id=user.id, full_name=user.full_name))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Admin {identity.username} set role of '{user.username}' to {user.role}")
    return user


@router.post("/rescore")
async def rescore_all(
    limit: int | None = Query(default=None, ge=1, le=1000),
    db: Session = Depends(get_db),
    identity: Identity = Depends(authorize),
    matching: MatchingService = Depends(get_matching_service),
) -> dict[str, int]:
    processed, summary = await matching.rescore_all(db, limit=limit)
    return {
        "processed_cvs": processed,
        "created": summary.created,
        "updated": summary.updated,
        "failed": summary.failed,
    }

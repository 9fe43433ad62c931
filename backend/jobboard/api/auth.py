from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from jobboard.auth import Identity, create_access_token, get_current_identity, hash_password, verify_password
from jobboard.database import get_db
from jobboard.models.student_profile import StudentProfile
from jobboard.models.user import User
from jobboard.roles import SELF_REGISTER_ROLES, Role
from jobboard.schemas.auth import AuthResponse, LoginRequest, MeResponse, RegisterRequest


router = APIRouter()


def create_account(db: Session, username: str, password: str, full_name: str, role: Role) -> User:
    """Create a user; student accounts get their profile row in the same transaction."""
    username = username.strip().lower()
    if not username:
        raise HTTPException(status_code=400, detail="Username is required")

    existing = db.query(User).filter(User.username == username).first()
    if existing:
        raise HTTPException(status_code=409, detail="Username already exists")

    user = User(
        username=username,
        full_name=full_name.strip() or None,
        password_hash=hash_password(password),
        role=role.value,
    )
    db.add(user)
    db.flush()
    if role is Role.STUDENT:
        db.add(StudentProfile(user_id=user.id, full_name=user.full_name))
    db.commit()
    db.refresh(user)
    return user


@router.post("/register", response_model=AuthResponse)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> AuthResponse:
    if payload.role not in SELF_REGISTER_ROLES:
        raise HTTPException(status_code=403, detail="Role cannot be self-assigned")
    user = create_account(db, payload.username, payload.password, payload.full_name, payload.role)

    token = create_access_token(user.id)
    return AuthResponse(access_token=token, username=user.username, role=payload.role)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> AuthResponse:
    username = payload.username.strip().lower()
    user = db.query(User).filter(User.username == username).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")

    token = create_access_token(user.id)
    return AuthResponse(access_token=token, username=user.username, role=Role(user.role))


@router.get("/me", response_model=MeResponse)
def me(identity: Identity = Depends(get_current_identity)) -> MeResponse:
    return MeResponse(id=identity.user_id, username=identity.username, role=identity.role)

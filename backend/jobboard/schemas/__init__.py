from jobboard.schemas.application import ApplicationCreate, ApplicationOut, ApplicationReview
from jobboard.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    UserCreate,
    UserOut,
    UserRoleUpdate,
)
from jobboard.schemas.cv import CVCreate, CVOut, MatchRunOut
from jobboard.schemas.job import JobCreate, JobOut, JobUpdate
from jobboard.schemas.match import MatchListOut, MatchOut, MatchStatusUpdate
from jobboard.schemas.profile import StudentProfileOut, StudentProfileUpdate

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "AuthResponse",
    "MeResponse",
    "UserOut",
    "UserCreate",
    "UserRoleUpdate",
    "StudentProfileOut",
    "StudentProfileUpdate",
    "CVCreate",
    "CVOut",
    "MatchRunOut",
    "JobCreate",
    "JobUpdate",
    "JobOut",
    "MatchOut",
    "MatchListOut",
    "MatchStatusUpdate",
    "ApplicationCreate",
    "ApplicationReview",
    "ApplicationOut",
]

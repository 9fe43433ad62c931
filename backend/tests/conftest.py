from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import jobboard.models  # noqa: F401
from jobboard.api.deps import get_matching_service
from jobboard.auth import create_access_token
from jobboard.database import Base, get_db
from jobboard.main import app
from jobboard.models.cv import CV
from jobboard.models.job import Job
from jobboard.models.student_profile import StudentProfile
from jobboard.models.user import User
from jobboard.services.matching import MatchingService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    def _make(username: str, role: str = "student", full_name: str | None = None) -> User:
        # Tests never log in with this hash, so skip the slow PBKDF2 round.
        user = User(username=username, full_name=full_name or username.title(), password_hash="x", role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_student(db, make_user):
    def _make(username: str) -> tuple[User, StudentProfile]:
        user = make_user(username, role="student")
        profile = StudentProfile(user_id=user.id, full_name=user.full_name)
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return user, profile

    return _make


@pytest.fixture
def make_cv(db):
    def _make(user: User, skills, *, version: int = 1, is_active: bool = True) -> CV:
        cv = CV(
            user_id=user.id,
            file_url=f"https://files.example/{user.username}-v{version}.pdf",
            skills=skills,
            version=version,
            is_active=is_active,
        )
        db.add(cv)
        db.commit()
        db.refresh(cv)
        return cv

    return _make


@pytest.fixture
def make_job(db, make_user):
    employer_holder: list[User] = []

    def _make(
        title: str,
        required_skills,
        *,
        status: str = "open",
        employer: User | None = None,
        description: str = "",
    ) -> Job:
        if employer is None:
            if not employer_holder:
                employer_holder.append(make_user("acme-hr", role="employer"))
            employer = employer_holder[0]
        job = Job(
            employer_id=employer.id,
            title=title,
            description=description or title,
            required_skills=required_skills,
            status=status,
        )
        db.add(job)
        db.commit()
        db.refresh(job)
        return job

    return _make


@pytest.fixture
def matching_service():
    return MatchingService()


@pytest.fixture
def client(session_factory, matching_service):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_matching_service] = lambda: matching_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers

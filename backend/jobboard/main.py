from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from jobboard.api import admin, applications, auth, cvs, employer, jobs, matches, profile
from jobboard.bootstrap import run_bootstrap
from jobboard.config import settings
from jobboard.database import Base, engine
from jobboard.errors import ExternalServiceError, InvalidInput, MatchingError, NotFoundError, PersistenceConflict
from jobboard.logging_config import setup_logging
from jobboard.models import application, cv, job, match, student_profile, user  # noqa: F401


ERROR_STATUS_CODES: dict[type[MatchingError], int] = {
    NotFoundError: 404,
    InvalidInput: 422,
    PersistenceConflict: 409,
    ExternalServiceError: 502,
}

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost", "http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MatchingError)
async def matching_error_handler(request: Request, exc: MatchingError) -> JSONResponse:
    status_code = next(
        (code for error_type, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_type)),
        500,
    )
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "context": exc.context})


@app.on_event("startup")
def on_startup() -> None:
    setup_logging(settings)
    settings.ensure_directories()
    Base.metadata.create_all(bind=engine)
    run_bootstrap(engine, settings)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(jobs.router, prefix="/api/jobs", tags=["jobs"])
app.include_router(profile.router, prefix="/api/profile", tags=["profile"])
app.include_router(cvs.router, prefix="/api/cvs", tags=["cvs"])
app.include_router(matches.router, prefix="/api/matches", tags=["matches"])
app.include_router(applications.router, prefix="/api/applications", tags=["applications"])
app.include_router(employer.router, prefix="/api/employer", tags=["employer"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

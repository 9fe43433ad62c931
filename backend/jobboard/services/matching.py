"""
Matching runs: score a CV against open jobs (or a job against CVs) and
persist the results through the match store.

The scorers are pure; this module owns the policy around them: which
strategy to use, the caller-side timeout and rate limit for the external
model, and whether a failed model call falls back to the lexical score.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger
from sqlalchemy.orm import Session

from jobboard.config import Settings, settings as default_settings
from jobboard.errors import ExternalServiceError, InvalidInput, NotFoundError
from jobboard.models.cv import CV
from jobboard.models.job import Job
from jobboard.models.student_profile import StudentProfile
from jobboard.services.match_store import MatchStore
from jobboard.services.model_scorer import ModelScorer, OpenAITextGenerator
from jobboard.services.scoring import coerce_skills, score_skills

RESCORE_PROGRESS_EVERY = 5


class ScoringStrategy(str, Enum):
    LEXICAL = "lexical"
    MODEL = "model"


@dataclass
class MatchRequest:
    candidate_id: int
    job_id: int
    candidate_skills: list[str]
    job_required_skills: list[str]
    job_title: str = ""
    job_description: str = ""


@dataclass
class ScoreOutcome:
    score: int
    strategy: ScoringStrategy
    fell_back: bool = False


@dataclass
class MatchRunSummary:
    created: int = 0
    updated: int = 0
    failed: int = 0
    failed_job_ids: list[int] = field(default_factory=list)

    def merge(self, other: MatchRunSummary) -> None:
        self.created += other.created
        self.updated += other.updated
        self.failed += other.failed
        self.failed_job_ids.extend(other.failed_job_ids)


class MatchingService:
    def __init__(
        self,
        strategy: ScoringStrategy | str = ScoringStrategy.LEXICAL,
        model_scorer: ModelScorer | None = None,
        *,
        max_concurrency: int = 5,
        model_timeout: float | None = 15.0,
        fallback_to_lexical: bool = True,
        batch_limit: int = 100,
    ) -> None:
        self.strategy = ScoringStrategy(strategy)
        if self.strategy is ScoringStrategy.MODEL and model_scorer is None:
            raise ValueError("Model strategy requires a model scorer")
        self.model_scorer = model_scorer
        self.model_timeout = model_timeout
        self.fallback_to_lexical = fallback_to_lexical
        self.batch_limit = batch_limit
        self.max_concurrency = max(1, max_concurrency)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> MatchingService:
        settings = settings or default_settings
        strategy = ScoringStrategy(settings.scoring_strategy)
        model_scorer = None
        if strategy is ScoringStrategy.MODEL:
            model_scorer = ModelScorer(OpenAITextGenerator(settings))
        return cls(
            strategy,
            model_scorer,
            max_concurrency=settings.max_concurrent_scoring,
            model_timeout=settings.model_timeout_seconds,
            fallback_to_lexical=settings.fallback_to_lexical,
            batch_limit=settings.match_batch_limit,
        )

    async def score_request(
        self,
        request: MatchRequest,
        semaphore: asyncio.Semaphore | None = None,
    ) -> ScoreOutcome:
        lexical = ScoreOutcome(
            score=score_skills(request.candidate_skills, request.job_required_skills),
            strategy=ScoringStrategy.LEXICAL,
        )
        if self.strategy is ScoringStrategy.LEXICAL:
            return lexical
        # Sparse skill data never reaches the model.
        if not request.candidate_skills or not request.job_required_skills:
            return lexical

        try:
            score = await self._score_with_model(request, semaphore or asyncio.Semaphore(1))
        except ExternalServiceError as exc:
            if not self.fallback_to_lexical:
                raise
            logger.warning(f"Falling back to lexical score: {exc}")
            lexical.fell_back = True
            return lexical
        return ScoreOutcome(score=score, strategy=ScoringStrategy.MODEL)

    async def _score_with_model(self, request: MatchRequest, semaphore: asyncio.Semaphore) -> int:
        if self.model_scorer is None:
            raise ExternalServiceError(
                "No model scorer configured",
                candidate_id=request.candidate_id,
                job_id=request.job_id,
                strategy=ScoringStrategy.MODEL.value,
            )
        async with semaphore:
            try:
                return await asyncio.wait_for(
                    self.model_scorer.score(
                        request.job_title,
                        request.job_description,
                        request.job_required_skills,
                        request.candidate_skills,
                        candidate_id=request.candidate_id,
                        job_id=request.job_id,
                    ),
                    timeout=self.model_timeout,
                )
            except asyncio.TimeoutError as exc:
                raise ExternalServiceError(
                    f"Scoring model timed out after {self.model_timeout}s",
                    candidate_id=request.candidate_id,
                    job_id=request.job_id,
                    strategy=ScoringStrategy.MODEL.value,
                ) from exc

    async def _score_and_store(self, db: Session, requests: list[MatchRequest]) -> MatchRunSummary:
        summary = MatchRunSummary()
        if not requests:
            return summary

        semaphore = asyncio.Semaphore(self.max_concurrency)
        outcomes = await asyncio.gather(
            *(self.score_request(request, semaphore) for request in requests),
            return_exceptions=True,
        )

        store = MatchStore(db)
        for request, outcome in zip(requests, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, ExternalServiceError):
                    raise outcome
                logger.error(
                    f"Match failed for candidate {request.candidate_id} job {request.job_id} "
                    f"using {self.strategy.value}: {outcome}"
                )
                summary.failed += 1
                summary.failed_job_ids.append(request.job_id)
                continue

            _, created = store.upsert(request.candidate_id, request.job_id, outcome.score)
            if created:
                summary.created += 1
            else:
                summary.updated += 1
        return summary

    async def match_cv(self, db: Session, cv_id: int) -> MatchRunSummary:
        """Score one CV against every open job."""
        cv = db.query(CV).filter(CV.id == cv_id).first()
        if cv is None:
            raise NotFoundError(f"CV {cv_id} not found")
        profile = db.query(StudentProfile).filter(StudentProfile.user_id == cv.user_id).first()
        if profile is None:
            raise InvalidInput(f"CV {cv_id} has no student profile", strategy=self.strategy.value)

        candidate_skills = coerce_skills(cv.skills)
        jobs = db.query(Job).filter(Job.status == "open").order_by(Job.id.asc()).limit(self.batch_limit).all()
        logger.info(f"Matching CV {cv_id} (student {profile.id}) against {len(jobs)} open jobs")

        requests = [
            MatchRequest(
                candidate_id=profile.id,
                job_id=job.id,
                candidate_skills=candidate_skills,
                job_required_skills=coerce_skills(job.required_skills),
                job_title=job.title,
                job_description=job.description or "",
            )
            for job in jobs
        ]
        summary = await self._score_and_store(db, requests)
        logger.info(
            f"CV {cv_id}: {summary.created} created, {summary.updated} updated, {summary.failed} failed"
        )
        return summary

    async def match_job(self, db: Session, job_id: int) -> MatchRunSummary:
        """Score one job against the active CV of every student."""
        job = db.query(Job).filter(Job.id == job_id).first()
        if job is None:
            raise NotFoundError(f"Job {job_id} not found", job_id=job_id)

        rows = (
            db.query(StudentProfile, CV)
            .join(CV, CV.user_id == StudentProfile.user_id)
            .filter(CV.is_active == True)  # noqa: E712
            .order_by(StudentProfile.id.asc(), CV.version.desc())
            .all()
        )
        required = coerce_skills(job.required_skills)
        requests: list[MatchRequest] = []
        seen: set[int] = set()
        for profile, cv in rows:
            if profile.id in seen:
                continue
            seen.add(profile.id)
            requests.append(
                MatchRequest(
                    candidate_id=profile.id,
                    job_id=job.id,
                    candidate_skills=coerce_skills(cv.skills),
                    job_required_skills=required,
                    job_title=job.title,
                    job_description=job.description or "",
                )
            )

        logger.info(f"Matching job {job_id} against {len(requests)} candidates")
        return await self._score_and_store(db, requests)

    async def rescore_all(self, db: Session, limit: int | None = None) -> tuple[int, MatchRunSummary]:
        """Rerun matching for the most recent active CVs."""
        limit = limit or self.batch_limit
        cv_ids = [
            cv_id
            for (cv_id,) in db.query(CV.id)
            .filter(CV.is_active == True)  # noqa: E712
            .order_by(CV.created_at.desc(), CV.id.desc())
            .limit(limit)
            .all()
        ]
        total = MatchRunSummary()
        processed = 0
        for index, cv_id in enumerate(cv_ids, start=1):
            try:
                total.merge(await self.match_cv(db, cv_id))
                processed += 1
            except InvalidInput as exc:
                logger.warning(f"Skipping CV {cv_id}: {exc}")
            if index % RESCORE_PROGRESS_EVERY == 0 or index == len(cv_ids):
                logger.info(f"Rescore progress: {index}/{len(cv_ids)} CVs")
        return processed, total

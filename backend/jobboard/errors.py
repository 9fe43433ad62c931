"""
Error kinds raised by the matching core.

Every error carries the pair it was raised for and the scoring strategy in
use, so callers can log it and decide between fallback and abort.
"""

from __future__ import annotations

from typing import Any


class MatchingError(Exception):
    """Base class for matching failures."""

    def __init__(
        self,
        message: str,
        *,
        candidate_id: int | None = None,
        job_id: int | None = None,
        strategy: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.candidate_id = candidate_id
        self.job_id = job_id
        self.strategy = strategy

    @property
    def context(self) -> dict[str, Any]:
        return {
            "candidate_id": self.candidate_id,
            "job_id": self.job_id,
            "strategy": self.strategy,
        }

    def __str__(self) -> str:
        parts = [f"{key}={value}" for key, value in self.context.items() if value is not None]
        if not parts:
            return self.message
        return f"{self.message} ({', '.join(parts)})"


class InvalidInput(MatchingError):
    """Skill data is missing or malformed, or a candidate cannot be resolved."""


class ExternalServiceError(MatchingError):
    """The external scoring model failed or answered without a usable score."""


class PersistenceConflict(MatchingError):
    """The match store could not settle a concurrent write for one pair."""


class NotFoundError(MatchingError):
    """A CV, job or match referenced by a matching run does not exist."""

"""
Delegated scoring: ask an external text-generation model for a 0-100 score.
"""

from __future__ import annotations

import json
import re
from typing import Any, Protocol

from loguru import logger
from openai import AsyncOpenAI

from jobboard.config import Settings, settings as default_settings
from jobboard.errors import ExternalServiceError
from jobboard.services.scoring import coerce_skills

STRATEGY = "model"

SCORE_PATTERN = re.compile(r"\b(100|[0-9]{1,2})\b")

PROMPT_TEMPLATE = """I need you to analyze a job posting and a candidate's resume data to determine how well they match.

JOB POSTING:
Title: {title}
Description: {description}
Required Skills: {required_skills}

CANDIDATE RESUME DATA:
Skills: {candidate_skills}

Calculate a match score from 0 to 100, where:
- 0-20: Very poor match, missing critical requirements
- 21-40: Poor match, missing several important requirements
- 41-60: Moderate match, meets some requirements but has gaps
- 61-80: Good match, meets most requirements with minor gaps
- 81-100: Excellent match, meets or exceeds all requirements

Consider factors such as:
- Skills alignment (most important)
- Keyword matches

Return ONLY a number from 0-100 representing the match score."""


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


class OpenAITextGenerator:
    """TextGenerator backed by OpenAI chat completions."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or default_settings
        self._client: AsyncOpenAI | None = None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.settings.openai_api_key or None)
        return self._client

    async def generate(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.settings.openai_model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0,
            max_tokens=10,
        )
        return response.choices[0].message.content or ""


def build_prompt(job_title: str, job_description: str, required_skills: Any, candidate_skills: Any) -> str:
    return PROMPT_TEMPLATE.format(
        title=job_title or "",
        description=job_description or "",
        required_skills=json.dumps(coerce_skills(required_skills)),
        candidate_skills=json.dumps(coerce_skills(candidate_skills)),
    )


def parse_score(text: str) -> int | None:
    """First whole-word integer between 0 and 100 in a free-text answer."""
    match = SCORE_PATTERN.search(text or "")
    if not match:
        return None
    return int(match.group(1))


class ModelScorer:
    def __init__(self, generator: TextGenerator) -> None:
        self.generator = generator

    async def score(
        self,
        job_title: str,
        job_description: str,
        required_skills: Any,
        candidate_skills: Any,
        *,
        candidate_id: int | None = None,
        job_id: int | None = None,
    ) -> int:
        """Score one pair through the model.

        Raises ExternalServiceError when the call fails or the answer holds no
        usable integer; falling back to another strategy is the caller's call.
        """
        prompt = build_prompt(job_title, job_description, required_skills, candidate_skills)
        try:
            content = await self.generator.generate(prompt)
        except Exception as exc:
            raise ExternalServiceError(
                f"Scoring model call failed: {exc}",
                candidate_id=candidate_id,
                job_id=job_id,
                strategy=STRATEGY,
            ) from exc

        score = parse_score(content)
        if score is None:
            raise ExternalServiceError(
                f"Scoring model returned no score: {(content or '')[:80]!r}",
                candidate_id=candidate_id,
                job_id=job_id,
                strategy=STRATEGY,
            )
        logger.debug(f"Model scored candidate {candidate_id} for job {job_id}: {score}")
        return score

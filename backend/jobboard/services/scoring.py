from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any


def coerce_skills(value: Any) -> list[str]:
    """Turn whatever a CV or job row stores into a flat list of skill labels.

    Missing or malformed data yields an empty list rather than an error, which
    the scorer then reports as a zero match.
    """
    if isinstance(value, Mapping):
        value = value.get("skills")
    if value is None or isinstance(value, (str, bytes)):
        return []
    if not isinstance(value, Sequence):
        return []
    skills = []
    for item in value:
        if not isinstance(item, str):
            continue
        label = item.strip()
        if label:
            skills.append(label)
    return skills


def _contains_either_way(candidate: str, required: str) -> bool:
    if not candidate or not required:
        return False
    return candidate in required or required in candidate


def skill_overlap(candidate_skills: Any, required_skills: Any) -> tuple[list[str], list[str]]:
    """Split the required skills into (matched, missing) using bidirectional containment."""
    candidate_lower = [skill.lower() for skill in coerce_skills(candidate_skills)]
    matched: list[str] = []
    missing: list[str] = []
    for skill in coerce_skills(required_skills):
        required = skill.lower()
        if any(_contains_either_way(candidate, required) for candidate in candidate_lower):
            matched.append(skill)
        else:
            missing.append(skill)
    return matched, missing


def score_skills(candidate_skills: Any, required_skills: Any) -> int:
    """Percentage of required skills covered by the candidate, as an int in [0, 100].

    A job without required skills scores 0: there is nothing to assess the
    candidate against.
    """
    required = coerce_skills(required_skills)
    if not required:
        return 0
    matched, _ = skill_overlap(candidate_skills, required)
    # Half rounds up (75.5 -> 76); built-in round() would round to even.
    score = math.floor(len(matched) * 100 / len(required) + 0.5)
    return min(100, max(0, score))

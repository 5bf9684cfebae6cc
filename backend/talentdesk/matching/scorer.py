"""Skill-overlap scoring between a candidate and job postings."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

JobT = TypeVar("JobT")


def _normalize(skill: str) -> str:
    return skill.strip().lower()


def _unique_required(required_skills: Iterable[str] | None) -> dict[str, str]:
    """Map each normalized required skill to its first original spelling."""
    unique: dict[str, str] = {}
    for skill in required_skills or ():
        normalized = _normalize(skill)
        if normalized and normalized not in unique:
            unique[normalized] = skill
    return unique


def _percentage(matched: int, total: int) -> int:
    # Integer form of round-half-up(100 * matched / total).
    return (200 * matched + total) // (2 * total)


def match_percentage(
    candidate_skills: Iterable[str] | None,
    required_skills: Iterable[str] | None,
) -> int:
    """Share of the required skills the candidate has, from 0 to 100.

    Skills are compared trimmed and lowercased. Only the required skills
    count towards the denominator, so extra candidate skills never raise the
    score. Either side being empty scores 0.
    """
    required = _unique_required(required_skills)
    candidate = {_normalize(skill) for skill in candidate_skills or ()} - {""}
    if not required or not candidate:
        return 0
    matched = sum(1 for skill in required if skill in candidate)
    return _percentage(matched, len(required))


@dataclass(frozen=True)
class JobMatch(Generic[JobT]):
    job: JobT
    match_percentage: int
    matched_skills: list[str] = field(default_factory=list)
    missing_skills: list[str] = field(default_factory=list)


def _job_skills(job: Any) -> list[str]:
    skills = job.get("skills") if isinstance(job, dict) else getattr(job, "skills", None)
    return list(skills or [])


def calculate_job_match(
    candidate_skills: Iterable[str] | None, job: JobT
) -> JobMatch[JobT]:
    """Score ``job`` for the candidate and split its skills into matched and missing.

    Both lists keep the spelling used by the job posting.
    """
    required = _unique_required(_job_skills(job))
    candidate = {_normalize(skill) for skill in candidate_skills or ()} - {""}
    if not required or not candidate:
        return JobMatch(job, 0, [], list(required.values()))

    matched = [original for key, original in required.items() if key in candidate]
    missing = [original for key, original in required.items() if key not in candidate]
    return JobMatch(job, _percentage(len(matched), len(required)), matched, missing)


def sort_by_match_percentage(matches: Iterable[JobMatch[JobT]]) -> list[JobMatch[JobT]]:
    """Best matches first; ties keep their input order."""
    return sorted(matches, key=lambda match: match.match_percentage, reverse=True)


def rank_jobs_for_candidate(
    candidate: Any, jobs: Sequence[JobT]
) -> list[JobMatch[JobT]]:
    """Score every job for a candidate and sort.

    ``candidate`` may be a row with ``skills``, a mapping, or a plain skill list.
    """
    if isinstance(candidate, dict):
        skills = candidate.get("skills")
    else:
        skills = getattr(candidate, "skills", candidate)
    return sort_by_match_percentage(
        calculate_job_match(skills, job) for job in jobs
    )


__all__ = [
    "JobMatch",
    "calculate_job_match",
    "match_percentage",
    "rank_jobs_for_candidate",
    "sort_by_match_percentage",
]

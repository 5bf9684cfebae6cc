"""Candidate-to-job skill matching."""

from talentdesk.matching.scorer import (
    JobMatch,
    calculate_job_match,
    match_percentage,
    rank_jobs_for_candidate,
    sort_by_match_percentage,
)

__all__ = [
    "JobMatch",
    "calculate_job_match",
    "match_percentage",
    "rank_jobs_for_candidate",
    "sort_by_match_percentage",
]

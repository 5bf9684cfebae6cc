"""Tests for candidate to job skill matching."""

from __future__ import annotations

import random
from types import SimpleNamespace

import pytest

from talentdesk.matching import (
    calculate_job_match,
    match_percentage,
    rank_jobs_for_candidate,
    sort_by_match_percentage,
)


@pytest.mark.parametrize(
    ("candidate", "required", "expected"),
    [
        (["Python", "SQL"], ["python", "sql"], 100),
        (["Python"], ["Python", "SQL"], 50),
        (["Python"], ["Python", "SQL", "Go"], 33),
        (["Python", "SQL"], ["Python", "SQL", "Go"], 67),
        (["Go"], ["Python", "SQL"], 0),
        ([], ["Python"], 0),
        (["Python"], [], 0),
        (None, None, 0),
    ],
)
def test_match_percentage(
    candidate: list[str] | None, required: list[str] | None, expected: int
) -> None:
    assert match_percentage(candidate, required) == expected


def test_comparison_trims_and_ignores_case() -> None:
    assert match_percentage(["  react "], ["React"]) == 100


def test_extra_candidate_skills_do_not_raise_the_score() -> None:
    assert match_percentage(["Python", "Go", "Rust", "SQL"], ["Python", "Java"]) == 50


@pytest.mark.parametrize("seed", [0, 1, 7])
def test_score_ignores_list_order(seed: int) -> None:
    candidate = ["Docker", "Python", "Excel", "SQL"]
    required = ["Python", "Kubernetes", "SQL"]
    shuffled_candidate = random.Random(seed).sample(candidate, len(candidate))
    shuffled_required = random.Random(seed + 1).sample(required, len(required))

    expected = match_percentage(candidate, required)

    assert expected == 67
    assert match_percentage(candidate[::-1], required) == expected
    assert match_percentage(candidate, required[::-1]) == expected
    assert match_percentage(shuffled_candidate, shuffled_required) == expected


def test_duplicate_required_skills_count_once() -> None:
    assert match_percentage(["Python"], ["Python", "python ", "SQL"]) == 50


def test_half_rounds_up() -> None:
    required = [f"skill-{index}" for index in range(8)]

    assert match_percentage(required[:1], required) == 13


def test_calculate_job_match_keeps_posting_spelling() -> None:
    job = {"id": "j1", "skills": ["PostgreSQL", "Python", "Docker"]}

    match = calculate_job_match(["python", "postgresql"], job)

    assert match.job is job
    assert match.match_percentage == 67
    assert match.matched_skills == ["PostgreSQL", "Python"]
    assert match.missing_skills == ["Docker"]


def test_calculate_job_match_accepts_objects_without_skills() -> None:
    match = calculate_job_match(["Python"], SimpleNamespace(skills=None))

    assert match.match_percentage == 0
    assert match.matched_skills == []
    assert match.missing_skills == []


def test_sort_is_descending_and_stable() -> None:
    jobs = [
        {"id": "low", "skills": ["Go"]},
        {"id": "first-full", "skills": ["Python"]},
        {"id": "half", "skills": ["Python", "Go"]},
        {"id": "second-full", "skills": ["python"]},
    ]
    matches = [calculate_job_match(["Python"], job) for job in jobs]

    ordered = sort_by_match_percentage(matches)

    assert [match.job["id"] for match in ordered] == [
        "first-full",
        "second-full",
        "half",
        "low",
    ]


@pytest.mark.parametrize(
    "candidate",
    [
        SimpleNamespace(skills=["SQL"]),
        {"skills": ["SQL"]},
        ["SQL"],
    ],
)
def test_rank_jobs_for_candidate_accepts_rows_mappings_and_lists(candidate) -> None:
    jobs = [{"skills": ["Python"]}, {"skills": ["SQL"]}]

    ranked = rank_jobs_for_candidate(candidate, jobs)

    assert [match.match_percentage for match in ranked] == [100, 0]
    assert ranked[0].job is jobs[1]

"""Enumerated column values mirrored from the backend schema."""

from typing import Literal, get_args

ApplicationStatus = Literal[
    "new",
    "under_review",
    "interview",
    "offer",
    "hired",
    "rejected",
    "withdrawn",
]
JobStatus = Literal["open", "closed", "on_hold", "filled"]
JobType = Literal["full-time", "part-time", "contract", "temporary", "internship"]
WorkFormat = Literal["remote", "hybrid", "onsite"]
VisaStatus = Literal[
    "citizen",
    "permanent_resident",
    "work_visa",
    "student_visa",
    "requires_sponsorship",
]
SalaryPeriod = Literal["yearly", "monthly"]

APPLICATION_STATUSES: tuple[str, ...] = get_args(ApplicationStatus)
JOB_STATUSES: tuple[str, ...] = get_args(JobStatus)
JOB_TYPES: tuple[str, ...] = get_args(JobType)
WORK_FORMATS: tuple[str, ...] = get_args(WorkFormat)
REMOTE_WORK_PREFERENCES: tuple[str, ...] = WORK_FORMATS
VISA_STATUSES: tuple[str, ...] = get_args(VisaStatus)
SALARY_PERIODS: tuple[str, ...] = get_args(SalaryPeriod)


def validate_choice(
    field_name: str, value: str | None, allowed: tuple[str, ...]
) -> str | None:
    """Validate an optional enumerated value.

    Args:
        field_name: Column name used in the error message.
        value: Candidate value.
        allowed: Accepted values.

    Returns:
        The value unchanged.

    Raises:
        ValueError: If the value is not one of ``allowed``.
    """
    if value is None or value in allowed:
        return value
    allowed_values = ", ".join(allowed)
    raise ValueError(
        f"Invalid {field_name} '{value}'. Allowed values: {allowed_values}."
    )

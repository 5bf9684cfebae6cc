"""Custom exception hierarchy for the client core."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from talentdesk.errors.types import AppError


class TalentDeskError(Exception):
    """Base application exception."""


class RecordNotFoundError(TalentDeskError):
    """Raised when a requested row does not exist or is not visible."""

    def __init__(self, resource: str, record_id: object | None = None):
        self.resource = resource
        self.record_id = None if record_id is None else str(record_id)
        suffix = f" {self.record_id}" if self.record_id else ""
        super().__init__(f"{resource}{suffix} not found.")


class ValidationFailedError(TalentDeskError):
    """Raised when input fails a business rule before reaching the backend."""

    def __init__(self, fields: dict[str, list[str]], message: str | None = None):
        self.fields = {name: list(messages) for name, messages in fields.items()}
        self.message = message
        super().__init__(message or "Validation failed.")


class AuthError(TalentDeskError):
    """Raised by the auth client when the auth service rejects a request."""

    name = "AuthError"

    def __init__(
        self,
        message: str,
        status: int | None = None,
        code: str | None = None,
    ):
        self.message = message
        self.status = status
        self.code = code
        super().__init__(message)


class CompanyContextError(TalentDeskError):
    """Raised when the signed-in user has no resolvable company."""


class ApplicationError(TalentDeskError):
    """Raised to callers when a query or mutation ultimately fails."""

    def __init__(self, error: AppError, cause: BaseException | None = None):
        self.error = error
        self.cause = cause
        super().__init__(getattr(error, "message", None) or error.type)


__all__ = [
    "ApplicationError",
    "AuthError",
    "CompanyContextError",
    "RecordNotFoundError",
    "TalentDeskError",
    "ValidationFailedError",
]

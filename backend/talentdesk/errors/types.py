"""Unified application error union and the copy shown to users."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _AppErrorBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class DatabaseAppError(_AppErrorBase):
    """Error reported by the database with a SQLSTATE or PostgREST code."""

    type: Literal["database"] = "database"
    code: str
    message: str
    details: str | None = None
    hint: str | None = None


class AuthAppError(_AppErrorBase):
    """Error reported by the auth service."""

    type: Literal["auth"] = "auth"
    code: str
    message: str


class NetworkAppError(_AppErrorBase):
    """Transport failure: offline, DNS, refused connection or timeout."""

    type: Literal["network"] = "network"
    message: str


class ValidationAppError(_AppErrorBase):
    """Input rejected field by field."""

    type: Literal["validation"] = "validation"
    fields: dict[str, list[str]] = Field(default_factory=dict)
    message: str | None = None


class NotFoundAppError(_AppErrorBase):
    """Requested record does not exist or is hidden by row-level security."""

    type: Literal["not_found"] = "not_found"
    resource: str
    id: str | None = None


class HttpAppError(_AppErrorBase):
    """Non-success HTTP status without a richer shape."""

    type: Literal["http"] = "http"
    status: int
    message: str


class UnknownAppError(_AppErrorBase):
    """Anything that could not be classified."""

    type: Literal["unknown"] = "unknown"
    message: str
    original_error: Any = Field(default=None, exclude=True, repr=False)


AppError = Annotated[
    Union[
        DatabaseAppError,
        AuthAppError,
        NetworkAppError,
        ValidationAppError,
        NotFoundAppError,
        HttpAppError,
        UnknownAppError,
    ],
    Field(discriminator="type"),
]

APP_ERROR_TYPES: tuple[type[_AppErrorBase], ...] = (
    DatabaseAppError,
    AuthAppError,
    NetworkAppError,
    ValidationAppError,
    NotFoundAppError,
    HttpAppError,
    UnknownAppError,
)

app_error_adapter: TypeAdapter[AppError] = TypeAdapter(AppError)


class ErrorCategory(str, Enum):
    """Coarse classes driving retry and global handling decisions."""

    AUTH = "auth"
    NETWORK = "network"
    SERVER = "server"
    CLIENT = "client"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


class ErrorMessages:
    """User-facing copy, kept in one place."""

    # Database
    DUPLICATE = "This record already exists"
    FOREIGN_KEY = "Cannot delete: related records exist"
    REQUIRED_FIELD = "A required field is missing"
    NOT_FOUND = "Record not found"

    # Network
    OFFLINE = "No internet connection. Please check your network."
    TIMEOUT = "Request timed out. Please try again."

    # Auth
    SESSION_EXPIRED = "Your session has expired. Please sign in again."
    UNAUTHORIZED = "You do not have permission to perform this action."

    # HTTP
    SERVER_ERROR = "Server error. Please try again later."
    RATE_LIMITED = "Too many requests. Please wait a moment and try again."
    CONFLICT = "This record was changed by someone else or already exists."

    # Generic
    UNKNOWN = "An unexpected error occurred"
    VALIDATION = "Please fix the errors in the form"


class PostgresErrorCodes:
    """SQLSTATE and PostgREST codes with dedicated handling."""

    UNIQUE_VIOLATION = "23505"
    FOREIGN_KEY_VIOLATION = "23503"
    NOT_NULL_VIOLATION = "23502"
    CHECK_VIOLATION = "23514"
    INSUFFICIENT_PRIVILEGE = "42501"
    NO_ROWS = "PGRST116"


__all__ = [
    "APP_ERROR_TYPES",
    "AppError",
    "AuthAppError",
    "DatabaseAppError",
    "ErrorCategory",
    "ErrorMessages",
    "HttpAppError",
    "NetworkAppError",
    "NotFoundAppError",
    "PostgresErrorCodes",
    "UnknownAppError",
    "ValidationAppError",
    "app_error_adapter",
]

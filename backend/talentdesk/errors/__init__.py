"""Error taxonomy shared by services, the query layer and the global policy."""

from talentdesk.errors.normalizer import (
    categorize,
    is_auth_redirect,
    normalize_error,
    to_user_message,
)
from talentdesk.errors.types import (
    AppError,
    AuthAppError,
    DatabaseAppError,
    ErrorCategory,
    ErrorMessages,
    HttpAppError,
    NetworkAppError,
    NotFoundAppError,
    PostgresErrorCodes,
    UnknownAppError,
    ValidationAppError,
    app_error_adapter,
)

__all__ = [
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
    "categorize",
    "is_auth_redirect",
    "normalize_error",
    "to_user_message",
]

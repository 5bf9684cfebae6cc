"""Convert anything raised by services or transports into an ``AppError``.

The conversion is an ordered chain of type guards. Shapes overlap (an auth
failure also carries a status, a database error also carries a message), so
the first guard that recognises the value wins and the order below is part
of the contract:

1. rejected access tokens (any error whose message mentions ``JWT``)
2. database-shaped errors (PostgREST payloads, SQLAlchemy driver errors)
3. auth service errors
4. network failures (or the caller reporting the runtime is offline)
5. validation failures
6. missing records
7. anything exposing an integer HTTP status
8. other exceptions
9. plain strings
10. everything else
"""

from __future__ import annotations

import socket
from collections.abc import Callable, Mapping
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import DBAPIError

from talentdesk.core.exceptions import (
    ApplicationError,
    AuthError,
    RecordNotFoundError,
    ValidationFailedError,
)
from talentdesk.errors.types import (
    APP_ERROR_TYPES,
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
)

NETWORK_MESSAGE_MARKERS: tuple[str, ...] = (
    "NetworkError",
    "Failed to fetch",
    "Network request failed",
)

# sqlite3 reports constraint failures by name; map them onto SQLSTATE codes.
SQLITE_ERRORNAME_SQLSTATES: dict[str, str] = {
    "SQLITE_CONSTRAINT_UNIQUE": PostgresErrorCodes.UNIQUE_VIOLATION,
    "SQLITE_CONSTRAINT_PRIMARYKEY": PostgresErrorCodes.UNIQUE_VIOLATION,
    "SQLITE_CONSTRAINT_FOREIGNKEY": PostgresErrorCodes.FOREIGN_KEY_VIOLATION,
    "SQLITE_CONSTRAINT_NOTNULL": PostgresErrorCodes.NOT_NULL_VIOLATION,
    "SQLITE_CONSTRAINT_CHECK": PostgresErrorCodes.CHECK_VIOLATION,
}

TOKEN_MESSAGE_MARKER = "JWT"

_MISSING = object()

Guard = Callable[[Any, bool], "AppError | None"]


def _field(raw: Any, name: str) -> Any:
    if isinstance(raw, Mapping):
        return raw.get(name, _MISSING)
    return getattr(raw, name, _MISSING)


def _optional_text(value: Any) -> str | None:
    if value is _MISSING or value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _exception_message(raw: Any) -> str:
    message = _field(raw, "message")
    if isinstance(message, str) and message:
        return message
    if isinstance(raw, BaseException):
        return str(raw)
    return ""


def _driver_error(error: DBAPIError) -> Any:
    """Return the innermost driver exception carrying SQLSTATE details."""
    orig = error.orig
    cause = getattr(orig, "__cause__", None)
    if cause is not None and any(
        getattr(cause, attribute, None)
        for attribute in ("sqlstate", "pgcode", "sqlite_errorname")
    ):
        return cause
    return orig


def _driver_sqlstate(error: DBAPIError) -> str | None:
    driver_error = _driver_error(error)
    if driver_error is None:
        return None
    for attribute in ("sqlstate", "pgcode"):
        value = getattr(driver_error, attribute, None)
        if isinstance(value, str) and value:
            return value
    error_name = getattr(driver_error, "sqlite_errorname", None)
    if isinstance(error_name, str) and error_name:
        return SQLITE_ERRORNAME_SQLSTATES.get(error_name, error_name)
    return None


def _as_normalized(raw: Any, offline: bool) -> AppError | None:
    if isinstance(raw, APP_ERROR_TYPES):
        return raw
    if isinstance(raw, ApplicationError):
        return raw.error
    return None


def _as_expired_token(raw: Any, offline: bool) -> AppError | None:
    """Backend rejections of the access token carry ``JWT`` in their message."""
    if isinstance(raw, (str, bytes, AuthError)):
        return None
    message = _exception_message(raw)
    if TOKEN_MESSAGE_MARKER not in message:
        return None
    status = _http_status(raw)
    return AuthAppError(code=str(status) if status else "401", message=message)


def _as_database_error(raw: Any, offline: bool) -> AppError | None:
    if isinstance(raw, DBAPIError):
        sqlstate = _driver_sqlstate(raw)
        if sqlstate is None:
            return None
        driver_error = _driver_error(raw)
        message = _optional_text(getattr(driver_error, "message", None)) or str(
            driver_error
        ).splitlines()[0]
        return DatabaseAppError(
            code=sqlstate,
            message=message,
            details=_optional_text(getattr(driver_error, "detail", None)),
            hint=_optional_text(getattr(driver_error, "hint", None)),
        )

    if isinstance(raw, (str, bytes)):
        return None
    code = _field(raw, "code")
    message = _field(raw, "message")
    details = _field(raw, "details")
    if code is _MISSING or message is _MISSING or details is _MISSING:
        return None
    return DatabaseAppError(
        code=str(code),
        message=str(message),
        details=_optional_text(details),
        hint=_optional_text(_field(raw, "hint")),
    )


def _as_auth_error(raw: Any, offline: bool) -> AppError | None:
    if not isinstance(raw, AuthError) and _field(raw, "name") != "AuthError":
        return None
    status = _field(raw, "status")
    code = str(status) if isinstance(status, int) and status else "AUTH_ERROR"
    return AuthAppError(
        code=code,
        message=_exception_message(raw) or ErrorMessages.SESSION_EXPIRED,
    )


def _is_network_failure(raw: Any) -> bool:
    if isinstance(raw, (httpx.TransportError, ConnectionError, socket.gaierror)):
        return True
    if isinstance(raw, DBAPIError) and (
        raw.connection_invalidated
        or isinstance(raw.orig, (ConnectionError, TimeoutError, socket.gaierror))
    ):
        return True
    message = _exception_message(raw)
    return any(marker in message for marker in NETWORK_MESSAGE_MARKERS)


def _as_network_error(raw: Any, offline: bool) -> AppError | None:
    if isinstance(raw, (str, bytes)) and not offline:
        return None
    if isinstance(raw, (TimeoutError, httpx.TimeoutException)):
        return NetworkAppError(message=ErrorMessages.TIMEOUT)
    if offline or _is_network_failure(raw):
        return NetworkAppError(message=ErrorMessages.OFFLINE)
    return None


def _as_validation_error(raw: Any, offline: bool) -> AppError | None:
    if isinstance(raw, ValidationFailedError):
        return ValidationAppError(fields=raw.fields, message=raw.message)
    if isinstance(raw, PydanticValidationError):
        fields: dict[str, list[str]] = {}
        for error in raw.errors():
            location = ".".join(str(part) for part in error.get("loc", ())) or "__root__"
            fields.setdefault(location, []).append(str(error.get("msg", "")))
        return ValidationAppError(fields=fields, message=ErrorMessages.VALIDATION)
    return None


def _as_not_found_error(raw: Any, offline: bool) -> AppError | None:
    if isinstance(raw, RecordNotFoundError):
        return NotFoundAppError(resource=raw.resource, id=raw.record_id)
    return None


def _http_status(raw: Any) -> int | None:
    if isinstance(raw, httpx.HTTPStatusError):
        return raw.response.status_code
    for attribute in ("status", "status_code"):
        value = _field(raw, attribute)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _as_http_error(raw: Any, offline: bool) -> AppError | None:
    if isinstance(raw, (str, bytes)):
        return None
    status = _http_status(raw)
    if status is None:
        return None
    if isinstance(raw, httpx.HTTPStatusError):
        message = raw.response.reason_phrase or str(raw)
    else:
        message = _exception_message(raw)
    return HttpAppError(status=status, message=message or f"HTTP {status}")


def _as_unknown_exception(raw: Any, offline: bool) -> AppError | None:
    if not isinstance(raw, BaseException):
        return None
    return UnknownAppError(
        message=str(raw) or ErrorMessages.UNKNOWN,
        original_error=raw,
    )


def _as_string(raw: Any, offline: bool) -> AppError | None:
    if isinstance(raw, str):
        return UnknownAppError(message=raw)
    return None


_GUARDS: tuple[Guard, ...] = (
    _as_normalized,
    _as_expired_token,
    _as_database_error,
    _as_auth_error,
    _as_network_error,
    _as_validation_error,
    _as_not_found_error,
    _as_http_error,
    _as_unknown_exception,
    _as_string,
)


def normalize_error(raw: Any, *, offline: bool = False) -> AppError:
    """Classify any raised value into exactly one ``AppError`` variant.

    Never raises. Values that no guard recognises become ``unknown`` with the
    generic fallback message.

    Args:
        raw: Exception, payload mapping, string or any other value.
        offline: Whether the runtime currently reports no connectivity.

    Returns:
        The normalized error.
    """
    try:
        for guard in _GUARDS:
            normalized = guard(raw, offline)
            if normalized is not None:
                return normalized
    except Exception as exc:
        logger.bind(guard_error=repr(exc), raw_type=type(raw).__name__).warning(
            "Error normalization failed; falling back to unknown"
        )
    return UnknownAppError(message=ErrorMessages.UNKNOWN, original_error=raw)


def _database_category(code: str) -> ErrorCategory:
    if code.startswith(("22", "23")) or code in {
        PostgresErrorCodes.INSUFFICIENT_PRIVILEGE,
        PostgresErrorCodes.NO_ROWS,
    }:
        return ErrorCategory.CLIENT
    return ErrorCategory.SERVER


def categorize(error: AppError) -> ErrorCategory:
    """Map an ``AppError`` to the category used by retry and global handling."""
    if error.type == "auth":
        return ErrorCategory.AUTH
    if error.type == "network":
        return ErrorCategory.NETWORK
    if error.type == "validation":
        return ErrorCategory.VALIDATION
    if error.type == "not_found":
        return ErrorCategory.CLIENT
    if error.type == "database":
        return _database_category(error.code)
    if error.type == "http":
        if error.status >= 500:
            return ErrorCategory.SERVER
        if 400 <= error.status < 500:
            return ErrorCategory.CLIENT
    return ErrorCategory.UNKNOWN


def is_auth_redirect(error: AppError) -> bool:
    """Return whether the error must send the user back to sign-in."""
    return error.type == "auth"


_DATABASE_MESSAGES: dict[str, str] = {
    PostgresErrorCodes.UNIQUE_VIOLATION: ErrorMessages.DUPLICATE,
    PostgresErrorCodes.FOREIGN_KEY_VIOLATION: ErrorMessages.FOREIGN_KEY,
    PostgresErrorCodes.NOT_NULL_VIOLATION: ErrorMessages.REQUIRED_FIELD,
    PostgresErrorCodes.NO_ROWS: ErrorMessages.NOT_FOUND,
}

_AUTH_MESSAGES: dict[str, str] = {
    "401": ErrorMessages.SESSION_EXPIRED,
    "403": ErrorMessages.UNAUTHORIZED,
}


def to_user_message(error: AppError) -> str:
    """Return short copy suitable for a notification or inline form error."""
    if error.type == "database":
        return _DATABASE_MESSAGES.get(error.code) or error.message or ErrorMessages.UNKNOWN
    if error.type == "auth":
        return _AUTH_MESSAGES.get(error.code) or error.message or ErrorMessages.UNKNOWN
    if error.type == "network":
        return error.message or ErrorMessages.OFFLINE
    if error.type == "validation":
        return error.message or ErrorMessages.VALIDATION
    if error.type == "not_found":
        return ErrorMessages.NOT_FOUND
    if error.type == "http":
        if error.status == 429:
            return ErrorMessages.RATE_LIMITED
        if error.status == 409:
            return ErrorMessages.CONFLICT
        if error.status >= 500:
            return ErrorMessages.SERVER_ERROR
        return error.message or ErrorMessages.UNKNOWN
    return error.message or ErrorMessages.UNKNOWN


__all__ = [
    "NETWORK_MESSAGE_MARKERS",
    "categorize",
    "is_auth_redirect",
    "normalize_error",
    "to_user_message",
]

"""TalentDesk client core: data access, caching and error handling for the ATS."""

from talentdesk.context import SessionContext
from talentdesk.core.exceptions import ApplicationError
from talentdesk.errors import AppError, normalize_error, to_user_message
from talentdesk.matching import match_percentage

__version__ = "0.1.0"

__all__ = [
    "AppError",
    "ApplicationError",
    "SessionContext",
    "__version__",
    "match_percentage",
    "normalize_error",
    "to_user_message",
]

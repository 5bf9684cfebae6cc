"""Auth service client."""

from talentdesk.auth.client import AuthClient

__all__ = ["AuthClient"]

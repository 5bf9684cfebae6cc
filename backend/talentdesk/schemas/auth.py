"""Schemas for auth service payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """User record returned by the auth service."""

    id: str
    email: str | None = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore", frozen=True)


class AuthSession(BaseModel):
    """Access token bundle returned on sign-in."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int | None = None
    refresh_token: str | None = None
    user: AuthUser

    model_config = ConfigDict(extra="ignore", frozen=True)


class SignUpMetadata(BaseModel):
    """Profile data stored on the auth user at sign-up."""

    full_name: str = Field(min_length=1, max_length=255)
    company_name: str = Field(min_length=1, max_length=255)

    model_config = ConfigDict(extra="forbid")


class SignUpResult(BaseModel):
    """Outcome of a sign-up call; ``session`` is absent when email confirmation is pending."""

    user: AuthUser | None = None
    session: AuthSession | None = None

    model_config = ConfigDict(frozen=True)


__all__ = ["AuthSession", "AuthUser", "SignUpMetadata", "SignUpResult"]

"""Client for the hosted auth REST service."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
from loguru import logger

from talentdesk.core.config import settings
from talentdesk.core.exceptions import AuthError
from talentdesk.query.observable import Observable
from talentdesk.schemas.auth import AuthSession, AuthUser, SignUpMetadata, SignUpResult

AUTH_API_PREFIX = "/auth/v1"


def _auth_error(response: httpx.Response) -> AuthError:
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, Mapping):
        payload = {}
    message = (
        payload.get("error_description")
        or payload.get("msg")
        or payload.get("message")
        or response.reason_phrase
        or f"Auth request failed with status {response.status_code}"
    )
    code = payload.get("error_code") or payload.get("error") or payload.get("code")
    return AuthError(
        str(message),
        status=response.status_code,
        code=None if code is None else str(code),
    )


class AuthClient:
    """Password sign-in, sign-up and sign-out against the auth service.

    The signed-in user is exposed as an observable so the company context
    and the session provider follow sign-in and sign-out.
    """

    def __init__(
        self,
        base_url: str = settings.AUTH_URL,
        anon_key: str = settings.AUTH_ANON_KEY,
        *,
        timeout: float = settings.AUTH_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Root URL of the auth service, without the API prefix.
            anon_key: Public API key sent as the ``apikey`` header.
            timeout: Request timeout in seconds.
            transport: Optional transport, e.g. ``httpx.MockTransport``.
        """
        self._http = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}{AUTH_API_PREFIX}",
            headers={"apikey": anon_key},
            timeout=timeout,
            transport=transport,
        )
        self.user: Observable[AuthUser | None] = Observable(None)
        self.session: AuthSession | None = None

    @property
    def access_token(self) -> str | None:
        return self.session.access_token if self.session is not None else None

    def claims(self) -> dict[str, Any] | None:
        """JWT claims of the signed-in user, used for row-level security."""
        user = self.user.value
        if user is None:
            return None
        return {"sub": user.id, "email": user.email, "role": "authenticated"}

    async def _post(
        self,
        path: str,
        *,
        json: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        response = await self._http.post(path, json=json, params=params, headers=headers)
        if response.is_error:
            raise _auth_error(response)
        if not response.content:
            return None
        return response.json()

    def _store(self, session: AuthSession | None) -> None:
        self.session = session
        self.user.set(session.user if session is not None else None)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Exchange credentials for a session.

        Raises:
            AuthError: If the auth service rejects the credentials.
            httpx.TransportError: If the service is unreachable.
        """
        log = logger.bind(operation="sign_in", email=email)
        try:
            payload = await self._post(
                "/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
            )
        except AuthError as exc:
            log.bind(status=exc.status, error=exc.message).warning("Sign-in rejected")
            raise
        session = AuthSession.model_validate(payload)
        self._store(session)
        logger.bind(user_id=session.user.id).info("Signed in")
        return session

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: SignUpMetadata | Mapping[str, Any],
    ) -> SignUpResult:
        """Register a user with profile metadata.

        When the service confirms the address later, no session is returned
        and the user stays signed out.

        Raises:
            AuthError: If the auth service rejects the registration.
        """
        data = SignUpMetadata.model_validate(metadata).model_dump()
        log = logger.bind(operation="sign_up", email=email)
        try:
            payload = await self._post(
                "/signup",
                json={"email": email, "password": password, "data": data},
            )
        except AuthError as exc:
            log.bind(status=exc.status, error=exc.message).warning("Sign-up rejected")
            raise

        if isinstance(payload, Mapping) and "access_token" in payload:
            session = AuthSession.model_validate(payload)
            self._store(session)
            log.bind(user_id=session.user.id).info("Signed up and signed in")
            return SignUpResult(user=session.user, session=session)

        user = AuthUser.model_validate(payload) if payload else None
        log.info("Signed up; confirmation pending")
        return SignUpResult(user=user)

    async def sign_out(self) -> None:
        """Revoke the session and forget the local user.

        The local session is cleared even when the service call fails.

        Raises:
            AuthError: If the auth service rejects the sign-out.
        """
        token = self.access_token
        try:
            if token is not None:
                await self._post(
                    "/logout", headers={"Authorization": f"Bearer {token}"}
                )
        finally:
            self._store(None)
        logger.info("Signed out")

    async def aclose(self) -> None:
        await self._http.aclose()


__all__ = ["AUTH_API_PREFIX", "AuthClient"]

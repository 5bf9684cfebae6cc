"""Async SQLAlchemy engine and per-user session management."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Callable, Mapping
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Session, SessionTransaction

from talentdesk.core.config import Settings, settings

ClaimsProvider = Callable[[], Mapping[str, Any] | None]
SessionProvider = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def build_engine(config: Settings = settings) -> AsyncEngine:
    """Create the async engine for the configured database.

    Args:
        config: Settings carrying the URL and pool options.

    Returns:
        AsyncEngine: Engine bound to ``config.DATABASE_URL``.
    """
    url = config.DATABASE_URL
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=config.DB_ECHO)
    return create_async_engine(
        url,
        echo=config.DB_ECHO,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=config.DB_POOL_RECYCLE,
        pool_timeout=config.DB_POOL_TIMEOUT,
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


class AuthenticatedSessions:
    """Hand out sessions that run as the signed-in user.

    On PostgreSQL every transaction begins with the user's JWT claims set as
    ``request.jwt.claims`` and the ``authenticated`` role, so row-level
    security policies see the same identity the hosted API would. Other
    dialects (SQLite in tests) get plain sessions.
    """

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        claims: ClaimsProvider | None = None,
        connect_retries: int = settings.DB_CONNECT_RETRIES,
        retry_delay_seconds: float = settings.DB_CONNECT_RETRY_DELAY,
    ):
        """Initialize the provider.

        Args:
            sessionmaker: Factory for new sessions.
            claims: Returns the current user's JWT claims, or ``None`` when
                signed out.
            connect_retries: Attempts made to open a connection.
            retry_delay_seconds: Pause between connection attempts.
        """
        self._sessionmaker = sessionmaker
        self._claims = claims or (lambda: None)
        self._connect_retries = max(1, connect_retries)
        self._retry_delay_seconds = retry_delay_seconds

    def _apply_claims(
        self,
        session: Session,
        transaction: SessionTransaction,
        connection: Connection,
    ) -> None:
        if connection.dialect.name != "postgresql":
            return
        claims = self._claims()
        if not claims:
            return
        connection.execute(
            text("select set_config('request.jwt.claims', :claims, true)"),
            {"claims": json.dumps(dict(claims))},
        )
        connection.execute(text("set local role authenticated"))

    async def _connect(self, session: AsyncSession) -> None:
        for attempt in range(1, self._connect_retries + 1):
            try:
                await session.connection()
                return
            except OperationalError as exc:
                await session.rollback()
                if attempt < self._connect_retries:
                    logger.warning(
                        f"Database connection failed; retrying ({attempt}/{self._connect_retries})",
                        error=str(exc),
                    )
                    await asyncio.sleep(self._retry_delay_seconds)
                    continue
                logger.error(
                    f"Database connection failed after {self._connect_retries} retries",
                    error=str(exc),
                )
                raise

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session bound to the current user.

        Yields:
            AsyncSession: Database session instance.

        Raises:
            OperationalError: If the database connection fails after retries.
        """
        async with self._sessionmaker() as session:
            event.listen(session.sync_session, "after_begin", self._apply_claims)
            try:
                await self._connect(session)
                yield session
            finally:
                event.remove(session.sync_session, "after_begin", self._apply_claims)

    def __call__(self) -> AbstractAsyncContextManager[AsyncSession]:
        return self.session()


__all__ = [
    "AuthenticatedSessions",
    "ClaimsProvider",
    "SessionProvider",
    "build_engine",
    "build_sessionmaker",
]

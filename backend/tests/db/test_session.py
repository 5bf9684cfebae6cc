"""Tests for the per-user session provider."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import async_sessionmaker

from talentdesk.db.session import AuthenticatedSessions


@dataclass
class FakeConnection:
    dialect_name: str = "postgresql"
    executed: list[tuple[str, Any]] = field(default_factory=list)

    @property
    def dialect(self) -> SimpleNamespace:
        return SimpleNamespace(name=self.dialect_name)

    def execute(self, statement: Any, params: Any = None) -> None:
        self.executed.append((str(statement), params))


def test_claims_are_applied_on_postgresql() -> None:
    claims = {"sub": "user-1", "role": "authenticated"}
    provider = AuthenticatedSessions(async_sessionmaker(), claims=lambda: claims)
    connection = FakeConnection()

    provider._apply_claims(None, None, connection)

    assert len(connection.executed) == 2
    statement, params = connection.executed[0]
    assert "request.jwt.claims" in statement
    assert json.loads(params["claims"]) == claims
    assert connection.executed[1][0] == "set local role authenticated"


def test_claims_are_skipped_when_signed_out() -> None:
    provider = AuthenticatedSessions(async_sessionmaker(), claims=lambda: None)
    connection = FakeConnection()

    provider._apply_claims(None, None, connection)

    assert connection.executed == []


def test_claims_are_skipped_on_other_dialects() -> None:
    provider = AuthenticatedSessions(async_sessionmaker(), claims=lambda: {"sub": "user-1"})
    connection = FakeConnection(dialect_name="sqlite")

    provider._apply_claims(None, None, connection)

    assert connection.executed == []


@pytest.mark.asyncio
async def test_session_yields_working_connection(
    sessions: AuthenticatedSessions,
) -> None:
    async with sessions() as session:
        result = await session.execute(text("select 1"))

    assert result.scalar_one() == 1

"""Test factories and fakes shared across test modules."""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from talentdesk.models import Candidate, Company, Job, JobApplication, Profile

BASE_TIME = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)


@dataclass
class FakeClock:
    """Manually advanced monotonic clock."""

    now: float = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class RecordingSleep:
    """Async sleep replacement that records delays without waiting."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


@dataclass(slots=True)
class RecordFactory:
    """Factory helper for persisting rows owned by one company."""

    db: AsyncSession
    company_id: uuid.UUID = field(default_factory=uuid.uuid4)
    user_id: uuid.UUID = field(default_factory=uuid.uuid4)
    _counter: int = field(default=0, init=False)
    _company_created: bool = field(default=False, init=False)

    def _next_created_at(self) -> datetime:
        self._counter += 1
        return BASE_TIME + timedelta(minutes=self._counter)

    async def _persist(self, row: Any) -> Any:
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        return row

    async def company(self, name: str = "Acme Recruiting") -> Company:
        """Create the factory's company once and return it."""
        if self._company_created:
            return await self.db.get(Company, self.company_id)
        self._company_created = True
        return await self._persist(Company(id=self.company_id, name=name))

    async def profile(
        self,
        *,
        user_id: uuid.UUID | None = None,
        with_company: bool = True,
        full_name: str = "Riley Recruiter",
    ) -> Profile:
        if with_company:
            await self.company()
        return await self._persist(
            Profile(
                id=user_id or self.user_id,
                company_id=self.company_id if with_company else None,
                full_name=full_name,
            )
        )

    async def candidate(self, **overrides: Any) -> Candidate:
        """
        Create and persist a candidate with sensible defaults.

        Each call gets a ``created_at`` one minute after the previous row so
        newest-first ordering is deterministic.
        """
        await self.company()
        data: dict[str, Any] = {
            "company_id": self.company_id,
            "created_by": self.user_id,
            "first_name": "Alex",
            "last_name": "Morgan",
            "email": f"candidate{self._counter}@example.com",
            "city": "Brisbane",
            "country": "Australia",
            "experience_years": 3,
            "skills": ["Python", "SQL"],
            "created_at": self._next_created_at(),
        }
        data.update(overrides)
        return await self._persist(Candidate(**data))

    async def job(self, **overrides: Any) -> Job:
        await self.company()
        data: dict[str, Any] = {
            "company_id": self.company_id,
            "created_by": self.user_id,
            "title": "Backend Engineer",
            "description": "Build APIs",
            "location": "Brisbane",
            "status": "open",
            "work_format": "hybrid",
            "job_type": "full-time",
            "skills": ["Python", "PostgreSQL"],
            "created_at": self._next_created_at(),
        }
        data.update(overrides)
        return await self._persist(Job(**data))

    async def application(
        self, candidate: Candidate, job: Job, **overrides: Any
    ) -> JobApplication:
        data: dict[str, Any] = {
            "company_id": self.company_id,
            "created_by": self.user_id,
            "candidate_id": candidate.id,
            "job_id": job.id,
            "status": "new",
            "created_at": self._next_created_at(),
        }
        data.update(overrides)
        return await self._persist(JobApplication(**data))


@pytest_asyncio.fixture
async def record_factory(db_session: AsyncSession) -> RecordFactory:
    """
    Provide a RecordFactory bound to the current database session.

    Returns:
        RecordFactory: Factory creating rows for a single test company.
    """
    return RecordFactory(db=db_session)


@dataclass
class ControlledFetcher:
    """Fetcher returning ``data:<params>``; held params wait for release."""

    calls: list[Any] = field(default_factory=list)
    gates: dict[Any, asyncio.Event] = field(default_factory=dict)
    failures: dict[Any, Exception] = field(default_factory=dict)

    def hold(self, params: Any) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[params] = gate
        return gate

    async def __call__(self, params: Any) -> str:
        self.calls.append(params)
        gate = self.gates.get(params)
        if gate is not None:
            await gate.wait()
        failure = self.failures.get(params)
        if failure is not None:
            raise failure
        return f"data:{params}"

    def bound(self, params: Any):
        return lambda: self(params)


async def settle(rounds: int = 5) -> None:
    """Let pending callbacks and tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)

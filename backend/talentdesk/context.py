"""Session context: the explicitly constructed owner of all ambient state.

One ``SessionContext`` lives for the lifetime of an application session.
It builds the auth client, the database session provider, the query client
with its retry policy and global error policy, the company context gate and
the per-entity hooks. Sign-out clears the query cache before the auth
service is told, so no read issued afterwards can observe the previous
user's data.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Mapping
from typing import Any

from loguru import logger

from talentdesk.auth.client import AuthClient
from talentdesk.core.config import Settings, settings
from talentdesk.db.session import (
    AuthenticatedSessions,
    SessionProvider,
    build_engine,
    build_sessionmaker,
)
from talentdesk.hooks import (
    ApplicationHooks,
    CandidateHooks,
    CompanyContextState,
    HookEnvironment,
    JobHooks,
)
from talentdesk.policy import (
    GlobalErrorPolicy,
    InMemoryNavigator,
    Navigator,
    NotificationCenter,
    Notifier,
)
from talentdesk.query.client import Clock, QueryClient
from talentdesk.query.retry import RetryPolicy, Sleep
from talentdesk.schemas.auth import AuthSession, SignUpMetadata, SignUpResult
from talentdesk.services import (
    CandidateService,
    CompanyService,
    JobApplicationService,
    JobService,
)


class SessionContext:
    """Wire the data-access core for one application session."""

    def __init__(
        self,
        config: Settings = settings,
        *,
        auth: AuthClient | None = None,
        sessions: SessionProvider | None = None,
        notifier: Notifier | None = None,
        navigator: Navigator | None = None,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
        offline: Callable[[], bool] = lambda: False,
        candidate_service: CandidateService | None = None,
        job_service: JobService | None = None,
        application_service: JobApplicationService | None = None,
        company_service: CompanyService | None = None,
    ):
        """Build the context.

        Args:
            config: Settings to read defaults from.
            auth: Auth client; built from ``config`` when omitted.
            sessions: Database session provider; an engine for
                ``config.DATABASE_URL`` is created when omitted.
            notifier: Notification sink for the policy and mutations.
            navigator: Navigation used for sign-in redirects.
            clock: Monotonic clock used for staleness and eviction.
            sleep: Sleep used between read retries.
            offline: Reports whether the runtime has no connectivity.
            candidate_service: Overrides the candidate service.
            job_service: Overrides the job service.
            application_service: Overrides the application service.
            company_service: Overrides the company service.
        """
        self.settings = config
        self.auth = auth or AuthClient(
            config.AUTH_URL,
            config.AUTH_ANON_KEY,
            timeout=config.AUTH_TIMEOUT_SECONDS,
        )

        self._engine = None
        if sessions is None:
            self._engine = build_engine(config)
            # One connection attempt per call; read retries belong to the query client.
            sessions = AuthenticatedSessions(
                build_sessionmaker(self._engine),
                claims=self.auth.claims,
                connect_retries=1,
            )
        self.sessions = sessions

        self.notifier = notifier or NotificationCenter()
        self.navigator = navigator or InMemoryNavigator()
        self.policy = GlobalErrorPolicy(
            self.notifier,
            self.navigator,
            sign_in_path=config.SIGN_IN_PATH,
            offline=offline,
        )
        self.query_client = QueryClient(
            retry=RetryPolicy(
                network_retries=config.QUERY_NETWORK_RETRIES,
                server_retries=config.QUERY_SERVER_RETRIES,
                base_delay=config.QUERY_RETRY_BASE_DELAY_SECONDS,
                max_delay=config.QUERY_RETRY_MAX_DELAY_SECONDS,
                sleep=sleep,
                offline=offline,
            ),
            on_error=self.policy.handle,
            stale_time=config.QUERY_STALE_TIME_SECONDS,
            gc_time=config.QUERY_GC_TIME_SECONDS,
            clock=clock,
            offline=offline,
        )

        self.candidate_service = candidate_service or CandidateService(sessions)
        self.job_service = job_service or JobService(sessions)
        self.application_service = application_service or JobApplicationService(
            sessions
        )
        self.company_service = company_service or CompanyService(sessions)

        self.company = CompanyContextState(
            self.query_client, self.company_service, self.auth.user
        )
        env = HookEnvironment(
            client=self.query_client,
            company=self.company,
            company_service=self.company_service,
            user=self.auth.user,
            policy=self.policy,
            notifier=self.notifier,
            offline=offline,
        )
        self.candidates = CandidateHooks(env, self.candidate_service)
        self.jobs = JobHooks(env, self.job_service)
        self.applications = ApplicationHooks(env, self.application_service)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in; the company context starts loading right away."""
        return await self.auth.sign_in_with_password(email, password)

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: SignUpMetadata | Mapping[str, Any],
    ) -> SignUpResult:
        return await self.auth.sign_up(email, password, metadata)

    async def sign_out(self) -> None:
        """Clear every cached query, then end the auth session."""
        self.query_client.clear()
        logger.bind(user_id=self._user_id()).info("Cleared session state for sign-out")
        await self.auth.sign_out()

    def _user_id(self) -> str:
        user = self.auth.user.value
        return user.id if user is not None else "-"

    async def aclose(self) -> None:
        """Release the HTTP client and the database engine."""
        self.company.destroy()
        await self.auth.aclose()
        if self._engine is not None:
            await self._engine.dispose()

    async def __aenter__(self) -> SessionContext:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["SessionContext"]

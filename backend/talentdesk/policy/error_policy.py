"""Process-wide reaction to failures nobody recovered from.

The policy sees every read that failed after retries and every failed
mutation. It decides, from the error category alone, whether to send the
user to sign-in, show a notification or stay silent.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from loguru import logger

from talentdesk.core.config import settings
from talentdesk.errors import (
    AppError,
    ErrorCategory,
    ErrorMessages,
    categorize,
    normalize_error,
    to_user_message,
)
from talentdesk.policy.navigation import Navigator
from talentdesk.policy.notifications import Notification, NotificationLevel, Notifier

NETWORK_NOTIFICATION_ID = "network-offline"
NETWORK_NOTIFICATION_TITLE = "No internet connection"
REDIRECT_QUERY_PARAM = "redirectTo"
SHORT_NOTICE_STATUSES = frozenset({404, 409, 429})


class PolicyAction(str, Enum):
    REDIRECT = "redirect"
    NOTIFY = "notify"
    SILENT = "silent"


@dataclass(frozen=True)
class PolicyDecision:
    """What the policy does for one error."""

    category: ErrorCategory
    notification: Notification | None = None
    redirect_to: str | None = None
    redirect_query: dict[str, str] = field(default_factory=dict)

    @property
    def action(self) -> PolicyAction:
        if self.redirect_to is not None:
            return PolicyAction.REDIRECT
        if self.notification is not None:
            return PolicyAction.NOTIFY
        return PolicyAction.SILENT


class GlobalErrorPolicy:
    """Map normalized errors to redirect, notify or silent outcomes."""

    def __init__(
        self,
        notifier: Notifier,
        navigator: Navigator,
        sign_in_path: str = settings.SIGN_IN_PATH,
        offline: Callable[[], bool] = lambda: False,
    ):
        self.notifier = notifier
        self.navigator = navigator
        self.sign_in_path = sign_in_path
        self._offline = offline

    def _wants_short_notice(self, error: AppError) -> bool:
        if error.type == "not_found":
            return True
        return error.type == "http" and error.status in SHORT_NOTICE_STATUSES

    def decide(self, error: AppError) -> PolicyDecision:
        """Return the decision for ``error`` at the navigator's current location.

        Args:
            error: Normalized error.

        Returns:
            The decision; nothing is shown or navigated yet.
        """
        category = categorize(error)

        if category is ErrorCategory.AUTH:
            if self.navigator.current_path == self.sign_in_path:
                return PolicyDecision(category)
            return PolicyDecision(
                category,
                notification=Notification(
                    to_user_message(error), NotificationLevel.ERROR
                ),
                redirect_to=self.sign_in_path,
                redirect_query={REDIRECT_QUERY_PARAM: self.navigator.current_url},
            )

        if category is ErrorCategory.NETWORK:
            return PolicyDecision(
                category,
                notification=Notification(
                    NETWORK_NOTIFICATION_TITLE,
                    NotificationLevel.ERROR,
                    description=to_user_message(error),
                    id=NETWORK_NOTIFICATION_ID,
                    persistent=True,
                ),
            )

        if category is ErrorCategory.SERVER:
            return PolicyDecision(
                category,
                notification=Notification(
                    ErrorMessages.SERVER_ERROR, NotificationLevel.ERROR
                ),
            )

        if category is ErrorCategory.CLIENT:
            if not self._wants_short_notice(error):
                return PolicyDecision(category)
            return PolicyDecision(
                category,
                notification=Notification(
                    to_user_message(error), NotificationLevel.WARNING
                ),
            )

        if category is ErrorCategory.VALIDATION:
            return PolicyDecision(category)

        return PolicyDecision(
            category,
            notification=Notification(to_user_message(error), NotificationLevel.ERROR),
        )

    def handle(self, raw: Any, *, notify: bool = True) -> PolicyDecision:
        """Normalize ``raw`` and apply the decision.

        Args:
            raw: Anything raised by a read or write.
            notify: ``False`` when the caller shows its own feedback; the
                sign-in redirect for auth errors still happens.

        Returns:
            The applied decision.
        """
        error = normalize_error(raw, offline=self._offline())
        decision = self.decide(error)
        if not notify and decision.category is not ErrorCategory.AUTH:
            decision = replace(decision, notification=None)

        log = logger.bind(
            error_type=error.type,
            category=decision.category.value,
            action=decision.action.value,
        )
        if decision.notification is not None:
            self.notifier.notify(decision.notification)
        if decision.redirect_to is not None:
            log.bind(redirect_to=decision.redirect_to).info(
                "Redirecting to sign-in after auth failure"
            )
            self.navigator.push(decision.redirect_to, decision.redirect_query)
        else:
            log.debug("Handled unrecovered failure")
        return decision

    __call__ = handle


__all__ = [
    "GlobalErrorPolicy",
    "NETWORK_NOTIFICATION_ID",
    "PolicyAction",
    "PolicyDecision",
    "REDIRECT_QUERY_PARAM",
    "SHORT_NOTICE_STATUSES",
]

"""Global error policy and its notification and navigation collaborators."""

from talentdesk.policy.error_policy import (
    NETWORK_NOTIFICATION_ID,
    GlobalErrorPolicy,
    PolicyAction,
    PolicyDecision,
)
from talentdesk.policy.navigation import InMemoryNavigator, Navigator
from talentdesk.policy.notifications import (
    Notification,
    NotificationCenter,
    NotificationLevel,
    Notifier,
)

__all__ = [
    "GlobalErrorPolicy",
    "InMemoryNavigator",
    "NETWORK_NOTIFICATION_ID",
    "Navigator",
    "Notification",
    "NotificationCenter",
    "NotificationLevel",
    "Notifier",
    "PolicyAction",
    "PolicyDecision",
]

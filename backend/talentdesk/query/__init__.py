"""Cache-aware query and mutation layer."""

from talentdesk.query.cache import CachedQueryEntry, QueryCache, QueryStatus
from talentdesk.query.client import QueryClient
from talentdesk.query.keys import (
    QueryKey,
    QueryKeys,
    application_keys,
    candidate_keys,
    company_context_key,
    freeze,
    job_keys,
)
from talentdesk.query.mutation import Mutation, MutationStatus
from talentdesk.query.observable import Observable, computed
from talentdesk.query.observer import QueryObserver
from talentdesk.query.retry import RetryPolicy

__all__ = [
    "CachedQueryEntry",
    "Mutation",
    "MutationStatus",
    "Observable",
    "QueryCache",
    "QueryClient",
    "QueryKey",
    "QueryKeys",
    "QueryObserver",
    "QueryStatus",
    "RetryPolicy",
    "application_keys",
    "candidate_keys",
    "company_context_key",
    "computed",
    "freeze",
    "job_keys",
]

"""Server-state synchronization: query cache, invalidation and paging."""

from relevant.services.query.client import Mutation, QueryClient, QueryScope, QueryState
from relevant.services.query.keys import QueryKey, query_key
from relevant.services.query.pagination import FeedAccumulator

__all__ = [
    "QueryClient",
    "QueryScope",
    "QueryState",
    "Mutation",
    "QueryKey",
    "query_key",
    "FeedAccumulator",
]

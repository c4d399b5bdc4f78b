"""Async query cache with stale-while-revalidate semantics.

Each cached query is identified by a key tuple (see ``keys``). The client:

- returns fresh data from cache, and stale data plus a background refetch
- shares one in-flight task between concurrent fetches of the same key
- tags every fetch with a per-key sequence number and drops results that
  were superseded (a newer fetch, an invalidation or a manual write)
- retries reads on network errors and 5xx answers, never mutations
- lets consumers group their fetches in a QueryScope and cancel them
  together when they go away

Example:
    >>> client = QueryClient(retry=1)
    >>> async with client.scope() as scope:
    ...     page = await scope.fetch(("contentFeed", 1), lambda: api.get_content_feed(page=1))
    >>> await client.mutate(Mutation(api.toggle_content_save, SAVE_INVALIDATES), cid, True)
"""

import asyncio
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from relevant.core.exceptions import APIResponseError, NetworkError, UnauthorizedError
from relevant.core.logging import get_logger
from relevant.services.notifications import Notifier
from relevant.services.query.keys import QueryKey, as_key, matches

logger = get_logger(__name__)

T = TypeVar("T")
Fetcher = Callable[[], Awaitable[Any]]


def is_retryable(error: BaseException) -> bool:
    """Reads are retried on transport failures and server errors only."""
    if isinstance(error, NetworkError):
        return True
    return isinstance(error, APIResponseError) and error.is_server_error


@dataclass
class _Entry:
    stale_time: float
    value: Any = None
    has_value: bool = False
    updated_at: float = 0.0
    invalidated: bool = False
    error: BaseException | None = None
    seq: int = 0
    task: asyncio.Task | None = None
    fn: Fetcher | None = None
    waiters: int = 0

    @property
    def is_fetching(self) -> bool:
        return self.task is not None and not self.task.done()


@dataclass(frozen=True)
class QueryState:
    """Snapshot of one cached query, for loading/error rendering."""

    key: QueryKey
    value: Any
    has_value: bool
    error: BaseException | None
    is_stale: bool
    is_fetching: bool


@dataclass(frozen=True)
class Mutation(Generic[T]):
    """A server write plus the queries it makes stale.

    Attributes:
        fn: Coroutine function performing the write
        invalidates: Key prefixes to invalidate on success
        error_message: Notification text when the server gives no message
        success_message: Optional notification text on success
    """

    fn: Callable[..., Awaitable[T]]
    invalidates: tuple[QueryKey, ...] = ()
    error_message: str = "Something went wrong"
    success_message: str | None = None


class QueryClient:
    """Keyed cache of server reads."""

    def __init__(
        self,
        retry: int = 1,
        default_stale_time: float = 0.0,
        retry_delay: float = 0.0,
        notifier: Notifier | None = None,
        clock: Callable[[], float] = time.monotonic,
        on_unauthorized: Callable[[], Any] | None = None,
    ) -> None:
        """Initialize query client.

        Args:
            retry: Extra attempts for retryable read failures
            default_stale_time: Seconds a result stays fresh when the query gives none
            retry_delay: Base delay between attempts (multiplied by attempt number)
            notifier: Sink for mutation error/success notifications
            clock: Monotonic clock, injectable for tests
            on_unauthorized: Called whenever a read or write ends in a 401,
                including background refetches nobody awaits
        """
        self.retry = retry
        self.default_stale_time = default_stale_time
        self.retry_delay = retry_delay
        self.notifier = notifier
        self._clock = clock
        self.on_unauthorized = on_unauthorized
        self._entries: dict[QueryKey, _Entry] = {}

    # ============================================
    # Reads
    # ============================================

    async def fetch(
        self,
        key: QueryKey,
        fn: Fetcher,
        *,
        stale_time: float | None = None,
        retry: int | None = None,
    ) -> Any:
        """Return data for key, fetching with fn when needed.

        Args:
            key: Query identity
            fn: Zero-argument coroutine function producing the data
            stale_time: Seconds the result stays fresh
            retry: Override for the client's retry count

        Returns:
            Cached or freshly fetched data

        Raises:
            RelevantError: When the fetch fails after retries
        """
        key = as_key(key)
        entry = self._entry(key)
        entry.fn = fn
        if stale_time is not None:
            entry.stale_time = stale_time
        retries = self.retry if retry is None else retry

        if entry.has_value and not entry.invalidated:
            if self._is_stale(entry):
                self._refetch_in_background(key, entry, fn, retries)
            return entry.value

        while True:
            task = entry.task if entry.is_fetching else self._start(key, entry, fn, retries)
            accepted, value = await self._await(entry, task)
            if accepted:
                return value
            if entry.has_value and not entry.invalidated and not entry.is_fetching:
                return entry.value

    async def refetch(self, key: QueryKey, fn: Fetcher | None = None) -> Any:
        """Fetch key now regardless of freshness (joins an in-flight fetch)."""
        key = as_key(key)
        entry = self._entry(key)
        fn = fn or entry.fn
        if fn is None:
            raise KeyError(f"No fetcher registered for query {key!r}")
        entry.fn = fn
        while True:
            task = entry.task if entry.is_fetching else self._start(key, entry, fn, self.retry)
            accepted, value = await self._await(entry, task)
            if accepted:
                return value

    async def poll(
        self, key: QueryKey, fn: Fetcher, interval: float
    ) -> AsyncIterator[Any]:
        """Yield fresh data for key every ``interval`` seconds.

        Failed polls are logged and skipped; UnauthorizedError ends the loop.
        """
        key = as_key(key)
        while True:
            try:
                yield await self.refetch(key, fn)
            except UnauthorizedError:
                raise
            except (NetworkError, APIResponseError) as e:
                logger.warning("Poll failed", key=str(key), error=str(e))
            await asyncio.sleep(interval)

    def scope(self) -> "QueryScope":
        """Create a scope whose fetches are cancelled together."""
        return QueryScope(self)

    # ============================================
    # Writes
    # ============================================

    async def mutate(self, mutation: Mutation[T], *args: Any, **kwargs: Any) -> T:
        """Run a server write, then invalidate what it affects.

        Failures notify the user and are re-raised. A 401 is not notified;
        it goes to ``on_unauthorized`` instead. Mutations are never retried.
        """
        try:
            result = await mutation.fn(*args, **kwargs)
        except UnauthorizedError:
            self._unauthorized()
            raise
        except APIResponseError as e:
            self._notify_error(str(e) or mutation.error_message)
            raise
        except NetworkError:
            self._notify_error(mutation.error_message)
            raise

        if mutation.invalidates:
            self.invalidate(*mutation.invalidates)
        if mutation.success_message and self.notifier is not None:
            self.notifier.success(mutation.success_message)
        return result

    def invalidate(self, *prefixes: QueryKey, refetch: bool = False) -> int:
        """Mark every query under the given prefixes stale.

        In-flight results for those keys are discarded. Invalidated queries
        are never served from cache; the next fetch waits for fresh data.

        Args:
            prefixes: Key prefixes, e.g. ``("contentFeed",)``
            refetch: Also start a background refetch for each affected query

        Returns:
            Number of cached queries invalidated
        """
        normalized = [as_key(p) for p in prefixes]
        count = 0
        for key, entry in self._entries.items():
            if not any(matches(key, prefix) for prefix in normalized):
                continue
            entry.invalidated = True
            entry.seq += 1
            entry.task = None
            count += 1
            if refetch and entry.fn is not None:
                self._refetch_in_background(key, entry, entry.fn, self.retry)
        logger.debug("Invalidated queries", prefixes=[str(p) for p in normalized], count=count)
        return count

    def get_query_data(self, key: QueryKey) -> Any:
        entry = self._entries.get(as_key(key))
        return entry.value if entry is not None and entry.has_value else None

    def set_query_data(self, key: QueryKey, value: Any) -> None:
        """Write data for key directly; any in-flight fetch is superseded."""
        key = as_key(key)
        entry = self._entry(key)
        entry.seq += 1
        entry.task = None
        self._store(entry, value)

    def get_query_state(self, key: QueryKey) -> QueryState | None:
        key = as_key(key)
        entry = self._entries.get(key)
        if entry is None:
            return None
        return QueryState(
            key=key,
            value=entry.value,
            has_value=entry.has_value,
            error=entry.error,
            is_stale=entry.invalidated or self._is_stale(entry),
            is_fetching=entry.is_fetching,
        )

    def keys(self) -> list[QueryKey]:
        return list(self._entries)

    def clear(self) -> None:
        """Drop every cached query and cancel in-flight fetches."""
        for entry in self._entries.values():
            if entry.is_fetching:
                entry.task.cancel()
        self._entries.clear()

    # ============================================
    # Internals
    # ============================================

    def _entry(self, key: QueryKey) -> _Entry:
        entry = self._entries.get(key)
        if entry is None:
            entry = _Entry(stale_time=self.default_stale_time)
            self._entries[key] = entry
        return entry

    def _is_stale(self, entry: _Entry) -> bool:
        return self._clock() - entry.updated_at >= entry.stale_time

    def _store(self, entry: _Entry, value: Any) -> None:
        entry.value = value
        entry.has_value = True
        entry.updated_at = self._clock()
        entry.invalidated = False
        entry.error = None

    def _start(self, key: QueryKey, entry: _Entry, fn: Fetcher, retries: int) -> asyncio.Task:
        entry.seq += 1
        task = asyncio.create_task(self._run(key, entry, fn, entry.seq, retries))
        entry.task = task
        return task

    def _refetch_in_background(
        self, key: QueryKey, entry: _Entry, fn: Fetcher, retries: int
    ) -> None:
        if entry.is_fetching:
            return
        task = self._start(key, entry, fn, retries)
        task.add_done_callback(lambda t: _log_background_result(key, t))

    async def _run(
        self, key: QueryKey, entry: _Entry, fn: Fetcher, seq: int, retries: int
    ) -> tuple[bool, Any]:
        attempt = 0
        try:
            while True:
                try:
                    value = await fn()
                    break
                except Exception as e:
                    if attempt >= retries or not is_retryable(e):
                        if seq == entry.seq:
                            entry.error = e
                        if isinstance(e, UnauthorizedError):
                            self._unauthorized()
                        raise
                    attempt += 1
                    logger.info(
                        "Retrying query", key=str(key), attempt=attempt, error=str(e)
                    )
                    if self.retry_delay:
                        await asyncio.sleep(self.retry_delay * attempt)
        finally:
            if entry.task is asyncio.current_task():
                entry.task = None

        if seq != entry.seq:
            logger.debug("Discarded superseded result", key=str(key), seq=seq, latest=entry.seq)
            return False, value
        self._store(entry, value)
        return True, value

    async def _await(self, entry: _Entry, task: asyncio.Task) -> tuple[bool, Any]:
        # Shielded so one cancelled consumer does not cancel a shared fetch;
        # the last consumer to leave cancels it.
        entry.waiters += 1
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if entry.waiters == 1 and not task.done():
                task.cancel()
            raise
        finally:
            entry.waiters -= 1

    def _unauthorized(self) -> None:
        if self.on_unauthorized is not None:
            self.on_unauthorized()

    def _notify_error(self, message: str) -> None:
        if self.notifier is not None:
            self.notifier.error(message)


def _log_background_result(key: QueryKey, task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.warning("Background refetch failed", key=str(key), error=str(error))


@dataclass
class QueryScope:
    """Fetches owned by one consumer (a page or widget).

    Closing the scope cancels its pending fetches; their results are not
    delivered and, when nobody else is waiting, not cached either.
    """

    client: QueryClient
    closed: bool = field(default=False, init=False)
    _tasks: set[asyncio.Task] = field(default_factory=set, init=False)

    async def fetch(self, key: QueryKey, fn: Fetcher, **kwargs: Any) -> Any:
        if self.closed:
            raise asyncio.CancelledError("Query scope is closed")
        task = asyncio.ensure_future(self.client.fetch(key, fn, **kwargs))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return await task

    @property
    def pending(self) -> int:
        return sum(1 for task in self._tasks if not task.done())

    async def close(self) -> None:
        self.closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def __aenter__(self) -> "QueryScope":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


__all__ = ["QueryClient", "QueryScope", "QueryState", "Mutation", "is_retryable"]

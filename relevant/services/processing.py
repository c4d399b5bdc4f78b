"""Background processing status and admin diagnostics."""

from collections.abc import AsyncIterator
from typing import Any

from relevant.core.logging import get_logger
from relevant.infrastructure.api_client import RelevantAPI
from relevant.models.content import ActionResult, ProcessingStatus
from relevant.services.query.client import Mutation, QueryClient
from relevant.services.query.keys import PROCESSING_INVALIDATES, PROCESSING_STATUS

logger = get_logger(__name__)


class ProcessingService:
    """Watches the content processing queue and starts subscription runs."""

    def __init__(self, api: RelevantAPI, queries: QueryClient, poll_interval: float = 5.0) -> None:
        """Initialize processing service.

        Args:
            api: Relevant API client
            queries: Shared query cache
            poll_interval: Seconds between status polls
        """
        self.api = api
        self.queries = queries
        self.poll_interval = poll_interval

    async def status(self) -> ProcessingStatus:
        return await self.queries.fetch((PROCESSING_STATUS,), self.api.get_processing_status)

    def watch(self, interval: float | None = None) -> AsyncIterator[ProcessingStatus]:
        """Poll the status every ``poll_interval`` seconds.

        Example:
            >>> async for status in processing.watch():
            ...     if not status.is_busy:
            ...         break
        """
        return self.queries.poll(
            (PROCESSING_STATUS,),
            self.api.get_processing_status,
            self.poll_interval if interval is None else interval,
        )

    async def process_subscriptions(self) -> ActionResult:
        mutation = Mutation(
            self.api.process_subscriptions,
            invalidates=PROCESSING_INVALIDATES,
            error_message="Failed to start processing",
            success_message="Processing started! New content will be analyzed.",
        )
        result = await self.queries.mutate(mutation)
        logger.info("Subscription processing requested", success=result.success)
        return result

    async def diagnostics(self) -> dict[str, Any]:
        """Raw admin diagnostics, passed through unchanged."""
        return await self.api.get_admin_diagnostics()


__all__ = ["ProcessingService"]

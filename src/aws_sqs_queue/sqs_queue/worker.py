"""
Module: worker.py
Description: Consumer loop for an SQS-backed queue.

Claims items one at a time, hands their data to a handler, and deletes
them on success. Handlers signal "try again later" with RequeueItem and
"stop this run" with SuspendQueue; any other exception leaves the item
leased so SQS redelivers it after the lease expires. Messages that
cannot be decoded are counted as failed and skipped the same way.

Transient connectivity failures while claiming are retried with
exponential backoff here, at the consumer level. The client underneath
never retries on its own.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from aws_sqs_queue.models.item import QueueItem
from aws_sqs_queue.sqs_queue.exceptions import ConnectivityError, MalformedMessage
from aws_sqs_queue.sqs_queue.queue import AwsSqsQueue
from aws_sqs_queue.utils.logger import get_logger

logger = get_logger(__name__)

Handler = Callable[[Any], Awaitable[None]]


class RequeueItem(Exception):
    """Raised by a handler to release the item back to the queue."""


class SuspendQueue(Exception):
    """Raised by a handler to release the item and end the current run."""


@dataclass
class WorkerStats:
    """Outcome counters for one worker run."""

    processed: int = 0
    released: int = 0
    failed: int = 0
    suspended: bool = False


class QueueWorker:
    """
    Processes queue items with a handler until the queue is empty or the
    time limit is reached.

    Example:
        >>> async def resize(data):
        ...     await thumbnails.render(data["path"])
        >>> stats = await QueueWorker(factory.get("images"), resize, time_limit=60).run()
    """

    def __init__(
        self,
        queue: AwsSqsQueue,
        handler: Handler,
        time_limit: float = 60.0,
        lease_time: int = 0,
        retry_attempts: int = 3,
        retry_max_wait: float = 10.0
    ):
        """
        Initialize queue worker.

        Args:
            queue: Queue to consume
            handler: Async callable receiving each item's data
            time_limit: Seconds after which no new item is claimed
            lease_time: Lease per claim; 0 uses the queue's claim timeout
            retry_attempts: Claim attempts on ConnectivityError before giving up
            retry_max_wait: Upper bound of the backoff between attempts
        """
        if time_limit <= 0:
            raise ValueError("time_limit must be positive")
        if retry_attempts < 1:
            raise ValueError("retry_attempts must be at least 1")

        self.queue = queue
        self.handler = handler
        self.time_limit = time_limit
        self.lease_time = lease_time
        self.retry_attempts = retry_attempts
        self.retry_max_wait = retry_max_wait

    async def _claim(self) -> Optional[QueueItem]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=1, min=0, max=self.retry_max_wait),
            retry=retry_if_exception_type(ConnectivityError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self.queue.claim_item(self.lease_time)
        return None

    async def run(self) -> WorkerStats:
        """
        Run the worker loop once.

        Returns:
            WorkerStats for this run

        Raises:
            ConnectivityError: If claiming keeps failing after all retries
        """
        stats = WorkerStats()
        end = time.monotonic() + self.time_limit

        logger.info(
            "Queue worker started",
            queue_name=self.queue.name,
            time_limit=self.time_limit
        )

        while time.monotonic() < end:
            try:
                item = await self._claim()
            except MalformedMessage as e:
                stats.failed += 1
                logger.error(
                    "Skipping malformed message, left for redelivery",
                    queue_name=self.queue.name,
                    error=str(e)
                )
                continue
            if item is None:
                break

            try:
                await self.handler(item.data)
            except RequeueItem:
                await self.queue.release_item(item)
                stats.released += 1
                logger.info(
                    "Item requeued by handler",
                    queue_name=self.queue.name,
                    message_id=item.item_id
                )
                continue
            except SuspendQueue as e:
                await self.queue.release_item(item)
                stats.released += 1
                stats.suspended = True
                logger.warning(
                    "Queue suspended by handler",
                    queue_name=self.queue.name,
                    message_id=item.item_id,
                    reason=str(e)
                )
                break
            except Exception as e:
                stats.failed += 1
                logger.error(
                    "Handler failed, item left for redelivery",
                    queue_name=self.queue.name,
                    message_id=item.item_id,
                    error=str(e),
                    error_type=type(e).__name__
                )
                continue

            await self.queue.delete_item(item)
            stats.processed += 1

        logger.info(
            "Queue worker finished",
            queue_name=self.queue.name,
            processed=stats.processed,
            released=stats.released,
            failed=stats.failed,
            suspended=stats.suspended
        )
        return stats

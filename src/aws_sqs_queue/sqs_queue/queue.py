"""
Module: queue.py
Description: Reliable-queue interface backed by SQS.

AwsSqsQueue exposes the classic create/claim/release/delete/count
interface to application code and serializes caller data before it
reaches the QueueClient. Subclasses can override serialize() and
unserialize() to use another format.
"""

import json
from typing import Any, Optional

from aws_sqs_queue.models.item import QueueItem, SendRequest
from aws_sqs_queue.sqs_queue.exceptions import InvalidItem, MalformedMessage, SendFailed
from aws_sqs_queue.sqs_queue.sqs import QueueClient
from aws_sqs_queue.utils.logger import get_logger

logger = get_logger(__name__)


class AwsSqsQueue:
    """
    Named queue with reliable-queue semantics.

    Items claimed from the queue stay invisible to other consumers for
    the lease time and must be deleted once processed; otherwise they
    are delivered again.

    Example:
        >>> queue = AwsSqsQueue(QueueClient(QueueConfig(name="emails")))
        >>> await queue.create_item({"to": "ops@example.com"})
        >>> item = await queue.claim_item(lease_time=60)
        >>> send(item.data)
        >>> await queue.delete_item(item)
    """

    def __init__(self, client: QueueClient):
        if not isinstance(client, QueueClient):
            raise ValueError("client must be a QueueClient instance")
        self.client = client

    @property
    def name(self) -> str:
        return self.client.name

    @property
    def claim_timeout(self) -> int:
        return self.client.config.default_lease_seconds

    @property
    def wait_time_seconds(self) -> int:
        return self.client.config.max_wait_seconds

    @staticmethod
    def serialize(data: Any) -> bytes:
        """Encode caller data as UTF-8 JSON."""
        return json.dumps(data, separators=(",", ":")).encode("utf-8")

    @staticmethod
    def unserialize(payload: bytes) -> Any:
        """Decode a payload produced by serialize()."""
        return json.loads(payload.decode("utf-8"))

    async def create_item(self, data: Any) -> Optional[str]:
        """
        Add an item to the queue.

        Args:
            data: Arbitrary serializable data

        Returns:
            SQS message id, or None if the send failed

        Raises:
            InvalidItem: If a claimed item is passed instead of its data
            ConnectivityError: If the queue URL cannot be resolved
        """
        if isinstance(data, QueueItem):
            logger.error(
                "Refusing to re-queue a claimed item",
                queue_name=self.name,
                message_id=data.item_id
            )
            raise InvalidItem(
                "Do not re-queue claimed items; pass item.data to create_item()",
                queue_name=self.name,
            )

        try:
            return await self.client.send(SendRequest(payload=self.serialize(data)))
        except SendFailed:
            return None

    async def number_of_items(self) -> int:
        """Approximate number of items waiting in the queue."""
        return await self.client.approximate_count()

    async def claim_item(self, lease_time: int = 0) -> Optional[QueueItem]:
        """
        Claim one item from the queue.

        Args:
            lease_time: Seconds the item stays claimed; 0 uses the configured
                claim timeout

        Returns:
            Claimed item with ``data`` deserialized, or None if the queue is empty

        Raises:
            MalformedMessage: If the payload cannot be unserialized; the item
                stays leased and is redelivered when the lease expires
        """
        item = await self.client.claim(lease_seconds=lease_time)
        if item is None:
            return None

        try:
            data = self.unserialize(item.payload)
        except (UnicodeDecodeError, ValueError) as e:
            logger.error(
                "Failed to unserialize claimed item",
                queue_name=self.name,
                message_id=item.item_id,
                error=str(e)
            )
            raise MalformedMessage(
                f"Message {item.item_id} payload cannot be unserialized: {e}",
                queue_name=self.name,
            ) from e

        return item.model_copy(update={"data": data})

    async def release_item(self, item: QueueItem) -> bool:
        """Make a claimed item immediately available to other consumers."""
        return await self.client.release(item)

    async def delete_item(self, item: QueueItem) -> None:
        """Remove a processed item from the queue."""
        await self.client.delete(item)

    async def create_queue(self) -> None:
        """Create the SQS queue if it does not exist yet."""
        await self.client.ensure_queue()

    async def delete_queue(self) -> None:
        """Delete the SQS queue and all of its items."""
        await self.client.delete_queue()

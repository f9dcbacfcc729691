"""
Module: sqs.py
Description: SQS client for a single named queue.

The only component that talks to the remote service. Resolves the queue
URL once (create-or-get), then sends, claims, releases, extends and
deletes messages. Every operation is a single remote call; failures are
translated into typed exceptions and never retried here.
"""

import asyncio
import base64
import binascii
import math
from typing import Any, Dict, Optional

from aioboto3 import Session
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from aws_sqs_queue.config.settings import MAX_VISIBILITY_TIMEOUT, QueueConfig
from aws_sqs_queue.models.item import QueueItem, SendRequest
from aws_sqs_queue.sqs_queue.exceptions import (
    ConnectivityError,
    InvalidItem,
    MalformedMessage,
    SendFailed,
)
from aws_sqs_queue.sqs_queue.planner import ClaimPlan, plan_claim
from aws_sqs_queue.utils.logger import get_logger

logger = get_logger(__name__)

# Receipt handle is no longer valid for acknowledgement
_STALE_HANDLE_CODES = {
    "ReceiptHandleIsInvalid",
    "AWS.SimpleQueueService.MessageNotInflight",
    "MessageNotInflight",
}
_MISSING_QUEUE_CODES = {
    "AWS.SimpleQueueService.NonExistentQueue",
    "QueueDoesNotExist",
}


def _error_code(error: Exception) -> str:
    """Return the AWS error code for a ClientError, else the exception type."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code", "Unknown")
    return type(error).__name__


class QueueClient:
    """
    SQS client bound to one queue.

    Attributes:
        config: Queue name, timeouts, region and credentials
        session: aioboto3 session used to open SQS clients

    Example:
        >>> client = QueueClient(QueueConfig(name="thumbnails"))
        >>> await client.send(SendRequest(payload=b"image-42"))
        >>> item = await client.claim(lease_seconds=30)
        >>> if item is not None:
        ...     await client.delete(item)
    """

    def __init__(self, config: QueueConfig, session: Optional[Session] = None):
        """
        Initialize SQS client.

        Args:
            config: Queue configuration
            session: Optional pre-built aioboto3 session

        Raises:
            ValueError: If config is not a QueueConfig
        """
        if not isinstance(config, QueueConfig):
            raise ValueError("config must be a QueueConfig instance")

        self.config = config
        self.session = session or Session(
            aws_access_key_id=config.aws_access_key_id,
            aws_secret_access_key=config.aws_secret_access_key,
            region_name=config.region,
        )
        # Retries stay with the caller; a single attempt per call.
        self._botocore_config = Config(
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
            retries={"max_attempts": 1, "mode": "standard"},
        )
        self._queue_url: Optional[str] = None
        self._resolve_lock = asyncio.Lock()

        logger.info(
            "SQS client initialized",
            queue_name=config.name,
            region=config.region,
            endpoint_url=config.endpoint_url
        )

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def queue_url(self) -> Optional[str]:
        """Resolved queue URL, or None before the first remote call."""
        return self._queue_url

    def _client(self):
        return self.session.client(
            "sqs",
            region_name=self.config.region,
            endpoint_url=self.config.endpoint_url,
            config=self._botocore_config,
        )

    def _connectivity_error(self, action: str, error: Exception) -> ConnectivityError:
        code = _error_code(error)
        logger.error(
            f"Failed to {action}",
            queue_name=self.name,
            error_code=code,
            error=str(error)
        )
        return ConnectivityError(
            f"Failed to {action} on queue {self.name}: {error}",
            queue_name=self.name,
            error_code=code,
        )

    def _require_handle(self, item: Any, action: str) -> str:
        handle = item.ack_handle if isinstance(item, QueueItem) else None
        if not isinstance(handle, str) or not handle:
            logger.error(
                "Rejected item without ack handle",
                queue_name=self.name,
                action=action,
                item_type=type(item).__name__
            )
            raise InvalidItem(
                f"{action} requires an item obtained from claim() with an ack handle",
                queue_name=self.name,
            )
        return handle

    async def ensure_queue(self) -> str:
        """
        Create the queue if missing and return its URL.

        CreateQueue on an existing queue with the same attributes returns
        the existing URL, so this is idempotent. The URL is memoized and
        concurrent first callers share one remote call.

        Returns:
            Queue URL

        Raises:
            ConnectivityError: If the queue cannot be created or looked up
        """
        if self._queue_url is not None:
            return self._queue_url

        async with self._resolve_lock:
            if self._queue_url is None:
                try:
                    async with self._client() as sqs:
                        response = await sqs.create_queue(QueueName=self.name)
                except (ClientError, BotoCoreError) as e:
                    raise self._connectivity_error("create queue", e) from e

                self._queue_url = response["QueueUrl"]
                logger.info(
                    "Queue resolved",
                    queue_name=self.name,
                    queue_url=self._queue_url
                )

        return self._queue_url

    async def send(self, request: SendRequest) -> str:
        """
        Send a payload to the queue.

        The payload bytes are base64-encoded into the message body so that
        arbitrary bytes survive the text-only SQS body unchanged.

        Args:
            request: Payload to enqueue

        Returns:
            Message ID assigned by SQS

        Raises:
            InvalidItem: If a claimed QueueItem is passed instead of a SendRequest
            ValueError: If request is not a SendRequest
            SendFailed: If SQS rejects the message or returns no message id
            ConnectivityError: If the queue URL cannot be resolved
        """
        if isinstance(request, QueueItem):
            raise InvalidItem(
                "Claimed items cannot be re-sent; send SendRequest(payload=item.payload)",
                queue_name=self.name,
            )
        if not isinstance(request, SendRequest):
            raise ValueError("request must be a SendRequest instance")

        queue_url = await self.ensure_queue()
        body = base64.b64encode(request.payload).decode("ascii")

        try:
            async with self._client() as sqs:
                response = await sqs.send_message(QueueUrl=queue_url, MessageBody=body)
        except (ClientError, BotoCoreError) as e:
            code = _error_code(e)
            logger.error(
                "Failed to send message to SQS",
                queue_name=self.name,
                error_code=code,
                error=str(e)
            )
            raise SendFailed(
                f"Send to queue {self.name} failed: {e}",
                queue_name=self.name,
                error_code=code,
            ) from e

        message_id = response.get("MessageId")
        if not message_id:
            logger.error("SQS send returned no message id", queue_name=self.name)
            raise SendFailed(
                f"Send to queue {self.name} was not acknowledged",
                queue_name=self.name,
            )

        logger.info(
            "Message sent to SQS",
            queue_name=self.name,
            message_id=message_id,
            size=len(body)
        )
        return message_id

    async def _receive(self, queue_url: str, plan: ClaimPlan) -> Dict[str, Any]:
        try:
            async with self._client() as sqs:
                return await sqs.receive_message(
                    QueueUrl=queue_url,
                    MaxNumberOfMessages=1,
                    VisibilityTimeout=plan.visibility_timeout,
                    WaitTimeSeconds=plan.wait_seconds,
                )
        except (ClientError, BotoCoreError) as e:
            raise self._connectivity_error("receive message", e) from e

    def _to_item(self, message: Dict[str, Any]) -> QueueItem:
        body = message.get("Body")
        message_id = message.get("MessageId")
        handle = message.get("ReceiptHandle")
        if body is None or not message_id or not handle:
            logger.error(
                "Received incomplete message",
                queue_name=self.name,
                has_body=body is not None,
                has_message_id=bool(message_id),
                has_receipt_handle=bool(handle)
            )
            raise MalformedMessage(
                f"Message from queue {self.name} is missing body, id or receipt handle",
                queue_name=self.name,
            )

        try:
            payload = base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.error(
                "Received message with undecodable body",
                queue_name=self.name,
                message_id=message_id
            )
            raise MalformedMessage(
                f"Message {message_id} body is not valid base64",
                queue_name=self.name,
            ) from e

        return QueueItem(payload=payload, item_id=message_id, ack_handle=handle)

    async def claim(
        self,
        lease_seconds: int = 0,
        deadline: Optional[float] = None
    ) -> Optional[QueueItem]:
        """
        Claim at most one message with a bounded long poll.

        Args:
            lease_seconds: Visibility timeout for the claim; 0 uses the default
            deadline: Optional caller budget in seconds; when shorter than the
                planned wait, the long poll is shortened to end before it and
                the receive is abandoned if it is still pending at the deadline

        Returns:
            Fully populated QueueItem, or None if no message arrived in time

        Raises:
            ValueError: If lease_seconds is negative or above 12 hours
            ConnectivityError: If the receive call fails
            MalformedMessage: If the delivery is incomplete or undecodable
        """
        if lease_seconds > MAX_VISIBILITY_TIMEOUT:
            raise ValueError(
                f"lease_seconds must not exceed {MAX_VISIBILITY_TIMEOUT}, got {lease_seconds}"
            )

        plan = plan_claim(
            lease_seconds,
            self.config.default_lease_seconds,
            self.config.max_wait_seconds,
        )
        queue_url = await self.ensure_queue()

        logger.debug(
            "Claiming message",
            queue_name=self.name,
            wait_seconds=plan.wait_seconds,
            visibility_timeout=plan.visibility_timeout,
            deadline=deadline
        )

        if deadline is not None and deadline < plan.wait_seconds:
            # Server-side wait ends at least a second before the deadline;
            # wait_for only cuts off a slow transport.
            plan = plan._replace(wait_seconds=max(0, math.ceil(deadline) - 1))
            try:
                response = await asyncio.wait_for(
                    self._receive(queue_url, plan), timeout=max(deadline, 0)
                )
            except asyncio.TimeoutError:
                logger.info(
                    "Claim abandoned at caller deadline",
                    queue_name=self.name,
                    deadline=deadline
                )
                return None
        else:
            response = await self._receive(queue_url, plan)

        messages = response.get("Messages") or []
        if not messages:
            logger.debug("No message available", queue_name=self.name)
            return None

        item = self._to_item(messages[0])
        logger.info(
            "Message claimed",
            queue_name=self.name,
            message_id=item.item_id,
            visibility_timeout=plan.visibility_timeout
        )
        return item

    async def _change_visibility(self, item: QueueItem, handle: str, timeout: int) -> bool:
        queue_url = await self.ensure_queue()
        try:
            async with self._client() as sqs:
                await sqs.change_message_visibility(
                    QueueUrl=queue_url,
                    ReceiptHandle=handle,
                    VisibilityTimeout=timeout,
                )
        except ClientError as e:
            if _error_code(e) in _STALE_HANDLE_CODES:
                logger.warning(
                    "Claim no longer held",
                    queue_name=self.name,
                    message_id=item.item_id,
                    error_code=_error_code(e)
                )
                return False
            raise self._connectivity_error("change message visibility", e) from e
        except BotoCoreError as e:
            raise self._connectivity_error("change message visibility", e) from e

        return True

    async def release(self, item: QueueItem) -> bool:
        """
        Release a claim so the message is immediately redeliverable.

        Args:
            item: Item obtained from claim()

        Returns:
            True if released, False if the claim had already lapsed

        Raises:
            InvalidItem: If item has no ack handle
            ConnectivityError: If the remote call fails
        """
        handle = self._require_handle(item, "release")
        released = await self._change_visibility(item, handle, 0)
        if released:
            logger.info("Message released", queue_name=self.name, message_id=item.item_id)
        return released

    async def extend(self, item: QueueItem, lease_seconds: int) -> bool:
        """
        Reset the remaining lease of a claim to lease_seconds from now.

        SQS caps the total time a message can stay claimed at 12 hours,
        counted from the first receive.

        Args:
            item: Item obtained from claim()
            lease_seconds: New visibility timeout (0-43200)

        Returns:
            True if extended, False if the claim had already lapsed

        Raises:
            InvalidItem: If item has no ack handle
            ValueError: If lease_seconds is out of range
            ConnectivityError: If the remote call fails
        """
        handle = self._require_handle(item, "extend")
        if not 0 <= lease_seconds <= MAX_VISIBILITY_TIMEOUT:
            raise ValueError(
                f"lease_seconds must be between 0 and {MAX_VISIBILITY_TIMEOUT}"
            )

        extended = await self._change_visibility(item, handle, lease_seconds)
        if extended:
            logger.info(
                "Message lease extended",
                queue_name=self.name,
                message_id=item.item_id,
                lease_seconds=lease_seconds
            )
        return extended

    async def delete(self, item: QueueItem) -> None:
        """
        Permanently remove a claimed message.

        Args:
            item: Item obtained from claim()

        Raises:
            InvalidItem: If item has no ack handle
            ConnectivityError: If the remote call fails
        """
        handle = self._require_handle(item, "delete")
        queue_url = await self.ensure_queue()

        try:
            async with self._client() as sqs:
                await sqs.delete_message(QueueUrl=queue_url, ReceiptHandle=handle)
        except (ClientError, BotoCoreError) as e:
            raise self._connectivity_error("delete message", e) from e

        logger.info("Message deleted", queue_name=self.name, message_id=item.item_id)

    async def approximate_count(self) -> int:
        """
        Return SQS's estimate of visible messages in the queue.

        The value is eventually consistent and may lag sends and deletes;
        do not use it for exact accounting.

        Returns:
            Non-negative approximate message count

        Raises:
            ConnectivityError: If the attributes cannot be read
        """
        queue_url = await self.ensure_queue()

        try:
            async with self._client() as sqs:
                response = await sqs.get_queue_attributes(
                    QueueUrl=queue_url,
                    AttributeNames=["ApproximateNumberOfMessages"],
                )
        except (ClientError, BotoCoreError) as e:
            raise self._connectivity_error("read queue attributes", e) from e

        attributes = response.get("Attributes") or {}
        return max(0, int(attributes.get("ApproximateNumberOfMessages", 0)))

    async def _lookup_queue_url(self) -> Optional[str]:
        try:
            async with self._client() as sqs:
                response = await sqs.get_queue_url(QueueName=self.name)
        except ClientError as e:
            if _error_code(e) in _MISSING_QUEUE_CODES:
                return None
            raise self._connectivity_error("look up queue", e) from e
        except BotoCoreError as e:
            raise self._connectivity_error("look up queue", e) from e
        return response["QueueUrl"]

    async def delete_queue(self) -> None:
        """
        Delete the queue and every message in it. Irreversible.

        An unresolved queue is looked up rather than created; deleting a
        queue that does not exist is a no-op.

        Raises:
            ConnectivityError: If the remote call fails
        """
        queue_url = self._queue_url or await self._lookup_queue_url()
        if queue_url is None:
            logger.info("Queue does not exist, nothing to delete", queue_name=self.name)
            return

        try:
            async with self._client() as sqs:
                await sqs.delete_queue(QueueUrl=queue_url)
        except (ClientError, BotoCoreError) as e:
            raise self._connectivity_error("delete queue", e) from e

        self._queue_url = None
        logger.warning("Queue deleted", queue_name=self.name, queue_url=queue_url)

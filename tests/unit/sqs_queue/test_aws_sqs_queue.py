"""
Module: test_aws_sqs_queue.py
Description: Unit tests for the reliable-queue adapter.

Covers serialization of caller data, rejection of re-queued items and
delegation of claim/release/delete/count to the QueueClient.
"""

from unittest.mock import AsyncMock, patch

import pytest

from aws_sqs_queue.models.item import QueueItem, SendRequest
from aws_sqs_queue.sqs_queue.exceptions import InvalidItem, MalformedMessage, SendFailed
from aws_sqs_queue.sqs_queue.queue import AwsSqsQueue


class TestAwsSqsQueue:
    """Test cases for AwsSqsQueue."""

    def test_requires_client(self):
        """Test construction without a QueueClient fails."""
        with pytest.raises(ValueError, match="client must be a QueueClient instance"):
            AwsSqsQueue("not a client")

    def test_accessors(self, aws_queue):
        """Test configuration is exposed through the queue."""
        assert aws_queue.name == "test-queue"
        assert aws_queue.claim_timeout == 45
        assert aws_queue.wait_time_seconds == 1

    def test_serialize_roundtrip(self):
        """Test default JSON serialization preserves structure and types."""
        data = {"id": 7, "tags": ["a", "b"], "ratio": 0.5, "ok": True, "none": None}
        assert AwsSqsQueue.unserialize(AwsSqsQueue.serialize(data)) == data

    @pytest.mark.asyncio
    async def test_create_and_claim_item(self, aws_queue):
        """Test created data comes back deserialized on claim."""
        message_id = await aws_queue.create_item({"order_id": "12345"})
        assert message_id

        item = await aws_queue.claim_item(lease_time=10)
        assert item.data == {"order_id": "12345"}
        assert item.item_id == message_id
        assert item.ack_handle

    @pytest.mark.asyncio
    async def test_claim_item_empty(self, aws_queue):
        """Test claiming from an empty queue returns None."""
        assert await aws_queue.claim_item() is None

    @pytest.mark.asyncio
    async def test_create_item_rejects_claimed_item(self, aws_queue):
        """Test re-queuing a whole claimed item is refused."""
        item = QueueItem(payload=b"{}", item_id="msg-1", ack_handle="rh-1", data={})
        with pytest.raises(InvalidItem, match="pass item.data"):
            await aws_queue.create_item(item)

    @pytest.mark.asyncio
    async def test_create_item_returns_none_on_send_failure(self, aws_queue):
        """Test a failed send is reported as None."""
        with patch.object(
            aws_queue.client, "send", AsyncMock(side_effect=SendFailed("rejected"))
        ):
            assert await aws_queue.create_item({"a": 1}) is None

    @pytest.mark.asyncio
    async def test_delete_item(self, aws_queue):
        """Test deleting a claimed item empties the queue."""
        await aws_queue.create_item("payload")
        item = await aws_queue.claim_item()
        await aws_queue.delete_item(item)
        assert await aws_queue.claim_item() is None

    @pytest.mark.asyncio
    async def test_release_item(self, aws_queue):
        """Test a released item can be claimed again immediately."""
        await aws_queue.create_item("again")
        first = await aws_queue.claim_item(lease_time=300)

        assert await aws_queue.release_item(first) is True
        second = await aws_queue.claim_item(lease_time=300)
        assert second is not None
        assert second.data == "again"
        assert second.ack_handle != first.ack_handle
        assert second.item_id == first.item_id

    @pytest.mark.asyncio
    async def test_number_of_items(self, aws_queue):
        """Test the count is a non-negative int."""
        await aws_queue.create_item(1)
        count = await aws_queue.number_of_items()
        assert isinstance(count, int)
        assert count >= 0

    @pytest.mark.asyncio
    async def test_create_and_delete_queue(self, aws_queue, sqs_backend):
        """Test queue lifecycle delegates to the client."""
        await aws_queue.create_queue()
        url = aws_queue.client.queue_url
        assert url in sqs_backend.list_queues()["QueueUrls"]

        await aws_queue.delete_queue()
        assert url not in sqs_backend.list_queues().get("QueueUrls", [])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [b"\xff\xfe not json", b"not json"])
    async def test_claim_item_with_undecodable_payload(self, aws_queue, payload):
        """Test payloads that are not UTF-8 JSON raise MalformedMessage."""
        message_id = await aws_queue.client.send(SendRequest(payload=payload))

        with pytest.raises(MalformedMessage, match=message_id) as exc_info:
            await aws_queue.claim_item(lease_time=60)
        assert exc_info.value.queue_name == "test-queue"

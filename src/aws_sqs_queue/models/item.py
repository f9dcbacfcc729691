"""
Module: item.py
Description: Queue message models.

Outbound sends and inbound deliveries are deliberately different types:
a SendRequest carries only a payload, while a QueueItem is what a claim
produces and is the only thing that can be released or deleted.

Key Components:
- SendRequest: payload to submit to the queue
- QueueItem: claimed delivery with payload, item id and ack handle

Dependencies: pydantic, typing
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SendRequest(BaseModel):
    """
    Payload to enqueue.

    The payload is opaque bytes, already serialized by the caller.
    SQS accepts up to 256 KiB per message after encoding; staying under
    that limit is the caller's responsibility.
    """

    model_config = ConfigDict(frozen=True)

    payload: bytes = Field(..., description="Serialized message payload")


class QueueItem(BaseModel):
    """
    A message delivery obtained by claiming from the queue.

    item_id is the SQS MessageId, which stays the same when a message is
    redelivered. Every claim produces a new ack_handle, and a handle from
    an earlier delivery cannot be reused.

    Attributes:
        payload: Message payload, byte-identical to what was sent
        item_id: SQS message id
        ack_handle: Opaque receipt handle needed to delete, release or extend
        data: Deserialized payload, filled in by the caller-facing queue
    """

    model_config = ConfigDict(frozen=True)

    payload: bytes
    item_id: str = Field(..., min_length=1)
    ack_handle: str = Field(..., min_length=1, repr=False)
    data: Any = None

    def __repr__(self) -> str:
        return f"QueueItem(item_id={self.item_id!r}, size={len(self.payload)})"

"""
Module: exceptions.py
Description: Typed failures raised by queue operations.

Remote failures propagate to the caller as one of these types; the
client never retries or swallows them. An empty claim is not an error
and is represented by None.
"""

from typing import Optional


class QueueError(Exception):
    """Base class for all queue failures."""

    def __init__(self, message: str, queue_name: Optional[str] = None,
                 error_code: Optional[str] = None):
        super().__init__(message)
        self.queue_name = queue_name
        self.error_code = error_code


class ConnectivityError(QueueError):
    """Remote service unreachable, throttling, or credentials rejected."""


class InvalidItem(QueueError, ValueError):
    """Item cannot be acknowledged: not a claimed item, or no ack handle."""


class SendFailed(QueueError):
    """Remote service rejected the message or did not return a message id."""


class MalformedMessage(QueueError):
    """A received message lacked its body, id or receipt handle, or its payload could not be decoded."""

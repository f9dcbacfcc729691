"""
Module: models
Description: Package initialization for queue message models.

- SendRequest: outbound payload
- QueueItem: claimed delivery
"""

from .item import QueueItem, SendRequest

__all__ = [
    "QueueItem",
    "SendRequest",
]

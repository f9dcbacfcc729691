"""
Package: aws_sqs_queue
Description: Reliable queue interface backed by Amazon SQS.

Exposes the queue adapter, its client and factory, and the message
models for convenient importing.
"""

from aws_sqs_queue.config.settings import QueueConfig, Settings, get_settings
from aws_sqs_queue.models.item import QueueItem, SendRequest
from aws_sqs_queue.sqs_queue.exceptions import (
    ConnectivityError,
    InvalidItem,
    MalformedMessage,
    QueueError,
    SendFailed,
)
from aws_sqs_queue.sqs_queue.factory import QueueFactory
from aws_sqs_queue.sqs_queue.planner import ClaimPlan, plan_claim
from aws_sqs_queue.sqs_queue.queue import AwsSqsQueue
from aws_sqs_queue.sqs_queue.sqs import QueueClient
from aws_sqs_queue.sqs_queue.worker import QueueWorker, RequeueItem, SuspendQueue

__version__ = "0.1.0"

__all__ = [
    "AwsSqsQueue",
    "ClaimPlan",
    "ConnectivityError",
    "InvalidItem",
    "MalformedMessage",
    "QueueClient",
    "QueueConfig",
    "QueueError",
    "QueueFactory",
    "QueueItem",
    "QueueWorker",
    "RequeueItem",
    "SendFailed",
    "SendRequest",
    "Settings",
    "SuspendQueue",
    "get_settings",
    "plan_claim",
]

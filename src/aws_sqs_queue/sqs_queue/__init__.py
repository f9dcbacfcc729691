"""
Package: sqs_queue
Description: SQS queue operations.

Provides the claim planner, the async SQS client, the reliable-queue
adapter built on it, a factory for named queues and a consumer loop.
"""

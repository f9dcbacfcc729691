"""
Module: factory.py
Description: Builds AwsSqsQueue instances from settings.

One aioboto3 session is shared by every queue the factory hands out,
and each queue name maps to a single AwsSqsQueue for the life of the
factory so its resolved queue URL is reused.
"""

from typing import Dict, Optional

from aioboto3 import Session

from aws_sqs_queue.config.settings import Settings, get_settings
from aws_sqs_queue.sqs_queue.queue import AwsSqsQueue
from aws_sqs_queue.sqs_queue.sqs import QueueClient
from aws_sqs_queue.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


class QueueFactory:
    """
    Factory for named SQS-backed queues.

    Example:
        >>> factory = QueueFactory()
        >>> queue = factory.get("image_resize")
        >>> queue is factory.get("image_resize")
        True
    """

    def __init__(self, settings: Optional[Settings] = None, session: Optional[Session] = None):
        self.settings = settings or get_settings()
        configure_logging(self.settings.log_level)
        self.session = session or Session(
            aws_access_key_id=self.settings.aws_key,
            aws_secret_access_key=self.settings.aws_secret,
            region_name=self.settings.region,
        )
        self._queues: Dict[str, AwsSqsQueue] = {}

    def get(self, name: str, force_reinitialize: bool = False) -> AwsSqsQueue:
        """
        Return the queue for a name, building it on first request.

        Args:
            name: SQS queue name
            force_reinitialize: Discard any cached queue and build a new one,
                for example after the settings object was changed

        Raises:
            ValueError: If the name is not a valid SQS queue name
        """
        queue = None if force_reinitialize else self._queues.get(name)
        if queue is None:
            config = self.settings.queue_config(name)
            queue = AwsSqsQueue(QueueClient(config, session=self.session))
            self._queues[name] = queue
            logger.debug(
                "Queue built",
                queue_name=name,
                claim_timeout=config.default_lease_seconds,
                wait_time_seconds=config.max_wait_seconds
            )
        return queue

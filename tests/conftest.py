"""
Module: conftest.py
Description: Shared pytest fixtures for SQS queue adapter tests.

Uses moto to mock SQS in-process. The code under test opens async
clients through an aioboto3 session; the fixtures here hand it an
equivalent session whose clients delegate to a moto-backed boto3 client.
"""

import boto3
import pytest
from moto import mock_aws
from pydantic_settings import SettingsConfigDict

from aws_sqs_queue.config.settings import QueueConfig, Settings
from aws_sqs_queue.sqs_queue.queue import AwsSqsQueue
from aws_sqs_queue.sqs_queue.sqs import QueueClient


class AsyncClientAdapter:
    """Async context manager exposing a sync boto3 client's methods as coroutines."""

    def __init__(self, client):
        self._client = client

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def __getattr__(self, name):
        method = getattr(self._client, name)

        async def call(**kwargs):
            return method(**kwargs)

        return call


class FakeSession:
    """Stand-in for aioboto3.Session that records client() calls."""

    def __init__(self, client):
        self._client = client
        self.client_calls = []

    def client(self, service_name, **kwargs):
        self.client_calls.append((service_name, kwargs))
        return AsyncClientAdapter(self._client)


class TestSettings(Settings):
    """Settings that ignore the environment and .env files."""

    model_config = SettingsConfigDict(
        env_file=None,  # Disable .env file loading for tests
        env_prefix="AWS_SQS_TEST_UNUSED_",
        case_sensitive=False,
        extra="ignore"
    )


@pytest.fixture
def test_settings():
    """Provide predictable settings for tests."""
    return TestSettings(
        aws_key="testing",
        aws_secret="testing",
        region="us-east-1",
        claim_timeout=45,
        wait_time_seconds=1,
    )


@pytest.fixture
def queue_config():
    """
    Provide a QueueConfig with a short max wait.

    A one second ceiling keeps empty-queue claims fast against moto.
    """
    return QueueConfig(
        name="test-queue",
        default_lease_seconds=45,
        max_wait_seconds=1,
        region="us-east-1",
    )


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake AWS credentials so nothing can reach a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def sqs_backend(aws_credentials):
    """Moto-backed boto3 SQS client."""
    with mock_aws():
        yield boto3.client("sqs", region_name="us-east-1")


@pytest.fixture
def fake_session(sqs_backend):
    """Session whose async clients talk to the moto backend."""
    return FakeSession(sqs_backend)


@pytest.fixture
def sqs_client(queue_config, fake_session):
    """QueueClient wired to moto."""
    return QueueClient(queue_config, session=fake_session)


@pytest.fixture
def aws_queue(sqs_client):
    """AwsSqsQueue wired to moto."""
    return AwsSqsQueue(sqs_client)

"""
Module: settings.py
Description: Queue configuration using pydantic-settings.

Loads AWS credentials, region and claim/wait timeouts from environment
variables (prefixed with AWS_SQS_) or a .env file, and turns them into
per-queue QueueConfig objects that are passed explicitly to clients.
"""

import re
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# SQS hard limits
MAX_WAIT_SECONDS = 20
MAX_VISIBILITY_TIMEOUT = 43_200  # 12 hours
DEFAULT_CLAIM_TIMEOUT = 45

_QUEUE_NAME_RE = re.compile(r"^[A-Za-z0-9_-]{1,80}$")
_REGION_RE = re.compile(r"^[a-z]{2}(-gov)?-[a-z]+-\d$")


class QueueConfig(BaseModel):
    """
    Connection and claim parameters for a single named queue.

    Attributes:
        name: Logical queue name (also the SQS queue name)
        default_lease_seconds: Visibility timeout used when a claim requests none
        max_wait_seconds: Ceiling on long-poll wait for one claim
        region: AWS region hosting the queue
        aws_access_key_id: Optional explicit access key
        aws_secret_access_key: Optional explicit secret key
        endpoint_url: Optional endpoint for SQS-compatible services
        connect_timeout: HTTP connect timeout in seconds
        read_timeout: HTTP read timeout in seconds (must outlast the long poll)
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(..., description="Queue name")
    default_lease_seconds: int = Field(
        default=DEFAULT_CLAIM_TIMEOUT,
        ge=0,
        le=MAX_VISIBILITY_TIMEOUT,
    )
    max_wait_seconds: int = Field(default=MAX_WAIT_SECONDS, ge=0, le=MAX_WAIT_SECONDS)
    region: str = Field(default="us-east-1")
    aws_access_key_id: Optional[str] = Field(default=None, repr=False)
    aws_secret_access_key: Optional[str] = Field(default=None, repr=False)
    endpoint_url: Optional[str] = None
    connect_timeout: float = Field(default=3.0, gt=0)
    read_timeout: float = Field(default=70.0, gt=MAX_WAIT_SECONDS)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate the name against SQS standard queue naming rules."""
        if not _QUEUE_NAME_RE.match(v):
            raise ValueError(
                "queue name must be 1-80 letters, numbers, hyphens or underscores"
            )
        return v


class Settings(BaseSettings):
    """Adapter settings loaded from AWS_SQS_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="AWS_SQS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    aws_key: Optional[str] = Field(default=None, description="AWS access key ID")
    aws_secret: Optional[str] = Field(default=None, description="AWS secret access key")
    region: str = Field(default="us-east-1", description="AWS region of the queues")
    endpoint_url: Optional[str] = Field(
        default=None,
        description="Override endpoint for SQS-compatible services",
    )
    claim_timeout: int = Field(
        default=DEFAULT_CLAIM_TIMEOUT,
        ge=0,
        le=MAX_VISIBILITY_TIMEOUT,
        description="Default visibility timeout for claimed items (seconds)",
    )
    wait_time_seconds: int = Field(
        default=MAX_WAIT_SECONDS,
        ge=0,
        le=MAX_WAIT_SECONDS,
        description="Maximum long-poll wait per claim (seconds)",
    )
    connect_timeout: float = Field(default=3.0, gt=0)
    read_timeout: float = Field(default=70.0, gt=MAX_WAIT_SECONDS)
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("region")
    @classmethod
    def validate_region(cls, v: str) -> str:
        """Validate region looks like an AWS region code."""
        v = v.strip().lower()
        if not _REGION_RE.match(v):
            raise ValueError(f"region is not a valid AWS region code: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    def queue_config(self, name: str) -> QueueConfig:
        """Build the QueueConfig for the named queue."""
        return QueueConfig(
            name=name,
            default_lease_seconds=self.claim_timeout,
            max_wait_seconds=self.wait_time_seconds,
            region=self.region,
            aws_access_key_id=self.aws_key,
            aws_secret_access_key=self.aws_secret,
            endpoint_url=self.endpoint_url,
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
        )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded on first use."""
    return Settings()

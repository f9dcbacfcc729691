"""
Module: planner.py
Description: Long-poll planning for a single claim attempt.

A receive call takes two durations: how long to wait for a message to
arrive and how long to keep it hidden once received. Waiting longer than
the caller can hold the claim is pointless, so the wait is clamped to
the visibility timeout. A zero timeout means a non-blocking poll.
"""

from typing import NamedTuple


class ClaimPlan(NamedTuple):
    """Effective receive parameters for one claim attempt."""

    wait_seconds: int
    visibility_timeout: int


def plan_claim(requested_lease: int, default_lease: int, max_wait: int) -> ClaimPlan:
    """
    Compute wait time and visibility timeout for one claim.

    Args:
        requested_lease: Lease asked for by the caller; 0 means "use the default"
        default_lease: Configured default visibility timeout
        max_wait: Configured ceiling on the long-poll wait

    Returns:
        ClaimPlan with wait_seconds = min(visibility_timeout, max_wait)

    Raises:
        ValueError: If any argument is negative

    Example:
        >>> plan_claim(0, 45, 20)
        ClaimPlan(wait_seconds=20, visibility_timeout=45)
        >>> plan_claim(5, 45, 20)
        ClaimPlan(wait_seconds=5, visibility_timeout=5)
    """
    for label, value in (
        ("requested_lease", requested_lease),
        ("default_lease", default_lease),
        ("max_wait", max_wait),
    ):
        if value < 0:
            raise ValueError(f"{label} must be non-negative, got {value}")

    visibility_timeout = requested_lease if requested_lease > 0 else default_lease
    wait_seconds = max_wait
    if visibility_timeout < wait_seconds:
        wait_seconds = visibility_timeout

    return ClaimPlan(wait_seconds=wait_seconds, visibility_timeout=visibility_timeout)

"""
Module: test_planner.py
Description: Unit tests for claim planning.

Covers lease defaulting, wait clamping and the non-blocking poll when no
lease is available. No AWS access is needed.
"""

import itertools

import pytest

from aws_sqs_queue.sqs_queue.planner import ClaimPlan, plan_claim


class TestPlanClaim:
    """Test cases for plan_claim()."""

    def test_default_lease_longer_than_max_wait(self):
        """Test default lease is used and wait stays at the ceiling."""
        assert plan_claim(0, 45, 20) == ClaimPlan(wait_seconds=20, visibility_timeout=45)

    def test_short_requested_lease_clamps_wait(self):
        """Test wait is clamped to a requested lease below the ceiling."""
        assert plan_claim(5, 45, 20) == ClaimPlan(wait_seconds=5, visibility_timeout=5)

    def test_zero_lease_means_non_blocking_poll(self):
        """Test no lease and no default gives a zero wait."""
        assert plan_claim(0, 0, 20) == ClaimPlan(wait_seconds=0, visibility_timeout=0)

    def test_requested_lease_overrides_default(self):
        """Test a positive requested lease wins over the default."""
        plan = plan_claim(600, 45, 20)
        assert plan.visibility_timeout == 600
        assert plan.wait_seconds == 20

    def test_zero_max_wait_never_blocks(self):
        """Test max_wait of zero disables long polling."""
        assert plan_claim(30, 45, 0).wait_seconds == 0

    def test_lease_equal_to_max_wait(self):
        """Test boundary where lease equals the wait ceiling."""
        assert plan_claim(20, 45, 20) == ClaimPlan(wait_seconds=20, visibility_timeout=20)

    @pytest.mark.parametrize("args", [(-1, 45, 20), (0, -5, 20), (0, 45, -1)])
    def test_negative_inputs_rejected(self, args):
        """Test negative durations are rejected."""
        with pytest.raises(ValueError, match="must be non-negative"):
            plan_claim(*args)

    def test_plan_matches_min_rule_for_all_small_inputs(self):
        """Test the min(timeout, max_wait) rule over a grid of inputs."""
        for requested, default, max_wait in itertools.product(range(0, 25, 3), repeat=3):
            plan = plan_claim(requested, default, max_wait)
            expected_timeout = requested if requested > 0 else default
            assert plan.visibility_timeout == expected_timeout
            assert plan.wait_seconds == min(expected_timeout, max_wait)
            if expected_timeout == 0:
                assert plan.wait_seconds == 0

    def test_plan_is_deterministic(self):
        """Test repeated calls return equal plans."""
        assert plan_claim(7, 45, 20) == plan_claim(7, 45, 20)

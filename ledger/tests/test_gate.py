"""
Tests for the generation gate.

The boolean depends only on used < limit; the plan only picks the reason.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from ledger.gate import GateReason, evaluate_gate


class TestAllowed:

    @pytest.mark.parametrize("used,limit", [
        (0, 10), (9, 10), (10, 10), (11, 10), (0, 0), (49, 50), (130, 130),
    ])
    @pytest.mark.parametrize("plan", ["free", "basic", "pro"])
    def test_allowed_is_used_below_limit(self, used, limit, plan):
        assert evaluate_gate(used, limit, plan).allowed == (used < limit)

    def test_default_plan_is_free(self):
        decision = evaluate_gate(10, 10)
        assert decision.reason is GateReason.UPSELL


class TestReasons:

    def test_within_limit(self):
        decision = evaluate_gate(3, 10, "free")
        assert decision.reason is GateReason.WITHIN_LIMIT
        assert decision.remaining == 7
        assert "7 of 10" in decision.message

    def test_free_blocked_upsells(self):
        decision = evaluate_gate(10, 10, "free")
        assert not decision.allowed
        assert decision.reason is GateReason.UPSELL
        assert "Upgrade" in decision.message

    @pytest.mark.parametrize("plan,limit", [("basic", 50), ("pro", 130)])
    def test_paid_blocked_waits_for_reset(self, plan, limit):
        decision = evaluate_gate(limit, limit, plan)
        assert not decision.allowed
        assert decision.reason is GateReason.AWAIT_RESET
        assert f"limit of {limit}" in decision.message

    def test_over_limit_remaining_clamped(self):
        # A cross-session race can push usage one past the limit
        assert evaluate_gate(11, 10).remaining == 0

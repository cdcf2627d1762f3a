"""Allow/deny decision for starting a new generation."""

from dataclasses import dataclass
from enum import Enum

from ledger.plans import DEFAULT_PLAN, Plan, parse_plan


class GateReason(str, Enum):
    WITHIN_LIMIT = "within_limit"
    UPSELL = "upsell"              # free plan exhausted, offer paid tiers
    AWAIT_RESET = "await_reset"    # paid plan exhausted until the cycle resets


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    reason: GateReason
    designs_used: int
    designs_limit: int

    @property
    def remaining(self) -> int:
        return max(0, self.designs_limit - self.designs_used)

    @property
    def message(self) -> str:
        if self.reason is GateReason.UPSELL:
            return (
                "You've unlocked all your free transformations. Upgrade to a "
                "premium plan to continue reimagining your home with up to "
                "130 designs per month."
            )
        if self.reason is GateReason.AWAIT_RESET:
            return (
                f"You've reached your monthly limit of {self.designs_limit} "
                "designs. Your account will reset at the start of your next "
                "billing cycle."
            )
        return f"{self.remaining} of {self.designs_limit} designs remaining this month."


def evaluate_gate(designs_used: int, designs_limit: int, plan=DEFAULT_PLAN) -> GateDecision:
    """
    Decide whether one more generation may start.

    Only the counts decide `allowed`. The plan selects the blocked reason
    shown to the user and nothing else.
    """
    allowed = designs_used < designs_limit
    if allowed:
        reason = GateReason.WITHIN_LIMIT
    elif parse_plan(plan) is Plan.FREE:
        reason = GateReason.UPSELL
    else:
        reason = GateReason.AWAIT_RESET
    return GateDecision(
        allowed=allowed,
        reason=reason,
        designs_used=designs_used,
        designs_limit=designs_limit,
    )

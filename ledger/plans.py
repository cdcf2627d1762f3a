"""
Subscription plans and the values derived from them.

The monthly design limit, subscription status and catalog details are all
fixed functions of the plan. Nothing here stores state.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from ledger.errors import ValidationError


class Plan(str, Enum):
    FREE = "free"
    BASIC = "basic"
    PRO = "pro"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


# Generations allowed per billing cycle
PLAN_LIMITS: Dict[Plan, int] = {
    Plan.FREE: 10,
    Plan.BASIC: 50,
    Plan.PRO: 130,
}

DEFAULT_PLAN = Plan.FREE


@dataclass(frozen=True)
class PlanDetails:
    """Catalog entry shown on the pricing page and subscription overlay."""
    plan: Plan
    name: str
    price: str
    description: str
    highlights: List[str]
    style_library: Optional[int]  # None = unlimited
    priority_processing: bool = False
    commercial_use: bool = False
    cadence: str = "/month"

    @property
    def designs_limit(self) -> int:
        return PLAN_LIMITS[self.plan]


PLAN_CATALOG: Dict[Plan, PlanDetails] = {
    Plan.FREE: PlanDetails(
        plan=Plan.FREE,
        name="Free",
        price="₹0",
        description="Try DeclutterAI and generate a few designs.",
        highlights=["10 designs/month", "Basic room analysis", "Standard AI chat"],
        style_library=2,
    ),
    Plan.BASIC: PlanDetails(
        plan=Plan.BASIC,
        name="Basic",
        price="₹1,499",
        description="Perfect for light home updates.",
        highlights=[
            "50 designs/month",
            "Standard processing speed",
            "Limited style library",
            "Standard AI chat access",
        ],
        style_library=6,
    ),
    Plan.PRO: PlanDetails(
        plan=Plan.PRO,
        name="Pro",
        price="₹3,499",
        description="The ultimate design experience.",
        highlights=[
            "130 designs/month",
            "Priority processing (5x faster)",
            "All premium style presets",
            "Advanced AI Designer chat",
            "Commercial license",
        ],
        style_library=None,
        priority_processing=True,
        commercial_use=True,
    ),
}


def parse_plan(value) -> Plan:
    """
    Coerce a plan name (or Plan) to a Plan.

    Raises:
        ValidationError: if the value names no known plan.
    """
    if isinstance(value, Plan):
        return value
    try:
        return Plan(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Unknown plan '{value}'. Must be one of: {[p.value for p in Plan]}"
        ) from None


def designs_limit(plan) -> int:
    """Monthly generation limit for a plan."""
    return PLAN_LIMITS[parse_plan(plan)]


def subscription_status(plan) -> SubscriptionStatus:
    """Free accounts are inactive, every paid plan is active."""
    if parse_plan(plan) is Plan.FREE:
        return SubscriptionStatus.INACTIVE
    return SubscriptionStatus.ACTIVE


@dataclass(frozen=True)
class PlanFields:
    """The four account fields a plan change writes as one group."""
    plan: Plan
    designs_limit: int
    subscription_status: SubscriptionStatus
    subscription_start_date: Optional[datetime] = field(default=None)


def plan_fields(plan, now: Optional[datetime] = None) -> PlanFields:
    """
    Derive the plan-change field group.

    Args:
        plan: Target plan (name or Plan)
        now: Start date for paid plans; defaults to the current UTC time

    Returns:
        PlanFields with limit and status from the fixed mapping. The start
        date is cleared for the free plan.
    """
    plan = parse_plan(plan)
    if plan is Plan.FREE:
        start = None
    else:
        start = now or datetime.now(timezone.utc)
    return PlanFields(
        plan=plan,
        designs_limit=PLAN_LIMITS[plan],
        subscription_status=subscription_status(plan),
        subscription_start_date=start,
    )


def list_plans() -> List[PlanDetails]:
    """Catalog entries in ascending price order."""
    return [PLAN_CATALOG[p] for p in Plan]

"""User account record as seen by the usage ledger."""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ledger.plans import (
    DEFAULT_PLAN,
    PLAN_LIMITS,
    Plan,
    PlanFields,
    SubscriptionStatus,
    subscription_status,
)


@dataclass(frozen=True)
class UserAccount:
    """
    Metering view of a user.

    designs_limit and subscription_status are derived from the plan so they
    can never disagree with it.
    """
    id: str
    email: str = ""
    display_name: Optional[str] = None
    plan: Plan = DEFAULT_PLAN
    designs_used: int = 0
    subscription_start_date: Optional[datetime] = None

    @property
    def designs_limit(self) -> int:
        return PLAN_LIMITS[self.plan]

    @property
    def subscription_status(self) -> SubscriptionStatus:
        return subscription_status(self.plan)

    def with_plan(self, fields: PlanFields) -> "UserAccount":
        return replace(
            self,
            plan=fields.plan,
            subscription_start_date=fields.subscription_start_date,
        )


def default_account(user_id: str, email: str = "", display_name: Optional[str] = None) -> UserAccount:
    """A new free account with no usage."""
    return UserAccount(id=user_id, email=email, display_name=display_name)

"""
Process-local fallback snapshot of each user's usage and plan.

The remote store is authoritative. Entries here only mask transient remote
failures and are replaced wholesale whenever the remote store answers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ledger.account import UserAccount
from ledger.plans import PLAN_LIMITS, Plan


class SyncStatus(str, Enum):
    CONFIRMED = "confirmed"        # last written from a remote success
    UNCONFIRMED = "unconfirmed"    # locally incremented while the remote was down


@dataclass(frozen=True)
class CacheEntry:
    designs_used: int
    plan: Plan
    status: SyncStatus = SyncStatus.CONFIRMED

    @property
    def designs_limit(self) -> int:
        return PLAN_LIMITS[self.plan]


class LocalFallbackCache:
    """Per-user cache keyed by identity-provider user id."""

    def __init__(self):
        self._entries: dict[str, CacheEntry] = {}

    def get(self, user_id: str) -> Optional[CacheEntry]:
        return self._entries.get(user_id)

    def store_confirmed(self, account: UserAccount) -> CacheEntry:
        """Overwrite the entry with values the remote store just returned."""
        entry = CacheEntry(designs_used=account.designs_used, plan=account.plan)
        self._entries[account.id] = entry
        return entry

    def store_confirmed_usage(self, user_id: str, designs_used: int, plan: Plan) -> CacheEntry:
        """Record a remote count. `plan` must itself have come from the store."""
        entry = CacheEntry(designs_used=designs_used, plan=plan)
        self._entries[user_id] = entry
        return entry

    def increment_local(self, user_id: str, plan: Plan) -> CacheEntry:
        """Add one unit locally, seeded from the last known count (else 0)."""
        current = self._entries.get(user_id)
        if current is not None:
            used, plan = current.designs_used, current.plan
        else:
            used = 0
        entry = CacheEntry(designs_used=used + 1, plan=plan, status=SyncStatus.UNCONFIRMED)
        self._entries[user_id] = entry
        return entry

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._entries

"""
Usage ledger: per-user generation counter, plan limits and the gate.

The remote account store is the record of truth. Reads and increments
degrade to the local fallback cache when it is unreachable so the user is
never blocked by a store outage. Plan changes never degrade: they either
land remotely or raise.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, TypeVar

from ledger.account import UserAccount, default_account
from ledger.cache import LocalFallbackCache, SyncStatus
from ledger.errors import AmbiguousWriteOutcome, RemoteUnavailable
from ledger.gate import GateDecision, evaluate_gate
from ledger.plans import DEFAULT_PLAN, plan_fields
from ledger.store import AccountStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 5.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UsageLedger:
    """Meters AI generations against plan limits for every user."""

    def __init__(
        self,
        store: AccountStore,
        cache: Optional[LocalFallbackCache] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.cache = cache if cache is not None else LocalFallbackCache()
        self.timeout = timeout
        self._clock = clock

    async def _remote(self, call: Awaitable[T], write: bool = False) -> T:
        """Await a store call, turning a timeout into a remote failure."""
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError:
            if write:
                # The write may still land after we stop waiting
                raise AmbiguousWriteOutcome(f"Store write timed out after {self.timeout}s") from None
            raise RemoteUnavailable(f"Store read timed out after {self.timeout}s") from None

    async def get_or_create_account(
        self,
        user_id: str,
        email: str,
        display_name: Optional[str] = None,
    ) -> UserAccount:
        """
        Fetch the user's account, creating a free one on first sight.

        Falls back to the cached snapshot (or a fresh free account) when the
        store is unavailable. A successful read always replaces the cache,
        even when the remote count is lower than a local guess.
        """
        try:
            account = await self._remote(self.store.get(user_id))
            if account is None:
                account = await self._remote(
                    self.store.create(user_id, email, display_name), write=True
                )
                logger.info("Created account for user %s", user_id)
        except RemoteUnavailable:
            logger.warning("Account store unavailable for user %s, using fallback", user_id, exc_info=True)
            return self._fallback_account(user_id, email, display_name)

        self.cache.store_confirmed(account)
        return account

    def _fallback_account(self, user_id: str, email: str, display_name: Optional[str]) -> UserAccount:
        entry = self.cache.get(user_id)
        if entry is None:
            return default_account(user_id, email, display_name)
        return UserAccount(
            id=user_id,
            email=email,
            display_name=display_name,
            plan=entry.plan,
            designs_used=entry.designs_used,
        )

    async def increment_usage(self, user_id: str) -> int:
        """
        Record one completed generation and return the new count.

        Call once per successful generation, never before it succeeds. On a
        store failure the cached count is bumped instead and marked
        unconfirmed; the call is never retried because a timed-out write may
        already have been applied.
        """
        try:
            designs_used = await self._remote(self.store.increment_designs_used(user_id), write=True)
        except RemoteUnavailable as e:
            local = self.cache.increment_local(user_id, DEFAULT_PLAN)
            logger.warning(
                "Usage increment for user %s not confirmed (%s), counting locally: %d",
                user_id, type(e).__name__, local.designs_used,
            )
            return local.designs_used

        entry = self.cache.get(user_id)
        if entry is not None and entry.status is SyncStatus.CONFIRMED:
            self.cache.store_confirmed_usage(user_id, designs_used, entry.plan)
        else:
            # No plan the store has vouched for: re-read rather than guess one
            await self._refresh(user_id)
        return designs_used

    async def _refresh(self, user_id: str) -> None:
        try:
            account = await self._remote(self.store.get(user_id))
        except RemoteUnavailable:
            logger.warning("Could not re-read account for user %s after increment", user_id, exc_info=True)
            return
        if account is not None:
            self.cache.store_confirmed(account)

    async def apply_plan_change(self, user_id: str, new_plan) -> UserAccount:
        """
        Move a user to a new plan.

        Plan, limit, status and start date are written as one update. On any
        failure nothing changes locally and the error propagates.

        Raises:
            ValidationError: unknown plan (nothing is written)
            RemoteUnavailable: the store rejected or could not take the write
            AmbiguousWriteOutcome: the write may or may not have landed
        """
        fields = plan_fields(new_plan, now=self._clock())
        try:
            account = await self._remote(self.store.update_plan(user_id, fields), write=True)
        except RemoteUnavailable:
            logger.error("Plan change to %s failed for user %s", fields.plan.value, user_id, exc_info=True)
            raise

        self.cache.store_confirmed(account)
        logger.info("User %s moved to plan %s", user_id, account.plan.value)
        return account

    def gate(self, account: UserAccount) -> GateDecision:
        return evaluate_gate(account.designs_used, account.designs_limit, account.plan)

    def sync_status(self, user_id: str) -> Optional[SyncStatus]:
        """Whether the last known count for a user came from the store."""
        entry = self.cache.get(user_id)
        return entry.status if entry is not None else None

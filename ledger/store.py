"""Remote account store contract and an in-process implementation."""

import asyncio
from dataclasses import replace
from typing import Optional, Protocol

from ledger.account import UserAccount, default_account
from ledger.errors import AccountNotFound
from ledger.plans import PlanFields


class AccountStore(Protocol):
    """
    Operations the ledger needs from the persistent account store.

    Implementations raise RemoteUnavailable (or a subclass) for every
    transport or backend failure.
    """

    async def get(self, user_id: str) -> Optional[UserAccount]:
        ...

    async def create(self, user_id: str, email: str, display_name: Optional[str] = None) -> UserAccount:
        ...

    async def increment_designs_used(self, user_id: str) -> int:
        """Atomically add one to designs_used and return the new value."""
        ...

    async def update_plan(self, user_id: str, fields: PlanFields) -> UserAccount:
        """Write all plan fields in one atomic update."""
        ...


class InMemoryAccountStore:
    """Account store held in a dict. Used for development and tests."""

    def __init__(self):
        self._accounts: dict[str, UserAccount] = {}
        self._lock = asyncio.Lock()

    async def get(self, user_id: str) -> Optional[UserAccount]:
        async with self._lock:
            return self._accounts.get(user_id)

    async def create(self, user_id: str, email: str, display_name: Optional[str] = None) -> UserAccount:
        async with self._lock:
            # A concurrent create for the same id keeps the first row
            return self._accounts.setdefault(
                user_id, default_account(user_id, email, display_name)
            )

    async def increment_designs_used(self, user_id: str) -> int:
        async with self._lock:
            account = self._require(user_id)
            account = replace(account, designs_used=account.designs_used + 1)
            self._accounts[user_id] = account
            return account.designs_used

    async def update_plan(self, user_id: str, fields: PlanFields) -> UserAccount:
        async with self._lock:
            account = self._require(user_id).with_plan(fields)
            self._accounts[user_id] = account
            return account

    def _require(self, user_id: str) -> UserAccount:
        account = self._accounts.get(user_id)
        if account is None:
            raise AccountNotFound(user_id)
        return account

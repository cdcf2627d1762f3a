"""Plan gate dependencies for routes that consume a generation."""

from fastapi import Depends, HTTPException, status

from backend.analytics import track
from backend.auth import Identity, get_current_identity
from backend.state import get_ledger
from ledger.account import UserAccount
from ledger.usage import UsageLedger


async def get_current_account(
    identity: Identity = Depends(get_current_identity),
    ledger: UsageLedger = Depends(get_ledger),
) -> UserAccount:
    """FastAPI dependency: the caller's account, created on first sight."""
    return await ledger.get_or_create_account(
        identity.user_id, identity.email, identity.display_name
    )


def require_generation_allowance():
    """Return a FastAPI dependency that blocks callers who have used up their plan."""
    async def _check(
        account: UserAccount = Depends(get_current_account),
        ledger: UsageLedger = Depends(get_ledger),
    ):
        decision = ledger.gate(account)
        if not decision.allowed:
            track(
                "generation_blocked",
                account.id,
                plan=account.plan.value,
                reason=decision.reason.value,
                designs_used=decision.designs_used,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "reason": decision.reason.value,
                    "message": decision.message,
                    "designs_used": decision.designs_used,
                    "designs_limit": decision.designs_limit,
                },
            )
        return account
    return _check

"""Account routes: current usage, plan gate and the plan catalog."""

from fastapi import APIRouter, Depends

from backend.middleware.tier_check import get_current_account
from backend.models import AccountResponse, GateResponse, PlanResponse
from backend.state import get_ledger
from ledger.account import UserAccount
from ledger.plans import list_plans
from ledger.usage import UsageLedger

router = APIRouter()


@router.get("/account", response_model=AccountResponse)
async def get_account(
    account: UserAccount = Depends(get_current_account),
    ledger: UsageLedger = Depends(get_ledger),
):
    """Get (or create) the signed-in user's account with its gate decision."""
    return AccountResponse.from_account(account, ledger.gate(account))


@router.get("/account/gate", response_model=GateResponse)
async def get_gate(
    account: UserAccount = Depends(get_current_account),
    ledger: UsageLedger = Depends(get_ledger),
):
    """May the signed-in user start another generation?"""
    return GateResponse.from_decision(ledger.gate(account))


@router.get("/plans", response_model=list[PlanResponse])
async def get_plans():
    """Public plan catalog for the pricing page."""
    return [PlanResponse.from_details(d) for d in list_plans()]

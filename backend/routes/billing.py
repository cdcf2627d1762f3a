"""Billing routes: Stripe checkout for upgrades, webhook-driven plan changes."""

import logging
from typing import Optional

import stripe
from fastapi import APIRouter, Depends, Header, HTTPException, Request

from backend import config
from backend.analytics import track
from backend.middleware.tier_check import get_current_account
from backend.models import AccountResponse, CheckoutRequest, CheckoutResponse, PlanChangeRequest
from backend.state import get_ledger
from ledger.account import UserAccount
from ledger.errors import AmbiguousWriteOutcome, RemoteUnavailable, ValidationError
from ledger.plans import Plan, parse_plan
from ledger.usage import UsageLedger

logger = logging.getLogger(__name__)

router = APIRouter()

# Subscription states that no longer entitle the customer to a paid plan
ENDED_SUBSCRIPTION_STATES = {"canceled", "unpaid", "incomplete_expired"}


async def _apply(ledger: UsageLedger, user_id: str, plan) -> UserAccount:
    """Apply a plan change, mapping ledger errors to HTTP errors."""
    track("upgrade_started", user_id, plan=str(getattr(plan, "value", plan)))
    try:
        account = await ledger.apply_plan_change(user_id, plan)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AmbiguousWriteOutcome:
        track("upgrade_unconfirmed", user_id)
        raise HTTPException(status_code=503, detail="Plan change could not be confirmed. Please try again shortly.")
    except RemoteUnavailable:
        track("upgrade_failed", user_id)
        raise HTTPException(status_code=503, detail="Plan change failed. Please try again shortly.")
    track("upgrade_success", user_id, plan=account.plan.value)
    return account


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout_session(
    body: CheckoutRequest,
    account: UserAccount = Depends(get_current_account),
):
    """Start a Stripe checkout for a paid plan. The plan changes only once payment is confirmed.

    Resolving the account creates its row before the customer pays.
    """
    if not config.STRIPE_SECRET_KEY:
        raise HTTPException(status_code=500, detail="Stripe not configured")

    try:
        plan = parse_plan(body.plan)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if plan is Plan.FREE:
        raise HTTPException(status_code=400, detail="The free plan needs no checkout")

    stripe.api_key = config.STRIPE_SECRET_KEY
    metadata = {"user_id": account.id, "plan": plan.value}
    frontend = config.FRONTEND_URL or "http://localhost:3000"
    try:
        session = stripe.checkout.Session.create(
            mode="subscription",
            line_items=[{"price": config.STRIPE_PRICE_IDS[plan.value], "quantity": 1}],
            client_reference_id=account.id,
            customer_email=account.email or None,
            metadata=metadata,
            subscription_data={"metadata": metadata},
            success_url=frontend + "/?checkout=success",
            cancel_url=frontend + "/?checkout=canceled",
        )
    except stripe.StripeError:
        logger.error("Stripe checkout creation failed for user %s", account.id, exc_info=True)
        raise HTTPException(status_code=502, detail="Stripe error")

    track("checkout_started", account.id, plan=plan.value)
    return CheckoutResponse(checkout_url=session.url)


def _customer_email(obj) -> str:
    details = obj.get("customer_details") or {}
    return obj.get("customer_email") or details.get("email") or ""


def _plan_for_event(event) -> Optional[tuple[str, str]]:
    """Return (user_id, plan) a webhook event asks for, or None if it is irrelevant."""
    event_type = event["type"]
    obj = event["data"]["object"]
    metadata = obj.get("metadata") or {}
    user_id = metadata.get("user_id") or obj.get("client_reference_id")
    if not user_id:
        return None

    if event_type == "checkout.session.completed":
        if obj.get("payment_status") not in ("paid", "no_payment_required"):
            return None
        return user_id, metadata.get("plan", "")
    if event_type == "customer.subscription.deleted":
        return user_id, Plan.FREE.value
    if event_type == "customer.subscription.updated":
        if obj.get("status") in ENDED_SUBSCRIPTION_STATES:
            return user_id, Plan.FREE.value
        return user_id, metadata.get("plan", "")
    return None


@router.post("/webhook/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    ledger: UsageLedger = Depends(get_ledger),
):
    """Handle Stripe webhook events. The only path that changes a paid plan in production."""
    if not config.STRIPE_SECRET_KEY or not config.STRIPE_WEBHOOK_SECRET:
        raise HTTPException(status_code=500, detail="Stripe not configured")

    stripe.api_key = config.STRIPE_SECRET_KEY
    payload = await request.body()

    if not stripe_signature:
        raise HTTPException(status_code=400, detail="Missing Stripe signature")

    try:
        event = stripe.Webhook.construct_event(
            payload, stripe_signature, config.STRIPE_WEBHOOK_SECRET
        )
    except stripe.SignatureVerificationError:
        raise HTTPException(status_code=400, detail="Invalid signature")
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload")

    change = _plan_for_event(event)
    if change is None:
        return {"status": "ignored"}

    user_id, plan = change
    # Payment can arrive for a user whose row was never written
    await ledger.get_or_create_account(user_id, _customer_email(event["data"]["object"]))
    # A 503 here makes Stripe redeliver the event
    account = await _apply(ledger, user_id, plan)
    logger.info("Stripe event %s applied plan %s to user %s", event["type"], account.plan.value, user_id)
    return {"status": "ok", "plan": account.plan.value}


@router.post("/dev/plan", response_model=AccountResponse)
async def change_plan_directly(
    body: PlanChangeRequest,
    account: UserAccount = Depends(get_current_account),
    ledger: UsageLedger = Depends(get_ledger),
):
    """Switch plans without payment. Enabled only for local development."""
    if not config.ALLOW_DIRECT_PLAN_CHANGE:
        raise HTTPException(status_code=404, detail="Not found")
    updated = await _apply(ledger, account.id, body.plan)
    return AccountResponse.from_account(updated, ledger.gate(updated))

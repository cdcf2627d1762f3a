"""Generation route: room photo → AI analysis, metered against the plan."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from backend.ai.analyzer import AnalysisError, RoomAnalyzer
from backend.analytics import track
from backend.middleware.tier_check import require_generation_allowance
from backend.models import AnalyzeRoomRequest, AnalyzeRoomResponse
from backend.state import get_analyzer, get_ledger
from ledger.account import UserAccount
from ledger.cache import SyncStatus
from ledger.gate import evaluate_gate
from ledger.usage import UsageLedger

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/analyze-room", response_model=AnalyzeRoomResponse)
async def analyze_room(
    body: AnalyzeRoomRequest,
    account: UserAccount = Depends(require_generation_allowance()),
    ledger: UsageLedger = Depends(get_ledger),
    analyzer: RoomAnalyzer = Depends(get_analyzer),
):
    """Analyze a room photo and record one generation against the caller's plan."""
    try:
        analysis = await analyzer.analyze(
            body.image_base64,
            body.media_type.value,
            body.mode.value,
            account.plan.value,
            body.instructions,
        )
    except AnalysisError as e:
        logger.warning("Analysis failed for user %s: %s", account.id, e)
        raise HTTPException(
            status_code=502,
            detail="AI couldn't see the room clearly. Try another photo.",
        )

    # Only after the analysis succeeded, and exactly once
    designs_used = await ledger.increment_usage(account.id)
    # A failed increment always leaves an unconfirmed entry behind
    confirmed = ledger.sync_status(account.id) is not SyncStatus.UNCONFIRMED
    if not confirmed:
        track("usage_unconfirmed", account.id, designs_used=designs_used)
    track("generation_completed", account.id, mode=body.mode.value, plan=account.plan.value)

    decision = evaluate_gate(designs_used, account.designs_limit, account.plan)
    return AnalyzeRoomResponse(
        analysis=analysis,
        designs_used=designs_used,
        designs_limit=account.designs_limit,
        usage_confirmed=confirmed,
        can_generate_more=decision.allowed,
    )

"""Pydantic models for DeclutterAI API requests and responses."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ledger.account import UserAccount
from ledger.gate import GateDecision, GateReason
from ledger.plans import Plan, PlanDetails, SubscriptionStatus


# --- Enums ---

class TransformMode(str, Enum):
    RESTYLE = "restyle"
    REFURNISH = "refurnish"
    LIGHTING = "lighting"
    PAINT = "paint"
    FLOORING = "flooring"
    CUSTOM = "custom"


class ImageMediaType(str, Enum):
    JPEG = "image/jpeg"
    PNG = "image/png"
    WEBP = "image/webp"
    GIF = "image/gif"


# --- Room Analysis ---

class TopFix(BaseModel):
    title: str
    action: str


class FurnitureSuggestion(BaseModel):
    item: str
    move: str
    reason: str


class AnalysisResult(BaseModel):
    """AI analysis of one room photo."""
    clutter_level: str
    quick_summary: str
    top_fixes: list[TopFix] = Field(default_factory=list)
    furniture_tips: list[FurnitureSuggestion] = Field(default_factory=list)
    design_prompt: str


class AnalyzeRoomRequest(BaseModel):
    image_base64: str = Field(..., min_length=16, description="Room photo, base64 without data: prefix")
    media_type: ImageMediaType = ImageMediaType.JPEG
    mode: TransformMode = TransformMode.RESTYLE
    instructions: Optional[str] = Field(None, max_length=2000, description="Extra wishes for custom mode")


class AnalyzeRoomResponse(BaseModel):
    analysis: AnalysisResult
    designs_used: int
    designs_limit: int
    usage_confirmed: bool = Field(..., description="False when the count could not be saved remotely")
    can_generate_more: bool


# --- Account & Gate ---

class GateResponse(BaseModel):
    allowed: bool
    reason: GateReason
    message: str
    designs_used: int
    designs_limit: int
    remaining: int

    @classmethod
    def from_decision(cls, decision: GateDecision) -> GateResponse:
        return cls(
            allowed=decision.allowed,
            reason=decision.reason,
            message=decision.message,
            designs_used=decision.designs_used,
            designs_limit=decision.designs_limit,
            remaining=decision.remaining,
        )


class AccountResponse(BaseModel):
    id: str
    email: str
    display_name: Optional[str] = None
    plan: Plan
    designs_used: int
    designs_limit: int
    subscription_status: SubscriptionStatus
    subscription_start_date: Optional[datetime] = None
    gate: GateResponse

    @classmethod
    def from_account(cls, account: UserAccount, decision: GateDecision) -> AccountResponse:
        return cls(
            id=account.id,
            email=account.email,
            display_name=account.display_name,
            plan=account.plan,
            designs_used=account.designs_used,
            designs_limit=account.designs_limit,
            subscription_status=account.subscription_status,
            subscription_start_date=account.subscription_start_date,
            gate=GateResponse.from_decision(decision),
        )


# --- Plans & Billing ---

class PlanResponse(BaseModel):
    key: Plan
    name: str
    price: str
    cadence: str
    description: str
    highlights: list[str]
    designs_limit: int
    style_library: Optional[int] = Field(None, description="Number of styles; null means unlimited")
    priority_processing: bool
    commercial_use: bool

    @classmethod
    def from_details(cls, details: PlanDetails) -> PlanResponse:
        return cls(
            key=details.plan,
            name=details.name,
            price=details.price,
            cadence=details.cadence,
            description=details.description,
            highlights=list(details.highlights),
            designs_limit=details.designs_limit,
            style_library=details.style_library,
            priority_processing=details.priority_processing,
            commercial_use=details.commercial_use,
        )


class CheckoutRequest(BaseModel):
    plan: str = Field(..., description="Paid plan to subscribe to (basic or pro)")


class CheckoutResponse(BaseModel):
    checkout_url: str


class PlanChangeRequest(BaseModel):
    plan: str

import asyncio
import os
import sys

import pytest
from fastapi.testclient import TestClient
from jose import jwt

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from backend import config
from backend.ai.analyzer import AnalysisError
from backend.main import create_app
from backend.models import AnalysisResult, FurnitureSuggestion, TopFix
from backend.state import AppState
from ledger.errors import RemoteUnavailable
from ledger.store import InMemoryAccountStore
from ledger.usage import UsageLedger


SAMPLE_ANALYSIS = AnalysisResult(
    clutter_level="medium",
    quick_summary="A bright living room with too many small items on every surface.",
    top_fixes=[TopFix(title="Clear the coffee table", action="Keep only a tray and one plant.")],
    furniture_tips=[FurnitureSuggestion(item="Armchair", move="Angle toward the window", reason="Opens the walkway")],
    design_prompt="The same living room, decluttered, warm Scandinavian style, soft daylight.",
)


class FakeAnalyzer:
    def __init__(self):
        self.fail = False
        self.calls = []

    async def analyze(self, image_base64, media_type, mode, plan, instructions=None):
        self.calls.append({"mode": mode, "plan": plan, "media_type": media_type})
        if self.fail:
            raise AnalysisError("model returned garbage")
        return SAMPLE_ANALYSIS


class SwitchableStore(InMemoryAccountStore):
    """In-memory store whose increments can be made to fail."""

    def __init__(self):
        super().__init__()
        self.fail_increments = False
        self.fail_plan_updates = False

    async def increment_designs_used(self, user_id):
        if self.fail_increments:
            raise RemoteUnavailable("increment rejected")
        return await super().increment_designs_used(user_id)

    async def update_plan(self, user_id, fields):
        if self.fail_plan_updates:
            raise RemoteUnavailable("update rejected")
        return await super().update_plan(user_id, fields)


def make_token(user_id="user_123", email="asha@example.com", first_name="Asha"):
    claims = {"sub": user_id, "email": email}
    if first_name:
        claims["first_name"] = first_name
    return jwt.encode(claims, config.IDENTITY_JWT_SECRET, algorithm=config.IDENTITY_JWT_ALGORITHM)


def auth_headers(**kwargs):
    return {"Authorization": f"Bearer {make_token(**kwargs)}"}


def seed_usage(store, user_id, used, email="asha@example.com"):
    async def _seed():
        await store.create(user_id, email)
        for _ in range(used):
            await store.increment_designs_used(user_id)
    asyncio.run(_seed())


@pytest.fixture
def store():
    return SwitchableStore()


@pytest.fixture
def analyzer():
    return FakeAnalyzer()


@pytest.fixture
def ledger(store):
    return UsageLedger(store, timeout=1.0)


@pytest.fixture
def client(ledger, analyzer):
    app = create_app(AppState(ledger=ledger, analyzer=analyzer))
    with TestClient(app) as test_client:
        yield test_client

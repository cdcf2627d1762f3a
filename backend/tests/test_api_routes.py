"""
Tests for account, plan catalog and generation routes.

Validates:
1. Authentication is required and accounts are created on first sight
2. The gate blocks exhausted plans with the right reason
3. Generations are metered exactly once and only after success
4. Store outages never fail a delivered analysis
"""

import asyncio

from conftest import SAMPLE_ANALYSIS, auth_headers, seed_usage

ROOM = {"image_base64": "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAA", "media_type": "image/png", "mode": "restyle"}


class TestHealthAndAuth:

    def test_health(self, client):
        assert client.get("/api/health").json()["status"] == "healthy"

    def test_account_requires_token(self, client):
        assert client.get("/api/account").status_code == 401

    def test_bad_token_rejected(self, client):
        r = client.get("/api/account", headers={"Authorization": "Bearer not-a-jwt"})
        assert r.status_code == 401


class TestAccount:

    def test_first_visit_creates_free_account(self, client, store):
        r = client.get("/api/account", headers=auth_headers())
        assert r.status_code == 200
        body = r.json()
        assert body["plan"] == "free"
        assert body["designs_used"] == 0
        assert body["designs_limit"] == 10
        assert body["subscription_status"] == "inactive"
        assert body["display_name"] == "Asha"
        assert body["gate"]["allowed"] is True
        assert asyncio.run(store.get("user_123")) is not None

    def test_gate_blocked_free(self, client, store):
        seed_usage(store, "user_123", 10)
        r = client.get("/api/account/gate", headers=auth_headers())
        body = r.json()
        assert body["allowed"] is False
        assert body["reason"] == "upsell"
        assert body["remaining"] == 0


class TestPlans:

    def test_catalog(self, client):
        plans = client.get("/api/plans").json()
        assert [p["key"] for p in plans] == ["free", "basic", "pro"]
        assert [p["designs_limit"] for p in plans] == [10, 50, 130]
        assert plans[2]["style_library"] is None
        assert plans[1]["price"] == "₹1,499"


class TestAnalyzeRoom:

    def test_success_increments_once(self, client, store, analyzer):
        r = client.post("/api/analyze-room", json=ROOM, headers=auth_headers())
        assert r.status_code == 200
        body = r.json()
        assert body["analysis"]["design_prompt"] == SAMPLE_ANALYSIS.design_prompt
        assert body["designs_used"] == 1
        assert body["designs_limit"] == 10
        assert body["usage_confirmed"] is True
        assert body["can_generate_more"] is True
        assert asyncio.run(store.get("user_123")).designs_used == 1
        assert analyzer.calls[0]["plan"] == "free"

    def test_analysis_failure_records_nothing(self, client, store, analyzer):
        analyzer.fail = True
        r = client.post("/api/analyze-room", json=ROOM, headers=auth_headers())
        assert r.status_code == 502
        assert asyncio.run(store.get("user_123")).designs_used == 0

    def test_ninth_to_tenth_generation_closes_gate(self, client, store):
        seed_usage(store, "user_123", 9)
        r = client.post("/api/analyze-room", json=ROOM, headers=auth_headers())
        assert r.json()["designs_used"] == 10
        assert r.json()["can_generate_more"] is False

        r = client.post("/api/analyze-room", json=ROOM, headers=auth_headers())
        assert r.status_code == 403
        assert r.json()["detail"]["reason"] == "upsell"

    def test_blocked_call_skips_analysis(self, client, store, analyzer):
        seed_usage(store, "user_123", 10)
        client.post("/api/analyze-room", json=ROOM, headers=auth_headers())
        assert analyzer.calls == []

    def test_increment_outage_still_returns_analysis(self, client, store):
        seed_usage(store, "user_123", 4)
        store.fail_increments = True
        r = client.post("/api/analyze-room", json=ROOM, headers=auth_headers())
        assert r.status_code == 200
        body = r.json()
        assert body["designs_used"] == 5
        assert body["usage_confirmed"] is False
        # Next read: the store is authoritative again
        store.fail_increments = False
        assert client.get("/api/account", headers=auth_headers()).json()["designs_used"] == 4

    def test_invalid_mode_rejected(self, client):
        r = client.post("/api/analyze-room", json={**ROOM, "mode": "demolish"}, headers=auth_headers())
        assert r.status_code == 422

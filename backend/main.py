"""DeclutterAI Backend: FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend import config
from backend.middleware.rate_limit import RateLimitMiddleware
from backend.routes import account, billing, generation
from backend.state import AppState

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_state() -> AppState:
    """Wire the ledger to the SQL account store and the AI analyzer."""
    from backend.account_store import SQLAccountStore
    from backend.ai.analyzer import RoomAnalyzer
    from backend.database import init_db, make_engine, make_session_factory
    from ledger.usage import UsageLedger

    engine = make_engine()
    init_db(engine)
    store = SQLAccountStore(make_session_factory(engine))
    ledger = UsageLedger(store, timeout=config.STORE_TIMEOUT_SECONDS)
    return AppState(ledger=ledger, analyzer=RoomAnalyzer())


def create_app(state: Optional[AppState] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application startup and shutdown."""
        app.state.declutter = state or build_state()
        logger.info("DeclutterAI backend started")
        yield

    app = FastAPI(
        title="DeclutterAI API",
        description="AI interior design with metered subscription plans",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS: allow frontend origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.FRONTEND_URL] if config.FRONTEND_URL else [],
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting: 60 req/min general, 10 req/min AI, 5 req/min billing
    app.add_middleware(RateLimitMiddleware, requests_per_minute=60, ai_requests_per_minute=10)

    app.include_router(account.router, prefix="/api", tags=["Account"])
    app.include_router(generation.router, prefix="/api", tags=["Generation"])
    app.include_router(billing.router, prefix="/api", tags=["Billing"])

    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy", "service": "declutter-backend"}

    return app


app = create_app()

"""Runtime configuration read from the environment (.env is loaded first)."""

import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Hosted Postgres in production; SQLite file under data/ when unset
DATABASE_URL = os.getenv("DATABASE_URL", "")

# Identity provider session tokens
IDENTITY_JWT_SECRET = os.getenv("IDENTITY_JWT_SECRET", "declutter-dev-secret-change-in-production")
IDENTITY_JWT_ALGORITHM = os.getenv("IDENTITY_JWT_ALGORITHM", "HS256")
IDENTITY_JWT_AUDIENCE = os.getenv("IDENTITY_JWT_AUDIENCE") or None

# Upper bound on any single account store call
STORE_TIMEOUT_SECONDS = float(os.getenv("STORE_TIMEOUT_SECONDS", "5"))

# Room analysis
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")
ANALYSIS_MODEL = os.getenv("ANALYSIS_MODEL", "claude-sonnet-4-5-20250929")
ANALYSIS_MAX_TOKENS = int(os.getenv("ANALYSIS_MAX_TOKENS", "2000"))

# Billing
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET", "")
STRIPE_PRICE_IDS = {
    "basic": os.getenv("STRIPE_BASIC_PRICE_ID", "price_basic_placeholder"),
    "pro": os.getenv("STRIPE_PRO_PRICE_ID", "price_pro_placeholder"),
}

FRONTEND_URL = os.getenv("FRONTEND_URL", "")

# Lets a signed-in user switch plans without payment. Local development only.
ALLOW_DIRECT_PLAN_CHANGE = _flag("ALLOW_DIRECT_PLAN_CHANGE")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

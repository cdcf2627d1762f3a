"""
DeclutterAI usage ledger

Meters AI room generations against subscription plan limits, decides
whether a user may start another generation, and keeps working from a local
snapshot while the remote account store is unreachable.

No web framework or database code lives here.
"""

from ledger.account import UserAccount, default_account
from ledger.cache import CacheEntry, LocalFallbackCache, SyncStatus
from ledger.errors import (
    AccountNotFound,
    AmbiguousWriteOutcome,
    LedgerError,
    RemoteUnavailable,
    ValidationError,
)
from ledger.gate import GateDecision, GateReason, evaluate_gate
from ledger.plans import (
    PLAN_CATALOG,
    PLAN_LIMITS,
    Plan,
    PlanDetails,
    PlanFields,
    SubscriptionStatus,
    designs_limit,
    list_plans,
    parse_plan,
    plan_fields,
    subscription_status,
)
from ledger.store import AccountStore, InMemoryAccountStore
from ledger.usage import UsageLedger

__version__ = "0.1.0"

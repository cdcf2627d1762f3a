"""Account store backed by the users table via SQLAlchemy."""

import asyncio
import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from backend.models_db import User
from ledger.account import UserAccount
from ledger.errors import AccountNotFound, AmbiguousWriteOutcome, RemoteUnavailable
from ledger.plans import DEFAULT_PLAN, PLAN_LIMITS, PlanFields, parse_plan, subscription_status

logger = logging.getLogger(__name__)

_users = User.__table__


def _to_account(row: User) -> UserAccount:
    return UserAccount(
        id=row.id,
        email=row.email,
        display_name=row.display_name,
        plan=parse_plan(row.plan),
        designs_used=row.designs_used,
        subscription_start_date=row.subscription_start_date,
    )


class SQLAccountStore:
    """
    Remote account store over a SQL database.

    Blocking database work runs in a worker thread. Every SQLAlchemy error
    surfaces as RemoteUnavailable; a failed commit of a write surfaces as
    AmbiguousWriteOutcome since the server may have applied it.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    async def get(self, user_id: str) -> Optional[UserAccount]:
        return await asyncio.to_thread(self._get, user_id)

    async def create(self, user_id: str, email: str, display_name: Optional[str] = None) -> UserAccount:
        return await asyncio.to_thread(self._create, user_id, email, display_name)

    async def increment_designs_used(self, user_id: str) -> int:
        return await asyncio.to_thread(self._increment, user_id)

    async def update_plan(self, user_id: str, fields: PlanFields) -> UserAccount:
        return await asyncio.to_thread(self._update_plan, user_id, fields)

    # --- blocking implementations ---

    def _get(self, user_id: str) -> Optional[UserAccount]:
        db = self._session_factory()
        try:
            row = db.get(User, user_id)
            return _to_account(row) if row else None
        except SQLAlchemyError as e:
            raise RemoteUnavailable(f"Account lookup failed: {e}") from e
        finally:
            db.close()

    def _create(self, user_id: str, email: str, display_name: Optional[str]) -> UserAccount:
        db = self._session_factory()
        try:
            row = User(
                id=user_id,
                email=email,
                display_name=display_name,
                plan=DEFAULT_PLAN.value,
                designs_used=0,
                designs_limit=PLAN_LIMITS[DEFAULT_PLAN],
                subscription_status=subscription_status(DEFAULT_PLAN).value,
            )
            db.add(row)
            self._commit(db)
            db.refresh(row)
            return _to_account(row)
        except IntegrityError:
            # Another session created the row first
            db.rollback()
            logger.info("Account for user %s created concurrently, re-reading", user_id)
        except SQLAlchemyError as e:
            raise RemoteUnavailable(f"Account creation failed: {e}") from e
        finally:
            db.close()

        existing = self._get(user_id)
        if existing is None:
            raise RemoteUnavailable(f"Account for user '{user_id}' vanished after conflict")
        return existing

    def _increment(self, user_id: str) -> int:
        # Single server-side UPDATE ... RETURNING, never read-modify-write
        stmt = (
            update(_users)
            .where(_users.c.id == user_id)
            .values(designs_used=_users.c.designs_used + 1)
            .returning(_users.c.designs_used)
        )
        db = self._session_factory()
        try:
            try:
                designs_used = db.execute(stmt).scalar_one_or_none()
            except SQLAlchemyError as e:
                raise RemoteUnavailable(f"Usage increment failed: {e}") from e
            if designs_used is None:
                db.rollback()
                raise AccountNotFound(user_id)
            self._commit(db)
            return designs_used
        except IntegrityError as e:
            db.rollback()
            raise RemoteUnavailable(f"Usage increment for '{user_id}' rejected: {e}") from e
        finally:
            db.close()

    def _update_plan(self, user_id: str, fields: PlanFields) -> UserAccount:
        stmt = (
            update(_users)
            .where(_users.c.id == user_id)
            .values(
                plan=fields.plan.value,
                designs_limit=fields.designs_limit,
                subscription_status=fields.subscription_status.value,
                subscription_start_date=fields.subscription_start_date,
            )
        )
        db = self._session_factory()
        try:
            try:
                matched = db.execute(stmt).rowcount
            except SQLAlchemyError as e:
                raise RemoteUnavailable(f"Plan update failed: {e}") from e
            if not matched:
                db.rollback()
                raise AccountNotFound(user_id)
            self._commit(db)
            row = db.get(User, user_id)
            return _to_account(row)
        except IntegrityError as e:
            # Rejected by a constraint, so nothing was written
            db.rollback()
            raise RemoteUnavailable(f"Plan update for '{user_id}' rejected: {e}") from e
        except SQLAlchemyError as e:
            # Committed, but the confirming read failed
            raise AmbiguousWriteOutcome(f"Plan update for '{user_id}' not confirmed: {e}") from e
        finally:
            db.close()

    @staticmethod
    def _commit(db: Session) -> None:
        try:
            db.commit()
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            raise AmbiguousWriteOutcome(f"Commit outcome unknown: {e}") from e

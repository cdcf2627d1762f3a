"""SQLAlchemy ORM models."""
from datetime import datetime, timezone
from sqlalchemy import CheckConstraint, Column, String, Integer, DateTime
from backend.database import Base


def _now():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    # Identity provider user id
    id = Column(String, primary_key=True)
    email = Column(String, nullable=False, default="", index=True)
    display_name = Column(String, nullable=True)
    plan = Column(String, nullable=False, default="free")
    designs_used = Column(Integer, nullable=False, default=0)
    designs_limit = Column(Integer, nullable=False, default=10)
    subscription_status = Column(String, nullable=False, default="inactive")
    subscription_start_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    __table_args__ = (
        CheckConstraint("designs_used >= 0", name="ck_users_designs_used_non_negative"),
        CheckConstraint("plan IN ('free', 'basic', 'pro')", name="ck_users_plan"),
    )

"""Database setup via SQLAlchemy (hosted Postgres, or SQLite locally)."""
import os
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from backend.config import DATABASE_URL


class Base(DeclarativeBase):
    pass


def _default_url() -> str:
    # Store the local DB in data/ directory (gitignored)
    db_dir = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
    os.makedirs(db_dir, exist_ok=True)
    return f"sqlite:///{os.path.join(db_dir, 'declutter.db')}"


def make_engine(url: str = "", **kwargs) -> Engine:
    """Create an engine; SQLite connections may be used from worker threads."""
    url = url or DATABASE_URL or _default_url()
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine):
    """Create all tables."""
    import backend.models_db  # noqa: F401  (registers tables on Base)
    Base.metadata.create_all(bind=engine)

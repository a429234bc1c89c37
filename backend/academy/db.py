# backend/academy/db.py

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Base class for models
Base = declarative_base()


def create_engine_and_session(database_url: str, echo: bool = False) -> tuple[Engine, sessionmaker]:
    """Build the SQLAlchemy engine and session factory for ``database_url``.

    SQLite connections are shared across threads, and an in-memory SQLite
    database is pinned to a single connection so every session sees the
    same tables.
    """
    engine_kwargs = {}
    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, echo=echo, **engine_kwargs)

    # Session local class
    session_local = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    return engine, session_local

"""Database session management."""
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hostel_portal.config.settings import settings
from hostel_portal.models.base import Base


def build_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Create an engine for the SQL document store.

    SQLite URLs get a thread-agnostic connection; in-memory SQLite shares a
    single connection so every session sees the same database.
    """
    url = database_url or settings.DATABASE_URL
    kwargs = {
        "echo": settings.DATABASE_ECHO if echo is None else echo,
        "pool_pre_ping": True,
    }
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def build_session_factory(engine: Engine, create_tables: bool = True) -> sessionmaker:
    """Create the session factory, creating the ``documents`` table if asked."""
    if create_tables:
        Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

"""Database engine and session factory."""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from aac_insights.core.config import config

from .models import Base


def make_engine(database_url: Optional[str] = None) -> Engine:
    """Create an engine for database_url (default: config.database_url)."""
    url = database_url or config.database_url
    if url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection so every session and worker thread sees the same database
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create any missing tables."""
    Base.metadata.create_all(engine)

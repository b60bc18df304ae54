"""Database engine, session factory and declarative base for address records."""

from __future__ import annotations

import logging
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from localip_pub.core.settings import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the address tables."""


# Registers AddressRecord on Base.metadata before create_tables runs.
import localip_pub.models  # noqa: E402,F401


def _engine_options(url: str) -> dict[str, Any]:
    """Return create_engine keyword arguments suited to ``url``."""
    options: dict[str, Any] = {"pool_pre_ping": True, "echo": settings.sql_debug}
    if url.startswith("sqlite"):
        # Requests are served from a thread pool.
        options["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every thread sees its own empty database.
            options["poolclass"] = StaticPool
    return options


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create the address table if it does not exist yet."""
    Base.metadata.create_all(bind=engine)
    logger.debug("Ensured tables exist on %s", engine.url.render_as_string(hide_password=True))

"""
Database connection and session management.

A Database object owns one engine and its session factory. It is built
once at startup and handed to whoever needs storage; there is no
module-level engine.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from .models import Base

if TYPE_CHECKING:
    from tenderflow.core.config.models import DatabaseConfig


logger = logging.getLogger(__name__)

DEFAULT_URL = "sqlite:///data/tenderflow.db"


# =============================================================================
# SQLite Configuration
# =============================================================================


def _configure_sqlite(engine: Engine, in_memory: bool) -> None:
    """Configure SQLite for better performance and reliability.

    Enables:
    - Foreign key enforcement
    - WAL mode for better concurrency (file databases only)
    - Synchronous mode for durability
    """
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if not in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()


def _is_memory_url(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


# =============================================================================
# Database Handle
# =============================================================================


class Database:
    """Engine plus session factory for one relational store."""

    def __init__(
        self,
        url: str = DEFAULT_URL,
        echo: bool = False,
        pool_size: int = 5,
    ) -> None:
        """Create the engine.

        Args:
            url: SQLAlchemy database URL
            echo: Whether to log SQL statements
            pool_size: Connection pool size (ignored for SQLite)
        """
        self.url = url

        if url.startswith("sqlite"):
            in_memory = _is_memory_url(url)
            if not in_memory and url.startswith("sqlite:///"):
                # Ensure data directory exists for SQLite
                db_path = url.replace("sqlite:///", "")
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)

            engine_kwargs = {"connect_args": {"check_same_thread": False}}
            if in_memory:
                # One shared connection, otherwise every session sees an empty database
                engine_kwargs["poolclass"] = StaticPool
            self.engine = create_engine(url, echo=echo, **engine_kwargs)
            _configure_sqlite(self.engine, in_memory)
        else:
            self.engine = create_engine(
                url,
                echo=echo,
                pool_size=pool_size,
                max_overflow=10,
                pool_pre_ping=True,
            )

        self._session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_config(cls, config: "DatabaseConfig") -> "Database":
        """Build a handle from the database section of the app config."""
        return cls(url=config.url, echo=config.echo, pool_size=config.pool_size)

    def __repr__(self) -> str:
        return f"<Database(url='{self.engine.url.render_as_string(hide_password=True)}')>"

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Run one transaction.

        Usage:
            with database.session() as session:
                session.execute(...)

        Commits when the block exits normally, rolls back on any exception
        and always returns the connection to the pool.

        Yields:
            SQLAlchemy Session instance
        """
        session = self._session_factory()

        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def ping(self) -> bool:
        """Return True when the store answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except OperationalError:
            logger.warning("Database ping failed for %r", self)
            return False

    def connect(self, attempts: int = 3, wait_seconds: float = 5.0) -> None:
        """Wait for the store to accept connections.

        Retries on OperationalError with a fixed delay between attempts and
        re-raises the last error once attempts are exhausted.
        """
        retrying = Retrying(
            stop=stop_after_attempt(attempts),
            wait=wait_fixed(wait_seconds),
            retry=retry_if_exception_type(OperationalError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                with self.engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
        logger.info("Connected to database %r", self)

    # -------------------------------------------------------------------------
    # Schema
    # -------------------------------------------------------------------------

    def create_all(self) -> None:
        """Create all tables if they don't exist.

        For production use, prefer Alembic migrations.
        """
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        """Drop all database tables.

        WARNING: This will delete all data!
        """
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        """Close pooled connections. Call on application shutdown."""
        self.engine.dispose()


def init_db(config: "DatabaseConfig") -> Database:
    """Build a handle from config and make sure the schema exists."""
    database = Database.from_config(config)
    database.connect(
        attempts=config.connect_attempts,
        wait_seconds=config.connect_timeout_seconds,
    )
    database.create_all()
    return database

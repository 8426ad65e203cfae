"""Database session management and connection handling."""

import os
import logging
from typing import Generator, Optional
from contextlib import contextmanager

from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from . import models

logger = logging.getLogger(__name__)

# Global engine and session factory
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_database_url() -> Optional[str]:
    """
    Get database URL from environment variable.
    Returns None when no database is configured.
    """
    db_url = os.getenv("DATABASE_URL")
    if db_url and db_url.startswith("postgres://"):
        db_url = db_url.replace("postgres://", "postgresql://", 1)
    return db_url or None


def create_engine(
    database_url: Optional[str] = None,
    echo: bool = False,
) -> Engine:
    """
    Create a SQLAlchemy engine.

    Args:
        database_url: Database connection URL. If None, uses get_database_url().
        echo: If True, log all SQL statements.

    Returns:
        Engine instance.
    """
    url = database_url or get_database_url()
    if not url:
        raise RuntimeError("DATABASE_URL is not configured")

    # In-memory SQLite needs a single shared connection
    if url.startswith("sqlite") and ":memory:" in url:
        return sa_create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return sa_create_engine(url, echo=echo, pool_pre_ping=True)


def get_session_factory(engine: Optional[Engine] = None) -> sessionmaker:
    """
    Build a session factory for the engine, or return the global one.

    Args:
        engine: Optional engine. If None, uses the global engine.

    Returns:
        sessionmaker instance.
    """
    if engine is not None:
        return sessionmaker(engine, class_=Session, expire_on_commit=False, autoflush=False)

    if _session_factory is None:
        raise RuntimeError(
            "Database not initialized. Call init_db() first."
        )
    return _session_factory


def init_db(
    database_url: Optional[str] = None,
    echo: bool = False,
    create_tables: bool = True,
) -> None:
    """
    Initialize the global database connection and optionally create tables.

    Args:
        database_url: Database connection URL. If None, uses get_database_url().
        echo: If True, log all SQL statements.
        create_tables: If True, create all tables defined in models.
    """
    global _engine, _session_factory

    logger.info("Initializing database connection...")

    _engine = create_engine(database_url, echo=echo)
    _session_factory = sessionmaker(_engine, class_=Session, expire_on_commit=False, autoflush=False)

    if create_tables:
        models.Base.metadata.create_all(_engine)
        logger.info("Database tables created successfully.")


def close_db() -> None:
    """Close the database connection and clean up resources."""
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Database connection closed.")


class DatabaseManager:
    """
    Database manager class for explicit lifecycle control.

    Example:
        db_manager = DatabaseManager("sqlite:///payment_import.db")
        db_manager.initialize()

        with db_manager.session() as session:
            # use session
            pass

        db_manager.shutdown()
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        echo: bool = False,
    ):
        self.database_url = database_url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            raise RuntimeError(
                "DatabaseManager not initialized. Call initialize() first."
            )
        return self._session_factory

    def initialize(self, create_tables: bool = True) -> None:
        """Initialize the database connection."""
        self._engine = create_engine(self.database_url, self.echo)
        self._session_factory = get_session_factory(self._engine)

        if create_tables:
            models.Base.metadata.create_all(self._engine)

    def shutdown(self) -> None:
        """Shutdown the database connection."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Get a database session that commits on success."""
        with self.session_factory() as session:
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise

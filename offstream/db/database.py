"""
SQLite database engine and session management for the offstream film store.

This module provides SQLite-specific database connectivity with:
- Session-per-operation pattern for the sync and download stages
- NullPool connection pooling to avoid SQLite locking issues
- Error handling and file-based logging
- SQLite settings applied on every connection (WAL mode, foreign keys, timeouts)

The engine is created lazily from DATABASE_URL (default: sqlite:///films.db)
the first time a session is requested, or explicitly via configure_database().
"""

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError, OperationalError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import NullPool

from offstream.config import DEFAULT_DATABASE_URL
from offstream.exceptions import ConfigError, StoreError
from offstream.logger import setup_logging, log_function
from .models import Base


db_logger = setup_logging(logger_name="database", log_file="database.log")

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def validate_database_url(url: str) -> tuple[bool, str]:
    """Validate the database URL format and path."""
    try:
        parsed = urlparse(url)
        if parsed.scheme != "sqlite":
            return False, f"Only SQLite databases are supported, got: {parsed.scheme}"

        # sqlite:///films.db -> "films.db", sqlite:////abs/films.db -> "/abs/films.db"
        db_path = parsed.path[1:] if parsed.path.startswith("/") else parsed.path
        if not db_path:
            return False, "Database file path is empty"

        # Check if parent directory exists (but don't create it)
        parent_dir = Path(db_path).parent
        if not parent_dir.exists():
            return False, f"Database directory does not exist: {parent_dir}"

        return True, db_path

    except ValueError as e:
        return False, f"Invalid database URL format: {e}"


def optimize_sqlite_connection(dbapi_connection, connection_record):
    """Apply SQLite-specific settings when a connection is created."""
    cursor = dbapi_connection.cursor()

    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=30000")
    # Cascading deletes from films rely on this
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA synchronous=NORMAL")

    cursor.close()


def configure_database(database_url: Optional[str] = None) -> Engine:
    """
    Create the engine and session factory for `database_url`.

    Falls back to DATABASE_URL from the environment (after loading `.env`).
    Any previously configured engine is disposed.

    Raises:
        ConfigError: If the URL is not a usable SQLite file URL
        StoreError: If the engine cannot be created
    """
    global _engine, _session_factory

    if database_url is None:
        load_dotenv()
        database_url = os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL

    is_valid, db_info = validate_database_url(database_url)
    if not is_valid:
        db_logger.error(f"Database configuration error: {db_info}")
        raise ConfigError(f"Database configuration error: {db_info}")

    try:
        engine = create_engine(
            database_url,
            poolclass=NullPool,  # Avoid connection pooling issues with SQLite
            echo=False,
            connect_args={"timeout": 30},
        )
        event.listen(engine, "connect", optimize_sqlite_connection)
    except SQLAlchemyError as e:
        db_logger.error(f"Failed to create database engine: {e}")
        raise StoreError(f"Failed to create database engine: {e}") from e

    if _engine is not None:
        _engine.dispose()

    _engine = engine
    _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db_logger.info(f"Database configured: {db_info}")

    return engine


def get_engine() -> Engine:
    """Return the configured engine, configuring it from the environment if needed."""
    if _engine is None:
        configure_database()
    return _engine


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions (session-per-operation pattern).

    Provides automatic session cleanup, rollback on error, and logging.
    Callers commit explicitly; ingestion commits once per step.

    Usage:
        with get_db_session() as session:
            session.add(Film(id=10, title="X"))
            session.commit()
    """
    get_engine()
    session = _session_factory()
    try:
        db_logger.debug("Database session created")
        yield session

    except OperationalError as e:
        db_logger.error(f"Database operational error: {e}")
        session.rollback()

        error_msg = str(e.orig) if hasattr(e, "orig") else str(e)
        if "database is locked" in error_msg.lower():
            raise StoreError(
                "Database is locked. Another offstream run may be using the same "
                "database; concurrent runs are not supported."
            ) from e
        elif "no such table" in error_msg.lower():
            raise StoreError(
                "Database table does not exist. Run init_database() or "
                "`alembic upgrade head` first."
            ) from e
        else:
            raise

    except SQLAlchemyError as e:
        db_logger.error(f"Database error: {e}")
        session.rollback()
        raise

    except Exception:
        session.rollback()
        raise

    finally:
        session.close()
        db_logger.debug("Database session closed")


@log_function(logger_name="database", log_execution_time=True)
def init_database(database_url: Optional[str] = None) -> Engine:
    """
    Open the store and create any missing tables and indexes.

    Note: This does not run Alembic migrations; existing tables are left as
    they are.

    Raises:
        ConfigError: If the database URL is invalid
        StoreError: If the database cannot be opened or initialized
    """
    engine = configure_database(database_url) if database_url else get_engine()
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        db_logger.error(f"Failed to initialize database: {e}")
        raise StoreError(f"Failed to initialize database: {e}") from e

    db_logger.info("Database tables created successfully")
    return engine


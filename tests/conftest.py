"""Shared pytest configuration and fixtures for the test suite."""

import atexit
import os
import shutil
import tempfile
from pathlib import Path

import pytest

_TEST_LOG_DIR = Path(tempfile.mkdtemp(prefix="offstream-tests-"))
os.environ["LOG_DIR"] = str(_TEST_LOG_DIR)

from offstream.db import Base, configure_database, get_db_session  # noqa: E402


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """URL of a fresh SQLite file for one test."""
    return f"sqlite:///{tmp_path / 'films.db'}"


@pytest.fixture
def store(database_url: str):
    """Configure the global engine on an empty store with every table created."""
    engine = configure_database(database_url)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(store):
    """A session on the test store."""
    with get_db_session() as session:
        yield session


@atexit.register
def _cleanup_test_log_dir() -> None:
    """Remove the temporary log directory after the test session."""
    shutil.rmtree(_TEST_LOG_DIR, ignore_errors=True)

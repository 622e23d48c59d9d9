"""
Database package for the offstream film store.

This package contains all database-related functionality including:
- SQLAlchemy models and table definitions
- Database connection and session management
- Row-level store operations used by ingestion and downloads
- Alembic migration support (see alembic/ at the project root)

Structure:
- models.py: SQLAlchemy ORM models (Film, Genre, FilmDownload, ...)
- database.py: Database connection, engine, and session factory
- queries.py: Inserts, point lookups and the download checkpoint
- __init__.py: Package initialization and exports

Database Patterns:
- SQLite uses session-per-operation with get_db_session() context manager
- Writes are committed per statement so ingest steps are independent

All models inherit from a common Base declarative class and follow consistent
naming conventions (singular class names, plural table names).
"""

from .models import (
    Base,
    Country,
    Film,
    FilmCompetition,
    FilmCountry,
    FilmDownload,
    FilmGenre,
    FilmStatus,
    FilmThumbnail,
    FilmYear,
    Genre,
)
from .database import (
    get_db_session,
    get_engine,
    configure_database,
    init_database,
)
from .queries import (
    MissingFilmDownload,
    film_exists,
    get_film_download,
    get_film_status,
    get_missing_downloads,
    upsert_film_download,
    utcnow,
)

__all__ = [
    # Models
    "Base",
    "Country",
    "Film",
    "FilmCompetition",
    "FilmCountry",
    "FilmDownload",
    "FilmGenre",
    "FilmStatus",
    "FilmThumbnail",
    "FilmYear",
    "Genre",
    # Database utilities
    "get_db_session",
    "get_engine",
    "configure_database",
    "init_database",
    # Store operations
    "MissingFilmDownload",
    "film_exists",
    "get_film_download",
    "get_film_status",
    "get_missing_downloads",
    "upsert_film_download",
    "utcnow",
]

"""
Row-level operations on the film store.

Every write helper adds its row and commits immediately, so that each ingest
step is durable on its own. Callers that want to keep going after a failed
statement are expected to roll the session back (see
offstream.ingestion.ingest).
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from offstream.api.schemas import FilmData, FilmStatusData, FilmYearData
from .models import (
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

logger = logging.getLogger("database")


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class MissingFilmDownload:
    """A film without a finished download, as selected for acquisition."""

    id: int
    title: Optional[str]
    original_title: Optional[str]
    director: Optional[str]
    production_year: Optional[int]


# Films


def film_exists(session: Session, film_id: int) -> bool:
    """Point lookup on the films primary key."""
    return (
        session.query(Film.id).filter(Film.id == film_id).first() is not None
    )


def create_film(session: Session, film_id: int, film_data: FilmData) -> Film:
    """Insert a new film. Fails if the id is already present."""
    film = Film(
        id=film_id,
        title=film_data.title,
        original_title=film_data.original_title,
        director=film_data.director,
        production_year=film_data.production_year,
        duration=film_data.duration,
        description=film_data.description,
        age_restriction=film_data.age_restriction,
    )
    session.add(film)
    session.commit()
    return film


# Thumbnails


def get_film_thumbnails(session: Session, film_id: int) -> list[tuple[str, str]]:
    """Return the stored thumbnails of a film as `(resolution, url)` tuples."""
    rows = (
        session.query(FilmThumbnail.resolution, FilmThumbnail.url)
        .filter(FilmThumbnail.film_id == film_id)
        .all()
    )
    return [(resolution, url) for resolution, url in rows]


def create_film_thumbnail(
    session: Session, film_id: int, resolution: str, url: str
) -> None:
    session.add(FilmThumbnail(film_id=film_id, resolution=resolution, url=url))
    session.commit()


# Genres and countries


def get_genre_id(session: Session, identifier: str) -> Optional[int]:
    """Return a genre's surrogate id, given its identifier."""
    row = session.query(Genre.id).filter(Genre.identifier == identifier).first()
    return row[0] if row else None


def create_genre(session: Session, identifier: str, title: str) -> None:
    session.add(Genre(identifier=identifier, title=title))
    session.commit()


def get_country_id(session: Session, code: str) -> Optional[int]:
    """Return a country's surrogate id, given its code."""
    row = session.query(Country.id).filter(Country.code == code).first()
    return row[0] if row else None


def create_country(session: Session, title: str, code: str) -> None:
    session.add(Country(title=title, code=code))
    session.commit()


def create_film_genre(session: Session, film_id: int, genre_id: int) -> None:
    logger.debug(
        f"Creating genre association between film_id={film_id} and genre_id={genre_id}"
    )
    session.add(FilmGenre(film_id=film_id, genre_id=genre_id))
    session.commit()


def create_film_country(session: Session, film_id: int, country_id: int) -> None:
    logger.debug(
        f"Creating country association between film_id={film_id} and country_id={country_id}"
    )
    session.add(FilmCountry(film_id=film_id, country_id=country_id))
    session.commit()


# Competitions, year and status


def create_film_competition(session: Session, film_id: int, name: str) -> None:
    logger.debug(f"Creating film competition {name!r} for film_id={film_id}")
    session.add(FilmCompetition(film_id=film_id, name=name))
    session.commit()


def create_film_year(session: Session, film_id: int, year: FilmYearData) -> None:
    logger.debug(f"Creating film year for film_id={film_id}, year={year}")
    session.add(
        FilmYear(
            id=year.id,
            film_id=film_id,
            title=year.title,
            product_id=None if year.product_id is None else str(year.product_id),
        )
    )
    session.commit()


def create_film_status(
    session: Session, film_id: int, status: FilmStatusData
) -> None:
    logger.debug(f"Creating film status for film_id={film_id}, status={status}")
    session.add(
        FilmStatus(
            film_id=film_id,
            status=status.status,
            vimeo_id=status.vimeo_id,
            greeting_vimeo_id=status.greeting_vimeo_id,
        )
    )
    session.commit()


def get_film_status(session: Session, film_id: int) -> Optional[FilmStatus]:
    """Return the film's status row, if it has one with a vimeo id."""
    return (
        session.query(FilmStatus)
        .filter(FilmStatus.film_id == film_id, FilmStatus.vimeo_id.isnot(None))
        .first()
    )


# Downloads


def get_missing_downloads(session: Session) -> list[MissingFilmDownload]:
    """
    Return films without a finished download.

    Covers films never attempted (no download row) and films whose last
    attempt was interrupted or failed (finished_at IS NULL).
    """
    rows = (
        session.query(
            Film.id,
            Film.title,
            Film.original_title,
            Film.director,
            Film.production_year,
        )
        .outerjoin(FilmDownload, FilmDownload.film_id == Film.id)
        .filter((FilmDownload.id.is_(None)) | (FilmDownload.finished_at.is_(None)))
        .all()
    )
    return [
        MissingFilmDownload(
            id=row.id,
            title=row.title,
            original_title=row.original_title,
            director=row.director,
            production_year=row.production_year,
        )
        for row in rows
    ]


def get_film_download(session: Session, film_id: int) -> Optional[FilmDownload]:
    return session.query(FilmDownload).filter(FilmDownload.film_id == film_id).first()


def upsert_film_download(
    session: Session,
    film_id: int,
    path: str,
    started_at: Optional[datetime] = None,
    finished_at: Optional[datetime] = None,
) -> FilmDownload:
    """
    Replace the download row of a film (last write wins).

    Args:
        film_id: Film the download belongs to
        path: Output path of the download
        started_at: Start of the attempt (default: now)
        finished_at: Completion time, or None while the attempt is in flight

    Raises:
        ValueError: If finished_at is earlier than started_at
    """
    if started_at is None:
        started_at = utcnow()
    if finished_at is not None and finished_at < started_at:
        raise ValueError(
            f"finished_at ({finished_at}) is earlier than started_at ({started_at})"
        )

    download = get_film_download(session, film_id)
    if download is None:
        download = FilmDownload(film_id=film_id)
        session.add(download)

    download.started_at = started_at
    download.finished_at = finished_at
    download.path = path
    session.commit()

    return download

"""
Normalize one detailed film record into the store.

ingest_film() runs seven steps in a fixed order:

    1. film row
    2. thumbnails not stored yet (by resolution)
    3. genres: dedup, then film/genre associations
    4. countries: dedup, then film/country associations
    5. competitions
    6. year
    7. status

Each step, and each item within a step, is committed on its own. A failing
statement is rolled back and logged, and ingestion carries on with the next
item or step: a partially ingested film is preferred over a discarded one.
Ingestion is insert-only; the caller must not ingest the same id twice.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from offstream.api.schemas import FilmRecord
from offstream.db import queries
from .reference_data import sync_countries, sync_genres

logger = logging.getLogger("ingest")


@dataclass
class IngestReport:
    """Outcome of ingesting one film."""

    film_id: int
    failures: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


@contextmanager
def _isolated(session: Session, report: IngestReport, operation: str) -> Iterator[None]:
    """Roll back and record a failed statement instead of propagating it."""
    try:
        yield
    except SQLAlchemyError as e:
        session.rollback()
        report.failures.append(operation)
        logger.error(f"film_id={report.film_id}: Could not {operation}: {e}")


def _ingest_thumbnails(
    session: Session, report: IngestReport, thumbnails: dict[str, str]
) -> None:
    film_id = report.film_id
    stored = None
    with _isolated(session, report, "read stored thumbnails"):
        rows = queries.get_film_thumbnails(session, film_id)
        stored = {resolution for resolution, _url in rows}
    if stored is None:
        return

    for resolution, url in thumbnails.items():
        if resolution in stored:
            continue
        with _isolated(session, report, f"add thumbnail {resolution}"):
            queries.create_film_thumbnail(session, film_id, resolution, url)


def _ingest_genres(session: Session, report: IngestReport, record: FilmRecord) -> None:
    film_id = report.film_id
    genres = record.data.genres

    with _isolated(session, report, "upsert genres"):
        sync_genres(session, genres)

    for genre in genres:
        with _isolated(session, report, f"associate genre {genre.id}"):
            genre_id = queries.get_genre_id(session, genre.id)
            if genre_id is None:
                report.failures.append(f"associate genre {genre.id}")
                logger.error(
                    f"film_id={film_id}: Could not find genre in database: {genre.id}"
                )
                continue
            queries.create_film_genre(session, film_id, genre_id)


def _ingest_countries(
    session: Session, report: IngestReport, record: FilmRecord
) -> None:
    film_id = report.film_id
    countries = record.data.countries

    with _isolated(session, report, "upsert countries"):
        sync_countries(session, countries)

    for country in countries:
        with _isolated(session, report, f"associate country {country.code}"):
            country_id = queries.get_country_id(session, country.code)
            if country_id is None:
                report.failures.append(f"associate country {country.code}")
                logger.error(
                    f"film_id={film_id}: Could not find country in database: {country.code}"
                )
                continue
            queries.create_film_country(session, film_id, country_id)


def ingest_film(session: Session, film_id: int, record: FilmRecord) -> IngestReport:
    """
    Write a film and everything that hangs off it.

    Args:
        session: Open session; committed after every statement
        film_id: Remote id of the film (the catalog key)
        record: Parsed record-detail response

    Returns:
        IngestReport naming the operations that failed, if any
    """
    report = IngestReport(film_id=film_id)
    film_data = record.data

    with _isolated(session, report, "create film"):
        queries.create_film(session, film_id, film_data)

    if film_data.thumbnails:
        _ingest_thumbnails(session, report, film_data.thumbnails)

    if film_data.genres:
        _ingest_genres(session, report, record)

    if film_data.countries:
        _ingest_countries(session, report, record)

    for competition in film_data.competitions:
        with _isolated(session, report, f"create competition {competition!r}"):
            queries.create_film_competition(session, film_id, competition)

    with _isolated(session, report, "create film year"):
        queries.create_film_year(session, film_id, film_data.year)

    with _isolated(session, report, "create film status"):
        queries.create_film_status(session, film_id, record.status)

    if report.ok:
        logger.info(f"film_id={film_id}: Ingested '{film_data.title}'")
    else:
        logger.warning(
            f"film_id={film_id}: Ingested '{film_data.title}' with "
            f"{len(report.failures)} failed step(s): {', '.join(report.failures)}"
        )
    return report

#!/usr/bin/env python3
"""
Catalog to Database Sync

Mirrors the offstream.dk film catalog into the local store. Only films whose
id is not in the store yet are fetched; each one is fetched and ingested in
catalog order, with a fixed courtesy delay between fetches so the API is not
hammered. A film that fails to fetch or ingest is logged and skipped, and
will be picked up again by the next run.

Usage:
    uv run -m offstream.ingestion                # Sync the catalog
    uv run -m offstream.ingestion --dry-run      # Only list the missing film ids
"""

import logging
import time
from typing import Any, Callable, Iterable, Mapping, Protocol, Union

from sqlalchemy.orm import Session

from offstream.api.schemas import FilmRecord, fits_integer_column
from offstream.db import get_db_session, film_exists
from offstream.logger import log_function, log_with_timer
from .ingest import IngestReport, ingest_film

logger = logging.getLogger("sync_films")

FilmId = Union[str, int]


class FilmSource(Protocol):
    """The two catalog operations the sync consumes."""

    def get_films(self) -> Mapping[str, Any]: ...

    def get_film(self, film_id: int) -> FilmRecord: ...


@log_with_timer("sync_films")
def film_ids_not_in_db(session: Session, film_ids: Iterable[FilmId]) -> list[FilmId]:
    """
    Return the ids from `film_ids` that have no film row, in input order.

    One primary-key lookup is issued per id. Ids that are not integers, or do
    not fit an INTEGER column, cannot be stored and are logged and left out.
    """
    missing = []
    for raw_id in film_ids:
        try:
            film_id = int(raw_id)
        except (TypeError, ValueError):
            logger.error(f"Skipping film id that is not an integer: {raw_id!r}")
            continue
        if not fits_integer_column(film_id):
            logger.error(f"Skipping film id that is out of range: {raw_id!r}")
            continue

        if not film_exists(session, film_id):
            missing.append(raw_id)

    return missing


def fetch_film(client: FilmSource, film_id: int) -> IngestReport:
    """Fetch one film's details and ingest them."""
    logger.debug(f"film_id={film_id}: Getting film details")
    record = client.get_film(film_id)

    with get_db_session() as session:
        return ingest_film(session, film_id, record)


@log_function(logger_name="sync_films", log_execution_time=True)
def fetch_films(
    client: FilmSource,
    films: Mapping[FilmId, Any],
    delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
    dry_run: bool = False,
) -> dict[str, int]:
    """
    Fetch and ingest every listed film that is not in the store yet.

    Args:
        client: Source of film details
        films: Catalog list, film id -> summary (only the keys are used)
        delay: Seconds to wait between two fetches
        sleep: Sleep function, replaceable in tests
        dry_run: If True, only report the missing ids

    Returns:
        Dictionary with statistics:
        - listed: Number of films in the catalog
        - missing: Number of films not in the store
        - ingested: Films written without any failed step
        - partial: Films written with at least one failed step
        - errors: Films that could not be fetched or ingested at all
    """
    stats = {
        "listed": len(films),
        "missing": 0,
        "ingested": 0,
        "partial": 0,
        "errors": 0,
    }

    with get_db_session() as session:
        missing_ids = film_ids_not_in_db(session, list(films.keys()))

    stats["missing"] = len(missing_ids)
    logger.info(
        f"Of {stats['listed']} listed films, "
        f"{stats['missing']} are not present in our database"
    )

    if dry_run:
        for film_id in missing_ids:
            logger.info(f"DRY RUN - would fetch film_id={film_id}")
        return stats

    for position, raw_id in enumerate(missing_ids):
        if position > 0 and delay > 0:
            sleep(delay)

        film_id = int(raw_id)
        try:
            report = fetch_film(client, film_id)
        except Exception as e:
            logger.error(
                f"film_id={film_id}: Could not fetch the film: {type(e).__name__}: {e}",
                exc_info=True,
            )
            stats["errors"] += 1
            continue

        if report.ok:
            stats["ingested"] += 1
        else:
            stats["partial"] += 1

    return stats


@log_function(logger_name="sync_films", log_execution_time=True)
def sync_catalog(
    client: FilmSource,
    delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
    dry_run: bool = False,
) -> dict[str, int]:
    """
    List the remote catalog and fetch the films we do not have.

    A failure to list the catalog propagates: without it there is no work to
    diff against.
    """
    films = client.get_films()
    return fetch_films(client, films, delay=delay, sleep=sleep, dry_run=dry_run)

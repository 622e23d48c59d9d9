"""
Genre and country deduplication.

Reference rows are unique by their natural key (genre identifier, country
code). Each descriptor is looked up right before it would be inserted, so a
key that appears twice in one batch, in two records of the same run, or in a
later run is only ever inserted once.

Titles follow first-write-wins: when a key is already stored, a different
title coming from the API does not update it.
"""

import logging
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from offstream.api.schemas import FilmCountryData, FilmGenreData
from offstream.db import queries

logger = logging.getLogger("reference_data")


def sync_genres(session: Session, genres: Iterable[FilmGenreData]) -> int:
    """
    Insert any genres whose identifier is not stored yet.

    Returns:
        Number of genres inserted
    """
    created = 0
    for genre in genres:
        if queries.get_genre_id(session, genre.id) is not None:
            continue

        logger.debug(f"Creating new genre (id={genre.id}, title={genre.title})")
        try:
            queries.create_genre(session, genre.id, genre.title)
            created += 1
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Could not create genre {genre.id!r}: {e}")

    return created


def sync_countries(session: Session, countries: Iterable[FilmCountryData]) -> int:
    """
    Insert any countries whose code is not stored yet.

    Returns:
        Number of countries inserted
    """
    created = 0
    for country in countries:
        if queries.get_country_id(session, country.code) is not None:
            continue

        logger.debug(
            f"Creating new country (title={country.title}, code={country.code})"
        )
        try:
            queries.create_country(session, country.title, country.code)
            created += 1
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Could not create country {country.code!r}: {e}")

    return created

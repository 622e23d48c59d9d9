"""Tests for genre and country deduplication."""

from offstream.api.schemas import FilmCountryData, FilmGenreData
from offstream.db import Country, Genre
from offstream.ingestion.reference_data import sync_countries, sync_genres


def test_sync_genres_inserts_each_identifier_once(session):
    """Test that repeated identifiers, in one batch or across calls, insert once."""
    drama = FilmGenreData(id="drama", title="Drama")
    doc = FilmGenreData(id="doc", title="Documentary")

    assert sync_genres(session, [drama, doc, drama]) == 2
    assert sync_genres(session, [doc, drama]) == 0

    identifiers = sorted(row.identifier for row in session.query(Genre).all())
    assert identifiers == ["doc", "drama"]


def test_sync_genres_keeps_the_first_title(session):
    """Test that a known identifier is not updated with a new title."""
    sync_genres(session, [FilmGenreData(id="drama", title="Drama")])
    sync_genres(session, [FilmGenreData(id="drama", title="Drame")])

    genre = session.query(Genre).filter(Genre.identifier == "drama").one()
    assert genre.title == "Drama"


def test_sync_countries_inserts_each_code_once(session):
    """Test that countries are deduplicated by code."""
    denmark = FilmCountryData(title="Denmark", code="DK")
    sweden = FilmCountryData(title="Sweden", code="SE")

    assert sync_countries(session, [denmark, sweden]) == 2
    assert sync_countries(session, [FilmCountryData(title="Danmark", code="DK")]) == 0

    rows = {row.code: row.title for row in session.query(Country).all()}
    assert rows == {"DK": "Denmark", "SE": "Sweden"}


def test_sync_with_empty_batch_is_a_no_op(session):
    """Test that an empty batch touches nothing."""
    assert sync_genres(session, []) == 0
    assert sync_countries(session, []) == 0
    assert session.query(Genre).count() == 0
    assert session.query(Country).count() == 0

"""
SQLAlchemy ORM models for the offstream film store.

This module defines the database schema using SQLAlchemy's declarative base.
All models inherit from Base and use consistent naming conventions.

Models:
    Film: A catalog entry, keyed by the id assigned by offstream.dk
    FilmThumbnail: Thumbnail URL per resolution (1:N)
    Genre, Country: Deduplicated reference data, unique by natural key
    FilmGenre, FilmCountry: Association rows between films and reference data
    FilmCompetition: Competition names a film took part in (1:N)
    FilmYear: The yearly programme/product grouping a film belongs to (1:1)
    FilmStatus: Availability status and the opaque vimeo id (1:1)
    FilmDownload: Download lifecycle checkpoint (1:1, replaced on every attempt)

Every dependent table references films.id with ON DELETE CASCADE, so removing
a film removes everything that hangs off it.
"""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _film_fk(**kwargs) -> Column:
    return Column(
        Integer, ForeignKey("films.id", ondelete="CASCADE"), nullable=False, **kwargs
    )


class Film(Base):
    """
    A film from the offstream.dk catalog.

    The primary key is the remote id and is never regenerated locally; the
    diff against the remote catalog is done on this column.
    """

    __tablename__ = "films"

    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String, nullable=True)
    original_title = Column(String, nullable=True)
    director = Column(String, nullable=True)
    production_year = Column(Integer, nullable=True)
    duration = Column(Integer, nullable=True)  # in minutes
    description = Column(Text, nullable=True)
    age_restriction = Column(String, nullable=True)

    def __repr__(self):
        return (
            f"<Film(id={self.id}, title='{self.title}', director='{self.director}', "
            f"production_year={self.production_year})>"
        )


class FilmThumbnail(Base):
    """Thumbnail URL for one resolution key ("small", "1920x1080", ...)."""

    __tablename__ = "film_thumbnails"

    id = Column(Integer, primary_key=True)
    film_id = _film_fk(index=True)
    resolution = Column(String, nullable=False)
    url = Column(String, nullable=False)


class Genre(Base):
    """Genre reference data, deduplicated by its remote `identifier`."""

    __tablename__ = "genres"

    id = Column(Integer, primary_key=True)
    identifier = Column(String, nullable=False)
    title = Column(String, nullable=True)

    __table_args__ = (Index("idx_genres_identifier", "identifier", unique=True),)


class Country(Base):
    """Country reference data, deduplicated by its `code`."""

    __tablename__ = "countries"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=True)
    code = Column(String, nullable=False)

    __table_args__ = (Index("idx_countries_code", "code", unique=True),)


class FilmGenre(Base):
    __tablename__ = "film_genres"

    film_id = _film_fk(primary_key=True)
    genre_id = Column(
        Integer,
        ForeignKey("genres.id", ondelete="CASCADE"),
        nullable=False,
        primary_key=True,
    )

    __table_args__ = (
        Index("idx_film_genres", "film_id", "genre_id", unique=True),
    )


class FilmCountry(Base):
    __tablename__ = "film_countries"

    film_id = _film_fk(primary_key=True)
    country_id = Column(
        Integer,
        ForeignKey("countries.id", ondelete="CASCADE"),
        nullable=False,
        primary_key=True,
    )

    __table_args__ = (
        Index("idx_film_countries", "film_id", "country_id", unique=True),
    )


class FilmCompetition(Base):
    """Append-only; the remote guarantees no duplicates within one record."""

    __tablename__ = "film_competitions"

    id = Column(Integer, primary_key=True)
    film_id = _film_fk(index=True)
    name = Column(String, nullable=False)


class FilmYear(Base):
    """
    Yearly grouping of a film.

    `id` is assigned remotely and shared between films of the same year, so
    the row is keyed on film_id instead.
    """

    __tablename__ = "film_years"

    film_id = _film_fk(primary_key=True)
    id = Column(Integer, nullable=False)
    title = Column(String, nullable=True)
    product_id = Column(String, nullable=True)


class FilmStatus(Base):
    """
    Remote availability of a film.

    `vimeo_id` is an opaque token, passed through unmodified into the video
    URL template when the film is downloaded.
    """

    __tablename__ = "film_status"

    film_id = _film_fk(primary_key=True)
    status = Column(String, nullable=True)
    vimeo_id = Column(String, nullable=True)
    greeting_vimeo_id = Column(String, nullable=True)

    def __repr__(self):
        return (
            f"<FilmStatus(film_id={self.film_id}, status='{self.status}', "
            f"vimeo_id='{self.vimeo_id}')>"
        )


class FilmDownload(Base):
    """
    Download checkpoint for a film.

    States:
        no row                          never attempted
        finished_at IS NULL, path set   started, not confirmed complete
        finished_at set                 finished

    A started row is the resumability marker: the film stays pending until a
    later run replaces it with a finished one.
    """

    __tablename__ = "film_downloads"

    id = Column(Integer, primary_key=True)
    film_id = _film_fk(unique=True, index=True)
    started_at = Column(DateTime, nullable=False)
    finished_at = Column(DateTime, nullable=True)
    path = Column(String, nullable=False)

    @property
    def is_finished(self) -> bool:
        return self.finished_at is not None

    def __repr__(self):
        return (
            f"<FilmDownload(film_id={self.film_id}, started_at={self.started_at}, "
            f"finished_at={self.finished_at}, path='{self.path}')>"
        )

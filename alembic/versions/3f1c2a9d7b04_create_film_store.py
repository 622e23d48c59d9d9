"""create film store

Revision ID: 3f1c2a9d7b04
Revises:
Create Date: 2026-10-19 10:42:11.317204

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7b04"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _film_fk(**kwargs) -> sa.Column:
    return sa.Column(
        "film_id",
        sa.Integer,
        sa.ForeignKey("films.id", ondelete="CASCADE"),
        nullable=False,
        **kwargs,
    )


def upgrade() -> None:
    """
    Create the film catalog, reference data and download tables.

    Every dependent table cascades on delete from films; the association
    tables also cascade from genres and countries.
    """
    op.create_table(
        "films",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("title", sa.String, nullable=True),
        sa.Column("original_title", sa.String, nullable=True),
        sa.Column("director", sa.String, nullable=True),
        sa.Column("production_year", sa.Integer, nullable=True),
        sa.Column("duration", sa.Integer, nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("age_restriction", sa.String, nullable=True),
    )

    op.create_table(
        "film_thumbnails",
        sa.Column("id", sa.Integer, primary_key=True),
        _film_fk(),
        sa.Column("resolution", sa.String, nullable=False),
        sa.Column("url", sa.String, nullable=False),
    )
    op.create_index("ix_film_thumbnails_film_id", "film_thumbnails", ["film_id"])

    op.create_table(
        "genres",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("identifier", sa.String, nullable=False),
        sa.Column("title", sa.String, nullable=True),
    )
    op.create_index("idx_genres_identifier", "genres", ["identifier"], unique=True)

    op.create_table(
        "countries",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("title", sa.String, nullable=True),
        sa.Column("code", sa.String, nullable=False),
    )
    op.create_index("idx_countries_code", "countries", ["code"], unique=True)

    op.create_table(
        "film_genres",
        _film_fk(primary_key=True),
        sa.Column(
            "genre_id",
            sa.Integer,
            sa.ForeignKey("genres.id", ondelete="CASCADE"),
            nullable=False,
            primary_key=True,
        ),
    )
    op.create_index(
        "idx_film_genres", "film_genres", ["film_id", "genre_id"], unique=True
    )

    op.create_table(
        "film_countries",
        _film_fk(primary_key=True),
        sa.Column(
            "country_id",
            sa.Integer,
            sa.ForeignKey("countries.id", ondelete="CASCADE"),
            nullable=False,
            primary_key=True,
        ),
    )
    op.create_index(
        "idx_film_countries", "film_countries", ["film_id", "country_id"], unique=True
    )

    op.create_table(
        "film_competitions",
        sa.Column("id", sa.Integer, primary_key=True),
        _film_fk(),
        sa.Column("name", sa.String, nullable=False),
    )
    op.create_index("ix_film_competitions_film_id", "film_competitions", ["film_id"])

    op.create_table(
        "film_years",
        _film_fk(primary_key=True),
        sa.Column("id", sa.Integer, nullable=False),
        sa.Column("title", sa.String, nullable=True),
        sa.Column("product_id", sa.String, nullable=True),
    )

    op.create_table(
        "film_status",
        _film_fk(primary_key=True),
        sa.Column("status", sa.String, nullable=True),
        sa.Column("vimeo_id", sa.String, nullable=True),
        sa.Column("greeting_vimeo_id", sa.String, nullable=True),
    )

    op.create_table(
        "film_downloads",
        sa.Column("id", sa.Integer, primary_key=True),
        _film_fk(),
        sa.Column("started_at", sa.DateTime, nullable=False),
        sa.Column("finished_at", sa.DateTime, nullable=True),
        sa.Column("path", sa.String, nullable=False),
    )
    op.create_index(
        "ix_film_downloads_film_id", "film_downloads", ["film_id"], unique=True
    )


def downgrade() -> None:
    """Drop every table of the film store."""
    op.drop_table("film_downloads")
    op.drop_table("film_status")
    op.drop_table("film_years")
    op.drop_table("film_competitions")
    op.drop_table("film_countries")
    op.drop_table("film_genres")
    op.drop_table("countries")
    op.drop_table("genres")
    op.drop_table("film_thumbnails")
    op.drop_table("films")

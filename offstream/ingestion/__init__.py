"""
Ingestion package for offstream.

This package mirrors the offstream.dk catalog and downloads the films. It
consists of:

1. Catalog Sync (sync_films.py):
   - Diffs the remote film ids against the store
   - Fetches missing films one by one, with a courtesy delay

2. Ingest (ingest.py, reference_data.py):
   - Normalizes one film record into the relational schema
   - Deduplicates genres and countries by natural key

3. Film Download (film_download.py):
   - Runs youtube-dl for every film without a finished download
   - Checkpoints the download before and after each attempt

Usage:
    # Sync the catalog only
    uv run -m offstream.ingestion

    # Sync and download
    uv run -m offstream.pipeline
"""

from .ingest import IngestReport, ingest_film
from .reference_data import sync_countries, sync_genres
from .sync_films import fetch_film, fetch_films, film_ids_not_in_db, sync_catalog
from .film_download import (
    YoutubeDl,
    download_film,
    download_missing_films,
    generate_filename,
    sanitize_filename,
)

__all__ = [
    "IngestReport",
    "ingest_film",
    "sync_countries",
    "sync_genres",
    "fetch_film",
    "fetch_films",
    "film_ids_not_in_db",
    "sync_catalog",
    "YoutubeDl",
    "download_film",
    "download_missing_films",
    "generate_filename",
    "sanitize_filename",
]

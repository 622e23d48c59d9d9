"""
offstream sync pipeline.

This module orchestrates one complete run:
    1. Catalog sync (offstream.ingestion.sync_films)
    2. Film download (offstream.ingestion.film_download)

Usage:
    # CLI interface
    uv run -m offstream.pipeline
    uv run -m offstream.pipeline --stages download

    # Programmatic interface
    from offstream.config import Settings
    from offstream.pipeline import run_pipeline
    stats = run_pipeline(Settings.from_env())
"""

from .orchestrator import VALID_STAGES, run_pipeline, validate_stages

__all__ = [
    "VALID_STAGES",
    "run_pipeline",
    "validate_stages",
]

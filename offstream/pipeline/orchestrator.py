import logging
import time
from typing import Callable, Optional

from offstream.api import OffstreamClient
from offstream.config import Settings
from offstream.db import init_database
from offstream.ingestion.film_download import (
    Downloader,
    YoutubeDl,
    download_missing_films,
)
from offstream.ingestion.sync_films import FilmSource, sync_catalog
from offstream.logger import log_function


VALID_STAGES = ("sync", "download")


def validate_stages(stage_names: list[str]) -> tuple[list[str], list[str]]:
    """
    Split stage names into known and unknown ones.

    Returns:
        Tuple of (valid_stages, invalid_names); valid stages keep pipeline order
    """
    invalid_names = [name for name in stage_names if name not in VALID_STAGES]
    valid_stages = [stage for stage in VALID_STAGES if stage in stage_names]
    return valid_stages, invalid_names


@log_function(logger_name="pipeline", log_execution_time=True)
def run_pipeline(
    settings: Settings,
    client: Optional[FilmSource] = None,
    downloader: Optional[Downloader] = None,
    dry_run: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, dict[str, int]]:
    """
    Run one sync-and-download pass.

    Opening the store and listing the catalog are the only failures that
    abort the run; per-film failures are logged and counted in the returned
    statistics.

    Args:
        settings: Run configuration (stages, paths, API and tool settings)
        client: Catalog source; defaults to an OffstreamClient after the XSRF
            handshake
        downloader: Acquisition tool; defaults to YoutubeDl from settings
        dry_run: Report what would be fetched and downloaded, change nothing
        sleep: Sleep function for the courtesy delay between fetches

    Returns:
        Statistics per stage that ran, keyed by stage name

    Raises:
        ConfigError, StoreError: If the store cannot be opened
        ApiError: If the XSRF handshake or the catalog list fails
    """
    logger = logging.getLogger("pipeline")
    logger.info("=== PIPELINE STARTED ===")

    init_database(settings.database_url)

    results: dict[str, dict[str, int]] = {}

    if "sync" in settings.stages:
        if client is None:
            api_client = OffstreamClient.from_settings(settings)
            api_client.update_xsrf_token()
            client = api_client

        results["sync"] = sync_catalog(
            client, delay=settings.fetch_delay, sleep=sleep, dry_run=dry_run
        )
        logger.info(f"Sync stage completed: {results['sync']}")

    if "download" in settings.stages:
        if downloader is None:
            downloader = YoutubeDl.from_settings(settings)

        results["download"] = download_missing_films(downloader, dry_run=dry_run)
        logger.info(f"Download stage completed: {results['download']}")

    logger.info("=== PIPELINE COMPLETED ===")
    return results

"""
Command line interface for the offstream sync pipeline.

One run:
    1. Opens (and if needed creates) the film store
    2. Lists the offstream.dk catalog and ingests films not stored yet
    3. Downloads every film without a finished download

Runs are meant to be repeated, e.g. from cron: every run only does the work
that is left over, and failed downloads are retried by the next run.

Usage:
    uv run -m offstream.pipeline
    uv run -m offstream.pipeline --stages download
    uv run -m offstream.pipeline --database-url sqlite:////data/films.db --download-dir /data/films
    uv run -m offstream.pipeline --dry-run --verbose
"""

import argparse
import sys
from typing import Optional, Sequence

from offstream.config import Settings
from offstream.exceptions import OffstreamError
from offstream.logger import setup_logging
from .orchestrator import VALID_STAGES, run_pipeline, validate_stages


def build_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=description,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration is read from the environment and .env (DATABASE_URL,
DOWNLOAD_DIR, DOWNLOADER, FETCH_DELAY, ...); flags override it.

Exit codes:
  0    run completed (individual films may still have failed, see logs)
  1    the store could not be opened or the catalog could not be listed
  130  interrupted
        """,
    )
    parser.add_argument(
        "-d",
        "--database-url",
        metavar="URL",
        help="SQLite database URL (default: $DATABASE_URL or sqlite:///films.db)",
    )
    parser.add_argument(
        "--fetch-delay",
        type=float,
        metavar="SECONDS",
        help="Delay between two film detail requests (default: 1.0)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be fetched and downloaded without doing it",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Detailed console output"
    )
    return parser


def add_download_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--download-dir",
        metavar="DIR",
        help="Root directory for downloaded films (default: films)",
    )
    parser.add_argument(
        "--downloader",
        metavar="EXECUTABLE",
        help="youtube-dl compatible executable (default: youtube-dl)",
    )
    parser.add_argument(
        "--stages",
        type=str,
        metavar="STAGE,...",
        help=f"Run only these stages (comma-separated: {', '.join(VALID_STAGES)})",
    )


def run_cli(
    args: argparse.Namespace, stages: Sequence[str], logger_name: str
) -> int:
    """Run the pipeline for parsed arguments and map the outcome to an exit code."""
    logger = setup_logging(
        logger_name=logger_name, log_file=f"{logger_name}.log", verbose=args.verbose
    )
    # Stage modules log through their own loggers
    for name in (
        "pipeline",
        "sync_films",
        "ingest",
        "reference_data",
        "film_download",
        "api_client",
        "database",
    ):
        setup_logging(
            logger_name=name, log_file=f"{logger_name}.log", verbose=args.verbose
        )

    try:
        settings = Settings.from_env().with_overrides(
            database_url=args.database_url,
            fetch_delay=args.fetch_delay,
            download_dir=getattr(args, "download_dir", None),
            downloader=getattr(args, "downloader", None),
            stages=tuple(stages),
        )
        results = run_pipeline(settings, dry_run=args.dry_run)

    except KeyboardInterrupt:
        print("\nRun interrupted by user")
        logger.info("Run interrupted by user")
        return 130

    except OffstreamError as e:
        print(f"✗ Run aborted: {e}", file=sys.stderr)
        logger.error(f"Run aborted: {type(e).__name__}: {e}")
        return 1

    print_summary(results, dry_run=args.dry_run)
    logger.info(f"Run completed: {results}")
    return 0


def print_summary(results: dict[str, dict[str, int]], dry_run: bool = False) -> None:
    print(f"\n{'=' * 60}")
    print("Dry run:" if dry_run else "Run completed:")
    sync = results.get("sync")
    if sync is not None:
        print(
            f"  Catalog: {sync['listed']} listed, {sync['missing']} missing, "
            f"{sync['ingested']} ingested, {sync['partial']} partial, "
            f"{sync['errors']} errors"
        )
    download = results.get("download")
    if download is not None:
        print(
            f"  Downloads: {download['pending']} pending, "
            f"{download['downloaded']} downloaded, {download['failed']} failed, "
            f"{download['skipped']} skipped"
        )
    if (sync and sync["errors"]) or (download and download["failed"]):
        print("\nSome films failed; they will be retried by the next run (see logs/)")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the pipeline CLI."""
    parser = build_parser(
        "Mirror the offstream.dk catalog into a local database and download missing films"
    )
    add_download_arguments(parser)
    args = parser.parse_args(argv)

    stages = list(VALID_STAGES)
    if args.stages:
        stage_names = [s.strip() for s in args.stages.split(",") if s.strip()]
        stages, invalid_names = validate_stages(stage_names)
        if invalid_names or not stages:
            parser.error(
                f"Invalid stage names: {', '.join(invalid_names) or args.stages!r} "
                f"(valid stages: {', '.join(VALID_STAGES)})"
            )

    return run_cli(args, stages, logger_name="pipeline")

#!/usr/bin/env python3
"""
Film Downloader

Downloads every film in the store that has no finished download, by running
youtube-dl (or a compatible tool such as yt-dlp) once per film.

Lifecycle of a film's download row:

    no row  ->  started (finished_at NULL)  ->  finished (finished_at set)

The started row is written before the tool is launched. If the tool fails,
cannot be launched, or the process dies mid-download, the row stays in the
started state and the film is retried by the next run; there is no in-process
retry.

Usage:
    uv run -m offstream.pipeline --stages download
"""

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from sqlalchemy.orm import Session

from offstream.config import Settings, DEFAULT_VIDEO_URL_TEMPLATE
from offstream.db import (
    FilmStatus,
    MissingFilmDownload,
    get_db_session,
    get_film_status,
    get_missing_downloads,
    upsert_film_download,
    utcnow,
)
from offstream.exceptions import (
    DownloaderExitError,
    DownloaderSpawnError,
    FilmNotAcquirableError,
)
from offstream.logger import log_function

logger = logging.getLogger("film_download")

VIDEO_FORMAT = "bestvideo+bestaudio"


def sanitize_filename(name: str) -> str:
    """
    Clean a file name for safe filesystem usage while keeping it readable.

    Characters that are invalid in file names on common filesystems (path
    separators, `<>:"|?*`, control characters) become underscores, runs of
    whitespace collapse to one space, and trailing dots/spaces are dropped.
    """
    safe = re.sub(r'[<>:"/\\|?*\x00-\x1f]', "_", name)
    safe = re.sub(r"\s+", " ", safe).strip()
    safe = safe.rstrip(". ")
    return safe or "unknown_film"


def generate_filename(
    director: str, title: str, production_year: int, ext: str = "mp4"
) -> str:
    """Generate filename: "{director} - {title} ({year}).{ext}" """
    return f"{sanitize_filename(f'{director} - {title} ({production_year})')}.{ext}"


class Downloader(Protocol):
    """What the download loop needs from the acquisition tool."""

    def derive_output_path(self, film: MissingFilmDownload) -> Path: ...

    def build_command(
        self, film: MissingFilmDownload, status: FilmStatus
    ) -> list[str]: ...

    def run(self, command: Sequence[str]) -> int: ...


@dataclass(frozen=True)
class YoutubeDl:
    """
    youtube-dl / yt-dlp invoked as a subprocess.

    Attributes:
        executable: Tool to run, looked up on PATH
        download_dir: Root directory of the derived output paths
        referer: Referer header the video host expects
        url_template: Source URL, formatted with `vimeo_id`
        merge_format: Container for the merged video and audio streams
    """

    executable: str = "youtube-dl"
    download_dir: str = "films"
    referer: str = "https://offstream.dk/"
    url_template: str = DEFAULT_VIDEO_URL_TEMPLATE
    merge_format: str = "mp4"

    @classmethod
    def from_settings(cls, settings: Settings) -> "YoutubeDl":
        return cls(
            executable=settings.downloader,
            download_dir=settings.download_dir,
            referer=settings.download_referer,
            url_template=settings.video_url_template,
        )

    def derive_output_path(self, film: MissingFilmDownload) -> Path:
        """
        Return `<download_dir>/<year>/<director> - <title> (<year>).<ext>`.

        The path only depends on the film's metadata, so every attempt for a
        film targets the same file.

        Raises:
            FilmNotAcquirableError: If director, title or production year is missing
        """
        if not film.director or not film.title or film.production_year is None:
            raise FilmNotAcquirableError(
                f"film_id={film.id} lacks director, title or production year"
            )
        filename = generate_filename(
            film.director, film.title, film.production_year, self.merge_format
        )
        return Path(self.download_dir) / str(film.production_year) / filename

    def source_url(self, status: FilmStatus) -> str:
        return self.url_template.format(vimeo_id=status.vimeo_id)

    def build_command(
        self, film: MissingFilmDownload, status: FilmStatus
    ) -> list[str]:
        return [
            self.executable,
            "--referer",
            self.referer,
            "-f",
            VIDEO_FORMAT,
            "--merge-output-format",
            self.merge_format,
            "-o",
            str(self.derive_output_path(film)),
            self.source_url(status),
        ]

    def run(self, command: Sequence[str]) -> int:
        """
        Run the tool and wait for it to exit.

        Returns:
            The tool's exit status

        Raises:
            DownloaderSpawnError: If the process could not be started
        """
        try:
            completed = subprocess.run(list(command), check=False)
        except OSError as e:
            raise DownloaderSpawnError(f"Could not create process: {e}") from e
        return completed.returncode


def download_film(
    session: Session, film: MissingFilmDownload, downloader: Downloader
) -> Path:
    """
    Download one film and record its lifecycle.

    Returns:
        Path of the finished download

    Raises:
        FilmNotAcquirableError: No vimeo id, or not enough metadata for a path
        DownloaderSpawnError: The tool could not be started
        DownloaderExitError: The tool exited with a non-zero status
    """
    status = get_film_status(session, film.id)
    if status is None:
        raise FilmNotAcquirableError(f"film_id={film.id} has no vimeo id")

    output_path = downloader.derive_output_path(film)
    command = downloader.build_command(film, status)

    logger.info(
        f"film_id={film.id}: Downloading '{film.title}' by {film.director} to {output_path}"
    )
    logger.debug(f"film_id={film.id}: Running {command}")

    # Checkpoint: from here on the film counts as started until proven finished
    started_at = utcnow()
    upsert_film_download(session, film.id, str(output_path), started_at=started_at)

    returncode = downloader.run(command)
    if returncode != 0:
        raise DownloaderExitError(returncode)

    finished_at = max(utcnow(), started_at)
    upsert_film_download(
        session,
        film.id,
        str(output_path),
        started_at=started_at,
        finished_at=finished_at,
    )
    logger.info(f"film_id={film.id}: Download finished")
    return output_path


@log_function(logger_name="film_download", log_execution_time=True)
def download_missing_films(
    downloader: Downloader, dry_run: bool = False
) -> dict[str, int]:
    """
    Download all films that have no finished download, one at a time.

    Returns:
        Dictionary with statistics:
        - pending: Films without a finished download at the start of the run
        - downloaded: Films downloaded successfully
        - failed: Films whose download failed (stay pending)
        - skipped: Films that cannot be downloaded yet
    """
    with get_db_session() as session:
        pending = get_missing_downloads(session)

    stats = {"pending": len(pending), "downloaded": 0, "failed": 0, "skipped": 0}
    if not pending:
        logger.info("No missing downloads")
        return stats

    logger.info(f"Starting download of {len(pending)} missing films")

    if dry_run:
        for film in pending:
            try:
                target = downloader.derive_output_path(film)
            except FilmNotAcquirableError as e:
                target = f"<not acquirable: {e}>"
            logger.info(f"DRY RUN - would download film_id={film.id} to {target}")
        return stats

    for film in pending:
        try:
            with get_db_session() as session:
                download_film(session, film, downloader)
            stats["downloaded"] += 1

        except FilmNotAcquirableError as e:
            logger.warning(f"film_id={film.id}: Skipping download: {e}")
            stats["skipped"] += 1

        except DownloaderSpawnError as e:
            logger.error(f"film_id={film.id}: {e}")
            stats["failed"] += 1

        except DownloaderExitError as e:
            logger.warning(f"film_id={film.id}: {e}; will retry on the next run")
            stats["failed"] += 1

        except Exception as e:
            logger.error(
                f"film_id={film.id}: Could not download film '{film.title}': "
                f"{type(e).__name__}: {e}",
                exc_info=True,
            )
            stats["failed"] += 1

    return stats

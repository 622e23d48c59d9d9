"""Test doubles and payload builders for the sync and download tests."""

from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from offstream.api.schemas import FilmRecord
from offstream.db import FilmStatus, MissingFilmDownload
from offstream.ingestion.film_download import YoutubeDl


def make_film_object(
    title: Optional[str] = "X",
    director: Optional[str] = "Y",
    production_year: Optional[int] = 2020,
    thumbnails: Optional[dict] = None,
    genres: Optional[list] = None,
    countries: Optional[list] = None,
    competitions: Optional[list] = None,
    **overrides: Any,
) -> dict:
    """Build the film object found under `.data.<key>` of a detail response."""
    film = {
        "title": title,
        "original_title": title,
        "director": director,
        "production_year": production_year,
        "duration": 90,
        "description": "A film.",
        "age_restriction": "15",
        "thumbnails": {"small": "https://img.example/s.jpg"}
        if thumbnails is None
        else thumbnails,
        "genres": [{"id": "drama", "title": "Drama"}] if genres is None else genres,
        "countries": [{"title": "Denmark", "code": "DK"}]
        if countries is None
        else countries,
        "competitions": [] if competitions is None else competitions,
        "year": {"id": 7, "title": "2023", "product_id": 42},
    }
    film.update(overrides)
    return film


def make_film_payload(
    film_id: int = 10,
    vimeo_id: Optional[str] = "123456789",
    status: str = "ok",
    **film_fields: Any,
) -> dict:
    """Build a complete `/films/load` response body."""
    return {
        "data": {str(film_id): make_film_object(**film_fields)},
        "status": {"status": status, "vimeo_id": vimeo_id, "greeting_vimeo_id": None},
    }


class FakeClient:
    """
    In-memory film source.

    `records` maps film ids to a response payload, or to an exception that
    get_film raises for that id.
    """

    def __init__(self, records: dict[int, Any], listed: Optional[Sequence[int]] = None):
        self.records = records
        self.listed = list(records) if listed is None else list(listed)
        self.fetched: list[int] = []

    def get_films(self) -> dict[str, Any]:
        return {str(film_id): {"id": film_id} for film_id in self.listed}

    def get_film(self, film_id: int) -> FilmRecord:
        self.fetched.append(film_id)
        payload = self.records[film_id]
        if isinstance(payload, Exception):
            raise payload
        return FilmRecord.from_response(payload)


class FakeDownloader:
    """
    Downloader that derives paths and commands like YoutubeDl but never spawns.

    Args:
        returncode: Exit status returned by run()
        error: Exception raised by run() instead of returning
        on_run: Called with the command before run() returns
    """

    def __init__(
        self,
        download_dir: str = "films",
        returncode: int = 0,
        error: Optional[Exception] = None,
        on_run: Optional[Callable[[Sequence[str]], None]] = None,
    ):
        self.tool = YoutubeDl(download_dir=download_dir)
        self.returncode = returncode
        self.error = error
        self.on_run = on_run
        self.commands: list[list[str]] = []

    def derive_output_path(self, film: MissingFilmDownload) -> Path:
        return self.tool.derive_output_path(film)

    def build_command(self, film: MissingFilmDownload, status: FilmStatus) -> list[str]:
        return self.tool.build_command(film, status)

    def run(self, command: Sequence[str]) -> int:
        self.commands.append(list(command))
        if self.on_run is not None:
            self.on_run(command)
        if self.error is not None:
            raise self.error
        return self.returncode

"""
HTTP client for the offstream.dk API.

Only the two read operations the sync needs are implemented:

    get_films()          catalog list, mapping of film id -> summary object
    get_film(film_id)    detailed record for one film

Both require an XSRF token, obtained once per run with update_xsrf_token().
"""

import json
import logging
from typing import Any, Optional
from urllib.parse import unquote

import requests

from offstream.config import Settings
from offstream.exceptions import (
    ApiError,
    MalformedRecordError,
    TransportError,
    XsrfTokenError,
)
from offstream.logger import log_function
from .schemas import FilmRecord

logger = logging.getLogger("api_client")

XSRF_COOKIE_NAME = "XSRF-TOKEN"


class OffstreamClient:
    """
    Client interface for offstream.dk.

    Args:
        base_url: API root, e.g. "https://api.offstream.dk"
        origin: Value of the `origin` header expected by the API
        timeout: Per-request timeout in seconds
        session: Optional pre-built requests session (cookie jar is used for
            the XSRF handshake)
    """

    def __init__(
        self,
        base_url: str = "https://api.offstream.dk",
        origin: str = "https://offstream.dk",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.origin = origin
        self.timeout = timeout
        self.http = session or requests.Session()
        self.xsrf_token: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "OffstreamClient":
        return cls(
            base_url=settings.api_base_url,
            origin=settings.api_origin,
            timeout=settings.request_timeout,
        )

    def _headers(self, with_token: bool = True) -> dict[str, str]:
        headers = {
            "origin": self.origin,
            "content-type": "application/json",
        }
        if with_token:
            if not self.xsrf_token:
                raise XsrfTokenError("Missing a valid XSRF token")
            headers["x-xsrf-token"] = self.xsrf_token
        return headers

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        return response

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise MalformedRecordError(f"response is not valid JSON: {e}") from e

    @log_function(logger_name="api_client", log_execution_time=True)
    def update_xsrf_token(self) -> None:
        """
        Request a new XSRF token from the API.

        Raises:
            XsrfTokenError: If the request fails or no token cookie is set
        """
        try:
            response = self._request(
                "GET",
                "/csrf-cookie",
                headers=self._headers(with_token=False),
                allow_redirects=False,
            )
        except TransportError as e:
            raise XsrfTokenError(f"Could not request a new XSRF token: {e}") from e

        token = response.cookies.get(XSRF_COOKIE_NAME) or self.http.cookies.get(
            XSRF_COOKIE_NAME
        )
        if not token:
            raise XsrfTokenError("The API response did not include an XSRF token")

        self.xsrf_token = unquote(token)
        logger.debug("XSRF token updated")

    @log_function(logger_name="api_client", log_execution_time=True)
    def get_films(self) -> dict[str, Any]:
        """
        Request the complete list of films.

        Returns:
            The `.data` mapping of the response: film id (string) -> summary

        Raises:
            TransportError: On HTTP failure
            ApiError: If the response has no `.data` object
        """
        response = self._request("GET", "/films", headers=self._headers())
        body = self._json(response)

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise ApiError("API response did not include a .data field")

        logger.info(f"Received a list containing {len(data)} films")
        return data

    def get_film(self, film_id: int) -> FilmRecord:
        """
        Request the detailed record of one film.

        Raises:
            TransportError: On HTTP failure
            MalformedRecordError: If the record does not have the expected shape
        """
        response = self._request(
            "POST",
            "/films/load",
            headers=self._headers(),
            data=json.dumps({"film_id": film_id}),
        )
        return FilmRecord.from_response(self._json(response))

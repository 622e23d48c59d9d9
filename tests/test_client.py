"""Tests for the offstream.dk HTTP client."""

import json
from typing import Any, Optional

import pytest
import requests

from offstream.api.client import OffstreamClient
from offstream.exceptions import (
    ApiError,
    MalformedRecordError,
    TransportError,
    XsrfTokenError,
)

from tests.fakes import make_film_payload


class FakeResponse:
    """Just enough of requests.Response for the client."""

    def __init__(
        self,
        body: Any = None,
        status_code: int = 200,
        cookies: Optional[dict] = None,
        text: Optional[str] = None,
    ):
        self.body = body
        self.status_code = status_code
        self.cookies = cookies or {}
        self.text = json.dumps(body) if text is None else text

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self) -> Any:
        return json.loads(self.text)


class FakeHttp:
    """Records requests and replays canned responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[dict] = []
        self.cookies: dict = {}

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _client(*responses, token: Optional[str] = "token") -> OffstreamClient:
    client = OffstreamClient(
        base_url="https://api.example/",
        origin="https://example",
        timeout=5,
        session=FakeHttp(*responses),
    )
    client.xsrf_token = token
    return client


def test_update_xsrf_token_reads_and_unquotes_the_cookie():
    """Test that the handshake stores the decoded XSRF-TOKEN cookie."""
    client = _client(FakeResponse(cookies={"XSRF-TOKEN": "abc%3D%3D"}), token=None)

    client.update_xsrf_token()

    assert client.xsrf_token == "abc=="
    call = client.http.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://api.example/csrf-cookie"
    assert call["allow_redirects"] is False
    assert call["timeout"] == 5
    assert "x-xsrf-token" not in call["headers"]


def test_update_xsrf_token_falls_back_to_the_cookie_jar():
    """Test that a token set on the session cookie jar is picked up."""
    client = _client(FakeResponse(), token=None)
    client.http.cookies["XSRF-TOKEN"] = "jar-token"

    client.update_xsrf_token()

    assert client.xsrf_token == "jar-token"


@pytest.mark.parametrize(
    "response",
    [FakeResponse(), FakeResponse(status_code=500), requests.ConnectionError("down")],
)
def test_update_xsrf_token_failures(response):
    """Test that a failed or cookie-less handshake raises XsrfTokenError."""
    client = _client(response, token=None)

    with pytest.raises(XsrfTokenError):
        client.update_xsrf_token()


def test_requests_need_a_token():
    """Test that catalog requests are refused before the handshake."""
    client = _client(token=None)

    with pytest.raises(XsrfTokenError):
        client.get_films()
    assert client.http.calls == []


def test_get_films_returns_the_data_mapping():
    """Test that the film list is the `.data` object of the response."""
    films = {"10": {"title": "X"}, "11": {"title": "Z"}}
    client = _client(FakeResponse({"data": films}))

    assert client.get_films() == films
    call = client.http.calls[0]
    assert call["url"] == "https://api.example/films"
    assert call["headers"]["x-xsrf-token"] == "token"
    assert call["headers"]["origin"] == "https://example"


@pytest.mark.parametrize("body", [{"films": {}}, {"data": []}, []])
def test_get_films_without_data_object(body):
    """Test that a list response without a `.data` object is rejected."""
    with pytest.raises(ApiError):
        _client(FakeResponse(body)).get_films()


def test_get_films_http_error():
    """Test that HTTP failures become TransportError."""
    with pytest.raises(TransportError):
        _client(FakeResponse(status_code=419)).get_films()


def test_get_film_posts_the_id_and_parses_the_record():
    """Test that a detail request posts the film id and returns a typed record."""
    client = _client(FakeResponse(make_film_payload(film_id=10)))

    record = client.get_film(10)

    assert record.data.title == "X"
    assert record.status.vimeo_id == "123456789"
    call = client.http.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://api.example/films/load"
    assert json.loads(call["data"]) == {"film_id": 10}


def test_get_film_rejects_invalid_json():
    """Test that a body that is not JSON is a malformed record."""
    client = _client(FakeResponse(text="<html>maintenance</html>"))

    with pytest.raises(MalformedRecordError):
        client.get_film(10)

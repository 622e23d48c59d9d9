"""Tests for parsing film record payloads."""

import pytest

from offstream.api.schemas import FilmRecord
from offstream.exceptions import MalformedRecordError

from tests.fakes import make_film_object, make_film_payload


def test_from_response_parses_complete_record():
    """Test that a complete detail response becomes a typed record."""
    record = FilmRecord.from_response(
        make_film_payload(
            film_id=10,
            competitions=["Main Competition"],
            genres=[{"id": "drama", "title": "Drama"}, {"id": "doc", "title": "Doc"}],
        )
    )

    assert record.data.title == "X"
    assert record.data.director == "Y"
    assert record.data.production_year == 2020
    assert record.data.thumbnails == {"small": "https://img.example/s.jpg"}
    assert [genre.id for genre in record.data.genres] == ["drama", "doc"]
    assert record.data.countries[0].code == "DK"
    assert record.data.competitions == ["Main Competition"]
    assert record.data.year.id == 7
    assert record.data.year.product_id == 42
    assert record.status.status == "ok"
    assert record.status.vimeo_id == "123456789"


def test_optional_fields_may_be_null_or_absent():
    """Test that scalar film fields and the vimeo id are optional."""
    film = make_film_object(title=None, director=None, production_year=None)
    del film["description"]
    payload = {"data": {"10": film}, "status": {"status": "unavailable"}}

    record = FilmRecord.from_response(payload)

    assert record.data.title is None
    assert record.data.director is None
    assert record.data.production_year is None
    assert record.data.description is None
    assert record.status.vimeo_id is None


def test_only_first_data_entry_is_used():
    """Test that the first film object under `.data` is the one parsed."""
    payload = make_film_payload(film_id=10, title="First")
    payload["data"]["11"] = make_film_object(title="Second")

    assert FilmRecord.from_response(payload).data.title == "First"


def test_missing_required_list_names_the_field():
    """Test that a missing genres list is rejected with its path."""
    payload = make_film_payload(film_id=10)
    del payload["data"]["10"]["genres"]

    with pytest.raises(MalformedRecordError) as excinfo:
        FilmRecord.from_response(payload)

    assert excinfo.value.path == "$.data.10.genres"


def test_nested_field_error_names_the_index():
    """Test that a genre without an id is reported with its list index."""
    payload = make_film_payload(
        film_id=10,
        genres=[{"id": "drama", "title": "Drama"}, {"title": "Nameless"}],
    )

    with pytest.raises(MalformedRecordError) as excinfo:
        FilmRecord.from_response(payload)

    assert excinfo.value.path == "$.data.10.genres[1].id"
    assert "$.data.10.genres[1].id" in str(excinfo.value)


@pytest.mark.parametrize(
    "field,value",
    [
        ("production_year", "2020"),
        ("production_year", True),
        ("title", 12),
        ("competitions", "Main Competition"),
    ],
)
def test_wrongly_typed_fields_are_rejected(field, value):
    """Test that values of the wrong JSON type raise MalformedRecordError."""
    payload = make_film_payload(film_id=10, **{field: value})

    with pytest.raises(MalformedRecordError):
        FilmRecord.from_response(payload)


@pytest.mark.parametrize(
    "overrides,path",
    [
        ({"duration": 2**64}, "$.data.10.duration"),
        ({"production_year": -(2**63) - 1}, "$.data.10.production_year"),
        ({"year": {"id": 2**63, "title": None}}, "$.data.10.year.id"),
    ],
)
def test_integers_that_do_not_fit_a_column_are_rejected(overrides, path):
    """Test that integers outside the signed 64-bit range name their field."""
    payload = make_film_payload(film_id=10, **overrides)

    with pytest.raises(MalformedRecordError) as excinfo:
        FilmRecord.from_response(payload)

    assert excinfo.value.path == path


def test_integer_range_bounds_are_accepted():
    """Test that the largest storable integer is kept as is."""
    record = FilmRecord.from_response(
        make_film_payload(film_id=10, duration=2**63 - 1)
    )

    assert record.data.duration == 2**63 - 1


def test_missing_year_is_rejected():
    """Test that the year object is required."""
    payload = make_film_payload(film_id=10)
    del payload["data"]["10"]["year"]

    with pytest.raises(MalformedRecordError) as excinfo:
        FilmRecord.from_response(payload)

    assert excinfo.value.path == "$.data.10.year"


@pytest.mark.parametrize(
    "payload,path",
    [
        ([], "$"),
        ({"status": {"status": "ok"}}, "$.data"),
        ({"data": {}, "status": {"status": "ok"}}, "$.data"),
        ({"data": {"10": make_film_object()}}, "$.status"),
    ],
)
def test_response_envelope_is_checked(payload, path):
    """Test that the data and status envelope must be present."""
    with pytest.raises(MalformedRecordError) as excinfo:
        FilmRecord.from_response(payload)

    assert excinfo.value.path == path


def test_malformed_record_error_is_a_value_error():
    """Test that callers catching ValueError also catch malformed records."""
    assert issubclass(MalformedRecordError, ValueError)

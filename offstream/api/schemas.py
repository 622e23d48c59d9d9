"""
Typed views of the offstream.dk API payloads.

The API returns loosely structured JSON. The dataclasses below pin down which
fields are required and which may be missing or null; `FilmRecord.from_response`
raises MalformedRecordError, naming the offending field, whenever a payload
does not match.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, TypeVar

from offstream.exceptions import MalformedRecordError

T = TypeVar("T")

_MISSING = object()

# SQLite INTEGER is a signed 64-bit value
INTEGER_MIN = -(2**63)
INTEGER_MAX = 2**63 - 1


def fits_integer_column(value: int) -> bool:
    """Return True if `value` can be stored in an INTEGER column."""
    return INTEGER_MIN <= value <= INTEGER_MAX


def _type_name(value: Any) -> str:
    return "null" if value is None else type(value).__name__


def _require_mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedRecordError(f"expected an object, got {_type_name(value)}", path)
    return value


def _require_list(value: Any, path: str) -> list:
    if not isinstance(value, list):
        raise MalformedRecordError(f"expected a list, got {_type_name(value)}", path)
    return value


def _check_str(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise MalformedRecordError(f"expected a string, got {_type_name(value)}", path)
    return value


def _check_int(value: Any, path: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedRecordError(
            f"expected an integer, got {_type_name(value)}", path
        )
    if not fits_integer_column(value):
        raise MalformedRecordError(f"integer out of range: {value}", path)
    return value


def _required(
    obj: Mapping[str, Any], key: str, path: str, check: Callable[[Any, str], T]
) -> T:
    value = obj.get(key, _MISSING)
    if value is _MISSING or value is None:
        raise MalformedRecordError("missing required field", f"{path}.{key}")
    return check(value, f"{path}.{key}")


def _optional(
    obj: Mapping[str, Any], key: str, path: str, check: Callable[[Any, str], T]
) -> Optional[T]:
    value = obj.get(key)
    if value is None:
        return None
    return check(value, f"{path}.{key}")


@dataclass(frozen=True)
class FilmGenreData:
    """Genre descriptor; `id` is the natural key (e.g. "drama")."""

    id: str
    title: str

    @classmethod
    def from_json(cls, obj: Any, path: str) -> "FilmGenreData":
        obj = _require_mapping(obj, path)
        return cls(
            id=_required(obj, "id", path, _check_str),
            title=_required(obj, "title", path, _check_str),
        )


@dataclass(frozen=True)
class FilmCountryData:
    """Country descriptor; `code` is the natural key."""

    title: str
    code: str

    @classmethod
    def from_json(cls, obj: Any, path: str) -> "FilmCountryData":
        obj = _require_mapping(obj, path)
        return cls(
            title=_required(obj, "title", path, _check_str),
            code=_required(obj, "code", path, _check_str),
        )


@dataclass(frozen=True)
class FilmYearData:
    id: int
    title: Optional[str] = None
    product_id: Optional[int] = None

    @classmethod
    def from_json(cls, obj: Any, path: str) -> "FilmYearData":
        obj = _require_mapping(obj, path)
        return cls(
            id=_required(obj, "id", path, _check_int),
            title=_optional(obj, "title", path, _check_str),
            product_id=_optional(obj, "product_id", path, _check_int),
        )


@dataclass(frozen=True)
class FilmData:
    """The detailed film object from `/films/load`."""

    year: FilmYearData
    title: Optional[str] = None
    original_title: Optional[str] = None
    director: Optional[str] = None
    production_year: Optional[int] = None
    duration: Optional[int] = None
    description: Optional[str] = None
    age_restriction: Optional[str] = None
    thumbnails: dict[str, str] = field(default_factory=dict)
    genres: list[FilmGenreData] = field(default_factory=list)
    countries: list[FilmCountryData] = field(default_factory=list)
    competitions: list[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, obj: Any, path: str = "data") -> "FilmData":
        obj = _require_mapping(obj, path)

        thumbnails_obj = _required(obj, "thumbnails", path, _require_mapping)
        thumbnails = {
            _check_str(key, f"{path}.thumbnails"): _check_str(
                url, f"{path}.thumbnails.{key}"
            )
            for key, url in thumbnails_obj.items()
        }

        genres = [
            FilmGenreData.from_json(item, f"{path}.genres[{i}]")
            for i, item in enumerate(_required(obj, "genres", path, _require_list))
        ]
        countries = [
            FilmCountryData.from_json(item, f"{path}.countries[{i}]")
            for i, item in enumerate(_required(obj, "countries", path, _require_list))
        ]
        competitions = [
            _check_str(item, f"{path}.competitions[{i}]")
            for i, item in enumerate(
                _required(obj, "competitions", path, _require_list)
            )
        ]

        return cls(
            year=FilmYearData.from_json(
                _required(obj, "year", path, _require_mapping), f"{path}.year"
            ),
            title=_optional(obj, "title", path, _check_str),
            original_title=_optional(obj, "original_title", path, _check_str),
            director=_optional(obj, "director", path, _check_str),
            production_year=_optional(obj, "production_year", path, _check_int),
            duration=_optional(obj, "duration", path, _check_int),
            description=_optional(obj, "description", path, _check_str),
            age_restriction=_optional(obj, "age_restriction", path, _check_str),
            thumbnails=thumbnails,
            genres=genres,
            countries=countries,
            competitions=competitions,
        )


@dataclass(frozen=True)
class FilmStatusData:
    """Response status; carries the opaque vimeo id needed for downloads."""

    status: str
    vimeo_id: Optional[str] = None
    greeting_vimeo_id: Optional[str] = None

    @classmethod
    def from_json(cls, obj: Any, path: str = "status") -> "FilmStatusData":
        obj = _require_mapping(obj, path)
        return cls(
            status=_required(obj, "status", path, _check_str),
            vimeo_id=_optional(obj, "vimeo_id", path, _check_str),
            greeting_vimeo_id=_optional(obj, "greeting_vimeo_id", path, _check_str),
        )


@dataclass(frozen=True)
class FilmRecord:
    """A fully detailed film as returned by the record-detail operation."""

    data: FilmData
    status: FilmStatusData

    @classmethod
    def from_response(cls, payload: Any) -> "FilmRecord":
        """
        Parse a `/films/load` response body.

        The body looks like `{"data": {"<key>": {...film...}}, "status": {...}}`;
        only the first entry of `data` is used.

        Raises:
            MalformedRecordError: If the payload does not have that shape
        """
        payload = _require_mapping(payload, "$")
        data = _required(payload, "data", "$", _require_mapping)
        if not data:
            raise MalformedRecordError("response contains no film object", "$.data")

        key, film_obj = next(iter(data.items()))
        return cls(
            data=FilmData.from_json(film_obj, f"$.data.{key}"),
            status=FilmStatusData.from_json(
                _required(payload, "status", "$", _require_mapping), "$.status"
            ),
        )

"""
offstream.dk API access.

Structure:
- client.py: requests-based client (XSRF handshake, film list, film detail)
- schemas.py: dataclasses for the film record payloads
"""

from .client import OffstreamClient
from .schemas import (
    FilmCountryData,
    FilmData,
    FilmGenreData,
    FilmRecord,
    FilmStatusData,
    FilmYearData,
)

__all__ = [
    "OffstreamClient",
    "FilmCountryData",
    "FilmData",
    "FilmGenreData",
    "FilmRecord",
    "FilmStatusData",
    "FilmYearData",
]

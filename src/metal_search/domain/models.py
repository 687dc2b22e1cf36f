# metal_search/domain/models.py

"""Domain records returned by the metal-api.dev endpoints.

Each record has an explicit decoder that validates one JSON object and
builds the record. Optional fields treat a missing key and an explicit
``null`` the same way: both become ``None``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

T = TypeVar("T")

_HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)


class DecodeError(ValueError):
    """Raised when a JSON payload does not match the expected record shape."""


@dataclass(slots=True, frozen=True)
class AlbumSummary:
    """An album entry embedded in a band's discography."""

    id: str
    name: str
    link: str
    type: str | None = None
    year: str | None = None


@dataclass(slots=True, frozen=True)
class Band:
    """A band as returned by the search and detail endpoints."""

    id: str
    name: str
    country: str
    genre: str
    location: str | None = None
    formed_in: str | None = None
    years_active: str | None = None
    themes: str | None = None
    label: str | None = None
    band_cover: str | None = None
    albums: tuple[AlbumSummary, ...] | None = None


@dataclass(slots=True, frozen=True)
class FullAlbum:
    """An album as returned by the album-title search."""

    id: str
    title: str
    link: str
    band: Band | None = None
    type: str | None = None
    date: str | None = None  # HTML comments already stripped


@dataclass(slots=True, frozen=True)
class Song:
    """A single track on an album."""

    id: str
    number: str
    name: str
    length: str  # e.g. "04:12"
    lyrics: str


@dataclass(slots=True, frozen=True)
class AlbumDetails:
    """Full album record from the album detail endpoint."""

    id: str
    name: str
    album_type: str
    release_date: str
    catalog_id: str
    version_description: str
    limitations: str
    reviews: str
    cover_url: str
    label: str | None = None
    album_format: str | None = None
    songs: tuple[Song, ...] | None = None


def clean_date(raw: str) -> str:
    """Strip ``<!-- ... -->`` comments from a date string and trim it."""
    return _HTML_COMMENT_RE.sub("", raw).strip()


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------


def _require_object(obj: Any, record: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        msg = f"{record}: expected a JSON object, got {type(obj).__name__}"
        raise DecodeError(msg)
    return obj


def _required_str(obj: dict[str, Any], key: str, record: str) -> str:
    value = obj.get(key)
    if value is None:
        msg = f"{record}: missing required field '{key}'"
        raise DecodeError(msg)
    if not isinstance(value, str):
        msg = f"{record}: field '{key}' must be a string, got {type(value).__name__}"
        raise DecodeError(msg)
    return value


def _optional_str(obj: dict[str, Any], key: str, record: str) -> str | None:
    value = obj.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        msg = f"{record}: field '{key}' must be a string, got {type(value).__name__}"
        raise DecodeError(msg)
    return value


def _optional_list(
    obj: dict[str, Any],
    key: str,
    record: str,
    decoder: Callable[[Any], T],
) -> tuple[T, ...] | None:
    value = obj.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        msg = f"{record}: field '{key}' must be an array, got {type(value).__name__}"
        raise DecodeError(msg)
    return tuple(decoder(item) for item in value)


def decode_album_summary(obj: Any) -> AlbumSummary:
    data = _require_object(obj, "AlbumSummary")
    return AlbumSummary(
        id=_required_str(data, "id", "AlbumSummary"),
        name=_required_str(data, "name", "AlbumSummary"),
        link=_required_str(data, "link", "AlbumSummary"),
        type=_optional_str(data, "type", "AlbumSummary"),
        year=_optional_str(data, "year", "AlbumSummary"),
    )


def decode_band(obj: Any) -> Band:
    """Decode a band object from a search or detail response."""
    data = _require_object(obj, "Band")
    return Band(
        id=_required_str(data, "id", "Band"),
        name=_required_str(data, "name", "Band"),
        country=_required_str(data, "country", "Band"),
        genre=_required_str(data, "genre", "Band"),
        location=_optional_str(data, "location", "Band"),
        formed_in=_optional_str(data, "formedIn", "Band"),
        years_active=_optional_str(data, "yearsActive", "Band"),
        themes=_optional_str(data, "themes", "Band"),
        label=_optional_str(data, "label", "Band"),
        band_cover=_optional_str(data, "bandCover", "Band"),
        albums=_optional_list(data, "albums", "Band", decode_album_summary),
    )


def decode_full_album(obj: Any) -> FullAlbum:
    """Decode an album-title search hit. The date is comment-stripped."""
    data = _require_object(obj, "FullAlbum")

    raw_band = data.get("band")
    raw_date = _optional_str(data, "date", "FullAlbum")

    return FullAlbum(
        id=_required_str(data, "id", "FullAlbum"),
        title=_required_str(data, "title", "FullAlbum"),
        link=_required_str(data, "link", "FullAlbum"),
        band=decode_band(raw_band) if raw_band is not None else None,
        type=_optional_str(data, "type", "FullAlbum"),
        date=clean_date(raw_date) if raw_date is not None else None,
    )


def decode_song(obj: Any) -> Song:
    data = _require_object(obj, "Song")
    return Song(
        id=_required_str(data, "id", "Song"),
        number=_required_str(data, "number", "Song"),
        name=_required_str(data, "name", "Song"),
        length=_required_str(data, "length", "Song"),
        lyrics=_required_str(data, "lyrics", "Song"),
    )


def decode_album_details(obj: Any) -> AlbumDetails:
    """Decode the album detail endpoint response."""
    data = _require_object(obj, "AlbumDetails")
    return AlbumDetails(
        id=_required_str(data, "id", "AlbumDetails"),
        name=_required_str(data, "name", "AlbumDetails"),
        album_type=_required_str(data, "type", "AlbumDetails"),
        release_date=_required_str(data, "releaseDate", "AlbumDetails"),
        catalog_id=_required_str(data, "catalogID", "AlbumDetails"),
        version_description=_required_str(data, "versionDescription", "AlbumDetails"),
        limitations=_required_str(data, "limitations", "AlbumDetails"),
        reviews=_required_str(data, "reviews", "AlbumDetails"),
        cover_url=_required_str(data, "coverUrl", "AlbumDetails"),
        label=_optional_str(data, "label", "AlbumDetails"),
        album_format=_optional_str(data, "format", "AlbumDetails"),
        songs=_optional_list(data, "songs", "AlbumDetails", decode_song),
    )


def decode_list(decoder: Callable[[Any], T]) -> Callable[[Any], list[T]]:
    """Lift a record decoder to one that decodes a JSON array of records."""

    def _decode(obj: Any) -> list[T]:
        if not isinstance(obj, list):
            msg = f"expected a JSON array, got {type(obj).__name__}"
            raise DecodeError(msg)
        return [decoder(item) for item in obj]

    return _decode

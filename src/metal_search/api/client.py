# src/metal_search/api/client.py

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import quote

import httpx

from metal_search.config import get_base_url, get_encode_queries
from metal_search.domain.models import (
    AlbumDetails,
    Band,
    DecodeError,
    FullAlbum,
    decode_album_details,
    decode_band,
    decode_full_album,
    decode_list,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SEARCH_BANDS_BY_NAME = "/search/bands/name/{query}"
SEARCH_BANDS_BY_GENRE = "/search/bands/genre/{query}"
SEARCH_ALBUMS_BY_TITLE = "/search/albums/title/{query}"
BAND_DETAILS = "/bands/{id}"
ALBUM_DETAILS = "/albums/{id}"


class FetchError(Exception):
    """Raised when a request fails or its body does not decode."""


class MetalApiClient:
    """HTTP client for the metal-api.dev JSON API.

    One GET per call, no retries. Every failure surfaces as FetchError.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        encode_queries: bool | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or get_base_url()).rstrip("/")
        self._encode_queries = (
            get_encode_queries() if encode_queries is None else encode_queries
        )
        self._client = httpx.Client(
            timeout=None,
            follow_redirects=True,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> "MetalApiClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    def build_search_url(self, template: str, query: str) -> str:
        """Build a search URL, trimming and (optionally) encoding the query."""
        query = query.strip()
        if self._encode_queries:
            query = quote(query, safe="")
        return self._base_url + template.format(query=query)

    def build_detail_url(self, template: str, record_id: str) -> str:
        """Build a lookup URL. Identifiers come from the API and are used as-is."""
        return self._base_url + template.format(id=record_id)

    def fetch_json(self, url: str, decoder: Callable[[Any], T]) -> T:
        """GET ``url`` and decode the JSON body with ``decoder``.

        Raises:
            FetchError: on transport errors, an invalid URL, non-2xx status,
                invalid JSON, or a body that does not match the decoder's shape.
        """
        logger.debug("GET %s", url)
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.debug("HTTP error for %s (status=%s).", url, status)
            msg = f"HTTP {status} from {url}"
            raise FetchError(msg) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug("Request error for %s: %s", url, exc)
            msg = f"request to {url} failed: {exc}"
            raise FetchError(msg) from exc

        logger.debug("Fetched %s (status=%s).", url, response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            msg = f"invalid JSON from {url}: {exc}"
            raise FetchError(msg) from exc

        try:
            return decoder(payload)
        except DecodeError as exc:
            msg = f"unexpected response shape from {url}: {exc}"
            raise FetchError(msg) from exc

    # Search operations

    def search_by_band_name(self, query: str) -> list[Band]:
        url = self.build_search_url(SEARCH_BANDS_BY_NAME, query)
        return self.fetch_json(url, decode_list(decode_band))

    def search_by_genre(self, query: str) -> list[Band]:
        url = self.build_search_url(SEARCH_BANDS_BY_GENRE, query)
        return self.fetch_json(url, decode_list(decode_band))

    def search_by_album_title(self, query: str) -> list[FullAlbum]:
        url = self.build_search_url(SEARCH_ALBUMS_BY_TITLE, query)
        return self.fetch_json(url, decode_list(decode_full_album))

    # Detail lookups

    def get_band_details(self, band_id: str) -> Band:
        """Fetch one band with its discography populated when available."""
        url = self.build_detail_url(BAND_DETAILS, band_id)
        return self.fetch_json(url, decode_band)

    def get_album_details(self, album_id: str) -> AlbumDetails:
        """Fetch one album with its track listing."""
        url = self.build_detail_url(ALBUM_DETAILS, album_id)
        return self.fetch_json(url, decode_album_details)

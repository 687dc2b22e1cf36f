# metal_search/config.py

"""Shared configuration and environment setup."""

from __future__ import annotations

from os import getenv

from dotenv import load_dotenv

load_dotenv(override=True)

DEFAULT_BASE_URL = "https://metal-api.dev"

_FALSE_VALUES = {"false", "0", "no"}


def get_base_url() -> str:
    """Return the API base URL without a trailing slash.

    Prefers METAL_API_BASE_URL env var. Falls back to the public API.
    """
    base_url = getenv("METAL_API_BASE_URL") or DEFAULT_BASE_URL
    return base_url.rstrip("/")


def get_encode_queries() -> bool:
    """Return whether search queries are percent-encoded before URL insertion."""
    raw = getenv("METAL_API_ENCODE_QUERIES", "true")
    return raw.strip().lower() not in _FALSE_VALUES

# src/metal_search/cli.py

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, TextIO

from metal_search.api.client import FetchError, MetalApiClient
from metal_search.domain.models import AlbumDetails, Band, FullAlbum

logger = logging.getLogger(__name__)

VERSION = "1.0"

BANNER = r"""
         _____                       _                            _ _
        | ____|_ __   ___ _   _  ___| | ___  _ __   __ _  ___  __| (_) __ _
 _____  |  _| | '_ \ / __| | | |/ __| |/ _ \| '_ \ / _` |/ _ \/ _` | |/ _` |
|_____| | |___| | | | (__| |_| | (__| | (_) | |_) | (_| |  __/ (_| | | (_| |
 __  __ |_____|_| |_|\___|\__, |\___|_|\___/| .__/ \__,_|\___|\__,_|_|\__,_|
|  \/  | ___| |_ __ _| | ||___/ _ __ ___    |_|
| |\/| |/ _ \ __/ _` | | | | | | '_ ` _ \   _____
| |  | |  __/ || (_| | | | |_| | | | | | | |_____|
|_|  |_|\___|\__\__,_|_|_|\__,_|_| |_| |_|
"""


class Mode(int, Enum):
    BAND_NAME = 1
    GENRE = 2
    ALBUM_TITLE = 3

    @property
    def label(self) -> str:
        return _MODE_LABELS[self]


_MODE_LABELS = {
    Mode.BAND_NAME: "band name",
    Mode.GENRE: "genre",
    Mode.ALBUM_TITLE: "album title",
}


def _or_na(value: str | None) -> str:
    return value if value is not None else "N/A"


# ---------------------------------------------------------------------------
# Search results: one variant per result kind
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class BandResults:
    """Bands returned by a name or genre search."""

    noun: ClassVar[str] = "band"

    bands: list[Band]

    def __len__(self) -> int:
        return len(self.bands)

    def summary_lines(self) -> list[str]:
        return [
            f"{n}. Band: {band.name}, Genre: {band.genre}, Country: {band.country}"
            for n, band in enumerate(self.bands, start=1)
        ]

    def detail_lines(self, client: MetalApiClient, selection: int) -> list[str]:
        """Fetch the selected band (1-based) and format its details."""
        band = client.get_band_details(self.bands[selection - 1].id)
        return format_band_details(band)


@dataclass(slots=True, frozen=True)
class AlbumResults:
    """Albums returned by a title search."""

    noun: ClassVar[str] = "album"

    albums: list[FullAlbum]

    def __len__(self) -> int:
        return len(self.albums)

    def summary_lines(self) -> list[str]:
        return [
            f"{n}. Album: {album.title}, Type: {_or_na(album.type)}, "
            f"Date: {_or_na(album.date)}"
            for n, album in enumerate(self.albums, start=1)
        ]

    def detail_lines(self, client: MetalApiClient, selection: int) -> list[str]:
        """Fetch the selected album (1-based) and format its details."""
        details = client.get_album_details(self.albums[selection - 1].id)
        return format_album_details(details)


SearchResults = BandResults | AlbumResults

_SEARCHES: dict[Mode, Callable[[MetalApiClient, str], SearchResults]] = {
    Mode.BAND_NAME: lambda c, q: BandResults(c.search_by_band_name(q)),
    Mode.GENRE: lambda c, q: BandResults(c.search_by_genre(q)),
    Mode.ALBUM_TITLE: lambda c, q: AlbumResults(c.search_by_album_title(q)),
}


def format_band_details(band: Band) -> list[str]:
    """Format a band record, skipping optional fields that are absent."""
    lines = [
        f"Details about '{band.name}':",
        f"Genre: {band.genre}",
        f"Country: {band.country}",
    ]
    optional = (
        ("Formed in", band.formed_in),
        ("Years Active", band.years_active),
        ("Location", band.location),
        ("Themes", band.themes),
        ("Label", band.label),
    )
    lines.extend(f"{label}: {value}" for label, value in optional if value is not None)

    if band.albums is not None:
        lines.append("")
        lines.append("Albums:")
        for album in band.albums:
            lines.append(
                f"Name: {album.name}, Type: {_or_na(album.type)}, "
                f"Date: {_or_na(album.year)}, Link: {album.link}"
            )
    return lines


def format_album_details(album: AlbumDetails) -> list[str]:
    """Format an album record with its track listing, if any."""
    lines = [
        f"Details about '{album.name}':",
        f"Album type: {album.album_type}",
        f"Release date: {album.release_date}",
    ]
    if album.label is not None:
        lines.append(f"Label: {album.label}")
    if album.album_format is not None:
        lines.append(f"Format: {album.album_format}")

    if album.songs is not None:
        lines.append("")
        lines.append("Songs:")
        for song in album.songs:
            lines.append(
                f"Number: {song.number} Name: {song.name} "
                f"Length: {song.length} Lyrics: {song.lyrics}"
            )
    return lines


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class Session:
    """One pass through the prompt sequence: mode, query, results, selection, detail.

    Invalid input, empty results and fetch errors all end the session with a
    message. Only a closed input stream (EOFError) escapes ``run``.
    """

    def __init__(
        self,
        client: MetalApiClient,
        *,
        read_line: Callable[[str], str] | None = None,
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self._client = client
        self._read_line = read_line if read_line is not None else input
        self._out = out if out is not None else sys.stdout
        self._err = err if err is not None else sys.stderr

    def _print(self, text: str = "") -> None:
        print(text, file=self._out)

    def _error(self, text: str) -> None:
        print(text, file=self._err)

    def run(self, mode: Mode | None = None, query: str | None = None) -> None:
        """Run the session. A preset mode and query skip the first two prompts."""
        if mode is None:
            mode = self._choose_mode()
            if mode is None:
                return

        if query is None:
            query = self._read_line(f"Enter {mode.label}: ")
        query = query.strip()

        logger.debug("Searching by %s for %r.", mode.label, query)
        try:
            results = _SEARCHES[mode](self._client, query)
        except FetchError as exc:
            self._error(f"Error: {exc}")
            return

        if len(results) == 0:
            self._print(f"No results found for '{query}'")
            return

        self._print(f"Found the following results for '{query}':")
        for line in results.summary_lines():
            self._print(line)

        selection = self._choose_selection(results)
        if selection is None:
            return

        try:
            lines = results.detail_lines(self._client, selection)
        except FetchError as exc:
            self._error(f"Error occurred while fetching {results.noun} details: {exc}")
            return

        self._print()
        for line in lines:
            self._print(line)

    def _choose_mode(self) -> Mode | None:
        self._print("Choose a search option:")
        self._print("1. Search by band name")
        self._print("2. Search by genre")
        self._print("3. Search by album title")

        raw = self._read_line("")
        try:
            return Mode(int(raw.strip()))
        except ValueError:
            logger.debug("Rejected mode choice %r.", raw)
            self._print("Invalid choice.")
            return None

    def _choose_selection(self, results: SearchResults) -> int | None:
        raw = self._read_line(
            f"Enter the number of the {results.noun} you want more details for: "
        )
        try:
            selection = int(raw.strip())
        except ValueError:
            selection = 0

        if not 1 <= selection <= len(results):
            logger.debug("Rejected selection %r (results=%s).", raw, len(results))
            self._print("Invalid selection.")
            return None
        return selection


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """Entry point for the metal-search CLI."""
    args = _build_arg_parser().parse_args(argv)

    _configure_logging(verbose=args.verbose)

    mode, query = _preset_search(args)

    print_banner()

    try:
        with MetalApiClient() as client:
            Session(client).run(mode=mode, query=query)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user. Exiting.")
        sys.exit(1)
    except EOFError:
        logger.error("Input stream closed before the session finished.")
        sys.exit(1)


def print_banner(out: TextIO | None = None) -> None:
    print(BANNER, file=out if out is not None else sys.stdout)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="metal-search",
        description="Search for bands and albums on metal-api.dev.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {VERSION}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )

    # At most one preset search; without one the session prompts for it.
    search = parser.add_mutually_exclusive_group()
    search.add_argument(
        "band",
        nargs="?",
        default=None,
        help="Search query for the band name.",
    )
    search.add_argument(
        "-g",
        "--genre",
        help="Search query for the genre.",
    )
    search.add_argument(
        "-t",
        "--title",
        help="Search query for the album title.",
    )

    return parser


def _preset_search(args: argparse.Namespace) -> tuple[Mode | None, str | None]:
    if args.band is not None:
        return Mode.BAND_NAME, args.band
    if args.genre is not None:
        return Mode.GENRE, args.genre
    if args.title is not None:
        return Mode.ALBUM_TITLE, args.title
    return None, None


def _configure_logging(*, verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


if __name__ == "__main__":
    # python -m metal_search.cli
    # python -m metal_search.cli -v -g "black metal"
    main()

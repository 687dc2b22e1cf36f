"""Tests for the interactive session and the CLI entry point."""

from __future__ import annotations

import io
from typing import Any

import httpx
import pytest

from metal_search import cli
from metal_search.api.client import MetalApiClient
from metal_search.cli import Mode, Session

BASE_URL = "https://metal-api.dev"

METALLICA = {"id": "123", "name": "Metallica", "genre": "Thrash", "country": "USA"}

MASTER_OF_PUPPETS = {
    "id": "547",
    "name": "Master of Puppets",
    "type": "Full-length",
    "releaseDate": "March 3rd, 1986",
    "catalogID": "E1-60439",
    "versionDescription": "",
    "label": "Elektra Records",
    "format": "12\" vinyl",
    "limitations": "",
    "reviews": "",
    "coverUrl": "https://example.com/547.jpg",
    "songs": [
        {"id": "s1", "number": "1.", "name": "Battery", "length": "05:12", "lyrics": ""},
        {"id": "s2", "number": "2.", "name": "Master of Puppets", "length": "08:35", "lyrics": ""},
    ],
}


class FakeConsole:
    """Scripted stdin plus captured stdout/stderr for a Session."""

    def __init__(self, *answers: str) -> None:
        self._answers = list(answers)
        self.prompts: list[str] = []
        self.out = io.StringIO()
        self.err = io.StringIO()

    def read_line(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._answers:
            raise EOFError
        return self._answers.pop(0)

    @property
    def lines(self) -> list[str]:
        return self.out.getvalue().splitlines()


def _api(routes: dict[str, Any], requested: list[str]) -> MetalApiClient:
    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        if request.url.path not in routes:
            return httpx.Response(404)
        return httpx.Response(200, json=routes[request.url.path])

    return MetalApiClient(
        base_url=BASE_URL,
        encode_queries=True,
        transport=httpx.MockTransport(handler),
    )


def _run(
    routes: dict[str, Any],
    *answers: str,
    mode: Mode | None = None,
    query: str | None = None,
) -> tuple[FakeConsole, list[str]]:
    console = FakeConsole(*answers)
    requested: list[str] = []
    with _api(routes, requested) as client:
        session = Session(
            client,
            read_line=console.read_line,
            out=console.out,
            err=console.err,
        )
        session.run(mode=mode, query=query)
    return console, requested


def test_band_name_search_end_to_end() -> None:
    routes = {
        "/search/bands/name/Metallica": [METALLICA],
        "/bands/123": METALLICA,
    }
    console, requested = _run(routes, "1", "Metallica", "1")

    assert requested == [
        f"{BASE_URL}/search/bands/name/Metallica",
        f"{BASE_URL}/bands/123",
    ]
    assert "1. Band: Metallica, Genre: Thrash, Country: USA" in console.lines
    assert "Details about 'Metallica':" in console.lines
    assert "Genre: Thrash" in console.lines
    assert "Country: USA" in console.lines

    output = console.out.getvalue()
    for label in ("Formed in", "Years Active", "Location", "Themes", "Label", "Albums"):
        assert f"{label}:" not in output
    assert console.err.getvalue() == ""


def test_present_optional_band_fields_are_printed_once() -> None:
    full = {
        **METALLICA,
        "formedIn": "1981",
        "yearsActive": "1981-present",
        "location": "Los Angeles, California",
        "themes": "Politics, Death",
        "label": "Blackened",
        "albums": [
            {"id": "a1", "name": "Kill 'Em All", "type": "Full-length", "year": "1983", "link": "https://example.com/a1"},
            {"id": "a2", "name": "Demo", "link": "https://example.com/a2"},
        ],
    }
    routes = {"/search/bands/genre/Thrash": [METALLICA], "/bands/123": full}
    console, _ = _run(routes, "2", "Thrash", "1")

    for expected in (
        "Formed in: 1981",
        "Years Active: 1981-present",
        "Location: Los Angeles, California",
        "Themes: Politics, Death",
        "Label: Blackened",
        "Name: Kill 'Em All, Type: Full-length, Date: 1983, Link: https://example.com/a1",
        "Name: Demo, Type: N/A, Date: N/A, Link: https://example.com/a2",
    ):
        assert console.lines.count(expected) == 1


def test_album_title_search_shows_track_listing() -> None:
    routes = {
        "/search/albums/title/Master": [
            {
                "id": "547",
                "title": "Master of Puppets",
                "type": "Full-length",
                "date": "March 3rd, 1986 <!-- 1986-03-03 -->",
                "link": "https://example.com/547",
            },
            {"id": "900", "title": "Master Demo", "link": "https://example.com/900"},
        ],
        "/albums/547": MASTER_OF_PUPPETS,
    }
    console, requested = _run(routes, "3", "Master", "1")

    assert requested[-1] == f"{BASE_URL}/albums/547"
    assert "1. Album: Master of Puppets, Type: Full-length, Date: March 3rd, 1986" in console.lines
    assert "2. Album: Master Demo, Type: N/A, Date: N/A" in console.lines
    assert "Album type: Full-length" in console.lines
    assert "Release date: March 3rd, 1986" in console.lines
    assert "Label: Elektra Records" in console.lines
    assert 'Format: 12" vinyl' in console.lines
    assert "Number: 1. Name: Battery Length: 05:12 Lyrics: " in console.lines
    assert console.prompts[-1] == "Enter the number of the album you want more details for: "


@pytest.mark.parametrize("choice", ["4", "0", "abc", ""])
def test_invalid_mode_ends_without_network(choice: str) -> None:
    console, requested = _run({}, choice)

    assert requested == []
    assert console.lines[-1] == "Invalid choice."
    assert len(console.prompts) == 1


def test_empty_results_end_without_further_prompts() -> None:
    routes = {"/search/bands/name/Nobody": []}
    console, requested = _run(routes, "1", "  Nobody  ")

    assert console.lines[-1] == "No results found for 'Nobody'"
    assert console.prompts == ["", "Enter band name: "]
    assert len(requested) == 1


@pytest.mark.parametrize("selection", ["0", "4", "x"])
def test_out_of_range_selection_skips_detail_fetch(selection: str) -> None:
    bands = [{**METALLICA, "id": str(i), "name": f"Band {i}"} for i in range(3)]
    routes = {"/search/bands/name/Band": bands}
    console, requested = _run(routes, "1", "Band", selection)

    assert console.lines[-1] == "Invalid selection."
    assert requested == [f"{BASE_URL}/search/bands/name/Band"]


def test_search_fetch_error_is_reported_on_stderr() -> None:
    console, _ = _run({}, "1", "Metallica")

    assert console.err.getvalue().startswith("Error: HTTP 404")
    assert "Found the following results" not in console.out.getvalue()


def test_detail_fetch_error_is_reported_on_stderr() -> None:
    routes = {"/search/bands/name/Metallica": [METALLICA]}
    console, _ = _run(routes, "1", "Metallica", "1")

    assert console.err.getvalue().startswith(
        "Error occurred while fetching band details: HTTP 404"
    )
    assert "Details about" not in console.out.getvalue()


def test_preset_search_skips_mode_and_query_prompts() -> None:
    routes = {"/search/bands/genre/black": [METALLICA], "/bands/123": METALLICA}
    console, _ = _run(routes, "1", mode=Mode.GENRE, query=" black ")

    assert console.prompts == ["Enter the number of the band you want more details for: "]
    assert "Details about 'Metallica':" in console.lines


def test_closed_stdin_propagates() -> None:
    with pytest.raises(EOFError):
        _run({})


# ---------------------------------------------------------------------------
# Argument parser and main()
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("argv", "expected"),
    [
        ([], (None, None)),
        (["Metallica"], (Mode.BAND_NAME, "Metallica")),
        (["-g", "doom"], (Mode.GENRE, "doom")),
        (["--title", "Master of Puppets"], (Mode.ALBUM_TITLE, "Master of Puppets")),
    ],
)
def test_preset_search_from_arguments(argv: list[str], expected: tuple) -> None:
    args = cli._build_arg_parser().parse_args(argv)
    assert cli._preset_search(args) == expected


def test_conflicting_search_arguments_are_rejected() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli._build_arg_parser().parse_args(["Metallica", "-g", "thrash"])
    assert excinfo.value.code == 2


def _patch_client(monkeypatch: pytest.MonkeyPatch, routes: dict[str, Any]) -> list[str]:
    requested: list[str] = []
    monkeypatch.setattr(cli, "MetalApiClient", lambda: _api(routes, requested))
    return requested


def test_main_prints_banner_and_exits_normally_on_invalid_choice(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    requested = _patch_client(monkeypatch, {})
    monkeypatch.setattr("builtins.input", lambda prompt="": "9")

    cli.main([])

    out = capsys.readouterr().out
    assert cli.BANNER in out
    assert "Invalid choice." in out
    assert requested == []


def test_main_with_preset_genre(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    requested = _patch_client(monkeypatch, {"/search/bands/genre/thrash": []})
    monkeypatch.setattr("builtins.input", lambda prompt="": pytest.fail("unexpected prompt"))

    cli.main(["-g", "thrash"])

    assert "No results found for 'thrash'" in capsys.readouterr().out
    assert requested == [f"{BASE_URL}/search/bands/genre/thrash"]


def test_main_exits_with_error_on_closed_stdin(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_client(monkeypatch, {})

    def closed(prompt: str = "") -> str:
        raise EOFError

    monkeypatch.setattr("builtins.input", closed)

    with pytest.raises(SystemExit) as excinfo:
        cli.main([])
    assert excinfo.value.code == 1


def test_unusable_query_is_reported_not_raised() -> None:
    console = FakeConsole()
    requested: list[str] = []
    with _api({}, requested) as client:
        Session(client, read_line=console.read_line, out=console.out, err=console.err).run(
            mode=Mode.BAND_NAME, query="a b" * 20000
        )

    assert console.err.getvalue().startswith("Error: request to ")
    assert requested == []

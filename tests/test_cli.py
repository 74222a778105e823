# tests/test_cli.py
"""Tests for the `atpoint` command-line inspector."""

from pathlib import Path
from typing import Any, Iterator
from unittest.mock import patch

import pytest

from atpoint import cli


@pytest.fixture
def quiet_startup(default_config: dict[str, Any]) -> Iterator[None]:
    """Keeps `main` from touching the user's config and the root logger."""
    with (
        patch("atpoint.cli.load_config", return_value=default_config),
        patch("atpoint.cli.setup_logging"),
    ):
        yield


@pytest.fixture
def url_file(tmp_path: Path) -> Path:
    path = tmp_path / "links.txt"
    path.write_text("see https://example.com now\nplain words\n", encoding="utf-8")
    return path


@pytest.mark.parametrize(
    ("spec", "expected"),
    [
        ("notes.org", ("notes.org", 1, 1)),
        ("notes.org:12", ("notes.org", 12, 1)),
        ("notes.org:12:7", ("notes.org", 12, 7)),
        ("dir/with:colon.txt:3:2", ("dir/with:colon.txt", 3, 2)),
    ],
)
def test_parse_location(spec: str, expected: tuple[str, int, int]) -> None:
    assert cli.parse_location(spec) == expected


def test_parse_location_rejects_zero() -> None:
    with pytest.raises(ValueError):
        cli.parse_location("notes.org:0")
    with pytest.raises(ValueError):
        cli.parse_location("notes.org:1:0")


@pytest.mark.usefixtures("quiet_startup")
class TestReport:
    def test_reports_targets_and_menu(self, url_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        location = f"{url_file}:1:9"

        assert cli.main([location]) == 0

        out = capsys.readouterr().out.splitlines()
        assert out[0] == f"{location} (mode: text, encoding: ascii)"
        assert out[1:3] == ["Targets:", "  1. url  'https://example.com'"]
        assert out[3] == "Menu:"
        assert "  enter  browse url" in out
        assert "  w      copy" in out

    def test_nothing_at_point(self, url_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main([f"{url_file}:2:1"]) == 0

        out = capsys.readouterr().out.splitlines()
        assert out[1:] == ["Targets: none", "Menu: (empty)"]

    def test_unreadable_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main([str(tmp_path / "missing.txt")]) == 1
        assert "cannot read" in capsys.readouterr().err

    def test_bad_location_is_a_usage_error(self, url_file: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main([f"{url_file}:0"])
        assert exc_info.value.code == 2


@pytest.mark.usefixtures("quiet_startup")
class TestMenu:
    """`--menu` with curses.wrapper replaced by a scripted key sequence."""

    @staticmethod
    def _press(*keys: str):
        def fake_wrapper(func: Any, dispatcher: Any) -> None:
            dispatcher.act()
            for key in keys:
                dispatcher.handle_key(key)

        return fake_wrapper

    def test_selected_command_is_printed(self, url_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("atpoint.cli.curses.wrapper", side_effect=self._press("enter")):
            assert cli.main(["--menu", f"{url_file}:1:9"]) == 0

        assert capsys.readouterr().out.strip() == "browse_url('https://example.com')"

    def test_copy_is_reported(self, url_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("atpoint.cli.curses.wrapper", side_effect=self._press("w")):
            assert cli.main(["--menu", f"{url_file}:1:9"]) == 0

        assert capsys.readouterr().out.strip() == "copy_to_clipboard('https://example.com')"

    def test_cancelled_menu(self, url_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("atpoint.cli.curses.wrapper", side_effect=self._press("z")):
            assert cli.main(["--menu", f"{url_file}:1:9"]) == 0

        assert capsys.readouterr().out.strip() == "No command selected."


def test_dry_run_host_records_calls() -> None:
    host = cli.DryRunHost()
    assert host.open_file("a.txt") is True
    assert host.calls == [("open_file", ("a.txt",))]
    with pytest.raises(AttributeError):
        host._private

"""Tests for the taskparser command line."""

import json
from unittest.mock import patch

import pytest

from taskparser.cli import build_parser, main

REFERENCE_ARGS = ["--reference", "2024-01-15T10:00:00Z", "--timezone", "UTC"]


@pytest.fixture(autouse=True)
def no_sentry():
    with patch("taskparser.cli.init_sentry") as init, patch("taskparser.cli.sentry_flush") as flush:
        yield init, flush


def run(capsys, argv):
    code = main(argv)
    captured = capsys.readouterr()
    return code, captured.out, captured.err


class TestCommands:
    """Tests for each subcommand's JSON output."""

    def test_parse(self, capsys):
        """parse prints the ParseResult."""
        code, out, _ = run(capsys, ["parse", "Buy groceries tomorrow at 3pm", *REFERENCE_ARGS])
        assert code == 0
        data = json.loads(out)
        assert data["title"] == "Buy groceries"
        assert data["due_date"] == "2024-01-16"
        assert data["due_time"] == "15:00"

    def test_disambiguate(self, capsys):
        """disambiguate prints a list of elements."""
        code, out, _ = run(capsys, ["disambiguate", "next week", *REFERENCE_ARGS])
        assert code == 0
        data = json.loads(out)
        assert len(data) == 1
        assert data[0]["suggestions"][0]["value"] == "2024-01-22"

    def test_time(self, capsys):
        """time prints the TimeParseResult."""
        code, out, _ = run(capsys, ["time", "3pm"])
        assert code == 0
        assert json.loads(out) == {"success": True, "time": "15:00", "display_time": "3:00 PM"}

    def test_time_failure_is_not_an_error(self):
        """An unparseable time still exits 0."""
        assert main(["time", "abc"]) == 0

    def test_complete(self, capsys):
        """complete prints suggestions."""
        _, out, _ = run(capsys, ["complete", "n"])
        assert json.loads(out) == ["noon"]

    def test_complete_defaults(self, capsys):
        """complete without input prints the defaults."""
        _, out, _ = run(capsys, ["complete"])
        assert json.loads(out)[0] == "9:00 AM"

    def test_category(self, capsys):
        """category prints the suggestion."""
        _, out, _ = run(capsys, ["category", "Study for exam"])
        assert json.loads(out)["category"] == "school"

    def test_keywords(self, capsys):
        """keywords prints the dictionary keyed by category value."""
        _, out, _ = run(capsys, ["keywords"])
        data = json.loads(out)
        assert set(data) == {"work", "personal", "school"}
        assert "meeting" in data["work"]

    def test_check(self, capsys):
        """check prints the effective configuration."""
        _, out, _ = run(capsys, ["check"])
        data = json.loads(out)
        assert "user_timezone" in data
        assert data["max_input_length"] > 0


class TestErrors:
    """Tests for exit codes."""

    def test_no_command(self, capsys):
        """No subcommand prints help and exits 1."""
        code, out, _ = run(capsys, [])
        assert code == 1
        assert "usage" in out.lower()

    def test_caller_error_exits_2(self, capsys):
        """Parser errors go to stderr with status 2."""
        code, out, err = run(capsys, ["parse", "   "])
        assert code == 2
        assert out == ""
        assert err.startswith("Error:")

    def test_invalid_timezone_exits_2(self, capsys):
        """An unknown timezone is a caller error."""
        code, _, err = run(capsys, ["parse", "Buy milk", "--timezone", "Nowhere/Special"])
        assert code == 2
        assert "Nowhere/Special" in err

    def test_unexpected_error_reported_and_raised(self):
        """Other errors are captured and re-raised."""
        with (
            patch("taskparser.cli.parse_task", side_effect=RuntimeError("boom")),
            patch("taskparser.cli.capture_exception") as capture,
        ):
            with pytest.raises(RuntimeError):
                main(["parse", "Buy milk"])
        capture.assert_called_once()

    def test_sentry_flushed(self, no_sentry):
        """Sentry is flushed even when the command fails."""
        _, flush = no_sentry
        main(["parse", "   "])
        flush.assert_called_once_with(timeout=2.0)


def test_build_parser_lists_commands():
    """Every subcommand is registered."""
    parser = build_parser()
    args = parser.parse_args(["parse", "x", "--timezone", "UTC"])
    assert args.command == "parse"
    assert args.timezone == "UTC"
    assert args.reference is None

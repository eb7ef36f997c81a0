"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import re

import pytest
from typer.testing import CliRunner

from kioku.config import get_settings
from kioku.delivery import cli
from kioku.delivery.cli import app

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point the CLI at a throwaway database and session directory."""
    monkeypatch.setenv("KIOKU_DATABASE_URL", f"sqlite:///{tmp_path / 'kioku.db'}")
    monkeypatch.setenv("KIOKU_SESSION_DIR", str(tmp_path / "sessions"))
    monkeypatch.setenv("KIOKU_SHUFFLE_SESSIONS", "false")
    monkeypatch.setenv("KIOKU_LEARNER_ID", "smoke")
    # Wide enough that table cells never wrap
    monkeypatch.setattr(cli.console, "width", 200)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def invoke(*args, input=None):
    return runner.invoke(app, list(args), input=input)


def add_card(front="水", back="вода", *extra):
    result = invoke("add", front, back, *extra)
    assert result.exit_code == 0, result.output
    return re.search(r"\(([0-9a-f]{32})\)", result.output).group(1)


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        result = invoke("--help")

        assert result.exit_code == 0
        for command in ("add", "list", "topics", "delete", "due", "study"):
            assert command in result.output

    def test_study_help(self):
        result = invoke("study", "--help")

        assert result.exit_code == 0
        assert "--mode" in result.output


class TestCollectionCommands:
    def test_add_and_list(self):
        add_card("水", "вода", "--reading", "みず", "--topic", "nature")

        result = invoke("list")

        assert result.exit_code == 0
        assert "水" in result.output
        assert "nature" in result.output
        assert "new" in result.output

    def test_add_rejects_blank_face(self):
        assert invoke("add", "  ", "вода").exit_code == 1

    def test_topics(self):
        add_card("水", "вода", "-t", "nature")
        add_card("食べる", "есть")

        result = invoke("topics")

        assert "nature" in result.output
        assert "unassigned" in result.output

    def test_delete(self):
        card_id = add_card()

        assert invoke("delete", card_id).exit_code == 0
        assert "No cards yet" in invoke("list").output

    def test_delete_unknown(self):
        result = invoke("delete", "missing")

        assert result.exit_code == 1
        assert "Card not found" in result.output

    def test_due_count(self):
        assert "Nothing due" in invoke("due").output

        add_card()
        add_card("火", "огонь")

        assert "2" in invoke("due").output


class TestStudyCommand:
    def test_empty_collection(self):
        result = invoke("study")

        assert result.exit_code == 0
        assert "Nothing to study" in result.output

    def test_topic_mode_needs_topic(self):
        assert invoke("study", "--mode", "topic").exit_code == 1

    def test_know_it_perfectly(self):
        add_card()

        result = invoke("study", input="5\n")

        assert result.exit_code == 0, result.output
        assert "Session Complete!" in result.output
        assert "Nothing due" in invoke("due").output

    def test_forgotten_card_comes_back(self):
        add_card()

        result = invoke("study", input="f\n0\n5\n")

        assert result.exit_code == 0, result.output
        assert "вода" in result.output
        assert "come back to this card" in result.output
        assert "Session Complete!" in result.output

    def test_pause_and_resume(self):
        add_card()
        add_card("火", "огонь")

        paused = invoke("study", input="q\n")
        assert "Session paused" in paused.output

        resumed = invoke("study", "--resume", input="5\n5\n")

        assert resumed.exit_code == 0, resumed.output
        assert "Session Complete!" in resumed.output
        assert "Nothing due" in invoke("due").output

    def test_back_side_first(self):
        add_card()

        result = invoke("study", "--front", "back", input="5\n")

        assert result.exit_code == 0, result.output
        assert "вода" in result.output

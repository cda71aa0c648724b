"""Tests for the CLI module."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from crave.cli import cli, resolve_fetch
from crave.recipe import Recipe
from crave.saved import SavedRecipes
from crave.tui import SwipeSummary


@pytest.fixture
def runner():
    """Create a CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def recipes_file(tmp_path):
    path = tmp_path / "recipes.json"
    path.write_text(
        json.dumps([{"name": "Laksa", "origin": "Malaysia"}, {"name": "Gumbo"}]),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def saved_file(tmp_path, recipes):
    path = tmp_path / "saved.json"
    saved = SavedRecipes(path)
    saved.append(recipes[0])
    saved.append(recipes[2])
    return path


@pytest.fixture
def clear_env(monkeypatch):
    for name in ("CRAVE_FIRESTORE_PROJECT", "CRAVE_FIRESTORE_API_KEY", "CRAVE_RECIPES_FILE"):
        monkeypatch.delenv(name, raising=False)


class TestCliBasics:
    """Tests for the top-level group."""

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "swipe" in result.output
        assert "saved" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "1.0.0" in result.output


class TestResolveFetch:
    """Tests for picking the recipe source."""

    def test_file_option_wins(self, clear_env, monkeypatch, recipes_file):
        monkeypatch.setenv("CRAVE_FIRESTORE_PROJECT", "crave-prod")

        fetch = resolve_fetch(recipes_file, None, None)

        assert [r.name for r in fetch()] == ["Laksa", "Gumbo"]

    def test_env_file(self, clear_env, monkeypatch, recipes_file):
        monkeypatch.setenv("CRAVE_RECIPES_FILE", str(recipes_file))

        assert len(resolve_fetch(None, None, None)()) == 2

    def test_project_uses_firestore(self, clear_env):
        with patch("crave.cli.FirestoreClient") as client_cls:
            client_cls.return_value.list_recipes.return_value = [Recipe(name="Paella")]

            fetch = resolve_fetch(None, "crave-prod", "key")
            result = fetch()

        client_cls.assert_called_once_with("crave-prod", "key")
        client_cls.return_value.close.assert_called_once()
        assert result[0].name == "Paella"

    def test_env_project_and_key(self, clear_env, monkeypatch):
        monkeypatch.setenv("CRAVE_FIRESTORE_PROJECT", "crave-env")
        monkeypatch.setenv("CRAVE_FIRESTORE_API_KEY", "env-key")

        with patch("crave.cli.FirestoreClient") as client_cls:
            client_cls.return_value.list_recipes.return_value = []
            resolve_fetch(None, None, None)()

        client_cls.assert_called_once_with("crave-env", "env-key")

    def test_no_source(self, clear_env):
        assert resolve_fetch(None, None, None) is None


class TestSwipeCommand:
    """Tests for the swipe command."""

    def test_no_source_fails(self, runner, clear_env):
        result = runner.invoke(cli, ["swipe", "--no-persist"])

        assert result.exit_code == 1
        assert "No recipe source" in result.output

    def test_runs_tui_and_prints_summary(self, runner, clear_env, recipes_file, tmp_path):
        summary = SwipeSummary(
            total=2, liked=[Recipe(name="Laksa")], skipped=[Recipe(name="Gumbo")]
        )
        saved_path = tmp_path / "saved.json"

        with patch("crave.cli.run_swipe", return_value=summary) as mock_run:
            result = runner.invoke(
                cli, ["swipe", "--file", str(recipes_file), "--saved-file", str(saved_path)]
            )

        assert result.exit_code == 0
        fetch, saved = mock_run.call_args.args
        assert [r.name for r in fetch()] == ["Laksa", "Gumbo"]
        assert saved.path == saved_path
        assert "Seen: 2 of 2" in result.output
        assert "Liked: 1 | Skipped: 1" in result.output
        assert "♥ Laksa" in result.output

    def test_no_persist(self, runner, clear_env, recipes_file):
        with patch("crave.cli.run_swipe", return_value=SwipeSummary()) as mock_run:
            result = runner.invoke(cli, ["swipe", "-f", str(recipes_file), "--no-persist"])

        assert result.exit_code == 0
        assert mock_run.call_args.args[1].path is None

    def test_unreadable_saved_file(self, runner, clear_env, recipes_file, tmp_path):
        broken = tmp_path / "saved.json"
        broken.write_text("{oops", encoding="utf-8")

        with patch("crave.cli.run_swipe") as mock_run:
            result = runner.invoke(
                cli, ["swipe", "-f", str(recipes_file), "--saved-file", str(broken)]
            )

        assert result.exit_code == 1
        assert "Failed to load saved recipes" in result.output
        mock_run.assert_not_called()


class TestSavedCommands:
    """Tests for the saved command group."""

    def test_list(self, runner, saved_file):
        result = runner.invoke(cli, ["saved", "--saved-file", str(saved_file), "list"])

        assert result.exit_code == 0
        assert "Saved recipes (2)" in result.output
        assert "1. Shakshuka (Tunisia · 25 min · Easy)" in result.output
        assert "2. Ramen" in result.output

    def test_list_empty(self, runner, tmp_path):
        result = runner.invoke(cli, ["saved", "--saved-file", str(tmp_path / "x.json"), "list"])

        assert result.exit_code == 0
        assert "No saved recipes yet" in result.output

    def test_show(self, runner, saved_file):
        result = runner.invoke(cli, ["saved", "--saved-file", str(saved_file), "show", "2"])

        assert result.exit_code == 0
        assert "Ramen" in result.output
        assert "Saved:" in result.output

    def test_show_missing(self, runner, saved_file):
        result = runner.invoke(cli, ["saved", "--saved-file", str(saved_file), "show", "9"])

        assert result.exit_code == 1
        assert "No saved recipe at position 9" in result.output

    def test_clear_with_yes(self, runner, saved_file):
        result = runner.invoke(cli, ["saved", "--saved-file", str(saved_file), "clear", "-y"])

        assert result.exit_code == 0
        assert "cleared" in result.output
        assert len(SavedRecipes(saved_file)) == 0

    def test_clear_declined(self, runner, saved_file):
        result = runner.invoke(
            cli, ["saved", "--saved-file", str(saved_file), "clear"], input="n\n"
        )

        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert len(SavedRecipes(saved_file)) == 2

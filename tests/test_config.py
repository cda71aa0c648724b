"""Tests for the config module."""

from pathlib import Path

import pytest

from crave import config


@pytest.fixture
def clear_env(monkeypatch):
    """Clear any Crave environment settings."""
    for name in ("CRAVE_FIRESTORE_PROJECT", "CRAVE_FIRESTORE_API_KEY", "CRAVE_RECIPES_FILE"):
        monkeypatch.delenv(name, raising=False)


class TestFirestoreSettings:
    """Tests for get_firestore_settings."""

    def test_from_environment(self, clear_env, monkeypatch):
        monkeypatch.setenv("CRAVE_FIRESTORE_PROJECT", "crave-prod")
        monkeypatch.setenv("CRAVE_FIRESTORE_API_KEY", "key-123")

        assert config.get_firestore_settings() == ("crave-prod", "key-123")

    def test_unset(self, clear_env):
        assert config.get_firestore_settings() == (None, None)

    def test_blank_values_are_unset(self, clear_env, monkeypatch):
        monkeypatch.setenv("CRAVE_FIRESTORE_PROJECT", "")

        assert config.get_firestore_settings() == (None, None)


class TestRecipesFile:
    """Tests for get_recipes_file."""

    def test_unset(self, clear_env):
        assert config.get_recipes_file() is None

    def test_expands_user(self, clear_env, monkeypatch):
        monkeypatch.setenv("CRAVE_RECIPES_FILE", "~/recipes.json")

        assert config.get_recipes_file() == Path.home() / "recipes.json"


class TestConfigDir:
    """Tests for ensure_config_dir."""

    def test_creates_directory(self, tmp_path, monkeypatch):
        target = tmp_path / ".crave"
        monkeypatch.setattr("crave.config.CONFIG_DIR", target)

        assert config.ensure_config_dir() == target
        assert target.is_dir()


class TestDeckTuning:
    """The deck constants the gesture protocol relies on."""

    def test_constants(self):
        assert config.SWIPE_THRESHOLD == 150
        assert config.SETTLE_DELAY == pytest.approx(0.3)
        assert config.MAX_VISIBLE_CARDS == 3
        assert config.CARD_STACK_OFFSET == 10
        assert config.CARD_STACK_SCALE == pytest.approx(0.95)

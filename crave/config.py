"""Configuration and deck tuning for Crave."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# App directories
APP_NAME = "crave"
CONFIG_DIR = Path.home() / f".{APP_NAME}"
SAVED_RECIPES_FILE = CONFIG_DIR / "saved_recipes.json"

# Firestore REST endpoint for the recipes collection
FIRESTORE_BASE_URL = "https://firestore.googleapis.com/v1"
FIRESTORE_COLLECTION = "recipes"
HTTP_TIMEOUT = 10.0

# Deck stacking
MAX_VISIBLE_CARDS = 3
CARD_STACK_OFFSET = 10.0
CARD_STACK_SCALE = 0.95
BACK_CARD_OPACITY = 0.5

# Gesture resolution (logical units / degrees / seconds)
SWIPE_THRESHOLD = 150.0
ROTATION_DIVISOR = 20.0
INDICATOR_DEAD_ZONE = 20.0
INDICATOR_FADE_DISTANCE = 100.0
INDICATOR_GROW_DISTANCE = 400.0
INDICATOR_MAX_GROWTH = 0.25
FLY_OUT_OFFSET = 500.0
FLY_OUT_ROTATION = 20.0
SETTLE_DELAY = 0.3


def ensure_config_dir() -> Path:
    """Create the config directory if needed and return it."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR


def get_firestore_settings() -> tuple[str | None, str | None]:
    """Get the Firestore project id and API key from the environment."""
    project = os.getenv("CRAVE_FIRESTORE_PROJECT") or None
    api_key = os.getenv("CRAVE_FIRESTORE_API_KEY") or None
    return project, api_key


def get_recipes_file() -> Path | None:
    """Get the local recipes file configured in the environment, if any."""
    value = os.getenv("CRAVE_RECIPES_FILE")
    if not value:
        return None
    return Path(value).expanduser()

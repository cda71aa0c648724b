"""Saved recipes collection fed by liked deck cards."""

import json
import logging
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

from .recipe import Recipe

logger = logging.getLogger(__name__)


class SavedRecipesError(Exception):
    """Exception raised for saved-collection storage errors."""

    pass


class SavedRecipes:
    """
    Chronological list of liked recipes.

    ``append`` matches the deck's ``on_like`` hook. When a path is given the
    collection is loaded from it on construction and written back after
    every change. Duplicates are kept.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._recipes: list[Recipe] = []
        self._saved_at: list[str] = []
        if path is not None:
            self._load()

    def __len__(self) -> int:
        return len(self._recipes)

    def __iter__(self) -> Iterator[Recipe]:
        return iter(list(self._recipes))

    @property
    def recipes(self) -> list[Recipe]:
        return list(self._recipes)

    def get(self, position: int) -> Recipe:
        """
        Get a saved recipe by its 1-based position.

        Raises:
            SavedRecipesError: If no recipe is saved at that position
        """
        if not 1 <= position <= len(self._recipes):
            raise SavedRecipesError(f"No saved recipe at position {position}")
        return self._recipes[position - 1]

    def saved_at(self, position: int) -> str | None:
        """Timestamp of the like that saved the recipe at a 1-based position."""
        if not 1 <= position <= len(self._saved_at):
            return None
        return self._saved_at[position - 1]

    def append(self, recipe: Recipe) -> None:
        """Append a liked recipe and persist the collection."""
        self._recipes.append(recipe)
        self._saved_at.append(datetime.now().isoformat())
        logger.info("Saved recipe %r (%d saved)", recipe.name, len(self._recipes))
        self._save()

    def clear(self) -> None:
        self._recipes.clear()
        self._saved_at.clear()
        self._save()

    def _load(self) -> None:
        """Load the collection from disk."""
        if self.path is None or not self.path.exists():
            return

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SavedRecipesError(f"Failed to load saved recipes: {e}") from e

        if not isinstance(data, dict):
            raise SavedRecipesError("Saved recipes file is corrupt: expected an object")

        items = data.get("recipes", [])
        saved_at = data.get("saved_at", [])
        if not isinstance(items, list) or not isinstance(saved_at, list):
            raise SavedRecipesError("Saved recipes file is corrupt: expected lists")

        try:
            recipes = [Recipe.from_dict(item) for item in items]
        except (ValueError, AttributeError) as e:
            raise SavedRecipesError(f"Saved recipes file is corrupt: {e}") from e

        saved_at = [str(stamp) for stamp in saved_at]
        # Older files may lack timestamps for some entries
        saved_at += [""] * (len(recipes) - len(saved_at))

        self._recipes = recipes
        self._saved_at = saved_at[: len(recipes)]
        logger.debug("Loaded %d saved recipes from %s", len(recipes), self.path)

    def _save(self) -> None:
        """Save the collection to disk."""
        if self.path is None:
            return

        data = {
            "recipes": [recipe.to_dict() for recipe in self._recipes],
            "saved_at": self._saved_at,
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise SavedRecipesError(f"Failed to save recipes: {e}") from e

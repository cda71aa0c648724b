"""Crave - Swipe-to-save recipe discovery in the terminal."""

__version__ = "1.0.0"

from .deck import CardTransform, DeckController, DeckSnapshot, DragSample, Motion, Outcome
from .loader import FirestoreClient, RecipeLoadError, fetch_recipes, load_recipes_file
from .recipe import Recipe
from .saved import SavedRecipes, SavedRecipesError
from .visual import CardVisual, DragFeedback, Indicator, derive_visual, drag_feedback

__all__ = [
    "DeckController",
    "DeckSnapshot",
    "DragSample",
    "CardTransform",
    "Motion",
    "Outcome",
    "CardVisual",
    "DragFeedback",
    "Indicator",
    "derive_visual",
    "drag_feedback",
    "Recipe",
    "SavedRecipes",
    "SavedRecipesError",
    "FirestoreClient",
    "RecipeLoadError",
    "fetch_recipes",
    "load_recipes_file",
]

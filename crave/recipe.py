"""Recipe data model."""

from dataclasses import dataclass, field
from typing import Any

# Backend documents use camelCase for a few fields
_FIELD_ALIASES = {
    "imageName": "image_url",
    "image_name": "image_url",
    "imageUrl": "image_url",
    "prepTime": "prep_time",
}


@dataclass
class Recipe:
    """A recipe shown on a deck card.

    The deck treats recipes as opaque values; only the presentation layer
    and the saved collection look inside.
    """

    name: str
    description: str = ""
    image_url: str = ""
    origin: str = ""
    prep_time: str = ""
    servings: int | None = None
    difficulty: str = ""
    tags: list[str] = field(default_factory=list)
    calories: int | None = None
    protein: int | None = None
    carbs: int | None = None
    fat: int | None = None
    ingredients: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    id: str | None = None

    @property
    def meta_line(self) -> str:
        """Origin, prep time and difficulty joined for a card caption."""
        parts = [p for p in (self.origin, self.prep_time, self.difficulty) if p]
        return " · ".join(parts)

    @property
    def nutrition(self) -> dict[str, int | None]:
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert recipe to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "image_url": self.image_url,
            "origin": self.origin,
            "prep_time": self.prep_time,
            "servings": self.servings,
            "difficulty": self.difficulty,
            "tags": list(self.tags),
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
            "ingredients": list(self.ingredients),
            "instructions": list(self.instructions),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Recipe":
        """Create recipe from dictionary.

        Raises:
            ValueError: If the data has no usable name or a field has the wrong type
        """
        normalized = {_FIELD_ALIASES.get(key, key): value for key, value in data.items()}

        name = normalized.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Recipe data is missing a name")

        return cls(
            name=name.strip(),
            description=_optional_str(normalized, "description"),
            image_url=_optional_str(normalized, "image_url"),
            origin=_optional_str(normalized, "origin"),
            prep_time=_optional_str(normalized, "prep_time"),
            servings=_optional_int(normalized.get("servings")),
            difficulty=_optional_str(normalized, "difficulty"),
            tags=_str_list(normalized, "tags"),
            calories=_optional_int(normalized.get("calories")),
            protein=_optional_int(normalized.get("protein")),
            carbs=_optional_int(normalized.get("carbs")),
            fat=_optional_int(normalized.get("fat")),
            ingredients=_str_list(normalized, "ingredients"),
            instructions=_str_list(normalized, "instructions"),
            id=_optional_str(normalized, "id") or None,
        )


def _optional_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"Expected text for {key}, got {value!r}")
    return value


def _str_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"Expected a list of text for {key}, got {value!r}")
    return list(value)


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Expected an integer, got {value!r}") from None

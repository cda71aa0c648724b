"""Recipe loading from local files and the Firestore REST API."""

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx

from .config import FIRESTORE_BASE_URL, FIRESTORE_COLLECTION, HTTP_TIMEOUT
from .recipe import Recipe

logger = logging.getLogger(__name__)


class RecipeLoadError(Exception):
    """Exception raised when recipes cannot be fetched or read."""

    pass


def decode_recipes(items: list[Any]) -> list[Recipe]:
    """Decode recipe dicts, skipping entries that are not valid recipes."""
    recipes = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning("Skipping recipe %d: expected an object", i)
            continue
        try:
            recipes.append(Recipe.from_dict(item))
        except (TypeError, ValueError) as e:
            logger.warning("Skipping recipe %d: %s", i, e)
    return recipes


def load_recipes_file(path: Path) -> list[Recipe]:
    """
    Load recipes from a JSON file.

    The file holds either a list of recipe objects or an object with a
    ``recipes`` list.

    Raises:
        RecipeLoadError: If the file cannot be read or has the wrong shape
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise RecipeLoadError(f"Failed to read recipes from {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("recipes")
    if not isinstance(data, list):
        raise RecipeLoadError(f"{path} does not contain a list of recipes")

    recipes = decode_recipes(data)
    logger.info("Read %d recipes from %s", len(recipes), path)
    return recipes


def decode_firestore_value(value: dict[str, Any]) -> Any:
    """Convert a Firestore REST typed value into a plain Python value."""
    if "stringValue" in value:
        return value["stringValue"]
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "nullValue" in value:
        return None
    if "timestampValue" in value:
        return value["timestampValue"]
    if "arrayValue" in value:
        return [decode_firestore_value(v) for v in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return decode_firestore_fields(value["mapValue"].get("fields", {}))
    return None


def decode_firestore_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: decode_firestore_value(value) for key, value in fields.items()}


def decode_firestore_document(document: dict[str, Any]) -> dict[str, Any]:
    """Flatten a Firestore document into a dict, using the last name segment as id."""
    data = decode_firestore_fields(document.get("fields", {}))
    name = document.get("name")
    if name:
        data.setdefault("id", name.rsplit("/", 1)[-1])
    return data


class FirestoreClient:
    """Read-only client for the recipes collection of a Firestore database."""

    def __init__(
        self,
        project_id: str,
        api_key: str | None = None,
        collection: str = FIRESTORE_COLLECTION,
        page_size: int = 100,
    ) -> None:
        self.project_id = project_id
        self.api_key = api_key
        self.collection = collection
        self.page_size = page_size
        self.client = httpx.Client(
            headers={"Accept": "application/json"},
            timeout=HTTP_TIMEOUT,
        )

    @property
    def collection_url(self) -> str:
        return (
            f"{FIRESTORE_BASE_URL}/projects/{self.project_id}"
            f"/databases/(default)/documents/{self.collection}"
        )

    def _get_page(self, page_token: str | None) -> dict[str, Any]:
        params: dict[str, Any] = {"pageSize": self.page_size}
        if page_token:
            params["pageToken"] = page_token
        if self.api_key:
            params["key"] = self.api_key

        try:
            response = self.client.get(self.collection_url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise RecipeLoadError(
                f"Recipe fetch failed: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise RecipeLoadError(f"Recipe fetch failed: {e}") from e
        except ValueError as e:
            raise RecipeLoadError(f"Recipe fetch returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise RecipeLoadError("Recipe fetch returned an unexpected payload")
        return data

    def list_recipes(self) -> list[Recipe]:
        """
        Fetch every recipe in the collection, following pagination.

        Documents that do not decode into a recipe are skipped.

        Raises:
            RecipeLoadError: On network, HTTP or payload errors
        """
        documents: list[dict[str, Any]] = []
        page_token: str | None = None
        while True:
            data = self._get_page(page_token)
            documents.extend(data.get("documents", []))
            page_token = data.get("nextPageToken")
            if not page_token:
                break

        recipes = decode_recipes([decode_firestore_document(doc) for doc in documents])
        logger.info("Fetched %d recipes from Firestore project %s", len(recipes), self.project_id)
        return recipes

    def close(self) -> None:
        self.client.close()


def fetch_recipes(fetch: Callable[[], list[Recipe]]) -> list[Recipe]:
    """
    Run ``fetch`` for a deck session.

    A failed fetch is logged and comes back as an empty list, which the deck
    shows as an empty session.
    """
    try:
        return fetch()
    except RecipeLoadError as e:
        logger.error("Failed to load recipes: %s", e)
        return []

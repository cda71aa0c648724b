"""CLI entry point for Crave."""

import logging
from collections.abc import Callable
from functools import partial
from pathlib import Path

import click
from textual.logging import TextualHandler

from . import __version__
from .config import SAVED_RECIPES_FILE, get_firestore_settings, get_recipes_file
from .loader import FirestoreClient, RecipeLoadError, load_recipes_file
from .recipe import Recipe
from .saved import SavedRecipes, SavedRecipesError
from .tui import SwipeSummary, recipe_detail_text, run_swipe


def configure_logging(verbose: bool) -> None:
    """Route log records through Textual so they don't tear the TUI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[TextualHandler()],
        force=True,
    )


def open_saved(saved_file: Path | None, persist: bool = True) -> SavedRecipes:
    """Open the saved collection, exiting with an error if it is unreadable."""
    try:
        return SavedRecipes((saved_file or SAVED_RECIPES_FILE) if persist else None)
    except SavedRecipesError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1) from None


def resolve_fetch(
    file_path: Path | None,
    project: str | None,
    api_key: str | None,
) -> Callable[[], list[Recipe]] | None:
    """Pick the recipe source: options first, then environment."""
    if file_path is not None:
        return partial(load_recipes_file, file_path)
    env_project, env_key = get_firestore_settings()
    if project is None:
        env_file = get_recipes_file()
        if env_file is not None:
            return partial(load_recipes_file, env_file)
        project = env_project
    if project is None:
        return None

    def fetch() -> list[Recipe]:
        client = FirestoreClient(project, api_key or env_key)
        try:
            return client.list_recipes()
        finally:
            client.close()

    return fetch


def display_summary(summary: SwipeSummary, saved_count: int) -> None:
    """Display the outcome of a swipe session."""
    click.echo()
    click.echo("=" * 50)
    click.echo("SESSION SUMMARY")
    click.echo("=" * 50)
    click.echo(f"Seen: {summary.seen} of {summary.total}")
    click.echo(f"Liked: {len(summary.liked)} | Skipped: {len(summary.skipped)}")
    for recipe in summary.liked:
        click.echo(f"  ♥ {recipe.name}")
    click.echo(f"Saved recipes: {saved_count}")
    click.echo("-" * 50)


# ============================================================================
# Main CLI Group
# ============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="crave")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Crave - swipe through recipes and keep the ones you like."""
    configure_logging(verbose)


@cli.command()
@click.option(
    "--file",
    "-f",
    "file_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Load recipes from a JSON file",
)
@click.option("--project", "-p", help="Firestore project holding the recipes collection")
@click.option("--api-key", help="Firestore web API key")
@click.option(
    "--saved-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where liked recipes are stored",
)
@click.option("--persist/--no-persist", default=True, help="Store liked recipes on disk")
def swipe(
    file_path: Path | None,
    project: str | None,
    api_key: str | None,
    saved_file: Path | None,
    persist: bool,
):
    """Swipe through recipe cards: right to like, left to skip."""
    fetch = resolve_fetch(file_path, project, api_key)
    if fetch is None:
        click.echo(
            "No recipe source. Use --file or --project, "
            "or set CRAVE_RECIPES_FILE / CRAVE_FIRESTORE_PROJECT.",
            err=True,
        )
        raise SystemExit(1)

    saved = open_saved(saved_file, persist)
    summary = run_swipe(fetch, saved)
    display_summary(summary, len(saved))


# ============================================================================
# Saved Recipes Commands
# ============================================================================


@cli.group()
@click.option(
    "--saved-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where liked recipes are stored",
)
@click.pass_context
def saved(ctx: click.Context, saved_file: Path | None):
    """Browse recipes you liked."""
    ctx.obj = open_saved(saved_file)


@saved.command("list")
@click.pass_obj
def saved_list(collection: SavedRecipes):
    """List saved recipes."""
    if not len(collection):
        click.echo("No saved recipes yet. Start swiping to save your favorites!")
        return

    click.echo(f"Saved recipes ({len(collection)}):")
    click.echo()
    for i, recipe in enumerate(collection, 1):
        meta = f" ({recipe.meta_line})" if recipe.meta_line else ""
        click.echo(f"  {i}. {recipe.name}{meta}")


@saved.command("show")
@click.argument("position", type=int)
@click.pass_obj
def saved_show(collection: SavedRecipes, position: int):
    """Show the saved recipe at POSITION (see 'crave saved list')."""
    try:
        recipe = collection.get(position)
    except SavedRecipesError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1) from None

    click.echo(recipe_detail_text(recipe))
    saved_at = collection.saved_at(position)
    if saved_at:
        click.echo()
        click.echo(f"Saved: {saved_at}")


@saved.command("clear")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_obj
def saved_clear(collection: SavedRecipes, yes: bool):
    """Remove all saved recipes."""
    if not yes and not click.confirm(f"Remove all {len(collection)} saved recipes?"):
        click.echo("Cancelled")
        return

    try:
        collection.clear()
    except SavedRecipesError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1) from None
    click.echo("✓ Saved recipes cleared")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()

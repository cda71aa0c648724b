"""Interactive TUI for swiping through recipe cards."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from textual import events, on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical, VerticalScroll
from textual.css.scalar import ScalarOffset
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, DataTable, Footer, Header, Label, Static

from .deck import DeckController, DeckSnapshot, Motion, Outcome
from .loader import fetch_recipes
from .recipe import Recipe
from .saved import SavedRecipes, SavedRecipesError
from .visual import CardVisual, Indicator

# Logical drag units per terminal cell
UNITS_PER_COLUMN = 10
UNITS_PER_ROW = 10

CARD_WIDTH = 52
KEYBOARD_NUDGE = 50.0
SPRING_BACK_DURATION = 0.4


@dataclass
class SwipeSummary:
    """Result from a swipe session."""

    total: int = 0
    liked: list[Recipe] = field(default_factory=list)
    skipped: list[Recipe] = field(default_factory=list)

    @property
    def seen(self) -> int:
        return len(self.liked) + len(self.skipped)


def to_cells(x_units: float, y_units: float) -> tuple[int, int]:
    """Convert logical offsets to a terminal (columns, rows) offset."""
    return round(x_units / UNITS_PER_COLUMN), round(y_units / UNITS_PER_ROW)


def drag_translation(origin: tuple[int, int], screen_x: int, screen_y: int) -> tuple[float, float]:
    """Logical drag translation of the pointer from where the drag started."""
    start_x, start_y = origin
    return (
        float((screen_x - start_x) * UNITS_PER_COLUMN),
        float((screen_y - start_y) * UNITS_PER_ROW),
    )


def card_text(recipe: Recipe) -> str:
    """Plain text body shown on a deck card."""
    lines = [recipe.name]
    if recipe.meta_line:
        lines.append(recipe.meta_line)
    if recipe.tags:
        lines.append("  ".join(f"#{tag}" for tag in recipe.tags))
    if recipe.description:
        lines.append("")
        lines.append(recipe.description)
    return "\n".join(lines)


def indicator_label(indicator: Indicator, opacity: float) -> str:
    """Badge text for the drag indicator; strength shown as filled bars."""
    if indicator is Indicator.NONE:
        return ""
    bars = "█" * max(1, round(opacity * 5))
    if indicator is Indicator.LIKE:
        return f"♥ LIKE {bars}"
    return f"✗ SKIP {bars}"


def recipe_detail_text(recipe: Recipe) -> str:
    """Plain text recipe detail: overview, ingredients, instructions, nutrition."""
    sections = [recipe.name]
    if recipe.meta_line:
        sections.append(recipe.meta_line)
    if recipe.servings:
        sections.append(f"Serves {recipe.servings}")
    if recipe.description:
        sections.append(recipe.description)

    if recipe.ingredients:
        sections.append("INGREDIENTS\n" + "\n".join(f"  • {ing}" for ing in recipe.ingredients))
    if recipe.instructions:
        sections.append(
            "INSTRUCTIONS\n"
            + "\n".join(f"  {i}. {step}" for i, step in enumerate(recipe.instructions, 1))
        )

    nutrition = [
        f"{label}: {value}{unit}"
        for (label, unit), value in zip(
            (("Calories", " kcal"), ("Protein", " g"), ("Carbs", " g"), ("Fat", " g")),
            recipe.nutrition.values(),
        )
        if value is not None
    ]
    if nutrition:
        sections.append("NUTRITION\n  " + " | ".join(nutrition))

    return "\n\n".join(sections)


class CardView(Static):
    """One card of the stack; the top card turns mouse drags into gestures."""

    def __init__(self, deck: DeckController, id: str | None = None) -> None:
        super().__init__("", id=id, markup=False)
        self.deck = deck
        self.index: int | None = None
        self._drag_origin: tuple[int, int] | None = None

    def show(self, index: int, recipe: Recipe, visual: CardVisual, layer: str) -> None:
        self.index = index
        self.display = True
        self.update(card_text(recipe))
        self.styles.layer = layer
        self.styles.width = round(CARD_WIDTH * visual.scale)
        self.styles.opacity = visual.opacity
        self.border_title = ""
        self.border_subtitle = ""
        self.remove_class("-like", "-skip")

    def place(self, visual: CardVisual) -> None:
        """Put a card below the top card at its resting stack offset."""
        self._move_to(0, visual.offset_y)

    def apply_transform(self, snapshot: DeckSnapshot, visual: CardVisual) -> None:
        transform = snapshot.transform
        if transform.motion is Motion.REST:
            self._move_to(0, visual.offset_y)
            return
        if transform.motion is Motion.SPRING_BACK:
            self._move_to(0, visual.offset_y, duration=SPRING_BACK_DURATION, easing="out_back")
            return

        self.border_title = indicator_label(transform.indicator, transform.indicator_opacity)
        self.border_subtitle = f"{transform.rotation:+.0f}°"
        self.set_class(transform.indicator is Indicator.LIKE, "-like")
        self.set_class(transform.indicator is Indicator.SKIP, "-skip")

        x, y = transform.offset_x, visual.offset_y + transform.offset_y
        if transform.motion is Motion.FLY_OUT:
            self._move_to(x, y, duration=self.deck.settle_delay, easing="in_cubic")
        else:
            self._move_to(x, y)

    def hide(self) -> None:
        self.index = None
        self.display = False

    def _move_to(
        self,
        x_units: float,
        y_units: float,
        duration: float | None = None,
        easing: str = "linear",
    ) -> None:
        offset = ScalarOffset.from_offset(to_cells(x_units, y_units))
        # A new position always replaces a spring or fly-out still in flight
        self.app.animator.force_stop_animation(self.styles, "offset")
        if duration is None:
            self.styles.offset = offset
        else:
            self.styles.animate("offset", offset, duration=duration, easing=easing)

    def on_mouse_down(self, event: events.MouseDown) -> None:
        if self.index is None or not self.deck.begin_gesture(self.index):
            return
        self._drag_origin = (event.screen_x, event.screen_y)
        self.capture_mouse()

    def on_mouse_move(self, event: events.MouseMove) -> None:
        if self._drag_origin is None:
            return
        dx, dy = drag_translation(self._drag_origin, event.screen_x, event.screen_y)
        self.deck.on_gesture_update(dx, dy, self.index)

    def on_mouse_up(self, event: events.MouseUp) -> None:
        if self._drag_origin is None:
            return
        dx, dy = drag_translation(self._drag_origin, event.screen_x, event.screen_y)
        self._drag_origin = None
        self.release_mouse()
        self.deck.on_gesture_end(dx, dy, self.index)


class CardStack(Container):
    """Renders the visible window of the deck, or the caught-up panel."""

    def __init__(self, deck: DeckController, id: str | None = None) -> None:
        super().__init__(id=id)
        self.deck = deck
        self.cards = [CardView(deck, id=f"card-{i}") for i in range(deck.max_visible)]

    def compose(self) -> ComposeResult:
        yield from self.cards
        with Vertical(id="caught-up"):
            yield Label("✓ You're all caught up!", id="caught-up-title")
            yield Label("Check back later for more recipes", id="caught-up-desc")

    def on_mount(self) -> None:
        card_layers = [f"card{i}" for i in reversed(range(len(self.cards)))]
        self.styles.layers = ("default", *card_layers)
        self.render_snapshot(self.deck.snapshot())

    def render_snapshot(self, snapshot: DeckSnapshot) -> None:
        visible = snapshot.visible_cards()
        # Session 0 means nothing has been loaded yet
        self.query_one("#caught-up").display = snapshot.session > 0 and snapshot.exhausted

        # Paint order is deepest first, so the last card goes on the top layer
        for position, (index, recipe, visual) in enumerate(visible):
            card = self.cards[position]
            card.show(index, recipe, visual, layer=f"card{len(visible) - 1 - position}")
            if index == snapshot.cursor:
                card.apply_transform(snapshot, visual)
            else:
                card.place(visual)
        for card in self.cards[len(visible) :]:
            card.hide()


class RecipeDetailModal(ModalScreen[None]):
    """Modal showing a recipe's full detail."""

    BINDINGS = [
        Binding("escape", "close", "Close"),
    ]

    def __init__(self, recipe: Recipe, name: str | None = None) -> None:
        super().__init__(name=name)
        self.recipe = recipe

    def compose(self) -> ComposeResult:
        with Vertical(id="detail-dialog"):
            with VerticalScroll(id="detail-body"):
                yield Static(recipe_detail_text(self.recipe), id="detail-text", markup=False)
            with Horizontal(id="detail-buttons"):
                yield Button("Close", variant="default", id="btn-close")

    @on(Button.Pressed, "#btn-close")
    def on_close(self) -> None:
        self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)


class SavedRecipesScreen(Screen[None]):
    """List of liked recipes."""

    BINDINGS = [
        Binding("escape", "back", "Back"),
        Binding("s", "back", "Back"),
    ]

    def __init__(self, saved: SavedRecipes) -> None:
        super().__init__()
        self.saved = saved
        self.recipes = saved.recipes

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="saved-container"):
            if self.recipes:
                table = DataTable(id="saved-table")
                table.cursor_type = "row"
                table.add_columns("#", "Recipe", "Origin", "Prep time", "Difficulty")
                for i, recipe in enumerate(self.recipes, 1):
                    table.add_row(
                        str(i), recipe.name[:35], recipe.origin, recipe.prep_time, recipe.difficulty
                    )
                yield table
            else:
                yield Label("No saved recipes yet", id="saved-empty-title")
                yield Label("Start swiping to save your favorites!", id="saved-empty-desc")
        yield Footer()

    def on_mount(self) -> None:
        self.title = f"Saved Recipes ({len(self.recipes)})"

    @on(DataTable.RowSelected)
    def on_row_selected(self, event: DataTable.RowSelected) -> None:
        """Open the recipe detail when a row is clicked or Enter pressed."""
        if 0 <= event.cursor_row < len(self.recipes):
            self.app.push_screen(RecipeDetailModal(self.recipes[event.cursor_row]))

    def action_back(self) -> None:
        self.app.pop_screen()


class SwipeApp(App[SwipeSummary]):
    """Recipe deck: drag cards or use the buttons to like and skip."""

    CSS = """
    Screen {
        background: $surface;
    }

    #main-container {
        height: 100%;
        padding: 1;
    }

    #status {
        height: 3;
        padding: 0 1;
        background: $primary-background;
        color: $text;
        content-align: center middle;
    }

    #stack {
        height: 1fr;
        align: center middle;
    }

    CardView {
        height: 14;
        padding: 1 2;
        background: $panel;
        border: round $primary;
    }

    CardView.-like {
        border: round $success;
    }

    CardView.-skip {
        border: round $error;
    }

    #caught-up {
        width: auto;
        height: auto;
        align: center middle;
    }

    #caught-up-title {
        text-style: bold;
        color: $success;
    }

    #caught-up-desc {
        color: $text-muted;
    }

    #button-bar {
        height: 3;
        align: center middle;
        padding: 0 1;
    }

    #button-bar Button {
        margin: 0 2;
    }

    #detail-dialog {
        width: 80;
        height: 80%;
        padding: 1 2;
        background: $surface;
        border: solid $primary;
    }

    #detail-buttons {
        height: 3;
        align: center middle;
    }

    #saved-container {
        height: 100%;
        padding: 1;
    }

    #saved-table {
        height: 1fr;
    }

    #saved-empty-title {
        text-style: bold;
        padding: 1;
    }

    #saved-empty-desc {
        color: $text-muted;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("l", "like", "Like"),
        Binding("h", "skip", "Skip"),
        Binding("right", "nudge(1)", "Drag right", show=False),
        Binding("left", "nudge(-1)", "Drag left", show=False),
        Binding("space", "release", "Release"),
        Binding("d", "show_detail", "Detail"),
        Binding("s", "show_saved", "Saved"),
        Binding("q", "quit_summary", "Quit"),
        Binding("escape", "quit_summary", "Quit", show=False),
    ]

    def __init__(
        self,
        fetch: Callable[[], list[Recipe]],
        saved: SavedRecipes,
        title: str | None = None,
    ) -> None:
        super().__init__()
        self.fetch = fetch
        self.saved = saved
        self.screen_title = title or "Crave"
        self.summary = SwipeSummary()
        self.deck = DeckController(on_like=self._save_recipe, on_outcome=self._record_outcome)
        self._keyboard_dx = 0.0
        self._unsubscribe = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="main-container"):
            self._status_bar = Static(self._get_status(self.deck.snapshot()), id="status")
            self._stack_view = CardStack(self.deck, id="stack")
            yield self._status_bar
            yield self._stack_view
            with Horizontal(id="button-bar"):
                yield Button("✗ Skip (h)", variant="error", id="btn-skip")
                yield Button("♥ Like (l)", variant="success", id="btn-like")
        yield Footer()

    def on_ready(self) -> None:
        self.title = self.screen_title
        self._unsubscribe = self.deck.subscribe(self._on_deck_change)
        self.load_recipes()

    @work(thread=True, exclusive=True, group="recipes")
    def load_recipes(self) -> None:
        """Fetch recipes off the event loop, then load them into the deck."""
        recipes = fetch_recipes(self.fetch)
        self.call_from_thread(self._start_session, recipes)

    def _start_session(self, recipes: list[Recipe]) -> None:
        self.summary.total = len(recipes)
        self.deck.load(recipes)
        if not recipes:
            self.notify("No recipes to show", severity="warning")

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()

    def _get_status(self, snapshot: DeckSnapshot) -> str:
        if snapshot.session == 0:
            return "Loading recipes..."
        if snapshot.exhausted:
            return f"Seen: {self.summary.seen} | Saved: {len(self.saved)}"
        return (
            f"Card {snapshot.cursor + 1} of {len(snapshot.queue)} | "
            f"Liked: {len(self.summary.liked)} | Saved: {len(self.saved)}"
        )

    def _on_deck_change(self, snapshot: DeckSnapshot) -> None:
        if snapshot.drag is None:
            self._keyboard_dx = 0.0
        self._stack_view.render_snapshot(snapshot)
        self._status_bar.update(self._get_status(snapshot))

    def _save_recipe(self, recipe: Recipe) -> None:
        try:
            self.saved.append(recipe)
        except SavedRecipesError as e:
            self.notify(str(e), title="Could not save recipe", severity="error")

    def _record_outcome(self, index: int, recipe: Recipe, outcome: Outcome) -> None:
        if outcome is Outcome.LIKE:
            self.summary.liked.append(recipe)
        elif outcome is Outcome.SKIP:
            self.summary.skipped.append(recipe)

    def action_like(self) -> None:
        self.deck.like_current()

    def action_skip(self) -> None:
        self.deck.skip_current()

    def action_nudge(self, direction: int) -> None:
        if self.deck.exhausted or self.deck.is_committing:
            return
        self._keyboard_dx += direction * KEYBOARD_NUDGE
        self.deck.on_gesture_update(self._keyboard_dx, 0.0)

    def action_release(self) -> None:
        dx, self._keyboard_dx = self._keyboard_dx, 0.0
        self.deck.on_gesture_end(dx, 0.0)

    def action_show_detail(self) -> None:
        recipe = self.deck.snapshot().current
        if recipe is not None:
            self.push_screen(RecipeDetailModal(recipe))

    def action_show_saved(self) -> None:
        self.push_screen(SavedRecipesScreen(self.saved))

    def action_quit_summary(self) -> None:
        self.exit(self.summary)

    @on(Button.Pressed, "#btn-like")
    def on_like_button(self) -> None:
        self.action_like()

    @on(Button.Pressed, "#btn-skip")
    def on_skip_button(self) -> None:
        self.action_skip()


def run_swipe(
    fetch: Callable[[], list[Recipe]],
    saved: SavedRecipes,
    title: str | None = None,
) -> SwipeSummary:
    """
    Launch the swipe deck TUI.

    Args:
        fetch: Loads the recipes for the deck; a RecipeLoadError shows an empty deck
        saved: Collection that receives liked recipes
        title: Optional title for the screen

    Returns:
        SwipeSummary of the session
    """
    app = SwipeApp(fetch, saved, title)
    result = app.run()
    # Handle case where app exits without explicit result
    if result is None:
        return app.summary
    return result

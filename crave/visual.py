"""Card visual state derivation for the swipe deck.

Everything here is a pure function of its arguments; the render layer calls
these on every frame and never needs to cache the results.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from .config import (
    BACK_CARD_OPACITY,
    CARD_STACK_OFFSET,
    CARD_STACK_SCALE,
    INDICATOR_DEAD_ZONE,
    INDICATOR_FADE_DISTANCE,
    INDICATOR_GROW_DISTANCE,
    INDICATOR_MAX_GROWTH,
    MAX_VISIBLE_CARDS,
    ROTATION_DIVISOR,
)


class Indicator(str, Enum):
    """Feedback badge shown on the top card while it is dragged."""

    NONE = "none"
    LIKE = "like"
    SKIP = "skip"


@dataclass(frozen=True)
class CardVisual:
    """Stacking hints for one card in the deck."""

    visible: bool
    offset_y: float = 0.0
    scale: float = 1.0
    opacity: float = 1.0
    z_order: int = 0


@dataclass(frozen=True)
class DragFeedback:
    """Rotation and indicator derived from a horizontal drag translation."""

    rotation: float
    indicator: Indicator
    indicator_opacity: float = 0.0
    indicator_scale: float = 1.0


HIDDEN = CardVisual(visible=False)


def is_visible(index: int, cursor: int, max_visible: int = MAX_VISIBLE_CARDS) -> bool:
    """Whether the card at ``index`` is inside the mounted stack window."""
    return cursor <= index < cursor + max_visible


def derive_visual(
    index: int,
    cursor: int,
    max_visible: int = MAX_VISIBLE_CARDS,
    queue_length: int | None = None,
) -> CardVisual:
    """
    Map a card's queue position to its stacking hints.

    Args:
        index: Position of the card in the queue
        cursor: Index of the current top card
        max_visible: Size of the stack window
        queue_length: Queue length; when given, z_order is ``length - index``

    Returns:
        CardVisual for the card. Cards outside the window get ``HIDDEN``.
    """
    if not is_visible(index, cursor, max_visible):
        return HIDDEN

    is_top = index == cursor
    z_order = queue_length - index if queue_length is not None else -index
    return CardVisual(
        visible=True,
        offset_y=(index - cursor) * CARD_STACK_OFFSET,
        scale=1.0 if is_top else CARD_STACK_SCALE,
        opacity=1.0 if is_top else BACK_CARD_OPACITY,
        z_order=z_order,
    )


def visible_indices(
    cursor: int, queue_length: int, max_visible: int = MAX_VISIBLE_CARDS
) -> Iterator[int]:
    """Yield the indices of mounted cards, top card first."""
    yield from range(max(cursor, 0), min(cursor + max_visible, queue_length))


def drag_feedback(dx: float) -> DragFeedback:
    """
    Derive the top card's rotation and like/skip indicator from a drag.

    Within the dead zone no indicator is shown. Past it the indicator fades
    in over ``INDICATOR_FADE_DISTANCE`` and grows by up to
    ``INDICATOR_MAX_GROWTH``.
    """
    rotation = dx / ROTATION_DIVISOR
    distance = abs(dx)
    if distance <= INDICATOR_DEAD_ZONE:
        return DragFeedback(rotation=rotation, indicator=Indicator.NONE)

    return DragFeedback(
        rotation=rotation,
        indicator=Indicator.LIKE if dx > 0 else Indicator.SKIP,
        indicator_opacity=min(distance / INDICATOR_FADE_DISTANCE, 1.0),
        indicator_scale=1.0 + min(distance / INDICATOR_GROW_DISTANCE, INDICATOR_MAX_GROWTH),
    )

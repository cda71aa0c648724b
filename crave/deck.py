"""Swipe deck controller: queue, cursor and gesture resolution.

The controller is host independent. A render layer reads ``snapshot()`` or
registers a listener with ``subscribe()``; an input layer feeds it a
start/update/end triplet of drag translations, or presses the like/skip
buttons. Nothing here raises for invalid input: stale or out-of-turn calls
are ignored.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .config import (
    FLY_OUT_OFFSET,
    FLY_OUT_ROTATION,
    MAX_VISIBLE_CARDS,
    SETTLE_DELAY,
    SWIPE_THRESHOLD,
)
from .recipe import Recipe
from .visual import CardVisual, Indicator, derive_visual, drag_feedback, visible_indices

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    """Resolution of a gesture or button press on the top card."""

    LIKE = "like"
    SKIP = "skip"
    CANCELLED = "cancelled"


class Motion(str, Enum):
    """How the render layer should move the top card to its transform."""

    REST = "rest"
    TRACK = "track"
    SPRING_BACK = "spring_back"
    FLY_OUT = "fly_out"


@dataclass(frozen=True)
class DragSample:
    """Translation of the active gesture since it started."""

    dx: float = 0.0
    dy: float = 0.0


@dataclass(frozen=True)
class CardTransform:
    """Presentation state of the top card."""

    offset_x: float = 0.0
    offset_y: float = 0.0
    rotation: float = 0.0
    indicator: Indicator = Indicator.NONE
    indicator_opacity: float = 0.0
    indicator_scale: float = 1.0
    motion: Motion = Motion.REST

    @classmethod
    def tracking(cls, sample: DragSample) -> "CardTransform":
        feedback = drag_feedback(sample.dx)
        return cls(
            offset_x=sample.dx,
            offset_y=sample.dy,
            rotation=feedback.rotation,
            indicator=feedback.indicator,
            indicator_opacity=feedback.indicator_opacity,
            indicator_scale=feedback.indicator_scale,
            motion=Motion.TRACK,
        )

    @classmethod
    def fly_out(cls, outcome: Outcome, dy: float) -> "CardTransform":
        sign = 1.0 if outcome is Outcome.LIKE else -1.0
        return cls(
            offset_x=sign * FLY_OUT_OFFSET,
            offset_y=dy,
            rotation=sign * FLY_OUT_ROTATION,
            indicator=Indicator.LIKE if outcome is Outcome.LIKE else Indicator.SKIP,
            indicator_opacity=1.0,
            motion=Motion.FLY_OUT,
        )


AT_REST = CardTransform()
SPRUNG_BACK = CardTransform(motion=Motion.SPRING_BACK)


@dataclass(frozen=True)
class DeckSnapshot:
    """Immutable view of the deck handed to render layers."""

    queue: tuple[Recipe, ...]
    cursor: int
    session: int
    drag: DragSample | None = None
    transform: CardTransform = AT_REST
    pending: Outcome | None = None
    max_visible: int = MAX_VISIBLE_CARDS

    @property
    def exhausted(self) -> bool:
        return self.cursor >= len(self.queue)

    @property
    def current(self) -> Recipe | None:
        if self.exhausted:
            return None
        return self.queue[self.cursor]

    @property
    def remaining(self) -> int:
        return len(self.queue) - self.cursor

    def visible_cards(self) -> list[tuple[int, Recipe, CardVisual]]:
        """Mounted cards in paint order: deepest card first, top card last."""
        length = len(self.queue)
        cards = [
            (index, self.queue[index], derive_visual(index, self.cursor, self.max_visible, length))
            for index in visible_indices(self.cursor, length, self.max_visible)
        ]
        return sorted(cards, key=lambda card: card[2].z_order)


class ScheduledTask(Protocol):
    def cancel(self) -> object: ...


Scheduler = Callable[[float, Callable[[], None]], ScheduledTask]
DeckListener = Callable[[DeckSnapshot], None]


class _FinishedTask:
    def cancel(self) -> bool:
        return False


def asyncio_scheduler(delay: float, callback: Callable[[], None]) -> ScheduledTask:
    """Schedule ``callback`` on the running event loop.

    Outside an event loop there is nothing to defer to, so the callback runs
    immediately.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        callback()
        return _FinishedTask()
    return loop.call_later(delay, callback)


@dataclass
class _PendingCommit:
    index: int
    outcome: Outcome
    session: int
    task: ScheduledTask | None = None


class DeckController:
    """Owns the candidate queue, the cursor and the active gesture."""

    def __init__(
        self,
        on_like: Callable[[Recipe], None] | None = None,
        on_outcome: Callable[[int, Recipe, Outcome], None] | None = None,
        scheduler: Scheduler | None = None,
        swipe_threshold: float = SWIPE_THRESHOLD,
        settle_delay: float = SETTLE_DELAY,
        max_visible: int = MAX_VISIBLE_CARDS,
    ) -> None:
        self._on_like = on_like
        self._on_outcome = on_outcome
        self._schedule = scheduler or asyncio_scheduler
        self.swipe_threshold = swipe_threshold
        self.settle_delay = settle_delay
        self.max_visible = max_visible

        self._queue: tuple[Recipe, ...] = ()
        self._cursor = 0
        self._session = 0
        self._drag: DragSample | None = None
        self._transform = AT_REST
        self._pending: _PendingCommit | None = None
        self._listeners: list[DeckListener] = []

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def queue(self) -> tuple[Recipe, ...]:
        return self._queue

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def session(self) -> int:
        return self._session

    @property
    def exhausted(self) -> bool:
        return self._cursor >= len(self._queue)

    @property
    def is_committing(self) -> bool:
        return self._pending is not None

    def snapshot(self) -> DeckSnapshot:
        return DeckSnapshot(
            queue=self._queue,
            cursor=self._cursor,
            session=self._session,
            drag=self._drag,
            transform=self._transform,
            pending=self._pending.outcome if self._pending else None,
            max_visible=self.max_visible,
        )

    def subscribe(self, listener: DeckListener) -> Callable[[], None]:
        """
        Register a listener called with a fresh snapshot after every change.

        Returns:
            A callable that removes the listener again
        """
        if listener not in self._listeners:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                # A broken render layer must not corrupt deck state
                logger.exception("Deck listener failed")

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def load(self, items: Iterable[Recipe]) -> None:
        """Start a new deck session with ``items``, discarding any pending commit."""
        if self._pending is not None:
            logger.debug(
                "Discarding pending %s for card %d on reload",
                self._pending.outcome.value,
                self._pending.index,
            )
            self._cancel_pending()

        self._queue = tuple(items)
        self._cursor = 0
        self._session += 1
        self._drag = None
        self._transform = AT_REST
        logger.info("Loaded %d recipes into deck session %d", len(self._queue), self._session)
        self._notify()

    def advance(self) -> None:
        """Move the cursor past the top card."""
        if self.exhausted:
            return
        self._cursor += 1
        self._drag = None
        self._transform = AT_REST
        if self.exhausted:
            logger.info("Deck session %d exhausted", self._session)
        self._notify()

    # ------------------------------------------------------------------
    # Gesture intake
    # ------------------------------------------------------------------

    def _accepts_gesture(self, index: int | None) -> bool:
        if self.exhausted or self._pending is not None:
            return False
        return index is None or index == self._cursor

    def begin_gesture(self, index: int | None = None) -> bool:
        """Open a drag on the top card. Returns False if the gesture is ignored."""
        if not self._accepts_gesture(index):
            logger.debug("Ignoring gesture start for card %s", index)
            return False
        self._drag = DragSample()
        self._transform = CardTransform.tracking(self._drag)
        self._notify()
        return True

    def on_gesture_update(self, dx: float, dy: float, index: int | None = None) -> None:
        """Record the live drag translation of the top card."""
        if not self._accepts_gesture(index):
            return
        self._drag = DragSample(dx, dy)
        self._transform = CardTransform.tracking(self._drag)
        self._notify()

    def on_gesture_end(self, dx: float, dy: float, index: int | None = None) -> Outcome | None:
        """
        Resolve the active gesture from its final translation.

        Only the horizontal translation decides the outcome. A commit flies
        the card out and defers the callback and cursor advance by the
        settle delay; anything short of the threshold springs back.

        Returns:
            The outcome, or None if the gesture was ignored
        """
        if not self._accepts_gesture(index):
            logger.debug("Ignoring gesture end for card %s", index)
            return None

        self._drag = None
        if abs(dx) <= self.swipe_threshold:
            self._transform = SPRUNG_BACK
            self._notify()
            return Outcome.CANCELLED

        outcome = Outcome.LIKE if dx > 0 else Outcome.SKIP
        commit = _PendingCommit(index=self._cursor, outcome=outcome, session=self._session)
        self._pending = commit
        self._transform = CardTransform.fly_out(outcome, dy)
        logger.debug("Committing %s for card %d", outcome.value, commit.index)
        self._notify()

        commit.task = self._schedule(self.settle_delay, lambda: self._finish_commit(commit))
        return outcome

    def _finish_commit(self, commit: _PendingCommit) -> None:
        stale = (
            self._pending is not commit
            or commit.session != self._session
            or commit.index != self._cursor
        )
        if stale:
            logger.debug("Dropping stale %s for card %d", commit.outcome.value, commit.index)
            return
        self._pending = None
        self._resolve(commit.outcome)

    def _cancel_pending(self) -> None:
        commit, self._pending = self._pending, None
        if commit is not None and commit.task is not None:
            commit.task.cancel()

    # ------------------------------------------------------------------
    # Buttons
    # ------------------------------------------------------------------

    def like_current(self) -> bool:
        """Like the top card without a drag. Returns False if nothing happened."""
        return self._press(Outcome.LIKE)

    def skip_current(self) -> bool:
        """Skip the top card without a drag. Returns False if nothing happened."""
        return self._press(Outcome.SKIP)

    def _press(self, outcome: Outcome) -> bool:
        if self.exhausted or self._pending is not None:
            return False
        self._drag = None
        self._resolve(outcome)
        return True

    def _resolve(self, outcome: Outcome) -> None:
        # Callbacks for the top card always run before the cursor moves past it
        index = self._cursor
        session = self._session
        recipe = self._queue[index]
        try:
            if outcome is Outcome.LIKE and self._on_like is not None:
                self._on_like(recipe)
            if self._on_outcome is not None:
                self._on_outcome(index, recipe, outcome)
        finally:
            # A callback that reloaded or advanced the deck already moved it on
            if self._session == session and self._cursor == index:
                self.advance()
            else:
                logger.debug("Deck moved during callbacks for card %d, not advancing", index)

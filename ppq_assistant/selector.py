"""Interactive snippet selection as an explicit state machine.

The selector knows nothing about terminals. It is driven by abstract
InputEvent values (see terminal.py for the keypress mapping), so tests can
feed it a plain list of events.

States: BROWSING -> BROWSING (cursor moves), BROWSING -> COMMITTED(index),
BROWSING -> CANCELLED. The cursor is clamped to [0, count): moving up at the
first entry or down at the last one leaves it in place.
"""

import enum
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from .exceptions import SelectorError


class EventKind(enum.Enum):
    UP = "up"
    DOWN = "down"
    CONFIRM = "confirm"
    DIGIT = "digit"
    INTERRUPT = "interrupt"


@dataclass(frozen=True)
class InputEvent:
    """One abstract input event. value is set only for DIGIT."""

    kind: EventKind
    value: int | None = None

    @classmethod
    def up(cls) -> "InputEvent":
        return cls(EventKind.UP)

    @classmethod
    def down(cls) -> "InputEvent":
        return cls(EventKind.DOWN)

    @classmethod
    def confirm(cls) -> "InputEvent":
        return cls(EventKind.CONFIRM)

    @classmethod
    def digit(cls, value: int) -> "InputEvent":
        return cls(EventKind.DIGIT, value)

    @classmethod
    def interrupt(cls) -> "InputEvent":
        return cls(EventKind.INTERRUPT)


class SelectionStatus(enum.Enum):
    BROWSING = "browsing"
    COMMITTED = "committed"
    CANCELLED = "cancelled"
    EMPTY = "empty"  # nothing to select; the loop never ran


@dataclass(frozen=True)
class SelectionResult:
    """Terminal outcome of a selection."""

    status: SelectionStatus
    index: int | None = None

    @property
    def committed(self) -> bool:
        return self.status is SelectionStatus.COMMITTED


CANCELLED = SelectionResult(SelectionStatus.CANCELLED)
EMPTY = SelectionResult(SelectionStatus.EMPTY)


class Selector:
    """Selection state for one run over `count` entries."""

    def __init__(self, count: int, initial: int = 0):
        if count <= 0:
            raise ValueError("Selector needs at least one entry; use select() for empty lists")
        self.count = count
        self.cursor = min(max(initial, 0), count - 1)
        self.status = SelectionStatus.BROWSING
        self.index: int | None = None

    @property
    def done(self) -> bool:
        return self.status is not SelectionStatus.BROWSING

    @property
    def result(self) -> SelectionResult | None:
        """The terminal result, or None while still browsing."""
        if not self.done:
            return None
        return SelectionResult(self.status, self.index)

    def feed(self, event: InputEvent) -> SelectionResult | None:
        """Apply one event. Returns the result once a terminal state is reached."""
        if self.done:
            raise SelectorError(f"Selector already {self.status.value}")

        if event.kind is EventKind.INTERRUPT:
            self.status = SelectionStatus.CANCELLED
        elif event.kind is EventKind.CONFIRM:
            self._commit(self.cursor)
        elif event.kind is EventKind.DIGIT:
            if event.value is not None and 0 <= event.value < self.count:
                self._commit(event.value)
        elif event.kind is EventKind.UP:
            self.cursor = max(self.cursor - 1, 0)
        elif event.kind is EventKind.DOWN:
            self.cursor = min(self.cursor + 1, self.count - 1)

        return self.result

    def _commit(self, index: int) -> None:
        self.status = SelectionStatus.COMMITTED
        self.index = index

    def run(
        self,
        events: Iterable[InputEvent],
        on_change: Callable[["Selector"], None] | None = None,
    ) -> SelectionResult:
        """
        Consume events until a terminal state.

        on_change is called with the selector before the first event and
        after every event that leaves it browsing (used to redraw the cursor).
        An event source that ends early counts as a cancellation.
        """
        if on_change:
            on_change(self)
        for event in events:
            result = self.feed(event)
            if result is not None:
                return result
            if on_change:
                on_change(self)
        self.status = SelectionStatus.CANCELLED
        return CANCELLED


def select(
    items: Sequence,
    events: Iterable[InputEvent],
    on_change: Callable[[Selector], None] | None = None,
) -> SelectionResult:
    """Run a selection over items. An empty sequence short-circuits to EMPTY."""
    if not items:
        return EMPTY
    return Selector(len(items)).run(events, on_change)

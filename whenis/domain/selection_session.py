"""
Gesture state machine turning pointer input into selection updates.

One session exists per participant and input device. Gesture primitives
(pointer down/move/up, taps, column title clicks) come from the renderer as
slot ids; ``None`` means the pointer is outside the selectable area.

States::

    IDLE --pointer_down(mouse)--------------------------> DRAGGING
    IDLE --pointer_down(touch)--> PENDING_SINGLE_TOUCH --timer--> DRAGGING
    PENDING_SINGLE_TOUCH --second touch--> IDLE
    PENDING_SINGLE_TOUCH --pointer_up--> IDLE (commits a tap)
    DRAGGING --pointer_up--> IDLE (commits the region)
"""

import logging
from enum import Enum
from typing import Callable, FrozenSet, Optional, Protocol

from .grid import GridLayout
from .models import GestureDelta, RegionChange, SelectionEvent
from .selection_store import SelectionStore

logger = logging.getLogger(__name__)

# Wait this long after a touch in case a second finger follows (scrolling)
TOUCH_DEBOUNCE_SECONDS = 0.05


class SessionState(Enum):
    IDLE = "idle"
    PENDING_SINGLE_TOUCH = "pending-single-touch"
    DRAGGING = "dragging"


class TimerHandle(Protocol):
    def cancel(self) -> None:
        """Stop the pending callback."""


class SchedulerProtocol(Protocol):
    """Protocol describing the timer facility the session needs."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay`` seconds."""


class SelectionSession:
    """
    Reconciles one participant's gestures into full selections.

    A finished drag toggles every slot of its final box region exactly once
    against the selection held when the gesture started. Intermediate
    shapes of the region leave no trace.
    """

    def __init__(
        self,
        user_id: str,
        layout: GridLayout,
        store: SelectionStore,
        publish: Callable[[SelectionEvent], None],
        scheduler: Optional[SchedulerProtocol] = None,
        touch_debounce: float = TOUCH_DEBOUNCE_SECONDS,
    ) -> None:
        self.user_id = user_id
        self.layout = layout
        self.touch_debounce = touch_debounce
        self._store = store
        self._publish = publish
        self._scheduler = scheduler

        self._state = SessionState.IDLE
        self._anchor: Optional[str] = None
        self._snapshot: FrozenSet[str] = frozenset()
        self._region: FrozenSet[str] = frozenset()
        self._timer: Optional[TimerHandle] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def region(self) -> FrozenSet[str]:
        """Slots currently covered by the drag."""
        return self._region

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None

    def pointer_down(self, slot_id: Optional[str], touch: bool = False) -> None:
        if self._state is SessionState.PENDING_SINGLE_TOUCH:
            self.second_touch()
            return

        if self._state is SessionState.DRAGGING:
            return

        if slot_id not in self.layout:
            logger.debug("Pointer down outside the grid (%s), ignoring", slot_id)
            return

        if touch and self._scheduler is not None:
            self._anchor = slot_id
            self._state = SessionState.PENDING_SINGLE_TOUCH
            self._timer = self._scheduler.call_later(self.touch_debounce, self._on_touch_confirmed)
            return

        self._start_drag(slot_id)

    def second_touch(self) -> None:
        """A second finger landed: the user is scrolling, not selecting."""
        if self._state is not SessionState.PENDING_SINGLE_TOUCH:
            return

        logger.debug("Second touch for %s, selection start aborted", self.user_id)
        self.cancel_pending()

    def cancel_pending(self) -> None:
        """Drop a touch still waiting for its debounce, without selecting."""
        if self._state is not SessionState.PENDING_SINGLE_TOUCH:
            return

        self._cancel_timer()
        self._reset()

    def pointer_move(self, slot_id: Optional[str]) -> RegionChange:
        """
        Recompute the drag region up to ``slot_id``.

        Positions outside the grid keep the last valid one, so the region
        stays clamped to the selectable area.
        """
        if self._state is not SessionState.DRAGGING:
            return RegionChange()

        if slot_id not in self.layout:
            return RegionChange()

        region = self.layout.box(self._anchor, slot_id)
        change = RegionChange(entered=region - self._region, left=self._region - region)
        self._region = region

        return change

    def pointer_up(self, slot_id: Optional[str] = None) -> GestureDelta:
        """
        Finish the gesture and publish the resulting selection.

        A release without a started gesture leaves the selection untouched.
        """
        if self._state is SessionState.PENDING_SINGLE_TOUCH:
            # Released before the debounce elapsed: that was a tap
            self._cancel_timer()
            self._start_drag(self._anchor)
        elif self._state is SessionState.IDLE:
            logger.debug("Pointer up without gesture for %s, nothing to commit", self.user_id)
            return GestureDelta()
        elif slot_id is not None:
            self.pointer_move(slot_id)

        return self._finalize()

    def tap(self, slot_id: str) -> GestureDelta:
        """Toggle a single slot, same as a drag that never moved."""
        if self._state is not SessionState.IDLE or slot_id not in self.layout:
            return GestureDelta()

        self._start_drag(slot_id)
        return self._finalize()

    def toggle_column(self, index: int) -> Optional[SelectionEvent]:
        """
        Select or deselect a whole day at once.

        If any slot of the day is selected the whole day is cleared,
        otherwise the whole day is selected.
        """
        column = frozenset(self.layout.column(index))
        if not column:
            return None

        previous = self._store.selection_of(self.user_id)

        if previous & column:
            slots = previous - column
        else:
            slots = previous | column

        event = SelectionEvent(user_id=self.user_id, slots=slots)
        self._publish(event)
        return event

    def preview(self) -> FrozenSet[str]:
        """Selection as it would look if the pointer were released now."""
        if self._state is SessionState.DRAGGING:
            return self._snapshot ^ self._region
        return self._store.selection_of(self.user_id)

    def set_layout(self, layout: GridLayout) -> None:
        """Swap in a regenerated grid; a gesture in flight is dropped."""
        if self._state is not SessionState.IDLE:
            logger.debug("Grid changed during a gesture of %s, dropping it", self.user_id)
        self._cancel_timer()
        self._reset()
        self.layout = layout

    def _on_touch_confirmed(self) -> None:
        if self._state is not SessionState.PENDING_SINGLE_TOUCH:
            return

        self._timer = None
        self._start_drag(self._anchor)

    def _start_drag(self, slot_id: str) -> None:
        self._state = SessionState.DRAGGING
        self._anchor = slot_id
        self._snapshot = self._store.selection_of(self.user_id)
        self._region = frozenset((slot_id,))

    def _finalize(self) -> GestureDelta:
        covered = self._region
        delta = GestureDelta(
            added=covered - self._snapshot,
            removed=covered & self._snapshot,
        )

        previous = self._store.selection_of(self.user_id)
        slots = (previous | delta.added | covered) - delta.removed

        self._reset()

        logger.debug(
            "Gesture of %s: +%d -%d slot(s)",
            self.user_id, len(delta.added), len(delta.removed)
        )
        self._publish(SelectionEvent(user_id=self.user_id, slots=slots))

        return delta

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _reset(self) -> None:
        self._state = SessionState.IDLE
        self._anchor = None
        self._snapshot = frozenset()
        self._region = frozenset()

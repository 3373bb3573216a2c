"""
Application service wiring the availability engine to its collaborators.

The service subscribes the settings model and the selection store to the
replication bus, regenerates the grid whenever the configuration changes,
and hands the renderer everything it needs per slot (votes, voters,
highlight state). Collaborators are described as protocols so the in-process
adapters can be swapped for a real transport or identity provider.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

import pendulum
from pendulum import DateTime

from ..domain.aggregator import Aggregator
from ..domain.configuration import Configuration, RangeChange
from ..domain.grid import Day, GridLayout, Slot, SlotGridGenerator
from ..domain.models import SelectionEvent
from ..domain.selection_session import SchedulerProtocol, SelectionSession
from ..domain.selection_store import SelectionStore
from ..domain.settings import Settings
from .highlight import HighlightTargets

logger = logging.getLogger(__name__)


class ReplicationProtocol(Protocol):
    """Protocol describing the ordered event delivery the service relies on."""

    def publish(self, scope: str, event: str, payload: Any = None) -> None:
        """Deliver ``payload`` to every participant, in a global order."""

    def subscribe(self, scope: str, event: str, handler: Callable[[Any], None]) -> None:
        """Receive events published under ``(scope, event)``."""


class IdentityProtocol(Protocol):
    """Protocol describing the display-name lookup."""

    def name(self, user_id: str) -> str:
        """Return a human readable name for ``user_id``."""


def _range_change(payload: Any) -> RangeChange:
    if isinstance(payload, RangeChange):
        return payload
    return RangeChange(lower=int(payload["lower"]), upper=int(payload["upper"]))


# change name -> (Settings method, payload coercion)
SETTINGS_CHANGES: Dict[str, Tuple[str, Callable[[Any], Any]]] = {
    "days-range": ("days_range_change", _range_change),
    "time-range": ("time_range_change", _range_change),
    "allow-weekends": ("allow_weekends_change", bool),
    "half-hours": ("half_hours_change", bool),
    "duration": ("duration_change", int),
}


@dataclass(frozen=True)
class SlotState:
    """Everything the renderer draws for one slot."""
    slot: Slot
    votes: int
    voters: List[str]
    highlighted: bool
    match: bool


class CalendarService:
    """
    Orchestrates settings, grid, selections and tallies for one replica.
    """

    def __init__(
        self,
        bus: ReplicationProtocol,
        settings: Settings,
        *,
        timezone: str = "Europe/Berlin",
        identity: Optional[IdentityProtocol] = None,
        reference_date: Optional[DateTime] = None,
        generator: Optional[SlotGridGenerator] = None,
    ) -> None:
        self._bus = bus
        self.settings = settings
        self.timezone = timezone
        self._identity = identity
        self._reference_date = reference_date
        self._generator = generator or SlotGridGenerator()

        self.store = SelectionStore()
        self.aggregator = Aggregator(self.store)
        self.highlights = HighlightTargets()

        self._sessions: Dict[str, SelectionSession] = {}
        self._days: List[Day] = []
        self._layout = GridLayout(columns=[])

        self._bus.subscribe("calendar", "selection", self._on_selection)
        for change in SETTINGS_CHANGES:
            self._bus.subscribe("settings", f"{change}-change", partial(self._on_settings_change, change))

        self.store.subscribe(self._on_store_changed)
        self.settings.subscribe(self._on_configuration_applied)

        self.regenerate()

    @property
    def configuration(self) -> Configuration:
        return self.settings.configuration

    @property
    def reference_date(self) -> DateTime:
        """The day the grid counts from; today unless pinned."""
        if self._reference_date is not None:
            return self._reference_date
        return pendulum.today(self.timezone)

    @property
    def days(self) -> List[Day]:
        return list(self._days)

    @property
    def layout(self) -> GridLayout:
        return self._layout

    def regenerate(self) -> List[Day]:
        """Rebuild the grid from the active configuration."""
        self._days = self._generator.generate(self.configuration, self.reference_date)
        self._layout = GridLayout.from_days(self._days)

        for session in self._sessions.values():
            session.set_layout(self._layout)

        logger.debug("Grid regenerated: %d day(s), %d slot(s)", len(self._days), len(self._layout))
        return self.days

    def session_for(
        self,
        user_id: str,
        scheduler: Optional[SchedulerProtocol] = None
    ) -> SelectionSession:
        """Gesture session of ``user_id``; created on first use."""
        if user_id not in self._sessions:
            self._sessions[user_id] = SelectionSession(
                user_id=user_id,
                layout=self._layout,
                store=self.store,
                publish=self.publish_selection,
                scheduler=scheduler,
            )
        return self._sessions[user_id]

    def publish_selection(self, event: SelectionEvent) -> None:
        self._bus.publish("calendar", "selection", event)

    def change_setting(self, change: str, payload: Any) -> None:
        """
        Broadcast a settings change, e.g. ``("days-range", {"lower": 0, "upper": 2})``.

        Raises:
            KeyError: If ``change`` is not a known setting
            InvalidConfigurationError: If the resulting configuration is invalid
        """
        if change not in SETTINGS_CHANGES:
            raise KeyError(f"Unknown setting: {change}")
        self._bus.publish("settings", f"{change}-change", payload)

    def name(self, user_id: str) -> str:
        if self._identity is None:
            return user_id
        return self._identity.name(user_id)

    def counted_slots(self) -> Dict[str, int]:
        """Vote counts restricted to the slots of the current grid."""
        return self.aggregator.counted_slots(within=set(self._layout.slot_ids))

    def voter_names(self, slot_id: str) -> List[str]:
        return [self.name(user_id) for user_id in self.aggregator.users_who_selected_slot(slot_id)]

    def best_slots(self, limit: int = 3) -> List[Tuple[str, int]]:
        return self.aggregator.best_slots(limit=limit, within=set(self._layout.slot_ids))

    def slot_states(self, viewer: str) -> List[List[SlotState]]:
        """
        Per-day render state as seen by ``viewer``.

        Returns:
            One list of SlotState per day column, in grid order
        """
        counts = self.counted_slots()
        highlight = self.highlights.highlight(viewer, self.store)

        return [
            [
                SlotState(
                    slot=slot,
                    votes=counts.get(slot.id, 0),
                    voters=self.voter_names(slot.id) if slot.id in counts else [],
                    highlighted=slot.id in highlight.slots,
                    match=highlight.match and slot.id in highlight.slots,
                )
                for slot in day.slots
            ]
            for day in self._days
        ]

    def _on_selection(self, payload: Any) -> None:
        if isinstance(payload, SelectionEvent):
            event = payload
        else:
            event = SelectionEvent.of(payload["user_id"], payload.get("slots") or [])
        self.store.apply(event)

    def _on_settings_change(self, change: str, payload: Any) -> None:
        method_name, coerce = SETTINGS_CHANGES[change]
        getattr(self.settings, method_name)(coerce(payload))

    def _on_store_changed(self, event: SelectionEvent) -> None:
        self._bus.publish("calendar", "selected-slots-updated", event)

    def _on_configuration_applied(self, change: str, configuration: Configuration) -> None:
        self.regenerate()
        self._bus.publish("settings", f"update-{change}", configuration)

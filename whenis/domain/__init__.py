"""
Domain layer - Pure business logic without external dependencies.
"""

from .aggregator import Aggregator
from .configuration import Configuration, RangeChange
from .grid import Day, GridLayout, Slot, SlotGridGenerator, parse_slot_id, slot_id_for
from .models import GestureDelta, RegionChange, SelectionEvent
from .selection_session import SelectionSession, SessionState
from .selection_store import SelectionStore
from .settings import Settings

__all__ = [
    "Aggregator",
    "Configuration",
    "Day",
    "GestureDelta",
    "GridLayout",
    "RangeChange",
    "RegionChange",
    "SelectionEvent",
    "SelectionSession",
    "SelectionStore",
    "SessionState",
    "Settings",
    "Slot",
    "SlotGridGenerator",
    "parse_slot_id",
    "slot_id_for",
]

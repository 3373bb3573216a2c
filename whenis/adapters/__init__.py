"""
Adapters layer - In-process stand-ins for the external collaborators.
"""

from .event_bus import LocalEventBus
from .scheduler import AsyncioScheduler
from .selections_file import SelectionsFile

__all__ = ["LocalEventBus", "AsyncioScheduler", "SelectionsFile"]

"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .calendar import CalendarService, IdentityProtocol, ReplicationProtocol, SlotState
from .highlight import Highlight, HighlightTargets

__all__ = [
    "CalendarService",
    "Highlight",
    "HighlightTargets",
    "IdentityProtocol",
    "ReplicationProtocol",
    "SlotState",
]

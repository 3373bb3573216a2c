"""
Value objects exchanged between the selection components.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable


@dataclass(frozen=True)
class GestureDelta:
    """
    Net effect of one finished gesture against the pre-gesture selection.
    """
    added: FrozenSet[str] = frozenset()
    removed: FrozenSet[str] = frozenset()

    def is_empty(self) -> bool:
        return not self.added and not self.removed


@dataclass(frozen=True)
class SelectionEvent:
    """
    Full authoritative selection of one participant.

    Published after every finalized gesture, so consumers never need to
    replay gesture history.
    """
    user_id: str
    slots: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, user_id: str, slots: Iterable[str]) -> "SelectionEvent":
        return cls(user_id=user_id, slots=frozenset(slots))


@dataclass(frozen=True)
class RegionChange:
    """Slots that entered or left the drag region on one pointer move."""
    entered: FrozenSet[str] = frozenset()
    left: FrozenSet[str] = frozenset()

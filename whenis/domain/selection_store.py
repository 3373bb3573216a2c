"""
Authoritative per-participant slot selections.
"""

import logging
from typing import Callable, Dict, FrozenSet, Iterable, List, Sequence, Tuple

from .models import SelectionEvent

logger = logging.getLogger(__name__)

SelectionListener = Callable[[SelectionEvent], None]


class SelectionStore:
    """
    Single table of selections keyed by user id.

    Updates are expected to arrive already serialized by the replication
    layer, so no locking happens here. Unknown users read as empty
    selections; they are never an error.
    """

    def __init__(self) -> None:
        self._selections: Dict[str, FrozenSet[str]] = {}
        self._listeners: List[SelectionListener] = []

    def subscribe(self, listener: SelectionListener) -> None:
        """Register a callback invoked whenever a selection changes."""
        self._listeners.append(listener)

    def apply_selection(self, user_id: str, slots: Iterable[str]) -> bool:
        """
        Replace the selection of ``user_id`` wholesale.

        Returns:
            True if the stored selection changed (or the user is new)
        """
        new_slots = frozenset(slots)
        known = user_id in self._selections

        if known and self._selections[user_id] == new_slots:
            logger.debug("Selection of %s unchanged, ignoring", user_id)
            return False

        self._selections[user_id] = new_slots
        logger.debug("Selection of %s now holds %d slot(s)", user_id, len(new_slots))

        event = SelectionEvent(user_id=user_id, slots=new_slots)
        for listener in self._listeners:
            listener(event)

        return True

    def apply(self, event: SelectionEvent) -> bool:
        return self.apply_selection(event.user_id, event.slots)

    def clear(self, user_id: str) -> bool:
        """Deselect everything for ``user_id``; the entry itself is kept."""
        return self.apply_selection(user_id, ())

    def selection_of(self, user_id: str) -> FrozenSet[str]:
        return self._selections.get(user_id, frozenset())

    def common_slots(self, user_ids: Sequence[str]) -> FrozenSet[str]:
        """
        Slots selected by every one of ``user_ids``.

        An empty list yields no slots; a single id yields that user's whole
        selection.
        """
        if not user_ids:
            return frozenset()

        result = self.selection_of(user_ids[0])

        for user_id in user_ids[1:]:
            result = result & self.selection_of(user_id)
            # Early exit if no common slot
            if not result:
                return frozenset()

        return result

    def users(self) -> List[str]:
        """Known user ids, in the order they first selected something."""
        return list(self._selections)

    def items(self) -> List[Tuple[str, FrozenSet[str]]]:
        return list(self._selections.items())

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._selections

    def __len__(self) -> int:
        return len(self._selections)

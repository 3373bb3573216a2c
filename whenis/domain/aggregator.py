"""
Vote counting over the selection store.

Everything is recomputed from the store on every read. Participant counts
are in the tens, so there is no incremental bookkeeping to keep in sync.
"""

from collections import Counter
from typing import Collection, Dict, List, Optional, Tuple

from .selection_store import SelectionStore


class Aggregator:
    """Computes per-slot tallies and voter lists."""

    def __init__(self, store: SelectionStore):
        self.store = store

    def counted_slots(self, within: Optional[Collection[str]] = None) -> Dict[str, int]:
        """
        Count how many participants selected each slot.

        Args:
            within: Optional slot ids to restrict the tally to (e.g. the
                current grid, so stale ids from an older grid drop out)

        Returns:
            Sparse mapping slot id -> votes; unvoted slots are absent
        """
        counts: Counter = Counter()

        for _, slots in self.store.items():
            counts.update(slots)

        if within is not None:
            return {slot_id: votes for slot_id, votes in counts.items() if slot_id in within}

        return dict(counts)

    def users_who_selected_slot(self, slot_id: str) -> List[str]:
        """User ids whose selection contains ``slot_id``, in store order."""
        return [
            user_id
            for user_id, slots in self.store.items()
            if slot_id in slots
        ]

    def best_slots(
        self,
        limit: int = 3,
        within: Optional[Collection[str]] = None
    ) -> List[Tuple[str, int]]:
        """
        Slots with the most votes.

        Ties are broken by slot id, which sorts chronologically.
        """
        counts = self.counted_slots(within=within)
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return ranked[:limit]

"""
Highlight targets: which participants' picks a viewer is looking at.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Sequence

from ..domain.selection_store import SelectionStore


@dataclass(frozen=True)
class Highlight:
    """Slots to highlight, and whether they are a match across several people."""
    slots: FrozenSet[str] = frozenset()
    match: bool = False


class HighlightTargets:
    """
    Per-viewer list of focused participants ("pills").

    This is view state, not authoritative data: ids of participants that
    have left simply resolve to empty selections.
    """

    def __init__(self) -> None:
        self._targets: Dict[str, List[str]] = {}

    def targets_for(self, viewer: str) -> List[str]:
        return list(self._targets.get(viewer, [viewer]))

    def set_targets(self, viewer: str, user_ids: Sequence[str]) -> None:
        deduped: List[str] = []
        for user_id in user_ids:
            if user_id not in deduped:
                deduped.append(user_id)
        self._targets[viewer] = deduped

    def toggle(self, viewer: str, user_id: str) -> List[str]:
        """Add or remove one participant from the viewer's focus."""
        targets = self.targets_for(viewer)
        if user_id in targets:
            targets.remove(user_id)
        else:
            targets.append(user_id)
        self._targets[viewer] = targets
        return list(targets)

    def highlight(self, viewer: str, store: SelectionStore) -> Highlight:
        """
        Resolve the viewer's focus into slots.

        One participant shows their own picks; several show only the slots
        they all share, flagged as a match.
        """
        targets = self.targets_for(viewer)

        if len(targets) == 1:
            return Highlight(slots=store.selection_of(targets[0]))

        common = store.common_slots(targets)
        if not common:
            return Highlight()

        return Highlight(slots=common, match=True)

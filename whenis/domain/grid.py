"""
Slot grid generation.

Turns a grid configuration into the ordered list of day columns shown to the
participants. Pure domain logic: no I/O, no clock access - the reference date
is always passed in.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import pendulum
from pendulum import Date, DateTime

from .configuration import Configuration

logger = logging.getLogger(__name__)

SLOT_ID_FORMAT = "%Y-%m-%dT%H:%M:%S.000Z"
WEEKEND_ISO_DAYS = (6, 7)  # Saturday, Sunday


def slot_id_for(moment: DateTime) -> str:
    """
    Build the identifier of the slot starting at ``moment``.

    The id only depends on the absolute instant, so grids generated from
    different configurations agree on the ids of the slots they share.
    """
    return moment.in_timezone("UTC").strftime(SLOT_ID_FORMAT)


def parse_slot_id(slot_id: str, timezone: str = "UTC") -> DateTime:
    """Convert a slot id back into a DateTime in ``timezone``."""
    return pendulum.parse(slot_id).in_timezone(timezone)


def is_weekend(day: DateTime) -> bool:
    return day.isoweekday() in WEEKEND_ISO_DAYS


@dataclass(frozen=True)
class Slot:
    """A single selectable time unit."""
    id: str
    start: DateTime
    label: str
    half_hour: bool = False


@dataclass(frozen=True)
class Day:
    """One column of the grid."""
    date: Date
    slots: Tuple[Slot, ...]

    @property
    def slot_ids(self) -> List[str]:
        return [slot.id for slot in self.slots]

    @property
    def groups(self) -> List[Tuple[Slot, ...]]:
        """
        Slots grouped per hour for layout.

        Each group is the hour slot, followed by its ``:30`` sibling when
        half-hour intervals are on.
        """
        groups: List[Tuple[Slot, ...]] = []
        for slot in self.slots:
            if slot.half_hour and groups:
                groups[-1] = groups[-1] + (slot,)
            else:
                groups.append((slot,))
        return groups


class SlotGridGenerator:
    """
    Generates the visible grid of days and slots.

    Algorithm:
    1. Start at the reference day shifted by the lower day offset
    2. Walk forward one calendar day at a time, skipping weekends unless allowed
    3. Stop once the requested number of days has been emitted
    4. For each day emit one slot per hour (plus ``:30`` slots if enabled)
    """

    def generate(self, config: Configuration, reference_date: DateTime) -> List[Day]:
        """
        Generate the day columns for ``config``.

        Args:
            config: Grid configuration snapshot
            reference_date: "Today", in the timezone the grid is shown in

        Returns:
            Ordered list of Day objects
        """
        first_day = reference_date.start_of("day").add(days=config.days_range[0])

        return [
            Day(date=day.date(), slots=tuple(self._slots_for_day(day, config)))
            for day in self._included_days(first_day, config.day_count(), config.allow_weekends)
        ]

    def _included_days(
        self,
        first_day: DateTime,
        count: int,
        allow_weekends: bool
    ) -> Iterator[DateTime]:
        """
        Yield ``count`` days starting at ``first_day``.

        Skipped weekend days do not count toward ``count``, so the walk
        extends past them.
        """
        current = first_day
        remaining = count

        while remaining > 0:
            if allow_weekends or not is_weekend(current):
                yield current
                remaining -= 1
            current = current.add(days=1)

    def _slots_for_day(self, day: DateTime, config: Configuration) -> Iterator[Slot]:
        for hour in config.hours():
            start = day.set(hour=hour, minute=0, second=0, microsecond=0)
            if start.hour != hour:
                # Wall-clock hour skipped by a daylight saving jump
                logger.debug("No %d:00 on %s in %s, skipping", hour, day.date(), day.timezone_name)
                continue

            yield Slot(id=slot_id_for(start), start=start, label=f"{hour}:00")

            if config.half_hour_intervals:
                half = start.add(minutes=30)
                yield Slot(id=slot_id_for(half), start=half, label=f"{hour}:30", half_hour=True)


@dataclass
class GridLayout:
    """
    Column/row index over a generated grid.

    Column is the day index, row the slot index within that day. Used to turn
    the two corners of a drag into the box of slots it covers.
    """
    columns: List[List[str]]
    _positions: Dict[str, Tuple[int, int]] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        for col, slot_ids in enumerate(self.columns):
            for row, slot_id in enumerate(slot_ids):
                self._positions[slot_id] = (col, row)

    @classmethod
    def from_days(cls, days: Iterable[Day]) -> "GridLayout":
        return cls(columns=[day.slot_ids for day in days])

    def __contains__(self, slot_id: object) -> bool:
        return slot_id in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    @property
    def slot_ids(self) -> List[str]:
        return [slot_id for column in self.columns for slot_id in column]

    def position(self, slot_id: str) -> Optional[Tuple[int, int]]:
        return self._positions.get(slot_id)

    def column(self, index: int) -> List[str]:
        """Slot ids of one day; an unknown column is empty."""
        if 0 <= index < len(self.columns):
            return list(self.columns[index])
        return []

    def box(self, corner_a: str, corner_b: str) -> frozenset:
        """All slot ids inside the rectangle spanned by two slots."""
        pos_a = self.position(corner_a)
        pos_b = self.position(corner_b)

        if pos_a is None or pos_b is None:
            return frozenset()

        col_lo, col_hi = sorted((pos_a[0], pos_b[0]))
        row_lo, row_hi = sorted((pos_a[1], pos_b[1]))

        return frozenset(
            slot_id
            for column in self.columns[col_lo:col_hi + 1]
            for slot_id in column[row_lo:row_hi + 1]
        )

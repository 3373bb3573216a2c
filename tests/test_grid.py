"""
Tests for slot grid generation.
"""

import pendulum

from whenis.domain.configuration import Configuration
from whenis.domain.grid import GridLayout, SlotGridGenerator, parse_slot_id, slot_id_for

THURSDAY = pendulum.datetime(2021, 11, 11, 15, 30, tz="UTC")


def _generate(reference=THURSDAY, **settings):
    return SlotGridGenerator().generate(Configuration(**settings), reference)


class TestSlotGridGenerator:
    """Tests for SlotGridGenerator."""

    def test_two_weekdays_two_hours(self):
        """Thursday with days 0-1 and hours 9-10 gives 2 days x 2 slots."""
        days = _generate(days_range=(0, 1), time_range=(9, 10))

        assert [day.date.isoformat() for day in days] == ["2021-11-11", "2021-11-12"]
        assert [day.slot_ids for day in days] == [
            ["2021-11-11T09:00:00.000Z", "2021-11-11T10:00:00.000Z"],
            ["2021-11-12T09:00:00.000Z", "2021-11-12T10:00:00.000Z"],
        ]

    def test_weekends_are_skipped_and_do_not_count(self):
        """Five days from a Thursday run Thu, Fri, Mon, Tue, Wed."""
        days = _generate(days_range=(0, 4), time_range=(9, 9))

        assert [day.date.isoformat() for day in days] == [
            "2021-11-11", "2021-11-12", "2021-11-15", "2021-11-16", "2021-11-17"
        ]
        assert all(day.date.isoweekday() < 6 for day in days)

    def test_weekend_excluded_on_last_day_too(self):
        """A range ending on a Saturday extends to the next weekday."""
        days = _generate(days_range=(0, 2), time_range=(9, 9))

        assert [day.date.isoformat() for day in days] == ["2021-11-11", "2021-11-12", "2021-11-15"]

    def test_offset_landing_on_weekend(self):
        """A first day on Saturday moves to Monday."""
        days = _generate(days_range=(2, 2), time_range=(9, 9))

        assert [day.date.isoformat() for day in days] == ["2021-11-15"]

    def test_weekends_included_when_allowed(self):
        """Saturday and Sunday appear when weekends are allowed."""
        days = _generate(days_range=(0, 4), time_range=(9, 9), allow_weekends=True)

        assert [day.date.isoformat() for day in days] == [
            "2021-11-11", "2021-11-12", "2021-11-13", "2021-11-14", "2021-11-15"
        ]

    def test_time_range_upper_bound_is_inclusive(self):
        """Hours 9-18 yield ten hourly slots, 18:00 included."""
        days = _generate(days_range=(0, 0), time_range=(9, 18))

        labels = [slot.label for slot in days[0].slots]
        assert len(labels) == 10
        assert labels[0] == "9:00"
        assert labels[-1] == "18:00"

    def test_single_hour_range(self):
        """Equal bounds yield exactly one slot."""
        days = _generate(days_range=(0, 0), time_range=(0, 0))

        assert days[0].slot_ids == ["2021-11-11T00:00:00.000Z"]

    def test_half_hour_intervals(self):
        """Every hour gets a :30 sibling, grouped with it for layout."""
        days = _generate(days_range=(0, 0), time_range=(9, 10), half_hour_intervals=True)
        day = days[0]

        assert day.slot_ids == [
            "2021-11-11T09:00:00.000Z",
            "2021-11-11T09:30:00.000Z",
            "2021-11-11T10:00:00.000Z",
            "2021-11-11T10:30:00.000Z",
        ]
        assert [slot.half_hour for slot in day.slots] == [False, True, False, True]
        assert [[slot.label for slot in group] for group in day.groups] == [
            ["9:00", "9:30"],
            ["10:00", "10:30"],
        ]

    def test_groups_without_half_hours(self):
        """Without half hours each group holds a single slot."""
        days = _generate(days_range=(0, 0), time_range=(9, 10))

        assert [len(group) for group in days[0].groups] == [1, 1]

    def test_ids_independent_of_configuration(self):
        """Grids sharing a day produce the same ids for it."""
        first = _generate(days_range=(0, 1), time_range=(9, 12))
        second = _generate(days_range=(1, 2), time_range=(11, 14))

        friday_first = set(first[1].slot_ids)
        friday_second = set(second[0].slot_ids)

        assert friday_first & friday_second == {
            "2021-11-12T11:00:00.000Z",
            "2021-11-12T12:00:00.000Z",
        }

    def test_local_wall_clock_hours(self):
        """Hours are local time; ids are UTC instants."""
        reference = pendulum.datetime(2021, 11, 11, tz="Europe/Berlin")
        days = _generate(reference=reference, days_range=(0, 0), time_range=(9, 9))

        assert days[0].slot_ids == ["2021-11-11T08:00:00.000Z"]
        assert days[0].slots[0].start.hour == 9

    def test_daylight_saving_change(self):
        """On the spring-forward Sunday 9:00 Berlin is 07:00 UTC."""
        reference = pendulum.datetime(2021, 3, 27, tz="Europe/Berlin")  # Saturday
        days = _generate(
            reference=reference, days_range=(0, 1), time_range=(9, 9), allow_weekends=True
        )

        assert [day.slot_ids[0] for day in days] == [
            "2021-03-27T08:00:00.000Z",
            "2021-03-28T07:00:00.000Z",
        ]

    def test_skipped_hour_has_no_slot(self):
        """2:00 does not exist in Berlin on 2021-03-28; ids stay unique."""
        reference = pendulum.datetime(2021, 3, 28, tz="Europe/Berlin")
        days = _generate(
            reference=reference, days_range=(0, 0), time_range=(1, 3),
            allow_weekends=True, half_hour_intervals=True
        )
        day = days[0]

        assert day.slot_ids == [
            "2021-03-28T00:00:00.000Z",
            "2021-03-28T00:30:00.000Z",
            "2021-03-28T01:00:00.000Z",
            "2021-03-28T01:30:00.000Z",
        ]
        assert [slot.label for slot in day.slots] == ["1:00", "1:30", "3:00", "3:30"]

        layout = GridLayout.from_days(days)
        assert len(layout) == len(day.slot_ids)

    def test_generation_is_deterministic(self):
        """Same input, same grid."""
        assert _generate(days_range=(0, 3)) == _generate(days_range=(0, 3))


class TestSlotIds:
    """Tests for slot id helpers."""

    def test_slot_id_format(self):
        moment = pendulum.datetime(2021, 11, 11, 13, 0, tz="Europe/Berlin")

        assert slot_id_for(moment) == "2021-11-11T12:00:00.000Z"

    def test_parse_slot_id(self):
        start = parse_slot_id("2021-11-11T12:00:00.000Z", "Europe/Berlin")

        assert start.hour == 13
        assert start.timezone_name == "Europe/Berlin"
        assert slot_id_for(start) == "2021-11-11T12:00:00.000Z"


class TestGridLayout:
    """Tests for GridLayout."""

    def _layout(self):
        return GridLayout(columns=[["a0", "a1", "a2"], ["b0", "b1", "b2"], ["c0", "c1", "c2"]])

    def test_positions(self):
        layout = self._layout()

        assert layout.position("b2") == (1, 2)
        assert layout.position("zz") is None
        assert "a1" in layout
        assert "zz" not in layout
        assert None not in layout
        assert len(layout) == 9

    def test_box_between_corners(self):
        """The box is the same whichever corner the drag started from."""
        layout = self._layout()

        expected = {"a1", "a2", "b1", "b2"}
        assert layout.box("a1", "b2") == expected
        assert layout.box("b2", "a1") == expected
        assert layout.box("b1", "a2") == expected

    def test_box_single_slot(self):
        assert self._layout().box("c0", "c0") == {"c0"}

    def test_box_unknown_corner_is_empty(self):
        assert self._layout().box("a0", "zz") == frozenset()

    def test_column(self):
        layout = self._layout()

        assert layout.column(1) == ["b0", "b1", "b2"]
        assert layout.column(7) == []
        assert layout.column(-1) == []

    def test_from_days(self):
        days = _generate(days_range=(0, 1), time_range=(9, 10))
        layout = GridLayout.from_days(days)

        assert layout.position("2021-11-12T10:00:00.000Z") == (1, 1)
        assert layout.slot_ids == days[0].slot_ids + days[1].slot_ids

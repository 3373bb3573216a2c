"""
Tests for vote aggregation.
"""

from whenis.domain.aggregator import Aggregator
from whenis.domain.selection_store import SelectionStore


def _aggregator():
    store = SelectionStore()
    store.apply_selection("user1", ["S1", "S2"])
    store.apply_selection("user2", ["S2", "S3"])
    store.apply_selection("user3", ["S2"])
    return Aggregator(store)


class TestAggregator:
    """Tests for Aggregator."""

    def test_counted_slots(self):
        """Three users picking {S1,S2}, {S2,S3}, {S2}."""
        aggregator = _aggregator()

        assert aggregator.counted_slots() == {"S1": 1, "S2": 3, "S3": 1}
        assert aggregator.store.common_slots(["user1", "user2", "user3"]) == {"S2"}

    def test_counted_slots_is_sparse(self):
        aggregator = Aggregator(SelectionStore())

        assert aggregator.counted_slots() == {}
        assert aggregator.counted_slots().get("S1", 0) == 0

    def test_reapplying_selection_keeps_counts(self):
        aggregator = _aggregator()
        before = aggregator.counted_slots()

        aggregator.store.apply_selection("user2", ["S2", "S3"])
        aggregator.store.apply_selection("user2", ["S3", "S2"])

        assert aggregator.counted_slots() == before

    def test_counts_follow_store_changes(self):
        """Nothing is cached between reads."""
        aggregator = _aggregator()

        aggregator.store.clear("user3")

        assert aggregator.counted_slots() == {"S1": 1, "S2": 2, "S3": 1}

    def test_counted_slots_within_grid(self):
        """Stale ids drop out when restricted to the current grid."""
        aggregator = _aggregator()

        assert aggregator.counted_slots(within={"S2", "S3", "S9"}) == {"S2": 3, "S3": 1}

    def test_half_hour_slots_are_independent(self):
        """09:00 and 09:30 are separate slots for votes and intersections."""
        store = SelectionStore()
        store.apply_selection("alice", ["2021-11-11T09:00:00.000Z"])
        store.apply_selection("bob", ["2021-11-11T09:30:00.000Z"])
        aggregator = Aggregator(store)

        assert aggregator.counted_slots() == {
            "2021-11-11T09:00:00.000Z": 1,
            "2021-11-11T09:30:00.000Z": 1,
        }
        assert store.common_slots(["alice", "bob"]) == frozenset()

    def test_users_who_selected_slot(self):
        aggregator = _aggregator()

        assert aggregator.users_who_selected_slot("S2") == ["user1", "user2", "user3"]
        assert aggregator.users_who_selected_slot("S3") == ["user2"]
        assert aggregator.users_who_selected_slot("nope") == []

    def test_best_slots(self):
        """Most votes first, ties in chronological (id) order."""
        aggregator = _aggregator()

        assert aggregator.best_slots() == [("S2", 3), ("S1", 1), ("S3", 1)]
        assert aggregator.best_slots(limit=1) == [("S2", 3)]
        assert aggregator.best_slots(within={"S1", "S3"}) == [("S1", 1), ("S3", 1)]

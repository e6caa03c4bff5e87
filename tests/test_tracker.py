# tests/test_tracker.py
from backend.recommender.store import BehaviorStore
from backend.recommender.tracker import BehaviorTracker
from tests.factories import behavior


def test_interacted_items_are_distinct_in_first_seen_order(tracker):
    tracker.add_behaviors([
        behavior("u1", "b", "view"),
        behavior("u1", "a", "click"),
        behavior("u1", "b", "like"),
    ])
    assert tracker.get_user_interacted_items("u1") == ["b", "a"]
    assert tracker.get_user_interacted_items("ghost") == []


def test_global_stats(tracker):
    assert tracker.get_stats() == {"total_behaviors": 0, "total_users": 0, "total_items": 0}

    tracker.add_behaviors([
        behavior("u1", "i1", "view"),
        behavior("u2", "i1", "view"),
        behavior("u2", "i2", "share"),
    ])
    assert tracker.get_stats() == {"total_behaviors": 3, "total_users": 2, "total_items": 2}
    assert sorted(tracker.get_all_user_ids()) == ["u1", "u2"]
    assert sorted(tracker.get_all_item_ids()) == ["i1", "i2"]


def test_delegates_to_shared_store():
    store = BehaviorStore()
    tracker = BehaviorTracker(store)
    tracker.add_behavior(behavior("u1", "i1", "purchase"))

    assert store.get_stats()["total_behaviors"] == 1
    assert tracker.get_item_stats("i1").weighted_score == 5
    assert tracker.get_user_stats("u1").item_count == 1
    assert tracker.get_user_item_stats("u1", "i1").total_behaviors == 1
    assert tracker.get_user_item_matrix() == {"u1": {"i1": 5.0}}
    assert len(tracker.get_all_behaviors()) == 1

    tracker.clear()
    assert store.get_stats()["total_behaviors"] == 0

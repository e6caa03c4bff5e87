from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from backend.recommender.models import ItemStats, UserBehavior, UserItemStats, UserStats
from backend.recommender.store import BehaviorStore


class BehaviorTracker:
    """Records behavior events and exposes aggregate views over them."""

    def __init__(self, store: Optional[BehaviorStore] = None) -> None:
        self.store = store if store is not None else BehaviorStore()

    def add_behavior(self, behavior: UserBehavior) -> UserBehavior:
        return self.store.add_behavior(behavior)

    def add_behaviors(self, behaviors: Iterable[UserBehavior]) -> List[UserBehavior]:
        return self.store.add_behaviors(behaviors)

    def get_user_behaviors(self, user_id: str) -> List[UserBehavior]:
        return self.store.get_user_behaviors(user_id)

    def get_item_behaviors(self, item_id: str) -> List[UserBehavior]:
        return self.store.get_item_behaviors(item_id)

    def get_all_behaviors(self) -> List[UserBehavior]:
        return self.store.get_all_behaviors()

    def get_user_stats(self, user_id: str) -> Optional[UserStats]:
        return self.store.get_user_stats(user_id)

    def get_user_item_stats(self, user_id: str, item_id: str) -> Optional[UserItemStats]:
        return self.store.get_user_item_stats(user_id, item_id)

    def get_item_stats(self, item_id: str) -> Optional[ItemStats]:
        return self.store.get_item_stats(item_id)

    def get_all_item_stats(self) -> List[ItemStats]:
        return self.store.get_all_item_stats()

    def get_user_item_matrix(self) -> Dict[str, Dict[str, float]]:
        return self.store.get_user_item_matrix()

    def get_user_interacted_items(self, user_id: str) -> List[str]:
        # distinct item ids, first-seen order
        seen: Dict[str, None] = {}
        for b in self.store.get_user_behaviors(user_id):
            seen.setdefault(b.item_id, None)
        return list(seen)

    def get_all_user_ids(self) -> List[str]:
        return self.store.get_all_user_ids()

    def get_all_item_ids(self) -> List[str]:
        return self.store.get_all_item_ids()

    def get_stats(self) -> Dict[str, int]:
        return self.store.get_stats()

    def clear(self) -> None:
        self.store.clear()

from __future__ import annotations

from dataclasses import replace
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
import copy
import logging
import threading
import time

from backend.recommender.models import (
    BEHAVIOR_WEIGHTS,
    BehaviorType,
    ItemStats,
    UserBehavior,
    UserItemStats,
    UserStats,
    ValidationError,
)

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def _validate(behavior: UserBehavior) -> UserBehavior:
    """
      single validation gate for ingestion:
    - user_id / item_id must be non-empty strings
    - behavior_type must be one of the five known types
    - timestamp defaults to now (ms)
    """
    if not isinstance(behavior, UserBehavior):
        raise ValidationError(f"expected UserBehavior, got {type(behavior).__name__}")

    if not isinstance(behavior.user_id, str) or not behavior.user_id:
        raise ValidationError("user_id is required")
    if not isinstance(behavior.item_id, str) or not behavior.item_id:
        raise ValidationError("item_id is required")

    behavior_type = BehaviorType.parse(behavior.behavior_type)

    ts = behavior.timestamp
    if ts is None:
        ts = now_ms()
    elif isinstance(ts, bool) or not isinstance(ts, int) or ts < 0:
        raise ValidationError(f"invalid timestamp: {ts!r}")

    # stored events are immutable: detach metadata from the caller and freeze it
    metadata = behavior.metadata
    if metadata is not None:
        if not isinstance(metadata, Mapping):
            raise ValidationError(f"metadata must be a mapping, got {type(metadata).__name__}")
        metadata = MappingProxyType(copy.deepcopy(dict(metadata)))

    return replace(behavior, behavior_type=behavior_type, timestamp=ts, metadata=metadata)


class BehaviorStore:
    """
    In-memory, append-only behavior log with by-user, by-item and
    by-(user, item) indexes. All access goes through one re-entrant lock;
    every getter returns a copy.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._behaviors: List[UserBehavior] = []
        self._by_user: Dict[str, List[UserBehavior]] = {}
        self._by_item: Dict[str, List[UserBehavior]] = {}
        self._by_user_item: Dict[Tuple[str, str], List[UserBehavior]] = {}

    def _append(self, behavior: UserBehavior) -> None:
        self._behaviors.append(behavior)
        self._by_user.setdefault(behavior.user_id, []).append(behavior)
        self._by_item.setdefault(behavior.item_id, []).append(behavior)
        self._by_user_item.setdefault((behavior.user_id, behavior.item_id), []).append(behavior)

    def add_behavior(self, behavior: UserBehavior) -> UserBehavior:
        try:
            stored = _validate(behavior)
        except ValidationError as e:
            logger.warning("rejected behavior: %s", e)
            raise

        with self._lock:
            self._append(stored)
        return stored

    def add_behaviors(self, behaviors: Iterable[UserBehavior]) -> List[UserBehavior]:
        # all-or-nothing: validate the whole batch before touching the log
        try:
            validated = [_validate(b) for b in behaviors]
        except ValidationError as e:
            logger.warning("rejected behavior batch: %s", e)
            raise

        with self._lock:
            for b in validated:
                self._append(b)
        return validated

    def get_user_behaviors(self, user_id: str) -> List[UserBehavior]:
        with self._lock:
            return list(self._by_user.get(user_id, ()))

    def get_item_behaviors(self, item_id: str) -> List[UserBehavior]:
        with self._lock:
            return list(self._by_item.get(item_id, ()))

    def get_user_item_behaviors(self, user_id: str, item_id: str) -> List[UserBehavior]:
        with self._lock:
            return list(self._by_user_item.get((user_id, item_id), ()))

    def get_all_behaviors(self) -> List[UserBehavior]:
        with self._lock:
            return list(self._behaviors)

    def get_item_stats(self, item_id: str) -> Optional[ItemStats]:
        behaviors = self.get_item_behaviors(item_id)
        if not behaviors:
            return None

        stats = ItemStats(item_id=item_id)
        for b in behaviors:
            _fold_item(stats, b)
        return stats

    def get_all_item_stats(self) -> List[ItemStats]:
        stats_by_item: Dict[str, ItemStats] = {}
        for b in self.get_all_behaviors():
            stats = stats_by_item.get(b.item_id)
            if stats is None:
                stats = ItemStats(item_id=b.item_id)
                stats_by_item[b.item_id] = stats
            _fold_item(stats, b)
        return list(stats_by_item.values())

    def get_user_stats(self, user_id: str) -> Optional[UserStats]:
        behaviors = self.get_user_behaviors(user_id)
        if not behaviors:
            return None

        stats = UserStats(user_id=user_id, total_behaviors=len(behaviors))
        items = set()
        for b in behaviors:
            stats.behavior_counts[b.behavior_type.value] += 1
            items.add(b.item_id)
        stats.item_count = len(items)
        return stats

    def get_user_item_stats(self, user_id: str, item_id: str) -> Optional[UserItemStats]:
        behaviors = self.get_user_item_behaviors(user_id, item_id)
        if not behaviors:
            return None

        stats = UserItemStats(user_id=user_id, item_id=item_id, total_behaviors=len(behaviors))
        for b in behaviors:
            stats.behavior_counts[b.behavior_type.value] += 1
            if b.timestamp > stats.last_interaction_ts:
                stats.last_interaction_ts = b.timestamp
        return stats

    def get_user_item_matrix(self) -> Dict[str, Dict[str, float]]:
        """user_id -> (item_id -> accumulated behavior weight)"""
        matrix: Dict[str, Dict[str, float]] = {}
        for b in self.get_all_behaviors():
            row = matrix.setdefault(b.user_id, {})
            row[b.item_id] = row.get(b.item_id, 0.0) + BEHAVIOR_WEIGHTS[b.behavior_type]
        return matrix

    def get_all_user_ids(self) -> List[str]:
        with self._lock:
            return list(self._by_user.keys())

    def get_all_item_ids(self) -> List[str]:
        with self._lock:
            return list(self._by_item.keys())

    def get_stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "total_behaviors": len(self._behaviors),
                "total_users": len(self._by_user),
                "total_items": len(self._by_item),
            }

    def clear(self) -> None:
        with self._lock:
            dropped = len(self._behaviors)
            self._behaviors = []
            self._by_user = {}
            self._by_item = {}
            self._by_user_item = {}
        logger.info("behavior store cleared (%d events dropped)", dropped)


def _fold_item(stats: ItemStats, b: UserBehavior) -> None:
    stats.total_behaviors += 1
    stats.behavior_counts[b.behavior_type.value] += 1
    stats.weighted_score += BEHAVIOR_WEIGHTS[b.behavior_type]
    if b.timestamp > stats.last_interaction_ts:
        stats.last_interaction_ts = b.timestamp


def filter_behaviors_by_type(
    behaviors: Iterable[UserBehavior],
    behavior_type: BehaviorType | str,
) -> List[UserBehavior]:
    wanted = BehaviorType.parse(behavior_type)
    return [b for b in behaviors if b.behavior_type == wanted]

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple
import logging

from backend.recommender.models import (
    ItemStats,
    RecommendationOptions,
    RecommendationResult,
    UserBehavior,
)
from backend.recommender.similarity import cosine_similarity
from backend.recommender.store import now_ms
from backend.recommender.tracker import BehaviorTracker

logger = logging.getLogger(__name__)

MS_PER_DAY = 24 * 60 * 60 * 1000

RECOMMENDATION_KINDS = ("popular", "user", "item", "hybrid")

REASON_USER_BASED = "based on similar users' preferences"
REASON_ITEM_BASED = "based on similar items"
REASON_BLENDED = "blended: popular + personalized"


@dataclass
class EngineConfig:
    default_limit: int = 10
    similarity_threshold: float = 0.1
    max_neighbors: int = 11
    hybrid_popular_weight: float = 0.3
    hybrid_personal_weight: float = 0.7
    # None -> plain weighted score, no time decay
    popularity_decay_days: Optional[float] = None
    popularity_decay_floor: float = 0.5


def _rank(results: List[RecommendationResult]) -> List[RecommendationResult]:
    # score desc, item_id asc on ties
    return sorted(results, key=lambda r: (-r.score, r.item_id))


class RecommendationEngine:
    """
      recommendation engine over an in-memory behavior tracker:
    - popular: weighted behavior score per item (optionally time-decayed)
    - user: user-user collaborative filtering on the user-item matrix
    - item: item-item collaborative filtering on per-item user counts
    - hybrid: weighted merge of popular + user-based lists

    Unknown users and degenerate data never raise; they fall back to
    popularity (which is empty on an empty store).
    """

    def __init__(
        self,
        tracker: Optional[BehaviorTracker] = None,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.tracker = tracker if tracker is not None else BehaviorTracker()
        self.config = config if config is not None else EngineConfig()
        self._clock = clock

    # boundary passthroughs

    def add_behavior(self, behavior: UserBehavior) -> UserBehavior:
        return self.tracker.add_behavior(behavior)

    def add_behaviors(self, behaviors: Iterable[UserBehavior]) -> List[UserBehavior]:
        return self.tracker.add_behaviors(behaviors)

    def get_stats(self) -> Dict[str, int]:
        return self.tracker.get_stats()

    def clear(self) -> None:
        self.tracker.clear()

    # helpers

    def _resolve(self, options: Optional[RecommendationOptions]) -> Tuple[int, Set[str]]:
        options = options or RecommendationOptions()
        limit = options.limit
        if limit is None or limit <= 0:
            limit = self.config.default_limit
        return int(limit), set(options.exclude_item_ids or ())

    def popularity_score(self, stats: ItemStats, now: Optional[int] = None) -> float:
        score = stats.weighted_score
        decay_days = self.config.popularity_decay_days
        if not decay_days or decay_days <= 0:
            return score

        if now is None:
            now = self._clock()
        days_since = max(0, now - stats.last_interaction_ts) / MS_PER_DAY
        decay = max(self.config.popularity_decay_floor, 1.0 - days_since / decay_days)
        return score * decay

    def _popular(self, limit: int, exclude: Set[str]) -> List[RecommendationResult]:
        now = self._clock()
        results = [
            RecommendationResult(
                item_id=stats.item_id,
                score=self.popularity_score(stats, now),
                reason=f"popular item, {stats.total_behaviors} interactions",
            )
            for stats in self.tracker.get_all_item_stats()
            if stats.total_behaviors > 0 and stats.item_id not in exclude
        ]
        return _rank(results)[:limit]

    def _pad_with_popular(
        self,
        results: List[RecommendationResult],
        limit: int,
        exclude: Set[str],
    ) -> List[RecommendationResult]:
        if len(results) >= limit:
            return results
        taken = exclude | {r.item_id for r in results}
        return results + self._popular(limit - len(results), taken)

    # public API

    def get_popular_recommendations(
        self,
        options: Optional[RecommendationOptions] = None,
    ) -> List[RecommendationResult]:
        limit, exclude = self._resolve(options)
        return self._popular(limit, exclude)

    def get_user_based_recommendations(
        self,
        user_id: str,
        options: Optional[RecommendationOptions] = None,
    ) -> List[RecommendationResult]:
        limit, exclude = self._resolve(options)

        matrix = self.tracker.get_user_item_matrix()
        target = matrix.get(user_id)
        if not target:
            logger.debug("no history for user %r, falling back to popular", user_id)
            return self._popular(limit, exclude)

        neighbors: List[Tuple[str, float]] = []
        for other_id, other_items in matrix.items():
            if other_id == user_id:
                continue
            sim = cosine_similarity(target, other_items)
            if sim >= self.config.similarity_threshold:
                neighbors.append((other_id, sim))
        neighbors.sort(key=lambda x: (-x[1], x[0]))

        item_scores: Dict[str, float] = {}
        for other_id, sim in neighbors[: self.config.max_neighbors]:
            for item_id, weight in matrix[other_id].items():
                if item_id in target or item_id in exclude:
                    continue
                item_scores[item_id] = item_scores.get(item_id, 0.0) + sim * weight

        results = _rank(
            [RecommendationResult(item_id=i, score=s, reason=REASON_USER_BASED) for i, s in item_scores.items()]
        )[:limit]

        return self._pad_with_popular(results, limit, exclude)

    def get_item_based_recommendations(
        self,
        user_id: str,
        options: Optional[RecommendationOptions] = None,
    ) -> List[RecommendationResult]:
        limit, exclude = self._resolve(options)

        target = self.tracker.get_user_item_matrix().get(user_id)
        if not target:
            logger.debug("no history for user %r, falling back to popular", user_id)
            return self._popular(limit, exclude)

        # item_id -> (user_id -> interaction count)
        item_vectors: Dict[str, Dict[str, float]] = {}
        for b in self.tracker.get_all_behaviors():
            vec = item_vectors.setdefault(b.item_id, {})
            vec[b.user_id] = vec.get(b.user_id, 0.0) + 1.0

        item_scores: Dict[str, float] = {}
        for touched_id, user_weight in target.items():
            touched_vec = item_vectors.get(touched_id, {})
            for cand_id, cand_vec in item_vectors.items():
                if cand_id in target or cand_id in exclude:
                    continue
                sim = cosine_similarity(touched_vec, cand_vec)
                if sim > 0.0:
                    item_scores[cand_id] = item_scores.get(cand_id, 0.0) + sim * user_weight

        results = _rank(
            [RecommendationResult(item_id=i, score=s, reason=REASON_ITEM_BASED) for i, s in item_scores.items()]
        )[:limit]

        return self._pad_with_popular(results, limit, exclude)

    def get_hybrid_recommendations(
        self,
        user_id: str,
        options: Optional[RecommendationOptions] = None,
    ) -> List[RecommendationResult]:
        limit, exclude = self._resolve(options)

        # over-fetch both lists so the merge has room after dedup
        fetch = RecommendationOptions(limit=limit * 2, exclude_item_ids=tuple(exclude))
        popular = self.get_popular_recommendations(fetch)
        personal = self.get_user_based_recommendations(user_id, fetch)

        merged: Dict[str, RecommendationResult] = {}
        for rec in popular:
            merged[rec.item_id] = RecommendationResult(
                item_id=rec.item_id,
                score=rec.score * self.config.hybrid_popular_weight,
                reason=rec.reason,
            )

        for rec in personal:
            contribution = rec.score * self.config.hybrid_personal_weight
            existing = merged.get(rec.item_id)
            if existing is not None:
                existing.score += contribution
                existing.reason = REASON_BLENDED
            else:
                merged[rec.item_id] = RecommendationResult(
                    item_id=rec.item_id,
                    score=contribution,
                    reason=rec.reason,
                )

        return _rank(list(merged.values()))[:limit]

    def recommend(
        self,
        kind: str,
        user_id: Optional[str] = None,
        options: Optional[RecommendationOptions] = None,
    ) -> List[RecommendationResult]:
        if kind not in RECOMMENDATION_KINDS:
            raise ValueError(f"kind must be one of: {', '.join(RECOMMENDATION_KINDS)}")

        if kind == "popular" or not user_id:
            return self.get_popular_recommendations(options)
        if kind == "user":
            return self.get_user_based_recommendations(user_id, options)
        if kind == "item":
            return self.get_item_based_recommendations(user_id, options)
        return self.get_hybrid_recommendations(user_id, options)

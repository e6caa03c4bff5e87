from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence


class ValidationError(ValueError):
    """Raised when a behavior event cannot be ingested."""


class BehaviorType(str, Enum):
    VIEW = "view"
    CLICK = "click"
    LIKE = "like"
    PURCHASE = "purchase"
    SHARE = "share"

    @classmethod
    def parse(cls, value: Any) -> "BehaviorType":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"invalid behavior_type: {value!r}") from None


# intent strength: purchase > share > like > click > view
BEHAVIOR_WEIGHTS: Dict[BehaviorType, float] = {
    BehaviorType.VIEW: 1.0,
    BehaviorType.CLICK: 2.0,
    BehaviorType.LIKE: 3.0,
    BehaviorType.PURCHASE: 5.0,
    BehaviorType.SHARE: 4.0,
}


def empty_behavior_counts() -> Dict[str, int]:
    return {t.value: 0 for t in BehaviorType}


@dataclass(frozen=True)
class UserBehavior:
    user_id: str
    item_id: str
    behavior_type: BehaviorType
    timestamp: Optional[int] = None  # ms since epoch, filled at ingest
    metadata: Optional[Mapping[str, Any]] = None  # frozen copy once stored


@dataclass
class ItemStats:
    item_id: str
    total_behaviors: int = 0
    behavior_counts: Dict[str, int] = field(default_factory=empty_behavior_counts)
    weighted_score: float = 0.0
    last_interaction_ts: int = 0


@dataclass
class UserStats:
    user_id: str
    total_behaviors: int = 0
    item_count: int = 0
    behavior_counts: Dict[str, int] = field(default_factory=empty_behavior_counts)


@dataclass
class UserItemStats:
    user_id: str
    item_id: str
    total_behaviors: int = 0
    behavior_counts: Dict[str, int] = field(default_factory=empty_behavior_counts)
    last_interaction_ts: int = 0


@dataclass
class RecommendationResult:
    item_id: str
    score: float  # relative ranking signal, not normalized
    reason: str


@dataclass
class RecommendationOptions:
    limit: Optional[int] = None
    exclude_item_ids: Sequence[str] = ()

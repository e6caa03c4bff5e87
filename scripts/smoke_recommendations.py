#!/usr/bin/env python3
import argparse
import json
import random
from dataclasses import asdict

from backend.app.config import settings
from backend.app.logging_setup import setup_logging
from backend.recommender.engine import RECOMMENDATION_KINDS, RecommendationEngine
from backend.recommender.models import BehaviorType, RecommendationOptions, UserBehavior


def seed_demo(engine: RecommendationEngine, num_users: int, num_items: int, events: int, seed: int) -> None:
    rng = random.Random(seed)
    types = list(BehaviorType)
    # skew towards cheap interactions, like real traffic
    type_weights = [50, 25, 12, 5, 8]

    batch = []
    for _ in range(events):
        user = rng.randint(1, num_users)
        # low item ids are "hot"
        item = min(int(rng.expovariate(1.0 / (num_items / 4))) + 1, num_items)
        batch.append(
            UserBehavior(
                user_id=f"user{user}",
                item_id=f"item{item}",
                behavior_type=rng.choices(types, weights=type_weights)[0],
            )
        )
    engine.add_behaviors(batch)


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--user-id", default="user1")
    ap.add_argument("--type", default="hybrid", choices=RECOMMENDATION_KINDS)
    ap.add_argument("--topk", type=int, default=5)
    ap.add_argument("--exclude", default="", help="comma-separated item ids")
    ap.add_argument("--users", type=int, default=50)
    ap.add_argument("--items", type=int, default=40)
    ap.add_argument("--events", type=int, default=1000)
    ap.add_argument("--seed", type=int, default=42)
    args = ap.parse_args()

    setup_logging(settings.log_level, settings.recommender_log_level)

    engine = RecommendationEngine(config=settings.engine_config())
    seed_demo(engine, args.users, args.items, args.events, args.seed)

    options = RecommendationOptions(
        limit=args.topk,
        exclude_item_ids=[x.strip() for x in args.exclude.split(",") if x.strip()],
    )
    recs = engine.recommend(args.type, user_id=args.user_id, options=options)

    print(json.dumps(
        {
            "user_id": args.user_id,
            "type": args.type,
            "stats": engine.get_stats(),
            "top": [asdict(r) for r in recs],
        },
        indent=2,
    ))


if __name__ == "__main__":
    main()

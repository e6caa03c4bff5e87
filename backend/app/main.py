from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any, Dict, Optional
import logging

from fastapi import FastAPI, Query, HTTPException, Request
from pydantic import BaseModel, Field

from backend.app.config import settings
from backend.app.logging_setup import setup_logging
from backend.recommender.engine import RECOMMENDATION_KINDS, RecommendationEngine
from backend.recommender.models import RecommendationOptions, UserBehavior, ValidationError
from backend.recommender.tracker import BehaviorTracker

setup_logging(settings.log_level, settings.recommender_log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # one engine per app instance, everything lives in process memory
    app.state.engine = RecommendationEngine(
        tracker=BehaviorTracker(),
        config=settings.engine_config(),
    )
    logger.info("recommendation engine ready (env=%s)", settings.app_env)

    yield

    app.state.engine.clear()


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    lifespan=lifespan,
)


def get_engine(request: Request) -> RecommendationEngine:
    return request.app.state.engine


def _behavior_to_dict(b: UserBehavior) -> Dict[str, Any]:
    return {
        "user_id": b.user_id,
        "item_id": b.item_id,
        "behavior_type": b.behavior_type.value,
        "timestamp": b.timestamp,
        "metadata": dict(b.metadata) if b.metadata is not None else None,
    }


@app.get("/health")
def health():
    return {"status": "ok", "app": settings.app_name, "env": settings.app_env}


@app.get("/")
def root():
    return {"message": "Recommender API is running", "docs": "/docs", "health": "/health"}


# Behavior ingestion
class BehaviorEvent(BaseModel):
    # emptiness and type membership are checked by the store, not here
    user_id: str  # opaque, any length
    item_id: str
    behavior_type: str = Field(..., max_length=32)  # view/click/like/purchase/share
    timestamp: int | None = Field(default=None, ge=0)  # ms since epoch
    metadata: Dict[str, Any] | None = None


@app.post("/behaviors")
def log_behavior(ev: BehaviorEvent, request: Request):
    engine = get_engine(request)
    try:
        stored = engine.add_behavior(
            UserBehavior(
                user_id=ev.user_id,
                item_id=ev.item_id,
                behavior_type=ev.behavior_type,
                timestamp=ev.timestamp,
                metadata=ev.metadata,
            )
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"status": "ok", "behavior": _behavior_to_dict(stored)}


@app.delete("/behaviors")
def clear_behaviors(request: Request):
    get_engine(request).clear()
    return {"status": "ok"}


@app.get("/stats")
def stats(request: Request):
    return get_engine(request).get_stats()


# Recommendations
@app.get("/recommendations")
def recommendations(
    request: Request,
    user_id: Optional[str] = Query(default=None),
    type: str = Query("hybrid"),  # "popular" | "user" | "item" | "hybrid"
    limit: int = Query(10, le=100),
    exclude_item_ids: str = Query(""),
):
    if type not in RECOMMENDATION_KINDS:
        raise HTTPException(
            status_code=400,
            detail=f"type must be one of: {', '.join(RECOMMENDATION_KINDS)}",
        )
    if type in ("user", "item") and not user_id:
        raise HTTPException(status_code=400, detail=f"user_id is required for type={type}")

    options = RecommendationOptions(
        limit=limit,
        exclude_item_ids=[x.strip() for x in exclude_item_ids.split(",") if x.strip()],
    )
    recs = get_engine(request).recommend(type, user_id=user_id, options=options)

    return {
        "user_id": user_id,
        "type": type,
        "count": len(recs),
        "recommendations": [asdict(r) for r in recs],
    }


# Debug endpoints
@app.get("/debug/users/{user_id}")
def debug_user(user_id: str, request: Request):
    engine = get_engine(request)
    user_stats = engine.tracker.get_user_stats(user_id)
    if user_stats is None:
        raise HTTPException(status_code=404, detail="User not found")

    return {
        "stats": asdict(user_stats),
        "items": engine.tracker.get_user_interacted_items(user_id),
    }


@app.get("/debug/items/{item_id}")
def debug_item(item_id: str, request: Request):
    engine = get_engine(request)
    item_stats = engine.tracker.get_item_stats(item_id)
    if item_stats is None:
        raise HTTPException(status_code=404, detail="Item not found")

    return {
        "stats": asdict(item_stats),
        "popularity_score": engine.popularity_score(item_stats),
    }

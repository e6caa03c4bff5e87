# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from backend.recommender.engine import EngineConfig, RecommendationEngine
from backend.recommender.store import BehaviorStore
from backend.recommender.tracker import BehaviorTracker
from tests.factories import NOW_MS, behavior


@pytest.fixture
def store():
    return BehaviorStore()


@pytest.fixture
def tracker():
    return BehaviorTracker()


@pytest.fixture
def make_engine():
    """
    Build an engine with a frozen clock.

    Usage:
        engine = make_engine(popularity_decay_days=30)
    """
    def _make(**config):
        return RecommendationEngine(
            tracker=BehaviorTracker(),
            config=EngineConfig(**config),
            clock=lambda: NOW_MS,
        )

    return _make


@pytest.fixture
def engine(make_engine):
    return make_engine()


@pytest.fixture
def two_user_engine(engine):
    """
    user1: view item1 x2, purchase item2
    user2: view item1, like item3
    """
    engine.add_behaviors([
        behavior("user1", "item1", "view"),
        behavior("user1", "item1", "view"),
        behavior("user1", "item2", "purchase"),
        behavior("user2", "item1", "view"),
        behavior("user2", "item3", "like"),
    ])
    return engine


@pytest.fixture
def client():
    """
    FastAPI test client.

    Entering the context runs the lifespan, so every test gets a fresh engine.
    """
    from backend.app.main import app

    with TestClient(app) as c:
        yield c

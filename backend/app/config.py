from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.recommender.engine import EngineConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "BehaviorRecommender"
    app_env: str = "dev"
    log_level: str = "INFO"
    # unset -> same as log_level
    recommender_log_level: Optional[str] = None

    # recommendation tuning
    default_limit: int = 10
    similarity_threshold: float = 0.1
    max_neighbors: int = 11
    hybrid_popular_weight: float = 0.3
    hybrid_personal_weight: float = 0.7

    # leave unset for plain weighted popularity (no time decay)
    popularity_decay_days: Optional[float] = None
    popularity_decay_floor: float = 0.5

    def engine_config(self) -> EngineConfig:
        return EngineConfig(
            default_limit=self.default_limit,
            similarity_threshold=self.similarity_threshold,
            max_neighbors=self.max_neighbors,
            hybrid_popular_weight=self.hybrid_popular_weight,
            hybrid_personal_weight=self.hybrid_personal_weight,
            popularity_decay_days=self.popularity_decay_days,
            popularity_decay_floor=self.popularity_decay_floor,
        )


settings = Settings()

"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - rank_max - rank_min >= 2, checked when settings load (not at first insert)
    - get_settings() is cached (lru_cache) — single instance per process
    - ordering_config() is the only bridge from settings into core/

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Defaults provided for all settings: works out-of-the-box with docker-compose
"""

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from rankline.core.domain_types import OrderingMode, OutOfRangePolicy
from rankline.core.ordering_config import (
    INT32_MAX, INT32_MIN, OrderingConfig, RankBounds,
)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://rankline:rankline@db:5432/rankline"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres provides postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Ordering
    rank_min: int = INT32_MIN
    rank_max: int = INT32_MAX
    ordering_mode: OrderingMode = OrderingMode.SPARSE
    dense_out_of_range: OutOfRangePolicy = OutOfRangePolicy.REJECT

    @model_validator(mode="after")
    def check_rank_bounds(self) -> "Settings":
        if self.rank_max - self.rank_min < 2:
            raise ValueError("rank_max - rank_min must be at least 2")
        return self

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    def ordering_config(self) -> OrderingConfig:
        return OrderingConfig(
            bounds=RankBounds(self.rank_min, self.rank_max),
            mode=self.ordering_mode,
            out_of_range=self.dense_out_of_range,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()

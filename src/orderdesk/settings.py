"""
orderdesk.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide env-driven settings for the persistence layer.
- Offer a cached settings instance for composition roots.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ORDERDESK_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "orderdesk"
    log_level: str = "INFO"

    # Persistence
    database_url: str = Field(default="sqlite:///./orderdesk.db", repr=False)
    echo_sql: bool = False
    # Exposed to DAOs as the `jdbc.batch_size` persistence property.
    jdbc_batch_size: int | None = Field(default=None, gt=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# `database_url` is hidden from repr because it may embed credentials.

from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    SLOW_THRESHOLD_MS: int = 1000
    SLOW_TAGS: list[str] = []
    SLOW_VERBOSE: bool = False
    SLOW_INCLUDE_ID: bool = False
    SLOW_REQUEST_LIFECYCLE: bool = False
    SLOW_SEGMENT_RECORDS: bool = False

    # Route path template -> threshold in ms, or false to silence the route.
    ROUTE_THRESHOLDS: dict[str, int | bool] = {}

    SINK: Literal["logging", "redis"] = "logging"
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_LOG_CHANNEL: str = "slow-request-log"
    REDIS_SOCKET_TIMEOUT: float = 1.0

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "plain"] = "json"

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()

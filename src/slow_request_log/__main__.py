"""Entrypoint: python -m slow_request_log"""
from __future__ import annotations

import uvicorn

from slow_request_log.config import settings
from slow_request_log.logging_config import configure_logging


def main() -> None:
    configure_logging()
    uvicorn.run(
        "slow_request_log.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level=settings.LOG_LEVEL.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()

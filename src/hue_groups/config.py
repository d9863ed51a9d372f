from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import logging
import os


@dataclass(frozen=True)
class AppConfig:
    bridge_host: Optional[str]
    application_key: Optional[str]
    retry_max_attempts: int = 3
    retry_base_delay_ms: int = 200
    timeout_seconds: float = 10.0
    connect_timeout_seconds: float = 3.0
    log_level: str = "INFO"

    @staticmethod
    def from_env() -> "AppConfig":
        return AppConfig(
            bridge_host=os.getenv("HUE_BRIDGE_HOST") or None,
            application_key=os.getenv("HUE_APPLICATION_KEY") or None,
            retry_max_attempts=max(1, int(os.getenv("RETRY_MAX_ATTEMPTS", "3"))),
            retry_base_delay_ms=int(os.getenv("RETRY_BASE_DELAY_MS", "200")),
            timeout_seconds=float(os.getenv("HUE_TIMEOUT_SECONDS", "10")),
            connect_timeout_seconds=float(os.getenv("HUE_CONNECT_TIMEOUT_SECONDS", "3")),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )


def configure_logging(config: AppConfig) -> None:
    # basicConfig leaves existing root handlers alone; the package level is always applied.
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("hue_groups").setLevel(config.log_level)

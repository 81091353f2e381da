"""
Run configuration, read from environment variables.
"""

import logging
import os
from dataclasses import dataclass

DEFAULT_LOG_FORMAT = "%(levelname)s: %(message)s"


def _log_level_from_env() -> int:
    name = os.getenv("PAYMENTS_LOG_LEVEL", "WARNING").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


@dataclass
class EngineConfig:
    """Logging settings for one engine run"""
    log_level: int = logging.WARNING
    log_format: str = DEFAULT_LOG_FORMAT

    @classmethod
    def from_env(cls) -> "EngineConfig":
        return cls(
            log_level=_log_level_from_env(),
            log_format=os.getenv("PAYMENTS_LOG_FORMAT", DEFAULT_LOG_FORMAT),
        )

"""
Runtime configuration for Ark.

Settings are read from the environment once and cached. ``DEBUG=1`` is the
historical switch for verbose output; ``ARK_DEBUG`` and ``ARK_LOG_LEVEL``
are the namespaced equivalents.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from loguru import logger

VALID_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")
DEFAULT_LOG_LEVEL = "WARNING"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Config:
    """
    Ark runtime configuration.

    Attributes:
        debug: Verbose diagnostics enabled
        log_level: Level for the stderr log sink
    """

    debug: bool = False
    log_level: str | None = None

    def __post_init__(self) -> None:
        if self.log_level is None:
            self.log_level = "DEBUG" if self.debug else DEFAULT_LOG_LEVEL
        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: '{self.log_level}'. "
                f"Valid levels: {', '.join(VALID_LOG_LEVELS)}"
            )

    @classmethod
    def from_env(cls) -> "Config":
        """Build configuration from environment variables."""
        debug = os.getenv("DEBUG") == "1" or (
            os.getenv("ARK_DEBUG", "").strip().lower() in _TRUTHY
        )

        log_level = os.getenv("ARK_LOG_LEVEL")
        if log_level is not None and log_level.strip().upper() not in VALID_LOG_LEVELS:
            logger.warning(f"Ignoring invalid ARK_LOG_LEVEL: {log_level!r}")
            log_level = None

        return cls(debug=debug, log_level=log_level.strip() if log_level else None)


_config: Config | None = None


def get_config() -> Config:
    """Return the cached configuration, reading the environment on first use."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next call re-reads the environment."""
    global _config
    _config = None

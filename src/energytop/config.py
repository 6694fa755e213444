"""Runtime configuration for energytop."""

import logging
from dataclasses import dataclass

from energytop.aggregator import DEFAULT_MAX_POINTS
from energytop.providers import DEFAULT_SOURCE

DEFAULT_POLL_INTERVAL_MS = 1000
MIN_POLL_INTERVAL_MS = 100


@dataclass(slots=True, frozen=True)
class MonitorConfig:
    """Settings for one monitored source."""

    source_path: str = DEFAULT_SOURCE
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    max_points: int = DEFAULT_MAX_POINTS
    log_level: str = "WARNING"
    log_file: str | None = None

    def __post_init__(self) -> None:
        if not self.source_path:
            raise ValueError("source_path must not be empty")
        if self.poll_interval_ms < MIN_POLL_INTERVAL_MS:
            raise ValueError(
                f"poll_interval_ms must be >= {MIN_POLL_INTERVAL_MS}, got {self.poll_interval_ms}"
            )
        if self.max_points < 1:
            raise ValueError(f"max_points must be >= 1, got {self.max_points}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @property
    def poll_rate(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000

    @property
    def level(self) -> int:
        return logging.getLevelName(self.log_level.upper())

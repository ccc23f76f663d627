from __future__ import annotations

import dataclasses
import logging
import os
from typing import Mapping, Optional

from .protocol import NexStarConstants


class NexStarConfigConstants:
    ENV_BAUD = "NEXSTAR_BAUD"
    ENV_TIMEOUT_S = "NEXSTAR_TIMEOUT_S"
    ENV_LOG_LEVEL = "NEXSTAR_LOG_LEVEL"
    DEFAULT_LOG_LEVEL = "WARNING"


@dataclasses.dataclass(frozen=True)
class NexStarConfig:
    """Serial line and logging settings; ``timeout_s=None`` blocks on reads indefinitely."""

    baud: int = NexStarConstants.DEFAULT_BAUD
    timeout_s: Optional[float] = NexStarConstants.DEFAULT_TIMEOUT_S
    log_level: str = NexStarConfigConstants.DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        if self.baud <= 0:
            raise ValueError("Baud rate must be positive.")
        if self.timeout_s is not None and self.timeout_s <= 0:
            raise ValueError("Serial timeout must be positive (or None to block).")
        if self.log_level.upper() not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level {self.log_level!r}.")

    @staticmethod
    def parse_timeout(value: str | float | None) -> Optional[float]:
        if value is None:
            return None
        if isinstance(value, str) and value.strip().lower() in ("", "none"):
            return None
        timeout = float(value)
        return timeout if timeout > 0 else None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "NexStarConfig":
        environ = os.environ if environ is None else environ
        baud = int(environ.get(NexStarConfigConstants.ENV_BAUD, NexStarConstants.DEFAULT_BAUD))
        timeout_s = cls.parse_timeout(
            environ.get(NexStarConfigConstants.ENV_TIMEOUT_S, NexStarConstants.DEFAULT_TIMEOUT_S)
        )
        log_level = environ.get(NexStarConfigConstants.ENV_LOG_LEVEL, NexStarConfigConstants.DEFAULT_LOG_LEVEL)
        return cls(baud=baud, timeout_s=timeout_s, log_level=log_level)

"""
Environment-driven configuration for intrace-verify.

Defaults point at a local development stack (capture API on :8080, event
log on :8081).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from functools import lru_cache

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "http://localhost:8080"
DEFAULT_EVENT_LOG_BASE = "http://localhost:8081"


@dataclass(frozen=True)
class VerifierConfig:
    api_base: str = DEFAULT_API_BASE
    event_log_base: str = DEFAULT_EVENT_LOG_BASE
    http_timeout: float = 10.0
    # Seconds a registry listing may be reused; 0 disables caching
    key_cache_ttl: float = 60.0
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> VerifierConfig:
        return cls(
            api_base=os.getenv("INTRACE_API_BASE", DEFAULT_API_BASE).rstrip("/"),
            event_log_base=os.getenv("INTRACE_EVENT_LOG_BASE", DEFAULT_EVENT_LOG_BASE).rstrip("/"),
            http_timeout=_float_env("INTRACE_HTTP_TIMEOUT", 10.0),
            key_cache_ttl=_float_env("INTRACE_KEY_CACHE_TTL", 60.0),
            log_level=os.getenv("INTRACE_LOG_LEVEL", "WARNING").upper(),
        )

    def with_overrides(self, **overrides) -> VerifierConfig:
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number, using %s", name, raw, default)
        return default
    if value < 0:
        logger.warning("Ignoring %s=%r: negative, using %s", name, raw, default)
        return default
    return value


@lru_cache(maxsize=1)
def get_config() -> VerifierConfig:
    return VerifierConfig.from_env()

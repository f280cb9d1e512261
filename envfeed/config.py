from __future__ import annotations

import os
from dataclasses import dataclass


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip()


def _env_int(name: str, default: int) -> int:
    """Read an env var as int; missing, empty or invalid values give the default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except (ValueError, TypeError):
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except (ValueError, TypeError):
        return default


def _env_bool(name: str, default: bool) -> bool:
    """Accepts "1/true/yes/on" as True."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.lower().strip() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class FeedSettings:
    feed_url: str = ""
    use_mock: bool = False
    poll_interval_ms: int = 3000
    poll_total_ms: int = 15000
    background_poll_ms: int = 0
    http_timeout_s: float = 10.0
    cache_bust: bool = True
    strict_numeric: bool = False
    show_latest_first: bool = True

    @property
    def mock_mode(self) -> bool:
        return self.use_mock or not self.feed_url

    @classmethod
    def from_env(cls) -> "FeedSettings":
        return cls(
            feed_url=_env_str("ENVFEED_FEED_URL", ""),
            use_mock=_env_bool("ENVFEED_USE_MOCK", False),
            # interval floor keeps a misconfigured burst from spinning
            poll_interval_ms=max(_env_int("ENVFEED_POLL_INTERVAL_MS", 3000), 100),
            poll_total_ms=max(_env_int("ENVFEED_POLL_TOTAL_MS", 15000), 0),
            background_poll_ms=max(_env_int("ENVFEED_BACKGROUND_POLL_MS", 0), 0),
            http_timeout_s=_env_float("ENVFEED_HTTP_TIMEOUT_S", 10.0),
            cache_bust=_env_bool("ENVFEED_CACHE_BUST", True),
            strict_numeric=_env_bool("ENVFEED_STRICT_NUMERIC", False),
            show_latest_first=_env_bool("ENVFEED_SHOW_LATEST_FIRST", True),
        )


LOG_LEVEL = _env_str("ENVFEED_LOG_LEVEL", "INFO").upper()
HOST = _env_str("ENVFEED_HOST", "127.0.0.1")
PORT = _env_int("ENVFEED_PORT", 8000)

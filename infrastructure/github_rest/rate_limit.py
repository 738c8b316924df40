import time
from threading import Lock
from typing import Any, Mapping, Optional

from core.models import RateLimitStatus


def header_value(headers: Optional[Mapping[str, Any]], name: str) -> Optional[str]:
    if not headers:
        return None
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    return None if value is None else str(value)


def _int_header(headers: Optional[Mapping[str, Any]], name: str) -> int:
    raw = header_value(headers, name)
    if raw is None:
        return 0
    try:
        return int(float(raw))
    except ValueError:
        return 0


def parse_rate_limit(headers: Optional[Mapping[str, Any]]) -> RateLimitStatus:
    """Read GitHub's X-RateLimit-* headers; missing or malformed fields become 0."""
    return RateLimitStatus(
        limit=_int_header(headers, "X-RateLimit-Limit"),
        remaining=_int_header(headers, "X-RateLimit-Remaining"),
        reset_at=_int_header(headers, "X-RateLimit-Reset"),
        used=_int_header(headers, "X-RateLimit-Used"),
    )


def throttle_delay(headers: Optional[Mapping[str, Any]], now: Optional[float] = None) -> Optional[float]:
    """Seconds to wait before retrying a 429, or None when headers give no hint.

    ``Retry-After`` wins over ``X-RateLimit-Reset``; the reset-derived delay is
    floored at zero.
    """
    retry_after = header_value(headers, "Retry-After")
    if retry_after:
        try:
            return max(0.0, float(retry_after))
        except ValueError:
            pass
    reset = header_value(headers, "X-RateLimit-Reset")
    if reset:
        try:
            reset_ts = float(reset)
        except ValueError:
            return None
        current = time.time() if now is None else now
        return max(0.0, reset_ts - current)
    return None


class RateLimitTracker:
    """Thread-safe record of the most recent rate-limit headers seen."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._last: Optional[RateLimitStatus] = None

    def update(self, status: RateLimitStatus) -> None:
        with self._lock:
            self._last = status

    @property
    def last(self) -> Optional[RateLimitStatus]:
        with self._lock:
            return self._last

    @property
    def last_remaining(self) -> Optional[int]:
        last = self.last
        return last.remaining if last else None

    @property
    def last_reset_epoch(self) -> Optional[int]:
        last = self.last
        return last.reset_at if last else None

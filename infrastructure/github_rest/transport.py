import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import requests

from core.errors import NetworkFailure, RequestTimeout
from core.models import RateLimitStatus

from .rate_limit import parse_rate_limit

DEFAULT_TIMEOUT = 30
logger = logging.getLogger("dashboard.transport")


@dataclass
class TransportResponse:
    status_code: int
    headers: Mapping[str, Any] = field(default_factory=dict)
    body: str = ""
    rate_limit: RateLimitStatus = field(default_factory=RateLimitStatus)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Transport:
    """Issues exactly one HTTP request; success and failure both come back as a response."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        params: Optional[Dict[str, Any]] = None,
        body: Any = None,
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        kwargs: Dict[str, Any] = {"headers": headers, "timeout": timeout or self.timeout}
        if params:
            kwargs["params"] = params
        if body is not None:
            kwargs["json"] = body
        try:
            resp = getattr(self.session, method.lower())(url, **kwargs)
        except requests.Timeout as exc:
            logger.warning("%s %s timed out after %ss", method.upper(), url, kwargs["timeout"])
            raise RequestTimeout() from exc
        except requests.RequestException as exc:
            raise NetworkFailure(f"Network error: {exc}") from exc
        logger.debug("%s %s -> %s", method.upper(), url, resp.status_code)
        return TransportResponse(
            status_code=resp.status_code,
            headers=resp.headers,
            body=resp.text or "",
            rate_limit=parse_rate_limit(resp.headers),
        )

import json
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Dict, Mapping, Optional

from core.errors import error_for_status
from core.models import RateLimitStatus

from .rate_limit import RateLimitTracker
from .retry_policy import RetryPolicy
from .transport import Transport, TransportResponse

GITHUB_API_BASE_URL = "https://api.github.com"
DEFAULT_ACCEPT = "application/vnd.github.v3+json"


@dataclass
class ApiResponse:
    data: Any
    status: int
    headers: Mapping[str, Any] = field(default_factory=dict)
    rate_limit: Optional[RateLimitStatus] = None


class ApiClient:
    """Authenticated GET access to the GitHub REST API."""

    def __init__(
        self,
        credential: str,
        transport: Optional[Transport] = None,
        retry_policy: Optional[RetryPolicy] = None,
        base_url: str = GITHUB_API_BASE_URL,
    ) -> None:
        self._credential = credential
        self._credential_lock = Lock()
        self.transport = transport or Transport()
        self.retry_policy = retry_policy or RetryPolicy()
        self.base_url = base_url.rstrip("/")
        self.rate_limiter = RateLimitTracker()

    def set_credential(self, credential: str) -> None:
        with self._credential_lock:
            self._credential = credential

    @property
    def credential(self) -> str:
        with self._credential_lock:
            return self._credential

    @property
    def last_rate_limit(self) -> Optional[RateLimitStatus]:
        return self.rate_limiter.last

    def url_for(self, path: str) -> str:
        if path.startswith("http"):
            return path
        return f"{self.base_url}{path}"

    def default_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"token {self.credential}",
            "Accept": DEFAULT_ACCEPT,
            "Content-Type": "application/json",
        }

    def get(
        self,
        path: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> ApiResponse:
        url = self.url_for(path)
        # Captured once so a credential rotation mid-retry does not leak into this call.
        merged = {**self.default_headers(), **(headers or {})}

        def send() -> TransportResponse:
            resp = self.transport.send("GET", url, merged, params=params, timeout=timeout)
            self.rate_limiter.update(resp.rate_limit)
            return resp

        resp = self.retry_policy.run(send)
        payload = _parse_json(resp.body)
        if not resp.ok:
            raise error_for_status(resp.status_code, _error_message(resp.status_code, payload), payload)
        return ApiResponse(data=payload, status=resp.status_code, headers=resp.headers, rate_limit=resp.rate_limit)


def _parse_json(body: str) -> Any:
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


def _error_message(status_code: int, payload: Any) -> str:
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    if status_code == 429:
        return "Rate limit exceeded"
    return f"HTTP {status_code}"

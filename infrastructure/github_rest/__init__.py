from .api_client import GITHUB_API_BASE_URL, ApiClient, ApiResponse
from .rate_limit import RateLimitTracker, parse_rate_limit, throttle_delay
from .retry_policy import RetryPolicy
from .transport import Transport, TransportResponse

__all__ = [
    "GITHUB_API_BASE_URL",
    "ApiClient",
    "ApiResponse",
    "RateLimitTracker",
    "RetryPolicy",
    "Transport",
    "TransportResponse",
    "parse_rate_limit",
    "throttle_delay",
]

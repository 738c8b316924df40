"""Error taxonomy shared by the REST client, cache and orchestrator.

Every terminal failure of a GitHub call surfaces as an ``ApiError`` subclass
so callers can branch on the kind without re-parsing the HTTP response.
"""

from typing import Any, Optional


class ApiError(RuntimeError):
    """Terminal failure of a GitHub REST call."""

    def __init__(self, message: str, status_code: int, raw_body: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.raw_body = raw_body

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, message={self.message!r})"


class RequestTimeout(ApiError):
    """No response arrived within the request timeout. Never retried."""

    def __init__(self, message: str = "Request timeout") -> None:
        super().__init__(message, 408)


class NetworkFailure(ApiError):
    """Connection-level failure before any HTTP status was received."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 0)


class RateLimited(ApiError):
    pass


class ServerError(ApiError):
    pass


class ClientError(ApiError):
    pass


class AuthenticationError(ClientError):
    """401/403: the credential should be re-entered."""


def error_for_status(status_code: int, message: str, raw_body: Optional[Any] = None) -> ApiError:
    if status_code == 429:
        return RateLimited(message, status_code, raw_body)
    if status_code >= 500:
        return ServerError(message, status_code, raw_body)
    if status_code in (401, 403):
        return AuthenticationError(message, status_code, raw_body)
    if status_code >= 400:
        return ClientError(message, status_code, raw_body)
    return ApiError(message, status_code, raw_body)


class StorageError(RuntimeError):
    """The persistent key-value store failed to read or write."""


class ValidationFailure(ValueError):
    """A settings, token or message payload is malformed."""

    def __init__(self, message: str, errors: Optional[list] = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


class UnknownMessageType(ValidationFailure):
    pass


__all__ = [
    "ApiError",
    "RequestTimeout",
    "NetworkFailure",
    "RateLimited",
    "ServerError",
    "ClientError",
    "AuthenticationError",
    "error_for_status",
    "StorageError",
    "ValidationFailure",
    "UnknownMessageType",
]

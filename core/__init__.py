from .errors import (
    ApiError,
    AuthenticationError,
    ClientError,
    NetworkFailure,
    RateLimited,
    RequestTimeout,
    ServerError,
    StorageError,
    UnknownMessageType,
    ValidationFailure,
)
from .models import CacheEntry, CacheInfo, DataKind, GroupedRepositories, RateLimitStatus
from .settings import LayoutItem, Settings

__all__ = [
    # Errors
    "ApiError",
    "AuthenticationError",
    "ClientError",
    "NetworkFailure",
    "RateLimited",
    "RequestTimeout",
    "ServerError",
    "StorageError",
    "UnknownMessageType",
    "ValidationFailure",
    # Models
    "CacheEntry",
    "CacheInfo",
    "DataKind",
    "GroupedRepositories",
    "RateLimitStatus",
    "LayoutItem",
    "Settings",
]

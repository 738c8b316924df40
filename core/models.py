"""Value objects of the dashboard data core."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


# Resource records are GitHub JSON payloads passed through unmodified.
Resource = Dict[str, Any]

PERSONAL_GROUP = "Personal"


@dataclass
class CacheEntry:
    """A cached payload with the time it was stored and its lifetime.

    Attributes:
        data: The cached payload
        stored_at: Epoch seconds when the entry was written
        ttl: Lifetime in seconds; the entry is stale once ``age > ttl``
    """

    data: Any
    stored_at: float
    ttl: float

    def __post_init__(self) -> None:
        if self.ttl < 0:
            raise ValueError(f"ttl must be >= 0, got {self.ttl}")

    def age(self, now: float) -> float:
        return now - self.stored_at

    def is_expired(self, now: float) -> bool:
        return self.age(now) > self.ttl

    def to_dict(self) -> Dict[str, Any]:
        return {"data": self.data, "timestamp": self.stored_at, "ttl": self.ttl}

    @classmethod
    def from_dict(cls, raw: Any) -> Optional["CacheEntry"]:
        """Rebuild an entry from its stored mapping; None if it is not one."""
        if not isinstance(raw, dict) or "data" not in raw:
            return None
        try:
            return cls(data=raw["data"], stored_at=float(raw.get("timestamp", 0.0)), ttl=float(raw.get("ttl", 0.0)))
        except (TypeError, ValueError):
            return None


@dataclass
class CacheInfo:
    exists: bool
    age: Optional[int] = None
    ttl: Optional[int] = None
    expired: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.exists:
            return {"exists": False}
        return {"exists": True, "age": self.age, "ttl": self.ttl, "expired": self.expired}


@dataclass(frozen=True)
class RateLimitStatus:
    limit: int = 0
    remaining: int = 0
    reset_at: int = 0
    used: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"limit": self.limit, "remaining": self.remaining, "reset": self.reset_at, "used": self.used}


@dataclass
class GroupedRepositories:
    """Repositories sharing an owning organization (or the personal bucket)."""

    group_key: str
    items: List[Resource] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"group_key": self.group_key, "items": list(self.items)}


class DataKind(str, Enum):
    REPOSITORIES = "repositories"
    ISSUES = "issues"
    PROJECTS = "projects"
    ALL = "all"

    def includes(self, other: "DataKind") -> bool:
        return self is DataKind.ALL or self is other


__all__ = [
    "Resource",
    "PERSONAL_GROUP",
    "CacheEntry",
    "CacheInfo",
    "RateLimitStatus",
    "GroupedRepositories",
    "DataKind",
]

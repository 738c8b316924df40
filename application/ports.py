from typing import Any, Iterable, List, Optional, Protocol


class KeyValueStore(Protocol):
    """Persistent store consumed by the cache and settings service.

    Only single-key operations are expected to be atomic.
    """

    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def remove(self, keys: Iterable[str]) -> None:
        ...

    def keys(self) -> List[str]:
        ...

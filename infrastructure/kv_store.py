"""Key-value stores backing the cache and the settings document."""

import copy
import logging
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional

import yaml

from core.errors import StorageError

logger = logging.getLogger("dashboard.store")


class MemoryStore:
    """In-process store; values are deep-copied in and out like a serializing store would."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._lock = Lock()
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            value = self._data.get(key)
            return copy.deepcopy(value)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def remove(self, keys: Iterable[str]) -> None:
        if isinstance(keys, str):
            keys = [keys]
        with self._lock:
            for key in keys:
                self._data.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data)


class YamlFileStore:
    """Store persisted as a single YAML mapping on disk.

    The file is read lazily on first access and rewritten after every
    mutation. A corrupt or unreadable file is treated as empty.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = Lock()
        self._data: Dict[str, Any] = {}
        self._loaded = False

    def _load_locked(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        if not self.path.exists():
            return
        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Ignoring unreadable store %s: %s", self.path, exc)
            return
        if isinstance(raw, dict):
            self._data = {str(k): v for k, v in raw.items()}

    def _persist_locked(self) -> None:
        try:
            if not self._data:
                self.path.unlink(missing_ok=True)
                return
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(yaml.safe_dump(self._data, allow_unicode=True), encoding="utf-8")
        except (OSError, yaml.YAMLError) as exc:
            raise StorageError(f"Failed to write {self.path}: {exc}") from exc

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            self._load_locked()
            return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._load_locked()
            self._data[key] = copy.deepcopy(value)
            self._persist_locked()

    def remove(self, keys: Iterable[str]) -> None:
        if isinstance(keys, str):
            keys = [keys]
        with self._lock:
            self._load_locked()
            removed = False
            for key in keys:
                if key in self._data:
                    del self._data[key]
                    removed = True
            if removed:
                self._persist_locked()

    def keys(self) -> List[str]:
        with self._lock:
            self._load_locked()
            return list(self._data)


__all__ = ["MemoryStore", "YamlFileStore"]

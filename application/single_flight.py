from threading import Event, Lock
from typing import Any, Callable, Dict, Optional


class _Call:
    def __init__(self) -> None:
        self.done = Event()
        self.waiters = 0
        self.result: Any = None
        self.error: Optional[BaseException] = None


class SingleFlight:
    """At most one in-flight call per key; concurrent callers share its outcome."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._calls: Dict[str, _Call] = {}

    def do(self, key: str, fn: Callable[[], Any]) -> Any:
        with self._lock:
            call = self._calls.get(key)
            leader = call is None
            if leader:
                call = self._calls[key] = _Call()
            else:
                call.waiters += 1
        if not leader:
            call.done.wait()
            with self._lock:
                call.waiters -= 1
            if call.error is not None:
                raise call.error
            return call.result
        try:
            call.result = fn()
        except BaseException as exc:
            call.error = exc
            raise
        finally:
            with self._lock:
                self._calls.pop(key, None)
            call.done.set()
        return call.result

    def waiting(self, key: str) -> int:
        """Number of callers currently blocked on the in-flight call for ``key``."""
        with self._lock:
            call = self._calls.get(key)
            return call.waiters if call else 0

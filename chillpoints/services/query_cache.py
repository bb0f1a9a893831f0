from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Literal, Optional


logger = logging.getLogger(__name__)

QueryStatus = Literal["idle", "loading", "success", "error"]


@dataclass(frozen=True)
class QueryState:
    key: str
    status: QueryStatus = "idle"
    data: Any = None
    error: Optional[Exception] = None
    updated_at: Optional[float] = None
    fetch_count: int = 0

    @property
    def is_loading(self) -> bool:
        return self.status == "loading"

    @property
    def is_error(self) -> bool:
        return self.status == "error"


class _Slot:
    __slots__ = ("state", "fetcher", "invalidated", "lock")

    def __init__(self, key: str):
        self.state = QueryState(key=key)
        self.fetcher: Optional[Callable[[], Any]] = None
        self.invalidated = False
        self.lock = threading.Lock()


class QueryCache:
    """
    Key-based cache of server reads.

    Every slot is written only by its own fetches; readers get the current
    QueryState, which is frozen and replaced wholesale on each transition.
    """

    def __init__(self, stale_seconds: float = 15 * 60, *, clock: Callable[[], float] = time.monotonic):
        self.stale_seconds = stale_seconds
        self._clock = clock
        self._slots: dict[str, _Slot] = {}
        self._lock = threading.Lock()

    def _slot(self, key: str) -> _Slot:
        with self._lock:
            slot = self._slots.get(key)
            if slot is None:
                slot = _Slot(key)
                self._slots[key] = slot
            return slot

    def _is_fresh(self, slot: _Slot) -> bool:
        state = slot.state
        if slot.invalidated or state.status != "success" or state.updated_at is None:
            return False
        return (self._clock() - state.updated_at) < self.stale_seconds

    def _run(self, slot: _Slot) -> QueryState:
        # caller holds slot.lock
        previous = slot.state
        slot.state = replace(previous, status="loading", error=None)

        try:
            data = slot.fetcher()
        except Exception as e:
            logger.warning("query failed", extra={"key": previous.key, "error": str(e)})
            slot.state = replace(
                previous,
                status="error",
                error=e,
                fetch_count=previous.fetch_count + 1,
            )
            slot.invalidated = False
            return slot.state

        slot.state = QueryState(
            key=previous.key,
            status="success",
            data=data,
            error=None,
            updated_at=self._clock(),
            fetch_count=previous.fetch_count + 1,
        )
        slot.invalidated = False
        return slot.state

    def peek(self, key: str) -> QueryState:
        with self._lock:
            slot = self._slots.get(key)
        return slot.state if slot is not None else QueryState(key=key)

    def query(
        self,
        key: str,
        fetcher: Callable[[], Any],
        *,
        enabled: bool = True,
        default: Any = None,
    ) -> QueryState:
        if not enabled:
            return QueryState(key=key, status="idle", data=default)

        slot = self._slot(key)
        if not slot.lock.acquire(blocking=False):
            # a fetch for this slot is in flight: report it, keep prior data
            if self._is_fresh(slot):
                return slot.state
            return replace(slot.state, status="loading", error=None)

        try:
            slot.fetcher = fetcher
            if self._is_fresh(slot):
                return slot.state
            return self._run(slot)
        finally:
            slot.lock.release()

    def refetch(self, key: str) -> QueryState:
        slot = self._slot(key)
        with slot.lock:
            if slot.fetcher is None:
                return slot.state
            return self._run(slot)

    def invalidate(self, key: str) -> QueryState:
        """Mark the slot stale and refetch it when a fetcher is registered."""
        slot = self._slot(key)
        with slot.lock:
            slot.invalidated = True
            logger.debug("query invalidated", extra={"key": key})
            if slot.fetcher is None:
                return slot.state
            return self._run(slot)

    def remove(self, key: str):
        with self._lock:
            self._slots.pop(key, None)

    def clear(self):
        with self._lock:
            self._slots.clear()

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._slots)

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from catalog_dedupe.models import DuplicateGroup


class ScanCache:
    """TTL cache of duplicate-scan results keyed by threshold.

    A ``ttl_seconds`` of 0 disables caching. Owners call ``invalidate()``
    whenever the catalog changes underneath a cached scan.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[float, tuple[float, list[DuplicateGroup]]] = {}

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    def get(self, threshold: float) -> list[DuplicateGroup] | None:
        if not self.enabled:
            return None
        with self._lock:
            entry = self._entries.get(threshold)
            if entry is None:
                return None
            stored_at, groups = entry
            if self._clock() - stored_at >= self._ttl:
                del self._entries[threshold]
                return None
            return list(groups)

    def put(self, threshold: float, groups: list[DuplicateGroup]) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._entries[threshold] = (self._clock(), list(groups))

    def invalidate(self) -> None:
        with self._lock:
            self._entries.clear()

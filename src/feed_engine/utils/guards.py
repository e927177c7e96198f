from __future__ import annotations

import threading

from feed_engine.exceptions.core import ConcurrentAccessError


class SingleWriterGuard:
    """
    Non-blocking ownership marker for components that assume serialized access.

    Semantics:
      - Entering while another call holds the guard raises ConcurrentAccessError.
      - Re-entrant entry from the same thread also raises.
      - Never blocks; it detects overlap, it does not serialize it.
    """

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def __enter__(self) -> "SingleWriterGuard":
        if not self._lock.acquire(blocking=False):
            raise ConcurrentAccessError(
                f"{self.name} entered concurrently; notifications must be delivered one at a time"
            )
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._lock.release()

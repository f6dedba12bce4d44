"""Correlation ids for node requests."""

from __future__ import annotations

import threading

_UINT64_MASK = 0xFFFFFFFFFFFFFFFF


class QidCounter:
    """
    Monotonically increasing request id shared by every call a manager issues.

    `next()` is safe to call from many threads; ids are unique within the
    counter's lifetime (wrapping only at 2**64).
    """

    __slots__ = ("_value", "_lock")

    def __init__(self, start: int = 0) -> None:
        self._value = int(start) & _UINT64_MASK
        self._lock = threading.Lock()

    def next(self) -> str:
        with self._lock:
            self._value = (self._value + 1) & _UINT64_MASK
            return str(self._value)

    @property
    def current(self) -> int:
        """Last id handed out (0 before the first call)."""
        return self._value


__all__ = ["QidCounter"]

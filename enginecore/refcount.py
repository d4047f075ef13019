"""Thread-safe reference counting for assets that destroy themselves when unreferenced."""

from __future__ import annotations

import threading

__all__ = ["ReferenceCountError", "ReferenceCountedAsset", "MAX_REFERENCE_COUNT"]

MAX_REFERENCE_COUNT = 2**32 - 1


class ReferenceCountError(RuntimeError):
    """Raised when a reference count is used after it reached zero or would overflow."""


class ReferenceCountedAsset:
    """Base for assets that start with one reference and are destroyed when the last goes."""

    def __init__(self) -> None:
        self._reference_count = 1
        self._reference_lock = threading.Lock()

    @property
    def reference_count(self) -> int:
        return self._reference_count

    def increment_reference_count(self) -> int:
        """Add a reference and return the new count."""
        with self._reference_lock:
            if self._reference_count <= 0:
                raise ReferenceCountError("cannot reference an asset that has been destroyed")
            if self._reference_count >= MAX_REFERENCE_COUNT:
                raise ReferenceCountError("the reference count is too big")
            self._reference_count += 1
            return self._reference_count

    def decrement_reference_count(self) -> int:
        """Drop a reference, destroying the asset when none remain; return the new count."""
        with self._reference_lock:
            if self._reference_count <= 0:
                raise ReferenceCountError("cannot release an asset that has been destroyed")
            self._reference_count -= 1
            new_count = self._reference_count
        if new_count == 0:
            self.destroy()
        return new_count

    def destroy(self) -> None:
        """Release whatever the asset holds; called once when the count reaches zero."""
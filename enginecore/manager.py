"""An asset manager that loads each path once and hands out handles to the result."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from .handle import Handle

__all__ = ["AssetError", "InvalidHandleError", "AssetManager", "MAX_MANAGER_REFERENCE_COUNT"]

_log = logging.getLogger(__name__)

MAX_MANAGER_REFERENCE_COUNT = 2**16 - 1

TAsset = TypeVar("TAsset")


class AssetError(RuntimeError):
    """Raised when the manager cannot load or clean up assets."""


class InvalidHandleError(AssetError):
    """Raised when a handle does not name an asset the manager holds."""


@dataclass
class _AssetRecord(Generic[TAsset]):
    asset: Optional[TAsset]
    id: int
    reference_count: int


class AssetManager(Generic[TAsset]):
    """Loads assets through ``loader`` and tracks them by path and by handle.

    Every handle returned by :meth:`load` must be passed to :meth:`release`
    when the caller has finished with it. Loaded assets must provide
    ``decrement_reference_count()``; the manager drops its own reference when
    the last handle to an asset is released.
    """

    MAX_RECORDS = Handle.INVALID_INDEX

    def __init__(self, loader: Callable[..., TAsset]) -> None:
        self._loader = loader
        self._records: List[_AssetRecord[TAsset]] = []
        self._unused_indices: List[int] = []
        self._paths_to_handles: Dict[str, Handle] = {}
        self._lock = threading.Lock()

    def __enter__(self) -> "AssetManager[TAsset]":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.clean_up()

    def _record_for(self, handle: Handle) -> _AssetRecord[TAsset]:
        index = handle.index
        if index >= len(self._records):
            raise InvalidHandleError(
                f"a handle has an index ({index}) that's too big"
                f" for the number of assets ({len(self._records)})"
            )
        record = self._records[index]
        if handle.id != record.id:
            raise InvalidHandleError(
                f"a handle (at index {index}) has an ID ({handle.id})"
                f" that doesn't match the asset record ({record.id})"
            )
        return record

    def get(self, handle: Handle) -> TAsset:
        """Return the asset that ``handle`` names."""
        if not handle:
            raise InvalidHandleError("this handle has never been associated with a valid asset")
        with self._lock:
            record = self._record_for(handle)
            if record.asset is None:
                raise InvalidHandleError(f"the asset at index {handle.index} has been released")
            return record.asset

    def load(self, path: str, *args: Any, **kwargs: Any) -> Handle:
        """Return a handle to the asset at ``path``, loading it only if it isn't already."""
        with self._lock:
            existing = self._paths_to_handles.get(path)
            if existing is not None:
                try:
                    record = self._record_for(existing)
                except InvalidHandleError:
                    record = None
                if record is not None and record.asset is not None:
                    if record.reference_count < MAX_MANAGER_REFERENCE_COUNT:
                        record.reference_count += 1
                        return existing
                    _log.error(
                        'A new instance of "%s" couldn\'t be loaded'
                        " because the manager's reference count was too big",
                        path,
                    )
                    raise AssetError(
                        f'the asset "{path}" has been loaded too many times'
                        " (the manager's reference count is too big)"
                    )
                # The entry outlived its asset
                del self._paths_to_handles[path]

        new_asset = self._loader(path, *args, **kwargs)

        with self._lock:
            if self._unused_indices:
                index = self._unused_indices.pop()
                record = self._records[index]
                record.asset = new_asset
                record.reference_count = 1
                handle = Handle.from_parts(index, record.id)
            elif len(self._records) < self.MAX_RECORDS:
                index = len(self._records)
                self._records.append(_AssetRecord(new_asset, 0, 1))
                handle = Handle.from_parts(index, 0)
            else:
                handle = None
                record_count = len(self._records)
            if handle is not None:
                self._paths_to_handles.setdefault(path, handle)
                return handle

        _log.error("A new asset couldn't be loaded because there were too many (%u)", record_count)
        new_asset.decrement_reference_count()
        raise AssetError("too many of this kind of asset have been created")

    def release(self, handle: Handle) -> Handle:
        """Give back ``handle``; return the invalid handle the caller should keep instead."""
        if not handle:
            raise InvalidHandleError("this handle has never been associated with a valid asset")
        to_free: Optional[TAsset] = None
        with self._lock:
            record = self._record_for(handle)
            if record.reference_count <= 0 or record.asset is None:
                raise InvalidHandleError(f"the asset at index {handle.index} has already been released")
            record.reference_count -= 1
            if record.reference_count == 0:
                to_free = record.asset
                record.asset = None
                record.id = Handle.next_id(record.id)
                self._unused_indices.append(handle.index)
        if to_free is not None:
            to_free.decrement_reference_count()
        return Handle.invalid()

    def clean_up(self) -> None:
        """Forget every record; raises AssetError if some assets were never released."""
        with self._lock:
            leaked = sum(1 for record in self._records if record.asset is not None)
            for record in self._records:
                if record.asset is not None:
                    record.asset = None
                    record.id = Handle.next_id(record.id)
                    record.reference_count = 0
            self._records.clear()
            self._unused_indices.clear()
            self._paths_to_handles.clear()
        if leaked:
            _log.error("A manager still had asset records while it was being cleaned up")
            raise AssetError(f"{leaked} asset(s) had not been released when the manager was cleaned up")
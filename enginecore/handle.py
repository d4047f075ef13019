"""Opaque handles that name assets held by an asset manager."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

__all__ = ["Handle"]

_INDEX_MASK = 0xFFFFF
_ID_SHIFT = 20
_ID_MAX = (1 << (32 - _ID_SHIFT)) - 1


@dataclass(frozen=True)
class Handle:
    """A 32-bit value: the low 20 bits index an asset record, the high bits check its id."""

    INDEX_MASK: ClassVar[int] = _INDEX_MASK
    ID_SHIFT: ClassVar[int] = _ID_SHIFT
    ID_MAX: ClassVar[int] = _ID_MAX
    INVALID_INDEX: ClassVar[int] = _INDEX_MASK

    value: int = _INDEX_MASK

    @classmethod
    def from_parts(cls, index: int, id_: int) -> "Handle":
        """Build a handle from a record index and its error-checking id."""
        if not 0 <= index <= _INDEX_MASK:
            raise ValueError(f"handle index {index} does not fit in {_ID_SHIFT} bits")
        if not 0 <= id_ <= _ID_MAX:
            raise ValueError(f"handle id {id_} does not fit in {32 - _ID_SHIFT} bits")
        return cls(index | (id_ << _ID_SHIFT))

    @classmethod
    def invalid(cls) -> "Handle":
        """A handle that names no asset."""
        return cls()

    @staticmethod
    def next_id(id_: int) -> int:
        """The id that follows ``id_``, wrapping once the id bits run out."""
        return (id_ + 1) & _ID_MAX

    @property
    def index(self) -> int:
        return self.value & _INDEX_MASK

    @property
    def id(self) -> int:
        return self.value >> _ID_SHIFT

    def is_valid(self) -> bool:
        return self.index != self.INVALID_INDEX

    def __bool__(self) -> bool:
        return self.is_valid()
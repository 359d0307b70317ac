"""
Fixed-capacity response history.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from couch_shell.core.exceptions import UninitializedAccessError

T = TypeVar("T")

DEFAULT_CAPACITY = 10


class RingBuffer(Generic[T]):
    """Ring buffer addressed by physical slot number.

    ``buf[i]`` is whatever currently sits in slot ``i``. After more than
    ``size`` pushes that is the latest push that landed on slot ``i``, not
    the i-th push overall; the ``rN``/``jN`` variables rely on this since
    the shell prints the slot number with every response.

    Not threadsafe.
    """

    def __init__(self, size: int = DEFAULT_CAPACITY):
        if size < 1:
            raise ValueError(f"ring buffer size must be positive, got {size}")
        self._slots: list[Optional[T]] = [None] * size
        self._index: Optional[int] = None
        self._written = 0

    @property
    def size(self) -> int:
        return len(self._slots)

    @property
    def initialized_size(self) -> int:
        """Number of distinct slots ever written, capped at size."""
        return self._written

    @property
    def index(self) -> Optional[int]:
        """Slot of the last written element, or None if empty."""
        return self._index

    @property
    def empty(self) -> bool:
        return self._written == 0

    def push(self, elem: T) -> int:
        """Write ``elem`` into the next slot and return that slot number."""
        if self._index is None or self._index == self.size - 1:
            self._index = 0
        else:
            self._index += 1
        self._slots[self._index] = elem
        if self._written < self._index + 1:
            self._written = self._index + 1
        return self._index

    append = push

    def current(self) -> T:
        """Last written element; raises if nothing was pushed yet."""
        if self._index is None:
            raise UninitializedAccessError(0)
        return self._slots[self._index]  # type: ignore[return-value]

    def current_or_none(self) -> Optional[T]:
        if self._index is None:
            return None
        return self._slots[self._index]

    def is_readable(self, i: int) -> bool:
        return 0 <= i < self._written

    def at(self, i: Any) -> T:
        """Element in slot ``i``."""
        i = int(i)
        if not self.is_readable(i):
            raise UninitializedAccessError(i)
        return self._slots[i]  # type: ignore[return-value]

    __getitem__ = at

    def __len__(self) -> int:
        return self._written

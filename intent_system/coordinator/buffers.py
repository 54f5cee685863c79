"""
Bounded ring buffers for sensor feeds.

Callbacks append, the fusion tick reads. Overflow silently evicts the
oldest entry; writers never block.
"""

from collections import deque
from typing import Deque, Generic, List, Optional, TypeVar

T = TypeVar('T')


class RingBuffer(Generic[T]):
    """Single-producer / single-consumer buffer with a fixed capacity."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"RingBuffer capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._items: Deque[T] = deque(maxlen=capacity)

    def append(self, item: T):
        self._items.append(item)

    def latest(self) -> Optional[T]:
        """Most recent entry, or None when empty."""
        try:
            return self._items[-1]
        except IndexError:
            return None

    def snapshot(self) -> List[T]:
        """Copy of the contents ordered oldest -> newest."""
        return list(self._items)

    def drain(self) -> List[T]:
        """Return the contents and empty the buffer."""
        items = []
        while self._items:
            items.append(self._items.popleft())
        return items

    def clear(self):
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self):
        return f"<RingBuffer(size={len(self._items)}/{self.capacity})>"

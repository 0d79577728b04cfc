from collections import deque
from typing import Deque, Generic, List, TypeVar

T = TypeVar('T')


class RingBuffer(Generic[T]):
    """
    Bounded FIFO buffer for log records.

    Single producer (logging calls) and single consumer (dispatch task), both
    on the event loop thread, so no locking.
    """

    def __init__(self, maxsize: int = 10000):
        self.maxsize = maxsize
        self._buffer: Deque[T] = deque()
        self._dropped_count = 0

    def put_nowait(self, item: T) -> bool:
        """
        Add item to buffer without blocking.

        Returns True if added, False if buffer full (item dropped).
        """
        if len(self._buffer) >= self.maxsize:
            self._dropped_count += 1
            return False
        self._buffer.append(item)
        return True

    def get_batch(self, batch_size: int = 100) -> List[T]:
        """Pop up to batch_size items in arrival order."""
        batch = []
        for _ in range(min(batch_size, len(self._buffer))):
            batch.append(self._buffer.popleft())
        return batch

    def size(self) -> int:
        return len(self._buffer)

    def dropped_count(self) -> int:
        """Number of dropped items (buffer full)."""
        return self._dropped_count

# app/core/order_locks.py
import threading
from contextlib import contextmanager
from typing import Iterator


class OrderLockRegistry:
    """
    One lock per external order id.

    TPOS order updates are read-modify-write over the whole order object,
    so two writers on the same order must not interleave. Writers on
    different orders do not block each other.

    An entry lives only while some thread holds or waits for its lock.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # order id -> [lock, holders + waiters]
        self._locks: dict[str, list] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _acquire_entry(self, order_id: str) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(order_id)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[order_id] = entry
            entry[1] += 1
            return entry[0]

    def _release_entry(self, order_id: str) -> None:
        with self._guard:
            entry = self._locks[order_id]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[order_id]

    @contextmanager
    def hold(self, order_id: str) -> Iterator[None]:
        lock = self._acquire_entry(order_id)
        try:
            with lock:
                yield
        finally:
            self._release_entry(order_id)


# Process-wide registry shared by every request thread
order_locks = OrderLockRegistry()

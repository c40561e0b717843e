"""
Buffer coalescing counter increments between flushes.
"""
import threading
from typing import List

from .metric import BufferedCounter


class CounterBuffer:
    """
    Coalesces repeated increments of the same counter.

    Holds at most one entry per counter name. Entries are created on the
    first increment and removed together when the buffer is drained.
    """

    def __init__(self):
        self._entries: List[BufferedCounter] = []
        self._lock = threading.Lock()

    def add(self, name: str, count: int, sample_rate: float) -> None:
        """
        Record an increment.

        A new entry is seeded with ``count``. A repeat hit on an existing
        entry adds exactly one, whatever ``count`` is; only the first call
        per flush window contributes its full amount.

        Args:
            name (str): Counter name
            count (int): Amount for a new entry
            sample_rate (float): Sample rate stored with a new entry
        """
        with self._lock:
            for entry in self._entries:
                if entry.name == name:
                    entry.count += 1
                    return
            self._entries.append(BufferedCounter(name, count, sample_rate))

    def drain(self) -> List[BufferedCounter]:
        """
        Remove and return every buffered entry.

        Returns:
            list: The entries accumulated since the previous drain
        """
        with self._lock:
            entries, self._entries = self._entries, []
        return entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

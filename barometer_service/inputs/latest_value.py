"""
latest_value.py

Provides LatestValueStore, the single slot shared between the sensor feed
(writer) and the ticker (reader).
"""

import threading
import time
from typing import Optional


class LatestValueStore:
    """
    Hold the most recently observed sensor reading.

    Last write wins. The lock is held only while the slot is read or written,
    so neither side ever waits on a send or a sensor read.
    """

    def __init__(self, initial: float = 0.0) -> None:
        self._lock = threading.Lock()
        self._value: float = float(initial)
        self._updated_at: Optional[float] = None

    def set(self, value: float) -> None:
        """Overwrite the stored reading."""
        with self._lock:
            self._value = float(value)
            self._updated_at = time.monotonic()

    def get(self) -> float:
        """Return the last reading, or the initial value if none was set."""
        with self._lock:
            return self._value

    @property
    def updated_at(self) -> Optional[float]:
        """Monotonic time of the last set(), or None if never set."""
        with self._lock:
            return self._updated_at

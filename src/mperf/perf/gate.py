"""Admission control for concurrent uploads."""

import threading

from mperf.exceptions import GateInvariantError


class AdmissionGate:
    """Non-blocking counter bounding the number of outstanding uploads.

    Neither operation waits: a full gate refuses admission immediately.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._outstanding = 0
        self._lock = threading.Lock()

    @property
    def outstanding(self) -> int:
        return self._outstanding

    def try_acquire(self) -> bool:
        """Take a slot if one is free.

        Returns:
            True if a slot was taken, False if the gate is full
        """
        with self._lock:
            if self._outstanding >= self.capacity:
                return False
            self._outstanding += 1
            return True

    def release(self) -> None:
        """Give back a slot taken by try_acquire.

        Raises:
            GateInvariantError: If no slot is currently held
        """
        with self._lock:
            if self._outstanding <= 0:
                raise GateInvariantError("release() called with no outstanding uploads")
            self._outstanding -= 1

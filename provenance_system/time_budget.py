"""Time budget management for deadline propagation."""
import time
from typing import Optional


class Budget:
    """Wall-clock time budget tracker."""

    def __init__(self, seconds: float):
        """Initialize budget with total seconds.

        Args:
            seconds: Total wall-clock seconds for operation
        """
        self.t0 = time.monotonic()
        self.deadline = self.t0 + seconds
        self.total_seconds = seconds

    def remaining(self) -> float:
        """Get remaining time in seconds (0 once expired)."""
        return max(0.0, self.deadline - time.monotonic())

    def elapsed(self) -> float:
        """Get elapsed time in seconds."""
        return time.monotonic() - self.t0

    def is_expired(self) -> bool:
        return time.monotonic() >= self.deadline

    def get_timeout(self, max_timeout: Optional[float] = None) -> float:
        """Get timeout value respecting both budget and max.

        Args:
            max_timeout: Maximum timeout in seconds

        Returns:
            Minimum of remaining budget and max_timeout
        """
        remaining = self.remaining()
        if max_timeout:
            return min(remaining, max_timeout)
        return remaining

"""Token bucket approximating the remote host's hourly rate-limit window."""

from __future__ import annotations

import threading
import time
from typing import Callable


class TokenBucket:
    """Fixed-capacity bucket refilled to full once per window.

    There is no partial refill: when the refill deadline passes, the bucket
    is reset to capacity and a new deadline is scheduled.
    """

    def __init__(
        self,
        capacity: int,
        window: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize a full bucket.

        Args:
            capacity: Maximum (and initial) number of tokens.
            window: Seconds between full refills.
            clock: Monotonic time source (injectable for tests).
        """
        if capacity < 0:
            raise ValueError("capacity must be non-negative")
        self._capacity = capacity
        self._window = window
        self._clock = clock
        self._tokens = capacity
        self._refill_at = clock() + window
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def remaining(self) -> int:
        """Tokens left in the current window."""
        with self._lock:
            return self._tokens

    def acquire(self) -> bool:
        """Take one token.

        Returns:
            True if a token was available, False if the bucket is empty.
        """
        with self._lock:
            now = self._clock()
            if now > self._refill_at:
                self._tokens = self._capacity
                self._refill_at = now + self._window

            if self._tokens > 0:
                self._tokens -= 1
                return True
            return False

"""
Session Clock
Provides synchronized millisecond timestamps for every component of a session
"""

import threading
import logging
import time
from typing import Optional

logger = logging.getLogger(__name__)


class SessionClock:
    """
    Thread-safe session clock for stamping sensor samples and ticks

    Ensures all feeds and the fusion loop share one time reference with:
    - Thread-safe access (gaze, face and pointer callbacks may call simultaneously)
    - Monotonic timestamps (always increasing, no duplicates)
    - Millisecond units with sub-millisecond precision
    """

    # Smallest step used to keep timestamps strictly increasing
    MIN_STEP_MS = 0.001

    def __init__(self):
        """Initialize session clock"""
        self._lock = threading.Lock()
        self._last_ms: Optional[float] = None
        self._call_count = 0

        logger.info("Session clock initialized")

    def now_ms(self) -> float:
        """
        Get current synchronized timestamp

        Returns:
            float: Milliseconds on the monotonic host clock
        """
        with self._lock:
            current = time.monotonic() * 1000.0

            if self._last_ms is not None and current <= self._last_ms:
                current = self._last_ms + self.MIN_STEP_MS
                logger.debug("Adjusted timestamp to maintain monotonic sequence")

            self._last_ms = current
            self._call_count += 1

            return current

    def __call__(self) -> float:
        return self.now_ms()

    def reset(self):
        """Reset clock state (useful for testing)"""
        with self._lock:
            self._last_ms = None
            self._call_count = 0
            logger.info("Session clock reset")

    def get_stats(self) -> dict:
        """
        Get clock statistics

        Returns:
            dict: Clock usage statistics
        """
        with self._lock:
            return {
                'total_calls': self._call_count,
                'last_timestamp_ms': self._last_ms,
            }

    def __repr__(self):
        return f"<SessionClock(calls={self._call_count})>"

"""
Pointer Tracker
Reduces raw pointer move events to position + activity
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from intent_system.types import PointerState

logger = logging.getLogger(__name__)


@dataclass
class PointerConfig:
    # Pointer counts as active for this long after the last move
    activity_timeout_ms: float = 2000.0

    def __post_init__(self):
        if self.activity_timeout_ms <= 0:
            raise ValueError(f"activity_timeout_ms must be positive, got {self.activity_timeout_ms}")


class PointerTracker:
    """Latest pointer position and whether it moved recently."""

    def __init__(self, clock: Callable[[], float], config: Optional[PointerConfig] = None):
        self.clock = clock
        self.config = config or PointerConfig()
        self._x = 0.0
        self._y = 0.0
        self._last_move_ms: Optional[float] = None
        self.move_count = 0

    def on_move(self, x: float, y: float):
        """Pointer move callback."""
        self._x = float(x)
        self._y = float(y)
        self._last_move_ms = self.clock()
        self.move_count += 1

    def state(self, now_ms: Optional[float] = None) -> PointerState:
        now = self.clock() if now_ms is None else now_ms
        active = (
            self._last_move_ms is not None and
            now - self._last_move_ms < self.config.activity_timeout_ms
        )
        return PointerState(self._x, self._y, is_active=active)

    def reset(self):
        self._last_move_ms = None
        self.move_count = 0

    def __repr__(self):
        return f"<PointerTracker(moves={self.move_count})>"

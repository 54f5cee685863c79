"""
Gaze Sensor Configuration
Feature extraction, zone layout and dwell thresholds
"""

import math
from dataclasses import dataclass, field
from typing import Dict

from intent_system.types import Zone


def _default_dwell_thresholds() -> Dict[Zone, float]:
    return {
        Zone.READ: 300.0,
        Zone.AGREE: 800.0,
        Zone.DISAGREE: 800.0,
        Zone.DEEPER: 1000.0,
        Zone.FLIP: 1000.0,
        Zone.WANDER: math.inf,   # never auto-activates
    }


@dataclass
class ZoneConfig:
    """
    Screen layout:

        +-----------------------------------+
        |           FLIP (top 15%)          |
        | DISAGREE |      READ      | AGREE |
        | (left    |   (center      |(right |
        |  25%)    |    50%)        | 25%)  |
        |         DEEPER (bottom 15%)       |
        +-----------------------------------+
    """

    # Band fractions of screen height / width
    top_fraction: float = 0.15
    bottom_fraction: float = 0.85
    left_fraction: float = 0.25
    right_fraction: float = 0.75

    # Milliseconds of dwell needed to activate each zone
    dwell_thresholds_ms: Dict[Zone, float] = field(default_factory=_default_dwell_thresholds)

    # A new zone must persist this long before the switch is committed
    hysteresis_ms: float = 80.0

    def __post_init__(self):
        if not 0.0 < self.top_fraction < self.bottom_fraction < 1.0:
            raise ValueError(
                f"Zone bands must satisfy 0 < top < bottom < 1 "
                f"(got top={self.top_fraction}, bottom={self.bottom_fraction})"
            )
        if not 0.0 < self.left_fraction < self.right_fraction < 1.0:
            raise ValueError(
                f"Zone bands must satisfy 0 < left < right < 1 "
                f"(got left={self.left_fraction}, right={self.right_fraction})"
            )
        missing = set(Zone) - set(self.dwell_thresholds_ms)
        if missing:
            raise ValueError(f"Dwell thresholds missing for zones: {sorted(z.value for z in missing)}")
        for zone, threshold in self.dwell_thresholds_ms.items():
            if not threshold > 0:
                raise ValueError(f"Dwell threshold for {zone.value} must be positive, got {threshold}")
        if self.dwell_thresholds_ms[Zone.WANDER] != math.inf:
            raise ValueError("The wander zone must never auto-activate (threshold must be infinite)")
        if self.hysteresis_ms < 0:
            raise ValueError(f"hysteresis_ms must be >= 0, got {self.hysteresis_ms}")

    @classmethod
    def default(cls) -> 'ZoneConfig':
        return cls()


@dataclass
class GazeConfig:
    """Gaze feed configuration"""

    # Rolling point buffer
    buffer_size: int = 60

    # Features are only computed once the buffer holds more than this many points
    min_points_for_features: int = 5

    # Fixation
    fixation_threshold_px: float = 50.0
    fixation_min_duration_ms: float = 200.0

    # Provider trust
    default_confidence: float = 0.7

    # Screen size used when the caller does not pass one
    screen_width: int = 1920
    screen_height: int = 1080

    zones: ZoneConfig = field(default_factory=ZoneConfig)

    def __post_init__(self):
        if self.buffer_size < 2:
            raise ValueError(f"buffer_size must be >= 2, got {self.buffer_size}")
        if self.screen_width <= 0 or self.screen_height <= 0:
            raise ValueError("Screen dimensions must be positive")

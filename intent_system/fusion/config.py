"""
Fusion Configuration
Rule thresholds for the intent cascade and smoothing loop parameters
"""

import math
from dataclasses import dataclass


@dataclass
class FusionConfig:
    """
    Thresholds of the fusion cascade.

    These values were tuned empirically; keep them as behavioral contracts.
    """

    # Gaze usability
    usable_gaze_confidence: float = 0.3

    # Rule 1: fatigue
    fatigue_blink_rate: float = 25.0      # blinks / minute
    fatigue_blink_full: float = 40.0      # blink rate mapped to confidence 1

    # Rule 2: confusion (furrow + darting eyes)
    confused_furrow: float = 0.4
    darting_saccade_rate: float = 3.0     # saccades / second
    confused_saccade_scale: float = 5.0

    # Rule 3: conflicted head shake
    confused_shake: float = -0.3

    # Rule 4: nod agreement
    agree_nod: float = 0.3

    # Rule 5: pulling away
    pulling_away_lean: float = -0.3

    # Rule 6: furrowed but steady
    engaged_furrow: float = 0.3
    engaged_furrow_boost: float = 0.3

    # Rule 7: lean in + long fixation
    engaged_lean: float = 0.2
    engaged_lean_boost: float = 0.4

    # Rule 8: gaze zones
    long_fixation_ms: float = 800.0
    pointer_agreement_boost: float = 0.2
    default_gaze_confidence: float = 0.5

    # Rule 9 / 10
    navigate_confidence: float = 0.6
    idle_confidence: float = 0.3


@dataclass
class SmoothingConfig:
    """Fixed-rate smoothing loop configuration"""

    rate_hz: float = 30.0
    history_size: int = 5

    def __post_init__(self):
        if self.rate_hz <= 0:
            raise ValueError(f"rate_hz must be positive, got {self.rate_hz}")
        if self.history_size < 1:
            raise ValueError(f"history_size must be >= 1, got {self.history_size}")

    @property
    def interval_seconds(self) -> float:
        return 1.0 / self.rate_hz

    @property
    def majority_threshold(self) -> int:
        """Occurrences in the history needed to raise a boolean flag."""
        return math.ceil(self.history_size / 2)

    @classmethod
    def for_display(cls, refresh_hz: float) -> 'SmoothingConfig':
        """Tick once per display refresh."""
        return cls(rate_hz=refresh_hz)

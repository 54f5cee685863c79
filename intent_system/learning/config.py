"""
Learning Configuration
Per-user online learners: behavior model and passive calibration
"""

from dataclasses import dataclass


@dataclass
class BehaviorModelConfig:
    """Adaptive behavior model configuration"""

    # Face axes above this magnitude become discrete signals
    signal_threshold: float = 0.25

    # Gaze zone signals need calibrated gaze above this confidence
    usable_gaze_confidence: float = 0.3

    # Phase boundaries (observation counts)
    model_after: int = 10
    predict_after: int = 20
    refine_after_predictions: int = 5

    # Prediction
    min_prediction_score: float = 0.3
    default_accuracy: float = 0.5   # used before any prediction is scored

    # Snapshot
    pattern_min_correlation: float = 0.1

    def __post_init__(self):
        if not 0 < self.model_after < self.predict_after:
            raise ValueError(
                f"Phase boundaries must satisfy 0 < model_after < predict_after, "
                f"got {self.model_after} / {self.predict_after}"
            )
        if self.refine_after_predictions < 1:
            raise ValueError("refine_after_predictions must be >= 1")
        if not 0 < self.signal_threshold < 1:
            raise ValueError(f"signal_threshold must be in (0, 1), got {self.signal_threshold}")


@dataclass
class CalibrationConfig:
    """Passive calibration learner configuration"""

    min_samples: int = 5
    max_samples: int = 50             # rolling window
    half_life_ms: float = 60_000.0    # recent clicks weigh more
    full_confidence_samples: int = 20

    # Fitted slope limits
    min_scale: float = 0.3
    max_scale: float = 3.0

    # Weighted variance of head values below which the slope falls back to 1
    degenerate_variance: float = 0.001

    def __post_init__(self):
        if self.min_samples < 2:
            raise ValueError(f"min_samples must be >= 2, got {self.min_samples}")
        if self.max_samples < self.min_samples:
            raise ValueError(
                f"max_samples ({self.max_samples}) must be >= min_samples ({self.min_samples})"
            )
        if self.half_life_ms <= 0:
            raise ValueError(f"half_life_ms must be positive, got {self.half_life_ms}")
        if not 0 < self.min_scale <= 1 <= self.max_scale:
            raise ValueError(
                f"Scale limits must bracket 1, got [{self.min_scale}, {self.max_scale}]"
            )


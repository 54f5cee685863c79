"""
Passive Calibration Learner
Learns a per-axis linear correction of head pose from natural clicks

Every confirmed click pairs the head pose at click time with the direction
the user actually meant (the clicked target relative to the current view).
From 5 samples on, intended = scale * head + offset is refit per axis with
exponentially time-decayed weighted least squares.
"""

import logging
import math
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional, Tuple

import numpy as np
from sklearn.linear_model import LinearRegression

from intent_system.coordinator import SessionClock
from intent_system.types import clamp
from .config import CalibrationConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalibrationSample:
    head_yaw: float
    head_pitch: float
    intended_yaw: float
    intended_pitch: float
    timestamp_ms: float


@dataclass(frozen=True)
class Correction:
    """Linear head pose correction; identity with confidence 0 until fit."""
    yaw_scale: float = 1.0
    yaw_offset: float = 0.0
    pitch_scale: float = 1.0
    pitch_offset: float = 0.0
    confidence: float = 0.0


def wrap_angle(angle: float) -> float:
    """Wrap an angle in radians into [-pi, pi]. Non-finite input is returned unchanged."""
    if not math.isfinite(angle):
        return angle
    return math.remainder(angle, 2 * math.pi)


class PassiveCalibrationLearner:
    """
    Rolling-window calibration of head-pose steering.

    Below `min_samples` no model is fit and `correct()` passes its input
    through unchanged.
    """

    def __init__(
            self,
            clock: Optional[Callable[[], float]] = None,
            config: Optional[CalibrationConfig] = None,
    ):
        self.clock = clock or SessionClock()
        self.config = config or CalibrationConfig()

        self.samples: Deque[CalibrationSample] = deque(maxlen=self.config.max_samples)
        self.correction = Correction()
        self.fit_count = 0

        logger.info(f"PassiveCalibrationLearner initialised (window={self.config.max_samples})")

    @property
    def sample_count(self) -> int:
        return len(self.samples)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def record_click(
            self,
            head_yaw: float,
            head_pitch: float,
            target_theta: float,
            target_phi: float,
            view_theta: float,
            view_phi: float,
            max_offset: float,
    ):
        """
        Record a confirmed click.

        Args:
            head_yaw, head_pitch:  Raw head pose at click time, [-1, 1].
            target_theta/phi:      Direction of the clicked target (radians).
            view_theta/phi:        Current base direction of the view (radians).
            max_offset:            Angular offset mapped to a head pose of 1.
        """
        if max_offset <= 0:
            raise ValueError(f"max_offset must be positive, got {max_offset}")

        d_theta = wrap_angle(target_theta - view_theta)
        # Pitch axis is inverted relative to phi
        d_phi = -(target_phi - view_phi)

        self.add_sample(
            head_yaw,
            head_pitch,
            d_theta / max_offset,
            d_phi / max_offset,
        )

    def add_sample(
            self,
            head_yaw: float,
            head_pitch: float,
            intended_yaw: float,
            intended_pitch: float,
            timestamp_ms: Optional[float] = None,
    ):
        """Append one (head, intended) pair and refit once enough samples exist."""
        values = (head_yaw, head_pitch, intended_yaw, intended_pitch)
        if not all(math.isfinite(v) for v in values):
            logger.debug(f"Skipping non-finite calibration sample {values}")
            return

        ts = self.clock() if timestamp_ms is None else timestamp_ms
        self.samples.append(CalibrationSample(
            head_yaw=head_yaw,
            head_pitch=head_pitch,
            intended_yaw=clamp(intended_yaw, -1.0, 1.0),
            intended_pitch=clamp(intended_pitch, -1.0, 1.0),
            timestamp_ms=ts,
        ))

        if len(self.samples) >= self.config.min_samples:
            self._fit(now_ms=ts)

    def correct(self, raw_yaw: float, raw_pitch: float) -> Tuple[float, float]:
        """
        Apply the learned correction, blended with the raw value by confidence.

        Returns:
            (yaw, pitch) clamped to [-1, 1]; the raw input when confidence is 0.
        """
        c = self.correction
        if c.confidence == 0:
            return raw_yaw, raw_pitch

        t = c.confidence
        corrected_yaw = raw_yaw * c.yaw_scale + c.yaw_offset
        corrected_pitch = raw_pitch * c.pitch_scale + c.pitch_offset

        return (
            clamp(raw_yaw * (1 - t) + corrected_yaw * t, -1.0, 1.0),
            clamp(raw_pitch * (1 - t) + corrected_pitch * t, -1.0, 1.0),
        )

    def get_correction(self) -> Correction:
        return self.correction

    def reset(self):
        self.samples.clear()
        self.correction = Correction()
        self.fit_count = 0
        logger.info("Calibration learner reset")

    def get_status(self) -> dict:
        c = self.correction
        return {
            'samples': len(self.samples),
            'fits': self.fit_count,
            'confidence': c.confidence,
            'yaw': (c.yaw_scale, c.yaw_offset),
            'pitch': (c.pitch_scale, c.pitch_offset),
        }

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _fit(self, now_ms: float):
        data = np.array(
            [[s.head_yaw, s.head_pitch, s.intended_yaw, s.intended_pitch, s.timestamp_ms]
             for s in self.samples],
            dtype=np.float64,
        )
        ages = np.maximum(now_ms - data[:, 4], 0.0)
        weights = np.power(0.5, ages / self.config.half_life_ms)

        yaw_scale, yaw_offset = self._fit_axis(data[:, 0], data[:, 2], weights)
        pitch_scale, pitch_offset = self._fit_axis(data[:, 1], data[:, 3], weights)

        self.correction = Correction(
            yaw_scale=yaw_scale,
            yaw_offset=yaw_offset,
            pitch_scale=pitch_scale,
            pitch_offset=pitch_offset,
            confidence=min(1.0, len(self.samples) / self.config.full_confidence_samples),
        )
        self.fit_count += 1

        logger.debug(
            f"Calibration refit #{self.fit_count}: yaw {yaw_scale:.2f}x{yaw_offset:+.2f}, "
            f"pitch {pitch_scale:.2f}x{pitch_offset:+.2f}, confidence {self.correction.confidence:.2f}"
        )
        if len(self.samples) == self.config.full_confidence_samples:
            logger.info(f"✓ Calibration reached full confidence ({len(self.samples)} samples)")

    def _fit_axis(self, head: np.ndarray, intended: np.ndarray, weights: np.ndarray) -> Tuple[float, float]:
        """Weighted slope (clamped) and intercept of intended against head."""
        mean_head = float(np.average(head, weights=weights))
        mean_intended = float(np.average(intended, weights=weights))

        variance = float(np.sum(weights * (head - mean_head) ** 2))
        if variance > self.config.degenerate_variance:
            model = LinearRegression()
            model.fit(head.reshape(-1, 1), intended, sample_weight=weights)
            scale = float(model.coef_[0])
        else:
            scale = 1.0

        scale = clamp(scale, self.config.min_scale, self.config.max_scale)
        offset = mean_intended - scale * mean_head
        return scale, offset

    def __repr__(self):
        return (
            f"<PassiveCalibrationLearner(samples={len(self.samples)}, "
            f"confidence={self.correction.confidence:.2f})>"
        )

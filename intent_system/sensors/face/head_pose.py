"""
Head Pose Normalizer
Extracts yaw/pitch from the facial transformation matrix, auto-centers on
the user's resting posture and slowly re-centers as posture drifts
"""

import logging
import math
from typing import Any, List, Optional, Tuple

import numpy as np

from intent_system.types import HeadPose, clamp
from .config import HeadPoseConfig

logger = logging.getLogger(__name__)


def extract_yaw_pitch(transform: Any) -> Tuple[float, float]:
    """
    Yaw and pitch in radians from a row-major 4x4 transform.

    Args:
        transform: 16-element sequence or 4x4 array.

    Returns:
        (yaw, pitch) in radians.
    """
    m = np.asarray(transform, dtype=float).reshape(-1)
    if m.size != 16:
        raise ValueError(f"Expected a 4x4 transform, got {m.size} values")

    yaw = math.atan2(m[8], m[0])
    pitch = math.asin(clamp(-m[6], -1.0, 1.0))
    return yaw, pitch


class HeadPoseNormalizer:
    """
    Normalized head pose with automatic neutral calibration.

    The first `calibration_frames` valid frames are averaged into a neutral
    yaw/pitch; nothing but (0, 0) is emitted until that completes. After that
    the neutral offset follows the live reading with a slow exponential
    average, and the output gets a faster exponential smoothing.
    """

    def __init__(self, config: Optional[HeadPoseConfig] = None):
        """
        Args:
            config: HeadPoseConfig instance. Defaults to HeadPoseConfig().
        """
        self.config = config or HeadPoseConfig()
        self._reset_state()

        logger.info(
            f"HeadPoseNormalizer initialized (±{self.config.max_angle_degrees}°, "
            f"recalibration half-life ≈{self.config.recalibration_half_life_frames:.0f} frames)"
        )

    def _reset_state(self):
        self._smooth_yaw = 0.0
        self._smooth_pitch = 0.0
        self.neutral_yaw = 0.0
        self.neutral_pitch = 0.0
        self._calibration_samples: List[Tuple[float, float]] = []
        self.is_calibrated = False
        self._pose = HeadPose()

    def reset(self):
        self._reset_state()
        logger.info("HeadPoseNormalizer reset")

    @property
    def pose(self) -> HeadPose:
        """Last emitted pose."""
        return self._pose

    def process(self, transform: Any) -> HeadPose:
        """
        Process one frame.

        Args:
            transform: Row-major 4x4 facial transformation matrix, or None
                       when no face was detected. A malformed or non-finite
                       matrix is treated as no face.

        Returns:
            HeadPose. Without a face the last smoothed yaw/pitch is held and
            face_detected is False.
        """
        if transform is None:
            return self._no_face()

        try:
            raw_yaw, raw_pitch = extract_yaw_pitch(transform)
        except (ValueError, TypeError) as e:
            logger.debug(f"Malformed transform treated as no face: {e}")
            return self._no_face()
        if not (math.isfinite(raw_yaw) and math.isfinite(raw_pitch)):
            logger.debug("Non-finite transform treated as no face")
            return self._no_face()

        max_angle = self.config.max_angle_radians
        norm_yaw = clamp(raw_yaw / max_angle, -1.0, 1.0)
        norm_pitch = clamp(raw_pitch / max_angle, -1.0, 1.0)

        if not self.is_calibrated:
            self._calibrate(norm_yaw, norm_pitch)
            self._pose = HeadPose(0.0, 0.0, face_detected=True)
            return self._pose

        # Rolling recalibration toward the current reading
        r = self.config.recalibration_alpha
        self.neutral_yaw += (norm_yaw - self.neutral_yaw) * r
        self.neutral_pitch += (norm_pitch - self.neutral_pitch) * r

        yaw = clamp(norm_yaw - self.neutral_yaw, -1.0, 1.0)
        pitch = clamp(norm_pitch - self.neutral_pitch, -1.0, 1.0)

        a = self.config.smoothing_alpha
        self._smooth_yaw = self._smooth_yaw * (1.0 - a) + yaw * a
        self._smooth_pitch = self._smooth_pitch * (1.0 - a) + pitch * a

        self._pose = HeadPose(self._smooth_yaw, self._smooth_pitch, face_detected=True)
        return self._pose

    def _no_face(self) -> HeadPose:
        self._pose = HeadPose(self._smooth_yaw, self._smooth_pitch, face_detected=False)
        return self._pose

    def _calibrate(self, norm_yaw: float, norm_pitch: float):
        self._calibration_samples.append((norm_yaw, norm_pitch))
        if len(self._calibration_samples) < self.config.calibration_frames:
            return

        samples = np.asarray(self._calibration_samples)
        self.neutral_yaw, self.neutral_pitch = (float(v) for v in samples.mean(axis=0))
        self.is_calibrated = True
        logger.info(
            f"✓ Head pose neutral captured (yaw={self.neutral_yaw:+.3f}, pitch={self.neutral_pitch:+.3f})"
        )

    def get_status(self) -> dict:
        return {
            'sensor_type': 'head_pose',
            'is_calibrated': self.is_calibrated,
            'calibration_frames': len(self._calibration_samples),
            'neutral': (self.neutral_yaw, self.neutral_pitch),
        }

    def __repr__(self):
        status = "calibrated" if self.is_calibrated else "calibrating"
        return f"<HeadPoseNormalizer({status})>"

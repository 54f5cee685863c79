"""
Face Signal Processor
Turns raw facial landmark geometry into six smoothed behavioral axes,
using a per-session baseline captured from the first frames
"""

import logging
from typing import Any, Optional

from intent_system.types import FaceSignalVector, clamp
from .config import FaceSignalConfig
from .utils import bbox_area, distance_2d, distance_3d, ema, landmarks_to_array

logger = logging.getLogger(__name__)


class FaceSignalProcessor:
    """
    Frame-by-frame face signal extractor.

    - Head nod / shake: frame-to-frame delta of the nose tip
    - Lean in / back:   frame-to-frame ratio of the face bounding-box area
    - Brow raise / furrow: brow-to-eye distance relative to a baseline
    - Smile: lip width relative to a baseline plus lip aspect ratio

    Baselines are taken from the first `baseline_frames` valid frames and are
    kept for the rest of the session (until reset()).
    """

    def __init__(self, config: Optional[FaceSignalConfig] = None):
        """
        Initialize the face signal processor

        Args:
            config: FaceSignalConfig instance. Defaults to FaceSignalConfig().
        """
        self.config = config or FaceSignalConfig()
        self._reset_state()

        logger.info(
            f"FaceSignalProcessor initialized "
            f"(baseline={self.config.baseline_frames} frames, alpha={self.config.smoothing_alpha})"
        )

    def _reset_state(self):
        # Smoothed axes
        self._nod = 0.0
        self._shake = 0.0
        self._lean = 0.0
        self._brow_raise = 0.0
        self._brow_furrow = 0.0
        self._smile = 0.0

        # Previous frame values for deltas
        self._prev_nose_x: Optional[float] = None
        self._prev_nose_y: Optional[float] = None
        self._prev_face_area: Optional[float] = None

        # Baselines
        self.frame_count = 0
        self._brow_sum = 0.0
        self._lip_width_sum = 0.0
        self.baseline_brow_dist: Optional[float] = None
        self.baseline_lip_width: Optional[float] = None

    @property
    def has_baseline(self) -> bool:
        return self.baseline_brow_dist is not None and self.baseline_lip_width is not None

    def reset(self):
        """Clear smoothed state and baselines."""
        self._reset_state()
        logger.info("FaceSignalProcessor reset")

    def process(self, landmarks: Any) -> FaceSignalVector:
        """
        Process one landmark frame.

        Args:
            landmarks: Landmark frame (see landmarks_to_array). Fewer than
                       `expected_landmarks` points means no face.

        Returns:
            FaceSignalVector; all zeros with is_tracking=False when no face.
        """
        cfg = self.config
        lm = landmarks_to_array(landmarks)
        if lm is None or len(lm) < cfg.expected_landmarks:
            # Deltas restart when the face returns; baselines are kept
            self._prev_nose_x = self._prev_nose_y = None
            self._prev_face_area = None
            return FaceSignalVector.not_tracking()

        self.frame_count += 1
        alpha = cfg.smoothing_alpha

        nose = lm[cfg.nose_tip_idx]

        # Head nod: positive delta = moving down = nodding
        raw_nod = 0.0 if self._prev_nose_y is None else nose[1] - self._prev_nose_y
        self._prev_nose_y = float(nose[1])
        self._nod = ema(self._nod, clamp(raw_nod * cfg.nod_scale, -1.0, 1.0), alpha)

        # Head shake
        raw_shake = 0.0 if self._prev_nose_x is None else nose[0] - self._prev_nose_x
        self._prev_nose_x = float(nose[0])
        self._shake = ema(self._shake, clamp(raw_shake * cfg.shake_scale, -1.0, 1.0), alpha)

        # Lean: area ratio > 1 means getting closer
        area = bbox_area(lm)
        raw_lean = 0.0
        if self._prev_face_area is not None and self._prev_face_area > 0:
            raw_lean = (area / self._prev_face_area - 1.0) * cfg.lean_scale
        self._prev_face_area = area
        self._lean = ema(self._lean, clamp(raw_lean, -1.0, 1.0), alpha)

        # Brow raise / furrow
        brow_dist = (
            distance_2d(lm[cfg.left_brow_idx], lm[cfg.left_eye_inner_idx]) +
            distance_2d(lm[cfg.right_brow_idx], lm[cfg.right_eye_inner_idx])
        ) / 2.0

        lip_width = distance_3d(lm[cfg.lip_left_idx], lm[cfg.lip_right_idx])
        lip_height = distance_3d(lm[cfg.lip_top_idx], lm[cfg.lip_bottom_idx])

        self._accumulate_baseline(brow_dist, lip_width)

        if self.baseline_brow_dist is not None and self.baseline_brow_dist > 0:
            deviation = (brow_dist - self.baseline_brow_dist) / self.baseline_brow_dist
            if deviation > 0:
                self._brow_raise = ema(self._brow_raise, clamp(deviation * cfg.brow_scale, 0.0, 1.0), alpha)
                self._brow_furrow = ema(self._brow_furrow, 0.0, alpha)
            else:
                self._brow_raise = ema(self._brow_raise, 0.0, alpha)
                self._brow_furrow = ema(self._brow_furrow, clamp(abs(deviation) * cfg.brow_scale, 0.0, 1.0), alpha)

        # Smile: wider lips and a flatter opening
        if self.baseline_lip_width is not None and self.baseline_lip_width > 0:
            width_ratio = lip_width / self.baseline_lip_width
            aspect = lip_width / lip_height if lip_height > 0 else 0.0
            score = clamp(
                (width_ratio - 1.0) * cfg.smile_width_scale +
                (aspect - cfg.smile_aspect_neutral) * cfg.smile_aspect_scale,
                0.0, 1.0,
            )
            self._smile = ema(self._smile, score, alpha)

        return FaceSignalVector(
            head_nod=clamp(self._nod, -1.0, 1.0),
            head_shake=clamp(self._shake, -1.0, 1.0),
            lean_in=clamp(self._lean, -1.0, 1.0),
            brow_raise=clamp(self._brow_raise, 0.0, 1.0),
            brow_furrow=clamp(self._brow_furrow, 0.0, 1.0),
            smile=clamp(self._smile, 0.0, 1.0),
            is_tracking=True,
        )

    def _accumulate_baseline(self, brow_dist: float, lip_width: float):
        """Running mean over the first baseline frames, captured once."""
        n = self.config.baseline_frames
        if self.frame_count > n:
            return

        self._brow_sum += brow_dist
        self._lip_width_sum += lip_width

        if self.frame_count == n:
            self.baseline_brow_dist = self._brow_sum / n
            self.baseline_lip_width = self._lip_width_sum / n
            logger.info(
                f"✓ Face baseline captured (brow={self.baseline_brow_dist:.4f}, "
                f"lip_width={self.baseline_lip_width:.4f})"
            )

    def get_status(self) -> dict:
        return {
            'sensor_type': 'face',
            'frames_processed': self.frame_count,
            'has_baseline': self.has_baseline,
        }

    def __repr__(self):
        return f"<FaceSignalProcessor(frames={self.frame_count}, baseline={self.has_baseline})>"

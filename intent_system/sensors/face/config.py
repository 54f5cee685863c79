"""
Face Sensor Configuration
Landmark indices, scaling factors and smoothing constants for face signals
and head pose normalization
"""

import math
from dataclasses import dataclass


@dataclass
class FaceSignalConfig:
    """Face signal extraction configuration (MediaPipe FaceMesh topology)"""

    # Fewer landmarks than this means "no face"
    expected_landmarks: int = 468

    # Landmark indices
    nose_tip_idx: int = 1
    left_eye_inner_idx: int = 33
    right_eye_inner_idx: int = 362
    left_brow_idx: int = 70
    right_brow_idx: int = 300
    lip_left_idx: int = 61
    lip_right_idx: int = 291
    lip_top_idx: int = 0
    lip_bottom_idx: int = 17

    # Exponential smoothing weight applied to every axis
    smoothing_alpha: float = 0.3

    # Frames averaged into the brow-distance and lip-width baselines
    baseline_frames: int = 15

    # Per-axis scale factors
    nod_scale: float = 50.0        # typical nod is ~0.01-0.03 per frame
    shake_scale: float = 50.0
    lean_scale: float = 30.0
    brow_scale: float = 10.0
    smile_width_scale: float = 5.0
    smile_aspect_neutral: float = 3.0
    smile_aspect_scale: float = 0.2

    def __post_init__(self):
        if not 0.0 < self.smoothing_alpha <= 1.0:
            raise ValueError(f"smoothing_alpha must be in (0, 1], got {self.smoothing_alpha}")
        if self.baseline_frames < 1:
            raise ValueError(f"baseline_frames must be >= 1, got {self.baseline_frames}")
        highest = max(
            self.nose_tip_idx, self.left_eye_inner_idx,
            self.right_eye_inner_idx, self.left_brow_idx,
            self.right_brow_idx, self.lip_left_idx, self.lip_right_idx,
            self.lip_top_idx, self.lip_bottom_idx,
        )
        if highest >= self.expected_landmarks:
            raise ValueError(
                f"Landmark index {highest} out of range for {self.expected_landmarks} landmarks"
            )


@dataclass
class HeadPoseConfig:
    """Head pose normalization configuration"""

    # Head turn mapped to full range
    max_angle_degrees: float = 12.0

    # Frames averaged into the neutral offset before any output is emitted
    calibration_frames: int = 15

    # Slow rolling recalibration toward the live reading (posture drift)
    recalibration_alpha: float = 0.005

    # Output smoothing; higher = more responsive
    smoothing_alpha: float = 0.7

    def __post_init__(self):
        if self.max_angle_degrees <= 0:
            raise ValueError(f"max_angle_degrees must be positive, got {self.max_angle_degrees}")
        if self.calibration_frames < 1:
            raise ValueError(f"calibration_frames must be >= 1, got {self.calibration_frames}")
        for name in ('recalibration_alpha', 'smoothing_alpha'):
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise ValueError(f"{name} must be in (0, 1], got {value}")

    @property
    def max_angle_radians(self) -> float:
        return math.radians(self.max_angle_degrees)

    @property
    def recalibration_half_life_frames(self) -> float:
        """Frames for the neutral offset to move halfway to a new posture."""
        return math.log(0.5) / math.log(1.0 - self.recalibration_alpha)


@dataclass
class FaceProviderConfig:
    """MediaPipe FaceLandmarker settings"""

    model_asset_path: str = 'face_landmarker.task'
    num_faces: int = 1
    min_face_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5

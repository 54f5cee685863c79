"""
Face Landmark Provider
MediaPipe FaceLandmarker adapter producing the landmark and facial
transformation feeds from camera frames supplied by the host application
"""

import logging
from typing import Any, Optional, Tuple

import cv2
import numpy as np

from .config import FaceProviderConfig

logger = logging.getLogger(__name__)


class FaceLandmarkProvider:
    """
    Wraps MediaPipe FaceLandmarker in VIDEO mode.

    If the model cannot be loaded the provider marks itself unavailable once
    and every later call returns (None, None); the rest of the session keeps
    running on whatever inputs remain.
    """

    def __init__(self, config: Optional[FaceProviderConfig] = None):
        self.config = config or FaceProviderConfig()
        self.landmarker = None
        self.available = False
        self.error: Optional[str] = None
        self.frame_count = 0
        self._last_timestamp_ms = -1

    def start(self) -> bool:
        """
        Create the FaceLandmarker.

        Returns:
            True if the provider is ready, False if it failed to initialise.
        """
        if self.landmarker is not None:
            return True

        try:
            from mediapipe.tasks import python
            from mediapipe.tasks.python import vision

            base_options = python.BaseOptions(model_asset_path=self.config.model_asset_path)
            options = vision.FaceLandmarkerOptions(
                base_options=base_options,
                running_mode=vision.RunningMode.VIDEO,
                output_facial_transformation_matrixes=True,
                num_faces=self.config.num_faces,
                min_face_detection_confidence=self.config.min_face_detection_confidence,
                min_tracking_confidence=self.config.min_tracking_confidence,
            )
            self.landmarker = vision.FaceLandmarker.create_from_options(options)
            self.available = True
            self.error = None
            logger.info(f"✓ FaceLandmarkProvider started ({self.config.model_asset_path})")

        except Exception as e:
            self.landmarker = None
            self.available = False
            self.error = str(e)
            logger.warning(f"✗ FaceLandmarkProvider unavailable: {e}", exc_info=True)

        return self.available

    def stop(self):
        if self.landmarker is not None:
            try:
                self.landmarker.close()
            except Exception as e:
                logger.error(f"Error closing FaceLandmarker: {e}")
            self.landmarker = None
        self.available = False
        logger.info(f"✓ FaceLandmarkProvider stopped — {self.frame_count} frames processed")

    def process(self, frame_bgr: np.ndarray, timestamp_ms: float) -> Tuple[Optional[Any], Optional[np.ndarray]]:
        """
        Run landmark detection on one BGR frame.

        Args:
            frame_bgr:    HxWx3 uint8 frame as delivered by OpenCV.
            timestamp_ms: Frame timestamp; must increase between calls.

        Returns:
            (landmarks, transform): landmark list and 4x4 transform for the
            first face, or (None, None) with no face / no provider.
        """
        if self.landmarker is None:
            return None, None

        import mediapipe as mp

        ts = int(timestamp_ms)
        if ts <= self._last_timestamp_ms:
            ts = self._last_timestamp_ms + 1
        self._last_timestamp_ms = ts

        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        result = self.landmarker.detect_for_video(image, ts)
        self.frame_count += 1

        if not result.face_landmarks:
            return None, None

        landmarks = result.face_landmarks[0]
        transform = None
        if result.facial_transformation_matrixes:
            transform = np.asarray(result.facial_transformation_matrixes[0], dtype=float)

        return landmarks, transform

    def get_status(self) -> dict:
        return {
            'provider': 'mediapipe_face_landmarker',
            'available': self.available,
            'error': self.error,
            'frames_processed': self.frame_count,
        }

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    def __repr__(self):
        status = "available" if self.available else "unavailable"
        return f"<FaceLandmarkProvider({status}, frames={self.frame_count})>"

"""
Face Sensor Module for the Intent System
Behavioral face signals and normalized head pose from MediaPipe landmarks

Architecture:
- FaceSignalProcessor: Landmarks -> nod/shake/lean/brow/smile axes with a session baseline
- HeadPoseNormalizer:  Facial transform -> auto-centered, drift-corrected yaw/pitch
- FaceLandmarkProvider: MediaPipe FaceLandmarker adapter (frames -> landmarks + transform)
- FaceSignalConfig / HeadPoseConfig / FaceProviderConfig: Configuration parameters

Usage:
    processor = FaceSignalProcessor()
    normalizer = HeadPoseNormalizer()
    signals = processor.process(landmarks)
    pose = normalizer.process(transform)
"""

from .config import FaceSignalConfig, HeadPoseConfig, FaceProviderConfig
from .signals import FaceSignalProcessor
from .head_pose import HeadPoseNormalizer, extract_yaw_pitch
from .provider import FaceLandmarkProvider

__all__ = [
    'FaceSignalProcessor',
    'HeadPoseNormalizer',
    'FaceLandmarkProvider',
    'FaceSignalConfig',
    'HeadPoseConfig',
    'FaceProviderConfig',
    'extract_yaw_pitch',
]

__version__ = '1.0.0'

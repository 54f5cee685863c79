"""
Intent System Sensors
Input feeds turned into per-tick state

Available Sensors:
- Gaze: Screen-space gaze points (arbitrary rate) -> features + zones
- Face: 468-point landmarks + facial transform (~30 Hz) -> behavioral axes + head pose
- Pointer: Pointer move events -> position + activity

All sensors follow the same split:
- Callbacks only append to bounded buffers
- All computation runs inside the fusion tick
"""

from .gaze import GazeTracker, GazeConfig, ZoneConfig, ZoneClassifier
from .face import (
    FaceSignalProcessor,
    HeadPoseNormalizer,
    FaceLandmarkProvider,
    FaceSignalConfig,
    HeadPoseConfig,
    FaceProviderConfig,
)
from .pointer import PointerTracker, PointerConfig

__all__ = [
    # Gaze
    'GazeTracker',
    'GazeConfig',
    'ZoneConfig',
    'ZoneClassifier',

    # Face
    'FaceSignalProcessor',
    'HeadPoseNormalizer',
    'FaceLandmarkProvider',
    'FaceSignalConfig',
    'HeadPoseConfig',
    'FaceProviderConfig',

    # Pointer
    'PointerTracker',
    'PointerConfig',
]

__version__ = '1.0.0'

"""
Face Utility Functions
Landmark array conversion and geometry helpers
"""

from typing import Any, Optional

import numpy as np


def landmarks_to_array(landmarks: Any) -> Optional[np.ndarray]:
    """
    Convert a landmark frame to an (N, 3) float array.

    Args:
        landmarks: (N, 3) / (N, 2) array, sequence of (x, y, z) tuples, or
                   sequence of objects with x, y, z attributes (MediaPipe
                   NormalizedLandmark).

    Returns:
        (N, 3) array, or None for an empty / missing frame.
    """
    if landmarks is None:
        return None

    if isinstance(landmarks, np.ndarray):
        arr = landmarks.astype(float, copy=False)
    else:
        seq = list(landmarks)
        if not seq:
            return None
        if hasattr(seq[0], 'x'):
            arr = np.array([(lm.x, lm.y, getattr(lm, 'z', 0.0)) for lm in seq], dtype=float)
        else:
            arr = np.asarray(seq, dtype=float)

    if arr.ndim != 2 or arr.shape[0] == 0:
        return None
    if arr.shape[1] == 2:
        arr = np.column_stack([arr, np.zeros(len(arr))])
    return arr[:, :3]


def distance_2d(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.hypot(a[0] - b[0], a[1] - b[1]))


def distance_3d(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.linalg.norm(a[:3] - b[:3]))


def bbox_area(points: np.ndarray) -> float:
    """
    Area of the 2D bounding box of all landmarks.
    Used as a proxy for distance to camera (larger area = closer).
    """
    mins = points[:, :2].min(axis=0)
    maxs = points[:, :2].max(axis=0)
    return float((maxs[0] - mins[0]) * (maxs[1] - mins[1]))


def ema(prev: float, current: float, alpha: float) -> float:
    """Exponential moving average step."""
    return prev * (1.0 - alpha) + current * alpha

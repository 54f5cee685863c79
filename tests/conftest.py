"""
Shared fixtures: fake clock, synthetic landmark frames, transforms and
gaze state builders. Nothing here touches a camera or the network.
"""

import math

import numpy as np
import pytest

from intent_system.types import GazeState, Point, Zone


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start_ms: float = 1000.0):
        self.now = start_ms

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


def make_landmarks(
        nose=(0.5, 0.5),
        scale=1.0,
        brow_gap=0.05,
        lip_width=0.10,
        lip_height=0.04,
        count=468,
) -> np.ndarray:
    """
    Synthetic FaceMesh frame.

    Only the indices the face processor reads are placed explicitly; two
    spare landmarks (10, 152) span the face bounding box, scaled by `scale`.
    """
    lm = np.full((count, 3), 0.5, dtype=float)
    lm[:, 2] = 0.0

    # Bounding box
    lm[10] = (0.5 - 0.2 * scale, 0.5 - 0.3 * scale, 0.0)
    lm[152] = (0.5 + 0.2 * scale, 0.5 + 0.3 * scale, 0.0)

    lm[1] = (nose[0], nose[1], 0.0)

    # Eyes and brows
    lm[33] = (0.42, 0.42, 0.0)
    lm[362] = (0.58, 0.42, 0.0)
    lm[70] = (0.42, 0.42 - brow_gap, 0.0)
    lm[300] = (0.58, 0.42 - brow_gap, 0.0)

    # Lips
    lm[61] = (0.5 - lip_width / 2, 0.62, 0.0)
    lm[291] = (0.5 + lip_width / 2, 0.62, 0.0)
    lm[0] = (0.5, 0.62 - lip_height / 2, 0.0)
    lm[17] = (0.5, 0.62 + lip_height / 2, 0.0)

    return lm


def make_transform(yaw: float = 0.0, pitch: float = 0.0) -> np.ndarray:
    """Row-major 4x4 transform whose extracted yaw/pitch equal the arguments (radians)."""
    m = np.eye(4).reshape(-1)
    m[0] = math.cos(yaw)
    m[8] = math.sin(yaw)
    m[6] = -math.sin(pitch)
    return m.reshape(4, 4)


def make_gaze(**overrides) -> GazeState:
    """Calibrated, confident gaze in the read zone unless overridden."""
    values = dict(
        position=Point(960.0, 540.0, 0.0),
        zone=Zone.READ,
        is_calibrated=True,
        confidence=0.7,
    )
    values.update(overrides)
    return GazeState(**values)


def cluster_points(count=60, span_ms=1000.0, center=(960.0, 540.0), radius=10.0, start_ms=0.0, seed=7):
    """`count` points spread evenly over `span_ms`, all within `radius` px of `center`."""
    rng = np.random.default_rng(seed)
    times = np.linspace(start_ms, start_ms + span_ms, count)
    angles = rng.uniform(0, 2 * math.pi, count)
    dists = rng.uniform(0, radius, count)
    return [
        Point(center[0] + d * math.cos(a), center[1] + d * math.sin(a), float(t))
        for t, a, d in zip(times, angles, dists)
    ]


@pytest.fixture
def clock():
    return FakeClock()

"""
Gaze Feature Extraction
Pure functions over a rolling point buffer (oldest -> newest)
"""

from typing import NamedTuple, Optional, Sequence

import numpy as np

from intent_system.types import Point


class Fixation(NamedTuple):
    x: float
    y: float
    duration: float


def _as_arrays(points: Sequence[Point]):
    xs = np.fromiter((p.x for p in points), dtype=float, count=len(points))
    ys = np.fromiter((p.y for p in points), dtype=float, count=len(points))
    ts = np.fromiter((p.timestamp_ms for p in points), dtype=float, count=len(points))
    return xs, ys, ts


def detect_fixation(
        points: Sequence[Point],
        threshold_px: float = 50.0,
        min_duration_ms: float = 200.0,
) -> Optional[Fixation]:
    """
    Detect a fixation: a cluster of recent points within `threshold_px` of the
    latest point that persists for at least `min_duration_ms`.

    The cluster grows backwards from the newest point and stops at the first
    point that is farther away.

    Args:
        points:          Ordered gaze points, oldest first.
        threshold_px:    Maximum distance to the latest point.
        min_duration_ms: Minimum time span of the cluster.

    Returns:
        Fixation(x, y, duration) with the cluster centroid, or None.
    """
    if len(points) < 2:
        return None

    latest = points[-1]
    cluster_start = len(points) - 1

    for i in range(len(points) - 2, -1, -1):
        dist = np.hypot(points[i].x - latest.x, points[i].y - latest.y)
        if dist > threshold_px:
            break
        cluster_start = i

    cluster = points[cluster_start:]
    if len(cluster) < 2:
        return None

    duration = cluster[-1].timestamp_ms - cluster[0].timestamp_ms
    if duration < min_duration_ms:
        return None

    xs, ys, _ = _as_arrays(cluster)
    return Fixation(float(xs.mean()), float(ys.mean()), float(duration))


def compute_blink_rate(
        points: Sequence[Point],
        min_gap_ms: float = 100.0,
        max_gap_ms: float = 400.0,
) -> float:
    """
    Estimate blinks per minute.

    A blink shows up as a dropout in the feed: an inter-sample gap strictly
    between `min_gap_ms` and `max_gap_ms`.
    """
    if len(points) < 2:
        return 0.0

    _, _, ts = _as_arrays(points)
    total_ms = ts[-1] - ts[0]
    if total_ms <= 0:
        return 0.0

    gaps = np.diff(ts)
    blinks = int(np.count_nonzero((gaps > min_gap_ms) & (gaps < max_gap_ms)))

    return blinks / (total_ms / 60_000.0)


def detect_saccades(
        points: Sequence[Point],
        min_distance_px: float = 100.0,
        max_interval_ms: float = 50.0,
) -> float:
    """
    Saccades per second: consecutive pairs displaced by more than
    `min_distance_px` within an interval under `max_interval_ms`.
    """
    if len(points) < 2:
        return 0.0

    xs, ys, ts = _as_arrays(points)
    total_ms = ts[-1] - ts[0]
    if total_ms <= 0:
        return 0.0

    dist = np.hypot(np.diff(xs), np.diff(ys))
    dt = np.diff(ts)
    saccades = int(np.count_nonzero((dist > min_distance_px) & (dt > 0) & (dt < max_interval_ms)))

    return saccades / (total_ms / 1000.0)


def estimate_engagement(points: Sequence[Point], saturation_px: float = 300.0) -> float:
    """
    Engagement from spatial spread of the buffer, 0-1.

    A tight cluster maps to 0; a standard deviation of `saturation_px` or
    more maps to 1.
    """
    if len(points) < 3:
        return 0.0

    xs, ys, _ = _as_arrays(points)
    variance = np.mean((xs - xs.mean()) ** 2 + (ys - ys.mean()) ** 2)
    std_dev = float(np.sqrt(variance))

    return min(std_dev / saturation_px, 1.0)

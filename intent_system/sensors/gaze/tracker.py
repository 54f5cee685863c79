"""
Gaze Tracker
Buffers the gaze feed and assembles one GazeState per fusion tick
"""

import logging
from typing import Callable, Optional

from intent_system.coordinator.buffers import RingBuffer
from intent_system.types import GazeState, Point
from .config import GazeConfig
from .features import compute_blink_rate, detect_fixation, detect_saccades, estimate_engagement
from .zones import ZoneClassifier

logger = logging.getLogger(__name__)


class GazeTracker:
    """
    Per-session gaze pipeline.

    The provider callback (`on_gaze`) only stamps and buffers points.
    `snapshot()` runs feature extraction and zone classification and must be
    called from the fusion tick.
    """

    def __init__(self, clock: Callable[[], float], config: Optional[GazeConfig] = None):
        """
        Args:
            clock:  Callable returning the session time in milliseconds.
            config: GazeConfig instance. Defaults to GazeConfig().
        """
        self.clock = clock
        self.config = config or GazeConfig()

        self.points: RingBuffer[Point] = RingBuffer(self.config.buffer_size)
        self.zones = ZoneClassifier(self.config.zones)

        # Latest reading; None after the provider reports "no reading"
        self._latest: Optional[Point] = None

        # Provider trust
        self.is_calibrated = False
        self.confidence = self.config.default_confidence

        self.sample_count = 0

        logger.info(f"GazeTracker initialised (buffer={self.config.buffer_size} points)")

    # ------------------------------------------------------------------
    # Callback path
    # ------------------------------------------------------------------

    def on_gaze(self, x: Optional[float], y: Optional[float] = None):
        """
        Provider callback. Pass None (or no y) when the provider has no
        reading for this frame.
        """
        if x is None or y is None:
            self._latest = None
            return

        point = Point(float(x), float(y), self.clock())
        self.points.append(point)
        self._latest = point
        self.sample_count += 1

    def set_provider_state(self, is_calibrated: bool, confidence: Optional[float] = None):
        """Record the provider's calibration flag and confidence."""
        self.is_calibrated = bool(is_calibrated)
        if confidence is not None:
            self.confidence = max(0.0, min(1.0, float(confidence)))

    # ------------------------------------------------------------------
    # Tick path
    # ------------------------------------------------------------------

    def snapshot(
            self,
            screen_w: Optional[float] = None,
            screen_h: Optional[float] = None,
    ) -> GazeState:
        """
        Run feature extraction and zone classification on the current buffer.

        Returns:
            GazeState for this tick. With no current reading the zone is
            wander and no fixation is reported.
        """
        screen_w = screen_w or self.config.screen_width
        screen_h = screen_h or self.config.screen_height

        zone_result = self.zones.update(self._latest, screen_w, screen_h)

        points = self.points.snapshot()
        fixation = None
        blink_rate = saccade_rate = engagement = 0.0

        if self._latest is not None and len(points) > self.config.min_points_for_features:
            fixation = detect_fixation(
                points,
                threshold_px=self.config.fixation_threshold_px,
                min_duration_ms=self.config.fixation_min_duration_ms,
            )
            blink_rate = compute_blink_rate(points)
            saccade_rate = detect_saccades(points)
            engagement = estimate_engagement(points)

        return GazeState(
            position=self._latest,
            zone=zone_result.zone,
            zone_dwell_ms=zone_result.dwell_ms,
            dwell_progress=zone_result.dwell_progress,
            is_activated=zone_result.is_activated,
            fixation_duration_ms=fixation.duration if fixation else 0.0,
            is_fixated=fixation is not None,
            blink_rate=blink_rate,
            saccade_rate=saccade_rate,
            engagement=engagement,
            is_calibrated=self.is_calibrated,
            confidence=self.confidence,
        )

    def reset(self):
        self.points.clear()
        self.zones.reset()
        self._latest = None
        self.sample_count = 0

    def get_status(self) -> dict:
        return {
            'sensor_type': 'gaze',
            'is_calibrated': self.is_calibrated,
            'confidence': self.confidence,
            'buffered_points': len(self.points),
            'samples_collected': self.sample_count,
            'zone': self.zones.current_zone.value,
        }

    def __repr__(self):
        return f"<GazeTracker(points={len(self.points)}, zone={self.zones.current_zone.value})>"

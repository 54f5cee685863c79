"""
Gaze Zone Classifier
Maps gaze points to screen zones with hysteresis and per-zone dwell timing
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional

from intent_system.types import Point, Zone
from .config import ZoneConfig

logger = logging.getLogger(__name__)

_DEFAULT_ZONES = ZoneConfig.default()


@dataclass
class ZoneState:
    """Mutable classifier state, owned by one ZoneClassifier."""
    current_zone: Zone = Zone.WANDER
    dwell_start_ms: Optional[float] = None
    pending_zone: Optional[Zone] = None
    pending_zone_start_ms: float = 0.0
    last_activated_zone: Optional[Zone] = None


@dataclass(frozen=True)
class ZoneResult:
    zone: Zone
    dwell_progress: float
    is_activated: bool
    dwell_ms: float = 0.0


def classify_zone(
        x: float,
        y: float,
        screen_w: float,
        screen_h: float,
        config: Optional[ZoneConfig] = None,
) -> Zone:
    """
    Classify a point into exactly one zone.

    Top band -> flip, bottom band -> deeper, otherwise left -> disagree,
    right -> agree and the center -> read.
    """
    cfg = config or _DEFAULT_ZONES
    rel_x = x / screen_w
    rel_y = y / screen_h

    if rel_y < cfg.top_fraction:
        return Zone.FLIP
    if rel_y > cfg.bottom_fraction:
        return Zone.DEEPER
    if rel_x < cfg.left_fraction:
        return Zone.DISAGREE
    if rel_x > cfg.right_fraction:
        return Zone.AGREE
    return Zone.READ


class ZoneClassifier:
    """
    Stateful zone detector.

    A raw zone that differs from the committed one is held as pending and
    only committed after it has been observed continuously for
    `hysteresis_ms`. Activation is edge-triggered: it fires once per
    uninterrupted dwell completion.
    """

    def __init__(self, config: Optional[ZoneConfig] = None):
        self.config = config or ZoneConfig.default()
        self._state = ZoneState()

    @property
    def state(self) -> ZoneState:
        return replace(self._state)

    @property
    def current_zone(self) -> Zone:
        return self._state.current_zone

    def reset(self):
        """Full reinitialisation."""
        self._state = ZoneState()

    def update(self, point: Optional[Point], screen_w: float, screen_h: float) -> ZoneResult:
        """
        Advance the classifier with the latest gaze point.

        Args:
            point:    Latest gaze point, or None when there is no reading.
            screen_w: Screen width in pixels.
            screen_h: Screen height in pixels.

        Returns:
            ZoneResult with the committed zone, dwell progress (0-1) and
            whether this update completed the dwell.
        """
        s = self._state

        if point is None:
            s.current_zone = Zone.WANDER
            s.pending_zone = None
            return ZoneResult(zone=Zone.WANDER, dwell_progress=0.0, is_activated=False)

        raw_zone = classify_zone(point.x, point.y, screen_w, screen_h, self.config)
        now = point.timestamp_ms

        if raw_zone != s.current_zone:
            if s.pending_zone == raw_zone:
                if now - s.pending_zone_start_ms >= self.config.hysteresis_ms:
                    logger.debug(f"Zone switch {s.current_zone.value} -> {raw_zone.value}")
                    s.current_zone = raw_zone
                    s.dwell_start_ms = s.pending_zone_start_ms
                    s.pending_zone = None
                    s.last_activated_zone = None
            else:
                s.pending_zone = raw_zone
                s.pending_zone_start_ms = now
        else:
            s.pending_zone = None

        if s.dwell_start_ms is None:
            s.dwell_start_ms = now

        dwell_ms = max(0.0, now - s.dwell_start_ms)
        threshold = self.config.dwell_thresholds_ms[s.current_zone]
        dwell_progress = 0.0 if math.isinf(threshold) else min(dwell_ms / threshold, 1.0)

        is_activated = dwell_progress >= 1.0 and s.last_activated_zone != s.current_zone
        if is_activated:
            s.last_activated_zone = s.current_zone
            logger.debug(f"Zone {s.current_zone.value} activated after {dwell_ms:.0f}ms")

        return ZoneResult(
            zone=s.current_zone,
            dwell_progress=dwell_progress,
            is_activated=is_activated,
            dwell_ms=dwell_ms,
        )

    def __repr__(self):
        return f"<ZoneClassifier(zone={self._state.current_zone.value})>"

"""
Gaze Sensor Module for the Intent System
Point buffering, fixation/blink/saccade features and screen-zone dwell

Architecture:
- GazeTracker:    Buffers provider points, builds a GazeState per tick
- ZoneClassifier: Hysteresis zone machine with edge-triggered dwell activation
- features:       Pure feature functions over the point buffer
- GazeConfig:     Configuration parameters (ZoneConfig for the layout)

Usage:
    tracker = GazeTracker(clock, GazeConfig())
    tracker.set_provider_state(is_calibrated=True, confidence=0.7)
    tracker.on_gaze(x, y)            # provider callback
    state = tracker.snapshot()       # once per fusion tick
"""

from .config import GazeConfig, ZoneConfig
from .features import (
    Fixation,
    detect_fixation,
    compute_blink_rate,
    detect_saccades,
    estimate_engagement,
)
from .zones import ZoneClassifier, ZoneResult, ZoneState, classify_zone
from .tracker import GazeTracker

__all__ = [
    'GazeTracker',
    'GazeConfig',
    'ZoneConfig',
    'ZoneClassifier',
    'ZoneResult',
    'ZoneState',
    'classify_zone',
    'Fixation',
    'detect_fixation',
    'compute_blink_rate',
    'detect_saccades',
    'estimate_engagement',
]

__version__ = '1.0.0'

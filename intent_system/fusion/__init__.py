"""
Fusion Module for the Intent System
Stateless intent cascade plus the fixed-rate smoothing loop around it

Usage:
    loop = SmoothingLoop(SmoothingConfig())
    output = loop.tick(gaze_state, face_vector, pointer_state, now_ms)
    output.smoothed.type, output.is_confused
"""

from .config import FusionConfig, SmoothingConfig
from .engine import fuse_inputs, zone_to_intent, ZONE_INTENTS
from .smoothing import SmoothingLoop, smooth_history

__all__ = [
    'fuse_inputs',
    'zone_to_intent',
    'ZONE_INTENTS',
    'SmoothingLoop',
    'smooth_history',
    'FusionConfig',
    'SmoothingConfig',
]

__version__ = '1.0.0'

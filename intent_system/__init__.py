"""
Intent System
Real-time multi-modal attention and intent inference for one user session

Architecture:
- coordinator: SessionClock + bounded RingBuffers shared by every feed
- sensors:     gaze (features, zones), face (signals, head pose, provider), pointer
- fusion:      priority-cascade fusion engine + fixed-rate smoothing loop
- learning:    adaptive behavior model + passive calibration learner
- pipeline:    IntentPipeline, the per-session owner of all of the above

Usage:
    from intent_system import IntentPipeline

    pipeline = IntentPipeline()
    pipeline.set_gaze_provider_state(is_calibrated=True, confidence=0.7)
    pipeline.on_gaze(960, 540)
    output = pipeline.tick()
    output.smoothed.type
"""

from .types import (
    Zone,
    IntentType,
    Reaction,
    SignalSource,
    Point,
    GazeState,
    FaceSignalVector,
    HeadPose,
    PointerState,
    IntentSignal,
    FusedOutput,
)
from .pipeline import IntentPipeline, PipelineConfig, ClickTarget

__all__ = [
    'IntentPipeline',
    'PipelineConfig',
    'ClickTarget',
    'Zone',
    'IntentType',
    'Reaction',
    'SignalSource',
    'Point',
    'GazeState',
    'FaceSignalVector',
    'HeadPose',
    'PointerState',
    'IntentSignal',
    'FusedOutput',
]

__version__ = '1.0.0'

"""
Intent System Data Types
Shared records exchanged between sensors, fusion and learners
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Zone(Enum):
    """Screen regions used as a coarse attention proxy."""
    READ = 'read'
    AGREE = 'agree'
    DISAGREE = 'disagree'
    DEEPER = 'deeper'
    FLIP = 'flip'
    WANDER = 'wander'


class IntentType(Enum):
    """Discrete intent decisions produced by the fusion engine."""
    AGREE = 'agree'
    DISAGREE = 'disagree'
    DEEPER = 'deeper'
    FLIP = 'flip'
    NAVIGATE = 'navigate'
    COMPARE = 'compare'
    DEEP_READ = 'deep_read'
    CONFUSED = 'confused'
    FATIGUED = 'fatigued'
    ENGAGED = 'engaged'
    PULLING_AWAY = 'pulling_away'
    IDLE = 'idle'


class Reaction(Enum):
    """Confirmed user reactions (outcome-confirmed events)."""
    AGREE = 'agree'
    DISAGREE = 'disagree'
    DEEPER = 'deeper'
    FLIP = 'flip'


class SignalSource(Enum):
    """Evidence source of an intent decision."""
    GAZE = 'gaze'
    FACE = 'face'
    MOUSE = 'mouse'
    FUSED = 'fused'


@dataclass(frozen=True)
class Point:
    """A single gaze estimate in screen pixels."""
    x: float
    y: float
    timestamp_ms: float


@dataclass(frozen=True)
class GazeState:
    """Gaze snapshot assembled once per tick by the gaze tracker."""
    position: Optional[Point] = None
    zone: Zone = Zone.WANDER
    zone_dwell_ms: float = 0.0
    dwell_progress: float = 0.0
    is_activated: bool = False
    fixation_duration_ms: float = 0.0
    is_fixated: bool = False
    blink_rate: float = 0.0       # blinks per minute
    saccade_rate: float = 0.0     # saccades per second
    engagement: float = 0.0       # 0-1
    is_calibrated: bool = False
    confidence: float = 0.0       # 0-1

    def is_usable(self, min_confidence: float = 0.3) -> bool:
        """Calibrated and confident enough to drive decisions."""
        return self.is_calibrated and self.confidence > min_confidence


@dataclass(frozen=True)
class FaceSignalVector:
    """Normalized behavioral axes derived from facial landmarks."""
    head_nod: float = 0.0      # -1 to 1
    head_shake: float = 0.0    # -1 to 1
    lean_in: float = 0.0       # -1 (back) to 1 (forward)
    brow_raise: float = 0.0    # 0 to 1
    brow_furrow: float = 0.0   # 0 to 1
    smile: float = 0.0         # 0 to 1
    is_tracking: bool = False

    @classmethod
    def not_tracking(cls) -> 'FaceSignalVector':
        return cls()


@dataclass(frozen=True)
class HeadPose:
    """Normalized head rotation, roughly [-1, 1] per axis."""
    yaw: float = 0.0     # -1 (left) to +1 (right)
    pitch: float = 0.0   # -1 (up) to +1 (down)
    face_detected: bool = False


@dataclass(frozen=True)
class PointerState:
    x: float = 0.0
    y: float = 0.0
    is_active: bool = False


@dataclass(frozen=True)
class IntentSignal:
    """One decision: intent type, confidence in [0, 1] and its evidence source."""
    type: IntentType
    confidence: float
    source: SignalSource
    timestamp_ms: float


@dataclass(frozen=True)
class FusedOutput:
    """Result of one smoothing tick."""
    raw: IntentSignal
    smoothed: IntentSignal
    is_confused: bool = False
    is_fatigued: bool = False
    is_engaged: bool = False


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))

"""
Intent System - Session Pipeline
================================
Owns every component of a single intent-inference session.

Usage:
    pipeline = IntentPipeline()
    pipeline.on_gaze(x, y)                     # gaze provider callback
    pipeline.on_face_frame(landmarks, matrix)  # face provider callback
    pipeline.on_pointer_move(x, y)             # pointer events
    output = pipeline.tick()                   # or pipeline.start() for 30 Hz
    pipeline.on_outcome(Reaction.AGREE, click) # confirmed user reaction

Tick order (strict, never reentrant):
    face frames -> face signals + head pose
    gaze buffer -> features -> zone
    pointer     -> activity
    fusion      -> smoothing

Failure policy:
    A provider that fails to initialise is marked unavailable once and its
    capability flag is cleared. Fusion and the learners keep running on the
    remaining inputs; gaze-only and face-only sessions are normal.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple, Union

import numpy as np

from intent_system.coordinator import RingBuffer, SessionClock
from intent_system.fusion import FusionConfig, SmoothingConfig, SmoothingLoop
from intent_system.learning import (
    AdaptiveBehaviorModel,
    BehaviorModelConfig,
    BehaviorModelSnapshot,
    CalibrationConfig,
    PassiveCalibrationLearner,
    Prediction,
)
from intent_system.sensors.face import (
    FaceLandmarkProvider,
    FaceSignalConfig,
    FaceSignalProcessor,
    HeadPoseConfig,
    HeadPoseNormalizer,
)
from intent_system.sensors.gaze import GazeConfig, GazeTracker
from intent_system.sensors.pointer import PointerConfig, PointerTracker
from intent_system.types import (
    FaceSignalVector,
    FusedOutput,
    GazeState,
    HeadPose,
    PointerState,
    Reaction,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Capability labels
# ---------------------------------------------------------------------------
CAPABILITY_GAZE      = 'gaze'
CAPABILITY_FACE      = 'face'
CAPABILITY_HEAD_POSE = 'head_pose'

CAPABILITIES = (CAPABILITY_GAZE, CAPABILITY_FACE, CAPABILITY_HEAD_POSE)


@dataclass
class PipelineConfig:
    """Per-component configuration for one session."""
    gaze: GazeConfig = field(default_factory=GazeConfig)
    face_signals: FaceSignalConfig = field(default_factory=FaceSignalConfig)
    head_pose: HeadPoseConfig = field(default_factory=HeadPoseConfig)
    pointer: PointerConfig = field(default_factory=PointerConfig)
    fusion: FusionConfig = field(default_factory=FusionConfig)
    smoothing: SmoothingConfig = field(default_factory=SmoothingConfig)
    behavior: BehaviorModelConfig = field(default_factory=BehaviorModelConfig)
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)

    # Face frames buffered between ticks
    face_frame_buffer: int = 4

    def __post_init__(self):
        if self.face_frame_buffer < 1:
            raise ValueError(f"face_frame_buffer must be >= 1, got {self.face_frame_buffer}")


@dataclass(frozen=True)
class ClickTarget:
    """Angular position of a clicked target and of the view at click time (radians)."""
    target_theta: float
    target_phi: float
    view_theta: float
    view_phi: float
    max_offset: float


class IntentPipeline:
    """
    Per-session intent inference.

    Responsibilities:
      - Buffer the gaze, face and pointer feeds (callbacks never compute)
      - Run one ordered fusion + smoothing step per tick
      - Feed confirmed outcomes to the behavior model and calibration learner
      - Report provider capabilities via get_status()
    """

    def __init__(
            self,
            config: Optional[PipelineConfig] = None,
            clock: Optional[Callable[[], float]] = None,
            on_update: Optional[Callable[[FusedOutput], None]] = None,
    ):
        """
        Args:
            config:    PipelineConfig. Defaults to PipelineConfig().
            clock:     Callable returning session milliseconds. Defaults to a
                       new SessionClock shared by every component.
            on_update: Optional callback receiving every FusedOutput.
        """
        self.config = config or PipelineConfig()
        self.clock = clock or SessionClock()

        # Sensors
        self.gaze = GazeTracker(self.clock, self.config.gaze)
        self.face_signals = FaceSignalProcessor(self.config.face_signals)
        self.head_pose = HeadPoseNormalizer(self.config.head_pose)
        self.pointer = PointerTracker(self.clock, self.config.pointer)
        self._face_frames: RingBuffer[Tuple[Any, Any]] = RingBuffer(self.config.face_frame_buffer)
        self._face_provider: Optional[FaceLandmarkProvider] = None

        # Fusion
        self.smoothing = SmoothingLoop(self.config.smoothing, self.config.fusion, on_update=on_update)

        # Learners
        self.behavior = AdaptiveBehaviorModel(self.clock, self.config.behavior)
        self.calibration = PassiveCalibrationLearner(self.clock, self.config.calibration)

        # Capability flags
        self._capabilities: Dict[str, bool] = {name: True for name in CAPABILITIES}
        self._unavailable_reasons: Dict[str, str] = {}

        # Latest per-tick state, shared with on_outcome / predict_reaction
        self._state_lock = threading.Lock()
        self._face_vector: Optional[FaceSignalVector] = None
        self._last_gaze: Optional[GazeState] = None
        self._last_face: Optional[FaceSignalVector] = None
        self._last_pose: Optional[HeadPose] = None

        self._screen_size: Optional[Tuple[float, float]] = None
        self.outcome_count = 0

        logger.info("IntentPipeline created")

    # -----------------------------------------------------------------------
    # Provider callbacks (buffer maintenance only)
    # -----------------------------------------------------------------------

    def on_gaze(self, x: Optional[float], y: Optional[float] = None):
        """Gaze point in screen pixels, or None for no reading this frame."""
        self.gaze.on_gaze(x, y)

    def on_face_frame(self, landmarks: Any, transform: Any = None):
        """
        One face frame: landmark list (fewer than 468 points means no face)
        and the 4x4 facial transformation matrix, or None.
        """
        self._face_frames.append((landmarks, transform))

    def on_pointer_move(self, x: float, y: float):
        self.pointer.on_move(x, y)

    def on_video_frame(self, frame_bgr: np.ndarray):
        """Run an attached face provider on one camera frame and buffer the result."""
        if self._face_provider is None or not self._face_provider.available:
            return
        landmarks, transform = self._face_provider.process(frame_bgr, self.clock())
        self.on_face_frame(landmarks, transform)

    def set_gaze_provider_state(self, is_calibrated: bool, confidence: Optional[float] = None):
        self.gaze.set_provider_state(is_calibrated, confidence)

    def set_screen_size(self, width: float, height: float):
        if width <= 0 or height <= 0:
            raise ValueError(f"Screen size must be positive, got {width}x{height}")
        self._screen_size = (float(width), float(height))

    # -----------------------------------------------------------------------
    # Capabilities
    # -----------------------------------------------------------------------

    def attach_face_provider(self, provider: FaceLandmarkProvider) -> bool:
        """
        Use a FaceLandmarkProvider as the face feed.

        Starts it if needed; on failure the face and head pose capabilities
        are marked unavailable and the session continues without them.
        """
        self._face_provider = provider
        if provider.available or provider.start():
            return True

        reason = provider.error or 'face provider failed to start'
        self.mark_provider_unavailable(CAPABILITY_FACE, reason)
        self.mark_provider_unavailable(CAPABILITY_HEAD_POSE, reason)
        return False

    def mark_provider_unavailable(self, name: str, reason: str = ''):
        """Clear a capability flag. Logged once per provider."""
        if name not in self._capabilities:
            raise ValueError(f"Unknown capability '{name}', expected one of {CAPABILITIES}")
        if not self._capabilities[name]:
            return

        self._capabilities[name] = False
        self._unavailable_reasons[name] = reason
        logger.warning(f"✗ {name} unavailable — continuing without it ({reason or 'no reason given'})")

    def is_available(self, name: str) -> bool:
        return self._capabilities.get(name, False)

    # -----------------------------------------------------------------------
    # Tick
    # -----------------------------------------------------------------------

    def tick(self) -> FusedOutput:
        """
        Run one ordered cycle synchronously.

        Raises:
            RuntimeError: the background loop is already driving ticks.
        """
        if self.smoothing.is_running:
            raise RuntimeError("tick() cannot be called while the background loop is running")
        return self.smoothing.tick(*self._collect_inputs())

    def start(self):
        """Drive ticks from the smoothing loop's background thread."""
        logger.info("=" * 55)
        logger.info("  Intent Pipeline — starting")
        logger.info("=" * 55)

        self.smoothing.start(self._collect_inputs)

        active = [name for name, ok in self._capabilities.items() if ok]
        failed = [name for name, ok in self._capabilities.items() if not ok]
        logger.info(f"Pipeline ready — active: {active or 'none'} | unavailable: {failed or 'none'}")

    def stop(self):
        logger.info("Stopping intent pipeline...")
        self.smoothing.stop()
        if self._face_provider is not None:
            self._face_provider.stop()
        logger.info("✓ Intent pipeline stopped")

    def latest(self) -> Optional[FusedOutput]:
        return self.smoothing.latest()

    # -----------------------------------------------------------------------
    # Outcomes and learners
    # -----------------------------------------------------------------------

    def on_outcome(self, reaction: Union[Reaction, str], click: Optional[ClickTarget] = None):
        """
        Confirmed user reaction.

        Feeds the behavior model with the last tick's gaze/face state and,
        when a click target is given and a face is detected, the calibration
        learner.
        """
        reaction = Reaction(reaction)
        with self._state_lock:
            gaze, face, pose = self._last_gaze, self._last_face, self._last_pose

        self.behavior.record_observation(gaze, face, reaction)
        self.outcome_count += 1

        if (
            click is not None and
            pose is not None and
            pose.face_detected and
            self._capabilities[CAPABILITY_HEAD_POSE]
        ):
            self.calibration.record_click(
                pose.yaw,
                pose.pitch,
                click.target_theta,
                click.target_phi,
                click.view_theta,
                click.view_phi,
                click.max_offset,
            )

    def predict_reaction(self) -> Optional[Prediction]:
        with self._state_lock:
            gaze, face = self._last_gaze, self._last_face
        return self.behavior.predict(gaze, face)

    def get_steering(self) -> Optional[Tuple[float, float]]:
        """Corrected (yaw, pitch) of the current head pose, or None without one."""
        with self._state_lock:
            pose = self._last_pose
        if pose is None or not self._capabilities[CAPABILITY_HEAD_POSE]:
            return None
        return self.calibration.correct(pose.yaw, pose.pitch)

    def get_behavior_model(self) -> BehaviorModelSnapshot:
        return self.behavior.get_model()

    def get_status(self) -> dict:
        """Summary of capabilities and component states for logging / UI display."""
        latest = self.latest()
        return {
            'capabilities': dict(self._capabilities),
            'unavailable_reasons': dict(self._unavailable_reasons),
            'smoothed_intent': latest.smoothed.type.value if latest else None,
            'outcomes': self.outcome_count,
            'gaze': self.gaze.get_status(),
            'face_signals': self.face_signals.get_status(),
            'head_pose': self.head_pose.get_status(),
            'face_provider': self._face_provider.get_status() if self._face_provider else None,
            'smoothing': self.smoothing.get_status(),
            'behavior_model': self.behavior.get_status(),
            'calibration': self.calibration.get_status(),
        }

    # -----------------------------------------------------------------------
    # Private
    # -----------------------------------------------------------------------

    def _collect_inputs(self) -> Tuple[Optional[GazeState], Optional[FaceSignalVector], PointerState, float]:
        now = self.clock()

        pose = None
        for landmarks, transform in self._face_frames.drain():
            self._face_vector = self.face_signals.process(landmarks)
            pose = self.head_pose.process(transform)

        face = self._face_vector if self._capabilities[CAPABILITY_FACE] else None

        gaze = None
        if self._capabilities[CAPABILITY_GAZE] and self.gaze.sample_count > 0:
            screen_w, screen_h = self._screen_size or (None, None)
            gaze = self.gaze.snapshot(screen_w, screen_h)

        pointer = self.pointer.state(now)

        with self._state_lock:
            self._last_gaze = gaze
            self._last_face = face
            if pose is not None:
                self._last_pose = pose

        return gaze, face, pointer, now

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    def __repr__(self):
        active = [name for name, ok in self._capabilities.items() if ok]
        return f"<IntentPipeline(active={active}, outcomes={self.outcome_count})>"

"""
Smoothing Loop
Fixed-rate driver that fuses inputs every tick, keeps a short history and
derives a stabilized intent plus confused / fatigued / engaged flags
"""

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Tuple

from intent_system.types import (
    FaceSignalVector,
    FusedOutput,
    GazeState,
    IntentSignal,
    IntentType,
    PointerState,
    SignalSource,
)
from .config import FusionConfig, SmoothingConfig
from .engine import fuse_inputs

logger = logging.getLogger(__name__)

TickInputs = Tuple[Optional[GazeState], Optional[FaceSignalVector], Optional[PointerState], float]

# History entries that count toward each boolean flag
_CONFUSED_TYPES = (IntentType.CONFUSED,)
_FATIGUED_TYPES = (IntentType.FATIGUED,)
_ENGAGED_TYPES = (IntentType.ENGAGED, IntentType.DEEP_READ)


def smooth_history(history: List[IntentSignal], now_ms: float) -> IntentSignal:
    """
    Dominant intent of a history window.

    The winner is the type with the highest summed confidence (not a simple
    majority); its confidence is the mean over that type's entries only.
    """
    if not history:
        return IntentSignal(IntentType.IDLE, 0.0, SignalSource.FUSED, now_ms)

    scores: Dict[IntentType, float] = {}
    for entry in history:
        scores[entry.type] = scores.get(entry.type, 0.0) + entry.confidence

    best_type = IntentType.IDLE
    best_score = 0.0
    for intent, score in scores.items():
        if score > best_score:
            best_type, best_score = intent, score

    matching = [entry.confidence for entry in history if entry.type == best_type]
    confidence = sum(matching) / len(matching) if matching else 0.0

    return IntentSignal(best_type, confidence, SignalSource.FUSED, now_ms)


class SmoothingLoop:
    """
    Owns the fusion history for one session.

    `tick()` is synchronous and can be driven by the host (e.g. once per
    display refresh). `start()` drives it from a background thread at
    `rate_hz`, pulling inputs from a source callable each tick.
    """

    def __init__(
            self,
            config: Optional[SmoothingConfig] = None,
            fusion_config: Optional[FusionConfig] = None,
            on_update: Optional[Callable[[FusedOutput], None]] = None,
    ):
        """
        Args:
            config:        SmoothingConfig instance. Defaults to SmoothingConfig().
            fusion_config: Thresholds passed to fuse_inputs.
            on_update:     Optional callback receiving every FusedOutput.
        """
        self.config = config or SmoothingConfig()
        self.fusion_config = fusion_config or FusionConfig()
        self.on_update = on_update

        self.history: Deque[IntentSignal] = deque(maxlen=self.config.history_size)
        self._latest: Optional[FusedOutput] = None
        self._latest_lock = threading.Lock()
        self.tick_count = 0

        # Threading
        self.is_running = False
        self.loop_thread: Optional[threading.Thread] = None
        self.stop_event = threading.Event()

        logger.info(
            f"SmoothingLoop initialised ({self.config.rate_hz:.0f} Hz, history={self.config.history_size})"
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def tick(
            self,
            gaze: Optional[GazeState],
            face: Optional[FaceSignalVector],
            pointer: Optional[PointerState],
            now_ms: float,
    ) -> FusedOutput:
        """
        Run one fusion + smoothing step.

        Returns:
            FusedOutput with the raw signal, the smoothed signal and the
            majority flags over the current history window.
        """
        raw = fuse_inputs(gaze, face, pointer, now_ms=now_ms, config=self.fusion_config)
        self.history.append(raw)

        history = list(self.history)
        smoothed = smooth_history(history, now_ms)

        threshold = self.config.majority_threshold
        output = FusedOutput(
            raw=raw,
            smoothed=smoothed,
            is_confused=self._count(history, _CONFUSED_TYPES) >= threshold,
            is_fatigued=self._count(history, _FATIGUED_TYPES) >= threshold,
            is_engaged=self._count(history, _ENGAGED_TYPES) >= threshold,
        )

        with self._latest_lock:
            self._latest = output
        self.tick_count += 1

        logger.debug(
            f"tick {self.tick_count}: raw={raw.type.value}({raw.confidence:.2f}) "
            f"smoothed={smoothed.type.value}({smoothed.confidence:.2f})"
        )

        if self.on_update is not None:
            self.on_update(output)

        return output

    def latest(self) -> Optional[FusedOutput]:
        """Most recent tick output, or None before the first tick."""
        with self._latest_lock:
            return self._latest

    def reset(self):
        self.history.clear()
        with self._latest_lock:
            self._latest = None
        self.tick_count = 0

    def start(self, source: Callable[[], TickInputs]):
        """
        Start ticking from a background thread.

        Args:
            source: Callable returning (gaze, face, pointer, now_ms) for the
                    current tick.
        """
        if self.is_running:
            logger.warning("SmoothingLoop already running")
            return

        self.is_running = True
        self.stop_event.clear()
        self.loop_thread = threading.Thread(
            target=self._run,
            args=(source,),
            name="SmoothingLoop-Thread",
            daemon=True,
        )
        self.loop_thread.start()
        logger.info("✓ SmoothingLoop started")

    def stop(self):
        """Stop the background thread; nothing escapes a tick, so no cleanup is pending."""
        if not self.is_running:
            return

        self.stop_event.set()
        if self.loop_thread and self.loop_thread.is_alive():
            self.loop_thread.join(timeout=2)
        self.loop_thread = None
        self.is_running = False
        logger.info(f"✓ SmoothingLoop stopped — {self.tick_count} ticks")

    def get_status(self) -> dict:
        latest = self.latest()
        return {
            'is_running': self.is_running,
            'rate_hz': self.config.rate_hz,
            'ticks': self.tick_count,
            'smoothed_intent': latest.smoothed.type.value if latest else None,
        }

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    @staticmethod
    def _count(history: List[IntentSignal], types: Tuple[IntentType, ...]) -> int:
        return sum(1 for entry in history if entry.type in types)

    def _run(self, source: Callable[[], TickInputs]):
        logger.info("Smoothing loop started")
        interval = self.config.interval_seconds
        next_tick = time.monotonic()

        while not self.stop_event.is_set():
            try:
                gaze, face, pointer, now_ms = source()
                self.tick(gaze, face, pointer, now_ms)
            except Exception as e:
                logger.error(f"Error in smoothing loop: {e}", exc_info=True)

            next_tick += interval
            delay = next_tick - time.monotonic()
            if delay < 0:
                # Fell behind; restart the cadence instead of bursting
                next_tick = time.monotonic()
                delay = 0
            self.stop_event.wait(delay)

        logger.info("Smoothing loop stopped")

    def __repr__(self):
        status = "running" if self.is_running else "stopped"
        return f"<SmoothingLoop(status={status}, ticks={self.tick_count})>"

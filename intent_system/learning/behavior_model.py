"""
Adaptive Behavior Model
Learns per-user signal -> reaction correlations from confirmed outcomes

Phases advance strictly by count and never move backward:
  observe  (<10 observations)  record only
  model    (10-19)             running co-occurrence counts
  predict  (>=20, <5 scored)   predictions issued
  refine   (>=20, >=5 scored)  predictions scored against outcomes
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

from intent_system.coordinator import SessionClock
from intent_system.types import FaceSignalVector, GazeState, Reaction, Zone
from .config import BehaviorModelConfig

logger = logging.getLogger(__name__)


class ModelPhase(Enum):
    OBSERVE = 'observe'
    MODEL = 'model'
    PREDICT = 'predict'
    REFINE = 'refine'


class SignalName(Enum):
    """Discrete behavioral cues extracted before each outcome."""
    HEAD_NOD = 'head_nod'
    HEAD_SHAKE = 'head_shake'
    LEAN_IN = 'lean_in'
    LEAN_BACK = 'lean_back'
    BROW_RAISE = 'brow_raise'
    BROW_FURROW = 'brow_furrow'
    SMILE = 'smile'
    GAZE_AGREE = 'gaze_agree'
    GAZE_DISAGREE = 'gaze_disagree'
    GAZE_DEEPER = 'gaze_deeper'
    GAZE_FLIP = 'gaze_flip'
    GAZE_READ = 'gaze_read'
    GAZE_WANDER = 'gaze_wander'


_ZONE_SIGNALS: Dict[Zone, SignalName] = {
    Zone.AGREE: SignalName.GAZE_AGREE,
    Zone.DISAGREE: SignalName.GAZE_DISAGREE,
    Zone.DEEPER: SignalName.GAZE_DEEPER,
    Zone.FLIP: SignalName.GAZE_FLIP,
    Zone.READ: SignalName.GAZE_READ,
    Zone.WANDER: SignalName.GAZE_WANDER,
}


@dataclass(frozen=True)
class BehaviorObservation:
    signals: Tuple[SignalName, ...]
    outcome: Reaction
    timestamp_ms: float


@dataclass(frozen=True)
class BehaviorPattern:
    """A signal that co-occurs with an outcome."""
    signal: SignalName
    outcome: Reaction
    count: int
    correlation: float


@dataclass(frozen=True)
class Prediction:
    reaction: Reaction
    confidence: float


@dataclass(frozen=True)
class BehaviorModelSnapshot:
    """Read-only view of the model, regenerated on every request."""
    patterns: Tuple[BehaviorPattern, ...]
    total_observations: int
    phase: ModelPhase
    prediction_accuracy: float


def extract_signals(
        gaze: Optional[GazeState],
        face: Optional[FaceSignalVector],
        config: Optional[BehaviorModelConfig] = None,
) -> List[SignalName]:
    """
    Threshold continuous gaze/face state into a list of discrete signals.

    Face axes need an actively tracked face; the gaze zone needs calibrated
    gaze above the usability confidence.
    """
    cfg = config or BehaviorModelConfig()
    threshold = cfg.signal_threshold
    signals: List[SignalName] = []

    if face is not None and face.is_tracking:
        if face.head_nod > threshold:
            signals.append(SignalName.HEAD_NOD)
        if face.head_shake < -threshold:
            signals.append(SignalName.HEAD_SHAKE)
        if face.lean_in > threshold:
            signals.append(SignalName.LEAN_IN)
        if face.lean_in < -threshold:
            signals.append(SignalName.LEAN_BACK)
        if face.brow_raise > threshold:
            signals.append(SignalName.BROW_RAISE)
        if face.brow_furrow > threshold:
            signals.append(SignalName.BROW_FURROW)
        if face.smile > threshold:
            signals.append(SignalName.SMILE)

    if gaze is not None and gaze.is_usable(cfg.usable_gaze_confidence):
        signals.append(_ZONE_SIGNALS[gaze.zone])

    return signals


class AdaptiveBehaviorModel:
    """
    Per-user adaptive behavior model.

    Counts are kept per signal and per (signal, outcome); correlations and
    the snapshot are derived from them on demand.
    """

    def __init__(
            self,
            clock: Optional[Callable[[], float]] = None,
            config: Optional[BehaviorModelConfig] = None,
    ):
        self.clock = clock or SessionClock()
        self.config = config or BehaviorModelConfig()

        self._observations: List[BehaviorObservation] = []
        self._signal_totals: Dict[SignalName, int] = defaultdict(int)
        self._signal_outcomes: Dict[SignalName, Dict[Reaction, int]] = defaultdict(lambda: defaultdict(int))

        self._pending: Optional[Prediction] = None
        self._predictions_scored = 0
        self._predictions_correct = 0

        self._last_phase = self.phase
        logger.info("AdaptiveBehaviorModel initialised")

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def phase(self) -> ModelPhase:
        total = len(self._observations)
        if total < self.config.model_after:
            return ModelPhase.OBSERVE
        if total < self.config.predict_after:
            return ModelPhase.MODEL
        if self._predictions_scored < self.config.refine_after_predictions:
            return ModelPhase.PREDICT
        return ModelPhase.REFINE

    @property
    def observations(self) -> Tuple[BehaviorObservation, ...]:
        return tuple(self._observations)

    @property
    def prediction_accuracy(self) -> float:
        """Fraction of scored predictions that matched; 0 before any is scored."""
        if self._predictions_scored == 0:
            return 0.0
        return self._predictions_correct / self._predictions_scored

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def record_observation(
            self,
            gaze: Optional[GazeState],
            face: Optional[FaceSignalVector],
            outcome: Union[Reaction, str],
    ):
        """
        Record the state observed just before a confirmed outcome.

        An outstanding prediction from the previous predict() call is scored
        against this outcome and then cleared.

        Raises:
            ValueError: outcome is not a known Reaction.
        """
        outcome = Reaction(outcome)
        signals = extract_signals(gaze, face, self.config)

        self._observations.append(
            BehaviorObservation(tuple(signals), outcome, self.clock())
        )
        for signal in signals:
            self._signal_totals[signal] += 1
            self._signal_outcomes[signal][outcome] += 1

        if self._pending is not None:
            self._predictions_scored += 1
            if self._pending.reaction == outcome:
                self._predictions_correct += 1
            self._pending = None

        self._log_phase_change()

    def predict(
            self,
            gaze: Optional[GazeState],
            face: Optional[FaceSignalVector],
    ) -> Optional[Prediction]:
        """
        Predict the next reaction from the current state.

        Returns:
            Prediction, or None before enough observations, with no active
            signals, or when the best score is below the minimum.
        """
        if len(self._observations) < self.config.predict_after:
            return None

        signals = extract_signals(gaze, face, self.config)
        if not signals:
            return None

        best_reaction: Optional[Reaction] = None
        best_score = 0.0

        # Enum order breaks ties
        for reaction in Reaction:
            correlations = [
                c for c in (self.correlation(signal, reaction) for signal in signals) if c > 0
            ]
            if not correlations:
                continue
            score = sum(correlations) / len(correlations)
            if score > best_score:
                best_reaction, best_score = reaction, score

        if best_reaction is None or best_score < self.config.min_prediction_score:
            return None

        accuracy = self.prediction_accuracy if self._predictions_scored else self.config.default_accuracy
        confidence = min(best_score * (0.5 + 0.5 * accuracy), 1.0)

        prediction = Prediction(best_reaction, confidence)
        self._pending = prediction
        logger.debug(f"Predicted {best_reaction.value} ({confidence:.2f}) from {[s.value for s in signals]}")
        return prediction

    def correlation(self, signal: SignalName, reaction: Reaction) -> float:
        """Co-occurrence count divided by the signal's total occurrences."""
        total = self._signal_totals.get(signal, 0)
        if total == 0:
            return 0.0
        return self._signal_outcomes[signal].get(reaction, 0) / total

    def get_model(self) -> BehaviorModelSnapshot:
        patterns = []
        for signal in list(self._signal_totals):
            for reaction in Reaction:
                correlation = self.correlation(signal, reaction)
                if correlation > self.config.pattern_min_correlation:
                    patterns.append(BehaviorPattern(
                        signal=signal,
                        outcome=reaction,
                        count=self._signal_outcomes[signal].get(reaction, 0),
                        correlation=correlation,
                    ))

        patterns.sort(key=lambda p: p.correlation, reverse=True)

        return BehaviorModelSnapshot(
            patterns=tuple(patterns),
            total_observations=len(self._observations),
            phase=self.phase,
            prediction_accuracy=self.prediction_accuracy,
        )

    def get_status(self) -> dict:
        return {
            'phase': self.phase.value,
            'observations': len(self._observations),
            'predictions_scored': self._predictions_scored,
            'prediction_accuracy': self.prediction_accuracy,
        }

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _log_phase_change(self):
        phase = self.phase
        if phase != self._last_phase:
            logger.info(
                f"✓ Behavior model phase {self._last_phase.value} -> {phase.value} "
                f"({len(self._observations)} observations)"
            )
            self._last_phase = phase

    def __repr__(self):
        return f"<AdaptiveBehaviorModel(phase={self.phase.value}, observations={len(self._observations)})>"

"""
Fusion Engine
Priority cascade reconciling gaze, face and pointer evidence into one intent

Rules, first match wins:
  1. High blink rate                         -> fatigued
  2. Brow furrow + eye darting               -> confused
  3. Head shake + eyes on content            -> confused (conflicted signal)
  4. Head nod + eyes on agree/read           -> agree
  5. Lean back + gaze wander                 -> pulling_away
  6. Brow furrow + steady fixation           -> engaged (concentration)
  7. Lean in + long fixation                 -> engaged
  8. Fixated gaze -> zone intent (boosted when the pointer agrees,
     deep_read on a long fixation with an idle pointer)
  9. Pointer active, eyes unfocused          -> navigate
 10. Otherwise                               -> idle
"""

import time
from typing import Dict, Optional

from intent_system.types import (
    FaceSignalVector,
    GazeState,
    IntentSignal,
    IntentType,
    PointerState,
    SignalSource,
    Zone,
    clamp,
)
from .config import FusionConfig

ZONE_INTENTS: Dict[Zone, Optional[IntentType]] = {
    Zone.AGREE: IntentType.AGREE,
    Zone.DISAGREE: IntentType.DISAGREE,
    Zone.DEEPER: IntentType.DEEPER,
    Zone.FLIP: IntentType.FLIP,
    Zone.READ: IntentType.DEEP_READ,
    Zone.WANDER: None,
}

if set(ZONE_INTENTS) != set(Zone):
    raise RuntimeError("ZONE_INTENTS must map every Zone")

_DEFAULT_CONFIG = FusionConfig()


def zone_to_intent(zone: Zone) -> Optional[IntentType]:
    """Intent implied by dwelling on a zone; None for wander."""
    return ZONE_INTENTS[zone]


def fuse_inputs(
        gaze: Optional[GazeState],
        face: Optional[FaceSignalVector],
        pointer: Optional[PointerState],
        now_ms: Optional[float] = None,
        config: Optional[FusionConfig] = None,
) -> IntentSignal:
    """
    Fuse the three input states into a single IntentSignal.

    Stateless: the result depends only on the arguments.

    Args:
        gaze:    Gaze snapshot, or None when no gaze feed.
        face:    Face signal vector, or None when no face feed.
        pointer: Pointer state, or None when no pointer feed.
        now_ms:  Timestamp for the signal. Defaults to the monotonic clock.
        config:  FusionConfig thresholds.

    Returns:
        IntentSignal with confidence clamped to the rule's range.
    """
    cfg = config or _DEFAULT_CONFIG
    now = time.monotonic() * 1000.0 if now_ms is None else now_ms

    def signal(intent: IntentType, confidence: float, source: SignalSource = SignalSource.FUSED) -> IntentSignal:
        return IntentSignal(intent, clamp(confidence, 0.0, 1.0), source, now)

    idle = signal(IntentType.IDLE, cfg.idle_confidence)

    if gaze is None and face is None and pointer is None:
        return idle

    # Gaze features
    gaze_usable = gaze is not None and gaze.is_usable(cfg.usable_gaze_confidence)
    gaze_confidence = gaze.confidence if gaze is not None else cfg.default_gaze_confidence
    is_fixated = gaze.is_fixated if gaze is not None else False
    fixation_long = (gaze.fixation_duration_ms if gaze is not None else 0.0) > cfg.long_fixation_ms
    blink_rate = gaze.blink_rate if gaze is not None else 0.0
    saccade_rate = gaze.saccade_rate if gaze is not None else 0.0
    zone = gaze.zone if gaze is not None else Zone.WANDER
    eye_darting = saccade_rate > cfg.darting_saccade_rate
    gaze_wandering = zone == Zone.WANDER

    # Face features
    face_tracking = face is not None and face.is_tracking
    brow_furrow = face.brow_furrow if face is not None else 0.0
    lean_in = face.lean_in if face is not None else 0.0
    head_nod = face.head_nod if face is not None else 0.0
    head_shake = face.head_shake if face is not None else 0.0

    pointer_active = pointer.is_active if pointer is not None else False

    # 1. Fatigue
    if blink_rate > cfg.fatigue_blink_rate:
        return signal(IntentType.FATIGUED, clamp(blink_rate / cfg.fatigue_blink_full, 0.5, 1.0))

    # 2. Furrow + darting eyes
    if face_tracking and brow_furrow > cfg.confused_furrow and eye_darting:
        confidence = (brow_furrow + saccade_rate / cfg.confused_saccade_scale) / 2.0
        return signal(IntentType.CONFUSED, clamp(confidence, 0.5, 1.0))

    # 3. Shaking head while looking at content
    if face_tracking and head_shake < cfg.confused_shake and gaze_usable and not gaze_wandering:
        return signal(IntentType.CONFUSED, clamp(abs(head_shake), 0.4, 0.9))

    # 4. Nod + agree/read zone
    if face_tracking and head_nod > cfg.agree_nod and gaze_usable and zone in (Zone.AGREE, Zone.READ):
        return signal(IntentType.AGREE, clamp(head_nod + gaze_confidence, 0.5, 1.0))

    # 5. Lean back + wandering gaze
    if face_tracking and lean_in < cfg.pulling_away_lean and gaze_wandering:
        return signal(IntentType.PULLING_AWAY, clamp(abs(lean_in), 0.4, 0.9))

    # 6. Furrowed but steady reads as concentration
    if face_tracking and brow_furrow > cfg.engaged_furrow and is_fixated and not eye_darting:
        return signal(IntentType.ENGAGED, clamp(brow_furrow + cfg.engaged_furrow_boost, 0.5, 1.0))

    # 7. Lean in + long fixation
    if face_tracking and lean_in > cfg.engaged_lean and fixation_long:
        return signal(IntentType.ENGAGED, clamp(lean_in + cfg.engaged_lean_boost, 0.5, 1.0))

    # 8. Gaze zone intents
    if gaze_usable and is_fixated:
        zone_intent = zone_to_intent(zone)

        if pointer_active and zone_intent is not None:
            return signal(zone_intent, clamp(gaze_confidence + cfg.pointer_agreement_boost, 0.6, 1.0))

        if not pointer_active and fixation_long:
            return signal(IntentType.DEEP_READ, clamp(gaze_confidence, 0.4, 0.9), SignalSource.GAZE)

        if zone_intent is not None:
            return signal(zone_intent, gaze_confidence, SignalSource.GAZE)

    # 9. Pointer active, eyes unfocused
    if pointer_active and (not gaze_usable or not is_fixated):
        return signal(IntentType.NAVIGATE, cfg.navigate_confidence, SignalSource.MOUSE)

    # 10. Fallback
    return idle

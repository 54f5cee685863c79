import pytest

from intent_system.learning import (
    AdaptiveBehaviorModel,
    BehaviorModelConfig,
    ModelPhase,
    SignalName,
    extract_signals,
)
from intent_system.types import FaceSignalVector, Reaction, Zone

from conftest import FakeClock, make_gaze

NODDING = FaceSignalVector(head_nod=0.5, is_tracking=True)
SMILING = FaceSignalVector(smile=0.6, is_tracking=True)

PHASE_ORDER = [ModelPhase.OBSERVE, ModelPhase.MODEL, ModelPhase.PREDICT, ModelPhase.REFINE]


def _model():
    return AdaptiveBehaviorModel(clock=FakeClock())


def _observe(model, count, face=NODDING, outcome=Reaction.AGREE, gaze=None):
    for _ in range(count):
        model.record_observation(gaze, face, outcome)


class TestExtractSignals:
    def test_face_axes_above_threshold(self):
        face = FaceSignalVector(
            head_nod=0.3, head_shake=-0.3, lean_in=-0.3,
            brow_raise=0.3, brow_furrow=0.3, smile=0.3, is_tracking=True,
        )
        assert extract_signals(None, face) == [
            SignalName.HEAD_NOD,
            SignalName.HEAD_SHAKE,
            SignalName.LEAN_BACK,
            SignalName.BROW_RAISE,
            SignalName.BROW_FURROW,
            SignalName.SMILE,
        ]

    def test_threshold_is_strict(self):
        face = FaceSignalVector(head_nod=0.25, lean_in=0.25, is_tracking=True)
        assert extract_signals(None, face) == []

    def test_untracked_face_has_no_signals(self):
        assert extract_signals(None, FaceSignalVector(head_nod=0.9)) == []

    def test_usable_gaze_adds_zone_signal(self):
        assert extract_signals(make_gaze(zone=Zone.DEEPER), None) == [SignalName.GAZE_DEEPER]
        assert extract_signals(make_gaze(zone=Zone.WANDER), None) == [SignalName.GAZE_WANDER]

    def test_unusable_gaze_is_ignored(self):
        assert extract_signals(make_gaze(is_calibrated=False), None) == []
        assert extract_signals(make_gaze(confidence=0.2), None) == []


class TestPhases:
    @pytest.mark.parametrize('count,phase', [
        (0, ModelPhase.OBSERVE),
        (9, ModelPhase.OBSERVE),
        (10, ModelPhase.MODEL),
        (19, ModelPhase.MODEL),
        (20, ModelPhase.PREDICT),
        (40, ModelPhase.PREDICT),
    ])
    def test_phase_by_count(self, count, phase):
        model = _model()
        _observe(model, count)
        assert model.phase == phase

    def test_refine_after_five_scored_predictions(self):
        model = _model()
        _observe(model, 20)

        for i in range(5):
            assert model.phase == ModelPhase.PREDICT
            assert model.predict(None, NODDING) is not None
            model.record_observation(None, NODDING, Reaction.AGREE)

        assert model.phase == ModelPhase.REFINE
        assert model.prediction_accuracy == 1.0

    def test_phase_never_moves_backward(self):
        model = _model()
        seen = []
        for i in range(40):
            if i % 3 == 0:
                model.predict(None, NODDING)
            outcome = Reaction.AGREE if i % 4 else Reaction.FLIP
            model.record_observation(None, NODDING, outcome)
            seen.append(PHASE_ORDER.index(model.phase))
        assert seen == sorted(seen)
        assert model.phase == ModelPhase.REFINE

    def test_unscored_prediction_does_not_count(self):
        model = _model()
        _observe(model, 20)
        for _ in range(10):
            model.predict(None, NODDING)
        assert model.phase == ModelPhase.PREDICT


class TestPredict:
    def test_no_prediction_before_twenty_observations(self):
        model = _model()
        _observe(model, 19)
        assert model.predict(None, NODDING) is None

    def test_no_prediction_without_signals(self):
        model = _model()
        _observe(model, 20)
        assert model.predict(None, FaceSignalVector(is_tracking=True)) is None

    def test_confidence_uses_default_accuracy(self):
        model = _model()
        _observe(model, 20)
        prediction = model.predict(None, NODDING)
        assert prediction.reaction == Reaction.AGREE
        # correlation 1.0 * (0.5 + 0.5 * 0.5)
        assert prediction.confidence == pytest.approx(0.75)

    def test_confidence_tracks_accuracy(self):
        model = _model()
        _observe(model, 20)
        for _ in range(5):
            model.predict(None, NODDING)
            model.record_observation(None, NODDING, Reaction.AGREE)
        assert model.predict(None, NODDING).confidence == pytest.approx(1.0)

    def test_wrong_predictions_lower_accuracy(self):
        model = _model()
        _observe(model, 20)
        model.predict(None, NODDING)
        model.record_observation(None, None, Reaction.FLIP)
        assert model.prediction_accuracy == 0.0
        assert model.get_model().prediction_accuracy == 0.0

    def test_weak_correlation_is_rejected(self):
        model = _model()
        for reaction in Reaction:
            _observe(model, 5, outcome=reaction)
        # 0.25 for every reaction
        assert model.predict(None, NODDING) is None

    def test_score_averages_active_signals(self):
        model = _model()
        _observe(model, 10, face=NODDING, outcome=Reaction.AGREE)
        _observe(model, 10, face=SMILING, outcome=Reaction.DEEPER)

        both = FaceSignalVector(head_nod=0.5, smile=0.6, is_tracking=True)
        prediction = model.predict(None, both)
        # Tie between agree and deeper at 1.0 keeps enum order
        assert prediction.reaction == Reaction.AGREE

        assert model.predict(None, SMILING).reaction == Reaction.DEEPER

    def test_tie_keeps_enum_order(self):
        model = _model()
        _observe(model, 10, outcome=Reaction.DISAGREE)
        _observe(model, 10, outcome=Reaction.AGREE)
        prediction = model.predict(None, NODDING)
        assert prediction.reaction == Reaction.AGREE
        assert prediction.confidence == pytest.approx(0.375)


class TestModelSnapshot:
    def test_patterns_sorted_and_filtered(self):
        model = _model()
        _observe(model, 15, outcome=Reaction.AGREE)
        _observe(model, 4, outcome=Reaction.DISAGREE)
        _observe(model, 1, outcome=Reaction.FLIP)

        snapshot = model.get_model()
        assert snapshot.total_observations == 20
        assert snapshot.phase == ModelPhase.PREDICT

        triples = [(p.signal, p.outcome, p.count) for p in snapshot.patterns]
        # flip at 0.05 falls under the 0.1 cut
        assert triples == [
            (SignalName.HEAD_NOD, Reaction.AGREE, 15),
            (SignalName.HEAD_NOD, Reaction.DISAGREE, 4),
        ]
        assert snapshot.patterns[0].correlation == pytest.approx(0.75)

    def test_snapshot_is_regenerated(self):
        model = _model()
        before = model.get_model()
        _observe(model, 3)
        assert before.total_observations == 0
        assert model.get_model().total_observations == 3

    def test_observations_are_read_only(self):
        model = _model()
        _observe(model, 2)
        assert isinstance(model.observations, tuple)
        assert model.observations[0].signals == (SignalName.HEAD_NOD,)
        assert model.observations[0].outcome == Reaction.AGREE


def test_outcome_accepts_value_string():
    model = _model()
    model.record_observation(None, NODDING, 'deeper')
    assert model.observations[0].outcome == Reaction.DEEPER


def test_unknown_outcome_rejected():
    with pytest.raises(ValueError):
        _model().record_observation(None, NODDING, 'maybe')


def test_invalid_config():
    with pytest.raises(ValueError):
        BehaviorModelConfig(model_after=20, predict_after=10)

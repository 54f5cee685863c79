import pytest

from intent_system.sensors.face import FaceSignalConfig, FaceSignalProcessor
from intent_system.sensors.face.utils import landmarks_to_array
from intent_system.types import FaceSignalVector

from conftest import make_landmarks


def _with_baseline(processor=None, **kwargs):
    processor = processor or FaceSignalProcessor()
    for _ in range(processor.config.baseline_frames):
        processor.process(make_landmarks(**kwargs))
    return processor


class TestLandmarkConversion:
    def test_accepts_tuples_and_objects(self):
        class Landmark:
            def __init__(self, x, y, z):
                self.x, self.y, self.z = x, y, z

        from_tuples = landmarks_to_array([(0.1, 0.2, 0.3), (0.4, 0.5, 0.6)])
        from_objects = landmarks_to_array([Landmark(0.1, 0.2, 0.3), Landmark(0.4, 0.5, 0.6)])
        assert from_tuples.shape == (2, 3)
        assert (from_tuples == from_objects).all()

    def test_two_column_input_gets_zero_depth(self):
        arr = landmarks_to_array([(0.1, 0.2), (0.3, 0.4)])
        assert arr.shape == (2, 3)
        assert (arr[:, 2] == 0).all()

    def test_empty_input(self):
        assert landmarks_to_array(None) is None
        assert landmarks_to_array([]) is None


class TestFaceSignalProcessor:
    def test_missing_face_is_not_tracking(self):
        processor = FaceSignalProcessor()
        assert processor.process(None) == FaceSignalVector.not_tracking()
        assert processor.process(make_landmarks(count=400)) == FaceSignalVector.not_tracking()
        assert processor.frame_count == 0

    def test_baseline_captured_at_fifteenth_frame(self):
        processor = FaceSignalProcessor()
        for _ in range(14):
            processor.process(make_landmarks())
        assert not processor.has_baseline

        processor.process(make_landmarks())
        assert processor.has_baseline
        assert processor.baseline_brow_dist == pytest.approx(0.05)
        assert processor.baseline_lip_width == pytest.approx(0.10)

    def test_baseline_is_kept_after_capture(self):
        processor = _with_baseline()
        for _ in range(30):
            processor.process(make_landmarks(brow_gap=0.08))
        assert processor.baseline_brow_dist == pytest.approx(0.05)

    def test_face_return_does_not_spike(self):
        processor = _with_baseline()
        processor.process(None)
        signals = processor.process(make_landmarks(nose=(0.6, 0.7), scale=1.5))
        assert signals.is_tracking
        assert signals.head_nod == pytest.approx(0.0)
        assert signals.head_shake == pytest.approx(0.0)
        assert signals.lean_in == pytest.approx(0.0)
        assert processor.baseline_brow_dist == pytest.approx(0.05)

    def test_still_face_is_neutral(self):
        processor = _with_baseline()
        signals = processor.process(make_landmarks())
        assert signals.is_tracking
        assert signals.head_nod == pytest.approx(0.0)
        assert signals.head_shake == pytest.approx(0.0)
        assert signals.lean_in == pytest.approx(0.0)
        assert signals.brow_raise == pytest.approx(0.0)
        assert signals.brow_furrow == pytest.approx(0.0)
        assert signals.smile == pytest.approx(0.0)

    def test_nodding_moves_nose_down(self):
        processor = _with_baseline()
        signals = None
        for i in range(1, 11):
            signals = processor.process(make_landmarks(nose=(0.5, 0.5 + 0.01 * i)))
        assert signals.head_nod > 0.3
        assert signals.head_shake == pytest.approx(0.0)

    def test_shaking_moves_nose_sideways(self):
        processor = _with_baseline()
        signals = None
        for i in range(1, 11):
            signals = processor.process(make_landmarks(nose=(0.5 - 0.01 * i, 0.5)))
        assert signals.head_shake < -0.3
        assert signals.head_nod == pytest.approx(0.0)

    def test_leaning_in_grows_face(self):
        processor = _with_baseline()
        signals = None
        scale = 1.0
        for _ in range(10):
            scale *= 1.01
            signals = processor.process(make_landmarks(scale=scale))
        assert signals.lean_in > 0.3

    def test_leaning_back_shrinks_face(self):
        processor = _with_baseline()
        signals = None
        scale = 1.0
        for _ in range(10):
            scale *= 0.99
            signals = processor.process(make_landmarks(scale=scale))
        assert signals.lean_in < -0.3

    def test_brow_furrow_and_raise(self):
        processor = _with_baseline()
        for _ in range(10):
            furrowed = processor.process(make_landmarks(brow_gap=0.03))
        assert furrowed.brow_furrow > 0.9
        assert furrowed.brow_raise < 0.05

        for _ in range(15):
            raised = processor.process(make_landmarks(brow_gap=0.07))
        assert raised.brow_raise > 0.9
        assert raised.brow_furrow < 0.05

    def test_smile_widens_lips(self):
        processor = _with_baseline()
        for _ in range(10):
            signals = processor.process(make_landmarks(lip_width=0.14))
        assert signals.smile > 0.9

    def test_outputs_are_clamped(self):
        processor = _with_baseline()
        for i in range(20):
            y = 0.2 if i % 2 else 0.8
            signals = processor.process(make_landmarks(nose=(y, y), scale=3.0 if i % 2 else 0.3))
            assert -1.0 <= signals.head_nod <= 1.0
            assert -1.0 <= signals.head_shake <= 1.0
            assert -1.0 <= signals.lean_in <= 1.0

    def test_reset_clears_baseline(self):
        processor = _with_baseline()
        processor.reset()
        assert not processor.has_baseline
        assert processor.frame_count == 0

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            FaceSignalConfig(smoothing_alpha=0.0)
        with pytest.raises(ValueError):
            FaceSignalConfig(expected_landmarks=100)

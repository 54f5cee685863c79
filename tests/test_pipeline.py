"""End-to-end session behaviour of IntentPipeline with synthetic feeds."""

import time

import numpy as np
import pytest

from intent_system import ClickTarget, IntentPipeline, IntentType, Reaction
from intent_system.learning import ModelPhase
from intent_system.sensors.face import FaceLandmarkProvider, FaceProviderConfig

from conftest import FakeClock, cluster_points, make_landmarks, make_transform


@pytest.fixture
def pipeline():
    return IntentPipeline(clock=FakeClock(start_ms=0.0))


def _feed_fixation(pipeline, count=60, span_ms=1000.0):
    pipeline.set_gaze_provider_state(is_calibrated=True, confidence=0.7)
    output = None
    for p in cluster_points(count=count, span_ms=span_ms, radius=10.0):
        pipeline.clock.now = p.timestamp_ms
        pipeline.on_gaze(p.x, p.y)
        output = pipeline.tick()
    return output


def _feed_face(pipeline, frames=5, transform=True):
    for _ in range(frames):
        pipeline.clock.advance(33.0)
        pipeline.on_face_frame(make_landmarks(), make_transform() if transform else None)
        pipeline.tick()


def test_idle_without_inputs(pipeline):
    output = pipeline.tick()
    assert output.raw.type == IntentType.IDLE
    assert pipeline.latest() == output


def test_steady_fixation_reads_as_deep_read(pipeline):
    output = _feed_fixation(pipeline)
    assert output.smoothed.type == IntentType.DEEP_READ
    assert output.smoothed.confidence > 0.4
    assert output.is_engaged
    assert pipeline.gaze.zones.current_zone.value == 'read'


def test_pointer_movement_navigates(pipeline):
    pipeline.on_pointer_move(50, 50)
    assert pipeline.tick().raw.type == IntentType.NAVIGATE


def test_face_frames_are_processed_in_tick(pipeline):
    pipeline.on_face_frame(make_landmarks(), make_transform())
    assert pipeline.face_signals.frame_count == 0

    pipeline.tick()
    assert pipeline.face_signals.frame_count == 1
    assert pipeline.head_pose.pose.face_detected


def test_face_frame_buffer_drops_oldest(pipeline):
    for _ in range(10):
        pipeline.on_face_frame(make_landmarks(), make_transform())
    pipeline.tick()
    assert pipeline.face_signals.frame_count == pipeline.config.face_frame_buffer


def test_malformed_transform_does_not_break_tick(pipeline):
    pipeline.on_face_frame(make_landmarks(), np.eye(3))
    pipeline.on_face_frame(make_landmarks(), make_transform())
    output = pipeline.tick()

    assert output is not None
    assert pipeline.face_signals.frame_count == 2
    assert pipeline.head_pose.pose.face_detected
    assert pipeline.get_steering() == (0.0, 0.0)


class TestCapabilities:
    def test_all_available_by_default(self, pipeline):
        assert pipeline.get_status()['capabilities'] == {'gaze': True, 'face': True, 'head_pose': True}

    def test_mark_unavailable_once(self, pipeline, caplog):
        with caplog.at_level('WARNING'):
            pipeline.mark_provider_unavailable('face', 'camera busy')
            pipeline.mark_provider_unavailable('face', 'camera busy')
        assert not pipeline.is_available('face')
        assert pipeline.get_status()['unavailable_reasons'] == {'face': 'camera busy'}
        assert len([r for r in caplog.records if 'face unavailable' in r.getMessage()]) == 1

    def test_unknown_capability(self, pipeline):
        with pytest.raises(ValueError):
            pipeline.mark_provider_unavailable('eeg', 'not a feed')

    def test_face_provider_failure_keeps_session_running(self, pipeline):
        provider = FaceLandmarkProvider(FaceProviderConfig(model_asset_path='/nonexistent/face_landmarker.task'))
        assert pipeline.attach_face_provider(provider) is False

        status = pipeline.get_status()
        assert status['capabilities'] == {'gaze': True, 'face': False, 'head_pose': False}
        assert status['face_provider']['available'] is False

        # Gaze-only operation continues
        output = _feed_fixation(pipeline)
        assert output.smoothed.type == IntentType.DEEP_READ

    def test_unavailable_gaze_is_not_fused(self, pipeline):
        pipeline.mark_provider_unavailable('gaze', 'no tracker')
        pipeline.on_pointer_move(10, 10)
        output = _feed_fixation(pipeline, count=10, span_ms=150.0)
        assert output.raw.type == IntentType.NAVIGATE

    def test_unavailable_head_pose_has_no_steering(self, pipeline):
        _feed_face(pipeline)
        pipeline.mark_provider_unavailable('head_pose', 'disabled')
        assert pipeline.get_steering() is None


class TestOutcomes:
    def test_outcome_feeds_behavior_model(self, pipeline):
        _feed_fixation(pipeline)
        for _ in range(20):
            pipeline.on_outcome(Reaction.AGREE)

        snapshot = pipeline.get_behavior_model()
        assert snapshot.total_observations == 20
        assert snapshot.phase == ModelPhase.PREDICT

        prediction = pipeline.predict_reaction()
        assert prediction.reaction == Reaction.AGREE
        assert prediction.confidence == pytest.approx(0.75)

    def test_outcome_accepts_strings(self, pipeline):
        pipeline.on_outcome('flip')
        assert pipeline.behavior.observations[0].outcome == Reaction.FLIP

    def test_unknown_outcome_rejected(self, pipeline):
        with pytest.raises(ValueError):
            pipeline.on_outcome('maybe')

    def test_click_with_face_feeds_calibration(self, pipeline):
        _feed_face(pipeline)
        click = ClickTarget(target_theta=0.2, target_phi=0.0, view_theta=0.0, view_phi=0.0, max_offset=0.4)
        pipeline.on_outcome(Reaction.DEEPER, click)

        assert pipeline.calibration.sample_count == 1
        assert pipeline.calibration.samples[-1].intended_yaw == pytest.approx(0.5)

    def test_click_without_face_is_not_a_calibration_sample(self, pipeline):
        _feed_face(pipeline, transform=False)
        click = ClickTarget(0.2, 0.0, 0.0, 0.0, 0.4)
        pipeline.on_outcome(Reaction.DEEPER, click)
        assert pipeline.calibration.sample_count == 0
        assert pipeline.behavior.get_model().total_observations == 1

    def test_steering_passes_through_until_calibrated(self, pipeline):
        assert pipeline.get_steering() is None
        _feed_face(pipeline)
        assert pipeline.get_steering() == (0.0, 0.0)


class TestLifecycle:
    def test_background_loop(self):
        pipeline = IntentPipeline()
        received = []
        pipeline.smoothing.on_update = received.append
        pipeline.start()
        try:
            time.sleep(0.15)
            with pytest.raises(RuntimeError):
                pipeline.tick()
        finally:
            pipeline.stop()

        assert received
        assert not pipeline.smoothing.is_running

    def test_context_manager(self):
        with IntentPipeline() as pipeline:
            pipeline.on_gaze(960, 540)
            time.sleep(0.1)
            assert pipeline.smoothing.is_running
        assert not pipeline.smoothing.is_running
        assert pipeline.latest() is not None

    def test_invalid_screen_size(self, pipeline):
        with pytest.raises(ValueError):
            pipeline.set_screen_size(0, 100)

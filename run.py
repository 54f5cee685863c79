"""
Intent System - Standalone Session Runner
Runs one intent-inference session from either:
  - a synthetic gaze / pointer replay (no hardware needed), or
  - a video source through the MediaPipe face provider

Usage:
    python run.py --scenario read --duration 5
    python run.py --video 0 --model face_landmarker.task --duration 30
"""

import argparse
import logging
import signal
import sys
import time

import cv2
import numpy as np

from intent_system import IntentPipeline, PipelineConfig
from intent_system.sensors.face import FaceLandmarkProvider, FaceProviderConfig
from intent_system.types import FusedOutput

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
)
logger = logging.getLogger('intent')

SCENARIOS = ('read', 'wander', 'navigate')

# Synthetic feed rate
GAZE_HZ = 60.0


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run an intent-inference session")
    parser.add_argument('--duration', type=float, default=5.0, help="Session length in seconds")
    parser.add_argument('--scenario', choices=SCENARIOS, default='read',
                        help="Synthetic gaze/pointer pattern (ignored with --video)")
    parser.add_argument('--video', default=None,
                        help="Camera index or video file fed through the face provider")
    parser.add_argument('--model', default=FaceProviderConfig().model_asset_path,
                        help="FaceLandmarker .task model path")
    parser.add_argument('--debug', action='store_true', help="Log per-tick decisions")
    return parser.parse_args(argv)


def _log_output(output: FusedOutput):
    flags = [name for name, on in (
        ('confused', output.is_confused),
        ('fatigued', output.is_fatigued),
        ('engaged', output.is_engaged),
    ) if on]
    logger.info(
        f"intent={output.smoothed.type.value} ({output.smoothed.confidence:.2f}) "
        f"raw={output.raw.type.value} flags={flags or '-'}"
    )


def run_synthetic(pipeline: IntentPipeline, scenario: str, duration: float):
    """Feed generated gaze (and pointer) samples and tick in real time."""
    rng = np.random.default_rng()
    screen_w = pipeline.config.gaze.screen_width
    screen_h = pipeline.config.gaze.screen_height
    pipeline.set_gaze_provider_state(is_calibrated=True, confidence=0.7)

    interval = 1.0 / GAZE_HZ
    end = time.monotonic() + duration
    next_report = time.monotonic() + 1.0

    while time.monotonic() < end:
        if scenario == 'read':
            x, y = screen_w / 2 + rng.normal(0, 3), screen_h / 2 + rng.normal(0, 3)
        else:
            x, y = rng.uniform(0, screen_w), rng.uniform(0, screen_h)
        pipeline.on_gaze(x, y)

        if scenario == 'navigate':
            pipeline.on_pointer_move(rng.uniform(0, screen_w), rng.uniform(0, screen_h))

        output = pipeline.tick()
        if time.monotonic() >= next_report:
            _log_output(output)
            next_report += 1.0
        time.sleep(interval)


def run_video(pipeline: IntentPipeline, source: str, model_path: str, duration: float):
    """Feed camera / video frames through the face provider."""
    provider = FaceLandmarkProvider(FaceProviderConfig(model_asset_path=model_path))
    if not pipeline.attach_face_provider(provider):
        logger.error("✗ Face provider unavailable — nothing to run from video")
        return

    capture = cv2.VideoCapture(int(source) if source.isdigit() else source)
    if not capture.isOpened():
        logger.error(f"✗ Could not open video source {source}")
        provider.stop()
        return

    pipeline.mark_provider_unavailable('gaze', 'no gaze provider in video mode')
    pipeline.start()
    end = time.monotonic() + duration
    next_report = time.monotonic() + 1.0

    try:
        while time.monotonic() < end:
            ok, frame = capture.read()
            if not ok:
                logger.info("Video source exhausted")
                break
            pipeline.on_video_frame(frame)

            if time.monotonic() >= next_report:
                output = pipeline.latest()
                if output is not None:
                    _log_output(output)
                steering = pipeline.get_steering()
                if steering is not None:
                    logger.info(f"steering yaw={steering[0]:+.2f} pitch={steering[1]:+.2f}")
                next_report += 1.0
    finally:
        capture.release()
        pipeline.stop()


def main(argv=None):
    args = _parse_args(argv)
    if args.debug:
        logging.getLogger('intent_system').setLevel(logging.DEBUG)

    pipeline = IntentPipeline(PipelineConfig())

    def shutdown(signum, frame):
        logger.info("Shutdown signal received — stopping pipeline...")
        pipeline.stop()
        sys.exit(0)

    signal.signal(signal.SIGTERM, shutdown)
    signal.signal(signal.SIGINT, shutdown)

    logger.info(f"Session starting ({args.duration:.0f}s)")
    if args.video is not None:
        run_video(pipeline, args.video, args.model, args.duration)
    else:
        run_synthetic(pipeline, args.scenario, args.duration)

    model = pipeline.get_behavior_model()
    logger.info(f"✓ Session finished — status: {pipeline.get_status()['capabilities']}, "
                f"behavior phase: {model.phase.value}")


if __name__ == '__main__':
    main()

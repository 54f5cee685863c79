"""
Learning Module for the Intent System
Online per-user learners fed by confirmed outcomes

Components:
- AdaptiveBehaviorModel: signal -> reaction correlations, phased observe/model/predict/refine
- PassiveCalibrationLearner: head pose steering correction learned from clicks
"""

from .config import BehaviorModelConfig, CalibrationConfig
from .behavior_model import (
    AdaptiveBehaviorModel,
    BehaviorModelSnapshot,
    BehaviorObservation,
    BehaviorPattern,
    ModelPhase,
    Prediction,
    SignalName,
    extract_signals,
)
from .calibration_learner import (
    CalibrationSample,
    Correction,
    PassiveCalibrationLearner,
    wrap_angle,
)

__all__ = [
    'AdaptiveBehaviorModel',
    'BehaviorModelSnapshot',
    'BehaviorObservation',
    'BehaviorPattern',
    'ModelPhase',
    'Prediction',
    'SignalName',
    'extract_signals',
    'PassiveCalibrationLearner',
    'CalibrationSample',
    'Correction',
    'wrap_angle',
    'BehaviorModelConfig',
    'CalibrationConfig',
]

__version__ = '1.0.0'

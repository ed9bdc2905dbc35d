"""
Core Module for the FormCoach scoring engine.

Data types, joint angle extraction, the phase-cycle model and rep tracking.
"""

from .data_types import (
    Point3D, LandmarkSet, PoseLandmarkIndex, JointType, JointAngleSet,
    PhaseName, Phase, ExerciseConfig, PhaseLocation, ScoreResult,
    KeyFrame, Feedback, FeedbackThresholds, Severity,
)
from .kinematics import (
    JOINT_DEFINITIONS, JointDefinition, calculate_joint_angle,
    calculate_angle_from_landmarks, calculate_key_angles,
)
from .phase_model import locate, expected_angle_for_phase
from .rep_tracker import CycleTracker

__all__ = [
    # Data types
    'Point3D', 'LandmarkSet', 'PoseLandmarkIndex', 'JointType', 'JointAngleSet',
    'PhaseName', 'Phase', 'ExerciseConfig', 'PhaseLocation', 'ScoreResult',
    'KeyFrame', 'Feedback', 'FeedbackThresholds', 'Severity',

    # Kinematics
    'JOINT_DEFINITIONS', 'JointDefinition', 'calculate_joint_angle',
    'calculate_angle_from_landmarks', 'calculate_key_angles',

    # Phase model
    'locate', 'expected_angle_for_phase',

    # Rep tracking
    'CycleTracker',
]

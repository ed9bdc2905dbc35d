# FormCoach scoring engine
# Exercise-form scoring over streams of joint angles

from .core import (
    JointType, JointAngleSet, ExerciseConfig, Phase, PhaseName,
    KeyFrame, calculate_key_angles, locate, CycleTracker,
)
from .modules import (
    score_exercise, generate_coaching_text, find_closest_keyframe,
    compare_poses, build_keyframes, ExerciseSession, KeyframeSession,
)
from .utils import SessionLogger

__all__ = [
    'JointType',
    'JointAngleSet',
    'ExerciseConfig',
    'Phase',
    'PhaseName',
    'KeyFrame',
    'calculate_key_angles',
    'locate',
    'CycleTracker',
    'score_exercise',
    'generate_coaching_text',
    'find_closest_keyframe',
    'compare_poses',
    'build_keyframes',
    'ExerciseSession',
    'KeyframeSession',
    'SessionLogger',
]

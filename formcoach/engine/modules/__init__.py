"""
Modules Package for the FormCoach scoring engine.

Scoring, keyframe comparison, coaching speech and sessions.
"""

from .scoring import score_deviation, score_exercise, generate_coaching_text
from .keyframes import find_closest_keyframe, compare_poses, build_keyframes
from .coaching import SpeechCommand, SpeechGate, SpeechPriority
from .session import ExerciseSession, FrameOutcome, KeyframeSession, KeyframeOutcome

__all__ = [
    # Scoring
    'score_deviation', 'score_exercise', 'generate_coaching_text',

    # Keyframes
    'find_closest_keyframe', 'compare_poses', 'build_keyframes',

    # Coaching
    'SpeechCommand', 'SpeechGate', 'SpeechPriority',

    # Sessions
    'ExerciseSession', 'FrameOutcome', 'KeyframeSession', 'KeyframeOutcome',
]

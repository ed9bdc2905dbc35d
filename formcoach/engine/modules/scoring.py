"""
Scoring Module for FormCoach.

Maps the deviation between the observed and expected joint angle to a
0-100 score and a directional instruction.

Score tiers (tol = tolerance, diff = |current - expected|):

    diff <= 0.5·tol   100                                     "Perfect!"
    diff <= tol       100 - ((diff - 0.5·tol) / 0.5·tol)·15   "Great form!"
    diff <= 2·tol     85 - ((diff - tol) / tol)·35            corrective
    diff >  2·tol     max(20, 50 - ((diff - 2·tol) / tol)·30)  urgent

The score is floored at 20 so a performer always gets partial credit.
Corrective and urgent messages depend on the phase: in READY/HOLD they say
where to move, in RAISE/LOWER they comment on timing.

Author: FormCoach Team
Version: 1.0.0
"""

from typing import Optional, Tuple
import logging
import math

from ..core.data_types import (
    ExerciseConfig, JointAngleSet, PhaseName, ScoreResult,
)
from ..core.phase_model import locate

logger = logging.getLogger(__name__)

MIN_SCORE = 20
COACHING_SCORE_THRESHOLD = 85

PERFECT_FEEDBACK = "Perfect! Keep it up!"
GREAT_FEEDBACK = "Great form!"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +infinity."""
    return int(math.floor(value + 0.5))


def _phase_kind(phase) -> Optional[PhaseName]:
    try:
        return PhaseName(phase)
    except ValueError:
        return None


def corrective_feedback(phase, current: float, expected: float, joint_name: str) -> str:
    """Directional feedback for a moderate deviation (tol < diff <= 2·tol)."""
    kind = _phase_kind(phase)

    if kind == PhaseName.READY:
        if current > expected:
            return f"Lower your {joint_name} and get ready"
        return "Hold steady, get ready"
    if kind == PhaseName.RAISE:
        if current < expected:
            return f"Raise your {joint_name} faster"
        return "Slow down, you're ahead"
    if kind == PhaseName.HOLD:
        if current < expected:
            return f"Raise your {joint_name} higher and hold"
        return f"Lower your {joint_name} slightly and hold"
    if kind == PhaseName.LOWER:
        if current > expected:
            return f"Lower your {joint_name} faster"
        return "Slow down the lowering"
    return f"Adjust your {joint_name}"


def urgent_feedback(phase, current: float, expected: float, joint_name: str) -> str:
    """Directional feedback for a large deviation (diff > 2·tol)."""
    kind = _phase_kind(phase)

    if kind == PhaseName.READY:
        if current > expected:
            return f"Lower your {joint_name} to starting position"
        return "Hold your starting position"
    if kind == PhaseName.RAISE:
        if current < expected:
            return f"Raise your {joint_name} now!"
        return "Wait - you're moving too fast"
    if kind == PhaseName.HOLD:
        if current < expected:
            return f"Raise your {joint_name} and hold steady"
        return f"Lower your {joint_name} and hold steady"

    # LOWER and anything unrecognized
    if current > expected:
        return f"Lower your {joint_name} now!"
    return "You're lowering too fast"


def score_deviation(
    current_angle: float,
    expected_angle: float,
    phase,
    tolerance: float,
    joint_name: str = "joint"
) -> Tuple[int, str]:
    """
    Score one observation against its expected angle.

    Args:
        current_angle: Observed joint angle (degrees).
        expected_angle: Expected joint angle (degrees).
        phase: Active phase (PhaseName or label).
        tolerance: On-target deviation (degrees), > 0.
        joint_name: Display name used in the feedback text.

    Returns:
        Tuple[score, feedback]: score is an integer in [20, 100].
    """
    diff = abs(current_angle - expected_angle)
    half = tolerance * 0.5

    if tolerance <= 0:
        logger.warning(f"[SCORER] Non-positive tolerance {tolerance}, exact match required")
        if diff == 0:
            return 100, PERFECT_FEEDBACK
        return MIN_SCORE, urgent_feedback(phase, current_angle, expected_angle, joint_name)

    if diff <= half:
        score = 100.0
        feedback = PERFECT_FEEDBACK
    elif diff <= tolerance:
        score = 100 - ((diff - half) / half) * 15
        feedback = GREAT_FEEDBACK
    elif diff <= tolerance * 2:
        score = 85 - ((diff - tolerance) / tolerance) * 35
        feedback = corrective_feedback(phase, current_angle, expected_angle, joint_name)
    else:
        score = max(MIN_SCORE, 50 - ((diff - tolerance * 2) / tolerance) * 30)
        feedback = urgent_feedback(phase, current_angle, expected_angle, joint_name)

    return max(MIN_SCORE, round_half_up(score)), feedback


def score_exercise(
    current_angles: JointAngleSet,
    config: ExerciseConfig,
    elapsed: float
) -> ScoreResult:
    """
    Score one frame against the exercise's time model.

    A missing tracked joint is scored as angle 0 and flagged with
    `has_reading=False`.

    Args:
        current_angles: Joint angles of the frame.
        config: Exercise description.
        elapsed: Active exercise time (seconds).

    Returns:
        ScoreResult for this frame.
    """
    if not isinstance(current_angles, JointAngleSet):
        current_angles = JointAngleSet(current_angles)

    joint = config.tracked_joint
    current_angle, has_reading = current_angles.get_or_default(joint, 0.0)
    if not has_reading:
        logger.debug(f"[SCORER] No reading for {joint.value}, scoring as 0")

    location = locate(elapsed, config)
    score, feedback = score_deviation(
        current_angle,
        location.expected_angle,
        location.phase_name,
        config.tolerance,
        joint.display_name,
    )

    return ScoreResult(
        overall_score=score,
        current_phase=location.phase_name,
        expected_angle=round_half_up(location.expected_angle),
        current_angle=round_half_up(current_angle),
        feedback=feedback,
        phase_progress=location.phase_progress,
        cycle_progress=location.cycle_progress,
        has_reading=has_reading,
    )


def generate_coaching_text(
    result: ScoreResult,
    threshold: int = COACHING_SCORE_THRESHOLD
) -> Optional[str]:
    """
    Coaching utterance for a score result.

    Returns None when the score is good enough that feedback would be noise.
    """
    if result.overall_score >= threshold:
        return None
    return result.feedback

"""
Keyframe Reference Module for FormCoach.

Alternate comparison mode: live joint angles are matched against the
nearest snapshot of a recorded reference performance instead of the
analytic phase model.

Author: FormCoach Team
Version: 1.0.0
"""

from typing import Iterable, List, Optional, Sequence, Tuple
import logging

from ..core.data_types import (
    Feedback, FeedbackThresholds, JointAngleSet, JointType, KeyFrame,
    LandmarkSet, Severity,
)
from ..core.kinematics import calculate_key_angles
from ...helpers.exceptions import EmptyReferenceError

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLDS = FeedbackThresholds(minor=15.0, major=30.0)
DEFAULT_SAMPLE_INTERVAL = 0.1
_TIME_EPSILON = 1e-9

OVERALL_JOINT = "overall"
GOOD_FORM_MESSAGE = "Good form! Keep it up"


def find_closest_keyframe(keyframes: Sequence[KeyFrame], query_time: float) -> KeyFrame:
    """
    Nearest keyframe to a reference time.

    Linear scan; on equal distance the first keyframe encountered wins.

    Raises:
        EmptyReferenceError: If `keyframes` is empty.
    """
    if not keyframes:
        raise EmptyReferenceError("Cannot search an empty keyframe sequence")

    closest = keyframes[0]
    best_distance = abs(closest.timestamp - query_time)
    for keyframe in keyframes[1:]:
        distance = abs(keyframe.timestamp - query_time)
        if distance < best_distance:
            closest = keyframe
            best_distance = distance
    return closest


def compare_poses(
    user_angles: JointAngleSet,
    reference_keyframe: KeyFrame,
    thresholds: FeedbackThresholds = DEFAULT_THRESHOLDS
) -> List[Feedback]:
    """
    Per-joint feedback of a live pose against a reference keyframe.

    Joints are visited in the fixed JointType order. A joint missing on
    either side produces no entry. When no joint exceeds the minor
    threshold a single "overall / good" entry is returned.
    """
    if not isinstance(user_angles, JointAngleSet):
        user_angles = JointAngleSet(user_angles)
    reference_angles = reference_keyframe.key_angles

    feedback: List[Feedback] = []
    for joint in JointType:
        if joint not in user_angles or joint not in reference_angles:
            continue

        diff = abs(user_angles[joint] - reference_angles[joint])
        name = joint.display_name

        if diff > thresholds.major:
            feedback.append(Feedback(
                joint=name,
                message=f"Straighten your {name} more",
                severity=Severity.MAJOR,
            ))
        elif diff > thresholds.minor:
            feedback.append(Feedback(
                joint=name,
                message=f"Adjust your {name} slightly",
                severity=Severity.MINOR,
            ))

    if not feedback:
        feedback.append(Feedback(
            joint=OVERALL_JOINT,
            message=GOOD_FORM_MESSAGE,
            severity=Severity.GOOD,
        ))

    return feedback


def build_keyframes(
    frames: Iterable[Tuple[float, Optional[LandmarkSet]]],
    sample_interval: float = DEFAULT_SAMPLE_INTERVAL
) -> List[KeyFrame]:
    """
    Sample a reference recording into keyframes.

    Args:
        frames: (timestamp_seconds, landmarks) pairs in playback order;
            landmarks is None for frames without a detected pose.
        sample_interval: Minimum spacing between kept frames (seconds).

    Returns:
        Keyframes ordered by timestamp.
    """
    keyframes: List[KeyFrame] = []
    next_sample_time: Optional[float] = None
    skipped = 0

    for timestamp, landmarks in frames:
        if next_sample_time is not None and timestamp < next_sample_time - _TIME_EPSILON:
            continue
        next_sample_time = timestamp + sample_interval

        if not landmarks:
            skipped += 1
            continue

        keyframes.append(KeyFrame(
            timestamp=float(timestamp),
            key_angles=calculate_key_angles(landmarks),
            landmarks=landmarks,
        ))

    keyframes.sort(key=lambda kf: kf.timestamp)
    logger.info(f"[KEYFRAMES] Built {len(keyframes)} keyframes ({skipped} sampled frames without pose)")
    return keyframes

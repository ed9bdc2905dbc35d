"""
Kinematics Module for FormCoach.

Joint angle extraction from pose landmarks.

Formula:
    For three points A, B, C with B the vertex:

    θ = |atan2(C.y - B.y, C.x - B.x) - atan2(A.y - B.y, A.x - B.x)|

    converted to degrees and reflected (360 - θ) when above 180, so the
    result is always the undirected angle in [0, 180].

Author: FormCoach Team
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence
import logging
import math

from .data_types import JointAngleSet, JointType, Point3D, PoseLandmarkIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JointDefinition:
    """
    A joint defined by three landmark indices.

    Attributes:
        proximal: Index of the first point (closer to the torso).
        vertex: Index of the angle vertex (the joint itself).
        distal: Index of the last point.
    """
    proximal: int
    vertex: int
    distal: int


# Landmark triples per joint. Swapping the vertex changes the measured joint.
JOINT_DEFINITIONS: Dict[JointType, JointDefinition] = {
    # Elbow: shoulder -> elbow -> wrist
    JointType.LEFT_ELBOW: JointDefinition(
        proximal=PoseLandmarkIndex.LEFT_SHOULDER,
        vertex=PoseLandmarkIndex.LEFT_ELBOW,
        distal=PoseLandmarkIndex.LEFT_WRIST,
    ),
    JointType.RIGHT_ELBOW: JointDefinition(
        proximal=PoseLandmarkIndex.RIGHT_SHOULDER,
        vertex=PoseLandmarkIndex.RIGHT_ELBOW,
        distal=PoseLandmarkIndex.RIGHT_WRIST,
    ),

    # Knee: hip -> knee -> ankle
    JointType.LEFT_KNEE: JointDefinition(
        proximal=PoseLandmarkIndex.LEFT_HIP,
        vertex=PoseLandmarkIndex.LEFT_KNEE,
        distal=PoseLandmarkIndex.LEFT_ANKLE,
    ),
    JointType.RIGHT_KNEE: JointDefinition(
        proximal=PoseLandmarkIndex.RIGHT_HIP,
        vertex=PoseLandmarkIndex.RIGHT_KNEE,
        distal=PoseLandmarkIndex.RIGHT_ANKLE,
    ),

    # Shoulder: elbow -> shoulder -> hip
    JointType.LEFT_SHOULDER: JointDefinition(
        proximal=PoseLandmarkIndex.LEFT_ELBOW,
        vertex=PoseLandmarkIndex.LEFT_SHOULDER,
        distal=PoseLandmarkIndex.LEFT_HIP,
    ),
    JointType.RIGHT_SHOULDER: JointDefinition(
        proximal=PoseLandmarkIndex.RIGHT_ELBOW,
        vertex=PoseLandmarkIndex.RIGHT_SHOULDER,
        distal=PoseLandmarkIndex.RIGHT_HIP,
    ),

    # Hip: shoulder -> hip -> knee
    JointType.LEFT_HIP: JointDefinition(
        proximal=PoseLandmarkIndex.LEFT_SHOULDER,
        vertex=PoseLandmarkIndex.LEFT_HIP,
        distal=PoseLandmarkIndex.LEFT_KNEE,
    ),
    JointType.RIGHT_HIP: JointDefinition(
        proximal=PoseLandmarkIndex.RIGHT_SHOULDER,
        vertex=PoseLandmarkIndex.RIGHT_HIP,
        distal=PoseLandmarkIndex.RIGHT_KNEE,
    ),
}


def calculate_joint_angle(a: Point3D, b: Point3D, c: Point3D) -> float:
    """
    Calculate the angle at `b` formed by a-b-c, using x/y only.

    Coincident points are not handled specially; callers must not feed them.

    Args:
        a: Proximal point.
        b: Vertex point.
        c: Distal point.

    Returns:
        Angle in degrees, in [0, 180].
    """
    radians = math.atan2(c.y - b.y, c.x - b.x) - math.atan2(a.y - b.y, a.x - b.x)
    angle = abs(math.degrees(radians))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def calculate_angle_from_landmarks(
    landmarks: Sequence[Point3D],
    joint_type: JointType
) -> Optional[float]:
    """
    Calculate one joint angle from a frame's landmarks.

    Args:
        landmarks: Pose landmarks indexed by PoseLandmarkIndex.
        joint_type: Joint to measure.

    Returns:
        Angle in degrees, or None if the frame lacks the joint's landmarks.
    """
    definition = JOINT_DEFINITIONS[joint_type]
    if len(landmarks) <= max(definition.proximal, definition.vertex, definition.distal):
        return None

    return calculate_joint_angle(
        landmarks[definition.proximal],
        landmarks[definition.vertex],
        landmarks[definition.distal],
    )


def calculate_key_angles(landmarks: Sequence[Point3D]) -> JointAngleSet:
    """
    Calculate all tracked joint angles of one frame.

    Joints whose landmarks are missing are left out of the result.
    """
    angles = {}
    for joint_type in JointType:
        angle = calculate_angle_from_landmarks(landmarks, joint_type)
        if angle is None:
            continue
        angles[joint_type] = angle

    if len(landmarks) < PoseLandmarkIndex.NUM_LANDMARKS:
        logger.debug(
            f"[KINEMATICS] Partial frame: {len(landmarks)}/{PoseLandmarkIndex.NUM_LANDMARKS} landmarks, "
            f"{len(angles)}/{len(JointType)} joints measured"
        )

    return JointAngleSet(angles)

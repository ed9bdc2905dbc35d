"""
Data Types Module for FormCoach.

Standard data classes and type definitions shared by the scoring engine:
landmarks, the closed joint enumeration, exercise phases and configs,
score results, reference keyframes and feedback entries.

Author: FormCoach Team
Version: 1.0.0
"""

from dataclasses import dataclass, field
from collections.abc import Mapping
from typing import Dict, Iterator, List, Optional, Tuple, Union
from enum import Enum


@dataclass(frozen=True)
class Point3D:
    """
    A single landmark point.

    Attributes:
        x: X coordinate (normalized 0-1).
        y: Y coordinate (normalized 0-1).
        z: Depth, 0 when the source is 2D only.
        visibility: Landmark confidence (0-1), None if not provided.
    """
    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None


@dataclass
class LandmarkSet:
    """
    Pose landmarks of one frame, indexed by PoseLandmarkIndex.

    Attributes:
        landmarks: List of Point3D.
        timestamp_ms: Frame timestamp (milliseconds).
    """
    landmarks: List[Point3D]
    timestamp_ms: int = 0

    def __len__(self) -> int:
        return len(self.landmarks)

    def __getitem__(self, index: int) -> Point3D:
        return self.landmarks[index]

    def __iter__(self) -> Iterator[Point3D]:
        return iter(self.landmarks)


class PoseLandmarkIndex:
    """
    MediaPipe Pose landmark indices used by the joint table.
    33 landmarks in total; only body points are listed.
    """
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16

    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28

    NUM_LANDMARKS = 33


class JointType(Enum):
    """
    The closed set of tracked joints.

    Member order is the fixed enumeration order used for keyframe feedback.
    """
    LEFT_ELBOW = "left_elbow"
    RIGHT_ELBOW = "right_elbow"
    LEFT_KNEE = "left_knee"
    RIGHT_KNEE = "right_knee"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"

    @property
    def display_name(self) -> str:
        """Human readable name, e.g. 'left elbow'."""
        return self.value.replace("_", " ")

    @classmethod
    def parse(cls, name: Union[str, "JointType"]) -> "JointType":
        """
        Resolve a joint from its value, enum name or legacy camelCase key.

        Accepts "left_elbow", "LEFT_ELBOW", "left elbow" and "leftElbow".

        Raises:
            ValueError: If the name is not one of the 8 tracked joints.
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip().replace(" ", "_").replace("-", "_")
        # camelCase -> snake_case
        camel = "".join("_" + ch.lower() if ch.isupper() else ch for ch in key).lstrip("_")
        for candidate in (key.lower(), camel):
            for joint in cls:
                if joint.value == candidate:
                    return joint
        raise ValueError(f"Unknown joint: {name!r}")


class PhaseName(str, Enum):
    """Phase kinds of one repetition, in their usual order."""
    READY = "ready"
    RAISE = "raise"
    HOLD = "hold"
    LOWER = "lower"


class Severity(str, Enum):
    """Severity of a keyframe feedback entry."""
    GOOD = "good"
    MINOR = "minor"
    MAJOR = "major"


class JointAngleSet(Mapping):
    """
    Immutable mapping JointType -> angle in degrees.

    Produced fresh for each frame. Joints without a reading are simply absent;
    use `get_or_default` for the explicit missing-joint fallback.
    """

    __slots__ = ("_angles",)

    def __init__(self, angles: Optional[Mapping] = None):
        parsed: Dict[JointType, float] = {}
        for key, value in (angles or {}).items():
            parsed[JointType.parse(key)] = float(value)
        self._angles = parsed

    def __getitem__(self, joint: JointType) -> float:
        return self._angles[JointType.parse(joint)]

    def __iter__(self) -> Iterator[JointType]:
        # Always yield in the fixed joint order
        return (joint for joint in JointType if joint in self._angles)

    def __len__(self) -> int:
        return len(self._angles)

    def __contains__(self, joint) -> bool:
        try:
            return JointType.parse(joint) in self._angles
        except ValueError:
            return False

    def __repr__(self) -> str:
        inner = ", ".join(f"{j.value}={a:.1f}" for j, a in self.items())
        return f"JointAngleSet({inner})"

    def __eq__(self, other) -> bool:
        if isinstance(other, JointAngleSet):
            return self._angles == other._angles
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(sorted((j.value, a) for j, a in self._angles.items())))

    def get_or_default(self, joint: JointType, default: float = 0.0) -> Tuple[float, bool]:
        """
        Look up a joint angle, falling back to `default` when absent.

        Returns:
            Tuple[angle, has_reading].
        """
        joint = JointType.parse(joint)
        if joint in self._angles:
            return self._angles[joint], True
        return default, False

    def to_dict(self) -> Dict[str, float]:
        return {joint.value: angle for joint, angle in self.items()}


@dataclass(frozen=True)
class Phase:
    """
    One named sub-interval of a repetition.

    Attributes:
        name: Phase kind. Unknown names are kept as raw strings.
        duration: Length in seconds.
    """
    name: Union[PhaseName, str]
    duration: float

    @property
    def kind(self) -> Optional[PhaseName]:
        """PhaseName for known phases, None otherwise."""
        try:
            return PhaseName(self.name)
        except ValueError:
            return None

    @property
    def label(self) -> str:
        return self.name.value if isinstance(self.name, PhaseName) else str(self.name)


@dataclass(frozen=True)
class ExerciseConfig:
    """
    Immutable description of an exercise's expected motion.

    Attributes:
        tracked_joint: The joint whose angle is scored.
        resting_angle: Angle at rest (ready / end of lower).
        target_angle: Angle at the top of the movement (hold).
        tolerance: On-target deviation in degrees.
        phases: Ordered phases forming one repetition cycle.
    """
    tracked_joint: JointType
    resting_angle: float
    target_angle: float
    tolerance: float
    phases: Tuple[Phase, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "tracked_joint", JointType.parse(self.tracked_joint))
        object.__setattr__(self, "phases", tuple(self.phases))

    @property
    def cycle_duration(self) -> float:
        """Sum of all phase durations."""
        return float(sum(phase.duration for phase in self.phases))


@dataclass(frozen=True)
class PhaseLocation:
    """
    Where an elapsed time falls in the repetition cycle.

    Attributes:
        expected_angle: Interpolated target angle at this instant.
        phase_name: Active phase label.
        phase_progress: Progress through the active phase [0, 1).
        cycle_progress: Progress through the whole cycle [0, 1).
        is_fallback: True when no phase interval matched.
    """
    expected_angle: float
    phase_name: str
    phase_progress: float
    cycle_progress: float
    is_fallback: bool = False


@dataclass(frozen=True)
class ScoreResult:
    """
    Per-frame scoring output.

    Attributes:
        overall_score: Integer score 0-100.
        current_phase: Active phase label.
        expected_angle: Expected angle (rounded).
        current_angle: Observed angle (rounded).
        feedback: Instruction text.
        phase_progress: Progress through the active phase [0, 1).
        cycle_progress: Progress through the cycle [0, 1).
        has_reading: False when the tracked joint had no angle this frame.
    """
    overall_score: int
    current_phase: str
    expected_angle: int
    current_angle: int
    feedback: str
    phase_progress: float
    cycle_progress: float
    has_reading: bool = True

    def to_dict(self) -> dict:
        return {
            "overallScore": self.overall_score,
            "currentPhase": self.current_phase,
            "expectedAngle": self.expected_angle,
            "currentAngle": self.current_angle,
            "feedback": self.feedback,
            "phaseProgress": self.phase_progress,
            "cycleProgress": self.cycle_progress,
            "hasReading": self.has_reading,
        }


@dataclass(frozen=True)
class KeyFrame:
    """
    Timestamped snapshot of a reference recording.

    Attributes:
        timestamp: Position within the reference recording (seconds).
        key_angles: Joint angles of the snapshot.
        landmarks: Raw landmarks, retained for re-display.
    """
    timestamp: float
    key_angles: JointAngleSet
    landmarks: Optional[LandmarkSet] = None


@dataclass(frozen=True)
class Feedback:
    """Keyframe-mode feedback entry."""
    joint: str
    message: str
    severity: Severity

    def to_dict(self) -> dict:
        return {"joint": self.joint, "message": self.message, "severity": self.severity.value}


@dataclass(frozen=True)
class FeedbackThresholds:
    """Per-joint deviation thresholds (degrees) for keyframe comparison."""
    minor: float = 15.0
    major: float = 30.0

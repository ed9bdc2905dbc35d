from pathlib import Path

import pytest

from formcoach.core.config import Settings
from formcoach.engine.core.data_types import (
    ExerciseConfig, JointType, LandmarkSet, Phase, PhaseName, Point3D, PoseLandmarkIndex,
)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@pytest.fixture
def arm_raise_config():
    """resting 0, target 90, tolerance 10, cycle = ready 1 + raise 2 + hold 1 + lower 2 = 6s."""
    return ExerciseConfig(
        tracked_joint=JointType.LEFT_SHOULDER,
        resting_angle=0.0,
        target_angle=90.0,
        tolerance=10.0,
        phases=(
            Phase(PhaseName.READY, 1.0),
            Phase(PhaseName.RAISE, 2.0),
            Phase(PhaseName.HOLD, 1.0),
            Phase(PhaseName.LOWER, 2.0),
        ),
    )


@pytest.fixture
def session_settings():
    return Settings(
        START_COUNTDOWN_SECONDS=5.0,
        REST_SECONDS=5.0,
        COACH_INTERVAL_SECONDS=3.0,
        SCORE_DISPLAY_INTERVAL_SECONDS=0.5,
        COACHING_SCORE_THRESHOLD=85,
        SPEECH_DEBOUNCE_SECONDS=2.0,
        GOOD_FORM_SPEECH_DELAY_SECONDS=5.0,
        KEYFRAME_SAMPLE_INTERVAL=0.1,
        MINOR_THRESHOLD=15.0,
        MAJOR_THRESHOLD=30.0,
    )


@pytest.fixture
def catalog_path():
    return DATA_DIR / "exercises.json"


def make_landmarks(points=None, timestamp_ms=0):
    """
    Full 33-point pose with every landmark at a distinct spot, overridden by
    `points` (index -> (x, y)).
    """
    landmarks = [Point3D(x=0.01 * i, y=0.5 + 0.003 * i) for i in range(PoseLandmarkIndex.NUM_LANDMARKS)]
    for index, (x, y) in (points or {}).items():
        landmarks[index] = Point3D(x=x, y=y)
    return LandmarkSet(landmarks=landmarks, timestamp_ms=timestamp_ms)


@pytest.fixture
def standing_pose():
    """Upright figure: arms hanging, legs straight (image y grows downward)."""
    return make_landmarks({
        PoseLandmarkIndex.LEFT_SHOULDER: (0.6, 0.3),
        PoseLandmarkIndex.RIGHT_SHOULDER: (0.4, 0.3),
        PoseLandmarkIndex.LEFT_ELBOW: (0.6, 0.45),
        PoseLandmarkIndex.RIGHT_ELBOW: (0.4, 0.45),
        PoseLandmarkIndex.LEFT_WRIST: (0.6, 0.6),
        PoseLandmarkIndex.RIGHT_WRIST: (0.4, 0.6),
        PoseLandmarkIndex.LEFT_HIP: (0.58, 0.6),
        PoseLandmarkIndex.RIGHT_HIP: (0.42, 0.6),
        PoseLandmarkIndex.LEFT_KNEE: (0.58, 0.75),
        PoseLandmarkIndex.RIGHT_KNEE: (0.42, 0.75),
        PoseLandmarkIndex.LEFT_ANKLE: (0.58, 0.9),
        PoseLandmarkIndex.RIGHT_ANKLE: (0.42, 0.9),
    })


@pytest.fixture
def landmark_factory():
    return make_landmarks

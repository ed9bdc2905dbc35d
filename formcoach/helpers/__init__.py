from .exceptions import (
    FormCoachError,
    ExerciseConfigError,
    EmptyReferenceError,
    SessionNotStartedError,
)

__all__ = [
    "FormCoachError",
    "ExerciseConfigError",
    "EmptyReferenceError",
    "SessionNotStartedError",
]

"""
Exception types for FormCoach.

The per-frame path never raises; these cover load-time and caller errors.
"""


class FormCoachError(Exception):
    """Base error for the package."""

    def __init__(self, message: str = "", code: str = "400"):
        super().__init__(message)
        self.code = code
        self.message = message


class ExerciseConfigError(FormCoachError, ValueError):
    """An exercise definition failed validation at load time."""

    def __init__(self, message: str, errors=None):
        super().__init__(message, code="422")
        self.errors = errors or []


class EmptyReferenceError(FormCoachError, ValueError):
    """A keyframe operation was given an empty reference recording."""


class SessionNotStartedError(FormCoachError, RuntimeError):
    """A frame was processed before the session was started."""

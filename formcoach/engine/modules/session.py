"""
Exercise Sessions for FormCoach.

Explicit session objects that own the only mutable state of the engine:
the rep tracker, the active-time origin, the rest interval and the
coaching/speech timestamps.

Two modes:
    - ExerciseSession: scores frames against the analytic phase model.
      Optionally opens with a spoken countdown. After each completed rep
      scoring pauses for a counted-down rest interval, then the
      time origin is moved forward by the rest actually taken so the phase
      model resumes where it left off.
    - KeyframeSession: compares frames with the nearest keyframe of a
      recorded reference performance.

Sessions are single-writer: process frames serially, one session per
performer.

Author: FormCoach Team
Version: 1.0.0
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple
import logging
import math
import time
import uuid

import numpy as np

from ..core.data_types import (
    ExerciseConfig, Feedback, FeedbackThresholds, JointAngleSet, KeyFrame,
    LandmarkSet, ScoreResult, Severity,
)
from ..core.rep_tracker import CycleTracker
from ..utils.logger import LogCategory, SessionLogger, create_session_logger
from .coaching import SpeechCommand, SpeechGate, announcement
from .keyframes import build_keyframes, compare_poses, find_closest_keyframe
from .scoring import generate_coaching_text, score_exercise
from ...core.config import Settings, settings as default_settings
from ...helpers.exceptions import EmptyReferenceError, SessionNotStartedError

logger = logging.getLogger(__name__)

RESUME_MESSAGE = "Go!"


def _countdown_second(remaining: float, last_announced: int) -> Optional[int]:
    """Whole second to announce once `remaining` drops below `last_announced`."""
    second = math.ceil(remaining)
    if 0 < second < last_announced:
        return second
    return None


@dataclass
class FrameOutcome:
    """
    Result of feeding one frame to an ExerciseSession.

    Attributes:
        score_result: Score of the frame, None while resting or counting down.
        rep_completed: True on the frame that finished a rep.
        resting: True while scoring is paused for rest.
        rest_remaining: Seconds of rest left.
        counting_down: True before the first scored frame of a countdown start.
        countdown_remaining: Seconds of the start countdown left.
        displayed_score: Smoothed score for display.
        coaching_text: Current coaching line, None when form is good.
        speech: Commands for the caller's speech backend.
    """
    score_result: Optional[ScoreResult] = None
    rep_completed: bool = False
    resting: bool = False
    rest_remaining: float = 0.0
    counting_down: bool = False
    countdown_remaining: float = 0.0
    displayed_score: Optional[int] = None
    coaching_text: Optional[str] = None
    speech: List[SpeechCommand] = field(default_factory=list)


class ExerciseSession:
    """
    Time-model exercise session.

    Example:
        >>> session = ExerciseSession(config)
        >>> session.start(now=0.0)
        >>> outcome = session.process_frame(angles, now=1.5)
        >>> outcome.score_result.current_phase
        'raise'
    """

    def __init__(
        self,
        config: ExerciseConfig,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.monotonic,
        session_id: Optional[str] = None,
        session_logger: Optional[SessionLogger] = None
    ):
        self._config = config
        self._settings = settings or default_settings
        self._clock = clock
        self.session_id = session_id or str(uuid.uuid4())
        self._session_logger = session_logger or create_session_logger(
            self.session_id, self._settings.SESSION_LOG_DIR
        )

        self._tracker = CycleTracker(config.cycle_duration)
        self._started = False
        self._countdown_ends_at: Optional[float] = None
        self._countdown_announced = 0
        self._reset_run_state(0.0)

    def _reset_run_state(self, origin: float) -> None:
        self._origin = origin
        self._rest_started_at: Optional[float] = None
        self._rest_ends_at: Optional[float] = None
        self._rest_announced = 0

        self._last_coached_at: Optional[float] = None
        self._last_display_at: Optional[float] = None
        self._displayed_score: Optional[int] = None
        self._coaching_text: Optional[str] = None

        self._frame_count = 0
        self._scores: List[int] = []
        self._tracker.reset()

    @property
    def config(self) -> ExerciseConfig:
        return self._config

    @property
    def rep_count(self) -> int:
        return self._tracker.rep_count

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def is_counting_down(self) -> bool:
        return self._countdown_ends_at is not None

    @property
    def is_resting(self) -> bool:
        return self._rest_started_at is not None

    @property
    def session_logger(self) -> SessionLogger:
        return self._session_logger

    def _now(self, now: Optional[float]) -> float:
        return self._clock() if now is None else now

    def start(self, now: Optional[float] = None) -> None:
        """Anchor the active-time origin and begin scoring a fresh run."""
        now = self._now(now)
        self._started = True
        self._countdown_ends_at = None
        self._reset_run_state(now)
        self._session_logger.info(
            LogCategory.SYSTEM,
            "Session started",
            {'cycle_duration': self._config.cycle_duration, 'tracked_joint': self._config.tracked_joint.value},
        )

    def start_countdown(self, now: Optional[float] = None, seconds: Optional[float] = None) -> List[SpeechCommand]:
        """
        Begin a spoken countdown; scoring starts when it reaches zero.

        Frames fed during the countdown announce each remaining whole second
        below the starting value, then "Go!" on the frame that starts the run.

        Returns:
            Speech to emit now: "Go!" when the countdown is empty.
        """
        now = self._now(now)
        seconds = self._settings.START_COUNTDOWN_SECONDS if seconds is None else seconds
        if seconds <= 0:
            self.start(now)
            return [announcement(RESUME_MESSAGE)]

        self._started = False
        self._countdown_ends_at = now + seconds
        self._countdown_announced = math.ceil(seconds)
        self._session_logger.info(LogCategory.SYSTEM, f"Countdown started ({seconds}s)")
        return []

    def elapsed(self, now: Optional[float] = None) -> float:
        """Active exercise time; frozen while resting."""
        if not self._started:
            return 0.0
        if self._rest_started_at is not None:
            return self._rest_started_at - self._origin
        return self._now(now) - self._origin

    def process_frame(
        self,
        angles: JointAngleSet,
        now: Optional[float] = None,
        is_speaking: bool = False
    ) -> FrameOutcome:
        """
        Score one frame.

        Args:
            angles: Joint angles of the frame.
            now: Clock reading (seconds), None to read the session clock.
            is_speaking: True while the caller's speech backend is busy;
                coaching is held back.

        Returns:
            FrameOutcome for the frame.

        Raises:
            SessionNotStartedError: If neither start() nor start_countdown()
                was called.
        """
        if not self._started and self._countdown_ends_at is None:
            raise SessionNotStartedError("process_frame() called before start()")

        if not isinstance(angles, JointAngleSet):
            angles = JointAngleSet(angles)

        now = self._now(now)
        speech: List[SpeechCommand] = []

        if self._countdown_ends_at is not None:
            remaining = self._countdown_ends_at - now
            if remaining > 0:
                second = _countdown_second(remaining, self._countdown_announced)
                if second is not None:
                    self._countdown_announced = second
                    speech.append(announcement(str(second)))
                return FrameOutcome(counting_down=True, countdown_remaining=remaining, speech=speech)
            self.start(self._countdown_ends_at)
            speech.append(announcement(RESUME_MESSAGE))

        if self._rest_started_at is not None:
            remaining = self._rest_ends_at - now
            if remaining > 0:
                second = _countdown_second(remaining, self._rest_announced)
                if second is not None:
                    self._rest_announced = second
                    speech.append(announcement(str(second)))
                return FrameOutcome(
                    resting=True,
                    rest_remaining=remaining,
                    displayed_score=self._displayed_score,
                    speech=speech,
                )
            speech.append(self._end_rest(now))

        elapsed = now - self._origin
        result = score_exercise(angles, self._config, elapsed)
        self._frame_count += 1
        self._scores.append(result.overall_score)
        self._session_logger.log_scoring_frame(
            self._frame_count,
            angles=angles.to_dict(),
            score=result.to_dict(),
            elapsed=elapsed,
        )

        self._update_displayed_score(result.overall_score, now)

        if self._tracker.update(elapsed):
            speech.append(self._begin_rest(now))
            return FrameOutcome(
                score_result=result,
                rep_completed=True,
                resting=self.is_resting,
                rest_remaining=self._settings.REST_SECONDS if self.is_resting else 0.0,
                displayed_score=self._displayed_score,
                coaching_text=self._coaching_text,
                speech=speech,
            )

        speech.extend(self._coach(result, now, is_speaking))

        return FrameOutcome(
            score_result=result,
            displayed_score=self._displayed_score,
            coaching_text=self._coaching_text,
            speech=speech,
        )

    def _update_displayed_score(self, score: int, now: float) -> None:
        interval = self._settings.SCORE_DISPLAY_INTERVAL_SECONDS
        if self._last_display_at is None or now - self._last_display_at > interval:
            self._displayed_score = score
            self._last_display_at = now

    def _coach(self, result: ScoreResult, now: float, is_speaking: bool) -> List[SpeechCommand]:
        threshold = self._settings.COACHING_SCORE_THRESHOLD
        if result.overall_score >= threshold:
            self._coaching_text = None
            return []
        if is_speaking:
            return []

        if self._last_coached_at is not None and now - self._last_coached_at <= self._settings.COACH_INTERVAL_SECONDS:
            return []

        text = generate_coaching_text(result, threshold)
        if not text:
            return []

        self._coaching_text = text
        self._last_coached_at = now
        return [SpeechCommand(text=text)]

    def _begin_rest(self, now: float) -> SpeechCommand:
        rep = self._tracker.rep_count
        self._session_logger.info(LogCategory.REP, f"Rep {rep} complete", {'elapsed': now - self._origin})

        rest_seconds = self._settings.REST_SECONDS
        if rest_seconds > 0:
            self._rest_started_at = now
            self._rest_ends_at = now + rest_seconds
            # the rep announcement stands in for the first count
            self._rest_announced = math.ceil(rest_seconds)
            return announcement(f"Rep {rep} complete! Rest.")
        return announcement(f"Rep {rep} complete!")

    def _end_rest(self, now: float) -> SpeechCommand:
        rest_duration = now - self._rest_started_at
        # Resume the phase model where it paused
        self._origin += rest_duration
        self._rest_started_at = None
        self._rest_ends_at = None
        self._session_logger.info(LogCategory.REP, "Rest finished", {'rest_duration': rest_duration})
        return announcement(RESUME_MESSAGE)

    def stop(self) -> Dict:
        """Stop the session and return its summary."""
        self._started = False
        self._countdown_ends_at = None
        summary = self.summary()
        self._session_logger.info(LogCategory.SYSTEM, "Session stopped", summary)
        return summary

    def summary(self) -> Dict:
        """Aggregate statistics of the frames scored so far."""
        scores = np.array(self._scores, dtype=np.float64)
        return {
            'session_id': self.session_id,
            'rep_count': self.rep_count,
            'frames_scored': int(scores.size),
            'average_score': round(float(np.mean(scores)), 1) if scores.size else 0.0,
            'min_score': int(np.min(scores)) if scores.size else 0,
            'max_score': int(np.max(scores)) if scores.size else 0,
        }


@dataclass
class KeyframeOutcome:
    """Result of feeding one frame to a KeyframeSession."""
    keyframe: KeyFrame
    feedback: List[Feedback]
    speech: Optional[SpeechCommand] = None

    @property
    def major_issues(self) -> List[Feedback]:
        return [f for f in self.feedback if f.severity == Severity.MAJOR]


class KeyframeSession:
    """
    Reference-keyframe session.

    Raises:
        EmptyReferenceError: If constructed without keyframes.
    """

    def __init__(
        self,
        keyframes: Sequence[KeyFrame],
        thresholds: Optional[FeedbackThresholds] = None,
        settings: Optional[Settings] = None,
        session_id: Optional[str] = None,
        session_logger: Optional[SessionLogger] = None
    ):
        if not keyframes:
            logger.error("[SESSION] Reference recording produced no keyframes")
            raise EmptyReferenceError("KeyframeSession needs at least one keyframe")

        self._settings = settings or default_settings
        self._keyframes = list(keyframes)
        self._thresholds = thresholds or FeedbackThresholds(
            minor=self._settings.MINOR_THRESHOLD,
            major=self._settings.MAJOR_THRESHOLD,
        )
        self.session_id = session_id or str(uuid.uuid4())
        self._session_logger = session_logger or create_session_logger(
            self.session_id, self._settings.SESSION_LOG_DIR
        )
        self._speech_gate = SpeechGate(self._settings.SPEECH_DEBOUNCE_SECONDS)

        self._session_logger.info(
            LogCategory.KEYFRAME,
            f"Reference loaded with {len(self._keyframes)} keyframes",
        )

    @classmethod
    def from_recording(
        cls,
        frames: Iterable[Tuple[float, Optional[LandmarkSet]]],
        sample_interval: Optional[float] = None,
        **kwargs
    ) -> "KeyframeSession":
        """Build a session straight from a reference recording's landmarks."""
        settings = kwargs.get("settings") or default_settings
        interval = settings.KEYFRAME_SAMPLE_INTERVAL if sample_interval is None else sample_interval
        return cls(build_keyframes(frames, interval), **kwargs)

    @property
    def keyframes(self) -> List[KeyFrame]:
        return list(self._keyframes)

    @property
    def thresholds(self) -> FeedbackThresholds:
        return self._thresholds

    @property
    def session_logger(self) -> SessionLogger:
        return self._session_logger

    def process_frame(self, angles: JointAngleSet, reference_time: float) -> KeyframeOutcome:
        """
        Compare one frame with the reference at `reference_time`.

        Speech: the first major issue is spoken after the default debounce;
        a good-form result is spoken with the longer good-form delay.
        """
        keyframe = find_closest_keyframe(self._keyframes, reference_time)
        feedback = compare_poses(angles, keyframe, self._thresholds)

        outcome = KeyframeOutcome(keyframe=keyframe, feedback=feedback)
        majors = outcome.major_issues
        if majors:
            outcome.speech = self._speech_gate.request(majors[0].message)
        elif feedback[0].severity == Severity.GOOD:
            outcome.speech = self._speech_gate.request(
                feedback[0].message,
                delay_seconds=self._settings.GOOD_FORM_SPEECH_DELAY_SECONDS,
            )

        self._session_logger.debug(
            LogCategory.KEYFRAME,
            f"Compared with keyframe t={keyframe.timestamp:.2f}",
            {'feedback': [f.to_dict() for f in feedback]},
        )
        return outcome

import pytest

from formcoach.engine.core.data_types import JointAngleSet, JointType, KeyFrame
from formcoach.engine.modules.coaching import SpeechGate, SpeechPriority, announcement
from formcoach.engine.modules.session import ExerciseSession, KeyframeSession
from formcoach.helpers.exceptions import EmptyReferenceError, SessionNotStartedError


def _shoulder(angle):
    return JointAngleSet({JointType.LEFT_SHOULDER: angle})


@pytest.fixture
def session(arm_raise_config, session_settings):
    return ExerciseSession(arm_raise_config, settings=session_settings, session_id="test")


# =============================================
# EXERCISE SESSION: REPS AND REST
# =============================================

def test_frame_before_start_is_rejected(session):
    with pytest.raises(SessionNotStartedError):
        session.process_frame(_shoulder(0.0), now=0.0)


def test_rep_rest_and_resume(session):
    session.start(now=100.0)

    outcome = session.process_frame(_shoulder(4.5), now=105.9)
    assert outcome.rep_completed is False
    assert outcome.score_result.current_phase == "lower"
    assert outcome.score_result.overall_score == 100

    outcome = session.process_frame(_shoulder(0.0), now=106.1)
    assert outcome.rep_completed is True
    assert outcome.resting is True
    assert session.rep_count == 1
    assert [s.text for s in outcome.speech] == ["Rep 1 complete! Rest."]
    assert outcome.speech[0].priority == SpeechPriority.ANNOUNCEMENT

    outcome = session.process_frame(_shoulder(0.0), now=108.0)
    assert outcome.resting is True
    assert outcome.score_result is None
    assert outcome.rest_remaining == pytest.approx(3.1)
    assert session.elapsed(now=108.0) == pytest.approx(6.1)

    outcome = session.process_frame(_shoulder(0.0), now=111.2)
    assert outcome.resting is False
    assert [s.text for s in outcome.speech] == ["Go!"]
    assert outcome.score_result.current_phase == "ready"
    assert session.elapsed(now=111.2) == pytest.approx(6.1)
    assert session.rep_count == 1


def test_second_rep_counts_after_rest(session):
    session.start(now=0.0)
    session.process_frame(_shoulder(0.0), now=6.1)
    session.process_frame(_shoulder(0.0), now=11.2)

    # origin moved forward by the 5.1s rest, so active time 12.0 is at 17.1
    outcome = session.process_frame(_shoulder(0.0), now=17.0)
    assert outcome.rep_completed is False
    outcome = session.process_frame(_shoulder(0.0), now=17.2)
    assert outcome.rep_completed is True
    assert session.rep_count == 2


def test_no_rest_when_rest_disabled(arm_raise_config, session_settings):
    settings = session_settings.model_copy(update={'REST_SECONDS': 0.0})
    session = ExerciseSession(arm_raise_config, settings=settings)
    session.start(now=0.0)

    outcome = session.process_frame(_shoulder(0.0), now=6.1)
    assert outcome.rep_completed is True
    assert outcome.resting is False
    assert [s.text for s in outcome.speech] == ["Rep 1 complete!"]

    outcome = session.process_frame(_shoulder(0.0), now=6.2)
    assert outcome.score_result is not None


# =============================================
# EXERCISE SESSION: COACHING AND DISPLAY
# =============================================

def test_coaching_cooldown(session):
    session.start(now=0.0)

    first = session.process_frame(_shoulder(0.0), now=2.0)
    assert first.score_result.overall_score < 85
    assert [s.text for s in first.speech] == [first.coaching_text]
    assert first.speech[0].priority == SpeechPriority.COACHING

    assert session.process_frame(_shoulder(0.0), now=3.0).speech == []
    assert session.process_frame(_shoulder(0.0), now=5.0).speech == []
    assert len(session.process_frame(_shoulder(0.0), now=5.1).speech) == 1


def test_no_coaching_while_speaking(session):
    session.start(now=0.0)

    outcome = session.process_frame(_shoulder(0.0), now=2.0, is_speaking=True)
    assert outcome.speech == []
    assert outcome.coaching_text is None

    outcome = session.process_frame(_shoulder(0.0), now=2.1)
    assert len(outcome.speech) == 1


def test_good_form_clears_coaching_text(session):
    session.start(now=0.0)
    assert session.process_frame(_shoulder(0.0), now=2.0).coaching_text is not None

    outcome = session.process_frame(_shoulder(67.5), now=2.5)
    assert outcome.score_result.overall_score == 100
    assert outcome.coaching_text is None
    assert outcome.speech == []


def test_displayed_score_is_throttled(session):
    session.start(now=0.0)

    assert session.process_frame(_shoulder(0.0), now=0.0).displayed_score == 100
    outcome = session.process_frame(_shoulder(15.0), now=0.3)
    assert outcome.score_result.overall_score == 68
    assert outcome.displayed_score == 100
    assert session.process_frame(_shoulder(15.0), now=0.6).displayed_score == 68


def test_summary(session):
    session.start(now=0.0)
    for now, angle in ((0.0, 0.0), (0.3, 15.0), (0.6, 15.0)):
        session.process_frame(_shoulder(angle), now=now)

    summary = session.stop()

    assert summary['session_id'] == "test"
    assert summary['frames_scored'] == 3
    assert summary['average_score'] == pytest.approx(78.7)
    assert summary['min_score'] == 68
    assert summary['max_score'] == 100
    assert session.is_started is False


def test_uses_injected_clock(arm_raise_config, session_settings):
    readings = iter([10.0, 12.0])
    session = ExerciseSession(arm_raise_config, settings=session_settings, clock=lambda: next(readings))
    session.start()

    outcome = session.process_frame(_shoulder(45.0))
    assert outcome.score_result.expected_angle == 45
    assert outcome.score_result.overall_score == 100


# =============================================
# KEYFRAME SESSION
# =============================================

def _reference():
    angles = JointAngleSet({JointType.LEFT_ELBOW: 170.0, JointType.RIGHT_ELBOW: 170.0})
    return [KeyFrame(timestamp=t, key_angles=angles) for t in (0.0, 0.5, 1.0)]


def test_keyframe_session_needs_reference(session_settings):
    with pytest.raises(EmptyReferenceError):
        KeyframeSession([], settings=session_settings)


def test_major_issue_spoken_once(session_settings):
    session = KeyframeSession(_reference(), settings=session_settings)
    bad = JointAngleSet({JointType.LEFT_ELBOW: 120.0, JointType.RIGHT_ELBOW: 170.0})

    first = session.process_frame(bad, reference_time=0.4)
    assert first.keyframe.timestamp == 0.5
    assert first.speech.text == "Straighten your left elbow more"
    assert first.speech.delay_seconds == 2.0

    second = session.process_frame(bad, reference_time=0.6)
    assert second.major_issues
    assert second.speech is None


def test_good_form_spoken_with_longer_delay(session_settings):
    session = KeyframeSession(_reference(), settings=session_settings)
    good = JointAngleSet({JointType.LEFT_ELBOW: 165.0, JointType.RIGHT_ELBOW: 172.0})

    outcome = session.process_frame(good, reference_time=1.0)
    assert outcome.speech.text == "Good form! Keep it up"
    assert outcome.speech.delay_seconds == 5.0
    assert session.process_frame(good, reference_time=1.0).speech is None


def test_minor_issue_is_not_spoken(session_settings):
    session = KeyframeSession(_reference(), settings=session_settings)
    minor = JointAngleSet({JointType.LEFT_ELBOW: 150.0, JointType.RIGHT_ELBOW: 170.0})

    outcome = session.process_frame(minor, reference_time=0.0)
    assert outcome.feedback[0].joint == "left elbow"
    assert outcome.speech is None


def test_from_recording(session_settings, standing_pose):
    frames = [(i * 0.05, standing_pose) for i in range(10)]

    session = KeyframeSession.from_recording(frames, settings=session_settings)

    assert [round(kf.timestamp, 2) for kf in session.keyframes] == [0.0, 0.1, 0.2, 0.3, 0.4]
    assert session.thresholds.minor == 15.0


def test_from_recording_without_pose_raises(session_settings):
    with pytest.raises(EmptyReferenceError):
        KeyframeSession.from_recording([(0.0, None), (0.1, None)], settings=session_settings)


# =============================================
# SPEECH GATE
# =============================================

def test_speech_gate_deduplicates():
    gate = SpeechGate(debounce_seconds=2.0)

    command = gate.request("Raise your left shoulder now!")
    assert command.delay_seconds == 2.0
    assert command.priority == SpeechPriority.COACHING
    assert gate.request("Raise your left shoulder now!") is None
    assert gate.request("") is None
    assert gate.request(None) is None

    assert gate.request("Great form!", delay_seconds=5.0).delay_seconds == 5.0
    assert gate.request("Raise your left shoulder now!") is not None

    gate.reset()
    assert gate.last_text is None
    assert gate.request("Great form!") is not None


def test_announcements_are_immediate():
    command = announcement("Go!")
    assert command.delay_seconds == 0.0
    assert command.priority == SpeechPriority.ANNOUNCEMENT


def test_rest_countdown_is_announced(session):
    session.start(now=0.0)
    session.process_frame(_shoulder(0.0), now=6.1)

    spoken = []
    for now in (6.5, 7.2, 7.5, 8.2, 9.2, 10.2, 11.2):
        spoken.extend(s.text for s in session.process_frame(_shoulder(0.0), now=now).speech)

    assert spoken == ["4", "3", "2", "1", "Go!"]


def test_rest_countdown_skips_missed_seconds(session):
    session.start(now=0.0)
    session.process_frame(_shoulder(0.0), now=6.1)

    outcome = session.process_frame(_shoulder(0.0), now=9.2)
    assert [s.text for s in outcome.speech] == ["2"]
    assert outcome.speech[0].priority == SpeechPriority.ANNOUNCEMENT
    assert session.process_frame(_shoulder(0.0), now=9.5).speech == []


def test_start_countdown(session):
    assert session.start_countdown(now=0.0) == []
    assert session.is_counting_down is True
    assert session.is_started is False

    spoken = []
    for now in (0.5, 1.0, 2.5, 3.1, 4.5):
        outcome = session.process_frame(_shoulder(0.0), now=now)
        assert outcome.counting_down is True
        assert outcome.score_result is None
        spoken.extend(s.text for s in outcome.speech)
    assert spoken == ["4", "3", "2", "1"]

    outcome = session.process_frame(_shoulder(0.0), now=5.2)
    assert [s.text for s in outcome.speech] == ["Go!"]
    assert outcome.score_result.current_phase == "ready"
    assert session.is_started is True
    assert session.elapsed(now=5.2) == pytest.approx(0.2)


def test_empty_start_countdown_starts_immediately(session):
    speech = session.start_countdown(now=3.0, seconds=0)

    assert [s.text for s in speech] == ["Go!"]
    assert session.is_started is True
    assert session.elapsed(now=4.0) == pytest.approx(1.0)


def test_restart_begins_a_fresh_run(session):
    session.start(now=0.0)
    session.process_frame(_shoulder(0.0), now=2.0)
    session.process_frame(_shoulder(0.0), now=6.1)
    session.stop()

    session.start(now=0.0)
    summary = session.summary()
    assert summary['rep_count'] == 0
    assert summary['frames_scored'] == 0
    assert session.is_resting is False

    outcome = session.process_frame(_shoulder(0.0), now=2.0)
    assert len(outcome.speech) == 1
    assert outcome.displayed_score == outcome.score_result.overall_score
    assert session.summary()['frames_scored'] == 1


def test_session_log_written_to_configured_dir(arm_raise_config, session_settings, tmp_path):
    settings = session_settings.model_copy(update={'SESSION_LOG_DIR': str(tmp_path)})
    session = ExerciseSession(arm_raise_config, settings=settings, session_id="logged")
    session.start(now=0.0)
    session.process_frame(_shoulder(0.0), now=0.5)

    path = session.session_logger.save_session_log()

    assert path.parent == tmp_path
    assert path.name.startswith("session_logged_")
    assert path.exists()


def test_keyframe_session_log_written_to_configured_dir(session_settings, tmp_path):
    settings = session_settings.model_copy(update={'SESSION_LOG_DIR': str(tmp_path)})
    session = KeyframeSession(_reference(), settings=settings)

    assert session.session_logger.save_session_log().parent == tmp_path

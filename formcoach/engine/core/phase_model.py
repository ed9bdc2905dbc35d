"""
Phase-Cycle Model for FormCoach.

Maps elapsed active-exercise time to the expected joint angle.

One repetition is an ordered cycle of phases that repeats forever:

    READY ──► RAISE ──► HOLD ──► LOWER ──┐
      ▲                                  │
      └──────────────────────────────────┘

Expected angle per phase:
    - READY: resting angle
    - RAISE: linear from resting to target
    - HOLD:  target angle
    - LOWER: linear from target back to resting

Author: FormCoach Team
Version: 1.0.0
"""

import logging

from .data_types import ExerciseConfig, Phase, PhaseLocation, PhaseName

logger = logging.getLogger(__name__)

# Reported when no phase interval contains the cycle time.
FALLBACK_PHASE = PhaseName.RAISE.value


def expected_angle_for_phase(phase: Phase, phase_progress: float, config: ExerciseConfig) -> float:
    """
    Interpolate the expected angle inside one phase.

    Unknown phase names expect the target angle.
    """
    resting = config.resting_angle
    target = config.target_angle
    kind = phase.kind

    if kind == PhaseName.READY:
        return resting
    if kind == PhaseName.RAISE:
        return resting + (target - resting) * phase_progress
    if kind == PhaseName.HOLD:
        return target
    if kind == PhaseName.LOWER:
        return target + (resting - target) * phase_progress

    logger.debug(f"[PHASE] Unknown phase '{phase.label}', expecting target angle")
    return target


def fallback_location(config: ExerciseConfig) -> PhaseLocation:
    """Named fallback state: resting angle, first moving phase, zero progress."""
    return PhaseLocation(
        expected_angle=config.resting_angle,
        phase_name=FALLBACK_PHASE,
        phase_progress=0.0,
        cycle_progress=0.0,
        is_fallback=True,
    )


def locate(elapsed: float, config: ExerciseConfig) -> PhaseLocation:
    """
    Locate an elapsed time inside the repetition cycle.

    Args:
        elapsed: Active exercise time in seconds; may span many cycles.
        config: Exercise description.

    Returns:
        PhaseLocation: expected angle, active phase and progress values.
    """
    cycle_duration = config.cycle_duration
    if not config.phases or cycle_duration <= 0:
        logger.warning(f"[PHASE] Degenerate cycle (duration={cycle_duration}), using fallback")
        return fallback_location(config)

    cycle_time = elapsed % cycle_duration
    cycle_progress = cycle_time / cycle_duration

    phase_start = 0.0
    for phase in config.phases:
        phase_end = phase_start + phase.duration
        if phase_start <= cycle_time < phase_end:
            phase_progress = (cycle_time - phase_start) / phase.duration
            return PhaseLocation(
                expected_angle=expected_angle_for_phase(phase, phase_progress, config),
                phase_name=phase.label,
                phase_progress=phase_progress,
                cycle_progress=cycle_progress,
            )
        phase_start = phase_end

    # Only reachable through floating-point accumulation at the cycle end
    logger.warning(
        f"[PHASE] No phase contains cycle_time={cycle_time:.6f} "
        f"(cycle={cycle_duration:.6f}), using fallback"
    )
    return fallback_location(config)

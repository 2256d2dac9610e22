"""
Pure metric computation functions.

All functions are pure and typed for testability.  Metrics that need a
minimum amount of data return None below that threshold instead of 0, so
"no data" is never mistaken for a real value.
"""

from dataclasses import dataclass
from typing import Iterable, Literal, Sequence
from uuid import UUID

from .config import (
    EPLEY_DIVISOR,
    OVERLOAD_LABELS,
    OVERLOAD_NOTABLE_MAX,
    OVERLOAD_PLATEAU_MAX,
    OVERLOAD_SLIGHT_MAX,
)
from .models import Exercise, TrainingSession, WorkoutLog

OverloadBand = Literal["plateau", "slight", "notable", "strong"]
OverloadDirection = Literal["gain", "loss"]


@dataclass(frozen=True)
class OverloadTrend:
    """Tiered reading of a progressive-overload score."""

    score: float
    band: OverloadBand
    direction: OverloadDirection

    @property
    def label(self) -> str:
        return OVERLOAD_LABELS[(self.band, self.direction)]


@dataclass(frozen=True)
class LogChange:
    """A log together with its delta to the chronologically previous log."""

    log: WorkoutLog
    previous: WorkoutLog | None

    @property
    def weight_delta(self) -> float | None:
        return None if self.previous is None else self.log.weight - self.previous.weight

    @property
    def reps_delta(self) -> int | None:
        return None if self.previous is None else self.log.reps - self.previous.reps

    @property
    def volume_delta(self) -> float | None:
        return None if self.previous is None else self.log.volume - self.previous.volume


# =============================================================================
# PER-LOG
# =============================================================================


def log_volume(log: WorkoutLog) -> float:
    """
    Volume of a single set.

    volume = weight x reps
    """
    return log.weight * log.reps


def intensity_score(log: WorkoutLog) -> float:
    """Intensity score of a single set; defined identically to volume."""
    return log.weight * log.reps


def chronological_logs(logs: Sequence[WorkoutLog]) -> list[WorkoutLog]:
    """
    Return logs sorted ascending by date.

    The sort is stable: logs sharing a timestamp keep their storage order.
    """
    return sorted(logs, key=lambda log: log.date)


# =============================================================================
# PER-EXERCISE
# =============================================================================


def estimated_one_rep_max(
    exercise: Exercise,
    divisor: float = EPLEY_DIVISOR,
) -> float | None:
    """
    Estimate the one-rep-max from the most recently added log (Epley).

    1RM = w                      if reps == 1
    1RM = w * (1 + reps / 30)    otherwise

    "Most recently added" means the last log in storage order, not the
    latest by date.  Inputs are not validated; weight and reps are expected
    to be positive.

    Args:
        exercise: Exercise whose logs are used
        divisor: Rep divisor of the Epley formula

    Returns:
        Estimated 1RM, or None if the exercise has no logs
    """
    if not exercise.logs:
        return None
    last = exercise.logs[-1]
    if last.reps == 1:
        return last.weight
    return last.weight * (1 + last.reps / divisor)


def progressive_overload_score(exercise: Exercise) -> float | None:
    """
    Percentage change in volume between the first and last set by date.

    score = (V_last - V_first) / V_first * 100

    Args:
        exercise: Exercise whose logs are used

    Returns:
        Score in percent, or None with fewer than two logs or a zero
        first-set volume
    """
    if len(exercise.logs) < 2:
        return None
    ordered = chronological_logs(exercise.logs)
    first_volume = log_volume(ordered[0])
    last_volume = log_volume(ordered[-1])
    if first_volume == 0:
        return None
    return (last_volume - first_volume) / first_volume * 100


def average_intensity(exercise: Exercise) -> float | None:
    """Mean intensity score over all logs, or None if there are none."""
    if not exercise.logs:
        return None
    return sum(intensity_score(log) for log in exercise.logs) / len(exercise.logs)


def exercise_total_volume(exercise: Exercise) -> float:
    """Sum of volume over every log of the exercise."""
    return sum(log_volume(log) for log in exercise.logs)


def classify_overload(
    score: float | None,
    thresholds: tuple[float, float, float] = (
        OVERLOAD_PLATEAU_MAX,
        OVERLOAD_SLIGHT_MAX,
        OVERLOAD_NOTABLE_MAX,
    ),
) -> OverloadTrend | None:
    """
    Put an overload score into an informational band.

    |s| < 5 plateau, < 15 slight, < 30 notable, otherwise strong.  The sign
    gives the direction (zero counts as a gain).

    Args:
        score: Progressive-overload score in percent (None passes through)
        thresholds: (plateau, slight, notable) upper bounds

    Returns:
        OverloadTrend, or None when there is no score
    """
    if score is None:
        return None
    plateau, slight, notable = thresholds
    magnitude = abs(score)
    band: OverloadBand
    if magnitude < plateau:
        band = "plateau"
    elif magnitude < slight:
        band = "slight"
    elif magnitude < notable:
        band = "notable"
    else:
        band = "strong"
    return OverloadTrend(score=score, band=band, direction="gain" if score >= 0 else "loss")


def log_changes(logs: Sequence[WorkoutLog]) -> list[LogChange]:
    """
    Pair each log with the chronologically previous one.

    Returns:
        Newest-first list; the oldest log has previous=None
    """
    ordered = chronological_logs(logs)
    changes = [
        LogChange(log=log, previous=ordered[i - 1] if i > 0 else None)
        for i, log in enumerate(ordered)
    ]
    changes.reverse()
    return changes


# =============================================================================
# PER-SESSION
# =============================================================================


def session_logs(
    session_id: UUID,
    exercises: Iterable[Exercise],
) -> list[tuple[Exercise, WorkoutLog]]:
    """
    Find every log that belongs to a session.

    Scans all exercises; there is no session -> log index.

    Returns:
        (exercise, log) pairs in exercise order, then storage order
    """
    return [
        (exercise, log)
        for exercise in exercises
        for log in exercise.logs
        if log.session_id == session_id
    ]


def session_total_volume(session: TrainingSession, exercises: Iterable[Exercise]) -> float:
    """
    Total volume of a session.

    Sums every log, across all exercises, whose session_id matches, whether
    or not the exercise is listed in session.exercise_ids.
    """
    return sum(log_volume(log) for _, log in session_logs(session.id, exercises))

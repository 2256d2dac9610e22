"""
Data models for gym-tracker.

All core dataclasses representing exercises, logged sets, sessions and
plans.  Entities compare and hash by identifier; use value_equal() when the
full contents matter (e.g. after a save/load round trip).

Cross-entity references (log -> session, session/plan -> exercise) are weak:
they are plain UUIDs and their targets are not required to exist.
"""

from dataclasses import astuple, dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, eq=False)
class WorkoutLog:
    """
    A single logged set: weight lifted for a number of repetitions.

    Immutable.  Editing a set replaces the record with one that keeps the
    same id, date and session_id.
    """

    id: UUID
    date: datetime
    weight: float
    reps: int
    session_id: UUID | None = None  # weak reference to a TrainingSession

    def __post_init__(self) -> None:
        """Validate set data."""
        if self.weight <= 0:
            raise ValueError("weight must be positive")
        if isinstance(self.reps, bool) or not isinstance(self.reps, int):
            raise ValueError(f"reps must be an integer, got {self.reps!r}")
        if self.reps <= 0:
            raise ValueError("reps must be positive")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WorkoutLog):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def volume(self) -> float:
        """Weight x reps."""
        return self.weight * self.reps

    @property
    def intensity_score(self) -> float:
        """Intensity score; currently defined identically to volume."""
        return self.weight * self.reps

    def with_values(self, weight: float, reps: int) -> "WorkoutLog":
        """Return a copy with new weight/reps and the same identity."""
        return WorkoutLog(
            id=self.id,
            date=self.date,
            weight=weight,
            reps=reps,
            session_id=self.session_id,
        )


@dataclass(eq=False)
class Exercise:
    """
    An exercise and every set logged for it.

    ``logs`` is kept in insertion order; metrics that need chronology sort
    by date themselves.
    """

    id: UUID
    name: str
    logs: list[WorkoutLog] = field(default_factory=list)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Exercise):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def find_log(self, log_id: UUID) -> WorkoutLog | None:
        """Return the log with the given id, or None."""
        for log in self.logs:
            if log.id == log_id:
                return log
        return None


@dataclass(eq=False)
class TrainingSession:
    """
    A single workout occurrence.

    ``exercise_ids`` lists the exercises the session covers.  The sets
    themselves live on the exercises and point back via session_id.
    """

    id: UUID
    name: str
    date: datetime
    exercise_ids: list[UUID] = field(default_factory=list)
    notes: str = ""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TrainingSession):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(eq=False)
class TrainingPlan:
    """A reusable list of exercises used to seed new sessions."""

    id: UUID
    name: str
    exercise_ids: list[UUID] = field(default_factory=list)
    notes: str = ""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TrainingPlan):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


def value_equal(
    a: "WorkoutLog | Exercise | TrainingSession | TrainingPlan",
    b: "WorkoutLog | Exercise | TrainingSession | TrainingPlan",
) -> bool:
    """
    Compare two entities field by field, logs included.

    Identity equality (``==``) only looks at ids; this is the by-value check.
    """
    if type(a) is not type(b):
        return False
    # astuple recurses into Exercise.logs
    return astuple(a) == astuple(b)

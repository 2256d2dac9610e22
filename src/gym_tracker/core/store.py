"""
In-memory relational store for exercises, sessions and plans.

GymStore owns the three collections, applies every mutation, and writes a
full snapshot through its persistence adapter after each applied change.

Rules enforced here:
- ids are unique within their collection;
- deleting a session removes every log pointing at it, from every exercise;
- deleting an exercise leaves its id in sessions and plans (see
  integrity.check_integrity for finding those);
- an update or delete naming an unknown id changes nothing and returns
  False, or raises NotFoundError when the store is strict.
"""

import warnings
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, Literal, Protocol, Sequence
from uuid import UUID, uuid4

from .config import PLAN_SESSION_NOTES
from .integrity import IntegrityReport, check_integrity
from .metrics import session_total_volume
from .models import Exercise, TrainingPlan, TrainingSession, WorkoutLog

Action = Literal["add", "update", "delete", "replace"]
EntityKind = Literal["exercise", "log", "session", "plan", "all"]


class NotFoundError(LookupError):
    """Raised by a strict store when an id does not exist."""

    def __init__(self, kind: str, entity_id: UUID):
        super().__init__(f"{kind} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


@dataclass(frozen=True)
class StoreEvent:
    """Notification sent to subscribers after an applied mutation."""

    action: Action
    kind: EntityKind
    entity_id: UUID | None
    revision: int


class LoadedState(Protocol):
    exercises: list[Exercise]
    sessions: list[TrainingSession]
    plans: list[TrainingPlan]
    errors: dict[str, str]


class Persistence(Protocol):
    """Save/load contract the store needs (see io.snapshot_store.SnapshotStore)."""

    def save(
        self,
        exercises: Sequence[Exercise],
        sessions: Sequence[TrainingSession],
        plans: Sequence[TrainingPlan],
    ) -> None:
        ...

    def load(self) -> LoadedState:
        ...


Subscriber = Callable[[StoreEvent], None]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class GymStore:
    """
    Owner of all training data.

    Reads return the live entities; treat them as read-only and go through
    the store's methods to change anything, otherwise the change is not
    persisted.
    """

    def __init__(
        self,
        persistence: Persistence,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], UUID] = uuid4,
        strict: bool = False,
    ):
        """
        Initialize the store and load persisted state.

        Args:
            persistence: Adapter used for the initial load and every save
            clock: Source of creation timestamps
            id_factory: Source of fresh identifiers
            strict: Raise NotFoundError instead of ignoring unknown ids
        """
        self.persistence = persistence
        self.clock = clock
        self.id_factory = id_factory
        self.strict = strict

        loaded = persistence.load()
        self._exercises: list[Exercise] = list(loaded.exercises)
        self._sessions: list[TrainingSession] = list(loaded.sessions)
        self._plans: list[TrainingPlan] = list(loaded.plans)
        self.load_errors: dict[str, str] = dict(loaded.errors)

        self.last_save_error: Exception | None = None
        self._revision = 0
        self._subscribers: list[Subscriber] = []

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def exercises(self) -> tuple[Exercise, ...]:
        return tuple(self._exercises)

    @property
    def sessions(self) -> tuple[TrainingSession, ...]:
        return tuple(self._sessions)

    @property
    def plans(self) -> tuple[TrainingPlan, ...]:
        return tuple(self._plans)

    @property
    def revision(self) -> int:
        """Incremented once per applied mutation; poll it to detect changes."""
        return self._revision

    def get_exercise(self, exercise_id: UUID) -> Exercise | None:
        return _find(self._exercises, exercise_id)

    def get_session(self, session_id: UUID) -> TrainingSession | None:
        return _find(self._sessions, session_id)

    def get_plan(self, plan_id: UUID) -> TrainingPlan | None:
        return _find(self._plans, plan_id)

    def session_exercises(self, session_id: UUID) -> list[Exercise]:
        """Exercises listed by the session that still exist, in store order."""
        session = self.get_session(session_id)
        if session is None:
            return []
        return [e for e in self._exercises if e.id in session.exercise_ids]

    def plan_exercises(self, plan_id: UUID) -> list[Exercise]:
        """Exercises listed by the plan that still exist, in store order."""
        plan = self.get_plan(plan_id)
        if plan is None:
            return []
        return [e for e in self._exercises if e.id in plan.exercise_ids]

    def session_total_volume(self, session_id: UUID) -> float | None:
        """Total volume logged against a session, or None if it doesn't exist."""
        session = self.get_session(session_id)
        if session is None:
            return None
        return session_total_volume(session, self._exercises)

    def integrity_report(self) -> IntegrityReport:
        """List dangling references in the current state."""
        return check_integrity(self._exercises, self._sessions, self._plans)

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback run after every applied mutation.

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Exercises
    # ------------------------------------------------------------------

    def add_exercise(self, name: str) -> Exercise:
        exercise = Exercise(id=self._fresh_id(self._exercises), name=name, logs=[])
        self._exercises.append(exercise)
        self._commit("add", "exercise", exercise.id)
        return exercise

    def update_exercise(self, exercise_id: UUID, name: str) -> bool:
        exercise = self.get_exercise(exercise_id)
        if exercise is None:
            return self._missing("exercise", exercise_id)
        exercise.name = name
        self._commit("update", "exercise", exercise_id)
        return True

    def delete_exercise(self, exercise_id: UUID) -> bool:
        """
        Remove an exercise together with its logs.

        Session and plan exercise_ids are left untouched, so they may now
        reference a missing exercise.
        """
        exercise = self.get_exercise(exercise_id)
        if exercise is None:
            return self._missing("exercise", exercise_id)
        self._exercises.remove(exercise)
        self._commit("delete", "exercise", exercise_id)
        return True

    # ------------------------------------------------------------------
    # Logs
    # ------------------------------------------------------------------

    def add_log(
        self,
        exercise_id: UUID,
        weight: float,
        reps: int,
        session_id: UUID | None = None,
    ) -> WorkoutLog | None:
        """
        Append a set to an exercise, timestamped now.

        session_id is not checked against existing sessions.

        Returns:
            The new log, or None if the exercise doesn't exist
        """
        exercise = self.get_exercise(exercise_id)
        if exercise is None:
            self._missing("exercise", exercise_id)
            return None
        all_logs = [log for e in self._exercises for log in e.logs]
        log = WorkoutLog(
            id=self._fresh_id(all_logs),
            date=self.clock(),
            weight=weight,
            reps=reps,
            session_id=session_id,
        )
        exercise.logs.append(log)
        self._commit("add", "log", log.id)
        return log

    def update_log(self, exercise_id: UUID, log_id: UUID, weight: float, reps: int) -> bool:
        """Replace weight and reps; id, date and session_id are kept."""
        exercise = self.get_exercise(exercise_id)
        if exercise is None:
            return self._missing("exercise", exercise_id)
        for i, log in enumerate(exercise.logs):
            if log.id == log_id:
                exercise.logs[i] = log.with_values(weight, reps)
                self._commit("update", "log", log_id)
                return True
        return self._missing("log", log_id)

    def delete_log(self, exercise_id: UUID, log_id: UUID) -> bool:
        exercise = self.get_exercise(exercise_id)
        if exercise is None:
            return self._missing("exercise", exercise_id)
        remaining = [log for log in exercise.logs if log.id != log_id]
        if len(remaining) == len(exercise.logs):
            return self._missing("log", log_id)
        exercise.logs[:] = remaining
        self._commit("delete", "log", log_id)
        return True

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def add_session(
        self,
        name: str,
        exercise_ids: Iterable[UUID],
        notes: str = "",
    ) -> TrainingSession:
        session = TrainingSession(
            id=self._fresh_id(self._sessions),
            name=name,
            date=self.clock(),
            exercise_ids=list(exercise_ids),
            notes=notes,
        )
        self._sessions.append(session)
        self._commit("add", "session", session.id)
        return session

    def update_session(
        self,
        session_id: UUID,
        name: str,
        exercise_ids: Iterable[UUID],
        notes: str,
    ) -> bool:
        """Replace name, exercise_ids and notes; id and date are kept."""
        session = self.get_session(session_id)
        if session is None:
            return self._missing("session", session_id)
        session.name = name
        session.exercise_ids = list(exercise_ids)
        session.notes = notes
        self._commit("update", "session", session_id)
        return True

    def delete_session(self, session_id: UUID) -> bool:
        """
        Remove a session and every log recorded against it.

        Logs are purged from all exercises, including exercises the session
        does not list.
        """
        session = self.get_session(session_id)
        if session is None:
            return self._missing("session", session_id)
        for exercise in self._exercises:
            exercise.logs[:] = [log for log in exercise.logs if log.session_id != session_id]
        self._sessions.remove(session)
        self._commit("delete", "session", session_id)
        return True

    # ------------------------------------------------------------------
    # Plans
    # ------------------------------------------------------------------

    def add_plan(
        self,
        name: str,
        exercise_ids: Iterable[UUID],
        notes: str = "",
    ) -> TrainingPlan:
        plan = TrainingPlan(
            id=self._fresh_id(self._plans),
            name=name,
            exercise_ids=list(exercise_ids),
            notes=notes,
        )
        self._plans.append(plan)
        self._commit("add", "plan", plan.id)
        return plan

    def update_plan(
        self,
        plan_id: UUID,
        name: str,
        exercise_ids: Iterable[UUID],
        notes: str,
    ) -> bool:
        plan = self.get_plan(plan_id)
        if plan is None:
            return self._missing("plan", plan_id)
        plan.name = name
        plan.exercise_ids = list(exercise_ids)
        plan.notes = notes
        self._commit("update", "plan", plan_id)
        return True

    def delete_plan(self, plan_id: UUID) -> bool:
        plan = self.get_plan(plan_id)
        if plan is None:
            return self._missing("plan", plan_id)
        self._plans.remove(plan)
        self._commit("delete", "plan", plan_id)
        return True

    def start_session_from_plan(
        self,
        plan_id: UUID,
        name: str | None = None,
    ) -> TrainingSession | None:
        """
        Create a session seeded from a plan.

        The session copies the plan's exercise ids, is named after the plan
        unless ``name`` is given, and notes which plan it came from.

        Returns:
            The new session, or None if the plan doesn't exist
        """
        plan = self.get_plan(plan_id)
        if plan is None:
            self._missing("plan", plan_id)
            return None
        return self.add_session(
            name=name or plan.name,
            exercise_ids=plan.exercise_ids,
            notes=PLAN_SESSION_NOTES.format(plan_name=plan.name),
        )

    # ------------------------------------------------------------------
    # Bulk
    # ------------------------------------------------------------------

    def replace_all(
        self,
        exercises: Iterable[Exercise],
        sessions: Iterable[TrainingSession],
        plans: Iterable[TrainingPlan],
    ) -> None:
        """Swap in a complete state (e.g. from a backup bundle) and persist it."""
        exercises, sessions, plans = list(exercises), list(sessions), list(plans)
        for kind, items in (("exercise", exercises), ("session", sessions), ("plan", plans)):
            ids = [item.id for item in items]
            if len(ids) != len(set(ids)):
                raise ValueError(f"duplicate {kind} ids in replacement state")
        self._exercises = exercises
        self._sessions = sessions
        self._plans = plans
        self._commit("replace", "all", None)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fresh_id(self, existing: Iterable[Exercise | WorkoutLog | TrainingSession | TrainingPlan]) -> UUID:
        taken = {item.id for item in existing}
        new_id = self.id_factory()
        while new_id in taken:
            new_id = self.id_factory()
        return new_id

    def _missing(self, kind: str, entity_id: UUID) -> bool:
        if self.strict:
            raise NotFoundError(kind, entity_id)
        return False

    def _commit(self, action: Action, kind: EntityKind, entity_id: UUID | None) -> None:
        self._revision += 1
        self._persist()
        event = StoreEvent(action=action, kind=kind, entity_id=entity_id, revision=self._revision)
        for callback in list(self._subscribers):
            callback(event)

    def _persist(self) -> None:
        """Write the full state; failures are reported, not raised."""
        try:
            self.persistence.save(self._exercises, self._sessions, self._plans)
        except (OSError, TypeError, ValueError) as e:
            self.last_save_error = e
            warnings.warn(f"gym-tracker: could not save data ({e})", stacklevel=3)
        else:
            self.last_save_error = None


def _find(items: list, entity_id: UUID):
    for item in items:
        if item.id == entity_id:
            return item
    return None

"""
Referential integrity report.

References between entities are weak: deleting an exercise leaves its id in
sessions and plans, and a log may name a session that no longer exists.
check_integrity() lists those dangling references without repairing them.
"""

from dataclasses import dataclass, field
from typing import Iterable
from uuid import UUID

from .models import Exercise, TrainingPlan, TrainingSession


@dataclass
class IntegrityReport:
    """Dangling references found in the current state."""

    # session id -> exercise ids it lists that are not in the store
    session_exercise_refs: dict[UUID, list[UUID]] = field(default_factory=dict)
    # plan id -> exercise ids it lists that are not in the store
    plan_exercise_refs: dict[UUID, list[UUID]] = field(default_factory=dict)
    # (exercise id, log id, missing session id)
    orphan_logs: list[tuple[UUID, UUID, UUID]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (self.session_exercise_refs or self.plan_exercise_refs or self.orphan_logs)

    @property
    def issue_count(self) -> int:
        return (
            sum(len(v) for v in self.session_exercise_refs.values())
            + sum(len(v) for v in self.plan_exercise_refs.values())
            + len(self.orphan_logs)
        )


def check_integrity(
    exercises: Iterable[Exercise],
    sessions: Iterable[TrainingSession],
    plans: Iterable[TrainingPlan],
) -> IntegrityReport:
    """
    Find dangling references.

    Args:
        exercises: All exercises
        sessions: All sessions
        plans: All plans

    Returns:
        IntegrityReport (report.ok is True when nothing dangles)
    """
    exercises = list(exercises)
    sessions = list(sessions)
    exercise_ids = {e.id for e in exercises}
    session_ids = {s.id for s in sessions}

    report = IntegrityReport()

    for session in sessions:
        missing = [eid for eid in session.exercise_ids if eid not in exercise_ids]
        if missing:
            report.session_exercise_refs[session.id] = missing

    for plan in plans:
        missing = [eid for eid in plan.exercise_ids if eid not in exercise_ids]
        if missing:
            report.plan_exercise_refs[plan.id] = missing

    for exercise in exercises:
        for log in exercise.logs:
            if log.session_id is not None and log.session_id not in session_ids:
                report.orphan_logs.append((exercise.id, log.id, log.session_id))

    return report

"""
JSON serialization for gym-tracker models.

Handles conversion between dataclasses and JSON-compatible dicts, and
between whole collections and the bytes kept in each snapshot slot.
"""

import json
from datetime import datetime, timezone
from typing import Any, Callable, Sequence, TypeVar
from uuid import UUID

from ..core.models import Exercise, TrainingPlan, TrainingSession, WorkoutLog

T = TypeVar("T")


class ValidationError(Exception):
    """Raised when persisted or imported data is malformed."""

    pass


def parse_uuid(value: Any, name: str) -> UUID:
    """
    Parse a UUID field.

    Args:
        value: Raw value (string form expected)
        name: Field name for error message

    Returns:
        Parsed UUID

    Raises:
        ValidationError: If value is not a valid UUID string
    """
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a UUID string, got {value!r}")
    try:
        return UUID(value)
    except ValueError as e:
        raise ValidationError(f"Invalid {name}: {value!r}") from e


def parse_datetime(value: Any, name: str) -> datetime:
    """
    Parse an ISO-8601 timestamp field.

    Values without an offset are read as UTC.

    Raises:
        ValidationError: If value is not an ISO-8601 string
    """
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be an ISO-8601 string, got {value!r}")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(f"Invalid {name}: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise ValidationError(f"Missing field: {key}")
    return data[key]


def _uuid_list(value: Any, name: str) -> list[UUID]:
    if not isinstance(value, list):
        raise ValidationError(f"{name} must be a list")
    return [parse_uuid(v, name) for v in value]


def _text(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string, got {value!r}")
    return value


# =============================================================================
# ENTITIES
# =============================================================================


def workout_log_to_dict(log: WorkoutLog) -> dict[str, Any]:
    """Convert WorkoutLog to JSON-compatible dict."""
    return {
        "id": str(log.id),
        "date": log.date.isoformat(),
        "weight": log.weight,
        "reps": log.reps,
        "session_id": str(log.session_id) if log.session_id is not None else None,
    }


def dict_to_workout_log(data: dict[str, Any]) -> WorkoutLog:
    """
    Convert dict to WorkoutLog.

    Raises:
        ValidationError: If data is invalid
    """
    weight = _require(data, "weight")
    reps = _require(data, "reps")
    if isinstance(weight, bool) or not isinstance(weight, (int, float)):
        raise ValidationError(f"weight must be a number, got {weight!r}")
    if isinstance(reps, bool) or not isinstance(reps, int):
        raise ValidationError(f"reps must be an integer, got {reps!r}")

    session_id = data.get("session_id")
    try:
        return WorkoutLog(
            id=parse_uuid(_require(data, "id"), "id"),
            date=parse_datetime(_require(data, "date"), "date"),
            weight=float(weight),
            reps=reps,
            session_id=parse_uuid(session_id, "session_id") if session_id is not None else None,
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    """Convert Exercise (with its logs) to JSON-compatible dict."""
    return {
        "id": str(exercise.id),
        "name": exercise.name,
        "logs": [workout_log_to_dict(log) for log in exercise.logs],
    }


def dict_to_exercise(data: dict[str, Any]) -> Exercise:
    """
    Convert dict to Exercise.

    Raises:
        ValidationError: If data is invalid
    """
    logs = data.get("logs", [])
    if not isinstance(logs, list):
        raise ValidationError("logs must be a list")
    return Exercise(
        id=parse_uuid(_require(data, "id"), "id"),
        name=_text(_require(data, "name"), "name"),
        logs=[dict_to_workout_log(_as_dict(item)) for item in logs],
    )


def training_session_to_dict(session: TrainingSession) -> dict[str, Any]:
    """Convert TrainingSession to JSON-compatible dict."""
    return {
        "id": str(session.id),
        "name": session.name,
        "date": session.date.isoformat(),
        "exercise_ids": [str(eid) for eid in session.exercise_ids],
        "notes": session.notes,
    }


def dict_to_training_session(data: dict[str, Any]) -> TrainingSession:
    """
    Convert dict to TrainingSession.

    Raises:
        ValidationError: If data is invalid
    """
    return TrainingSession(
        id=parse_uuid(_require(data, "id"), "id"),
        name=_text(_require(data, "name"), "name"),
        date=parse_datetime(_require(data, "date"), "date"),
        exercise_ids=_uuid_list(data.get("exercise_ids", []), "exercise_ids"),
        notes=_text(data.get("notes", ""), "notes"),
    )


def training_plan_to_dict(plan: TrainingPlan) -> dict[str, Any]:
    """Convert TrainingPlan to JSON-compatible dict."""
    return {
        "id": str(plan.id),
        "name": plan.name,
        "exercise_ids": [str(eid) for eid in plan.exercise_ids],
        "notes": plan.notes,
    }


def dict_to_training_plan(data: dict[str, Any]) -> TrainingPlan:
    """
    Convert dict to TrainingPlan.

    Raises:
        ValidationError: If data is invalid
    """
    return TrainingPlan(
        id=parse_uuid(_require(data, "id"), "id"),
        name=_text(_require(data, "name"), "name"),
        exercise_ids=_uuid_list(data.get("exercise_ids", []), "exercise_ids"),
        notes=_text(data.get("notes", ""), "notes"),
    )


# =============================================================================
# COLLECTIONS
# =============================================================================


def _as_dict(item: Any) -> dict[str, Any]:
    if not isinstance(item, dict):
        raise ValidationError(f"Expected an object, got {type(item).__name__}")
    return item


def encode_collection(items: Sequence[T], to_dict: Callable[[T], dict[str, Any]]) -> bytes:
    """Serialize a collection to UTF-8 JSON bytes (an array of records)."""
    return json.dumps([to_dict(item) for item in items]).encode("utf-8")


def decode_collection(data: bytes, from_dict: Callable[[dict[str, Any]], T]) -> list[T]:
    """
    Deserialize a collection written by encode_collection().

    Raises:
        ValidationError: If the bytes are not a JSON array of valid records
    """
    try:
        raw = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError(f"Not valid JSON: {e}") from e
    if not isinstance(raw, list):
        raise ValidationError("Collection must be a JSON array")
    return [from_dict(_as_dict(item)) for item in raw]


def encode_exercises(exercises: Sequence[Exercise]) -> bytes:
    return encode_collection(exercises, exercise_to_dict)


def encode_sessions(sessions: Sequence[TrainingSession]) -> bytes:
    return encode_collection(sessions, training_session_to_dict)


def encode_plans(plans: Sequence[TrainingPlan]) -> bytes:
    return encode_collection(plans, training_plan_to_dict)


def decode_exercises(data: bytes) -> list[Exercise]:
    return decode_collection(data, dict_to_exercise)


def decode_sessions(data: bytes) -> list[TrainingSession]:
    return decode_collection(data, dict_to_training_session)


def decode_plans(data: bytes) -> list[TrainingPlan]:
    return decode_collection(data, dict_to_training_plan)

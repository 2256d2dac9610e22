"""
Tests for the persistence adapter: serializers, blob stores, snapshot slots
and the export bundle.
"""

import base64
import json
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

import pytest

from gym_tracker.core.config import BUNDLE_VERSION, EXERCISES_KEY, PLANS_KEY, SESSIONS_KEY
from gym_tracker.core.models import (
    Exercise,
    TrainingPlan,
    TrainingSession,
    WorkoutLog,
    value_equal,
)
from gym_tracker.io.blob_store import DirectoryBlobStore, MemoryBlobStore
from gym_tracker.io.serializers import (
    ValidationError,
    decode_exercises,
    dict_to_workout_log,
    encode_exercises,
    workout_log_to_dict,
)
from gym_tracker.io.snapshot_store import SnapshotStore, export_bundle, import_bundle


@pytest.fixture
def temp_data_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def _sample():
    """One exercise with two logs, one session, one plan."""
    session = TrainingSession(
        id=uuid4(),
        name="Push",
        date=datetime(2026, 4, 1, 17, 45, tzinfo=timezone.utc),
        notes="deload week",
    )
    bench = Exercise(
        id=uuid4(),
        name="Bench Press",
        logs=[
            WorkoutLog(
                id=uuid4(),
                date=datetime(2026, 4, 1, 18, 0, tzinfo=timezone.utc),
                weight=100.0,
                reps=5,
                session_id=session.id,
            ),
            WorkoutLog(
                id=uuid4(),
                date=datetime(2026, 4, 3, 18, 0, tzinfo=timezone.utc),
                weight=102.5,
                reps=4,
            ),
        ],
    )
    session.exercise_ids = [bench.id]
    plan = TrainingPlan(id=uuid4(), name="Upper", exercise_ids=[bench.id, uuid4()], notes="")
    return [bench], [session], [plan]


def _assert_same(loaded, expected):
    assert len(loaded) == len(expected)
    for a, b in zip(loaded, expected):
        assert value_equal(a, b)


# ===========================================================================
# Serializers
# ===========================================================================


class TestSerializers:
    def test_log_dict_is_field_named(self):
        exercises, _, _ = _sample()
        data = workout_log_to_dict(exercises[0].logs[0])
        assert set(data) == {"id", "date", "weight", "reps", "session_id"}
        assert data["date"] == "2026-04-01T18:00:00+00:00"

    def test_log_without_session(self):
        exercises, _, _ = _sample()
        data = workout_log_to_dict(exercises[0].logs[1])
        assert data["session_id"] is None
        assert dict_to_workout_log(data).session_id is None

    @pytest.mark.parametrize(
        "patch",
        [
            {"reps": "five"},
            {"reps": 0},
            {"weight": -1},
            {"weight": True},
            {"id": "not-a-uuid"},
            {"date": "yesterday"},
        ],
    )
    def test_invalid_log_rejected(self, patch):
        exercises, _, _ = _sample()
        data = workout_log_to_dict(exercises[0].logs[0])
        data.update(patch)
        with pytest.raises(ValidationError):
            dict_to_workout_log(data)

    def test_missing_field_rejected(self):
        exercises, _, _ = _sample()
        data = workout_log_to_dict(exercises[0].logs[0])
        del data["weight"]
        with pytest.raises(ValidationError, match="weight"):
            dict_to_workout_log(data)

    def test_naive_date_is_read_as_utc(self):
        exercises, _, _ = _sample()
        data = workout_log_to_dict(exercises[0].logs[0])
        data["date"] = "2024-01-01T10:00:00"
        log = dict_to_workout_log(data)
        assert log.date == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)

    def test_collection_must_be_array(self):
        with pytest.raises(ValidationError):
            decode_exercises(b'{"id": "x"}')

    def test_collection_preserves_order(self):
        exercises, _, _ = _sample()
        exercises.append(Exercise(id=uuid4(), name="Row"))
        decoded = decode_exercises(encode_exercises(exercises))
        assert [e.name for e in decoded] == ["Bench Press", "Row"]


# ===========================================================================
# Snapshot slots
# ===========================================================================


class TestSnapshotStore:
    def test_round_trip(self):
        exercises, sessions, plans = _sample()
        snapshots = SnapshotStore(MemoryBlobStore())
        snapshots.save(exercises, sessions, plans)

        loaded = snapshots.load()
        assert loaded.ok
        _assert_same(loaded.exercises, exercises)
        _assert_same(loaded.sessions, sessions)
        _assert_same(loaded.plans, plans)

    def test_each_collection_in_its_own_slot(self):
        blobs = MemoryBlobStore()
        SnapshotStore(blobs).save(*_sample())
        assert set(blobs.blobs) == {EXERCISES_KEY, SESSIONS_KEY, PLANS_KEY}
        assert json.loads(blobs.blobs[PLANS_KEY])[0]["name"] == "Upper"

    def test_missing_slots_load_empty_without_errors(self):
        loaded = SnapshotStore(MemoryBlobStore()).load()
        assert (loaded.exercises, loaded.sessions, loaded.plans) == ([], [], [])
        assert loaded.errors == {}

    @pytest.mark.parametrize("corrupt_key", [EXERCISES_KEY, SESSIONS_KEY, PLANS_KEY])
    def test_corrupt_slot_is_isolated(self, corrupt_key):
        exercises, sessions, plans = _sample()
        blobs = MemoryBlobStore()
        snapshots = SnapshotStore(blobs)
        snapshots.save(exercises, sessions, plans)
        blobs.blobs[corrupt_key] = blobs.blobs[corrupt_key][:-7] + b"\xff\xfe"

        with pytest.warns(UserWarning, match=corrupt_key):
            loaded = snapshots.load()

        assert set(loaded.errors) == {corrupt_key}
        expected = {EXERCISES_KEY: exercises, SESSIONS_KEY: sessions, PLANS_KEY: plans}
        actual = {
            EXERCISES_KEY: loaded.exercises,
            SESSIONS_KEY: loaded.sessions,
            PLANS_KEY: loaded.plans,
        }
        for key in expected:
            if key == corrupt_key:
                assert actual[key] == []
            else:
                _assert_same(actual[key], expected[key])

    def test_directory_blob_store_round_trip(self, temp_data_dir):
        exercises, sessions, plans = _sample()
        blobs = DirectoryBlobStore(temp_data_dir / "data")
        assert not blobs.exists()

        SnapshotStore(blobs).save(exercises, sessions, plans)

        assert blobs.path_for(EXERCISES_KEY).exists()
        assert sorted(p.name for p in (temp_data_dir / "data").iterdir()) == [
            "gym_data.json",
            "gym_plans.json",
            "gym_sessions.json",
        ]
        loaded = SnapshotStore(DirectoryBlobStore(temp_data_dir / "data")).load()
        _assert_same(loaded.exercises, exercises)

    def test_failed_write_leaves_no_temp_file(self, temp_data_dir):
        blobs = DirectoryBlobStore(temp_data_dir / "data")
        blobs.set(EXERCISES_KEY, b"[]")

        with pytest.raises(TypeError):
            blobs.set(EXERCISES_KEY, "not bytes")

        assert [p.name for p in (temp_data_dir / "data").iterdir()] == ["gym_data.json"]
        assert blobs.get(EXERCISES_KEY) == b"[]"


# ===========================================================================
# Export bundle
# ===========================================================================


class TestBundle:
    def test_bundle_layout(self):
        exercises, sessions, plans = _sample()
        raw = json.loads(export_bundle(exercises, sessions, plans))

        assert set(raw) == {"exercises", "sessions", "plans", "version"}
        assert raw["version"] == BUNDLE_VERSION == "1.0"
        decoded = json.loads(base64.b64decode(raw["sessions"]))
        assert decoded[0]["notes"] == "deload week"

    def test_import_restores_everything(self):
        exercises, sessions, plans = _sample()
        snapshot = import_bundle(export_bundle(exercises, sessions, plans))
        _assert_same(snapshot.exercises, exercises)
        _assert_same(snapshot.sessions, sessions)
        _assert_same(snapshot.plans, plans)

    def test_unknown_version_rejected(self):
        raw = json.loads(export_bundle(*_sample()))
        raw["version"] = "2.0"
        with pytest.raises(ValidationError, match="version"):
            import_bundle(json.dumps(raw).encode())

    def test_bad_base64_rejected(self):
        raw = json.loads(export_bundle(*_sample()))
        raw["plans"] = "%%%"
        with pytest.raises(ValidationError, match="plans"):
            import_bundle(json.dumps(raw).encode())

    def test_not_json_rejected(self):
        with pytest.raises(ValidationError):
            import_bundle(b"garbage")

"""
Formula-focused unit tests for the metrics engine.

Values are hand-computed from the formulas:
- volume / intensity: w × reps
- 1RM (Epley): w × (1 + reps/30), or w for a single rep
- overload: (V_last − V_first) / V_first × 100, first/last by date
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from gym_tracker.core.config import (
    EPLEY_DIVISOR,
    OVERLOAD_NOTABLE_MAX,
    OVERLOAD_PLATEAU_MAX,
    OVERLOAD_SLIGHT_MAX,
)
from gym_tracker.core.metrics import (
    average_intensity,
    chronological_logs,
    classify_overload,
    estimated_one_rep_max,
    exercise_total_volume,
    intensity_score,
    log_changes,
    log_volume,
    progressive_overload_score,
    session_logs,
    session_total_volume,
)
from gym_tracker.core.models import Exercise, TrainingSession, WorkoutLog

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

T0 = datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc)


def _log(weight: float, reps: int, day: int = 0, session_id=None) -> WorkoutLog:
    return WorkoutLog(
        id=uuid4(),
        date=T0 + timedelta(days=day),
        weight=weight,
        reps=reps,
        session_id=session_id,
    )


def _exercise(*sets: tuple[float, int], name: str = "Bench Press") -> Exercise:
    """Exercise whose logs are added in order, one day apart."""
    return Exercise(
        id=uuid4(),
        name=name,
        logs=[_log(w, r, day=i) for i, (w, r) in enumerate(sets)],
    )


def _session(name: str = "Push") -> TrainingSession:
    return TrainingSession(id=uuid4(), name=name, date=T0)


# ===========================================================================
# Volume / intensity
# ===========================================================================


class TestVolume:
    """volume = intensity = w × reps"""

    def test_volume_is_weight_times_reps(self):
        assert log_volume(_log(82.5, 8)) == pytest.approx(660.0)

    def test_intensity_equals_volume(self):
        log = _log(60.0, 12)
        assert intensity_score(log) == log_volume(log) == 720.0

    def test_model_properties_match_functions(self):
        log = _log(100.0, 5)
        assert log.volume == 500.0
        assert log.intensity_score == 500.0

    def test_exercise_total_volume(self):
        # 100×5 + 80×10 = 1300
        assert exercise_total_volume(_exercise((100, 5), (80, 10))) == 1300.0

    def test_exercise_total_volume_empty(self):
        assert exercise_total_volume(_exercise()) == 0.0


# ===========================================================================
# One-rep-max
# ===========================================================================


class TestEstimatedOneRepMax:
    """1RM = w if reps == 1 else w × (1 + reps/30), from the last stored log"""

    def test_no_logs_is_none(self):
        assert estimated_one_rep_max(_exercise()) is None

    def test_single_rep_is_exact_weight(self):
        assert estimated_one_rep_max(_exercise((100, 1))) == 100

    def test_five_reps_epley(self):
        # 100 × (1 + 5/30) = 116.666…
        assert estimated_one_rep_max(_exercise((100, 5))) == pytest.approx(116.6667, abs=1e-4)

    def test_thirty_reps_doubles(self):
        assert estimated_one_rep_max(_exercise((50, 30))) == pytest.approx(100.0)

    def test_uses_last_stored_log_not_latest_date(self):
        exercise = _exercise((100, 5))
        # Appended last but dated before the first log
        exercise.logs.append(_log(60, 1, day=-10))
        assert estimated_one_rep_max(exercise) == 60

    def test_custom_divisor(self):
        # 100 × (1 + 5/20) = 125
        assert estimated_one_rep_max(_exercise((100, 5)), divisor=20) == pytest.approx(125.0)

    def test_default_divisor_constant(self):
        assert EPLEY_DIVISOR == 30.0


# ===========================================================================
# Progressive overload
# ===========================================================================


class TestProgressiveOverload:
    """score = (V_last − V_first) / V_first × 100, sorted by date"""

    def test_fewer_than_two_logs_is_none(self):
        assert progressive_overload_score(_exercise()) is None
        assert progressive_overload_score(_exercise((100, 5))) is None

    def test_ten_percent_gain(self):
        # ((550 − 500) / 500) × 100 = 10
        assert progressive_overload_score(_exercise((100, 5), (110, 5))) == pytest.approx(10.0)

    def test_loss_is_negative(self):
        # ((400 − 500) / 500) × 100 = −20
        assert progressive_overload_score(_exercise((100, 5), (80, 5))) == pytest.approx(-20.0)

    def test_middle_logs_ignored(self):
        score = progressive_overload_score(_exercise((100, 5), (200, 10), (100, 6)))
        # first 500, last 600 → 20 %
        assert score == pytest.approx(20.0)

    def test_sorted_by_date_not_storage_order(self):
        exercise = Exercise(
            id=uuid4(),
            name="Squat",
            logs=[_log(110, 5, day=5), _log(100, 5, day=0)],
        )
        # chronological first is 100×5
        assert progressive_overload_score(exercise) == pytest.approx(10.0)

    def test_zero_first_volume_guarded(self):
        # Models reject zero weight, so build the degenerate case by hand
        zero = object.__new__(WorkoutLog)
        object.__setattr__(zero, "id", uuid4())
        object.__setattr__(zero, "date", T0)
        object.__setattr__(zero, "weight", 0.0)
        object.__setattr__(zero, "reps", 5)
        object.__setattr__(zero, "session_id", None)
        exercise = Exercise(id=uuid4(), name="X", logs=[zero, _log(100, 5, day=1)])
        assert progressive_overload_score(exercise) is None


class TestClassifyOverload:
    """|s| < 5 plateau, < 15 slight, < 30 notable, else strong"""

    def test_none_passes_through(self):
        assert classify_overload(None) is None

    @pytest.mark.parametrize(
        "score,band,direction",
        [
            (0.0, "plateau", "gain"),
            (4.99, "plateau", "gain"),
            (-4.99, "plateau", "loss"),
            (5.0, "slight", "gain"),
            (-14.9, "slight", "loss"),
            (15.0, "notable", "gain"),
            (-29.9, "notable", "loss"),
            (30.0, "strong", "gain"),
            (-75.0, "strong", "loss"),
        ],
    )
    def test_bands(self, score, band, direction):
        trend = classify_overload(score)
        assert trend.band == band
        assert trend.direction == direction
        assert trend.score == score

    def test_labels(self):
        assert classify_overload(2.0).label == "Plateau"
        assert classify_overload(40.0).label == "Strong increase!"
        assert classify_overload(-10.0).label == "Slight decrease"

    def test_custom_thresholds(self):
        assert classify_overload(8.0, thresholds=(10.0, 20.0, 40.0)).band == "plateau"

    def test_default_thresholds(self):
        assert (OVERLOAD_PLATEAU_MAX, OVERLOAD_SLIGHT_MAX, OVERLOAD_NOTABLE_MAX) == (5.0, 15.0, 30.0)


# ===========================================================================
# Average intensity
# ===========================================================================


class TestAverageIntensity:
    def test_no_logs_is_none(self):
        assert average_intensity(_exercise()) is None

    def test_mean_of_volumes(self):
        # (500 + 800) / 2 = 650
        assert average_intensity(_exercise((100, 5), (80, 10))) == pytest.approx(650.0)

    def test_order_independent(self):
        a = average_intensity(_exercise((100, 5), (80, 10), (60, 12)))
        b = average_intensity(_exercise((60, 12), (100, 5), (80, 10)))
        assert a == pytest.approx(b)


# ===========================================================================
# History helpers
# ===========================================================================


class TestLogHistory:
    def test_chronological_is_stable_for_equal_dates(self):
        a = WorkoutLog(id=uuid4(), date=T0, weight=50, reps=5)
        b = WorkoutLog(id=uuid4(), date=T0, weight=60, reps=5)
        assert chronological_logs([a, b]) == [a, b]

    def test_log_changes_newest_first_with_deltas(self):
        exercise = _exercise((100, 5), (105, 4), (105, 6))
        changes = log_changes(exercise.logs)

        assert [c.log.weight for c in changes] == [105, 105, 100]
        newest = changes[0]
        assert newest.weight_delta == 0
        assert newest.reps_delta == 2
        assert newest.volume_delta == pytest.approx(630 - 420)

        oldest = changes[-1]
        assert oldest.previous is None
        assert oldest.weight_delta is None
        assert oldest.volume_delta is None


# ===========================================================================
# Session volume
# ===========================================================================


class TestSessionVolume:
    def test_sums_logs_across_all_exercises(self):
        session = _session()
        bench = Exercise(id=uuid4(), name="Bench", logs=[
            _log(100, 5, session_id=session.id),
            _log(100, 5),
        ])
        # Not listed in session.exercise_ids but still counted
        dips = Exercise(id=uuid4(), name="Dips", logs=[_log(20, 10, session_id=session.id)])
        session.exercise_ids = [bench.id]

        # 500 + 200
        assert session_total_volume(session, [bench, dips]) == 700.0

    def test_session_without_logs_is_zero(self):
        assert session_total_volume(_session(), [_exercise((100, 5))]) == 0.0

    def test_session_logs_pairs(self):
        session = _session()
        bench = Exercise(id=uuid4(), name="Bench", logs=[_log(100, 5, session_id=session.id)])
        pairs = session_logs(session.id, [bench, _exercise((50, 5))])
        assert [(e.name, log.weight) for e, log in pairs] == [("Bench", 100)]

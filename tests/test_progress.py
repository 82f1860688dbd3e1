import uuid
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from fitledger.enums import (
    ConfidenceLevel,
    ExerciseType,
    MuscleGroup,
    OneRepMaxMethod,
    OneRepMaxSource,
    RecordType,
    TimeRange,
)
from fitledger.models import (
    Exercise,
    ExerciseSet,
    OneRepMaxHistory,
    PersonalRecord,
    Workout,
    WorkoutExercise,
)
from fitledger.services.progress import (
    _months_before,
    confidence_for_reps,
    current_best,
    history_for,
    progression,
    record_set,
)


def _create_exercise(session: Session, name: str = "Bench Press") -> Exercise:
    exercise = Exercise(
        name=name, primary_muscle_group=MuscleGroup.CHEST, exercise_type=ExerciseType.STRENGTH
    )
    session.add(exercise)
    session.commit()
    session.refresh(exercise)
    return exercise


def _create_workout_exercise(session: Session, exercise: Exercise) -> WorkoutExercise:
    workout = Workout(name="Push", date=datetime(2026, 3, 1, 18, 0))
    session.add(workout)
    wx = WorkoutExercise(workout_id=workout.id, exercise_id=exercise.id, order=0)
    session.add(wx)
    session.commit()
    session.refresh(wx)
    return wx


def _create_set(
    session: Session, wx: WorkoutExercise, weight: float, reps: int, completed: bool = True
) -> ExerciseSet:
    count = len(
        session.exec(select(ExerciseSet).where(ExerciseSet.workout_exercise_id == wx.id)).all()
    )
    exercise_set = ExerciseSet(
        workout_exercise_id=wx.id,
        set_number=count + 1,
        weight=weight,
        reps=reps,
        is_completed=completed,
    )
    session.add(exercise_set)
    session.commit()
    session.refresh(exercise_set)
    return exercise_set


def _add_history(
    session: Session,
    exercise: Exercise,
    one_rep_max: float,
    date: datetime,
    confidence: ConfidenceLevel = ConfidenceLevel.MEDIUM,
) -> OneRepMaxHistory:
    entry = OneRepMaxHistory(
        exercise_id=exercise.id, one_rep_max=one_rep_max, date=date, confidence=confidence
    )
    session.add(entry)
    session.commit()
    session.refresh(entry)
    return entry


def _counts(session: Session) -> tuple[int, int]:
    return (
        len(session.exec(select(PersonalRecord)).all()),
        len(session.exec(select(OneRepMaxHistory)).all()),
    )


# ---------------------------------------------------------------------------
# record_set
# ---------------------------------------------------------------------------


def test_first_completed_set_records_a_new_max(session: Session):
    exercise = _create_exercise(session)
    wx = _create_workout_exercise(session, exercise)
    exercise_set = _create_set(session, wx, weight=100, reps=5)

    recorded = record_set(exercise_set, session)

    assert recorded is not None
    assert _counts(session) == (1, 1)
    assert recorded.history.one_rep_max == pytest.approx(116.667, abs=1e-3)
    assert recorded.history.source == OneRepMaxSource.CALCULATED_FROM_SET
    assert recorded.history.calculation_method == OneRepMaxMethod.EPLEY
    assert recorded.history.confidence == ConfidenceLevel.MEDIUM
    assert recorded.history.source_record_id == recorded.record.id
    assert recorded.record.record_type == RecordType.CALCULATED
    assert recorded.record.workout_exercise_id == wx.id
    assert recorded.record.weight == 100
    assert recorded.record.reps == 5


def test_weaker_set_records_nothing(session: Session):
    exercise = _create_exercise(session)
    wx = _create_workout_exercise(session, exercise)
    record_set(_create_set(session, wx, weight=100, reps=5), session)

    assert record_set(_create_set(session, wx, weight=90, reps=5), session) is None
    assert _counts(session) == (1, 1)


def test_equal_estimate_is_not_a_new_max(session: Session):
    exercise = _create_exercise(session)
    wx = _create_workout_exercise(session, exercise)
    record_set(_create_set(session, wx, weight=100, reps=5), session)

    assert record_set(_create_set(session, wx, weight=100, reps=5), session) is None
    assert _counts(session) == (1, 1)


def test_stronger_set_records_again(session: Session):
    exercise = _create_exercise(session)
    wx = _create_workout_exercise(session, exercise)
    record_set(_create_set(session, wx, weight=100, reps=5), session)

    recorded = record_set(_create_set(session, wx, weight=105, reps=5), session)

    assert recorded is not None
    assert _counts(session) == (2, 2)


def test_weaker_set_on_non_ascii_exercise_records_nothing(session: Session):
    exercise = _create_exercise(session, "Élévation Latérale")
    wx = _create_workout_exercise(session, exercise)
    record_set(_create_set(session, wx, weight=100, reps=5), session)

    assert record_set(_create_set(session, wx, weight=10, reps=5), session) is None
    assert _counts(session) == (1, 1)


def test_incomplete_set_is_ignored(session: Session):
    exercise = _create_exercise(session)
    wx = _create_workout_exercise(session, exercise)
    exercise_set = _create_set(session, wx, weight=100, reps=5, completed=False)

    assert record_set(exercise_set, session) is None
    assert _counts(session) == (0, 0)


def test_single_rep_set_has_high_confidence(session: Session):
    exercise = _create_exercise(session)
    wx = _create_workout_exercise(session, exercise)

    recorded = record_set(_create_set(session, wx, weight=140, reps=1), session)

    assert recorded.history.confidence == ConfidenceLevel.HIGH


def test_record_uses_the_given_timestamp(session: Session):
    exercise = _create_exercise(session)
    wx = _create_workout_exercise(session, exercise)
    moment = datetime(2026, 1, 5, 19, 30)

    recorded = record_set(_create_set(session, wx, weight=100, reps=3), session, now=moment)

    assert recorded.history.date == moment
    assert recorded.record.date == moment


@pytest.mark.parametrize(
    "reps, expected",
    [
        (1, ConfidenceLevel.HIGH),
        (2, ConfidenceLevel.MEDIUM),
        (12, ConfidenceLevel.MEDIUM),
        (13, ConfidenceLevel.LOW),
        (0, ConfidenceLevel.LOW),
    ],
)
def test_confidence_for_reps(reps: int, expected: ConfidenceLevel):
    assert confidence_for_reps(reps) == expected


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def test_current_best_matches_name_case_insensitively(session: Session):
    exercise = _create_exercise(session, "Bench Press")
    _add_history(session, exercise, 110.0, datetime(2026, 2, 1))

    best = current_best("  bench PRESS ", session)

    assert best is not None
    assert best.one_rep_max == 110.0


def test_current_best_folds_non_ascii_names(session: Session):
    exercise = _create_exercise(session, "Élévation Latérale")
    _add_history(session, exercise, 40.0, datetime(2026, 2, 1))

    assert current_best("Élévation Latérale", session).one_rep_max == 40.0
    assert current_best("ÉLÉVATION LATÉRALE", session).one_rep_max == 40.0


def test_current_best_is_the_most_recent_entry(session: Session):
    exercise = _create_exercise(session)
    _add_history(session, exercise, 120.0, datetime(2026, 1, 1))
    _add_history(session, exercise, 110.0, datetime(2026, 2, 1))

    assert current_best("Bench Press", session).one_rep_max == 110.0


def test_current_best_unknown_exercise(session: Session):
    assert current_best("Underwater Basket Weaving", session) is None


def test_current_best_without_history(session: Session):
    _create_exercise(session)
    assert current_best("Bench Press", session) is None


def test_history_for_is_newest_first(session: Session):
    exercise = _create_exercise(session)
    _add_history(session, exercise, 100.0, datetime(2026, 1, 1))
    _add_history(session, exercise, 105.0, datetime(2026, 3, 1))
    _add_history(session, exercise, 102.0, datetime(2026, 2, 1))

    assert [h.one_rep_max for h in history_for(exercise.id, session)] == [105.0, 102.0, 100.0]


def test_history_for_unknown_exercise_is_empty(session: Session):
    assert history_for(uuid.uuid4(), session) == []


# ---------------------------------------------------------------------------
# Progression
# ---------------------------------------------------------------------------


def test_months_before_clamps_the_day():
    assert _months_before(datetime(2026, 3, 31, 8, 0), 1) == datetime(2026, 2, 28, 8, 0)
    assert _months_before(datetime(2026, 1, 15), 3) == datetime(2025, 10, 15)
    assert _months_before(datetime(2026, 5, 31), 12) == datetime(2025, 5, 31)


@pytest.mark.parametrize(
    "time_range, expected",
    [
        (TimeRange.LAST_MONTH, 1),
        (TimeRange.LAST_THREE_MONTHS, 2),
        (TimeRange.LAST_SIX_MONTHS, 2),
        (TimeRange.LAST_YEAR, 3),
        (TimeRange.ALL, 4),
    ],
)
def test_progression_window(session: Session, time_range: TimeRange, expected: int):
    exercise = _create_exercise(session)
    _add_history(session, exercise, 100.0, datetime(2024, 1, 1))
    _add_history(session, exercise, 105.0, datetime(2025, 6, 1))
    _add_history(session, exercise, 110.0, datetime(2026, 2, 27))
    _add_history(session, exercise, 112.0, datetime(2026, 3, 15))

    points = progression(exercise.id, time_range, session, now=datetime(2026, 3, 31))

    assert len(points) == expected
    assert points[0].one_rep_max == 112.0


def test_progression_maps_confidence_to_weights(session: Session):
    exercise = _create_exercise(session)
    _add_history(session, exercise, 100.0, datetime(2026, 1, 1), ConfidenceLevel.HIGH)
    _add_history(session, exercise, 101.0, datetime(2026, 1, 2), ConfidenceLevel.MEDIUM)
    _add_history(session, exercise, 102.0, datetime(2026, 1, 3), ConfidenceLevel.LOW)

    points = progression(exercise.id, TimeRange.ALL, session)

    assert [p.confidence for p in points] == [0.3, 0.6, 1.0]


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


def test_api_history(client: TestClient, session: Session):
    exercise = _create_exercise(session)
    _add_history(session, exercise, 100.0, datetime(2026, 1, 1))

    response = client.get(f"/api/progress/exercises/{exercise.id}/history")

    assert response.status_code == 200
    body = response.json()
    assert len(body) == 1
    assert body[0]["one_rep_max"] == 100.0
    assert body[0]["confidence"] == "Medium"


def test_api_history_unknown_exercise(client: TestClient):
    response = client.get(f"/api/progress/exercises/{uuid.uuid4()}/history")
    assert response.status_code == 404


def test_api_progression_range(client: TestClient, session: Session):
    exercise = _create_exercise(session)
    _add_history(session, exercise, 100.0, datetime(2000, 1, 1))
    _add_history(session, exercise, 110.0, datetime.now())

    response = client.get(
        f"/api/progress/exercises/{exercise.id}/progression", params={"range": "Last Month"}
    )

    assert response.status_code == 200
    assert [p["one_rep_max"] for p in response.json()] == [110.0]


def test_api_current_best(client: TestClient, session: Session):
    exercise = _create_exercise(session)
    _add_history(session, exercise, 100.0, datetime(2026, 1, 1))

    response = client.get("/api/progress/current-best", params={"name": "bench press"})

    assert response.status_code == 200
    assert response.json()["one_rep_max"] == 100.0


def test_api_current_best_unknown(client: TestClient):
    response = client.get("/api/progress/current-best", params={"name": "nope"})
    assert response.status_code == 200
    assert response.json() is None


def test_api_estimates(client: TestClient):
    response = client.get("/api/progress/estimate", params={"weight": 100, "reps": 5})

    assert response.status_code == 200
    by_method = {e["method"]: e["one_rep_max"] for e in response.json()}
    assert by_method["Brzycki"] == pytest.approx(112.5)
    assert set(by_method) == {"Epley", "Brzycki", "Lombardi", "McGlothin"}


def test_api_estimates_reject_reps_outside_formula_range(client: TestClient):
    response = client.get("/api/progress/estimate", params={"weight": 100, "reps": 37})
    assert response.status_code == 422


def test_api_estimates_at_highest_rep_count(client: TestClient):
    response = client.get("/api/progress/estimate", params={"weight": 100, "reps": 36})

    assert response.status_code == 200
    assert len(response.json()) == 4

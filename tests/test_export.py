import json
from datetime import datetime

import pytest
from sqlmodel import Session

from fitledger.enums import ConfidenceLevel, Equipment, ExerciseType, MuscleGroup
from fitledger.errors import EmptyStore
from fitledger.models import (
    Exercise,
    ExerciseSet,
    OneRepMaxHistory,
    PersonalRecord,
    UserProfile,
    Workout,
    WorkoutExercise,
)
from fitledger.services.export import (
    FORMAT_MARKER,
    export_bytes,
    export_document,
    export_filename,
    write_export_file,
)

DOCUMENT_KEYS = {
    "exercises",
    "workouts",
    "userProfiles",
    "personalRecords",
    "oneRepMaxHistory",
    "exportDate",
}


def _populate(session: Session) -> None:
    bench = Exercise(
        name="Bench Press",
        primary_muscle_group=MuscleGroup.CHEST,
        secondary_muscle_groups=["Triceps"],
        equipment=Equipment.BARBELL,
        exercise_type=ExerciseType.STRENGTH,
        is_compound=True,
    )
    curl = Exercise(
        name="Barbell Curl", primary_muscle_group=MuscleGroup.BICEPS, exercise_type=ExerciseType.STRENGTH
    )
    workout = Workout(name="Push", date=datetime(2026, 2, 1, 18, 0), duration=3600)
    wx = WorkoutExercise(workout_id=workout.id, exercise_id=bench.id, order=0)
    # Added out of order on purpose.
    sets = [
        ExerciseSet(workout_exercise_id=wx.id, set_number=2, weight=100, reps=5),
        ExerciseSet(workout_exercise_id=wx.id, set_number=1, weight=95, reps=6, rpe=8),
    ]
    record = PersonalRecord(
        exercise_id=bench.id, workout_exercise_id=wx.id, weight=100, reps=5, date=workout.date
    )
    history = OneRepMaxHistory(
        exercise_id=bench.id,
        source_record_id=record.id,
        one_rep_max=116.67,
        date=workout.date,
        confidence=ConfidenceLevel.MEDIUM,
    )
    session.add_all([bench, curl, workout, wx, *sets, record, history, UserProfile(name="Sam")])
    session.commit()


def test_export_empty_store_raises(session: Session):
    with pytest.raises(EmptyStore):
        export_document(session)


def test_export_document_keys(session: Session):
    _populate(session)

    document = export_document(session)

    assert set(document) == DOCUMENT_KEYS
    assert datetime.fromisoformat(document[FORMAT_MARKER]).tzinfo is not None


def test_export_only_a_profile_is_not_empty(session: Session):
    session.add(UserProfile(name="Sam"))
    session.commit()

    document = export_document(session)

    assert len(document["userProfiles"]) == 1
    assert document["exercises"] == []


def test_export_uses_camel_case_and_enum_values(session: Session):
    _populate(session)

    document = export_document(session)

    bench = next(e for e in document["exercises"] if e["name"] == "Bench Press")
    assert bench["primaryMuscleGroup"] == "Chest"
    assert bench["secondaryMuscleGroups"] == ["Triceps"]
    assert bench["equipment"] == "Barbell"
    assert bench["isCompound"] is True
    history = document["oneRepMaxHistory"][0]
    assert history["oneRepMax"] == 116.67
    assert history["confidence"] == "Medium"
    assert history["sourceRecordId"] == document["personalRecords"][0]["id"]


def test_export_sorts_exercises_by_name(session: Session):
    _populate(session)

    names = [e["name"] for e in export_document(session)["exercises"]]

    assert names == ["Barbell Curl", "Bench Press"]


def test_export_nests_sets_in_set_number_order(session: Session):
    _populate(session)

    workout = export_document(session)["workouts"][0]

    assert workout["duration"] == 3600
    [wx] = workout["exercises"]
    assert [s["setNumber"] for s in wx["sets"]] == [1, 2]
    assert wx["sets"][0]["rpe"] == 8
    assert wx["exerciseId"] == next(
        e["id"] for e in export_document(session)["exercises"] if e["name"] == "Bench Press"
    )


def test_export_bytes_is_json(session: Session):
    _populate(session)
    assert set(json.loads(export_bytes(session))) == DOCUMENT_KEYS


def test_export_filename():
    assert (
        export_filename(datetime(2026, 1, 2, 3, 4, 5)) == "fitledger_export_2026-01-02_03-04-05.json"
    )


def test_write_export_file(session: Session, tmp_path):
    _populate(session)

    path = write_export_file(session, tmp_path / "exports")

    assert path.parent == tmp_path / "exports"
    assert path.name.startswith("fitledger_export_")
    assert set(json.loads(path.read_text())) == DOCUMENT_KEYS

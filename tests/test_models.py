"""Smoke tests: verify all tables are created and basic records round-trip."""

import uuid
from datetime import datetime

from sqlmodel import Session, select

from fitledger.enums import (
    ConfidenceLevel,
    Equipment,
    ExerciseType,
    ExperienceLevel,
    MuscleGroup,
    OneRepMaxSource,
    WeightUnit,
    parse_enum,
)
from fitledger.models import (
    Exercise,
    ExerciseSet,
    OneRepMaxHistory,
    UserProfile,
    Workout,
    WorkoutExercise,
)


def test_exercise_roundtrip(session: Session):
    exercise = Exercise(
        name="Deadlift",
        primary_muscle_group=MuscleGroup.BACK,
        secondary_muscle_groups=["Hamstrings", "Glutes"],
        equipment=Equipment.BARBELL,
        exercise_type=ExerciseType.POWERLIFTING,
        is_compound=True,
    )
    session.add(exercise)
    session.commit()

    stored = session.exec(select(Exercise)).one()
    assert stored.id == exercise.id
    assert stored.primary_muscle_group == MuscleGroup.BACK
    assert stored.secondary_muscle_groups == ["Hamstrings", "Glutes"]


def test_set_defaults_and_volume(session: Session):
    workout = Workout(name="Pull", date=datetime(2026, 2, 1))
    wx = WorkoutExercise(workout_id=workout.id, exercise_id=uuid.uuid4(), order=0)
    exercise_set = ExerciseSet(workout_exercise_id=wx.id, set_number=1, weight=80, reps=8)
    session.add_all([workout, wx, exercise_set])
    session.commit()
    session.refresh(exercise_set)

    assert exercise_set.is_completed is False
    assert exercise_set.rpe is None
    assert exercise_set.volume == 640
    assert session.get(WorkoutExercise, wx.id).rest_time == 60


def test_profile_defaults(session: Session):
    profile = UserProfile()
    session.add(profile)
    session.commit()
    session.refresh(profile)

    assert profile.weight_unit == WeightUnit.KG
    assert profile.experience_level == ExperienceLevel.BEGINNER
    assert profile.workout_days_per_week == 3
    assert profile.primary_goals == []


def test_history_defaults(session: Session):
    entry = OneRepMaxHistory(exercise_id=uuid.uuid4(), one_rep_max=1)
    session.add(entry)
    session.commit()
    session.refresh(entry)

    assert entry.source == OneRepMaxSource.CALCULATED_FROM_SET
    assert entry.confidence == ConfidenceLevel.MEDIUM


def test_source_default_confidence():
    assert OneRepMaxSource.ACTUAL_TEST.default_confidence == ConfidenceLevel.HIGH
    assert OneRepMaxSource.CALCULATED_FROM_SET.default_confidence == ConfidenceLevel.MEDIUM
    assert OneRepMaxSource.MANUAL_ENTRY.default_confidence == ConfidenceLevel.MEDIUM
    assert OneRepMaxSource.ESTIMATED_FROM_VOLUME.default_confidence == ConfidenceLevel.LOW


def test_parse_enum_is_lenient():
    assert parse_enum(MuscleGroup, "full body") == MuscleGroup.FULL_BODY
    assert parse_enum(MuscleGroup, "FULL_BODY") == MuscleGroup.FULL_BODY
    assert parse_enum(Equipment, "pull-up bar") == Equipment.PULLUP_BAR
    assert parse_enum(ConfidenceLevel, "low") == ConfidenceLevel.LOW
    assert parse_enum(Equipment, "Laser") is None
    assert parse_enum(WeightUnit, None, WeightUnit.KG) == WeightUnit.KG

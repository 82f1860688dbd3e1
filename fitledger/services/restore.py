"""Rebuild entities from typed document records.

Every function here adds entities to the session but never commits; the
import sequence decides when to checkpoint. Identifiers from the document are
kept. When two records share an identifier the first one wins.
"""

import logging
import uuid
from dataclasses import dataclass, field

from sqlmodel import Session

from fitledger.models import Exercise
from fitledger.services.records import (
    ExerciseRecord,
    OneRepMaxRecord,
    PersonalRecordRecord,
    UserProfileRecord,
    WorkoutExerciseRecord,
    WorkoutRecord,
)

logger = logging.getLogger(__name__)


@dataclass
class RestoreCounts:
    restored: int = 0
    skipped: int = 0


@dataclass
class Lookups:
    """Identifiers restored during the current import, keyed for reference repair."""

    exercises: dict[uuid.UUID, Exercise] = field(default_factory=dict)
    workout_exercises: set[uuid.UUID] = field(default_factory=set)
    sets: set[uuid.UUID] = field(default_factory=set)
    workouts: set[uuid.UUID] = field(default_factory=set)
    personal_records: set[uuid.UUID] = field(default_factory=set)
    history: set[uuid.UUID] = field(default_factory=set)
    profiles: set[uuid.UUID] = field(default_factory=set)


def _claim(seen: set[uuid.UUID], identifier: uuid.UUID, kind: str) -> bool:
    """Register an identifier; False (with a warning) when it was already taken."""
    if identifier in seen:
        logger.warning("Duplicate %s ID %s found, keeping first occurrence", kind, identifier)
        return False
    seen.add(identifier)
    return True


# ---------------------------------------------------------------------------
# Restore steps
# ---------------------------------------------------------------------------


def restore_exercises(
    records: list[ExerciseRecord], lookups: Lookups, session: Session
) -> RestoreCounts:
    counts = RestoreCounts()
    for record in records:
        if record.id in lookups.exercises:
            logger.warning(
                "Skipping duplicate exercise ID in import file: %s - %s", record.id, record.name
            )
            counts.skipped += 1
            continue
        exercise = record.to_model()
        lookups.exercises[record.id] = exercise
        session.add(exercise)
        counts.restored += 1
    logger.debug("Imported %d exercises (skipped %d duplicates)", counts.restored, counts.skipped)
    return counts


def restore_profiles(
    records: list[UserProfileRecord], lookups: Lookups, session: Session
) -> RestoreCounts:
    counts = RestoreCounts()
    for record in records:
        if not _claim(lookups.profiles, record.id, "user profile"):
            counts.skipped += 1
            continue
        session.add(record.to_model())
        counts.restored += 1
    return counts


def _restore_workout_exercise(
    record: WorkoutExerciseRecord, workout_id: uuid.UUID, lookups: Lookups, session: Session
) -> bool:
    exercise = lookups.exercises.get(record.exercise_id) if record.exercise_id else None
    if exercise is None:
        logger.warning(
            "Skipping workout exercise %s - exercise %s not found", record.id, record.exercise_id
        )
        return False
    if not _claim(lookups.workout_exercises, record.id, "workout exercise"):
        return False

    session.add(record.to_model(workout_id=workout_id, exercise_id=exercise.id))
    for set_record in record.sets:
        if _claim(lookups.sets, set_record.id, "exercise set"):
            session.add(set_record.to_model(workout_exercise_id=record.id))
    return True


def restore_workouts(
    records: list[WorkoutRecord], lookups: Lookups, session: Session
) -> RestoreCounts:
    counts = RestoreCounts()
    for record in records:
        if not _claim(lookups.workouts, record.id, "workout"):
            counts.skipped += 1
            continue
        session.add(record.to_model())
        for wx_record in record.exercises:
            if not _restore_workout_exercise(wx_record, record.id, lookups, session):
                counts.skipped += 1
        counts.restored += 1
    logger.debug("Imported %d workouts with their exercises and sets", counts.restored)
    return counts


def restore_personal_records(
    records: list[PersonalRecordRecord], lookups: Lookups, session: Session
) -> RestoreCounts:
    counts = RestoreCounts()
    for record in records:
        exercise = lookups.exercises.get(record.exercise_id) if record.exercise_id else None
        if exercise is None:
            logger.warning("Skipping personal record %s - exercise not found", record.id)
            counts.skipped += 1
            continue
        if not _claim(lookups.personal_records, record.id, "personal record"):
            counts.skipped += 1
            continue

        workout_exercise_id = record.workout_exercise_id
        if workout_exercise_id is not None and workout_exercise_id not in lookups.workout_exercises:
            logger.warning(
                "Personal record %s points at unknown workout exercise %s, clearing link",
                record.id,
                workout_exercise_id,
            )
            workout_exercise_id = None

        session.add(record.to_model(exercise.id, workout_exercise_id))
        counts.restored += 1
    return counts


def restore_history(
    records: list[OneRepMaxRecord], lookups: Lookups, session: Session
) -> RestoreCounts:
    counts = RestoreCounts()
    for record in records:
        exercise = lookups.exercises.get(record.exercise_id) if record.exercise_id else None
        if exercise is None:
            logger.warning("Skipping 1RM history %s - exercise not found", record.id)
            counts.skipped += 1
            continue
        if not _claim(lookups.history, record.id, "1RM history"):
            counts.skipped += 1
            continue

        source_record_id = record.source_record_id
        if source_record_id is not None and source_record_id not in lookups.personal_records:
            logger.warning(
                "1RM history %s points at unknown personal record %s, clearing link",
                record.id,
                source_record_id,
            )
            source_record_id = None

        session.add(record.to_model(exercise.id, source_record_id))
        counts.restored += 1
    return counts

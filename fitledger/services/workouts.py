"""Structural edits of a workout.

Sets are only ever changed through these functions so that a workout
exercise's set numbers stay a contiguous 1..N sequence.
"""

import logging
import uuid
from datetime import datetime

from sqlmodel import Session, select

from fitledger.errors import NotFound
from fitledger.models import Exercise, ExerciseSet, Workout, WorkoutExercise
from fitledger.services.progress import RecordedMax, record_set

logger = logging.getLogger(__name__)


def _sets_for(workout_exercise_id: uuid.UUID, session: Session) -> list[ExerciseSet]:
    return list(
        session.exec(
            select(ExerciseSet)
            .where(ExerciseSet.workout_exercise_id == workout_exercise_id)
            .order_by(ExerciseSet.set_number, ExerciseSet.id)
        ).all()
    )


def _require(model, identifier: uuid.UUID, label: str, session: Session):
    row = session.get(model, identifier)
    if row is None:
        raise NotFound(f"{label} not found")
    return row


def renumber_sets(workout_exercise_id: uuid.UUID, session: Session) -> list[ExerciseSet]:
    """Rewrite set numbers as 1..N keeping the current order."""
    sets = _sets_for(workout_exercise_id, session)
    for number, exercise_set in enumerate(sets, start=1):
        if exercise_set.set_number != number:
            exercise_set.set_number = number
            session.add(exercise_set)
    return sets


def create_workout(
    name: str,
    session: Session,
    date: datetime | None = None,
    notes: str | None = None,
) -> Workout:
    date = date or datetime.now()
    if date.tzinfo is not None:
        date = date.astimezone().replace(tzinfo=None)
    workout = Workout(name=name, date=date, notes=notes)
    session.add(workout)
    session.commit()
    session.refresh(workout)
    return workout


def add_exercise_to_workout(
    workout_id: uuid.UUID,
    exercise_id: uuid.UUID,
    session: Session,
    rest_time: int = 60,
    notes: str | None = None,
) -> WorkoutExercise:
    _require(Workout, workout_id, "Workout", session)
    _require(Exercise, exercise_id, "Exercise", session)

    existing = session.exec(
        select(WorkoutExercise).where(WorkoutExercise.workout_id == workout_id)
    ).all()
    wx = WorkoutExercise(
        workout_id=workout_id,
        exercise_id=exercise_id,
        order=len(existing),
        rest_time=rest_time,
        notes=notes,
    )
    session.add(wx)
    session.commit()
    session.refresh(wx)
    return wx


def add_set(
    workout_exercise_id: uuid.UUID,
    session: Session,
    weight: float = 0.0,
    reps: int = 0,
    **fields,
) -> ExerciseSet:
    """Append a set as number N+1."""
    _require(WorkoutExercise, workout_exercise_id, "Workout exercise", session)
    existing = _sets_for(workout_exercise_id, session)
    exercise_set = ExerciseSet(
        workout_exercise_id=workout_exercise_id,
        set_number=len(existing) + 1,
        weight=weight,
        reps=reps,
        **fields,
    )
    session.add(exercise_set)
    session.commit()
    session.refresh(exercise_set)
    return exercise_set


def insert_set(
    workout_exercise_id: uuid.UUID,
    position: int,
    session: Session,
    weight: float = 0.0,
    reps: int = 0,
    **fields,
) -> ExerciseSet:
    """Insert a set so that it becomes set number ``position`` (clamped to 1..N+1)."""
    _require(WorkoutExercise, workout_exercise_id, "Workout exercise", session)
    existing = _sets_for(workout_exercise_id, session)
    position = max(1, min(position, len(existing) + 1))

    for exercise_set in existing[position - 1 :]:
        exercise_set.set_number += 1
        session.add(exercise_set)

    new_set = ExerciseSet(
        workout_exercise_id=workout_exercise_id,
        set_number=position,
        weight=weight,
        reps=reps,
        **fields,
    )
    session.add(new_set)
    session.commit()
    session.refresh(new_set)
    return new_set


def update_set(set_id: uuid.UUID, session: Session, **changes) -> ExerciseSet:
    exercise_set = _require(ExerciseSet, set_id, "Set", session)
    for key, value in changes.items():
        if key in {"id", "workout_exercise_id", "set_number"}:
            raise ValueError(f"{key} cannot be changed directly")
        setattr(exercise_set, key, value)
    session.add(exercise_set)
    session.commit()
    session.refresh(exercise_set)
    return exercise_set


def delete_set(set_id: uuid.UUID, session: Session) -> None:
    exercise_set = _require(ExerciseSet, set_id, "Set", session)
    workout_exercise_id = exercise_set.workout_exercise_id
    session.delete(exercise_set)
    session.flush()
    renumber_sets(workout_exercise_id, session)
    session.commit()


def complete_set(
    set_id: uuid.UUID, session: Session, now: datetime | None = None
) -> tuple[ExerciseSet, RecordedMax | None]:
    """Mark a set completed and let the tracking engine decide whether it is a new best."""
    exercise_set = _require(ExerciseSet, set_id, "Set", session)
    exercise_set.is_completed = True
    session.add(exercise_set)
    session.commit()
    session.refresh(exercise_set)

    recorded = record_set(exercise_set, session, now=now)
    if recorded is not None:
        logger.debug("Set %s produced a new personal record", set_id)
    return exercise_set, recorded

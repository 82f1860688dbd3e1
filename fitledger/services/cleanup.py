"""Deletion order, cascades and reference checks for the entity store.

SQLite does not enforce our foreign keys, so this module is the source of
truth for safe deletion: owners delete what they own, and non-owning optional
references are cleared before their target goes away.
"""

import logging
import uuid
from collections.abc import Callable

from sqlmodel import Session, select

from fitledger.errors import ExerciseInUse, NotFound
from fitledger.models import (
    Exercise,
    ExerciseSet,
    OneRepMaxHistory,
    PersonalRecord,
    UserProfile,
    Workout,
    WorkoutExercise,
)

logger = logging.getLogger(__name__)

WIPE_ORDER = (
    "personal_records",
    "one_rep_max_history",
    "workouts",
    "user_profiles",
    "orphaned_workout_exercises",
    "exercises",
)


# ---------------------------------------------------------------------------
# Cascades
# ---------------------------------------------------------------------------


def _detach_records_from_workout_exercises(wx_ids: list[uuid.UUID], session: Session) -> None:
    if not wx_ids:
        return
    records = session.exec(
        select(PersonalRecord).where(PersonalRecord.workout_exercise_id.in_(wx_ids))
    ).all()
    for record in records:
        record.workout_exercise_id = None
        session.add(record)


def _delete_workout_exercises(workout_exercises: list[WorkoutExercise], session: Session) -> None:
    """Delete ExerciseSets -> WorkoutExercises."""
    wx_ids = [wx.id for wx in workout_exercises]
    if not wx_ids:
        return
    sets = session.exec(select(ExerciseSet).where(ExerciseSet.workout_exercise_id.in_(wx_ids))).all()
    for s in sets:
        session.delete(s)
    _detach_records_from_workout_exercises(wx_ids, session)
    for wx in workout_exercises:
        session.delete(wx)


def _delete_workout_cascade(workout: Workout, session: Session) -> None:
    """Delete ExerciseSets -> WorkoutExercises -> Workout."""
    workout_exercises = session.exec(
        select(WorkoutExercise).where(WorkoutExercise.workout_id == workout.id)
    ).all()
    _delete_workout_exercises(list(workout_exercises), session)
    session.delete(workout)


def delete_workout(workout_id: uuid.UUID, session: Session) -> None:
    workout = session.get(Workout, workout_id)
    if workout is None:
        raise NotFound("Workout not found")
    _delete_workout_cascade(workout, session)
    session.commit()


def delete_workout_exercise(workout_exercise_id: uuid.UUID, session: Session) -> None:
    """Remove one exercise from its workout and close the gap in the order indices."""
    wx = session.get(WorkoutExercise, workout_exercise_id)
    if wx is None:
        raise NotFound("Workout exercise not found")
    workout_id = wx.workout_id
    _delete_workout_exercises([wx], session)
    session.flush()

    remaining = session.exec(
        select(WorkoutExercise)
        .where(WorkoutExercise.workout_id == workout_id)
        .order_by(WorkoutExercise.order)
    ).all()
    for index, other in enumerate(remaining):
        other.order = index
        session.add(other)
    session.commit()


def exercise_references(exercise_id: uuid.UUID, session: Session) -> dict[str, int]:
    """Count the rows that still point at an exercise."""
    return {
        "workout_exercises": len(
            session.exec(
                select(WorkoutExercise.id).where(WorkoutExercise.exercise_id == exercise_id)
            ).all()
        ),
        "personal_records": len(
            session.exec(
                select(PersonalRecord.id).where(PersonalRecord.exercise_id == exercise_id)
            ).all()
        ),
        "one_rep_max_history": len(
            session.exec(
                select(OneRepMaxHistory.id).where(OneRepMaxHistory.exercise_id == exercise_id)
            ).all()
        ),
    }


def delete_exercise(exercise_id: uuid.UUID, session: Session) -> None:
    exercise = session.get(Exercise, exercise_id)
    if exercise is None:
        raise NotFound("Exercise not found")
    references = {k: v for k, v in exercise_references(exercise_id, session).items() if v}
    if references:
        detail = ", ".join(f"{count} {kind}" for kind, count in references.items())
        raise ExerciseInUse(f"Exercise '{exercise.name}' is still referenced by {detail}")
    session.delete(exercise)
    session.commit()


def delete_personal_record(record_id: uuid.UUID, session: Session) -> None:
    record = session.get(PersonalRecord, record_id)
    if record is None:
        raise NotFound("Personal record not found")
    _detach_history_from_records([record_id], session)
    session.delete(record)
    session.commit()


def _detach_history_from_records(record_ids: list[uuid.UUID], session: Session) -> None:
    if not record_ids:
        return
    entries = session.exec(
        select(OneRepMaxHistory).where(OneRepMaxHistory.source_record_id.in_(record_ids))
    ).all()
    for entry in entries:
        entry.source_record_id = None
        session.add(entry)


# ---------------------------------------------------------------------------
# Full wipe
# ---------------------------------------------------------------------------


def _wipe_personal_records(session: Session) -> int:
    records = session.exec(select(PersonalRecord)).all()
    _detach_history_from_records([r.id for r in records], session)
    for record in records:
        session.delete(record)
    return len(records)


def _wipe_rows(model, session: Session) -> int:
    rows = session.exec(select(model)).all()
    for row in rows:
        session.delete(row)
    return len(rows)


def _wipe_workouts(session: Session) -> int:
    workouts = session.exec(select(Workout)).all()
    for workout in workouts:
        _delete_workout_cascade(workout, session)
    return len(workouts)


def _wipe_orphans(session: Session) -> int:
    # Sets first so no set outlives its workout exercise, even between flushes.
    deleted = _wipe_rows(ExerciseSet, session)
    session.flush()
    return deleted + _wipe_rows(WorkoutExercise, session)


_WIPE_STEPS: dict[str, Callable[[Session], int]] = {
    "personal_records": _wipe_personal_records,
    "one_rep_max_history": lambda session: _wipe_rows(OneRepMaxHistory, session),
    "workouts": _wipe_workouts,
    "user_profiles": lambda session: _wipe_rows(UserProfile, session),
    "orphaned_workout_exercises": _wipe_orphans,
    "exercises": lambda session: _wipe_rows(Exercise, session),
}


def wipe_all(session: Session, on_step: Callable[[str], None] | None = None) -> None:
    """Delete every entity in the safe order. Calling it on an empty store is a no-op.

    ``on_step`` is called with the step name after each step has been flushed.
    """
    logger.debug("Clearing all data from the store")
    for step in WIPE_ORDER:
        deleted = _WIPE_STEPS[step](session)
        session.flush()
        if deleted:
            logger.debug("Deleted %d rows in step %s", deleted, step)
        if on_step is not None:
            on_step(step)
    session.commit()
    logger.debug("All data cleared from the store")


# ---------------------------------------------------------------------------
# Integrity checks
# ---------------------------------------------------------------------------


def _ids(model, session: Session) -> set[uuid.UUID]:
    return set(session.exec(select(model.id)).all())


def dangling_references(session: Session) -> list[str]:
    """Describe every reference whose target does not exist."""
    workout_ids = _ids(Workout, session)
    exercise_ids = _ids(Exercise, session)
    wx_ids = _ids(WorkoutExercise, session)
    record_ids = _ids(PersonalRecord, session)

    problems: list[str] = []
    for wx in session.exec(select(WorkoutExercise)).all():
        if wx.workout_id not in workout_ids:
            problems.append(f"WorkoutExercise {wx.id} has no workout {wx.workout_id}")
        if wx.exercise_id not in exercise_ids:
            problems.append(f"WorkoutExercise {wx.id} has no exercise {wx.exercise_id}")
    for s in session.exec(select(ExerciseSet)).all():
        if s.workout_exercise_id not in wx_ids:
            problems.append(f"ExerciseSet {s.id} has no workout exercise {s.workout_exercise_id}")
    for record in session.exec(select(PersonalRecord)).all():
        if record.exercise_id not in exercise_ids:
            problems.append(f"PersonalRecord {record.id} has no exercise {record.exercise_id}")
        if record.workout_exercise_id is not None and record.workout_exercise_id not in wx_ids:
            problems.append(
                f"PersonalRecord {record.id} has no workout exercise {record.workout_exercise_id}"
            )
    for entry in session.exec(select(OneRepMaxHistory)).all():
        if entry.exercise_id not in exercise_ids:
            problems.append(f"OneRepMaxHistory {entry.id} has no exercise {entry.exercise_id}")
        if entry.source_record_id is not None and entry.source_record_id not in record_ids:
            problems.append(
                f"OneRepMaxHistory {entry.id} has no personal record {entry.source_record_id}"
            )
    return problems

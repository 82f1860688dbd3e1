import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sqlmodel import Session, select

from fitledger.config import get_settings
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
from fitledger.services.records import (
    ExerciseRecord,
    OneRepMaxRecord,
    PersonalRecordRecord,
    UserProfileRecord,
    WorkoutExerciseRecord,
    WorkoutRecord,
)

logger = logging.getLogger(__name__)

# Presence of this key is what marks a document as one of our exports.
FORMAT_MARKER = "exportDate"


def _workout_record(workout: Workout, session: Session) -> WorkoutRecord:
    workout_exercises = session.exec(
        select(WorkoutExercise)
        .where(WorkoutExercise.workout_id == workout.id)
        .order_by(WorkoutExercise.order)
    ).all()

    exercise_records: list[WorkoutExerciseRecord] = []
    for wx in workout_exercises:
        sets = session.exec(
            select(ExerciseSet)
            .where(ExerciseSet.workout_exercise_id == wx.id)
            .order_by(ExerciseSet.set_number)
        ).all()
        exercise_records.append(WorkoutExerciseRecord.from_model(wx, list(sets)))

    return WorkoutRecord.from_model(workout, exercise_records)


def export_document(session: Session) -> dict[str, Any]:
    """Flatten the whole entity store into one self-describing document.

    The caller must hold exclusive access to the store for the duration of
    the call so the document reflects a single consistent snapshot.
    """
    logger.info("Starting data export")

    exercises = session.exec(select(Exercise).order_by(Exercise.name)).all()
    workouts = session.exec(select(Workout).order_by(Workout.date)).all()
    profiles = session.exec(select(UserProfile)).all()
    records = session.exec(select(PersonalRecord).order_by(PersonalRecord.date)).all()
    history = session.exec(select(OneRepMaxHistory).order_by(OneRepMaxHistory.date)).all()

    if not (exercises or workouts or profiles or records or history):
        logger.warning("No data to export")
        raise EmptyStore()

    document = {
        "exercises": [ExerciseRecord.from_model(e).dump() for e in exercises],
        "workouts": [_workout_record(w, session).dump() for w in workouts],
        "userProfiles": [UserProfileRecord.from_model(p).dump() for p in profiles],
        "personalRecords": [PersonalRecordRecord.from_model(r).dump() for r in records],
        "oneRepMaxHistory": [OneRepMaxRecord.from_model(h).dump() for h in history],
        FORMAT_MARKER: datetime.now(timezone.utc).isoformat(),
    }

    logger.debug(
        "Exported %d workouts, %d exercises, %d records, %d 1RM entries",
        len(workouts),
        len(exercises),
        len(records),
        len(history),
    )
    return document


def export_bytes(session: Session) -> bytes:
    return json.dumps(export_document(session), indent=2, ensure_ascii=False).encode("utf-8")


def export_filename(moment: datetime | None = None) -> str:
    moment = moment or datetime.now()
    return f"fitledger_export_{moment.strftime('%Y-%m-%d_%H-%M-%S')}.json"


def write_export_file(session: Session, directory: Path | None = None) -> Path:
    """Write an export document into ``directory`` (default: the configured export dir)."""
    directory = directory or get_settings().export_dir
    payload = export_bytes(session)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename()
    path.write_bytes(payload)
    logger.info("Export file created: %s", path.name)
    return path

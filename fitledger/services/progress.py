import calendar
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlmodel import Session, select

from fitledger.enums import (
    ConfidenceLevel,
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
    WorkoutExercise,
)
from fitledger.services.formulas import estimate

logger = logging.getLogger(__name__)

_RANGE_MONTHS = {
    TimeRange.LAST_MONTH: 1,
    TimeRange.LAST_THREE_MONTHS: 3,
    TimeRange.LAST_SIX_MONTHS: 6,
    TimeRange.LAST_YEAR: 12,
}


@dataclass
class ProgressPoint:
    date: datetime
    one_rep_max: float
    confidence: float
    source: OneRepMaxSource


@dataclass
class RecordedMax:
    history: OneRepMaxHistory
    record: PersonalRecord


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _months_before(moment: datetime, months: int) -> datetime:
    """Calendar subtraction; the day is clamped to the length of the target month."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month0 = divmod(month_index, 12)
    month = month0 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _cutoff(time_range: TimeRange, now: datetime) -> datetime | None:
    months = _RANGE_MONTHS.get(time_range)
    if months is None:
        return None
    return _months_before(now, months)


def _find_exercise_by_name(name: str, session: Session) -> Exercise | None:
    # Folded in Python: SQLite lower() only handles ASCII.
    wanted = name.strip().casefold()
    for exercise in session.exec(select(Exercise)).all():
        if exercise.name.casefold() == wanted:
            return exercise
    return None


def confidence_for_reps(reps: int) -> ConfidenceLevel:
    """Lower rep counts give a more reliable strength estimate."""
    if reps == 1:
        return ConfidenceLevel.HIGH
    if 2 <= reps <= 12:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def history_for(exercise_id: uuid.UUID, session: Session) -> list[OneRepMaxHistory]:
    """All 1RM history for an exercise, newest first."""
    return list(
        session.exec(
            select(OneRepMaxHistory)
            .where(OneRepMaxHistory.exercise_id == exercise_id)
            .order_by(OneRepMaxHistory.date.desc())
        ).all()
    )


def current_best(exercise_name: str, session: Session) -> OneRepMaxHistory | None:
    """Most recent 1RM entry for the exercise with this name (case-insensitive)."""
    exercise = _find_exercise_by_name(exercise_name, session)
    if exercise is None:
        logger.warning("Exercise '%s' not found in catalog", exercise_name)
        return None

    history = history_for(exercise.id, session)
    if not history:
        return None
    latest = history[0]
    logger.debug("Current 1RM for %s: %.2f", exercise.name, latest.one_rep_max)
    return latest


def record_set(
    exercise_set: ExerciseSet, session: Session, now: datetime | None = None
) -> RecordedMax | None:
    """Record a new estimated max (and personal record) if this set beats the current best.

    Returns None when nothing was created: the set is not completed, its
    exercise cannot be resolved, or its estimate does not exceed the best.
    """
    if not exercise_set.is_completed:
        return None

    workout_exercise = session.get(WorkoutExercise, exercise_set.workout_exercise_id)
    if workout_exercise is None:
        return None
    exercise = session.get(Exercise, workout_exercise.exercise_id)
    if exercise is None:
        return None

    best = current_best(exercise.name, session)
    new_max = estimate(exercise_set.weight, exercise_set.reps, OneRepMaxMethod.EPLEY)
    previous = best.one_rep_max if best is not None else 0.0
    if new_max <= previous:
        return None

    now = now or datetime.now()
    record = PersonalRecord(
        exercise_id=exercise.id,
        workout_exercise_id=workout_exercise.id,
        weight=exercise_set.weight,
        reps=exercise_set.reps,
        date=now,
        record_type=RecordType.CALCULATED,
        calculation_method=OneRepMaxMethod.EPLEY,
    )
    history = OneRepMaxHistory(
        exercise_id=exercise.id,
        source_record_id=record.id,
        one_rep_max=new_max,
        date=now,
        source=OneRepMaxSource.CALCULATED_FROM_SET,
        calculation_method=OneRepMaxMethod.EPLEY,
        confidence=confidence_for_reps(exercise_set.reps),
    )
    session.add(record)
    session.add(history)
    session.commit()
    session.refresh(record)
    session.refresh(history)

    logger.info(
        "New 1RM for %s: %.2f (previous %.2f, %s confidence)",
        exercise.name,
        new_max,
        previous,
        history.confidence.value,
    )
    return RecordedMax(history=history, record=record)


def progression(
    exercise_id: uuid.UUID,
    time_range: TimeRange,
    session: Session,
    now: datetime | None = None,
) -> list[ProgressPoint]:
    """1RM series for an exercise within a time window, newest first."""
    history = history_for(exercise_id, session)
    cutoff = _cutoff(time_range, now or datetime.now())
    if cutoff is not None:
        history = [h for h in history if h.date >= cutoff]

    return [
        ProgressPoint(
            date=h.date,
            one_rep_max=h.one_rep_max,
            confidence=h.confidence.weight,
            source=h.source,
        )
        for h in history
    ]


def best_estimate_for_workout_exercise(workout_exercise_id: uuid.UUID, session: Session) -> float:
    """Highest Epley estimate across a workout exercise's sets (0 when it has none)."""
    sets = session.exec(
        select(ExerciseSet).where(ExerciseSet.workout_exercise_id == workout_exercise_id)
    ).all()
    return max((estimate(s.weight, s.reps) for s in sets), default=0.0)

"""Intake of workouts produced by an external generator (e.g. an LLM client).

The generator is untrusted. Its output is parsed, matched against the live
catalog and structurally validated before anything is written, so discarding
a candidate never requires undoing a store mutation.
"""

import json
import logging
import uuid
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from sqlmodel import Session, select

from fitledger.config import get_settings
from fitledger.errors import InvalidWorkout
from fitledger.models import Exercise, ExerciseSet, Workout, WorkoutExercise

logger = logging.getLogger(__name__)


class _GeneratedModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GeneratedSet(_GeneratedModel):
    set_number: int
    target_reps: int
    target_weight: float
    notes: str | None = None


class GeneratedExercise(_GeneratedModel):
    name: str
    primary_muscle: str | None = None
    exercise_type: str | None = None
    rest_time: int = 60
    sets: list[GeneratedSet] = Field(default_factory=list)


class GeneratedWorkout(_GeneratedModel):
    workout_name: str
    exercises: list[GeneratedExercise] = Field(default_factory=list)


@dataclass
class PlannedExercise:
    exercise_id: uuid.UUID
    rest_time: int
    sets: list[GeneratedSet]


@dataclass
class PlannedWorkout:
    name: str
    exercises: list[PlannedExercise] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)


def _strip_fences(text: str) -> str:
    cleaned = text.replace("```json", "").replace("```", "").strip()
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start != -1 and end > start:
        cleaned = cleaned[start : end + 1]
    return cleaned


def parse_generated_workout(text: str) -> GeneratedWorkout:
    """Parse a generator response, tolerating Markdown fences and surrounding prose."""
    try:
        return GeneratedWorkout.model_validate(json.loads(_strip_fences(text)))
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.warning("Generated workout is not valid JSON for the expected structure")
        raise InvalidWorkout("Generated workout could not be parsed") from exc


def validate_plan(plan: PlannedWorkout) -> None:
    settings = get_settings()
    count = len(plan.exercises)
    if not settings.min_generated_exercises <= count <= settings.max_generated_exercises:
        logger.warning("Workout validation failed: invalid exercise count %d", count)
        raise InvalidWorkout(
            f"Workout must contain {settings.min_generated_exercises}-"
            f"{settings.max_generated_exercises} exercises, got {count}"
        )
    for planned in plan.exercises:
        set_count = len(planned.sets)
        if not settings.min_generated_sets <= set_count <= settings.max_generated_sets:
            logger.warning("Workout validation failed: invalid set count %d", set_count)
            raise InvalidWorkout(
                f"Each exercise needs {settings.min_generated_sets}-"
                f"{settings.max_generated_sets} sets, got {set_count}"
            )


def plan_generated_workout(candidate: GeneratedWorkout, session: Session) -> PlannedWorkout:
    """Match a candidate against the catalog and validate it. Nothing is persisted."""
    catalog = {e.name: e for e in session.exec(select(Exercise)).all()}
    plan = PlannedWorkout(name=candidate.workout_name)

    for generated in candidate.exercises:
        exercise = catalog.get(generated.name)
        if exercise is None:
            logger.warning("Exercise '%s' not found in available exercises", generated.name)
            plan.dropped.append(generated.name)
            continue
        plan.exercises.append(
            PlannedExercise(exercise_id=exercise.id, rest_time=generated.rest_time, sets=generated.sets)
        )

    validate_plan(plan)
    return plan


def save_planned_workout(plan: PlannedWorkout, session: Session) -> Workout:
    workout = Workout(name=plan.name)
    session.add(workout)
    for order, planned in enumerate(plan.exercises):
        wx = WorkoutExercise(
            workout_id=workout.id,
            exercise_id=planned.exercise_id,
            order=order,
            rest_time=planned.rest_time,
        )
        session.add(wx)
        # Numbered by position so the stored sets are always 1..N.
        for number, generated_set in enumerate(planned.sets, start=1):
            session.add(
                ExerciseSet(
                    workout_exercise_id=wx.id,
                    set_number=number,
                    weight=generated_set.target_weight,
                    reps=generated_set.target_reps,
                    notes=generated_set.notes,
                )
            )
    session.commit()
    session.refresh(workout)
    logger.info("Saved generated workout '%s' with %d exercises", plan.name, len(plan.exercises))
    return workout

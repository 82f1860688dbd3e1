import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, SQLModel, select

from fitledger.database import exclusive_access, get_session
from fitledger.errors import InvalidWorkout, NotFound
from fitledger.models import Exercise, ExerciseSet, Workout, WorkoutExercise
from fitledger.services.cleanup import delete_workout, delete_workout_exercise
from fitledger.services.generated import (
    parse_generated_workout,
    plan_generated_workout,
    save_planned_workout,
)
from fitledger.services.progress import best_estimate_for_workout_exercise
from fitledger.services.workouts import add_exercise_to_workout, create_workout

router = APIRouter()

SessionDep = Annotated[Session, Depends(get_session)]


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class SetRead(SQLModel):
    id: uuid.UUID
    set_number: int
    weight: float
    reps: int
    is_completed: bool
    rpe: float | None
    rest_time: int | None
    notes: str | None
    duration: float | None
    distance: float | None


class WorkoutExerciseRead(SQLModel):
    id: uuid.UUID
    exercise_id: uuid.UUID
    exercise_name: str
    order: int
    rest_time: int
    notes: str | None
    best_estimate: float
    sets: list[SetRead]


class WorkoutRead(SQLModel):
    id: uuid.UUID
    name: str
    date: datetime
    duration: float | None
    notes: str | None
    exercises: list[WorkoutExerciseRead]


class WorkoutSummary(SQLModel):
    id: uuid.UUID
    name: str
    date: datetime
    exercise_names: list[str]
    total_volume: float


class GeneratedWorkoutRead(SQLModel):
    workout: WorkoutRead
    dropped_exercises: list[str]


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class WorkoutCreate(SQLModel):
    name: str
    date: datetime | None = None
    notes: str | None = None


class GeneratedWorkoutBody(SQLModel):
    response: str


class AddExerciseBody(SQLModel):
    exercise_id: uuid.UUID
    rest_time: int = 60
    notes: str | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _workout_exercises(workout_id: uuid.UUID, session: Session) -> list[WorkoutExercise]:
    return list(
        session.exec(
            select(WorkoutExercise)
            .where(WorkoutExercise.workout_id == workout_id)
            .order_by(WorkoutExercise.order)
        ).all()
    )


def _build_workout_read(workout: Workout, session: Session) -> WorkoutRead:
    exercises: list[WorkoutExerciseRead] = []
    for wx in _workout_exercises(workout.id, session):
        exercise = session.get(Exercise, wx.exercise_id)
        sets = session.exec(
            select(ExerciseSet)
            .where(ExerciseSet.workout_exercise_id == wx.id)
            .order_by(ExerciseSet.set_number)
        ).all()
        exercises.append(
            WorkoutExerciseRead(
                id=wx.id,
                exercise_id=wx.exercise_id,
                exercise_name=exercise.name if exercise else "",
                order=wx.order,
                rest_time=wx.rest_time,
                notes=wx.notes,
                best_estimate=best_estimate_for_workout_exercise(wx.id, session),
                sets=[SetRead.model_validate(s, from_attributes=True) for s in sets],
            )
        )

    return WorkoutRead(
        id=workout.id,
        name=workout.name,
        date=workout.date,
        duration=workout.duration,
        notes=workout.notes,
        exercises=exercises,
    )


def _get_workout_or_404(workout_id: uuid.UUID, session: Session) -> Workout:
    workout = session.get(Workout, workout_id)
    if workout is None:
        raise HTTPException(status_code=404, detail="Workout not found")
    return workout


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/", response_model=list[WorkoutSummary])
def list_workouts(session: SessionDep):
    workouts = session.exec(select(Workout).order_by(Workout.date.desc())).all()
    summaries = []
    for workout in workouts:
        names = []
        volume = 0.0
        for wx in _workout_exercises(workout.id, session):
            exercise = session.get(Exercise, wx.exercise_id)
            if exercise:
                names.append(exercise.name)
            sets = session.exec(
                select(ExerciseSet).where(ExerciseSet.workout_exercise_id == wx.id)
            ).all()
            volume += sum(s.volume for s in sets if s.is_completed)
        summaries.append(
            WorkoutSummary(
                id=workout.id,
                name=workout.name,
                date=workout.date,
                exercise_names=names,
                total_volume=volume,
            )
        )
    return summaries


@router.post("/", response_model=WorkoutRead, status_code=201)
def create(body: WorkoutCreate, session: SessionDep):
    with exclusive_access():
        workout = create_workout(body.name, session, date=body.date, notes=body.notes)
    return _build_workout_read(workout, session)


@router.post("/generated", response_model=GeneratedWorkoutRead, status_code=201)
def create_generated(body: GeneratedWorkoutBody, session: SessionDep):
    """Accept a generator's raw response, validate it and save it as a workout."""
    with exclusive_access():
        try:
            plan = plan_generated_workout(parse_generated_workout(body.response), session)
        except InvalidWorkout as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        workout = save_planned_workout(plan, session)
    return GeneratedWorkoutRead(
        workout=_build_workout_read(workout, session), dropped_exercises=plan.dropped
    )


@router.get("/{workout_id}", response_model=WorkoutRead)
def get_workout(workout_id: uuid.UUID, session: SessionDep):
    workout = _get_workout_or_404(workout_id, session)
    return _build_workout_read(workout, session)


@router.delete("/{workout_id}", status_code=204)
def remove_workout(workout_id: uuid.UUID, session: SessionDep):
    with exclusive_access():
        try:
            delete_workout(workout_id, session)
        except NotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc))


@router.post("/{workout_id}/exercises", response_model=WorkoutRead, status_code=201)
def add_exercise(workout_id: uuid.UUID, body: AddExerciseBody, session: SessionDep):
    with exclusive_access():
        try:
            add_exercise_to_workout(
                workout_id, body.exercise_id, session, rest_time=body.rest_time, notes=body.notes
            )
        except NotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc))
    return _build_workout_read(_get_workout_or_404(workout_id, session), session)


@router.delete("/{workout_id}/exercises/{wx_id}", status_code=204)
def remove_exercise(workout_id: uuid.UUID, wx_id: uuid.UUID, session: SessionDep):
    wx = session.get(WorkoutExercise, wx_id)
    if wx is None or wx.workout_id != workout_id:
        raise HTTPException(status_code=404, detail="Workout exercise not found")
    with exclusive_access():
        delete_workout_exercise(wx_id, session)

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, SQLModel, select

from fitledger.database import exclusive_access, get_session
from fitledger.enums import Equipment, ExerciseType, MuscleGroup
from fitledger.errors import ExerciseInUse, NotFound
from fitledger.models import Exercise
from fitledger.services.cleanup import delete_exercise

router = APIRouter()

SessionDep = Annotated[Session, Depends(get_session)]


class ExerciseRead(SQLModel):
    id: uuid.UUID
    name: str
    primary_muscle_group: MuscleGroup
    secondary_muscle_groups: list[str]
    equipment: Equipment | None
    exercise_type: ExerciseType
    is_compound: bool
    instructions: str | None


@router.get("/", response_model=list[ExerciseRead])
def list_exercises(session: SessionDep, muscle_group: MuscleGroup | None = None):
    statement = select(Exercise).order_by(Exercise.name)
    if muscle_group is not None:
        statement = statement.where(Exercise.primary_muscle_group == muscle_group)
    return session.exec(statement).all()


@router.get("/{id}", response_model=ExerciseRead)
def get_exercise(id: uuid.UUID, session: SessionDep):
    exercise = session.get(Exercise, id)
    if exercise is None:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return exercise


@router.delete("/{id}", status_code=204)
def remove_exercise(id: uuid.UUID, session: SessionDep):
    with exclusive_access():
        try:
            delete_exercise(id, session)
        except NotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        except ExerciseInUse as exc:
            raise HTTPException(status_code=409, detail=str(exc))

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Field, Session, SQLModel

from fitledger.database import exclusive_access, get_session
from fitledger.errors import NotFound
from fitledger.services.workouts import add_set, complete_set, delete_set, insert_set, update_set

router = APIRouter()

SessionDep = Annotated[Session, Depends(get_session)]


class SetRead(SQLModel):
    id: uuid.UUID
    workout_exercise_id: uuid.UUID
    set_number: int
    weight: float
    reps: int
    is_completed: bool
    rpe: float | None
    rest_time: int | None
    notes: str | None
    duration: float | None
    distance: float | None


class SetCreate(SQLModel):
    weight: float = 0.0
    reps: int = 0
    position: int | None = None
    rpe: float | None = Field(default=None, ge=1, le=10)
    notes: str | None = None
    duration: float | None = None
    distance: float | None = None


class SetUpdate(SQLModel):
    weight: float | None = None
    reps: int | None = None
    rpe: float | None = Field(default=None, ge=1, le=10)
    rest_time: int | None = None
    notes: str | None = None
    duration: float | None = None
    distance: float | None = None


class NewRecordRead(SQLModel):
    one_rep_max: float
    confidence: str


class CompletedSetRead(SQLModel):
    exercise_set: SetRead
    new_record: NewRecordRead | None


@router.post("/workout-exercises/{wx_id}/sets", response_model=SetRead, status_code=201)
def create_set(wx_id: uuid.UUID, body: SetCreate, session: SessionDep):
    fields = body.model_dump(exclude={"weight", "reps", "position"}, exclude_none=True)
    with exclusive_access():
        try:
            if body.position is None:
                return add_set(wx_id, session, weight=body.weight, reps=body.reps, **fields)
            return insert_set(
                wx_id, body.position, session, weight=body.weight, reps=body.reps, **fields
            )
        except NotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc))


@router.patch("/sets/{set_id}", response_model=SetRead)
def patch_set(set_id: uuid.UUID, body: SetUpdate, session: SessionDep):
    with exclusive_access():
        try:
            changes = body.model_dump(exclude_unset=True)
            # weight and reps are required columns
            for key in ("weight", "reps"):
                if changes.get(key, 0) is None:
                    del changes[key]
            return update_set(set_id, session, **changes)
        except NotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc))


@router.delete("/sets/{set_id}", status_code=204)
def remove_set(set_id: uuid.UUID, session: SessionDep):
    with exclusive_access():
        try:
            delete_set(set_id, session)
        except NotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc))


@router.post("/sets/{set_id}/complete", response_model=CompletedSetRead)
def mark_complete(set_id: uuid.UUID, session: SessionDep):
    with exclusive_access():
        try:
            exercise_set, recorded = complete_set(set_id, session)
        except NotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc))

    new_record = None
    if recorded is not None:
        new_record = NewRecordRead(
            one_rep_max=recorded.history.one_rep_max,
            confidence=recorded.history.confidence.value,
        )
    return CompletedSetRead(
        exercise_set=SetRead.model_validate(exercise_set, from_attributes=True), new_record=new_record
    )

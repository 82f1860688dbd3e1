import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, SQLModel

from fitledger.database import get_session
from fitledger.enums import ConfidenceLevel, OneRepMaxMethod, OneRepMaxSource, TimeRange
from fitledger.models import Exercise
from fitledger.services.formulas import estimate_all
from fitledger.services.progress import current_best, history_for, progression

router = APIRouter()

SessionDep = Annotated[Session, Depends(get_session)]


class HistoryRead(SQLModel):
    id: uuid.UUID
    exercise_id: uuid.UUID
    source_record_id: uuid.UUID | None
    one_rep_max: float
    date: datetime
    source: OneRepMaxSource
    calculation_method: OneRepMaxMethod
    confidence: ConfidenceLevel


class ProgressPointRead(SQLModel):
    date: datetime
    one_rep_max: float
    confidence: float
    source: OneRepMaxSource


class EstimateRead(SQLModel):
    method: OneRepMaxMethod
    one_rep_max: float


def _require_exercise(exercise_id: uuid.UUID, session: Session) -> Exercise:
    exercise = session.get(Exercise, exercise_id)
    if exercise is None:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return exercise


@router.get("/exercises/{exercise_id}/history", response_model=list[HistoryRead])
def get_history(exercise_id: uuid.UUID, session: SessionDep):
    _require_exercise(exercise_id, session)
    return history_for(exercise_id, session)


@router.get("/exercises/{exercise_id}/progression", response_model=list[ProgressPointRead])
def get_progression(
    exercise_id: uuid.UUID,
    session: SessionDep,
    time_range: Annotated[TimeRange, Query(alias="range")] = TimeRange.ALL,
):
    _require_exercise(exercise_id, session)
    return [
        ProgressPointRead(
            date=p.date, one_rep_max=p.one_rep_max, confidence=p.confidence, source=p.source
        )
        for p in progression(exercise_id, time_range, session)
    ]


@router.get("/current-best", response_model=HistoryRead | None)
def get_current_best(name: str, session: SessionDep):
    """Most recent 1RM for an exercise name; null when unknown or without history."""
    return current_best(name, session)


@router.get("/estimate", response_model=list[EstimateRead])
def get_estimates(
    weight: Annotated[float, Query(ge=0)],
    reps: Annotated[int, Query(ge=1, le=36)],
):
    return [
        EstimateRead(method=method, one_rep_max=value)
        for method, value in estimate_all(weight, reps).items()
    ]

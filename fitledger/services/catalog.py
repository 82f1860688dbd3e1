"""Exercise catalog seed: create missing exercises and refresh existing ones by name."""

import json
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlmodel import Session, select

from fitledger.enums import Equipment, ExerciseType, MuscleGroup, parse_enum
from fitledger.models import Exercise

logger = logging.getLogger(__name__)


class ExerciseDefinition(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: uuid.UUID
    name: str
    instructions: str | None = None
    primary_muscle_group: str
    secondary_muscle_groups: list[str] = Field(default_factory=list)
    equipment: str | None = None
    exercise_type: str
    is_compound: bool = False


@dataclass
class CatalogSyncResult:
    created: int = 0
    updated: int = 0


def load_catalog_file(path: Path) -> list[ExerciseDefinition]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    return [ExerciseDefinition.model_validate(item) for item in raw]


def _apply(exercise: Exercise, definition: ExerciseDefinition) -> None:
    primary = parse_enum(MuscleGroup, definition.primary_muscle_group)
    if primary is not None:
        exercise.primary_muscle_group = primary
    exercise_type = parse_enum(ExerciseType, definition.exercise_type)
    if exercise_type is not None:
        exercise.exercise_type = exercise_type

    exercise.instructions = definition.instructions
    exercise.is_compound = definition.is_compound
    exercise.equipment = parse_enum(Equipment, definition.equipment)
    exercise.secondary_muscle_groups = [
        m.value
        for m in (parse_enum(MuscleGroup, raw) for raw in definition.secondary_muscle_groups)
        if m is not None
    ]


def sync_catalog(definitions: list[ExerciseDefinition], session: Session) -> CatalogSyncResult:
    """Upsert seed definitions by exact name, then by id. Exercises missing from the seed are kept.

    A row found only by id is a seed exercise stored under an older name; it is renamed.
    """
    stored = session.exec(select(Exercise)).all()
    existing = {e.name: e for e in stored}
    by_id = {e.id: e for e in stored}
    result = CatalogSyncResult()

    for definition in definitions:
        exercise = existing.get(definition.name)
        if exercise is None and definition.id in by_id:
            exercise = by_id[definition.id]
            logger.info("Renaming exercise '%s' to '%s'", exercise.name, definition.name)
            existing.pop(exercise.name, None)
            exercise.name = definition.name
            existing[definition.name] = exercise
        if exercise is None:
            exercise = Exercise(
                id=definition.id,
                name=definition.name,
                primary_muscle_group=MuscleGroup.FULL_BODY,
                exercise_type=ExerciseType.STRENGTH,
            )
            existing[definition.name] = exercise
            by_id[definition.id] = exercise
            result.created += 1
        else:
            result.updated += 1
        _apply(exercise, definition)
        session.add(exercise)

    session.commit()
    logger.info("Exercise catalog synced: %d created, %d updated", result.created, result.updated)
    return result

"""Typed records of the export document.

Each entity kind has one flat record. Export dumps them with camelCase keys;
import validates raw dictionaries into them immediately so that nothing past
this boundary handles untyped data. Parsing is lenient where a sensible
default exists (unknown tags, legacy ``0`` / ``""`` placeholders for absent
values) and strict where the entity would be meaningless without the value.
"""

import logging
import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from fitledger.enums import (
    ConfidenceLevel,
    Equipment,
    ExerciseType,
    ExperienceLevel,
    FitnessGoal,
    MuscleGroup,
    OneRepMaxMethod,
    OneRepMaxSource,
    RecordType,
    WeightUnit,
    parse_enum,
)
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


def _absent_if_placeholder(raw: Any) -> Any:
    """Older exports write 0 or "" for values that were never set."""
    if raw == "" or (isinstance(raw, (int, float)) and not isinstance(raw, bool) and raw <= 0):
        return None
    return raw


def _blank_to_none(raw: Any) -> Any:
    return None if raw == "" else raw


def _naive(moment: datetime) -> datetime:
    # The store keeps naive local timestamps.
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def _known_members(enum_cls, raw: Any) -> list:
    if not isinstance(raw, list):
        return []
    members = [parse_enum(enum_cls, item) for item in raw]
    return [m for m in members if m is not None]


def parse_items(record_cls: type["DocumentRecord"], raw: Any, kind: str) -> list:
    """Validate a list of raw records, skipping (and logging) the ones that do not parse."""
    if not isinstance(raw, list):
        return []
    parsed = []
    for index, item in enumerate(raw):
        try:
            parsed.append(record_cls.model_validate(item))
        except ValidationError as exc:
            logger.warning(
                "Skipping invalid %s record #%d: %d validation error(s)",
                kind,
                index,
                exc.error_count(),
            )
    return parsed


class DocumentRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class ExerciseRecord(DocumentRecord):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str
    primary_muscle_group: MuscleGroup
    secondary_muscle_groups: list[MuscleGroup] = Field(default_factory=list)
    equipment: Equipment | None = None
    exercise_type: ExerciseType
    is_compound: bool = False
    instructions: str | None = None

    @field_validator("primary_muscle_group", mode="before")
    @classmethod
    def _primary(cls, raw):
        return parse_enum(MuscleGroup, raw, raw)

    @field_validator("exercise_type", mode="before")
    @classmethod
    def _type(cls, raw):
        return parse_enum(ExerciseType, raw, raw)

    @field_validator("secondary_muscle_groups", mode="before")
    @classmethod
    def _secondary(cls, raw):
        return _known_members(MuscleGroup, raw)

    @field_validator("equipment", mode="before")
    @classmethod
    def _equipment(cls, raw):
        return parse_enum(Equipment, raw)

    @classmethod
    def from_model(cls, exercise: Exercise) -> "ExerciseRecord":
        return cls(
            id=exercise.id,
            name=exercise.name,
            primary_muscle_group=exercise.primary_muscle_group,
            secondary_muscle_groups=exercise.secondary_muscle_groups,
            equipment=exercise.equipment,
            exercise_type=exercise.exercise_type,
            is_compound=exercise.is_compound,
            instructions=exercise.instructions,
        )

    def to_model(self) -> Exercise:
        return Exercise(
            id=self.id,
            name=self.name,
            primary_muscle_group=self.primary_muscle_group,
            secondary_muscle_groups=[m.value for m in self.secondary_muscle_groups],
            equipment=self.equipment,
            exercise_type=self.exercise_type,
            is_compound=self.is_compound,
            instructions=self.instructions,
        )


# ---------------------------------------------------------------------------
# Workouts
# ---------------------------------------------------------------------------


class SetRecord(DocumentRecord):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    set_number: int
    weight: float
    reps: int
    is_completed: bool = False
    rpe: float | None = None
    rest_time: int | None = None
    notes: str | None = None
    duration: float | None = None
    distance: float | None = None

    @field_validator("rest_time", "duration", "distance", mode="before")
    @classmethod
    def _placeholders(cls, raw):
        return _absent_if_placeholder(raw)

    @field_validator("rpe", mode="before")
    @classmethod
    def _rpe(cls, raw):
        raw = _absent_if_placeholder(raw)
        if isinstance(raw, (int, float)) and not 1 <= raw <= 10:
            return None
        return raw

    @field_validator("notes", mode="before")
    @classmethod
    def _notes(cls, raw):
        return _blank_to_none(raw)

    @classmethod
    def from_model(cls, exercise_set: ExerciseSet) -> "SetRecord":
        return cls(
            id=exercise_set.id,
            set_number=exercise_set.set_number,
            weight=exercise_set.weight,
            reps=exercise_set.reps,
            is_completed=exercise_set.is_completed,
            rpe=exercise_set.rpe,
            rest_time=exercise_set.rest_time,
            notes=exercise_set.notes,
            duration=exercise_set.duration,
            distance=exercise_set.distance,
        )

    def to_model(self, workout_exercise_id: uuid.UUID) -> ExerciseSet:
        return ExerciseSet(
            id=self.id,
            workout_exercise_id=workout_exercise_id,
            set_number=self.set_number,
            weight=self.weight,
            reps=self.reps,
            is_completed=self.is_completed,
            rpe=self.rpe,
            rest_time=self.rest_time,
            notes=self.notes,
            duration=self.duration,
            distance=self.distance,
        )


class WorkoutExerciseRecord(DocumentRecord):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    order: int
    rest_time: int = 60
    notes: str | None = None
    exercise_id: uuid.UUID | None = None
    sets: list[SetRecord] = Field(default_factory=list)

    @field_validator("exercise_id", "notes", mode="before")
    @classmethod
    def _blanks(cls, raw):
        return _blank_to_none(raw)

    @field_validator("sets", mode="before")
    @classmethod
    def _sets(cls, raw):
        return parse_items(SetRecord, raw, "set")

    @classmethod
    def from_model(cls, wx: WorkoutExercise, sets: list[ExerciseSet]) -> "WorkoutExerciseRecord":
        return cls(
            id=wx.id,
            order=wx.order,
            rest_time=wx.rest_time,
            notes=wx.notes,
            exercise_id=wx.exercise_id,
            sets=[SetRecord.from_model(s) for s in sets],
        )

    def to_model(self, workout_id: uuid.UUID, exercise_id: uuid.UUID) -> WorkoutExercise:
        return WorkoutExercise(
            id=self.id,
            workout_id=workout_id,
            exercise_id=exercise_id,
            order=self.order,
            rest_time=self.rest_time,
            notes=self.notes,
        )


class WorkoutRecord(DocumentRecord):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str
    date: datetime = Field(default_factory=datetime.now)
    duration: float | None = None
    notes: str | None = None
    exercises: list[WorkoutExerciseRecord] = Field(default_factory=list)

    @field_validator("duration", mode="before")
    @classmethod
    def _duration(cls, raw):
        return _absent_if_placeholder(raw)

    @field_validator("notes", mode="before")
    @classmethod
    def _notes(cls, raw):
        return _blank_to_none(raw)

    @field_validator("date")
    @classmethod
    def _date(cls, value: datetime) -> datetime:
        return _naive(value)

    @field_validator("exercises", mode="before")
    @classmethod
    def _exercises(cls, raw):
        return parse_items(WorkoutExerciseRecord, raw, "workout exercise")

    @classmethod
    def from_model(
        cls, workout: Workout, exercises: list[WorkoutExerciseRecord]
    ) -> "WorkoutRecord":
        return cls(
            id=workout.id,
            name=workout.name,
            date=workout.date,
            duration=workout.duration,
            notes=workout.notes,
            exercises=exercises,
        )

    def to_model(self) -> Workout:
        return Workout(
            id=self.id,
            name=self.name,
            date=self.date,
            duration=self.duration,
            notes=self.notes,
        )


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


class UserProfileRecord(DocumentRecord):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str | None = None
    weight_unit: WeightUnit = WeightUnit.KG
    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER
    workout_days_per_week: int = 3
    primary_goals: list[FitnessGoal] = Field(default_factory=list)
    available_equipment: list[Equipment] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, raw):
        return _blank_to_none(raw)

    @field_validator("weight_unit", mode="before")
    @classmethod
    def _unit(cls, raw):
        return parse_enum(WeightUnit, raw, WeightUnit.KG)

    @field_validator("experience_level", mode="before")
    @classmethod
    def _level(cls, raw):
        return parse_enum(ExperienceLevel, raw, ExperienceLevel.BEGINNER)

    @field_validator("primary_goals", mode="before")
    @classmethod
    def _goals(cls, raw):
        return _known_members(FitnessGoal, raw)

    @field_validator("available_equipment", mode="before")
    @classmethod
    def _equipment(cls, raw):
        return _known_members(Equipment, raw)

    @classmethod
    def from_model(cls, profile: UserProfile) -> "UserProfileRecord":
        return cls(
            id=profile.id,
            name=profile.name,
            weight_unit=profile.weight_unit,
            experience_level=profile.experience_level,
            workout_days_per_week=profile.workout_days_per_week,
            primary_goals=profile.primary_goals,
            available_equipment=profile.available_equipment,
        )

    def to_model(self) -> UserProfile:
        return UserProfile(
            id=self.id,
            name=self.name,
            weight_unit=self.weight_unit,
            experience_level=self.experience_level,
            workout_days_per_week=self.workout_days_per_week,
            primary_goals=[g.value for g in self.primary_goals],
            available_equipment=[e.value for e in self.available_equipment],
        )


# ---------------------------------------------------------------------------
# Progress tracking
# ---------------------------------------------------------------------------


class PersonalRecordRecord(DocumentRecord):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    exercise_id: uuid.UUID | None = None
    workout_exercise_id: uuid.UUID | None = None
    weight: float
    reps: int
    date: datetime = Field(default_factory=datetime.now)
    record_type: RecordType = RecordType.CALCULATED
    calculation_method: OneRepMaxMethod = OneRepMaxMethod.EPLEY

    @field_validator("exercise_id", "workout_exercise_id", mode="before")
    @classmethod
    def _blanks(cls, raw):
        return _blank_to_none(raw)

    @field_validator("record_type", mode="before")
    @classmethod
    def _record_type(cls, raw):
        return parse_enum(RecordType, raw, RecordType.CALCULATED)

    @field_validator("calculation_method", mode="before")
    @classmethod
    def _method(cls, raw):
        return parse_enum(OneRepMaxMethod, raw, OneRepMaxMethod.EPLEY)

    @field_validator("date")
    @classmethod
    def _date(cls, value: datetime) -> datetime:
        return _naive(value)

    @classmethod
    def from_model(cls, record: PersonalRecord) -> "PersonalRecordRecord":
        return cls(
            id=record.id,
            exercise_id=record.exercise_id,
            workout_exercise_id=record.workout_exercise_id,
            weight=record.weight,
            reps=record.reps,
            date=record.date,
            record_type=record.record_type,
            calculation_method=record.calculation_method,
        )

    def to_model(
        self, exercise_id: uuid.UUID, workout_exercise_id: uuid.UUID | None
    ) -> PersonalRecord:
        return PersonalRecord(
            id=self.id,
            exercise_id=exercise_id,
            workout_exercise_id=workout_exercise_id,
            weight=self.weight,
            reps=self.reps,
            date=self.date,
            record_type=self.record_type,
            calculation_method=self.calculation_method,
        )


class OneRepMaxRecord(DocumentRecord):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    exercise_id: uuid.UUID | None = None
    source_record_id: uuid.UUID | None = None
    one_rep_max: float
    date: datetime = Field(default_factory=datetime.now)
    source: OneRepMaxSource = OneRepMaxSource.CALCULATED_FROM_SET
    calculation_method: OneRepMaxMethod = OneRepMaxMethod.EPLEY
    confidence: ConfidenceLevel | None = None

    @field_validator("exercise_id", "source_record_id", mode="before")
    @classmethod
    def _blanks(cls, raw):
        return _blank_to_none(raw)

    @field_validator("source", mode="before")
    @classmethod
    def _source(cls, raw):
        return parse_enum(OneRepMaxSource, raw, OneRepMaxSource.CALCULATED_FROM_SET)

    @field_validator("calculation_method", mode="before")
    @classmethod
    def _method(cls, raw):
        return parse_enum(OneRepMaxMethod, raw, OneRepMaxMethod.EPLEY)

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, raw):
        return parse_enum(ConfidenceLevel, raw)

    @field_validator("date")
    @classmethod
    def _date(cls, value: datetime) -> datetime:
        return _naive(value)

    @model_validator(mode="after")
    def _default_confidence(self) -> "OneRepMaxRecord":
        if self.confidence is None:
            self.confidence = self.source.default_confidence
        return self

    @classmethod
    def from_model(cls, entry: OneRepMaxHistory) -> "OneRepMaxRecord":
        return cls(
            id=entry.id,
            exercise_id=entry.exercise_id,
            source_record_id=entry.source_record_id,
            one_rep_max=entry.one_rep_max,
            date=entry.date,
            source=entry.source,
            calculation_method=entry.calculation_method,
            confidence=entry.confidence,
        )

    def to_model(
        self, exercise_id: uuid.UUID, source_record_id: uuid.UUID | None
    ) -> OneRepMaxHistory:
        return OneRepMaxHistory(
            id=self.id,
            exercise_id=exercise_id,
            source_record_id=source_record_id,
            one_rep_max=self.one_rep_max,
            date=self.date,
            source=self.source,
            calculation_method=self.calculation_method,
            confidence=self.confidence,
        )

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from fitledger.enums import (
    ConfidenceLevel,
    Equipment,
    ExerciseType,
    ExperienceLevel,
    MuscleGroup,
    OneRepMaxMethod,
    OneRepMaxSource,
    RecordType,
    WeightUnit,
)

# Ownership is expressed with plain id columns. Cascades and deletion order are
# enforced by fitledger.services.cleanup, not by the storage layer.


class Exercise(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True)
    primary_muscle_group: MuscleGroup
    secondary_muscle_groups: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    equipment: Equipment | None = None
    exercise_type: ExerciseType = ExerciseType.STRENGTH
    is_compound: bool = False
    instructions: str | None = None


class Workout(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    date: datetime = Field(default_factory=datetime.now, index=True)
    duration: float | None = None  # seconds
    notes: str | None = None


class WorkoutExercise(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    workout_id: uuid.UUID = Field(foreign_key="workout.id", index=True)
    exercise_id: uuid.UUID = Field(foreign_key="exercise.id", index=True)
    order: int = 0
    rest_time: int = 60  # seconds
    notes: str | None = None


class ExerciseSet(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    workout_exercise_id: uuid.UUID = Field(foreign_key="workoutexercise.id", index=True)
    set_number: int
    weight: float = 0.0
    reps: int = 0
    is_completed: bool = False
    rpe: float | None = None  # 1-10
    rest_time: int | None = None  # actual rest taken, seconds
    notes: str | None = None
    duration: float | None = None  # seconds, time-based exercises
    distance: float | None = None  # meters, distance-based exercises

    @property
    def volume(self) -> float:
        return self.weight * self.reps


class PersonalRecord(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    exercise_id: uuid.UUID = Field(foreign_key="exercise.id", index=True)
    workout_exercise_id: uuid.UUID | None = Field(default=None, foreign_key="workoutexercise.id")
    weight: float
    reps: int
    date: datetime = Field(default_factory=datetime.now)
    record_type: RecordType = RecordType.CALCULATED
    calculation_method: OneRepMaxMethod = OneRepMaxMethod.EPLEY


class OneRepMaxHistory(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    exercise_id: uuid.UUID = Field(foreign_key="exercise.id", index=True)
    source_record_id: uuid.UUID | None = Field(default=None, foreign_key="personalrecord.id")
    one_rep_max: float
    date: datetime = Field(default_factory=datetime.now, index=True)
    source: OneRepMaxSource = OneRepMaxSource.CALCULATED_FROM_SET
    calculation_method: OneRepMaxMethod = OneRepMaxMethod.EPLEY
    confidence: ConfidenceLevel = ConfidenceLevel.MEDIUM


class UserProfile(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str | None = None
    weight_unit: WeightUnit = WeightUnit.KG
    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER
    workout_days_per_week: int = 3
    primary_goals: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    available_equipment: list[str] = Field(default_factory=list, sa_column=Column(JSON))

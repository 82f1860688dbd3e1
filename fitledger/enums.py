"""Shared enums for models, the export document and the API."""

import re
from enum import Enum


class MuscleGroup(str, Enum):
    CHEST = "Chest"
    BACK = "Back"
    SHOULDERS = "Shoulders"
    BICEPS = "Biceps"
    TRICEPS = "Triceps"
    FOREARMS = "Forearms"
    ABS = "Abs"
    OBLIQUES = "Obliques"
    QUADRICEPS = "Quadriceps"
    HAMSTRINGS = "Hamstrings"
    GLUTES = "Glutes"
    CALVES = "Calves"
    CARDIO = "Cardio"
    FULL_BODY = "Full Body"


class Equipment(str, Enum):
    BARBELL = "Barbell"
    DUMBBELL = "Dumbbells"
    KETTLEBELL = "Kettlebell"
    CABLE_STATION = "Cable Station"
    PULLUP_BAR = "Pull-up Bar"
    DIP_STATION = "Dip Station"
    SMITH_MACHINE = "Smith Machine"
    LEG_PRESS = "Leg Press"
    LAT_PULLDOWN = "Lat Pulldown"
    CHEST_PRESS = "Chest Press"
    ROWING_MACHINE = "Rowing Machine"
    TREADMILL = "Treadmill"
    BIKE = "Exercise Bike"
    RESISTANCE_BAND = "Resistance Band"
    MEDICINE_BALL = "Medicine Ball"
    BODYWEIGHT = "Bodyweight"
    NONE = "None"


class ExerciseType(str, Enum):
    STRENGTH = "Strength"
    CARDIO = "Cardio"
    FLEXIBILITY = "Flexibility"
    PLYOMETRIC = "Plyometric"
    POWERLIFTING = "Powerlifting"
    OLYMPIC = "Olympic Lifting"


class RecordType(str, Enum):
    """How a personal record was obtained."""

    ACTUAL = "Actual"  # true 1RM attempt
    CALCULATED = "Calculated"  # derived from rep performance


class OneRepMaxMethod(str, Enum):
    EPLEY = "Epley"
    BRZYCKI = "Brzycki"
    LOMBARDI = "Lombardi"
    MCGLOTHIN = "McGlothin"


class OneRepMaxSource(str, Enum):
    ACTUAL_TEST = "Actual 1RM Test"
    CALCULATED_FROM_SET = "Calculated from Set"
    ESTIMATED_FROM_VOLUME = "Estimated from Volume"
    MANUAL_ENTRY = "Manual Entry"

    @property
    def default_confidence(self) -> "ConfidenceLevel":
        if self is OneRepMaxSource.ACTUAL_TEST:
            return ConfidenceLevel.HIGH
        if self is OneRepMaxSource.ESTIMATED_FROM_VOLUME:
            return ConfidenceLevel.LOW
        return ConfidenceLevel.MEDIUM


class ConfidenceLevel(str, Enum):
    """Reliability of an estimated maximum."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def weight(self) -> float:
        return {"High": 1.0, "Medium": 0.6, "Low": 0.3}[self.value]


class TimeRange(str, Enum):
    LAST_MONTH = "Last Month"
    LAST_THREE_MONTHS = "Last 3 Months"
    LAST_SIX_MONTHS = "Last 6 Months"
    LAST_YEAR = "Last Year"
    ALL = "All Time"


class WeightUnit(str, Enum):
    KG = "kg"
    LBS = "lbs"


class ExperienceLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class FitnessGoal(str, Enum):
    BUILD_MUSCLE = "Build Muscle"
    LOSE_WEIGHT = "Lose Weight"
    INCREASE_STRENGTH = "Increase Strength"
    IMPROVE_ENDURANCE = "Improve Endurance"
    GENERAL_FITNESS = "General Fitness"
    POWERLIFTING = "Powerlifting"
    BODYBUILDING = "Bodybuilding"


def _normalize(raw: str) -> str:
    return re.sub(r"[^a-z0-9]", "", raw.lower())


def parse_enum(enum_cls: type[Enum], raw, default=None):
    """Match ``raw`` against an enum's values or names, ignoring case and punctuation.

    Returns ``default`` when nothing matches.
    """
    if isinstance(raw, enum_cls):
        return raw
    if isinstance(raw, str):
        wanted = _normalize(raw)
        for member in enum_cls:
            if _normalize(member.value) == wanted or _normalize(member.name) == wanted:
                return member
    return default

"""
Seed the database with realistic fake training history.
Run with: python -m fitledger.seed

WARNING: Drops all existing data before inserting.
"""

import logging
import random
from datetime import datetime, time, timedelta

from sqlmodel import Session, select

from fitledger.config import get_settings
from fitledger.database import create_db_and_tables, engine
from fitledger.enums import Equipment, ExperienceLevel, FitnessGoal, WeightUnit
from fitledger.models import Exercise, UserProfile
from fitledger.services.catalog import load_catalog_file, sync_catalog
from fitledger.services.cleanup import wipe_all
from fitledger.services.workouts import (
    add_exercise_to_workout,
    add_set,
    complete_set,
    create_workout,
)

logger = logging.getLogger(__name__)

# Reproducible data
RANDOM_SEED = 42

# Base working weights in kg (None = bodyweight / reps-only)
BASE_WEIGHTS: dict[str, float | None] = {
    "Barbell Bench Press": 80.0,
    "Incline Dumbbell Bench Press": 24.0,
    "Cable Fly": 15.0,
    "Deadlift": 120.0,
    "Pull-up": None,
    "Barbell Row": 70.0,
    "Lat Pulldown": 55.0,
    "Overhead Press": 50.0,
    "Dumbbell Lateral Raise": 10.0,
    "Face Pull": 20.0,
    "Barbell Curl": 30.0,
    "Hammer Curl": 14.0,
    "Tricep Pushdown": 35.0,
    "Dips": None,
    "Back Squat": 100.0,
    "Leg Press": 150.0,
    "Dumbbell Romanian Deadlift": 30.0,
    "Hip Thrust": 80.0,
    "Standing Calf Raise": 60.0,
    "Hanging Leg Raise": None,
}

# Workout templates cycle through these exercise lists (4-5 exercises each).
WORKOUT_TEMPLATES: list[tuple[str, list[str]]] = [
    ("Push", ["Barbell Bench Press", "Overhead Press", "Incline Dumbbell Bench Press", "Tricep Pushdown"]),
    ("Pull", ["Deadlift", "Pull-up", "Barbell Row", "Barbell Curl", "Face Pull"]),
    ("Legs", ["Back Squat", "Leg Press", "Dumbbell Romanian Deadlift", "Standing Calf Raise"]),
    ("Upper", ["Barbell Bench Press", "Lat Pulldown", "Dumbbell Lateral Raise", "Hammer Curl", "Dips"]),
    ("Lower", ["Back Squat", "Hip Thrust", "Hanging Leg Raise", "Standing Calf Raise"]),
]

NUM_WORKOUTS = 20
INTERVAL_DAYS = 9  # ~one every 9 days


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _progression_weight(base: float, workout_idx: int, rng: random.Random) -> float:
    """Progressive overload with realistic noise. Rounds to nearest 2.5 kg."""
    factor = 1.0 + 0.025 * workout_idx + rng.uniform(-0.05, 0.05)
    return round(base * factor / 2.5) * 2.5


def _progression_reps(workout_idx: int, rng: random.Random) -> int:
    """Reps for bodyweight exercises, starting at 5 and trending up."""
    base = 5 + workout_idx // 3
    return max(1, base + rng.randint(-1, 1))


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def seed(session: Session) -> None:
    rng = random.Random(RANDOM_SEED)
    settings = get_settings()

    wipe_all(session)
    logger.info("Cleared existing data.")

    sync_catalog(load_catalog_file(settings.catalog_path), session)
    exercises = {e.name: e for e in session.exec(select(Exercise)).all()}

    session.add(
        UserProfile(
            name="Sample Lifter",
            weight_unit=WeightUnit.KG,
            experience_level=ExperienceLevel.INTERMEDIATE,
            workout_days_per_week=3,
            primary_goals=[FitnessGoal.INCREASE_STRENGTH.value],
            available_equipment=[
                Equipment.BARBELL.value,
                Equipment.DUMBBELL.value,
                Equipment.CABLE_STATION.value,
                Equipment.PULLUP_BAR.value,
            ],
        )
    )
    session.commit()

    start = datetime.combine(datetime.now().date() - timedelta(days=180), time(18, 0))
    for workout_idx in range(NUM_WORKOUTS):
        name, exercise_names = WORKOUT_TEMPLATES[workout_idx % len(WORKOUT_TEMPLATES)]
        moment = start + timedelta(days=workout_idx * INTERVAL_DAYS)
        workout = create_workout(name, session, date=moment)

        for exercise_name in exercise_names:
            wx = add_exercise_to_workout(workout.id, exercises[exercise_name].id, session)
            base = BASE_WEIGHTS.get(exercise_name)
            for _ in range(rng.randint(3, 4)):
                if base is None:
                    exercise_set = add_set(
                        wx.id, session, weight=0.0, reps=_progression_reps(workout_idx, rng)
                    )
                else:
                    exercise_set = add_set(
                        wx.id,
                        session,
                        weight=_progression_weight(base, workout_idx, rng),
                        reps=rng.randint(3, 10),
                    )
                complete_set(exercise_set.id, session, now=moment)

    logger.info("Created %d workouts.", NUM_WORKOUTS)


def main() -> None:
    logging.basicConfig(level=get_settings().log_level)
    create_db_and_tables()
    with Session(engine) as session:
        seed(session)
    logger.info("Seed complete.")


if __name__ == "__main__":
    main()

import uuid
from datetime import datetime

from fastapi.testclient import TestClient
from sqlmodel import Session

from fitledger.enums import Equipment, ExerciseType, MuscleGroup
from fitledger.models import Exercise, OneRepMaxHistory


def _create_exercise(session: Session, name: str, muscle: MuscleGroup = MuscleGroup.CHEST) -> uuid.UUID:
    exercise = Exercise(
        name=name,
        primary_muscle_group=muscle,
        secondary_muscle_groups=["Triceps"],
        equipment=Equipment.BARBELL,
        exercise_type=ExerciseType.STRENGTH,
    )
    session.add(exercise)
    session.commit()
    session.refresh(exercise)
    return exercise.id


def test_list_sorted_by_name(client: TestClient, session: Session):
    _create_exercise(session, "Squat", MuscleGroup.QUADRICEPS)
    _create_exercise(session, "Bench Press")

    body = client.get("/api/exercises/").json()

    assert [e["name"] for e in body] == ["Bench Press", "Squat"]
    assert body[0]["primary_muscle_group"] == "Chest"
    assert body[0]["secondary_muscle_groups"] == ["Triceps"]
    assert body[0]["equipment"] == "Barbell"


def test_list_filtered_by_muscle_group(client: TestClient, session: Session):
    _create_exercise(session, "Squat", MuscleGroup.QUADRICEPS)
    _create_exercise(session, "Bench Press")

    body = client.get("/api/exercises/", params={"muscle_group": "Quadriceps"}).json()

    assert [e["name"] for e in body] == ["Squat"]


def test_get_not_found(client: TestClient):
    assert client.get(f"/api/exercises/{uuid.uuid4()}").status_code == 404


def test_delete_unused(client: TestClient, session: Session):
    exercise_id = _create_exercise(session, "Bench Press")

    response = client.delete(f"/api/exercises/{exercise_id}")

    assert response.status_code == 204
    assert client.get(f"/api/exercises/{exercise_id}").status_code == 404


def test_delete_in_use_conflicts(client: TestClient, session: Session):
    exercise_id = _create_exercise(session, "Bench Press")
    session.add(
        OneRepMaxHistory(exercise_id=exercise_id, one_rep_max=100.0, date=datetime(2026, 1, 1))
    )
    session.commit()

    response = client.delete(f"/api/exercises/{exercise_id}")

    assert response.status_code == 409
    assert "1 one_rep_max_history" in response.json()["detail"]


def test_delete_not_found(client: TestClient):
    assert client.delete(f"/api/exercises/{uuid.uuid4()}").status_code == 404

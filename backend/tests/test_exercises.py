import uuid

from fastapi.testclient import TestClient

from liftlog.main import app
from liftlog.repositories.exercise_repo import ExerciseRepository

client = TestClient(app)


def seed(db):
    tag = uuid.uuid4().hex[:6]
    repo = ExerciseRepository(db)
    rows = [
        repo.create(name=f"Curl {tag}", category="strength", equipment="dumbbell",
                    primary_muscles=["biceps"]),
        repo.create(name=f"Hammer Curl {tag}", category="strength", equipment="dumbbell",
                    primary_muscles=["biceps"], secondary_muscles=["forearms"]),
        repo.create(name=f"Cable Row {tag}", category="strength", equipment=f"cable-{tag}",
                    primary_muscles=["lats"]),
        repo.create(name=f"Stretch {tag}", category="mobility", primary_muscles=["hamstrings"]),
    ]
    db.commit()
    return tag, rows


def test_search_ranks_prefix_matches_first(db):
    tag, rows = seed(db)
    r = client.get("/exercises", params={"q": f"curl {tag}"})
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 2
    assert [e["name"] for e in body["exercises"]] == [f"Curl {tag}", f"Hammer Curl {tag}"]


def test_search_matches_equipment(db):
    tag, rows = seed(db)
    names = [e["name"] for e in client.get("/exercises", params={"q": f"cable-{tag}"}).json()["exercises"]]
    assert names == [f"Cable Row {tag}"]


def test_filters_and_paging(db):
    tag, rows = seed(db)
    r = client.get("/exercises", params={"q": tag, "category": "Mobility"})
    assert [e["name"] for e in r.json()["exercises"]] == [f"Stretch {tag}"]

    r = client.get("/exercises", params={"q": tag, "muscle": "Biceps", "limit": 1})
    assert r.json()["total"] == 2
    assert len(r.json()["exercises"]) == 1

    assert client.get("/exercises", params={"limit": 0}).status_code == 422


def test_get_one_exercise(db):
    tag, rows = seed(db)
    r = client.get(f"/exercises/{rows[1].id}")
    assert r.status_code == 200
    assert r.json()["secondary_muscles"] == ["forearms"]
    missing = client.get("/exercises/987654321")
    assert missing.status_code == 404
    assert missing.json()["kind"] == "not_found"

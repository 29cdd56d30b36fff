def create_routine(client, exercises):
    r = client.post("/routines", json={
        "title": "Full body",
        "exercises": [
            {"exercise_id": exercises["bench"].id, "sets": "3", "reps": "5", "notes": "slow eccentric"},
            {"custom_exercise_name": "Plank", "sets": "AMRAP"},
        ],
    })
    assert r.status_code == 201, r.text
    return r.json()


def test_start_log_and_finish(client_as, make_user, exercises):
    client = client_as(make_user())
    routine = create_routine(client, exercises)

    r = client.post("/workouts", json={"routine_id": routine["id"], "day_index": 0})
    assert r.status_code == 201, r.text
    workout = r.json()
    assert workout["routine"] == {"id": routine["id"], "title": "Full body"}
    assert [g["exercise_name"] for g in workout["exercises"]] == ["Bench Press", "Plank"]
    assert [s["notes"] for s in workout["exercises"][0]["sets"]] == ["slow eccentric"] * 3

    r = client.post(f"/workouts/{workout['id']}/sets", json={
        "exercise_id": exercises["bench"].id, "set_number": 1, "reps": 5, "weight_kg": 100, "rpe": 8,
    })
    assert r.status_code == 201, r.text
    logged = r.json()
    assert logged["id"] == workout["exercises"][0]["sets"][0]["id"]
    assert logged["completed"] is True
    assert logged["exercise"]["name"] == "Bench Press"

    r = client.patch(f"/sets/{logged['id']}", json={"reps": 6})
    assert r.status_code == 200
    assert r.json()["reps"] == 6 and r.json()["weight_kg"] == 100

    r = client.post(f"/workouts/{workout['id']}/finish")
    assert r.status_code == 200
    assert r.json()["finished_at"] is not None

    detail = client.get(f"/workouts/{workout['id']}").json()
    assert detail["exercises"][0]["sets"][0]["reps"] == 6
    assert detail["exercises"][0]["sets"][1]["completed"] is False


def test_delete_by_exercise(client_as, make_user, exercises):
    client = client_as(make_user())
    w = client.post("/workouts", json={}).json()
    url = f"/workouts/{w['id']}/sets"
    client.post(url, json={"custom_exercise_name": "Sled Push", "reps": 1})
    client.post(url, json={"custom_exercise_name": "Sled Push", "reps": 1})

    r = client.request("DELETE", f"{url}/by-exercise", json={"custom_exercise_name": "Sled Push", "set_number": 2})
    assert r.status_code == 204

    r = client.request("DELETE", f"{url}/by-exercise", json={"custom_exercise_name": "Sled Push", "set_number": 1})
    assert r.status_code == 400
    assert r.json() == {"detail": "Cannot delete the last set of an exercise", "kind": "validation"}

    r = client.request("DELETE", f"{url}/by-exercise", json={"custom_exercise_name": "Sled Push", "set_number": 9})
    assert r.status_code == 404


def test_add_set_validation_is_400(client_as, make_user):
    client = client_as(make_user())
    w = client.post("/workouts", json={}).json()
    r = client.post(f"/workouts/{w['id']}/sets", json={"reps": 5})
    assert r.status_code == 400
    assert r.json()["kind"] == "validation"


def test_schema_bounds_are_422(client_as, make_user):
    client = client_as(make_user())
    w = client.post("/workouts", json={}).json()
    r = client.post(f"/workouts/{w['id']}/sets", json={"custom_exercise_name": "X", "rpe": 11})
    assert r.status_code == 422


def test_someone_elses_workout(client_as, make_user, exercises):
    owner, intruder = make_user(), make_user()
    w = client_as(owner).post("/workouts", json={}).json()

    client = client_as(intruder)
    r = client.post(f"/workouts/{w['id']}/sets", json={"exercise_id": exercises["bench"].id, "reps": 5})
    assert r.status_code == 403
    assert r.json()["kind"] == "permission_denied"
    assert client.post(f"/workouts/{w['id']}/finish").status_code == 403
    assert client.delete(f"/workouts/{w['id']}").status_code == 403
    # private: not even visible
    assert client.get(f"/workouts/{w['id']}").status_code == 404


def test_public_workout_visible_anonymously(client_as, make_user):
    owner = make_user()
    public = client_as(owner).post("/workouts", json={"visibility": "PUBLIC"}).json()
    private = client_as(owner).post("/workouts", json={}).json()

    anon = client_as(None)
    assert anon.get(f"/workouts/{public['id']}").status_code == 200
    assert anon.get(f"/workouts/{private['id']}").status_code == 404


def test_missing_workout_404(client_as, make_user):
    client = client_as(make_user())
    assert client.get("/workouts/987654").status_code == 404
    assert client.patch("/workouts/987654", json={"title": "x"}).status_code == 404
    assert client.patch("/sets/987654", json={"reps": 1}).status_code == 404


def test_list_update_delete(client_as, make_user):
    client = client_as(make_user())
    a = client.post("/workouts", json={"title": "A"}).json()
    b = client.post("/workouts", json={"title": "B"}).json()

    r = client.patch(f"/workouts/{a['id']}", json={"title": "A+", "visibility": "UNLISTED"})
    assert r.status_code == 200
    assert r.json()["title"] == "A+" and r.json()["visibility"] == "UNLISTED"

    body = client.get("/workouts", params={"limit": 10}).json()
    assert body["total"] == 2
    assert [w["id"] for w in body["workouts"]] == [b["id"], a["id"]]

    assert client.delete(f"/workouts/{b['id']}").status_code == 204
    assert client.get("/workouts").json()["total"] == 1

"""Workout sessions: start, set logging limits, PR flags, finish and ownership."""

import pytest

BASE = "/api/v1/workout-sessions"


async def start(client, headers, **body):
    r = await client.post(BASE, json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


async def add_set(client, headers, session_id, exercise_id, weight=None, reps=None, set_order=0):
    return await client.post(
        f"{BASE}/{session_id}/sets",
        json={"exercise_id": str(exercise_id), "weight": weight, "reps": reps, "set_order": set_order},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_start_free_session(client, headers):
    s = await start(client, headers)
    assert s["name"] == "Workout"
    assert s["ended_at"] is None
    assert s["exercise_order"] == []


@pytest.mark.asyncio
async def test_start_from_routine(client, headers, exercises):
    squat, press = exercises["Goblet Squat"], exercises["Shoulder Press"]
    routine = (
        await client.post(
            "/api/v1/routines",
            json={
                "name": "Leg Day",
                "exercises": [
                    {"exercise_id": str(squat.id), "order_index": 0},
                    {"exercise_id": str(press.id), "order_index": 1},
                ],
            },
            headers=headers,
        )
    ).json()

    s = await start(client, headers, routine_id=routine["id"])
    assert s["name"] == "Leg Day"
    assert s["routine_id"] == routine["id"]
    assert s["exercise_order"] == [str(squat.id), str(press.id)]

    named = await start(client, headers, routine_id=routine["id"], name="Custom")
    assert named["name"] == "Custom"


@pytest.mark.asyncio
async def test_start_from_unknown_routine(client, headers, other_headers):
    routine = (await client.post("/api/v1/routines", json={"name": "Mine"}, headers=headers)).json()
    r = await client.post(BASE, json={"routine_id": routine["id"]}, headers=other_headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_pr_detection_weight_then_volume(client, headers, exercises):
    bench = exercises["Bench Press"]
    s = await start(client, headers)

    first = (await add_set(client, headers, s["id"], bench.id, 100, 5)).json()
    assert first["is_pr"] is True
    assert first["pr_type"] == "weight"
    assert first["exercise"]["name"] == "Bench Press"

    volume = (await add_set(client, headers, s["id"], bench.id, 90, 10, set_order=1)).json()
    assert volume["is_pr"] is True
    assert volume["pr_type"] == "volume"

    plain = (await add_set(client, headers, s["id"], bench.id, 80, 5, set_order=2)).json()
    assert plain["is_pr"] is False
    assert plain["pr_type"] is None

    no_weight = (await add_set(client, headers, s["id"], bench.id, None, 20, set_order=3)).json()
    assert no_weight["is_pr"] is False


@pytest.mark.asyncio
async def test_prs_are_per_user(client, headers, other_headers, exercises):
    bench = exercises["Bench Press"]
    mine = await start(client, headers)
    await add_set(client, headers, mine["id"], bench.id, 150, 5)

    theirs = await start(client, other_headers)
    r = (await add_set(client, other_headers, theirs["id"], bench.id, 60, 5)).json()
    assert r["is_pr"] is True
    assert r["pr_type"] == "weight"


@pytest.mark.asyncio
async def test_max_sets_per_exercise(client, headers, exercises):
    squat = exercises["Goblet Squat"]
    s = await start(client, headers)
    for i in range(10):
        r = await add_set(client, headers, s["id"], squat.id, 20, 10, set_order=i)
        assert r.status_code == 201
    r = await add_set(client, headers, s["id"], squat.id, 20, 10, set_order=10)
    assert r.status_code == 400
    assert "10 sets" in r.json()["detail"]


@pytest.mark.asyncio
async def test_max_exercises_per_session(client, headers):
    ids = []
    for i in range(21):
        r = await client.post("/api/v1/exercises", json={"name": f"Move {i}"}, headers=headers)
        ids.append(r.json()["id"])

    s = await start(client, headers)
    for exercise_id in ids[:20]:
        assert (await add_set(client, headers, s["id"], exercise_id, 10, 10)).status_code == 201

    r = await add_set(client, headers, s["id"], ids[20], 10, 10)
    assert r.status_code == 400
    assert "20 exercises" in r.json()["detail"]
    # More sets for an exercise already in the session are still fine
    assert (await add_set(client, headers, s["id"], ids[0], 10, 10, set_order=1)).status_code == 201


@pytest.mark.asyncio
async def test_add_set_unknown_exercise(client, headers):
    s = await start(client, headers)
    r = await add_set(client, headers, s["id"], "00000000-0000-0000-0000-000000000000", 10, 10)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_finish_session(client, headers, exercises):
    bench, row = exercises["Bench Press"], exercises["Dumbbell Row"]
    s = await start(client, headers)
    await add_set(client, headers, s["id"], bench.id, 100, 5)
    await add_set(client, headers, s["id"], row.id, 30, 10)
    await add_set(client, headers, s["id"], row.id, None, 10, set_order=1)

    r = await client.post(f"{BASE}/{s['id']}/finish", headers=headers)
    assert r.status_code == 200
    done = r.json()
    assert done["ended_at"] is not None
    assert done["duration_seconds"] >= 0
    assert done["total_volume"] == 800.0

    r = await add_set(client, headers, s["id"], bench.id, 100, 5)
    assert r.status_code == 400
    assert (await client.post(f"{BASE}/{s['id']}/finish", headers=headers)).status_code == 400


@pytest.mark.asyncio
async def test_active_session(client, headers):
    assert (await client.get(f"{BASE}/active", headers=headers)).json() is None

    s = await start(client, headers, name="Morning")
    active = (await client.get(f"{BASE}/active", headers=headers)).json()
    assert active["id"] == s["id"]
    assert active["sets"] == []

    await client.post(f"{BASE}/{s['id']}/finish", headers=headers)
    assert (await client.get(f"{BASE}/active", headers=headers)).json() is None


@pytest.mark.asyncio
async def test_get_session_with_sets_in_order(client, headers, exercises):
    squat = exercises["Goblet Squat"]
    s = await start(client, headers)
    await add_set(client, headers, s["id"], squat.id, 20, 10, set_order=2)
    await add_set(client, headers, s["id"], squat.id, 24, 8, set_order=1)

    detail = (await client.get(f"{BASE}/{s['id']}", headers=headers)).json()
    assert [x["set_order"] for x in detail["sets"]] == [1, 2]


@pytest.mark.asyncio
async def test_update_and_delete_set(client, headers, exercises):
    bench = exercises["Bench Press"]
    s = await start(client, headers)
    first = (await add_set(client, headers, s["id"], bench.id, 100, 5)).json()
    second = (await add_set(client, headers, s["id"], bench.id, 50, 5, set_order=1)).json()
    assert second["is_pr"] is False

    r = await client.patch(f"{BASE}/{s['id']}/sets/{second['id']}", json={"weight": 110}, headers=headers)
    assert r.status_code == 200
    assert r.json()["weight"] == 110
    assert r.json()["pr_type"] == "weight"

    assert (await client.delete(f"{BASE}/{s['id']}/sets/{first['id']}", headers=headers)).status_code == 204
    detail = (await client.get(f"{BASE}/{s['id']}", headers=headers)).json()
    assert [x["id"] for x in detail["sets"]] == [second["id"]]

    r = await client.delete(f"{BASE}/{s['id']}/sets/{first['id']}", headers=headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_sessions_are_scoped_to_owner(client, headers, other_headers, exercises):
    s = await start(client, headers)
    assert (await client.get(f"{BASE}/{s['id']}", headers=other_headers)).status_code == 404
    r = await add_set(client, other_headers, s["id"], exercises["Plank"].id, None, 1)
    assert r.status_code == 404
    assert (await client.delete(f"{BASE}/{s['id']}", headers=other_headers)).status_code == 404
    assert (await client.get(f"{BASE}/{s['id']}", headers=headers)).status_code == 200


@pytest.mark.asyncio
async def test_delete_session(client, headers, exercises):
    s = await start(client, headers)
    await add_set(client, headers, s["id"], exercises["Plank"].id, None, 1)
    assert (await client.delete(f"{BASE}/{s['id']}", headers=headers)).status_code == 204
    assert (await client.get(f"{BASE}/{s['id']}", headers=headers)).status_code == 404


@pytest.mark.asyncio
async def test_recent_sets(client, headers, other_headers, exercises):
    squat = exercises["Goblet Squat"]
    url = f"/api/v1/exercises/{squat.id}/recent-sets"
    assert (await client.get(url, headers=headers)).json() == {
        "session_id": None,
        "session_started_at": None,
        "sets": [],
    }

    older = await start(client, headers)
    await add_set(client, headers, older["id"], squat.id, 20, 10)
    await client.post(f"{BASE}/{older['id']}/finish", headers=headers)

    newer = await start(client, headers)
    await add_set(client, headers, newer["id"], squat.id, 24, 8)
    await add_set(client, headers, newer["id"], squat.id, 24, 6, set_order=1)

    recent = (await client.get(url, headers=headers)).json()
    assert recent["session_id"] == newer["id"]
    assert [x["reps"] for x in recent["sets"]] == [8, 6]

    previous = (await client.get(url, params={"exclude_session_id": newer["id"]}, headers=headers)).json()
    assert previous["session_id"] == older["id"]

    # Other users see only their own history
    assert (await client.get(url, headers=other_headers)).json()["sets"] == []

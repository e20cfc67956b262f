"""Dashboard: history, consistency, personal records, trends, progress and weekly stats."""

from datetime import datetime, time, timedelta, timezone

import pytest

from app.core.dates import utcnow
from app.models.workout import ExerciseSet, WorkoutSession

BASE = "/api/v1/dashboard"
USER_ID = "user-1"


async def seed_sessions(session_maker, *days_ago, user_id=USER_ID):
    now = utcnow()
    async with session_maker() as session:
        async with session.begin():
            for n in days_ago:
                started = now - timedelta(days=n)
                session.add(
                    WorkoutSession(
                        user_id=user_id,
                        name=f"Day -{n}",
                        started_at=started,
                        ended_at=started + timedelta(minutes=30),
                        duration_seconds=1800,
                        total_volume=1000,
                    )
                )


@pytest.mark.asyncio
async def test_consistency_empty(client, headers):
    r = await client.get(f"{BASE}/consistency", headers=headers)
    assert r.json() == {
        "current_streak": 0,
        "longest_streak": 0,
        "last_workout_date": None,
        "sessions_last_7_days": 0,
    }


@pytest.mark.asyncio
async def test_consistency(client, headers, session_maker):
    await seed_sessions(session_maker, 1, 2, 3, 10, 11, 12, 13, 14)
    await seed_sessions(session_maker, 0, 4, 5, user_id="someone-else")

    body = (await client.get(f"{BASE}/consistency", headers=headers)).json()
    assert body["current_streak"] == 3
    assert body["longest_streak"] == 5
    assert body["sessions_last_7_days"] == 3
    assert body["last_workout_date"] == (utcnow() - timedelta(days=1)).date().isoformat()


@pytest.mark.asyncio
async def test_history_lists_finished_sessions(client, headers, exercises, session_maker):
    await seed_sessions(session_maker, 3, 1)
    active = (await client.post("/api/v1/workout-sessions", json={}, headers=headers)).json()

    done = (await client.post("/api/v1/workout-sessions", json={"name": "Counted"}, headers=headers)).json()
    for i in range(2):
        await client.post(
            f"/api/v1/workout-sessions/{done['id']}/sets",
            json={"exercise_id": str(exercises["Plank"].id), "reps": 1, "set_order": i},
            headers=headers,
        )
    await client.post(f"/api/v1/workout-sessions/{done['id']}/finish", headers=headers)

    body = (await client.get(f"{BASE}/history", headers=headers)).json()
    assert body["total"] == 3
    names = [s["name"] for s in body["sessions"]]
    assert names == ["Counted", "Day -1", "Day -3"]
    assert active["id"] not in {s["id"] for s in body["sessions"]}
    assert body["sessions"][0]["set_count"] == 2
    assert body["sessions"][1]["total_volume"] == 1000.0

    page = (await client.get(f"{BASE}/history", params={"limit": 1, "offset": 1}, headers=headers)).json()
    assert [s["name"] for s in page["sessions"]] == ["Day -1"]


@pytest.mark.asyncio
async def test_personal_records(client, headers, other_headers, exercises, session_maker):
    bench = exercises["Bench Press"]
    s = (await client.post("/api/v1/workout-sessions", json={}, headers=headers)).json()
    for weight, reps in ((100, 5), (60, 5)):
        await client.post(
            f"/api/v1/workout-sessions/{s['id']}/sets",
            json={"exercise_id": str(bench.id), "weight": weight, "reps": reps},
            headers=headers,
        )

    # An old PR, outside this month and year
    async with session_maker() as session:
        async with session.begin():
            old = WorkoutSession(user_id=USER_ID, name="Old", started_at=utcnow() - timedelta(days=800))
            session.add(old)
            await session.flush()
            session.add(ExerciseSet(session_id=old.id, exercise_id=bench.id, weight=50, reps=5, is_pr=True))

    month = (await client.get(f"{BASE}/personal-records", headers=headers)).json()
    assert month["period"] == "month"
    assert month["count"] == 1
    assert month["since"] is not None
    record = month["records"][0]
    assert record["exercise_name"] == "Bench Press"
    assert record["pr_type"] == "weight"
    assert record["weight"] == 100.0

    everything = (await client.get(f"{BASE}/personal-records", params={"period": "all"}, headers=headers)).json()
    assert everything["count"] == 2
    assert everything["since"] is None

    assert (await client.get(f"{BASE}/personal-records", headers=other_headers)).json()["count"] == 0
    assert (
        await client.get(f"{BASE}/personal-records", params={"period": "week"}, headers=headers)
    ).status_code == 422


async def seed_finished(session_maker, days_ago, sets, user_id=USER_ID, finished=True):
    """One session `days_ago` days back holding (exercise, weight, reps) sets."""
    started = utcnow() - timedelta(days=days_ago)
    async with session_maker() as session:
        async with session.begin():
            workout = WorkoutSession(
                user_id=user_id,
                name=f"Day -{days_ago}",
                started_at=started,
                ended_at=started + timedelta(minutes=45) if finished else None,
                duration_seconds=2700 if finished else None,
            )
            session.add(workout)
            await session.flush()
            for i, (exercise, weight, reps) in enumerate(sets):
                session.add(
                    ExerciseSet(
                        session_id=workout.id,
                        exercise_id=exercise.id,
                        set_order=i,
                        weight=weight,
                        reps=reps,
                    )
                )
    return workout.id


@pytest.mark.asyncio
async def test_trending_metrics(client, headers, exercises, session_maker):
    bench, squat, row = exercises["Bench Press"], exercises["Goblet Squat"], exercises["Dumbbell Row"]
    await seed_finished(session_maker, 35, [(bench, 80, 5), (row, 40, 8)])
    await seed_finished(session_maker, 3, [(bench, 100, 5), (bench, 90, 5), (row, 40, 8)])
    await seed_finished(session_maker, 2, [(squat, 30, 10)])
    # Too old for either window
    await seed_finished(session_maker, 90, [(squat, 10, 10)])
    # Unfinished sessions and other users do not count
    await seed_finished(session_maker, 1, [(row, 200, 1)], finished=False)
    await seed_finished(session_maker, 1, [(bench, 300, 1)], user_id="someone-else")

    body = (await client.get(f"{BASE}/metrics", headers=headers)).json()
    assert body["window_days"] == 28
    metrics = body["metrics"]
    assert [m["exercise_name"] for m in metrics] == ["Bench Press", "Dumbbell Row", "Goblet Squat"]

    assert metrics[0]["current_weight"] == 100.0
    assert metrics[0]["previous_weight"] == 80.0
    assert metrics[0]["improvement"] == 20.0
    assert metrics[0]["improvement_percentage"] == 25.0
    assert metrics[0]["muscle_group"] == "chest"

    assert metrics[1]["improvement_percentage"] == 0.0
    assert metrics[2]["previous_weight"] is None
    assert metrics[2]["improvement"] is None

    top = (await client.get(f"{BASE}/metrics", params={"limit": 1}, headers=headers)).json()
    assert [m["exercise_name"] for m in top["metrics"]] == ["Bench Press"]
    assert (await client.get(f"{BASE}/metrics", params={"limit": 21}, headers=headers)).status_code == 422


@pytest.mark.asyncio
async def test_exercise_progress(client, headers, exercises, session_maker):
    bench, plank = exercises["Bench Press"], exercises["Plank"]
    s1 = await seed_finished(session_maker, 20, [(bench, 60, 10), (bench, 70, 5)])
    s2 = await seed_finished(session_maker, 10, [(bench, 75, 5), (plank, None, 1)])
    s3 = await seed_finished(session_maker, 1, [(bench, 80, 3), (bench, 80, 4)])
    await seed_finished(session_maker, 0, [(bench, 500, 1)], finished=False)

    # Default: most-logged exercise, 8 weeks, max weight per session
    body = (await client.get(f"{BASE}/progress", headers=headers)).json()
    assert body["exercise_id"] == str(bench.id)
    assert body["exercise_name"] == "Bench Press"
    assert (body["metric"], body["timeframe"]) == ("weight", "8W")
    assert [p["session_id"] for p in body["data"]] == [str(s1), str(s2), str(s3)]
    assert [p["value"] for p in body["data"]] == [70.0, 75.0, 80.0]

    volume = (
        await client.get(
            f"{BASE}/progress",
            params={"exercise_id": str(bench.id), "metric": "volume", "timeframe": "2W"},
            headers=headers,
        )
    ).json()
    assert [p["value"] for p in volume["data"]] == [375.0, 560.0]

    reps = (
        await client.get(
            f"{BASE}/progress", params={"exercise_id": str(bench.id), "metric": "reps"}, headers=headers
        )
    ).json()
    assert [p["value"] for p in reps["data"]] == [10.0, 5.0, 4.0]


@pytest.mark.asyncio
async def test_exercise_progress_without_data(client, headers, other_headers, exercises, session_maker):
    await seed_finished(session_maker, 1, [(exercises["Bench Press"], 100, 5)])

    empty = (await client.get(f"{BASE}/progress", headers=other_headers)).json()
    assert empty["exercise_id"] is None
    assert empty["data"] == []

    r = await client.get(
        f"{BASE}/progress", params={"exercise_id": "00000000-0000-0000-0000-000000000000"}, headers=headers
    )
    assert r.status_code == 404
    assert (await client.get(f"{BASE}/progress", params={"timeframe": "3D"}, headers=headers)).status_code == 422


@pytest.mark.asyncio
async def test_weekly_stats(client, headers, session_maker):
    today = utcnow().date()
    monday = datetime.combine(today - timedelta(days=today.weekday()), time.min, tzinfo=timezone.utc)

    async with session_maker() as session:
        async with session.begin():
            for started, seconds, volume in (
                (monday + timedelta(hours=1), 1800, 1000),
                (monday + timedelta(minutes=5), 1200, 500),
                (monday - timedelta(days=2), 3600, 2000),
                (monday - timedelta(days=10), 600, 100),
            ):
                session.add(
                    WorkoutSession(
                        user_id=USER_ID,
                        name="Week",
                        started_at=started,
                        ended_at=started + timedelta(seconds=seconds),
                        duration_seconds=seconds,
                        total_volume=volume,
                    )
                )
            session.add(WorkoutSession(user_id=USER_ID, name="Active", started_at=monday + timedelta(hours=2)))

    body = (await client.get(f"{BASE}/weekly-stats", headers=headers)).json()
    assert body["current_week"] == {
        "week_start": monday.date().isoformat(),
        "workouts": 2,
        "duration_minutes": 50,
        "volume": 1500.0,
    }
    assert body["last_week"]["workouts"] == 1
    assert body["last_week"]["duration_minutes"] == 60
    assert body["last_week"]["volume"] == 2000.0

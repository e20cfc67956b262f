"""
pytest configuration and shared fixtures.

Every test gets its own SQLite file database (aiosqlite), created from the ORM
metadata. The app's get_db / get_session_maker dependencies are overridden to
point at it, so no PostgreSQL server is needed.
"""

import os

import pytest
from httpx import ASGITransport, AsyncClient

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("DATABASE_DSN", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DB_RETRY_BASE_DELAY_MS", "1")

from app.db.base import Base  # noqa: E402
from app.db.session import build_engine, build_session_maker, get_db, get_session_maker  # noqa: E402
from app.models import Exercise  # noqa: E402

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest.fixture()
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_maker(engine):
    return build_session_maker(engine)


@pytest.fixture()
async def client(session_maker):
    """
    HTTPX async test client wired to the FastAPI app and the per-test database.

    Usage:
        async def test_something(client, headers):
            response = await client.get("/api/v1/health")
            assert response.status_code == 200
    """
    from app.main import app

    async def _get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_session_maker] = lambda: session_maker
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
def headers():
    return {"X-User-Id": USER_ID}


@pytest.fixture()
def other_headers():
    return {"X-User-Id": OTHER_USER_ID}


CATALOG = [
    ("Push Up", "chest", None),
    ("Bench Press", "chest", "barbell"),
    ("Dumbbell Fly", "chest", "dumbbells"),
    ("Pull Up", "back", "pull_up_bar"),
    ("Dumbbell Row", "back", "dumbbells"),
    ("Goblet Squat", "legs", "dumbbells"),
    ("Bodyweight Squat", "legs", None),
    ("Lunge", "legs", None),
    ("Plank", "core", None),
    ("Shoulder Press", "shoulders", "dumbbells"),
    ("Bicep Curl", "arms", "dumbbells"),
    ("Rowing Machine", "back", "cardio_machine"),
]


@pytest.fixture()
async def exercises(session_maker) -> dict[str, Exercise]:
    """Seed a small public catalog; returns exercises by name."""
    async with session_maker() as session:
        async with session.begin():
            rows = [
                Exercise(name=name, muscle_group=group, equipment=equipment, is_public=True)
                for name, group, equipment in CATALOG
            ]
            session.add_all(rows)
    return {e.name: e for e in rows}

"""Workout session endpoints: start, log sets, finish."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.constants import (
    MAX_EXERCISES_PER_SESSION,
    MAX_SETS_PER_EXERCISE_PER_SESSION,
)
from app.core.dates import as_utc, utcnow
from app.core.security import get_current_user_id
from app.db.session import get_db
from app.models.exercise import Exercise
from app.models.routine import WorkoutRoutine
from app.models.workout import ExerciseSet, WorkoutSession
from app.schemas.workout import (
    ExerciseSetCreate,
    ExerciseSetRead,
    ExerciseSetUpdate,
    RecentSets,
    WorkoutSessionCreate,
    WorkoutSessionFinish,
    WorkoutSessionRead,
    WorkoutSessionReadWithSets,
    WorkoutSessionStarted,
)
from app.services.pr_detection import detect_pr

router = APIRouter()
# Mounted under /exercises
exercise_router = APIRouter()


async def _get_session_or_404(
    db: AsyncSession, session_id: uuid.UUID, user_id: str, *, with_sets: bool = False
) -> WorkoutSession:
    stmt = select(WorkoutSession).where(
        WorkoutSession.id == session_id, WorkoutSession.user_id == user_id
    )
    if with_sets:
        stmt = stmt.options(
            selectinload(WorkoutSession.sets).selectinload(ExerciseSet.exercise)
        ).execution_options(populate_existing=True)
    result = await db.execute(stmt)
    session = result.scalar_one_or_none()
    if not session:
        raise HTTPException(status_code=404, detail="Workout session not found")
    return session


async def _get_set_or_404(
    db: AsyncSession, session_id: uuid.UUID, set_id: uuid.UUID
) -> ExerciseSet:
    result = await db.execute(
        select(ExerciseSet)
        .where(ExerciseSet.id == set_id, ExerciseSet.session_id == session_id)
        .options(selectinload(ExerciseSet.exercise))
        .execution_options(populate_existing=True)
    )
    set_ = result.scalar_one_or_none()
    if not set_:
        raise HTTPException(status_code=404, detail="Set not found")
    return set_


def _with_sorted_sets(session: WorkoutSession) -> WorkoutSessionReadWithSets:
    # Sets by set_order then created_at (stable order per exercise).
    sorted_sets = sorted(session.sets, key=lambda s: (s.set_order, as_utc(s.created_at)))
    return WorkoutSessionReadWithSets(
        **WorkoutSessionRead.model_validate(session).model_dump(),
        sets=[ExerciseSetRead.model_validate(s) for s in sorted_sets],
    )


@router.post("", response_model=WorkoutSessionStarted, status_code=201)
async def start_session(
    payload: WorkoutSessionCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Start a session, optionally from one of the user's routines (name defaults to the routine's)."""
    exercise_order: list[uuid.UUID] = []
    name = payload.name
    if payload.routine_id is not None:
        result = await db.execute(
            select(WorkoutRoutine)
            .where(WorkoutRoutine.id == payload.routine_id, WorkoutRoutine.user_id == user_id)
            .options(selectinload(WorkoutRoutine.exercises))
        )
        routine = result.scalar_one_or_none()
        if not routine:
            raise HTTPException(status_code=404, detail="Routine not found")
        name = name or routine.name
        exercise_order = [e.exercise_id for e in routine.exercises]

    session = WorkoutSession(
        user_id=user_id,
        routine_id=payload.routine_id,
        name=name or "Workout",
        notes=payload.notes,
    )
    db.add(session)
    await db.flush()
    await db.refresh(session)
    # Built field by field so the lazy `sets` relationship is never touched.
    return WorkoutSessionStarted(
        **WorkoutSessionRead.model_validate(session).model_dump(),
        exercise_order=exercise_order,
    )


@router.get("/active", response_model=WorkoutSessionReadWithSets | None)
async def get_active_session(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Latest unfinished session with its sets, or null."""
    result = await db.execute(
        select(WorkoutSession)
        .where(WorkoutSession.user_id == user_id, WorkoutSession.ended_at.is_(None))
        .options(selectinload(WorkoutSession.sets).selectinload(ExerciseSet.exercise))
        .order_by(WorkoutSession.started_at.desc())
        .limit(1)
    )
    session = result.scalar_one_or_none()
    if session is None:
        return None
    return _with_sorted_sets(session)


@router.get("/{session_id}", response_model=WorkoutSessionReadWithSets)
async def get_session(
    session_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Get a session with all sets (and exercise info)."""
    session = await _get_session_or_404(db, session_id, user_id, with_sets=True)
    return _with_sorted_sets(session)


@router.post("/{session_id}/finish", response_model=WorkoutSessionRead)
async def finish_session(
    session_id: uuid.UUID,
    payload: WorkoutSessionFinish | None = None,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Finish a session: stamps ended_at, duration_seconds and total_volume (sum of weight x reps)."""
    session = await _get_session_or_404(db, session_id, user_id)
    if session.ended_at is not None:
        raise HTTPException(status_code=400, detail="Workout session already finished")

    ended = as_utc(payload.ended_at) if payload and payload.ended_at else utcnow()
    started = as_utc(session.started_at)
    if ended < started:
        raise HTTPException(status_code=400, detail="ended_at cannot be before started_at")

    r = await db.execute(
        select(func.coalesce(func.sum(ExerciseSet.weight * ExerciseSet.reps), 0)).where(
            ExerciseSet.session_id == session_id,
            ExerciseSet.weight.isnot(None),
            ExerciseSet.reps.isnot(None),
        )
    )
    session.ended_at = ended
    session.duration_seconds = int((ended - started).total_seconds())
    session.total_volume = round(float(r.scalar() or 0), 2)
    if payload and payload.notes is not None:
        session.notes = payload.notes
    await db.flush()
    await db.refresh(session)
    return WorkoutSessionRead.model_validate(session)


@router.delete("/{session_id}", status_code=204)
async def delete_session(
    session_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Delete a session and its sets."""
    session = await _get_session_or_404(db, session_id, user_id)
    await db.delete(session)
    return None


@router.post("/{session_id}/sets", response_model=ExerciseSetRead, status_code=201)
async def add_set(
    session_id: uuid.UUID,
    payload: ExerciseSetCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Add a set (max 20 exercises per session, 10 sets per exercise). Auto-flags PRs."""
    session = await _get_session_or_404(db, session_id, user_id)
    if session.ended_at is not None:
        raise HTTPException(status_code=400, detail="Cannot add sets to a finished workout session")

    exists = await db.execute(select(Exercise.id).where(Exercise.id == payload.exercise_id))
    if exists.scalar_one_or_none() is None:
        raise HTTPException(status_code=404, detail="Exercise not found")

    # One query: distinct exercise count and sets count for this exercise
    counts_row = await db.execute(
        select(
            func.count(func.distinct(ExerciseSet.exercise_id)).label("n_exercises"),
            func.count(case((ExerciseSet.exercise_id == payload.exercise_id, 1))).label("n_sets_this_ex"),
        ).where(ExerciseSet.session_id == session_id)
    )
    row = counts_row.one_or_none()
    n_exercises = int(row.n_exercises or 0) if row else 0
    n_sets_this_ex = int(row.n_sets_this_ex or 0) if row else 0

    if n_sets_this_ex >= MAX_SETS_PER_EXERCISE_PER_SESSION:
        raise HTTPException(
            status_code=400,
            detail=f"Maximum {MAX_SETS_PER_EXERCISE_PER_SESSION} sets per exercise per session.",
        )
    if n_exercises >= MAX_EXERCISES_PER_SESSION and n_sets_this_ex == 0:
        raise HTTPException(
            status_code=400,
            detail=f"Maximum {MAX_EXERCISES_PER_SESSION} exercises per session.",
        )

    is_pr, pr_type = await detect_pr(
        db, user_id, payload.exercise_id, payload.weight, payload.reps
    )
    set_ = ExerciseSet(
        session_id=session_id,
        is_pr=is_pr,
        pr_type=pr_type,
        **payload.model_dump(),
    )
    db.add(set_)
    await db.flush()
    return await _get_set_or_404(db, session_id, set_.id)


@router.patch("/{session_id}/sets/{set_id}", response_model=ExerciseSetRead)
async def update_set(
    session_id: uuid.UUID,
    set_id: uuid.UUID,
    payload: ExerciseSetUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Update a set's order, weight or reps. PR flags are re-evaluated when weight or reps change."""
    await _get_session_or_404(db, session_id, user_id)
    set_ = await _get_set_or_404(db, session_id, set_id)
    data = payload.model_dump(exclude_unset=True)
    for k, v in data.items():
        setattr(set_, k, v)
    if "weight" in data or "reps" in data:
        set_.is_pr, set_.pr_type = await detect_pr(
            db,
            user_id,
            set_.exercise_id,
            float(set_.weight) if set_.weight is not None else None,
            set_.reps,
            exclude_set_id=set_.id,
        )
    await db.flush()
    return set_


@router.delete("/{session_id}/sets/{set_id}", status_code=204)
async def delete_set(
    session_id: uuid.UUID,
    set_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Delete a set from a session."""
    await _get_session_or_404(db, session_id, user_id)
    set_ = await _get_set_or_404(db, session_id, set_id)
    await db.delete(set_)
    return None


@exercise_router.get("/{exercise_id}/recent-sets", response_model=RecentSets)
async def get_recent_sets(
    exercise_id: uuid.UUID,
    exclude_session_id: uuid.UUID | None = None,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Sets for this exercise from the user's most recent session that included it.
    Pass exclude_session_id (e.g. the current session) to get the one before.
    """
    subq = (
        select(WorkoutSession.id)
        .join(ExerciseSet, ExerciseSet.session_id == WorkoutSession.id)
        .where(WorkoutSession.user_id == user_id, ExerciseSet.exercise_id == exercise_id)
        .order_by(WorkoutSession.started_at.desc())
        .limit(1)
    )
    if exclude_session_id is not None:
        subq = subq.where(WorkoutSession.id != exclude_session_id)
    subq = subq.subquery()

    result = await db.execute(
        select(ExerciseSet, WorkoutSession.started_at)
        .join(WorkoutSession, WorkoutSession.id == ExerciseSet.session_id)
        .where(
            ExerciseSet.exercise_id == exercise_id,
            ExerciseSet.session_id.in_(select(subq.c.id)),
        )
        .options(selectinload(ExerciseSet.exercise))
        .order_by(ExerciseSet.set_order, ExerciseSet.created_at)
    )
    rows = result.all()
    if not rows:
        return RecentSets()
    return RecentSets(
        session_id=rows[0][0].session_id,
        session_started_at=rows[0][1],
        sets=[ExerciseSetRead.model_validate(s) for s, _ in rows],
    )

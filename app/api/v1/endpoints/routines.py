"""Workout routines - plan, save and reuse workout structure."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.constants import MAX_EXERCISES_PER_SESSION
from app.core.security import get_current_user_id
from app.db.session import get_db
from app.models.ai_generation import AiWorkoutBlueprint
from app.models.exercise import Exercise
from app.models.routine import RoutineExercise, WorkoutRoutine
from app.schemas.ai_workout import GeneratedWorkout
from app.schemas.routine import (
    WorkoutRoutineCreate,
    WorkoutRoutineCreateFromBlueprint,
    WorkoutRoutineRead,
    WorkoutRoutineUpdate,
)

router = APIRouter()


def _routine_query():
    return select(WorkoutRoutine).options(
        selectinload(WorkoutRoutine.exercises).selectinload(RoutineExercise.exercise)
    )


async def _load_routine(db: AsyncSession, routine_id: uuid.UUID, user_id: str) -> WorkoutRoutine:
    result = await db.execute(
        _routine_query()
        .where(WorkoutRoutine.id == routine_id, WorkoutRoutine.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    routine = result.scalar_one_or_none()
    if not routine:
        raise HTTPException(status_code=404, detail="Routine not found")
    return routine


async def _ensure_exercises_exist(db: AsyncSession, exercise_ids: set[uuid.UUID]) -> None:
    if not exercise_ids:
        return
    result = await db.execute(select(Exercise.id).where(Exercise.id.in_(exercise_ids)))
    missing = exercise_ids - set(result.scalars().all())
    if missing:
        raise HTTPException(status_code=400, detail=f"Unknown exercise ids: {sorted(str(m) for m in missing)}")


@router.get("", response_model=list[WorkoutRoutineRead])
async def list_routines(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    active_only: bool = False,
    skip: int = 0,
    limit: int = 50,
):
    """List the user's routines, newest first."""
    stmt = _routine_query().where(WorkoutRoutine.user_id == user_id)
    if active_only:
        stmt = stmt.where(WorkoutRoutine.is_active.is_(True))
    result = await db.execute(stmt.order_by(WorkoutRoutine.created_at.desc()).offset(skip).limit(limit))
    return list(result.scalars().all())


@router.post("", response_model=WorkoutRoutineRead, status_code=201)
async def create_routine(
    payload: WorkoutRoutineCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Create a routine with its ordered exercises."""
    if len(payload.exercises) > MAX_EXERCISES_PER_SESSION:
        raise HTTPException(
            status_code=400,
            detail=f"Maximum {MAX_EXERCISES_PER_SESSION} exercises per routine.",
        )
    await _ensure_exercises_exist(db, {e.exercise_id for e in payload.exercises})

    routine = WorkoutRoutine(
        user_id=user_id,
        name=payload.name,
        description=payload.description,
        estimated_duration=payload.estimated_duration,
    )
    db.add(routine)
    await db.flush()
    for entry in payload.exercises:
        db.add(RoutineExercise(routine_id=routine.id, **entry.model_dump()))
    await db.flush()
    return await _load_routine(db, routine.id, user_id)


@router.post("/from-blueprint", response_model=WorkoutRoutineRead, status_code=201)
async def create_routine_from_blueprint(
    payload: WorkoutRoutineCreateFromBlueprint,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Save a generated workout blueprint as a routine (order, sets, reps and rest preserved)."""
    result = await db.execute(
        select(AiWorkoutBlueprint).where(AiWorkoutBlueprint.id == payload.blueprint_id)
    )
    blueprint = result.scalar_one_or_none()
    if not blueprint:
        raise HTTPException(status_code=404, detail="Blueprint not found")
    workout = GeneratedWorkout.model_validate_json(blueprint.routine_data)

    exercises = sorted(workout.exercises, key=lambda e: e.order_index)[:MAX_EXERCISES_PER_SESSION]
    await _ensure_exercises_exist(db, {e.id for e in exercises})

    routine = WorkoutRoutine(
        user_id=user_id,
        name=payload.name or workout.name,
        description=workout.description,
        estimated_duration=workout.estimated_duration or None,
    )
    db.add(routine)
    await db.flush()
    for i, ex in enumerate(exercises):
        db.add(
            RoutineExercise(
                routine_id=routine.id,
                exercise_id=ex.id,
                order_index=i,
                sets=ex.sets,
                min_reps=ex.min_reps,
                max_reps=ex.max_reps,
                target_weight=ex.target_weight,
                rest_time=ex.rest_time,
                notes=ex.notes,
            )
        )
    await db.flush()
    return await _load_routine(db, routine.id, user_id)


@router.get("/{routine_id}", response_model=WorkoutRoutineRead)
async def get_routine(
    routine_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Get a routine with its exercises."""
    return await _load_routine(db, routine_id, user_id)


@router.patch("/{routine_id}", response_model=WorkoutRoutineRead)
async def update_routine(
    routine_id: uuid.UUID,
    payload: WorkoutRoutineUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Update routine name, description, duration or active flag."""
    routine = await _load_routine(db, routine_id, user_id)
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(routine, k, v)
    await db.flush()
    return await _load_routine(db, routine_id, user_id)


@router.delete("/{routine_id}", status_code=204)
async def delete_routine(
    routine_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Delete a routine (sessions started from it keep their history)."""
    routine = await _load_routine(db, routine_id, user_id)
    await db.delete(routine)
    return None

"""Exercise catalog CRUD endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import Equipment
from app.db.session import get_db
from app.models.exercise import Exercise
from app.schemas.exercise import ExerciseCreate, ExerciseRead, ExerciseUpdate

router = APIRouter()


async def _get_or_404(db: AsyncSession, exercise_id: uuid.UUID) -> Exercise:
    result = await db.execute(select(Exercise).where(Exercise.id == exercise_id))
    exercise = result.scalar_one_or_none()
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return exercise


@router.get("", response_model=list[ExerciseRead])
async def list_exercises(
    db: AsyncSession = Depends(get_db),
    q: str | None = None,
    muscle_group: str | None = None,
    equipment: Equipment | None = None,
    skip: int = 0,
    limit: int = 100,
):
    """List exercises by name, optionally filtered by name search, muscle group or equipment."""
    stmt = select(Exercise)
    if q:
        stmt = stmt.where(Exercise.name.ilike(f"%{q}%"))
    if muscle_group:
        stmt = stmt.where(Exercise.muscle_group.ilike(f"%{muscle_group}%"))
    if equipment:
        stmt = stmt.where(Exercise.equipment == equipment.value)
    result = await db.execute(stmt.order_by(Exercise.name).offset(skip).limit(limit))
    return list(result.scalars().all())


@router.post("", response_model=ExerciseRead, status_code=201)
async def create_exercise(
    payload: ExerciseCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a new exercise."""
    data = payload.model_dump()
    data["equipment"] = payload.equipment.value if payload.equipment else None
    exercise = Exercise(**data)
    db.add(exercise)
    await db.flush()
    await db.refresh(exercise)
    return exercise


@router.get("/{exercise_id}", response_model=ExerciseRead)
async def get_exercise(
    exercise_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get a single exercise by id."""
    return await _get_or_404(db, exercise_id)


@router.patch("/{exercise_id}", response_model=ExerciseRead)
async def update_exercise(
    exercise_id: uuid.UUID,
    payload: ExerciseUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update an exercise (partial)."""
    exercise = await _get_or_404(db, exercise_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("equipment") is not None:
        data["equipment"] = data["equipment"].value
    for k, v in data.items():
        setattr(exercise, k, v)
    await db.flush()
    await db.refresh(exercise)
    return exercise


@router.delete("/{exercise_id}", status_code=204)
async def delete_exercise(
    exercise_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete an exercise."""
    exercise = await _get_or_404(db, exercise_id)
    await db.delete(exercise)
    return None

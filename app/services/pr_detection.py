"""PR detection: flag a set as PR if it beats the user's all-time best for that exercise."""

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import PRType
from app.models.workout import ExerciseSet, WorkoutSession


async def detect_pr(
    db: AsyncSession,
    user_id: str,
    exercise_id: uuid.UUID,
    weight: float | None,
    reps: int | None,
    exclude_set_id: uuid.UUID | None = None,
) -> tuple[bool, PRType | None]:
    """
    Compare this set's weight and volume to the user's all-time bests for the exercise.
    Returns (is_pr, pr_type); weight wins over volume when both are beaten.
    Pass exclude_set_id when re-checking an edited set so it is not compared to itself.
    """
    if weight is None:
        return False, None

    conditions = [
        WorkoutSession.user_id == user_id,
        ExerciseSet.exercise_id == exercise_id,
    ]
    if exclude_set_id is not None:
        conditions.append(ExerciseSet.id != exclude_set_id)

    r = await db.execute(
        select(
            func.max(ExerciseSet.weight).label("max_weight"),
            func.max(ExerciseSet.weight * ExerciseSet.reps).label("max_volume"),
        )
        .join(WorkoutSession, WorkoutSession.id == ExerciseSet.session_id)
        .where(*conditions)
    )
    row = r.one()
    max_weight = float(row.max_weight or 0)
    max_volume = float(row.max_volume or 0)

    if float(weight) > max_weight:
        return True, PRType.WEIGHT
    if reps is not None and float(weight) * int(reps) > max_volume:
        return True, PRType.VOLUME
    return False, None

"""Workout generation from user constraints.

`WorkoutGenerator` is the seam for the generation backend. The rule-based
implementation picks exercises from the public catalog: equipment and muscle
filters, a time budget per workout type, requested exercises first, then the
least-used muscle group for each remaining slot.
"""

from __future__ import annotations

import uuid
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.constants import (
    DEFAULT_MINUTES_PER_EXERCISE,
    MINUTES_PER_EXERCISE,
    REPS_BY_LEVEL,
    REST_SECONDS_BY_LEVEL,
    SETS_BY_LEVEL,
    WARMUP_COOLDOWN_MINUTES,
    WORK_SECONDS_PER_SET,
    WORKOUT_TYPE_NAMES,
)
from app.core.dates import utcnow
from app.core.enums import Equipment, TargetMuscleGroup
from app.core.errors import GenerationFailure
from app.models.exercise import Exercise
from app.schemas.ai_workout import GeneratedExercise, GeneratedWorkout, GenerateWorkoutRequest


class WorkoutGenerator(Protocol):
    async def generate(self, request: GenerateWorkoutRequest, spec_hash: str) -> GeneratedWorkout: ...


def filter_exercises(catalog: list[Exercise], request: GenerateWorkoutRequest) -> list[Exercise]:
    """Public exercises usable with the available equipment and matching the targets."""
    available = {e.value for e in request.available_equipment} | {Equipment.BODYWEIGHT.value}
    targets = [
        g.value.lower()
        for g in (request.target_muscle_groups or [])
        if g != TargetMuscleGroup.FULL_BODY
    ]
    excluded = {name.strip().lower() for name in (request.exclude_exercises or [])}

    out = []
    for ex in catalog:
        if not ex.is_public:
            continue
        if ex.equipment and ex.equipment not in available:
            continue
        if targets:
            group = (ex.muscle_group or "").lower()
            if not group or not any(t in group for t in targets):
                continue
        if ex.name.lower() in excluded:
            continue
        out.append(ex)
    return out


def exercise_count(request: GenerateWorkoutRequest) -> int:
    per_exercise = MINUTES_PER_EXERCISE.get(request.workout_type, DEFAULT_MINUTES_PER_EXERCISE)
    return max(1, request.target_duration // per_exercise)


def select_exercises(request: GenerateWorkoutRequest, candidates: list[Exercise], count: int) -> list[Exercise]:
    """Requested exercises first, then balance muscle groups across the remaining slots."""
    chosen: list[Exercise] = []
    used: set[uuid.UUID] = set()
    group_counts: dict[str, int] = {}

    def take(ex: Exercise) -> None:
        chosen.append(ex)
        used.add(ex.id)
        group = ex.muscle_group or "unknown"
        group_counts[group] = group_counts.get(group, 0) + 1

    for wanted in request.include_exercises or []:
        needle = wanted.strip().lower()
        for ex in candidates:
            if len(chosen) >= count:
                break
            if ex.id not in used and needle and needle in ex.name.lower():
                take(ex)

    while len(chosen) < count:
        unused = [ex for ex in candidates if ex.id not in used]
        if not unused:
            break
        # sorted() is stable, so ties keep catalog order
        take(sorted(unused, key=lambda ex: group_counts.get(ex.muscle_group or "unknown", 0))[0])
    return chosen


def estimate_duration_minutes(exercises: list[GeneratedExercise]) -> int:
    total_seconds = sum(
        ex.sets * WORK_SECONDS_PER_SET + (ex.sets - 1) * ex.rest_time for ex in exercises
    )
    return round(total_seconds / 60 + WARMUP_COOLDOWN_MINUTES)


def workout_name(request: GenerateWorkoutRequest) -> str:
    base = WORKOUT_TYPE_NAMES.get(request.workout_type, "Custom Workout")
    return f"{request.fitness_level.value.capitalize()} {base} ({request.target_duration}min)"


def workout_description(request: GenerateWorkoutRequest) -> str:
    groups = ", ".join(g.value for g in request.target_muscle_groups or []) or "full body"
    equipment = ", ".join(e.value for e in request.available_equipment)
    return (
        f"A {request.fitness_level.value} level {request.workout_type.value} workout targeting {groups}. "
        f"Uses {equipment} equipment and takes approximately {request.target_duration} minutes to complete."
    )


def workout_tags(request: GenerateWorkoutRequest) -> list[str]:
    tags = [request.workout_type.value, request.fitness_level.value]
    tags += [e.value for e in request.available_equipment]
    tags += [g.value for g in request.target_muscle_groups or []]
    if request.intensity:
        tags.append(request.intensity.value)
    return list(dict.fromkeys(tags))


def exercise_notes(request: GenerateWorkoutRequest) -> str:
    notes = [f"Designed for {request.fitness_level.value} level"]
    if request.intensity:
        notes.append(f"{request.intensity.value} intensity")
    if request.limitations:
        notes.append("Consider any physical limitations")
    return ". ".join(notes) + "."


class RuleBasedWorkoutGenerator:
    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def generate(self, request: GenerateWorkoutRequest, spec_hash: str) -> GeneratedWorkout:
        async with self._session_maker() as session:
            result = await session.execute(
                select(Exercise).where(Exercise.is_public.is_(True)).order_by(Exercise.name)
            )
            catalog = list(result.scalars().all())

        candidates = filter_exercises(catalog, request)
        if not candidates:
            raise GenerationFailure("No suitable exercises found for the given criteria")

        picked = select_exercises(request, candidates, min(exercise_count(request), len(candidates)))
        min_reps, max_reps = REPS_BY_LEVEL[request.fitness_level]
        notes = exercise_notes(request)
        exercises = [
            GeneratedExercise(
                id=ex.id,
                name=ex.name,
                muscle_group=ex.muscle_group or "unknown",
                equipment=Equipment(ex.equipment or Equipment.BODYWEIGHT.value),
                sets=SETS_BY_LEVEL[request.fitness_level],
                min_reps=min_reps,
                max_reps=max_reps,
                rest_time=REST_SECONDS_BY_LEVEL[request.fitness_level],
                notes=notes,
                order_index=i,
            )
            for i, ex in enumerate(picked)
        ]

        return GeneratedWorkout(
            id=uuid.uuid4(),
            name=workout_name(request),
            description=workout_description(request),
            estimated_duration=estimate_duration_minutes(exercises),
            exercises=exercises,
            difficulty=request.fitness_level,
            tags=workout_tags(request),
            created_at=utcnow(),
            spec_hash=spec_hash,
            from_cache=False,
        )

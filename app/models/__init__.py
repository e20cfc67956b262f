"""ORM models - import all so Base.metadata is complete for migrations."""

from app.models.ai_generation import AiGenerationRequest, AiWorkoutBlueprint
from app.models.exercise import Exercise
from app.models.rate_limit import RateLimitRecord
from app.models.routine import RoutineExercise, WorkoutRoutine
from app.models.workout import ExerciseSet, WorkoutSession

__all__ = [
    "AiGenerationRequest",
    "AiWorkoutBlueprint",
    "Exercise",
    "ExerciseSet",
    "RateLimitRecord",
    "RoutineExercise",
    "WorkoutRoutine",
    "WorkoutSession",
]

"""API v1 router aggregation."""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    ai_workouts,
    dashboard,
    exercises,
    health,
    routines,
    workout_sessions,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(exercises.router, prefix="/exercises", tags=["exercises"])
api_router.include_router(workout_sessions.exercise_router, prefix="/exercises", tags=["workout-sessions"])
api_router.include_router(routines.router, prefix="/routines", tags=["routines"])
api_router.include_router(workout_sessions.router, prefix="/workout-sessions", tags=["workout-sessions"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(ai_workouts.router, prefix="/ai-workouts", tags=["ai-workouts"])

"""Application constants."""

from app.core.enums import FitnessLevel, WorkoutType

# Session limits (workout builder)
MAX_EXERCISES_PER_SESSION = 20
MAX_SETS_PER_EXERCISE_PER_SESSION = 10

# Streak scan window (~14 months)
STREAK_LOOKBACK_DAYS = 430

# AI workout generation
AI_GENERATE_RATE_LIMIT_PREFIX = "ai-workout-generate"
AI_GENERATE_ACTION = "generate-workout"
MAX_BLUEPRINT_PAGE_SIZE = 100

# Minutes of main work per exercise, by workout type
MINUTES_PER_EXERCISE = {
    WorkoutType.STRENGTH: 8,
    WorkoutType.CARDIO: 12,
    WorkoutType.HIIT: 6,
}
DEFAULT_MINUTES_PER_EXERCISE = 10

SETS_BY_LEVEL = {
    FitnessLevel.BEGINNER: 2,
    FitnessLevel.INTERMEDIATE: 3,
    FitnessLevel.ADVANCED: 4,
}
REPS_BY_LEVEL = {
    FitnessLevel.BEGINNER: (8, 12),
    FitnessLevel.INTERMEDIATE: (10, 15),
    FitnessLevel.ADVANCED: (12, 20),
}
REST_SECONDS_BY_LEVEL = {
    FitnessLevel.BEGINNER: 90,
    FitnessLevel.INTERMEDIATE: 60,
    FitnessLevel.ADVANCED: 45,
}

WORK_SECONDS_PER_SET = 45
WARMUP_COOLDOWN_MINUTES = 10

WORKOUT_TYPE_NAMES = {
    WorkoutType.STRENGTH: "Strength Training",
    WorkoutType.CARDIO: "Cardio Blast",
    WorkoutType.HIIT: "HIIT Circuit",
    WorkoutType.FLEXIBILITY: "Flexibility Flow",
    WorkoutType.MIXED: "Full Body Workout",
}

# Dashboard trends
TRENDING_WINDOW_DAYS = 28
MAX_TRENDING_METRICS = 20
PROGRESS_TIMEFRAME_DAYS = {"2W": 14, "8W": 56, "6M": 182, "1Y": 365, "ALL": None}

"""Shared enums for models and API."""

from enum import Enum


class PRType(str, Enum):
    """Type of personal record."""

    WEIGHT = "weight"  # Heaviest weight
    VOLUME = "volume"  # Highest volume (weight × reps)


class GenerationStatus(str, Enum):
    """Lifecycle of an AI generation request keyed by idempotency key."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class FitnessLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class WorkoutType(str, Enum):
    STRENGTH = "strength"
    CARDIO = "cardio"
    HIIT = "hiit"
    FLEXIBILITY = "flexibility"
    MIXED = "mixed"


class Equipment(str, Enum):
    BODYWEIGHT = "bodyweight"
    DUMBBELLS = "dumbbells"
    BARBELL = "barbell"
    RESISTANCE_BANDS = "resistance_bands"
    KETTLEBELLS = "kettlebells"
    CABLE_MACHINE = "cable_machine"
    PULL_UP_BAR = "pull_up_bar"
    BENCH = "bench"
    SQUAT_RACK = "squat_rack"
    CARDIO_MACHINE = "cardio_machine"


class TargetMuscleGroup(str, Enum):
    CHEST = "chest"
    BACK = "back"
    SHOULDERS = "shoulders"
    ARMS = "arms"
    LEGS = "legs"
    GLUTES = "glutes"
    CORE = "core"
    FULL_BODY = "full_body"


class Intensity(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class FeedbackKind(str, Enum):
    TOO_EASY = "too_easy"
    TOO_HARD = "too_hard"
    JUST_RIGHT = "just_right"
    TOO_LONG = "too_long"
    TOO_SHORT = "too_short"

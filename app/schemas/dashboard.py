"""Dashboard schemas: history, consistency, PR listings, trends and progress."""

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel

from app.core.enums import PRType

RecordPeriod = Literal["month", "year", "all"]


class SessionSummary(BaseModel):
    id: UUID
    name: str
    started_at: datetime
    ended_at: datetime | None = None
    duration_seconds: int | None = None
    total_volume: float | None = None
    set_count: int = 0


class SessionHistory(BaseModel):
    sessions: list[SessionSummary]
    total: int
    limit: int
    offset: int


class Consistency(BaseModel):
    current_streak: int
    longest_streak: int
    last_workout_date: date | None = None
    sessions_last_7_days: int


class PersonalRecord(BaseModel):
    set_id: UUID
    session_id: UUID
    session_started_at: datetime
    exercise_id: UUID
    exercise_name: str | None = None
    pr_type: PRType | None = None
    weight: float | None = None
    reps: int | None = None


class PersonalRecords(BaseModel):
    period: RecordPeriod
    since: datetime | None = None  # None for period=all
    to: datetime
    count: int
    records: list[PersonalRecord]


class TrendingMetric(BaseModel):
    exercise_id: UUID
    exercise_name: str
    muscle_group: str | None = None
    current_weight: float
    previous_weight: float | None = None
    improvement: float | None = None
    improvement_percentage: float | None = None


class TrendingMetrics(BaseModel):
    window_days: int
    metrics: list[TrendingMetric]


ProgressTimeframe = Literal["2W", "8W", "6M", "1Y", "ALL"]
ProgressMetric = Literal["weight", "reps", "volume"]


class ProgressPoint(BaseModel):
    day: date
    value: float
    session_id: UUID


class ExerciseProgress(BaseModel):
    exercise_id: UUID | None = None
    exercise_name: str | None = None
    metric: ProgressMetric
    timeframe: ProgressTimeframe
    data: list[ProgressPoint]


class WeekStats(BaseModel):
    week_start: date
    workouts: int
    duration_minutes: int
    volume: float


class WeeklyStats(BaseModel):
    current_week: WeekStats
    last_week: WeekStats

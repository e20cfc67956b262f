"""Dashboard: session history, consistency streaks, the PR trophy room and trends."""

import uuid
from datetime import date, datetime, time, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.constants import (
    MAX_TRENDING_METRICS,
    PROGRESS_TIMEFRAME_DAYS,
    STREAK_LOOKBACK_DAYS,
    TRENDING_WINDOW_DAYS,
)
from app.core.dates import as_utc, utcnow
from app.core.security import get_current_user_id
from app.db.session import get_db
from app.models.exercise import Exercise
from app.models.workout import ExerciseSet, WorkoutSession
from app.schemas.dashboard import (
    Consistency,
    ExerciseProgress,
    PersonalRecord,
    PersonalRecords,
    ProgressMetric,
    ProgressPoint,
    ProgressTimeframe,
    RecordPeriod,
    SessionHistory,
    SessionSummary,
    TrendingMetric,
    TrendingMetrics,
    WeeklyStats,
    WeekStats,
)
from app.services.streaks import compute_streaks

router = APIRouter()


@router.get("/history", response_model=SessionHistory)
async def session_history(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Finished sessions, newest first, with set count and volume."""
    finished = (WorkoutSession.user_id == user_id, WorkoutSession.ended_at.isnot(None))
    total = (
        await db.execute(select(func.count(WorkoutSession.id)).where(*finished))
    ).scalar_one()

    result = await db.execute(
        select(WorkoutSession, func.count(ExerciseSet.id).label("set_count"))
        .outerjoin(ExerciseSet, ExerciseSet.session_id == WorkoutSession.id)
        .where(*finished)
        .group_by(WorkoutSession.id)
        .order_by(WorkoutSession.started_at.desc())
        .offset(offset)
        .limit(limit)
    )
    sessions = [
        SessionSummary(
            id=s.id,
            name=s.name,
            started_at=s.started_at,
            ended_at=s.ended_at,
            duration_seconds=s.duration_seconds,
            total_volume=float(s.total_volume) if s.total_volume is not None else None,
            set_count=set_count,
        )
        for s, set_count in result.all()
    ]
    return SessionHistory(sessions=sessions, total=total, limit=limit, offset=offset)


@router.get("/consistency", response_model=Consistency)
async def consistency(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Current streak (consecutive days with a session, including today or yesterday),
    longest streak, last workout date and number of sessions in the last 7 days.
    """
    now = utcnow()
    # Limit scan to the last ~14 months so the query stays fast with large history
    cutoff = now - timedelta(days=STREAK_LOOKBACK_DAYS)
    day = func.date(WorkoutSession.started_at)
    result = await db.execute(
        select(day.label("d"))
        .where(WorkoutSession.user_id == user_id, WorkoutSession.started_at >= cutoff)
        .group_by(day)
    )
    workout_dates: list[date] = []
    for row in result.all():
        d = row.d
        if isinstance(d, str):
            d = date.fromisoformat(d)
        workout_dates.append(d)

    recent = (
        await db.execute(
            select(func.count(WorkoutSession.id)).where(
                WorkoutSession.user_id == user_id,
                WorkoutSession.started_at >= now - timedelta(days=7),
            )
        )
    ).scalar_one()

    streaks = compute_streaks(workout_dates, now.date())
    return Consistency(
        current_streak=streaks.current,
        longest_streak=streaks.longest,
        last_workout_date=streaks.last_workout_date,
        sessions_last_7_days=recent,
    )


@router.get("/personal-records", response_model=PersonalRecords)
async def personal_records(
    period: RecordPeriod = "month",
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Sets flagged as personal records. period=month: this calendar month;
    period=year: this calendar year; period=all: everything.
    """
    now = utcnow()
    conditions = [WorkoutSession.user_id == user_id, ExerciseSet.is_pr.is_(True)]
    start = None
    if period == "month":
        start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    elif period == "year":
        start = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    if start is not None:
        conditions.append(WorkoutSession.started_at >= start)

    result = await db.execute(
        select(ExerciseSet, WorkoutSession.started_at)
        .join(WorkoutSession, WorkoutSession.id == ExerciseSet.session_id)
        .where(*conditions)
        .options(selectinload(ExerciseSet.exercise))
        .order_by(WorkoutSession.started_at.desc(), ExerciseSet.set_order)
    )
    records = [
        PersonalRecord(
            set_id=s.id,
            session_id=s.session_id,
            session_started_at=started_at,
            exercise_id=s.exercise_id,
            exercise_name=s.exercise.name if s.exercise else None,
            pr_type=s.pr_type,
            weight=float(s.weight) if s.weight is not None else None,
            reps=s.reps,
        )
        for s, started_at in result.all()
    ]
    return PersonalRecords(
        period=period,
        since=start,
        to=now,
        count=len(records),
        records=records,
    )


@router.get("/metrics", response_model=TrendingMetrics)
async def trending_metrics(
    limit: int = Query(5, ge=1, le=MAX_TRENDING_METRICS),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Best weight per exercise over the last 28 days against the 28 days before.
    Improving exercises come first; exercises with no earlier weight have no improvement.
    """
    now = utcnow()
    current_start = now - timedelta(days=TRENDING_WINDOW_DAYS)
    previous_start = current_start - timedelta(days=TRENDING_WINDOW_DAYS)
    in_current = WorkoutSession.started_at >= current_start

    result = await db.execute(
        select(
            Exercise.id,
            Exercise.name,
            Exercise.muscle_group,
            func.max(case((in_current, ExerciseSet.weight))).label("current_weight"),
            func.max(case((WorkoutSession.started_at < current_start, ExerciseSet.weight))).label(
                "previous_weight"
            ),
        )
        .join(ExerciseSet, ExerciseSet.exercise_id == Exercise.id)
        .join(WorkoutSession, WorkoutSession.id == ExerciseSet.session_id)
        .where(
            WorkoutSession.user_id == user_id,
            WorkoutSession.ended_at.isnot(None),
            WorkoutSession.started_at >= previous_start,
            ExerciseSet.weight.isnot(None),
        )
        .group_by(Exercise.id, Exercise.name, Exercise.muscle_group)
    )

    metrics = []
    for row in result.all():
        if row.current_weight is None:
            continue
        current = float(row.current_weight)
        previous = float(row.previous_weight) if row.previous_weight is not None else None
        improvement = round(current - previous, 2) if previous is not None else None
        percentage = round(improvement / previous * 100, 1) if previous else None
        metrics.append(
            TrendingMetric(
                exercise_id=row.id,
                exercise_name=row.name,
                muscle_group=row.muscle_group,
                current_weight=current,
                previous_weight=previous,
                improvement=improvement,
                improvement_percentage=percentage,
            )
        )
    metrics.sort(
        key=lambda m: (
            m.improvement_percentage is None,
            -(m.improvement_percentage or 0),
            m.exercise_name,
        )
    )
    return TrendingMetrics(window_days=TRENDING_WINDOW_DAYS, metrics=metrics[:limit])


@router.get("/progress", response_model=ExerciseProgress)
async def exercise_progress(
    exercise_id: uuid.UUID | None = None,
    timeframe: ProgressTimeframe = "8W",
    metric: ProgressMetric = "weight",
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    One point per finished session for an exercise: max weight, max reps or
    summed volume. Without exercise_id, the user's most-logged exercise in the
    timeframe is used.
    """
    finished = [WorkoutSession.user_id == user_id, WorkoutSession.ended_at.isnot(None)]
    days = PROGRESS_TIMEFRAME_DAYS[timeframe]
    if days is not None:
        finished.append(WorkoutSession.ended_at >= utcnow() - timedelta(days=days))

    if exercise_id is None:
        exercise_id = (
            await db.execute(
                select(ExerciseSet.exercise_id)
                .join(WorkoutSession, WorkoutSession.id == ExerciseSet.session_id)
                .where(*finished)
                .group_by(ExerciseSet.exercise_id)
                .order_by(func.count(ExerciseSet.id).desc())
                .limit(1)
            )
        ).scalar_one_or_none()
        if exercise_id is None:
            return ExerciseProgress(metric=metric, timeframe=timeframe, data=[])

    exercise = await db.get(Exercise, exercise_id)
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise not found")

    if metric == "weight":
        value = func.max(ExerciseSet.weight)
        finished.append(ExerciseSet.weight.isnot(None))
    elif metric == "reps":
        value = func.max(ExerciseSet.reps)
        finished.append(ExerciseSet.reps.isnot(None))
    else:
        value = func.coalesce(func.sum(ExerciseSet.weight * ExerciseSet.reps), 0)

    result = await db.execute(
        select(WorkoutSession.id, WorkoutSession.ended_at, value.label("value"))
        .join(ExerciseSet, ExerciseSet.session_id == WorkoutSession.id)
        .where(*finished, ExerciseSet.exercise_id == exercise_id)
        .group_by(WorkoutSession.id, WorkoutSession.ended_at)
        .order_by(WorkoutSession.ended_at)
    )
    points = [
        ProgressPoint(day=as_utc(row.ended_at).date(), value=float(row.value or 0), session_id=row.id)
        for row in result.all()
    ]
    return ExerciseProgress(
        exercise_id=exercise.id,
        exercise_name=exercise.name,
        metric=metric,
        timeframe=timeframe,
        data=points,
    )


async def _week_stats(db: AsyncSession, user_id: str, week_start: date) -> WeekStats:
    begin = datetime.combine(week_start, time.min, tzinfo=timezone.utc)
    row = (
        await db.execute(
            select(
                func.count(WorkoutSession.id).label("workouts"),
                func.coalesce(func.sum(WorkoutSession.duration_seconds), 0).label("seconds"),
                func.coalesce(func.sum(WorkoutSession.total_volume), 0).label("volume"),
            ).where(
                WorkoutSession.user_id == user_id,
                WorkoutSession.ended_at >= begin,
                WorkoutSession.ended_at < begin + timedelta(days=7),
            )
        )
    ).one()
    return WeekStats(
        week_start=week_start,
        workouts=row.workouts,
        duration_minutes=int(row.seconds) // 60,
        volume=float(row.volume),
    )


@router.get("/weekly-stats", response_model=WeeklyStats)
async def weekly_stats(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Finished workouts, minutes and volume for this week and last week (Monday start, UTC)."""
    today = utcnow().date()
    this_monday = today - timedelta(days=today.weekday())
    return WeeklyStats(
        current_week=await _week_stats(db, user_id, this_monday),
        last_week=await _week_stats(db, user_id, this_monday - timedelta(days=7)),
    )

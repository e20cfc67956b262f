"""Streak calculation over distinct workout dates."""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable


@dataclass(frozen=True)
class Streaks:
    current: int
    longest: int
    last_workout_date: date | None


def compute_streaks(workout_dates: Iterable[date], today: date) -> Streaks:
    """
    Current streak: consecutive days with at least one workout ending today or yesterday
    (0 otherwise). Longest streak: longest run of consecutive days anywhere in the input.
    Duplicates and ordering of the input do not matter.
    """
    days = sorted(set(workout_dates), reverse=True)
    if not days:
        return Streaks(current=0, longest=0, last_workout_date=None)

    last_workout = days[0]

    current = 0
    if last_workout >= today - timedelta(days=1):
        current = 1
        for i in range(1, len(days)):
            if days[i] == days[i - 1] - timedelta(days=1):
                current += 1
            else:
                break

    longest = 1
    run = 1
    for i in range(1, len(days)):
        if days[i] == days[i - 1] - timedelta(days=1):
            run += 1
            longest = max(longest, run)
        else:
            run = 1

    return Streaks(current=current, longest=longest, last_workout_date=last_workout)

from datetime import date, timedelta

from app.services.streaks import compute_streaks

TODAY = date(2026, 3, 15)


def days_ago(*offsets):
    return [TODAY - timedelta(days=n) for n in offsets]


def test_no_workouts():
    s = compute_streaks([], TODAY)
    assert (s.current, s.longest, s.last_workout_date) == (0, 0, None)


def test_current_streak_including_today():
    s = compute_streaks(days_ago(0, 1, 2, 4), TODAY)
    assert s.current == 3
    assert s.longest == 3
    assert s.last_workout_date == TODAY


def test_current_streak_may_end_yesterday():
    s = compute_streaks(days_ago(1, 2), TODAY)
    assert s.current == 2


def test_streak_broken_two_days_ago():
    s = compute_streaks(days_ago(2, 3, 4, 5), TODAY)
    assert s.current == 0
    assert s.longest == 4


def test_longest_run_found_anywhere():
    s = compute_streaks(days_ago(0, 10, 11, 12, 13, 14, 30), TODAY)
    assert s.current == 1
    assert s.longest == 5


def test_duplicates_and_order_do_not_matter():
    s = compute_streaks(days_ago(2, 0, 1, 1, 0), TODAY)
    assert s.current == 3
    assert s.longest == 3

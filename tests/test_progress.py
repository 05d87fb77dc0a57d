"""Tests for progress calculation and dot grid arithmetic."""

from datetime import datetime, timedelta, timezone

import pytest

from dotgoals.goals.dots import completed_dots, dot_capacity
from dotgoals.goals.models import PercentageGoal, TimeframeGoal
from dotgoals.goals.progress import compute_progress

START = datetime(2025, 1, 1)
END = START + timedelta(days=8)


def timeframe(start=START, end=END):
    return TimeframeGoal(name="Trip", start_date=start, end_date=end)


def test_none_goal_is_zero():
    assert compute_progress(None) == 0


@pytest.mark.parametrize("progress,expected", [(0, 0), (42, 42), (100, 100), (130, 100), (-5, 0)])
def test_percentage_progress_is_clamped(progress, expected):
    assert compute_progress(PercentageGoal(name="Run", progress=progress)) == expected


def test_percentage_ignores_now():
    goal = PercentageGoal(name="Run", progress=30)
    assert compute_progress(goal, now=datetime(1990, 1, 1)) == 30


@pytest.mark.parametrize(
    "elapsed,expected",
    [
        (timedelta(days=2), 25),
        (timedelta(days=4), 50),
        (timedelta(hours=24), 13),  # 12.5% rounds half up
        (timedelta(hours=23), 12),
    ],
)
def test_timeframe_progress_rounds_elapsed_fraction(elapsed, expected):
    assert compute_progress(timeframe(), now=START + elapsed) == expected


def test_timeframe_before_start_is_zero():
    assert compute_progress(timeframe(), now=START - timedelta(days=3)) == 0
    assert compute_progress(timeframe(), now=START) == 0


def test_timeframe_after_end_is_hundred():
    assert compute_progress(timeframe(), now=END) == 100
    assert compute_progress(timeframe(), now=END + timedelta(days=30)) == 100


@pytest.mark.parametrize("start,end", [(END, START), (START, START)])
def test_degenerate_range_is_zero(start, end):
    goal = timeframe(start, end)
    assert compute_progress(goal, now=START - timedelta(days=1)) == 0
    assert compute_progress(goal, now=END + timedelta(days=1)) == 0


def test_missing_dates_is_zero():
    assert compute_progress(TimeframeGoal(name="Trip", start_date=START), now=END) == 0
    assert compute_progress(TimeframeGoal(name="Trip", end_date=END), now=END) == 0


def test_aware_dates():
    start = datetime(2025, 1, 1, tzinfo=timezone.utc)
    goal = timeframe(start, start + timedelta(hours=10))
    assert compute_progress(goal, now=start + timedelta(hours=3)) == 30


def test_timeframe_defaults_to_current_time():
    now = datetime.now()
    goal = timeframe(now - timedelta(days=1), now + timedelta(days=1))
    assert compute_progress(goal) == 50


def test_dot_capacity():
    assert dot_capacity(400, 200, dot_size=40) == 10 * 5
    assert dot_capacity(419, 239, dot_size=40) == 10 * 5
    assert dot_capacity(0, 200, dot_size=40) == 0
    assert dot_capacity(400, 200, dot_size=0) == 0


def test_dot_capacity_uses_configured_size():
    assert dot_capacity(80, 80) == 4


@pytest.mark.parametrize(
    "total,percentage,expected",
    [(50, 0, 0), (50, 50, 25), (50, 99, 49), (50, 100, 50), (7, 50, 3), (50, 150, 50), (0, 50, 0)],
)
def test_completed_dots(total, percentage, expected):
    assert completed_dots(total, percentage) == expected

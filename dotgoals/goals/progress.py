"""Goal progress calculation."""

import logging
import math
from datetime import datetime
from typing import Optional

from .models import Goal, PercentageGoal, TimeframeGoal

logger = logging.getLogger(__name__)


def compute_progress(goal: Optional[Goal], now: Optional[datetime] = None) -> int:
    """
    Calculate how complete a goal is.

    Percentage goals report their stored progress. Timeframe goals report
    the share of their date range that has already elapsed, so the result
    changes from one call to the next.

    Args:
        goal: Goal to evaluate (None yields 0)
        now: Reference time, defaults to the current wall-clock time

    Returns:
        Completion percentage between 0 and 100
    """
    if goal is None:
        return 0

    if isinstance(goal, PercentageGoal):
        return _clamp(goal.progress or 0, 0, 100)

    if isinstance(goal, TimeframeGoal):
        return _timeframe_progress(goal, now or datetime.now())

    return 0


def _timeframe_progress(goal: TimeframeGoal, now: datetime) -> int:
    """
    Percentage of the goal's date range elapsed at `now`.

    Example:
        start = Jan 1, end = Jan 11, now = Jan 4 12:00
        = round(3.5 / 10 * 100) = 35
    """
    if goal.start_date is None or goal.end_date is None:
        return 0

    try:
        start = goal.start_date.timestamp()
        end = goal.end_date.timestamp()
        current = now.timestamp()
    except (OverflowError, OSError, ValueError) as e:
        logger.warning(f"Unusable dates on goal {goal.name!r}: {e}")
        return 0

    if end <= start:
        return 0

    fraction = _clamp((current - start) / (end - start), 0.0, 1.0)

    # Half-up rounding; round() would round half to even
    return int(math.floor(fraction * 100 + 0.5))


def _clamp(value, lower, upper):
    """Clamp value into [lower, upper]."""
    return min(upper, max(lower, value))

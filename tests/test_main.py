"""Tests for the console demo and wiring helpers."""

import pytest

from dotgoals.goals.dots import dot_capacity
from dotgoals.goals.models import PercentageGoal
from dotgoals.main import DEMO_AREA, demo_collection, progress_bar


def test_progress_bar():
    assert progress_bar(50, width=10) == "[#####.....] 50%"
    assert progress_bar(0, width=4) == "[....] 0%"


@pytest.mark.asyncio
async def test_demo_prints_goals_with_dot_counts(database, db_path, capsys):
    database.save(PercentageGoal(name="Read", progress=50))
    database.close()

    await demo_collection(db_path)

    total = dot_capacity(*DEMO_AREA)
    output = capsys.readouterr().out
    assert "> Read (percentage)" in output
    assert f"Dots: {total // 2}/{total}" in output

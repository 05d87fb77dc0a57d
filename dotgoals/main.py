"""Entry point: wiring, logging setup and a console demo."""

import logging
from typing import Optional

from .config import settings
from .goals.collection import GoalCollection
from .goals.dots import completed_dots, dot_capacity
from .goals.progress import compute_progress
from .storage.database import GoalDatabase
from .storage.preferences import PreferenceStore

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None):
    """Configure root logging from settings."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_collection(database_path: Optional[str] = None) -> GoalCollection:
    """
    Create a goal collection on a SQLite file.

    Goals and preferences share the file in separate tables.

    Args:
        database_path: SQLite file, defaults to settings.database_path

    Returns:
        Uninitialized GoalCollection; call `initialize()` before use
    """
    path = database_path or settings.database_path
    logger.debug(f"Building goal collection on {path}")
    return GoalCollection(GoalDatabase(path), PreferenceStore(path))


# Nominal display area for the demo's dot counts
DEMO_AREA = (400, 240)


def progress_bar(percentage: int, width: int = 30) -> str:
    """Text progress bar, e.g. [#####.....] 50%."""
    filled = width * percentage // 100
    return f"[{'#' * filled}{'.' * (width - filled)}] {percentage}%"


async def demo_collection(database_path: Optional[str] = None):
    """Demo: Load goals and display their progress."""
    collection = build_collection(database_path)
    total_dots = dot_capacity(*DEMO_AREA)

    try:
        await collection.initialize()

        print("\n" + "=" * 60)
        print("GOALS")
        print("=" * 60 + "\n")

        for index, goal in enumerate(collection.goals):
            percentage = compute_progress(goal)
            marker = ">" if index == collection.current_index else " "
            print(f"{marker} {goal.name} ({goal.type})")
            print(f"  {progress_bar(percentage)}")
            print(f"  Dots: {completed_dots(total_dots, percentage)}/{total_dots}")
            print()

    finally:
        collection.close()


if __name__ == "__main__":
    import asyncio

    configure_logging()
    asyncio.run(demo_collection())

"""Ordered goal list with a current selection, backed by storage."""

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from dotgoals.storage.database import GoalDatabase
from dotgoals.storage.errors import StorageError
from dotgoals.storage.preferences import PreferenceStore

from .models import (
    Goal,
    GoalDraft,
    GoalValidationError,
    default_goal,
    validate_goal,
)
from .progress import compute_progress

logger = logging.getLogger(__name__)

CURRENT_INDEX_KEY = "current_goal_index"


class CollectionState(str, Enum):
    """Loading lifecycle of a collection."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class EditMode(str, Enum):
    """Whether a goal is being composed in an editor."""

    IDLE = "idle"
    CREATING = "creating"
    EDITING = "editing"


def adjust_cursor(old_cursor: int, removed_index: int, new_length: int) -> int:
    """
    Work out the selected index after removing one goal.

    Args:
        old_cursor: Selected index before the removal
        removed_index: Index of the removed goal
        new_length: Number of goals left

    Returns:
        Index that keeps the same goal selected, or its neighbour if the
        selected goal itself was removed
    """
    if new_length <= 0:
        return 0

    if removed_index < old_cursor:
        return old_cursor - 1

    if removed_index == old_cursor:
        return min(old_cursor, new_length - 1)

    return old_cursor


class GoalCollection:
    """
    The user's goals and which one is currently shown.

    Every mutation is written to the database first and only applied in
    memory once storage confirms it. After `initialize()` the collection
    always holds at least one goal and the current index is in range.
    """

    def __init__(self, database: GoalDatabase, preferences: PreferenceStore):
        """
        Initialize collection.

        Args:
            database: Goal storage, opened by `initialize()`
            preferences: Storage for the selected index
        """
        self.database = database
        self.preferences = preferences
        self.state = CollectionState.UNINITIALIZED
        self.edit_mode = EditMode.IDLE
        self.editing_index: Optional[int] = None

        self._goals: list[Goal] = []
        self._current_index = 0
        self._lock = asyncio.Lock()

    @property
    def goals(self) -> list[Goal]:
        """Snapshot of the goals in display order."""
        return list(self._goals)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_goal(self) -> Goal:
        self._require_ready()
        return self._goals[self._current_index]

    def current_progress(self, now: Optional[datetime] = None) -> int:
        """Completion percentage of the selected goal."""
        return compute_progress(self.current_goal, now)

    async def initialize(self):
        """
        Load goals from storage.

        Never raises: if storage is unusable the collection falls back to a
        single default goal so there is always something to show.
        """
        async with self._lock:
            self.state = CollectionState.LOADING
            logger.info("Loading goals...")

            try:
                await asyncio.to_thread(self.database.initialize)
                goals = await asyncio.to_thread(self.database.get_all)
            except (StorageError, ValueError) as e:
                # ValueError covers stored rows that fail model validation
                logger.error(f"Failed to load goals, using default goal: {e}")
                goals = []

            if not goals:
                goals = [await self._create_default_goal()]

            self._goals = goals
            self._current_index = await self._restore_index()
            self.state = CollectionState.READY

            logger.info(
                f"✓ Loaded {len(self._goals)} goals (current: {self._current_index})"
            )

    def close(self):
        """Release the database connection."""
        self.database.close()
        self.state = CollectionState.UNINITIALIZED

    async def select(self, index: int):
        """Make the goal at `index` the current one and remember it."""
        async with self._lock:
            self._require_ready()
            self._check_index(index)

            self._current_index = index
            await self._persist_index()

    async def add_goal(self, draft: GoalDraft) -> Goal:
        """
        Validate and store a new goal, then select it.

        Raises:
            GoalValidationError: draft is invalid, nothing was stored
            StorageWriteError: storage rejected the goal, nothing changed
        """
        async with self._lock:
            self._require_ready()
            goal = self._validated(draft.model_copy(update={"id": None}))
            return await self._append(goal)

    async def edit_goal(self, index: int, draft: GoalDraft) -> Goal:
        """
        Validate and store changes to the goal at `index`.

        The goal keeps its id, position and selection state.

        Raises:
            GoalValidationError: draft is invalid, nothing was stored
            StorageWriteError: storage rejected the goal, nothing changed
        """
        async with self._lock:
            self._require_ready()
            self._check_index(index)

            existing_id = self._goals[index].id
            goal = self._validated(draft.model_copy(update={"id": existing_id}))
            return await self._replace(index, goal)

    async def save(self, draft: GoalDraft) -> Goal:
        """
        Store a goal, updating the entry with the same id or appending it.

        Raises:
            GoalValidationError: draft is invalid, nothing was stored
            StorageWriteError: storage rejected the goal, nothing changed
            KeyError: draft has an id that is not in the collection
        """
        async with self._lock:
            self._require_ready()
            goal = self._validated(draft)

            if goal.id is None:
                return await self._append(goal)

            for index, existing in enumerate(self._goals):
                if existing.id == goal.id:
                    return await self._replace(index, goal)

            raise KeyError(f"No goal with id {goal.id} in collection")

    async def remove_goal(self, index: int):
        """
        Delete the goal at `index`.

        The selection stays on the same goal when possible. Removing the
        last goal leaves a fresh default goal in its place.

        Raises:
            StorageWriteError: storage rejected the delete, nothing changed
        """
        async with self._lock:
            self._require_ready()
            self._check_index(index)
            await self._remove(index)

    def begin_add(self) -> GoalDraft:
        """Start composing a new goal."""
        self._require_ready()
        self.edit_mode = EditMode.CREATING
        self.editing_index = None
        return GoalDraft()

    def begin_edit(self, index: int) -> GoalDraft:
        """Start editing the goal at `index`, returning a prefilled draft."""
        self._require_ready()
        self._check_index(index)
        self.edit_mode = EditMode.EDITING
        self.editing_index = index
        return GoalDraft.from_goal(self._goals[index])

    def cancel_edit(self):
        """Abandon the goal being composed."""
        self.edit_mode = EditMode.IDLE
        self.editing_index = None

    async def commit_edit(self, draft: GoalDraft) -> Goal:
        """
        Store the goal being composed.

        On failure the editor stays open so errors can be shown.
        """
        if self.edit_mode == EditMode.CREATING:
            goal = await self.add_goal(draft)
        elif self.edit_mode == EditMode.EDITING:
            goal = await self.edit_goal(self.editing_index, draft)
        else:
            raise RuntimeError("No goal is being edited")

        self.cancel_edit()
        return goal

    async def delete_editing(self):
        """Delete the goal open in the editor."""
        if self.edit_mode != EditMode.EDITING:
            raise RuntimeError("No existing goal is being edited")

        await self.remove_goal(self.editing_index)
        self.cancel_edit()

    def _validated(self, draft: GoalDraft) -> Goal:
        result = validate_goal(draft)
        if not result.valid:
            logger.debug(f"Rejected goal draft: {result.field_errors}")
            raise GoalValidationError(result.field_errors)
        return draft.to_goal()

    async def _append(self, goal: Goal) -> Goal:
        saved = await self._store(goal)
        self._goals.append(saved)
        self._current_index = len(self._goals) - 1
        await self._persist_index()
        return saved

    async def _replace(self, index: int, goal: Goal) -> Goal:
        saved = await self._store(goal)
        self._goals[index] = saved
        return saved

    async def _store(self, goal: Goal) -> Goal:
        try:
            return await asyncio.to_thread(self.database.save, goal)
        except StorageError as e:
            logger.error(f"Failed to save goal {goal.name!r}: {e}")
            raise

    async def _remove(self, index: int):
        goal = self._goals[index]

        if goal.id is not None:
            try:
                await asyncio.to_thread(self.database.delete, goal.id)
            except StorageError as e:
                logger.error(f"Failed to delete goal {goal.name!r}: {e}")
                raise

        remaining = self._goals[:index] + self._goals[index + 1:]

        if self.edit_mode == EditMode.EDITING and self.editing_index is not None:
            if self.editing_index == index:
                self.cancel_edit()
            elif index < self.editing_index:
                self.editing_index -= 1

        if not remaining:
            logger.info("Last goal removed, creating default goal")
            self._goals = [await self._create_default_goal()]
            self._current_index = 0
        else:
            self._goals = remaining
            self._current_index = adjust_cursor(
                self._current_index, index, len(remaining)
            )

        await self._persist_index()

    async def _create_default_goal(self) -> Goal:
        """Default goal, persisted if storage allows it."""
        goal = default_goal()
        try:
            goal = await asyncio.to_thread(self.database.save, goal)
            logger.info(f"Created default goal ({goal.id})")
        except StorageError as e:
            logger.error(f"Failed to persist default goal, keeping it in memory: {e}")
        return goal

    async def _restore_index(self) -> int:
        try:
            stored = await asyncio.to_thread(self.preferences.get, CURRENT_INDEX_KEY)
        except StorageError as e:
            logger.warning(f"Could not read current goal index: {e}")
            return 0

        if stored is None:
            return 0

        try:
            index = int(stored)
        except ValueError:
            logger.warning(f"Ignoring invalid stored goal index: {stored!r}")
            return 0

        if 0 <= index < len(self._goals):
            return index

        logger.debug(f"Stored goal index {index} out of range, using 0")
        return 0

    async def _persist_index(self):
        try:
            await asyncio.to_thread(
                self.preferences.set, CURRENT_INDEX_KEY, str(self._current_index)
            )
        except StorageError as e:
            logger.warning(f"Could not save current goal index: {e}")

    def _require_ready(self):
        if self.state != CollectionState.READY:
            raise RuntimeError(f"Goal collection is not ready (state: {self.state.value})")

    def _check_index(self, index: int):
        if not 0 <= index < len(self._goals):
            raise IndexError(f"Goal index {index} out of range (0-{len(self._goals) - 1})")

"""Goal models and validation."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

DEFAULT_GOAL_NAME = "New Goal"
MAX_NAME_LENGTH = 50


class GoalType(str, Enum):
    """How a goal's progress is tracked."""

    PERCENTAGE = "percentage"
    TIMEFRAME = "timeframe"


class PercentageGoal(BaseModel):
    """Goal whose completion is set by hand."""

    id: Optional[int] = None
    name: str
    type: Literal["percentage"] = "percentage"
    progress: int = 0


class TimeframeGoal(BaseModel):
    """Goal whose completion follows elapsed time between two dates."""

    id: Optional[int] = None
    name: str
    type: Literal["timeframe"] = "timeframe"
    # Optional so rows from older schemas still load
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


Goal = Annotated[Union[PercentageGoal, TimeframeGoal], Field(discriminator="type")]


def default_goal() -> PercentageGoal:
    """Placeholder goal used when there is nothing else to show."""
    return PercentageGoal(name=DEFAULT_GOAL_NAME, progress=0)


class GoalDraft(BaseModel):
    """Flat goal as composed by an editor, before validation."""

    id: Optional[int] = None
    name: str = ""
    type: GoalType = GoalType.PERCENTAGE
    progress: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @classmethod
    def from_goal(cls, goal: Goal) -> "GoalDraft":
        """Prefill a draft from an existing goal."""
        if isinstance(goal, TimeframeGoal):
            return cls(
                id=goal.id,
                name=goal.name,
                type=GoalType.TIMEFRAME,
                start_date=goal.start_date,
                end_date=goal.end_date,
            )
        return cls(
            id=goal.id,
            name=goal.name,
            type=GoalType.PERCENTAGE,
            progress=goal.progress,
        )

    def to_goal(self) -> Goal:
        """
        Convert to the matching goal variant.

        The name is trimmed and progress clamped to 0-100. Fields of the
        other variant are dropped.
        """
        name = self.name.strip()

        if self.type == GoalType.TIMEFRAME:
            return TimeframeGoal(
                id=self.id,
                name=name,
                start_date=self.start_date,
                end_date=self.end_date,
            )

        progress = min(100, max(0, self.progress or 0))
        return PercentageGoal(id=self.id, name=name, progress=progress)


@dataclass
class ValidationResult:
    """Outcome of validating a draft."""

    valid: bool
    field_errors: dict[str, str] = field(default_factory=dict)


class GoalValidationError(ValueError):
    """Raised when a draft fails validation."""

    def __init__(self, field_errors: dict[str, str]):
        self.field_errors = dict(field_errors)
        fields = ", ".join(sorted(self.field_errors))
        super().__init__(f"Invalid goal fields: {fields}")


def validate_goal(draft: GoalDraft) -> ValidationResult:
    """
    Check a draft against the goal field rules.

    Args:
        draft: Goal as composed by the editor

    Returns:
        ValidationResult with a message per failing field
    """
    errors: dict[str, str] = {}

    name = (draft.name or "").strip()
    if not name:
        errors["name"] = "Goal description is required"
    elif len(name) > MAX_NAME_LENGTH:
        errors["name"] = f"Goal description must be {MAX_NAME_LENGTH} characters or less"

    if draft.type == GoalType.TIMEFRAME:
        if draft.start_date is None:
            errors["start_date"] = "Start date is required"
        if draft.end_date is None:
            errors["end_date"] = "End date is required for timeframe goals"

        if draft.start_date is not None and draft.end_date is not None:
            if not _is_before(draft.start_date, draft.end_date):
                errors["start_date"] = "Start date must be before end date"
                errors["end_date"] = "End date must be after start date"

    return ValidationResult(valid=not errors, field_errors=errors)


def _is_before(start: datetime, end: datetime) -> bool:
    """Order two datetimes, even when only one of them is timezone-aware."""
    if (start.tzinfo is None) == (end.tzinfo is None):
        return start < end

    try:
        return start.timestamp() < end.timestamp()
    except (OverflowError, OSError, ValueError):
        # Dates near datetime.min/max have no epoch value; compare wall times
        return start.replace(tzinfo=None) < end.replace(tzinfo=None)

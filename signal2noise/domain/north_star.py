"""North Star goal domain model."""

from pydantic import Field

from signal2noise.core.config import Constants
from signal2noise.domain.base import StateModel


class NorthStarGoal(StateModel):
    """The single weekly objective that guides categorization."""

    header: str = Field(default=Constants.DEFAULT_NORTH_STAR_HEADER, description="Heading shown above the goal")
    goal: str = Field(default="", description="The goal statement")
    is_locked: bool = Field(default=False, description="Goal is pinned and not meant to change this week")
    is_editing: bool = Field(default=False, description="Edit mode (mutually exclusive with display mode)")

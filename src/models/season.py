"""
Season Data Model
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field


class SeasonStatus(str, Enum):
    """Season status enumeration."""

    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


class Season(BaseModel):
    """A league season. The single current season is chosen by the caller."""

    season_id: int
    name: str
    status: SeasonStatus = SeasonStatus.UPCOMING
    is_current: bool = False
    start_date: date = Field(default_factory=date.today)
    end_date: date | None = None

    @property
    def is_completed(self) -> bool:
        """Check if the season has been played out."""
        return self.status == SeasonStatus.COMPLETED

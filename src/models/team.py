"""
Team Data Model

Pydantic model for a league team and its base strength rating.
"""

from pydantic import BaseModel, ConfigDict, Field


class Team(BaseModel):
    """
    Team snapshot.

    Strength is the base rating used by every simulator. Only strength and
    the active flag are ever changed, and only by the league service.
    """

    model_config = ConfigDict(frozen=True)

    team_id: int
    name: str
    city: str = ""
    strength: int = Field(ge=1, le=100)
    is_active: bool = True

    # Presentation
    primary_color: str | None = None
    secondary_color: str | None = None

    @property
    def strength_description(self) -> str:
        """Describe the strength rating in words."""
        if self.strength >= 90:
            return "World Class"
        elif self.strength >= 80:
            return "Excellent"
        elif self.strength >= 70:
            return "Good"
        elif self.strength >= 60:
            return "Average"
        elif self.strength >= 50:
            return "Below Average"
        return "Poor"

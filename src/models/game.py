"""
Game Data Model

Pydantic model for a fixture and, once played, its result.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GameStatus(str, Enum):
    """Game status enumeration."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"


class GameOutcome(str, Enum):
    """Result of a game from one team's point of view."""

    WIN = "W"
    DRAW = "D"
    LOSS = "L"

    @property
    def points(self) -> int:
        """League points earned for this outcome."""
        if self == GameOutcome.WIN:
            return 3
        elif self == GameOutcome.DRAW:
            return 1
        return 0


class Game(BaseModel):
    """
    Fixture or completed result.

    Goals are present if and only if the game is completed. Instances are
    frozen; ``complete`` and ``reset`` return validated copies.
    """

    model_config = ConfigDict(frozen=True)

    game_id: int
    season_id: int
    home_team_id: int
    away_team_id: int
    week: int = Field(ge=1)

    status: GameStatus = GameStatus.SCHEDULED
    home_goals: int | None = Field(default=None, ge=0, le=20)
    away_goals: int | None = Field(default=None, ge=0, le=20)
    played_at: datetime | None = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "Game":
        if self.home_team_id == self.away_team_id:
            raise ValueError("A game needs two distinct teams")

        has_goals = self.home_goals is not None and self.away_goals is not None
        no_goals = self.home_goals is None and self.away_goals is None
        if self.status == GameStatus.COMPLETED and not has_goals:
            raise ValueError("Completed games must carry both goal counts")
        if self.status == GameStatus.SCHEDULED and not no_goals:
            raise ValueError("Scheduled games cannot carry goal counts")
        return self

    @property
    def is_completed(self) -> bool:
        """Check if the game has been played."""
        return self.status == GameStatus.COMPLETED

    @property
    def is_draw(self) -> bool:
        """Check if the game ended level."""
        return self.is_completed and self.home_goals == self.away_goals

    @property
    def winner_id(self) -> int | None:
        """Team ID of the winner, None for a draw or an unplayed game."""
        if not self.is_completed or self.home_goals == self.away_goals:
            return None
        if self.home_goals > self.away_goals:
            return self.home_team_id
        return self.away_team_id

    @property
    def total_goals(self) -> int:
        """Total goals in the game (0 while scheduled)."""
        return (self.home_goals or 0) + (self.away_goals or 0)

    @property
    def result_string(self) -> str:
        """Score line such as "2-1", or "vs" before kick-off."""
        if not self.is_completed:
            return "vs"
        return f"{self.home_goals}-{self.away_goals}"

    def involves(self, team_id: int) -> bool:
        """Check if the team plays in this game."""
        return team_id in (self.home_team_id, self.away_team_id)

    def goals_for(self, team_id: int) -> int:
        """Goals scored by the given team."""
        if team_id == self.home_team_id:
            return self.home_goals or 0
        return self.away_goals or 0

    def goals_against(self, team_id: int) -> int:
        """Goals conceded by the given team."""
        if team_id == self.home_team_id:
            return self.away_goals or 0
        return self.home_goals or 0

    def outcome_for(self, team_id: int) -> GameOutcome:
        """Win, draw or loss from the given team's perspective."""
        scored = self.goals_for(team_id)
        conceded = self.goals_against(team_id)
        if scored > conceded:
            return GameOutcome.WIN
        elif scored == conceded:
            return GameOutcome.DRAW
        return GameOutcome.LOSS

    def complete(
        self,
        home_goals: int,
        away_goals: int,
        played_at: datetime | None = None,
    ) -> "Game":
        """Return a completed copy of this game."""
        data = self.model_dump()
        data.update(
            status=GameStatus.COMPLETED,
            home_goals=home_goals,
            away_goals=away_goals,
            played_at=played_at or datetime.now(),
        )
        return Game.model_validate(data)

    def reset(self) -> "Game":
        """Return a scheduled copy with goals and timestamp cleared."""
        data = self.model_dump()
        data.update(
            status=GameStatus.SCHEDULED,
            home_goals=None,
            away_goals=None,
            played_at=None,
        )
        return Game.model_validate(data)

"""
Data Models Module

This module contains Pydantic models for the league snapshot records
consumed by the simulation engine.

Models:
    - Team: Team identity and strength rating
    - Season: Season metadata and current flag
    - Game: Fixture or completed result
"""

from src.models.team import Team
from src.models.season import Season, SeasonStatus
from src.models.game import Game, GameOutcome, GameStatus

__all__ = [
    "Team",
    "Season",
    "SeasonStatus",
    "Game",
    "GameOutcome",
    "GameStatus",
]

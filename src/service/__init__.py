"""Service layer for league persistence and simulation workflows."""

from .league import HeadToHead, LeagueService, SeasonStats, format_table

__all__ = [
    "HeadToHead",
    "LeagueService",
    "SeasonStats",
    "format_table",
]

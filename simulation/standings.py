"""
Standings Engine

Aggregates completed games into league table rows and orders them by
points, goal difference and goals scored.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from loguru import logger

from src.models.game import Game
from src.models.team import Team
from simulation.models import Standing


def standing_sort_key(standing: Standing) -> tuple[int, int, int]:
    """Descending league order: points, goal difference, goals for."""
    return (-standing.points, -standing.goal_difference, -standing.goals_for)


class StandingsEngine:
    """Builds and sorts league tables from game snapshots."""

    def team_stats(
        self,
        team_id: int,
        games: Iterable[Game],
        season_id: int | None = None,
    ) -> Standing:
        """
        Aggregate one team's completed games.

        Args:
            team_id: Team to aggregate
            games: Games snapshot
            season_id: Restrict to one season when given

        Returns:
            Unpositioned Standing
        """
        standing = Standing(team_id=team_id)

        for game in games:
            if not game.is_completed or not game.involves(team_id):
                continue
            if season_id is not None and game.season_id != season_id:
                continue
            standing.record(game.goals_for(team_id), game.goals_against(team_id))

        return standing

    def season_standings(self, teams: Sequence[Team], games: Iterable[Game]) -> list[Standing]:
        """
        League table for the active teams.

        Args:
            teams: Team roster; inactive teams are left out
            games: Season games snapshot

        Returns:
            Sorted standings with 1-based positions
        """
        table = {team.team_id: Standing(team_id=team.team_id) for team in teams if team.is_active}

        for game in games:
            if not game.is_completed:
                continue
            for team_id in (game.home_team_id, game.away_team_id):
                if team_id in table:
                    table[team_id].record(game.goals_for(team_id), game.goals_against(team_id))

        return self.sort_standings(list(table.values()))

    def apply_result(
        self,
        table: dict[int, Standing],
        home_team_id: int,
        away_team_id: int,
        home_goals: int,
        away_goals: int,
    ) -> None:
        """Record a result in a working table, adding rows for unseen teams."""
        for team_id in (home_team_id, away_team_id):
            if team_id not in table:
                logger.warning(f"Team {team_id} not in table, adding an empty row")
                table[team_id] = Standing(team_id=team_id)

        table[home_team_id].record(home_goals, away_goals)
        table[away_team_id].record(away_goals, home_goals)

    def sort_standings(self, standings: list[Standing]) -> list[Standing]:
        """Stable sort into league order and assign positions in place."""
        ordered = sorted(standings, key=standing_sort_key)
        for index, standing in enumerate(ordered):
            standing.position = index + 1
        return ordered

    def find(self, standings: Sequence[Standing], team_id: int) -> Standing | None:
        """Row for a team, if present."""
        for standing in standings:
            if standing.team_id == team_id:
                return standing
        return None

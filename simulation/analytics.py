"""
Week and Season Analytics

Goal totals, upsets and an entertainment score for a week of results,
plus completion progress for a season's fixture list.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from src.models.game import Game
from src.models.team import Team
from simulation.models import SeasonProgress, WeekAnalytics

MAX_ENTERTAINMENT = 10.0


def is_upset(game: Game, teams: Mapping[int, Team]) -> bool:
    """Check if the lower-rated side won a completed game."""
    home = teams.get(game.home_team_id)
    away = teams.get(game.away_team_id)
    if home is None or away is None or game.winner_id is None:
        return False

    if home.strength < away.strength and game.winner_id == home.team_id:
        return True
    return away.strength < home.strength and game.winner_id == away.team_id


def entertainment_score(games: Sequence[Game]) -> float:
    """
    Score a set of games from 0 to 10.

    High-scoring, close games rate highest: each game contributes
    0.3 per goal plus 0.2 per goal of margin under five (margin capped at 4).
    """
    if not games:
        return 0.0

    score = 0.0
    for game in games:
        goal_diff = abs((game.home_goals or 0) - (game.away_goals or 0))
        score += game.total_goals * 0.3 + (5 - min(goal_diff, 4)) * 0.2

    return min(MAX_ENTERTAINMENT, score / len(games))


def week_analytics(
    week: int,
    games: Sequence[Game],
    teams: Mapping[int, Team] | Sequence[Team],
) -> WeekAnalytics:
    """
    Summarize one week's completed games.

    Args:
        week: Week number
        games: Completed games of the week
        teams: Team lookup (mapping by id, or a roster)

    Returns:
        WeekAnalytics (zeros for an empty week)
    """
    if not isinstance(teams, Mapping):
        teams = {team.team_id: team for team in teams}

    total_goals = sum(game.total_goals for game in games)
    count = len(games)

    return WeekAnalytics(
        week=week,
        games_played=count,
        total_goals=total_goals,
        average_goals=total_goals / count if count > 0 else 0.0,
        upsets=sum(1 for game in games if is_upset(game, teams)),
        entertainment_score=entertainment_score(games),
    )


def season_progress(games: Sequence[Game]) -> SeasonProgress:
    """Completion snapshot of a season's games."""
    total = len(games)
    completed = sum(1 for game in games if game.is_completed)

    return SeasonProgress(
        progress=completed / total if total > 0 else 0.0,
        completed_games=completed,
        total_games=total,
        is_complete=completed == total,
    )

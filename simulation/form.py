"""
Form Calculator

Summarizes a team's recent results: points share over the last few
completed games, the direction of those results, goal rates, and how
much history the summary rests on.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from src.models.game import Game, GameOutcome
from simulation.models import Form, FormTrend, SimulationSettings


def recent_games(team_id: int, games: Iterable[Game], limit: int) -> list[Game]:
    """Team's completed games, most recent first, capped to ``limit``."""
    played = [g for g in games if g.is_completed and g.involves(team_id)]
    played.sort(
        key=lambda g: (g.week, g.played_at or datetime.min, g.game_id),
        reverse=True,
    )
    return played[:limit]


class FormCalculator:
    """
    Calculator for team form.

    Form score is the fraction of available points taken over the sample;
    confidence grows linearly with sample size up to the form window.
    """

    # Points-per-game gap between recent and earlier games that counts as a trend
    TREND_THRESHOLD = 0.5
    RECENT_GAMES = 2
    MIN_GAMES_FOR_TREND = 3

    def __init__(self, settings: SimulationSettings | None = None) -> None:
        self.settings = settings or SimulationSettings()

    def calculate_form(self, team_id: int, games: Iterable[Game]) -> Form:
        """
        Calculate form from a team's game history.

        Args:
            team_id: Team to summarize
            games: Any games snapshot; only the team's completed games count

        Returns:
            Form record (neutral defaults when the team has not played)
        """
        window = self.settings.form_window
        sample = recent_games(team_id, games, window)

        if not sample:
            return Form(team_id=team_id)

        goals_for = 0
        goals_against = 0
        points = 0
        results: list[str] = []

        for game in sample:
            goals_for += game.goals_for(team_id)
            goals_against += game.goals_against(team_id)
            outcome = game.outcome_for(team_id)
            points += outcome.points
            results.append(outcome.value)

        count = len(sample)

        return Form(
            team_id=team_id,
            score=points / (count * 3),
            trend=self.calculate_trend(results),
            confidence=min(1.0, count / window),
            goals_for_avg=goals_for / count,
            goals_against_avg=goals_against / count,
            games_sampled=count,
            results=results,
        )

    def calculate_trend(self, results: Sequence[str]) -> FormTrend:
        """
        Compare the latest games with the ones before them.

        Args:
            results: Outcome codes ("W", "D", "L"), most recent first

        Returns:
            FormTrend
        """
        if len(results) < self.MIN_GAMES_FOR_TREND:
            return FormTrend.NEUTRAL

        split = min(self.RECENT_GAMES, len(results))
        recent = [GameOutcome(r).points for r in results[:split]]
        earlier = [GameOutcome(r).points for r in results[split:]]

        recent_avg = sum(recent) / len(recent)
        earlier_avg = sum(earlier) / max(1, len(earlier))

        if recent_avg > earlier_avg + self.TREND_THRESHOLD:
            return FormTrend.IMPROVING
        if recent_avg < earlier_avg - self.TREND_THRESHOLD:
            return FormTrend.DECLINING
        return FormTrend.STABLE

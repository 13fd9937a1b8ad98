"""
Basic Match Simulator

Linear scoreline model: expected goals scale with a side's strength and
the strength gap, plus a uniform jitter of up to one goal either way.
"""

from __future__ import annotations

import math

from simulation.models import SimulationSettings
from simulation.rng import NumpyRandomSource, RandomSource


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


class MatchSimulator:
    """
    Simple strength-based match simulator.

    Used for real results in basic play and for every projected game in
    final-table predictions.
    """

    GOALS_PER_STRENGTH = 4  # a 100-rated side expects 4 goals before adjustments
    DIFFERENCE_SCALE = 50
    DIFFERENCE_GOALS = 2

    def __init__(
        self,
        rng: RandomSource | None = None,
        settings: SimulationSettings | None = None,
    ) -> None:
        self.rng = rng or NumpyRandomSource()
        self.settings = settings or SimulationSettings()

    def simulate_match(self, home_strength: int, away_strength: int) -> tuple[int, int]:
        """
        Simulate a single match from base strengths.

        Args:
            home_strength: Home team base rating
            away_strength: Away team base rating

        Returns:
            (home_goals, away_goals)
        """
        home_expected, away_expected = self.expected_goals(home_strength, away_strength)
        return self.draw_goals(home_expected), self.draw_goals(away_expected)

    def expected_goals(self, home_strength: int, away_strength: int) -> tuple[float, float]:
        """Deterministic part of the scoreline, before the random factor."""
        home_effective = home_strength + self.settings.home_advantage
        strength_difference = home_effective - away_strength

        return (
            self._base_goals(home_effective, strength_difference),
            self._base_goals(away_strength, -strength_difference),
        )

    def calculate_goals(self, team_strength: float, strength_difference: float) -> int:
        """Goals for one side given its strength and its edge over the opponent."""
        return self.draw_goals(self._base_goals(team_strength, strength_difference))

    def draw_goals(self, expected: float) -> int:
        """Add the random factor to expected goals, round and clamp."""
        # Uniform in [-1, 1] at hundredth resolution
        random_factor = self.rng.randint(-100, 100) / 100

        goals = expected + random_factor
        return min(self.settings.basic_max_goals, max(0, round_half_up(goals)))

    def _base_goals(self, team_strength: float, strength_difference: float) -> float:
        base_goals = (team_strength / 100) * self.GOALS_PER_STRENGTH
        strength_adjustment = (strength_difference / self.DIFFERENCE_SCALE) * self.DIFFERENCE_GOALS
        return base_goals + strength_adjustment

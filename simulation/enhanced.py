"""
Enhanced Match Simulator

Form-aware match simulation. Effective strengths come from the strength
model, each side gets a random-event multiplier (injuries, weather,
referee decisions), and goals are drawn from a decaying chain of chances.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from src.models.game import Game
from src.models.team import Team
from simulation.form import FormCalculator
from simulation.models import (
    EnhancedMatchResult,
    MatchMetadata,
    RandomEvent,
    SimulationMode,
    SimulationSettings,
)
from simulation.rng import NumpyRandomSource, RandomSource, choose
from simulation.strength import StrengthModel


class EnhancedMatchSimulator:
    """
    Enhanced match simulator.

    Each goal chance succeeds with the current probability, which decays
    by CHANCE_DECAY after every goal. The first missed chance ends the
    scoring for that side.
    """

    INJURY_IMPACT = -0.1
    WEATHER_IMPACTS = {"rain": -0.05, "wind": -0.03, "perfect": 0.05}
    REFEREE_IMPACTS = {"favorable": 0.08, "unfavorable": -0.08}

    # Event probabilities relative to the mode's randomness
    WEATHER_FACTOR = 0.5
    REFEREE_FACTOR = 0.3

    MIN_MULTIPLIER = 0.7
    MAX_MULTIPLIER = 1.3

    BASE_EXPECTED_GOALS = 1.5
    STRENGTH_PER_GOAL = 40
    CHANCE_DECAY = 0.6

    def __init__(
        self,
        rng: RandomSource | None = None,
        settings: SimulationSettings | None = None,
        form_calculator: FormCalculator | None = None,
        strength_model: StrengthModel | None = None,
    ) -> None:
        self.rng = rng or NumpyRandomSource()
        self.settings = settings or SimulationSettings()
        self.form_calculator = form_calculator or FormCalculator(self.settings)
        self.strength_model = strength_model or StrengthModel(self.settings)

    def simulate_enhanced_match(
        self,
        home_team: Team,
        away_team: Team,
        games: Sequence[Game] = (),
        mode: SimulationMode | str = SimulationMode.REALISTIC,
    ) -> EnhancedMatchResult:
        """
        Simulate a match with form, venue and random events.

        Args:
            home_team: Home team snapshot
            away_team: Away team snapshot
            games: Game history used for both teams' form
            mode: Simulation mode

        Returns:
            EnhancedMatchResult with goals and the inputs behind them
        """
        mode = SimulationMode.parse(mode)
        config = self.settings.mode_config(mode)

        home_form = self.form_calculator.calculate_form(home_team.team_id, games)
        away_form = self.form_calculator.calculate_form(away_team.team_id, games)

        home_effective = self.strength_model.effective_strength(
            home_team.strength, home_form, is_home=True
        )
        away_effective = self.strength_model.effective_strength(
            away_team.strength, away_form, is_home=False
        )

        home_multiplier = self.random_event_multiplier(config.randomness)
        away_multiplier = self.random_event_multiplier(config.randomness)

        home_goals = self.enhanced_goals(home_effective * home_multiplier, away_effective)
        away_goals = self.enhanced_goals(away_effective * away_multiplier, home_effective)

        logger.debug(
            f"{home_team.name} {home_goals}-{away_goals} {away_team.name} "
            f"(strength {home_effective:.1f} x{home_multiplier:.2f} vs "
            f"{away_effective:.1f} x{away_multiplier:.2f}, {mode.value})"
        )

        return EnhancedMatchResult(
            home_goals=home_goals,
            away_goals=away_goals,
            metadata=MatchMetadata(
                home_form=home_form,
                away_form=away_form,
                home_effective_strength=home_effective,
                away_effective_strength=away_effective,
                simulation_mode=mode,
            ),
        )

    def draw_random_events(self, randomness: float) -> list[RandomEvent]:
        """
        Roll the three independent event checks for one team.

        Args:
            randomness: Mode randomness level in [0, 1]

        Returns:
            Events that fired, in check order
        """
        events: list[RandomEvent] = []

        if self.rng.randint(1, 100) <= randomness * 100:
            events.append(RandomEvent(event_type="injury", impact=self.INJURY_IMPACT))

        if self.rng.randint(1, 100) <= randomness * 100 * self.WEATHER_FACTOR:
            condition = choose(self.rng, list(self.WEATHER_IMPACTS))
            events.append(
                RandomEvent(
                    event_type="weather",
                    label=condition,
                    impact=self.WEATHER_IMPACTS[condition],
                )
            )

        if self.rng.randint(1, 100) <= randomness * 100 * self.REFEREE_FACTOR:
            decision = choose(self.rng, list(self.REFEREE_IMPACTS))
            events.append(
                RandomEvent(
                    event_type="referee",
                    label=decision,
                    impact=self.REFEREE_IMPACTS[decision],
                )
            )

        return events

    def random_event_multiplier(self, randomness: float) -> float:
        """Performance multiplier in [0.7, 1.3] from this match's random events."""
        total_impact = sum(event.impact for event in self.draw_random_events(randomness))
        return max(self.MIN_MULTIPLIER, min(self.MAX_MULTIPLIER, 1 + total_impact))

    def enhanced_goals(self, attack_strength: float, defense_strength: float) -> int:
        """
        Goals for one side from attack and defense strengths.

        Args:
            attack_strength: Attacking side's effective strength (with multiplier)
            defense_strength: Opponent's effective strength

        Returns:
            Goals in [0, enhanced_max_goals]
        """
        max_goals = self.settings.enhanced_max_goals
        expected_goals = (
            self.BASE_EXPECTED_GOALS
            + (attack_strength - defense_strength) / self.STRENGTH_PER_GOAL
        )

        goals = 0
        probability = expected_goals

        while probability > 0 and goals < max_goals:
            if self.rng.randint(1, 1000) <= probability * 1000:
                goals += 1
                probability *= self.CHANCE_DECAY
            else:
                break

        return min(max_goals, max(0, goals))

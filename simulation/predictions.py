"""
Season Prediction Module

Final-table projection and the prediction ensemble: strength-based,
form-based, statistical, Monte Carlo and consensus methods over the
remaining fixtures of a season. Inputs are snapshots and are never
modified.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from src.models.game import Game
from src.models.team import Team
from simulation.errors import InvalidInputError
from simulation.form import FormCalculator
from simulation.match import MatchSimulator, round_half_up
from simulation.models import (
    ConsensusPrediction,
    Form,
    FormPrediction,
    MonteCarloPrediction,
    PredictionSet,
    SimulationSettings,
    Standing,
    StatisticalPrediction,
    StrengthPrediction,
)
from simulation.rng import NumpyRandomSource, RandomSource
from simulation.standings import StandingsEngine


class PredictionEnsemble:
    """
    Generator for season predictions.

    Every method works from the current table plus the games still
    scheduled. Simulated results only ever land in scratch tables.
    """

    STRENGTH_CONFIDENCE = 0.7
    FORM_CONFIDENCE_FACTOR = 0.8
    CONSENSUS_CONFIDENCE = 0.85

    # Points per remaining game for a perfect form score
    FORM_POINTS_SCALE = 2

    CONSENSUS_WEIGHTS = {
        "strength_based": 0.4,
        "form_based": 0.35,
        "statistical": 0.25,
    }

    def __init__(
        self,
        rng: RandomSource | None = None,
        settings: SimulationSettings | None = None,
        match_simulator: MatchSimulator | None = None,
        form_calculator: FormCalculator | None = None,
        standings_engine: StandingsEngine | None = None,
    ) -> None:
        self.settings = settings or SimulationSettings()
        self.rng = rng or NumpyRandomSource()
        self.match_simulator = match_simulator or MatchSimulator(self.rng, self.settings)
        self.form_calculator = form_calculator or FormCalculator(self.settings)
        self.standings_engine = standings_engine or StandingsEngine()

    # ------------------------------------------------------------------
    # Final table
    # ------------------------------------------------------------------

    def predict_final_table(self, teams: Sequence[Team], games: Sequence[Game]) -> list[Standing]:
        """
        Play out the remaining fixtures once and return the projected table.

        Args:
            teams: Team roster
            games: Season games snapshot

        Returns:
            Sorted, positioned standings flagged as predictions
        """
        current = self.standings_engine.season_standings(teams, games)
        remaining = self._expected_fixtures(teams, self._scheduled_games(teams, games))
        return self._project_table(current, remaining)

    def _project_table(
        self,
        current: Sequence[Standing],
        remaining: Sequence[tuple[int, int, float, float]],
    ) -> list[Standing]:
        table = {standing.team_id: standing.copy() for standing in current}
        draw_goals = self.match_simulator.draw_goals

        for home_team_id, away_team_id, home_expected, away_expected in remaining:
            self.standings_engine.apply_result(
                table,
                home_team_id,
                away_team_id,
                draw_goals(home_expected),
                draw_goals(away_expected),
            )

        projected = self.standings_engine.sort_standings(list(table.values()))
        for standing in projected:
            standing.is_prediction = True
        return projected

    def _expected_fixtures(
        self,
        teams: Sequence[Team],
        scheduled: Sequence[Game],
    ) -> list[tuple[int, int, float, float]]:
        """Expected goals per scheduled game, computed once per projection run."""
        strengths = {team.team_id: team.strength for team in teams}
        remaining = []

        for game in scheduled:
            home_expected, away_expected = self.match_simulator.expected_goals(
                strengths[game.home_team_id], strengths[game.away_team_id]
            )
            remaining.append((game.home_team_id, game.away_team_id, home_expected, away_expected))

        return remaining

    def _scheduled_games(self, teams: Sequence[Team], games: Sequence[Game]) -> list[Game]:
        """Scheduled games between active teams; unknown team ids are rejected."""
        known = {team.team_id for team in teams}
        active = {team.team_id for team in teams if team.is_active}
        scheduled = []

        for game in games:
            if game.is_completed:
                continue
            missing = {game.home_team_id, game.away_team_id} - known
            if missing:
                raise InvalidInputError(
                    f"Game {game.game_id} references unknown team(s) {sorted(missing)}"
                )
            # Inactive teams have no table row, so their fixtures are not projected
            if game.home_team_id in active and game.away_team_id in active:
                scheduled.append(game)

        return scheduled

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------

    def strength_based(self, teams: Sequence[Team], games: Sequence[Game]) -> list[StrengthPrediction]:
        """Single simulated run of the remaining fixtures."""
        return [
            StrengthPrediction(standing=standing, confidence=self.STRENGTH_CONFIDENCE)
            for standing in self.predict_final_table(teams, games)
        ]

    def form_based(self, teams: Sequence[Team], games: Sequence[Game]) -> list[FormPrediction]:
        """Project each team's remaining games at its current form."""
        predictions = []

        for team, standing, form, remaining in self._projection_inputs(teams, games):
            projected_points = standing.points + remaining * form.score * self.FORM_POINTS_SCALE
            projected_gd = standing.goal_difference + remaining * form.goal_balance

            predictions.append(
                FormPrediction(
                    team_id=team.team_id,
                    predicted_points=round_half_up(projected_points),
                    predicted_goal_difference=round_half_up(projected_gd),
                    form_score=form.score,
                    confidence=form.confidence * self.FORM_CONFIDENCE_FACTOR,
                )
            )

        predictions.sort(key=lambda p: (-p.predicted_points, -p.predicted_goal_difference))
        for index, prediction in enumerate(predictions):
            prediction.position = index + 1

        return predictions

    def statistical(self, teams: Sequence[Team], games: Sequence[Game]) -> list[StatisticalPrediction]:
        """Project from per-game goal rates over the form window."""
        predictions = []

        for team, standing, form, remaining in self._projection_inputs(teams, games):
            predictions.append(
                StatisticalPrediction(
                    team_id=team.team_id,
                    predicted_points=standing.points
                    + remaining * form.score * self.FORM_POINTS_SCALE,
                    predicted_goal_difference=standing.goal_difference
                    + remaining * form.goal_balance,
                    xg_for=form.goals_for_avg or 0.0,
                    xg_against=form.goals_against_avg or 0.0,
                    confidence=form.confidence,
                )
            )

        predictions.sort(key=lambda p: (-p.predicted_points, -p.predicted_goal_difference))
        for index, prediction in enumerate(predictions):
            prediction.position = index + 1

        return predictions

    def _projection_inputs(
        self,
        teams: Sequence[Team],
        games: Sequence[Game],
    ) -> list[tuple[Team, Standing, Form, int]]:
        current = self.standings_engine.season_standings(teams, games)
        scheduled = self._scheduled_games(teams, games)
        inputs = []

        for team in teams:
            if not team.is_active:
                continue
            standing = self.standings_engine.find(current, team.team_id) or Standing(team.team_id)
            form = self.form_calculator.calculate_form(team.team_id, games)
            remaining = sum(1 for game in scheduled if game.involves(team.team_id))
            inputs.append((team, standing, form, remaining))

        return inputs

    def monte_carlo(
        self,
        teams: Sequence[Team],
        games: Sequence[Game],
        iterations: int | None = None,
    ) -> list[MonteCarloPrediction]:
        """
        Finishing position distribution over repeated final-table runs.

        Args:
            teams: Team roster
            games: Season games snapshot
            iterations: Number of runs (defaults to settings)

        Returns:
            Predictions ordered by most likely position
        """
        iterations = iterations or self.settings.monte_carlo_iterations
        if iterations < 1:
            raise InvalidInputError("Monte Carlo needs at least one iteration")

        current = self.standings_engine.season_standings(teams, games)
        remaining = self._expected_fixtures(teams, self._scheduled_games(teams, games))

        logger.info(
            f"Running Monte Carlo: {len(remaining)} remaining games, {iterations} iterations"
        )

        # team_id -> position -> count, positions in first-seen order
        tallies: dict[int, dict[int, int]] = {}

        for i in range(iterations):
            for standing in self._project_table(current, remaining):
                counts = tallies.setdefault(standing.team_id, {})
                counts[standing.position] = counts.get(standing.position, 0) + 1

            if (i + 1) % 250 == 0:
                logger.debug(f"Completed {i + 1}/{iterations} iterations")

        predictions = []
        for team_id, counts in tallies.items():
            # max() keeps the first position reaching the top count
            most_likely = max(counts, key=counts.get)
            predictions.append(
                MonteCarloPrediction(
                    team_id=team_id,
                    most_likely_position=most_likely,
                    position_probabilities={
                        position: count / iterations for position, count in counts.items()
                    },
                    confidence=counts[most_likely] / iterations,
                )
            )

        predictions.sort(key=lambda p: p.most_likely_position)
        return predictions

    def consensus(
        self,
        teams: Sequence[Team],
        games: Sequence[Game],
        strength_based: Sequence[StrengthPrediction] | None = None,
        form_based: Sequence[FormPrediction] | None = None,
        statistical: Sequence[StatisticalPrediction] | None = None,
    ) -> list[ConsensusPrediction]:
        """
        Weighted blend of the strength, form and statistical rankings.

        Rankings not passed in are computed here. A team missing from a
        ranking counts as last in it.
        """
        if strength_based is None:
            strength_based = self.strength_based(teams, games)
        if form_based is None:
            form_based = self.form_based(teams, games)
        if statistical is None:
            statistical = self.statistical(teams, games)

        weights = self.CONSENSUS_WEIGHTS
        consensus = []

        for team in teams:
            if not team.is_active:
                continue

            strength_pos = _rank_of(strength_based, team.team_id)
            form_pos = _rank_of(form_based, team.team_id)
            stat_pos = _rank_of(statistical, team.team_id)

            blended = (
                strength_pos * weights["strength_based"]
                + form_pos * weights["form_based"]
                + stat_pos * weights["statistical"]
            )

            consensus.append(
                ConsensusPrediction(
                    team_id=team.team_id,
                    consensus_position=round_half_up(blended),
                    strength_position=strength_pos,
                    form_position=form_pos,
                    statistical_position=stat_pos,
                    confidence=self.CONSENSUS_CONFIDENCE,
                )
            )

        consensus.sort(key=lambda p: p.consensus_position)
        for index, prediction in enumerate(consensus):
            prediction.position = index + 1

        return consensus

    def generate_all(
        self,
        teams: Sequence[Team],
        games: Sequence[Game],
        iterations: int | None = None,
    ) -> PredictionSet:
        """Run every prediction method over one season snapshot."""
        logger.info(f"Generating season predictions for {len(teams)} teams")

        strength = self.strength_based(teams, games)
        form = self.form_based(teams, games)
        stats = self.statistical(teams, games)

        return PredictionSet(
            strength_based=strength,
            form_based=form,
            statistical=stats,
            monte_carlo=self.monte_carlo(teams, games, iterations),
            consensus=self.consensus(teams, games, strength, form, stats),
        )


def _rank_of(predictions: Sequence, team_id: int) -> int:
    """1-based rank of a team in a prediction list, or its length when absent."""
    for index, prediction in enumerate(predictions):
        if prediction.team_id == team_id:
            return index + 1
    return len(predictions)

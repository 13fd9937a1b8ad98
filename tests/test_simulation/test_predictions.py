"""
Tests for the Prediction Ensemble
"""

import time

import pytest

from simulation.errors import InvalidInputError
from simulation.models import FormPrediction, Standing, StatisticalPrediction, StrengthPrediction
from simulation.predictions import PredictionEnsemble, _rank_of
from simulation.rng import NumpyRandomSource
from src.models.team import Team


@pytest.fixture
def ensemble(settings):
    return PredictionEnsemble(rng=NumpyRandomSource(seed=42), settings=settings)


@pytest.fixture
def full_season(fixtures):
    """Every game played, home side always winning 1-0."""
    return [game.complete(1, 0) for game in fixtures]


class TestPredictFinalTable:
    """Tests for the single-run projection."""

    def test_projection_shape(self, ensemble, teams, fixtures):
        """Test every team plays out its fixtures in the projection."""
        table = ensemble.predict_final_table(teams, fixtures)

        assert [s.position for s in table] == [1, 2, 3, 4]
        assert all(s.is_prediction for s in table)
        assert all(s.played == 6 for s in table)
        assert sum(s.goal_difference for s in table) == 0

    def test_inputs_untouched(self, ensemble, teams, half_played):
        """Test the snapshot is not modified."""
        before = list(half_played)

        ensemble.predict_final_table(teams, half_played)

        assert half_played == before
        assert sum(1 for g in half_played if g.is_completed) == 6

    def test_finished_season(self, ensemble, teams, full_season):
        """Test a finished season projects to its actual table."""
        table = ensemble.predict_final_table(teams, full_season)

        assert all(s.points == 9 for s in table)
        assert [s.team_id for s in table] == [1, 2, 3, 4]

    def test_unknown_team(self, ensemble, teams, make_game):
        """Test scheduled games must reference known teams."""
        games = [make_game(1, 1, 9)]

        with pytest.raises(InvalidInputError):
            ensemble.predict_final_table(teams, games)


class TestFormAndStatistical:
    """Tests for the form-based and statistical projections."""

    def test_form_based(self, ensemble, teams, half_played):
        """Test projected points and goal difference from first-round form."""
        predictions = ensemble.form_based(teams, half_played)

        assert [p.team_id for p in predictions] == [1, 3, 2, 4]
        assert [p.predicted_points for p in predictions] == [12, 12, 2, 2]
        assert [p.predicted_goal_difference for p in predictions] == [8, 6, -6, -8]
        assert [p.position for p in predictions] == [1, 2, 3, 4]
        assert predictions[0].confidence == pytest.approx(0.48)

    def test_form_based_no_history(self, ensemble, teams, fixtures):
        """Test teams without results tie and keep roster order."""
        predictions = ensemble.form_based(teams, fixtures)

        assert all(p.predicted_points == 0 for p in predictions)
        assert [p.team_id for p in predictions] == [1, 2, 3, 4]

    def test_statistical(self, ensemble, teams, half_played):
        """Test the statistical projection keeps fractional values."""
        predictions = ensemble.statistical(teams, half_played)

        top = predictions[0]
        assert top.team_id == 1
        assert top.predicted_points == pytest.approx(7 + 3 * (7 / 9) * 2)
        assert top.xg_for == pytest.approx(2.0)
        assert top.xg_against == pytest.approx(2 / 3)
        assert top.confidence == pytest.approx(0.6)


class TestMonteCarlo:
    """Tests for the Monte Carlo method."""

    def test_probabilities_sum_to_one(self, ensemble, teams, half_played):
        """Test each team's position distribution is complete."""
        predictions = ensemble.monte_carlo(teams, half_played, iterations=200)

        assert len(predictions) == 4
        for prediction in predictions:
            assert sum(prediction.position_probabilities.values()) == pytest.approx(1.0)
            assert prediction.confidence == prediction.position_probabilities[
                prediction.most_likely_position
            ]

    def test_ordered_by_most_likely_position(self, ensemble, teams, fixtures):
        """Test output order follows the most likely finish."""
        predictions = ensemble.monte_carlo(teams, fixtures, iterations=100)
        positions = [p.most_likely_position for p in predictions]

        assert positions == sorted(positions)

    def test_finished_season_is_certain(self, ensemble, teams, full_season):
        """Test no remaining games means one outcome per team."""
        predictions = ensemble.monte_carlo(teams, full_season, iterations=10)

        assert all(p.confidence == 1.0 for p in predictions)

    def test_invalid_iterations(self, ensemble, teams, fixtures):
        """Test a negative iteration count is rejected."""
        with pytest.raises(InvalidInputError):
            ensemble.monte_carlo(teams, fixtures, iterations=-1)

    def test_twenty_team_season_is_fast(self, settings, make_game):
        """Test the default 1000 iterations over a 20-team season finish quickly."""
        roster = [Team(team_id=i, name=f"Team {i}", strength=50 + 2 * i) for i in range(1, 21)]
        ids = [team.team_id for team in roster]
        pairs = [(a, b) for a in ids for b in ids if a != b]
        games = [make_game(n + 1, home, away, week=n + 1) for n, (home, away) in enumerate(pairs)]
        ensemble = PredictionEnsemble(rng=NumpyRandomSource(seed=7), settings=settings)

        started = time.perf_counter()
        predictions = ensemble.monte_carlo(roster, games)
        elapsed = time.perf_counter() - started

        assert len(games) == 380
        assert len(predictions) == 20
        assert elapsed < 3.0


class TestInactiveTeams:
    """Tests for rosters with a deactivated team that still has fixtures."""

    @pytest.fixture
    def roster(self, teams):
        return teams[:3] + [teams[3].model_copy(update={"is_active": False})]

    def test_projection_skips_inactive_fixtures(self, ensemble, roster, fixtures):
        """Test only games between active teams are projected."""
        table = ensemble.predict_final_table(roster, fixtures)

        assert {s.team_id for s in table} == {1, 2, 3}
        assert all(s.played == 4 for s in table)

    def test_every_method_ranks_the_same_teams(self, ensemble, roster, half_played):
        """Test all five methods cover exactly the active teams."""
        predictions = ensemble.generate_all(roster, half_played, iterations=50)

        for method in (
            predictions.strength_based,
            predictions.form_based,
            predictions.statistical,
            predictions.monte_carlo,
            predictions.consensus,
        ):
            assert {p.team_id for p in method} == {1, 2, 3}

        for prediction in predictions.monte_carlo:
            assert set(prediction.position_probabilities) <= {1, 2, 3}
        for prediction in predictions.consensus:
            assert prediction.strength_position <= 3

    def test_remaining_games_count_active_opponents(self, ensemble, roster, make_game):
        """Test a fixture against an inactive team adds no projected points."""
        games = [
            make_game(1, 1, 2, week=1, home_goals=2, away_goals=0),
            make_game(2, 1, 3, week=2),
            make_game(3, 1, 4, week=3),
        ]

        predictions = ensemble.form_based(roster, games)
        top = predictions[0]

        # one remaining game at full form: 3 + 1 * 1.0 * 2
        assert top.team_id == 1
        assert top.predicted_points == 5


class TestConsensus:
    """Tests for the consensus blend."""

    def test_blend_with_missing_team(self, ensemble, teams):
        """Test a team absent from a ranking counts as last in it."""
        roster = teams[:2]
        strength = [
            StrengthPrediction(standing=Standing(team_id=2, position=1)),
            StrengthPrediction(standing=Standing(team_id=1, position=2)),
        ]
        form = [
            FormPrediction(team_id=1, predicted_points=6, predicted_goal_difference=2,
                           form_score=1.0, confidence=0.8),
            FormPrediction(team_id=2, predicted_points=3, predicted_goal_difference=0,
                           form_score=0.5, confidence=0.8),
        ]
        statistical = [
            StatisticalPrediction(team_id=2, predicted_points=4.0, predicted_goal_difference=1.0,
                                  xg_for=1.0, xg_against=0.5, confidence=1.0),
        ]

        consensus = ensemble.consensus(roster, [], strength, form, statistical)

        # team 1: 2*0.4 + 1*0.35 + 1*0.25 = 1.4; team 2: 0.4 + 0.7 + 0.25 = 1.35
        assert [p.consensus_position for p in consensus] == [1, 1]
        assert [p.team_id for p in consensus] == [1, 2]
        assert [p.position for p in consensus] == [1, 2]
        assert consensus[0].statistical_position == 1

    def test_rank_of(self):
        """Test rank lookup and the default for absent teams."""
        predictions = [StrengthPrediction(standing=Standing(team_id=5))]

        assert _rank_of(predictions, 5) == 1
        assert _rank_of(predictions, 6) == 1
        assert _rank_of([], 6) == 0


class TestGenerateAll:
    """Tests for the full prediction set."""

    def test_consensus_uses_same_rankings(self, ensemble, teams, half_played):
        """Test consensus is built from the rankings it is returned with."""
        predictions = ensemble.generate_all(teams, half_played, iterations=50)

        strength_rank = {p.team_id: i + 1 for i, p in enumerate(predictions.strength_based)}
        form_rank = {p.team_id: i + 1 for i, p in enumerate(predictions.form_based)}
        for prediction in predictions.consensus:
            assert prediction.strength_position == strength_rank[prediction.team_id]
            assert prediction.form_position == form_rank[prediction.team_id]

    def test_to_dict(self, ensemble, teams, fixtures):
        """Test every method is reported."""
        data = ensemble.generate_all(teams, fixtures, iterations=20).to_dict()

        assert data["methods_used"] == [
            "strength_based",
            "form_based",
            "statistical",
            "monte_carlo",
            "consensus",
        ]
        assert len(data["predictions"]["monte_carlo"]) == 4

"""
Tests for the Standings Engine
"""

import pytest

from simulation.models import Standing
from simulation.standings import StandingsEngine, standing_sort_key
from src.models.team import Team


@pytest.fixture
def engine():
    return StandingsEngine()


class TestSortStandings:
    """Tests for league ordering."""

    def test_three_key_order(self, engine):
        """Test goal difference splits teams level on points, before goals scored."""
        standings = [
            Standing(team_id=1, points=10, goal_difference=2, goals_for=20),
            Standing(team_id=2, points=10, goal_difference=5, goals_for=8),
            Standing(team_id=3, points=8, goal_difference=9, goals_for=15),
        ]

        ordered = engine.sort_standings(standings)

        assert [s.team_id for s in ordered] == [2, 1, 3]
        assert [s.position for s in ordered] == [1, 2, 3]

    def test_goals_for_breaks_ties(self, engine):
        """Test goals scored is the third key."""
        standings = [
            Standing(team_id=1, points=4, goal_difference=1, goals_for=3),
            Standing(team_id=2, points=4, goal_difference=1, goals_for=5),
        ]

        assert [s.team_id for s in engine.sort_standings(standings)] == [2, 1]

    def test_full_ties_keep_input_order(self, engine):
        """Test identical rows stay in the order given."""
        standings = [Standing(team_id=i) for i in (4, 2, 3, 1)]

        assert [s.team_id for s in engine.sort_standings(standings)] == [4, 2, 3, 1]

    def test_sort_key(self):
        """Test the key sorts descending on every field."""
        assert standing_sort_key(Standing(team_id=1, points=3, goal_difference=1, goals_for=2)) == (
            -3,
            -1,
            -2,
        )


class TestSeasonStandings:
    """Tests for building a table from games."""

    def test_half_played_table(self, engine, teams, half_played):
        """Test a table built from the first round."""
        table = engine.season_standings(teams, half_played)

        assert [s.team_id for s in table] == [1, 3, 2, 4]
        top = table[0]
        assert (top.played, top.won, top.drawn, top.lost) == (3, 2, 1, 0)
        assert (top.goals_for, top.goals_against, top.points) == (6, 2, 7)

    def test_invariants(self, engine, teams, half_played):
        """Test points and goal difference agree with the raw counts."""
        for standing in engine.season_standings(teams, half_played):
            assert standing.goal_difference == standing.goals_for - standing.goals_against
            assert standing.points == 3 * standing.won + standing.drawn
            assert standing.played == standing.won + standing.drawn + standing.lost

    def test_no_games(self, engine, teams, fixtures):
        """Test every active team appears with zeros before kick-off."""
        table = engine.season_standings(teams, fixtures)

        assert len(table) == 4
        assert all(s.played == 0 and s.points == 0 for s in table)
        assert [s.team_id for s in table] == [1, 2, 3, 4]

    def test_inactive_teams_excluded(self, engine, teams, half_played):
        """Test inactive teams are left out of the table."""
        roster = teams[:3] + [Team(team_id=4, name="Chelsea FC", strength=75, is_active=False)]

        table = engine.season_standings(roster, half_played)

        assert [s.team_id for s in table] == [1, 3, 2]
        assert engine.find(table, 4) is None


class TestTeamStats:
    """Tests for single-team aggregation."""

    def test_team_stats(self, engine, half_played):
        """Test one team's aggregate."""
        stats = engine.team_stats(3, half_played)

        assert stats.points == 7
        assert stats.goal_difference == 3
        assert stats.position == 0

    def test_season_filter(self, engine, make_game):
        """Test games from other seasons are ignored."""
        games = [
            make_game(1, 1, 2, home_goals=1, away_goals=0, season_id=1),
            make_game(2, 1, 2, home_goals=1, away_goals=0, season_id=2),
        ]

        assert engine.team_stats(1, games, season_id=2).played == 1
        assert engine.team_stats(1, games).played == 2


class TestApplyResult:
    """Tests for working-table updates."""

    def test_apply_result(self, engine):
        """Test both sides are recorded."""
        table = {1: Standing(team_id=1), 2: Standing(team_id=2)}

        engine.apply_result(table, 1, 2, 0, 2)

        assert table[1].lost == 1
        assert table[2].points == 3

    def test_unknown_team_added(self, engine):
        """Test a missing row is created rather than dropped."""
        table = {1: Standing(team_id=1)}

        engine.apply_result(table, 1, 9, 1, 1)

        assert table[9].drawn == 1

"""
Season Runner Module

Drives real play over a season snapshot: single games, whole weeks and
auto-play batches. The runner never writes results itself; it returns
ResultDirective records for the persistence layer to apply.

Usage:
    runner = SeasonRunner(rng=NumpyRandomSource(seed=7))
    result = runner.auto_play(
        games=season_games,
        teams=teams,
        options=AutoPlayOptions.for_speed("fast"),
    )
    league.apply_directives(season_id, result.directives)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime

from loguru import logger

from src.models.game import Game
from src.models.team import Team
from simulation.analytics import season_progress, week_analytics
from simulation.enhanced import EnhancedMatchSimulator
from simulation.errors import InvalidInputError
from simulation.match import MatchSimulator
from simulation.models import (
    AutoPlayOptions,
    AutoPlayResult,
    ResultDirective,
    SimulationMode,
    SimulationSettings,
    WeekAnalytics,
)
from simulation.rng import NumpyRandomSource, RandomSource


class SeasonRunner:
    """
    Runner for real (persisted) simulations.

    Results are applied to a working copy of the games as they are
    produced, so a later game in the same call sees the form created by
    the earlier ones.
    """

    def __init__(
        self,
        rng: RandomSource | None = None,
        settings: SimulationSettings | None = None,
        match_simulator: MatchSimulator | None = None,
        enhanced_simulator: EnhancedMatchSimulator | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.settings = settings or SimulationSettings()
        self.rng = rng or NumpyRandomSource()
        self.match_simulator = match_simulator or MatchSimulator(self.rng, self.settings)
        self.enhanced_simulator = enhanced_simulator or EnhancedMatchSimulator(
            self.rng, self.settings
        )
        self.clock = clock

    # ------------------------------------------------------------------
    # Basic play
    # ------------------------------------------------------------------

    def play_game(self, game: Game, teams: Sequence[Team]) -> ResultDirective:
        """
        Simulate one scheduled game with the basic simulator.

        Args:
            game: Scheduled game
            teams: Team roster

        Returns:
            ResultDirective for the game

        Raises:
            InvalidInputError: if the game is already completed
        """
        if game.is_completed:
            raise InvalidInputError(f"Game {game.game_id} is already completed")

        lookup = self._team_lookup(teams, [game])
        home_goals, away_goals = self.match_simulator.simulate_match(
            lookup[game.home_team_id].strength, lookup[game.away_team_id].strength
        )
        return self._directive(game, home_goals, away_goals)

    def play_week(
        self,
        games: Sequence[Game],
        teams: Sequence[Team],
        week: int,
    ) -> list[ResultDirective]:
        """Basic simulation of every scheduled game in a week."""
        week_games = [g for g in games if g.week == week and not g.is_completed]
        return [self.play_game(game, teams) for game in week_games]

    def play_all_remaining(
        self,
        games: Sequence[Game],
        teams: Sequence[Team],
    ) -> list[ResultDirective]:
        """Basic simulation of every scheduled game, in week order."""
        remaining = sorted((g for g in games if not g.is_completed), key=lambda g: g.week)
        logger.info(f"Playing {len(remaining)} remaining games")
        return [self.play_game(game, teams) for game in remaining]

    # ------------------------------------------------------------------
    # Enhanced play
    # ------------------------------------------------------------------

    def play_week_enhanced(
        self,
        games: Sequence[Game],
        teams: Sequence[Team],
        week: int,
        mode: SimulationMode | str = SimulationMode.REALISTIC,
    ) -> list[ResultDirective]:
        """
        Enhanced simulation of every scheduled game in a week.

        Args:
            games: Season games snapshot (history feeds form)
            teams: Team roster
            week: Week to play
            mode: Simulation mode

        Returns:
            One directive per game played
        """
        directives, _ = self._play_week_enhanced(list(games), teams, week, mode)
        return directives

    def _play_week_enhanced(
        self,
        working: list[Game],
        teams: Sequence[Team],
        week: int,
        mode: SimulationMode | str,
    ) -> tuple[list[ResultDirective], list[Game]]:
        mode = SimulationMode.parse(mode)
        week_games = [g for g in working if g.week == week and not g.is_completed]
        lookup = self._team_lookup(teams, week_games)

        directives = []
        completed = []

        for game in week_games:
            result = self.enhanced_simulator.simulate_enhanced_match(
                lookup[game.home_team_id], lookup[game.away_team_id], working, mode
            )
            directive = self._directive(game, result.home_goals, result.away_goals)
            played = game.complete(directive.home_goals, directive.away_goals, directive.played_at)

            # Replace in the working copy so the next game sees this result
            working[working.index(game)] = played
            directives.append(directive)
            completed.append(played)

        logger.debug(f"Week {week}: {len(directives)} games simulated ({mode.value})")
        return directives, completed

    def auto_play(
        self,
        games: Sequence[Game],
        teams: Sequence[Team],
        options: AutoPlayOptions | None = None,
    ) -> AutoPlayResult:
        """
        Play whole weeks until the batch cap or the stop week is reached.

        Args:
            games: Season games snapshot
            teams: Team roster
            options: Mode, stop week, batch cap and analytics flag

        Returns:
            AutoPlayResult with directives, per-week analytics, progress
            after the batch, and the next week to play
        """
        options = options or AutoPlayOptions()
        working = list(games)

        completed_weeks = [g.week for g in working if g.is_completed]
        start_week = max(completed_weeks) + 1 if completed_weeks else 1
        max_week = max((g.week for g in working), default=0)
        stop_week = options.stop_at_week or max_week

        logger.info(
            f"Auto-play from week {start_week} to {stop_week} "
            f"(batch {options.max_games_per_batch}, {options.mode.value})"
        )

        directives: list[ResultDirective] = []
        analytics: dict[int, WeekAnalytics] = {}

        week = start_week
        while week <= stop_week:
            week_directives, played = self._play_week_enhanced(
                working, teams, week, options.mode
            )
            directives.extend(week_directives)

            if options.include_analytics:
                analytics[week] = week_analytics(week, played, self._team_lookup(teams, played))

            if len(directives) >= options.max_games_per_batch:
                break
            week += 1

        status = season_progress(working)
        logger.info(
            f"Auto-play simulated {len(directives)} games, "
            f"season {status.progress:.0%} complete"
        )

        return AutoPlayResult(
            directives=directives,
            analytics=analytics,
            season_status=status,
            next_week=min(week + 1, stop_week),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _directive(self, game: Game, home_goals: int, away_goals: int) -> ResultDirective:
        return ResultDirective(
            game_id=game.game_id,
            home_goals=home_goals,
            away_goals=away_goals,
            played_at=self.clock(),
            week=game.week,
            home_team_id=game.home_team_id,
            away_team_id=game.away_team_id,
        )

    def _team_lookup(self, teams: Sequence[Team], games: Sequence[Game]) -> dict[int, Team]:
        lookup = {team.team_id: team for team in teams}
        for game in games:
            for team_id in (game.home_team_id, game.away_team_id):
                if team_id not in lookup:
                    raise InvalidInputError(
                        f"Game {game.game_id} references unknown team {team_id}"
                    )
        return lookup

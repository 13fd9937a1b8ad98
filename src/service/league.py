"""
League Service

In-memory league persistence and the operations built on it: team and
season management, fixture generation, result entry, and the bridge
between stored games and the simulation engine.

The engine only ever sees snapshots and returns ResultDirective records;
this service is the single writer that applies them.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass
from typing import Any

from loguru import logger

from simulation import (
    AutoPlayOptions,
    AutoPlayResult,
    AutoPlaySpeed,
    EnhancedMatchSimulator,
    Form,
    FormCalculator,
    InvalidInputError,
    MatchSimulator,
    NumpyRandomSource,
    PredictionEnsemble,
    PredictionSet,
    RandomSource,
    ResultDirective,
    SeasonRunner,
    SimulationMode,
    SimulationSettings,
    Standing,
    StandingsEngine,
    WeekAnalytics,
    load_settings,
    round_half_up,
    week_analytics,
)
from src.models.game import Game, GameOutcome
from src.models.season import Season, SeasonStatus
from src.models.team import Team

MIN_GOALS = 0
MAX_GOALS = 20
RECENT_FORM_GAMES = 5

DEFAULT_SEASON_NAME = "2024/25 Insider Champions League"
DEFAULT_TEAMS = [
    {
        "name": "Manchester City",
        "city": "Manchester",
        "strength": 85,
        "primary_color": "#6CABDD",
        "secondary_color": "#1C2C5B",
    },
    {
        "name": "Liverpool FC",
        "city": "Liverpool",
        "strength": 82,
        "primary_color": "#C8102E",
        "secondary_color": "#00B2A9",
    },
    {
        "name": "Arsenal FC",
        "city": "London",
        "strength": 78,
        "primary_color": "#EF0107",
        "secondary_color": "#023474",
    },
    {
        "name": "Chelsea FC",
        "city": "London",
        "strength": 75,
        "primary_color": "#034694",
        "secondary_color": "#DBA111",
    },
]


@dataclass
class SeasonStats:
    """Progress summary for a season."""

    total_games: int
    completed_games: int
    remaining_games: int
    completion_percentage: float
    current_week: int
    total_weeks: int
    status: SeasonStatus
    is_completed: bool

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class HeadToHead:
    """Completed-game record between two teams."""

    team_id: int
    opponent_id: int
    games_played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class LeagueService:
    """
    League service backed by in-memory stores.

    Owns every Team, Season and Game record. Simulation work is delegated
    to the engine components, which are created from shared settings and
    a shared random source unless injected.
    """

    def __init__(
        self,
        settings: SimulationSettings | None = None,
        rng: RandomSource | None = None,
        runner: SeasonRunner | None = None,
        ensemble: PredictionEnsemble | None = None,
        standings_engine: StandingsEngine | None = None,
        form_calculator: FormCalculator | None = None,
    ) -> None:
        """
        Initialize the league service.

        Args:
            settings: Engine settings (loaded from config/simulation.yaml if not provided)
            rng: Random source shared by every simulator
            runner: Season runner for real play
            ensemble: Prediction ensemble
            standings_engine: Table builder
            form_calculator: Form calculator
        """
        self.settings = settings or load_settings()
        self.rng = rng or NumpyRandomSource()

        self.standings_engine = standings_engine or StandingsEngine()
        self.form_calculator = form_calculator or FormCalculator(self.settings)

        match_simulator = MatchSimulator(self.rng, self.settings)
        self.runner = runner or SeasonRunner(
            rng=self.rng,
            settings=self.settings,
            match_simulator=match_simulator,
            enhanced_simulator=EnhancedMatchSimulator(
                self.rng, self.settings, form_calculator=self.form_calculator
            ),
        )
        self.ensemble = ensemble or PredictionEnsemble(
            rng=self.rng,
            settings=self.settings,
            match_simulator=match_simulator,
            form_calculator=self.form_calculator,
            standings_engine=self.standings_engine,
        )

        self._teams: dict[int, Team] = {}
        self._seasons: dict[int, Season] = {}
        self._games: dict[int, Game] = {}

        self._team_ids = itertools.count(1)
        self._season_ids = itertools.count(1)
        self._game_ids = itertools.count(1)

        logger.info("League service initialized")

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    def add_team(self, name: str, strength: int, **fields: Any) -> Team:
        """
        Register a team.

        Args:
            name: Team name
            strength: Base rating, 1 to 100
            **fields: Optional city, colors and active flag

        Returns:
            The stored Team
        """
        team = Team(team_id=next(self._team_ids), name=name, strength=strength, **fields)
        self._teams[team.team_id] = team
        logger.debug(f"Added team {team.name} (strength {team.strength})")
        return team

    def update_team(
        self,
        team_id: int,
        strength: int | None = None,
        is_active: bool | None = None,
    ) -> Team:
        """Change a team's strength rating or active flag."""
        data = self.get_team(team_id).model_dump()
        if strength is not None:
            data["strength"] = strength
        if is_active is not None:
            data["is_active"] = is_active

        team = Team.model_validate(data)
        self._teams[team_id] = team
        return team

    def get_team(self, team_id: int) -> Team:
        try:
            return self._teams[team_id]
        except KeyError:
            raise InvalidInputError(f"Unknown team {team_id}") from None

    def teams(self) -> list[Team]:
        return list(self._teams.values())

    def active_teams(self) -> list[Team]:
        return [team for team in self._teams.values() if team.is_active]

    # ------------------------------------------------------------------
    # Seasons and fixtures
    # ------------------------------------------------------------------

    def create_season(self, name: str, team_ids: Sequence[int] | None = None) -> Season:
        """
        Create a season and its double round-robin fixture list.

        Args:
            name: Season name
            team_ids: Participating teams (defaults to every active team)

        Returns:
            The new, upcoming Season

        Raises:
            InvalidInputError: if fewer than two teams take part
        """
        if team_ids is None:
            team_ids = [team.team_id for team in self.active_teams()]

        # Validate before anything is stored
        participants = self._participants(team_ids)

        season = Season(season_id=next(self._season_ids), name=name)
        self._seasons[season.season_id] = season
        self.generate_fixtures(season.season_id, participants)

        logger.info(f"Created season '{name}' with {len(participants)} teams")
        return season

    def generate_fixtures(self, season_id: int, team_ids: Sequence[int]) -> list[Game]:
        """
        Double round-robin: one game per week, every pair meets twice.

        The first round gives the earlier-listed team home advantage; the
        second round swaps venues.
        """
        self.get_season(season_id)
        participants = self._participants(team_ids)
        pairs = list(itertools.combinations(participants, 2))

        fixtures = []
        week = 1
        for home_id, away_id in pairs + [(away, home) for home, away in pairs]:
            game = Game(
                game_id=next(self._game_ids),
                season_id=season_id,
                home_team_id=home_id,
                away_team_id=away_id,
                week=week,
            )
            self._games[game.game_id] = game
            fixtures.append(game)
            week += 1

        logger.debug(f"Season {season_id}: generated {len(fixtures)} fixtures")
        return fixtures

    def _participants(self, team_ids: Iterable[int]) -> list[int]:
        participants = list(dict.fromkeys(team_ids))
        for team_id in participants:
            self.get_team(team_id)

        if len(participants) < 2:
            raise InvalidInputError("A season needs at least 2 teams")
        return participants

    def get_season(self, season_id: int) -> Season:
        try:
            return self._seasons[season_id]
        except KeyError:
            raise InvalidInputError(f"Unknown season {season_id}") from None

    def seasons(self) -> list[Season]:
        return list(self._seasons.values())

    def start_season(self, season_id: int) -> Season:
        """Make a season the single current, active season."""
        season = self.get_season(season_id)

        for other in self._seasons.values():
            other.is_current = False

        season.is_current = True
        season.status = SeasonStatus.ACTIVE
        logger.info(f"Started season '{season.name}'")
        return season

    def current_season(self) -> Season | None:
        for season in self._seasons.values():
            if season.is_current:
                return season
        return None

    def season_games(self, season_id: int) -> list[Game]:
        """All games of a season in week order."""
        self.get_season(season_id)
        games = [game for game in self._games.values() if game.season_id == season_id]
        return sorted(games, key=lambda g: (g.week, g.game_id))

    def season_teams(self, season_id: int) -> list[Team]:
        """Teams that appear in a season's fixtures, in registration order."""
        team_ids = set()
        for game in self.season_games(season_id):
            team_ids.update((game.home_team_id, game.away_team_id))
        return [team for team in self._teams.values() if team.team_id in team_ids]

    def get_game(self, game_id: int) -> Game:
        try:
            return self._games[game_id]
        except KeyError:
            raise InvalidInputError(f"Unknown game {game_id}") from None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def league_table(self, season_id: int | None = None) -> list[Standing]:
        """
        Current standings of a season.

        Args:
            season_id: Season to tabulate (defaults to the current season)

        Returns:
            Sorted standings, or an empty list when there is no season
        """
        if season_id is None:
            season = self.current_season()
            if season is None:
                return []
            season_id = season.season_id

        return self.standings_engine.season_standings(
            self.season_teams(season_id), self.season_games(season_id)
        )

    def week_games(self, season_id: int, week: int) -> list[Game]:
        return [game for game in self.season_games(season_id) if game.week == week]

    def week_exists(self, season_id: int, week: int) -> bool:
        return bool(self.week_games(season_id, week))

    def results_by_week(self, season_id: int) -> dict[int, list[Game]]:
        """Completed games grouped by week."""
        results: dict[int, list[Game]] = {}
        for game in self.season_games(season_id):
            if game.is_completed:
                results.setdefault(game.week, []).append(game)
        return results

    def upcoming_fixtures(self, season_id: int) -> dict[int, list[Game]]:
        """Scheduled games grouped by week."""
        fixtures: dict[int, list[Game]] = {}
        for game in self.season_games(season_id):
            if not game.is_completed:
                fixtures.setdefault(game.week, []).append(game)
        return fixtures

    def next_week(self, season_id: int) -> int | None:
        """Earliest week with a scheduled game, or None once everything is played."""
        for game in self.season_games(season_id):
            if not game.is_completed:
                return game.week
        return None

    def season_stats(self, season_id: int) -> SeasonStats:
        """
        Progress summary for a season.

        Args:
            season_id: Season to summarize

        Returns:
            SeasonStats
        """
        season = self.get_season(season_id)
        games = self.season_games(season_id)

        total = len(games)
        completed = sum(1 for game in games if game.is_completed)
        total_weeks = max((game.week for game in games), default=0)

        completed_weeks = [game.week for game in games if game.is_completed]
        current_week = max(completed_weeks) + 1 if completed_weeks else 1

        return SeasonStats(
            total_games=total,
            completed_games=completed,
            remaining_games=total - completed,
            completion_percentage=round(completed / total * 100, 1) if total > 0 else 0.0,
            current_week=min(current_week, total_weeks),
            total_weeks=total_weeks,
            status=season.status,
            is_completed=completed == total,
        )

    def head_to_head(
        self,
        team_id: int,
        opponent_id: int,
        season_id: int | None = None,
    ) -> HeadToHead:
        """Record of one team against another, optionally within a season."""
        self.get_team(team_id)
        self.get_team(opponent_id)

        record = HeadToHead(team_id=team_id, opponent_id=opponent_id)
        for game in self._games.values():
            if not game.is_completed or not (game.involves(team_id) and game.involves(opponent_id)):
                continue
            if season_id is not None and game.season_id != season_id:
                continue

            record.games_played += 1
            record.goals_for += game.goals_for(team_id)
            record.goals_against += game.goals_against(team_id)

            outcome = game.outcome_for(team_id)
            if outcome == GameOutcome.WIN:
                record.wins += 1
            elif outcome == GameOutcome.DRAW:
                record.draws += 1
            else:
                record.losses += 1

        return record

    def recent_form(
        self,
        team_id: int,
        season_id: int | None = None,
        limit: int = RECENT_FORM_GAMES,
    ) -> list[str]:
        """Outcome codes of a team's latest games, oldest first."""
        return list(reversed(self.team_form(team_id, season_id, limit).results))

    def team_form(
        self,
        team_id: int,
        season_id: int | None = None,
        window: int | None = None,
    ) -> Form:
        """Form record over a team's recent completed games."""
        self.get_team(team_id)
        games = self.season_games(season_id) if season_id is not None else self._games.values()

        calculator = self.form_calculator
        if window is not None and window != self.settings.form_window:
            calculator = FormCalculator(self.settings.model_copy(update={"form_window": window}))

        return calculator.calculate_form(team_id, games)

    def win_percentage(self, team_id: int, season_id: int | None = None) -> float:
        """Share of completed games won, as a percentage to one decimal."""
        stats = self._team_record(team_id, season_id)
        if stats.played == 0:
            return 0.0
        return round_half_up(stats.won / stats.played * 1000) / 10

    def avg_goals_per_game(self, team_id: int, season_id: int | None = None) -> float:
        """Goals scored per completed game, to two decimals."""
        stats = self._team_record(team_id, season_id)
        if stats.played == 0:
            return 0.0
        return round_half_up(stats.goals_for / stats.played * 100) / 100

    def _team_record(self, team_id: int, season_id: int | None) -> Standing:
        self.get_team(team_id)
        return self.standings_engine.team_stats(team_id, self._games.values(), season_id)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def update_game_result(self, game_id: int, home_goals: int, away_goals: int) -> Game:
        """
        Enter or correct a result by hand.

        Args:
            game_id: Game to update
            home_goals: Home goals, 0 to 20
            away_goals: Away goals, 0 to 20

        Returns:
            The completed Game

        Raises:
            InvalidInputError: if either goal count is out of range
        """
        game = self.get_game(game_id)
        self._check_goals(game_id, home_goals, away_goals)

        updated = game.complete(home_goals, away_goals)
        self._games[game_id] = updated
        self._close_if_finished(updated.season_id)
        logger.info(f"Game {game_id} result set to {updated.result_string}")
        return updated

    def reset_game(self, game_id: int) -> Game:
        """Return a game to scheduled, clearing goals and play time."""
        reset = self.get_game(game_id).reset()
        self._games[game_id] = reset
        self._reopen_season(reset.season_id)
        return reset

    def reset_season(self, season_id: int) -> list[Game]:
        """Return every game of a season to scheduled."""
        reset = []
        for game in self.season_games(season_id):
            if game.is_completed:
                game = game.reset()
                self._games[game.game_id] = game
            reset.append(game)

        self._reopen_season(season_id)
        logger.info(f"Season {season_id} reset ({len(reset)} games scheduled)")
        return reset

    def apply_directives(self, directives: Sequence[ResultDirective]) -> list[Game]:
        """
        Apply simulation results.

        The whole batch is validated before any game changes, so a rejected
        batch leaves the store untouched.

        Raises:
            InvalidInputError: for unknown or already completed games,
                duplicate directives, or out-of-range goals
        """
        seen = set()
        for directive in directives:
            game = self.get_game(directive.game_id)
            if game.is_completed:
                raise InvalidInputError(f"Game {game.game_id} is already completed")
            if directive.game_id in seen:
                raise InvalidInputError(f"Game {directive.game_id} appears twice in one batch")
            self._check_goals(directive.game_id, directive.home_goals, directive.away_goals)
            seen.add(directive.game_id)

        applied = []
        for directive in directives:
            game = self._games[directive.game_id].complete(
                directive.home_goals, directive.away_goals, directive.played_at
            )
            self._games[game.game_id] = game
            applied.append(game)

        for season_id in {game.season_id for game in applied}:
            self._close_if_finished(season_id)

        logger.debug(f"Applied {len(applied)} results")
        return applied

    def _check_goals(self, game_id: int, home_goals: int, away_goals: int) -> None:
        for goals in (home_goals, away_goals):
            if not MIN_GOALS <= goals <= MAX_GOALS:
                raise InvalidInputError(
                    f"Game {game_id}: goals must be between {MIN_GOALS} and {MAX_GOALS}, got {goals}"
                )

    def _close_if_finished(self, season_id: int) -> None:
        season = self.get_season(season_id)
        if self.next_week(season_id) is None and season.status != SeasonStatus.COMPLETED:
            season.status = SeasonStatus.COMPLETED
            logger.info(f"Season '{season.name}' completed")

    def _reopen_season(self, season_id: int) -> None:
        season = self.get_season(season_id)
        if season.status == SeasonStatus.COMPLETED:
            season.status = SeasonStatus.ACTIVE if season.is_current else SeasonStatus.UPCOMING

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def play_game(self, game_id: int) -> Game:
        """Basic simulation of one scheduled game."""
        game = self.get_game(game_id)
        directive = self.runner.play_game(game, self.season_teams(game.season_id))
        return self.apply_directives([directive])[0]

    def play_week(self, season_id: int, week: int) -> list[Game]:
        """Basic simulation of a week's scheduled games."""
        directives = self.runner.play_week(
            self.season_games(season_id), self.season_teams(season_id), week
        )
        return self.apply_directives(directives)

    def play_all_remaining(self, season_id: int) -> list[Game]:
        """Basic simulation of every scheduled game; the season ends completed."""
        directives = self.runner.play_all_remaining(
            self.season_games(season_id), self.season_teams(season_id)
        )
        played = self.apply_directives(directives)
        self._close_if_finished(season_id)
        return played

    def simulate_week_enhanced(
        self,
        season_id: int,
        week: int,
        mode: SimulationMode | str = SimulationMode.REALISTIC,
    ) -> tuple[list[Game], WeekAnalytics]:
        """
        Enhanced simulation of a week.

        Args:
            season_id: Season to play
            week: Week to play
            mode: Simulation mode name

        Returns:
            Tuple of (games played, analytics for the week)
        """
        teams = self.season_teams(season_id)
        directives = self.runner.play_week_enhanced(
            self.season_games(season_id), teams, week, mode
        )
        played = self.apply_directives(directives)
        return played, week_analytics(week, played, teams)

    def auto_play(
        self,
        season_id: int,
        options: AutoPlayOptions | None = None,
        speed: AutoPlaySpeed | str | None = None,
    ) -> AutoPlayResult:
        """
        Play a batch of weeks with the enhanced simulator.

        Args:
            season_id: Season to play
            options: Batch options
            speed: Speed name; sets the batch cap when no options are given

        Returns:
            AutoPlayResult whose directives have been applied
        """
        if options is None:
            options = AutoPlayOptions.for_speed(speed or AutoPlaySpeed.NORMAL, self.settings)

        result = self.runner.auto_play(
            self.season_games(season_id), self.season_teams(season_id), options
        )
        self.apply_directives(result.directives)
        return result

    def week_analytics(self, season_id: int, week: int) -> WeekAnalytics:
        """Analytics over a week's completed games."""
        played = [game for game in self.week_games(season_id, week) if game.is_completed]
        return week_analytics(week, played, self.season_teams(season_id))

    # ------------------------------------------------------------------
    # Predictions
    # ------------------------------------------------------------------

    def predict_final_table(self, season_id: int) -> list[Standing]:
        return self.ensemble.predict_final_table(
            self.season_teams(season_id), self.season_games(season_id)
        )

    def advanced_predictions(self, season_id: int, iterations: int | None = None) -> PredictionSet:
        """Every prediction method over the season's current state."""
        return self.ensemble.generate_all(
            self.season_teams(season_id), self.season_games(season_id), iterations
        )

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def seed_default_league(self) -> Season:
        """
        Create the default four-team league and start its season.

        Returns:
            The started Season
        """
        team_ids = [self.add_team(**fields).team_id for fields in DEFAULT_TEAMS]
        season = self.create_season(DEFAULT_SEASON_NAME, team_ids)
        return self.start_season(season.season_id)


def format_table(standings: Sequence[Standing], teams: dict[int, Team] | Sequence[Team]) -> str:
    """Render standings as a fixed-width text table."""
    if not isinstance(teams, dict):
        teams = {team.team_id: team for team in teams}

    lines = [
        f"{'Pos':>3}  {'Team':<20} {'P':>3} {'W':>3} {'D':>3} {'L':>3} "
        f"{'GF':>4} {'GA':>4} {'GD':>4} {'Pts':>4}",
        "-" * 62,
    ]
    for s in standings:
        name = teams[s.team_id].name if s.team_id in teams else str(s.team_id)
        lines.append(
            f"{s.position:>3}  {name:<20} {s.played:>3} {s.won:>3} {s.drawn:>3} {s.lost:>3} "
            f"{s.goals_for:>4} {s.goals_against:>4} {s.goal_difference:>+4} {s.points:>4}"
        )
    return "\n".join(lines)


def played_at_label(game: Game) -> str:
    """Play time for display, or a dash while scheduled."""
    if game.played_at is None:
        return "-"
    return game.played_at.strftime("%Y-%m-%d %H:%M")

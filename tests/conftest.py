"""
Pytest Configuration and Fixtures

Shared fixtures and configuration for the League Simulator test suite.
"""

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

import pytest

from simulation.models import SimulationSettings
from src.models.game import Game, GameStatus
from src.models.team import Team


class SequenceRandomSource:
    """
    Scripted random source.

    Returns the given values in order, then ``default`` for every later
    draw (or raises if no default was given). Each value is checked
    against the requested range so a mis-scripted test fails loudly.
    """

    def __init__(self, values: Iterable[int] = (), default: int | None = None) -> None:
        self.values = list(values)
        self.default = default
        self.calls: list[tuple[int, int]] = []

    def randint(self, low: int, high: int) -> int:
        self.calls.append((low, high))

        if self.values:
            value = self.values.pop(0)
        elif self.default is not None:
            value = self.default
        else:
            raise AssertionError(f"Random source exhausted at draw {len(self.calls)}")

        assert low <= value <= high, f"Scripted value {value} outside [{low}, {high}]"
        return value


class ConstantRandomSource:
    """Always returns ``pick(low, high)``; e.g. the low end, the high end or zero."""

    def __init__(self, pick: Callable[[int, int], int]) -> None:
        self.pick = pick

    def randint(self, low: int, high: int) -> int:
        return self.pick(low, high)


@pytest.fixture
def scripted_rng() -> type[SequenceRandomSource]:
    """Factory for scripted random sources."""
    return SequenceRandomSource


@pytest.fixture
def low_rng() -> ConstantRandomSource:
    """Random source that always draws the bottom of the range."""
    return ConstantRandomSource(lambda low, high: low)


@pytest.fixture
def high_rng() -> ConstantRandomSource:
    """Random source that always draws the top of the range."""
    return ConstantRandomSource(lambda low, high: high)


@pytest.fixture
def mid_rng() -> ConstantRandomSource:
    """Random source that draws zero where the range allows it (no jitter)."""
    return ConstantRandomSource(lambda low, high: min(max(0, low), high))


@pytest.fixture
def settings() -> SimulationSettings:
    """Default engine settings."""
    return SimulationSettings()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock returning a fixed timestamp."""
    moment = datetime(2024, 8, 17, 15, 0, 0)
    return lambda: moment


@pytest.fixture
def teams() -> list[Team]:
    """The default four-team league."""
    return [
        Team(team_id=1, name="Manchester City", city="Manchester", strength=85),
        Team(team_id=2, name="Liverpool FC", city="Liverpool", strength=82),
        Team(team_id=3, name="Arsenal FC", city="London", strength=78),
        Team(team_id=4, name="Chelsea FC", city="London", strength=75),
    ]


@pytest.fixture
def make_game() -> Callable[..., Game]:
    """Factory for games; pass goals to get a completed game."""

    def _make(
        game_id: int,
        home: int,
        away: int,
        week: int = 1,
        home_goals: int | None = None,
        away_goals: int | None = None,
        season_id: int = 1,
        **fields: Any,
    ) -> Game:
        completed = home_goals is not None
        return Game(
            game_id=game_id,
            season_id=season_id,
            home_team_id=home,
            away_team_id=away,
            week=week,
            status=GameStatus.COMPLETED if completed else GameStatus.SCHEDULED,
            home_goals=home_goals,
            away_goals=away_goals,
            played_at=datetime(2024, 8, 1) if completed else None,
            **fields,
        )

    return _make


@pytest.fixture
def fixtures(teams: list[Team], make_game: Callable[..., Game]) -> list[Game]:
    """Unplayed double round-robin for the default league, one game per week."""
    ids = [team.team_id for team in teams]
    pairs = [(a, b) for i, a in enumerate(ids) for b in ids[i + 1:]]
    pairs += [(b, a) for a, b in pairs]
    return [
        make_game(game_id=index + 1, home=home, away=away, week=index + 1)
        for index, (home, away) in enumerate(pairs)
    ]


@pytest.fixture
def half_played(fixtures: list[Game]) -> list[Game]:
    """Default league with the first round (weeks 1-6) completed."""
    scores = [(2, 1), (1, 1), (3, 0), (0, 2), (2, 2), (1, 0)]
    games = list(fixtures)
    for index, (home_goals, away_goals) in enumerate(scores):
        games[index] = games[index].complete(
            home_goals, away_goals, datetime(2024, 8, 1 + index)
        )
    return games

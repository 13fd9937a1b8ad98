"""
Simulation Data Models

Pydantic and dataclass models for the league simulation engine.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from simulation.errors import InvalidInputError


class SimulationMode(str, Enum):
    """Enhanced simulation mode enumeration."""

    BASIC = "basic"
    REALISTIC = "realistic"
    PREDICTABLE = "predictable"

    @classmethod
    def parse(cls, value: SimulationMode | str) -> SimulationMode:
        """Coerce a mode name, rejecting unknown values."""
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise InvalidInputError(
                f"Unknown simulation mode '{value}' (expected one of: {valid})"
            ) from None


class AutoPlaySpeed(str, Enum):
    """Auto-play speed, mapped to games per batch."""

    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"


class FormTrend(str, Enum):
    """Direction of a team's recent results."""

    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"
    NEUTRAL = "neutral"


class ModeConfig(BaseModel):
    """Tuning for one simulation mode."""

    randomness: float = Field(ge=0.0, le=1.0)
    # Carried for the enhanced simulator; the goal formula does not use it yet.
    form_weight: float = Field(default=0.0, ge=0.0, le=1.0)


class SimulationSettings(BaseModel):
    """Engine-wide constants, overridable from config/simulation.yaml."""

    home_advantage: int = 5
    form_window: int = Field(default=5, ge=1)
    strength_floor: float = 30.0
    basic_max_goals: int = 6
    enhanced_max_goals: int = 8
    monte_carlo_iterations: int = Field(default=1000, ge=1, le=100000)

    modes: dict[str, ModeConfig] = Field(
        default_factory=lambda: {
            "basic": ModeConfig(randomness=0.3, form_weight=0.1),
            "realistic": ModeConfig(randomness=0.2, form_weight=0.25),
            "predictable": ModeConfig(randomness=0.1, form_weight=0.4),
        }
    )

    # Games per auto-play batch
    speeds: dict[str, int] = Field(
        default_factory=lambda: {
            "slow": 1,
            "normal": 3,
            "fast": 7,
        }
    )

    def mode_config(self, mode: SimulationMode | str) -> ModeConfig:
        """Look up the tuning for a simulation mode."""
        mode = SimulationMode.parse(mode)
        return self.modes[mode.value]

    def batch_size(self, speed: AutoPlaySpeed | str) -> int:
        """Games per batch for an auto-play speed."""
        try:
            speed = AutoPlaySpeed(speed)
        except ValueError:
            raise InvalidInputError(f"Unknown auto-play speed '{speed}'") from None
        return self.speeds[speed.value]


@dataclass
class Form:
    """Recent-performance summary over a team's last completed games."""

    team_id: int
    score: float = 0.0
    trend: FormTrend = FormTrend.NEUTRAL
    confidence: float = 0.5
    goals_for_avg: float | None = None
    goals_against_avg: float | None = None
    games_sampled: int = 0

    # Most recent first
    results: list[str] = field(default_factory=list)

    @property
    def goal_balance(self) -> float:
        """Average goal margin per game (0 without history)."""
        return (self.goals_for_avg or 0.0) - (self.goals_against_avg or 0.0)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "score": self.score,
            "trend": self.trend.value,
            "confidence": self.confidence,
        }
        if self.games_sampled:
            data["goals_for_avg"] = self.goals_for_avg
            data["goals_against_avg"] = self.goals_against_avg
        return data


@dataclass
class Standing:
    """League table row for one team."""

    team_id: int
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    points: int = 0
    position: int = 0
    is_prediction: bool = False

    def record(self, scored: int, conceded: int) -> None:
        """Add one completed game to the row."""
        self.played += 1
        self.goals_for += scored
        self.goals_against += conceded

        if scored > conceded:
            self.won += 1
            self.points += 3
        elif scored == conceded:
            self.drawn += 1
            self.points += 1
        else:
            self.lost += 1

        self.goal_difference = self.goals_for - self.goals_against

    def copy(self) -> Standing:
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RandomEvent:
    """An in-game event that moved a team's performance multiplier."""

    event_type: str  # "injury", "weather" or "referee"
    impact: float
    label: str | None = None


@dataclass
class MatchMetadata:
    """Inputs behind an enhanced simulation result."""

    home_form: Form
    away_form: Form
    home_effective_strength: float
    away_effective_strength: float
    simulation_mode: SimulationMode

    def to_dict(self) -> dict[str, Any]:
        return {
            "home_form": self.home_form.to_dict(),
            "away_form": self.away_form.to_dict(),
            "home_effective_strength": self.home_effective_strength,
            "away_effective_strength": self.away_effective_strength,
            "simulation_mode": self.simulation_mode.value,
        }


@dataclass
class EnhancedMatchResult:
    """Scoreline from the enhanced simulator."""

    home_goals: int
    away_goals: int
    metadata: MatchMetadata

    def to_dict(self) -> dict[str, Any]:
        return {
            "home_goals": self.home_goals,
            "away_goals": self.away_goals,
            "metadata": self.metadata.to_dict(),
        }


@dataclass
class ResultDirective:
    """Instruction to the persistence layer to mark a game completed."""

    game_id: int
    home_goals: int
    away_goals: int
    played_at: datetime
    week: int = 0
    home_team_id: int = 0
    away_team_id: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "game_id": self.game_id,
            "week": self.week,
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "home_goals": self.home_goals,
            "away_goals": self.away_goals,
            "played_at": self.played_at.isoformat(),
        }


@dataclass
class WeekAnalytics:
    """Summary of one week's completed games."""

    week: int
    games_played: int = 0
    total_goals: int = 0
    average_goals: float = 0.0
    upsets: int = 0
    entertainment_score: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SeasonProgress:
    """Completion snapshot of a season's fixture list."""

    progress: float = 0.0
    completed_games: int = 0
    total_games: int = 0
    is_complete: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Predictions
# ---------------------------------------------------------------------------


@dataclass
class StrengthPrediction:
    """Projected final table row from one simulated run of the fixtures."""

    standing: Standing
    confidence: float = 0.7
    method: str = "strength_based"

    @property
    def team_id(self) -> int:
        return self.standing.team_id

    @property
    def position(self) -> int:
        return self.standing.position

    def to_dict(self) -> dict[str, Any]:
        data = self.standing.to_dict()
        data.update(confidence=self.confidence, method=self.method)
        return data


@dataclass
class FormPrediction:
    """Points projection from recent form."""

    team_id: int
    predicted_points: int
    predicted_goal_difference: int
    form_score: float
    confidence: float
    position: int = 0
    method: str = "form_based"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class StatisticalPrediction:
    """Points projection from per-game goal rates."""

    team_id: int
    predicted_points: float
    predicted_goal_difference: float
    xg_for: float
    xg_against: float
    confidence: float
    position: int = 0
    method: str = "statistical"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class MonteCarloPrediction:
    """Finishing position distribution over repeated season runs."""

    team_id: int
    most_likely_position: int
    position_probabilities: dict[int, float]
    confidence: float
    method: str = "monte_carlo"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ConsensusPrediction:
    """Weighted blend of the strength, form and statistical ranks."""

    team_id: int
    consensus_position: int
    strength_position: int
    form_position: int
    statistical_position: int
    confidence: float = 0.85
    position: int = 0
    method: str = "consensus"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class PredictionSet:
    """Output of every prediction method for one season snapshot."""

    strength_based: list[StrengthPrediction] = field(default_factory=list)
    form_based: list[FormPrediction] = field(default_factory=list)
    statistical: list[StatisticalPrediction] = field(default_factory=list)
    monte_carlo: list[MonteCarloPrediction] = field(default_factory=list)
    consensus: list[ConsensusPrediction] = field(default_factory=list)

    recommended_method: str = "consensus"
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def methods_used(self) -> list[str]:
        return ["strength_based", "form_based", "statistical", "monte_carlo", "consensus"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "predictions": {
                name: [p.to_dict() for p in getattr(self, name)]
                for name in self.methods_used
            },
            "generated_at": self.generated_at.isoformat(),
            "methods_used": self.methods_used,
            "recommended_method": self.recommended_method,
        }


# ---------------------------------------------------------------------------
# Auto-play
# ---------------------------------------------------------------------------


class AutoPlayOptions(BaseModel):
    """Options for an auto-play batch."""

    mode: SimulationMode = SimulationMode.REALISTIC
    stop_at_week: int | None = Field(default=None, ge=1, le=50)
    max_games_per_batch: int = Field(default=5, ge=1, le=20)
    include_analytics: bool = True

    @classmethod
    def for_speed(
        cls,
        speed: AutoPlaySpeed | str = AutoPlaySpeed.NORMAL,
        settings: SimulationSettings | None = None,
        **kwargs: Any,
    ) -> AutoPlayOptions:
        """Build options with the batch cap taken from a speed setting."""
        settings = settings or SimulationSettings()
        return cls(max_games_per_batch=settings.batch_size(speed), **kwargs)


@dataclass
class AutoPlayResult:
    """Everything one auto-play batch produced."""

    directives: list[ResultDirective]
    analytics: dict[int, WeekAnalytics]
    season_status: SeasonProgress
    next_week: int

    @property
    def games_simulated(self) -> int:
        return len(self.directives)

    def to_dict(self) -> dict[str, Any]:
        return {
            "games_simulated": self.games_simulated,
            "games": [d.to_dict() for d in self.directives],
            "analytics": {week: a.to_dict() for week, a in self.analytics.items()},
            "season_status": self.season_status.to_dict(),
            "next_week": self.next_week,
        }

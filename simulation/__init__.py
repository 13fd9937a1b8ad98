"""
Simulation Module

This module contains the match simulation and season prediction engine
for the league simulator.

Components:
    - models: Data models for engine settings, results and predictions
    - rng: Injectable uniform random source
    - form: Recent-form calculator
    - strength: Effective strength model
    - match: Basic (linear) match simulator
    - enhanced: Form-aware match simulator with random events
    - standings: League table aggregation and ordering
    - predictions: Final-table projection and prediction ensemble
    - analytics: Week analytics and season progress
    - runner: Game, week and auto-play drivers

Usage:
    from simulation import PredictionEnsemble, NumpyRandomSource

    ensemble = PredictionEnsemble(rng=NumpyRandomSource(seed=42))
    predictions = ensemble.generate_all(teams, games)
    print(predictions.to_dict()["recommended_method"])
"""

from simulation.errors import InvalidInputError
from simulation.models import (
    AutoPlayOptions,
    AutoPlayResult,
    AutoPlaySpeed,
    ConsensusPrediction,
    EnhancedMatchResult,
    Form,
    FormPrediction,
    FormTrend,
    MatchMetadata,
    ModeConfig,
    MonteCarloPrediction,
    PredictionSet,
    RandomEvent,
    ResultDirective,
    SeasonProgress,
    SimulationMode,
    SimulationSettings,
    Standing,
    StatisticalPrediction,
    StrengthPrediction,
    WeekAnalytics,
)
from simulation.rng import NumpyRandomSource, RandomSource
from simulation.settings import load_settings
from simulation.form import FormCalculator
from simulation.strength import StrengthModel
from simulation.match import MatchSimulator, round_half_up
from simulation.enhanced import EnhancedMatchSimulator
from simulation.standings import StandingsEngine
from simulation.predictions import PredictionEnsemble
from simulation.analytics import entertainment_score, season_progress, week_analytics
from simulation.runner import SeasonRunner

__all__ = [
    # Errors
    "InvalidInputError",
    # Models
    "AutoPlayOptions",
    "AutoPlayResult",
    "AutoPlaySpeed",
    "ConsensusPrediction",
    "EnhancedMatchResult",
    "Form",
    "FormPrediction",
    "FormTrend",
    "MatchMetadata",
    "ModeConfig",
    "MonteCarloPrediction",
    "PredictionSet",
    "RandomEvent",
    "ResultDirective",
    "SeasonProgress",
    "SimulationMode",
    "SimulationSettings",
    "Standing",
    "StatisticalPrediction",
    "StrengthPrediction",
    "WeekAnalytics",
    # Randomness and settings
    "NumpyRandomSource",
    "RandomSource",
    "load_settings",
    # Components
    "FormCalculator",
    "StrengthModel",
    "MatchSimulator",
    "round_half_up",
    "EnhancedMatchSimulator",
    "StandingsEngine",
    "PredictionEnsemble",
    "entertainment_score",
    "season_progress",
    "week_analytics",
    "SeasonRunner",
]

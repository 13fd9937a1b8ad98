"""
CLI Module for the League Simulator

Provides an interactive command-line interface for playing a season
week by week and viewing standings and predictions.

Usage:
    python -m cli.main
"""

from cli.main import main, run_interactive

__all__ = ["main", "run_interactive"]

#!/usr/bin/env python3
"""
League Simulator Smoke Test

Seeds the default league, auto-plays it to the end in batches and prints
the final table plus a prediction pass taken halfway through.

Usage:
    python run_smoke.py
    python run_smoke.py --seed 42 --mode predictable --speed fast
    python run_smoke.py --iterations 200 -v
"""

from __future__ import annotations

import argparse
import sys

from loguru import logger


def main() -> int:
    parser = argparse.ArgumentParser(description="League Simulator Smoke Test")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for a reproducible run")
    parser.add_argument(
        "--mode", choices=["basic", "realistic", "predictable"], default="realistic",
        help="Enhanced simulation mode (default: realistic)",
    )
    parser.add_argument(
        "--speed", choices=["slow", "normal", "fast"], default="normal",
        help="Auto-play speed, i.e. games per batch (default: normal)",
    )
    parser.add_argument(
        "--iterations", type=int, default=100,
        help="Monte Carlo iterations (default: 100 for smoke test)",
    )
    parser.add_argument("--config", default=None, help="Path to a simulation settings YAML file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose application logging")

    args = parser.parse_args()

    # Configure application logging
    logger.remove()
    if args.verbose:
        logger.add(sys.stderr, level="DEBUG")
    else:
        logger.add(sys.stderr, level="WARNING")

    print()
    print("=" * 62)
    print("  LEAGUE SIMULATOR - SMOKE TEST")
    print("=" * 62)
    print(f"  Seed:         {args.seed if args.seed is not None else 'random'}")
    print(f"  Mode:         {args.mode}")
    print(f"  Speed:        {args.speed}")
    print(f"  Iterations:   {args.iterations}")
    print("=" * 62)
    print()

    from simulation import AutoPlayOptions, NumpyRandomSource, load_settings
    from src.service.league import LeagueService, format_table

    try:
        settings = load_settings(args.config)
        league = LeagueService(settings=settings, rng=NumpyRandomSource(seed=args.seed))
        season = league.seed_default_league()
        season_id = season.season_id
        options = AutoPlayOptions.for_speed(args.speed, settings, mode=args.mode)

        predicted = False
        batches = 0
        while league.next_week(season_id) is not None:
            result = league.auto_play(season_id, options)
            batches += 1
            if result.games_simulated == 0:
                logger.warning("Auto-play made no progress, stopping")
                break
            print(
                f"  Batch {batches}: {result.games_simulated} games, "
                f"{result.season_status.progress:.0%} complete"
            )

            if not predicted and result.season_status.progress >= 0.5:
                predictions = league.advanced_predictions(season_id, args.iterations)
                names = {team.team_id: team.name for team in league.teams()}
                print("\n  Halfway consensus:")
                for p in predictions.consensus:
                    print(f"    {p.position}. {names[p.team_id]}")
                print()
                predicted = True

        print()
        print(format_table(league.league_table(season_id), league.teams()))
        print()
        print(f"  Season status: {league.get_season(season_id).status.value}")

    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 1
    except Exception as e:
        print(f"\nError: {e}")
        logger.exception("Smoke test error")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Interactive CLI for the League Simulator

Provides a menu-driven interface for playing the default league week
by week, auto-playing batches and viewing standings and predictions.

Usage:
    python -m cli.main
    python -m cli.main --verbose
"""

from __future__ import annotations

import sys

from loguru import logger

from simulation import AutoPlaySpeed, InvalidInputError, PredictionSet, SimulationMode
from src.service.league import LeagueService, format_table, played_at_label


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for CLI usage."""
    logger.remove()
    if verbose:
        logger.add(sys.stderr, level="DEBUG")
    else:
        logger.add(sys.stderr, level="WARNING")


def print_header() -> None:
    """Print welcome header."""
    print()
    print("=" * 62)
    print("   League Simulator")
    print("   Round-Robin Season and Prediction Engine")
    print("=" * 62)
    print()


def show_table(league: LeagueService, season_id: int) -> None:
    """Print the current league table."""
    stats = league.season_stats(season_id)
    print(f"\n--- LEAGUE TABLE (week {stats.current_week}/{stats.total_weeks}) ---\n")
    print(format_table(league.league_table(season_id), league.teams()))
    print(f"\n  Played {stats.completed_games}/{stats.total_games} games "
          f"({stats.completion_percentage}%)")
    print()


def show_results(league: LeagueService, season_id: int) -> None:
    """Print completed results grouped by week."""
    names = {team.team_id: team.name for team in league.teams()}
    results = league.results_by_week(season_id)

    if not results:
        print("\n  No games played yet.")
        return

    print("\n--- RESULTS ---")
    for week, games in results.items():
        print(f"\nWeek {week}:")
        for game in games:
            print(
                f"  {names[game.home_team_id]:>20} {game.result_string:^7} "
                f"{names[game.away_team_id]:<20} {played_at_label(game)}"
            )
    print()


def get_mode_selection() -> SimulationMode:
    """Get simulation mode from user."""
    print("\nSimulation Mode:")
    print("  [1] Basic")
    print("  [2] Realistic")
    print("  [3] Predictable")
    print("  [Enter] Use default (Realistic)")
    print()

    while True:
        choice = input("Select option (1-3 or Enter for default): ").strip()

        if not choice or choice == "2":
            return SimulationMode.REALISTIC
        elif choice == "1":
            return SimulationMode.BASIC
        elif choice == "3":
            return SimulationMode.PREDICTABLE
        else:
            print("  Invalid option. Please choose 1, 2, or 3.")


def play_next_week(league: LeagueService, season_id: int) -> None:
    """Enhanced simulation of the next scheduled week."""
    week = league.next_week(season_id)
    if week is None:
        print("\n  The season is complete.")
        return

    mode = get_mode_selection()
    games, analytics = league.simulate_week_enhanced(season_id, week, mode)
    names = {team.team_id: team.name for team in league.teams()}

    print(f"\n--- WEEK {week} ---")
    for game in games:
        print(f"  {names[game.home_team_id]} {game.result_string} {names[game.away_team_id]}")
    print(f"  Goals: {analytics.total_goals}  Upsets: {analytics.upsets}  "
          f"Entertainment: {analytics.entertainment_score:.1f}/10")


def run_auto_play(league: LeagueService, season_id: int) -> None:
    """Auto-play a batch of weeks at a chosen speed."""
    print("\nAuto-play Speed:")
    print("  [1] Slow")
    print("  [2] Normal")
    print("  [3] Fast")
    print()

    speeds = {"1": AutoPlaySpeed.SLOW, "2": AutoPlaySpeed.NORMAL, "3": AutoPlaySpeed.FAST}
    choice = input("Select option (1-3 or Enter for normal): ").strip()
    speed = speeds.get(choice, AutoPlaySpeed.NORMAL)

    result = league.auto_play(season_id, speed=speed)

    print(f"\n  Simulated {result.games_simulated} games")
    for week, analytics in result.analytics.items():
        print(f"  Week {week}: {analytics.games_played} games, {analytics.total_goals} goals")
    print(f"  Season {result.season_status.progress:.0%} complete")


def show_predictions(league: LeagueService, season_id: int) -> None:
    """Print the consensus and Monte Carlo predictions."""
    try:
        iterations = int(input("Monte Carlo iterations (Enter for default): ").strip() or 0)
    except ValueError:
        print("  Invalid number, using default.")
        iterations = 0

    print("\nRunning predictions...")
    predictions = league.advanced_predictions(season_id, iterations or None)
    display_predictions(league, predictions)


def display_predictions(league: LeagueService, predictions: PredictionSet) -> None:
    """Display a prediction set."""
    names = {team.team_id: team.name for team in league.teams()}

    print("\n--- PREDICTED FINAL TABLE (consensus) ---")
    for p in predictions.consensus:
        print(
            f"  {p.position:>2}. {names[p.team_id]:<20} "
            f"(strength {p.strength_position}, form {p.form_position}, "
            f"stats {p.statistical_position})"
        )

    print("\n--- MONTE CARLO ---")
    for p in predictions.monte_carlo:
        odds = ", ".join(
            f"{pos}: {prob:.1%}" for pos, prob in sorted(p.position_probabilities.items())
        )
        print(f"  {names[p.team_id]:<20} most likely {p.most_likely_position} ({odds})")
    print()


def run_interactive() -> None:
    """Run the interactive CLI session."""
    print_header()

    print("Seeding default league...")
    league = LeagueService()
    season = league.seed_default_league()
    print(f"Season: {season.name} ({len(league.teams())} teams)\n")

    try:
        while True:
            print("\n" + "=" * 50)
            print("MAIN MENU")
            print("=" * 50)
            print("  [1] View league table")
            print("  [2] Play next week")
            print("  [3] Auto-play")
            print("  [4] Play all remaining games")
            print("  [5] View results")
            print("  [6] Season predictions")
            print("  [7] Reset season")
            print("  [q] Quit")
            print()

            choice = input("Select option: ").strip().lower()

            if choice == "q" or choice == "quit":
                print("\nThank you for using the League Simulator!")
                break

            try:
                if choice == "1":
                    show_table(league, season.season_id)

                elif choice == "2":
                    play_next_week(league, season.season_id)

                elif choice == "3":
                    run_auto_play(league, season.season_id)

                elif choice == "4":
                    played = league.play_all_remaining(season.season_id)
                    print(f"\n  Played {len(played)} games.")
                    show_table(league, season.season_id)

                elif choice == "5":
                    show_results(league, season.season_id)

                elif choice == "6":
                    show_predictions(league, season.season_id)

                elif choice == "7":
                    if input("Reset every result? (y/N): ").strip().lower() == "y":
                        league.reset_season(season.season_id)
                        print("  Season reset.")

                else:
                    print("  Invalid option. Please choose 1-7 or 'q'.")

            except InvalidInputError as e:
                print(f"\n  Error: {e}")
                logger.warning(f"League operation rejected: {e}")

    except KeyboardInterrupt:
        print("\n\nInterrupted. Exiting...")
    except Exception as e:
        print(f"\nError: {e}")
        logger.exception("CLI error")
        raise


def main() -> int:
    """Main entry point."""
    verbose = "--verbose" in sys.argv or "-v" in sys.argv
    configure_logging(verbose)

    try:
        run_interactive()
        return 0
    except Exception as e:
        print(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

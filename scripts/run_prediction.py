#!/usr/bin/env python3
"""
Standalone prediction script.

Backtests every model family on the latest draw, picks the champions,
retrains them on the full history and prints next-draw tickets.
"""
import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lotto645.backtester import format_summary
from lotto645.champion import SelectionPolicy
from lotto645.config import PipelineConfig
from lotto645.errors import Lotto645Error
from lotto645.history import load_history
from lotto645.models.families import default_families
from lotto645.scraper import update_history
from lotto645.training_service import build_snapshot, save_snapshot


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Lotto 6/45 next-draw prediction")
    parser.add_argument("--fetch", action="store_true",
                        help="Refresh the cached history from the network first")
    parser.add_argument("--sets", type=int, default=None, help="Tickets per strategy")
    parser.add_argument("--trials", type=int, default=None, help="Backtest tickets per family")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for sampling")
    parser.add_argument("--n-jobs", type=int, default=None,
                        help="joblib workers across families")
    parser.add_argument("--per-number-jobs", type=int, default=None,
                        help="joblib workers across numbers inside a family")
    parser.add_argument("--families", nargs="+", default=None,
                        help="Subset of model families to compare")
    parser.add_argument("--no-save", action="store_true", help="Do not write the snapshot")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    config = PipelineConfig.from_env().with_overrides(
        sets_to_generate=args.sets,
        trials_per_family=args.trials,
        random_seed=args.seed,
        n_jobs=args.n_jobs,
        per_number_jobs=args.per_number_jobs,
    )
    logging.basicConfig(level=config.log_level,
                        format="%(asctime)s - %(levelname)s - %(message)s")

    print("Loading data...")
    try:
        history = update_history(config.csv_path) if args.fetch else load_history(config.csv_path)
    except Lotto645Error as e:
        print(f"Could not load history: {e}")
        return 1
    print(f"Loaded {len(history)} draws (latest #{history.last_draw_index})")

    families = default_families()
    if args.families:
        unknown = sorted(set(args.families) - set(families))
        if unknown:
            print(f"Unknown families: {unknown}. Available: {sorted(families)}")
            return 2
        families = {name: families[name] for name in args.families}

    try:
        snapshot = build_snapshot(history, families=families, config=config)
    except Lotto645Error as e:
        print(f"Training failed: {e}")
        return 1

    print("\n".join(format_summary(snapshot.backtest)))

    print(f"\nNEXT DRAW: #{snapshot.next_draw_index}")
    for policy in SelectionPolicy:
        score = snapshot.champion_scores[policy]
        print(f"\n{policy.name} champion: {score.family_name} "
              f"(best {score.best_rank.name}, {score.total_wins} wins)")
        for i, numbers in enumerate(snapshot.predict(policy, random_state=config.random_seed)):
            kind = "Top 6   " if i == 0 else f"Sample {i}"
            print(f"  {kind}: {', '.join(str(n) for n in numbers)}")

    if not args.no_save:
        save_snapshot(snapshot, config.snapshot_path)
        print(f"\nSnapshot saved to {config.snapshot_path}")

    print(f"\n{'='*60}")
    print("DISCLAIMER: Lotto 6/45 is a random draw. No model guarantees wins.")
    print("First prize odds: 1 in 8,145,060. Play responsibly.")
    print(f"{'='*60}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

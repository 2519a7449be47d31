#!/usr/bin/env python3
"""
Lotto 6/45 Auto-Update Pipeline

Meant to run after each Saturday draw (cron or CI schedule):

1. FETCH    - Pull any new draws into the cached CSV
2. SCORE    - Rank logged predictions whose target draw has now happened
3. RETRAIN  - Backtest all families, pick champions, retrain on full history
4. PUBLISH  - Save the snapshot read by the Streamlit app
5. LOG      - Append next-draw tickets to the prediction log

A failed retrain leaves the previously saved snapshot untouched.
Run manually via: python scripts/auto_update.py
"""
import argparse
import logging
import os
import sys
from datetime import date, timedelta

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lotto645.champion import SelectionPolicy
from lotto645.config import PipelineConfig
from lotto645.errors import Lotto645Error
from lotto645.history import load_history
from lotto645.prediction_log import append_entries, load_log, score_log, snapshot_entries
from lotto645.scraper import update_history
from lotto645.training_service import AppState, load_snapshot, retrain, save_snapshot


class DrawCalendar:
    """Lotto 6/45 draws every Saturday evening (KST)."""

    DRAW_DAY = 5  # Saturday

    @staticmethod
    def get_next_draw_date(from_date=None):
        d = from_date or date.today()
        d += timedelta(days=1)
        while d.weekday() != DrawCalendar.DRAW_DAY:
            d += timedelta(days=1)
        return d

    @staticmethod
    def is_draw_day(d=None):
        return (d or date.today()).weekday() == DrawCalendar.DRAW_DAY


def run_auto_update(config, offline=False):
    print("=" * 70)
    print("LOTTO 6/45 AUTO-UPDATE PIPELINE")
    print("=" * 70)
    print(f"  Today: {date.today().strftime('%Y-%m-%d (%A)')}"
          f" | Next draw: {DrawCalendar.get_next_draw_date().strftime('%Y-%m-%d')}")

    # Step 1: Fetch
    print(f"\n{'-' * 50}")
    print("[STEP 1] Updating draw history...")
    history = load_history(config.csv_path) if offline else update_history(config.csv_path)
    print(f"  Dataset: {len(history)} draws, latest #{history.last_draw_index}")

    # Step 2: Score previous predictions
    print(f"\n{'-' * 50}")
    print("[STEP 2] Scoring previous predictions...")
    log_df, scored = score_log(load_log(config.predictions_log), history)
    if scored:
        log_df.to_csv(config.predictions_log, index=False)
        print(f"  Scored {scored} logged prediction(s)")
    else:
        print("  Nothing new to score.")

    # Step 3: Retrain
    print(f"\n{'-' * 50}")
    print("[STEP 3] Retraining...")
    state = AppState(load_snapshot(config.snapshot_path))
    try:
        snapshot = retrain(history=history, config=config, state=state)
    except Lotto645Error as e:
        print(f"  Retrain failed: {e}")
        if state.is_initialized:
            print(f"  Keeping snapshot for draw #{state.current.last_draw_index}")
        return 1
    print(f"\n{'-' * 50}")
    print("[STEP 4] Publishing snapshot...")
    save_snapshot(snapshot, config.snapshot_path)
    print(f"  Snapshot published: trained through draw #{snapshot.last_draw_index}, "
          f"predicting draw #{snapshot.next_draw_index}")

    # Step 5: Log predictions
    print(f"\n{'-' * 50}")
    print("[STEP 5] Logging predictions...")
    entries = snapshot_entries(snapshot, random_state=config.random_seed)
    append_entries(config.predictions_log, entries)

    print(f"\n{'=' * 70}")
    print(f"  PREDICTIONS FOR DRAW #{snapshot.next_draw_index}")
    print(f"{'=' * 70}")
    for entry, policy in zip(entries, SelectionPolicy):
        score = snapshot.champion_scores[policy]
        print(f"\n  {policy.name}: {score.family_name} "
              f"(backtest best {score.best_rank.name}, {score.total_wins} wins)")
        print(f"    {entry['tickets']}")
    print(f"\n{'=' * 70}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Fetch, retrain and publish predictions")
    parser.add_argument("--offline", action="store_true",
                        help="Skip the network fetch and use the cached CSV")
    args = parser.parse_args(argv)

    config = PipelineConfig.from_env()
    logging.basicConfig(level=config.log_level,
                        format="%(asctime)s - %(levelname)s - %(message)s")
    return run_auto_update(config, offline=args.offline)


if __name__ == "__main__":
    sys.exit(main())

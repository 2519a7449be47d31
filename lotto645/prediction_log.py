"""
Prediction log: what was predicted for each upcoming draw, and how it did.

One CSV row per (target draw, strategy). Tickets are stored as JSON lists.
Once the target draw is in the history, the row is scored with the best
Rank among its tickets.
"""
import json
import logging
import os
from datetime import datetime

import pandas as pd

from lotto645.champion import SelectionPolicy
from lotto645.rank import Rank

logger = logging.getLogger(__name__)

LOG_COLUMNS = [
    "date_predicted",
    "target_draw_number",
    "strategy",
    "family",
    "tickets",
    "best_rank",
    "wins",
]


def load_log(path):
    if not os.path.exists(path):
        return pd.DataFrame(columns=LOG_COLUMNS)
    return pd.read_csv(path)


def snapshot_entries(snapshot, random_state=None):
    """Log rows for the tickets `snapshot` produces for its next draw."""
    entries = []
    for policy in SelectionPolicy:
        tickets = snapshot.predict(policy, random_state=random_state)
        entries.append({
            "date_predicted": datetime.now().strftime("%Y-%m-%d %H:%M"),
            "target_draw_number": snapshot.next_draw_index,
            "strategy": policy.name,
            "family": snapshot.champions[policy],
            "tickets": json.dumps(tickets),
            "best_rank": None,
            "wins": None,
        })
    return entries


def append_entries(path, entries):
    log_df = load_log(path)
    log_df = pd.concat([log_df, pd.DataFrame(entries, columns=LOG_COLUMNS)],
                       ignore_index=True)
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    log_df.to_csv(path, index=False)
    return log_df


def score_log(log_df, history):
    """
    Fill best_rank/wins for unscored rows whose target draw has happened.

    Returns (scored frame, number of rows newly scored).
    """
    draws = {record.draw_index: record for record in history}
    log_df = log_df.copy()
    log_df["best_rank"] = log_df["best_rank"].astype(object)
    newly_scored = 0
    for idx, row in log_df.iterrows():
        if pd.notna(row["best_rank"]):
            continue
        actual = draws.get(int(row["target_draw_number"]))
        if actual is None:
            continue
        ranks = [Rank.determine_rank(ticket, actual) for ticket in json.loads(row["tickets"])]
        wins = [r for r in ranks if r.is_win]
        log_df.at[idx, "best_rank"] = min(wins).name if wins else Rank.NONE.name
        log_df.at[idx, "wins"] = len(wins)
        newly_scored += 1
        logger.info("[Log] Draw #%d %s (%s): best %s, %d wins",
                    actual.draw_index, row["strategy"], row["family"],
                    log_df.at[idx, "best_rank"], len(wins))
    return log_df, newly_scored

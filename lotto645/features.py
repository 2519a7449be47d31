"""
Feature engineering for the per-number classifiers.

For every number 1-45 and every evaluation point, five features are computed
strictly from the draws *before* that point:
- recency: draws since the number last appeared within the mid window
  (0 = most recent draw; len(window) if it never appeared there)
- freq_short: appearances as a main number in the last `short_window` draws
- freq_mid: appearances as a main number in the last `mid_window` draws
- freq_total_main: appearances as a main number in all prior draws
- freq_total_bonus: appearances as the bonus number in all prior draws

The training set walks the history with a sliding window and labels each row
with whether the number was drawn at that point.
"""
import logging
from collections import Counter
from dataclasses import asdict, dataclass
from typing import Optional

import pandas as pd

from lotto645.config import ALL_NUMBERS, FEATURE_COLUMNS

logger = logging.getLogger(__name__)

DEFAULT_SHORT_WINDOW = 10
DEFAULT_MID_WINDOW = 25

DATASET_COLUMNS = ["number"] + FEATURE_COLUMNS + ["label"]


@dataclass(frozen=True)
class FeatureVector:
    number: int
    recency: int
    freq_short: int
    freq_mid: int
    freq_total_main: int
    freq_total_bonus: int
    label: Optional[bool] = None

    def values(self):
        """Feature values in FEATURE_COLUMNS order."""
        return [getattr(self, col) for col in FEATURE_COLUMNS]

    def to_row(self):
        return asdict(self)


def _window_features(number, short_past, mid_past):
    recency = len(mid_past)
    for distance, draw in enumerate(reversed(mid_past)):
        if number in draw.main_numbers:
            recency = distance
            break
    freq_short = sum(1 for draw in short_past if number in draw.main_numbers)
    freq_mid = sum(1 for draw in mid_past if number in draw.main_numbers)
    return recency, freq_short, freq_mid


def _tail(draws, n):
    return draws[-n:] if n > 0 else draws[:0]


def compute_features(number, cumulative_history, short_window=DEFAULT_SHORT_WINDOW,
                     mid_window=DEFAULT_MID_WINDOW):
    """
    Features for `number` given every draw known so far (label omitted).

    The short and mid windows are the trailing `short_window` / `mid_window`
    draws of `cumulative_history`. Pure function of its inputs.
    """
    recency, freq_short, freq_mid = _window_features(
        number,
        _tail(cumulative_history, short_window),
        _tail(cumulative_history, mid_window),
    )
    total_main = sum(1 for draw in cumulative_history if number in draw.main_numbers)
    total_bonus = sum(1 for draw in cumulative_history if draw.bonus_number == number)
    return FeatureVector(
        number=number,
        recency=recency,
        freq_short=freq_short,
        freq_mid=freq_mid,
        freq_total_main=total_main,
        freq_total_bonus=total_bonus,
    )


def compute_labeled_features(number, cumulative_history, target_draw,
                             short_window=DEFAULT_SHORT_WINDOW,
                             mid_window=DEFAULT_MID_WINDOW):
    """Like compute_features, with label = number drawn as a main number in `target_draw`."""
    fv = compute_features(number, cumulative_history, short_window, mid_window)
    return FeatureVector(**{**fv.to_row(), "label": number in target_draw.main_numbers})


def current_features(history, short_window=DEFAULT_SHORT_WINDOW,
                     mid_window=DEFAULT_MID_WINDOW):
    """Prediction-time features (no label) for every number, keyed by number."""
    return {
        n: compute_features(n, history, short_window, mid_window)
        for n in ALL_NUMBERS
    }


def build_training_set(history, mid_window=DEFAULT_MID_WINDOW,
                       short_window=DEFAULT_SHORT_WINDOW):
    """
    Walk `history` and emit one labeled row per (draw index, number).

    Rows start at index `mid_window` so every row sees a full mid window.
    Cumulative main/bonus counts are carried forward incrementally; the
    result is identical to calling compute_labeled_features for each row.
    Rows are ordered by draw index, then number.

    Returns an empty DataFrame (with the dataset columns) when
    len(history) <= mid_window; callers must check before training.
    """
    draws = list(history)
    n_draws = len(draws)
    if n_draws <= mid_window:
        logger.info("[Features] %d draws is not enough for a %d-draw window",
                    n_draws, mid_window)
        return pd.DataFrame(columns=DATASET_COLUMNS)

    total_main = Counter()
    total_bonus = Counter()
    for draw in draws[:mid_window]:
        total_main.update(draw.main_numbers)
        total_bonus[draw.bonus_number] += 1

    rows = []
    for i in range(mid_window, n_draws):
        target = draws[i]
        short_past = draws[max(0, i - short_window):i]
        mid_past = draws[i - mid_window:i]
        for n in ALL_NUMBERS:
            recency, freq_short, freq_mid = _window_features(n, short_past, mid_past)
            rows.append((
                n, recency, freq_short, freq_mid,
                total_main[n], total_bonus[n],
                n in target.main_numbers,
            ))
        total_main.update(target.main_numbers)
        total_bonus[target.bonus_number] += 1

    df = pd.DataFrame(rows, columns=DATASET_COLUMNS)
    df["label"] = df["label"].astype(bool)
    logger.info("[Features] Training set: %d rows from %d draws (%d per number)",
                len(df), n_draws, n_draws - mid_window)
    return df


def features_frame(features):
    """Stack prediction-time FeatureVectors into a frame indexed by number."""
    rows = [features[n].to_row() for n in sorted(features)]
    df = pd.DataFrame(rows, columns=DATASET_COLUMNS).set_index("number")
    return df.drop(columns=["label"])

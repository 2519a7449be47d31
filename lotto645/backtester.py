"""
Backtesting Engine for the Lotto 6/45 predictor

Holds out the most recent draw, trains every candidate family on the
draws before it, generates a few tickets per family and ranks them
against the held-out draw. Never uses the held-out draw for features
or training.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from lotto645.errors import ClassifierTrainingFailure, InsufficientHistory, NoCandidateFamilies
from lotto645.features import (
    DEFAULT_MID_WINDOW,
    DEFAULT_SHORT_WINDOW,
    build_training_set,
    current_features,
)
from lotto645.models.ensemble import train_ensemble
from lotto645.predictor import predict
from lotto645.rank import Rank, random_ticket_odds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelScore:
    """How one family's trial tickets fared against the held-out draw."""

    family_name: str
    best_rank: Rank
    total_wins: int

    @classmethod
    def from_ranks(cls, family_name, ranks):
        wins = [r for r in ranks if r is not Rank.NONE]
        return cls(family_name, min(wins) if wins else Rank.NONE, len(wins))


@dataclass(frozen=True)
class BacktestResult:
    actual: object
    scores: Dict[str, ModelScore]
    ensembles: Dict[str, object]
    predictions: Dict[str, List[List[int]]]
    ranks: Dict[str, List[Rank]]
    failures: Dict[str, ClassifierTrainingFailure] = field(default_factory=dict)


def _evaluate_family(dataset, family, features, trials, seed, pad_short_sets,
                     per_number_jobs=1):
    """Train and score one family. Returns (name, ensemble, sets, error)."""
    try:
        ensemble = train_ensemble(dataset, family, n_jobs=per_number_jobs)
    except ClassifierTrainingFailure as e:
        return family.name, None, None, e
    sets = predict(ensemble, features, sets_to_generate=trials,
                   random_state=np.random.default_rng(seed),
                   pad_short_sets=pad_short_sets)
    return family.name, ensemble, sets, None


def run_backtest(full_history, families, trials_per_family=3,
                 short_window=DEFAULT_SHORT_WINDOW, mid_window=DEFAULT_MID_WINDOW,
                 n_jobs=1, random_state=None, pad_short_sets=False,
                 per_number_jobs=1):
    """
    Score every family against the most recent draw.

    Args:
        full_history: TicketHistory including the draw to hold out
        families: ModelFamily objects (or a name -> ModelFamily mapping)
        trials_per_family: tickets per family (first is the deterministic top 6)
        n_jobs: joblib workers across families
        per_number_jobs: joblib workers across numbers inside one family
        random_state: seed for the trial sampling; each family gets its own
            stream, assigned in family-name order

    Returns:
        BacktestResult. A family whose training fails is recorded in
        `failures` and left out of the scores; the others carry on.

    Raises:
        InsufficientHistory if the training part is too short for one row,
        NoCandidateFamilies if no family could be trained.
    """
    if isinstance(families, dict):
        families = list(families.values())
    families = sorted(families, key=lambda f: f.name)
    if not families:
        raise NoCandidateFamilies("No candidate families supplied")

    train_history = full_history.drop_last(1)
    actual = full_history.last
    dataset = build_training_set(train_history, mid_window=mid_window,
                                 short_window=short_window)
    if len(dataset) == 0:
        raise InsufficientHistory(required=mid_window + 2, available=len(full_history))

    features = current_features(train_history, short_window, mid_window)
    seeds = np.random.SeedSequence(random_state).spawn(len(families))

    logger.info("[Backtest] Holding out draw #%d; %d families x %d trials",
                actual.draw_index, len(families), trials_per_family)

    outcomes = Parallel(n_jobs=n_jobs)(
        delayed(_evaluate_family)(dataset, family, features, trials_per_family,
                                  seed, pad_short_sets, per_number_jobs)
        for family, seed in zip(families, seeds)
    )

    scores, ensembles, predictions, ranks, failures = {}, {}, {}, {}, {}
    for name, ensemble, sets, error in outcomes:
        if error is not None:
            logger.warning("[Backtest] %s skipped: %s", name, error)
            failures[name] = error
            continue
        family_ranks = [Rank.determine_rank(s, actual) for s in sets]
        ensembles[name] = ensemble
        predictions[name] = sets
        ranks[name] = family_ranks
        scores[name] = ModelScore.from_ranks(name, family_ranks)
        logger.info("[Backtest] %s: best %s, %d wins", name,
                    scores[name].best_rank.name, scores[name].total_wins)

    if not scores:
        raise NoCandidateFamilies(
            f"All {len(families)} families failed to train: {sorted(failures)}"
        )

    return BacktestResult(actual=actual, scores=scores, ensembles=ensembles,
                          predictions=predictions, ranks=ranks, failures=failures)


# ── Reporting ────────────────────────────────────────────────────────────

def results_frame(result):
    """One row per (family, trial) with the ticket and its rank."""
    rows = []
    for name in sorted(result.predictions):
        for trial, (numbers, rank) in enumerate(zip(result.predictions[name],
                                                    result.ranks[name]), start=1):
            rows.append({
                "family": name,
                "trial": trial,
                "predicted": str(numbers),
                "actual": str(result.actual.sorted_numbers),
                "bonus": result.actual.bonus_number,
                "matches": len(set(numbers) & result.actual.main_numbers),
                "rank": rank.name,
            })
    return pd.DataFrame(rows)


def scores_frame(result):
    """Per-family summary: best rank, wins and failure reason, if any."""
    rows = [
        {"family": s.family_name, "best_rank": s.best_rank.name,
         "total_wins": s.total_wins, "error": None}
        for s in result.scores.values()
    ]
    rows += [
        {"family": name, "best_rank": None, "total_wins": None, "error": str(err)}
        for name, err in result.failures.items()
    ]
    return pd.DataFrame(rows).sort_values("family").reset_index(drop=True)


def format_summary(result):
    """Human-readable backtest report lines."""
    lines = [
        "=" * 60,
        "BACKTEST RESULTS",
        "=" * 60,
        f"Held-out draw #{result.actual.draw_index}: "
        f"{result.actual.sorted_numbers} + bonus {result.actual.bonus_number}",
    ]
    for name in sorted(result.scores):
        score = result.scores[name]
        lines.append(f"\n{name}: best {score.best_rank.label}, "
                     f"{score.total_wins}/{len(result.ranks[name])} winning tickets")
        for numbers, rank in zip(result.predictions[name], result.ranks[name]):
            lines.append(f"    {numbers} -> {rank.name}")
    for name, err in sorted(result.failures.items()):
        lines.append(f"\n{name}: FAILED ({err})")

    lines.append("\nRANDOM TICKET ODDS:")
    for rank, p in random_ticket_odds().items():
        lines.append(f"  {rank.name:<6} {p:.8f}")
    lines.append("=" * 60)
    return lines


def save_results(result, path):
    """Save per-trial backtest results to CSV."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    results_frame(result).to_csv(path, index=False)
    logger.info("[Backtest] Results saved to %s", path)

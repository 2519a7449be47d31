"""
Retraining service: fetch -> backtest -> champion selection -> retrain -> publish.

The published state is one immutable AppSnapshot. A retrain builds a complete
new snapshot and swaps it in with a single assignment, so readers always see
either the old state or the new one, never a mix. A failed retrain leaves the
previous snapshot in place and re-raises.
"""
import logging
import os
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict

import joblib
from joblib import Parallel, delayed

from lotto645.backtester import BacktestResult, ModelScore, run_backtest
from lotto645.champion import SelectionPolicy, select_champion
from lotto645.config import PipelineConfig
from lotto645.errors import InsufficientHistory
from lotto645.features import build_training_set, current_features
from lotto645.models.ensemble import train_ensemble
from lotto645.models.families import default_families
from lotto645.predictor import predict, score_numbers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppSnapshot:
    """Everything the presentation layer needs from one successful retrain."""

    last_draw_index: int
    history: object
    champions: Dict[SelectionPolicy, str]
    champion_scores: Dict[SelectionPolicy, ModelScore]
    ensembles: Dict[str, object]
    features: Dict[int, object]
    backtest: BacktestResult
    config: PipelineConfig = field(default_factory=PipelineConfig)
    trained_at: str = field(default_factory=lambda: datetime.now().strftime("%Y-%m-%d %H:%M"))

    @property
    def scores(self):
        return self.backtest.scores

    @property
    def held_out(self):
        return self.backtest.actual

    @property
    def next_draw_index(self):
        return self.last_draw_index + 1

    def ensemble_for(self, policy):
        return self.ensembles[self.champions[policy]]

    def predict(self, policy=SelectionPolicy.BEST_RANK_FIRST, sets_to_generate=None,
                random_state=None):
        """Tickets for the next draw from the champion under `policy`."""
        return predict(
            self.ensemble_for(policy),
            self.features,
            sets_to_generate=sets_to_generate or self.config.sets_to_generate,
            random_state=random_state,
            pad_short_sets=self.config.pad_short_sets,
        )

    def probabilities(self, policy=SelectionPolicy.BEST_RANK_FIRST):
        """[(number, probability)] from the champion under `policy`."""
        return score_numbers(self.ensemble_for(policy), self.features)


class AppState:
    """Holder for the currently published snapshot."""

    def __init__(self, snapshot=None):
        self._snapshot = snapshot
        self._write_lock = threading.Lock()

    @property
    def current(self):
        return self._snapshot

    @property
    def is_initialized(self):
        return self._snapshot is not None

    def publish(self, snapshot):
        with self._write_lock:
            self._snapshot = snapshot
        logger.info("[Service] Published snapshot for draw #%d", snapshot.last_draw_index)


STATE = AppState()


def _train_champions(history, families, config):
    dataset = build_training_set(history, mid_window=config.mid_window,
                                 short_window=config.short_window)
    trained = Parallel(n_jobs=config.n_jobs)(
        delayed(train_ensemble)(dataset, family, n_jobs=config.per_number_jobs)
        for family in families
    )
    return {ensemble.family_name: ensemble for ensemble in trained}


def build_snapshot(history, families=None, config=None):
    """
    Run the full pipeline on `history` and return a new AppSnapshot.

    Raises InsufficientHistory before any training when the history cannot
    supply a training row for the backtest.
    """
    config = config or PipelineConfig()
    families = families or default_families()
    if isinstance(families, (list, tuple)):
        families = {f.name: f for f in families}

    required = config.min_history + 1  # one more draw to hold out
    if len(history) < required:
        raise InsufficientHistory(required=required, available=len(history))

    logger.info("[Service] Backtesting %d families on %d draws...", len(families), len(history))
    result = run_backtest(
        history,
        families,
        trials_per_family=config.trials_per_family,
        short_window=config.short_window,
        mid_window=config.mid_window,
        n_jobs=config.n_jobs,
        per_number_jobs=config.per_number_jobs,
        random_state=config.random_seed,
        pad_short_sets=config.pad_short_sets,
    )

    champions = {policy: select_champion(result.scores, policy) for policy in SelectionPolicy}
    for policy, name in champions.items():
        logger.info("[Service] Champion (%s): %s", policy.name, name)

    champion_names = sorted(set(champions.values()))
    logger.info("[Service] Retraining %s on full history...", champion_names)
    ensembles = _train_champions(history, [families[n] for n in champion_names], config)

    return AppSnapshot(
        last_draw_index=history.last_draw_index,
        history=history,
        champions=champions,
        champion_scores={p: result.scores[n] for p, n in champions.items()},
        ensembles=ensembles,
        features=current_features(history, config.short_window, config.mid_window),
        # Backtest ensembles are not needed once champions are retrained
        backtest=replace(result, ensembles={}),
        config=config,
    )


def retrain(history=None, families=None, config=None, state=STATE, fetch_history=None):
    """
    Idempotent "retrain everything" entry point for schedulers.

    `history` defaults to `fetch_history()`, which defaults to refreshing the
    cached CSV from the network. Publishes to `state` only on full success;
    any error leaves the previous snapshot current and propagates.
    """
    config = config or PipelineConfig()
    try:
        if history is None:
            if fetch_history is None:
                from lotto645.scraper import update_history
                history = update_history(config.csv_path)
            else:
                history = fetch_history()
        snapshot = build_snapshot(history, families=families, config=config)
    except Exception:
        logger.error("[Service] Retrain aborted; keeping the previous snapshot", exc_info=True)
        raise
    state.publish(snapshot)
    return snapshot


# ── Persistence ──────────────────────────────────────────────────────────

def save_snapshot(snapshot, path):
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    tmp_path = path + ".tmp"
    joblib.dump(snapshot, tmp_path)
    os.replace(tmp_path, path)
    logger.info("[Service] Snapshot saved to %s", path)


def load_snapshot(path):
    """Load a saved snapshot, or None if there is none yet."""
    if not os.path.exists(path):
        return None
    return joblib.load(path)

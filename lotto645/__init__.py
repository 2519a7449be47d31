"""
Lotto 6/45 predictor.

Per-number "will this number be drawn" classifiers, compared by backtest on
the latest draw, with the champion family used to generate next-draw tickets.
"""
from lotto645.backtester import BacktestResult, ModelScore, run_backtest
from lotto645.champion import SelectionPolicy, select_champion
from lotto645.config import PipelineConfig
from lotto645.features import (
    FeatureVector,
    build_training_set,
    compute_features,
    compute_labeled_features,
    current_features,
)
from lotto645.history import DrawRecord, TicketHistory, load_history, save_history
from lotto645.models.ensemble import TrainedEnsemble, train_ensemble
from lotto645.models.families import ModelFamily, ProbabilisticClassifier, default_families
from lotto645.predictor import predict
from lotto645.rank import Rank
from lotto645.training_service import AppSnapshot, AppState, retrain

__version__ = "1.0.0"

__all__ = [
    "AppSnapshot",
    "AppState",
    "BacktestResult",
    "DrawRecord",
    "FeatureVector",
    "ModelFamily",
    "ModelScore",
    "PipelineConfig",
    "ProbabilisticClassifier",
    "Rank",
    "SelectionPolicy",
    "TicketHistory",
    "TrainedEnsemble",
    "build_training_set",
    "compute_features",
    "compute_labeled_features",
    "current_features",
    "default_families",
    "load_history",
    "predict",
    "retrain",
    "run_backtest",
    "save_history",
    "select_champion",
    "train_ensemble",
]

import random

import pytest

from lotto645.config import ALL_NUMBERS
from lotto645.history import DrawRecord, TicketHistory
from lotto645.models.ensemble import TrainedEnsemble
from lotto645.models.families import ModelFamily, ProbabilisticClassifier


def make_random_history(n_draws, seed=7):
    rng = random.Random(seed)
    records = []
    for i in range(1, n_draws + 1):
        picks = rng.sample(ALL_NUMBERS, 7)
        records.append(DrawRecord(i, frozenset(picks[:6]), picks[6]))
    return TicketHistory(records)


def make_fixed_history(n_draws, numbers=(1, 2, 3, 4, 5, 6), bonus=7):
    return TicketHistory(
        DrawRecord(i, frozenset(numbers), bonus) for i in range(1, n_draws + 1)
    )


class ConstantClassifier(ProbabilisticClassifier):
    """Ignores its training data and always predicts `probability`."""

    def __init__(self, probability=0.5):
        self.probability = probability

    def fit(self, rows, labels):
        return self

    def predict_probability(self, row):
        return self.probability


class FrequencyClassifier(ProbabilisticClassifier):
    """P(drawn) = share of the mid window the number appeared in."""

    def __init__(self, mid_window=25, invert=False):
        self.mid_window = mid_window
        self.invert = invert

    def fit(self, rows, labels):
        return self

    def predict_probability(self, row):
        # row follows FEATURE_COLUMNS: recency, freq_short, freq_mid, ...
        p = row[2] / self.mid_window
        return 1.0 - p if self.invert else p


class BrokenClassifier(ProbabilisticClassifier):
    def fit(self, rows, labels):
        raise ValueError("degenerate data")

    def predict_probability(self, row):
        raise AssertionError("never fitted")


def constant_ensemble(probabilities, name="Fixed"):
    """TrainedEnsemble from a number -> probability mapping."""
    return TrainedEnsemble(
        name, {n: ConstantClassifier(p) for n, p in probabilities.items()}
    )


@pytest.fixture
def random_history():
    return make_random_history(60)


@pytest.fixture
def frequency_families():
    return {
        "Frequency": ModelFamily("Frequency", FrequencyClassifier),
        "Inverse": ModelFamily("Inverse", lambda: FrequencyClassifier(invert=True)),
    }


@pytest.fixture
def broken_family():
    return ModelFamily("Broken", BrokenClassifier)

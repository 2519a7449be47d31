import numpy as np
import pytest

from lotto645.config import ALL_NUMBERS
from lotto645.features import current_features
from lotto645.predictor import predict, score_numbers, top_numbers, weighted_sample

from conftest import constant_ensemble, make_random_history


class ScriptedRng:
    """Stands in for a numpy Generator: uniform() returns queued fractions of the range."""

    def __init__(self, fractions):
        self.fractions = list(fractions)

    def uniform(self, low, high):
        return low + self.fractions.pop(0) * (high - low)


@pytest.fixture
def features():
    return current_features(make_random_history(40))


def linear_ensemble():
    # 45 -> highest probability, 1 -> lowest
    return constant_ensemble({n: n / 100 for n in ALL_NUMBERS})


def test_first_set_is_top_six_ascending(features):
    sets = predict(linear_ensemble(), features, sets_to_generate=1)
    assert sets == [[40, 41, 42, 43, 44, 45]]


def test_equal_probabilities_break_by_number():
    scored = [(n, 0.5) for n in (9, 3, 7, 1, 5, 2, 8)]
    assert top_numbers(scored) == [1, 2, 3, 5, 7, 8]


def test_missing_classifier_or_features_leave_the_pool(features):
    probabilities = {n: 0.1 for n in ALL_NUMBERS}
    probabilities.update({1: 0.9, 2: 0.9})
    del probabilities[1]
    ensemble = constant_ensemble(probabilities)
    partial = {n: fv for n, fv in features.items() if n != 2}

    scored = dict(score_numbers(ensemble, partial))
    assert 1 not in scored and 2 not in scored
    assert len(scored) == 43


def test_deterministic_set_ignores_randomness(features):
    ensemble = linear_ensemble()
    first = predict(ensemble, features, sets_to_generate=4, random_state=1)[0]
    second = predict(ensemble, features, sets_to_generate=4, random_state=99)[0]
    assert first == second


def test_sampled_sets_are_valid(features):
    ensemble = linear_ensemble()
    sets = predict(ensemble, features, sets_to_generate=20, random_state=5)
    assert len(sets) == 20
    for numbers in sets:
        assert len(numbers) == 6
        assert len(set(numbers)) == 6
        assert numbers == sorted(numbers)
        assert set(numbers) <= set(ALL_NUMBERS)


def test_same_seed_same_sets(features):
    ensemble = linear_ensemble()
    assert (predict(ensemble, features, 5, random_state=3)
            == predict(ensemble, features, 5, random_state=3))


def test_zero_weight_numbers_are_never_sampled(features):
    probabilities = {n: 0.0 for n in ALL_NUMBERS}
    probabilities.update({n: 0.3 for n in range(10, 20)})
    sets = predict(constant_ensemble(probabilities), features, 30, random_state=0)
    for numbers in sets[1:]:
        assert set(numbers) <= set(range(10, 20))


def test_short_set_when_weight_runs_out(features):
    probabilities = {n: 0.0 for n in ALL_NUMBERS}
    probabilities.update({3: 0.2, 17: 0.4, 30: 0.1})
    sets = predict(constant_ensemble(probabilities), features, 3, random_state=0)
    assert sets[1] == [3, 17, 30]
    assert sets[2] == [3, 17, 30]


def test_all_zero_weights_give_empty_samples(features):
    ensemble = constant_ensemble({n: 0.0 for n in ALL_NUMBERS})
    sets = predict(ensemble, features, 2, random_state=0)
    assert len(sets[0]) == 6
    assert sets[1] == []


def test_padding_fills_short_sets(features):
    probabilities = {n: 0.0 for n in ALL_NUMBERS}
    probabilities.update({3: 0.2, 17: 0.4})
    sets = predict(constant_ensemble(probabilities), features, 3,
                   random_state=0, pad_short_sets=True)
    for numbers in sets[1:]:
        assert len(numbers) == 6 and len(set(numbers)) == 6
        assert {3, 17} <= set(numbers)


def test_weighted_sample_scans_in_number_order():
    scored = [(3, 0.2), (1, 0.5), (2, 0.3)]
    # total 1.0: 0.6 lands on 2 (0.6 - 0.5 - 0.3 <= 0); then pool {1: .5, 3: .2},
    # 0.0 lands on 1; then pool {3: .2}, 0.5 lands on 3
    rng = ScriptedRng([0.6, 0.0, 0.5])
    assert weighted_sample(scored, rng, count=3) == [1, 2, 3]


def test_weighted_sample_stops_when_pool_is_exhausted():
    rng = np.random.default_rng(0)
    assert weighted_sample([(4, 0.5), (9, 0.5)], rng) == [4, 9]


def test_sets_to_generate_must_be_positive(features):
    with pytest.raises(ValueError):
        predict(linear_ensemble(), features, sets_to_generate=0)

import pytest

import lotto645.backtester
import lotto645.training_service
from lotto645.champion import SelectionPolicy
from lotto645.config import PipelineConfig
from lotto645.errors import InsufficientHistory
from lotto645.models.ensemble import train_ensemble
from lotto645.models.families import default_families
from lotto645.rank import Rank
from lotto645.training_service import (
    AppState,
    build_snapshot,
    load_snapshot,
    retrain,
    save_snapshot,
)

from conftest import make_fixed_history, make_random_history


@pytest.fixture
def config(tmp_path):
    return PipelineConfig(random_seed=0, sets_to_generate=3, data_dir=str(tmp_path))


def test_snapshot_publishes_champions(frequency_families, config):
    history = make_fixed_history(30)
    snapshot = build_snapshot(history, families=frequency_families, config=config)

    assert snapshot.last_draw_index == 30
    assert snapshot.next_draw_index == 31
    for policy in SelectionPolicy:
        assert snapshot.champions[policy] == "Frequency"
        assert snapshot.champion_scores[policy].best_rank is Rank.FIRST
    # Only champions are retrained for the future draw
    assert set(snapshot.ensembles) == {"Frequency"}
    assert set(snapshot.scores) == {"Frequency", "Inverse"}
    assert snapshot.backtest.ensembles == {}

    sets = snapshot.predict(SelectionPolicy.MOST_WINS_FIRST, random_state=1)
    assert len(sets) == 3
    assert sets[0] == [1, 2, 3, 4, 5, 6]


def test_retrain_publishes_on_success(frequency_families, config):
    state = AppState()
    assert not state.is_initialized
    snapshot = retrain(history=make_fixed_history(30), families=frequency_families,
                       config=config, state=state)
    assert state.current is snapshot


def test_failed_retrain_keeps_previous_snapshot(frequency_families, config):
    state = AppState()
    first = retrain(history=make_fixed_history(30), families=frequency_families,
                    config=config, state=state)
    with pytest.raises(InsufficientHistory):
        retrain(history=make_fixed_history(20), families=frequency_families,
                config=config, state=state)
    assert state.current is first


def test_retrain_uses_history_source(frequency_families, config):
    calls = []

    def source():
        calls.append(1)
        return make_fixed_history(30)

    state = AppState()
    retrain(families=frequency_families, config=config, state=state, fetch_history=source)
    assert calls == [1]
    assert state.current.last_draw_index == 30


def test_fetch_errors_propagate_without_publishing(frequency_families, config):
    def source():
        raise ConnectionError("offline")

    state = AppState()
    with pytest.raises(ConnectionError):
        retrain(families=frequency_families, config=config, state=state, fetch_history=source)
    assert state.current is None


def test_insufficient_history_checked_before_training(frequency_families, config):
    with pytest.raises(InsufficientHistory) as excinfo:
        build_snapshot(make_fixed_history(26), families=frequency_families, config=config)
    assert excinfo.value.required == 27


def test_snapshot_roundtrip(frequency_families, config):
    snapshot = build_snapshot(make_fixed_history(30), families=frequency_families, config=config)
    save_snapshot(snapshot, config.snapshot_path)
    loaded = load_snapshot(config.snapshot_path)
    assert loaded.champions == snapshot.champions
    assert loaded.predict(random_state=2) == snapshot.predict(random_state=2)


def test_load_missing_snapshot(tmp_path):
    assert load_snapshot(str(tmp_path / "none.joblib")) is None


def test_real_families_end_to_end(config):
    families = {name: f for name, f in default_families().items()
                if name in ("Logistic", "DecisionTree_Pruned", "DecisionTree_Unpruned")}
    snapshot = build_snapshot(make_random_history(45), families=families, config=config)

    # Logistic may legitimately fail on numbers never drawn in the short window
    assert set(snapshot.scores) | set(snapshot.backtest.failures) == set(families)
    assert {"DecisionTree_Pruned", "DecisionTree_Unpruned"} <= set(snapshot.scores)
    for policy in SelectionPolicy:
        sets = snapshot.predict(policy, random_state=0)
        assert len(sets) == 3
        assert len(sets[0]) == 6
        probs = snapshot.probabilities(policy)
        assert all(0.0 <= p <= 1.0 for _, p in probs)


def test_per_number_jobs_reaches_every_training_call(frequency_families, tmp_path,
                                                     monkeypatch):
    seen = []

    def recording_train(dataset, family, n_jobs=1):
        seen.append((family.name, n_jobs))
        return train_ensemble(dataset, family, n_jobs=1)

    monkeypatch.setattr(lotto645.backtester, "train_ensemble", recording_train)
    monkeypatch.setattr(lotto645.training_service, "train_ensemble", recording_train)

    config = PipelineConfig(random_seed=0, per_number_jobs=3, data_dir=str(tmp_path))
    build_snapshot(make_fixed_history(30), families=frequency_families, config=config)

    # Two backtest fits plus the champion refit
    assert sorted(seen) == [("Frequency", 3), ("Frequency", 3), ("Inverse", 3)]

import pytest

from lotto645.backtester import format_summary, results_frame, run_backtest, save_results, scores_frame
from lotto645.errors import InsufficientHistory, NoCandidateFamilies
from lotto645.rank import Rank

from conftest import make_fixed_history


@pytest.fixture
def repeating_history():
    # Every draw is 1-6 + bonus 7, so the frequency family nails the held-out draw
    return make_fixed_history(30)


def test_scores_each_family(repeating_history, frequency_families):
    result = run_backtest(repeating_history, frequency_families, trials_per_family=3,
                          random_state=0)

    assert result.actual == repeating_history.last
    assert result.predictions["Frequency"] == [[1, 2, 3, 4, 5, 6]] * 3
    assert result.ranks["Frequency"] == [Rank.FIRST] * 3
    assert result.scores["Frequency"].best_rank is Rank.FIRST
    assert result.scores["Frequency"].total_wins == 3

    assert all(not set(s) & {1, 2, 3, 4, 5, 6} for s in result.predictions["Inverse"])
    assert result.scores["Inverse"].best_rank is Rank.NONE
    assert result.scores["Inverse"].total_wins == 0
    assert set(result.ensembles) == {"Frequency", "Inverse"}


def test_failed_family_does_not_stop_siblings(repeating_history, frequency_families,
                                              broken_family):
    families = list(frequency_families.values()) + [broken_family]
    result = run_backtest(repeating_history, families, random_state=0)
    assert set(result.scores) == {"Frequency", "Inverse"}
    assert set(result.failures) == {"Broken"}
    assert result.failures["Broken"].number == 1


def test_all_families_failing(repeating_history, broken_family):
    with pytest.raises(NoCandidateFamilies):
        run_backtest(repeating_history, [broken_family])


def test_no_families(repeating_history):
    with pytest.raises(NoCandidateFamilies):
        run_backtest(repeating_history, [])


def test_history_too_short(frequency_families):
    # 26 draws: 25 left after the hold-out, which yields no training row
    with pytest.raises(InsufficientHistory):
        run_backtest(make_fixed_history(26), frequency_families)


def test_same_seed_same_trials(random_history, frequency_families):
    first = run_backtest(random_history, frequency_families, random_state=4)
    second = run_backtest(random_history, frequency_families, random_state=4)
    assert first.predictions == second.predictions


def test_reports(repeating_history, frequency_families, broken_family, tmp_path):
    families = list(frequency_families.values()) + [broken_family]
    result = run_backtest(repeating_history, families, random_state=0)

    frame = results_frame(result)
    assert len(frame) == 6
    assert set(frame["rank"]) == {"FIRST", "NONE"}

    summary = scores_frame(result)
    assert list(summary["family"]) == ["Broken", "Frequency", "Inverse"]

    text = "\n".join(format_summary(result))
    assert "Held-out draw #30" in text
    assert "Broken: FAILED" in text

    path = tmp_path / "out" / "backtest.csv"
    save_results(result, str(path))
    assert path.exists()

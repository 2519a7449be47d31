import json

from lotto645.config import PipelineConfig
from lotto645.history import DrawRecord, TicketHistory
from lotto645.prediction_log import append_entries, load_log, score_log, snapshot_entries
from lotto645.training_service import build_snapshot

from conftest import make_fixed_history


def entry(target, tickets, strategy="BEST_RANK_FIRST"):
    return {"date_predicted": "2024-01-01 10:00", "target_draw_number": target,
            "strategy": strategy, "family": "Logistic", "tickets": json.dumps(tickets),
            "best_rank": None, "wins": None}


def test_scores_rows_once_their_draw_exists(tmp_path):
    path = str(tmp_path / "log.csv")
    append_entries(path, [
        entry(2, [[1, 2, 3, 4, 5, 7], [1, 2, 3, 20, 21, 22]]),
        entry(3, [[1, 2, 3, 4, 5, 6]]),
    ])
    history = TicketHistory([
        DrawRecord(1, {10, 11, 12, 13, 14, 15}, 16),
        DrawRecord(2, {1, 2, 3, 4, 5, 6}, 7),
    ])
    scored, count = score_log(load_log(path), history)
    assert count == 1
    assert scored.loc[0, "best_rank"] == "SECOND"
    assert scored.loc[0, "wins"] == 2
    assert scored.isna().loc[1, "best_rank"]

    # Already-scored rows are left alone
    _, again = score_log(scored, history)
    assert again == 0


def test_snapshot_entries_cover_both_strategies(frequency_families, tmp_path):
    config = PipelineConfig(random_seed=0, data_dir=str(tmp_path))
    snapshot = build_snapshot(make_fixed_history(30), families=frequency_families, config=config)
    entries = snapshot_entries(snapshot, random_state=0)
    assert [e["strategy"] for e in entries] == ["BEST_RANK_FIRST", "MOST_WINS_FIRST"]
    assert all(e["target_draw_number"] == 31 for e in entries)
    assert json.loads(entries[0]["tickets"])[0] == [1, 2, 3, 4, 5, 6]

    log_df = append_entries(config.predictions_log, entries)
    assert len(log_df) == 2

import importlib.util
import os

import pytest

SCRIPT = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
                      "scripts", "run_prediction.py")


@pytest.fixture
def run_prediction():
    spec = importlib.util.spec_from_file_location("run_prediction", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_short_history_exits_cleanly(run_prediction, tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("LOTTO645_DATA_DIR", str(tmp_path))
    assert run_prediction.main(["--no-save"]) == 1
    assert "Training failed" in capsys.readouterr().out


def test_unknown_family_is_rejected(run_prediction, tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("LOTTO645_DATA_DIR", str(tmp_path))
    assert run_prediction.main(["--families", "Nope"]) == 2
    assert "Unknown families" in capsys.readouterr().out

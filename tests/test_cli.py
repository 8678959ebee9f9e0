from __future__ import annotations

from pathlib import Path

from user_cf.cli import main


def _config(tmp_path: Path, dataset: Path, trials: int = 3) -> Path:
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        f"dataset:\n  path: {dataset}\n"
        f"user_cf:\n  user_id: 2\n  top_n: 3\n  trials: {trials}\n  seed: 5\n"
    )
    return cfg_path


def test_cli_prints_recommendations_and_scores(tmp_path: Path, example_dataset: Path, capsys) -> None:
    code = main(["--config", str(_config(tmp_path, example_dataset))])

    out = capsys.readouterr().out
    assert code == 0
    assert "Recommendations for user #2" in out
    assert "item_id" in out
    for i in range(3):
        assert f"Score {i}: " in out
    assert "Score 3: " not in out


def test_cli_flags_override_config(tmp_path: Path, example_dataset: Path, capsys) -> None:
    code = main(["--config", str(_config(tmp_path, example_dataset)), "--trials", "1", "--user-id", "1"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Recommendations for user #1" in out
    assert "Score 1: " not in out


def test_cli_malformed_dataset_exits_non_zero(tmp_path: Path, capsys) -> None:
    bad = tmp_path / "bad.csv"
    bad.write_text("1,10,1.0\nnot,a,record\n")

    assert main(["--config", str(_config(tmp_path, bad))]) == 1
    assert "Score" not in capsys.readouterr().out


def test_cli_unknown_user_exits_non_zero(tmp_path: Path, example_dataset: Path) -> None:
    assert main(["--config", str(_config(tmp_path, example_dataset)), "--user-id", "999"]) == 1


def test_cli_missing_config_exits_non_zero(tmp_path: Path) -> None:
    assert main(["--config", str(tmp_path / "missing.yaml")]) == 1


def test_cli_invalid_override_exits_non_zero(tmp_path: Path, example_dataset: Path, capsys) -> None:
    assert main(["--config", str(_config(tmp_path, example_dataset)), "--top-n", "0"]) == 1
    assert "Recommendations" not in capsys.readouterr().out

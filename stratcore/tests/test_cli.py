from __future__ import annotations

import json

from stratcore.cli import main


def test_presets_lists_every_preset(capsys) -> None:
    assert main(["presets"]) == 0
    out = capsys.readouterr().out
    assert "williams_renko\tmomentum_threshold" in out
    assert "supertrend_renko\ttrend_following" in out


def test_validate_prints_resolved_config(tmp_path, capsys) -> None:
    overrides = tmp_path / "es.json"
    overrides.write_text(json.dumps({"quantity": 2}), encoding="utf-8")

    assert main(["validate", "--preset", "supertrend_renko", "--config", str(overrides)]) == 0
    resolved = json.loads(capsys.readouterr().out)
    assert resolved["variant"] == "trend_following"
    assert resolved["quantity"] == 2
    assert resolved["orders"]["trail_stop_ticks"] is None


def test_validate_reports_bad_field(tmp_path, capsys) -> None:
    overrides = tmp_path / "bad.json"
    overrides.write_text(json.dumps({"indicators": {"williams_r_period": -1}}), encoding="utf-8")

    assert main(["validate", "--config", str(overrides)]) == 1
    assert "indicators.williams_r_period" in capsys.readouterr().err


def test_validate_reports_missing_file(tmp_path, capsys) -> None:
    assert main(["validate", "--config", str(tmp_path / "missing.json")]) == 1
    assert "[FAIL]" in capsys.readouterr().err

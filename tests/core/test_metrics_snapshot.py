import json

from core.metrics import write_run_snapshot


def test_snapshot_disabled_by_default(tmp_path):
    target = write_run_snapshot({"engine": "odds"})
    assert target == tmp_path / "metrics" / "last_run.json"
    assert not target.exists()


def test_snapshot_written_when_enabled(monkeypatch, tmp_path):
    monkeypatch.setenv("ENABLE_METRICS_FILE", "1")
    target = write_run_snapshot({"engine": "statarea", "stats": {"selected_picks": 3}})
    assert target.exists()
    assert json.loads(target.read_text(encoding="utf-8"))["stats"]["selected_picks"] == 3
    assert not target.with_suffix(".json.tmp").exists()

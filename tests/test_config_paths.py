from __future__ import annotations

import os
from pathlib import Path
from unittest import mock

from shared.config import paths


def test_data_root_env_override(tmp_path):
    with mock.patch.dict(os.environ, {"MA_DATA_ROOT": str(tmp_path)}):
        assert paths.get_data_root() == tmp_path
        assert paths.get_processed_root() == tmp_path / "processed"


def test_chart_snapshot_defaults(tmp_path):
    env = {k: v for k, v in os.environ.items() if k not in ("MA_CHART_NDJSON", "MA_CHART_CSV", "MA_CHART_CONFIG")}
    env["MA_DATA_ROOT"] = str(tmp_path)
    with mock.patch.dict(os.environ, env, clear=True):
        assert paths.get_chart_ndjson_path() == tmp_path / "processed" / "billboard_full.ndjson"
        assert paths.get_chart_csv_candidates() == [tmp_path / "processed" / "temp_dataset.csv", Path("temp_dataset.csv")]
        assert paths.get_chart_config_path() is None


def test_snapshot_env_overrides(tmp_path):
    env = {
        "MA_CHART_NDJSON": str(tmp_path / "x.ndjson"),
        "MA_CHART_CSV": "temp_dataset.csv",
        "MA_CHART_CONFIG": str(tmp_path / "chart.json"),
    }
    with mock.patch.dict(os.environ, env):
        assert paths.get_chart_ndjson_path() == tmp_path / "x.ndjson"
        assert paths.get_chart_csv_candidates() == [Path("temp_dataset.csv")]
        assert paths.get_chart_config_path() == tmp_path / "chart.json"


def test_repo_root_holds_shared_package():
    assert (paths.get_repo_root() / "shared" / "config" / "paths.py").exists()

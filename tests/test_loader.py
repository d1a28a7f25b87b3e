from __future__ import annotations

import json

import pytest
import requests

from ma_chart_engine import loader
from ma_chart_engine.errors import DatasetLoadError
from ma_chart_engine.settings import ChartSettings


class _FakeResponse:
    def __init__(self, text: str, status_code: int = 200) -> None:
        self.text = text
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")


def _ndjson(rows):
    return "\n".join(json.dumps(r) for r in rows)


def test_read_ndjson_skips_bad_lines():
    messages = []
    text = '{"date": "2000-01-01", "rank": 1}\n\nnot json\n[1, 2]\n{"date": "2000-01-08", "rank": 2}\n'
    rows = loader.read_ndjson_lines(text, log=messages.append)
    assert [r["rank"] for r in rows] == [1, 2]
    assert messages == ["[WARN] skipped 2 invalid NDJSON line(s)"]


def test_read_csv_empty_cells_become_none():
    rows = loader.read_csv_text("date,rank,track_name,artists,country\n2000-01-01,1,Song,,US\n")
    assert rows == [{"date": "2000-01-01", "rank": "1", "track_name": "Song", "artists": None, "country": "US"}]
    assert loader.read_csv_text("   ") == []


def test_load_records_picks_reader_by_suffix(tmp_path):
    nd = tmp_path / "charts.ndjson"
    nd.write_text(_ndjson([{"date": "2000-01-01", "rank": 1}]), encoding="utf-8")
    csv = tmp_path / "charts.csv"
    csv.write_text("date,rank\n2000-01-01,3\n", encoding="utf-8")
    assert loader.load_records(nd) == [{"date": "2000-01-01", "rank": 1}]
    assert loader.load_records(str(csv)) == [{"date": "2000-01-01", "rank": "3"}]


def test_first_existing_candidate_wins(tmp_path):
    missing = tmp_path / "missing.csv"
    present = tmp_path / "temp_dataset.csv"
    present.write_text("date,rank\n2000-01-01,1\n", encoding="utf-8")
    assert loader.first_existing([missing, present]) == present
    assert loader.first_existing([missing]) == missing
    with pytest.raises(DatasetLoadError):
        loader.first_existing([])


def test_missing_file_raises(tmp_path):
    with pytest.raises(DatasetLoadError):
        loader.load_records(tmp_path / "nope.ndjson")


def test_url_fetch_uses_timeout(monkeypatch):
    calls = {}

    def fake_get(url, timeout):
        calls["url"] = url
        calls["timeout"] = timeout
        return _FakeResponse(_ndjson([{"date": "2000-01-01", "rank": 1}]))

    monkeypatch.setattr(loader.requests, "get", fake_get)
    rows = loader.load_records("https://example.org/data/billboard.ndjson?v=2", timeout=5.0)
    assert rows == [{"date": "2000-01-01", "rank": 1}]
    assert calls == {"url": "https://example.org/data/billboard.ndjson?v=2", "timeout": 5.0}


def test_url_csv_suffix_detection(monkeypatch):
    monkeypatch.setattr(loader.requests, "get", lambda url, timeout: _FakeResponse("date,rank\n2000-01-01,1\n"))
    assert loader.load_records("http://example.org/temp_dataset.csv") == [{"date": "2000-01-01", "rank": "1"}]


def test_http_error_status_raises(monkeypatch):
    monkeypatch.setattr(loader.requests, "get", lambda url, timeout: _FakeResponse("", status_code=404))
    with pytest.raises(DatasetLoadError, match="404 Client Error"):
        loader.load_records("https://example.org/missing.ndjson")


def test_non_200_success_status_is_accepted(monkeypatch):
    body = _ndjson([{"date": "2000-01-01", "rank": 1}])
    monkeypatch.setattr(loader.requests, "get", lambda url, timeout: _FakeResponse(body, status_code=203))
    assert loader.load_records("https://example.org/mirror.ndjson") == [{"date": "2000-01-01", "rank": 1}]


def test_network_error_raises(monkeypatch):
    def boom(url, timeout):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(loader.requests, "get", boom)
    with pytest.raises(DatasetLoadError, match="failed to fetch"):
        loader.load_records("https://example.org/x.ndjson")


def test_load_dataset_builds_core(tmp_path):
    path = tmp_path / "charts.ndjson"
    path.write_text(
        _ndjson(
            [
                {"date": "2000-01-01", "rank": 1, "name": "A", "country": "US"},
                {"date": "2000-01-08", "rank": 1, "name": "A", "country": "GB"},
            ]
        ),
        encoding="utf-8",
    )
    messages = []
    dataset = loader.load_dataset(path, settings=ChartSettings(), log=messages.append)
    assert len(dataset.weeks) == 2
    assert dataset.metrics_for(1).non_domestic_share == 1.0


def test_load_dataset_or_empty_logs_and_recovers(tmp_path):
    messages = []
    dataset = loader.load_dataset_or_empty(tmp_path / "nope.ndjson", settings=ChartSettings(), log=messages.append)
    assert dataset.is_empty
    assert any(m.startswith("[ERROR] dataset load failed") for m in messages)
    assert not dataset.timeline().controls_enabled


def test_undecodable_file_raises_load_error(tmp_path):
    path = tmp_path / "charts.ndjson"
    path.write_bytes(b'{"date": "2000-01-01", "rank": 1, "name": "\xff\xfe"}\n')
    with pytest.raises(DatasetLoadError, match="failed to read"):
        loader.load_records(path)


def test_undecodable_file_falls_back_to_empty_dataset(tmp_path):
    path = tmp_path / "charts.ndjson"
    path.write_bytes(b'{"date": "2000-01-01", "rank": 1, "name": "\xff\xfe"}\n')
    messages = []
    dataset = loader.load_dataset_or_empty(path, settings=ChartSettings(), log=messages.append)
    assert dataset.is_empty
    assert any(m.startswith("[ERROR] dataset load failed") for m in messages)

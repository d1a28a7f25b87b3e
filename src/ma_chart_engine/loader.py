"""
Dataset loading: NDJSON/CSV from a local path or an http(s) URL.

Usage:
- `load_records("data/processed/billboard_full.ndjson")` -> list of raw dicts.
- `load_dataset(settings=load_chart_settings(view="geographic"))` tries the
  view's candidate sources in order and builds a ChartDataset.
- `load_dataset_or_empty(...)` logs the failure and returns an empty dataset
  (the views keep their controls disabled instead of crashing).

Notes:
- Bad NDJSON lines are skipped with one aggregate warning.
- CSV goes through pandas with every column read as text; empty cells become None.
- Reader choice is by suffix (.ndjson/.jsonl/.json vs .csv); unknown suffixes
  are read as NDJSON.
"""
from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
from urllib.parse import urlparse

import pandas as pd
import requests

from ma_chart_engine.dataset import ChartDataset
from ma_chart_engine.errors import DatasetLoadError
from ma_chart_engine.settings import ChartSettings, load_chart_settings
from shared.ma_utils.logger_factory import get_configured_logger

__all__ = [
    "first_existing",
    "is_url",
    "load_csv",
    "load_dataset",
    "load_dataset_or_empty",
    "load_ndjson",
    "load_records",
    "read_csv_text",
    "read_ndjson_lines",
]

Source = Union[str, Path]
LogFn = Callable[[str], None]

_CSV_SUFFIXES = {".csv"}


def _default_log() -> LogFn:
    return get_configured_logger("chart_loader")


def is_url(source: Source) -> bool:
    return urlparse(str(source)).scheme in ("http", "https")


def _suffix(source: Source) -> str:
    path = urlparse(str(source)).path if is_url(source) else str(source)
    return Path(path).suffix.lower()


def _fetch_text(url: str, timeout: float) -> str:
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.HTTPError as exc:
        raise DatasetLoadError(f"HTTP error fetching {url}: {exc}") from exc
    except requests.RequestException as exc:
        raise DatasetLoadError(f"failed to fetch {url}: {exc}") from exc
    return resp.text


def _read_text(source: Source, timeout: float) -> str:
    if is_url(source):
        return _fetch_text(str(source), timeout)
    try:
        return Path(source).expanduser().read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DatasetLoadError(f"failed to read {source}: {exc}") from exc


def read_ndjson_lines(text: str, log: Optional[LogFn] = None) -> List[Dict[str, Any]]:
    """Parse one JSON object per line; blank, invalid and non-object lines are skipped."""
    rows: List[Dict[str, Any]] = []
    bad = 0
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        try:
            parsed = json.loads(stripped)
        except ValueError:
            bad += 1
            continue
        if isinstance(parsed, dict):
            rows.append(parsed)
        else:
            bad += 1
    if bad and log is not None:
        log(f"[WARN] skipped {bad} invalid NDJSON line(s)")
    return rows


def read_csv_text(text: str) -> List[Dict[str, Any]]:
    if not text.strip():
        return []
    try:
        df = pd.read_csv(io.StringIO(text), dtype=str)
    except (ValueError, pd.errors.ParserError) as exc:
        raise DatasetLoadError(f"failed to parse CSV: {exc}") from exc
    df = df.astype(object).where(df.notna(), None)
    return df.to_dict(orient="records")


def load_ndjson(source: Source, timeout: float = 30.0, log: Optional[LogFn] = None) -> List[Dict[str, Any]]:
    return read_ndjson_lines(_read_text(source, timeout), log=log)


def load_csv(source: Source, timeout: float = 30.0, log: Optional[LogFn] = None) -> List[Dict[str, Any]]:
    rows = read_csv_text(_read_text(source, timeout))
    if log is not None:
        log(f"[INFO] read {len(rows)} CSV row(s) from {source}")
    return rows


def first_existing(candidates: Sequence[Source]) -> Source:
    """First URL or existing path among candidates; the last candidate when none exist."""
    if not candidates:
        raise DatasetLoadError("no data source configured")
    for candidate in candidates:
        if is_url(candidate) or Path(candidate).expanduser().exists():
            return candidate
    return candidates[-1]


def load_records(
    source: Union[Source, Sequence[Source]],
    timeout: float = 30.0,
    log: Optional[LogFn] = None,
) -> List[Dict[str, Any]]:
    candidates = [source] if isinstance(source, (str, Path)) else list(source)
    chosen = first_existing(candidates)
    if _suffix(chosen) in _CSV_SUFFIXES:
        return load_csv(chosen, timeout=timeout, log=log)
    return load_ndjson(chosen, timeout=timeout, log=log)


def load_dataset(
    source: Optional[Union[Source, Sequence[Source]]] = None,
    settings: Optional[ChartSettings] = None,
    log: Optional[LogFn] = None,
) -> ChartDataset:
    settings = settings or load_chart_settings()
    log = log or _default_log()
    target = source if source is not None else settings.data_candidates()
    raws = load_records(target, timeout=settings.http_timeout, log=log)
    return ChartDataset.build(raws, settings=settings, log=log)


def load_dataset_or_empty(
    source: Optional[Union[Source, Sequence[Source]]] = None,
    settings: Optional[ChartSettings] = None,
    log: Optional[LogFn] = None,
) -> ChartDataset:
    settings = settings or load_chart_settings()
    log = log or _default_log()
    try:
        return load_dataset(source, settings=settings, log=log)
    except DatasetLoadError as exc:
        log(f"[ERROR] dataset load failed: {exc}")
        return ChartDataset.empty(settings)

"""
Repo-wide path helpers with env overrides.

Env overrides:
- MA_DATA_ROOT: base data directory (default: <repo>/data).
- MA_CHART_NDJSON: override for the Billboard NDJSON snapshot.
- MA_CHART_CSV: override for the geographic view CSV snapshot.
- MA_CHART_CONFIG: optional JSON file with ChartSettings overrides.

Side effects: none; pure path resolution helpers (expanduser on env paths). Keep
callers using these instead of hard-coded paths so env overrides keep working.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional


def _env_path(name: str, default: Path) -> Path:
    """Return a Path from an env override if set, else the provided default."""
    val = os.getenv(name)
    return Path(val).expanduser() if val else default


def get_repo_root() -> Path:
    """Resolve the repo root (two levels above this file)."""
    return Path(__file__).resolve().parents[2]


def get_data_root() -> Path:
    """Base data directory (env MA_DATA_ROOT, default <repo>/data)."""
    return _env_path("MA_DATA_ROOT", get_repo_root() / "data")


def get_processed_root(data_root: Path | None = None) -> Path:
    """Processed dataset snapshots (default <data>/processed)."""
    return (data_root or get_data_root()) / "processed"


def get_chart_ndjson_path(data_root: Path | None = None) -> Path:
    """Billboard + origin NDJSON snapshot (env MA_CHART_NDJSON)."""
    default = get_processed_root(data_root) / "billboard_full.ndjson"
    return _env_path("MA_CHART_NDJSON", default)


def get_chart_csv_path(data_root: Path | None = None) -> Path:
    """Geographic view CSV snapshot (env MA_CHART_CSV)."""
    default = get_processed_root(data_root) / "temp_dataset.csv"
    return _env_path("MA_CHART_CSV", default)


def get_chart_csv_candidates(data_root: Path | None = None) -> List[Path]:
    """Ordered fallback list for the geographic CSV (first existing wins)."""
    primary = get_chart_csv_path(data_root)
    fallback = Path("temp_dataset.csv")
    return [primary] if primary == fallback else [primary, fallback]


def get_chart_config_path() -> Optional[Path]:
    """Optional ChartSettings JSON (env MA_CHART_CONFIG); None when unset."""
    val = os.getenv("MA_CHART_CONFIG")
    return Path(val).expanduser() if val else None

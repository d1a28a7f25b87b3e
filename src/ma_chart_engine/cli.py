"""
ma-chart-report: print weekly origin metrics from a chart snapshot.

Usage:
    ma-chart-report --data data/processed/billboard_full.ndjson
    ma-chart-report --view geographic --week 1999-07-03 --format json
    ma-chart-report --data https://example.org/charts.ndjson --format csv > metrics.csv
    ma-chart-report --year 1999

Exit codes: 0 ok, 1 load/config failure or unknown week/year.
"""
from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

import pandas as pd

from ma_chart_engine.dataset import METRIC_COLUMNS, ChartDataset
from ma_chart_engine.errors import ChartEngineError
from ma_chart_engine.loader import load_dataset
from ma_chart_engine.settings import VIEW_PROFILES, load_chart_settings
from ma_chart_engine.sparklines import MISSING, format_integer, format_number, format_percent
from shared.ma_utils.logger_factory import get_configured_logger

__all__ = ["build_parser", "main"]


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Weekly origin metrics for a Billboard chart snapshot.")
    ap.add_argument("--data", default=None, help="NDJSON/CSV path or http(s) URL (default: per-view snapshot).")
    ap.add_argument("--view", default=None, choices=sorted(VIEW_PROFILES), help="View profile (default globalization).")
    ap.add_argument("--config", default=None, help="Optional JSON settings file.")
    ap.add_argument("--start-date", dest="start_date", default=None, help="Drop weeks before this ISO date ('none' disables).")
    ap.add_argument("--top-n", dest="top_n", type=int, default=None, help="Rows per week that carry weight (default 100).")
    ap.add_argument("--home", dest="home_country", default=None, help="Home country code (default US).")
    ap.add_argument("--week", default=None, help="Only report this ISO chart date.")
    ap.add_argument("--year", type=int, default=None, help="Print the top tracks of a calendar year instead.")
    ap.add_argument("--limit", type=int, default=10, help="Rows for --year (default 10).")
    ap.add_argument("--format", dest="fmt", default="text", choices=["text", "csv", "json"])
    ap.add_argument("--log-json", dest="log_json", action="store_true", help="Structured JSON logs on stderr.")
    return ap


def _metric_row(dataset: ChartDataset, week_index: int) -> Dict[str, Any]:
    row: Dict[str, Any] = {"week_index": week_index, "date": dataset.weeks.date_at(week_index)}
    row.update(dataset.metrics_for(week_index).as_dict())
    return row


def _text_report(dataset: ChartDataset, rows: List[dict]) -> str:
    lines = [
        f"{'week':>5}  {'date':<10}  {'non-dom':>8}  {'origins':>7}  {'H':>5}  {'collab%':>7}  {'cum':>4}"
    ]
    for row in rows:
        lines.append(
            f"{row['week_index']:>5}  {row['date']:<10}  "
            f"{format_percent(row['non_domestic_share']):>8}  "
            f"{format_integer(row['unique_origin_count']):>7}  "
            f"{format_number(row['entropy'], 2):>5}  "
            f"{format_number(row['collaboration_rate_pct'], 1):>7}  "
            f"{format_integer(row['cumulative_origins_so_far']):>4}"
        )
    lines.append(f"{len(dataset.weeks)} week(s), {len(dataset.entries)} row(s)")
    return "\n".join(lines)


def _year_report(dataset: ChartDataset, year: int, limit: int, fmt: str) -> Optional[str]:
    ranked = dataset.rolling.top_tracks_for_year(year, limit)
    if not ranked:
        return None
    names = {e.track_id: e for e in dataset.entries}
    rows = [
        {
            "track_id": track_id,
            "peak_rank": rank,
            "name": names[track_id].name,
            "artists": ", ".join(names[track_id].artists),
        }
        for track_id, rank in ranked
    ]
    if fmt == "json":
        return json.dumps(rows, indent=2)
    if fmt == "csv":
        return pd.DataFrame(rows).to_csv(index=False).rstrip("\n")
    return "\n".join(f"#{r['peak_rank']:<3} {r['name']} - {r['artists'] or MISSING}" for r in rows)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    log = get_configured_logger("ma-chart-report", args=args)

    try:
        settings = load_chart_settings(args, log=log)
        dataset = load_dataset(settings=settings, log=log)
    except ChartEngineError as exc:
        log(f"[ERROR] {exc}")
        return 1

    if args.year is not None:
        report = _year_report(dataset, args.year, args.limit, args.fmt)
        if report is None:
            log(f"[ERROR] no chart rows for year {args.year}")
            return 1
        print(report)
        return 0

    if args.week:
        week_index = dataset.weeks.index_of(args.week)
        if week_index is None:
            log(f"[ERROR] week {args.week} not in dataset")
            return 1
        indices = [week_index]
    else:
        indices = list(range(len(dataset.weeks)))
    rows = [_metric_row(dataset, idx) for idx in indices]

    if args.fmt == "csv":
        print(pd.DataFrame.from_records(rows, columns=METRIC_COLUMNS).to_csv(index=False).rstrip("\n"))
    elif args.fmt == "json":
        print(json.dumps(rows, indent=2))
    else:
        print(_text_report(dataset, rows))
    return 0


if __name__ == "__main__":
    sys.exit(main())

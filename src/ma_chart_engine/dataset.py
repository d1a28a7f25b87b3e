"""
ChartDataset: the read-only core a view builds once after loading.

Build order (each stage consumes the previous one's immutable output):
  normalize -> WeekIndex -> resolve week indices -> WeekBucketStore
  -> OriginShareAggregator.compute_all -> RollingWindowQuery / ChoroplethQuery

Usage:
    dataset = ChartDataset.build(raw_rows, settings=load_chart_settings(view="globalization"))
    dataset.metrics_for(dataset.weeks.index_of("2019-06-01"))
    timeline = dataset.timeline(render=draw_week)

Notes:
- Skipped rows are logged once per reason, never per row.
- An empty dataset is valid: every query returns empty/zero results and the
  timeline reports `controls_enabled == False`.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional

import pandas as pd

from ma_chart_engine.choropleth import ChoroplethQuery
from ma_chart_engine.origin_shares import OriginShareAggregator, OriginShareTable, WeeklyMetrics
from ma_chart_engine.pins import GeoPin, GlobalPin, geographic_pins, globalization_pins
from ma_chart_engine.records import ChartEntry, normalize_records_with_report
from ma_chart_engine.rolling import RollingWindowQuery
from ma_chart_engine.settings import ChartSettings
from ma_chart_engine.sparklines import Sparkline, build_sparklines
from ma_chart_engine.timeline import TimelineController
from ma_chart_engine.weeks import WeekBucketStore, WeekIndex
from shared.ma_utils.logger_factory import get_configured_logger
from shared.ma_utils.logging_adapter import log_stage_end, log_stage_start

__all__ = ["ChartDataset"]

METRIC_COLUMNS = [
    "week_index",
    "date",
    "non_domestic_share",
    "unique_origin_count",
    "entropy",
    "collaboration_rate_pct",
    "cumulative_origins_so_far",
]


class ChartDataset:
    def __init__(
        self,
        settings: ChartSettings,
        entries: List[ChartEntry],
        weeks: WeekIndex,
        store: WeekBucketStore,
        table: OriginShareTable,
        skipped: Optional[Dict[str, int]] = None,
    ) -> None:
        self.settings = settings
        self.entries = entries
        self.weeks = weeks
        self.store = store
        self.table = table
        self.skipped = dict(skipped or {})
        self.rolling = RollingWindowQuery(entries)
        self.choropleth = ChoroplethQuery(table, home_country=settings.home_country)
        self._sparklines: Optional[Dict[str, Sparkline]] = None

    @classmethod
    def build(
        cls,
        raws: Iterable[Any],
        settings: Optional[ChartSettings] = None,
        log: Optional[Callable] = None,
    ) -> "ChartDataset":
        settings = settings or ChartSettings()
        log = log or get_configured_logger("chart_dataset")

        log_stage_start(log, "normalize", view=settings.view)
        normalized, skipped = normalize_records_with_report(raws, settings.normalize_options())
        for reason, count in sorted(skipped.items(), key=lambda item: item[0].value):
            log(f"[WARN] skipped {count} row(s): {reason.value}")
        log_stage_end(log, "normalize", rows=len(normalized), skipped=sum(skipped.values()))

        log_stage_start(log, "index_weeks")
        weeks = WeekIndex.from_entries(normalized)
        entries = weeks.resolve(normalized)
        store = WeekBucketStore(entries, len(weeks))
        log_stage_end(log, "index_weeks", weeks=len(weeks))

        log_stage_start(log, "origin_metrics", top_n=settings.top_n, home=settings.home_country)
        aggregator = OriginShareAggregator(top_n=settings.top_n, home_country=settings.home_country)
        table = aggregator.compute_all(store)
        log_stage_end(log, "origin_metrics", weeks=len(table.metrics))

        return cls(
            settings=settings,
            entries=entries,
            weeks=weeks,
            store=store,
            table=table,
            skipped={reason.value: count for reason, count in skipped.items()},
        )

    @classmethod
    def empty(cls, settings: Optional[ChartSettings] = None) -> "ChartDataset":
        settings = settings or ChartSettings()
        weeks = WeekIndex([])
        return cls(
            settings=settings,
            entries=[],
            weeks=weeks,
            store=WeekBucketStore([], 0),
            table=OriginShareTable(weeks=(), metrics=()),
        )

    def __len__(self) -> int:
        return len(self.weeks)

    @property
    def is_empty(self) -> bool:
        return len(self.weeks) == 0

    def get_week_rows(self, week_index: int):
        return self.store.get_week_rows(week_index)

    def metrics_for(self, week_index: int) -> WeeklyMetrics:
        return self.table.metrics_for(week_index)

    def metrics_frame(self) -> pd.DataFrame:
        """One row per week with the derived metrics (empty frame with columns when no data)."""
        records = []
        for idx, iso in enumerate(self.weeks.dates):
            row: Dict[str, Any] = {"week_index": idx, "date": iso}
            row.update(self.table.metrics_for(idx).as_dict())
            records.append(row)
        return pd.DataFrame.from_records(records, columns=METRIC_COLUMNS)

    def sparklines(self) -> Dict[str, Sparkline]:
        if self._sparklines is None:
            self._sparklines = build_sparklines(self.weeks, self.table)
        return self._sparklines

    def globalization_pins(self, week_index: int, group_by: str = "region") -> List[GlobalPin]:
        return globalization_pins(
            self.store,
            week_index,
            top_k=self.settings.top_pin_n,
            window_weeks=self.settings.window_weeks,
            group_by=group_by,
        )

    def geographic_pins(self, week_index: int) -> List[GeoPin]:
        return geographic_pins(self.store, week_index, window_weeks=self.settings.window_weeks)

    def timeline(self, render: Optional[Callable[[int], None]] = None, **kwargs) -> TimelineController:
        kwargs.setdefault("speed_ms", self.settings.speed_ms)
        kwargs.setdefault("start_at_latest", self.settings.start_at_latest)
        if self.settings.view == "universe":
            kwargs.setdefault("max_week_index", self.rolling.last_full_window_index(self.weeks))
        return TimelineController.from_week_index(self.weeks, render=render, **kwargs)

"""
Chart data core: record normalization, week indexing, origin-share metrics,
rolling peak-rank queries and timeline playback state for the chart views.
"""
from ma_chart_engine.choropleth import ChoroplethFrame, ChoroplethQuery
from ma_chart_engine.dataset import ChartDataset
from ma_chart_engine.errors import ChartConfigError, ChartEngineError, DatasetLoadError
from ma_chart_engine.loader import load_dataset, load_dataset_or_empty, load_records
from ma_chart_engine.origin_shares import OriginShareAggregator, OriginShareTable, WeeklyMetrics
from ma_chart_engine.records import ChartEntry, NormalizeOptions, SkipReason, normalize_record, normalize_records
from ma_chart_engine.rolling import RollingWindowQuery
from ma_chart_engine.settings import ChartSettings, load_chart_settings
from ma_chart_engine.timeline import TimelineController
from ma_chart_engine.weeks import WeekBucketStore, WeekIndex

__all__ = [
    "ChartConfigError",
    "ChartDataset",
    "ChartEngineError",
    "ChartEntry",
    "ChartSettings",
    "ChoroplethFrame",
    "ChoroplethQuery",
    "DatasetLoadError",
    "NormalizeOptions",
    "OriginShareAggregator",
    "OriginShareTable",
    "RollingWindowQuery",
    "SkipReason",
    "TimelineController",
    "WeekBucketStore",
    "WeekIndex",
    "WeeklyMetrics",
    "load_chart_settings",
    "load_dataset",
    "load_dataset_or_empty",
    "load_records",
    "normalize_record",
    "normalize_records",
]

"""
Sparkline series over the weekly metrics, plus the display formatters the
readouts and the CLI share.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

import numpy as np

from ma_chart_engine.origin_shares import OriginShareTable, WeeklyMetrics
from ma_chart_engine.weeks import WeekIndex

__all__ = [
    "SPARKLINE_DEFS",
    "Sparkline",
    "SparklineDef",
    "SparklinePoint",
    "build_sparklines",
    "format_integer",
    "format_number",
    "format_percent",
    "week_for_fraction",
]

MISSING = "—"


def _finite(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def format_number(value, decimals: int = 0) -> str:
    if not _finite(value):
        return MISSING
    return f"{value:.{decimals}f}"


def format_percent(value, decimals: int = 1) -> str:
    if not _finite(value):
        return MISSING
    return f"{format_number(value * 100, decimals)}%"


def format_integer(value) -> str:
    if not _finite(value):
        return MISSING
    return str(int(math.floor(value + 0.5)))


@dataclass(frozen=True)
class SparklineDef:
    key: str
    label: str
    formatter: Callable[[float], str]
    fixed_domain: Optional[Tuple[float, float]] = None
    padding_ratio: float = 0.05

    def value(self, metrics: Optional[WeeklyMetrics]) -> Optional[float]:
        if metrics is None:
            return None
        raw = getattr(metrics, self.key, None)
        return float(raw) if _finite(raw) else None


SPARKLINE_DEFS: Tuple[SparklineDef, ...] = (
    SparklineDef("non_domestic_share", "Non-domestic share", format_percent, fixed_domain=(0.0, 1.0)),
    SparklineDef("unique_origin_count", "Unique origins", format_integer, padding_ratio=0.08),
    SparklineDef("entropy", "Shannon entropy H", lambda v: format_number(v, 2), padding_ratio=0.12),
)


@dataclass(frozen=True)
class SparklinePoint:
    week_index: int
    iso_date: str
    value: Optional[float]


@dataclass(frozen=True)
class Sparkline:
    key: str
    label: str
    points: Tuple[SparklinePoint, ...]
    domain: Tuple[float, float]

    def readout(self, week_index: int) -> str:
        if 0 <= week_index < len(self.points):
            value = self.points[week_index].value
            if value is not None:
                return next(d for d in SPARKLINE_DEFS if d.key == self.key).formatter(value)
        return MISSING


def _domain(defn: SparklineDef, values: Sequence[Optional[float]]) -> Tuple[float, float]:
    if defn.fixed_domain is not None:
        return defn.fixed_domain
    finite = np.asarray([v for v in values if v is not None], dtype=float)
    max_value = float(finite.max()) if finite.size else 0.0
    upper = max_value * (1 + defn.padding_ratio) if max_value > 0 else 1.0
    return (0.0, upper)


def build_sparklines(
    weeks: WeekIndex,
    table: OriginShareTable,
    defs: Sequence[SparklineDef] = SPARKLINE_DEFS,
) -> Dict[str, Sparkline]:
    series: Dict[str, Sparkline] = {}
    for defn in defs:
        points = tuple(
            SparklinePoint(
                week_index=idx,
                iso_date=iso,
                value=defn.value(table.metrics[idx] if idx < len(table.metrics) else None),
            )
            for idx, iso in enumerate(weeks.dates)
        )
        series[defn.key] = Sparkline(
            key=defn.key,
            label=defn.label,
            points=points,
            domain=_domain(defn, [p.value for p in points]),
        )
    return series


def week_for_fraction(fraction: float, week_count: int) -> Optional[int]:
    """Nearest week index for a horizontal pointer position in [0, 1]."""
    if week_count <= 0:
        return None
    clamped = min(max(float(fraction), 0.0), 1.0)
    return int(min(week_count - 1, max(0, math.floor(clamped * (week_count - 1) + 0.5))))

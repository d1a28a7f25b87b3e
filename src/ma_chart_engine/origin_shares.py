"""
Origin-share aggregation for chart weeks.

Per week, the top-N rank-sorted rows are weighted with a linear rank decay
`w = max(0, (N + 1) - rank)`. A row credited to several countries splits its
weight evenly across them, so one track always contributes `w` in total no
matter how many countries it lists. Rows without origins contribute no weight
but still count toward the collaboration-rate denominator.

Derived metrics per week:
- non_domestic_share: 1 - normalized share of the home country (0 when no weight)
- unique_origin_count: countries with non-zero share
- entropy: Shannon entropy in nats over the normalized shares
- collaboration_rate_pct: % of top-N rows credited to >= 2 countries (0.1 precision)
- cumulative_origins_so_far: running union size over ascending weeks

`compute_all` is the single forward pass that owns the cumulative union; the
per-week helpers never recompute it.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Mapping, Sequence, Set, Tuple

import numpy as np

from ma_chart_engine.records import ChartEntry
from ma_chart_engine.weeks import WeekBucketStore
from shared.config.constants import HOME_COUNTRY, TOP_METRICS_N

__all__ = [
    "EMPTY_METRICS",
    "OriginShareAggregator",
    "OriginShareTable",
    "WeekShares",
    "WeeklyMetrics",
    "rank_weight",
    "round_half_up",
    "shannon_entropy",
]


@dataclass(frozen=True)
class WeeklyMetrics:
    non_domestic_share: float
    unique_origin_count: int
    entropy: float
    collaboration_rate_pct: float
    cumulative_origins_so_far: int

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


EMPTY_METRICS = WeeklyMetrics(
    non_domestic_share=0.0,
    unique_origin_count=0,
    entropy=0.0,
    collaboration_rate_pct=0.0,
    cumulative_origins_so_far=0,
)


@dataclass(frozen=True)
class WeekShares:
    raw_weights: Dict[str, float] = field(default_factory=dict)
    total_weight: float = 0.0
    shares: Dict[str, float] = field(default_factory=dict)
    row_count: int = 0
    collaboration_count: int = 0


@dataclass(frozen=True)
class OriginShareTable:
    weeks: Tuple[WeekShares, ...]
    metrics: Tuple[WeeklyMetrics, ...]

    def shares_for(self, week_index: int) -> WeekShares:
        if 0 <= week_index < len(self.weeks):
            return self.weeks[week_index]
        return WeekShares()

    def metrics_for(self, week_index: int) -> WeeklyMetrics:
        if 0 <= week_index < len(self.metrics):
            return self.metrics[week_index]
        return EMPTY_METRICS


def rank_weight(rank: int, top_n: int = TOP_METRICS_N) -> float:
    return float(max(0, (top_n + 1) - rank))


def round_half_up(value: float, digits: int = 1) -> float:
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def shannon_entropy(shares: Mapping[str, float]) -> float:
    """-sum(p ln p) over positive shares; 0 for an empty or single-country map."""
    probs = np.fromiter((p for p in shares.values() if p > 0), dtype=float)
    if probs.size == 0:
        return 0.0
    return max(0.0, float(-np.sum(probs * np.log(probs))))


class OriginShareAggregator:
    def __init__(self, top_n: int = TOP_METRICS_N, home_country: str = HOME_COUNTRY) -> None:
        self.top_n = top_n
        self.home_country = home_country.upper()

    def aggregate_week(self, rows: Sequence[ChartEntry]) -> WeekShares:
        """Weight and normalize one rank-sorted bucket (only the first top_n rows count)."""
        top_rows = rows[: self.top_n] if self.top_n > 0 else ()
        raw: Dict[str, float] = {}
        total = 0.0
        collabs = 0
        for row in top_rows:
            if row.is_collaboration:
                collabs += 1
            weight = rank_weight(row.rank, self.top_n)
            if not row.origins or weight <= 0:
                continue
            fractional = weight / len(row.origins)
            for origin in row.origins:
                raw[origin] = raw.get(origin, 0.0) + fractional
            total += weight

        shares: Dict[str, float] = {}
        if total > 0:
            shares = {country: value / total for country, value in raw.items()}
        return WeekShares(
            raw_weights=raw,
            total_weight=total,
            shares=shares,
            row_count=len(top_rows),
            collaboration_count=collabs,
        )

    def metrics_for(self, week: WeekShares, cumulative_origins: int) -> WeeklyMetrics:
        non_domestic = 1.0 - week.shares.get(self.home_country, 0.0) if week.total_weight > 0 else 0.0
        collab_rate = (
            round_half_up(week.collaboration_count / week.row_count * 100, 1)
            if week.row_count > 0
            else 0.0
        )
        return WeeklyMetrics(
            non_domestic_share=non_domestic,
            unique_origin_count=len(week.shares),
            entropy=shannon_entropy(week.shares),
            collaboration_rate_pct=collab_rate,
            cumulative_origins_so_far=cumulative_origins,
        )

    def compute_all(self, store: WeekBucketStore) -> OriginShareTable:
        """Single ascending pass over every week; owns the running origin union."""
        seen: Set[str] = set()
        weeks = []
        metrics = []
        for week_index in range(len(store)):
            week = self.aggregate_week(store.get_week_rows(week_index))
            seen.update(week.raw_weights)
            weeks.append(week)
            metrics.append(self.metrics_for(week, len(seen)))
        return OriginShareTable(weeks=tuple(weeks), metrics=tuple(metrics))

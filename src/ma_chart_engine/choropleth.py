"""
Choropleth share frames for the globalization map.

Three modes over the weekly origin weights:
- weekly-share: normalized shares for the week; ceiling = largest share.
- cumulative-share: per-country sum of weekly shares up to and including the
  week; ceiling = 95th-percentile value so one dominant country does not wash
  out the scale.
- first-activation: every country that has held any share so far maps to 1.

`exclude_home` renormalizes each week without the home country. Prefix
aggregates for the two cumulative modes are built once per exclude flag in a
forward pass and reused by every later query.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from ma_chart_engine.origin_shares import OriginShareTable
from shared.config.constants import CUMULATIVE_SHARE_PERCENTILE, HOME_COUNTRY

__all__ = [
    "CHOROPLETH_MODES",
    "CUMULATIVE_SHARE",
    "FIRST_ACTIVATION",
    "WEEKLY_SHARE",
    "ChoroplethFrame",
    "ChoroplethQuery",
    "percentile_ceiling",
]

WEEKLY_SHARE = "weekly-share"
CUMULATIVE_SHARE = "cumulative-share"
FIRST_ACTIVATION = "first-activation"
CHOROPLETH_MODES = (WEEKLY_SHARE, CUMULATIVE_SHARE, FIRST_ACTIVATION)


@dataclass(frozen=True)
class ChoroplethFrame:
    mode: str
    shares: Dict[str, float] = field(default_factory=dict)
    max_share: float = 0.0


def percentile_ceiling(values, pct: float = CUMULATIVE_SHARE_PERCENTILE) -> float:
    """Value at floor(n * pct) of the ascending positive values (falls back to the max)."""
    arr = np.sort(np.asarray([v for v in values if v > 0], dtype=float))
    if arr.size == 0:
        return 0.0
    idx = min(arr.size - 1, int(math.floor(arr.size * pct)))
    ceiling = float(arr[idx])
    return ceiling or float(arr[-1])


class ChoroplethQuery:
    def __init__(self, table: OriginShareTable, home_country: str = HOME_COUNTRY) -> None:
        self._table = table
        self._home = home_country.upper()
        self._prefix: Dict[bool, List[Tuple[Dict[str, float], frozenset]]] = {}

    def weekly_shares(self, week_index: int, exclude_home: bool = False) -> Optional[Dict[str, float]]:
        """Normalized shares for one week, or None when the week carries no weight."""
        week = self._table.shares_for(week_index)
        if week.total_weight <= 0:
            return None
        denominator = week.total_weight
        if exclude_home:
            denominator -= week.raw_weights.get(self._home, 0.0)
        if denominator <= 0:
            return None
        return {
            iso: weight / denominator
            for iso, weight in week.raw_weights.items()
            if weight > 0 and not (exclude_home and iso == self._home)
        }

    def _build_prefix(self, exclude_home: bool) -> List[Tuple[Dict[str, float], frozenset]]:
        cached = self._prefix.get(exclude_home)
        if cached is not None:
            return cached
        running: Dict[str, float] = {}
        activated: set = set()
        prefix: List[Tuple[Dict[str, float], frozenset]] = []
        for week_index in range(len(self._table.weeks)):
            shares = self.weekly_shares(week_index, exclude_home) or {}
            for iso, share in shares.items():
                running[iso] = running.get(iso, 0.0) + share
                if share > 0:
                    activated.add(iso)
            prefix.append((dict(running), frozenset(activated)))
        self._prefix[exclude_home] = prefix
        return prefix

    def frame(self, week_index: int, mode: str = WEEKLY_SHARE, exclude_home: bool = False) -> ChoroplethFrame:
        if mode not in CHOROPLETH_MODES:
            mode = WEEKLY_SHARE
        in_range = 0 <= week_index < len(self._table.weeks)

        if mode == FIRST_ACTIVATION:
            activated = self._build_prefix(exclude_home)[week_index][1] if in_range else frozenset()
            return ChoroplethFrame(mode=mode, shares={iso: 1.0 for iso in sorted(activated)}, max_share=1.0)

        if mode == CUMULATIVE_SHARE:
            if not in_range:
                return ChoroplethFrame(mode=mode)
            cumulative = self._build_prefix(exclude_home)[week_index][0]
            if not cumulative:
                return ChoroplethFrame(mode=mode)
            ceiling = percentile_ceiling(cumulative.values())
            if ceiling <= 0:
                return ChoroplethFrame(mode=mode)
            return ChoroplethFrame(mode=mode, shares=dict(cumulative), max_share=ceiling)

        shares = self.weekly_shares(week_index, exclude_home) if in_range else None
        if not shares:
            return ChoroplethFrame(mode=mode)
        return ChoroplethFrame(mode=mode, shares=shares, max_share=max(shares.values()))

"""
Pin datasets for the two map views (geometry only, no colors or projection).

Globalization pins
- Every top-K row of each week within +/- window of the target week becomes
  one pin per credited origin that has a numeric map id.
- The target week is opaque; neighbours fade out with distance.
- `group` carries the legend bucket: region of the primary origin, the
  super-genre, or nothing.

Geographic pins
- Anchored on the de-duplicated top 10 of the target week.
- Each anchor track keeps its nearest occurrence (rank <= 10) inside the
  window; ties go to the better rank.
- Coordinates are stable pseudo-positions hashed from the track key.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from ma_chart_engine.records import ChartEntry
from ma_chart_engine.regions import region_for, to_super_genre
from ma_chart_engine.weeks import WeekBucketStore
from shared.config.constants import (
    ISO_TO_NUMERIC_ID,
    PIN_LAT_RANGE,
    PIN_LON_RANGE,
    TOP_PIN_N,
    TOP_PIN_RANGE,
    TOP_TABLE_N,
    WINDOW_WEEKS,
    WINDOW_WEEKS_RANGE,
)

__all__ = [
    "GROUP_BY_GENRE",
    "GROUP_BY_NONE",
    "GROUP_BY_REGION",
    "GeoPin",
    "GlobalPin",
    "geographic_pins",
    "globalization_pins",
    "hash_track_key",
    "track_coordinates",
]

GROUP_BY_REGION = "region"
GROUP_BY_GENRE = "genre-supergroup"
GROUP_BY_NONE = "none"

_UINT32 = 0xFFFFFFFF
_GOLDEN = 2654435761


@dataclass(frozen=True)
class GlobalPin:
    id: str
    week_index: int
    rank: int
    origin: str
    numeric_id: int
    entry: ChartEntry
    radius: float
    opacity: float
    is_current_week: bool
    group: Optional[str]

    @property
    def is_collaboration(self) -> bool:
        return self.entry.is_collaboration


@dataclass(frozen=True)
class GeoPin:
    track_key: str
    entry: ChartEntry
    delta: int
    lat: float
    lon: float
    radius: float
    opacity: float


def _clamp_setting(value: int, bounds: Tuple[int, int]) -> int:
    low, high = bounds
    return max(low, min(high, int(value)))


def _group_label(entry: ChartEntry, origin: str, group_by: str) -> Optional[str]:
    if group_by == GROUP_BY_NONE:
        return None
    if group_by == GROUP_BY_GENRE:
        return to_super_genre(entry.genre)
    primary = entry.origins[0] if entry.origins else origin
    return region_for(primary)


def globalization_pins(
    store: WeekBucketStore,
    target_week: int,
    top_k: int = TOP_PIN_N,
    window_weeks: int = WINDOW_WEEKS,
    group_by: str = GROUP_BY_REGION,
) -> List[GlobalPin]:
    pins: List[GlobalPin] = []
    week_count = len(store)
    if week_count == 0:
        return pins
    top_k = _clamp_setting(top_k, TOP_PIN_RANGE)
    window_weeks = _clamp_setting(window_weeks, WINDOW_WEEKS_RANGE)
    target = max(0, min(week_count - 1, int(target_week)))
    start = max(0, target - window_weeks)
    end = min(week_count - 1, target + window_weeks)

    for week_index in range(start, end + 1):
        weeks_away = abs(week_index - target)
        if week_index == target:
            opacity = 0.9
        else:
            opacity = max(0.05, 0.2 - (0.15 * weeks_away) / (window_weeks + 1))
        for entry in store.top_rows(week_index, top_k):
            radius = max(2.0, 10 - entry.rank * 0.3)
            for origin in entry.origins:
                numeric_id = ISO_TO_NUMERIC_ID.get(origin)
                if numeric_id is None:
                    continue
                pins.append(
                    GlobalPin(
                        id=f"{week_index}|{entry.rank}|{entry.name}|{origin}",
                        week_index=week_index,
                        rank=entry.rank,
                        origin=origin,
                        numeric_id=numeric_id,
                        entry=entry,
                        radius=radius,
                        opacity=opacity,
                        is_current_week=week_index == target,
                        group=_group_label(entry, origin, group_by),
                    )
                )
    return pins


def hash_track_key(value: str) -> int:
    """djb2-xor over UTF-16 code units, as an unsigned 32-bit value."""
    h = 5381
    data = value.encode("utf-16-le")
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        h = ((h * 33) & _UINT32) ^ code
    return h & _UINT32


def _project(hash_value: int, bounds: Tuple[float, float]) -> float:
    low, high = bounds
    return low + (hash_value / _UINT32) * (high - low)


@lru_cache(maxsize=None)
def track_coordinates(track_key: str) -> Tuple[float, float]:
    """(lat, lon) for a track key; the lon hash scrambles the lat hash with a float multiply."""
    base = hash_track_key(track_key)
    scrambled = int(float(base) * float(_GOLDEN)) & _UINT32
    return _project(base, PIN_LAT_RANGE), _project(scrambled, PIN_LON_RANGE)


def _geo_pin(entry: ChartEntry, delta: int) -> GeoPin:
    lat, lon = track_coordinates(entry.track_key)
    return GeoPin(
        track_key=entry.track_key,
        entry=entry,
        delta=delta,
        lat=lat,
        lon=lon,
        radius=max(4.0, 16 - entry.rank * 0.8),
        opacity=min(1.0, max(0.2, math.exp(-delta / 6))),
    )


def geographic_pins(
    store: WeekBucketStore,
    center_week: int,
    window_weeks: int = WINDOW_WEEKS,
    anchor_n: int = TOP_TABLE_N,
) -> List[GeoPin]:
    week_count = len(store)
    if week_count == 0 or not 0 <= center_week < week_count:
        return []
    anchors = store.top_unique_tracks(center_week, anchor_n)
    if not anchors:
        return []
    window_weeks = max(0, int(window_weeks))
    by_key: Dict[str, GeoPin] = {a.track_key: _geo_pin(a, 0) for a in anchors}

    low = max(0, center_week - window_weeks)
    high = min(week_count - 1, center_week + window_weeks)
    for week_index in range(low, high + 1):
        delta = abs(center_week - week_index)
        for entry in store.get_week_rows(week_index):
            if entry.rank > anchor_n or entry.track_key not in by_key:
                continue
            existing = by_key[entry.track_key]
            if delta < existing.delta or (delta == existing.delta and entry.rank < existing.entry.rank):
                by_key[entry.track_key] = _geo_pin(entry, delta)
    return list(by_key.values())

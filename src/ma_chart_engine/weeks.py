"""
Week indexing and per-week buckets.

WeekIndex assigns a dense, zero-based, chronological index to every distinct
chart date present in the normalized data (gaps in real time are not gaps in
the index). WeekBucketStore groups resolved entries by that index, each bucket
rank-sorted with ties kept in input order.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ma_chart_engine.records import ChartEntry

__all__ = ["WeekIndex", "WeekBucketStore"]


class WeekIndex:
    """Bidirectional ISO date <-> week index lookup, built once."""

    def __init__(self, dates: Iterable[str]) -> None:
        self._dates: Tuple[str, ...] = tuple(sorted(set(dates)))
        self._index: Dict[str, int] = {d: i for i, d in enumerate(self._dates)}
        self._first_index_by_year: Dict[int, int] = {}
        for i, d in enumerate(self._dates):
            self._first_index_by_year.setdefault(int(d[:4]), i)

    @classmethod
    def from_entries(cls, entries: Iterable[ChartEntry]) -> "WeekIndex":
        return cls(e.date_string for e in entries)

    def __len__(self) -> int:
        return len(self._dates)

    @property
    def dates(self) -> Tuple[str, ...]:
        return self._dates

    def index_of(self, date_string: str) -> Optional[int]:
        """Exact match only; no nearest-neighbor fallback."""
        return self._index.get(date_string)

    def date_at(self, index: int) -> Optional[str]:
        if 0 <= index < len(self._dates):
            return self._dates[index]
        return None

    def year_of(self, index: int) -> Optional[int]:
        d = self.date_at(index)
        return int(d[:4]) if d else None

    def years(self) -> List[int]:
        return sorted(self._first_index_by_year)

    def first_index_of_year(self, year: int) -> Optional[int]:
        return self._first_index_by_year.get(year)

    def resolve(self, entries: Iterable[ChartEntry]) -> List[ChartEntry]:
        """Second phase: stamp each entry with its week index; unknown dates are dropped."""
        resolved: List[ChartEntry] = []
        for entry in entries:
            idx = self._index.get(entry.date_string)
            if idx is None:
                continue
            resolved.append(replace(entry, week_index=idx))
        return resolved


class WeekBucketStore:
    """Rank-sorted buckets keyed by week index; immutable after construction."""

    def __init__(self, entries: Iterable[ChartEntry], week_count: int) -> None:
        grouped: List[List[ChartEntry]] = [[] for _ in range(week_count)]
        for entry in entries:
            if 0 <= entry.week_index < week_count:
                grouped[entry.week_index].append(entry)
        self._buckets: Tuple[Tuple[ChartEntry, ...], ...] = tuple(
            tuple(sorted(rows, key=lambda e: e.rank)) for rows in grouped
        )

    def __len__(self) -> int:
        return len(self._buckets)

    def get_week_rows(self, week_index: int) -> Tuple[ChartEntry, ...]:
        if 0 <= week_index < len(self._buckets):
            return self._buckets[week_index]
        return ()

    def top_rows(self, week_index: int, n: int) -> Tuple[ChartEntry, ...]:
        if n <= 0:
            return ()
        return self.get_week_rows(week_index)[:n]

    def top_unique_tracks(self, week_index: int, n: int = 10) -> List[ChartEntry]:
        """Top-n rows with repeated (name, artists) pairs dropped; best rank kept."""
        unique: List[ChartEntry] = []
        seen = set()
        if n <= 0:
            return unique
        for entry in self.get_week_rows(week_index):
            key = entry.track_key
            if key in seen:
                continue
            seen.add(key)
            unique.append(entry)
            if len(unique) == n:
                break
        return unique

    def iter_buckets(self) -> Sequence[Tuple[ChartEntry, ...]]:
        return self._buckets

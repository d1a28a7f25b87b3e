"""
Peak-rank queries over the date-sorted entry stream.

The stream is sorted ascending by date once at construction (stable, so rows
of the same week keep their input order). That invariant lets the rolling
window query binary-search its start and stop scanning at the window end:
O(log M + window) instead of O(M).
"""
from __future__ import annotations

from bisect import bisect_left
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ma_chart_engine.records import ChartEntry, parse_chart_date
from ma_chart_engine.weeks import WeekIndex

__all__ = ["RollingWindowQuery", "add_one_year"]

DateLike = Union[date, str]


def add_one_year(d: date) -> date:
    """Same month/day next year; Feb 29 rolls over to Mar 1 in a non-leap year."""
    try:
        return d.replace(year=d.year + 1)
    except ValueError:
        return date(d.year + 1, 3, 1)


def _keep_best(best: Dict[str, int], entry: ChartEntry) -> None:
    current = best.get(entry.track_id)
    if current is None or entry.rank < current:
        best[entry.track_id] = entry.rank


class RollingWindowQuery:
    def __init__(self, entries: Iterable[ChartEntry]) -> None:
        self._entries: Tuple[ChartEntry, ...] = tuple(sorted(entries, key=lambda e: e.date))
        self._dates: List[date] = [e.date for e in self._entries]
        self._peak_by_year: Dict[int, Dict[str, int]] = {}
        for entry in self._entries:
            _keep_best(self._peak_by_year.setdefault(entry.year, {}), entry)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> Tuple[ChartEntry, ...]:
        return self._entries

    def years(self) -> List[int]:
        return sorted(self._peak_by_year)

    def peak_in_year(self, year: int) -> Dict[str, int]:
        """track_id -> best rank among entries dated in `year` (empty for unknown years)."""
        return dict(self._peak_by_year.get(int(year), {}))

    def top_tracks_for_year(self, year: int, n: int = 10) -> List[Tuple[str, int]]:
        peaks = self._peak_by_year.get(int(year), {})
        ranked = sorted(peaks.items(), key=lambda item: (item[1], item[0]))
        return ranked[: max(0, n)]

    def start_offset(self, start: DateLike) -> Optional[int]:
        """Offset of the first entry dated >= start, or None past the end of the data."""
        start_date = parse_chart_date(start)
        if start_date is None:
            return None
        offset = bisect_left(self._dates, start_date)
        return offset if offset < len(self._dates) else None

    def peak_in_rolling_window(self, start: DateLike) -> Dict[str, int]:
        """track_id -> best rank within [start, start + 1 year)."""
        best: Dict[str, int] = {}
        offset = self.start_offset(start)
        if offset is None:
            return best
        end = add_one_year(parse_chart_date(start))
        for i in range(offset, len(self._entries)):
            entry = self._entries[i]
            if entry.date >= end:
                break
            _keep_best(best, entry)
        return best

    def last_full_window_index(self, weeks: WeekIndex) -> Optional[int]:
        """Last week index whose one-year window still ends inside the data."""
        if not len(weeks):
            return None
        last_date = date.fromisoformat(weeks.dates[-1])
        for idx, iso in enumerate(weeks.dates):
            if add_one_year(date.fromisoformat(iso)) > last_date:
                return idx - 1 if idx > 0 else len(weeks) - 1
        return len(weeks) - 1

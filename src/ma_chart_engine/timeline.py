"""
Timeline position state machine (no rendering).

State is `{position, is_playing}` plus a scrubbing flag and the tick interval.
Every position change goes through `set_position`, which clamps and then calls
the render callback synchronously. Playback is driven by an injected scheduler
(`schedule(callback, interval_ms) -> handle`, `handle.cancel()`), so tests can
drive ticks from a manual clock.

Scrubbing must pause before moving (`scrub` does both, in that order) so an
in-flight tick never drags the position back after user input.

The controller walks a list of week indices. By default that is every week;
`set_year_range` narrows it to a calendar-year range (the geographic view's
start/end year selectors), and `jump_year` hops to the first week of the
adjacent year inside that range.

`max_week_index` caps how far the position can go (the universe view stops at
the last week whose one-year window is complete); ticks auto-pause there.
"""
from __future__ import annotations

import threading
from bisect import bisect_right
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from ma_chart_engine.weeks import WeekIndex
from shared.config.constants import (
    PLAYBACK_SPEED_DEFAULT_MS,
    PLAYBACK_SPEED_MAX_MS,
    PLAYBACK_SPEED_MIN_MS,
)

__all__ = [
    "CancellationHandle",
    "Scheduler",
    "ThreadingScheduler",
    "TimelineController",
    "clamp",
]

RenderCallback = Callable[[int], None]
PlayingCallback = Callable[[bool], None]


class CancellationHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def schedule(self, callback: Callable[[], None], interval_ms: int) -> CancellationHandle: ...


class _RepeatingTimer:
    def __init__(self, callback: Callable[[], None], interval_ms: int) -> None:
        self._callback = callback
        self._interval_s = interval_ms / 1000.0
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self) -> "_RepeatingTimer":
        self._thread.start()
        return self

    def _run(self) -> None:
        while not self._stop.wait(self._interval_s):
            self._callback()

    def cancel(self) -> None:
        self._stop.set()


class ThreadingScheduler:
    """Fixed-interval ticks on a daemon thread (headless playback)."""

    def schedule(self, callback: Callable[[], None], interval_ms: int) -> CancellationHandle:
        return _RepeatingTimer(callback, interval_ms).start()


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


class TimelineController:
    def __init__(
        self,
        week_count: int,
        render: Optional[RenderCallback] = None,
        scheduler: Optional[Scheduler] = None,
        speed_ms: int = PLAYBACK_SPEED_DEFAULT_MS,
        start_at_latest: bool = False,
        weeks: Optional[WeekIndex] = None,
        on_playing_change: Optional[PlayingCallback] = None,
        max_week_index: Optional[int] = None,
    ) -> None:
        self._render = render
        self._on_playing_change = on_playing_change
        self._scheduler: Scheduler = scheduler or ThreadingScheduler()
        self._weeks = weeks
        self._all_weeks: List[int] = list(range(max(0, week_count)))
        self._positions: List[int] = list(self._all_weeks)
        self._year_range: Optional[tuple] = None
        self._max_week_index = max_week_index
        self._handle: Optional[CancellationHandle] = None
        self._lock = threading.RLock()
        self.position = self._last_position() if start_at_latest else 0
        self.is_playing = False
        self.is_scrubbing = False
        self.speed_ms = self._clamp_speed(speed_ms)

    @classmethod
    def from_week_index(cls, weeks: WeekIndex, **kwargs) -> "TimelineController":
        return cls(len(weeks), weeks=weeks, **kwargs)

    @property
    def count(self) -> int:
        return len(self._positions)

    @property
    def week_index(self) -> int:
        """Week index under the current position (0 when there are no weeks)."""
        if not self._positions:
            return 0
        return self._positions[self.position]

    @property
    def week_indices(self) -> Sequence[int]:
        return tuple(self._positions)

    @property
    def max_week_index(self) -> Optional[int]:
        return self._max_week_index

    def _last_position(self) -> int:
        """Highest reachable position; the week cap never drops it below 0."""
        if not self._positions:
            return 0
        if self._max_week_index is None:
            return len(self._positions) - 1
        return max(0, bisect_right(self._positions, self._max_week_index) - 1)

    @property
    def year_range(self) -> Optional[tuple]:
        return self._year_range

    @property
    def controls_enabled(self) -> bool:
        return self.count > 0

    # -- position ---------------------------------------------------------

    def set_position(self, position: int) -> int:
        with self._lock:
            if not self._positions:
                self.position = 0
            else:
                self.position = clamp(int(position), 0, self._last_position())
            current = self.position
        if self._render is not None:
            self._render(current)
        return current

    def set_week_index(self, position: int) -> int:
        return self.set_position(position)

    def step(self, delta: int = 1) -> int:
        return self.set_position(self.position + delta)

    def scrub(self, position: int) -> int:
        """User drag input: pause first, then move."""
        self.pause()
        return self.set_position(position)

    def begin_scrub(self) -> None:
        self.is_scrubbing = True
        self.pause()

    def end_scrub(self) -> None:
        self.is_scrubbing = False

    # -- playback ---------------------------------------------------------

    def play(self) -> None:
        with self._lock:
            if self.is_playing or not self._positions:
                return
            if self.position >= self._last_position():
                self.set_position(0)
            self.is_playing = True
            self._start_ticks()
        self._notify_playing()

    def pause(self) -> None:
        with self._lock:
            self._stop_ticks()
            was_playing = self.is_playing
            self.is_playing = False
        if was_playing:
            self._notify_playing()

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def set_speed(self, speed_ms) -> int:
        with self._lock:
            self.speed_ms = self._clamp_speed(speed_ms)
            if self.is_playing:
                self._start_ticks()
            return self.speed_ms

    def _tick(self) -> None:
        with self._lock:
            if not self.is_playing or self.is_scrubbing:
                return
            if self.position >= self._last_position():
                self.pause()
                return
            self.set_position(self.position + 1)
            if self.position >= self._last_position():
                self.pause()

    def _start_ticks(self) -> None:
        self._stop_ticks()
        self._handle = self._scheduler.schedule(self._tick, self.speed_ms)

    def _stop_ticks(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _notify_playing(self) -> None:
        if self._on_playing_change is not None:
            self._on_playing_change(self.is_playing)

    @staticmethod
    def _clamp_speed(speed_ms) -> int:
        try:
            value = int(speed_ms)
        except (TypeError, ValueError):
            value = 0
        if value <= 0:
            value = PLAYBACK_SPEED_DEFAULT_MS
        return clamp(value, PLAYBACK_SPEED_MIN_MS, PLAYBACK_SPEED_MAX_MS)

    # -- year range (geographic view) ---------------------------------------

    def years(self) -> List[int]:
        """Distinct years inside the current range, ascending."""
        if self._weeks is None:
            return []
        seen: List[int] = []
        for idx in self._positions:
            year = self._weeks.year_of(idx)
            if year is not None and (not seen or seen[-1] != year):
                seen.append(year)
        return seen

    def _first_positions_by_year(self) -> Dict[int, int]:
        firsts: Dict[int, int] = {}
        if self._weeks is None:
            return firsts
        for pos, idx in enumerate(self._positions):
            year = self._weeks.year_of(idx)
            if year is not None:
                firsts.setdefault(year, pos)
        return firsts

    def set_year_range(self, start_year: Optional[int] = None, end_year: Optional[int] = None) -> int:
        """Restrict playback to weeks in [start_year, end_year]; empty ranges fall back to all weeks."""
        self.pause()
        with self._lock:
            current_week = self.week_index if self._positions else None
            years = self._weeks.years() if self._weeks is not None else []
            if not years:
                self._positions = list(self._all_weeks)
                self._year_range = None
            else:
                low = start_year if start_year is not None else years[0]
                high = end_year if end_year is not None else years[-1]
                if low > high:
                    low, high = high, low
                filtered = [
                    idx for idx in self._all_weeks if low <= (self._weeks.year_of(idx) or 0) <= high
                ]
                if not filtered:
                    filtered = list(self._all_weeks)
                    low, high = years[0], years[-1]
                self._positions = filtered
                self._year_range = (low, high)
            target = 0
            if current_week is not None and current_week in self._positions:
                target = self._positions.index(current_week)
        return self.set_position(target)

    def jump_year(self, direction: int) -> Optional[int]:
        """Move to the first week of the previous (-1) or next (+1) year in range."""
        if not isinstance(direction, int) or not self._positions or self._weeks is None:
            return None
        years = self.years()
        current_year = self._weeks.year_of(self.week_index)
        if current_year not in years:
            return None
        target_idx = years.index(current_year) + direction
        if target_idx < 0 or target_idx >= len(years):
            return None
        target_position = self._first_positions_by_year().get(years[target_idx])
        if target_position is None:
            return None
        self.pause()
        return self.set_position(target_position)

    def can_jump(self, direction: int) -> bool:
        if self._weeks is None or not self._positions:
            return False
        years = self.years()
        current_year = self._weeks.year_of(self.week_index)
        if current_year not in years:
            return False
        target_idx = years.index(current_year) + direction
        return 0 <= target_idx < len(years)

"""
Test bootstrap helper to ensure repository imports work under pytest.

Pytest does not automatically add the repo root to sys.path, so `shared.*`
and `ma_chart_engine` imports can fail when tests are executed from arbitrary
working directories. This hook normalizes the path upfront and provides the
shared chart fixtures.
"""
import os
import sys
from typing import Callable, List

import pytest

# Make sure the repo root and src/ are on sys.path before importing packages.
_HERE = os.path.dirname(os.path.abspath(__file__))
_ROOT = os.path.abspath(os.path.join(_HERE, os.pardir))
_SRC = os.path.join(_ROOT, "src")
for _path in (_SRC, _ROOT):
    if _path not in sys.path:
        sys.path.insert(0, _path)


class ManualHandle:
    def __init__(self, scheduler: "ManualScheduler") -> None:
        self._scheduler = scheduler
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler fake: ticks only fire when the test calls `fire()`."""

    def __init__(self) -> None:
        self.handles: List[ManualHandle] = []
        self.callbacks: List[Callable[[], None]] = []
        self.intervals: List[int] = []

    def schedule(self, callback: Callable[[], None], interval_ms: int) -> ManualHandle:
        handle = ManualHandle(self)
        self.handles.append(handle)
        self.callbacks.append(callback)
        self.intervals.append(interval_ms)
        return handle

    @property
    def active(self) -> bool:
        return bool(self.handles) and not self.handles[-1].cancelled

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            if not self.active:
                return
            self.callbacks[-1]()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


def make_row(date, rank, name="Song", artists=("Artist",), country=None, genre="pop", track_id=None):
    row = {"date": date, "rank": rank, "name": name, "artists": list(artists), "genre": genre}
    if country is not None:
        row["country"] = country
    if track_id is not None:
        row["id"] = track_id
    return row


@pytest.fixture
def row_factory():
    return make_row


@pytest.fixture
def three_week_rows():
    """Three weeks: US/GB split, a US+GB collaboration, and a home-only week."""
    return [
        make_row("2000-01-01", 1, name="Alpha", country="US", track_id="a"),
        make_row("2000-01-01", 2, name="Beta", country="GB", track_id="b"),
        make_row("2000-01-08", 1, name="Alpha", country="US", track_id="a"),
        make_row("2000-01-08", 2, name="Gamma", country=["US", "GB"], track_id="g"),
        make_row("2000-01-15", 1, name="Alpha", country="US", track_id="a"),
    ]

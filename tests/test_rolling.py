from __future__ import annotations

import random
from datetime import date, timedelta

from ma_chart_engine.records import normalize_records
from ma_chart_engine.rolling import RollingWindowQuery, add_one_year
from ma_chart_engine.weeks import WeekIndex


def _naive_window(entries, start: date):
    end = add_one_year(start)
    best = {}
    for e in entries:
        if start <= e.date < end:
            best[e.track_id] = min(best.get(e.track_id, e.rank), e.rank)
    return best


def test_add_one_year_handles_leap_day():
    assert add_one_year(date(2000, 2, 29)) == date(2001, 3, 1)
    assert add_one_year(date(2003, 6, 7)) == date(2004, 6, 7)


def test_peak_in_year(row_factory):
    entries = normalize_records(
        [
            row_factory("1999-12-25", 1, track_id="x"),
            row_factory("2000-01-01", 9, track_id="x"),
            row_factory("2000-06-01", 3, track_id="x"),
            row_factory("2000-06-01", 5, track_id="y"),
        ]
    )
    query = RollingWindowQuery(entries)
    assert query.peak_in_year(2000) == {"x": 3, "y": 5}
    assert query.peak_in_year(1999) == {"x": 1}
    assert query.peak_in_year(1850) == {}
    assert query.years() == [1999, 2000]


def test_top_tracks_for_year_orders_by_peak(row_factory):
    entries = normalize_records(
        [
            row_factory("2000-01-01", 4, track_id="b"),
            row_factory("2000-02-01", 2, track_id="a"),
            row_factory("2000-03-01", 2, track_id="c"),
            row_factory("2000-04-01", 7, track_id="d"),
        ]
    )
    query = RollingWindowQuery(entries)
    assert query.top_tracks_for_year(2000, 3) == [("a", 2), ("c", 2), ("b", 4)]
    assert query.top_tracks_for_year(2000, 0) == []


def test_window_is_half_open(row_factory):
    entries = normalize_records(
        [
            row_factory("2000-01-01", 50, track_id="t"),
            row_factory("2000-12-30", 10, track_id="t"),
            row_factory("2001-01-01", 1, track_id="t"),
        ]
    )
    query = RollingWindowQuery(entries)
    assert query.peak_in_rolling_window("2000-01-01") == {"t": 10}
    assert query.peak_in_rolling_window(date(2000, 1, 2)) == {"t": 1}


def test_window_past_end_or_invalid_start(row_factory):
    query = RollingWindowQuery(normalize_records([row_factory("2000-01-01", 1, track_id="t")]))
    assert query.peak_in_rolling_window("2010-01-01") == {}
    assert query.peak_in_rolling_window("garbage") == {}
    assert query.start_offset("1990-01-01") == 0
    assert query.start_offset("2010-01-01") is None


def test_window_matches_naive_scan():
    rng = random.Random(7)
    start = date(1990, 1, 6)
    raws = []
    for week in range(300):
        day = start + timedelta(weeks=week)
        for rank in range(1, 6):
            raws.append({"date": day.isoformat(), "rank": rank, "id": f"t{rng.randint(0, 30)}"})
    rng.shuffle(raws)
    entries = normalize_records(raws)
    query = RollingWindowQuery(entries)
    for offset in (0, 17, 52, 150, 260, 299, 320):
        when = start + timedelta(weeks=offset, days=offset % 3)
        assert query.peak_in_rolling_window(when) == _naive_window(entries, when)


def test_stream_is_date_sorted(row_factory):
    entries = normalize_records(
        [row_factory("2002-01-01", 1), row_factory("2000-01-01", 1), row_factory("2001-01-01", 1)]
    )
    dates = [e.date for e in RollingWindowQuery(entries).entries]
    assert dates == sorted(dates)


def test_last_full_window_index(row_factory):
    dates = [(date(2000, 1, 1) + timedelta(weeks=w)).isoformat() for w in range(60)]
    weeks = WeekIndex(dates)
    query = RollingWindowQuery([])
    idx = query.last_full_window_index(weeks)
    last = date.fromisoformat(dates[-1])
    assert add_one_year(date.fromisoformat(dates[idx])) <= last
    assert add_one_year(date.fromisoformat(dates[idx + 1])) > last
    assert query.last_full_window_index(WeekIndex([])) is None


def test_short_dataset_falls_back_to_last_week():
    weeks = WeekIndex(["2000-01-01", "2000-01-08"])
    assert RollingWindowQuery([]).last_full_window_index(weeks) == 1

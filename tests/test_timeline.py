from __future__ import annotations

import pytest

from ma_chart_engine.timeline import TimelineController
from ma_chart_engine.weeks import WeekIndex


def _controller(scheduler, count=10, **kwargs):
    rendered = []
    ctl = TimelineController(count, render=rendered.append, scheduler=scheduler, **kwargs)
    return ctl, rendered


def test_set_position_clamps_and_renders(scheduler):
    ctl, rendered = _controller(scheduler)
    assert ctl.set_position(-5) == 0
    assert ctl.set_position(999) == 9
    assert ctl.set_week_index(4) == 4
    assert rendered == [0, 9, 4]


def test_initial_position(scheduler):
    assert _controller(scheduler)[0].position == 0
    assert _controller(scheduler, start_at_latest=True)[0].position == 9


def test_play_advances_and_auto_pauses_at_end(scheduler):
    ctl, rendered = _controller(scheduler, count=3)
    ctl.play()
    assert ctl.is_playing
    scheduler.fire()
    assert ctl.position == 1
    scheduler.fire()
    assert ctl.position == 2
    assert not ctl.is_playing
    assert not scheduler.active
    assert rendered == [1, 2]


def test_play_at_end_wraps_to_start(scheduler):
    ctl, rendered = _controller(scheduler, count=4, start_at_latest=True)
    ctl.play()
    assert ctl.position == 0
    assert rendered == [0]
    assert ctl.is_playing


def test_play_twice_keeps_one_driver(scheduler):
    ctl, _ = _controller(scheduler)
    ctl.play()
    ctl.play()
    assert len(scheduler.handles) == 1


def test_pause_is_idempotent_and_notifies_once(scheduler):
    changes = []
    ctl = TimelineController(5, scheduler=scheduler, on_playing_change=changes.append)
    ctl.pause()
    ctl.play()
    ctl.pause()
    ctl.pause()
    assert changes == [True, False]
    assert scheduler.handles[0].cancelled


def test_scrub_pauses_before_moving(scheduler):
    ctl, rendered = _controller(scheduler)
    ctl.play()
    scheduler.fire()
    ctl.scrub(7)
    assert not ctl.is_playing
    assert ctl.position == 7
    scheduler.fire()
    assert ctl.position == 7
    assert rendered == [1, 7]


def test_ticks_ignored_while_scrubbing(scheduler):
    ctl, _ = _controller(scheduler)
    ctl.play()
    ctl.begin_scrub()
    assert not ctl.is_playing
    assert ctl.is_scrubbing
    ctl.end_scrub()
    assert not ctl.is_scrubbing


def test_toggle(scheduler):
    ctl, _ = _controller(scheduler)
    ctl.toggle()
    assert ctl.is_playing
    ctl.toggle()
    assert not ctl.is_playing


def test_empty_timeline_disables_controls(scheduler):
    ctl, rendered = _controller(scheduler, count=0)
    assert not ctl.controls_enabled
    ctl.play()
    assert not ctl.is_playing
    assert ctl.set_position(5) == 0
    assert rendered == [0]
    assert scheduler.handles == []


@pytest.mark.parametrize("speed, expected", [(10, 50), (5000, 2000), (300, 300), (0, 200), ("bad", 200)])
def test_speed_is_clamped(scheduler, speed, expected):
    ctl, _ = _controller(scheduler)
    assert ctl.set_speed(speed) == expected


def test_speed_change_restarts_tick(scheduler):
    ctl, _ = _controller(scheduler)
    ctl.play()
    ctl.set_speed(500)
    assert scheduler.handles[0].cancelled
    assert scheduler.intervals == [200, 500]
    assert ctl.is_playing


def _weekly(years):
    dates = []
    for year in years:
        dates += [f"{year}-01-06", f"{year}-06-01", f"{year}-12-28"]
    return WeekIndex(dates)


def test_year_range_restricts_positions(scheduler):
    weeks = _weekly([2000, 2001, 2002, 2003])
    ctl = TimelineController.from_week_index(weeks, scheduler=scheduler)
    ctl.set_position(4)
    ctl.set_year_range(2001, 2002)
    assert ctl.week_indices == (3, 4, 5, 6, 7, 8)
    assert ctl.week_index == 4
    assert ctl.year_range == (2001, 2002)
    ctl.set_position(100)
    assert ctl.week_index == 8


def test_year_range_reversed_and_empty(scheduler):
    weeks = _weekly([2000, 2001])
    ctl = TimelineController.from_week_index(weeks, scheduler=scheduler)
    ctl.set_year_range(2001, 2000)
    assert ctl.year_range == (2000, 2001)
    ctl.set_year_range(1990, 1991)
    assert ctl.week_indices == tuple(range(6))
    assert ctl.position == 0


def test_year_range_pauses_playback(scheduler):
    ctl = TimelineController.from_week_index(_weekly([2000, 2001]), scheduler=scheduler)
    ctl.play()
    ctl.set_year_range(2001, 2001)
    assert not ctl.is_playing
    assert ctl.week_index == 3


def test_jump_year(scheduler):
    ctl = TimelineController.from_week_index(_weekly([2000, 2001, 2002]), scheduler=scheduler)
    ctl.set_position(1)
    assert ctl.can_jump(1)
    assert not ctl.can_jump(-1)
    assert ctl.jump_year(1) == 3
    assert ctl.jump_year(1) == 6
    assert ctl.jump_year(1) is None
    assert ctl.jump_year(-1) == 3
    assert ctl.years() == [2000, 2001, 2002]


def test_position_invariant_under_random_ops(scheduler):
    ctl, _ = _controller(scheduler, count=7)
    for value in (3, -1, 50, 6, 0, 12):
        ctl.scrub(value)
        ctl.play()
        scheduler.fire(3)
        assert 0 <= ctl.position < ctl.count


def test_week_cap_limits_position_and_playback(scheduler):
    ctl, rendered = _controller(scheduler, count=10, max_week_index=5)
    assert ctl.set_position(999) == 5
    ctl.set_position(3)
    ctl.play()
    scheduler.fire(5)
    assert ctl.position == 5
    assert not ctl.is_playing
    assert rendered == [5, 3, 4, 5]
    ctl.play()
    assert ctl.position == 0


def test_week_cap_with_start_at_latest_and_year_range(scheduler):
    weeks = _weekly([2000, 2001, 2002])
    ctl = TimelineController.from_week_index(weeks, scheduler=scheduler, start_at_latest=True, max_week_index=4)
    assert ctl.week_index == 4
    ctl.set_year_range(2001, 2002)
    ctl.set_position(100)
    assert ctl.week_index == 4
    ctl.set_year_range(2002, 2002)
    assert ctl.position == 0
    assert ctl.week_index == 6

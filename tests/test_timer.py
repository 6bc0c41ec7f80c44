import pytest

from obby.timer import Timer


def test_new_timer_is_done_and_does_not_fire():
    t = Timer()
    assert t.done()
    assert t.tick(1.0) is False


def test_start_sets_both_fields():
    t = Timer()
    t.start(2.0)
    assert t.timer_sec == 2.0
    assert t.timer_start_sec == 2.0
    assert not t.done()


def test_tick_fires_once_when_reaching_zero():
    t = Timer()
    t.start(1.0)
    results = [t.tick(0.3) for _ in range(6)]
    assert results.count(True) == 1
    assert results.index(True) == 3
    assert t.done()
    assert t.timer_sec == 0.0


def test_tick_exactly_to_zero_fires():
    t = Timer()
    t.start(0.5)
    assert t.tick(0.5) is True
    assert t.done()


def test_restart_returns_to_start_value():
    t = Timer()
    t.start(2.0)
    t.tick(0.7)
    t.restart()
    assert t.timer_sec == t.timer_start_sec


def test_alpha_runs_from_zero_to_one():
    t = Timer()
    t.start(2.0)
    assert t.alpha() == 0.0
    previous = t.alpha()
    while not t.tick(0.25):
        assert t.alpha() > previous
        previous = t.alpha()
    assert t.alpha() == pytest.approx(1.0)


def test_alpha_without_start_is_one():
    assert Timer().alpha() == 1.0


def test_restart_after_unset_start_leaves_done():
    t = Timer(timer_sec=0.0, timer_start_sec=2.0)
    t.restart()
    assert t.timer_sec == 2.0
    assert t.tick(2.5) is True
import pytest

from speedtrainer.core.clock import AsyncioClock, VirtualClock


def test_timers_fire_in_time_order(clock):
    calls = []
    clock.schedule_repeating(1.0, lambda: calls.append(("slow", clock.now())))
    clock.schedule_repeating(0.4, lambda: calls.append(("fast", clock.now())))

    clock.advance(1.3)

    assert [name for name, _ in calls] == ["fast", "fast", "slow", "fast"]
    assert clock.now() == 1.3


def test_equal_due_time_fires_in_creation_order(clock):
    calls = []
    clock.schedule_repeating(0.5, lambda: calls.append("first"))
    clock.schedule_repeating(0.5, lambda: calls.append("second"))

    clock.advance(1.0)

    assert calls == ["first", "second", "first", "second"]


def test_cancelled_timer_stops(clock):
    calls = []
    handle = clock.schedule_repeating(1.0, lambda: calls.append(clock.now()))
    clock.advance(2.0)
    handle.cancel()
    clock.advance(5.0)

    assert calls == [1.0, 2.0]
    assert clock.pending_timers == 0


def test_timer_can_cancel_itself(clock):
    calls = []

    def callback():
        calls.append(clock.now())
        handle.cancel()

    handle = clock.schedule_repeating(1.0, callback)
    clock.advance(3.0)

    assert calls == [1.0]


def test_no_drift_over_many_ticks():
    clock = VirtualClock()
    handle = clock.schedule_repeating(0.1, lambda: None)
    clock.advance(100.0)

    assert handle.fired == 1000


def test_first_delay_then_regular_interval(clock):
    calls = []
    clock.advance(5.0)
    clock.schedule_repeating(1.0, lambda: calls.append(clock.now()), first_delay=0.25)

    clock.advance(2.5)

    assert calls == [5.25, 6.25, 7.25]


def test_invalid_arguments(clock):
    with pytest.raises(ValueError):
        clock.advance(-1)
    with pytest.raises(ValueError):
        clock.schedule_repeating(0, lambda: None)
    with pytest.raises(ValueError):
        clock.schedule_repeating(1.0, lambda: None, first_delay=-0.1)


class FakeLoop:
    """Цикл событий, у которого время двигает тест"""

    def __init__(self):
        self.current = 100.0
        self.scheduled = []

    def time(self):
        return self.current

    def call_at(self, when, callback):
        handle = FakeHandle(when, callback)
        self.scheduled.append(handle)
        return handle

    def run_until(self, moment):
        while True:
            due = [h for h in self.scheduled if not h.cancelled and h.when <= moment]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.scheduled.remove(handle)
            self.current = handle.when
            handle.callback()
        self.current = moment


class FakeHandle:

    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


def test_asyncio_clock_schedules_on_loop():
    loop = FakeLoop()
    clock = AsyncioClock(loop)
    calls = []

    handle = clock.schedule_repeating(0.5, lambda: calls.append(clock.now()))
    loop.run_until(101.6)

    assert calls == [100.5, 101.0, 101.5]
    assert clock.now() == 101.6

    handle.cancel()
    loop.run_until(105.0)
    assert len(calls) == 3


def test_asyncio_clock_honours_first_delay():
    loop = FakeLoop()
    clock = AsyncioClock(loop)
    calls = []

    clock.schedule_repeating(1.0, lambda: calls.append(clock.now()), first_delay=0.5)
    loop.run_until(102.6)

    assert calls == [100.5, 101.5, 102.5]

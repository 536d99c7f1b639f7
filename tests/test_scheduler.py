"""Tests for the delayed-call scheduler and the virtual clock."""

import pytest


class TestManualClock:
    def test_advance_and_sleep_move_time(self, clock):
        start = clock.now()
        clock.advance(1.5)
        clock.sleep(0.5)
        assert clock.now() == start + 2.0
        assert clock.slept == [0.5]

    def test_cannot_go_backwards(self, clock):
        with pytest.raises(ValueError):
            clock.advance(-1)


class TestScheduler:
    def test_call_later_waits_for_deadline(self, clock, scheduler):
        calls = []
        scheduler.call_later(0.2, calls.append, 'a')

        assert scheduler.run_due() == 0
        clock.advance(0.1)
        assert scheduler.run_due() == 0
        clock.advance(0.1)
        assert scheduler.run_due() == 1
        assert calls == ['a']

    def test_deadline_then_fifo_order(self, clock, scheduler):
        calls = []
        scheduler.call_later(0.5, calls.append, 'late')
        scheduler.call_later(0.1, calls.append, 'first')
        scheduler.call_later(0.1, calls.append, 'second')

        clock.advance(1)
        scheduler.run_due()
        assert calls == ['first', 'second', 'late']

    def test_cancelled_calls_do_not_run(self, clock, scheduler):
        calls = []
        handle = scheduler.call_later(0.1, calls.append, 'x')
        handle.cancel()

        assert scheduler.pending() == 0
        clock.advance(1)
        assert scheduler.run_due() == 0
        assert calls == []

    def test_run_until_idle_sleeps_on_clock(self, clock, scheduler):
        calls = []
        start = clock.now()
        scheduler.call_later(3, calls.append, 'x')
        scheduler.call_soon(calls.append, 'y')

        scheduler.run_until_idle()
        assert calls == ['y', 'x']
        assert clock.now() == start + 3

    def test_failing_call_does_not_stop_queue(self, clock, scheduler):
        calls = []

        def boom():
            raise RuntimeError('boom')

        scheduler.call_soon(boom)
        scheduler.call_soon(calls.append, 'after')
        scheduler.run_due()
        assert calls == ['after']

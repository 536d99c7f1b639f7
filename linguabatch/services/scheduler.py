"""Clocks and a single-threaded delayed-call scheduler.

The batch window, rate-limit window, cache TTL and retry backoff all read
time through a clock object so they can run against ``ManualClock`` in tests.
"""

import heapq
import itertools
import logging
import time

logger = logging.getLogger(__name__)


class SystemClock:
    """Real wall-clock time."""

    def now(self) -> float:
        return time.time()

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float):
        if seconds > 0:
            time.sleep(seconds)


class ManualClock:
    """Virtual clock; time only moves when ``advance`` or ``sleep`` is called."""

    def __init__(self, start: float = 1_700_000_000.0):
        self._now = float(start)
        self.slept = []

    def now(self) -> float:
        return self._now

    def monotonic(self) -> float:
        return self._now

    def advance(self, seconds: float):
        if seconds < 0:
            raise ValueError('cannot move a clock backwards')
        self._now += seconds

    def sleep(self, seconds: float):
        if seconds > 0:
            self.slept.append(seconds)
            self.advance(seconds)


class ScheduledCall:
    """Handle returned by ``Scheduler.call_later``."""

    __slots__ = ('when', 'callback', 'args', 'cancelled')

    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def __repr__(self):
        state = 'cancelled' if self.cancelled else 'pending'
        return f'<ScheduledCall {getattr(self.callback, "__name__", self.callback)} at {self.when:.3f} {state}>'


class Scheduler:
    """Single-threaded task queue with delayed execution.

    Nothing runs in the background: callers drive the queue with
    ``run_due`` (execute what is due now) or ``run_until_idle`` (sleep on the
    clock until every scheduled call has run).
    """

    def __init__(self, clock=None):
        self.clock = clock or SystemClock()
        self._queue = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback, *args) -> ScheduledCall:
        handle = ScheduledCall(self.clock.monotonic() + max(delay, 0), callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle))
        return handle

    def call_soon(self, callback, *args) -> ScheduledCall:
        return self.call_later(0, callback, *args)

    def pending(self) -> int:
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def next_deadline(self):
        self._drop_cancelled()
        return self._queue[0][0] if self._queue else None

    def run_due(self) -> int:
        """Run every call whose deadline has passed. Returns how many ran."""
        ran = 0
        while True:
            self._drop_cancelled()
            if not self._queue or self._queue[0][0] > self.clock.monotonic():
                return ran
            _, _, handle = heapq.heappop(self._queue)
            self._run(handle)
            ran += 1

    def run_until_idle(self, max_calls: int = 10_000) -> int:
        """Run the queue to completion, sleeping on the clock between deadlines."""
        ran = 0
        while ran < max_calls:
            deadline = self.next_deadline()
            if deadline is None:
                break
            self.clock.sleep(deadline - self.clock.monotonic())
            ran += self.run_due()
        return ran

    def _drop_cancelled(self):
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)

    def _run(self, handle):
        try:
            handle.callback(*handle.args)
        except Exception as e:
            logger.error(f"Scheduled call {handle!r} failed: {e}", exc_info=True)

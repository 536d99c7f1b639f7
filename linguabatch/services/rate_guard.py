"""Per-client request guard for the inbound translate endpoints.

Uses a Redis fixed-window counter when Redis is configured so every worker
shares the same budget; otherwise counts in-process.
"""

import logging
import time

from linguabatch.services.redis_client import incr_with_expiry

logger = logging.getLogger(__name__)

RATE_PREFIX = 'ratelimit:translate:'


class RateGuard:
    def __init__(self, limit: int, window: int, clock=time.time):
        self.limit = limit
        self.window = window
        self.clock = clock
        self._counters = {}  # client -> (window_index, count)

    def allow(self, client_id: str) -> bool:
        """Count one request for ``client_id``; False once the window budget is spent."""
        if not self.limit:
            return True

        window_index = int(self.clock() // self.window)
        count = incr_with_expiry(f"{RATE_PREFIX}{client_id}:{window_index}", self.window)
        if count is None:
            count = self._local_incr(client_id, window_index)

        if count > self.limit:
            logger.warning(f"Rate limit exceeded for {client_id} ({count}/{self.limit})")
            return False
        return True

    def _local_incr(self, client_id, window_index):
        current_index, count = self._counters.get(client_id, (window_index, 0))
        if current_index != window_index:
            count = 0
        count += 1
        self._counters[client_id] = (window_index, count)
        return count

    def reset(self):
        self._counters.clear()

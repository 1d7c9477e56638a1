"""Retry pacing

An `AttemptStrategy` bounds how often and for how long an operation is
retried. It never decides whether a try succeeded; that is up to the caller::

    strategy = AttemptStrategy(min=3, total=1.0, delay=0.01)
    for attempt in strategy.start():
        if try_something():
            break

`Attempt.has_next` lets a caller tell a retry from a final failure without
consuming an attempt::

    attempt = strategy.start()
    while attempt.next():
        try:
            return do_request()
        except TransientError:
            if not attempt.has_next():
                raise
"""

import time

class AttemptStrategy(object):
    """Try at least *min* times, and keep trying until *total* seconds have
    passed, waiting *delay* seconds between attempts."""

    def __init__(self, min=1, total=0.0, delay=0.0,
                 clock=time.monotonic, sleep=time.sleep):
        self.min = min
        self.total = total
        self.delay = delay
        self.clock = clock
        self.sleep = sleep

    def __repr__(self):
        return "%s(min=%r, total=%r, delay=%r)" % (
            self.__class__.__name__, self.min, self.total, self.delay)

    def start(self, cancel=None):
        return Attempt(self, cancel=cancel)

class Attempt(object):
    """A single run through an `AttemptStrategy`.

    Not shared between operations; every logical operation starts its own.
    """

    def __init__(self, strategy, cancel=None):
        self.strategy = strategy
        self.cancel = cancel
        self.count = 0
        now = strategy.clock()
        self.end = now + strategy.total
        self.last = now
        # The first attempt is always made.
        self.force = True

    def _next_sleep(self, now):
        return max(0.0, self.strategy.delay - (now - self.last))

    @property
    def cancelled(self):
        return self.cancel is not None and self.cancel.is_set()

    def next(self):
        """Wait for the next attempt and report whether it may be made."""
        if self.cancelled:
            return False
        now = self.strategy.clock()
        sleep = self._next_sleep(now)
        if (not self.force and self.count >= self.strategy.min
                and now + sleep >= self.end):
            return False
        self.force = False
        if sleep > 0 and self.count > 0:
            if self.cancel is not None:
                if self.cancel.wait(sleep):
                    return False
            else:
                self.strategy.sleep(sleep)
            now = self.strategy.clock()
        self.count += 1
        self.last = now
        return True

    def has_next(self):
        """Tell whether `next` would permit another attempt, without waiting.

        A positive answer is binding: the following `next` call succeeds even
        if the deadline passes in between.
        """
        if self.cancelled:
            return False
        if self.force or self.count < self.strategy.min:
            return True
        now = self.strategy.clock()
        if now + self._next_sleep(now) < self.end:
            self.force = True
            return True
        return False

    def __iter__(self):
        while self.next():
            yield self

import threading
import unittest

from s3lite import AttemptStrategy

class FakeClock(object):
    def __init__(self, now=0.0):
        self.now = now
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds

class CancelDuringWait(object):
    """A cancel event that fires while waiting."""

    def __init__(self):
        self.waits = []

    def is_set(self):
        return False

    def wait(self, timeout):
        self.waits.append(timeout)
        return True

def strategy(clock, **kwds):
    return AttemptStrategy(clock=clock, sleep=clock.sleep, **kwds)

class AttemptTests(unittest.TestCase):
    def test_first_attempt_always_made(self):
        clock = FakeClock()
        attempt = strategy(clock, min=0, total=0).start()
        assert attempt.next()
        assert not attempt.next()
        assert clock.sleeps == []

    def test_min_attempts_without_budget(self):
        clock = FakeClock()
        attempts = list(strategy(clock, min=3).start())
        assert len(attempts) == 3
        assert attempts[-1].count == 3

    def test_no_sleep_before_first(self):
        clock = FakeClock()
        attempt = strategy(clock, min=2, delay=0.5).start()
        assert attempt.next()
        assert clock.sleeps == []
        assert attempt.next()
        assert clock.sleeps == [0.5]

    def test_delay_counts_time_spent(self):
        clock = FakeClock()
        attempt = strategy(clock, min=2, delay=0.5).start()
        attempt.next()
        clock.now += 0.3
        attempt.next()
        assert len(clock.sleeps) == 1
        assert abs(clock.sleeps[0] - 0.2) < 1e-9

    def test_budget_terminates(self):
        clock = FakeClock()
        s = strategy(clock, min=5, total=20.0, delay=0.1)
        count = 0
        for attempt in s.start():
            count += 1
            assert count < 1000, "attempts never stopped"
        assert count >= 5
        assert 195 <= count <= 202
        assert clock.now + 0.1 >= 20.0
        assert clock.now < 20.5

    def test_min_beats_budget(self):
        clock = FakeClock()
        count = 0
        for attempt in strategy(clock, min=5, total=1.0, delay=10).start():
            count += 1
        assert count == 5
        assert clock.now == 40

    def test_has_next(self):
        clock = FakeClock()
        attempt = strategy(clock, min=2).start()
        assert attempt.next()
        assert attempt.has_next()
        assert attempt.next()
        assert not attempt.has_next()
        assert not attempt.next()

    def test_has_next_is_binding(self):
        clock = FakeClock()
        attempt = strategy(clock, min=1, total=1.0).start()
        assert attempt.next()
        assert attempt.has_next()
        clock.now = 5.0
        assert attempt.next()
        assert not attempt.has_next()

    def test_has_next_does_not_advance(self):
        clock = FakeClock()
        attempt = strategy(clock, min=3).start()
        attempt.next()
        for _ in range(5):
            assert attempt.has_next()
        assert attempt.count == 1

    def test_cancelled_before_start(self):
        cancel = threading.Event()
        cancel.set()
        attempt = strategy(FakeClock(), min=5).start(cancel=cancel)
        assert not attempt.next()
        assert not attempt.has_next()

    def test_cancelled_during_wait(self):
        clock = FakeClock()
        cancel = CancelDuringWait()
        attempt = strategy(clock, min=3, delay=1.0).start(cancel=cancel)
        assert attempt.next()
        assert not attempt.next()
        assert cancel.waits == [1.0]
        assert clock.sleeps == []

    def test_strategy_reusable(self):
        clock = FakeClock()
        s = strategy(clock, min=2)
        assert len(list(s.start())) == 2
        assert len(list(s.start())) == 2

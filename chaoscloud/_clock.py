"""Monotonic frame timer."""
import time


class Timer:
    """Elapsed time since construction, sampled once per frame.

    :param time_fn: callable returning monotonic seconds; substitute a
        deterministic source in tests
    """

    def __init__(self, time_fn=time.perf_counter):
        self.time_fn = time_fn
        self._origin = time_fn()
        self.elapsed = 0.0
        self.delta = 0.0

    def update(self):
        """Sample the time source; ``elapsed`` never decreases."""
        now = max(self.time_fn() - self._origin, self.elapsed)
        self.delta = now - self.elapsed
        self.elapsed = now
        return self.elapsed

    def reset(self):
        self._origin = self.time_fn()
        self.elapsed = 0.0
        self.delta = 0.0

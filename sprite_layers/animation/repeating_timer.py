"""
repeating_timer.py
------------------
Fixed-step timer. Elapsed time is accumulated and consumed one period at a
time, so a long frame yields several periods instead of skipping them.
"""

from sprite_layers.core.settings import Animation


class RepeatingTimer:
    __slots__ = ('period', 'elapsed')

    def __init__(self, period: float = Animation.TICK_PERIOD):
        if period <= 0:
            raise ValueError(f"Timer period must be positive, got {period!r}")
        self.period = period
        self.elapsed = 0.0

    def tick(self, dt: float) -> int:
        """
        Accumulate dt seconds.

        Returns:
            Number of whole periods that elapsed
        """
        if dt < 0:
            raise ValueError(f"Time cannot run backwards (dt={dt!r})")

        self.elapsed += dt
        fired = 0
        # epsilon absorbs float drift, e.g. 0.25 + 0.05 against 0.1 steps
        while self.elapsed + Animation.TIMER_EPSILON >= self.period:
            self.elapsed = max(0.0, self.elapsed - self.period)
            fired += 1
        return fired

    def reset(self):
        self.elapsed = 0.0

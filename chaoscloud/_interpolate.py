"""
Time-based blending between an old and a new transform pool.

The interpolator runs a looping cycle of fixed duration. Within a cycle the
current pool is the eased blend of ``old`` toward ``new``; once a cycle
expires the target becomes the new start and a fresh target is drawn, so
the animation never stalls at a target pose.

Usage::

    from chaoscloud._interpolate import Interpolator

    interp = Interpolator(transform_count=3, duration=5.0, rng=42)
    pool = interp.advance(2.5)        # halfway (before easing) to interp.new
"""
from __future__ import annotations

import logging

from chaoscloud._config import sanitize_duration
from chaoscloud._easing import get_easing, normalize
from chaoscloud._pool import TransformPool, TransformPoolFactory

IDLE = "idle"
PENDING = "pending"
BLENDING = "blending"
EXPIRED = "expired"


class Interpolator:
    """Own the old/new pools and the cycle bounds.

    :param transform_count: int, number of transforms per pool
    :param duration: float, length D of every cycle
    :param easing: str or callable, see :func:`chaoscloud._easing.get_easing`
    :param rng: numpy.random.Generator, int seed or None; ignored when a
        ``factory`` is supplied
    :param factory: TransformPoolFactory, optional
    :param now: float or None, start the first cycle at this time; when None
        the interpolator stays IDLE until the first :meth:`advance`
    """

    def __init__(self, transform_count=3, duration=5.0, easing=None,
                 rng=None, factory=None, now=0.0):
        self.factory = factory if factory is not None \
            else TransformPoolFactory(rng)
        self.duration = sanitize_duration(duration)
        self.ease = get_easing(easing)
        self.transform_count = transform_count

        self.current = self.factory.create(transform_count)
        self.old = None
        self.new = None
        self.start_time = None
        self.end_time = None

        if now is not None:
            self.start_cycle(now)

    def state(self, now) -> str:
        """Phase of the cycle at ``now``.

        IDLE before the first cycle, PENDING while ``now`` is earlier than
        the start of a scheduled cycle (the pool holds at ``old``),
        BLENDING for ``start_time <= now < end_time`` and EXPIRED from
        ``end_time`` on.
        """
        if self.start_time is None:
            return IDLE
        if now < self.start_time:
            return PENDING
        if now >= self.end_time:
            return EXPIRED
        return BLENDING

    def start_cycle(self, now):
        """Snapshot the current pool as ``old`` and draw a new target."""
        self.old = self.current.copy()
        self.new = self.factory.create(self.transform_count)
        self.start_time = float(now)
        self.end_time = self.start_time + self.duration
        logging.debug(f"Cycle started at {self.start_time:.3f}, "
                      f"ends at {self.end_time:.3f}")

    def resize(self, transform_count, now):
        """Regenerate the pools at a new size and restart the cycle."""
        self.transform_count = transform_count
        self.current = self.factory.create(transform_count)
        self.start_cycle(now)

    def blend(self, t) -> TransformPool:
        """Pool at eased parameter ``t``; exact copies at 0 and 1."""
        if t <= 0.0:
            return self.old.copy()
        if t >= 1.0:
            return self.new.copy()
        return self.old.blend(self.new, t)

    def advance(self, now) -> TransformPool:
        """Return the current pool at time ``now``.

        An expired cycle is completed (the current pool becomes exactly the
        target) and the next cycle is started at the previous end time, so
        consecutive cycles neither overlap nor leave a gap. If the clock
        jumped past more than a whole cycle the next one starts at ``now``.
        """
        state = self.state(now)
        if state == IDLE:
            self.start_cycle(now)
        elif state == EXPIRED:
            self.current = self.new.copy()
            if now - self.end_time >= self.duration:
                logging.debug(f"Clock overshot cycle end {self.end_time:.3f} "
                              f"by more than {self.duration}, restarting at "
                              f"{now:.3f}")
                self.start_cycle(now)
            else:
                self.start_cycle(self.end_time)

        if now <= self.start_time:
            self.current = self.old.copy()
        else:
            t = float(self.ease(normalize(now, self.start_time,
                                          self.end_time)))
            self.current = self.blend(t)
        return self.current

"""
Frame driver tying the interpolator, the point field and a timer together.

Usage::

    from chaoscloud import Animation

    anim = Animation(point_count=20000, transform_count=3, color=True, seed=1)
    while running:
        anim.step()                      # samples the timer
        upload(anim.positions, anim.colors)
        anim.field.mark_clean()
"""
import logging

import numpy

from chaoscloud._backend import get_backend
from chaoscloud._clock import Timer
from chaoscloud._config import DEFAULTS, sanitize_count
from chaoscloud._field import PointField
from chaoscloud._interpolate import Interpolator
from chaoscloud._pool import TransformPoolFactory


class Animation:
    def __init__(self, point_count=DEFAULTS['point_count'],
                 transform_count=DEFAULTS['transform_count'],
                 duration=DEFAULTS['duration'], easing=DEFAULTS['easing'],
                 color=DEFAULTS['color'], backend=DEFAULTS['backend'],
                 workers=None, seed=None, timer=None):
        """
        An evolving point cloud: every frame each point is mapped through one
        randomly chosen transform of a pool that drifts smoothly between
        random targets.

        Important methods:
            Animation.step: advance the pool and map every point once
            Animation.reshuffle: start a new cycle immediately

        Important objects:
            Animation.interpolator: old/new pools and the cycle clock
            Animation.field: position (and color) buffers

        :param point_count: int, number of points, see chaoscloud._config
        :param transform_count: int, transforms per pool
        :param duration: float, seconds per blend cycle
        :param easing: str or callable, blend easing curve
        :param color: bool, derive per-point colors from displacement
        :param backend: str, batch backend name ("numpy", "multiprocessing")
        :param workers: int, optional, worker processes for the
                        multiprocessing backend
        :param seed: int or numpy.random.Generator, optional
        :param timer: Timer, optional, frame time source
        """
        self.rng = numpy.random.default_rng(seed)
        self.timer = timer if timer is not None else Timer()

        kwargs = {} if workers is None else {'workers': workers}
        self.backend = get_backend(backend, **kwargs)

        self._point_count = sanitize_count('point_count', point_count)
        self._transform_count = sanitize_count('transform_count',
                                               transform_count)

        self.interpolator = Interpolator(
            transform_count=self._transform_count, duration=duration,
            easing=easing, factory=TransformPoolFactory(self.rng),
            now=self.timer.elapsed)
        self.field = PointField(self._point_count, color=color, rng=self.rng,
                                backend=self.backend)
        self.frame = 0
        self.now = self.timer.elapsed

    # Configuration surface
    @property
    def point_count(self):
        return self._point_count

    @point_count.setter
    def point_count(self, value):
        self._point_count = sanitize_count('point_count', value)
        self.field.reset(self._point_count)

    @property
    def transform_count(self):
        return self._transform_count

    @transform_count.setter
    def transform_count(self, value):
        self._transform_count = sanitize_count('transform_count', value)
        self.interpolator.resize(self._transform_count, self.now)
        self.field.reset(self._point_count)

    def reshuffle(self):
        """Start a new cycle toward a fresh random pool right now."""
        logging.debug(f"Reshuffle at {self.now:.3f}")
        self.interpolator.start_cycle(self.now)

    # Buffers handed to the presentation layer
    @property
    def positions(self):
        return self.field.positions

    @property
    def colors(self):
        return self.field.colors

    @property
    def dirty(self):
        return self.field.dirty

    def step(self, now=None):
        """Run one frame and return the pool the points were mapped through.

        :param now: float, optional, elapsed time; samples the timer if None
        """
        if now is None:
            now = self.timer.update()
        self.now = now
        pool = self.interpolator.advance(now)
        new_pool = self.interpolator.new if self.field.color else None
        self.field.update(pool, new_pool)
        self.field.validate()
        self.frame += 1
        return pool

    def close(self):
        self.backend.terminate()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

"""Point buffers and the per-frame stochastic update that maps them."""
import logging

import numpy

from chaoscloud._backend import get_backend
from chaoscloud._color import FALLBACK_COLOR, displacement_colors


class PointField:
    def __init__(self, point_count, color=False, rng=None, backend=None,
                 dtype=numpy.float32, max_distance=2.0, saturation=1.0,
                 lightness=0.5):
        """
        Position buffer (and optional color buffer) of a point cloud that is
        re-mapped through a transform pool every frame.

        :param point_count: int, number of points N
        :param color: bool, keep an (N, 3) RGB buffer derived from how far
                      each point would move under the next cycle's pool
        :param rng: numpy.random.Generator, int seed or None
        :param backend: BatchBackend or backend name, see
                        chaoscloud._backend.get_backend
        :param dtype: numpy dtype of the buffers
        :param max_distance: float, displacement mapped to the hot end of the
                             color gradient
        :param saturation: float, HSL saturation of the point colors
        :param lightness: float, HSL lightness of the point colors
        """
        if not isinstance(rng, numpy.random.Generator):
            rng = numpy.random.default_rng(rng)
        self.rng = rng
        if backend is None or isinstance(backend, str):
            backend = get_backend(backend)
        self.backend = backend

        self.color = color
        self.dtype = dtype
        self.max_distance = max_distance
        self.saturation = saturation
        self.lightness = lightness

        self.positions = None
        self.colors = None
        self.dirty = False
        self.reset(point_count)

    def __len__(self):
        return self.positions.shape[0]

    def reset(self, point_count=None):
        """(Re)allocate buffers with fresh random positions in [-1, 1]^3."""
        if point_count is None:
            point_count = len(self)
        if point_count < 1:
            raise ValueError(f"point_count must be positive, got {point_count}")
        self.positions = self.rng.uniform(-1.0, 1.0, size=(point_count, 3)
                                          ).astype(self.dtype)
        if self.color:
            self.colors = numpy.tile(FALLBACK_COLOR, (point_count, 1)
                                     ).astype(self.dtype)
        else:
            self.colors = None
        self.dirty = True

    def mark_clean(self):
        """Called by the consumer once the buffers have been uploaded."""
        self.dirty = False

    def update(self, current_pool, new_pool=None):
        """Map every point through a randomly chosen entry of ``current_pool``.

        The transform is applied to the stored position, so positions
        compound from frame to frame. Points that come out non-finite are
        reset to the origin (and the fallback color). With a color buffer
        and ``new_pool``, the color encodes how far the mapped point would
        move under ``new_pool`` at the same index.

        :return: int, number of points reset by the guard
        """
        k = len(current_pool)
        choice = self.rng.integers(0, k, size=len(self))

        mapped = self.backend.batch_apply(self.positions,
                                          current_pool.matrices(), choice)
        bad = ~numpy.isfinite(mapped).all(axis=1)
        if bad.any():
            logging.warning(f"Non-finite coordinates in {bad.sum()} point(s) "
                            f"(first at index {numpy.flatnonzero(bad)[0]}), "
                            f"reset to the origin")
            mapped[bad] = 0.0

        # float32 overflow is still non-finite after the cast
        with numpy.errstate(over='ignore'):
            self.positions[...] = mapped
        overflow = ~numpy.isfinite(self.positions).all(axis=1)
        if overflow.any():
            logging.warning(f"{overflow.sum()} point(s) overflowed the "
                            f"{numpy.dtype(self.dtype).name} buffer, reset "
                            f"to the origin")
            self.positions[overflow] = 0.0
            bad |= overflow

        if self.color:
            if new_pool is not None:
                distance = self.backend.batch_displacement(
                    mapped, new_pool.matrices(), choice)
                colors = displacement_colors(
                    distance, saturation=self.saturation,
                    lightness=self.lightness, max_distance=self.max_distance)
                colors[~numpy.isfinite(distance)] = FALLBACK_COLOR
                self.colors[...] = colors
            self.colors[bad] = FALLBACK_COLOR

        self.dirty = True
        return int(bad.sum())

    def validate(self):
        """Replace any remaining non-finite value in the buffers with a safe
        default; returns the number of values replaced."""
        bad = numpy.flatnonzero(~numpy.isfinite(self.positions))
        for i in bad:
            logging.error(f"Invalid vertex data at index {i}")
        self.positions.reshape(-1)[bad] = 0.0
        count = len(bad)
        if self.colors is not None:
            bad_c = ~numpy.isfinite(self.colors).all(axis=1)
            self.colors[bad_c] = FALLBACK_COLOR
            count += int(bad_c.sum())
        return count

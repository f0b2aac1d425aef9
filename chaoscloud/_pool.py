"""Transform pools and the factory that draws them at random."""
from __future__ import annotations

import logging

import numpy as np

from chaoscloud._attributes import (IDENTITY_QUATERNION, RigidAttributes,
                                    normalize_quaternion)


class TransformPool:
    """Immutable ordered set of :class:`RigidAttributes`.

    Points address entries by index, so order is the only structure a pool
    carries.
    """

    __slots__ = ('_attributes',)

    def __init__(self, attributes):
        self._attributes = tuple(attributes)
        for a in self._attributes:
            if not isinstance(a, RigidAttributes):
                raise TypeError(f"Expected RigidAttributes, got {type(a)}")

    def __len__(self):
        return len(self._attributes)

    def __getitem__(self, i):
        return self._attributes[i]

    def __iter__(self):
        return iter(self._attributes)

    def __eq__(self, other):
        if not isinstance(other, TransformPool):
            return NotImplemented
        return (len(self) == len(other)
                and all(a == b for a, b in zip(self, other)))

    __hash__ = None

    def __repr__(self):
        return "TransformPool({})".format(list(self._attributes))

    def copy(self):
        """Deep copy; the new pool shares no arrays with this one."""
        return TransformPool(a.copy() for a in self._attributes)

    def allclose(self, other, atol=1e-6):
        return (len(self) == len(other)
                and all(a.allclose(b, atol=atol) for a, b in zip(self, other)))

    def blend(self, other, t):
        """Blend every entry toward the entry of ``other`` at the same index."""
        if len(self) != len(other):
            raise ValueError(f"Cannot blend pools of size {len(self)} and "
                             f"{len(other)}")
        return TransformPool(a.blend(b, t) for a, b in zip(self, other))

    def matrices(self) -> np.ndarray:
        """Stacked (K, 4, 4) composition of every entry."""
        return np.stack([a.compose() for a in self._attributes])


class TransformPoolFactory:
    """Draw pools of random transforms with bounded parameters.

    :param rng: numpy.random.Generator or int seed or None
    :param rotation_range: tuple, uniform range for each quaternion component
    :param scale_range: tuple, uniform range for each scale factor; must be
        strictly positive
    :param translation_range: tuple, uniform range for each offset
    :param max_redraws: int, attempts before a degenerate quaternion draw is
        replaced by the identity
    """

    def __init__(self, rng=None, rotation_range=(0.0, 1.0),
                 scale_range=(0.1, 1.0), translation_range=(-1.0, 1.0),
                 max_redraws=8):
        if not isinstance(rng, np.random.Generator):
            rng = np.random.default_rng(rng)
        if scale_range[0] <= 0.0:
            raise ValueError("scale_range must be strictly positive")
        self.rng = rng
        self.rotation_range = rotation_range
        self.scale_range = scale_range
        self.translation_range = translation_range
        self.max_redraws = max_redraws

    def _quaternion(self):
        for _ in range(self.max_redraws):
            q = self.rng.uniform(*self.rotation_range, size=4)
            if np.linalg.norm(q) > 1e-12:
                return normalize_quaternion(q)
        logging.warning("Quaternion draw degenerated to zero length, "
                        "using the identity rotation")
        return IDENTITY_QUATERNION.copy()

    def attributes(self) -> RigidAttributes:
        rotation = self._quaternion()
        scale = self.rng.uniform(*self.scale_range, size=3)
        translation = self.rng.uniform(*self.translation_range, size=3)
        return RigidAttributes(rotation, scale, translation)

    def create(self, count) -> TransformPool:
        """Return a pool of ``count`` freshly drawn transforms."""
        if count < 2:
            raise ValueError(f"count must be at least 2, got {count}")
        return TransformPool(self.attributes() for _ in range(count))

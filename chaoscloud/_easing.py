"""Easing curves used to reparameterise the blend between two pools.

Every curve maps [0, 1] onto [0, 1] monotonically with ``ease(0) == 0`` and
``ease(1) == 1`` exactly, and has zero slope at both endpoints. Inputs
outside [0, 1] are clipped.
"""
from __future__ import annotations

from typing import Callable

import numpy as np


def normalize(now, start, end):
    """Linearly map ``now`` in [start, end] onto [0, 1] (clipped)."""
    if end <= start:
        raise ValueError("end must be greater than start")
    return float(np.clip((now - start) / (end - start), 0.0, 1.0))


def smoothstep(t):
    """Hermite smoothstep, 3t^2 - 2t^3."""
    t = np.clip(t, 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def smootherstep(t):
    """Perlin's smootherstep, 6t^5 - 15t^4 + 10t^3 (zero 1st and 2nd derivative
    at the endpoints)."""
    t = np.clip(t, 0.0, 1.0)
    return t * t * t * (t * (6.0 * t - 15.0) + 10.0)


def cubic_in_out(t):
    """Cubic ease-in-out: 4t^3 on the first half, mirrored on the second."""
    t = np.clip(t, 0.0, 1.0)
    return np.where(t < 0.5, 4.0 * t ** 3, 1.0 - (-2.0 * t + 2.0) ** 3 / 2.0)


_EASINGS: dict[str, Callable] = {
    "smoothstep": smoothstep,
    "smootherstep": smootherstep,
    "cubic": cubic_in_out,
}


def get_easing(name: str | Callable | None = None) -> Callable:
    """Look up an easing curve by name.

    Parameters
    ----------
    name : str, callable or None
        ``"smootherstep"`` (default when ``None``), ``"smoothstep"`` or
        ``"cubic"``. A callable is returned unchanged.

    Returns
    -------
    callable
        ``ease(t) -> float`` on [0, 1].
    """
    if name is None:
        return smootherstep
    if callable(name):
        return name
    if name not in _EASINGS:
        raise ValueError(
            f"Unknown easing {name!r}. Available: {list(_EASINGS.keys())}"
        )
    return _EASINGS[name]

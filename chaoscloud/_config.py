"""Default settings and boundary validation for the animation parameters."""
from __future__ import annotations

import logging
import numbers

DEFAULTS = dict(
    point_count=10000,
    transform_count=3,
    duration=5.0,
    easing="smootherstep",
    color=False,
    backend="numpy",
)

# Recognised (inclusive) ranges; positive values outside are clamped
RANGES = dict(
    point_count=(1, 500000),
    transform_count=(2, 5),
)


def sanitize_count(name: str, value) -> int:
    """Validate a point/transform count before it reaches the engine.

    :param name: str, key of ``RANGES`` (``"point_count"`` or
        ``"transform_count"``)
    :param value: int, requested count
    :return: int, the count clamped into its recognised range

    Non-integers and values below one are rejected with ``ValueError``; an
    empty buffer or pool is never produced.
    """
    if name not in RANGES:
        raise ValueError(f"Unknown setting {name!r}. "
                         f"Available: {list(RANGES.keys())}")
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    value = int(value)
    if value < 1:
        raise ValueError(f"{name} must be positive, got {value}")

    lo, hi = RANGES[name]
    clamped = max(lo, min(hi, value))
    if clamped != value:
        logging.warning(f"{name}={value} is outside the supported range "
                        f"[{lo}, {hi}], using {clamped}")
    return clamped


def sanitize_duration(value) -> float:
    """Cycle duration must be a finite positive number."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"duration must be a number, got {value!r}")
    if not value > 0.0 or value == float('inf'):
        raise ValueError(f"duration must be finite and positive, got {value}")
    return value

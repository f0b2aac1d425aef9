"""
chaoscloud: a point cloud re-mapped every frame through a drifting pool of
random rigid/affine transforms.

Usage::

    from chaoscloud import Animation

    anim = Animation(point_count=50000, transform_count=3, color=True)
    for _ in range(100):
        anim.step()
    anim.positions      # (N, 3) float32
    anim.colors         # (N, 3) RGB in [0, 1]

    # Watch it
    from chaoscloud import animate_points
    fig, ax, ani = animate_points(anim)
"""
from ._attributes import (
    RigidAttributes,
    lerp,
    matrix_to_quaternion,
    normalize_quaternion,
    quaternion_to_matrix,
    slerp,
)
from ._easing import cubic_in_out, get_easing, normalize, smootherstep, smoothstep
from ._pool import TransformPool, TransformPoolFactory
from ._interpolate import BLENDING, EXPIRED, IDLE, PENDING, Interpolator
from ._color import displacement_colors, distance_to_hue, hsl_to_rgb
from ._field import PointField
from ._backend import get_backend
from ._clock import Timer
from ._animation import Animation
from ._plotting import PointCloudPlotter, animate_points

__version__ = "0.1.0"

__all__ = [
    "Animation",
    "RigidAttributes",
    "TransformPool",
    "TransformPoolFactory",
    "Interpolator",
    "PointField",
    "Timer",
    "IDLE",
    "PENDING",
    "BLENDING",
    "EXPIRED",
    "slerp",
    "lerp",
    "normalize_quaternion",
    "quaternion_to_matrix",
    "matrix_to_quaternion",
    "normalize",
    "smoothstep",
    "smootherstep",
    "cubic_in_out",
    "get_easing",
    "distance_to_hue",
    "hsl_to_rgb",
    "displacement_colors",
    "get_backend",
    "PointCloudPlotter",
    "animate_points",
]

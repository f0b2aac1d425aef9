"""
Rigid/affine transform attributes and the quaternion math behind them.

Quaternions are stored as ``(x, y, z, w)`` arrays. Every function here is a
pure value-returning function; inputs are never modified in place.

Usage::

    from chaoscloud._attributes import RigidAttributes, slerp

    a = RigidAttributes([0, 0, 0, 1], [1, 1, 1], [0, 0, 0])
    M = a.compose()                       # (4, 4) homogeneous matrix
    b = RigidAttributes.decompose(M)      # back again
"""
from __future__ import annotations

import numpy as np

IDENTITY_QUATERNION = np.array([0.0, 0.0, 0.0, 1.0])

# Below this the slerp weights are numerically unstable
_SLERP_EPS = np.finfo(float).eps


def _frozen(values, size: int) -> np.ndarray:
    arr = np.array(values, dtype=float).reshape(size)
    arr.setflags(write=False)
    return arr


# ---------------------------------------------------------------------------
# Pure quaternion / vector helpers
# ---------------------------------------------------------------------------
def normalize_quaternion(q) -> np.ndarray:
    """Return ``q / ||q||``.

    A zero-length quaternion has no direction and normalises to NaN, the
    same as the vector math it replaces; callers that draw random
    quaternions guard against that case themselves.
    """
    q = np.asarray(q, dtype=float)
    with np.errstate(invalid='ignore', divide='ignore'):
        return q / np.linalg.norm(q)


def lerp(a, b, t: float) -> np.ndarray:
    """Component-wise linear interpolation, exact at ``t = 0`` and ``t = 1``."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    return (1.0 - t) * a + t * b


def slerp(a, b, t: float) -> np.ndarray:
    """Spherical linear interpolation between unit quaternions ``a`` and ``b``.

    Takes the shorter arc. The result is renormalised to counter floating
    point drift, except at the endpoints where ``a`` (``t = 0``) or ``b``
    (``t = 1``) is returned unchanged.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if t == 0:
        return a.copy()
    if t == 1:
        return b.copy()

    cos_half = float(np.dot(a, b))
    if cos_half < 0.0:
        b = -b
        cos_half = -cos_half

    if cos_half >= 1.0:
        return a.copy()

    sqr_sin_half = 1.0 - cos_half * cos_half
    if sqr_sin_half <= _SLERP_EPS:
        # Nearly parallel, fall back to a normalised lerp
        return normalize_quaternion((1.0 - t) * a + t * b)

    sin_half = np.sqrt(sqr_sin_half)
    half = np.arctan2(sin_half, cos_half)
    ratio_a = np.sin((1.0 - t) * half) / sin_half
    ratio_b = np.sin(t * half) / sin_half
    return normalize_quaternion(ratio_a * a + ratio_b * b)


def quaternion_to_matrix(q) -> np.ndarray:
    """Rotation matrix (3, 3) of the unit quaternion ``q = (x, y, z, w)``."""
    x, y, z, w = np.asarray(q, dtype=float)
    x2, y2, z2 = x + x, y + y, z + z
    xx, xy, xz = x * x2, x * y2, x * z2
    yy, yz, zz = y * y2, y * z2, z * z2
    wx, wy, wz = w * x2, w * y2, w * z2
    return np.array([
        [1.0 - (yy + zz), xy - wz, xz + wy],
        [xy + wz, 1.0 - (xx + zz), yz - wx],
        [xz - wy, yz + wx, 1.0 - (xx + yy)],
    ])


def matrix_to_quaternion(R) -> np.ndarray:
    """Unit quaternion ``(x, y, z, w)`` of a pure rotation matrix ``R``.

    Branches on the largest diagonal term so the square root argument stays
    well away from zero.
    """
    R = np.asarray(R, dtype=float)
    m11, m12, m13 = R[0]
    m21, m22, m23 = R[1]
    m31, m32, m33 = R[2]
    trace = m11 + m22 + m33

    if trace > 0:
        s = 0.5 / np.sqrt(trace + 1.0)
        q = [(m32 - m23) * s, (m13 - m31) * s, (m21 - m12) * s, 0.25 / s]
    elif m11 > m22 and m11 > m33:
        s = 2.0 * np.sqrt(1.0 + m11 - m22 - m33)
        q = [0.25 * s, (m12 + m21) / s, (m13 + m31) / s, (m32 - m23) / s]
    elif m22 > m33:
        s = 2.0 * np.sqrt(1.0 + m22 - m11 - m33)
        q = [(m12 + m21) / s, 0.25 * s, (m23 + m32) / s, (m13 - m31) / s]
    else:
        s = 2.0 * np.sqrt(1.0 + m33 - m11 - m22)
        q = [(m13 + m31) / s, (m23 + m32) / s, 0.25 * s, (m21 - m12) / s]
    return normalize_quaternion(q)


# ---------------------------------------------------------------------------
# Value type
# ---------------------------------------------------------------------------
class RigidAttributes:
    """Rotation, scale and translation of a single transform.

    :param rotation: array_like (4,), quaternion ``(x, y, z, w)``; stored as
        given, normalise before constructing if needed
    :param scale: array_like (3,), per-axis scale factors
    :param translation: array_like (3,), offset applied after rotation

    The backing arrays are read-only so a pool snapshot can never be
    altered through a shared reference.
    """

    __slots__ = ('rotation', 'scale', 'translation')

    def __init__(self, rotation, scale, translation):
        self.rotation = _frozen(rotation, 4)
        self.scale = _frozen(scale, 3)
        self.translation = _frozen(translation, 3)

    def __repr__(self):
        return ("RigidAttributes(rotation={}, scale={}, translation={})"
                .format(self.rotation.tolist(), self.scale.tolist(),
                        self.translation.tolist()))

    def __eq__(self, other):
        if not isinstance(other, RigidAttributes):
            return NotImplemented
        return (np.array_equal(self.rotation, other.rotation)
                and np.array_equal(self.scale, other.scale)
                and np.array_equal(self.translation, other.translation))

    __hash__ = None

    def allclose(self, other, atol=1e-6):
        """Component-wise comparison within ``atol``."""
        return (np.allclose(self.rotation, other.rotation, atol=atol)
                and np.allclose(self.scale, other.scale, atol=atol)
                and np.allclose(self.translation, other.translation,
                                atol=atol))

    def copy(self):
        return RigidAttributes(self.rotation.copy(), self.scale.copy(),
                               self.translation.copy())

    def compose(self) -> np.ndarray:
        """Homogeneous (4, 4) matrix: scale first, then rotate, then translate."""
        M = np.eye(4)
        M[:3, :3] = quaternion_to_matrix(self.rotation) * self.scale
        M[:3, 3] = self.translation
        return M

    @classmethod
    def decompose(cls, matrix) -> "RigidAttributes":
        """Rebuild attributes from a TRS matrix produced by :meth:`compose`.

        A negative determinant is attributed to the x axis scale.
        """
        M = np.asarray(matrix, dtype=float)
        if M.shape != (4, 4):
            raise ValueError(f"Expected a (4, 4) matrix, got {M.shape}")

        scale = np.linalg.norm(M[:3, :3], axis=0)
        if np.any(scale == 0.0) or not np.all(np.isfinite(scale)):
            raise ValueError("Matrix has a degenerate basis and cannot be "
                             "decomposed")
        if np.linalg.det(M[:3, :3]) < 0:
            scale[0] = -scale[0]

        rotation = matrix_to_quaternion(M[:3, :3] / scale)
        return cls(rotation, scale, M[:3, 3])

    def apply(self, points) -> np.ndarray:
        """Apply the composed transform to an (N, 3) array of points."""
        M = self.compose()
        points = np.asarray(points)
        return points @ M[:3, :3].T + M[:3, 3]

    def blend(self, other, t: float) -> "RigidAttributes":
        """Slerp the rotation, lerp scale and translation toward ``other``."""
        return RigidAttributes(slerp(self.rotation, other.rotation, t),
                               lerp(self.scale, other.scale, t),
                               lerp(self.translation, other.translation, t))

"""
Batch computation backends for the per-point transform pass.

Every point reads only the (shared, read-only) stacked pool matrices and
writes only its own row, so the pass splits freely. Backends:

- ``NumpyBackend``: Vectorized numpy (default, always available)
- ``MultiprocessingBackend``: CPU parallelism via ``multiprocessing.Pool``

The random transform choice is always drawn by the caller, so a seeded run
gives the same buffers on every backend.

Usage::

    from chaoscloud._backend import get_backend

    backend = get_backend("numpy")                        # explicit
    backend = get_backend("multiprocessing", workers=4)   # worker pool
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable, Any
import numpy as np


# ---------------------------------------------------------------------------
# Protocol (structural typing interface)
# ---------------------------------------------------------------------------
@runtime_checkable
class BatchBackend(Protocol):
    """Protocol for batch computation backends."""

    name: str

    def batch_apply(
        self,
        points: np.ndarray,
        matrices: np.ndarray,
        choice: np.ndarray,
    ) -> np.ndarray:
        """Apply one affine matrix per point.

        Parameters
        ----------
        points : ndarray of shape (N, 3)
        matrices : ndarray of shape (K, 4, 4)
        choice : integer ndarray of shape (N,), values in [0, K)

        Returns
        -------
        ndarray of shape (N, 3), row i is ``matrices[choice[i]]`` applied to
        ``points[i]``
        """
        ...

    def batch_displacement(
        self,
        points: np.ndarray,
        matrices: np.ndarray,
        choice: np.ndarray,
    ) -> np.ndarray:
        """Distance each point would move under its chosen matrix.

        Parameters
        ----------
        points : ndarray of shape (N, 3)
        matrices : ndarray of shape (K, 4, 4)
        choice : integer ndarray of shape (N,)

        Returns
        -------
        ndarray of shape (N,)
        """
        ...


def _apply_grouped(points, matrices, choice):
    """Apply ``matrices[choice]`` row-wise, one matmul per distinct matrix."""
    out = np.empty(points.shape, dtype=float)
    with np.errstate(invalid='ignore', over='ignore'):
        for k in range(matrices.shape[0]):
            mask = choice == k
            if not mask.any():
                continue
            M = matrices[k]
            out[mask] = points[mask] @ M[:3, :3].T + M[:3, 3]
    return out


def _displacement(points, matrices, choice):
    moved = _apply_grouped(points, matrices, choice)
    with np.errstate(invalid='ignore', over='ignore'):
        return np.linalg.norm(moved - points, axis=1)


# ---------------------------------------------------------------------------
# Numpy backend (always available)
# ---------------------------------------------------------------------------
class NumpyBackend:
    """Vectorized numpy backend. Default for all installations."""

    name = "numpy"

    def batch_apply(
        self,
        points: np.ndarray,
        matrices: np.ndarray,
        choice: np.ndarray,
    ) -> np.ndarray:
        return _apply_grouped(points, matrices, choice)

    def batch_displacement(
        self,
        points: np.ndarray,
        matrices: np.ndarray,
        choice: np.ndarray,
    ) -> np.ndarray:
        return _displacement(points, matrices, choice)

    def terminate(self):
        pass


# ---------------------------------------------------------------------------
# Multiprocessing backend
# ---------------------------------------------------------------------------
class MultiprocessingBackend:
    """CPU-parallel backend using multiprocessing.Pool.

    The buffer is cut into contiguous chunks, each chunk is transformed by a
    worker and the results are concatenated back in order.
    """

    name = "multiprocessing"

    def __init__(self, workers: int = 2):
        import multiprocessing as mp
        self.workers = workers
        self.pool = mp.Pool(processes=workers)

    def _chunks(self, n: int) -> list:
        # A few chunks per worker keeps the load balanced
        bounds = np.linspace(0, n, 4 * self.workers + 1).astype(int)
        return [(lo, hi) for lo, hi in zip(bounds[:-1], bounds[1:]) if hi > lo]

    def _map(self, worker, points, choice):
        tasks = [(points[lo:hi], choice[lo:hi])
                 for lo, hi in self._chunks(points.shape[0])]
        results = self.pool.map(worker, tasks)
        return np.concatenate(results, axis=0)

    def batch_apply(
        self,
        points: np.ndarray,
        matrices: np.ndarray,
        choice: np.ndarray,
    ) -> np.ndarray:
        return self._map(_ApplyWorker(matrices), points, choice)

    def batch_displacement(
        self,
        points: np.ndarray,
        matrices: np.ndarray,
        choice: np.ndarray,
    ) -> np.ndarray:
        return self._map(_DisplacementWorker(matrices), points, choice)

    def terminate(self):
        self.pool.terminate()

    def __del__(self):
        try:
            self.pool.terminate()
        except Exception:
            pass

    def __getstate__(self):
        state = self.__dict__.copy()
        state.pop('pool', None)
        return state


class _ApplyWorker:
    """Pickleable callable for multiprocessing transform application."""
    def __init__(self, matrices: np.ndarray):
        self.matrices = matrices

    def __call__(self, task) -> np.ndarray:
        points, choice = task
        return _apply_grouped(points, self.matrices, choice)


class _DisplacementWorker:
    """Pickleable callable for multiprocessing displacement magnitudes."""
    def __init__(self, matrices: np.ndarray):
        self.matrices = matrices

    def __call__(self, task) -> np.ndarray:
        points, choice = task
        return _displacement(points, self.matrices, choice)


# ---------------------------------------------------------------------------
# Backend registry
# ---------------------------------------------------------------------------
_BACKENDS: dict[str, type] = {
    "numpy": NumpyBackend,
    "multiprocessing": MultiprocessingBackend,
}


def get_backend(name: str | None = None, **kwargs: Any) -> BatchBackend:
    """Get a computation backend by name.

    Parameters
    ----------
    name : str or None
        Backend name: ``"numpy"``, ``"multiprocessing"``, or ``None``
        (numpy default).
    **kwargs
        Passed to the backend constructor (e.g. ``workers=4`` for
        multiprocessing).

    Returns
    -------
    BatchBackend
        An instance satisfying the :class:`BatchBackend` protocol.
    """
    if name is None or name == "numpy":
        return NumpyBackend()
    if name not in _BACKENDS:
        raise ValueError(
            f"Unknown backend {name!r}. Available: {list(_BACKENDS.keys())}"
        )
    return _BACKENDS[name](**kwargs)

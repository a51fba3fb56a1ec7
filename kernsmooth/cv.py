"""
Cross-validation objectives for bandwidth selection.

Each scorer captures its dataset at construction and is called with a
bandwidth vector, so it can be handed directly to a minimiser. Leave-one-out
(jackknife) estimates follow Haerdle & Mueller (2000); the density objective
is the least-squares cross-validation criterion of Scott & Sain (2005).
"""

from __future__ import annotations

import logging

import numpy as np
from sklearn.metrics import mean_squared_error  # type: ignore

from .exceptions import InvalidArgumentError
from .kernels import evaluate_at, leave_one_out, working_dtype
from .numerics import stddev

__all__ = ["RegressionCV", "DensityCV"]

LOGGER = logging.getLogger(__name__)


def _as_2d(x: np.ndarray) -> np.ndarray:
    x = np.asarray(x)
    x = x.astype(working_dtype(x), copy=False)
    if x.ndim == 1:
        return x[:, None]
    if x.ndim != 2:
        raise InvalidArgumentError(f"x must be 1-D or 2-D, got shape {x.shape}")
    return x


class _Scorer:
    """Common state of the cross-validation scorers."""

    def __init__(
        self, X: np.ndarray, n_jobs: int | None = 1, chunk_size: int | None = None
    ) -> None:
        self.X = _as_2d(X)
        if self.X.shape[0] < 2:
            raise InvalidArgumentError(
                f"cross-validation needs at least two samples, got {self.X.shape[0]}"
            )
        self.n_jobs = n_jobs
        self.chunk_size = chunk_size
        self.evals = 0

    @property
    def dtype(self) -> np.dtype:
        return self.X.dtype

    def _bandwidth(self, h) -> np.ndarray:
        h = np.atleast_1d(np.asarray(h, dtype=self.dtype))
        if h.shape != (self.X.shape[1],):
            raise InvalidArgumentError(
                f"size(h) = {h.size} /= size(x,2) = {self.X.shape[1]}"
            )
        return h


class RegressionCV(_Scorer):
    """Leave-one-out mean squared error of Nadaraya-Watson regression.

    Args:
        X: Independent values, shape (n,) or (n, d).
        y: Dependent values, shape (n,).
        n_jobs: Number of joblib threads for the jackknife loop.
        chunk_size: Samples evaluated per chunk.
    """

    def __init__(
        self,
        X: np.ndarray,
        y: np.ndarray,
        n_jobs: int | None = 1,
        chunk_size: int | None = None,
    ) -> None:
        super().__init__(X, n_jobs=n_jobs, chunk_size=chunk_size)
        self.y = np.asarray(y, dtype=self.dtype).ravel()
        if self.y.shape[0] != self.X.shape[0]:
            raise InvalidArgumentError(
                f"size(y) = {self.y.shape[0]} /= size(x,1) = {self.X.shape[0]}"
            )

    def __call__(self, h) -> float:
        """Computes the jackknife mean squared error for bandwidth ``h``.

        Returns the largest finite number of the working type if any
        leave-one-out estimate has no kernel weight mass.
        """
        h = self._bandwidth(h)
        yhat, valid = leave_one_out(
            self.X, h, y=self.y, n_jobs=self.n_jobs, chunk_size=self.chunk_size
        )
        self.evals += 1
        if not valid.all():
            LOGGER.debug(
                "h=%s leaves %d samples without weight mass", h, np.sum(~valid)
            )
            return float(np.finfo(self.dtype).max)
        return float(mean_squared_error(self.y, yhat))


class DensityCV(_Scorer):
    """Least-squares cross-validation score of the kernel density estimate.

    score(h) = integral f_h(x)^2 dx - 2/n sum_i f_h,-i(x_i)

    The integral is approximated on ``n * mesh_n`` points starting at
    ``min(x) - 3 std(x)`` per dimension, where ``mesh_n`` is 100 for up to
    100 samples and ``max(2, 10000 // n)`` beyond, so the mesh stays near
    10000 points for large samples. The window and resolution are a
    speed/accuracy trade-off and may be tuned.

    Args:
        X: Samples, shape (n,) or (n, d).
        n_jobs: Number of joblib threads for the mesh and jackknife loops.
        chunk_size: Points evaluated per chunk.
    """

    window = 3.0

    def __init__(
        self, X: np.ndarray, n_jobs: int | None = 1, chunk_size: int | None = None
    ) -> None:
        super().__init__(X, n_jobs=n_jobs, chunk_size=chunk_size)
        n = self.X.shape[0]
        self.mesh_n = 100 if n <= 100 else max(2, 10000 // n)
        sd = stddev(self.X)
        lower = self.X.min(axis=0) - self.window * sd
        upper = self.X.max(axis=0) + self.window * sd
        self.delta = (upper - lower) / (n * (self.mesh_n - 1))
        steps = np.arange(n * self.mesh_n, dtype=self.dtype)[:, None]
        self.mesh = (lower + self.delta * steps).astype(self.dtype, copy=False)
        self.cell = float(np.prod(self.delta))

    def __call__(self, h) -> float:
        """Computes the LSCV score for bandwidth ``h``."""
        h = self._bandwidth(h)
        n = self.X.shape[0]
        multiplier = 1.0 / (n * float(np.prod(h)))

        f_mesh, _ = evaluate_at(
            self.X, self.mesh, h, n_jobs=self.n_jobs, chunk_size=self.chunk_size
        )
        f_mesh = f_mesh.astype(float) * multiplier
        total = float(np.sum(f_mesh * self.cell))
        self.evals += 1
        if not np.isfinite(total) or total <= 0.0:
            LOGGER.debug("h=%s gives no density mass on the mesh", h)
            return float(np.finfo(self.dtype).max)
        # rescale so that the mesh integral of f is one
        f_mesh /= total
        integral = float(np.sum(f_mesh**2 * self.cell))

        f_loo, _ = leave_one_out(
            self.X, h, n_jobs=self.n_jobs, chunk_size=self.chunk_size
        )
        return integral - 2.0 / n * float(np.sum(f_loo.astype(float) * multiplier))

# kernels.py
# Gaussian product kernel and the Nadaraya-Watson evaluator.
# Conventions:
#   z = (x_sample - x_query) / h            per dimension
#   w = prod_dims phi(z),  phi(z) = exp(-z^2/2) / sqrt(2 pi)
# phi(z) is set to exactly 0 for |z| >= large_z, the point at which it
# would underflow below the smallest normal number of the working type.
#
# Density mode returns sum(w); regression mode returns sum(w y) / sum(w),
# or the largest finite number together with valid=False if sum(w) < tiny.

from __future__ import annotations

import numpy as np
from joblib import Parallel, delayed  # type: ignore

__all__ = [
    "large_z",
    "gaussian_weights",
    "nadaraya_watson",
    "nadaraya_watson_batch",
    "working_dtype",
    "evaluate_at",
    "leave_one_out",
]

_SQRT_2PI = float(np.sqrt(2.0 * np.pi))

# Upper bound on the number of (query, sample, dim) entries held at once
_CHUNK_ENTRIES = 2**20


def working_dtype(*arrays) -> np.dtype:
    """Floating point type shared by ``arrays``; integers promote to float64."""
    dtype = np.result_type(*[np.asarray(a) for a in arrays if a is not None])
    if not np.issubdtype(dtype, np.floating):
        return np.dtype(np.float64)
    return np.dtype(dtype)


def large_z(dtype=np.float64) -> float:
    """Largest |z| for which the Gaussian kernel stays a normal number."""
    tiny = float(np.finfo(dtype).tiny)
    return float(np.sqrt(-2.0 * np.log(tiny * _SQRT_2PI)))


def gaussian_weights(z: np.ndarray, mask: np.ndarray | None = None) -> np.ndarray:
    """
    Product Gaussian kernel weight of every sample.

    Parameters
    ----------
    z : ndarray, shape (..., n, d)
        Scaled differences between samples and query point(s).
    mask : ndarray of bool, shape (n,) or (..., n), optional
        Samples taking part in the estimate; others weigh zero.

    Returns
    -------
    ndarray, shape (..., n)
    """
    z = np.asarray(z)
    dtype = working_dtype(z)
    z = z.astype(dtype, copy=False)
    with np.errstate(under="ignore", over="ignore"):
        kerf = np.where(
            np.abs(z) < large_z(dtype),
            np.exp(-0.5 * z * z) / _SQRT_2PI,
            0.0,
        )
        w = np.prod(kerf, axis=-1).astype(dtype, copy=False)
    if mask is not None:
        w = np.where(mask, w, 0.0).astype(dtype, copy=False)
    return w


def nadaraya_watson_batch(
    z: np.ndarray,
    y: np.ndarray | None = None,
    mask: np.ndarray | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Nadaraya-Watson estimate for a stack of query points.

    Parameters
    ----------
    z : ndarray, shape (m, n, d)
        Scaled differences for ``m`` query points and ``n`` samples.
    y : ndarray, shape (n,), optional
        Dependent values. Without them the raw kernel weight sums
        (density mode) are returned.
    mask : ndarray of bool, shape (n,) or (m, n), optional
        Active samples, shared or per query point.

    Returns
    -------
    values : ndarray, shape (m,)
    valid : ndarray of bool, shape (m,)
    """
    w = gaussian_weights(z, mask)
    dtype = w.dtype
    sum_w = w.sum(axis=-1)
    if y is None:
        return sum_w, np.ones(sum_w.shape, dtype=bool)

    finfo = np.finfo(dtype)
    y = np.asarray(y, dtype=dtype)
    valid = sum_w >= finfo.tiny
    num = w @ y
    values = np.full(sum_w.shape, finfo.max, dtype=dtype)
    np.divide(num, sum_w, out=values, where=valid)
    return values, valid


def nadaraya_watson(
    z: np.ndarray,
    y: np.ndarray | None = None,
    mask: np.ndarray | None = None,
) -> tuple[float, bool]:
    """
    Nadaraya-Watson estimate at a single query point.

    Parameters
    ----------
    z : array-like, shape (n,) or (n, d)
        Scaled differences ``(x_i - x_query) / h`` of the samples.
    y : array-like, shape (n,), optional
        Dependent values; regression mode if given, density mode otherwise.
    mask : array-like of bool, shape (n,), optional
        Samples taking part in the estimate.

    Returns
    -------
    value : float
        Kernel weight sum (density) or weighted mean of ``y`` (regression).
        In regression mode the largest finite number if the weight sum is
        below the smallest normal number.
    valid : bool
        False only for such a regression failure.
    """
    z = np.asarray(z)
    if z.ndim == 1:
        z = z[:, None]
    values, valid = nadaraya_watson_batch(z[None, :, :], y, mask)
    return values[0].item(), bool(valid[0])


def _chunks(total: int, n: int, d: int, chunk_size: int | None):
    if chunk_size is None:
        chunk_size = max(1, _CHUNK_ENTRIES // max(1, n * d))
    return [
        np.arange(start, min(start + chunk_size, total))
        for start in range(0, total, chunk_size)
    ]


def _gather(results, dtype) -> tuple[np.ndarray, np.ndarray]:
    if not results:
        return np.empty(0, dtype=dtype), np.empty(0, dtype=bool)
    values = np.concatenate([r[0] for r in results]).astype(dtype, copy=False)
    valid = np.concatenate([r[1] for r in results])
    return values, valid


def evaluate_at(
    samples: np.ndarray,
    queries: np.ndarray,
    h: np.ndarray,
    y: np.ndarray | None = None,
    n_jobs: int | None = 1,
    chunk_size: int | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Evaluate the Nadaraya-Watson estimator at many query points.

    Parameters
    ----------
    samples : ndarray, shape (n, d)
    queries : ndarray, shape (m, d)
    h : ndarray, shape (d,)
        Bandwidth per dimension.
    y : ndarray, shape (n,), optional
        Dependent values (regression mode).
    n_jobs : int, optional
        Number of joblib threads; query chunks are independent.
    chunk_size : int, optional
        Query points per chunk.

    Returns
    -------
    values : ndarray, shape (m,)
    valid : ndarray of bool, shape (m,)
    """
    n, d = samples.shape
    dtype = working_dtype(samples)

    def run(rows):
        z = (samples[None, :, :] - queries[rows, None, :]) / h
        return nadaraya_watson_batch(z, y)

    results = Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(run)(rows) for rows in _chunks(queries.shape[0], n, d, chunk_size)
    )
    return _gather(results, dtype)


def leave_one_out(
    samples: np.ndarray,
    h: np.ndarray,
    y: np.ndarray | None = None,
    n_jobs: int | None = 1,
    chunk_size: int | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Jackknife estimates: the estimator at each sample, built from all others.

    Arguments as for :func:`evaluate_at`, with the samples as query points.
    """
    n, d = samples.shape
    dtype = working_dtype(samples)

    def run(rows):
        z = (samples[None, :, :] - samples[rows, None, :]) / h
        mask = np.ones((rows.shape[0], n), dtype=bool)
        mask[np.arange(rows.shape[0]), rows] = False
        return nadaraya_watson_batch(z, y, mask)

    results = Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(run)(rows) for rows in _chunks(n, n, d, chunk_size)
    )
    return _gather(results, dtype)

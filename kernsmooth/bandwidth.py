"""
Bandwidth selection for Gaussian kernel density estimation and regression.

The default is Silverman's rule of thumb (Silverman 1986, Scott 1992,
Bowman & Azzalini 1997). With ``silverman=False`` the rule-of-thumb value
only seeds a bounded Nelder-Mead search over a cross-validation score:
least-squares cross-validation for densities, leave-one-out mean squared
error for regression.
"""

from __future__ import annotations

import logging

import numpy as np

from .cv import DensityCV, RegressionCV
from .exceptions import InvalidArgumentError
from .kernels import working_dtype
from .numerics import minimize_bounded, stddev

__all__ = [
    "silverman_bandwidth",
    "kernel_density_h",
    "kernel_regression_h",
]

LOGGER = logging.getLogger(__name__)

# (4/3)**(1/5), Silverman's constant for a 1-D Gaussian kernel
PRE_H = 1.05922384104881

# Lower/upper search bounds as multiples of the rule-of-thumb bandwidth
H_BOUNDS = (0.2, 5.0)

# Simplex convergence tolerance of the density search
DENSITY_TOL = 0.1


def _spread(x: np.ndarray) -> np.ndarray:
    """Per-column sample standard deviation, checked for degeneracy."""
    if x.shape[0] < 2:
        # a single sample has no spread; use unit scale
        return np.ones(x.shape[1], dtype=x.dtype)
    sd = stddev(x, axis=0)
    if not np.all(np.isfinite(sd)) or np.any(sd <= 0):
        raise InvalidArgumentError(
            f"standard deviation of x must be positive and finite, got {sd}"
        )
    return sd


def silverman_bandwidth(x: np.ndarray) -> float | np.ndarray:
    """Silverman's rule-of-thumb bandwidth.

    Args:
        x: Samples, shape (n,) for 1-D or (n, d) for N-D data.

    Returns:
        ``1.0592 * n**(-1/5) * std(x)`` for 1-D data (a scalar of the
        floating point type of x), and
        ``(4 / (d + 2) / n)**(1 / (d + 4)) * std(x_i)`` per dimension for
        N-D data (an array of length d).

    Raises:
        InvalidArgumentError: If a dimension has zero or undefined spread.
    """
    x = np.asarray(x)
    x = x.astype(working_dtype(x), copy=False)
    if x.ndim == 1:
        n = x.shape[0]
        if n < 1:
            raise InvalidArgumentError("need at least one sample")
        return x.dtype.type(PRE_H / n**0.2 * _spread(x[:, None])[0])
    if x.ndim != 2:
        raise InvalidArgumentError(f"x must be 1-D or 2-D, got shape {x.shape}")
    n, d = x.shape
    if n < 1:
        raise InvalidArgumentError("need at least one sample")
    factor = (4.0 / (d + 2) / n) ** (1.0 / (d + 4))
    return (factor * _spread(x)).astype(x.dtype, copy=False)


def _search_bounds(h0: np.ndarray, floor: np.ndarray | None = None):
    low = H_BOUNDS[0] * h0
    if floor is not None:
        low = np.maximum(low, floor)
    high = H_BOUNDS[1] * h0
    return list(zip(low.tolist(), high.tolist()))


def kernel_density_h(
    x: np.ndarray, silverman: bool = True, n_jobs: int | None = 1
) -> float:
    """
    Bandwidth for 1-D kernel density estimation.

    Parameters
    ----------
    x : array-like, shape (n,)
        Data points.
    silverman : bool, default=True
        Use Silverman's rule of thumb. If False, minimise the least-squares
        cross-validation score with Nelder-Mead inside
        ``[max(0.2 h_s, (max(x) - min(x)) / n), 5 h_s]``, starting from the
        rule-of-thumb value ``h_s``. This can be slow for large samples;
        compute it once and pass ``h`` to the estimators.
    n_jobs : int, optional
        joblib threads used by the cross-validation score.

    Returns
    -------
    float
        Bandwidth, a scalar of the floating point type of ``x``.

    Examples
    --------
    >>> import numpy as np
    >>> from kernsmooth import kernel_density_h
    >>> x = np.array([26.1, 24.5, 24.8, 24.5, 24.1])
    >>> h = kernel_density_h(x)
    >>> h_cv = kernel_density_h(x, silverman=False)
    """
    x = np.asarray(x)
    if x.ndim != 1:
        raise InvalidArgumentError(
            f"density bandwidth is implemented for 1-D data only, got shape {x.shape}"
        )
    h = silverman_bandwidth(x)
    LOGGER.debug("Silverman density bandwidth %.6g for n=%d", h, x.shape[0])
    if silverman:
        return h

    n = x.shape[0]
    scorer = DensityCV(x, n_jobs=n_jobs)
    floor = np.array([(x.max() - x.min()) / n], dtype=float)
    bounds = _search_bounds(np.array([h]), floor)
    LOGGER.debug("Cross-validating density bandwidth in %s", bounds)
    h_opt = minimize_bounded(scorer, np.array([h]), bounds, tol=DENSITY_TOL)
    LOGGER.info(
        "Cross-validated density bandwidth %.6g after %d evaluations",
        h_opt[0],
        scorer.evals,
    )
    return working_dtype(x).type(h_opt[0])


def kernel_regression_h(
    x: np.ndarray,
    y: np.ndarray,
    silverman: bool = True,
    n_jobs: int | None = 1,
) -> float | np.ndarray:
    """
    Bandwidth for Nadaraya-Watson kernel regression.

    Parameters
    ----------
    x : array-like, shape (n,) or (n, d)
        Independent values.
    y : array-like, shape (n,)
        Dependent values.
    silverman : bool, default=True
        Use Silverman's rule of thumb. If False, minimise the leave-one-out
        mean squared error with Nelder-Mead inside ``[0.2 h_s, 5 h_s]`` per
        dimension, starting from the rule-of-thumb value ``h_s``.
    n_jobs : int, optional
        joblib threads used by the cross-validation score.

    Returns
    -------
    float or ndarray
        Scalar bandwidth for 1-D ``x``, one bandwidth per dimension otherwise,
        in the floating point type of ``x``.
    """
    x = np.asarray(x)
    y = np.asarray(y).ravel()
    if y.shape[0] != x.shape[0]:
        raise InvalidArgumentError(
            f"size(y) = {y.shape[0]} /= size(x,1) = {x.shape[0]}"
        )
    h = silverman_bandwidth(x)
    LOGGER.debug("Silverman regression bandwidth %s for n=%d", h, x.shape[0])
    if silverman:
        return h

    h0 = np.atleast_1d(np.asarray(h, dtype=float))
    scorer = RegressionCV(x, y, n_jobs=n_jobs)
    bounds = _search_bounds(h0)
    LOGGER.debug("Cross-validating regression bandwidth in %s", bounds)
    h_opt = minimize_bounded(scorer, h0, bounds)
    LOGGER.info(
        "Cross-validated regression bandwidth %s after %d evaluations",
        h_opt,
        scorer.evals,
    )
    if x.ndim == 1:
        return working_dtype(x).type(h_opt[0])
    return h_opt.astype(working_dtype(x), copy=False)

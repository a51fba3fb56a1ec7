"""
Numerical helpers used by the kernel estimators.

These are thin wrappers around numpy/scipy that fix the conventions the
estimators rely on: sample standard deviation, stable sorting, regular
meshes, integration of evenly spaced samples and a bounded Nelder-Mead
minimiser.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

import numpy as np
from scipy.integrate import newton_cotes, simpson  # type: ignore
from scipy.optimize import minimize  # type: ignore

__all__ = [
    "stddev",
    "sort_indices",
    "mesh",
    "integrate_regular",
    "minimize_bounded",
]

LOGGER = logging.getLogger(__name__)

# Closed 5-point Newton-Cotes (Boole) weights for unit spacing
_BOOLE_WEIGHTS, _ = newton_cotes(4, 1)


def stddev(values: np.ndarray, axis: int = 0) -> np.ndarray:
    """Sample standard deviation (n - 1 denominator) along ``axis``."""
    return np.std(np.asarray(values), axis=axis, ddof=1)


def sort_indices(values: np.ndarray) -> np.ndarray:
    """Stable permutation that sorts ``values`` ascending."""
    return np.argsort(np.asarray(values), kind="stable")


def mesh(start: float, end: float, n: int, dtype=np.float64):
    """
    Return ``n`` evenly spaced points from ``start`` to ``end`` inclusive.

    Returns
    -------
    points : ndarray, shape (n,)
    delta : float
        Spacing between consecutive points; negative if ``end < start``.
    """
    delta = (end - start) / (n - 1)
    points = start + delta * np.arange(n)
    return points.astype(dtype, copy=False), delta


def integrate_regular(values: np.ndarray, spacing: float) -> float:
    """
    Integrate samples taken at a regular ``spacing``.

    Uses the composite 5-point Newton-Cotes (Boole) rule when the number of
    intervals is a multiple of four, and the composite Simpson rule
    otherwise.
    """
    values = np.asarray(values, dtype=float)
    n = values.shape[0]
    if n < 2:
        return 0.0
    if (n - 1) % 4 == 0:
        panels = values[:-1].reshape(-1, 4)
        ends = values[4::4]
        # sum_k sum_j w_j f_{4k+j}, last node of each panel shared with next
        total = panels @ _BOOLE_WEIGHTS[:4] + ends * _BOOLE_WEIGHTS[4]
        return float(spacing * total.sum())
    return float(simpson(values, dx=spacing))


def minimize_bounded(
    objective: Callable[[np.ndarray], float],
    x0: np.ndarray,
    bounds: Sequence[tuple[float, float]],
    tol: float | None = None,
) -> np.ndarray:
    """
    Minimise ``objective`` inside the box ``bounds`` with Nelder-Mead.

    Parameters
    ----------
    objective : callable
        Function of a 1-D parameter vector.
    x0 : array-like
        Starting point; it is clipped into the box.
    bounds : sequence of (low, high)
        One pair per parameter.
    tol : float, optional
        Spread of the objective values over the simplex at which the search
        is considered converged, regardless of the simplex size. scipy's
        defaults (simplex size and value spread) when None.

    Returns
    -------
    ndarray
        Approximate minimiser, inside ``bounds``.
    """
    lower = np.array([b[0] for b in bounds], dtype=float)
    upper = np.array([b[1] for b in bounds], dtype=float)
    start = np.clip(np.asarray(x0, dtype=float).ravel(), lower, upper)
    options: dict[str, float] = {}
    if tol is not None:
        options["fatol"] = tol
        options["xatol"] = np.inf
    res = minimize(
        objective,
        start,
        method="Nelder-Mead",
        bounds=list(zip(lower, upper)),
        options=options,
    )
    if not res.success:
        LOGGER.warning("Nelder-Mead did not converge: %s", res.message)
    LOGGER.debug("Nelder-Mead finished after %d evaluations", res.nfev)
    return np.clip(res.x, lower, upper)

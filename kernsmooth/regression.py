"""
Nadaraya-Watson kernel regression with a Gaussian product kernel.

Literature: Haerdle, W., & Mueller, M. (2000). Multivariate and
semiparametric kernel regression. In M. G. Schimek (Ed.), Smoothing and
regression: Approaches, computation, and application (pp. 357-392).
"""

from __future__ import annotations

import logging
import warnings

import numpy as np

from .bandwidth import kernel_regression_h
from .exceptions import InvalidArgumentError, UnreliableEstimateWarning
from .kernels import evaluate_at, working_dtype
from .options import KernelOptions, pack, unpack

__all__ = ["kernel_regression"]

LOGGER = logging.getLogger(__name__)


def kernel_regression(
    x: np.ndarray,
    y: np.ndarray,
    h: float | np.ndarray | None = None,
    silverman: bool = True,
    xout: np.ndarray | None = None,
    mask: np.ndarray | None = None,
    nodata: float | None = None,
    n_jobs: int | None = 1,
    return_valid: bool = False,
):
    """Computes Nadaraya-Watson regression estimates.

    Args:
        x: Independent values, shape (n,) for 1-D or (n, d) for N-D data.
        y: Dependent values, shape (n,).
        h: Bandwidth; a scalar for 1-D data, one value per dimension for
            N-D data. Estimated with :func:`kernsmooth.kernel_regression_h`
            if None.
        silverman: Rule-of-thumb (True) or cross-validated (False)
            bandwidth when ``h`` is None.
        xout: Points at which the regression is evaluated, shape (m,) or
            (m, d). Defaults to ``x``.
        mask: Boolean vector of length n selecting the data points to use.
            Without ``xout`` the output has length n and holds ``nodata``
            where ``mask`` is False.
        nodata: Fill value for masked positions; required with ``mask``
            if ``xout`` is not given.
        n_jobs: joblib threads for the evaluation and the bandwidth search.
        return_valid: Also return the per-point validity flags.

    Returns:
        The regression estimates, and with ``return_valid`` a boolean array
        that is False where the kernel weight mass was negligible. Such
        points hold the largest finite number of the working type and are
        reported with an :class:`UnreliableEstimateWarning`.

    Raises:
        InvalidArgumentError: If the shapes of ``x``, ``y``, ``h``, ``xout``
            or ``mask`` do not match.
    """
    x = np.asarray(x)
    y = np.asarray(y)
    if x.ndim not in (1, 2):
        raise InvalidArgumentError(f"x must be 1-D or 2-D, got shape {x.shape}")
    if y.ndim != 1 or y.shape[0] != x.shape[0]:
        raise InvalidArgumentError(
            f"size(y) = {y.shape[0] if y.ndim else 0} /= size(x,1) = {x.shape[0]}"
        )
    dims = x.shape[1] if x.ndim == 2 else None
    options = KernelOptions(
        h=h, silverman=silverman, xout=xout, mask=mask, nodata=nodata, n_jobs=n_jobs
    )
    options.validate(x.shape[0], dims)

    dtype = working_dtype(x, y)
    xin = pack(x, options.mask).astype(dtype, copy=False)
    yin = pack(y, options.mask).astype(dtype, copy=False)

    if options.h is not None:
        hh = options.h
    else:
        hh = kernel_regression_h(
            xin, yin, silverman=options.silverman, n_jobs=options.n_jobs
        )
    hh = np.atleast_1d(np.asarray(hh, dtype=dtype))

    xxout = options.xout if options.xout is not None else xin
    samples = xin if dims is not None else xin[:, None]
    queries = np.asarray(xxout, dtype=dtype)
    if dims is None:
        queries = queries[:, None]

    out, valid = evaluate_at(samples, queries, hh, y=yin, n_jobs=options.n_jobs)

    if not valid.all():
        LOGGER.debug(
            "No kernel weight mass at %d of %d points", np.sum(~valid), valid.size
        )
        warnings.warn(
            f"{np.sum(~valid)} of {valid.size} regression estimates have "
            "negligible kernel weight (bandwidth too small or points far from "
            "the data); they are set to the largest finite number",
            UnreliableEstimateWarning,
            stacklevel=2,
        )

    if options.unpack_output:
        out = unpack(out, options.mask, options.nodata)
        valid = unpack(valid, options.mask, False)
    if return_valid:
        return out, valid
    return out

"""
Gaussian kernel density estimation of PDFs and CDFs for 1-D data.

The PDF at a point is the Nadaraya-Watson weight sum scaled by 1/(n h).
The CDF is obtained by integrating the PDF between consecutive sorted
output points on a regular mesh and accumulating the pieces.

Literature: Scott, D. W., & Sain, S. R. (2005). Multi-dimensional density
estimation. Handbook of Statistics, 24, 229-261.
"""

from __future__ import annotations

import numpy as np

from .bandwidth import kernel_density_h
from .exceptions import InvalidArgumentError
from .kernels import evaluate_at, working_dtype
from .numerics import integrate_regular, mesh, sort_indices
from .options import KernelOptions, pack, unpack

__all__ = ["kernel_density", "kernel_cumdensity"]


def _prepare(x, options: KernelOptions):
    """Validate options, pack the sample and resolve bandwidth and outputs."""
    x = np.asarray(x)
    if x.ndim != 1:
        raise InvalidArgumentError(
            f"kernel density is implemented for 1-D data only, got shape {x.shape}"
        )
    options.validate(x.shape[0])
    dtype = working_dtype(x)
    xin = pack(x, options.mask).astype(dtype, copy=False)
    if options.h is not None:
        h = float(np.asarray(options.h))
    else:
        h = kernel_density_h(xin, silverman=options.silverman, n_jobs=options.n_jobs)
    if options.xout is not None:
        xout = np.asarray(options.xout, dtype=dtype)
    else:
        xout = xin
    return xin, h, xout


def _density(xin: np.ndarray, h: float, xout: np.ndarray, n_jobs=1) -> np.ndarray:
    """Normalised density of the packed sample ``xin`` at ``xout``."""
    dtype = xin.dtype
    raw, _ = evaluate_at(
        xin[:, None],
        np.asarray(xout, dtype=dtype)[:, None],
        np.array([h], dtype=dtype),
        n_jobs=n_jobs,
    )
    multiplier = 1.0 / (xin.shape[0] * float(h))
    # scaling sums below tiny/multiplier would only produce denormals
    thresh = float(np.finfo(dtype).tiny) / multiplier if multiplier <= 1.0 else 0.0
    scaled = raw > thresh
    return np.where(scaled, raw * multiplier, raw).astype(dtype, copy=False)


def kernel_density(
    x: np.ndarray,
    h: float | None = None,
    silverman: bool = True,
    xout: np.ndarray | None = None,
    mask: np.ndarray | None = None,
    nodata: float | None = None,
    n_jobs: int | None = 1,
) -> np.ndarray:
    """
    Approximate the probability density function of 1-D data.

    Parameters
    ----------
    x : array-like, shape (n,)
        Data points. ``float32`` data give ``float32`` results.
    h : float, optional
        Kernel bandwidth. If None it is estimated with
        :func:`kernsmooth.kernel_density_h`, honouring ``silverman``.
    silverman : bool, default=True
        Rule-of-thumb (True) or cross-validated (False) bandwidth when ``h``
        is not given.
    xout : array-like, shape (m,), optional
        Points at which the PDF is wanted. Defaults to ``x``.
    mask : array-like of bool, shape (n,), optional
        Data points to use. Without ``xout`` the output has length ``n`` and
        holds ``nodata`` where ``mask`` is False.
    nodata : float, optional
        Fill value for masked positions; required with ``mask`` if ``xout``
        is not given.
    n_jobs : int, optional
        joblib threads for the evaluation and the bandwidth search.

    Returns
    -------
    ndarray
        PDF at ``xout``, or at ``x``.

    Raises
    ------
    InvalidArgumentError
        If the arguments are inconsistent.

    Examples
    --------
    >>> import numpy as np
    >>> from kernsmooth import kernel_density
    >>> x = np.array([26.1, 24.5, 24.8, 24.5, 24.1])
    >>> pdf = kernel_density(x)
    >>> pdf_at = kernel_density(x, h=0.5, xout=np.linspace(23, 27, 9))
    """
    options = KernelOptions(
        h=h, silverman=silverman, xout=xout, mask=mask, nodata=nodata, n_jobs=n_jobs
    )
    xin, hh, xxout = _prepare(x, options)
    out = _density(xin, hh, xxout, n_jobs=options.n_jobs)
    if options.unpack_output:
        return unpack(out, options.mask, options.nodata)
    return out


def kernel_cumdensity(
    x: np.ndarray,
    h: float | None = None,
    silverman: bool = True,
    xout: np.ndarray | None = None,
    nintegrate: int = 101,
    mask: np.ndarray | None = None,
    nodata: float | None = None,
    n_jobs: int | None = 1,
) -> np.ndarray:
    """
    Approximate the cumulative distribution function of 1-D data.

    The output points are sorted; the PDF is integrated from 0 to the
    smallest point and then between consecutive points, each piece on a
    regular mesh of ``nintegrate`` points, and the pieces are summed up.
    Results are returned in the order of the given points.

    Parameters
    ----------
    x : array-like, shape (n,)
        Data points.
    h : float, optional
        Kernel bandwidth; estimated if None (see :func:`kernel_density`).
    silverman : bool, default=True
        Rule-of-thumb or cross-validated bandwidth when ``h`` is None.
    xout : array-like, shape (m,), optional
        Points at which the CDF is wanted. Defaults to ``x``.
    nintegrate : int, default=101
        Mesh points per integration piece. Should be ``4k + 1`` for the
        5-point Newton-Cotes rule; other values fall back to Simpson's rule.
    mask : array-like of bool, shape (n,), optional
        Data points to use (see :func:`kernel_density`).
    nodata : float, optional
        Fill value for masked positions.
    n_jobs : int, optional
        joblib threads for the evaluation and the bandwidth search.

    Returns
    -------
    ndarray
        CDF at ``xout``, or at ``x``.
    """
    options = KernelOptions(
        h=h,
        silverman=silverman,
        xout=xout,
        mask=mask,
        nodata=nodata,
        nintegrate=nintegrate,
        n_jobs=n_jobs,
    )
    xin, hh, xxout = _prepare(x, options)
    dtype = xin.dtype

    order = sort_indices(xxout)
    sorted_out = xxout[order].astype(float)
    nout = sorted_out.shape[0]
    cdf = np.zeros(nout, dtype=dtype)

    if nout > 0:
        # piece i spans [sorted_out[i-1], sorted_out[i]], the first starts at 0
        starts = np.concatenate([[0.0], sorted_out[:-1]])
        meshes, deltas = zip(
            *(
                mesh(start, end, options.nintegrate, dtype=dtype)
                for start, end in zip(starts, sorted_out)
            )
        )
        pdf = _density(
            xin, hh, np.concatenate(meshes), n_jobs=options.n_jobs
        ).reshape(nout, options.nintegrate)
        increments = [integrate_regular(p, d) for p, d in zip(pdf, deltas)]
        cdf[order] = np.cumsum(increments)

    if options.unpack_output:
        return unpack(cdf, options.mask, options.nodata)
    return cdf

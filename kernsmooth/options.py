"""
Call configuration shared by the kernel estimators.

All optional arguments of the public functions are collected into a
``KernelOptions`` instance and validated once, before any computation.
The mask handling is split into two pure steps, ``pack`` (select the
active samples) and ``unpack`` (scatter results back to full length with
a no-data fill).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from .exceptions import InvalidArgumentError

__all__ = ["KernelOptions", "pack", "unpack"]


def pack(values: np.ndarray, mask: np.ndarray | None) -> np.ndarray:
    """Rows of ``values`` where ``mask`` is True (all rows without a mask)."""
    values = np.asarray(values)
    if mask is None:
        return values
    return values[np.asarray(mask, dtype=bool)]


def unpack(values: np.ndarray, mask: np.ndarray, nodata: Any) -> np.ndarray:
    """
    Scatter ``values`` into the True positions of ``mask``.

    Positions where ``mask`` is False receive ``nodata``.
    """
    values = np.asarray(values)
    mask = np.asarray(mask, dtype=bool)
    if values.shape[0] != np.count_nonzero(mask):
        raise InvalidArgumentError(
            f"cannot unpack {values.shape[0]} values into a mask with "
            f"{np.count_nonzero(mask)} True entries"
        )
    out = np.full(mask.shape + values.shape[1:], nodata, dtype=values.dtype)
    out[mask] = values
    return out


@dataclass
class KernelOptions:
    """Optional arguments of the kernel estimators.

    Attributes:
        h: Bandwidth, a scalar for 1-D data or one value per dimension.
            Estimated from the (masked) sample when None.
        silverman: Estimate the bandwidth with Silverman's rule of thumb
            (default) instead of cross-validation. Ignored if ``h`` is given.
        xout: Query points. Defaults to the (masked) sample itself.
        mask: Boolean vector selecting the samples used for estimation.
        nodata: Fill value for masked positions when ``xout`` is None.
        nintegrate: Number of mesh points per CDF integration segment;
            should be 4k + 1.
        n_jobs: Number of joblib workers for cross-validation.
    """

    h: Any = None
    silverman: bool = True
    xout: Any = None
    mask: Any = None
    nodata: Any = None
    nintegrate: int = 101
    n_jobs: int | None = 1

    @property
    def unpack_output(self) -> bool:
        """Whether results are scattered back to the full sample length."""
        return self.mask is not None and self.xout is None

    def validate(self, n: int, dims: int | None = None) -> "KernelOptions":
        """
        Check the options against a sample of ``n`` points.

        Parameters
        ----------
        n : int
            Number of samples before masking.
        dims : int, optional
            Dimensionality of N-D data; None for 1-D data, where ``h``
            must be a scalar and ``xout`` one-dimensional.

        Returns
        -------
        KernelOptions
            ``self`` with ``mask``, ``h`` and ``xout`` converted to arrays.

        Raises
        ------
        InvalidArgumentError
        """
        if self.mask is not None:
            if self.xout is None and self.nodata is None:
                raise InvalidArgumentError(
                    "missing nodata value or xout with present mask"
                )
            self.mask = np.asarray(self.mask, dtype=bool)
            if self.mask.ndim != 1 or self.mask.shape[0] != n:
                raise InvalidArgumentError(
                    f"mask must have length {n}, got shape {self.mask.shape}"
                )
            if not self.mask.any():
                raise InvalidArgumentError("mask selects no samples")
        elif n < 1:
            raise InvalidArgumentError("need at least one sample")

        if self.h is not None:
            h = np.asarray(self.h, dtype=float)
            if dims is None:
                if h.size != 1:
                    raise InvalidArgumentError(
                        f"h must be a scalar for 1-D data, got shape {h.shape}"
                    )
            elif h.ndim > 1 or h.size != dims:
                raise InvalidArgumentError(f"size(h) = {h.size} /= size(x,2) = {dims}")
            if not np.all(np.isfinite(h)) or np.any(h <= 0):
                raise InvalidArgumentError(f"h must be positive, got {self.h}")

        if self.xout is not None:
            xout = np.asarray(self.xout)
            if dims is None:
                xout = np.atleast_1d(xout)
                if xout.ndim != 1:
                    raise InvalidArgumentError(
                        f"xout must be 1-D for 1-D data, got shape {xout.shape}"
                    )
            elif xout.ndim != 2 or xout.shape[1] != dims:
                raise InvalidArgumentError(
                    f"xout must have shape (m, {dims}), got {xout.shape}"
                )
            self.xout = xout

        if isinstance(self.nintegrate, bool) or not isinstance(
            self.nintegrate, (int, np.integer)
        ):
            raise InvalidArgumentError(
                f"nintegrate must be an integer, got {self.nintegrate!r}"
            )
        if self.nintegrate < 2:
            raise InvalidArgumentError(
                f"nintegrate must be at least 2, got {self.nintegrate}"
            )
        return self

"""Error and warning types raised by kernsmooth."""

__all__ = ["InvalidArgumentError", "UnreliableEstimateWarning"]


class InvalidArgumentError(ValueError):
    """Raised when the arguments of a call are inconsistent or out of range.

    Covers length mismatches between independent and dependent values,
    bandwidth or query dimensionality mismatches, masks given without a
    no-data value or query points, and non-positive parameters.
    """


class UnreliableEstimateWarning(RuntimeWarning):
    """Issued when the kernel weight mass at a query point is negligible.

    The affected estimates hold the largest finite value of the working
    floating point type and are flagged invalid.
    """

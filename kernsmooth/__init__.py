"""
Kernsmooth: Gaussian kernel regression and kernel density estimation.

This package provides Nadaraya-Watson estimators with a Gaussian product
kernel for 1-D and N-D regression, and for probability density (PDF) and
cumulative distribution (CDF) estimation of 1-D data. Bandwidths are
chosen with Silverman's rule of thumb or by cross-validation, a bounded
Nelder-Mead search over a leave-one-out score.

Key Features
------------
- Regression for scalar and vector-valued independent variables
- PDF and CDF estimation, the CDF by integrating the PDF on a regular mesh
- Masking of input data with a no-data fill for excluded positions
- Single and double precision: results keep the floating point type of x
- Underflow-safe kernel weights and per-point validity of estimates

Main Functions
--------------
kernel_regression : Nadaraya-Watson regression estimates
kernel_regression_h : Bandwidth for kernel regression
kernel_density : Kernel estimate of a PDF
kernel_cumdensity : Kernel estimate of a CDF
kernel_density_h : Bandwidth for density estimation

Example
-------
>>> import numpy as np
>>> from kernsmooth import kernel_regression, kernel_regression_h
>>> x = np.linspace(0, 1, 200)
>>> y = np.sin(2 * np.pi * x) + 0.1 * np.random.randn(200)
>>> # cross-validated bandwidth, computed once
>>> h = kernel_regression_h(x, y, silverman=False)
>>> y_fit = kernel_regression(x, y, h=h)

For densities:
>>> from kernsmooth import kernel_density, kernel_cumdensity
>>> t = np.array([26.1, 24.5, 24.8, 24.5, 24.1])
>>> pdf = kernel_density(t)
>>> cdf = kernel_cumdensity(t, xout=np.linspace(23.0, 27.0, 9))
"""

from .bandwidth import kernel_density_h, kernel_regression_h, silverman_bandwidth
from .cv import DensityCV, RegressionCV
from .exceptions import InvalidArgumentError, UnreliableEstimateWarning
from .kde import kernel_cumdensity, kernel_density
from .kernels import nadaraya_watson
from .options import KernelOptions
from .regression import kernel_regression

__all__ = [
    "kernel_regression",
    "kernel_regression_h",
    "kernel_density",
    "kernel_cumdensity",
    "kernel_density_h",
    "silverman_bandwidth",
    "nadaraya_watson",
    "DensityCV",
    "RegressionCV",
    "KernelOptions",
    "InvalidArgumentError",
    "UnreliableEstimateWarning",
]

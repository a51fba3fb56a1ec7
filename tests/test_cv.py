import numpy as np
import pytest

from kernsmooth import DensityCV, InvalidArgumentError, RegressionCV
from kernsmooth.kernels import nadaraya_watson
from kernsmooth.numerics import minimize_bounded


def test_regression_cv_matches_jackknife_mse():
    x = np.array([0.0, 0.4, 0.9, 1.3, 2.0])
    y = np.array([1.0, 0.5, -0.2, 0.3, 1.1])
    h = 0.6
    errors = []
    for i in range(x.size):
        keep = np.arange(x.size) != i
        yhat, _ = nadaraya_watson((x[keep] - x[i]) / h, y=y[keep])
        errors.append((y[i] - yhat) ** 2)
    scorer = RegressionCV(x, y)
    assert scorer(h) == pytest.approx(np.mean(errors))
    assert scorer.evals == 1


def test_regression_cv_penalises_empty_neighbourhoods():
    scorer = RegressionCV(np.array([0.0, 10.0, 20.0]), np.array([1.0, 2.0, 3.0]))
    assert scorer(0.01) == np.finfo(np.float64).max


def test_regression_cv_invariant_to_reordering():
    rng = np.random.default_rng(0)
    x = rng.uniform(0, 1, size=(30, 2))
    y = np.sin(3 * x[:, 0]) + x[:, 1]
    perm = rng.permutation(30)
    h = np.array([0.2, 0.3])
    assert RegressionCV(x, y)(h) == pytest.approx(
        RegressionCV(x[perm], y[perm])(h), rel=1e-10
    )


def test_density_cv_invariant_to_reordering():
    rng = np.random.default_rng(1)
    x = rng.normal(size=25)
    perm = rng.permutation(25)
    assert DensityCV(x)(0.4) == pytest.approx(DensityCV(x[perm])(0.4), rel=1e-9)


def test_density_cv_mesh_size():
    assert DensityCV(np.arange(10.0)).mesh.shape == (1000, 1)
    # large samples keep the mesh near 10000 points
    assert DensityCV(np.arange(400.0)).mesh_n == 25
    assert DensityCV(np.arange(20000.0)).mesh_n == 2


def test_density_cv_prefers_reasonable_bandwidth():
    rng = np.random.default_rng(2)
    x = rng.normal(size=80)
    scorer = DensityCV(x)
    # strong over-smoothing scores worse than a moderate bandwidth
    assert scorer(0.4) < scorer(5.0)


def test_cv_parallel_matches_serial():
    rng = np.random.default_rng(3)
    x = rng.normal(size=40)
    y = x**2
    assert RegressionCV(x, y, n_jobs=2, chunk_size=7)(0.5) == pytest.approx(
        RegressionCV(x, y)(0.5)
    )
    assert DensityCV(x, n_jobs=2, chunk_size=500)(0.5) == pytest.approx(
        DensityCV(x)(0.5)
    )


def test_cv_needs_two_samples():
    with pytest.raises(InvalidArgumentError):
        RegressionCV(np.array([1.0]), np.array([1.0]))
    with pytest.raises(InvalidArgumentError):
        DensityCV(np.array([1.0]))


def test_cv_checks_dimensions():
    with pytest.raises(InvalidArgumentError):
        RegressionCV(np.zeros(4), np.zeros(3))
    scorer = RegressionCV(np.arange(8.0).reshape(4, 2), np.arange(4.0))
    with pytest.raises(InvalidArgumentError):
        scorer(np.array([1.0, 1.0, 1.0]))


def test_density_search_tolerance_saves_evaluations():
    rng = np.random.default_rng(11)
    x = rng.normal(size=60)
    h0 = np.array([1.05922384104881 * 60 ** (-0.2) * np.std(x, ddof=1)])
    bounds = [(0.2 * h0[0], 5.0 * h0[0])]
    loose = DensityCV(x)
    minimize_bounded(loose, h0, bounds, tol=0.1)
    default = DensityCV(x)
    minimize_bounded(default, h0, bounds)
    assert loose.evals < default.evals

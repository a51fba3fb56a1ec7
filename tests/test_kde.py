import numpy as np
import pytest

from kernsmooth import InvalidArgumentError, kernel_cumdensity, kernel_density
from kernsmooth.kernels import large_z
from kernsmooth.numerics import mesh

TEMPERATURES = np.array([26.1, 24.5, 24.8, 24.5, 24.1])


def test_density_integrates_to_one():
    grid, delta = mesh(-10.0, 10.0, 2001)
    pdf = kernel_density(np.array([-1.0, 0.0, 1.0]), h=1.0, xout=grid)
    assert np.sum(pdf) * delta == pytest.approx(1.0, abs=1e-3)


def test_density_single_point_is_standard_normal():
    pdf = kernel_density(np.array([0.0]), h=2.0, xout=np.array([0.0, 2.0]))
    expected = np.exp(-0.5 * np.array([0.0, 1.0])) / np.sqrt(2 * np.pi) / 2.0
    assert np.allclose(pdf, expected)


def test_density_defaults_to_data_points():
    pdf = kernel_density(TEMPERATURES)
    assert pdf.shape == TEMPERATURES.shape
    assert np.all(pdf > 0)
    # the repeated value 24.5 carries the most mass
    assert np.argmax(pdf) in (1, 3)


def test_density_far_away_is_exactly_zero():
    pdf = kernel_density(TEMPERATURES, h=0.5, xout=np.array([1.0e6]))
    assert pdf[0] == 0.0


def test_density_below_threshold_is_left_unscaled():
    tiny = np.finfo(np.float64).tiny
    # one sample near the query points, 999 far away: multiplier = 1/1000
    x = np.concatenate([[0.0], np.full(999, 1.0e6)])
    # kernel value of 10 * tiny, between tiny and tiny / multiplier
    z = np.sqrt(large_z(np.float64) ** 2 - 2.0 * np.log(10.0))
    pdf = kernel_density(x, h=1.0, xout=np.array([z, 0.0]))
    assert pdf[0] == pytest.approx(10.0 * tiny, rel=1e-6, abs=0.0)
    assert pdf[1] == pytest.approx(1.0 / np.sqrt(2 * np.pi) / 1000.0)


def test_density_small_sums_scaled_when_multiplier_exceeds_one():
    tiny = np.finfo(np.float64).tiny
    # n * h = 0.1, so there is no threshold
    z = np.sqrt(large_z(np.float64) ** 2 - 2.0 * np.log(10.0))
    pdf = kernel_density(np.array([0.0]), h=0.1, xout=np.array([0.1 * z, 0.0]))
    assert pdf[0] == pytest.approx(100.0 * tiny, rel=1e-6, abs=0.0)
    assert pdf[1] == pytest.approx(10.0 / np.sqrt(2 * np.pi))


def test_density_mask_round_trip():
    mask = np.array([True, False, True, True, False])
    pdf = kernel_density(TEMPERATURES, mask=mask, nodata=-9999.0)
    assert pdf.shape == TEMPERATURES.shape
    assert np.all(pdf[~mask] == -9999.0)
    assert np.allclose(pdf[mask], kernel_density(TEMPERATURES[mask]))


def test_density_mask_with_xout_keeps_xout_length():
    xout = np.linspace(23.0, 27.0, 7)
    mask = np.array([True, True, True, False, True])
    pdf = kernel_density(TEMPERATURES, h=0.5, xout=xout, mask=mask)
    assert pdf.shape == (7,)
    assert np.allclose(pdf, kernel_density(TEMPERATURES[mask], h=0.5, xout=xout))


def test_density_mask_needs_nodata_or_xout():
    with pytest.raises(InvalidArgumentError):
        kernel_density(TEMPERATURES, mask=np.ones(5, dtype=bool))


def test_density_rejects_bad_arguments():
    with pytest.raises(InvalidArgumentError):
        kernel_density(TEMPERATURES, h=-1.0)
    with pytest.raises(InvalidArgumentError):
        kernel_density(TEMPERATURES, mask=np.ones(4, dtype=bool), nodata=0.0)
    with pytest.raises(InvalidArgumentError):
        kernel_density(np.ones((5, 2)), h=1.0)


def test_density_keeps_single_precision():
    pdf = kernel_density(TEMPERATURES.astype(np.float32))
    assert pdf.dtype == np.float32
    assert np.allclose(pdf, kernel_density(TEMPERATURES), rtol=1e-4)


def test_density_cross_validated_bandwidth():
    pdf = kernel_density(TEMPERATURES, silverman=False)
    assert pdf.shape == TEMPERATURES.shape
    assert np.all(np.isfinite(pdf))


def test_cdf_of_symmetric_sample():
    x = np.array([9.0, 10.0, 11.0])
    cdf = kernel_cumdensity(x, h=1.0, xout=np.array([10.0, 30.0]))
    assert cdf[0] == pytest.approx(0.5, abs=1e-4)
    assert cdf[1] == pytest.approx(1.0, abs=1e-4)


def test_cdf_monotone_and_order_independent():
    rng = np.random.default_rng(7)
    x = rng.normal(20.0, 2.0, size=40)
    q = np.linspace(12.0, 28.0, 17)
    cdf = kernel_cumdensity(x, xout=q)
    assert np.all(np.diff(cdf) >= 0)
    assert np.all((cdf >= 0) & (cdf <= 1 + 1e-4))
    reverse = kernel_cumdensity(x, xout=q[::-1])
    assert np.allclose(reverse, cdf[::-1])
    perm = rng.permutation(q.size)
    shuffled = kernel_cumdensity(x, xout=q[perm])
    assert np.allclose(shuffled, cdf[perm])


def test_cdf_at_data_points_follows_data_order():
    cdf = kernel_cumdensity(TEMPERATURES, h=0.5)
    order = np.argsort(TEMPERATURES, kind="stable")
    assert np.all(np.diff(cdf[order]) >= -1e-12)
    assert cdf[0] == cdf.max()
    assert cdf[1] == pytest.approx(cdf[3])


def test_cdf_simpson_fallback_close_to_boole():
    q = np.array([24.0, 25.0, 26.0])
    boole = kernel_cumdensity(TEMPERATURES, h=0.5, xout=q, nintegrate=401)
    simpson = kernel_cumdensity(TEMPERATURES, h=0.5, xout=q, nintegrate=400)
    assert np.allclose(boole, simpson, atol=1e-5)


def test_cdf_mask_round_trip():
    mask = np.array([True, True, False, True, True])
    cdf = kernel_cumdensity(TEMPERATURES, h=0.5, mask=mask, nodata=-1.0)
    assert cdf[2] == -1.0
    assert np.allclose(cdf[mask], kernel_cumdensity(TEMPERATURES[mask], h=0.5))


def test_cdf_rejects_bad_nintegrate():
    with pytest.raises(InvalidArgumentError):
        kernel_cumdensity(TEMPERATURES, nintegrate=1)
    with pytest.raises(InvalidArgumentError):
        kernel_cumdensity(TEMPERATURES, nintegrate=10.5)

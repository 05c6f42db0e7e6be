import math

import jax.numpy as jnp
import numpy as np
import pytest

from jumpdiff.core.distributions import normal_icdf, poisson_icdf, poisson_support_size


def test_normal_icdf_known_quantiles():
    u = jnp.array([0.5, 0.8413447460685429, 0.15865525393145707])
    np.testing.assert_allclose(normal_icdf(u), [0.0, 1.0, -1.0], atol=1e-10)


def test_poisson_icdf_zero_mean_is_zero():
    u = jnp.array([1e-300, 0.3, 0.999999])
    np.testing.assert_array_equal(poisson_icdf(u, 0.0), [0.0, 0.0, 0.0])


def test_poisson_icdf_negative_mean_rejected():
    with pytest.raises(ValueError):
        poisson_icdf(jnp.array([0.5]), -0.1)


def test_poisson_icdf_atom_boundaries():
    mean = 0.7
    p0 = math.exp(-mean)
    p1 = p0 * (1.0 + mean)
    u = jnp.array([p0 - 1e-9, p0 + 1e-9, p1 - 1e-9, p1 + 1e-9])
    np.testing.assert_array_equal(poisson_icdf(u, mean), [0.0, 1.0, 1.0, 2.0])


def test_poisson_icdf_is_monotone_and_integer_valued():
    u = jnp.linspace(1e-6, 1.0 - 1e-6, 2001)
    counts = np.asarray(poisson_icdf(u, 3.0))
    assert np.all(np.diff(counts) >= 0.0)
    np.testing.assert_array_equal(counts, np.round(counts))
    assert counts.dtype == np.float64


def test_poisson_icdf_stratified_mean():
    n = 200000
    u = (jnp.arange(n) + 0.5) / n
    for mean in (0.05, 1.0, 4.0):
        assert float(jnp.mean(poisson_icdf(u, mean))) == pytest.approx(mean, abs=2e-3)


def test_poisson_icdf_upper_tail_is_capped():
    mean = 2.0
    counts = poisson_icdf(jnp.array([1.0]), mean)
    assert float(counts[0]) <= poisson_support_size(mean) - 1


def test_poisson_support_size_grows_with_mean():
    assert poisson_support_size(0.0) == 24
    assert poisson_support_size(1.0) == 37
    assert poisson_support_size(100.0) > 100

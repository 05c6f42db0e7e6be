import jax.numpy as jnp
import numpy as np
import pytest

from jumpdiff.products.base import CharacteristicFunctionProduct
from jumpdiff.products.european import EuropeanOption


def test_transform_matches_closed_form():
    option = EuropeanOption(maturity=1.0, strike=100.0)
    u = 0.7 + 1.5j
    expected = -(100.0 ** (1.0 + 1j * u)) / (u * u - 1j * u)
    assert complex(option.apply(jnp.asarray(u))) == pytest.approx(expected, rel=1e-12)


@pytest.mark.parametrize("imag", [0.5, 1.5, 2.49])
def test_transform_is_finite_inside_strip(imag):
    option = EuropeanOption(maturity=1.0, strike=90.0)
    u = jnp.linspace(-50.0, 50.0, 101) + 1j * imag
    values = np.asarray(option.apply(u))
    assert np.all(np.isfinite(values.real))
    assert np.all(np.isfinite(values.imag))


@pytest.mark.parametrize("pole", [0.0, 1.0])
def test_transform_blows_up_near_poles(pole):
    option = EuropeanOption(maturity=1.0, strike=100.0)
    near = complex(option.apply(jnp.asarray(1e-8 + 1j * pole)))
    far = complex(option.apply(jnp.asarray(1.0 + 1j * pole)))
    assert abs(near) > 1e5 * abs(far)


def test_strip_bounds_and_attributes():
    option = EuropeanOption(maturity=2.0, strike=110.0)
    assert isinstance(option, CharacteristicFunctionProduct)
    assert option.integration_domain_imag_lower_bound == 0.5
    assert option.integration_domain_imag_upper_bound == 2.5
    assert option.maturity == 2.0
    assert option.strike == 110.0


def test_option_is_immutable():
    option = EuropeanOption(maturity=1.0, strike=100.0)
    with pytest.raises(AttributeError):
        option.strike = 95.0


def test_pole_contribution_restores_forward_below_convergence_line():
    option = EuropeanOption(maturity=1.0, strike=100.0)
    forward = lambda u: jnp.asarray(105.0 + 0.0j) * jnp.ones_like(u)
    assert option.pole_contribution(forward, 0.7) == pytest.approx(105.0)
    assert option.pole_contribution(forward, 1.5) == 0.0
    with pytest.raises(ValueError):
        option.pole_contribution(forward, 1.0)

import dataclasses
import math

import jax.numpy as jnp
import pytest

from jumpdiff.core.grid import TimeDiscretization
from jumpdiff.core.increments import FactorKind
from jumpdiff.models.jump_diffusion import (
    DIFFUSION_FACTOR,
    JUMP_COUNT_FACTOR,
    JUMP_SIZE_FACTOR,
    MertonCharacteristicModel,
    MertonModel,
    MertonParams,
    characteristic_exponent,
    merton_call_price,
)


def _black_scholes_call(spot, strike, maturity, rate, sigma):
    sqrt_t = math.sqrt(maturity)
    d1 = (math.log(spot / strike) + (rate + 0.5 * sigma ** 2) * maturity) / (sigma * sqrt_t)
    d2 = d1 - sigma * sqrt_t
    cdf = lambda x: 0.5 * (1.0 + math.erf(x / math.sqrt(2.0)))
    return spot * cdf(d1) - strike * math.exp(-rate * maturity) * cdf(d2)


def test_effective_drift_formula(merton_params):
    r, sigma, lam, a = 0.05, 0.2, 0.5, -0.1
    expected = r - 0.5 * sigma ** 2 - (math.exp(a) - 1.0) * lam
    assert merton_params.effective_drift() == pytest.approx(expected, rel=1e-15)
    model = MertonModel(merton_params, TimeDiscretization.uniform(0.0, 1.0, 4))
    assert model.effective_drift == pytest.approx(expected, rel=1e-15)
    assert model.drift(0.5) == model.effective_drift


def test_factor_loadings(merton_params):
    model = MertonModel(merton_params, TimeDiscretization.uniform(0.0, 1.0, 4))
    sigma, log_jump, b = model.factor_loadings(0.0)
    assert sigma == 0.2
    assert log_jump == pytest.approx(-0.1 - 0.5 * 0.15 ** 2)
    assert b == 0.15
    assert model.initial_state() == pytest.approx(math.log(100.0))
    assert model.number_of_factors == 3


def test_factor_table(merton_params):
    grid = TimeDiscretization.from_times([0.0, 0.5, 2.0])
    model = MertonModel(merton_params, grid)
    assert model.factor_spec(0, DIFFUSION_FACTOR).kind is FactorKind.DIFFUSION
    assert model.factor_spec(0, JUMP_SIZE_FACTOR).kind is FactorKind.JUMP_SIZE
    count = model.factor_spec(1, JUMP_COUNT_FACTOR)
    assert count.kind is FactorKind.JUMP_COUNT
    assert count.time_step == 1.5
    assert count.jump_intensity == 0.5
    with pytest.raises(IndexError):
        model.factor_spec(2, 0)
    with pytest.raises(IndexError):
        model.factor_spec(0, 3)


def test_numeraire_is_money_market_account(merton_params):
    model = MertonModel(merton_params, TimeDiscretization.uniform(0.0, 1.0, 4))
    numeraire = model.numeraire(2.0)
    assert numeraire.is_deterministic
    assert float(numeraire.values) == pytest.approx(math.exp(0.1))


@pytest.mark.parametrize(
    "field, value",
    [
        ("initial_value", 0.0),
        ("initial_value", -1.0),
        ("volatility", -0.1),
        ("jump_intensity", -1.0),
        ("jump_size_std_dev", -0.2),
    ],
)
def test_params_validation(merton_params, field, value):
    with pytest.raises(ValueError):
        dataclasses.replace(merton_params, **{field: value})


def test_characteristic_function_normalisation(merton_params):
    model = MertonCharacteristicModel(merton_params)
    assert complex(model.characteristic_function(jnp.array(0.0), 1.0)) == pytest.approx(1.0)
    assert complex(characteristic_exponent(jnp.array(0.0 + 0.0j), merton_params)) == pytest.approx(0.0)


def test_characteristic_function_martingale(merton_params):
    # phi(-i) = E[S_T] = S0 exp(r T)
    model = MertonCharacteristicModel(merton_params)
    value = complex(model.characteristic_function(jnp.array(-1j), 2.0))
    assert value.real == pytest.approx(100.0 * math.exp(0.1), rel=1e-12)
    assert value.imag == pytest.approx(0.0, abs=1e-10)


def test_closed_form_reduces_to_black_scholes():
    params = MertonParams(100.0, 0.03, 0.25, 0.0, 0.2, 0.3)
    for strike in (80.0, 100.0, 125.0):
        expected = _black_scholes_call(100.0, strike, 1.5, 0.03, 0.25)
        assert float(merton_call_price(params, 1.5, strike)) == pytest.approx(expected, rel=1e-10)


def test_closed_form_bounds_and_expiry(merton_params):
    price = float(merton_call_price(merton_params, 1.0, 100.0))
    assert 100.0 - 100.0 * math.exp(-0.05) < price < 100.0
    assert float(merton_call_price(merton_params, 0.0, 90.0)) == pytest.approx(10.0)


def test_closed_form_increases_with_jump_risk(merton_params):
    calm = MertonParams(100.0, 0.05, 0.2, 0.0, -0.1, 0.15)
    assert float(merton_call_price(calm, 1.0, 100.0)) < float(merton_call_price(merton_params, 1.0, 100.0))

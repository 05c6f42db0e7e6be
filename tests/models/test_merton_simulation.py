import math

import numpy as np
import pytest

from jumpdiff.core.grid import TimeDiscretization
from jumpdiff.models.merton_simulation import MertonMonteCarloSimulation


def _simulation(grid=None, paths=2000, seed=42, **overrides):
    params = dict(
        initial_value=100.0,
        risk_free_rate=0.05,
        volatility=0.2,
        jump_intensity=0.5,
        jump_size_mean=-0.1,
        jump_size_std_dev=0.15,
    )
    params.update(overrides)
    grid = grid or TimeDiscretization.uniform(0.0, 1.0, 10)
    return MertonMonteCarloSimulation(grid, paths, seed, **params)


def test_same_configuration_is_reproducible():
    a = _simulation()
    b = _simulation()
    for index in (0, 3, 10):
        np.testing.assert_array_equal(a.asset_value(index).values, b.asset_value(index).values)


def test_query_order_does_not_change_paths():
    a = _simulation()
    b = _simulation()
    late = a.asset_value(10).values
    b.asset_value(2)
    np.testing.assert_array_equal(b.asset_value(10).values, late)
    np.testing.assert_array_equal(a.asset_value(10).values, late)


def test_initial_value_on_every_path():
    sim = _simulation()
    np.testing.assert_allclose(sim.asset_value(0).values, np.full(2000, 100.0), rtol=1e-14)


@pytest.mark.slow
@pytest.mark.parametrize("jump_intensity", [0.0, 0.5])
def test_discounted_asset_is_martingale(jump_intensity):
    sim = _simulation(paths=100000, seed=3, jump_intensity=jump_intensity)
    grid = sim.time_discretization
    for index in (5, 10):
        deflated = sim.asset_value(index) / sim.numeraire(index)
        value = float(deflated.average(sim.monte_carlo_weights(index)))
        assert value == pytest.approx(100.0, abs=0.5), grid.time(index)


def test_time_arguments_resolve_to_nearest_grid_point():
    sim = _simulation()
    np.testing.assert_array_equal(sim.asset_value(0.31).values, sim.asset_value(3).values)
    np.testing.assert_array_equal(sim.asset_value(1.0).values, sim.asset_value(10).values)
    assert sim.time_index(0.34) == 3
    assert sim.time(3) == pytest.approx(0.3)


def test_numeraire_at_index_and_time():
    sim = _simulation()
    assert float(sim.numeraire(10).values) == pytest.approx(math.exp(0.05))
    assert float(sim.numeraire(0.25).values) == pytest.approx(math.exp(0.05 * 0.25))


def test_weights_are_uniform():
    sim = _simulation(paths=500)
    weights = sim.monte_carlo_weights(4)
    np.testing.assert_allclose(weights.values, np.full(500, 1.0 / 500))


def test_out_of_range_queries_raise():
    sim = _simulation()
    with pytest.raises(IndexError):
        sim.asset_value(11)
    with pytest.raises(IndexError):
        sim.asset_value(1.5)
    with pytest.raises(IndexError):
        sim.asset_value(0, asset_index=1)
    assert sim.number_of_assets == 1


def test_invalid_construction_raises():
    with pytest.raises(ValueError):
        _simulation(paths=0)
    with pytest.raises(ValueError):
        _simulation(volatility=-0.2)
    with pytest.raises(ValueError):
        _simulation(initial_value=0.0)


def test_clone_with_modified_volatility_matches_fresh_simulation():
    original = _simulation()
    before = original.asset_value(10).values

    clone = original.clone_with_modified_data({"volatility": 0.4})
    fresh = _simulation(volatility=0.4)

    assert clone.model.effective_drift == pytest.approx(fresh.model.effective_drift, rel=1e-15)
    np.testing.assert_array_equal(clone.asset_value(10).values, fresh.asset_value(10).values)
    np.testing.assert_array_equal(original.asset_value(10).values, before)
    assert original.params.volatility == 0.2
    assert not np.array_equal(clone.asset_value(10).values, before)


def test_clone_keeps_unmodified_parameters():
    original = _simulation()
    clone = original.clone_with_modified_data({"riskFreeRate": 0.01})
    assert clone.params.jump_size_mean == -0.1
    assert clone.params.jump_size_std_dev == 0.15
    assert clone.params.volatility == 0.2
    assert clone.params.risk_free_rate == 0.01
    assert clone.seed == original.seed
    assert clone.number_of_paths == original.number_of_paths


def test_clone_with_initial_time_shifts_grid():
    original = _simulation()
    clone = original.clone_with_modified_data({"initialTime": 0.5})
    grid = clone.time_discretization
    assert grid.initial_time == pytest.approx(0.5)
    assert grid.final_time == pytest.approx(1.5)
    np.testing.assert_allclose(
        grid.time_steps(), original.time_discretization.time_steps(), rtol=1e-12
    )
    np.testing.assert_allclose(
        clone.asset_value(10).values, original.asset_value(10).values, rtol=1e-10
    )
    assert original.time_discretization.initial_time == 0.0


def test_clone_with_modified_seed():
    original = _simulation()
    clone = original.clone_with_modified_seed(43)
    assert clone.seed == 43
    assert clone.params == original.params
    assert not np.array_equal(clone.asset_value(5).values, original.asset_value(5).values)
    np.testing.assert_array_equal(
        clone.asset_value(5).values, _simulation(seed=43).asset_value(5).values
    )


def test_unknown_override_keys_are_ignored():
    original = _simulation()
    clone = original.clone_with_modified_data({"dividendYield": 0.03, "volatility": None})
    assert clone.params == original.params
    np.testing.assert_array_equal(clone.asset_value(10).values, original.asset_value(10).values)


def test_non_finite_values_propagate():
    grid = TimeDiscretization.uniform(0.0, 1.0, 1)
    sim = MertonMonteCarloSimulation(grid, 10000, 0, 1e308, 0.0, 5.0, 0.0, 0.0, 0.0)
    assert np.all(np.isfinite(sim.asset_value(0).values))
    final = np.asarray(sim.asset_value(1).values)
    assert np.any(np.isinf(final))
    assert np.all(final[np.isfinite(final)] > 0.0)


def test_random_variable_for_constant_and_repr():
    sim = _simulation()
    constant = sim.random_variable_for_constant(1.5)
    assert constant.is_deterministic
    assert float(constant.values) == 1.5
    assert "paths=2000" in repr(sim)

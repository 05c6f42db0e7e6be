"""Monte Carlo simulation of the Merton jump-diffusion model.

:class:`MertonMonteCarloSimulation` is the owning context of one simulation:
it builds the model, the increments engine and the Euler scheme together at
construction, and answers asset, numeraire and weight queries.  Clones with
modified data are fully independent simulations.
"""
from __future__ import annotations

import dataclasses
import logging
import numbers
from typing import Any, Mapping

from ml_collections import ConfigDict

from jumpdiff.core.config.defaults import get_default_config
from jumpdiff.core.engine import MCConfig
from jumpdiff.core.grid import TimeDiscretization
from jumpdiff.core.increments import IndependentIncrements
from jumpdiff.core.random_variable import RandomVariable
from jumpdiff.core.scheme import EulerScheme

from .jump_diffusion import MertonModel, MertonParams

logger = logging.getLogger(__name__)

__all__ = ["MODIFIABLE_KEYS", "MertonMonteCarloSimulation"]

# Override keys understood by clone_with_modified_data, mapped to the
# MertonParams field they replace.
_PARAMETER_KEYS = {
    "initialValue": "initial_value",
    "riskFreeRate": "risk_free_rate",
    "volatility": "volatility",
    "jumpIntensity": "jump_intensity",
    "jumpSizeMean": "jump_size_mean",
    "jumpSizeStdDev": "jump_size_std_dev",
}

MODIFIABLE_KEYS = frozenset({"initialTime", "seed", *_PARAMETER_KEYS})


class MertonMonteCarloSimulation:
    """Monte Carlo simulation of the Merton model on a given time grid.

    The model is

        dS = r S dt + sigma S dW + S dJ,    N(t) = exp(r t),

    simulated in ``X = log S`` with an Euler scheme.

    Parameters
    ----------
    time_discretization
        Simulation time grid.
    number_of_paths
        Number of Monte Carlo paths.
    seed
        Seed of the random number generator.
    initial_value
        Spot value ``S0``.
    risk_free_rate
        Risk-free rate ``r``.
    volatility
        Log volatility ``sigma``.
    jump_intensity
        Intensity ``lambda`` of the compound Poisson process.
    jump_size_mean
        Jump size mean ``a`` (``E[Y] = exp(a)``).
    jump_size_std_dev
        Jump size standard deviation ``b`` of ``log Y``.
    dtype
        Real compute dtype; ``None`` uses the configured default.
    """

    def __init__(
        self,
        time_discretization: TimeDiscretization,
        number_of_paths: int,
        seed: int,
        initial_value: float,
        risk_free_rate: float,
        volatility: float,
        jump_intensity: float,
        jump_size_mean: float,
        jump_size_std_dev: float,
        *,
        dtype: Any = None,
    ) -> None:
        params = MertonParams(
            initial_value=initial_value,
            risk_free_rate=risk_free_rate,
            volatility=volatility,
            jump_intensity=jump_intensity,
            jump_size_mean=jump_size_mean,
            jump_size_std_dev=jump_size_std_dev,
        )
        config = MCConfig(paths=number_of_paths, seed=seed, dtype=dtype)
        model = MertonModel(params, time_discretization, dtype=config.dtype)
        increments = IndependentIncrements(
            time_discretization,
            model.number_of_factors,
            config.paths,
            config.seed,
            model.inverse_cdf,
            dtype=config.dtype,
        )
        self._params = params
        self._config = config
        self._model = model
        self._scheme = EulerScheme(model, increments)
        logger.debug(
            "Merton simulation: %d paths, %d steps on [%g, %g], seed=%d, mu=%.6g",
            config.paths,
            time_discretization.number_of_time_steps,
            time_discretization.initial_time,
            time_discretization.final_time,
            config.seed,
            model.effective_drift,
        )

    @classmethod
    def from_params(
        cls,
        time_discretization: TimeDiscretization,
        params: MertonParams,
        config: MCConfig,
    ) -> "MertonMonteCarloSimulation":
        return cls(
            time_discretization,
            config.paths,
            config.seed,
            params.initial_value,
            params.risk_free_rate,
            params.volatility,
            params.jump_intensity,
            params.jump_size_mean,
            params.jump_size_std_dev,
            dtype=config.dtype,
        )

    @classmethod
    def from_config(
        cls,
        params: MertonParams,
        horizon: float,
        config: ConfigDict | None = None,
        *,
        initial_time: float = 0.0,
    ) -> "MertonMonteCarloSimulation":
        """Simulate ``params`` over ``horizon`` with the ``monte_carlo`` defaults of ``config``."""
        cfg = config if config is not None else get_default_config()
        time_discretization = TimeDiscretization.uniform(
            initial_time, horizon, cfg.monte_carlo.default_steps
        )
        return cls.from_params(time_discretization, params, MCConfig.from_config(cfg))

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------
    @property
    def params(self) -> MertonParams:
        return self._params

    @property
    def model(self) -> MertonModel:
        return self._model

    @property
    def seed(self) -> int:
        return self._config.seed

    @property
    def number_of_paths(self) -> int:
        return self._config.paths

    @property
    def number_of_assets(self) -> int:
        return 1

    @property
    def time_discretization(self) -> TimeDiscretization:
        return self._scheme.time_discretization

    def time(self, time_index: int) -> float:
        return self._scheme.time(time_index)

    def time_index(self, time: float) -> int:
        """Index of the grid time nearest to ``time``."""
        return self._scheme.time_index(time)

    def random_variable_for_constant(self, value: float) -> RandomVariable:
        return self._scheme.increments.random_variable_for_constant(value)

    def _resolve_index(self, time_or_index: float | int) -> int:
        # Integers are grid indices, any other real is a time.
        if isinstance(time_or_index, numbers.Integral) and not isinstance(time_or_index, bool):
            return int(time_or_index)
        return self.time_index(float(time_or_index))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def asset_value(self, time_or_index: float | int, asset_index: int = 0) -> RandomVariable:
        """Simulated ``S`` at a grid index or the grid time nearest to a time."""
        if asset_index != 0:
            raise IndexError(f"Single-asset model: asset_index must be 0, got {asset_index}.")
        return self._scheme.asset_value(self._resolve_index(time_or_index))

    def process_value(self, time_or_index: float | int) -> RandomVariable:
        """Simulated ``X = log S``."""
        return self._scheme.process_value(self._resolve_index(time_or_index))

    def numeraire(self, time_or_index: float | int) -> RandomVariable:
        """Money-market account at a grid index, or at an arbitrary time."""
        if isinstance(time_or_index, numbers.Integral) and not isinstance(time_or_index, bool):
            return self._model.numeraire(self.time(int(time_or_index)))
        return self._model.numeraire(float(time_or_index))

    def monte_carlo_weights(self, time_or_index: float | int) -> RandomVariable:
        return self._scheme.monte_carlo_weights(self._resolve_index(time_or_index))

    # ------------------------------------------------------------------
    # Re-parameterisation
    # ------------------------------------------------------------------
    def clone_with_modified_data(self, overrides: Mapping[str, Any]) -> "MertonMonteCarloSimulation":
        """Return a new simulation with ``overrides`` applied to this one's data.

        Recognised keys are ``initialTime`` (shifts the whole time grid),
        ``initialValue``, ``riskFreeRate``, ``volatility``, ``jumpIntensity``,
        ``jumpSizeMean``, ``jumpSizeStdDev`` and ``seed``.  Other keys are
        ignored.  This simulation is left untouched.
        """
        ignored = sorted(str(key) for key in overrides if key not in MODIFIABLE_KEYS)
        if ignored:
            logger.debug("Ignoring unrecognised override keys: %s", ", ".join(ignored))

        changes = {
            field: float(overrides[key])
            for key, field in _PARAMETER_KEYS.items()
            if overrides.get(key) is not None
        }
        params = dataclasses.replace(self._params, **changes)

        seed = self.seed if overrides.get("seed") is None else int(overrides["seed"])

        time_discretization = self.time_discretization
        if overrides.get("initialTime") is not None:
            shift = float(overrides["initialTime"]) - time_discretization.initial_time
            time_discretization = time_discretization.time_shifted(shift)

        config = dataclasses.replace(self._config, seed=seed)
        logger.debug("Cloning Merton simulation: changes=%s, seed=%d", changes, seed)
        return MertonMonteCarloSimulation.from_params(time_discretization, params, config)

    def clone_with_modified_seed(self, seed: int) -> "MertonMonteCarloSimulation":
        """Return an independent simulation identical to this one but for ``seed``."""
        return self.clone_with_modified_data({"seed": seed})

    def __repr__(self) -> str:
        return (
            f"MertonMonteCarloSimulation(paths={self.number_of_paths}, "
            f"steps={self.time_discretization.number_of_time_steps}, seed={self.seed}, "
            f"params={self._params!r})"
        )

"""Monte Carlo configuration and valuation helpers.

The helpers here work against any simulation exposing the asset-model query
API (``asset_value``, ``numeraire``, ``monte_carlo_weights``, ``time`` and
``time_index``), such as
:class:`~jumpdiff.models.merton_simulation.MertonMonteCarloSimulation`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import jax.numpy as jnp
from ml_collections import ConfigDict

from jumpdiff.core.config.defaults import get_default_config
from jumpdiff.core.random_variable import RandomVariable
from jumpdiff.core.utils.precision import canonicalize_dtype

Array = jnp.ndarray

logger = logging.getLogger(__name__)

__all__ = [
    "Array",
    "AssetSimulation",
    "MCConfig",
    "price_european_mc",
]


class AssetSimulation(Protocol):
    """Query interface of a single-asset Monte Carlo simulation."""

    def asset_value(self, time_or_index: float | int, asset_index: int = 0) -> RandomVariable:
        ...

    def numeraire(self, time_or_index: float | int) -> RandomVariable:
        ...

    def monte_carlo_weights(self, time_or_index: float | int) -> RandomVariable:
        ...

    def time(self, time_index: int) -> float:
        ...

    def time_index(self, time: float) -> int:
        ...


@dataclass
class MCConfig:
    """Configuration for Monte Carlo simulations."""

    paths: int
    seed: int = 0
    dtype: Any = None

    def __post_init__(self) -> None:
        if self.paths <= 0:
            raise ValueError("MCConfig.paths must be > 0.")
        self.seed = int(self.seed)
        self.dtype = canonicalize_dtype(self.dtype)

    @classmethod
    def from_config(cls, config: ConfigDict | None = None) -> "MCConfig":
        """Build from ``config.seed`` and the ``config.monte_carlo`` section."""
        cfg = config if config is not None else get_default_config()
        return cls(
            paths=cfg.monte_carlo.default_paths,
            seed=cfg.seed,
            dtype=cfg.monte_carlo.dtype,
        )


def price_european_mc(
    simulation: AssetSimulation,
    maturity: float,
    strike: float,
    *,
    evaluation_time: float = 0.0,
) -> Array:
    """Monte Carlo value of a European call ``max(S(T) - K, 0)``.

    The payoff is deflated by the numeraire at the grid time nearest to
    ``maturity``, averaged with the simulation's Monte Carlo weights and
    re-inflated by the numeraire at ``evaluation_time``.
    """
    maturity_index = simulation.time_index(maturity)
    underlying = simulation.asset_value(maturity_index, 0)
    payoff = (underlying - strike).floor(0.0)
    deflated = payoff / simulation.numeraire(maturity_index)
    weights = simulation.monte_carlo_weights(maturity_index)
    value = deflated.average(weights) * simulation.numeraire(evaluation_time).values
    logger.debug(
        "European call K=%g T=%g (grid time %g): %s",
        strike,
        maturity,
        simulation.time(maturity_index),
        value,
    )
    return value

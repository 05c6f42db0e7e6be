"""Core computational infrastructure for jumpdiff.

This module provides time grids, path-indexed random variables, the
independent increments engine, the Euler scheme, Monte Carlo valuation and
configuration management.
"""

from . import config, utils
from .distributions import normal_icdf, poisson_icdf
from .engine import Array, MCConfig, price_european_mc
from .grid import TimeDiscretization
from .increments import (
    FactorKind,
    FactorSpec,
    IndependentIncrements,
    jump_contribution,
)
from .random_variable import RandomVariable
from .rng import open_uniform, stream_key
from .scheme import EulerScheme

__all__ = [
    "Array",
    "EulerScheme",
    "FactorKind",
    "FactorSpec",
    "IndependentIncrements",
    "MCConfig",
    "RandomVariable",
    "TimeDiscretization",
    "config",
    "jump_contribution",
    "normal_icdf",
    "open_uniform",
    "poisson_icdf",
    "price_european_mc",
    "stream_key",
    "utils",
]

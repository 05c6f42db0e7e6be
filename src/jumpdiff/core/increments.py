"""Independent random increments on a time grid.

The engine draws one vector of uniforms per ``(step, factor)`` stream and
maps it through the inverse CDF supplied for that stream.  Which
distribution a factor follows is described by a small table of
:class:`FactorSpec` entries, so the mapping can be inspected and tested
without running a simulation.
"""
from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Tuple

import jax.numpy as jnp

from jumpdiff.core.distributions import normal_icdf, poisson_icdf
from jumpdiff.core.grid import TimeDiscretization
from jumpdiff.core.random_variable import RandomVariable
from jumpdiff.core.rng import open_uniform, stream_key
from jumpdiff.core.utils.precision import canonicalize_dtype

Array = jnp.ndarray

InverseCDF = Callable[[Array], Array]
InverseCDFSupplier = Callable[[int, int], InverseCDF]

logger = logging.getLogger(__name__)

__all__ = [
    "FactorKind",
    "FactorSpec",
    "IndependentIncrements",
    "InverseCDF",
    "InverseCDFSupplier",
    "jump_contribution",
]


class FactorKind(str, enum.Enum):
    """Distribution family of a random factor."""

    DIFFUSION = "diffusion"
    JUMP_SIZE = "jump_size"
    JUMP_COUNT = "jump_count"


@dataclass(frozen=True)
class FactorSpec:
    """Specification of one factor over one time step.

    Attributes
    ----------
    kind:
        Distribution family of the factor.
    time_step:
        Length of the time step the increment covers.
    jump_intensity:
        Poisson intensity, only used by :attr:`FactorKind.JUMP_COUNT`.
    """

    kind: FactorKind
    time_step: float
    jump_intensity: float = 0.0

    def inverse_cdf(self) -> InverseCDF:
        """Return the map from a uniform variate to the factor's increment."""
        if self.kind is FactorKind.DIFFUSION:
            scale = math.sqrt(self.time_step)
            return lambda u: normal_icdf(u) * scale
        if self.kind is FactorKind.JUMP_SIZE:
            return normal_icdf
        if self.kind is FactorKind.JUMP_COUNT:
            mean = self.jump_intensity * self.time_step
            return lambda u: poisson_icdf(u, mean)
        raise ValueError(f"Unknown factor kind: {self.kind!r}")


def jump_contribution(jump_size: RandomVariable, jump_count: RandomVariable) -> RandomVariable:
    """Compound jump term ``Z * sqrt(N)`` from a jump size and a jump count.

    The sum of ``N`` independent standard normals has the law of
    ``Z * sqrt(N)``.  Paths without a jump contribute exactly zero,
    whatever the value of ``Z``.
    """
    combined = jump_size * jump_count.sqrt()
    return combined.where(jump_count.values > 0.0, 0.0)


@dataclass
class IndependentIncrements:
    """Lazily drawn, memoized independent increments.

    Parameters
    ----------
    time_discretization
        Grid with ``n`` steps; valid step indices are ``0 .. n-1``.
    number_of_factors
        Number of independent factors per step.
    number_of_paths
        Length of every increment vector.
    seed
        Seed of the underlying JAX PRNG.
    inverse_cdf
        Two-argument supplier ``(step, factor) -> (u -> increment)``.
    dtype
        Real compute dtype; ``None`` uses the configured default.
    """

    time_discretization: TimeDiscretization
    number_of_factors: int
    number_of_paths: int
    seed: int
    inverse_cdf: InverseCDFSupplier
    dtype: Any = None
    _cache: Dict[Tuple[int, int], RandomVariable] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.number_of_factors < 1:
            raise ValueError("number_of_factors must be >= 1.")
        if self.number_of_paths < 1:
            raise ValueError("number_of_paths must be >= 1.")
        self.seed = int(self.seed)
        self.dtype = canonicalize_dtype(self.dtype)
        logger.debug(
            "Increments: %d steps x %d factors x %d paths, seed=%d, dtype=%s",
            self.number_of_time_steps,
            self.number_of_factors,
            self.number_of_paths,
            self.seed,
            self.dtype.name,
        )

    @property
    def number_of_time_steps(self) -> int:
        return self.time_discretization.number_of_time_steps

    def _check_indices(self, step: int, factor: int) -> None:
        if not 0 <= step < self.number_of_time_steps:
            raise IndexError(
                f"Time step index {step} outside [0, {self.number_of_time_steps - 1}]."
            )
        if not 0 <= factor < self.number_of_factors:
            raise IndexError(
                f"Factor index {factor} outside [0, {self.number_of_factors - 1}]."
            )

    def uniforms(self, step: int, factor: int) -> Array:
        """Uniform variates of the ``(step, factor)`` stream, one per path."""
        self._check_indices(step, factor)
        key = stream_key(self.seed, step, factor)
        return open_uniform(key, (self.number_of_paths,), dtype=self.dtype)

    def increment(self, step: int, factor: int) -> RandomVariable:
        """Return the increment of ``factor`` over time step ``step``."""
        self._check_indices(step, factor)
        cached = self._cache.get((step, factor))
        if cached is not None:
            return cached
        icdf = self.inverse_cdf(step, factor)
        values = jnp.asarray(icdf(self.uniforms(step, factor)), dtype=self.dtype)
        sample = RandomVariable(values)
        self._cache[(step, factor)] = sample
        return sample

    def random_variable_for_constant(self, value: float) -> RandomVariable:
        return RandomVariable.constant(value, dtype=self.dtype)


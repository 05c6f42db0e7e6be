"""Path-indexed random variables.

A :class:`RandomVariable` holds one value per Monte Carlo path (or a single
scalar for deterministic quantities such as the numeraire) and only exposes
elementwise arithmetic and path averages.  No single path can be assigned:
every operation maps whole vectors to whole vectors.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import jax.numpy as jnp
import numpy as np

from jumpdiff.core.utils.precision import canonicalize_dtype

Array = jnp.ndarray

Operand = Union["RandomVariable", float, int, Array]

__all__ = ["RandomVariable"]


def _values(other: Operand) -> Array:
    if isinstance(other, RandomVariable):
        return other.values
    return other


@dataclass(frozen=True, eq=False)
class RandomVariable:
    """Immutable vector of per-path values.

    Attributes
    ----------
    values:
        ``jax`` array of shape ``(paths,)`` or a 0-d array for a
        deterministic value that broadcasts against any path count.
    """

    values: Array

    def __post_init__(self) -> None:
        arr = jnp.asarray(self.values)
        if arr.ndim > 1:
            raise ValueError(f"RandomVariable values must be 0-d or 1-d, got shape {arr.shape}.")
        object.__setattr__(self, "values", arr)

    @classmethod
    def constant(cls, value: float, dtype: Any = None) -> "RandomVariable":
        return cls(jnp.asarray(value, dtype=canonicalize_dtype(dtype)))

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------
    @property
    def is_deterministic(self) -> bool:
        return self.values.ndim == 0

    @property
    def size(self) -> int:
        """Number of paths (``1`` for deterministic values)."""
        return 1 if self.is_deterministic else int(self.values.shape[0])

    @property
    def dtype(self) -> jnp.dtype:
        return self.values.dtype

    def __len__(self) -> int:
        return self.size

    def __array__(self, dtype=None, copy=None):
        return np.asarray(self.values, dtype=dtype)

    # ------------------------------------------------------------------
    # Elementwise arithmetic
    # ------------------------------------------------------------------
    def __add__(self, other: Operand) -> "RandomVariable":
        return RandomVariable(self.values + _values(other))

    __radd__ = __add__

    def __sub__(self, other: Operand) -> "RandomVariable":
        return RandomVariable(self.values - _values(other))

    def __rsub__(self, other: Operand) -> "RandomVariable":
        return RandomVariable(_values(other) - self.values)

    def __mul__(self, other: Operand) -> "RandomVariable":
        return RandomVariable(self.values * _values(other))

    __rmul__ = __mul__

    def __truediv__(self, other: Operand) -> "RandomVariable":
        return RandomVariable(self.values / _values(other))

    def __rtruediv__(self, other: Operand) -> "RandomVariable":
        return RandomVariable(_values(other) / self.values)

    def __neg__(self) -> "RandomVariable":
        return RandomVariable(-self.values)

    def __pow__(self, exponent: float) -> "RandomVariable":
        return RandomVariable(self.values ** exponent)

    def sqrt(self) -> "RandomVariable":
        return RandomVariable(jnp.sqrt(self.values))

    def exp(self) -> "RandomVariable":
        return RandomVariable(jnp.exp(self.values))

    def log(self) -> "RandomVariable":
        return RandomVariable(jnp.log(self.values))

    def floor(self, floor: Operand) -> "RandomVariable":
        """Elementwise ``max(self, floor)``, e.g. ``(S - K).floor(0.0)``."""
        return RandomVariable(jnp.maximum(self.values, _values(floor)))

    def where(self, condition: Operand, other: Operand) -> "RandomVariable":
        """Keep ``self`` where ``condition`` holds, ``other`` elsewhere."""
        return RandomVariable(jnp.where(_values(condition), self.values, _values(other)))

    # ------------------------------------------------------------------
    # Reductions
    # ------------------------------------------------------------------
    def average(self, weights: "RandomVariable | None" = None) -> Array:
        """Path average, optionally weighted by Monte Carlo ``weights``.

        Weights are expected to sum to one, as returned by
        ``monte_carlo_weights``.
        """
        if weights is None:
            return jnp.mean(self.values)
        return jnp.sum(self.values * weights.values)

    def variance(self) -> Array:
        if self.is_deterministic:
            return jnp.zeros((), dtype=self.dtype)
        return jnp.var(self.values)

    def standard_error(self) -> Array:
        """Standard error of the path average."""
        if self.is_deterministic:
            return jnp.zeros((), dtype=self.dtype)
        return jnp.sqrt(jnp.var(self.values, ddof=1) / self.size)

    def is_finite(self) -> Array:
        """Boolean mask of paths with finite values."""
        return jnp.isfinite(self.values)

    def __repr__(self) -> str:
        if self.is_deterministic:
            return f"RandomVariable(value={float(self.values)!r})"
        return f"RandomVariable(paths={self.size}, dtype={self.dtype.name})"

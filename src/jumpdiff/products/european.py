"""European call option in Fourier form."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import jax.numpy as jnp

from jumpdiff.core.utils.precision import complex_dtype_for

from .base import CharacteristicFunctionProduct

Array = jnp.ndarray

__all__ = ["EuropeanOption"]


@dataclass(frozen=True)
class EuropeanOption(CharacteristicFunctionProduct):
    """European call paying ``max(S(T) - K, 0)`` at ``T``.

    Parameters
    ----------
    maturity : float
        Payment time ``T``.
    strike : float
        Strike ``K``.

    Notes
    -----
    The transform ``-K^{1+iu} / (u^2 - iu)`` has poles at ``u = 0`` and
    ``u = i`` (``u^2 - iu = u (u - i)``); the strip ``0.5 <= Im(u) <= 2.5``
    lies above both.  The transform integral itself converges only for
    ``Im(u) > 1``.  Below that line the continuation is the transform of
    ``max(S - K, 0) - S``, so contours with ``Im(u) < 1`` add back the
    forward ``E[S(T)]`` through :meth:`pole_contribution`.
    """

    maturity: float
    strike: float
    dtype: Any = None

    def apply(self, u: Array) -> Array:
        u = jnp.asarray(u, dtype=complex_dtype_for(self.dtype))
        iu = 1j * u
        numerator = jnp.power(jnp.asarray(self.strike, dtype=u.dtype), 1.0 + iu)
        denominator = u * u - iu
        return -(numerator / denominator)

    @property
    def integration_domain_imag_lower_bound(self) -> float:
        return 0.5

    @property
    def integration_domain_imag_upper_bound(self) -> float:
        return 2.5

    def pole_contribution(
        self, characteristic_function: Callable[[Array], Array], line_of_integration: float
    ) -> float:
        if line_of_integration == 1.0:
            raise ValueError("line_of_integration 1.0 passes through the pole at u = i")
        if line_of_integration > 1.0:
            return 0.0
        # Residue at u = i: phi(-i) = E[S(T)].
        return float(jnp.real(characteristic_function(jnp.asarray(-1j))))

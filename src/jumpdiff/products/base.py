"""Product abstractions shared by the pricing routes."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

import jax.numpy as jnp

Array = jnp.ndarray

__all__ = ["CharacteristicFunctionProduct"]


class CharacteristicFunctionProduct(ABC):
    """Product described by the Fourier transform of its payoff.

    ``apply`` maps a complex frequency ``u`` to the analytic continuation of
    the transform ``int exp(iux) payoff(exp(x)) dx``.  A Fourier integrator
    may place its contour anywhere strictly inside the strip reported by the
    two bound properties.  Where the strip extends below the half-plane in
    which the transform integral converges, the poles of ``apply`` crossed
    on the way down are accounted for by :meth:`pole_contribution`.
    ``maturity`` is the payment time of the payoff.
    """

    maturity: float

    @abstractmethod
    def apply(self, u: Array) -> Array:
        """Evaluate the payoff transform at complex ``u``."""

    @property
    @abstractmethod
    def integration_domain_imag_lower_bound(self) -> float:
        """Lower bound of the admissible imaginary parts."""

    @property
    @abstractmethod
    def integration_domain_imag_upper_bound(self) -> float:
        """Upper bound of the admissible imaginary parts."""

    def pole_contribution(
        self, characteristic_function: Callable[[Array], Array], line_of_integration: float
    ) -> float:
        """Undiscounted value carried by poles between the contour and the convergence region.

        ``characteristic_function`` evaluates ``E[exp(iu log S_T)]``.  The
        default assumes the transform converges on the whole strip.
        """
        return 0.0

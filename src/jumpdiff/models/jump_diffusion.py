"""Merton jump-diffusion dynamics, characteristic function and analytic price.

Under the risk-neutral measure the asset follows

    dS = r S dt + sigma S dW + S dJ,    S(0) = S0,

with ``J(t) = sum_{k <= N(t)} (Y_k - 1)``, ``N`` a Poisson process with
intensity ``lam`` and ``log Y_k ~ N(a - b^2 / 2, b^2)`` so that
``E[Y_k] = exp(a)``.  Writing ``S = exp(X)``,

    dX = mu dt + sigma dW + (a - b^2 / 2) dN + b Z sqrt(dN),
    mu = r - sigma^2 / 2 - (exp(a) - 1) lam.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Sequence, Tuple

import jax.numpy as jnp
from jax.scipy.special import gammaln
from jax.scipy.stats import norm

from jumpdiff.core.grid import TimeDiscretization
from jumpdiff.core.increments import (
    FactorKind,
    FactorSpec,
    IndependentIncrements,
    InverseCDF,
    jump_contribution,
)
from jumpdiff.core.pricing.fourier import CharacteristicFunctionModel
from jumpdiff.core.random_variable import RandomVariable
from jumpdiff.core.utils.precision import canonicalize_dtype, complex_dtype_for

from .sde import SDE

Array = jnp.ndarray

DIFFUSION_FACTOR = 0
JUMP_SIZE_FACTOR = 1
JUMP_COUNT_FACTOR = 2
NUMBER_OF_FACTORS = 3

__all__ = [
    "DIFFUSION_FACTOR",
    "JUMP_COUNT_FACTOR",
    "JUMP_SIZE_FACTOR",
    "MertonCharacteristicModel",
    "MertonModel",
    "MertonParams",
    "NUMBER_OF_FACTORS",
    "characteristic_exponent",
    "merton_call_price",
]


@dataclass(frozen=True)
class MertonParams:
    """Model parameters for the Merton (lognormal) jump-diffusion."""

    initial_value: float
    risk_free_rate: float
    volatility: float
    jump_intensity: float
    jump_size_mean: float
    jump_size_std_dev: float

    def __post_init__(self) -> None:
        for name in (
            "initial_value",
            "risk_free_rate",
            "volatility",
            "jump_intensity",
            "jump_size_mean",
            "jump_size_std_dev",
        ):
            object.__setattr__(self, name, float(getattr(self, name)))
        if not self.initial_value > 0.0:
            raise ValueError(f"initial_value must be > 0, got {self.initial_value}.")
        if self.volatility < 0.0:
            raise ValueError(f"volatility must be >= 0, got {self.volatility}.")
        if self.jump_intensity < 0.0:
            raise ValueError(f"jump_intensity must be >= 0, got {self.jump_intensity}.")
        if self.jump_size_std_dev < 0.0:
            raise ValueError(f"jump_size_std_dev must be >= 0, got {self.jump_size_std_dev}.")

    def kappa(self) -> float:
        """Mean relative jump size ``E[Y] - 1``."""
        return math.exp(self.jump_size_mean) - 1.0

    def log_jump_mean(self) -> float:
        """Mean of ``log Y``."""
        return self.jump_size_mean - 0.5 * self.jump_size_std_dev ** 2

    def effective_drift(self) -> float:
        """Drift of ``log S`` including the jump compensator."""
        return (
            self.risk_free_rate
            - 0.5 * self.volatility ** 2
            - self.kappa() * self.jump_intensity
        )


@dataclass
class MertonModel(SDE):
    """Merton jump-diffusion expressed as an SDE for ``X = log S``.

    The effective drift and the factor table are derived once at
    construction.  Factors are ordered ``(diffusion, jump size, jump
    count)``; the scheme is driven by the diffusion increment, the jump count
    and the compound jump contribution built from the latter two factors.
    """

    params: MertonParams
    time_discretization: TimeDiscretization
    dtype: Any = None
    _drift: float = field(init=False, repr=False)
    _factor_table: Tuple[Tuple[FactorSpec, ...], ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.dtype = canonicalize_dtype(self.dtype)
        self._drift = self.params.effective_drift()
        lam = self.params.jump_intensity
        self._factor_table = tuple(
            (
                FactorSpec(FactorKind.DIFFUSION, dt),
                FactorSpec(FactorKind.JUMP_SIZE, dt),
                FactorSpec(FactorKind.JUMP_COUNT, dt, jump_intensity=lam),
            )
            for dt in self.time_discretization.time_steps()
        )

    # ------------------------------------------------------------------
    # Parameter accessors
    # ------------------------------------------------------------------
    @property
    def initial_value(self) -> float:
        return self.params.initial_value

    @property
    def risk_free_rate(self) -> float:
        return self.params.risk_free_rate

    @property
    def volatility(self) -> float:
        return self.params.volatility

    @property
    def jump_intensity(self) -> float:
        return self.params.jump_intensity

    @property
    def jump_size_mean(self) -> float:
        return self.params.jump_size_mean

    @property
    def jump_size_std_dev(self) -> float:
        return self.params.jump_size_std_dev

    @property
    def effective_drift(self) -> float:
        return self._drift

    @property
    def number_of_factors(self) -> int:
        return NUMBER_OF_FACTORS

    # ------------------------------------------------------------------
    # Random factor specification
    # ------------------------------------------------------------------
    def factor_spec(self, step: int, factor: int) -> FactorSpec:
        if not 0 <= step < len(self._factor_table):
            raise IndexError(f"Time step index {step} outside [0, {len(self._factor_table) - 1}].")
        if not 0 <= factor < NUMBER_OF_FACTORS:
            raise IndexError(f"Factor index {factor} outside [0, {NUMBER_OF_FACTORS - 1}].")
        return self._factor_table[step][factor]

    def inverse_cdf(self, step: int, factor: int) -> InverseCDF:
        """Inverse-CDF supplier for :class:`IndependentIncrements`."""
        return self.factor_spec(step, factor).inverse_cdf()

    # ------------------------------------------------------------------
    # SDE coefficients
    # ------------------------------------------------------------------
    def initial_state(self) -> float:
        return math.log(self.params.initial_value)

    def drift(self, t: float) -> float:
        return self._drift

    def factor_loadings(self, t: float) -> Tuple[float, float, float]:
        """Loadings of ``(dW, dN, Z sqrt(dN))``."""
        b = self.params.jump_size_std_dev
        return (self.params.volatility, self.params.log_jump_mean(), b)

    def driving_increments(
        self, increments: IndependentIncrements, step: int
    ) -> Sequence[RandomVariable]:
        diffusion = increments.increment(step, DIFFUSION_FACTOR)
        jump_count = increments.increment(step, JUMP_COUNT_FACTOR)
        jump_size = increments.increment(step, JUMP_SIZE_FACTOR)
        return (diffusion, jump_count, jump_contribution(jump_size, jump_count))

    def apply_state_transform(self, state: RandomVariable) -> RandomVariable:
        return state.exp()

    def numeraire(self, t: float) -> RandomVariable:
        """Money-market account ``exp(r t)``."""
        return RandomVariable.constant(math.exp(self.params.risk_free_rate * t), dtype=self.dtype)


def characteristic_exponent(u: Array, params: MertonParams) -> Array:
    """Characteristic exponent of the log-return per unit time.

    ``E[exp(iu (X_t - X_0))] = exp(t * psi(u))`` with the drift included.
    """
    iu = 1j * u
    b2 = params.jump_size_std_dev ** 2
    jump_part = params.jump_intensity * (jnp.exp(iu * params.log_jump_mean() + 0.5 * b2 * iu * iu) - 1.0)
    return iu * params.effective_drift() + 0.5 * params.volatility ** 2 * iu * iu + jump_part


@dataclass
class MertonCharacteristicModel(CharacteristicFunctionModel):
    """Merton jump-diffusion expressed via its characteristic function."""

    params: MertonParams
    dtype: Any = None

    def __post_init__(self) -> None:
        super().__init__(self.params.initial_value, self.params.risk_free_rate)

    def characteristic_function(self, u: Array, maturity: float) -> Array:
        """``E[exp(iu log S_T)]`` for complex ``u`` inside the strip of regularity."""
        u = jnp.asarray(u, dtype=complex_dtype_for(self.dtype))
        log_s0 = math.log(self.params.initial_value)
        return jnp.exp(1j * u * log_s0 + maturity * characteristic_exponent(u, self.params))


def _poisson_weights(lt: float, n_terms: int, dtype: jnp.dtype) -> Array:
    n = jnp.arange(n_terms, dtype=dtype)
    if lt <= 0.0:
        return jnp.where(n == 0.0, 1.0, 0.0).astype(dtype)
    log_w = -lt + n * math.log(lt) - gammaln(n + 1.0)
    return jnp.exp(log_w)


def merton_call_price(
    params: MertonParams,
    maturity: float,
    strike: float,
    *,
    n_terms: int = 64,
    dtype: Any = None,
) -> Array:
    """Closed-form European call price as a Poisson mixture of Black-Scholes prices."""
    if maturity <= 0:
        return jnp.maximum(params.initial_value - strike, 0.0)
    dtype = canonicalize_dtype(dtype)
    T = float(maturity)
    n = jnp.arange(n_terms, dtype=dtype)
    log_mean = math.log(params.initial_value) + params.effective_drift() * T + n * params.log_jump_mean()
    var = params.volatility ** 2 * T + n * params.jump_size_std_dev ** 2
    sqrt_var = jnp.sqrt(jnp.maximum(var, 1e-16))
    log_strike = math.log(strike)
    d1 = (log_mean - log_strike + var) / sqrt_var
    d2 = d1 - sqrt_var
    payoff = jnp.exp(log_mean + 0.5 * var) * norm.cdf(d1) - strike * norm.cdf(d2)
    weights = _poisson_weights(params.jump_intensity * T, n_terms, dtype)
    return math.exp(-params.risk_free_rate * T) * jnp.sum(weights * payoff)

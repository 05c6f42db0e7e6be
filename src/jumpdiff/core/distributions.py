"""Inverse cumulative distribution functions used by the increments engine."""

from __future__ import annotations

import math

import jax.numpy as jnp
from jax.scipy.special import gammaln
from jax.scipy.stats import norm

Array = jnp.ndarray

__all__ = ["normal_icdf", "poisson_icdf", "poisson_support_size"]


def normal_icdf(u: Array) -> Array:
    """Standard normal quantile function."""
    return norm.ppf(u)


def poisson_support_size(mean: float) -> int:
    """Number of Poisson atoms kept when tabulating the CDF for ``mean``.

    The tail beyond ``mean + 12 sqrt(mean) + 24`` carries less probability
    than the resolution of a double precision uniform.
    """
    return int(math.ceil(mean + 12.0 * math.sqrt(mean) + 24.0))


def _poisson_cdf(mean: float, n_terms: int, dtype: jnp.dtype) -> Array:
    n = jnp.arange(n_terms, dtype=dtype)
    log_w = -mean + n * math.log(mean) - gammaln(n + 1.0)
    return jnp.cumsum(jnp.exp(log_w))


def poisson_icdf(u: Array, mean: float) -> Array:
    """Poisson quantile function ``min{k : P(N <= k) >= u}``.

    Parameters
    ----------
    u
        Uniform variates in ``(0, 1)``.
    mean
        Poisson mean (``lambda * dt`` for a jump count over one time step).

    Returns
    -------
    Array
        Jump counts as floats of the same dtype as ``u``.
    """
    u = jnp.asarray(u)
    if mean < 0.0:
        raise ValueError(f"Poisson mean must be non-negative, got {mean}.")
    if mean == 0.0:
        return jnp.zeros_like(u)
    n_terms = poisson_support_size(mean)
    cdf = _poisson_cdf(float(mean), n_terms, u.dtype)
    counts = jnp.searchsorted(cdf, u, side="left")
    # Rounding in the cumulative sum can leave cdf[-1] marginally below u.
    return jnp.minimum(counts, n_terms - 1).astype(u.dtype)

"""Precision management for simulation and transform kernels.

Simulations run in the configured real compute dtype.  When JAX is started
with ``jax_enable_x64`` the default is ``float64``, otherwise ``float32``.
Fourier kernels use the complex dtype matching the real compute dtype.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator

import jax
import jax.numpy as jnp

__all__ = [
    "PrecisionState",
    "SUPPORTED_DTYPES",
    "canonicalize_dtype",
    "complex_dtype_for",
    "precision_scope",
    "set_global_precision",
]

SUPPORTED_DTYPES: Dict[str, jnp.dtype] = {
    "float32": jnp.float32,
    "float64": jnp.float64,
}

_COMPLEX_DTYPES: Dict[str, jnp.dtype] = {
    "float32": jnp.complex64,
    "float64": jnp.complex128,
}


@dataclass(frozen=True)
class PrecisionState:
    """Container describing the global precision configuration.

    ``compute_dtype`` of ``None`` means "follow the JAX x64 flag".
    """

    compute_dtype: Any = None


def _x64_enabled() -> bool:
    return bool(jax.config.jax_enable_x64)


def canonicalize_dtype(dtype: Any | None) -> jnp.dtype:
    """Return a supported ``jax.numpy`` dtype.

    Parameters
    ----------
    dtype:
        ``None`` uses the currently configured global compute dtype.  ``str``
        inputs (case insensitive) and ``numpy``/``jax`` dtype objects are also
        accepted.  Only ``float32`` and ``float64`` are supported; ``float64``
        requires JAX x64 mode.
    """

    if dtype is None:
        dtype = _GLOBAL_STATE.compute_dtype
        if dtype is None:
            return jnp.dtype(jnp.float64 if _x64_enabled() else jnp.float32)

    if isinstance(dtype, str):
        key = dtype.lower()
    else:
        try:
            key = jnp.dtype(dtype).name
        except TypeError as exc:
            raise TypeError(f"Unsupported dtype specification: {dtype!r}") from exc

    if key not in SUPPORTED_DTYPES:
        raise ValueError(
            f"Unsupported dtype '{dtype}'. Allowed values: {tuple(SUPPORTED_DTYPES)}"
        )
    if key == "float64" and not _x64_enabled():
        raise ValueError("float64 requires jax_enable_x64; see init_environment().")
    return jnp.dtype(SUPPORTED_DTYPES[key])


def complex_dtype_for(dtype: Any | None = None) -> jnp.dtype:
    """Return the complex dtype paired with a real compute dtype."""

    return jnp.dtype(_COMPLEX_DTYPES[canonicalize_dtype(dtype).name])


_GLOBAL_STATE = PrecisionState()


def set_global_precision(*, compute_dtype: Any | None = None) -> PrecisionState:
    """Update the global precision configuration."""

    global _GLOBAL_STATE
    if compute_dtype is not None:
        canonicalize_dtype(compute_dtype)
    _GLOBAL_STATE = PrecisionState(compute_dtype=compute_dtype)
    return _GLOBAL_STATE


@contextmanager
def precision_scope(*, compute_dtype: Any | None = None) -> Iterator[PrecisionState]:
    """Temporarily override the global precision configuration."""

    previous = _GLOBAL_STATE
    try:
        yield set_global_precision(compute_dtype=compute_dtype)
    finally:
        set_global_precision(compute_dtype=previous.compute_dtype)

from __future__ import annotations

from typing import Any, Iterable

import jax
import jax.numpy as jnp

from jumpdiff.core.utils.precision import canonicalize_dtype

KeyArray = jax.Array

__all__ = ["KeyArray", "open_uniform", "stream_key"]


def stream_key(seed: int, *indices: int) -> KeyArray:
    """Return the key of the stream addressed by ``indices`` under ``seed``.

    Each index is folded into the seed key in turn, so the key of a stream
    depends only on ``(seed, *indices)`` and never on how many other streams
    were drawn before it.
    """
    key = jax.random.PRNGKey(seed)
    for index in indices:
        key = jax.random.fold_in(key, index)
    return key


def open_uniform(key: KeyArray, shape: Iterable[int], dtype: Any = None) -> jnp.ndarray:
    """Uniform samples on the open interval ``(0, 1)``.

    The lower end is lifted to the smallest normal float of ``dtype`` so
    that inverse CDFs with an infinite left tail stay finite.
    """
    comp_dtype = canonicalize_dtype(dtype)
    tiny = jnp.finfo(comp_dtype).tiny
    return jax.random.uniform(key, tuple(shape), minval=tiny, maxval=1.0, dtype=comp_dtype)

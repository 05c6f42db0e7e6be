"""Core utilities for precision management."""

from __future__ import annotations

from .precision import *  # noqa: F401, F403

__all__ = [
    "PrecisionState",
    "SUPPORTED_DTYPES",
    "canonicalize_dtype",
    "complex_dtype_for",
    "precision_scope",
    "set_global_precision",
]

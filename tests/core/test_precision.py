import jax.numpy as jnp
import pytest

from jumpdiff.core.random_variable import RandomVariable
from jumpdiff.core.utils.precision import (
    canonicalize_dtype,
    complex_dtype_for,
    precision_scope,
)


def test_default_follows_x64_flag():
    assert canonicalize_dtype(None) == jnp.float64
    assert complex_dtype_for(None) == jnp.complex128


def test_string_and_dtype_inputs():
    assert canonicalize_dtype("FLOAT32") == jnp.float32
    assert canonicalize_dtype(jnp.float64) == jnp.float64
    assert complex_dtype_for("float32") == jnp.complex64


def test_unsupported_dtypes_rejected():
    with pytest.raises(ValueError):
        canonicalize_dtype("float16")
    with pytest.raises(ValueError):
        canonicalize_dtype(jnp.int32)


def test_precision_scope_restores_default():
    with precision_scope(compute_dtype="float32") as state:
        assert state.compute_dtype == "float32"
        assert RandomVariable.constant(1.0).dtype == jnp.float32
    assert RandomVariable.constant(1.0).dtype == jnp.float64

"""Euler discretisation of log-state SDEs on a time grid."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

import jax
import jax.numpy as jnp

from jumpdiff.core.grid import TimeDiscretization
from jumpdiff.core.increments import IndependentIncrements
from jumpdiff.core.random_variable import RandomVariable

if TYPE_CHECKING:
    from jumpdiff.models.sde import SDE

Array = jnp.ndarray

logger = logging.getLogger(__name__)

__all__ = ["EulerScheme"]


@jax.jit
def _euler_step(state: Array, drift_increment: Array, loadings: Array, increments: Array) -> Array:
    # increments has shape (factors, paths); loadings has shape (factors,).
    return state + drift_increment + jnp.sum(loadings[:, None] * increments, axis=0)


class EulerScheme:
    """Forward Euler scheme ``X_{i+1} = X_i + mu dt_i + sum_k l_k dZ_k``.

    States are produced lazily in time order and memoized.  A state, once
    computed, is never recomputed or modified, so later queries observe the
    same vectors as earlier ones.  Non-finite values are propagated as-is.

    Parameters
    ----------
    model
        Supplies the initial state, drift, factor loadings, driving increments
        and the state transform.
    increments
        Source of independent increments; also fixes the time grid and the
        number of paths.
    """

    def __init__(self, model: "SDE", increments: IndependentIncrements) -> None:
        self._model = model
        self._increments = increments
        self._states: List[RandomVariable] = []

    @property
    def model(self) -> "SDE":
        return self._model

    @property
    def increments(self) -> IndependentIncrements:
        return self._increments

    @property
    def time_discretization(self) -> TimeDiscretization:
        return self._increments.time_discretization

    @property
    def number_of_paths(self) -> int:
        return self._increments.number_of_paths

    @property
    def dtype(self) -> jnp.dtype:
        return self._increments.dtype

    def time(self, time_index: int) -> float:
        return self.time_discretization.time(time_index)

    def time_index(self, time: float) -> int:
        return self.time_discretization.time_index(time)

    def _check_time_index(self, time_index: int) -> None:
        last = self.time_discretization.number_of_time_steps
        if not 0 <= time_index <= last:
            raise IndexError(f"Time index {time_index} outside [0, {last}].")

    def _initial(self) -> RandomVariable:
        x0 = jnp.full((self.number_of_paths,), self._model.initial_state(), dtype=self.dtype)
        return RandomVariable(x0)

    def _advance(self) -> None:
        if not self._states:
            self._states.append(self._initial())
            return
        step = len(self._states) - 1
        t = self.time_discretization.time(step)
        dt = self.time_discretization.time_step(step)
        drift_increment = jnp.asarray(self._model.drift(t) * dt, dtype=self.dtype)
        loadings = jnp.asarray(self._model.factor_loadings(t), dtype=self.dtype)
        driving = self._model.driving_increments(self._increments, step)
        stacked = jnp.stack([increment.values for increment in driving])
        state = _euler_step(self._states[step].values, drift_increment, loadings, stacked)
        self._states.append(RandomVariable(state))

    def process_value(self, time_index: int) -> RandomVariable:
        """State ``X`` at ``time_index``, simulating forward as needed."""
        self._check_time_index(time_index)
        if len(self._states) <= time_index:
            logger.debug(
                "Evolving %d paths from index %d to %d",
                self.number_of_paths,
                max(len(self._states) - 1, 0),
                time_index,
            )
        while len(self._states) <= time_index:
            self._advance()
        return self._states[time_index]

    def asset_value(self, time_index: int) -> RandomVariable:
        """Observed value ``f(X)`` at ``time_index``; computed on demand."""
        return self._model.apply_state_transform(self.process_value(time_index))

    def monte_carlo_weights(self, time_index: int) -> RandomVariable:
        """Equal weights ``1 / paths`` for every path."""
        self._check_time_index(time_index)
        weight = 1.0 / self.number_of_paths
        return RandomVariable(jnp.full((self.number_of_paths,), weight, dtype=self.dtype))

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from jumpdiff.core.random_variable import RandomVariable

if TYPE_CHECKING:
    from jumpdiff.core.increments import IndependentIncrements


@dataclass
class SDE:
    """Base for models evolved by :class:`~jumpdiff.core.scheme.EulerScheme`.

    The state follows ``dX = drift(t) dt + sum_k loading_k(t) dZ_k`` where the
    ``dZ_k`` are the model's driving increments, and the observed value is
    ``apply_state_transform(X)``.
    """

    def initial_state(self) -> float:
        raise NotImplementedError

    def drift(self, t: float) -> float:
        raise NotImplementedError

    def factor_loadings(self, t: float) -> Sequence[float]:
        raise NotImplementedError

    def driving_increments(
        self, increments: "IndependentIncrements", step: int
    ) -> Sequence[RandomVariable]:
        raise NotImplementedError

    def apply_state_transform(self, state: RandomVariable) -> RandomVariable:
        return state

    def numeraire(self, t: float) -> RandomVariable:
        raise NotImplementedError

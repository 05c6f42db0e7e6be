"""Model level utilities."""

from . import jump_diffusion, merton_simulation, sde
from .jump_diffusion import (
    DIFFUSION_FACTOR,
    JUMP_COUNT_FACTOR,
    JUMP_SIZE_FACTOR,
    NUMBER_OF_FACTORS,
    MertonCharacteristicModel,
    MertonModel,
    MertonParams,
    characteristic_exponent,
    merton_call_price,
)
from .merton_simulation import MODIFIABLE_KEYS, MertonMonteCarloSimulation
from .sde import SDE

__all__ = [
    "DIFFUSION_FACTOR",
    "JUMP_COUNT_FACTOR",
    "JUMP_SIZE_FACTOR",
    "MODIFIABLE_KEYS",
    "MertonCharacteristicModel",
    "MertonModel",
    "MertonMonteCarloSimulation",
    "MertonParams",
    "NUMBER_OF_FACTORS",
    "SDE",
    "characteristic_exponent",
    "jump_diffusion",
    "merton_call_price",
    "merton_simulation",
    "sde",
]

"""jumpdiff: Merton jump-diffusion pricing by Monte Carlo and Fourier inversion."""

from __future__ import annotations

from . import core, models, products
from .core import MCConfig, RandomVariable, TimeDiscretization, price_european_mc
from .core.pricing import fourier_price
from .models import MertonCharacteristicModel, MertonMonteCarloSimulation, MertonParams
from .products import EuropeanOption

__version__ = "0.1.0"

__all__ = [
    "EuropeanOption",
    "MCConfig",
    "MertonCharacteristicModel",
    "MertonMonteCarloSimulation",
    "MertonParams",
    "RandomVariable",
    "TimeDiscretization",
    "core",
    "fourier_price",
    "models",
    "price_european_mc",
    "products",
]

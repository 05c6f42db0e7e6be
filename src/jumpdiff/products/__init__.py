"""Products priced by the Monte Carlo and Fourier routes."""

from .base import CharacteristicFunctionProduct
from .european import EuropeanOption

__all__ = ["CharacteristicFunctionProduct", "EuropeanOption"]

"""Pricing algorithms."""

from .fourier import CharacteristicFunctionModel, fourier_price

__all__ = ["CharacteristicFunctionModel", "fourier_price"]

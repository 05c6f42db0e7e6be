"""Pydantic-based configuration schemas and helpers."""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterable

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

if TYPE_CHECKING:
    from jumpdiff.core.engine import MCConfig
    from jumpdiff.core.grid import TimeDiscretization
    from jumpdiff.models.jump_diffusion import MertonParams
    from jumpdiff.models.merton_simulation import MertonMonteCarloSimulation


class EngineSettings(BaseModel):
    """Simulation engine configuration parsed from YAML."""

    model_config = ConfigDict(extra="forbid")

    paths: int = Field(gt=0, description="Number of Monte Carlo paths")
    steps: int = Field(gt=0, description="Number of time steps")
    horizon: float = Field(gt=0.0, description="Length of the simulated time span")
    initial_time: float = Field(default=0.0, description="First grid time")
    dtype: str = Field(default="float64", description="Floating point precision for simulations")

    @field_validator("dtype")
    @classmethod
    def validate_dtype(cls, value: str) -> str:
        allowed = {"float32", "float64"}
        canonical = value.lower()
        if canonical not in allowed:
            raise ValueError(f"dtype must be one of {sorted(allowed)}")
        return canonical


class MertonSettings(BaseModel):
    """Merton jump-diffusion parameters."""

    model_config = ConfigDict(extra="forbid")

    initial_value: float = Field(gt=0.0, description="Spot value S0")
    risk_free_rate: float = Field(description="Risk-free rate r")
    volatility: float = Field(ge=0.0, description="Diffusion volatility sigma")
    jump_intensity: float = Field(default=0.0, ge=0.0, description="Jump intensity lambda")
    jump_size_mean: float = Field(default=0.0, description="Jump size mean a, E[Y] = exp(a)")
    jump_size_std_dev: float = Field(default=0.0, ge=0.0, description="Std. dev. b of log Y")


class AppConfig(BaseModel):
    """Top-level configuration container for pricing runs."""

    model_config = ConfigDict(extra="forbid")

    seed: int = Field(ge=0, description="Seed for PRNG initialisation")
    engine: EngineSettings
    model: MertonSettings

    def to_mc_config(self) -> "MCConfig":
        """Convert to the internal :class:`~jumpdiff.core.engine.MCConfig`."""
        from jumpdiff.core.engine import MCConfig

        return MCConfig(paths=self.engine.paths, seed=self.seed, dtype=self.engine.dtype)

    def to_time_discretization(self) -> "TimeDiscretization":
        from jumpdiff.core.grid import TimeDiscretization

        return TimeDiscretization.uniform(
            self.engine.initial_time, self.engine.horizon, self.engine.steps
        )

    def to_params(self) -> "MertonParams":
        from jumpdiff.models.jump_diffusion import MertonParams

        return MertonParams(**self.model.model_dump())

    def build_simulation(self) -> "MertonMonteCarloSimulation":
        """Construct the Monte Carlo simulation described by this configuration."""
        from jumpdiff.models.merton_simulation import MertonMonteCarloSimulation

        return MertonMonteCarloSimulation.from_params(
            self.to_time_discretization(), self.to_params(), self.to_mc_config()
        )


class ConfigValidationError(RuntimeError):
    """Raised when one or more configuration files fail validation."""

    def __init__(self, errors: list[tuple[Path, ValidationError]]):
        message_lines = ["Configuration validation failed:"]
        for path, error in errors:
            message_lines.append(f"- {path}: {error}")
        super().__init__("\n".join(message_lines))
        self.errors = errors


def _load_yaml(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration at {path} must contain a mapping")
    return data


def load_config(path: Path | str) -> AppConfig:
    """Load a configuration file into an :class:`AppConfig`."""
    target = Path(path)
    payload = _load_yaml(target)
    return AppConfig.model_validate(payload)


def discover_config_files(paths: Iterable[Path | str]) -> list[Path]:
    """Discover YAML configuration files from provided paths."""
    discovered: list[Path] = []
    seen = set()
    for raw_path in paths:
        path = Path(raw_path)
        if path.is_file() and path.suffix in {".yml", ".yaml"}:
            resolved = path.resolve()
            if resolved not in seen:
                discovered.append(resolved)
                seen.add(resolved)
        elif path.is_dir():
            for pattern in ("*.yml", "*.yaml"):
                for candidate in sorted(path.rglob(pattern)):
                    resolved = candidate.resolve()
                    if resolved not in seen:
                        discovered.append(resolved)
                        seen.add(resolved)
    return discovered


def collect_and_validate(paths: Iterable[Path | str]) -> list[AppConfig]:
    """Validate all configuration files under the given paths."""
    files = discover_config_files(paths)
    errors: list[tuple[Path, ValidationError]] = []
    configs: list[AppConfig] = []
    for file in files:
        try:
            configs.append(load_config(file))
        except ValidationError as error:
            errors.append((file, error))
    if errors:
        raise ConfigValidationError(errors)
    return configs


__all__ = [
    "EngineSettings",
    "MertonSettings",
    "AppConfig",
    "load_config",
    "discover_config_files",
    "collect_and_validate",
    "ConfigValidationError",
]

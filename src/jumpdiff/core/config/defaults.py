"""Configuration defaults and environment initialisation."""

from __future__ import annotations

import logging
import random
from typing import Any, Mapping, MutableMapping

import numpy as np
from jax import config as jax_config
from ml_collections import ConfigDict

from jumpdiff.core.utils.precision import set_global_precision

logger = logging.getLogger(__name__)

__all__ = ["ConfigDict", "get_config", "get_default_config", "init_environment"]


def get_default_config() -> ConfigDict:
    """Return the canonical configuration for jumpdiff runs."""
    cfg = ConfigDict()
    cfg.seed = 0

    cfg.logging = ConfigDict()
    cfg.logging.level = "INFO"
    cfg.logging.format = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    cfg.logging.datefmt = "%Y-%m-%d %H:%M:%S"
    cfg.logging.force = True

    cfg.jax = ConfigDict()
    cfg.jax.enable_x64 = True

    # Monte Carlo route
    cfg.monte_carlo = ConfigDict()
    cfg.monte_carlo.default_paths = 100000
    cfg.monte_carlo.default_steps = 100
    cfg.monte_carlo.dtype = "float64"

    # Fourier route
    cfg.fourier = ConfigDict()
    cfg.fourier.truncation = 100.0
    cfg.fourier.grid_size = 20000

    return cfg


def get_config(overrides: Mapping[str, Any] | None = None) -> ConfigDict:
    """Create a configuration, optionally applying ``overrides``."""
    cfg = get_default_config()
    if overrides:
        _deep_update(cfg, overrides)
    return cfg


def init_environment(config: ConfigDict | Mapping[str, Any] | None = None) -> ConfigDict:
    """Prepare the process for a pricing run described by ``config``.

    Seeds ``random`` and ``numpy``, configures the root logger, sets the JAX
    x64 flag and then makes ``monte_carlo.dtype`` the global compute dtype
    (float64 requires the flag).  Returns the resolved configuration with
    ``runtime.seed`` recorded.
    """
    if config is None:
        cfg = get_default_config()
    elif isinstance(config, ConfigDict):
        cfg = config.copy_and_resolve_references()
    else:
        cfg = get_config(config)

    seed = int(cfg.get("seed", 0))
    random.seed(seed)
    np.random.seed(seed)
    cfg.runtime = ConfigDict({"seed": seed})

    _configure_logging(cfg.get("logging", {}))

    enable_x64 = cfg.get("jax", {}).get("enable_x64")
    if enable_x64 is not None:
        jax_config.update("jax_enable_x64", bool(enable_x64))

    dtype = cfg.get("monte_carlo", {}).get("dtype")
    set_global_precision(compute_dtype=dtype)
    logger.debug("Environment initialised: seed=%d, dtype=%s", seed, dtype)
    return cfg


def _configure_logging(logging_cfg: Mapping[str, Any]) -> None:
    level = logging_cfg.get("level", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=logging_cfg.get("format", None),
        datefmt=logging_cfg.get("datefmt", None),
        force=logging_cfg.get("force", False),
    )


def _deep_update(target: MutableMapping[str, Any], updates: Mapping[str, Any]) -> None:
    for key, value in updates.items():
        if isinstance(value, Mapping):
            if key not in target or not isinstance(target[key], (ConfigDict, MutableMapping)):
                target[key] = ConfigDict()
            _deep_update(target[key], value)
        else:
            target[key] = value

"""Configure test environment for importing the project package."""
import sys
from pathlib import Path

import jax
import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent
SRC = REPO_ROOT / "src"

if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

jax.config.update("jax_enable_x64", True)


@pytest.fixture
def merton_params():
    from jumpdiff.models.jump_diffusion import MertonParams

    return MertonParams(
        initial_value=100.0,
        risk_free_rate=0.05,
        volatility=0.2,
        jump_intensity=0.5,
        jump_size_mean=-0.1,
        jump_size_std_dev=0.15,
    )


@pytest.fixture
def unit_grid():
    from jumpdiff.core.grid import TimeDiscretization

    return TimeDiscretization.uniform(0.0, 1.0, 10)

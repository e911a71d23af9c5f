import jax.numpy as jnp
import pytest

from skyorbits.config import set_dtype
from skyorbits.orbits import KeplerianElements


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    With pytest-xdist, each worker process starts with the default float32.
    This fixture ensures all tests get float64 unless they explicitly override
    it (e.g. test_config.py has its own autouse fixture that sets float32).
    """
    set_dtype(jnp.float64)


@pytest.fixture
def unit_circular():
    """1 AU circular face-on orbit about 1 M_sun seen from 1 pc."""
    return KeplerianElements(a=1.0, e=0.0, i=0.0, omega=0.0, Omega=0.0, tau=0.0, M=1.0, plx=1000.0)


@pytest.fixture
def generic_orbit():
    """Inclined, eccentric orbit with every angle non-trivial."""
    return KeplerianElements(
        a=12.0, e=0.35, i=0.8, omega=1.1, Omega=2.3, tau=0.27, M=1.4, plx=45.0
    )

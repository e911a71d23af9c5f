"""Angle helpers shared by the anomaly conversions and the orbit solver.

Elements store angles in radians. The anomaly functions accept a
``use_degrees`` flag for callers working from published orbit tables, and
the flag is resolved with ``jnp.where`` so it may itself be traced.
Range reduction uses ``jnp.mod``, whose gradient is one everywhere, so
wrapping an anomaly never breaks differentiation.
"""

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from skyorbits.constants import DEG2RAD, RAD2DEG


def to_radians(angle: ArrayLike, use_degrees: bool) -> Array:
    """Bring an anomaly or orientation angle into the radians used internally.

    Args:
        angle (ArrayLike): Angle, in degrees when ``use_degrees`` is set and
            in radians otherwise.
        use_degrees (bool): Unit of ``angle``.

    Returns:
        Angle. Units: *rad*
    """
    return jnp.where(use_degrees, angle * DEG2RAD, angle)


def from_radians(angle: ArrayLike, use_degrees: bool) -> Array:
    """Report an internally computed angle in the caller's unit.

    Args:
        angle (ArrayLike): Angle. Units: *rad*
        use_degrees (bool): Return degrees instead of radians.

    Returns:
        Angle in *deg* or *rad*.
    """
    return jnp.where(use_degrees, angle * RAD2DEG, angle)


def wrap_two_pi(angle: ArrayLike) -> Array:
    """Reduce an angle to ``[0, 2pi)``.

    Args:
        angle (ArrayLike): Angle in radians.

    Returns:
        Equivalent angle in ``[0, 2pi)``. Units: *rad*
    """
    return jnp.mod(angle, 2.0 * jnp.pi)


def wrap_pi(angle: ArrayLike) -> Array:
    """Reduce an angle to ``[-pi, pi)``.

    Args:
        angle (ArrayLike): Angle in radians.

    Returns:
        Equivalent angle in ``[-pi, pi)``. Units: *rad*
    """
    return jnp.mod(angle + jnp.pi, 2.0 * jnp.pi) - jnp.pi

"""Kepler's equation and anomaly conversions for elliptical orbits.

This module provides the non-iterative Kepler equation solver at the heart
of skyorbits, along with conversions between mean, eccentric, and true
anomalies.

The solver follows Markley (1995): a rational starting approximation for
the eccentric anomaly followed by a single fifth-order correction. It needs
a fixed number of transcendental evaluations, has no loop and no data
dependent Python branching, and is accurate to machine precision over the
whole elliptical range ``0 <= e < 1``.

All functions use JAX operations and are compatible with ``jax.jit``,
``jax.vmap``, ``jax.grad`` and ``jax.make_jaxpr``. Inputs are coerced to
the configured float dtype (see :func:`skyorbits.config.set_dtype`).

References:
    F. L. Markley, *Kepler Equation Solver*, Celestial Mechanics and
    Dynamical Astronomy 63, 101-111, 1995. doi:10.1007/BF00691917
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from skyorbits.config import get_dtype
from skyorbits.constants import YEAR2DAY
from skyorbits.errors import NumericalError
from skyorbits.orbits.elements import KeplerianElements, meanmotion, periastron
from skyorbits.utils import all_finite, from_radians, to_radians, wrap_pi, wrap_two_pi

# ──────────────────────────────────────────────
# Kepler's equation
# ──────────────────────────────────────────────


def kepler_solve(anm_mean: ArrayLike, e: ArrayLike) -> Array:
    """Solve Kepler's equation ``M = E - e sin(E)`` for the eccentric anomaly.

    Non-iterative method of Markley (1995). The mean anomaly is reduced to
    ``[-pi, pi]`` for the starting approximation and the removed multiple of
    ``2 pi`` is added back, so the result lies in the same revolution as the
    input. For ``e = 0`` (or a mean anomaly that is an exact multiple of
    ``2 pi``) the input is returned unchanged.

    Args:
        anm_mean: Mean anomaly. Units: *rad*
        e: Eccentricity, ``0 <= e < 1``.

    Returns:
        Eccentric anomaly. Units: *rad*

    Raises:
        NumericalError: If a concrete ``anm_mean`` or ``e`` is NaN or
            infinite.

    Examples:
        ```python
        from skyorbits.orbits import kepler_solve
        E = kepler_solve(1.0, 0.5)
        ```

    References:
        F. L. Markley, *Celestial Mechanics and Dynamical Astronomy* 63,
        101, 1995, Eq. 5-29.
    """
    anm_mean = jnp.asarray(anm_mean, dtype=get_dtype())
    e = jnp.asarray(e, dtype=get_dtype())

    if all_finite(anm_mean, e) is False:
        raise NumericalError(
            f"Kepler solver requires finite inputs, got M={anm_mean}, e={e}"
        )

    pi = jnp.pi
    pi2 = pi * pi

    # Reduce to [-pi, pi) (Markley, p. 2)
    M = wrap_pi(anm_mean)

    # Starting value, Eq. 20, 5, 9, 10
    alpha = (3.0 * pi2 + 1.6 * (pi2 - pi * jnp.abs(M)) / (1.0 + e)) / (pi2 - 6.0)
    d = 3.0 * (1.0 - e) + alpha * e
    q = 2.0 * alpha * d * (1.0 - e) - M * M
    r = 3.0 * alpha * d * (d - 1.0 + e) * M + M * M * M

    # Eq. 14, 15
    w = jnp.cbrt((jnp.abs(r) + jnp.sqrt(q * q * q + r * r)) ** 2)
    E1 = (2.0 * r * w / (w * w + w * q + q * q) + M) / d

    # Fifth-order correction, Eq. 21-29
    f2 = e * jnp.sin(E1)
    f3 = e * jnp.cos(E1)
    f0 = E1 - f2 - M
    f1 = 1.0 - f3
    d3 = -f0 / (f1 - 0.5 * f0 * f2 / f1)
    d4 = -f0 / (f1 + 0.5 * d3 * f2 + d3 * d3 * f3 / 6.0)
    d5 = -f0 / (f1 + 0.5 * d4 * f2 + d4 * d4 * f3 / 6.0 - d4 * d4 * d4 * f2 / 24.0)
    E = E1 + d5

    E = E + (anm_mean - M)

    # Exact for circular orbits; the first-order term keeps dE/de = sin(M) at e = 0
    circular = anm_mean + e * jnp.sin(anm_mean)
    return jnp.where(e == 0.0, circular, E)


def mean_anomaly(elem: KeplerianElements, t: ArrayLike) -> Array:
    """Mean anomaly of an orbit at a given epoch.

    Computed from the time elapsed since the most recent periastron passage
    at or before ``t``, so the result lies in ``[0, 2 pi)``.

    Args:
        elem: Orbital elements.
        t: Epoch. Units: *MJD days*

    Returns:
        Mean anomaly. Units: *rad*
    """
    t = jnp.asarray(t, dtype=get_dtype())
    n_day = meanmotion(elem) / YEAR2DAY
    return wrap_two_pi(n_day * (t - periastron(elem, t)))


# ──────────────────────────────────────────────
# Anomaly conversions
# ──────────────────────────────────────────────


def anomaly_eccentric_to_mean(anm_ecc: ArrayLike, e: ArrayLike, use_degrees: bool = False) -> Array:
    """Convert eccentric anomaly to mean anomaly.

    Applies Kepler's equation: ``M = E - e * sin(E)``.

    Args:
        anm_ecc: Eccentric anomaly. Units: *rad* or *deg*
        e: Eccentricity. Dimensionless.
        use_degrees: If ``True``, input and output are in degrees.

    Returns:
        Mean anomaly. Units: *rad* or *deg*

    Examples:
        ```python
        from skyorbits.orbits import anomaly_eccentric_to_mean
        M = anomaly_eccentric_to_mean(90.0, 0.1, use_degrees=True)
        ```
    """
    anm_ecc = jnp.asarray(anm_ecc, dtype=get_dtype())
    e = jnp.asarray(e, dtype=get_dtype())

    E = to_radians(anm_ecc, use_degrees)
    M = E - e * jnp.sin(E)
    return from_radians(M, use_degrees)


def anomaly_mean_to_eccentric(anm_mean: ArrayLike, e: ArrayLike, use_degrees: bool = False) -> Array:
    """Convert mean anomaly to eccentric anomaly.

    Degree-aware wrapper around :func:`kepler_solve`.

    Args:
        anm_mean: Mean anomaly. Units: *rad* or *deg*
        e: Eccentricity. Dimensionless.
        use_degrees: If ``True``, input and output are in degrees.

    Returns:
        Eccentric anomaly. Units: *rad* or *deg*

    Examples:
        ```python
        from skyorbits.orbits import anomaly_mean_to_eccentric
        E = anomaly_mean_to_eccentric(84.27, 0.1, use_degrees=True)
        ```
    """
    anm_mean = jnp.asarray(anm_mean, dtype=get_dtype())
    M = to_radians(anm_mean, use_degrees)
    return from_radians(kepler_solve(M, e), use_degrees)


def anomaly_eccentric_to_true(anm_ecc: ArrayLike, e: ArrayLike, use_degrees: bool = False) -> Array:
    """Convert eccentric anomaly to true anomaly.

    Uses the half-angle form
    ``nu = 2 atan2(sqrt(1 + e) sin(E/2), sqrt(1 - e) cos(E/2))``, which stays
    well conditioned as ``e`` approaches 1 and keeps ``nu`` in the same
    revolution as ``E``.

    Args:
        anm_ecc: Eccentric anomaly. Units: *rad* or *deg*
        e: Eccentricity. Dimensionless.
        use_degrees: If ``True``, input and output are in degrees.

    Returns:
        True anomaly. Units: *rad* or *deg*

    Examples:
        ```python
        from skyorbits.orbits import anomaly_eccentric_to_true
        nu = anomaly_eccentric_to_true(90.0, 0.1, use_degrees=True)
        ```
    """
    anm_ecc = jnp.asarray(anm_ecc, dtype=get_dtype())
    e = jnp.asarray(e, dtype=get_dtype())

    E = to_radians(anm_ecc, use_degrees)
    nu = 2.0 * jnp.arctan2(
        jnp.sqrt(1.0 + e) * jnp.sin(E / 2.0),
        jnp.sqrt(1.0 - e) * jnp.cos(E / 2.0),
    )
    return from_radians(nu, use_degrees)


def anomaly_true_to_eccentric(anm_true: ArrayLike, e: ArrayLike, use_degrees: bool = False) -> Array:
    """Convert true anomaly to eccentric anomaly.

    Inverse of :func:`anomaly_eccentric_to_true`.

    Args:
        anm_true: True anomaly. Units: *rad* or *deg*
        e: Eccentricity. Dimensionless.
        use_degrees: If ``True``, input and output are in degrees.

    Returns:
        Eccentric anomaly. Units: *rad* or *deg*

    Examples:
        ```python
        from skyorbits.orbits import anomaly_true_to_eccentric
        E = anomaly_true_to_eccentric(90.0, 0.1, use_degrees=True)
        ```
    """
    anm_true = jnp.asarray(anm_true, dtype=get_dtype())
    e = jnp.asarray(e, dtype=get_dtype())

    nu = to_radians(anm_true, use_degrees)
    E = 2.0 * jnp.arctan2(
        jnp.sqrt(1.0 - e) * jnp.sin(nu / 2.0),
        jnp.sqrt(1.0 + e) * jnp.cos(nu / 2.0),
    )
    return from_radians(E, use_degrees)


def anomaly_true_to_mean(anm_true: ArrayLike, e: ArrayLike, use_degrees: bool = False) -> Array:
    """Convert true anomaly to mean anomaly.

    Composite conversion: true -> eccentric -> mean.

    Args:
        anm_true: True anomaly. Units: *rad* or *deg*
        e: Eccentricity. Dimensionless.
        use_degrees: If ``True``, input and output are in degrees.

    Returns:
        Mean anomaly. Units: *rad* or *deg*
    """
    return anomaly_eccentric_to_mean(
        anomaly_true_to_eccentric(anm_true, e, use_degrees),
        e,
        use_degrees,
    )


def anomaly_mean_to_true(anm_mean: ArrayLike, e: ArrayLike, use_degrees: bool = False) -> Array:
    """Convert mean anomaly to true anomaly.

    Composite conversion: mean -> eccentric -> true.

    Args:
        anm_mean: Mean anomaly. Units: *rad* or *deg*
        e: Eccentricity. Dimensionless.
        use_degrees: If ``True``, input and output are in degrees.

    Returns:
        True anomaly. Units: *rad* or *deg*
    """
    return anomaly_eccentric_to_true(
        anomaly_mean_to_eccentric(anm_mean, e, use_degrees),
        e,
        use_degrees,
    )

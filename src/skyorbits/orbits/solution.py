"""Projected sky-plane state of a Keplerian orbit.

Evaluates :class:`~skyorbits.orbits.elements.KeplerianElements` at a time,
true anomaly, or mean anomaly and returns an :class:`OrbitSolution` holding
the secondary's offset from the primary on the sky, its sky-plane velocity
and acceleration, and its radial velocity.

Sky-plane convention (visual binary / Thiele-Innes): ``x`` is the offset in
right ascension (positive east), ``y`` the offset in declination (positive
north), and the longitude of the ascending node is measured from north
through east. With ``u = nu + omega``::

    y = r (cos u cos Omega - sin u sin Omega cos i)
    x = r (cos u sin Omega + sin u cos Omega cos i)
    z = r sin u sin i

The ``z`` axis points **away** from the observer so that radial velocity is
positive for a receding body. This deliberately departs from a right-handed
``(x, y, z)`` frame.

Velocities are the analytic time derivatives of the positions and
accelerations are the two-body acceleration ``-GM r / |r|^3`` projected on
the sky, so every output is closed form and differentiable.

All formulas use the small-angle approximation: the separation between the
bodies must be much smaller than the distance to the system.
"""

from __future__ import annotations

from typing import NamedTuple

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from skyorbits.config import get_dtype
from skyorbits.constants import AU2M, GM_SUN_AU_YR, YEAR2SEC
from skyorbits.errors import NumericalError
from skyorbits.orbits.elements import KeplerianElements, meanmotion, semilatus_rectum
from skyorbits.orbits.kepler import (
    anomaly_eccentric_to_true,
    anomaly_true_to_eccentric,
    kepler_solve,
    mean_anomaly,
)
from skyorbits.utils import all_finite


class OrbitSolution(NamedTuple):
    """An orbit evaluated at one epoch.

    Conceptually a :class:`KeplerianElements` evaluated to a position. A
    :class:`~typing.NamedTuple`, so JAX treats it as a pytree and it can be
    returned from ``jax.jit`` / ``jax.vmap`` functions.

    Attributes:
        nu: True anomaly. Units: *rad*
        ea: Eccentric anomaly. Units: *rad*
        x: Offset in right ascension from the primary. Units: *mas*
        y: Offset in declination from the primary. Units: *mas*
        xdot: Right ascension proper motion anomaly. Units: *mas/yr*
        ydot: Declination proper motion anomaly. Units: *mas/yr*
        zdot: Radial velocity of the secondary, positive away from the
            observer. Units: *m/s*
        xddot: Right ascension acceleration. Units: *mas/yr^2*
        yddot: Declination acceleration. Units: *mas/yr^2*
        elem: Elements this solution was computed from.
    """

    nu: Array
    ea: Array
    x: Array
    y: Array
    xdot: Array
    ydot: Array
    zdot: Array
    xddot: Array
    yddot: Array
    elem: KeplerianElements


# ──────────────────────────────────────────────
# Solvers
# ──────────────────────────────────────────────


def orbitsolve(elem: KeplerianElements, t: ArrayLike) -> OrbitSolution:
    """Solve an orbit at a given epoch.

    Computes the mean anomaly from the most recent periastron passage,
    solves Kepler's equation, and projects the result on the sky. If more
    than one quantity is needed at the same epoch, solve once and read the
    fields instead of calling the per-quantity helpers repeatedly.

    Args:
        elem: Orbital elements.
        t: Epoch. Units: *MJD days*

    Returns:
        OrbitSolution: Position, velocity, acceleration and radial velocity.

    Examples:
        ```python
        from skyorbits import KeplerianElements, orbitsolve
        elem = KeplerianElements(1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0, 1000.0)
        sol = orbitsolve(elem, 0.0)
        sol.y  # 1000 mas
        ```
    """
    return orbitsolve_meananom(elem, mean_anomaly(elem, t))


def orbitsolve_meananom(elem: KeplerianElements, anm_mean: ArrayLike) -> OrbitSolution:
    """Solve an orbit at a given mean anomaly.

    Args:
        elem: Orbital elements.
        anm_mean: Mean anomaly. Units: *rad*

    Returns:
        OrbitSolution: Evaluated orbit state.
    """
    ea = kepler_solve(anm_mean, elem.e)
    nu = anomaly_eccentric_to_true(ea, elem.e)
    return _project(elem, nu, ea)


def orbitsolve_nu(elem: KeplerianElements, nu: ArrayLike) -> OrbitSolution:
    """Solve an orbit at a given true anomaly.

    Args:
        elem: Orbital elements.
        nu: True anomaly. Units: *rad*

    Returns:
        OrbitSolution: Evaluated orbit state.

    Raises:
        NumericalError: If a concrete ``nu`` is NaN or infinite.

    Examples:
        ```python
        import jax.numpy as jnp
        from skyorbits import KeplerianElements, orbitsolve_nu
        elem = KeplerianElements(1.0, 0.5, 0.0, 0.0, 0.0, 0.0, 1.0, 1000.0)
        orbitsolve_nu(elem, jnp.pi).y  # -1500 mas at apoastron
        ```
    """
    nu = jnp.asarray(nu, dtype=get_dtype())
    if all_finite(nu) is False:
        raise NumericalError(f"True anomaly must be finite, got nu={nu}")
    ea = anomaly_true_to_eccentric(nu, elem.e)
    return _project(elem, nu, ea)


def _project(elem: KeplerianElements, nu: Array, ea: Array) -> OrbitSolution:
    """Map a true anomaly to sky-plane position, velocity and acceleration."""
    e = elem.e
    sini, cosi = jnp.sin(elem.i), jnp.cos(elem.i)
    sinO, cosO = jnp.sin(elem.Omega), jnp.cos(elem.Omega)
    sinw, cosw = jnp.sin(elem.omega), jnp.cos(elem.omega)

    u = nu + elem.omega
    sinu, cosu = jnp.sin(u), jnp.cos(u)

    # Radius in AU
    r = semilatus_rectum(elem) / (1.0 + e * jnp.cos(nu))

    # Position [AU]
    y_au = r * (cosu * cosO - sinu * sinO * cosi)
    x_au = r * (cosu * sinO + sinu * cosO * cosi)

    # Velocity [AU/yr]; J = sqrt(GM / p)
    J = meanmotion(elem) * elem.a / jnp.sqrt(1.0 - e * e)
    c = cosu + e * cosw
    s = sinu + e * sinw
    xdot_au = J * (cosi * cosO * c - sinO * s)
    ydot_au = -J * (cosi * sinO * c + cosO * s)
    zdot_au = J * sini * c

    # Acceleration [AU/yr^2]
    k = -GM_SUN_AU_YR * elem.M / r**3
    xddot_au = k * x_au
    yddot_au = k * y_au

    return OrbitSolution(
        nu=nu,
        ea=ea,
        x=x_au * elem.plx,
        y=y_au * elem.plx,
        xdot=xdot_au * elem.plx,
        ydot=ydot_au * elem.plx,
        zdot=zdot_au * AU2M / YEAR2SEC,
        xddot=xddot_au * elem.plx,
        yddot=yddot_au * elem.plx,
        elem=elem,
    )


# ──────────────────────────────────────────────
# Accessors
# ──────────────────────────────────────────────


def _solution(orbit: KeplerianElements | OrbitSolution, t: ArrayLike | None) -> OrbitSolution:
    if isinstance(orbit, OrbitSolution):
        return orbit
    if t is None:
        raise TypeError("An epoch t is required when passing KeplerianElements")
    return orbitsolve(orbit, t)


def _reflex_factor(sol: OrbitSolution, m_secondary: ArrayLike | None):
    if m_secondary is None:
        return 1.0
    return -jnp.asarray(m_secondary, dtype=get_dtype()) / sol.elem.M


def raoff(orbit: KeplerianElements | OrbitSolution, t: ArrayLike | None = None) -> Array:
    """Offset from the primary in right ascension.

    Args:
        orbit: Orbital elements, or an already evaluated
            :class:`OrbitSolution`.
        t: Epoch, required with elements. Units: *MJD days*

    Returns:
        Right ascension offset. Units: *mas*
    """
    return _solution(orbit, t).x


def decoff(orbit: KeplerianElements | OrbitSolution, t: ArrayLike | None = None) -> Array:
    """Offset from the primary in declination.

    Args:
        orbit: Orbital elements, or an already evaluated
            :class:`OrbitSolution`.
        t: Epoch, required with elements. Units: *MJD days*

    Returns:
        Declination offset. Units: *mas*
    """
    return _solution(orbit, t).y


def posangle(orbit: KeplerianElements | OrbitSolution, t: ArrayLike | None = None) -> Array:
    """Position angle of the secondary about the primary, east of north.

    Args:
        orbit: Orbital elements, or an already evaluated
            :class:`OrbitSolution`.
        t: Epoch, required with elements. Units: *MJD days*

    Returns:
        Position angle in ``(-pi, pi]``. Units: *rad*
    """
    sol = _solution(orbit, t)
    return jnp.arctan2(sol.x, sol.y)


def projectedseparation(orbit: KeplerianElements | OrbitSolution, t: ArrayLike | None = None) -> Array:
    """Projected separation of the secondary from the primary.

    Args:
        orbit: Orbital elements, or an already evaluated
            :class:`OrbitSolution`.
        t: Epoch, required with elements. Units: *MJD days*

    Returns:
        Projected separation. Units: *mas*
    """
    sol = _solution(orbit, t)
    return jnp.hypot(sol.x, sol.y)


def propmotionanom(
    orbit: KeplerianElements | OrbitSolution,
    t: ArrayLike | None = None,
    m_secondary: ArrayLike | None = None,
) -> Array:
    """Instantaneous proper motion anomaly.

    Without ``m_secondary`` this is the sky-plane speed of the secondary.
    With it, the reflex motion of the primary, ``m_secondary / M`` times
    the secondary's.

    Args:
        orbit: Orbital elements, or an already evaluated
            :class:`OrbitSolution`.
        t: Epoch, required with elements. Units: *MJD days*
        m_secondary: Mass of the secondary, in the same units as ``M``.

    Returns:
        Proper motion anomaly. Units: *mas/yr*
    """
    sol = _solution(orbit, t)
    f = _reflex_factor(sol, m_secondary)
    return jnp.hypot(f * sol.xdot, f * sol.ydot)


def radvel(
    orbit: KeplerianElements | OrbitSolution,
    t: ArrayLike | None = None,
    m_secondary: ArrayLike | None = None,
) -> Array:
    """Radial velocity along the line of sight, positive away from the observer.

    Without ``m_secondary`` this is the radial velocity of the secondary.
    With it, the radial velocity of the primary,
    ``-m_secondary / M`` times the secondary's.

    Args:
        orbit: Orbital elements, or an already evaluated
            :class:`OrbitSolution`.
        t: Epoch, required with elements. Units: *MJD days*
        m_secondary: Mass of the secondary, in the same units as ``M``.

    Returns:
        Radial velocity. Units: *m/s*
    """
    sol = _solution(orbit, t)
    return _reflex_factor(sol, m_secondary) * sol.zdot


def acceleration(
    orbit: KeplerianElements | OrbitSolution,
    t: ArrayLike | None = None,
    m_secondary: ArrayLike | None = None,
) -> Array:
    """Magnitude of the instantaneous sky-plane acceleration.

    Without ``m_secondary`` this is the acceleration of the secondary. With
    it, the reflex acceleration of the primary.

    Args:
        orbit: Orbital elements, or an already evaluated
            :class:`OrbitSolution`.
        t: Epoch, required with elements. Units: *MJD days*
        m_secondary: Mass of the secondary, in the same units as ``M``.

    Returns:
        Acceleration. Units: *mas/yr^2*
    """
    sol = _solution(orbit, t)
    f = _reflex_factor(sol, m_secondary)
    return jnp.hypot(f * sol.xddot, f * sol.yddot)

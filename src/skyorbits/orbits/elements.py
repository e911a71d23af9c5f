"""Keplerian elements of a secondary body orbiting a primary.

Provides the immutable :class:`KeplerianElements` value type together with
the derived quantities used by the orbit solver: period, distance, mean
motion, semi-latus rectum, and the epoch of periastron passage.

Parameter conventions:

| Field   | Meaning                                      | Units           |
|---------|----------------------------------------------|-----------------|
| ``a``     | semi-major axis                            | AU              |
| ``e``     | eccentricity, ``0 <= e < 1``               | dimensionless   |
| ``i``     | inclination                                | rad             |
| ``omega`` | argument of periastron                     | rad             |
| ``Omega`` | longitude of the ascending node            | rad             |
| ``tau``   | epoch of periastron passage as a fraction of the orbit, referenced to MJD 0 | dimensionless |
| ``M``     | mass of the primary                        | M_sun           |
| ``plx``   | parallax of the system                     | mas             |

The class is registered as a JAX pytree whose leaves are the eight raw
parameters, so element sets pass through ``jax.jit``, ``jax.vmap`` and
``jax.grad`` like any other array container. Derived quantities are pure
functions of the raw parameters and are recomputed on use.
"""

from __future__ import annotations

import logging

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from skyorbits.config import get_dtype
from skyorbits.constants import DEG2RAD, MJD_2020, YEAR2DAY
from skyorbits.errors import InvalidElements
from skyorbits.utils import all_finite, concrete_bool

logger = logging.getLogger(__name__)

_FIELDS = ("a", "e", "i", "omega", "Omega", "tau", "M", "plx")

# Eccentricity above which float32 results lose several digits near periastron
_NEAR_PARABOLIC_E = 0.99


class KeplerianElements:
    """Keplerian elements describing the orbit of a secondary about a primary.

    Values can be given positionally or by keyword. Invariants are checked
    on construction for concrete values; traced values (inside ``jax.jit``
    or ``jax.vmap``) cannot be inspected and are accepted as given.

    Instances are immutable and compare equal by value.

    Args:
        a (float): Semi-major axis. Units: *AU*
        e (float): Eccentricity in ``[0, 1)``.
        i (float): Inclination. Units: *rad*
        omega (float): Argument of periastron. Units: *rad*
        Omega (float): Longitude of the ascending node. Units: *rad*
        tau (float): Epoch of periastron passage as a fraction of the orbit,
            referenced to MJD 0.
        M (float): Mass of the primary. Units: *M_sun*
        plx (float): Parallax of the system. Units: *mas*

    Raises:
        InvalidElements: If ``e`` is outside ``[0, 1)``, if ``a``, ``M`` or
            ``plx`` is not positive, or if any value is not finite.

    Examples:
        ```python
        from skyorbits import KeplerianElements
        elem = KeplerianElements(a=1.0, e=0.0, i=0.0, omega=0.0, Omega=0.0,
                                 tau=0.0, M=1.0, plx=1000.0)
        ```
    """

    __slots__ = _FIELDS

    def __init__(
        self,
        a: ArrayLike,
        e: ArrayLike,
        i: ArrayLike,
        omega: ArrayLike,
        Omega: ArrayLike,
        tau: ArrayLike,
        M: ArrayLike,
        plx: ArrayLike,
    ) -> None:
        dtype = get_dtype()
        values = tuple(
            jnp.asarray(v, dtype=dtype) for v in (a, e, i, omega, Omega, tau, M, plx)
        )
        _validate(*values)
        for name, value in zip(_FIELDS, values):
            object.__setattr__(self, name, value)

    @classmethod
    def _from_internal(cls, *values) -> KeplerianElements:
        """Create an instance from leaves without conversion or validation.

        Used by pytree unflatten, where leaves may be tracers or
        placeholder objects.

        Returns:
            KeplerianElements: New instance.
        """
        obj = object.__new__(cls)
        for name, value in zip(_FIELDS, values):
            object.__setattr__(obj, name, value)
        return obj

    def replace(self, **changes) -> KeplerianElements:
        """Return a copy with some parameters replaced.

        Args:
            **changes: New values keyed by field name.

        Returns:
            KeplerianElements: Validated new instance.
        """
        unknown = set(changes) - set(_FIELDS)
        if unknown:
            raise TypeError(f"Unknown orbital element(s): {sorted(unknown)}")
        kwargs = {name: getattr(self, name) for name in _FIELDS}
        kwargs.update(changes)
        return KeplerianElements(**kwargs)

    def __setattr__(self, name, value):
        raise AttributeError(f"KeplerianElements is immutable; cannot set {name!r}")

    def __delattr__(self, name):
        raise AttributeError(f"KeplerianElements is immutable; cannot delete {name!r}")

    def __eq__(self, other):
        if not isinstance(other, KeplerianElements):
            return NotImplemented
        return all(
            bool(jnp.array_equal(getattr(self, name), getattr(other, name)))
            for name in _FIELDS
        )

    def __hash__(self):
        # Leaves may be batched arrays
        return hash(
            tuple((jnp.shape(v), tuple(jnp.ravel(v).tolist())) for v in astuple(self))
        )

    def __repr__(self):
        try:
            params = ", ".join(f"{name}={float(getattr(self, name)):.6g}" for name in _FIELDS)
            derived = (
                f"period={float(period(self)):.6g} d, "
                f"distance={float(distance(self)):.6g} pc"
            )
        except (TypeError, jax.errors.ConcretizationTypeError):
            return "KeplerianElements(<traced>)"
        return f"KeplerianElements({params}; {derived})"


def _validate(a, e, i, omega, Omega, tau, M, plx) -> None:
    """Raise ``InvalidElements`` if concrete values violate an invariant."""
    finite = all_finite(a, e, i, omega, Omega, tau, M, plx)
    if finite is False:
        raise InvalidElements("Orbital elements must all be finite")

    checks = (
        (e >= 0.0, "Eccentricity must satisfy 0 <= e < 1, got e={}", e),
        (e < 1.0, "Eccentricity must satisfy 0 <= e < 1, got e={}", e),
        (a > 0.0, "Semi-major axis must be positive, got a={}", a),
        (M > 0.0, "Primary mass must be positive, got M={}", M),
        (plx > 0.0, "Parallax must be positive, got plx={}", plx),
    )
    for predicate, message, value in checks:
        if concrete_bool(predicate) is False:
            raise InvalidElements(message.format(value))

    if concrete_bool(e > _NEAR_PARABOLIC_E):
        logger.warning(
            "Eccentricity %s is close to parabolic; use float64 for accurate results",
            e,
        )


def keplerian_elements_deg(
    a: ArrayLike,
    e: ArrayLike,
    i: ArrayLike,
    omega: ArrayLike,
    Omega: ArrayLike,
    tau: ArrayLike,
    M: ArrayLike,
    plx: ArrayLike,
) -> KeplerianElements:
    """Construct :class:`KeplerianElements` with angles given in degrees.

    ``i``, ``omega`` and ``Omega`` are converted to radians; every other
    parameter uses the same units as :class:`KeplerianElements`.

    Args:
        a: Semi-major axis. Units: *AU*
        e: Eccentricity in ``[0, 1)``.
        i: Inclination. Units: *deg*
        omega: Argument of periastron. Units: *deg*
        Omega: Longitude of the ascending node. Units: *deg*
        tau: Epoch of periastron passage as a fraction of the orbit.
        M: Mass of the primary. Units: *M_sun*
        plx: Parallax. Units: *mas*

    Returns:
        KeplerianElements: Elements with angles stored in radians.

    Examples:
        ```python
        from skyorbits import keplerian_elements_deg
        elem = keplerian_elements_deg(a=16.0, e=0.25, i=45.0, omega=90.0,
                                      Omega=120.0, tau=0.0, M=1.0, plx=35.0)
        ```
    """
    return KeplerianElements(
        a=a,
        e=e,
        i=jnp.asarray(i, dtype=get_dtype()) * DEG2RAD,
        omega=jnp.asarray(omega, dtype=get_dtype()) * DEG2RAD,
        Omega=jnp.asarray(Omega, dtype=get_dtype()) * DEG2RAD,
        tau=tau,
        M=M,
        plx=plx,
    )


def astuple(elem: KeplerianElements) -> tuple[Array, ...]:
    """Return the parameters of a :class:`KeplerianElements` as a tuple.

    Args:
        elem: Orbital elements.

    Returns:
        ``(a, e, i, omega, Omega, tau, M, plx)``.
    """
    return tuple(getattr(elem, name) for name in _FIELDS)


# ──────────────────────────────────────────────
# Derived quantities
# ──────────────────────────────────────────────


def period_years(elem: KeplerianElements) -> Array:
    """Orbital period in Julian years, ``sqrt(a^3 / M)``.

    Args:
        elem: Orbital elements.

    Returns:
        Orbital period. Units: *yr*
    """
    return jnp.sqrt(elem.a**3 / elem.M)


def period(elem: KeplerianElements) -> Array:
    """Orbital period, ``2 pi sqrt(a^3 / GM)`` with ``GM_sun = 4 pi^2 AU^3/yr^2``.

    Args:
        elem: Orbital elements.

    Returns:
        Orbital period. Units: *days*

    Examples:
        ```python
        from skyorbits import KeplerianElements, period
        elem = KeplerianElements(1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0, 1000.0)
        period(elem)  # 365.25
        ```
    """
    return period_years(elem) * YEAR2DAY


def distance(elem: KeplerianElements) -> Array:
    """Distance to the system from its parallax.

    Args:
        elem: Orbital elements.

    Returns:
        Distance. Units: *pc*
    """
    return 1000.0 / elem.plx


def meanmotion(elem: KeplerianElements) -> Array:
    """Mean motion of the orbit.

    Args:
        elem: Orbital elements.

    Returns:
        Mean motion. Units: *rad/yr*
    """
    return 2.0 * jnp.pi / period_years(elem)


def semilatus_rectum(elem: KeplerianElements) -> Array:
    """Semi-latus rectum ``a (1 - e^2)``.

    Args:
        elem: Orbital elements.

    Returns:
        Semi-latus rectum. Units: *AU*
    """
    return elem.a * (1.0 - elem.e**2)


def periastron(elem: KeplerianElements, tref: ArrayLike = MJD_2020) -> Array:
    """Epoch of the most recent periastron passage at or before ``tref``.

    Periastron passages occur at ``tau * P + k * P`` (MJD) for integer ``k``.

    Args:
        elem: Orbital elements.
        tref: Reference epoch. Units: *MJD days*. Default: 58849
            (2020-01-01).

    Returns:
        Epoch of periastron passage. Units: *MJD days*
    """
    tref = jnp.asarray(tref, dtype=get_dtype())
    P = period(elem)
    return tref - jnp.mod(tref - elem.tau * P, P)


# Register KeplerianElements as a JAX pytree so it can be used with jit, vmap, grad, etc.
jax.tree_util.register_pytree_node(
    KeplerianElements,
    lambda elem: (astuple(elem), None),
    lambda _, children: KeplerianElements._from_internal(*children),
)

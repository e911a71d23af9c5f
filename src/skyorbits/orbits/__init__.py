"""Keplerian orbits of a secondary about a primary, projected on the sky.

This sub-module provides:

- **Elements**: the immutable :class:`KeplerianElements` value type and its
  derived quantities (period, distance, mean motion, periastron epoch).
- **Kepler solver**: a non-iterative, JAX-traceable solution of Kepler's
  equation and conversions between mean, eccentric, and true anomalies.
- **Solutions**: sky-plane position, velocity, acceleration and radial
  velocity of an orbit at a time, true anomaly, or mean anomaly.
- **Sampling**: evenly spaced traces of a full orbit for plotting.
"""

from .elements import (
    KeplerianElements,
    astuple,
    distance,
    keplerian_elements_deg,
    meanmotion,
    period,
    period_years,
    periastron,
    semilatus_rectum,
)
from .kepler import (
    anomaly_eccentric_to_mean,
    anomaly_eccentric_to_true,
    anomaly_mean_to_eccentric,
    anomaly_mean_to_true,
    anomaly_true_to_eccentric,
    anomaly_true_to_mean,
    kepler_solve,
    mean_anomaly,
)
from .sampling import OrbitTrace
from .solution import (
    OrbitSolution,
    acceleration,
    decoff,
    orbitsolve,
    orbitsolve_meananom,
    orbitsolve_nu,
    posangle,
    projectedseparation,
    propmotionanom,
    raoff,
    radvel,
)

__all__ = [
    "KeplerianElements",
    "keplerian_elements_deg",
    "astuple",
    "period",
    "period_years",
    "distance",
    "meanmotion",
    "semilatus_rectum",
    "periastron",
    "kepler_solve",
    "mean_anomaly",
    "anomaly_eccentric_to_mean",
    "anomaly_mean_to_eccentric",
    "anomaly_true_to_eccentric",
    "anomaly_eccentric_to_true",
    "anomaly_true_to_mean",
    "anomaly_mean_to_true",
    "OrbitSolution",
    "orbitsolve",
    "orbitsolve_meananom",
    "orbitsolve_nu",
    "raoff",
    "decoff",
    "posangle",
    "projectedseparation",
    "propmotionanom",
    "radvel",
    "acceleration",
    "OrbitTrace",
]

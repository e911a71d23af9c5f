"""
skyorbits is a small library for solving and projecting Keplerian orbits of directly imaged companions, implemented in JAX.
"""

from .constants import (
    DEG2RAD,
    RAD2DEG,
    YEAR2DAY,
    YEAR2SEC,
    MJD_2020,
    AU2M,
    GM_SUN_AU_YR,
)

from .config import set_dtype, get_dtype, get_angle_tolerance
from .errors import InvalidElements, NumericalError, TransformDomainError

from .orbits import (
    KeplerianElements,
    keplerian_elements_deg,
    astuple,
    period,
    period_years,
    distance,
    meanmotion,
    semilatus_rectum,
    periastron,
    kepler_solve,
    mean_anomaly,
    anomaly_eccentric_to_mean,
    anomaly_mean_to_eccentric,
    anomaly_true_to_eccentric,
    anomaly_eccentric_to_true,
    anomaly_true_to_mean,
    anomaly_mean_to_true,
    OrbitSolution,
    orbitsolve,
    orbitsolve_meananom,
    orbitsolve_nu,
    raoff,
    decoff,
    posangle,
    projectedseparation,
    propmotionanom,
    radvel,
    acceleration,
    OrbitTrace,
)

from .transforms import OrbitalTransform

__all__ = [
    # Constants
    "DEG2RAD",
    "RAD2DEG",
    "YEAR2DAY",
    "YEAR2SEC",
    "MJD_2020",
    "AU2M",
    "GM_SUN_AU_YR",
    # Config
    "set_dtype",
    "get_dtype",
    "get_angle_tolerance",
    # Errors
    "InvalidElements",
    "NumericalError",
    "TransformDomainError",
    # Elements
    "KeplerianElements",
    "keplerian_elements_deg",
    "astuple",
    "period",
    "period_years",
    "distance",
    "meanmotion",
    "semilatus_rectum",
    "periastron",
    # Kepler solver
    "kepler_solve",
    "mean_anomaly",
    "anomaly_eccentric_to_mean",
    "anomaly_mean_to_eccentric",
    "anomaly_true_to_eccentric",
    "anomaly_eccentric_to_true",
    "anomaly_true_to_mean",
    "anomaly_mean_to_true",
    # Solutions
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
    # Transforms
    "OrbitalTransform",
]

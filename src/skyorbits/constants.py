"""
The `constants` module defines the mathematical and physical constants behind the fixed unit convention of skyorbits.

Inputs use AU, solar masses, radians, milliarcseconds of parallax, and
Modified Julian Date days. Outputs use milliarcseconds, mas/year,
mas/year^2, m/s, days, and parsecs.
"""

from jax.numpy import pi as PI

# Mathematical Constants
"""
Constant to convert degrees to radians. Equal to 2pi/360. Units: *rad/deg*
"""
DEG2RAD = 2.0 * PI / 360.0

"""
Constant to convert radians to degrees. Equal to 360/2pi. Units: *deg/rad*
"""
RAD2DEG = 360.0 / (PI * 2.0)

# Time Constants

"""
Length of the Julian year. Orbital periods are reported in days and rates in
per-year units using this value. Units: *days*
"""
YEAR2DAY = 365.25

"""
Length of the Julian year in seconds. Units: *s*
"""
YEAR2SEC = YEAR2DAY * 86400.0

"""
Default reference epoch for locating the most recent periastron passage,
MJD 58849 = 2020-01-01. Units: *days*
"""
MJD_2020 = 58849.0

# Physical Constants
"""
Astronomical Unit. Equal to the mean distance of the Earth from the sun.
TDB-compatible value. Units: *m*

References:

1. G. Petit and B. Luzum, *IERS Technical Note 36*, 2010
"""
AU2M = 1.49597870700e11  # [m] Astronomical Unit IAU 2010

"""
Gravitational parameter of the Sun in AU^3/year^2, i.e. Kepler's third law
with periods in Julian years and masses in solar masses. A 1 AU orbit about
one solar mass has a period of exactly one year. Units: *AU^3/yr^2*
"""
GM_SUN_AU_YR = 4.0 * PI**2

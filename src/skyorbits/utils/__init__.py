"""Shared utility functions for skyorbits.

Provides angle conversion and range reduction helpers, and validation
helpers that inspect values only when they are concrete.
"""

from skyorbits.utils._angle import from_radians, to_radians, wrap_pi, wrap_two_pi
from skyorbits.utils._concrete import all_finite, concrete_bool

__all__ = [
    "all_finite",
    "concrete_bool",
    "from_radians",
    "to_radians",
    "wrap_pi",
    "wrap_two_pi",
]

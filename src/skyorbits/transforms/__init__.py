"""Coordinate transforms that move image pixels along Keplerian orbits."""

from .orbital import OrbitalTransform

__all__ = [
    "OrbitalTransform",
]

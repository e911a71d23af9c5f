"""Exception types raised by skyorbits.

All three derive from built-in exceptions so callers that already catch
``ValueError`` or ``ArithmeticError`` keep working.
"""


class InvalidElements(ValueError):
    """Orbital elements violate a construction-time invariant.

    Raised for ``e`` outside ``[0, 1)``, non-positive ``a``, ``M`` or
    ``plx``, non-finite values, and for transform parameters that are
    missing, forbidden, or out of range.
    """


class NumericalError(ArithmeticError):
    """A numerical routine received a non-finite input (NaN or infinity)."""


class TransformDomainError(ValueError):
    """A pixel has no valid orbit through it under an orbital transform.

    Examples are the pixel at the primary itself (zero separation) and any
    pixel of an exactly edge-on transform, where the sky position does not
    determine the orbital-plane position.
    """

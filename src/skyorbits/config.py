"""Floating-point precision used by every skyorbits computation.

Element values, epochs, anomalies and pixel coordinates are all coerced to
the dtype returned by ``get_dtype`` before any arithmetic. The default is
``jnp.float32``, which is enough for drawing orbits and warping images.
Astrometry at the sub-milliarcsecond level over baselines of decades needs
``jnp.float64``; selecting it also turns on ``jax_enable_x64``.

The dtype is read while a function is traced, so pick it before the first
``jax.jit`` call. A jitted function that later receives arrays of a
different dtype is retraced and picks up the new setting.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

# Dimensionless edge-on thresholds on |cos i|, keyed by dtype
_ANGLE_TOLERANCE = {
    jnp.float16: 1e-3,
    jnp.bfloat16: 1e-3,
    jnp.float32: 1e-6,
    jnp.float64: 1e-12,
}

_dtype = jnp.float32


def set_dtype(dtype) -> None:
    """Choose the precision of element values, epochs and pixel coordinates.

    ``jnp.float64`` is required for orbit fitting against astrometry with
    sub-milliarcsecond errors; it also enables ``jax_enable_x64``, without
    which JAX would store the values in 32 bits regardless.

    Args:
        dtype: ``jnp.float16``, ``jnp.bfloat16``, ``jnp.float32`` or
            ``jnp.float64``.

    Raises:
        ValueError: If *dtype* is not one of those float types.

    Examples:
        ```python
        import jax.numpy as jnp
        from skyorbits import set_dtype
        set_dtype(jnp.float64)
        ```
    """
    global _dtype
    if dtype not in _ANGLE_TOLERANCE:
        supported = ", ".join(f"jnp.{jnp.dtype(d).name}" for d in _ANGLE_TOLERANCE)
        raise ValueError(f"Unsupported dtype {dtype}. Must be one of: {supported}")
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Precision that orbit inputs are coerced to (``jnp.float32`` unless changed)."""
    return _dtype


def get_angle_tolerance() -> float:
    """Return the threshold below which ``|cos(i)|`` counts as edge-on.

    An orbital transform cannot recover the orbital-plane position of a
    pixel when the orbit is seen edge-on, because the sky position no
    longer constrains the out-of-plane direction. The threshold follows the
    resolution of the configured dtype: 1e-12 for ``float64``, 1e-6 for
    ``float32`` and 1e-3 for the half-precision types.

    Returns:
        float: Dimensionless tolerance.
    """
    return _ANGLE_TOLERANCE[_dtype]

"""Eager validation helpers that stay transparent to JAX tracing.

Validation of user input needs concrete values. Under ``jax.jit`` (and any
other transformation that abstracts values) the predicate cannot be turned
into a Python ``bool``; the helpers then report ``None`` and the caller
skips the check, so the same function body works eagerly and traced.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax.typing import ArrayLike


def concrete_bool(predicate: ArrayLike) -> bool | None:
    """Evaluate a predicate to a Python bool when its value is known.

    Args:
        predicate (ArrayLike): Boolean scalar or array. Arrays reduce with
            ``all``.

    Returns:
        ``True``/``False`` for concrete inputs, ``None`` for traced inputs.
    """
    try:
        return bool(jnp.all(predicate))
    except jax.errors.ConcretizationTypeError:
        return None


def all_finite(*values: ArrayLike) -> bool | None:
    """Check that every value is finite.

    Args:
        *values (ArrayLike): Scalars or arrays.

    Returns:
        ``True`` if all are finite, ``False`` if any is NaN or infinite,
        ``None`` if any value is traced.
    """
    results = [concrete_bool(jnp.isfinite(v)) for v in values]
    if any(r is None for r in results):
        return None
    return all(results)

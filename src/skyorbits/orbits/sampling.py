"""Evenly sampled traces of a full orbit for plotting.

:class:`OrbitTrace` is the contract offered to plotting code: a lazy,
restartable sequence of :class:`~skyorbits.orbits.solution.OrbitSolution`
samples spaced evenly in true anomaly over one revolution. Stepping in true
anomaly rather than time gives a smooth curve regardless of eccentricity,
because samples do not bunch up near apoastron.

The first and last samples coincide so that a line plot of the trace closes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

import jax
import jax.numpy as jnp
from jax import Array

from skyorbits.config import get_dtype
from skyorbits.orbits.elements import KeplerianElements
from skyorbits.orbits.solution import OrbitSolution, orbitsolve_nu

logger = logging.getLogger(__name__)


class OrbitTrace(Sequence):
    """Lazy sequence of orbit states sampled evenly in true anomaly.

    Each item is solved on access, so iterating twice recomputes the same
    states and nothing is cached. Use :meth:`positions` or :meth:`solve_all`
    to evaluate every sample in one vectorized call.

    Args:
        elem (KeplerianElements): Orbit to trace.
        n (int): Number of samples, at least 2. Default: 90
        nu_start (float): True anomaly of the first sample. Units: *rad*.
            Default: ``-pi``

    Examples:
        ```python
        from skyorbits import KeplerianElements, OrbitTrace
        elem = KeplerianElements(1.0, 0.3, 0.5, 0.0, 0.0, 0.0, 1.0, 100.0)
        trace = OrbitTrace(elem, n=200)
        x, y = trace.positions()
        ```
    """

    __slots__ = ("_elem", "_n", "_nu_start")

    def __init__(self, elem: KeplerianElements, n: int = 90, nu_start: float = -jnp.pi) -> None:
        if n < 2:
            raise ValueError(f"An orbit trace needs at least 2 samples, got n={n}")
        self._elem = elem
        self._n = int(n)
        self._nu_start = nu_start

    @property
    def elem(self) -> KeplerianElements:
        """Orbit being traced."""
        return self._elem

    def true_anomalies(self) -> Array:
        """True anomalies of every sample, endpoint included.

        Returns:
            jnp.ndarray: Array of shape ``(n,)``. Units: *rad*
        """
        return jnp.linspace(
            self._nu_start, self._nu_start + 2.0 * jnp.pi, self._n, dtype=get_dtype()
        )

    def __len__(self) -> int:
        return self._n

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[k] for k in range(*index.indices(self._n))]
        if index < 0:
            index += self._n
        if not 0 <= index < self._n:
            raise IndexError(f"OrbitTrace index {index} out of range for {self._n} samples")
        step = 2.0 * jnp.pi / (self._n - 1)
        return orbitsolve_nu(self._elem, self._nu_start + index * step)

    def __iter__(self) -> Iterator[OrbitSolution]:
        for k in range(self._n):
            yield self[k]

    def solve_all(self) -> OrbitSolution:
        """Evaluate every sample in one vectorized call.

        Returns:
            OrbitSolution: Solution whose array fields have shape ``(n,)``.
        """
        logger.debug("Solving %d trace samples", self._n)
        return jax.vmap(orbitsolve_nu, in_axes=(None, 0))(self._elem, self.true_anomalies())

    def positions(self) -> tuple[Array, Array]:
        """Projected positions of every sample.

        Returns:
            tuple: ``(x, y)`` arrays of shape ``(n,)``, the right ascension
            and declination offsets. Units: *mas*
        """
        sol = self.solve_all()
        return sol.x, sol.y

    def __repr__(self):
        return f"OrbitTrace(n={self._n}, elem={self._elem!r})"

"""Orbital image transforms.

An :class:`OrbitalTransform` moves every pixel of an image as if it were a
test particle on a Keplerian orbit about the primary at the image centre.
All pixels share the same inclination, eccentricity, argument of
periastron, node, primary mass and parallax; the semi-major axis and
periastron epoch of the orbit through each pixel follow uniquely from its
sky position, so they are solved per pixel rather than supplied.

Per pixel the transform:

1. converts the pixel to a sky offset with the plate scale,
2. removes the node rotation and the inclination foreshortening to get the
   orbital-plane radius and argument of latitude,
3. recovers ``a`` from the orbit equation and ``tau`` from the mean anomaly
   at the image epoch,
4. solves the orbit ``dt`` days later and converts back to pixels.

The mapping is non-linear in image space: the rotation it applies depends on
separation, so changing the image scale changes the result. Compose it with
other coordinate transforms numerically, never algebraically.

Pixel convention: ``(px, py)`` offsets from the primary with east to the
left and north up, i.e. ``ra_offset = -px * platescale`` and
``dec_offset = py * platescale``.
"""

from __future__ import annotations

import logging

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from skyorbits.config import get_angle_tolerance, get_dtype
from skyorbits.errors import InvalidElements, TransformDomainError
from skyorbits.orbits.elements import KeplerianElements
from skyorbits.orbits.kepler import anomaly_eccentric_to_mean, anomaly_true_to_eccentric
from skyorbits.orbits.solution import orbitsolve
from skyorbits.utils import all_finite, concrete_bool

logger = logging.getLogger(__name__)

_FIELDS = ("i", "e", "omega", "Omega", "M", "plx", "platescale", "dt")


class OrbitalTransform:
    """Warp pixel coordinates forward or backward in time along Keplerian orbits.

    All arguments are keyword-only. ``platescale`` and ``dt`` are required;
    ``a`` and ``tau`` must not be given because they are determined by each
    pixel's position.

    This class is registered as a JAX pytree with the eight bound parameters
    as leaves.

    Args:
        i (float): Inclination. Units: *rad*
        e (float): Eccentricity in ``[0, 1)``.
        M (float): Mass of the primary. Units: *M_sun*
        omega (float): Argument of periastron. Units: *rad*
        Omega (float): Longitude of the ascending node. Units: *rad*
        plx (float): Parallax. Units: *mas*
        platescale (float): Image plate scale. Units: *mas/pixel*
        dt (float): Time to project the image forward; negative projects
            into the past. Units: *days*

    Raises:
        InvalidElements: If ``a`` or ``tau`` is supplied, or any parameter
            is out of range or not finite.

    Examples:
        ```python
        from skyorbits import OrbitalTransform
        ot = OrbitalTransform(i=0.3, e=0.1, M=1.0, omega=0.5, Omega=0.5,
                              plx=30.0, platescale=10.0, dt=3 * 365.25)
        ot((12.0, -4.0))
        ```
    """

    __slots__ = _FIELDS

    def __init__(
        self,
        *,
        i: ArrayLike,
        e: ArrayLike,
        M: ArrayLike,
        omega: ArrayLike,
        Omega: ArrayLike,
        plx: ArrayLike,
        platescale: ArrayLike,
        dt: ArrayLike,
        **kwargs,
    ) -> None:
        forbidden = sorted({"a", "tau"} & set(kwargs))
        if forbidden:
            raise InvalidElements(
                f"OrbitalTransform does not accept {forbidden}; the semi-major axis "
                f"and periastron epoch are solved from each pixel's position"
            )
        if kwargs:
            raise TypeError(f"Unexpected OrbitalTransform arguments: {sorted(kwargs)}")

        dtype = get_dtype()
        values = tuple(
            jnp.asarray(v, dtype=dtype) for v in (i, e, omega, Omega, M, plx, platescale, dt)
        )
        _validate(*values)
        for name, value in zip(_FIELDS, values):
            object.__setattr__(self, name, value)

        logger.debug(
            "Created orbital transform: platescale=%s mas/px, dt=%s d", platescale, dt
        )

    @classmethod
    def _from_internal(cls, *values) -> OrbitalTransform:
        obj = object.__new__(cls)
        for name, value in zip(_FIELDS, values):
            object.__setattr__(obj, name, value)
        return obj

    def __setattr__(self, name, value):
        raise AttributeError(f"OrbitalTransform is immutable; cannot set {name!r}")

    def __repr__(self):
        params = ", ".join(f"{name}={getattr(self, name)}" for name in _FIELDS)
        return f"OrbitalTransform({params})"

    def inverse(self) -> OrbitalTransform:
        """Return the transform that projects by ``-dt``.

        Returns:
            OrbitalTransform: Same orbit geometry with the opposite time step.
        """
        return OrbitalTransform._from_internal(
            *(getattr(self, name) for name in _FIELDS[:-1]), -self.dt
        )

    # ──────────────────────────────────────────────
    # Per-pixel geometry
    # ──────────────────────────────────────────────

    def _deproject(self, pixel: Array) -> tuple[Array, Array, Array]:
        """Orbital-plane radius [AU] and true anomaly of a pixel, plus validity."""
        px, py = pixel[0], pixel[1]
        x_au = -px * self.platescale / self.plx
        y_au = py * self.platescale / self.plx

        sinO, cosO = jnp.sin(self.Omega), jnp.cos(self.Omega)
        cosi = jnp.cos(self.i)

        # Undo the node rotation: (r cos u, r sin u cos i)
        r_cosu = y_au * cosO + x_au * sinO
        r_sinu = (x_au * cosO - y_au * sinO) / cosi

        r = jnp.hypot(r_cosu, r_sinu)
        nu = jnp.arctan2(r_sinu, r_cosu) - self.omega

        valid = (
            jnp.isfinite(px)
            & jnp.isfinite(py)
            & (jnp.abs(cosi) > get_angle_tolerance())
            & (r > 0.0)
        )
        return r, nu, valid

    def _elements(self, r: Array, nu: Array) -> KeplerianElements:
        e = self.e
        a = r * (1.0 + e * jnp.cos(nu)) / (1.0 - e * e)
        ea = anomaly_true_to_eccentric(nu, e)
        ma = anomaly_eccentric_to_mean(ea, e)
        tau = jnp.mod(-ma / (2.0 * jnp.pi), 1.0)
        return KeplerianElements(
            a=a, e=e, i=self.i, omega=self.omega, Omega=self.Omega, tau=tau, M=self.M, plx=self.plx
        )

    def _advance(self, pixel: Array) -> tuple[Array, Array]:
        r, nu, valid = self._deproject(pixel)
        sol = orbitsolve(self._elements(r, nu), self.dt)
        coords = jnp.stack([-sol.x / self.platescale, sol.y / self.platescale])
        return coords, valid

    def _check_pixel(self, pixel: ArrayLike) -> tuple[Array, Array, Array]:
        pixel = jnp.asarray(pixel, dtype=get_dtype())
        if pixel.shape != (2,):
            raise ValueError(f"Expected a single (px, py) pixel, got shape {pixel.shape}")
        r, nu, valid = self._deproject(pixel)
        if concrete_bool(valid) is False:
            raise TransformDomainError(
                f"No orbit passes through pixel {pixel.tolist()} for this transform"
            )
        return pixel, r, nu

    def solve_pixel(self, pixel: ArrayLike) -> KeplerianElements:
        """Recover the orbit passing through a pixel at the image epoch.

        Args:
            pixel: ``(px, py)`` offset from the primary. Units: *pixels*

        Returns:
            KeplerianElements: Elements with the solved ``a`` and ``tau``;
            the remaining parameters are those of the transform. The image
            epoch is ``t = 0``.

        Raises:
            TransformDomainError: If the pixel has no orbit through it.
        """
        _, r, nu = self._check_pixel(pixel)
        return self._elements(r, nu)

    def transform(self, pixel: ArrayLike) -> Array:
        """Position of a pixel after ``dt`` days.

        Args:
            pixel: ``(px, py)`` offset from the primary. Units: *pixels*

        Returns:
            jnp.ndarray: ``(px, py)`` after ``dt``. Units: *pixels*

        Raises:
            TransformDomainError: If the pixel has no orbit through it.
        """
        pixel, _, _ = self._check_pixel(pixel)
        coords, _ = self._advance(pixel)
        return coords

    __call__ = transform

    # ──────────────────────────────────────────────
    # Batch interface for image resampling
    # ──────────────────────────────────────────────

    def map_pixels(self, pixels: ArrayLike) -> tuple[Array, Array]:
        """Apply the transform to many pixels without failing the batch.

        Args:
            pixels: Array of shape ``(..., 2)`` holding ``(px, py)``
                offsets from the primary. Units: *pixels*

        Returns:
            tuple: ``(coords, valid)`` where ``coords`` has the shape of
            ``pixels`` and holds NaN wherever ``valid`` (shape
            ``pixels.shape[:-1]``) is ``False``.
        """
        pixels = jnp.asarray(pixels, dtype=get_dtype())
        if pixels.ndim == 0 or pixels.shape[-1] != 2:
            raise ValueError(f"Expected pixels of shape (..., 2), got {pixels.shape}")
        flat = pixels.reshape(-1, 2)
        _, _, valid = jax.vmap(self._deproject)(jax.lax.stop_gradient(flat))
        # Invalid rows run on a stand-in pixel so their cotangents stay finite
        safe = jnp.where(valid[:, None], flat, 1.0)
        coords, _ = jax.vmap(self._advance)(safe)
        coords = jnp.where(valid[:, None], coords, jnp.nan)
        return coords.reshape(pixels.shape), valid.reshape(pixels.shape[:-1])

    def source_coordinates(
        self, shape: tuple[int, int], center: tuple[float, float] | None = None
    ) -> tuple[Array, Array]:
        """Source pixel to sample for every pixel of the warped output image.

        The output image at ``dt`` takes its value at ``(row, col)`` from the
        input image at the returned coordinates, so the lookup runs the
        transform with ``-dt``. Rows increase with declination (display with
        ``origin="lower"``) and columns increase to the west. The result can
        be fed directly to ``jax.scipy.ndimage.map_coordinates``.

        Args:
            shape: Output image shape ``(ny, nx)``.
            center: ``(row, col)`` of the primary. Default: the image centre.

        Returns:
            tuple: ``(coords, valid)``; ``coords`` has shape ``(2, ny, nx)``
            holding source ``(row, col)`` (NaN where invalid) and ``valid``
            has shape ``(ny, nx)``.
        """
        ny, nx = shape
        if center is None:
            center = ((ny - 1) / 2.0, (nx - 1) / 2.0)
        cy, cx = center

        rows, cols = jnp.meshgrid(
            jnp.arange(ny, dtype=get_dtype()), jnp.arange(nx, dtype=get_dtype()), indexing="ij"
        )
        pixels = jnp.stack([cols - cx, rows - cy], axis=-1)
        src, valid = self.inverse().map_pixels(pixels)
        coords = jnp.stack([src[..., 1] + cy, src[..., 0] + cx], axis=0)
        return coords, valid


def _validate(i, e, omega, Omega, M, plx, platescale, dt) -> None:
    """Raise ``InvalidElements`` if concrete transform parameters are out of range."""
    if all_finite(i, e, omega, Omega, M, plx, platescale, dt) is False:
        raise InvalidElements("OrbitalTransform parameters must all be finite")

    checks = (
        ((e >= 0.0) & (e < 1.0), "Eccentricity must satisfy 0 <= e < 1, got e={}", e),
        (M > 0.0, "Primary mass must be positive, got M={}", M),
        (plx > 0.0, "Parallax must be positive, got plx={}", plx),
        (platescale > 0.0, "Plate scale must be positive, got platescale={}", platescale),
    )
    for predicate, message, value in checks:
        if concrete_bool(predicate) is False:
            raise InvalidElements(message.format(value))


# Register OrbitalTransform as a JAX pytree so it can be passed through jit and vmap.
jax.tree_util.register_pytree_node(
    OrbitalTransform,
    lambda ot: (tuple(getattr(ot, name) for name in _FIELDS), None),
    lambda _, children: OrbitalTransform._from_internal(*children),
)

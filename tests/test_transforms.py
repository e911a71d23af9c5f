"""Tests for skyorbits.transforms.orbital."""

import logging

import jax
import jax.numpy as jnp
import numpy as np
import pytest
from jax.scipy.ndimage import map_coordinates

from skyorbits.errors import InvalidElements, TransformDomainError
from skyorbits.orbits import KeplerianElements, orbitsolve, period
from skyorbits.transforms import OrbitalTransform

_PIXEL_TOL = 1e-7  # pixels

_PARAMS = dict(i=0.6, e=0.4, M=1.2, omega=1.0, Omega=2.0, plx=30.0, platescale=12.0, dt=2000.0)

_PIXELS = [(3.0, 4.0), (-7.5, 2.25), (0.5, -9.0), (-1.0, -1.0), (40.0, 0.0), (0.0, 0.1)]


def _transform(**changes):
    params = dict(_PARAMS)
    params.update(changes)
    return OrbitalTransform(**params)


def _face_on(dt):
    """Circular face-on orbits with 1 pixel = 1 AU about 1 M_sun."""
    return OrbitalTransform(i=0.0, e=0.0, M=1.0, omega=0.0, Omega=0.0, plx=10.0, platescale=10.0, dt=dt)


# ──────────────────────────────────────────────
# Construction
# ──────────────────────────────────────────────


class TestConstruction:
    def test_valid(self):
        ot = _transform()
        assert float(ot.platescale) == 12.0
        assert float(ot.dt) == 2000.0

    @pytest.mark.parametrize("field", ["a", "tau"])
    def test_per_pixel_elements_rejected(self, field):
        with pytest.raises(InvalidElements, match="does not accept"):
            OrbitalTransform(**_PARAMS, **{field: 1.0})

    @pytest.mark.parametrize("field", ["platescale", "dt"])
    def test_required(self, field):
        params = {k: v for k, v in _PARAMS.items() if k != field}
        with pytest.raises(TypeError):
            OrbitalTransform(**params)

    def test_keyword_only(self):
        with pytest.raises(TypeError):
            OrbitalTransform(0.6, 0.4, 1.2, 1.0, 2.0, 30.0, 12.0, 2000.0)

    def test_unknown_argument(self):
        with pytest.raises(TypeError, match="Unexpected"):
            OrbitalTransform(**_PARAMS, period=3.0)

    @pytest.mark.parametrize(
        "field,value,match",
        [
            ("e", 1.0, "Eccentricity"),
            ("e", -0.2, "Eccentricity"),
            ("M", 0.0, "mass"),
            ("plx", 0.0, "Parallax"),
            ("platescale", -1.0, "Plate scale"),
            ("dt", jnp.inf, "finite"),
            ("i", jnp.nan, "finite"),
        ],
    )
    def test_invalid_values(self, field, value, match):
        with pytest.raises(InvalidElements, match=match):
            _transform(**{field: value})

    def test_immutable(self):
        ot = _transform()
        with pytest.raises(AttributeError, match="immutable"):
            ot.dt = 1.0

    def test_repr(self):
        assert repr(_transform()).startswith("OrbitalTransform(i=")

    def test_debug_log(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="skyorbits.transforms.orbital"):
            _transform()
        assert "Created orbital transform" in caplog.text


# ──────────────────────────────────────────────
# Per-pixel orbit recovery
# ──────────────────────────────────────────────


class TestSolvePixel:
    @pytest.mark.parametrize("pixel", _PIXELS)
    def test_orbit_passes_through_pixel(self, pixel):
        ot = _transform()
        elem = ot.solve_pixel(pixel)
        sol = orbitsolve(elem, 0.0)
        assert jnp.abs(-sol.x / 12.0 - pixel[0]) < _PIXEL_TOL
        assert jnp.abs(sol.y / 12.0 - pixel[1]) < _PIXEL_TOL

    def test_shared_elements(self):
        elem = _transform().solve_pixel((3.0, 4.0))
        assert isinstance(elem, KeplerianElements)
        assert float(elem.e) == 0.4
        assert float(elem.i) == 0.6
        assert float(elem.omega) == 1.0
        assert float(elem.Omega) == 2.0
        assert float(elem.M) == 1.2
        assert float(elem.plx) == 30.0

    def test_recovered_tau_in_unit_interval(self):
        ot = _transform()
        for pixel in _PIXELS:
            tau = ot.solve_pixel(pixel).tau
            assert 0.0 <= tau < 1.0

    def test_face_on_circular_radius(self):
        elem = _face_on(0.0).solve_pixel((0.0, 4.0))
        assert jnp.abs(elem.a - 4.0) < 1e-12
        assert jnp.abs(elem.tau) < 1e-12

    def test_advances_along_recovered_orbit(self):
        ot = _transform()
        elem = ot.solve_pixel((-7.5, 2.25))
        sol = orbitsolve(elem, 2000.0)
        moved = ot((-7.5, 2.25))
        assert jnp.abs(moved[0] + sol.x / 12.0) < _PIXEL_TOL
        assert jnp.abs(moved[1] - sol.y / 12.0) < _PIXEL_TOL


# ──────────────────────────────────────────────
# Scalar transform
# ──────────────────────────────────────────────


class TestTransform:
    def test_zero_dt_is_identity(self):
        ot = _transform(dt=0.0)
        for pixel in _PIXELS:
            np.testing.assert_allclose(np.asarray(ot(pixel)), pixel, atol=_PIXEL_TOL)

    def test_quarter_period_face_on(self):
        """A 4 AU circular orbit has an 8 yr period; a quarter turns north into east."""
        ot = _face_on(2.0 * 365.25)
        np.testing.assert_allclose(np.asarray(ot((0.0, 4.0))), [-4.0, 0.0], atol=1e-9)

    def test_rotation_depends_on_separation(self):
        """Inner pixels rotate further than outer pixels over the same time."""
        ot = _face_on(365.25)
        inner = ot((0.0, 1.0))
        outer = ot((0.0, 4.0))
        # 1 AU completes a full turn, 4 AU an eighth of a turn
        np.testing.assert_allclose(np.asarray(inner), [0.0, 1.0], atol=1e-9)
        angle = jnp.arctan2(-outer[0], outer[1])
        assert jnp.abs(angle - jnp.pi / 4) < 1e-9

    def test_full_period_is_identity(self):
        ot = _transform()
        elem = ot.solve_pixel((3.0, 4.0))
        full = _transform(dt=period(elem))
        np.testing.assert_allclose(np.asarray(full((3.0, 4.0))), [3.0, 4.0], atol=1e-6)

    def test_call_matches_transform(self):
        ot = _transform()
        assert jnp.array_equal(ot((3.0, 4.0)), ot.transform((3.0, 4.0)))

    @pytest.mark.parametrize("pixel", _PIXELS)
    def test_inverse_roundtrip(self, pixel):
        ot = _transform()
        back = ot.inverse()(ot(pixel))
        np.testing.assert_allclose(np.asarray(back), pixel, atol=1e-6)

    def test_inverse_negates_dt(self):
        ot = _transform()
        assert float(ot.inverse().dt) == -2000.0
        assert float(ot.inverse().inverse().dt) == 2000.0

    def test_primary_pixel_raises(self):
        with pytest.raises(TransformDomainError, match="No orbit"):
            _transform()((0.0, 0.0))

    def test_edge_on_raises(self):
        with pytest.raises(TransformDomainError):
            _transform(i=jnp.pi / 2)((3.0, 4.0))

    def test_non_finite_pixel_raises(self):
        with pytest.raises(TransformDomainError):
            _transform()((jnp.nan, 1.0))

    def test_solve_pixel_domain_error(self):
        with pytest.raises(TransformDomainError):
            _transform().solve_pixel((0.0, 0.0))

    def test_domain_error_is_value_error(self):
        with pytest.raises(ValueError):
            _transform()((0.0, 0.0))

    def test_wrong_shape(self):
        with pytest.raises(ValueError, match="single"):
            _transform()(jnp.zeros((3, 2)))


# ──────────────────────────────────────────────
# Batch interface
# ──────────────────────────────────────────────


class TestMapPixels:
    def test_matches_scalar_path(self):
        ot = _transform()
        coords, valid = ot.map_pixels(jnp.array(_PIXELS))
        assert coords.shape == (len(_PIXELS), 2)
        assert bool(jnp.all(valid))
        for k, pixel in enumerate(_PIXELS):
            np.testing.assert_allclose(np.asarray(coords[k]), np.asarray(ot(pixel)), atol=1e-9)

    def test_invalid_entries_do_not_abort(self):
        pixels = jnp.array([[3.0, 4.0], [0.0, 0.0], [jnp.nan, 2.0], [-1.0, -1.0]])
        coords, valid = _transform().map_pixels(pixels)
        assert valid.tolist() == [True, False, False, True]
        assert bool(jnp.all(jnp.isnan(coords[1])))
        assert bool(jnp.all(jnp.isnan(coords[2])))
        assert bool(jnp.all(jnp.isfinite(coords[0])))

    def test_edge_on_all_invalid(self):
        _, valid = _transform(i=jnp.pi / 2).map_pixels(jnp.ones((4, 3, 2)))
        assert valid.shape == (4, 3)
        assert not bool(jnp.any(valid))

    def test_preserves_leading_shape(self):
        pixels = jnp.stack(jnp.meshgrid(jnp.arange(1.0, 4.0), jnp.arange(1.0, 6.0)), axis=-1)
        coords, valid = _transform().map_pixels(pixels)
        assert coords.shape == (5, 3, 2)
        assert valid.shape == (5, 3)

    def test_single_pixel(self):
        coords, valid = _transform().map_pixels(jnp.array([3.0, 4.0]))
        assert coords.shape == (2,)
        assert valid.shape == ()

    def test_wrong_trailing_axis(self):
        with pytest.raises(ValueError, match=r"\(\.\.\., 2\)"):
            _transform().map_pixels(jnp.zeros((4, 3)))

    def test_jit(self):
        ot = _transform()
        pixels = jnp.array(_PIXELS)
        eager, _ = ot.map_pixels(pixels)
        traced, _ = jax.jit(lambda t, p: t.map_pixels(p))(ot, pixels)
        np.testing.assert_allclose(np.asarray(traced), np.asarray(eager), atol=1e-9)


class TestSourceCoordinates:
    def test_shapes(self):
        coords, valid = _transform().source_coordinates((6, 9))
        assert coords.shape == (2, 6, 9)
        assert valid.shape == (6, 9)

    def test_centre_is_invalid(self):
        coords, valid = _transform().source_coordinates((5, 7))
        assert not bool(valid[2, 3])
        assert bool(jnp.all(jnp.isnan(coords[:, 2, 3])))
        assert int(jnp.sum(~valid)) == 1

    def test_identity_at_zero_dt(self):
        coords, valid = _transform(dt=0.0).source_coordinates((4, 6))
        rows, cols = np.meshgrid(np.arange(4), np.arange(6), indexing="ij")
        np.testing.assert_allclose(np.asarray(coords[0]), rows, atol=1e-7)
        np.testing.assert_allclose(np.asarray(coords[1]), cols, atol=1e-7)
        assert bool(jnp.all(valid))

    def test_samples_inverse_transform(self):
        ot = _transform()
        coords, _ = ot.source_coordinates((7, 7))
        # Output pixel (row=5, col=1) sits at (px, py) = (-2, 2) from the centre
        src = ot.inverse()((-2.0, 2.0))
        assert jnp.abs(coords[0, 5, 1] - (src[1] + 3.0)) < 1e-9
        assert jnp.abs(coords[1, 5, 1] - (src[0] + 3.0)) < 1e-9

    def test_custom_center(self):
        coords, valid = _transform().source_coordinates((4, 4), center=(0.0, 0.0))
        assert not bool(valid[0, 0])
        assert bool(valid[3, 3])

    def test_feeds_map_coordinates(self):
        """Resampling a constant image leaves valid pixels unchanged."""
        coords, valid = _transform(dt=50.0).source_coordinates((8, 8))
        image = jnp.ones((8, 8))
        warped = map_coordinates(image, list(jnp.where(valid, coords, 0.0)), order=1, mode="nearest")
        assert bool(jnp.allclose(jnp.where(valid, warped, 1.0), 1.0, atol=1e-12))


# ──────────────────────────────────────────────
# JAX compatibility
# ──────────────────────────────────────────────


class TestTransformJAX:
    def test_pytree_leaves(self):
        assert len(jax.tree_util.tree_leaves(_transform())) == 8

    def test_pytree_roundtrip(self):
        ot = _transform()
        leaves, treedef = jax.tree_util.tree_flatten(ot)
        rebuilt = jax.tree_util.tree_unflatten(treedef, leaves)
        assert float(rebuilt.dt) == float(ot.dt)
        assert isinstance(rebuilt, OrbitalTransform)

    def test_grad_wrt_pixel(self):
        ot = _transform(dt=0.0)
        jac = jax.jacfwd(ot.transform)(jnp.array([3.0, 4.0]))
        np.testing.assert_allclose(np.asarray(jac), np.eye(2), atol=1e-6)

    def test_grad_wrt_time_step(self):
        def moved_px(dt):
            return _transform(dt=dt)((3.0, 4.0))[0]

        g = jax.grad(moved_px)(100.0)
        assert jnp.isfinite(g)
        h = 1e-3
        fd = (moved_px(100.0 + h) - moved_px(100.0 - h)) / (2 * h)
        assert jnp.abs(g - fd) < 1e-6

    def test_grad_finite_with_masked_primary_pixel(self):
        """A degenerate pixel in the batch does not poison gradients of the others."""
        pixels = jnp.array([[3.0, 4.0], [0.0, 0.0]])

        def masked_sum(dt):
            coords, valid = _transform(dt=dt).map_pixels(pixels)
            return jnp.sum(jnp.where(valid[:, None], coords, 0.0))

        g = jax.grad(masked_sum)(1000.0)
        assert jnp.isfinite(g)

        single = jax.grad(lambda dt: jnp.sum(_transform(dt=dt)((3.0, 4.0))))(1000.0)
        assert jnp.abs(g - single) < 1e-9

    def test_grad_wrt_pixels_with_invalid_entries(self):
        pixels = jnp.array([[3.0, 4.0], [0.0, 0.0], [-1.0, 2.0]])

        def masked_sum(p):
            coords, valid = _transform().map_pixels(p)
            return jnp.sum(jnp.where(valid[:, None], coords, 0.0))

        g = jax.grad(masked_sum)(pixels)
        assert bool(jnp.all(jnp.isfinite(g)))
        assert bool(jnp.all(g[1] == 0.0))

    def test_invalid_entries_still_nan_after_substitution(self):
        coords, valid = _transform().map_pixels(jnp.array([[0.0, 0.0], [3.0, 4.0]]))
        assert not bool(valid[0])
        assert bool(jnp.all(jnp.isnan(coords[0])))

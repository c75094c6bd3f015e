"""
Singularity Kernel Checks
=========================

Closed-form panel kernels against numerical differentiation (2D) and
numerical quadrature (3D), plus linearity in the singularity strength.
"""

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

import numpy as np
import pytest
from scipy.integrate import dblquad

from panel_core.singularities import (
    SingularityKind, doublet_potential, doublet_velocity, panel_potential,
    panel_velocity, quadrilateral_doublet_potential, quadrilateral_potential,
    quadrilateral_solid_angle, quadrilateral_source_potential, source_potential,
    source_velocity,
)

OFF_PANEL_POINTS = [(0.3, 0.4), (-0.7, -0.2), (1.6, 0.05), (0.5, -1.5)]

SQUARE = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]])
TRAPEZOID = np.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0], [1.5, 1.0, 0.0], [0.5, 1.0, 0.0]])
POINTS_3D = [(0.3, 0.4, 0.5), (1.5, -0.5, -0.7), (0.5, 0.5, 2.0), (-0.4, 1.3, 0.25)]


def _finite_difference(potential, x, z, h=1e-6):
    du = (potential(x + h, z) - potential(x - h, z)) / (2 * h)
    dw = (potential(x, z + h) - potential(x, z - h)) / (2 * h)
    return du, dw


@pytest.mark.parametrize("x,z", OFF_PANEL_POINTS)
def test_source_velocity_is_gradient_of_potential(x, z):
    u, w = source_velocity(1.3, x, z, 0.0, 1.0)
    du, dw = _finite_difference(lambda a, b: source_potential(1.3, a, b, 0.0, 1.0), x, z)

    assert u == pytest.approx(du, abs=1e-6), "Source u-component should be d(phi)/dx"
    assert w == pytest.approx(dw, abs=1e-6), "Source w-component should be d(phi)/dz"


@pytest.mark.parametrize("x,z", OFF_PANEL_POINTS)
def test_doublet_velocity_is_gradient_of_potential(x, z):
    u, w = doublet_velocity(0.8, x, z, 0.0, 1.0)
    du, dw = _finite_difference(lambda a, b: doublet_potential(0.8, a, b, 0.0, 1.0), x, z)

    assert u == pytest.approx(du, abs=1e-6)
    assert w == pytest.approx(dw, abs=1e-6)


def test_doublet_potential_jumps_across_panel():
    above = doublet_potential(1.0, 0.5, 1e-10, 0.0, 1.0)
    below = doublet_potential(1.0, 0.5, -1e-10, 0.0, 1.0)

    assert above == pytest.approx(-0.5, abs=1e-8)
    assert below == pytest.approx(0.5, abs=1e-8)


@pytest.mark.parametrize("scale", [-2.0, 0.5, 3.7])
def test_kernels_are_linear_in_strength(scale):
    x = np.array([0.3, -0.7, 1.6])
    z = np.array([0.4, -0.2, 0.05])

    for kind in SingularityKind:
        base = panel_potential(kind, 1.0, x, z, 0.0, 1.0)
        scaled = panel_potential(kind, scale, x, z, 0.0, 1.0)
        np.testing.assert_allclose(scaled, scale * base, rtol=1e-12)

        u1, w1 = panel_velocity(kind, 1.0, x, z, 0.0, 1.0)
        us, ws = panel_velocity(kind, scale, x, z, 0.0, 1.0)
        np.testing.assert_allclose(us, scale * u1, rtol=1e-12)
        np.testing.assert_allclose(ws, scale * w1, rtol=1e-12)

    points = np.array(POINTS_3D)
    for kind in SingularityKind:
        base = quadrilateral_potential(kind, 1.0, SQUARE, points)
        scaled = quadrilateral_potential(kind, scale, SQUARE, points)
        np.testing.assert_allclose(scaled, scale * base, rtol=1e-12)


def _integrate_over(corners, integrand):
    """Integrate integrand(xi, eta) over a quadrilateral with horizontal top and bottom edges."""
    (x1, y_lo, _), (x2, _, _), (x3, y_hi, _), (x4, _, _) = corners
    height = y_hi - y_lo

    def left(eta):
        return x1 + (x4 - x1) * (eta - y_lo) / height

    def right(eta):
        return x2 + (x3 - x2) * (eta - y_lo) / height

    value, _ = dblquad(integrand, y_lo, y_hi, left, right, epsabs=1e-11, epsrel=1e-11)
    return value


@pytest.mark.parametrize("corners", [SQUARE, TRAPEZOID], ids=["square", "trapezoid"])
@pytest.mark.parametrize("point", POINTS_3D)
def test_quadrilateral_doublet_matches_quadrature(corners, point):
    x, y, z = point

    def integrand(xi, eta):
        return z / ((x - xi)**2 + (y - eta)**2 + z**2) ** 1.5

    expected = -1.0 / (4 * np.pi) * _integrate_over(corners, integrand)
    assert quadrilateral_doublet_potential(1.0, corners, np.array(point)) == pytest.approx(
        expected, rel=1e-7, abs=1e-10
    )


@pytest.mark.parametrize("corners", [SQUARE, TRAPEZOID], ids=["square", "trapezoid"])
@pytest.mark.parametrize("point", POINTS_3D)
def test_quadrilateral_source_matches_quadrature(corners, point):
    x, y, z = point

    def integrand(xi, eta):
        return 1.0 / np.sqrt((x - xi)**2 + (y - eta)**2 + z**2)

    expected = -1.0 / (4 * np.pi) * _integrate_over(corners, integrand)
    assert quadrilateral_source_potential(1.0, corners, np.array(point)) == pytest.approx(
        expected, rel=1e-7
    )


def test_solid_angle_just_above_panel_is_minus_two_pi():
    omega = quadrilateral_solid_angle(SQUARE, np.array([0.5, 0.5, 1e-9]))
    assert omega == pytest.approx(-2 * np.pi, rel=1e-6)


def test_quadrilateral_kernels_broadcast_over_point_arrays():
    points = np.array(POINTS_3D).reshape(2, 2, 3)
    values = quadrilateral_source_potential(1.0, SQUARE, points)

    assert values.shape == (2, 2)
    assert values[1, 0] == pytest.approx(
        quadrilateral_source_potential(1.0, SQUARE, np.array(POINTS_3D[2]))
    )


def test_source_kernel_skips_collapsed_edge():
    triangle = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 1.0, 0.0]])
    value = quadrilateral_source_potential(1.0, triangle, np.array([0.2, 0.2, 0.6]))
    assert np.isfinite(value), "A collapsed edge should not produce NaN"

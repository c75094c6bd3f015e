"""
3D Doublet-Source Solutions
===========================

Sphere in uniform flow: mu = -U x / 2 on the surface, Cp = 1 - 9/4 sin^2(theta),
no net force. A closed rectangular wing provides a lifting case.
"""

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

import numpy as np
import pytest

from panel_core.doublet_source import (
    resolve, solve_system_3d, surface_coefficients_3d, surface_velocities_3d,
    wake_lift_coefficient_3d,
)
from panel_core.errors import PanelValidationError
from panel_core.geometry import make_panels_3d
from panel_core.laplace import Freestream, Uniform2D
from panel_core.validation import naca4_symmetric, sphere_grid

SEMI_SPAN = 2.0


def closed_wing_grid(num_chord=24, num_span=8, semi_span=SEMI_SPAN):
    """NACA 0012 wing of unit chord whose thickness closes to zero at both tips."""
    section = naca4_symmetric(0.12, num_chord)[::-1]
    y = -semi_span * np.cos(np.linspace(0.0, np.pi, num_span + 1))
    closure = np.sqrt(np.clip(1 - (y / semi_span)**2, 0.0, None))

    points = np.empty((num_chord + 1, num_span + 1, 3))
    points[..., 0] = section[:, 0, None]
    points[..., 1] = y[None, :]
    points[..., 2] = section[:, 1, None] * closure[None, :]
    return points


@pytest.fixture(scope="module")
def sphere():
    panels = make_panels_3d(sphere_grid(20, 20))
    return solve_system_3d(panels, Freestream(1.0), wake_length=10.0)


@pytest.fixture(scope="module")
def wing():
    panels = make_panels_3d(closed_wing_grid())
    return solve_system_3d(panels, Freestream(1.0, 5.0), wake_length=50.0)


class TestSphere:
    def test_doublet_strength_matches_analytic(self, sphere):
        centres = np.array([p.collocation_point() for p in sphere.surface_panels.ravel()])
        expected = -0.5 * centres[:, 0]
        assert np.max(np.abs(sphere.singularities - expected)) < 0.05

    def test_no_wake_circulation(self, sphere):
        np.testing.assert_allclose(sphere.wake_strengths, 0.0, atol=1e-8)

    def test_suction_peak(self, sphere):
        coeffs = surface_coefficients_3d(sphere, area=np.pi)
        assert -1.45 < coeffs.cps.min() < -1.05

    def test_pressure_distribution_matches_analytic(self, sphere):
        coeffs = surface_coefficients_3d(sphere, area=np.pi)
        centres = np.array([[p.collocation_point() for p in row] for row in sphere.surface_panels])
        cos_theta = centres[..., 0] / np.linalg.norm(centres, axis=-1)
        expected = 1.0 - 2.25 * (1.0 - cos_theta**2)

        error = np.abs(coeffs.cps - expected)
        assert error.mean() < 0.1
        # Rear seam and pole rows use one-sided differences
        assert error[1:-1, 1:-1].max() < 0.2

    def test_stagnation_pressure(self, sphere):
        coeffs = surface_coefficients_3d(sphere, area=np.pi)
        centres = np.array([p.collocation_point() for p in sphere.surface_panels.ravel()])
        front = np.argmin(centres[:, 0])

        assert coeffs.cps.max() > 0.8
        assert coeffs.cps.ravel()[front] > 0.8, "Front of the sphere should stagnate"

    def test_no_net_force(self, sphere):
        coeffs = surface_coefficients_3d(sphere, area=np.pi)
        assert np.linalg.norm(coeffs.force) < 0.05, "d'Alembert: a closed body feels no force"

    def test_normal_velocity_is_freestream_projection(self, sphere):
        velocities = surface_velocities_3d(sphere)
        assert velocities.shape == (20, 20, 3)

        panel = sphere.surface_panels[5, 7]
        assert velocities[5, 7, 2] == pytest.approx(np.dot([1.0, 0.0, 0.0], panel.unit_normal))

    def test_summary(self, sphere):
        assert "20 chordwise x 20 spanwise" in sphere.summary()


class TestWing:
    def test_positive_lift(self, wing):
        area = 2 * SEMI_SPAN
        cl_wake = wake_lift_coefficient_3d(wing, area=area)
        coeffs = surface_coefficients_3d(wing, area=area, moment_point=(0.25, 0.0, 0.0))

        assert 0.15 < cl_wake < 0.6, f"Wake lift {cl_wake:.3f} outside the expected range"
        assert 0.15 < coeffs.CL < 0.6, f"Pressure lift {coeffs.CL:.3f} outside the expected range"
        assert abs(coeffs.CL - cl_wake) < 0.35 * cl_wake

    def test_force_and_moment_integrate_pressure(self, wing):
        area, moment_point = 2 * SEMI_SPAN, np.array([0.25, 0.0, 0.0])
        coeffs = surface_coefficients_3d(wing, area=area, chord=1.0, span=4.0, moment_point=moment_point)

        panels = wing.surface_panels.ravel()
        normals = np.array([p.unit_normal for p in panels])
        areas = np.array([p.area for p in panels])
        arms = np.array([p.collocation_point() for p in panels]) - moment_point
        forces = -coeffs.cps.ravel()[:, None] * normals * areas[:, None]

        np.testing.assert_allclose(coeffs.force, forces.sum(axis=0) / area, atol=1e-12)
        np.testing.assert_allclose(
            coeffs.moment, np.cross(arms, forces).sum(axis=0) / (area * np.array([4.0, 1.0, 4.0])),
            atol=1e-12,
        )

    def test_no_side_force_or_roll_when_symmetric(self, wing):
        coeffs = surface_coefficients_3d(wing, area=2 * SEMI_SPAN)
        assert abs(coeffs.CY) < 1e-3
        assert abs(coeffs.moment[0]) < 1e-3

    def test_zero_incidence_gives_no_circulation(self, wing):
        level = resolve(wing, freestream=Freestream(1.0, 0.0))
        np.testing.assert_allclose(level.wake_strengths, 0.0, atol=1e-8)
        assert wing.freestream.alpha > 0, "The solved system must be left unchanged"

    def test_wake_lift_grows_with_incidence(self, wing):
        steeper = resolve(wing, freestream=Freestream(1.0, 8.0))
        assert wake_lift_coefficient_3d(steeper, area=4.0) > wake_lift_coefficient_3d(wing, area=4.0)


class TestErrors:
    def test_wrong_freestream_type_rejected(self):
        panels = make_panels_3d(sphere_grid(6, 4))
        with pytest.raises(PanelValidationError):
            solve_system_3d(panels, Uniform2D(1.0, 0.0))

    def test_degenerate_panel_rejected(self):
        points = sphere_grid(6, 4)
        points[3, 2] = points[3, 1]
        points[4, 2] = points[4, 1]
        points[3, 3] = points[3, 1]
        points[4, 3] = points[4, 1]
        with pytest.raises(PanelValidationError, match="area"):
            solve_system_3d(make_panels_3d(points), Freestream(1.0))

"""Elementary Laplace solutions and freestream descriptors."""

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

import math

import numpy as np
import pytest

from panel_core.errors import PanelValidationError
from panel_core.laplace import Doublet2D, Freestream, Source2D, Uniform2D, Vortex2D, grid_data


def test_cylinder_from_uniform_plus_doublet():
    U, R = 2.0, 0.5
    flow = [Uniform2D(U), Doublet2D(2 * math.pi * U * R**2)]

    theta = np.linspace(0.0, 2 * math.pi, 17)
    x, y = R * np.cos(theta), R * np.sin(theta)
    (u, v), _ = grid_data(flow, x, y)

    # No flow through the surface, 2U at the shoulders
    radial = u * np.cos(theta) + v * np.sin(theta)
    np.testing.assert_allclose(radial, 0.0, atol=1e-12)
    (u_top, v_top), _ = grid_data(flow, 0.0, R)
    assert u_top == pytest.approx(2 * U)
    assert v_top == pytest.approx(0.0, abs=1e-12)

    stream = sum(obj.stream(x, y) for obj in flow)
    np.testing.assert_allclose(stream, 0.0, atol=1e-12)


@pytest.mark.parametrize("element", [Source2D(1.5, 0.2, -0.1), Doublet2D(0.7), Vortex2D(-2.0, 1.0, 1.0)])
def test_velocity_is_gradient_of_potential(element):
    x, y, h = 0.8, 0.6, 1e-6
    u, v = element.velocity(x, y)
    du = (element.potential(x + h, y) - element.potential(x - h, y)) / (2 * h)
    dv = (element.potential(x, y + h) - element.potential(x, y - h)) / (2 * h)

    assert u == pytest.approx(du, abs=1e-6)
    assert v == pytest.approx(dv, abs=1e-6)


def test_vortex_speed_decays_with_radius():
    u, v = Vortex2D(2 * math.pi).velocity(0.0, 2.0)
    assert (u, v) == (pytest.approx(-0.5), pytest.approx(0.0))


def test_grid_data_shapes():
    x, y = np.meshgrid(np.linspace(1, 2, 4), np.linspace(-1, 1, 3))
    (u, v), phi = grid_data([Uniform2D(1.0, 10.0), Source2D(1.0)], x, y)
    assert u.shape == v.shape == phi.shape == (3, 4)


class TestUniform2D:
    def test_angle_stored_in_radians(self):
        fs = Uniform2D(3.0, 30.0)
        assert fs.angle == pytest.approx(math.pi / 6)
        np.testing.assert_allclose(fs.vector, [3 * math.cos(math.pi / 6), 1.5])

    def test_immutable(self):
        fs = Uniform2D(1.0)
        with pytest.raises(AttributeError):
            fs.magnitude = 2.0
        with pytest.raises(AttributeError):
            fs._angle = 1.0

    def test_equality(self):
        assert Uniform2D(1.0, 5.0) == Uniform2D(1.0, 5.0)
        assert Uniform2D(1.0, 5.0) != Uniform2D(1.0, 6.0)

    @pytest.mark.parametrize("magnitude", [0.0, -2.0, float("nan")])
    def test_bad_magnitude(self, magnitude):
        with pytest.raises(PanelValidationError):
            Uniform2D(magnitude)


class TestFreestream:
    def test_cartesian_velocity(self):
        fs = Freestream(10.0, alpha_deg=5.0, beta_deg=3.0)
        a, b = math.radians(5.0), math.radians(3.0)

        expected = 10.0 * np.array([math.cos(a) * math.cos(b), -math.sin(b), math.sin(a) * math.cos(b)])
        np.testing.assert_allclose(fs.velocity, expected)
        np.testing.assert_allclose(fs.aircraft_velocity, -expected)
        assert np.linalg.norm(fs.direction) == pytest.approx(1.0)

    def test_rotation_rates_are_read_only(self):
        fs = Freestream(1.0, omega=(0.1, 0.2, 0.3))
        with pytest.raises(ValueError):
            fs.omega[0] = 1.0
        with pytest.raises(AttributeError):
            fs.alpha = 0.2

    def test_bad_inputs(self):
        with pytest.raises(PanelValidationError):
            Freestream(-1.0)
        with pytest.raises(PanelValidationError):
            Freestream(1.0, omega=(0.0, 1.0))

"""Non-dimensional coefficients for incompressible flow."""

from __future__ import annotations

import numpy as np


def dynamic_pressure(density: float, speed: float) -> float:
    return 0.5 * density * speed**2


def pressure_coefficient(freestream_speed: float, speed):
    """Cp = 1 - (V / U)^2 from local speed(s)."""
    return 1.0 - (np.asarray(speed) / freestream_speed)**2


def force_coefficient(force, dynamic_pressure_: float, area: float):
    return np.asarray(force) / (dynamic_pressure_ * area)


def moment_coefficient(moment, dynamic_pressure_: float, area: float, length):
    return np.asarray(moment) / (dynamic_pressure_ * area * length)

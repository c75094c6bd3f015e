"""
Open-Panel: Elementary Solutions of Laplace's Equation
======================================================

Point singularities (source, doublet, vortex) and the uniform freestreams
that drive every panel solve. All functions accept scalars or NumPy arrays
and broadcast like NumPy ufuncs.

Angles are supplied in degrees and stored in radians.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

import numpy as np

from .errors import PanelValidationError


class AbstractLaplace(ABC):
    """
    Base class for solutions of Laplace's equation in the plane.

    Subclasses provide the velocity, potential and stream function. The
    superposition helpers below rely only on this interface.
    """

    @abstractmethod
    def velocity(self, x, y) -> Tuple[np.ndarray, np.ndarray]:
        """Velocity components (u, v) at (x, y)."""

    @abstractmethod
    def potential(self, x, y) -> np.ndarray:
        """Velocity potential at (x, y)."""

    @abstractmethod
    def stream(self, x, y) -> np.ndarray:
        """Stream function at (x, y)."""


def grid_data(
    objects: Iterable[AbstractLaplace], x, y
) -> Tuple[Tuple[np.ndarray, np.ndarray], np.ndarray]:
    """
    Superpose velocities and potentials of several solutions on a grid.

    Args:
        objects: Elementary solutions to superpose
        x, y: Evaluation coordinates (any broadcastable shapes)

    Returns:
        Tuple of ((u, v), potential)
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    shape = np.broadcast(x, y).shape
    u = np.zeros(shape)
    v = np.zeros(shape)
    phi = np.zeros(shape)

    for obj in objects:
        du, dv = obj.velocity(x, y)
        u = u + du
        v = v + dv
        phi = phi + obj.potential(x, y)

    return (u, v), phi


@dataclass(frozen=True)
class Source2D(AbstractLaplace):
    """Point source of strength ``strength`` located at (x0, y0)."""

    strength: float
    x0: float = 0.0
    y0: float = 0.0

    def velocity(self, x, y):
        dx, dy = np.subtract(x, self.x0), np.subtract(y, self.y0)
        r2 = dx**2 + dy**2
        return self.strength / (2 * np.pi) * dx / r2, self.strength / (2 * np.pi) * dy / r2

    def potential(self, x, y):
        dx, dy = np.subtract(x, self.x0), np.subtract(y, self.y0)
        return self.strength / (4 * np.pi) * np.log(dx**2 + dy**2)

    def stream(self, x, y):
        dx, dy = np.subtract(x, self.x0), np.subtract(y, self.y0)
        return self.strength / (2 * np.pi) * np.arctan2(dy, dx)


@dataclass(frozen=True)
class Doublet2D(AbstractLaplace):
    """Point doublet with its axis along +x (upstream-facing source-sink pair)."""

    strength: float
    x0: float = 0.0
    y0: float = 0.0

    def velocity(self, x, y):
        dx, dy = np.subtract(x, self.x0), np.subtract(y, self.y0)
        r4 = (dx**2 + dy**2) ** 2
        u = self.strength / (2 * np.pi) * (dy**2 - dx**2) / r4
        v = -self.strength / (2 * np.pi) * 2 * dx * dy / r4
        return u, v

    def potential(self, x, y):
        dx, dy = np.subtract(x, self.x0), np.subtract(y, self.y0)
        return self.strength / (2 * np.pi) * dx / (dx**2 + dy**2)

    def stream(self, x, y):
        dx, dy = np.subtract(x, self.x0), np.subtract(y, self.y0)
        return -self.strength / (2 * np.pi) * dy / (dx**2 + dy**2)


@dataclass(frozen=True)
class Vortex2D(AbstractLaplace):
    """Point vortex, counter-clockwise circulation positive."""

    strength: float
    x0: float = 0.0
    y0: float = 0.0

    def velocity(self, x, y):
        dx, dy = np.subtract(x, self.x0), np.subtract(y, self.y0)
        r2 = dx**2 + dy**2
        return -self.strength / (2 * np.pi) * dy / r2, self.strength / (2 * np.pi) * dx / r2

    def potential(self, x, y):
        dx, dy = np.subtract(x, self.x0), np.subtract(y, self.y0)
        return self.strength / (2 * np.pi) * np.arctan2(dy, dx)

    def stream(self, x, y):
        dx, dy = np.subtract(x, self.x0), np.subtract(y, self.y0)
        return -self.strength / (4 * np.pi) * np.log(dx**2 + dy**2)


def _check_magnitude(magnitude: float) -> float:
    magnitude = float(magnitude)
    if not math.isfinite(magnitude) or magnitude <= 0:
        raise PanelValidationError(
            f"Freestream magnitude must be positive and finite, got {magnitude}"
        )
    return magnitude


class Uniform2D(AbstractLaplace):
    """
    Uniform planar freestream.

    Immutable once constructed. The angle of attack is given in degrees
    and stored in radians.
    """

    __slots__ = ("_magnitude", "_angle")

    def __init__(self, magnitude: float, angle_deg: float = 0.0):
        object.__setattr__(self, "_magnitude", _check_magnitude(magnitude))
        object.__setattr__(self, "_angle", math.radians(float(angle_deg)))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other) -> bool:
        if not isinstance(other, Uniform2D):
            return NotImplemented
        return (self._magnitude, self._angle) == (other._magnitude, other._angle)

    def __hash__(self) -> int:
        return hash((self._magnitude, self._angle))

    def __repr__(self) -> str:
        return f"Uniform2D(magnitude={self._magnitude}, angle_deg={self.angle_deg})"

    @property
    def magnitude(self) -> float:
        return self._magnitude

    @property
    def angle(self) -> float:
        """Angle of attack in radians."""
        return self._angle

    @property
    def angle_deg(self) -> float:
        return math.degrees(self._angle)

    @property
    def vector(self) -> np.ndarray:
        """Freestream velocity vector (u, v)."""
        return self._magnitude * np.array([math.cos(self._angle), math.sin(self._angle)])

    def velocity(self, x=0.0, y=0.0):
        shape = np.broadcast(np.asarray(x), np.asarray(y)).shape
        u, v = self.vector
        return np.full(shape, u), np.full(shape, v)

    def potential(self, x, y):
        u, v = self.vector
        return u * np.asarray(x) + v * np.asarray(y)

    def stream(self, x, y):
        u, v = self.vector
        return u * np.asarray(y) - v * np.asarray(x)


def freestream_to_cartesian(r: float, theta: float, phi: float) -> np.ndarray:
    """Convert (magnitude, alpha, beta) in radians to Cartesian components."""
    return r * np.array([
        math.cos(theta) * math.cos(phi),
        -math.sin(phi),
        math.sin(theta) * math.cos(phi),
    ])


class Freestream:
    """
    Three-dimensional freestream in spherical polar form.

    Args:
        magnitude: Freestream speed
        alpha_deg: Angle of attack (degrees)
        beta_deg: Sideslip angle (degrees)
        omega: Body rotation rates (p, q, r), stored for derivative work
    """

    __slots__ = ("_magnitude", "_alpha", "_beta", "_omega")

    def __init__(
        self,
        magnitude: float,
        alpha_deg: float = 0.0,
        beta_deg: float = 0.0,
        omega: Sequence[float] = (0.0, 0.0, 0.0),
    ):
        omega = np.array(omega, dtype=float)
        if omega.shape != (3,):
            raise PanelValidationError(
                f"Rotation rate must have three components, got shape {omega.shape}"
            )
        omega.setflags(write=False)
        object.__setattr__(self, "_magnitude", _check_magnitude(magnitude))
        object.__setattr__(self, "_alpha", math.radians(float(alpha_deg)))
        object.__setattr__(self, "_beta", math.radians(float(beta_deg)))
        object.__setattr__(self, "_omega", omega)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self) -> str:
        return (
            f"Freestream(magnitude={self._magnitude}, alpha_deg={math.degrees(self._alpha)}, "
            f"beta_deg={math.degrees(self._beta)}, omega={tuple(self._omega)})"
        )

    @property
    def magnitude(self) -> float:
        return self._magnitude

    @property
    def alpha(self) -> float:
        """Angle of attack in radians."""
        return self._alpha

    @property
    def beta(self) -> float:
        """Sideslip angle in radians."""
        return self._beta

    @property
    def omega(self) -> np.ndarray:
        return self._omega

    @property
    def direction(self) -> np.ndarray:
        """Unit vector along the freestream."""
        return freestream_to_cartesian(1.0, self._alpha, self._beta)

    @property
    def velocity(self) -> np.ndarray:
        """Freestream velocity in the geometry frame."""
        return freestream_to_cartesian(self._magnitude, self._alpha, self._beta)

    @property
    def aircraft_velocity(self) -> np.ndarray:
        """Velocity of the body relative to the air."""
        return -self.velocity

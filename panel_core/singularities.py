"""
Open-Panel: Singularity Kernels
===============================

Closed-form potentials and velocities induced by constant-strength
singularity distributions, evaluated in a panel's local frame.

2D panels lie on z = 0 between x1 and x2. 3D quadrilaterals lie in the
local z = 0 plane with corners ordered counter-clockwise seen from +z.
Every kernel is linear in its strength and broadcasts over NumPy arrays.

Known limitation: evaluation points on a panel edge or at a 2D panel
endpoint are singular. Diagonal (self-influence) terms are special-cased
by the assembler; very close off-diagonal evaluations are not regularised.
"""

from enum import Enum
from typing import Callable, Dict, Tuple

import numpy as np

TWO_PI = 2.0 * np.pi
FOUR_PI = 4.0 * np.pi

# Corner spacing below which a quadrilateral edge is treated as collapsed
_EDGE_EPS = 1e-14


class SingularityKind(Enum):
    """Closed set of constant-strength panel singularities."""
    SOURCE = "source"
    DOUBLET = "doublet"


# ----------------------------------------------------------------------
# 2D line panels
# ----------------------------------------------------------------------
def source_potential(strength, x, z, x1, x2):
    """Potential of a uniform source segment on z = 0, x in [x1, x2]."""
    return strength / FOUR_PI * (
        (x - x1) * np.log((x - x1)**2 + z**2)
        - (x - x2) * np.log((x - x2)**2 + z**2)
        + 2 * z * (np.arctan2(z, x - x2) - np.arctan2(z, x - x1))
    )


def doublet_potential(strength, x, z, x1, x2):
    """Potential of a constant-strength doublet segment on z = 0."""
    return strength / TWO_PI * (np.arctan2(z, x - x1) - np.arctan2(z, x - x2))


def source_velocity(strength, x, z, x1, x2) -> Tuple[np.ndarray, np.ndarray]:
    """
    Velocity (u, w) of a uniform source segment.

    The normal component is the doublet potential kernel with the sign
    reversed: d/dz of the source potential reduces to (theta2 - theta1)/2pi.
    """
    u = strength / FOUR_PI * np.log(((x - x1)**2 + z**2) / ((x - x2)**2 + z**2))
    w = -doublet_potential(strength, x, z, x1, x2)
    return u, w


def doublet_velocity(strength, x, z, x1, x2) -> Tuple[np.ndarray, np.ndarray]:
    """Velocity (u, w) of a constant-strength doublet segment."""
    r1 = (x - x1)**2 + z**2
    r2 = (x - x2)**2 + z**2
    u = strength / TWO_PI * -(z / r1 - z / r2)
    w = strength / TWO_PI * ((x - x1) / r1 - (x - x2) / r2)
    return u, w


# ----------------------------------------------------------------------
# 3D quadrilateral panels
# ----------------------------------------------------------------------
def _dot(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.einsum("...i,...i->...", a, b)


def _triangle_solid_angle(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> np.ndarray:
    """Signed solid angle of a triangle seen from the origin of a, b, c.

    Van Oosterom & Strackee (1983). Negative when the vertices run
    counter-clockwise as seen by the observer.
    """
    la = np.linalg.norm(a, axis=-1)
    lb = np.linalg.norm(b, axis=-1)
    lc = np.linalg.norm(c, axis=-1)

    numer = _dot(a, np.cross(b, c))
    denom = la * lb * lc + _dot(a, b) * lc + _dot(a, c) * lb + _dot(b, c) * la
    return 2.0 * np.arctan2(numer, denom)


def _flatten(corners, points) -> Tuple[np.ndarray, np.ndarray]:
    """Project corners onto their mean plane z and shift points to match."""
    corners = np.asarray(corners, dtype=float)
    points = np.asarray(points, dtype=float)
    z_mean = corners[:, 2].mean()

    flat = corners.copy()
    flat[:, 2] = 0.0
    shifted = points.copy()
    shifted[..., 2] = shifted[..., 2] - z_mean
    return flat, shifted


def quadrilateral_solid_angle(corners, points) -> np.ndarray:
    """Signed solid angle subtended by a flat quadrilateral at each point."""
    flat, pts = _flatten(corners, points)
    rel = flat[None, :, :] - pts.reshape(-1, 1, 3)

    omega = (
        _triangle_solid_angle(rel[:, 0], rel[:, 1], rel[:, 2])
        + _triangle_solid_angle(rel[:, 0], rel[:, 2], rel[:, 3])
    )
    return omega.reshape(pts.shape[:-1])


def quadrilateral_doublet_potential(strength, corners, points) -> np.ndarray:
    """
    Potential of a constant-strength doublet quadrilateral.

    Args:
        strength: Doublet strength
        corners: (4, 3) corners in the panel's local frame
        points: (..., 3) evaluation points in the same frame

    Returns:
        Potential at each point; tends to -strength/2 just above the panel
        and +strength/2 just below it.
    """
    return strength / FOUR_PI * quadrilateral_solid_angle(corners, points)


def quadrilateral_source_potential(strength, corners, points) -> np.ndarray:
    """
    Potential of a constant-strength source quadrilateral.

    Uses the edge-logarithm plus solid-angle form of the integral of 1/r
    over a flat polygon.
    """
    flat, pts = _flatten(corners, points)
    x, y, z = pts[..., 0], pts[..., 1], pts[..., 2]

    integral = np.zeros(np.shape(x))
    for k in range(4):
        xk, yk = flat[k, 0], flat[k, 1]
        xn, yn = flat[(k + 1) % 4, 0], flat[(k + 1) % 4, 1]
        dk = np.hypot(xn - xk, yn - yk)
        if dk < _EDGE_EPS:
            continue

        rk = np.sqrt((x - xk)**2 + (y - yk)**2 + z**2)
        rn = np.sqrt((x - xn)**2 + (y - yn)**2 + z**2)
        # Distance from the projected point to the edge, positive inside
        sk = ((y - yk) * (xn - xk) - (x - xk) * (yn - yk)) / dk
        integral = integral + sk * np.log((rk + rn + dk) / (rk + rn - dk))

    integral = integral + z * quadrilateral_solid_angle(corners, points)
    return -strength / FOUR_PI * integral


# ----------------------------------------------------------------------
# Dispatch tables
# ----------------------------------------------------------------------
POTENTIAL_KERNELS: Dict[SingularityKind, Callable] = {
    SingularityKind.SOURCE: source_potential,
    SingularityKind.DOUBLET: doublet_potential,
}

VELOCITY_KERNELS: Dict[SingularityKind, Callable] = {
    SingularityKind.SOURCE: source_velocity,
    SingularityKind.DOUBLET: doublet_velocity,
}

QUADRILATERAL_POTENTIAL_KERNELS: Dict[SingularityKind, Callable] = {
    SingularityKind.SOURCE: quadrilateral_source_potential,
    SingularityKind.DOUBLET: quadrilateral_doublet_potential,
}


def panel_potential(kind: SingularityKind, strength, x, z, x1, x2):
    """Potential of a 2D panel singularity of the given kind."""
    return POTENTIAL_KERNELS[kind](strength, x, z, x1, x2)


def panel_velocity(kind: SingularityKind, strength, x, z, x1, x2):
    """Local-frame velocity of a 2D panel singularity of the given kind."""
    return VELOCITY_KERNELS[kind](strength, x, z, x1, x2)


def quadrilateral_potential(kind: SingularityKind, strength, corners, points):
    """Potential of a 3D quadrilateral singularity of the given kind."""
    return QUADRILATERAL_POTENTIAL_KERNELS[kind](strength, corners, points)

"""Coordinate-frame transforms between global axes and panel-local axes.

2D: translate by -p1, then rotate by -panel_angle (local x along the
panel, local z along the tangent rotated counter-clockwise).

3D: translate by -p1, then rotate about n x z by the angle between the
panel normal n and z, so the panel lies in the local z = 0 plane with its
normal along +z.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from scipy.spatial.transform import Rotation

from panel_config import config

Z_AXIS = np.array([0.0, 0.0, 1.0])


def rotate_2d(x, y, angle):
    """Rotate (x, y) counter-clockwise by ``angle`` radians."""
    c, s = np.cos(angle), np.sin(angle)
    return x * c - y * s, x * s + y * c


def affine_2d(x, y, xs, ys, angle):
    """Global (x, y) -> local (x', z') for a frame at (xs, ys) inclined by ``angle``."""
    return rotate_2d(np.subtract(x, xs), np.subtract(y, ys), -angle)


def inverse_affine_2d(xp, zp, xs, ys, angle):
    """Local (x', z') -> global (x, y); exact inverse of :func:`affine_2d`."""
    x, y = rotate_2d(xp, zp, angle)
    return x + xs, y + ys


@dataclass(frozen=True)
class PanelFrame3D:
    """Rigid transform from global axes into a 3D panel's local axes."""

    origin: np.ndarray
    rotation: Rotation

    def to_local(self, points) -> np.ndarray:
        points = np.asarray(points, dtype=float)
        return self.rotation.apply((points - self.origin).reshape(-1, 3)).reshape(points.shape)

    def to_global(self, points) -> np.ndarray:
        points = np.asarray(points, dtype=float)
        rotated = self.rotation.inv().apply(points.reshape(-1, 3)).reshape(points.shape)
        return rotated + self.origin

    def vector_to_local(self, vectors) -> np.ndarray:
        """Rotate free vectors (velocities, normals) without translating."""
        vectors = np.asarray(vectors, dtype=float)
        return self.rotation.apply(vectors.reshape(-1, 3)).reshape(vectors.shape)


def panel_frame(origin, normal, tolerance: float | None = None) -> PanelFrame3D:
    """
    Build the local frame of a 3D panel.

    Args:
        origin: Panel corner p1 (becomes the local origin)
        normal: Panel normal (any length)
        tolerance: Threshold on |n_hat x z| below which no rotation is needed.
            Defaults to ``config.numerics.alignment_tolerance``.

    Returns:
        PanelFrame3D whose rotation maps the normal direction onto +z.
    """
    tol = config.numerics.alignment_tolerance if tolerance is None else tolerance
    origin = np.asarray(origin, dtype=float)
    n_hat = np.asarray(normal, dtype=float) / np.linalg.norm(normal)

    axis = np.cross(n_hat, Z_AXIS)
    axis_norm = np.linalg.norm(axis)

    # Already aligned with z: identity. Anti-aligned: half turn about x.
    if axis_norm <= tol:
        if n_hat[2] > 0:
            return PanelFrame3D(origin, Rotation.identity())
        return PanelFrame3D(origin, Rotation.from_rotvec([math.pi, 0.0, 0.0]))

    theta = math.acos(float(np.clip(n_hat[2], -1.0, 1.0)))
    return PanelFrame3D(origin, Rotation.from_rotvec(theta * axis / axis_norm))

"""
Open-Panel: 2D Panels
=====================

Flat line panels approximating a section contour.

Ordering convention: surface panels run from the lower trailing edge,
around the leading edge, to the upper trailing edge. In that order the
tangent rotated counter-clockwise (local +z) is the outward normal.
``make_panels`` builds this sequence from coordinates listed in the usual
Selig order (upper trailing edge -> leading edge -> lower trailing edge).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

from panel_config import config
from ..errors import PanelValidationError
from ..singularities import SingularityKind, panel_potential, panel_velocity as _kernel_velocity
from .frames import affine_2d, inverse_affine_2d, rotate_2d

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def _as_point(p) -> np.ndarray:
    arr = np.array(p, dtype=float)
    if arr.shape != (2,):
        raise PanelValidationError(f"2D panel endpoints need two coordinates, got shape {arr.shape}")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Panel2D:
    """Surface panel between endpoints p1 and p2 (global coordinates)."""

    p1: np.ndarray
    p2: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "p1", _as_point(self.p1))
        object.__setattr__(self, "p2", _as_point(self.p2))

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return np.array_equal(self.p1, other.p1) and np.array_equal(self.p2, other.p2)

    def __hash__(self) -> int:
        return hash((type(self).__name__, tuple(self.p1), tuple(self.p2)))

    @property
    def vector(self) -> np.ndarray:
        return self.p2 - self.p1

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.vector))

    @property
    def angle(self) -> float:
        """Inclination atan2(dy, dx); no branch-cut correction."""
        dx, dy = self.vector
        return float(np.arctan2(dy, dx))

    @property
    def tangent(self) -> np.ndarray:
        return self.vector / self.length

    @property
    def normal(self) -> np.ndarray:
        """Unit normal: tangent rotated counter-clockwise (local +z)."""
        tx, ty = self.tangent
        return np.array([-ty, tx])

    @property
    def location(self) -> str:
        """'upper' or 'lower' surface, from the panel inclination."""
        return "lower" if abs(self.angle) >= np.pi / 2 else "upper"

    def collocation_point(self, a: float = 0.5) -> np.ndarray:
        return self.p1 + a * self.vector

    def transform(self, x, y):
        """Global point(s) -> panel-local (x', z')."""
        return affine_2d(x, y, self.p1[0], self.p1[1], self.angle)

    def inverse_transform(self, xp, zp):
        """Panel-local point(s) -> global (x, y)."""
        return inverse_affine_2d(xp, zp, self.p1[0], self.p1[1], self.angle)

    def reversed(self) -> "Panel2D":
        return type(self)(self.p2, self.p1)


class WakePanel2D(Panel2D):
    """Trailing wake panel: carries circulation, no boundary condition."""


def panel_points(panels: Sequence[Panel2D]) -> np.ndarray:
    """Endpoint coordinates (N + 1, 2) of a panel chain."""
    return np.vstack([np.array([p.p1 for p in panels]), panels[-1].p2])


def collocation_points(panels: Sequence[Panel2D]) -> np.ndarray:
    return np.array([p.collocation_point() for p in panels])


def distance(panel_a: Panel2D, panel_b: Panel2D) -> float:
    """Distance between the collocation points of two panels."""
    return float(np.linalg.norm(panel_a.collocation_point() - panel_b.collocation_point()))


def make_panels(coords) -> List[Panel2D]:
    """
    Build the surface panel sequence from section coordinates.

    Args:
        coords: (N + 1, 2) coordinates in Selig order (upper trailing edge,
            leading edge, lower trailing edge)

    Returns:
        N panels from the lower trailing edge to the upper trailing edge
    """
    coords = np.asarray(coords, dtype=float)
    if coords.ndim != 2 or coords.shape[1] != 2:
        raise PanelValidationError(f"Expected (N, 2) coordinates, got shape {coords.shape}")

    ordered = coords[::-1]
    return [Panel2D(a, b) for a, b in zip(ordered[:-1], ordered[1:])]


def trailing_edge_panel(panels: Sequence[Panel2D]) -> Panel2D:
    """Panel closing the gap from the upper to the lower trailing edge."""
    return Panel2D(panels[-1].p2, panels[0].p1)


def validate_panels(panels: Sequence[Panel2D], min_length: float | None = None) -> None:
    """
    Check a surface panel sequence before assembly.

    Raises:
        PanelValidationError: Fewer than two panels, wrong panel type,
            non-finite coordinates, or a panel not longer than ``min_length``
    """
    min_length = config.numerics.min_panel_length if min_length is None else min_length

    if len(panels) < 2:
        raise PanelValidationError(f"A 2D body needs at least 2 panels, got {len(panels)}")

    for i, panel in enumerate(panels):
        if not isinstance(panel, Panel2D) or isinstance(panel, WakePanel2D):
            raise PanelValidationError(f"Panel {i} is not a 2D surface panel: {panel!r}")
        if not (np.all(np.isfinite(panel.p1)) and np.all(np.isfinite(panel.p2))):
            raise PanelValidationError(f"Panel {i} has non-finite coordinates")
        if panel.length <= min_length:
            raise PanelValidationError(
                f"Panel {i} has length {panel.length:.3e} (minimum {min_length:.1e}); "
                "remove duplicate points before solving"
            )

    gap = trailing_edge_panel(panels).length
    if gap > min_length:
        logger.warning("Open trailing edge: gap of %.3e between first and last panel", gap)


def split_surface_values(
    panels: Sequence[Panel2D], values, points: bool = False
) -> Dict[str, Tuple[np.ndarray, np.ndarray]]:
    """
    Partition per-interface values into upper and lower surfaces.

    Values are paired with ``panels[1:]`` (interface k belongs to panel
    k + 1), matching the layout of surface velocities and coefficients.

    Args:
        panels: Surface panel sequence
        values: N - 1 interface values
        points: Key by panel start point x instead of collocation x

    Returns:
        {"upper": (x, values), "lower": (x, values)}
    """
    values = np.asarray(values)
    if len(values) != len(panels) - 1:
        raise PanelValidationError(
            f"Expected {len(panels) - 1} interface values, got {len(values)}"
        )

    split = {}
    for surface in ("upper", "lower"):
        idx = [k for k, p in enumerate(panels[1:]) if p.location == surface]
        xs = np.array([
            (panels[k + 1].p1 if points else panels[k + 1].collocation_point())[0] for k in idx
        ])
        split[surface] = (xs, values[idx])
    return split


def panel_scalar(kind: SingularityKind, strength, panel: Panel2D, x, y):
    """Potential induced at global (x, y) by a panel singularity."""
    xp, zp = panel.transform(x, y)
    return panel_potential(kind, strength, xp, zp, 0.0, panel.length)


def panel_velocity(kind: SingularityKind, strength, panel: Panel2D, x, y):
    """Velocity induced at global (x, y) by a panel singularity, in global axes."""
    xp, zp = panel.transform(x, y)
    u, w = _kernel_velocity(kind, strength, xp, zp, 0.0, panel.length)
    return rotate_2d(u, w, panel.angle)

"""
Open-Panel: 3D Panels
=====================

Quadrilateral panels, possibly non-planar, with corner order::

    z -> y
    |
    x
            p1 --> p4
            |       |
            v       v
            |       |
            p2 --> p3

The normal (p3 - p1) x (p4 - p2) points out of the body when the first
grid index wraps chordwise from the lower trailing edge over the leading
edge to the upper trailing edge and the second index runs spanwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Iterable

import numpy as np

from panel_config import config
from ..errors import PanelValidationError
from .frames import PanelFrame3D, panel_frame


def _as_point(p) -> np.ndarray:
    arr = np.array(p, dtype=float)
    if arr.shape != (3,):
        raise PanelValidationError(f"3D panel corners need three coordinates, got shape {arr.shape}")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Panel3D:
    """Four Cartesian corners p1..p4 of a quadrilateral panel."""

    p1: np.ndarray
    p2: np.ndarray
    p3: np.ndarray
    p4: np.ndarray

    def __post_init__(self):
        for name in ("p1", "p2", "p3", "p4"):
            object.__setattr__(self, name, _as_point(getattr(self, name)))

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return all(
            np.array_equal(getattr(self, name), getattr(other, name))
            for name in ("p1", "p2", "p3", "p4")
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__,) + tuple(tuple(c) for c in self.corners))

    @property
    def corners(self) -> np.ndarray:
        return np.array([self.p1, self.p2, self.p3, self.p4])

    @property
    def normal(self) -> np.ndarray:
        """Cross product of the diagonals (length = twice the area)."""
        return np.cross(self.p3 - self.p1, self.p4 - self.p2)

    @property
    def unit_normal(self) -> np.ndarray:
        n = self.normal
        return n / np.linalg.norm(n)

    @property
    def area(self) -> float:
        """Half the diagonal cross product; only meaningful for near-planar panels."""
        return 0.5 * float(np.linalg.norm(self.normal))

    @property
    def midpoint(self) -> np.ndarray:
        return self.corners.mean(axis=0)

    def collocation_point(self) -> np.ndarray:
        return self.midpoint

    @property
    def average_chord(self) -> np.ndarray:
        return (self.p2 - self.p1 + self.p3 - self.p4) / 2

    @property
    def average_width(self) -> np.ndarray:
        return (self.p4 - self.p1 + self.p3 - self.p2) / 2

    @cached_property
    def frame(self) -> PanelFrame3D:
        return panel_frame(self.p1, self.normal)

    def transform(self, points) -> np.ndarray:
        """Global point(s) -> panel-local coordinates."""
        return self.frame.to_local(points)

    def inverse_transform(self, points) -> np.ndarray:
        return self.frame.to_global(points)

    @property
    def local_corners(self) -> np.ndarray:
        return self.frame.to_local(self.corners)


class WakePanel3D(Panel3D):
    """Trailing wake panel behind one spanwise strip."""


def make_panels(points) -> np.ndarray:
    """
    Convert a structured (m + 1, n + 1, 3) point grid into an (m, n) panel array.

    The first index runs chordwise around the section, the second spanwise.
    """
    xyz = np.asarray(points, dtype=float)
    if xyz.ndim != 3 or xyz.shape[2] != 3 or xyz.shape[0] < 2 or xyz.shape[1] < 2:
        raise PanelValidationError(f"Expected an (m+1, n+1, 3) point grid, got shape {xyz.shape}")

    m, n = xyz.shape[0] - 1, xyz.shape[1] - 1
    panels = np.empty((m, n), dtype=object)
    for i in range(m):
        for j in range(n):
            panels[i, j] = Panel3D(xyz[i, j], xyz[i + 1, j], xyz[i + 1, j + 1], xyz[i, j + 1])
    return panels


def wetted_area(panels: Iterable[Panel3D]) -> float:
    """Total area of a collection of panels."""
    return float(sum(panel.area for panel in np.ravel(panels)))


def validate_panel_grid(panels, min_area: float | None = None) -> np.ndarray:
    """
    Check a structured 3D panel grid before assembly.

    Returns:
        The panels as an (m, n) object array

    Raises:
        PanelValidationError: Non-2D grid, wrong panel type, non-finite
            corners, or a panel area not above ``min_area``
    """
    min_area = config.numerics.min_panel_area if min_area is None else min_area
    grid = np.asarray(panels, dtype=object)

    if grid.ndim != 2 or grid.shape[0] < 2 or grid.shape[1] < 1:
        raise PanelValidationError(
            f"3D surfaces need an (chordwise >= 2, spanwise >= 1) panel grid, got shape {grid.shape}"
        )

    for (i, j), panel in np.ndenumerate(grid):
        if not isinstance(panel, Panel3D) or isinstance(panel, WakePanel3D):
            raise PanelValidationError(f"Panel ({i}, {j}) is not a 3D surface panel: {panel!r}")
        if not np.all(np.isfinite(panel.corners)):
            raise PanelValidationError(f"Panel ({i}, {j}) has non-finite corners")
        if panel.area <= min_area:
            raise PanelValidationError(
                f"Panel ({i}, {j}) has area {panel.area:.3e} (minimum {min_area:.1e})"
            )
    return grid
